"""
Rendering utilities for the console report.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .code_files import CodeFileIdentifier
from .journals import JournalRegistry
from .models import Journal, JournalCandidates, SupplementaryBundle
from .scanner import KeywordScanner


def _human_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024 or unit == "GB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def render_journals(console: Console, journals: Iterable[Journal]) -> None:
    table = Table(box=box.SIMPLE_HEAD, header_style="bold cyan", padding=(0, 1))
    table.add_column("Id", style="magenta", no_wrap=True)
    table.add_column("Journal", style="white")
    table.add_column("Endpoints", style="dim", overflow="fold")
    for journal in journals:
        endpoints = ", ".join(endpoint.name for endpoint in journal.endpoints)
        table.add_row(journal.id, journal.display_name, endpoints or "—")
    console.print(table)


def render_candidates(
    console: Console,
    results: Sequence[JournalCandidates],
    registry: JournalRegistry,
    scanner: KeywordScanner,
) -> None:
    """
    Print one table row per candidate article, grouped by journal.
    """

    bullet = "✦"
    keywords = ", ".join(f'"{kw}"' for kw in scanner.keywords)
    console.print(Text(f"{bullet} Keywords: {keywords}", style="cyan"))

    total = sum(len(result.candidates) for result in results)
    empty = [result.journal_id for result in results if not result.candidates]
    console.print(
        Text(f"{bullet} Candidates: {total} across {len(results) - len(empty)} journal(s)", style="cyan")
    )
    if empty:
        console.print(Text(f"{bullet} No candidates: {', '.join(empty)}", style="magenta"))
    console.print()

    if not total:
        console.print(Text("No articles matched the keywords.", style="yellow"))
        return

    table = Table(box=box.SIMPLE_HEAD, header_style="bold cyan", padding=(0, 1))
    table.add_column("Journal", style="magenta", no_wrap=True)
    table.add_column("Article", style="green", no_wrap=True)
    table.add_column("Title", style="white", overflow="fold")
    table.add_column("Matched", style="dim", overflow="fold")

    for result in results:
        journal = registry.get(result.journal_id)
        journal_name = journal.display_name if journal else result.journal_id
        for article in result.candidates:
            title = Text(article.title.strip() or "Untitled")
            if article.supplementary_url:
                title.stylize(f"link {article.supplementary_url}")
            table.add_row(
                journal_name,
                article.id or "—",
                title,
                ", ".join(scanner.matched_keywords(article)),
            )
    console.print(table)


def render_bundles(
    console: Console,
    bundles: Sequence[SupplementaryBundle],
    identifier: CodeFileIdentifier,
) -> None:
    """
    Print the code files found in each downloaded bundle.
    """

    if not bundles:
        console.print(Text("No bundles were downloaded.", style="yellow"))
        return

    for bundle in bundles:
        code_files = identifier.identify_code_files(bundle)
        title = (
            f"{bundle.article_title or 'Untitled'} [{bundle.article_id}] — "
            f"{len(code_files)} of {len(bundle.files)} file(s) look like code"
        )
        table = Table(
            box=box.SIMPLE_HEAD,
            header_style="bold cyan",
            padding=(0, 1),
            title=title,
        )
        table.add_column("File", style="white", overflow="fold")
        table.add_column("Size", justify="right", style="cyan")
        table.add_column("Path", style="dim", overflow="fold")
        for item in code_files:
            table.add_row(item.name, _human_size(item.size_bytes), item.local_path)
        console.print(table)
        console.print()
