"""
Command line interface powered by Typer.
"""

from __future__ import annotations

import asyncio
import json
import logging
import zipfile
from pathlib import Path
from typing import List, Optional, Sequence

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .bundles import DEFAULT_MAX_BUNDLES, download_bundles
from .candidates import identify_candidates
from .code_files import DEFAULT_CODE_EXTENSIONS, CodeFileIdentifier
from .downloader import SupplementaryDownloader
from .fetcher import USER_AGENT, EuropePMCArticleFetcher
from .journals import DEFAULT_JOURNALS, JournalRegistry, build_registry
from .models import Article, FetchArticles, JournalCandidates, SupplementaryBundle
from .reporting import render_bundles, render_candidates, render_journals
from .scanner import DEFAULT_KEYWORDS, KeywordScanner

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


JOURNAL_OPTION = typer.Option(
    None,
    "--journal",
    "-j",
    help="Journal id or name to scan (repeat for more than one, or 'all').",
    show_default=False,
)
SKIP_OPTION = typer.Option(
    None,
    "--skip-journal",
    "--skip",
    help="Journal id or name to exclude (repeatable).",
    show_default=False,
)
KEYWORD_OPTION = typer.Option(
    list(DEFAULT_KEYWORDS),
    "--keyword",
    "-k",
    help="Keyword that marks an article as a code candidate (repeat for multiple terms).",
)
PAGE_OPTION = typer.Option(1, "--page", "-p", min=1, envvar="SUPPSCOUT_PAGE", help="Result page to fetch per journal.")
PAGE_SIZE_OPTION = typer.Option(25, "--page-size", min=1, max=1000, help="Articles requested per journal page.")
TIMEOUT_OPTION = typer.Option(30.0, "--timeout", min=1.0, envvar="SUPPSCOUT_TIMEOUT", help="HTTP timeout in seconds.")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Show debug logging.")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _normalise_keywords(keywords: Sequence[str]) -> List[str]:
    cleaned = [kw.strip() for kw in keywords if kw.strip()]
    if not cleaned:
        raise typer.BadParameter("Please provide at least one keyword.")
    return cleaned


def _normalise_extensions(extensions: Sequence[str]) -> List[str]:
    cleaned: List[str] = []
    for ext in extensions:
        ext = ext.strip()
        if not ext:
            continue
        cleaned.append(ext if ext.startswith(".") else f".{ext}")
    if not cleaned:
        raise typer.BadParameter("Please provide at least one file extension.")
    return cleaned


def _build_registry(journals: Optional[List[str]], skip: Optional[List[str]]) -> JournalRegistry:
    registry = build_registry(journals, skip or ())
    if not registry.has_any():
        err_console.print("[red]No journals remaining after applying --skip filters.[/red]")
        raise typer.Exit(1)
    logger.debug("Scanning journals: %s", ", ".join(journal.id for journal in registry))
    return registry


def _http_client(timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    )


def _track(fetch_articles: FetchArticles, progress: Progress, task_id) -> FetchArticles:
    async def tracked(journal_id: str, page: int) -> List[Article]:
        articles = await fetch_articles(journal_id, page)
        progress.update(task_id, advance=1, description=f"{journal_id} ✓")
        return articles

    return tracked


async def _scan_with_progress(
    registry: JournalRegistry,
    scanner: KeywordScanner,
    client: httpx.AsyncClient,
    page: int,
    page_size: int,
) -> List[JournalCandidates]:
    fetcher = EuropePMCArticleFetcher(registry, client, page_size=page_size)
    progress = Progress(
        SpinnerColumn(style="green"),
        TextColumn("{task.description}", justify="left"),
        BarColumn(bar_width=24, style="cyan"),
        TextColumn("{task.completed}/{task.total}", style="cyan"),
        TimeElapsedColumn(),
        transient=True,
        console=console,
    )
    with progress:
        task_id = progress.add_task("Querying Europe PMC…", total=len(registry))
        return await identify_candidates(
            registry,
            scanner,
            _track(fetcher, progress, task_id),
            page=page,
        )


async def _scan(
    registry: JournalRegistry,
    scanner: KeywordScanner,
    timeout: float,
    page: int,
    page_size: int,
) -> List[JournalCandidates]:
    async with _http_client(timeout) as client:
        return await _scan_with_progress(registry, scanner, client, page, page_size)


async def _scan_and_download(
    registry: JournalRegistry,
    scanner: KeywordScanner,
    timeout: float,
    page: int,
    page_size: int,
    max_bundles: int,
    output_dir: Optional[Path],
) -> tuple[List[JournalCandidates], List[SupplementaryBundle]]:
    async with _http_client(timeout) as client:
        results = await _scan_with_progress(registry, scanner, client, page, page_size)
        candidates = [
            article
            for result in results
            for article in result.candidates
            if article.supplementary_url
        ]
        with console.status(f"Downloading up to {max_bundles} bundle(s)…"):
            bundles = await download_bundles(
                candidates,
                SupplementaryDownloader(client, base_dir=output_dir),
                max_bundles=max_bundles,
            )
    return results, bundles


def _run(coro):
    try:
        return asyncio.run(coro)
    except httpx.HTTPError as error:
        err_console.print(f"[red]Request failed:[/red] {error}")
        raise typer.Exit(1) from error
    except (json.JSONDecodeError, zipfile.BadZipFile) as error:
        err_console.print(f"[red]Unexpected response:[/red] {error}")
        raise typer.Exit(1) from error
    except ValueError as error:
        err_console.print(f"[red]Invalid configuration:[/red] {error}")
        raise typer.Exit(2) from error


@app.command("journals")
def list_journals() -> None:
    """
    List the journals SuppScout knows out of the box.
    """

    render_journals(console, DEFAULT_JOURNALS)


@app.command()
def scan(
    journals: List[str] = JOURNAL_OPTION,
    skip_journals: List[str] = SKIP_OPTION,
    keywords: List[str] = KEYWORD_OPTION,
    page: int = PAGE_OPTION,
    page_size: int = PAGE_SIZE_OPTION,
    timeout: float = TIMEOUT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """
    Find articles whose text suggests they share code.
    """

    _configure_logging(verbose)
    scanner = KeywordScanner(_normalise_keywords(keywords))
    registry = _build_registry(journals, skip_journals)

    console.print(
        f"[bold]Scanning[/bold] {len(registry)} journal(s), page {page}, for "
        f"[italic]{', '.join(scanner.keywords)}[/italic]…"
    )
    results = _run(_scan(registry, scanner, timeout, page, page_size))
    render_candidates(console, results, registry, scanner)


@app.command()
def fetch(
    journals: List[str] = JOURNAL_OPTION,
    skip_journals: List[str] = SKIP_OPTION,
    keywords: List[str] = KEYWORD_OPTION,
    page: int = PAGE_OPTION,
    page_size: int = PAGE_SIZE_OPTION,
    max_bundles: int = typer.Option(
        DEFAULT_MAX_BUNDLES,
        "--max-bundles",
        "-n",
        min=1,
        envvar="SUPPSCOUT_MAX_BUNDLES",
        help="Maximum number of supplementary bundles to download.",
    ),
    extensions: List[str] = typer.Option(
        list(DEFAULT_CODE_EXTENSIONS),
        "--extension",
        "-e",
        help="File extension counted as code (repeatable).",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        envvar="SUPPSCOUT_OUTPUT_DIR",
        help="Directory for downloaded bundles (defaults to the system temp dir).",
        show_default=False,
    ),
    timeout: float = TIMEOUT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """
    Scan for candidates, download their supplementary bundles and list the code files.
    """

    _configure_logging(verbose)
    scanner = KeywordScanner(_normalise_keywords(keywords))
    identifier = CodeFileIdentifier(_normalise_extensions(extensions))
    registry = _build_registry(journals, skip_journals)

    console.print(
        f"[bold]Scanning[/bold] {len(registry)} journal(s), page {page}, for "
        f"[italic]{', '.join(scanner.keywords)}[/italic]…"
    )
    results, bundles = _run(
        _scan_and_download(registry, scanner, timeout, page, page_size, max_bundles, output_dir)
    )
    render_candidates(console, results, registry, scanner)
    console.print()
    render_bundles(console, bundles, identifier)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
