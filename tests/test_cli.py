import json
from typing import List

import httpx
from typer.testing import CliRunner

from suppscout import cli as cli_module
from suppscout.models import Article, SupplementaryBundle, SupplementaryFile

runner = CliRunner()


def _article(article_id: str, title: str, url: str = "") -> Article:
    return Article(
        id=article_id,
        title=title,
        abstract="",
        full_text="",
        supplementary_url=url or f"https://example.com/{article_id}/supplementaryFiles",
    )


class FakeFetcher:
    calls: List[tuple] = []
    articles = {
        "nature": [_article("n1", "Code and data for a fast aligner"), _article("n2", "Coral reefs")],
        "science": [_article("s1", "Software for climate models")],
    }

    def __init__(self, registry, client, page_size: int = 25) -> None:
        self.page_size = page_size

    async def __call__(self, journal_id: str, page: int) -> List[Article]:
        FakeFetcher.calls.append((journal_id, page))
        return FakeFetcher.articles.get(journal_id, [])


class FakeDownloader:
    downloaded: List[str] = []

    def __init__(self, client, base_dir=None) -> None:
        self.base_dir = base_dir

    async def __call__(self, article: Article) -> SupplementaryBundle:
        FakeDownloader.downloaded.append(article.id)
        return SupplementaryBundle(
            article_id=article.id,
            article_title=article.title,
            files=[
                SupplementaryFile(name="align.py", local_path=f"/tmp/{article.id}/align.py", size_bytes=2048),
                SupplementaryFile(name="reads.fastq", local_path=f"/tmp/{article.id}/reads.fastq", size_bytes=10),
            ],
            temp_dir=f"/tmp/{article.id}",
        )


def _install_fakes(monkeypatch) -> None:
    FakeFetcher.calls = []
    FakeDownloader.downloaded = []
    monkeypatch.setattr(cli_module, "EuropePMCArticleFetcher", FakeFetcher)
    monkeypatch.setattr(cli_module, "SupplementaryDownloader", FakeDownloader)


def test_journals_lists_catalogue() -> None:
    result = runner.invoke(cli_module.app, ["journals"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "nature-methods" in result.output


def test_scan_prints_candidates(monkeypatch) -> None:
    _install_fakes(monkeypatch)

    result = runner.invoke(
        cli_module.app,
        ["scan", "-j", "nature", "-j", "science", "-k", "code", "-k", "software", "--page", "2"],
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert sorted(FakeFetcher.calls) == [("nature", 2), ("science", 2)]
    assert "n1" in result.output
    assert "s1" in result.output
    assert "n2" not in result.output


def test_scan_rejects_blank_keywords(monkeypatch) -> None:
    _install_fakes(monkeypatch)

    result = runner.invoke(cli_module.app, ["scan", "-j", "nature", "-k", "  "])

    assert result.exit_code != 0
    assert FakeFetcher.calls == []


def test_scan_exits_when_every_journal_is_skipped(monkeypatch) -> None:
    _install_fakes(monkeypatch)

    result = runner.invoke(cli_module.app, ["scan", "-j", "nature", "--skip", "nature"])

    assert result.exit_code == 1
    assert FakeFetcher.calls == []


def test_scan_reports_http_failures(monkeypatch) -> None:
    _install_fakes(monkeypatch)

    async def broken(self, journal_id: str, page: int) -> List[Article]:
        raise httpx.ConnectError("boom")

    monkeypatch.setattr(FakeFetcher, "__call__", broken)

    result = runner.invoke(cli_module.app, ["scan", "-j", "nature"])

    assert result.exit_code == 1


def test_scan_reports_malformed_responses_as_request_failures(monkeypatch) -> None:
    _install_fakes(monkeypatch)

    async def garbled(self, journal_id: str, page: int) -> List[Article]:
        raise json.JSONDecodeError("Expecting value", "<html>", 0)

    monkeypatch.setattr(FakeFetcher, "__call__", garbled)

    result = runner.invoke(cli_module.app, ["scan", "-j", "nature"])

    assert result.exit_code == 1
    assert "Invalid configuration" not in result.output


def test_fetch_downloads_capped_bundles_and_lists_code_files(monkeypatch) -> None:
    _install_fakes(monkeypatch)

    result = runner.invoke(
        cli_module.app,
        ["fetch", "-j", "nature", "-j", "science", "-k", "code", "-k", "software", "-n", "1", "-e", "py"],
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert FakeDownloader.downloaded == ["n1"]
    assert "align.py" in result.output
    assert "reads.fastq" not in result.output


def test_fetch_skips_candidates_without_supplementary_url(monkeypatch) -> None:
    _install_fakes(monkeypatch)
    monkeypatch.setattr(
        FakeFetcher,
        "articles",
        {"nature": [Article(id="n9", title="github release", supplementary_url="")]},
    )

    result = runner.invoke(cli_module.app, ["fetch", "-j", "nature", "-k", "github"], catch_exceptions=False)

    assert result.exit_code == 0
    assert FakeDownloader.downloaded == []
    assert "No bundles were downloaded" in result.output


def test_max_bundles_from_environment(monkeypatch) -> None:
    _install_fakes(monkeypatch)
    monkeypatch.setitem(
        FakeFetcher.articles,
        "nature",
        [_article(f"n{i}", f"code {i}") for i in range(5)],
    )

    result = runner.invoke(
        cli_module.app,
        ["fetch", "-j", "nature", "-k", "code"],
        env={"SUPPSCOUT_MAX_BUNDLES": "2"},
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert FakeDownloader.downloaded == ["n0", "n1"]
