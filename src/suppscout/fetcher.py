"""
Article search backed by the Europe PMC REST API.
"""

from __future__ import annotations

import logging
from typing import Any, List

import httpx
from bs4 import BeautifulSoup

from .journals import JournalRegistry
from .models import Article, Journal


logger = logging.getLogger(__name__)

USER_AGENT = "SuppScout/0.1 (+https://github.com/suppscout/suppscout)"


def _strip_html(value: str | None) -> str:
    if not value:
        return ""
    soup = BeautifulSoup(value, "lxml")
    return soup.get_text(" ", strip=True)


def _article_id(item: dict[str, Any]) -> str:
    for key in ("pmcid", "id", "doi"):
        value = item.get(key)
        if value:
            return str(value)
    return ""


def _supplementary_url(journal: Journal, pmcid: str | None) -> str:
    endpoint = journal.endpoint("supplements")
    if endpoint is None or not pmcid:
        return ""
    return endpoint.url.format(pmcid=pmcid)


def parse_articles(journal: Journal, payload: Any) -> List[Article]:
    """
    Normalise a Europe PMC search payload into articles.
    """

    if not isinstance(payload, dict):
        return []
    results = (payload.get("resultList") or {}).get("result") or []

    articles: List[Article] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        articles.append(
            Article(
                id=_article_id(item),
                title=_strip_html(item.get("title")),
                abstract=_strip_html(item.get("abstractText")),
                # search results never carry the article body
                full_text="",
                supplementary_url=_supplementary_url(journal, item.get("pmcid")),
            )
        )
    return articles


class EuropePMCArticleFetcher:
    """
    Fetch collaborator: one page of articles for a registered journal.

    Instances are awaitable callables matching ``FetchArticles``.
    """

    def __init__(
        self,
        registry: JournalRegistry,
        client: httpx.AsyncClient,
        page_size: int = 25,
    ) -> None:
        self._registry = registry
        self._client = client
        self._page_size = page_size

    async def __call__(self, journal_id: str, page: int) -> List[Article]:
        journal = self._registry.get(journal_id)
        if journal is None:
            raise KeyError(f"Unknown journal: {journal_id}")
        endpoint = journal.endpoint("articles")
        if endpoint is None:
            raise ValueError(f"Journal {journal_id} has no 'articles' endpoint.")

        url = httpx.URL(endpoint.url)
        logger.info("Querying %s (page %s)", journal.display_name, page)

        # Europe PMC pages with cursorMark, so earlier pages are walked as id lists.
        cursor = "*"
        for skipped in range(1, page):
            payload = await self._search(url, cursor, "idlist")
            next_cursor = payload.get("nextCursorMark") if isinstance(payload, dict) else None
            if not next_cursor or next_cursor == cursor:
                logger.info("%s: no results past page %s", journal.display_name, skipped)
                return []
            cursor = next_cursor

        articles = parse_articles(journal, await self._search(url, cursor, "core"))
        logger.info("%s: %s article(s) on page %s", journal.display_name, len(articles), page)
        return articles

    async def _search(self, url: httpx.URL, cursor: str, result_type: str) -> Any:
        params = {
            "format": "json",
            "resultType": result_type,
            "pageSize": str(self._page_size),
            "cursorMark": cursor,
        }
        response = await self._client.get(url.copy_merge_params(params))
        response.raise_for_status()
        return response.json()
