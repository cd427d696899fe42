"""
First pipeline stage: scan every registered journal for candidate articles.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

from .journals import JournalRegistry
from .models import FetchArticles, Journal, JournalCandidates
from .scanner import KeywordScanner


logger = logging.getLogger(__name__)


async def identify_candidates(
    registry: JournalRegistry,
    scanner: KeywordScanner,
    fetch_articles: FetchArticles,
    page: int = 1,
) -> List[JournalCandidates]:
    """
    Fetch one page of articles per journal concurrently and keep the
    keyword candidates.

    Raises ``ValueError`` when the registry is empty. Any exception raised
    by ``fetch_articles`` propagates unchanged and no partial results are
    returned.
    """

    if not registry.has_any():
        raise ValueError(
            "JournalRegistry is empty; register at least one journal before scanning."
        )

    journals = registry.list()
    logger.debug("Fetching page %s for %s journal(s)", page, len(journals))

    async def scan_journal(journal: Journal) -> JournalCandidates:
        articles = await fetch_articles(journal.id, page)
        candidates = scanner.filter_candidates(articles)
        logger.debug(
            "%s: %s article(s), %s candidate(s)", journal.id, len(articles), len(candidates)
        )
        return JournalCandidates(journal_id=journal.id, candidates=candidates)

    tasks = [scan_journal(journal) for journal in journals]
    results = await asyncio.gather(*tasks)
    return list(results)
