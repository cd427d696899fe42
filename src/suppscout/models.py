"""
Core data structures used throughout SuppScout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional


@dataclass(frozen=True)
class JournalEndpoint:
    """
    A named API endpoint exposed by a journal, e.g. "articles" or "supplements".
    """

    name: str
    url: str


@dataclass(frozen=True)
class Journal:
    """
    A journal the pipeline can scan. Identity is ``id``.
    """

    id: str
    display_name: str
    endpoints: List[JournalEndpoint] = field(default_factory=list)

    def endpoint(self, name: str) -> Optional[JournalEndpoint]:
        for endpoint in self.endpoints:
            if endpoint.name == name:
                return endpoint
        return None


@dataclass
class Article:
    """
    Minimal article metadata returned by a journal's articles endpoint.

    Text fields are empty strings when the source has no content for them.
    """

    id: str
    title: str
    abstract: str = ""
    full_text: str = ""
    supplementary_url: str = ""


@dataclass
class SupplementaryFile:
    name: str
    local_path: str
    size_bytes: int


@dataclass
class SupplementaryBundle:
    """
    Files extracted from one article's supplementary archive.

    ``article_id`` and ``article_title`` echo the source article.
    """

    article_id: str
    article_title: str
    files: List[SupplementaryFile] = field(default_factory=list)
    temp_dir: str = ""


@dataclass
class JournalCandidates:
    journal_id: str
    candidates: List[Article] = field(default_factory=list)


FetchArticles = Callable[[str, int], Awaitable[List[Article]]]
"""Fetch one 1-based page of articles for a journal id."""

DownloadBundle = Callable[[Article], Awaitable[SupplementaryBundle]]
"""Download and materialise the supplementary bundle for an article."""
