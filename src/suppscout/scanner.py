"""
Keyword screening for articles that are likely to share code.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .models import Article


DEFAULT_KEYWORDS: Sequence[str] = (
    "code availability",
    "source code",
    "github",
    "gitlab",
    "zenodo",
    "software",
)


def _haystack(article: Article) -> str:
    return f"{article.title} {article.abstract} {article.full_text}".lower()


class KeywordScanner:
    """
    Flag articles whose title, abstract or full text mentions any keyword.

    Matching is a case-insensitive substring test, so "code" also hits
    "codebase". Precision depends entirely on the keywords chosen.
    """

    def __init__(self, keywords: Sequence[str] = ()) -> None:
        self._keywords: List[str] = list(keywords)

    @property
    def keywords(self) -> List[str]:
        return list(self._keywords)

    def set_keywords(self, keywords: Sequence[str]) -> None:
        self._keywords = list(keywords)

    def is_candidate(self, article: Article) -> bool:
        if not self._keywords:
            return False
        text = _haystack(article)
        return any(keyword.lower() in text for keyword in self._keywords)

    def matched_keywords(self, article: Article) -> List[str]:
        text = _haystack(article)
        return [keyword for keyword in self._keywords if keyword.lower() in text]

    def filter_candidates(self, articles: Iterable[Article]) -> List[Article]:
        return [article for article in articles if self.is_candidate(article)]
