"""
Journal registry plus the catalogue of journals SuppScout knows out of the box.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Iterator, List, Optional, Sequence
from urllib.parse import urlencode

from .models import Journal, JournalEndpoint


EUROPE_PMC_SEARCH_URL = "https://www.ebi.ac.uk/europepmc/webservices/rest/search"
EUROPE_PMC_SUPPLEMENTS_URL = (
    "https://www.ebi.ac.uk/europepmc/webservices/rest/{pmcid}/supplementaryFiles"
)


class JournalRegistry:
    """
    Ordered, id-unique store of journal configurations.

    Re-registering an id replaces the entry in place, so it keeps its
    original position in :meth:`list`.
    """

    def __init__(self, initial: Iterable[Journal] = ()) -> None:
        self._journals: Dict[str, Journal] = {}
        for journal in initial:
            self.register(journal)

    def register(self, journal: Journal) -> None:
        self._journals[journal.id] = journal

    def remove(self, journal_id: str) -> bool:
        return self._journals.pop(journal_id, None) is not None

    def get(self, journal_id: str) -> Optional[Journal]:
        return self._journals.get(journal_id)

    def list(self) -> List[Journal]:
        return list(self._journals.values())

    def has_any(self) -> bool:
        return bool(self._journals)

    def __len__(self) -> int:
        return len(self._journals)

    def __contains__(self, journal_id: object) -> bool:
        return journal_id in self._journals

    def __iter__(self) -> Iterator[Journal]:
        return iter(self.list())


def europe_pmc_endpoints(container_title: str) -> List[JournalEndpoint]:
    """
    Endpoints for a journal indexed by Europe PMC, restricted to articles
    that ship supplementary files.
    """

    query = f'JOURNAL:"{container_title}" AND HAS_SUPPL:y'
    return [
        JournalEndpoint(
            name="articles",
            url=f"{EUROPE_PMC_SEARCH_URL}?{urlencode({'query': query})}",
        ),
        JournalEndpoint(name="supplements", url=EUROPE_PMC_SUPPLEMENTS_URL),
    ]


def _catalogue_entry(key: str, name: str) -> Journal:
    return Journal(id=key, display_name=name, endpoints=europe_pmc_endpoints(name))


DEFAULT_JOURNALS: Sequence[Journal] = (
    _catalogue_entry("nature", "Nature"),
    _catalogue_entry("nature-communications", "Nature Communications"),
    _catalogue_entry("nature-methods", "Nature Methods"),
    _catalogue_entry("nature-biotechnology", "Nature Biotechnology"),
    _catalogue_entry("scientific-reports", "Scientific Reports"),
    _catalogue_entry("science", "Science"),
    _catalogue_entry("science-advances", "Science Advances"),
    _catalogue_entry("cell", "Cell"),
    _catalogue_entry("cell-systems", "Cell Systems"),
    _catalogue_entry("elife", "eLife"),
    _catalogue_entry("plos-one", "PLoS One"),
    _catalogue_entry("plos-computational-biology", "PLoS Computational Biology"),
    _catalogue_entry("bioinformatics", "Bioinformatics"),
    _catalogue_entry("genome-biology", "Genome Biology"),
    _catalogue_entry("nucleic-acids-research", "Nucleic Acids Research"),
    _catalogue_entry("peerj", "PeerJ"),
)


def normalise_key(label: str) -> str:
    """
    Convert arbitrary journal names to kebab-case keys.
    """

    key = re.sub(r"[^a-z0-9]+", "-", label.lower()).strip("-")
    return key or "journal"


def _tokenise(values: Iterable[str]) -> List[str]:
    tokens: List[str] = []
    for value in values:
        for part in re.split(r"[;,]", value):
            cleaned = part.strip()
            if cleaned:
                tokens.append(cleaned)
    return tokens


def resolve_journals(user_values: Iterable[str] | None) -> List[Journal]:
    """
    Resolve user-supplied journal labels into journal configurations.
    Unknown entries are treated as new Europe PMC journal definitions.
    """

    if not user_values:
        return list(DEFAULT_JOURNALS)

    canonical_lookup: Dict[str, Journal] = {}
    for journal in DEFAULT_JOURNALS:
        canonical_lookup[journal.id.lower()] = journal
        canonical_lookup[journal.display_name.lower()] = journal

    resolved: Dict[str, Journal] = {}
    for token in _tokenise(user_values):
        lowered = token.lower()
        if lowered == "all":
            for journal in DEFAULT_JOURNALS:
                resolved.setdefault(journal.id, journal)
            continue
        journal = canonical_lookup.get(lowered)
        if journal is None:
            journal = _catalogue_entry(normalise_key(token), token)
        resolved.setdefault(journal.id, journal)

    return list(resolved.values())


def build_registry(
    user_values: Iterable[str] | None,
    skip: Iterable[str] = (),
) -> JournalRegistry:
    """
    Seed a registry from user labels, dropping any journal named in ``skip``.
    """

    registry = JournalRegistry(resolve_journals(user_values))
    skip_lookup = {token.lower() for token in _tokenise(skip)}
    if not skip_lookup:
        return registry

    for journal in registry.list():
        labels = {journal.id.lower(), journal.display_name.lower(), normalise_key(journal.display_name)}
        if labels & skip_lookup:
            registry.remove(journal.id)
    return registry
