"""
Second pipeline stage: download supplementary bundles for candidate articles.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Sequence

from .models import Article, DownloadBundle, SupplementaryBundle


logger = logging.getLogger(__name__)

DEFAULT_MAX_BUNDLES = 10


def _validate_cap(max_bundles: object) -> int:
    # integral floats such as 3.0 count as integers
    if isinstance(max_bundles, float) and max_bundles.is_integer():
        max_bundles = int(max_bundles)
    if isinstance(max_bundles, bool) or not isinstance(max_bundles, int) or max_bundles < 1:
        raise ValueError(f"max_bundles must be a positive integer, got: {max_bundles!r}")
    return max_bundles


async def download_bundles(
    candidates: Sequence[Article],
    download_bundle: DownloadBundle,
    max_bundles: int = DEFAULT_MAX_BUNDLES,
) -> List[SupplementaryBundle]:
    """
    Download bundles for the first ``max_bundles`` candidates, concurrently.

    Candidates beyond the cap are skipped. The result mirrors the order of
    the selected candidates, whatever order the downloads finish in. The
    first failing download aborts the whole batch.
    """

    cap = _validate_cap(max_bundles)
    batch = list(candidates[:cap])
    skipped = len(candidates) - len(batch)
    logger.debug("Downloading %s bundle(s), skipping %s over the cap", len(batch), skipped)

    bundles = await asyncio.gather(*(download_bundle(article) for article in batch))
    return list(bundles)
