"""
Download collaborator: fetch a supplementary archive and unpack it to disk.
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import List, Optional
from urllib.parse import urlparse

import httpx

from .models import Article, SupplementaryBundle, SupplementaryFile


logger = logging.getLogger(__name__)

ARCHIVE_NAME = ".supplement.download"


def safe_filename(value: str, max_len: int = 120) -> str:
    """Normalize strings to filesystem-friendly ASCII names."""
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", value)
    cleaned = cleaned.strip("._-")
    return cleaned[:max_len] if cleaned else "unknown"


def _member_target(root: Path, member: str) -> Optional[Path]:
    parts = PurePosixPath(member.replace("\\", "/")).parts
    if not parts or parts[0] == "/" or ".." in parts:
        return None
    return root.joinpath(*parts)


def extract_archive(archive: Path, root: Path) -> List[SupplementaryFile]:
    """
    Unpack a zip archive under ``root``, skipping directories and members
    that would escape it. Files are listed in archive order.
    """

    files: List[SupplementaryFile] = []
    with zipfile.ZipFile(archive) as bundle:
        for info in bundle.infolist():
            if info.is_dir():
                continue
            target = _member_target(root, info.filename)
            if target is None or target == root / ARCHIVE_NAME:
                logger.warning("Skipping unsafe archive member %s", info.filename)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with bundle.open(info) as source, target.open("wb") as sink:
                while chunk := source.read(64 * 1024):
                    sink.write(chunk)
            files.append(
                SupplementaryFile(
                    name=target.name,
                    local_path=str(target),
                    size_bytes=target.stat().st_size,
                )
            )
    return files


def _download_name(url: str) -> str:
    segment = urlparse(url).path.rstrip("/").split("/")[-1]
    return safe_filename(segment) if segment else "supplement"


class SupplementaryDownloader:
    """
    Materialise an article's supplementary material in a fresh temp dir.

    Zip payloads are extracted; anything else is kept as a single file.
    """

    def __init__(self, client: httpx.AsyncClient, base_dir: Path | None = None) -> None:
        self._client = client
        self._base_dir = base_dir

    async def __call__(self, article: Article) -> SupplementaryBundle:
        if not article.supplementary_url:
            raise ValueError(f"Article {article.id} has no supplementary URL.")

        if self._base_dir is not None:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        temp_dir = Path(
            tempfile.mkdtemp(
                prefix=f"{safe_filename(article.id)}-",
                dir=str(self._base_dir) if self._base_dir is not None else None,
            )
        )
        try:
            files = await self._materialise(article, temp_dir)
        except BaseException:
            shutil.rmtree(temp_dir, ignore_errors=True)
            raise
        logger.info("%s: %s file(s) in %s", article.id, len(files), temp_dir)

        return SupplementaryBundle(
            article_id=article.id,
            article_title=article.title,
            files=files,
            temp_dir=str(temp_dir),
        )

    async def _materialise(self, article: Article, temp_dir: Path) -> List[SupplementaryFile]:
        archive = temp_dir / ARCHIVE_NAME

        size = 0
        async with self._client.stream("GET", article.supplementary_url) as response:
            response.raise_for_status()
            with archive.open("wb") as sink:
                async for chunk in response.aiter_bytes():
                    sink.write(chunk)
                    size += len(chunk)
        logger.info("Downloaded %s bytes for %s", size, article.id)

        if zipfile.is_zipfile(archive):
            files = extract_archive(archive, temp_dir)
            archive.unlink()
            return files

        target = temp_dir / _download_name(article.supplementary_url)
        if target != archive:
            archive.rename(target)
        return [SupplementaryFile(name=target.name, local_path=str(target), size_bytes=size)]
