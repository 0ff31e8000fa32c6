"""File-based cache with mtime invalidation.

Cache structure:
    .cache/
    ├── pages/
    │   └── markdown/
    │       └── Components/
    │           └── ReactMemo.md.html    # Rendered HTML
    └── meta/
        └── markdown/
            └── Components/
                └── ReactMemo.md.json    # Extracted metadata
"""

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TypedDict

logger = logging.getLogger(__name__)


class CachedMetadata(TypedDict):
    """Cached page metadata structure."""

    title: str | None
    source_mtime: float
    fingerprint: str
    toc: list[dict[str, str | int]]


@dataclass
class CacheEntry:
    """Result of cache lookup."""

    html: str
    meta: CachedMetadata


class FileCache:
    """File-based cache for rendered HTML and metadata.

    Cache entries are valid when the cached mtime matches the current source
    file mtime and the entry was produced with the same render options.
    """

    _GITIGNORE_CONTENT = "# Ignore everything in this directory\n*\n"

    def __init__(self, cache_dir: Path) -> None:
        """Initialize cache with directory path.

        Args:
            cache_dir: Root directory for cache files (e.g., .cache/)
        """
        self._cache_dir = cache_dir
        self._pages_dir = cache_dir / "pages"
        self._meta_dir = cache_dir / "meta"

    @property
    def cache_dir(self) -> Path:
        """Root cache directory."""
        return self._cache_dir

    def _ensure_cache_dir(self) -> None:
        """Create cache directory with .gitignore if it doesn't exist."""
        if not self._cache_dir.exists():
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            gitignore_path = self._cache_dir / ".gitignore"
            gitignore_path.write_text(self._GITIGNORE_CONTENT, encoding="utf-8")

    def get(self, path: str, source_mtime: float, fingerprint: str) -> CacheEntry | None:
        """Retrieve cached entry if valid.

        Args:
            path: Document path relative to the docs root
            source_mtime: Current mtime of source file
            fingerprint: Render options the caller expects

        Returns:
            CacheEntry if cache hit and valid, None otherwise
        """
        html_path = self._pages_dir / f"{path}.html"
        meta_path = self._meta_dir / f"{path}.json"

        if not html_path.exists() or not meta_path.exists():
            return None

        meta = self._read_meta(meta_path)
        if meta is None:
            return None

        if meta["source_mtime"] != source_mtime or meta["fingerprint"] != fingerprint:
            return None

        try:
            html = html_path.read_text(encoding="utf-8")
        except OSError:
            return None

        return CacheEntry(html=html, meta=meta)

    def set(
        self,
        path: str,
        html: str,
        title: str | None,
        source_mtime: float,
        fingerprint: str,
        toc: list[dict[str, str | int]],
    ) -> None:
        """Store entry in cache.

        Write failures are logged and ignored; the page was already rendered.

        Args:
            path: Document path relative to the docs root
            html: Rendered HTML content
            title: Extracted title (or None)
            source_mtime: Source file mtime for invalidation
            fingerprint: Render options used
            toc: Table of contents entries
        """
        html_path = self._pages_dir / f"{path}.html"
        meta_path = self._meta_dir / f"{path}.json"

        meta: CachedMetadata = {
            "title": title,
            "source_mtime": source_mtime,
            "fingerprint": fingerprint,
            "toc": toc,
        }

        try:
            self._ensure_cache_dir()
            html_path.parent.mkdir(parents=True, exist_ok=True)
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            html_path.write_text(html, encoding="utf-8")
            meta_path.write_text(json.dumps(meta), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write cache entry for {path}: {e}")

    def invalidate(self, path: str) -> None:
        """Remove entry from cache.

        Args:
            path: Document path to invalidate
        """
        html_path = self._pages_dir / f"{path}.html"
        meta_path = self._meta_dir / f"{path}.json"

        if html_path.exists():
            html_path.unlink()
        if meta_path.exists():
            meta_path.unlink()

    def clear(self) -> None:
        """Remove all cached entries."""
        if self._pages_dir.exists():
            shutil.rmtree(self._pages_dir)
        if self._meta_dir.exists():
            shutil.rmtree(self._meta_dir)

    def _read_meta(self, meta_path: Path) -> CachedMetadata | None:
        """Read and validate metadata file.

        Args:
            meta_path: Path to metadata JSON file

        Returns:
            CachedMetadata if valid, None otherwise
        """
        try:
            data = json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None

        if not isinstance(data, dict):
            return None
        for key in ("source_mtime", "fingerprint", "toc"):
            if key not in data:
                return None

        return CachedMetadata(
            title=data.get("title"),
            source_mtime=data["source_mtime"],
            fingerprint=data["fingerprint"],
            toc=data["toc"],
        )
