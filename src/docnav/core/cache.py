"""File-based document cache with mtime invalidation.

Cache structure:
    .cache/
    └── documents/
        └── guides/
            └── java/
                └── jcf.md.json      # Parsed frontmatter and body

Only parsing is cached; validation runs on every build, so a changed
validation rule never needs a cache flush.
"""

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypedDict

logger = logging.getLogger(__name__)


class CachedDocument(TypedDict):
    """Cached document structure."""

    source_mtime: float
    frontmatter: dict[str, Any]
    body: str


@dataclass
class CacheEntry:
    """Result of cache lookup."""

    frontmatter: dict[str, Any]
    body: str


class DocumentCache:
    """File-based cache for parsed documents.

    Uses source file mtime for invalidation. Cache entries are considered valid
    when the cached mtime matches the current source file mtime. Documents
    whose frontmatter holds values that are not JSON types (e.g. YAML dates)
    are not cached, so a cache hit always yields the same values as a parse.
    """

    _GITIGNORE_CONTENT = "# Ignore everything in this directory\n*\n"

    def __init__(self, cache_dir: Path) -> None:
        """Initialize cache with directory path.

        Args:
            cache_dir: Root directory for cache files (e.g., .cache/)
        """
        self._cache_dir = cache_dir
        self._documents_dir = cache_dir / "documents"

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

    def _entry_path(self, path: Path) -> Path:
        return self._documents_dir / f"{path.as_posix()}.json"

    def get(self, path: Path, source_mtime: float) -> CacheEntry | None:
        """Retrieve cached entry if valid.

        Args:
            path: Source path relative to the content root
            source_mtime: Current mtime of source file

        Returns:
            CacheEntry if cache hit and valid, None otherwise
        """
        entry_path = self._entry_path(path)
        if not entry_path.exists():
            return None

        try:
            data = json.loads(entry_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None

        if not isinstance(data, dict):
            return None
        if data.get("source_mtime") != source_mtime:
            return None

        frontmatter = data.get("frontmatter")
        body = data.get("body")
        if not isinstance(frontmatter, dict) or not isinstance(body, str):
            return None

        logger.debug(f"Cache hit: {path.as_posix()}")
        return CacheEntry(frontmatter=frontmatter, body=body)

    def set(
        self,
        path: Path,
        frontmatter: dict[str, Any],
        body: str,
        source_mtime: float,
    ) -> None:
        """Store entry in cache.

        Args:
            path: Source path relative to the content root
            frontmatter: Parsed frontmatter mapping
            body: Document body
            source_mtime: Source file mtime for invalidation
        """
        entry: CachedDocument = {
            "source_mtime": source_mtime,
            "frontmatter": frontmatter,
            "body": body,
        }
        try:
            serialized = json.dumps(entry, ensure_ascii=False)
        except (TypeError, ValueError):
            serialized = None
        # json.dumps coerces non-string keys, which a load does not undo
        if serialized is None or json.loads(serialized)["frontmatter"] != frontmatter:
            logger.debug(f"Not caching {path.as_posix()}: frontmatter is not JSON-compatible")
            return

        try:
            self._ensure_cache_dir()
            entry_path = self._entry_path(path)
            entry_path.parent.mkdir(parents=True, exist_ok=True)
            entry_path.write_text(serialized, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to cache {path.as_posix()}: {e}")

    def invalidate(self, path: Path) -> None:
        """Remove entry from cache.

        Args:
            path: Source path relative to the content root
        """
        self._entry_path(path).unlink(missing_ok=True)

    def clear(self) -> None:
        """Remove all cached documents."""
        if self._documents_dir.exists():
            shutil.rmtree(self._documents_dir)
