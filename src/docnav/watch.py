"""File watching for rebuild-on-change.

Monitors the content root and calls back with the changed source files so
the caller can run a fresh build.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from watchfiles import Change, watch

from docnav.core.cache import DocumentCache
from docnav.core.loader import DEFAULT_EXTENSIONS, is_skipped_name

logger = logging.getLogger(__name__)


class ContentWatcher:
    """Watches a content root for source file changes."""

    def __init__(
        self,
        source_dir: Path,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        *,
        cache: DocumentCache | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            source_dir: Directory to watch for changes, resolved to an
                absolute path to match the paths the watcher reports
            extensions: Source file suffixes that trigger a rebuild
            cache: Document cache to drop entries of deleted files from
        """
        self._source_dir = source_dir.resolve()
        self._extensions = tuple(ext.lower() for ext in extensions)
        self._cache = cache

    def matches(self, path: Path) -> bool:
        """Check if a path is a source file of the content root.

        Args:
            path: Absolute path reported by the watcher

        Returns:
            True if the path has a source extension and no hidden or
            underscore-prefixed component below the content root
        """
        try:
            relative = path.relative_to(self._source_dir)
        except ValueError:
            return False
        if any(is_skipped_name(part) for part in relative.parts):
            return False
        return path.suffix.lower() in self._extensions

    def changed_sources(self, changes: Iterable[tuple[Change, str]]) -> list[Path]:
        """Filter a watcher change set down to source files.

        Args:
            changes: (change type, absolute path) pairs

        Returns:
            Sorted relative paths of changed source files
        """
        changed: set[Path] = set()
        for change_type, path_str in changes:
            path = Path(path_str)
            if not self.matches(path):
                continue
            relative = path.relative_to(self._source_dir)
            if change_type == Change.deleted and self._cache is not None:
                self._cache.invalidate(relative)
            changed.add(relative)
        return sorted(changed, key=Path.as_posix)

    def run(
        self,
        on_change: Callable[[list[Path]], None],
        *,
        stop_event: threading.Event | None = None,
    ) -> None:
        """Block and call on_change for every batch of source changes.

        Args:
            on_change: Called with the changed relative source paths
            stop_event: Stops watching when set
        """
        logger.info(f"Watching {self._source_dir} for changes")
        for changes in watch(self._source_dir, stop_event=stop_event):
            changed = self.changed_sources(changes)
            if not changed:
                continue
            logger.debug(f"Changed sources: {', '.join(p.as_posix() for p in changed)}")
            on_change(changed)
