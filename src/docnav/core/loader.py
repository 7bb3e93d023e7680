"""Source file discovery and reading.

Walks the content root for Markdown sources. Files and directories whose
names start with ``.`` or ``_`` are skipped (hidden files and partials).
Discovery is lazy and restartable: scanning the same unchanged tree twice
yields the same paths in the same order.
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from docnav.errors import IoError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".md", ".mdx")


@dataclass(frozen=True)
class SourceFile:
    """Raw source file record."""

    path: Path
    text: str
    mtime: float


def is_skipped_name(name: str) -> bool:
    """Check whether a file or directory name is excluded from the site."""
    return name.startswith((".", "_"))


def iter_source_files(
    root: Path,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    on_error: Callable[[IoError], None] | None = None,
) -> Iterator[Path]:
    """Enumerate source files under a content root.

    The root is checked eagerly; subdirectories are walked lazily in sorted
    order.

    Args:
        root: Content root directory
        extensions: Recognized file suffixes (lower-case, with dot)
        on_error: Called with an IoError for each unreadable subdirectory

    Returns:
        Iterator of paths relative to root

    Raises:
        IoError: If the root is missing or cannot be listed
    """
    if not root.is_dir():
        raise IoError(root, "content root is not a directory")
    try:
        entries = sorted(root.iterdir())
    except OSError as e:
        raise IoError(root, e.strerror or str(e)) from e

    suffixes = tuple(ext.lower() for ext in extensions)
    return _walk(root, entries, suffixes, on_error)


def _walk(
    root: Path,
    entries: list[Path],
    suffixes: tuple[str, ...],
    on_error: Callable[[IoError], None] | None,
) -> Iterator[Path]:
    for entry in entries:
        if is_skipped_name(entry.name):
            continue
        if entry.is_dir():
            try:
                children = sorted(entry.iterdir())
            except OSError as e:
                error = IoError(entry.relative_to(root), e.strerror or str(e))
                logger.warning(f"Skipping unreadable directory: {entry}")
                if on_error is not None:
                    on_error(error)
                continue
            yield from _walk(root, children, suffixes, on_error)
        elif entry.suffix.lower() in suffixes:
            yield entry.relative_to(root)


class DocumentLoader:
    """Reads source files from a content root."""

    def __init__(
        self,
        source_dir: Path,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ) -> None:
        self._source_dir = source_dir
        self._extensions = extensions

    @property
    def source_dir(self) -> Path:
        """Content root directory."""
        return self._source_dir

    def scan(self, on_error: Callable[[IoError], None] | None = None) -> Iterator[Path]:
        """Enumerate source files, see iter_source_files()."""
        return iter_source_files(self._source_dir, self._extensions, on_error)

    def stat(self, path: Path) -> float:
        """Return the modification time of a source file.

        Args:
            path: Path relative to the content root

        Raises:
            IoError: If the file cannot be accessed
        """
        try:
            return (self._source_dir / path).stat().st_mtime
        except OSError as e:
            raise IoError(path, e.strerror or str(e)) from e

    def read(self, path: Path) -> SourceFile:
        """Read a source file as UTF-8.

        Args:
            path: Path relative to the content root

        Returns:
            SourceFile with full text and mtime

        Raises:
            IoError: If the file cannot be read or decoded
        """
        full_path = self._source_dir / path
        try:
            mtime = full_path.stat().st_mtime
            text = full_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise IoError(path, f"not valid UTF-8 ({e.reason})") from e
        except OSError as e:
            raise IoError(path, e.strerror or str(e)) from e

        logger.debug(f"Read {len(text)} characters from {path.as_posix()}")
        return SourceFile(path=path, text=text, mtime=mtime)
