"""Custom exceptions for docnav.

Per-document errors are caught by the build pipeline and turned into
diagnostics with ``to_diagnostic()``; the offending document is excluded
and the build continues.
"""

from pathlib import Path

from docnav.core.diagnostics import DUPLICATE_ROUTE, IO_ERROR, Diagnostic
from docnav.core.types import URLPath


class DocnavError(Exception):
    """Base exception for docnav operations."""


class ConfigError(DocnavError, ValueError):
    """Invalid configuration file or value."""


class IoError(DocnavError):
    """Content root or source file could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read {path.as_posix()}: {reason}")
        self.path = path
        self.reason = reason

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity="error",
            kind=IO_ERROR,
            path=self.path.as_posix(),
            message=f"Cannot read file: {self.reason}",
        )


class ValidationError(DocnavError):
    """Frontmatter field missing or invalid."""

    def __init__(
        self,
        path: Path,
        kind: str,
        message: str,
        *,
        field: str | None = None,
    ) -> None:
        super().__init__(f"{path.as_posix()}: {message}")
        self.path = path
        self.kind = kind
        self.message = message
        self.field = field

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity="error",
            kind=self.kind,
            path=self.path.as_posix(),
            message=self.message,
        )


class ConflictError(DocnavError):
    """Two documents resolve to the same canonical path.

    The first document (in source path order) keeps the route; ``path`` is
    the excluded duplicate.
    """

    kind = DUPLICATE_ROUTE

    def __init__(self, route: URLPath, kept: Path, path: Path) -> None:
        super().__init__(
            f"Route {route} of {path.as_posix()} is already taken by {kept.as_posix()}",
        )
        self.route = route
        self.kept = kept
        self.path = path

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            severity="error",
            kind=self.kind,
            path=self.path.as_posix(),
            message=(
                f"Duplicate route {self.route}: also resolved by "
                f"{self.kept.as_posix()}; this document is excluded"
            ),
        )
