"""Build diagnostics.

Every defect found during a build is recorded as a Diagnostic. Stages that
may run on worker threads append to a shared DiagnosticCollector; the
report is produced once, sorted, at the end of the run.
"""

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypedDict

from docnav.core.types import Severity

IO_ERROR = "IoError"
MISSING_TITLE = "MissingTitle"
INVALID_ORDER = "InvalidOrder"
INVALID_FIELD = "InvalidField"
MALFORMED_FRONTMATTER = "MalformedFrontmatter"
DUPLICATE_ROUTE = "DuplicateRoute"
EMPTY_CORPUS = "EmptyCorpus"
ORPHAN_NODE = "OrphanNode"
DANGLING_REFERENCE = "DanglingReference"
UNREACHABLE_PAGE = "UnreachablePage"

_SEVERITY_RANK = {"error": 0, "warning": 1}


class DiagnosticDict(TypedDict):
    """Dictionary representation of a diagnostic."""

    severity: str
    kind: str
    path: str
    message: str


@dataclass(frozen=True)
class Diagnostic:
    """A single build finding."""

    severity: Severity
    kind: str
    path: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def to_dict(self) -> DiagnosticDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "severity": self.severity,
            "kind": self.kind,
            "path": self.path,
            "message": self.message,
        }


def _sort_key(diagnostic: Diagnostic) -> tuple[str, int, str, str]:
    return (
        diagnostic.path,
        _SEVERITY_RANK[diagnostic.severity],
        diagnostic.kind,
        diagnostic.message,
    )


class DiagnosticCollector:
    """Append-only, thread-safe diagnostic sink."""

    __slots__ = ("_items", "_lock")

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []
        self._lock = threading.Lock()

    def add(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._items.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        items = list(diagnostics)
        with self._lock:
            self._items.extend(items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def report(self) -> list[Diagnostic]:
        """Return all collected diagnostics in deterministic order."""
        with self._lock:
            return sorted(self._items, key=_sort_key)
