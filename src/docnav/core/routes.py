"""Canonical route resolution.

A document's route comes from its ``slug`` when present, otherwise from its
position in the content tree:

    guides/java/JCF.md          -> /guides/java/jcf
    guides/java/index.md        -> /guides/java
    index.mdx                   -> /
    guides/Spring Boot/intro.md -> /guides/spring-boot/intro

Routes are unique across the corpus. When two documents resolve to the same
path, the first one in source path order keeps it and the later one is
excluded with a ConflictError.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from docnav.core.frontmatter import Document
from docnav.core.types import ROOT_PATH, URLPath
from docnav.errors import ConflictError

logger = logging.getLogger(__name__)

INDEX_NAME = "index"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Route:
    """Canonical route of a document.

    ``source_path`` is a lookup key into the document set, not a reference
    to the Document itself.
    """

    path: URLPath
    source_path: Path
    explicit: bool = False


def normalize_segment(segment: str) -> str:
    """Lower-case a path segment and replace whitespace runs with hyphens."""
    return _WHITESPACE.sub("-", segment.strip()).lower()


def join_segments(segments: Iterable[str]) -> URLPath:
    """Join path segments into a URL path with a leading slash."""
    parts = [segment for segment in segments if segment]
    return URLPath("/" + "/".join(parts))


def split_path(path: str) -> list[str]:
    """Split a URL path into its non-empty segments."""
    return [segment for segment in path.split("/") if segment]


def derive_route(path: Path) -> URLPath:
    """Derive a route from a source path relative to the content root."""
    stem_path = PurePosixPath(path.as_posix()).with_suffix("")
    segments = [normalize_segment(part) for part in stem_path.parts]
    if segments and segments[-1] == INDEX_NAME:
        segments.pop()
    return join_segments(segments)


def normalize_slug(slug: str) -> URLPath:
    """Normalize an explicit slug to a URL path.

    Only surrounding whitespace and leading/trailing separators are
    removed; the slug is otherwise used verbatim.
    """
    trimmed = slug.strip().strip("/")
    if not trimmed:
        return ROOT_PATH
    return URLPath(f"/{trimmed}")


def resolve_route(document: Document) -> Route:
    """Resolve the canonical route of a document. An explicit slug wins."""
    if document.slug is not None:
        return Route(
            path=normalize_slug(document.slug),
            source_path=document.path,
            explicit=True,
        )
    return Route(path=derive_route(document.path), source_path=document.path)


def parent_path(path: URLPath) -> URLPath | None:
    """Return the parent route of a path, None for root-level paths."""
    segments = split_path(path)
    if len(segments) <= 1:
        return None
    return join_segments(segments[:-1])


def ancestor_paths(path: URLPath) -> list[URLPath]:
    """Return all proper ancestor routes of a path, outermost first."""
    segments = split_path(path)
    return [join_segments(segments[:depth]) for depth in range(1, len(segments))]


@dataclass
class RouteTable:
    """Resolved, collision-free route set."""

    routes: list[Route] = field(default_factory=list)
    conflicts: list[ConflictError] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._by_path = {route.path: route for route in self.routes}

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def __len__(self) -> int:
        return len(self.routes)

    def get(self, path: str) -> Route | None:
        """Look up a route by path."""
        return self._by_path.get(URLPath(path))

    def paths(self) -> set[URLPath]:
        """Return all route paths."""
        return set(self._by_path)

    def source_paths(self) -> set[Path]:
        """Return the source paths that kept their route."""
        return {route.source_path for route in self.routes}


def build_route_table(routes: Iterable[Route]) -> RouteTable:
    """Detect collisions and build the route table.

    Routes are processed in source path order, so the outcome does not
    depend on the order in which they were resolved.

    Args:
        routes: Resolved routes, in any order

    Returns:
        RouteTable with the retained routes and one ConflictError per
        excluded duplicate
    """
    retained: dict[URLPath, Route] = {}
    conflicts: list[ConflictError] = []

    for route in sorted(routes, key=lambda r: r.source_path.as_posix()):
        existing = retained.get(route.path)
        if existing is not None:
            conflict = ConflictError(route.path, existing.source_path, route.source_path)
            logger.warning(str(conflict))
            conflicts.append(conflict)
            continue
        retained[route.path] = route

    return RouteTable(routes=list(retained.values()), conflicts=conflicts)


def resolve_routes(documents: Iterable[Document]) -> RouteTable:
    """Resolve routes for a set of documents, see build_route_table()."""
    return build_route_table(resolve_route(document) for document in documents)
