"""Integrity checks over a built navigation tree.

All checks are independent and always run, so one build reports every
defect at once. Apart from duplicate routes, findings are warnings and
never exclude anything.

Link checking is pattern-based: Markdown links ``[text](target)``,
reference definitions ``[label]: target`` and HTML ``href="target"``
attributes are collected from bodies outside of code spans and fenced
code blocks.
"""

import logging
import posixpath
import re
from collections.abc import Iterable, Mapping
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath

from docnav.core.diagnostics import (
    DANGLING_REFERENCE,
    ORPHAN_NODE,
    UNREACHABLE_PAGE,
    Diagnostic,
)
from docnav.core.frontmatter import Document
from docnav.core.navigation import NavigationTree
from docnav.core.routes import (
    INDEX_NAME,
    RouteTable,
    join_segments,
    normalize_segment,
    split_path,
)
from docnav.core.types import URLPath

logger = logging.getLogger(__name__)

PAGE_SUFFIXES = (".md", ".mdx")

FENCED_CODE_PATTERN = re.compile(r"^ {0,3}(```|~~~).*?^ {0,3}\1", re.MULTILINE | re.DOTALL)

INLINE_CODE_PATTERN = re.compile(r"`[^`\n]*`")

MARKDOWN_LINK_PATTERN = re.compile(
    r"(?<!!)\[[^\]\n]*\]\(\s*<?([^)\s>]+)>?(?:\s+[\"'][^\"']*[\"'])?\s*\)",
)

REFERENCE_DEFINITION_PATTERN = re.compile(
    r"^ {0,3}\[(?!\^)[^\]\n]+\]:[ \t]*<?([^\s>]+)>?",
    re.MULTILINE,
)

HTML_HREF_PATTERN = re.compile(r"""\bhref\s*=\s*["']([^"']+)["']""", re.IGNORECASE)

SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


def extract_link_targets(body: str) -> list[str]:
    """Collect link targets from a document body, in order of appearance.

    Args:
        body: Markdown body

    Returns:
        Distinct raw link targets
    """
    text = FENCED_CODE_PATTERN.sub("", body)
    text = INLINE_CODE_PATTERN.sub("", text)

    matches = [
        (match.start(), match.group(1))
        for pattern in (MARKDOWN_LINK_PATTERN, REFERENCE_DEFINITION_PATTERN, HTML_HREF_PATTERN)
        for match in pattern.finditer(text)
    ]
    matches.sort()
    return list(dict.fromkeys(target for _, target in matches))


def resolve_link(target: str, source_path: Path) -> URLPath | None:
    """Resolve an internal link target to a route path.

    Absolute targets are taken as routes. Relative targets are resolved
    against the route of the linking file's directory.

    Args:
        target: Raw link target
        source_path: Source path of the linking document

    Returns:
        Route path, or None when the target is not an internal page link
        (external URL, pure fragment, asset file)
    """
    target = target.strip()
    if not target or target.startswith(("#", "?", "//")) or SCHEME_PATTERN.match(target):
        return None

    target = re.split(r"[#?]", target, maxsplit=1)[0]
    if not target:
        return None

    suffix = PurePosixPath(target).suffix.lower()
    if suffix:
        if suffix not in PAGE_SUFFIXES:
            return None
        target = target[: -len(suffix)]

    if target.startswith("/"):
        joined = target
    else:
        base_dir = PurePosixPath(source_path.as_posix()).parent.as_posix()
        base = "/" if base_dir == "." else f"/{base_dir}"
        joined = posixpath.join(base, target)

    segments = [
        normalize_segment(segment)
        for segment in split_path(posixpath.normpath(joined))
    ]
    if segments and segments[-1] == INDEX_NAME:
        segments.pop()
    return join_segments(segments)


def _matches_any(candidates: Iterable[str], patterns: Iterable[str]) -> bool:
    patterns = list(patterns)
    return any(fnmatchcase(candidate, pattern) for candidate in candidates for pattern in patterns)


class IntegrityChecker:
    """Runs structural and reference checks over a build."""

    def __init__(
        self,
        tree: NavigationTree,
        routes: RouteTable,
        documents: Mapping[Path, Document],
        *,
        link_exclude: Iterable[str] = (),
    ) -> None:
        """Initialize checker.

        Args:
            tree: Built navigation tree
            routes: Route table the tree was built from
            documents: Retained documents keyed by source path
            link_exclude: Glob patterns of link targets to ignore (e.g. "/blog/**")
        """
        self._tree = tree
        self._routes = routes
        self._documents = documents
        self._link_exclude = tuple(link_exclude)
        self._route_by_source = {route.source_path: route.path for route in routes.routes}
        self._known = {path.lower(): path for path in routes.paths()}
        self._links: dict[Path, dict[str, URLPath]] | None = None

    def check(self) -> list[Diagnostic]:
        """Run all checks and return their diagnostics."""
        diagnostics: list[Diagnostic] = []
        diagnostics.extend(self.duplicate_routes())
        diagnostics.extend(self.orphan_nodes())
        diagnostics.extend(self.dangling_references())
        diagnostics.extend(self.unreachable_pages())
        logger.info(f"Integrity checks produced {len(diagnostics)} diagnostics")
        return diagnostics

    def duplicate_routes(self) -> list[Diagnostic]:
        """Report routes claimed by more than one document."""
        return [conflict.to_diagnostic() for conflict in self._routes.conflicts]

    def orphan_nodes(self) -> list[Diagnostic]:
        """Report structural sections without any page below them."""
        diagnostics: list[Diagnostic] = []
        for node, _depth in self._tree.walk():
            if node.is_section and not self._tree.has_page_descendant(node.key):
                diagnostics.append(
                    Diagnostic(
                        severity="warning",
                        kind=ORPHAN_NODE,
                        path=node.key,
                        message=f'Section "{node.label}" has no pages',
                    ),
                )
        return diagnostics

    def dangling_references(self) -> list[Diagnostic]:
        """Report internal links that do not match any route."""
        diagnostics: list[Diagnostic] = []
        for source_path, links in self._resolved_links().items():
            for target, resolved in links.items():
                if self._canonical(resolved) is not None:
                    continue
                diagnostics.append(
                    Diagnostic(
                        severity="warning",
                        kind=DANGLING_REFERENCE,
                        path=source_path.as_posix(),
                        message=f"Link {target!r} points to unknown route {resolved}",
                    ),
                )
        return diagnostics

    def unreachable_pages(self) -> list[Diagnostic]:
        """Report hidden pages that no other page links to."""
        inbound: set[URLPath] = set()
        for source_path, links in self._resolved_links().items():
            route = self._route_by_source.get(source_path)
            for resolved in links.values():
                canonical = self._canonical(resolved)
                if canonical is not None and canonical != route:
                    inbound.add(canonical)

        diagnostics: list[Diagnostic] = []
        for route in self._routes.routes:
            document = self._documents.get(route.source_path)
            if document is None or not document.hidden or route.path in inbound:
                continue
            diagnostics.append(
                Diagnostic(
                    severity="warning",
                    kind=UNREACHABLE_PAGE,
                    path=route.source_path.as_posix(),
                    message=f"Hidden page {route.path} is not linked from any page",
                ),
            )
        return diagnostics

    def _canonical(self, resolved: URLPath) -> URLPath | None:
        """Match a resolved link against the route set, ignoring case."""
        return self._known.get(resolved.lower())

    def _resolved_links(self) -> dict[Path, dict[str, URLPath]]:
        """Resolve internal links once per document, keyed by raw target."""
        if self._links is not None:
            return self._links

        links: dict[Path, dict[str, URLPath]] = {}
        for source_path in sorted(self._documents, key=Path.as_posix):
            document = self._documents[source_path]
            resolved_links: dict[str, URLPath] = {}
            for target in extract_link_targets(document.body):
                resolved = resolve_link(target, source_path)
                if resolved is None:
                    continue
                if _matches_any((target, resolved), self._link_exclude):
                    logger.debug(f"Ignoring excluded link {target!r} in {source_path}")
                    continue
                resolved_links[target] = resolved
            links[source_path] = resolved_links

        self._links = links
        return links
