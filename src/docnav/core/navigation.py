"""Navigation tree builder.

Builds the sidebar hierarchy from the resolved route set. A page sits at
the position given by the segments of its route, so derived routes mirror
the content directories and an explicit slug relocates a page. Route
prefixes without a page of their own become structural section nodes.

The tree stores nodes in a flat list with parent/children relationships
tracked by indices. Nodes never reference each other, and a tree is never
modified after it is built: a changed source means a fresh build.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from docnav.core.frontmatter import Document
from docnav.core.routes import Route, ancestor_paths, parent_path, split_path
from docnav.core.types import URLPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavNode:
    """Navigation tree node.

    ``key`` is the route prefix the node stands for and is unique in the
    tree. ``route`` is None for structural sections.
    """

    key: URLPath
    label: str
    route: URLPath | None = None
    source_path: Path | None = None
    order: int | None = None
    collapsed: bool = False

    @property
    def is_section(self) -> bool:
        """Whether the node has no page of its own."""
        return self.route is None


@dataclass(frozen=True)
class SectionOverride:
    """Configured label, order and collapsed state for a section."""

    directory: URLPath
    label: str | None = None
    order: int | None = None
    collapsed: bool = False


@dataclass(frozen=True)
class BreadcrumbItem:
    """Breadcrumb navigation item."""

    label: str
    route: str | None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {"label": self.label, "route": self.route}


class NavigationTree:
    """Immutable navigation tree with O(1) key lookups.

    Provides O(d) breadcrumb and parent lookups where d is the node depth.
    """

    __slots__ = ("_children", "_key_index", "_nodes", "_parents", "_roots")

    def __init__(
        self,
        nodes: list[NavNode],
        children: list[list[int]],
        parents: list[int | None],
        roots: list[int],
    ) -> None:
        """Initialize tree structure.

        Args:
            nodes: Flat list of all nodes
            children: Children indices for each node, in sidebar order
            parents: Parent index for each node (None for root-level nodes)
            roots: Indices of root-level nodes, in sidebar order
        """
        self._nodes = nodes
        self._children = children
        self._parents = parents
        self._roots = roots
        self._key_index = {node.key: i for i, node in enumerate(nodes)}

    def __len__(self) -> int:
        return len(self._nodes)

    def get_node(self, key: str) -> NavNode | None:
        """Get node by key (e.g., "guides/java" or "/guides/java")."""
        idx = self._key_index.get(self._normalize_path(key))
        if idx is None:
            return None
        return self._nodes[idx]

    def get_children(self, key: str) -> list[NavNode]:
        """Get children of a node, empty if not found or no children."""
        idx = self._key_index.get(self._normalize_path(key))
        if idx is None:
            return []
        return [self._nodes[i] for i in self._children[idx]]

    def get_parent(self, key: str) -> NavNode | None:
        """Get parent of a node, None for root-level or unknown nodes."""
        idx = self._key_index.get(self._normalize_path(key))
        if idx is None:
            return None
        parent = self._parents[idx]
        if parent is None:
            return None
        return self._nodes[parent]

    def get_root_nodes(self) -> list[NavNode]:
        """Get root-level nodes."""
        return [self._nodes[i] for i in self._roots]

    def get_breadcrumbs(self, key: str) -> list[BreadcrumbItem]:
        """Build breadcrumbs for a node.

        Returns breadcrumbs starting with "Home", followed by ancestor
        nodes. The node itself is not included.

        Note:
            For unknown keys, returns [Home] so that consumers always have
            minimal navigation. This differs from get_node() which returns
            None for unknown keys.
        """
        if not key:
            return []

        idx = self._key_index.get(self._normalize_path(key))
        if idx is None:
            return [BreadcrumbItem(label="Home", route="/")]

        ancestors: list[NavNode] = []
        current = self._parents[idx]
        while current is not None:
            ancestors.append(self._nodes[current])
            current = self._parents[current]

        ancestors.reverse()
        breadcrumbs = [BreadcrumbItem(label="Home", route="/")]
        for node in ancestors:
            breadcrumbs.append(BreadcrumbItem(label=node.label, route=node.route))
        return breadcrumbs

    def walk(self) -> Iterator[tuple[NavNode, int]]:
        """Yield (node, depth) pairs depth-first in sidebar order."""
        stack = [(i, 0) for i in reversed(self._roots)]
        while stack:
            idx, depth = stack.pop()
            yield self._nodes[idx], depth
            stack.extend((child, depth + 1) for child in reversed(self._children[idx]))

    def has_page_descendant(self, key: str) -> bool:
        """Check whether any node below key has a page."""
        idx = self._key_index.get(self._normalize_path(key))
        if idx is None:
            return False
        pending = list(self._children[idx])
        while pending:
            current = pending.pop()
            if self._nodes[current].route is not None:
                return True
            pending.extend(self._children[current])
        return False

    def _normalize_path(self, path: str) -> str:
        """Normalize path to have leading slash."""
        return path if path.startswith("/") else f"/{path}"


class TreeBuilder:
    """Builder for constructing NavigationTree instances."""

    def __init__(self) -> None:
        self._nodes: list[NavNode] = []
        self._children: list[list[int]] = []
        self._parents: list[int | None] = []
        self._roots: list[int] = []

    def add_node(self, node: NavNode, parent_idx: int | None = None) -> int:
        """Add a node to the tree.

        Args:
            node: Node to add; children keep insertion order
            parent_idx: Index of parent node, None for root level

        Returns:
            Index of the added node
        """
        idx = len(self._nodes)
        self._nodes.append(node)
        self._children.append([])
        self._parents.append(parent_idx)

        if parent_idx is None:
            self._roots.append(idx)
        else:
            self._children[parent_idx].append(idx)

        return idx

    def build(self) -> NavigationTree:
        """Build the NavigationTree instance."""
        return NavigationTree(
            nodes=self._nodes,
            children=self._children,
            parents=self._parents,
            roots=self._roots,
        )


def sibling_sort_key(node: NavNode) -> tuple[bool, int, str, str]:
    """Sort key for siblings.

    Explicitly ordered nodes come first, ascending; unordered nodes follow.
    Ties are broken by label (case-insensitive), then by key.
    """
    return (
        node.order is None,
        node.order if node.order is not None else 0,
        node.label.casefold(),
        node.key,
    )


def label_from_segment(segment: str) -> str:
    """Generate a section label from a route segment."""
    return segment.replace("-", " ").replace("_", " ").title()


def build_navigation(
    routes: Iterable[Route],
    documents: Mapping[Path, Document],
    overrides: Iterable[SectionOverride] = (),
) -> NavigationTree:
    """Build the navigation tree from a resolved route set.

    Args:
        routes: Collision-free routes
        documents: Validated documents keyed by source path
        overrides: Configured section labels, orders and collapsed flags

    Returns:
        NavigationTree; identical for identical input
    """
    sections = {override.directory: override for override in overrides}
    pages: dict[URLPath, tuple[Route, Document]] = {}
    keys: set[URLPath] = set()

    for route in routes:
        document = documents[route.source_path]
        keys.update(ancestor_paths(route.path))
        if document.hidden:
            logger.debug(f"Hidden from navigation: {route.path}")
            continue
        pages[route.path] = (route, document)
        keys.add(route.path)

    for directory in sections:
        keys.add(directory)
        keys.update(ancestor_paths(directory))

    siblings: dict[URLPath | None, list[NavNode]] = defaultdict(list)
    for key in keys:
        node = _make_node(key, pages.get(key), sections.get(key))
        siblings[parent_path(key)].append(node)

    builder = TreeBuilder()
    pending: list[tuple[URLPath | None, int | None]] = [(None, None)]
    while pending:
        parent_key, parent_idx = pending.pop(0)
        for node in sorted(siblings.get(parent_key, []), key=sibling_sort_key):
            idx = builder.add_node(node, parent_idx)
            pending.append((node.key, idx))

    tree = builder.build()
    logger.debug(f"Built navigation tree with {len(tree)} nodes from {len(pages)} pages")
    return tree


def _make_node(
    key: URLPath,
    page: tuple[Route, Document] | None,
    section: SectionOverride | None,
) -> NavNode:
    """Create the node for a key; configured section values take precedence."""
    if page is not None:
        route, document = page
        label = document.nav_label
        order = document.order
        source_path: Path | None = route.source_path
        route_path: URLPath | None = route.path
    else:
        segments = split_path(key)
        label = label_from_segment(segments[-1]) if segments else "Home"
        order = None
        source_path = None
        route_path = None

    collapsed = False
    if section is not None:
        label = section.label or label
        order = section.order if section.order is not None else order
        collapsed = section.collapsed

    return NavNode(
        key=key,
        label=label,
        route=route_path,
        source_path=source_path,
        order=order,
        collapsed=collapsed,
    )
