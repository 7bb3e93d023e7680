"""Navigation export.

Serializes a NavigationTree for consumers (menu rendering, search). All
functions are pure; writing the result somewhere is the caller's job.
"""

from __future__ import annotations

import json
from typing import Any, NotRequired, TypedDict

from docnav.core.navigation import NavigationTree, NavNode


class NavRecordDict(TypedDict):
    """Flat navigation record, one per node in sidebar order."""

    label: str
    route: str | None
    depth: int
    childCount: int
    collapsed: bool


class NavItemDict(TypedDict):
    """Nested navigation item."""

    label: str
    route: str | None
    children: NotRequired[list[NavItemDict]]


class NavigationTreeDict(TypedDict):
    """Nested navigation tree."""

    items: list[NavItemDict]


def export_records(tree: NavigationTree) -> list[NavRecordDict]:
    """Flatten the tree into records, depth-first in sidebar order.

    Args:
        tree: Navigation tree

    Returns:
        List of records; root-level nodes have depth 0
    """
    return [
        {
            "label": node.label,
            "route": node.route,
            "depth": depth,
            "childCount": len(tree.get_children(node.key)),
            "collapsed": node.collapsed,
        }
        for node, depth in tree.walk()
    ]


def export_tree(tree: NavigationTree) -> NavigationTreeDict:
    """Convert the tree to nested dictionaries."""
    return {"items": [_export_item(tree, node) for node in tree.get_root_nodes()]}


def _export_item(tree: NavigationTree, node: NavNode) -> NavItemDict:
    """Recursively build a nested item from a node."""
    result: NavItemDict = {"label": node.label, "route": node.route}
    children = tree.get_children(node.key)
    if children:
        result["children"] = [_export_item(tree, child) for child in children]
    return result


def render_json(payload: Any) -> str:
    """Render an export payload as stable JSON with a trailing newline."""
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
