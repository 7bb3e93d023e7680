"""Frontmatter parsing and validation.

A source file may start with a YAML block delimited by ``---`` lines:

    ---
    title: Java Collection Framework
    sidebar:
      order: 2
    ---
    Body text...

Recognized fields are validated into a Document. Unrecognized fields are
kept verbatim in ``Document.extra`` and never cause an error. Sidebar
fields may be given nested (``sidebar: {order: 2}``) or dotted
(``sidebar.order: 2``); the dotted form wins when both are present.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from docnav.core.diagnostics import (
    INVALID_FIELD,
    INVALID_ORDER,
    MALFORMED_FRONTMATTER,
    MISSING_TITLE,
)
from docnav.core.loader import SourceFile
from docnav.errors import ValidationError

FRONTMATTER_DELIMITER = "---"

_SIDEBAR_FIELDS = ("order", "label", "hidden")


@dataclass(frozen=True)
class Document:
    """Validated source document."""

    path: Path
    title: str
    body: str = ""
    description: str | None = None
    slug: str | None = None
    order: int | None = None
    label: str | None = None
    hidden: bool = False
    featured: bool = False
    draft: bool = False
    author: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def nav_label(self) -> str:
        """Label shown in navigation (sidebar.label, else title)."""
        return self.label or self.title


def split_frontmatter(text: str, path: Path) -> tuple[dict[str, Any], str]:
    """Split a source text into its frontmatter mapping and body.

    Args:
        text: Full source text
        path: Source path, for error reporting

    Returns:
        Tuple of (frontmatter mapping, body). Texts without a frontmatter
        block yield an empty mapping and the whole text as body.

    Raises:
        ValidationError: If the block is unterminated, not valid YAML, or
            not a mapping
    """
    text = text.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != FRONTMATTER_DELIMITER:
        return {}, text

    for idx in range(1, len(lines)):
        if lines[idx].rstrip() == FRONTMATTER_DELIMITER:
            block = "".join(lines[1:idx])
            body = "".join(lines[idx + 1 :])
            break
    else:
        raise ValidationError(
            path,
            MALFORMED_FRONTMATTER,
            "Frontmatter block is not terminated",
        )

    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise ValidationError(
            path,
            MALFORMED_FRONTMATTER,
            f"Frontmatter is not valid YAML: {e}",
        ) from e

    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise ValidationError(
            path,
            MALFORMED_FRONTMATTER,
            "Frontmatter must be a mapping",
        )
    return data, body


def build_document(path: Path, data: dict[str, Any], body: str) -> Document:
    """Validate a frontmatter mapping into a Document.

    Args:
        path: Source path relative to the content root
        data: Parsed frontmatter mapping (not modified)
        body: Document body

    Returns:
        Validated Document

    Raises:
        ValidationError: If a recognized field is missing or invalid
    """
    fields = dict(data)

    title = fields.pop("title", None)
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(
            path,
            MISSING_TITLE,
            "title is required and must be a non-empty string",
            field="title",
        )

    sidebar = _pop_sidebar(fields, path)

    order = sidebar.get("order")
    if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
        raise ValidationError(
            path,
            INVALID_ORDER,
            f"sidebar.order must be an integer, got {order!r}",
            field="sidebar.order",
        )

    return Document(
        path=path,
        title=title.strip(),
        body=body,
        description=_optional(fields.pop("description", None), str, "description", path),
        slug=_optional(fields.pop("slug", None), str, "slug", path),
        order=order,
        label=_optional(sidebar.get("label"), str, "sidebar.label", path),
        hidden=_flag(sidebar.get("hidden"), "sidebar.hidden", path),
        featured=_flag(fields.pop("featured", None), "featured", path),
        draft=_flag(fields.pop("draft", None), "draft", path),
        author=_optional(fields.pop("author", None), str, "author", path),
        extra=fields,
    )


def parse_document(source: SourceFile) -> Document:
    """Parse and validate a source file into a Document.

    Raises:
        ValidationError: If the frontmatter is malformed or invalid
    """
    data, body = split_frontmatter(source.text, source.path)
    return build_document(source.path, data, body)


def _pop_sidebar(fields: dict[str, Any], path: Path) -> dict[str, Any]:
    """Remove recognized sidebar fields from fields and return them.

    Unrecognized keys of a nested sidebar mapping stay in fields.
    """
    sidebar: dict[str, Any] = {}

    nested = fields.pop("sidebar", None)
    if nested is not None:
        if not isinstance(nested, dict):
            raise ValidationError(
                path,
                INVALID_FIELD,
                "sidebar must be a mapping",
                field="sidebar",
            )
        leftover = dict(nested)
        for name in _SIDEBAR_FIELDS:
            if name in leftover:
                sidebar[name] = leftover.pop(name)
        if leftover:
            fields["sidebar"] = leftover

    for name in _SIDEBAR_FIELDS:
        dotted = f"sidebar.{name}"
        if dotted in fields:
            sidebar[name] = fields.pop(dotted)

    return sidebar


def _optional(value: object, expected: type, name: str, path: Path) -> Any:
    if value is None or isinstance(value, expected):
        return value
    raise ValidationError(
        path,
        INVALID_FIELD,
        f"{name} must be a {expected.__name__}, got {value!r}",
        field=name,
    )


def _flag(value: object, name: str, path: Path) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(
            path,
            INVALID_FIELD,
            f"{name} must be a boolean, got {value!r}",
            field=name,
        )
    return value
