"""Tests for frontmatter parsing and validation."""

from pathlib import Path

import pytest
from docnav.core.frontmatter import (
    Document,
    build_document,
    parse_document,
    split_frontmatter,
)
from docnav.core.loader import SourceFile
from docnav.errors import ValidationError

PATH = Path("guides/java/jcf.md")


class TestSplitFrontmatter:
    """Tests for split_frontmatter()."""

    def test__extracts_mapping_and_body(self) -> None:
        """Split the YAML block from the body."""
        text = "---\ntitle: Java\nsidebar:\n  order: 2\n---\n# Body\n"

        data, body = split_frontmatter(text, PATH)

        assert data == {"title": "Java", "sidebar": {"order": 2}}
        assert body == "# Body\n"

    def test__no_frontmatter__returns_empty_mapping(self) -> None:
        """Return the whole text as body without a frontmatter block."""
        data, body = split_frontmatter("# Just a body\n", PATH)

        assert data == {}
        assert body == "# Just a body\n"

    def test__empty_block__returns_empty_mapping(self) -> None:
        """Treat an empty block as an empty mapping."""
        data, body = split_frontmatter("---\n---\nBody\n", PATH)

        assert data == {}
        assert body == "Body\n"

    def test__byte_order_mark__ignored(self) -> None:
        """Recognize the block after a UTF-8 BOM."""
        data, _ = split_frontmatter("\ufeff---\ntitle: Java\n---\n", PATH)

        assert data == {"title": "Java"}

    def test__crlf_line_endings(self) -> None:
        """Recognize delimiters followed by CRLF."""
        data, body = split_frontmatter("---\r\ntitle: Java\r\n---\r\nBody\r\n", PATH)

        assert data == {"title": "Java"}
        assert body == "Body\r\n"

    def test__unterminated_block__raises(self) -> None:
        """Raise MalformedFrontmatter when the closing delimiter is missing."""
        with pytest.raises(ValidationError) as exc_info:
            split_frontmatter("---\ntitle: Java\n", PATH)

        assert exc_info.value.kind == "MalformedFrontmatter"

    def test__invalid_yaml__raises(self) -> None:
        """Raise MalformedFrontmatter for unparseable YAML."""
        with pytest.raises(ValidationError) as exc_info:
            split_frontmatter("---\ntitle: [unclosed\n---\n", PATH)

        assert exc_info.value.kind == "MalformedFrontmatter"
        assert exc_info.value.path == PATH

    def test__non_mapping_block__raises(self) -> None:
        """Raise MalformedFrontmatter when the block is a list."""
        with pytest.raises(ValidationError) as exc_info:
            split_frontmatter("---\n- one\n- two\n---\n", PATH)

        assert exc_info.value.kind == "MalformedFrontmatter"


class TestBuildDocument:
    """Tests for build_document()."""

    def test__recognized_fields(self) -> None:
        """Map recognized fields onto the Document."""
        data = {
            "title": "Java Collection Framework",
            "description": "Lists, sets and maps",
            "slug": "guides/java/jcf",
            "sidebar": {"order": 2, "label": "JCF", "hidden": False},
            "featured": True,
            "draft": False,
            "author": "Ada",
        }

        document = build_document(PATH, data, "Body")

        assert document == Document(
            path=PATH,
            title="Java Collection Framework",
            body="Body",
            description="Lists, sets and maps",
            slug="guides/java/jcf",
            order=2,
            label="JCF",
            hidden=False,
            featured=True,
            draft=False,
            author="Ada",
            extra={},
        )

    def test__dotted_sidebar_keys(self) -> None:
        """Accept sidebar.order written as a dotted key."""
        document = build_document(PATH, {"title": "Java", "sidebar.order": 0}, "")

        assert document.order == 0

    def test__dotted_key_wins_over_nested(self) -> None:
        """Prefer the dotted form when both forms are present."""
        data = {"title": "Java", "sidebar": {"order": 5}, "sidebar.order": 1}

        document = build_document(PATH, data, "")

        assert document.order == 1

    def test__unknown_fields_kept_in_extra(self) -> None:
        """Preserve unrecognized keys verbatim."""
        data = {
            "title": "Java",
            "tags": ["java", "collections"],
            "sidebar": {"order": 1, "badge": "New"},
        }

        document = build_document(PATH, data, "")

        assert document.extra == {
            "tags": ["java", "collections"],
            "sidebar": {"badge": "New"},
        }

    def test__does_not_modify_input(self) -> None:
        """Leave the parsed mapping untouched."""
        data = {"title": "Java", "sidebar": {"order": 1}}

        build_document(PATH, data, "")

        assert data == {"title": "Java", "sidebar": {"order": 1}}

    def test__title_is_stripped(self) -> None:
        """Strip surrounding whitespace from the title."""
        document = build_document(PATH, {"title": "  Java  "}, "")

        assert document.title == "Java"

    @pytest.mark.parametrize("data", [{}, {"title": ""}, {"title": "   "}, {"title": 42}])
    def test__missing_title__raises(self, data: dict[str, object]) -> None:
        """Raise MissingTitle for an absent, blank or non-string title."""
        with pytest.raises(ValidationError) as exc_info:
            build_document(PATH, data, "")

        assert exc_info.value.kind == "MissingTitle"
        assert exc_info.value.field == "title"

    def test__missing_title_with_invalid_sidebar__raises_missing_title(self) -> None:
        """Report MissingTitle before any other invalid field."""
        with pytest.raises(ValidationError) as exc_info:
            build_document(PATH, {"sidebar": "x", "draft": "yes"}, "")

        assert exc_info.value.kind == "MissingTitle"

    @pytest.mark.parametrize("order", ["first", 1.5, True])
    def test__non_integer_order__raises(self, order: object) -> None:
        """Raise InvalidOrder for a non-integer sidebar.order."""
        with pytest.raises(ValidationError) as exc_info:
            build_document(PATH, {"title": "Java", "sidebar": {"order": order}}, "")

        assert exc_info.value.kind == "InvalidOrder"

    def test__negative_order_allowed(self) -> None:
        """Accept negative orders."""
        document = build_document(PATH, {"title": "Java", "sidebar.order": -1}, "")

        assert document.order == -1

    def test__non_boolean_hidden__raises(self) -> None:
        """Raise InvalidField for a non-boolean flag."""
        with pytest.raises(ValidationError) as exc_info:
            build_document(PATH, {"title": "Java", "sidebar.hidden": "yes"}, "")

        assert exc_info.value.kind == "InvalidField"
        assert exc_info.value.field == "sidebar.hidden"

    def test__non_string_slug__raises(self) -> None:
        """Raise InvalidField for a non-string slug."""
        with pytest.raises(ValidationError) as exc_info:
            build_document(PATH, {"title": "Java", "slug": 7}, "")

        assert exc_info.value.kind == "InvalidField"

    def test__sidebar_not_mapping__raises(self) -> None:
        """Raise InvalidField when sidebar is a scalar."""
        with pytest.raises(ValidationError) as exc_info:
            build_document(PATH, {"title": "Java", "sidebar": 3}, "")

        assert exc_info.value.kind == "InvalidField"


class TestDocument:
    """Tests for Document."""

    def test__nav_label__prefers_sidebar_label(self) -> None:
        """Use sidebar.label when present."""
        document = Document(path=PATH, title="Java Collection Framework", label="JCF")

        assert document.nav_label == "JCF"

    def test__nav_label__falls_back_to_title(self) -> None:
        """Use the title without sidebar.label."""
        document = Document(path=PATH, title="Java Collection Framework")

        assert document.nav_label == "Java Collection Framework"


class TestParseDocument:
    """Tests for parse_document()."""

    def test__parses_source_file(self) -> None:
        """Parse a complete source file."""
        source = SourceFile(
            path=PATH,
            text="---\ntitle: Java\ndraft: true\n---\nBody\n",
            mtime=0.0,
        )

        document = parse_document(source)

        assert document.title == "Java"
        assert document.draft is True
        assert document.body == "Body\n"

    def test__validation_error__to_diagnostic(self) -> None:
        """Convert a validation failure into an error diagnostic."""
        source = SourceFile(path=PATH, text="---\nauthor: Ada\n---\n", mtime=0.0)

        with pytest.raises(ValidationError) as exc_info:
            parse_document(source)
        diagnostic = exc_info.value.to_diagnostic()

        assert diagnostic.severity == "error"
        assert diagnostic.kind == "MissingTitle"
        assert diagnostic.path == "guides/java/jcf.md"
