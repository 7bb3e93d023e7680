"""Tests for navigation tree building."""

from pathlib import Path
from typing import Any

from docnav.core.frontmatter import Document
from docnav.core.navigation import (
    NavigationTree,
    NavNode,
    SectionOverride,
    TreeBuilder,
    build_navigation,
    label_from_segment,
    sibling_sort_key,
)
from docnav.core.routes import resolve_routes
from docnav.core.types import URLPath


def _doc(path: str, title: str, **fields: Any) -> Document:
    return Document(path=Path(path), title=title, **fields)


def _build(*documents: Document, overrides: tuple[SectionOverride, ...] = ()) -> NavigationTree:
    table = resolve_routes(documents)
    by_path = {document.path: document for document in documents}
    return build_navigation(table.routes, by_path, overrides)


def _labels(nodes: list[NavNode]) -> list[str]:
    return [node.label for node in nodes]


class TestTreeBuilder:
    """Tests for TreeBuilder and NavigationTree lookups."""

    def test__get_node__returns_node(self) -> None:
        """Get node by key."""
        builder = TreeBuilder()
        builder.add_node(NavNode(key=URLPath("/guide"), label="Guide", route=URLPath("/guide")))
        tree = builder.build()

        node = tree.get_node("/guide")

        assert node is not None
        assert node.label == "Guide"
        assert node.route == "/guide"

    def test__get_node__normalizes_path(self) -> None:
        """Accept keys without a leading slash."""
        builder = TreeBuilder()
        builder.add_node(NavNode(key=URLPath("/guide"), label="Guide", route=URLPath("/guide")))
        tree = builder.build()

        assert tree.get_node("guide") is not None

    def test__get_node__not_found__returns_none(self) -> None:
        """Return None for unknown keys."""
        tree = TreeBuilder().build()

        assert tree.get_node("/nonexistent") is None

    def test__get_children__keeps_insertion_order(self) -> None:
        """Return children in the order they were added."""
        builder = TreeBuilder()
        parent = builder.add_node(NavNode(key=URLPath("/parent"), label="Parent"))
        builder.add_node(NavNode(key=URLPath("/parent/b"), label="B"), parent)
        builder.add_node(NavNode(key=URLPath("/parent/a"), label="A"), parent)
        tree = builder.build()

        assert _labels(tree.get_children("/parent")) == ["B", "A"]

    def test__get_children__not_found__returns_empty(self) -> None:
        """Return empty list for unknown keys."""
        assert TreeBuilder().build().get_children("/nonexistent") == []

    def test__get_parent(self) -> None:
        """Return the parent node, None at root level."""
        builder = TreeBuilder()
        parent = builder.add_node(NavNode(key=URLPath("/parent"), label="Parent"))
        builder.add_node(NavNode(key=URLPath("/parent/child"), label="Child"), parent)
        tree = builder.build()

        found = tree.get_parent("/parent/child")

        assert found is not None
        assert found.key == "/parent"
        assert tree.get_parent("/parent") is None
        assert tree.get_parent("/nonexistent") is None

    def test__walk__depth_first_pre_order(self) -> None:
        """Yield nodes with their depth, parents before children."""
        builder = TreeBuilder()
        a = builder.add_node(NavNode(key=URLPath("/a"), label="A"))
        builder.add_node(NavNode(key=URLPath("/a/x"), label="X"), a)
        builder.add_node(NavNode(key=URLPath("/b"), label="B"))
        tree = builder.build()

        walked = [(node.label, depth) for node, depth in tree.walk()]

        assert walked == [("A", 0), ("X", 1), ("B", 0)]

    def test__has_page_descendant(self) -> None:
        """Detect pages anywhere below a section."""
        builder = TreeBuilder()
        a = builder.add_node(NavNode(key=URLPath("/a"), label="A"))
        ab = builder.add_node(NavNode(key=URLPath("/a/b"), label="B"), a)
        builder.add_node(NavNode(key=URLPath("/a/b/c"), label="C", route=URLPath("/a/b/c")), ab)
        builder.add_node(NavNode(key=URLPath("/empty"), label="Empty"))
        tree = builder.build()

        assert tree.has_page_descendant("/a")
        assert not tree.has_page_descendant("/empty")
        assert not tree.has_page_descendant("/nonexistent")


class TestBreadcrumbs:
    """Tests for NavigationTree.get_breadcrumbs()."""

    def test__empty_path__returns_empty(self) -> None:
        """Return empty list for empty path."""
        assert TreeBuilder().build().get_breadcrumbs("") == []

    def test__unknown_path__returns_home(self) -> None:
        """Return Home for unknown keys."""
        breadcrumbs = TreeBuilder().build().get_breadcrumbs("/nonexistent")

        assert [b.to_dict() for b in breadcrumbs] == [{"label": "Home", "route": "/"}]

    def test__nested_page__returns_ancestors(self) -> None:
        """Return Home followed by ancestors, excluding the node itself."""
        tree = _build(
            _doc("guides/java/index.md", "Java"),
            _doc("guides/java/jcf.md", "Java Collection Framework"),
        )

        breadcrumbs = tree.get_breadcrumbs("/guides/java/jcf")

        assert [b.to_dict() for b in breadcrumbs] == [
            {"label": "Home", "route": "/"},
            {"label": "Guides", "route": None},
            {"label": "Java", "route": "/guides/java"},
        ]


class TestBuildNavigation:
    """Tests for build_navigation()."""

    def test__empty_route_set__empty_tree(self) -> None:
        """Build an empty tree without routes."""
        tree = build_navigation([], {})

        assert len(tree) == 0
        assert tree.get_root_nodes() == []

    def test__flat_pages__sorted_by_label(self) -> None:
        """Sort unordered siblings by label, ignoring case."""
        tree = _build(
            _doc("zeta.md", "Zeta"),
            _doc("alpha.md", "alpha"),
            _doc("beta.md", "Beta"),
        )

        assert _labels(tree.get_root_nodes()) == ["alpha", "Beta", "Zeta"]

    def test__ordered_before_unordered(self) -> None:
        """Place ordered siblings first, ascending, then unordered ones."""
        tree = _build(
            _doc("a.md", "Alpha"),
            _doc("b.md", "Beta", order=2),
            _doc("c.md", "Gamma", order=0),
            _doc("d.md", "Delta", order=2),
        )

        assert _labels(tree.get_root_nodes()) == ["Gamma", "Beta", "Delta", "Alpha"]

    def test__nested_pages_follow_directories(self) -> None:
        """Nest pages under their route prefixes."""
        tree = _build(
            _doc("guides/java/index.md", "Java"),
            _doc("guides/java/jcf.md", "Java Collection Framework"),
        )

        roots = tree.get_root_nodes()
        assert len(roots) == 1
        assert roots[0].key == "/guides"
        assert roots[0].is_section
        assert roots[0].label == "Guides"

        java = tree.get_children("/guides")
        assert len(java) == 1
        assert java[0].route == "/guides/java"
        assert java[0].source_path == Path("guides/java/index.md")

        assert _labels(tree.get_children("/guides/java")) == ["Java Collection Framework"]

    def test__slug_relocates_page(self) -> None:
        """Place a slugged page under the sections named by its slug."""
        tree = _build(
            _doc(
                "tutorial.md",
                "Stack Navigation Tutorial",
                slug="guides/react-native/stack-navigation-tutorial",
            ),
        )

        assert tree.get_node("/tutorial") is None
        section = tree.get_node("/guides/react-native")
        assert section is not None
        assert section.label == "React Native"
        assert section.route is None
        assert _labels(tree.get_children("/guides/react-native")) == [
            "Stack Navigation Tutorial",
        ]

    def test__root_index_is_root_level_entry(self) -> None:
        """Place the root index page at root level."""
        tree = _build(
            _doc("index.md", "Courses and Guides", order=0),
            _doc("guide.md", "Guide"),
        )

        roots = tree.get_root_nodes()
        assert [node.key for node in roots] == ["/", "/guide"]
        assert roots[0].route == "/"

    def test__sidebar_label_used(self) -> None:
        """Use sidebar.label over the title."""
        tree = _build(_doc("jcf.md", "Java Collection Framework", label="JCF"))

        assert _labels(tree.get_root_nodes()) == ["JCF"]

    def test__hidden_page_excluded(self) -> None:
        """Leave hidden pages out while keeping their ancestor sections."""
        tree = _build(
            _doc("guides/secret.md", "Secret", hidden=True),
            _doc("visible.md", "Visible"),
        )

        assert tree.get_node("/guides/secret") is None
        assert tree.get_node("/guides") is not None
        assert tree.get_children("/guides") == []

    def test__section_override(self) -> None:
        """Apply configured label, order and collapsed state."""
        override = SectionOverride(
            directory=URLPath("/guides/java"),
            label="Java",
            order=4,
            collapsed=True,
        )
        tree = _build(
            _doc("guides/java/index.md", "Java Overview", order=9),
            _doc("guides/kotlin.md", "Kotlin", order=5),
            overrides=(override,),
        )

        java = tree.get_node("/guides/java")
        assert java is not None
        assert java.label == "Java"
        assert java.order == 4
        assert java.collapsed is True
        assert java.route == "/guides/java"
        assert _labels(tree.get_children("/guides")) == ["Java", "Kotlin"]

    def test__section_override_without_pages_creates_section(self) -> None:
        """Create the configured section even without pages below it."""
        override = SectionOverride(directory=URLPath("/reference/api"), label="API")
        tree = _build(_doc("guide.md", "Guide"), overrides=(override,))

        node = tree.get_node("/reference/api")

        assert node is not None
        assert node.label == "API"
        assert node.is_section

    def test__deterministic(self) -> None:
        """Build identical trees for any input order."""
        documents = [
            _doc("b.md", "B"),
            _doc("a/x.md", "X", order=1),
            _doc("a/y.md", "Y", order=1),
            _doc("a/index.md", "A"),
            _doc("c.md", "C", slug="a/z"),
        ]

        forward = _build(*documents)
        backward = _build(*reversed(documents))

        assert list(forward.walk()) == list(backward.walk())


class TestHelpers:
    """Tests for sibling_sort_key() and label_from_segment()."""

    def test__label_from_segment(self) -> None:
        """Title-case segments and replace separators with spaces."""
        assert label_from_segment("react-native") == "React Native"
        assert label_from_segment("getting_started") == "Getting Started"

    def test__sibling_sort_key__label_tie_breaks_by_key(self) -> None:
        """Break label ties by key."""
        first = NavNode(key=URLPath("/a"), label="Same")
        second = NavNode(key=URLPath("/b"), label="Same")

        assert sorted([second, first], key=sibling_sort_key) == [first, second]
