"""Configuration management for docnav.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from docnav.core.loader import DEFAULT_EXTENSIONS
from docnav.core.navigation import SectionOverride
from docnav.core.routes import join_segments, normalize_segment, split_path
from docnav.errors import ConfigError

CONFIG_FILENAME = "docnav.toml"

DEFAULT_WORKERS = 4


@dataclass
class DocsConfig:
    """Content source configuration."""

    source_dir: Path = field(default_factory=lambda: Path("docs"))
    cache_dir: Path = field(default_factory=lambda: Path(".cache"))
    cache_enabled: bool = True
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    include_drafts: bool = False


@dataclass
class BuildConfig:
    """Build execution configuration."""

    workers: int = DEFAULT_WORKERS


@dataclass
class LinksConfig:
    """Internal link checking configuration."""

    exclude: list[str] = field(default_factory=list)


@dataclass
class SidebarConfig:
    """Sidebar group overrides."""

    groups: list[SectionOverride] = field(default_factory=list)


@dataclass
class Config:
    """Application configuration."""

    docs: DocsConfig
    build: BuildConfig
    links: LinksConfig
    sidebar: SidebarConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for docnav.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ConfigError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults."""
        return cls(
            docs=DocsConfig(),
            build=BuildConfig(),
            links=LinksConfig(),
            sidebar=SidebarConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ConfigError: If the file is not valid TOML or a value is invalid
        """
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            docs=cls._parse_docs(data.get("docs"), config_dir),
            build=cls._parse_build(data.get("build")),
            links=cls._parse_links(data.get("links")),
            sidebar=cls._parse_sidebar(data.get("sidebar")),
            config_path=path,
        )

    @classmethod
    def _parse_docs(cls, data: object, config_dir: Path) -> DocsConfig:
        """Parse docs configuration section.

        Args:
            data: Raw docs section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            DocsConfig instance
        """
        if data is None:
            return DocsConfig(
                source_dir=config_dir / "docs",
                cache_dir=config_dir / ".cache",
            )

        if not isinstance(data, dict):
            raise ConfigError("docs section must be a table")

        source_dir = data.get("source_dir", "docs")
        if not isinstance(source_dir, str):
            raise ConfigError("docs.source_dir must be a string")

        cache_dir = data.get("cache_dir", ".cache")
        if not isinstance(cache_dir, str):
            raise ConfigError("docs.cache_dir must be a string")

        cache_enabled = data.get("cache_enabled", True)
        if not isinstance(cache_enabled, bool):
            raise ConfigError("docs.cache_enabled must be a boolean")

        extensions_raw = data.get("extensions", list(DEFAULT_EXTENSIONS))
        if not isinstance(extensions_raw, list) or not extensions_raw:
            raise ConfigError("docs.extensions must be a non-empty list")
        extensions: list[str] = []
        for item in extensions_raw:
            if not isinstance(item, str) or not item.strip(". "):
                raise ConfigError("docs.extensions items must be non-empty strings")
            extensions.append("." + item.strip().lstrip(".").lower())

        include_drafts = data.get("include_drafts", False)
        if not isinstance(include_drafts, bool):
            raise ConfigError("docs.include_drafts must be a boolean")

        return DocsConfig(
            source_dir=config_dir / source_dir,
            cache_dir=config_dir / cache_dir,
            cache_enabled=cache_enabled,
            extensions=extensions,
            include_drafts=include_drafts,
        )

    @classmethod
    def _parse_build(cls, data: object) -> BuildConfig:
        """Parse build configuration section."""
        if data is None:
            return BuildConfig()

        if not isinstance(data, dict):
            raise ConfigError("build section must be a table")

        workers = data.get("workers", DEFAULT_WORKERS)
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ConfigError("build.workers must be a positive integer")

        return BuildConfig(workers=workers)

    @classmethod
    def _parse_links(cls, data: object) -> LinksConfig:
        """Parse links configuration section."""
        if data is None:
            return LinksConfig()

        if not isinstance(data, dict):
            raise ConfigError("links section must be a table")

        exclude_raw = data.get("exclude", [])
        if not isinstance(exclude_raw, list):
            raise ConfigError("links.exclude must be a list")
        exclude: list[str] = []
        for item in exclude_raw:
            if not isinstance(item, str):
                raise ConfigError("links.exclude items must be strings")
            exclude.append(item)

        return LinksConfig(exclude=exclude)

    @classmethod
    def _parse_sidebar(cls, data: object) -> SidebarConfig:
        """Parse sidebar configuration section.

        Each ``[[sidebar.groups]]`` entry names a content directory and
        optionally its label, order and collapsed state.
        """
        if data is None:
            return SidebarConfig()

        if not isinstance(data, dict):
            raise ConfigError("sidebar section must be a table")

        groups_raw = data.get("groups", [])
        if not isinstance(groups_raw, list):
            raise ConfigError("sidebar.groups must be an array of tables")

        groups: list[SectionOverride] = []
        seen: set[str] = set()
        for item in groups_raw:
            group = cls._parse_group(item)
            if group.directory in seen:
                raise ConfigError(f"sidebar.groups: duplicate directory {group.directory}")
            seen.add(group.directory)
            groups.append(group)

        return SidebarConfig(groups=groups)

    @classmethod
    def _parse_group(cls, data: object) -> SectionOverride:
        """Parse one sidebar group entry."""
        if not isinstance(data, dict):
            raise ConfigError("sidebar.groups entries must be tables")

        directory = data.get("directory")
        if not isinstance(directory, str) or not split_path(directory):
            raise ConfigError("sidebar.groups.directory must be a non-empty string")

        label = data.get("label")
        if label is not None and not isinstance(label, str):
            raise ConfigError("sidebar.groups.label must be a string")

        order = data.get("order")
        if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
            raise ConfigError("sidebar.groups.order must be an integer")

        collapsed = data.get("collapsed", False)
        if not isinstance(collapsed, bool):
            raise ConfigError("sidebar.groups.collapsed must be a boolean")

        return SectionOverride(
            directory=join_segments(normalize_segment(s) for s in split_path(directory)),
            label=label,
            order=order,
            collapsed=collapsed,
        )

    def with_overrides(
        self,
        *,
        source_dir: Path | None = None,
        cache_dir: Path | None = None,
        cache_enabled: bool | None = None,
        include_drafts: bool | None = None,
        workers: int | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            source_dir: Override docs.source_dir
            cache_dir: Override docs.cache_dir
            cache_enabled: Override docs.cache_enabled
            include_drafts: Override docs.include_drafts
            workers: Override build.workers

        Returns:
            New Config instance with overrides applied
        """
        docs = replace(
            self.docs,
            source_dir=source_dir if source_dir is not None else self.docs.source_dir,
            cache_dir=cache_dir if cache_dir is not None else self.docs.cache_dir,
            cache_enabled=(
                cache_enabled if cache_enabled is not None else self.docs.cache_enabled
            ),
            include_drafts=(
                include_drafts if include_drafts is not None else self.docs.include_drafts
            ),
        )

        build = self.build
        if workers is not None:
            build = replace(self.build, workers=workers)

        return replace(self, docs=docs, build=build)
