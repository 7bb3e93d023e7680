"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
from docnav.config import (
    BuildConfig,
    Config,
    DocsConfig,
    LinksConfig,
    SidebarConfig,
)


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Create an empty content root."""
    path = tmp_path / "docs"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture
def write_source(source_dir: Path) -> Callable[[str, str], Path]:
    """Return a helper writing a source file below the content root."""

    def write(relative: str, content: str) -> Path:
        path = source_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return write


@pytest.fixture
def test_config(tmp_path: Path, source_dir: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Caching is disabled and builds run sequentially unless a test opts in.
    """
    return Config(
        docs=DocsConfig(
            source_dir=source_dir,
            cache_dir=tmp_path / ".cache",
            cache_enabled=False,
        ),
        build=BuildConfig(workers=1),
        links=LinksConfig(),
        sidebar=SidebarConfig(),
    )
