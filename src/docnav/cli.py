"""CLI interface for docnav.

Command-line tool for building documentation navigation from a content tree.
"""

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from docnav.config import Config
from docnav.core.cache import DocumentCache
from docnav.core.diagnostics import Diagnostic
from docnav.core.export import export_tree, render_json
from docnav.core.pipeline import BuildPipeline, BuildResult
from docnav.errors import ConfigError
from docnav.watch import ContentWatcher

F = TypeVar("F", bound=Callable[..., Any])

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _source_options(func: F) -> F:
    """Options shared by every command that runs a build."""
    options = [
        click.argument(
            "source_dir",
            required=False,
            type=click.Path(path_type=Path, file_okay=False),
        ),
        click.option(
            "--config",
            "-c",
            "config_path",
            type=click.Path(exists=True, path_type=Path, dir_okay=False),
            default=None,
            help="Path to configuration file (default: auto-discover docnav.toml)",
        ),
        click.option(
            "--cache/--no-cache",
            default=None,
            help="Enable/disable caching (overrides config, default: enabled)",
        ),
        click.option(
            "--cache-dir",
            type=click.Path(path_type=Path, file_okay=False),
            default=None,
            help="Cache directory (overrides config)",
        ),
        click.option(
            "--workers",
            type=click.IntRange(min=1),
            default=None,
            help="Worker threads for loading and validation (overrides config)",
        ),
        click.option(
            "--drafts/--no-drafts",
            default=None,
            help="Include documents marked as draft (overrides config)",
        ),
        click.option(
            "--verbose",
            "-v",
            is_flag=True,
            help="Enable verbose output (debug logging)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(package_name="docnav")
def cli() -> None:
    """docnav - Documentation content ingestion and navigation builder."""


@cli.command()
@_source_options
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Write the export to this file (default: stdout)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["records", "tree"]),
    default="records",
    show_default=True,
    help="Export format: flat records or nested tree",
)
@click.option(
    "--watch",
    is_flag=True,
    help="Rebuild whenever a source file changes",
)
def build(
    source_dir: Path | None,
    config_path: Path | None,
    cache: bool | None,
    cache_dir: Path | None,
    workers: int | None,
    drafts: bool | None,
    verbose: bool,
    output: Path | None,
    output_format: str,
    watch: bool,
) -> None:
    """Build the navigation export for a content directory."""
    _configure_logging(verbose)
    config = _load_config(config_path, source_dir, cache, cache_dir, workers, drafts)
    pipeline = BuildPipeline.from_config(config)

    result = _build_and_export(pipeline, output, output_format)
    if not watch:
        if not result.ok:
            sys.exit(1)
        return

    watch_cache = DocumentCache(config.docs.cache_dir) if config.docs.cache_enabled else None
    watcher = ContentWatcher(
        config.docs.source_dir,
        config.docs.extensions,
        cache=watch_cache,
    )

    def on_change(changed: list[Path]) -> None:
        names = ", ".join(path.as_posix() for path in changed)
        click.echo(click.style(f"Changed: {names}", fg="cyan"), err=True)
        _build_and_export(pipeline, output, output_format)

    click.echo(f"Watching {config.docs.source_dir} (Ctrl+C to stop)", err=True)
    try:
        watcher.run(on_change)
    except KeyboardInterrupt:
        click.echo("Stopped watching", err=True)


@cli.command()
@_source_options
def check(
    source_dir: Path | None,
    config_path: Path | None,
    cache: bool | None,
    cache_dir: Path | None,
    workers: int | None,
    drafts: bool | None,
    verbose: bool,
) -> None:
    """Validate content and report diagnostics without exporting."""
    _configure_logging(verbose)
    config = _load_config(config_path, source_dir, cache, cache_dir, workers, drafts)
    result = BuildPipeline.from_config(config).run()

    _print_diagnostics(result.diagnostics)
    _print_summary(result)
    if not result.ok:
        sys.exit(1)


@cli.command()
@_source_options
def routes(
    source_dir: Path | None,
    config_path: Path | None,
    cache: bool | None,
    cache_dir: Path | None,
    workers: int | None,
    drafts: bool | None,
    verbose: bool,
) -> None:
    """List resolved routes and their source files."""
    _configure_logging(verbose)
    config = _load_config(config_path, source_dir, cache, cache_dir, workers, drafts)
    result = BuildPipeline.from_config(config).run()

    _print_diagnostics(result.diagnostics)
    if result.routes is None:
        sys.exit(1)

    for route in sorted(result.routes.routes, key=lambda r: r.path):
        click.echo(f"{route.path}\t{route.source_path.as_posix()}")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def _load_config(
    config_path: Path | None,
    source_dir: Path | None,
    cache: bool | None,
    cache_dir: Path | None,
    workers: int | None,
    drafts: bool | None,
) -> Config:
    """Load configuration and apply command-line overrides."""
    try:
        config = Config.load(config_path)
    except (FileNotFoundError, ConfigError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    return config.with_overrides(
        source_dir=source_dir,
        cache_dir=cache_dir,
        cache_enabled=cache,
        include_drafts=drafts,
        workers=workers,
    )


def _build_and_export(
    pipeline: BuildPipeline,
    output: Path | None,
    output_format: str,
) -> BuildResult:
    """Run one build, print its diagnostics and write the export."""
    result = pipeline.run()
    _print_diagnostics(result.diagnostics)

    if result.tree is not None:
        if output_format == "tree":
            rendered = render_json(export_tree(result.tree))
        else:
            rendered = render_json(result.records)

        if output is None:
            click.echo(rendered, nl=False)
        else:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(rendered, encoding="utf-8")

    _print_summary(result)
    return result


def _print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        color = "red" if diagnostic.is_error else "yellow"
        prefix = click.style(f"{diagnostic.severity}[{diagnostic.kind}]", fg=color)
        click.echo(f"{prefix} {diagnostic.path}: {diagnostic.message}", err=True)


def _print_summary(result: BuildResult) -> None:
    if result.failed:
        click.echo(click.style("Build failed", fg="red"), err=True)
        return

    summary = (
        f"{len(result.records)} navigation entries, "
        f"{len(result.errors)} errors, {len(result.warnings)} warnings"
    )
    color = "red" if result.errors else "green"
    click.echo(click.style(summary, fg=color), err=True)
