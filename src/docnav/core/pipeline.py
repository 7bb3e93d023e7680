"""Build pipeline.

Runs the stages in order:

    Unloaded -> Loaded -> Validated -> Routed -> TreeBuilt -> Checked -> Exported

Loading, validation and route resolution work on one document at a time
and run on a thread pool when more than one worker is configured. The tree
builder needs the complete route set and is the join point. A build ends in
Failed only when the content root cannot be read or no document survives
to Routed; every other defect is reported and the build carries on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TypeVar

from docnav.config import Config
from docnav.core.cache import CacheEntry, DocumentCache
from docnav.core.diagnostics import EMPTY_CORPUS, Diagnostic, DiagnosticCollector
from docnav.core.export import NavRecordDict, export_records
from docnav.core.frontmatter import Document, build_document, split_frontmatter
from docnav.core.integrity import IntegrityChecker
from docnav.core.loader import DEFAULT_EXTENSIONS, DocumentLoader, SourceFile
from docnav.core.navigation import NavigationTree, SectionOverride, build_navigation
from docnav.core.routes import RouteTable, build_route_table, resolve_route
from docnav.errors import IoError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BuildState(Enum):
    """Pipeline state."""

    UNLOADED = "unloaded"
    LOADED = "loaded"
    VALIDATED = "validated"
    ROUTED = "routed"
    TREE_BUILT = "tree_built"
    CHECKED = "checked"
    EXPORTED = "exported"
    FAILED = "failed"


@dataclass
class BuildResult:
    """Outcome of a pipeline run."""

    state: BuildState
    diagnostics: list[Diagnostic]
    documents: dict[Path, Document] = field(default_factory=dict)
    routes: RouteTable | None = None
    tree: NavigationTree | None = None
    records: list[NavRecordDict] = field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def failed(self) -> bool:
        return self.state is BuildState.FAILED

    @property
    def ok(self) -> bool:
        """Whether the build exported without error diagnostics."""
        return self.state is BuildState.EXPORTED and not self.errors


class BuildPipeline:
    """Turns a content directory into a navigation tree and diagnostics."""

    def __init__(
        self,
        source_dir: Path,
        *,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        cache: DocumentCache | None = None,
        workers: int = 1,
        include_drafts: bool = False,
        sections: Iterable[SectionOverride] = (),
        link_exclude: Iterable[str] = (),
    ) -> None:
        """Initialize pipeline.

        Args:
            source_dir: Content root directory
            extensions: Recognized source file suffixes
            cache: Parsed document cache, None to always parse
            workers: Worker threads for per-document stages (1 = sequential)
            include_drafts: Keep documents marked ``draft: true``
            sections: Configured section overrides
            link_exclude: Glob patterns of link targets not checked
        """
        self._loader = DocumentLoader(source_dir, tuple(extensions))
        self._cache = cache
        self._workers = max(1, workers)
        self._include_drafts = include_drafts
        self._sections = tuple(sections)
        self._link_exclude = tuple(link_exclude)
        self._state = BuildState.UNLOADED

    @classmethod
    def from_config(cls, config: Config) -> BuildPipeline:
        """Create a pipeline from application configuration."""
        cache = DocumentCache(config.docs.cache_dir) if config.docs.cache_enabled else None
        return cls(
            config.docs.source_dir,
            extensions=config.docs.extensions,
            cache=cache,
            workers=config.build.workers,
            include_drafts=config.docs.include_drafts,
            sections=config.sidebar.groups,
            link_exclude=config.links.exclude,
        )

    @property
    def source_dir(self) -> Path:
        """Content root directory."""
        return self._loader.source_dir

    @property
    def state(self) -> BuildState:
        """State reached by the most recent run."""
        return self._state

    def run(self) -> BuildResult:
        """Run a full build from scratch.

        Returns:
            BuildResult; diagnostics are sorted and complete
        """
        self._state = BuildState.UNLOADED
        collector = DiagnosticCollector()

        def report(error: IoError | ValidationError) -> None:
            collector.add(error.to_diagnostic())

        try:
            paths = list(self._loader.scan(on_error=report))
        except IoError as e:
            logger.error(str(e))
            report(e)
            return self._fail(collector)

        logger.info(f"Found {len(paths)} source files in {self.source_dir}")

        with self._executor() as executor:
            sources = [
                source
                for source in self._map(executor, lambda p: self._read(p, report), paths)
                if source is not None
            ]
            self._transition(BuildState.LOADED)

            documents = [
                document
                for document in self._map(
                    executor,
                    lambda s: self._validate(s, report),
                    sources,
                )
                if document is not None
            ]
            self._transition(BuildState.VALIDATED)

            documents = self._filter_drafts(documents)
            routes = self._map(executor, resolve_route, documents)

        table = build_route_table(routes)
        if not table.routes:
            collector.add(
                Diagnostic(
                    severity="error",
                    kind=EMPTY_CORPUS,
                    path=self.source_dir.as_posix(),
                    message="No valid documents found; nothing to build",
                ),
            )
            return self._fail(collector)
        self._transition(BuildState.ROUTED)

        retained = table.source_paths()
        by_path = {
            document.path: document
            for document in sorted(documents, key=lambda d: d.path.as_posix())
            if document.path in retained
        }

        tree = build_navigation(table.routes, by_path, self._sections)
        self._transition(BuildState.TREE_BUILT)

        checker = IntegrityChecker(tree, table, by_path, link_exclude=self._link_exclude)
        collector.extend(checker.check())
        self._transition(BuildState.CHECKED)

        records = export_records(tree)
        self._transition(BuildState.EXPORTED)

        diagnostics = collector.report()
        logger.info(
            f"Built {len(records)} navigation entries from {len(by_path)} documents "
            f"with {len(diagnostics)} diagnostics",
        )
        return BuildResult(
            state=self._state,
            diagnostics=diagnostics,
            documents=by_path,
            routes=table,
            tree=tree,
            records=records,
        )

    def _read(
        self,
        path: Path,
        report: Callable[[IoError | ValidationError], None],
    ) -> SourceFile | _CachedSource | None:
        """Read one source file, or its cached parse when still valid."""
        try:
            mtime = self._loader.stat(path)
            if self._cache is not None:
                entry = self._cache.get(path, mtime)
                if entry is not None:
                    return _CachedSource(path=path, entry=entry)
            return self._loader.read(path)
        except IoError as e:
            logger.warning(f"Skipping {path.as_posix()}: {e.reason}")
            report(e)
            return None

    def _validate(
        self,
        source: SourceFile | _CachedSource,
        report: Callable[[IoError | ValidationError], None],
    ) -> Document | None:
        """Validate one source into a Document; errors are reported, not raised."""
        try:
            if isinstance(source, _CachedSource):
                return build_document(source.path, source.entry.frontmatter, source.entry.body)
            data, body = split_frontmatter(source.text, source.path)
            if self._cache is not None:
                self._cache.set(source.path, data, body, source.mtime)
            return build_document(source.path, data, body)
        except ValidationError as e:
            logger.debug(f"Excluding {source.path.as_posix()}: {e.message}")
            report(e)
            return None

    def _filter_drafts(self, documents: list[Document]) -> list[Document]:
        if self._include_drafts:
            return documents
        kept = [document for document in documents if not document.draft]
        if len(kept) != len(documents):
            logger.info(f"Skipped {len(documents) - len(kept)} draft documents")
        return kept

    def _executor(self) -> ThreadPoolExecutor | _InlineExecutor:
        if self._workers <= 1:
            return _InlineExecutor()
        return ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="docnav")

    def _map(
        self,
        executor: ThreadPoolExecutor | _InlineExecutor,
        fn: Callable[[T], R],
        items: Iterable[T],
    ) -> list[R]:
        return list(executor.map(fn, items))

    def _transition(self, state: BuildState) -> None:
        logger.debug(f"Build state: {self._state.value} -> {state.value}")
        self._state = state

    def _fail(self, collector: DiagnosticCollector) -> BuildResult:
        self._transition(BuildState.FAILED)
        return BuildResult(state=self._state, diagnostics=collector.report())


class _InlineExecutor:
    """Sequential stand-in for ThreadPoolExecutor when workers == 1."""

    def __enter__(self) -> _InlineExecutor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def map(self, fn: Callable[[T], R], items: Iterable[T]) -> Iterable[R]:
        return map(fn, items)


@dataclass(frozen=True)
class _CachedSource:
    """Parsed frontmatter and body served from the document cache."""

    path: Path
    entry: CacheEntry
