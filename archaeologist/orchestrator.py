"""Repository analysis pipeline."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Sequence, TypeVar

from .analyzers import SourceAnalyzer
from .config import AnalyzerOptions, ArchaeologistConfig, ConfigError, load_config
from .git.history import GitHistory
from .graph import ImportResolver, build_call_graph, detect_dead_code
from .logging import get_logger
from .models import (
    AnalysisResult,
    CallGraph,
    CallGraphNode,
    ContributorSummary,
    EnrichedFile,
    FileAnalysis,
    LanguageStats,
    utc_timestamp,
)
from .scanner import RepoScanner

TOP_CONTRIBUTORS = 10

logger = get_logger("orchestrator")

T = TypeVar("T")
R = TypeVar("R")


class RepositoryAnalyzer:
    """Runs static analysis, graph construction and history enrichment for a root."""

    def __init__(
        self,
        repo_path: str | Path,
        *,
        history: GitHistory | None = None,
        source_analyzer: SourceAnalyzer | None = None,
        scanner: RepoScanner | None = None,
        resolver: ImportResolver | None = None,
    ) -> None:
        self.repo_path = Path(repo_path).expanduser().resolve()
        self.history = history or GitHistory(self.repo_path)
        self.source_analyzer = source_analyzer or SourceAnalyzer()
        self.scanner = scanner or RepoScanner()
        self._resolver = resolver
        self.logger = logger

    def run(self, options: AnalyzerOptions | None = None) -> AnalysisResult:
        """Synchronous wrapper around :meth:`analyze`."""
        return asyncio.run(self.analyze(options))

    async def analyze(self, options: AnalyzerOptions | None = None) -> AnalysisResult:
        root = self.repo_path
        if not root.exists():
            raise FileNotFoundError(f"Repository path does not exist: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        options = self._load_config(root).apply(options or AnalyzerOptions())
        self.logger.info("Analyzing %s", root)

        analyses = self.analyze_directory(root, options.ignore_patterns)
        self.logger.info("Analyzed %d source files", len(analyses))

        resolver = self._resolver or ImportResolver.for_root(root)
        call_graph = build_call_graph(analyses, resolver)
        dead_code = detect_dead_code(
            analyses,
            call_graph,
            root=str(root),
            include_tests=options.include_tests_in_dead_code,
            entry_points=options.entry_points,
        )

        async def _enrich(analysis: FileAnalysis) -> EnrichedFile:
            return await self._enrich_file(analysis, call_graph, options)

        files = await process_in_batches(analyses, _enrich, options.concurrency)

        return AnalysisResult(
            repository=str(root),
            total_files=len(files),
            files=files,
            call_graph=call_graph,
            dead_code=dead_code,
            languages=aggregate_languages(files),
            top_contributors=aggregate_contributors(files),
            analyzed_at=utc_timestamp(),
        )

    def analyze_directory(self, root: Path, ignore_patterns: Sequence[str]) -> List[FileAnalysis]:
        analyses: List[FileAnalysis] = []
        for path in self.scanner.iter_files(root, ignore_patterns):
            analysis = self.source_analyzer.analyze_file(path)
            if analysis is not None:
                analyses.append(analysis)
        return analyses

    async def _enrich_file(
        self,
        analysis: FileAnalysis,
        call_graph: CallGraph,
        options: AnalyzerOptions,
    ) -> EnrichedFile:
        ownership = await self.history.get_file_ownership(analysis.path)
        change_frequency = await self.history.get_change_frequency(analysis.path)
        co_changed = []
        if options.include_cochange:
            related = await self.history.get_files_changed_together(
                analysis.path, options.cochange_threshold
            )
            co_changed = related[: options.cochange_limit]
        return EnrichedFile(
            analysis=analysis,
            ownership=ownership,
            change_frequency=change_frequency,
            co_changed_files=tuple(co_changed),
            call_graph_info=call_graph.get(analysis.path, CallGraphNode()),
        )

    def _load_config(self, root: Path) -> ArchaeologistConfig:
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring repository configuration: %s", exc)
            return ArchaeologistConfig(root=root)


async def process_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int,
) -> List[R]:
    """Run ``worker`` over ``items`` with at most ``limit`` calls in flight.

    Batches run one after another; results keep the order of ``items``.
    """
    size = max(1, limit)
    results: List[R] = []
    for start in range(0, len(items), size):
        batch = items[start : start + size]
        logger.debug("Enriching files %d-%d of %d", start + 1, start + len(batch), len(items))
        results.extend(await asyncio.gather(*(worker(item) for item in batch)))
    return results


def aggregate_languages(files: Sequence[EnrichedFile]) -> Dict[str, LanguageStats]:
    languages: Dict[str, LanguageStats] = {}
    for file in files:
        stats = languages.setdefault(file.language, LanguageStats())
        stats.count += 1
        stats.total_lines += file.lines
        stats.total_size += file.size
    return languages


def aggregate_contributors(
    files: Sequence[EnrichedFile], limit: int = TOP_CONTRIBUTORS
) -> List[ContributorSummary]:
    """Sum per-author commits across files and count the files each author owns."""
    summaries: Dict[str, ContributorSummary] = {}
    for file in files:
        for contributor in file.ownership.contributors:
            summary = summaries.setdefault(contributor.author, ContributorSummary(contributor.author))
            summary.total_commits += contributor.commits
        primary = file.ownership.primary
        if primary and primary != "Unknown":
            summaries.setdefault(primary, ContributorSummary(primary)).files_owned += 1
    ranked = sorted(summaries.values(), key=lambda summary: summary.total_commits, reverse=True)
    return ranked[:limit]


__all__ = [
    "RepositoryAnalyzer",
    "aggregate_contributors",
    "aggregate_languages",
    "process_in_batches",
]
