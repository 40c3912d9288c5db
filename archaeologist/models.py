"""Core data models shared across archaeologist components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class FileAnalysis:
    """Structural facts extracted from a single source file."""

    path: str
    language: str
    size: int
    lines: int
    imports: Tuple[str, ...] = ()
    functions: Tuple[str, ...] = ()
    classes: Tuple[str, ...] = ()
    exports: Tuple[str, ...] = ()
    complexity: int = 1
    interfaces: Optional[Tuple[str, ...]] = None
    structs: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "path": self.path,
            "language": self.language,
            "size": self.size,
            "lines": self.lines,
            "imports": list(self.imports),
            "functions": list(self.functions),
            "classes": list(self.classes),
            "exports": list(self.exports),
            "complexity": self.complexity,
        }
        if self.interfaces is not None:
            data["interfaces"] = list(self.interfaces)
        if self.structs is not None:
            data["structs"] = list(self.structs)
        return data


@dataclass
class CallGraphNode:
    """Outgoing and incoming dependency edges for one analyzed file."""

    calls: Set[str] = field(default_factory=set)
    called_by: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, List[str]]:
        return {"calls": sorted(self.calls), "calledBy": sorted(self.called_by)}


CallGraph = Dict[str, CallGraphNode]


@dataclass(frozen=True)
class AliasTarget:
    """Absolute substitution prefix for a path alias."""

    prefix: str
    wildcard: bool


@dataclass(frozen=True)
class PathAliasRule:
    """A single `paths` mapping such as ``@/*`` -> ``<root>/src/*``."""

    pattern: str
    prefix: str
    wildcard: bool
    targets: Tuple[AliasTarget, ...]

    def matches(self, specifier: str) -> bool:
        if self.wildcard:
            return specifier.startswith(self.prefix)
        return specifier == self.pattern

    def expand(self, specifier: str) -> List[str]:
        """Return every target path for ``specifier``; empty when it does not match."""
        if not self.matches(specifier):
            return []
        suffix = specifier[len(self.prefix):] if self.wildcard else ""
        candidates: List[str] = []
        for target in self.targets:
            if target.wildcard:
                candidates.append(f"{target.prefix}{suffix}")
            else:
                candidates.append(target.prefix)
        return candidates


@dataclass(frozen=True)
class Commit:
    """A commit header parsed from the version-control log."""

    hash: str
    author: str
    date: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "hash": self.hash,
            "author": self.author,
            "date": self.date,
            "message": self.message,
        }


@dataclass
class RepositoryIndex:
    """Commit and file lookups built from a single pass over the log."""

    commits: List[Commit] = field(default_factory=list)
    commit_files: Dict[str, List[str]] = field(default_factory=dict)
    file_commits: Dict[str, List[Commit]] = field(default_factory=dict)


@dataclass(frozen=True)
class Contributor:
    author: str
    commits: int

    def to_dict(self) -> Dict[str, Any]:
        return {"author": self.author, "commits": self.commits}


@dataclass(frozen=True)
class FileOwnership:
    """Authorship summary derived from a file's history."""

    primary: str = "Unknown"
    contributors: Tuple[Contributor, ...] = ()
    total_commits: int = 0

    @classmethod
    def unknown(cls) -> "FileOwnership":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary,
            "contributors": [contributor.to_dict() for contributor in self.contributors],
            "totalCommits": self.total_commits,
        }


@dataclass(frozen=True)
class CoChange:
    """Another file that tends to change in the same commits."""

    file: str
    count: int
    correlation: float

    def to_dict(self) -> Dict[str, Any]:
        return {"file": self.file, "count": self.count, "correlation": self.correlation}


@dataclass(frozen=True)
class DeadCodeEntry:
    path: str
    reason: str
    exports: Tuple[str, ...]
    confidence: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "reason": self.reason,
            "exports": list(self.exports),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class EnrichedFile:
    """A FileAnalysis combined with history and call-graph lookups."""

    analysis: FileAnalysis
    ownership: FileOwnership = field(default_factory=FileOwnership)
    change_frequency: float = 0.0
    co_changed_files: Tuple[CoChange, ...] = ()
    call_graph_info: CallGraphNode = field(default_factory=CallGraphNode)

    @property
    def path(self) -> str:
        return self.analysis.path

    @property
    def language(self) -> str:
        return self.analysis.language

    @property
    def lines(self) -> int:
        return self.analysis.lines

    @property
    def size(self) -> int:
        return self.analysis.size

    @property
    def complexity(self) -> int:
        return self.analysis.complexity

    def to_dict(self) -> Dict[str, Any]:
        data = self.analysis.to_dict()
        data.update(
            {
                "ownership": self.ownership.to_dict(),
                "changeFrequency": self.change_frequency,
                "coChangedFiles": [item.to_dict() for item in self.co_changed_files],
                "callGraphInfo": self.call_graph_info.to_dict(),
            }
        )
        return data


@dataclass
class LanguageStats:
    count: int = 0
    total_lines: int = 0
    total_size: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"count": self.count, "totalLines": self.total_lines, "totalSize": self.total_size}


@dataclass
class ContributorSummary:
    author: str
    files_owned: int = 0
    total_commits: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "author": self.author,
            "filesOwned": self.files_owned,
            "totalCommits": self.total_commits,
        }


@dataclass
class AnalysisResult:
    """Composite output of a repository analysis run."""

    repository: str
    total_files: int
    files: List[EnrichedFile]
    call_graph: CallGraph
    dead_code: List[DeadCodeEntry]
    languages: Dict[str, LanguageStats]
    top_contributors: List[ContributorSummary]
    analyzed_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repository": self.repository,
            "totalFiles": self.total_files,
            "files": [file.to_dict() for file in self.files],
            "callGraph": {path: node.to_dict() for path, node in self.call_graph.items()},
            "deadCode": [entry.to_dict() for entry in self.dead_code],
            "languages": {name: stats.to_dict() for name, stats in self.languages.items()},
            "topContributors": [summary.to_dict() for summary in self.top_contributors],
            "analyzedAt": self.analyzed_at,
        }
