"""Read-only summaries derived from an analysis result."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .models import EnrichedFile

DEFAULT_RISK_THRESHOLD = 5

_FEATURE_EXCLUDED_SEGMENTS = {"src", "lib", "app", "components", "utils", "test"}


@dataclass
class FileCategories:
    entry_points: List[EnrichedFile] = field(default_factory=list)
    core: List[EnrichedFile] = field(default_factory=list)
    utilities: List[EnrichedFile] = field(default_factory=list)
    tests: List[EnrichedFile] = field(default_factory=list)
    config: List[EnrichedFile] = field(default_factory=list)
    documentation: List[EnrichedFile] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "entryPoints": [file.to_dict() for file in self.entry_points],
            "core": [file.to_dict() for file in self.core],
            "utilities": [file.to_dict() for file in self.utilities],
            "tests": [file.to_dict() for file in self.tests],
            "config": [file.to_dict() for file in self.config],
            "documentation": [file.to_dict() for file in self.documentation],
        }


@dataclass
class Feature:
    """Files grouped under the first meaningful directory of their path."""

    name: str
    files: List[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "fileCount": self.file_count, "files": list(self.files)}


@dataclass(frozen=True)
class RiskyFile:
    file: EnrichedFile
    score: int


def _banded(value: float, bands: Sequence[tuple]) -> int:
    for limit, points in bands:
        if value > limit:
            return points
    return 0


def calculate_risk_score(file: EnrichedFile) -> int:
    """Sum banded points for complexity, size, churn, contributors and dependents."""
    score = 0
    score += _banded(file.complexity, ((20, 3), (10, 2), (5, 1)))
    score += _banded(file.lines, ((500, 3), (300, 2), (150, 1)))
    score += _banded(file.change_frequency, ((0.5, 3), (0.2, 2), (0.1, 1)))
    score += _banded(len(file.ownership.contributors), ((10, 2), (5, 1)))
    score += _banded(len(file.call_graph_info.called_by), ((10, 3), (5, 2), (2, 1)))
    return score


def rank_risky_files(
    files: Sequence[EnrichedFile], threshold: int = DEFAULT_RISK_THRESHOLD
) -> List[RiskyFile]:
    scored = [RiskyFile(file=file, score=calculate_risk_score(file)) for file in files]
    risky = [item for item in scored if item.score >= threshold]
    risky.sort(key=lambda item: item.score, reverse=True)
    return risky


def categorize_files(files: Sequence[EnrichedFile], root: Optional[str] = None) -> FileCategories:
    """Assign every file to exactly one category, checked in a fixed order."""
    categories = FileCategories()
    for file in files:
        file_path = relative_path(file.path, root).lower()
        file_name = os.path.basename(file_path)

        if "test" in file_path or "spec" in file_path:
            categories.tests.append(file)
        elif "config" in file_name or file_name in {"package.json", "tsconfig.json"}:
            categories.config.append(file)
        elif "readme" in file_path or file_name.endswith(".md"):
            categories.documentation.append(file)
        elif any(marker in file_name for marker in ("index", "main", "app")):
            categories.entry_points.append(file)
        elif (
            "util" in file_name
            or "helper" in file_name
            or "utils" in file_path
            or "helpers" in file_path
        ):
            categories.utilities.append(file)
        elif len(file.call_graph_info.called_by) > 3:
            categories.core.append(file)
        else:
            categories.utilities.append(file)
    return categories


def identify_features(files: Sequence[EnrichedFile], root: Optional[str] = None) -> List[Feature]:
    features: Dict[str, Feature] = {}
    for file in files:
        directories = relative_path(file.path, root).replace(os.sep, "/").split("/")[:-1]
        name = next(
            (part for part in directories if part and part.lower() not in _FEATURE_EXCLUDED_SEGMENTS),
            None,
        )
        if name is None:
            continue
        features.setdefault(name, Feature(name=name)).files.append(file.path)
    return list(features.values())


def relative_path(path: str, root: Optional[str]) -> str:
    """``path`` relative to ``root`` when it lies inside it, else unchanged."""
    if not root:
        return path
    try:
        relative = os.path.relpath(path, root)
    except ValueError:
        return path
    if relative == ".." or relative.startswith(".." + os.sep):
        return path
    return relative


__all__ = [
    "DEFAULT_RISK_THRESHOLD",
    "Feature",
    "FileCategories",
    "RiskyFile",
    "calculate_risk_score",
    "categorize_files",
    "identify_features",
    "rank_risky_files",
    "relative_path",
]
