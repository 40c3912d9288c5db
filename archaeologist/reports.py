"""Text, Markdown and JSON renderings of analysis results.

The Markdown documents are Jinja templates under ``templates/``; this module
prepares plain view dictionaries for them.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from .insights import Feature, FileCategories, RiskyFile, relative_path
from .models import AnalysisResult, EnrichedFile, utc_timestamp

TEMPLATES_DIR = Path(__file__).with_name("templates")

FOOTER = "*This report was automatically generated by Repo Archaeologist.*"

RISK_FACTORS = (
    ("Complexity", "High cyclomatic complexity increases risk"),
    ("Size", "Larger files are harder to refactor"),
    ("Change Frequency", "Files that change often are riskier"),
    ("Contributors", "Multiple contributors indicate complexity"),
    ("Dependencies", "Files with many dependents are critical"),
)

CRITICAL_RISK_SCORE = 10


@lru_cache(maxsize=1)
def _environment() -> Environment:
    loader = FileSystemLoader(str(TEMPLATES_DIR))
    return Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def _render(template_name: str, **context: Any) -> str:
    return _environment().get_template(template_name).render(footer=FOOTER, **context)


def to_json(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, indent=2)


def _dependents(file: EnrichedFile) -> int:
    return len(file.call_graph_info.called_by)


def _complexity_label(complexity: int) -> str:
    if complexity > 10:
        return "High"
    if complexity > 5:
        return "Medium"
    return "Low"


def _file_view(file: EnrichedFile, root: str) -> Dict[str, Any]:
    return {
        "path": relative_path(file.path, root),
        "language": file.language,
        "lines": file.lines,
        "complexity": file.complexity,
        "complexity_label": _complexity_label(file.complexity),
        "owner": file.ownership.primary,
        "dependents": _dependents(file),
        "functions": len(file.analysis.functions),
        "classes": len(file.analysis.classes),
    }


def _feature_view(feature: Feature, root: str) -> Dict[str, Any]:
    return {
        "name": feature.name,
        "file_count": feature.file_count,
        "files": [relative_path(path, root) for path in feature.files],
    }


# ----------------------------------------------------------------------
# analyze


def render_analysis_text(result: AnalysisResult, *, dead_code_limit: int = 10) -> str:
    lines: List[str] = [
        "=== Repository Analysis ===",
        f"Repository: {result.repository}",
        f"Analyzed at: {result.analyzed_at}",
        "",
        "Overview:",
        f"  Total Files: {result.total_files}",
        f"  Dead Code Files: {len(result.dead_code)}",
        "",
        "Languages:",
    ]
    for language, stats in result.languages.items():
        lines.append(f"  {language}: {stats.count} files, {stats.total_lines} lines")
    lines.extend(["", "Top Contributors:"])
    for position, contributor in enumerate(result.top_contributors[:5], start=1):
        lines.append(f"  {position}. {contributor.author}")
        lines.append(
            f"     Files: {contributor.files_owned}, Commits: {contributor.total_commits}"
        )

    if result.dead_code:
        lines.extend(["", "Potential Dead Code:"])
        for entry in result.dead_code[:dead_code_limit]:
            lines.append(f"  ! {relative_path(entry.path, result.repository)}")
            lines.append(f"     {entry.reason}")
        remaining = len(result.dead_code) - dead_code_limit
        if remaining > 0:
            lines.append(f"  ... and {remaining} more")
    return "\n".join(lines) + "\n"


# ----------------------------------------------------------------------
# map


def build_map_payload(
    result: AnalysisResult,
    categories: FileCategories,
    features: Sequence[Feature],
    generated_at: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "repository": result.repository,
        "categories": categories.to_dict(),
        "features": [feature.to_dict() for feature in features],
        "callGraph": {path: node.to_dict() for path, node in result.call_graph.items()},
        "generatedAt": generated_at or utc_timestamp(),
    }


def render_architecture_map(
    result: AnalysisResult,
    categories: FileCategories,
    features: Sequence[Feature],
    generated_at: Optional[str] = None,
) -> str:
    root = result.repository
    depended_upon = sorted(
        (file for file in result.files if _dependents(file) > 0),
        key=_dependents,
        reverse=True,
    )[:10]
    return _render(
        "architecture_map.md.j2",
        repository=root,
        generated_at=generated_at or utc_timestamp(),
        total_files=result.total_files,
        languages=list(result.languages),
        dead_code_count=len(result.dead_code),
        entry_points=[_file_view(file, root) for file in categories.entry_points],
        core=[_file_view(file, root) for file in categories.core],
        features=[_feature_view(feature, root) for feature in features],
        key_dependencies=[_file_view(file, root) for file in depended_upon],
    )


# ----------------------------------------------------------------------
# onboard


def render_onboarding_guide(
    result: AnalysisResult,
    categories: FileCategories,
    features: Sequence[Feature],
) -> str:
    root = result.repository
    total_lines = sum(stats.total_lines for stats in result.languages.values())
    languages = [
        {
            "name": name,
            "count": stats.count,
            "share": (stats.total_lines / total_lines * 100) if total_lines else 0.0,
        }
        for name, stats in result.languages.items()
    ]
    test_directories = list(
        dict.fromkeys(os.path.dirname(relative_path(file.path, root)) or "." for file in categories.tests)
    )
    return _render(
        "onboarding.md.j2",
        repository=root,
        generated_at=result.analyzed_at,
        total_files=result.total_files,
        languages=languages,
        entry_points=[_file_view(file, root) for file in categories.entry_points],
        core=[_file_view(file, root) for file in categories.core],
        features=[_feature_view(feature, root) for feature in features],
        contributors=result.top_contributors,
        test_count=len(categories.tests),
        test_directories=test_directories,
        config_files=[relative_path(file.path, root) for file in categories.config],
        dead_code_count=len(result.dead_code),
    )


# ----------------------------------------------------------------------
# risk


def render_risk_report(
    repository: str,
    risky: Sequence[RiskyFile],
    threshold: int,
    generated_at: Optional[str] = None,
) -> str:
    rows = [dict(_file_view(item.file, repository), score=item.score) for item in risky]
    average = sum(item.score for item in risky) / len(risky) if risky else 0.0
    return _render(
        "risk_report.md.j2",
        repository=repository,
        threshold=threshold,
        generated_at=generated_at or utc_timestamp(),
        risky=rows,
        average=average,
        factors=RISK_FACTORS,
        critical=[row for row in rows if row["score"] >= CRITICAL_RISK_SCORE],
    )


__all__ = [
    "build_map_payload",
    "render_analysis_text",
    "render_architecture_map",
    "render_onboarding_guide",
    "render_risk_report",
    "to_json",
]
