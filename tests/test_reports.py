"""Tests for report renderers."""

from __future__ import annotations

import json

from archaeologist.insights import categorize_files, identify_features, rank_risky_files
from archaeologist.reports import (
    build_map_payload,
    render_analysis_text,
    render_architecture_map,
    render_onboarding_guide,
    render_risk_report,
    to_json,
)
from tests._fixtures.results import ROOT, enriched, result_for

FOOTER = "*This report was automatically generated by Repo Archaeologist.*\n"


def _sample():  # type: ignore[no-untyped-def]
    files = [
        enriched("src/index.js", lines=40, functions=("start",)),
        enriched("src/core/store.js", lines=60, dependents=4, complexity=12),
        enriched("src/auth/login.js", lines=20),
        enriched("tests/store.test.js", lines=30),
        enriched("babel.config.js", lines=5),
        enriched("tools/build.py", lines=50, language="python"),
    ]
    return result_for(files, dead=[f"src/unused{index}.js" for index in range(12)])


def test_analysis_text_lists_overview_and_truncates_dead_code() -> None:
    text = render_analysis_text(_sample())

    assert text.startswith("=== Repository Analysis ===\n")
    assert f"Repository: {ROOT}" in text
    assert "  Total Files: 6" in text
    assert "  Dead Code Files: 12" in text
    assert "  javascript: 5 files, 155 lines" in text
    assert "  python: 1 files, 50 lines" in text
    assert "  1. dev0" in text
    assert "  ! src/unused0.js" in text
    assert "  ! src/unused10.js" not in text
    assert "  ... and 2 more" in text


def test_architecture_map_sections() -> None:
    result = _sample()
    categories = categorize_files(result.files, root=ROOT)
    features = identify_features(result.files, root=ROOT)

    text = render_architecture_map(result, categories, features, generated_at="2024-01-01T00:00:00.000Z")

    assert text.startswith("# Architecture Map\n")
    assert "**Generated:** 2024-01-01T00:00:00.000Z" in text
    assert "- **Languages:** javascript, python" in text
    assert "### Entry Points (1)" in text
    assert "- **src/index.js**" in text
    assert "### Core Files (1)" in text
    assert "- **src/core/store.js** (4 dependencies)" in text
    assert "### auth" in text
    assert "1. **src/core/store.js** (4 dependencies)" in text


def test_map_payload_is_json_serialisable() -> None:
    result = _sample()
    categories = categorize_files(result.files, root=ROOT)
    payload = build_map_payload(result, categories, identify_features(result.files, root=ROOT), "now")

    decoded = json.loads(to_json(payload))

    assert decoded["repository"] == ROOT
    assert decoded["generatedAt"] == "now"
    assert set(decoded["categories"]) == {"entryPoints", "core", "utilities", "tests", "config", "documentation"}
    assert decoded["categories"]["core"][0]["path"] == f"{ROOT}/src/core/store.js"
    assert decoded["callGraph"][f"{ROOT}/src/core/store.js"]["calledBy"]


def test_onboarding_guide_sections() -> None:
    result = _sample()
    categories = categorize_files(result.files, root=ROOT)

    text = render_onboarding_guide(result, categories, identify_features(result.files, root=ROOT))

    assert text.startswith("# Onboarding Guide\n")
    assert "  - javascript: 5 files (75.6% of codebase)" in text
    assert "1. **src/index.js**" in text
    assert "   - Complexity: Low" in text
    assert "1. **src/core/store.js** (used by 4 files)" in text
    assert "This repository has 1 test files." in text
    assert "- tests" in text
    assert "- babel.config.js" in text
    assert "There are 12 files that may be unused (dead code)." in text
    assert text.endswith(FOOTER)


def test_onboarding_guide_without_tests_or_config() -> None:
    result = result_for([enriched("src/a.js")])
    categories = categorize_files(result.files, root=ROOT)

    text = render_onboarding_guide(result, categories, [])

    assert "No test files detected in standard locations." in text
    assert "No configuration files detected." in text
    assert "Maintenance Notes" not in text


def test_risk_report_table_and_recommendations() -> None:
    files = [
        enriched("src/huge.js", complexity=21, lines=501, change_frequency=0.6, dependents=11),
        enriched("src/medium.js", complexity=11, lines=301, dependents=3),
    ]
    risky = rank_risky_files(files, threshold=5)

    text = render_risk_report(ROOT, risky, 5, generated_at="today")

    assert "**Threshold:** 5" in text
    assert "Found 2 high-risk files." in text
    assert "Average Risk Score: 8.5" in text
    assert "| 1 | src/huge.js | 12 | 501 | 21 | 11 |" in text
    assert "| 2 | src/medium.js | 5 | 301 | 11 | 3 |" in text
    assert "**1 critical files** need immediate attention:" in text
    assert "- src/huge.js (Score: 12)" in text
    assert text.endswith(FOOTER)


def test_risk_report_without_risky_files() -> None:
    text = render_risk_report(ROOT, [], 5, generated_at="today")

    assert text.rstrip().endswith("No high-risk files found!")
    assert "## Summary" not in text
