"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import pytest

from archaeologist.cli import _build_parser, main
from archaeologist.config import AnalyzerOptions
from archaeologist.models import AnalysisResult
from tests._fixtures.results import ROOT, enriched, result_for


class _StubAnalyzer:
    def __init__(self, result: Optional[AnalysisResult] = None, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.paths: List[str] = []
        self.options: List[AnalyzerOptions] = []

    def factory(self, path: str) -> "_StubAnalyzer":
        self.paths.append(path)
        return self

    def run(self, options: AnalyzerOptions) -> AnalysisResult:
        self.options.append(options)
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


def _stub() -> _StubAnalyzer:
    files = [
        enriched("src/index.js"),
        enriched("src/core/store.js", dependents=4),
        enriched("src/huge.js", complexity=21, lines=501, change_frequency=0.6),
    ]
    return _StubAnalyzer(result_for(files, dead=["src/orphan.js"]))


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "analyze"])
    assert args.verbose is True
    assert args.command == "analyze"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["map", "repo", "--verbose"])
    assert args.verbose is True
    assert args.command == "map"
    assert args.path == "repo"


def test_cli_common_flags() -> None:
    args = _build_parser().parse_args(
        ["risk", "repo", "--ignore", "vendor,tmp", "--include-tests", "--skip-cochange", "--threshold", "8"]
    )
    assert args.ignore == "vendor,tmp"
    assert args.include_tests is True
    assert args.skip_cochange is True
    assert args.threshold == 8
    assert args.verbose is False


def test_cli_rejects_unknown_format() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["onboard", "--format", "json"])
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["analyze", "--format", "markdown"])


def test_analyze_text_goes_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    stub = _stub()

    main(["analyze", "some/repo", "--ignore", "vendor", "--skip-cochange"], analyzer_factory=stub.factory)

    out = capsys.readouterr().out
    assert out.startswith("=== Repository Analysis ===")
    assert stub.paths == ["some/repo"]
    options = stub.options[0]
    assert "vendor" in options.ignore_patterns
    assert options.include_cochange is False
    assert options.include_tests_in_dead_code is False


def test_analyze_json_is_machine_readable(capsys: pytest.CaptureFixture[str]) -> None:
    main(["analyze", "--format", "json"], analyzer_factory=_stub().factory)

    payload = json.loads(capsys.readouterr().out)
    assert payload["repository"] == ROOT
    assert payload["totalFiles"] == 3
    assert payload["deadCode"][0]["path"] == f"{ROOT}/src/orphan.js"


def test_map_json_and_markdown(capsys: pytest.CaptureFixture[str]) -> None:
    main(["map", "--format", "json"], analyzer_factory=_stub().factory)
    payload = json.loads(capsys.readouterr().out)
    assert payload["categories"]["entryPoints"][0]["path"] == f"{ROOT}/src/index.js"

    main(["map"], analyzer_factory=_stub().factory)
    assert capsys.readouterr().out.startswith("# Architecture Map")


def test_report_written_to_output_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "ONBOARDING.md"

    main(["onboard", "--output", str(target)], analyzer_factory=_stub().factory)

    assert target.read_text(encoding="utf-8").startswith("# Onboarding Guide")
    assert "Report saved to" in capsys.readouterr().out


def test_risk_threshold_is_applied(capsys: pytest.CaptureFixture[str]) -> None:
    main(["risk", "--threshold", "9"], analyzer_factory=_stub().factory)

    out = capsys.readouterr().out
    assert "**Threshold:** 9" in out
    assert "| 1 | src/huge.js | 9 |" in out
    assert "src/core/store.js" not in out


def test_missing_path_exits_with_message(capsys: pytest.CaptureFixture[str]) -> None:
    stub = _StubAnalyzer(error=FileNotFoundError("Repository path does not exist: /nope"))

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", "/nope"], analyzer_factory=stub.factory)

    assert excinfo.value.code == 1
    assert "Repository path does not exist: /nope" in capsys.readouterr().err


def test_unexpected_failure_suggests_verbose(capsys: pytest.CaptureFixture[str]) -> None:
    stub = _StubAnalyzer(error=RuntimeError("boom"))

    with pytest.raises(SystemExit) as excinfo:
        main(["risk"], analyzer_factory=stub.factory)

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "repo-archaeologist risk failed: boom" in err
    assert "--verbose" in err
