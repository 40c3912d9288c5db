"""Tests for archaeologist.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from archaeologist.config import (
    DEFAULT_IGNORE_PATTERNS,
    AnalyzerOptions,
    ArchaeologistConfig,
    ConfigError,
    get_analyzer_options,
    load_config,
    parse_ignore_patterns,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ArchaeologistConfig)
    assert config.root == tmp_path.resolve()
    assert config.ignore == []
    assert config.dead_code.include_tests is None
    assert config.dead_code.entry_points == []
    assert config.history.include_cochange is None
    assert config.apply(AnalyzerOptions()) == AnalyzerOptions()


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    (tmp_path / ".archaeologist.yml").write_text(
        """
ignore: [vendor, "*.min.js"]
dead_code:
  include_tests: true
  entry_points: [index, main, app, server]
history:
  include_cochange: false
  cochange_threshold: 0.5
  cochange_limit: 3
  concurrency: 2
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.ignore == ["vendor", "*.min.js"]
    assert config.dead_code.include_tests is True
    assert config.dead_code.entry_points == ["index", "main", "app", "server"]
    assert config.history.include_cochange is False
    assert config.history.cochange_threshold == 0.5
    assert config.history.cochange_limit == 3
    assert config.history.concurrency == 2


def test_apply_unions_ignore_patterns_and_fills_defaults(tmp_path: Path) -> None:
    (tmp_path / ".archaeologist.yml").write_text(
        "ignore: [vendor, dist]\nhistory:\n  concurrency: 0\n  cochange_threshold: 0.4\n",
        encoding="utf-8",
    )

    options = load_config(tmp_path).apply(AnalyzerOptions())

    assert options.ignore_patterns == DEFAULT_IGNORE_PATTERNS + ("vendor",)
    assert options.concurrency == 1
    assert options.cochange_threshold == 0.4


def test_apply_keeps_values_the_caller_changed(tmp_path: Path) -> None:
    (tmp_path / ".archaeologist.yml").write_text(
        "dead_code:\n  include_tests: false\nhistory:\n  include_cochange: true\n",
        encoding="utf-8",
    )
    caller = get_analyzer_options(include_tests=True, skip_cochange=True)

    options = load_config(tmp_path).apply(caller)

    assert options.include_tests_in_dead_code is True
    assert options.include_cochange is False


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    (tmp_path / ".archaeologist.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_wraps_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".archaeologist.yml").write_text("ignore: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_parse_ignore_patterns_merges_with_defaults() -> None:
    assert parse_ignore_patterns(None) == DEFAULT_IGNORE_PATTERNS
    assert parse_ignore_patterns("") == DEFAULT_IGNORE_PATTERNS
    assert parse_ignore_patterns("vendor, ,tmp,build") == DEFAULT_IGNORE_PATTERNS + ("vendor", "tmp")
    assert parse_ignore_patterns(["generated"]) == DEFAULT_IGNORE_PATTERNS + ("generated",)


def test_get_analyzer_options_flags() -> None:
    options = get_analyzer_options(ignore="vendor", include_tests=True, skip_cochange=True, concurrency=0)

    assert "vendor" in options.ignore_patterns
    assert options.include_tests_in_dead_code is True
    assert options.include_cochange is False
    assert options.concurrency == 1
    assert get_analyzer_options(include_cochange=False).include_cochange is False
    assert get_analyzer_options().include_cochange is True
