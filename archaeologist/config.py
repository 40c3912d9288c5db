"""Configuration loading for archaeologist (.archaeologist.yml) and analyzer options."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

CONFIG_FILENAME = ".archaeologist.yml"

DEFAULT_IGNORE_PATTERNS: Tuple[str, ...] = ("node_modules", ".git", "dist", "build", "coverage")
DEFAULT_ENTRY_POINTS: Tuple[str, ...] = ("index", "main", "app")
DEFAULT_COCHANGE_THRESHOLD = 0.3
DEFAULT_COCHANGE_LIMIT = 5
DEFAULT_CONCURRENCY = 5


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class AnalyzerOptions:
    """Effective settings for one repository analysis run."""

    ignore_patterns: Tuple[str, ...] = DEFAULT_IGNORE_PATTERNS
    include_tests_in_dead_code: bool = False
    include_cochange: bool = True
    entry_points: Tuple[str, ...] = DEFAULT_ENTRY_POINTS
    cochange_threshold: float = DEFAULT_COCHANGE_THRESHOLD
    cochange_limit: int = DEFAULT_COCHANGE_LIMIT
    concurrency: int = DEFAULT_CONCURRENCY


@dataclass
class DeadCodeConfig:
    include_tests: Optional[bool] = None
    entry_points: List[str] = field(default_factory=list)


@dataclass
class HistoryConfig:
    include_cochange: Optional[bool] = None
    cochange_threshold: Optional[float] = None
    cochange_limit: Optional[int] = None
    concurrency: Optional[int] = None


@dataclass
class ArchaeologistConfig:
    """Represents the settings defined in .archaeologist.yml."""

    root: Path
    ignore: List[str] = field(default_factory=list)
    dead_code: DeadCodeConfig = field(default_factory=DeadCodeConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)

    def apply(self, options: AnalyzerOptions) -> AnalyzerOptions:
        """Fill ``options`` fields still at their defaults from the file.

        Values the caller changed win; ignore patterns are unioned.
        """
        defaults = AnalyzerOptions()
        file_values: Dict[str, Any] = {
            "include_tests_in_dead_code": self.dead_code.include_tests,
            "entry_points": tuple(self.dead_code.entry_points) or None,
            "include_cochange": self.history.include_cochange,
            "cochange_threshold": self.history.cochange_threshold,
            "cochange_limit": _at_least(0, self.history.cochange_limit),
            "concurrency": _at_least(1, self.history.concurrency),
        }
        updates: Dict[str, Any] = {}
        if self.ignore:
            updates["ignore_patterns"] = _merge_unique(options.ignore_patterns, self.ignore)
        for name, value in file_values.items():
            if value is not None and getattr(options, name) == getattr(defaults, name):
                updates[name] = value
        return replace(options, **updates) if updates else options


def parse_ignore_patterns(ignore_option: str | Sequence[str] | None) -> Tuple[str, ...]:
    """Merge user supplied ignore patterns with the defaults."""
    if not ignore_option:
        return DEFAULT_IGNORE_PATTERNS
    if isinstance(ignore_option, str):
        raw = ignore_option.split(",")
    else:
        raw = list(ignore_option)
    additional = [str(pattern).strip() for pattern in raw]
    return _merge_unique(DEFAULT_IGNORE_PATTERNS, [pattern for pattern in additional if pattern])


def get_analyzer_options(
    *,
    ignore: str | Sequence[str] | None = None,
    include_tests: bool = False,
    include_cochange: Optional[bool] = None,
    skip_cochange: bool = False,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> AnalyzerOptions:
    """Build AnalyzerOptions from CLI-style arguments."""
    cochange = (not skip_cochange) if include_cochange is None else include_cochange
    return AnalyzerOptions(
        ignore_patterns=parse_ignore_patterns(ignore),
        include_tests_in_dead_code=bool(include_tests),
        include_cochange=cochange,
        concurrency=max(1, concurrency),
    )


def load_config(config_path: Path) -> ArchaeologistConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ArchaeologistConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    dead_code_data = _as_dict(data.get("dead_code"))
    dead_code = DeadCodeConfig(
        include_tests=_as_bool(dead_code_data.get("include_tests")),
        entry_points=_as_str_list(dead_code_data.get("entry_points")),
    )

    history_data = _as_dict(data.get("history"))
    history = HistoryConfig(
        include_cochange=_as_bool(history_data.get("include_cochange")),
        cochange_threshold=_as_float(history_data.get("cochange_threshold")),
        cochange_limit=_as_int(history_data.get("cochange_limit")),
        concurrency=_as_int(history_data.get("concurrency")),
    )

    return ArchaeologistConfig(
        root=root,
        ignore=_as_str_list(data.get("ignore")),
        dead_code=dead_code,
        history=history,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _at_least(floor: int, value: Optional[int]) -> Optional[int]:
    return max(floor, value) if value is not None else None


def _merge_unique(base: Sequence[str], extra: Sequence[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys([*base, *extra]))


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AnalyzerOptions",
    "ArchaeologistConfig",
    "ConfigError",
    "DEFAULT_IGNORE_PATTERNS",
    "get_analyzer_options",
    "load_config",
    "parse_ignore_patterns",
]
