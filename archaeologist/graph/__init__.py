"""Import resolution, dependency graph and dead-code detection."""

from __future__ import annotations

from .aliases import AliasConfig, load_alias_config
from .call_graph import build_call_graph
from .dead_code import detect_dead_code, is_entry_point, is_test_file
from .resolver import ImportResolver, normalize_python_specifier

__all__ = [
    "AliasConfig",
    "ImportResolver",
    "build_call_graph",
    "detect_dead_code",
    "is_entry_point",
    "is_test_file",
    "load_alias_config",
    "normalize_python_specifier",
]
