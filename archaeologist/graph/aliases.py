"""Path-alias configuration (``tsconfig.json`` / ``jsconfig.json``)."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from ..logging import get_logger
from ..models import AliasTarget, PathAliasRule

logger = get_logger("graph.aliases")

CONFIG_CANDIDATES: Tuple[str, ...] = ("tsconfig.json", "jsconfig.json")

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


@dataclass(frozen=True)
class AliasConfig:
    """Resolution root and alias rules for one repository."""

    base_url: Optional[str] = None
    rules: Tuple[PathAliasRule, ...] = ()


def load_alias_config(root: Path) -> AliasConfig:
    """Load alias settings from the first project config found under ``root``.

    ``extends`` references are expanded depth-first and applied from the
    furthest ancestor to the project file, so later definitions override
    earlier ones. A malformed project file yields an empty configuration.
    """
    config_path = next(
        (root / name for name in CONFIG_CANDIDATES if (root / name).is_file()),
        None,
    )
    if config_path is None:
        return AliasConfig()

    if _read_json(config_path) is None:
        logger.debug("Ignoring malformed %s", config_path.name)
        return AliasConfig()

    chain = _linearize(config_path.resolve(), root, set())

    base_url: Optional[str] = None
    paths: Dict[str, Tuple[List[str], str]] = {}
    for path, data in chain:
        options = data.get("compilerOptions")
        if not isinstance(options, dict):
            continue
        config_dir = str(path.parent)
        raw_base = options.get("baseUrl")
        if isinstance(raw_base, str):
            base_url = os.path.normpath(os.path.join(config_dir, raw_base))
        raw_paths = options.get("paths")
        if isinstance(raw_paths, dict):
            for pattern, targets in raw_paths.items():
                if isinstance(targets, str):
                    targets = [targets]
                if not isinstance(targets, list):
                    continue
                values = [target for target in targets if isinstance(target, str)]
                if values:
                    paths[pattern] = (values, config_dir)

    rules = [
        _build_rule(pattern, targets, base_url or defining_dir)
        for pattern, (targets, defining_dir) in paths.items()
    ]
    rules.sort(key=lambda rule: (-len(rule.prefix), rule.wildcard))
    return AliasConfig(base_url=base_url, rules=tuple(rules))


def _build_rule(pattern: str, targets: List[str], anchor: str) -> PathAliasRule:
    wildcard = "*" in pattern
    prefix = pattern.split("*", 1)[0] if wildcard else pattern
    resolved: List[AliasTarget] = []
    for target in targets:
        target_wildcard = "*" in target
        target_prefix = target.split("*", 1)[0] if target_wildcard else target
        absolute = os.path.join(anchor, target_prefix)
        if target_wildcard:
            # Not normalised yet: "src/*" must keep its trailing separator.
            resolved.append(AliasTarget(prefix=absolute, wildcard=True))
        else:
            resolved.append(AliasTarget(prefix=os.path.normpath(absolute), wildcard=False))
    return PathAliasRule(pattern=pattern, prefix=prefix, wildcard=wildcard, targets=tuple(resolved))


def _linearize(path: Path, root: Path, visited: Set[Path]) -> List[Tuple[Path, Dict[str, Any]]]:
    if path in visited:
        logger.debug("Skipping repeated config in extends chain: %s", path)
        return []
    visited.add(path)

    data = _read_json(path)
    if data is None:
        logger.debug("Skipping unreadable config %s", path)
        return []

    chain: List[Tuple[Path, Dict[str, Any]]] = []
    extends = data.get("extends")
    parents = [extends] if isinstance(extends, str) else extends if isinstance(extends, list) else []
    for parent in parents:
        if not isinstance(parent, str):
            continue
        parent_path = _resolve_extends(parent, path.parent, root)
        if parent_path is None:
            logger.debug("Cannot resolve extends %r from %s", parent, path)
            continue
        chain.extend(_linearize(parent_path, root, visited))
    chain.append((path, data))
    return chain


def _resolve_extends(reference: str, config_dir: Path, root: Path) -> Optional[Path]:
    if reference.startswith(".") or os.path.isabs(reference):
        base = config_dir / reference
    else:
        base = root / "node_modules" / reference

    candidates = [base]
    if base.suffix != ".json":
        candidates.append(base.with_name(f"{base.name}.json"))
    candidates.append(base / "tsconfig.json")
    for candidate in candidates:
        if candidate.is_file():
            return candidate.resolve()
    return None


def _read_json(path: Path) -> Optional[Dict[str, Any]]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    cleaned = _TRAILING_COMMA.sub(r"\1", strip_json_comments(text))
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of string literals."""
    result: List[str] = []
    index = 0
    length = len(text)
    in_string = False
    while index < length:
        char = text[index]
        if in_string:
            result.append(char)
            if char == "\\" and index + 1 < length:
                result.append(text[index + 1])
                index += 2
                continue
            if char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            result.append(char)
            index += 1
        elif text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
        elif text.startswith("/*", index):
            end = text.find("*/", index + 2)
            index = length if end == -1 else end + 2
        else:
            result.append(char)
            index += 1
    return "".join(result)


__all__ = ["AliasConfig", "CONFIG_CANDIDATES", "load_alias_config", "strip_json_comments"]
