"""Import specifier resolution."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .aliases import AliasConfig, load_alias_config
from ..models import PathAliasRule

RESOLVABLE_EXTENSIONS: Tuple[str, ...] = (
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".ts",
    ".tsx",
    ".mts",
    ".cts",
    ".py",
    ".java",
    ".go",
)

_PYTHON_RELATIVE = re.compile(r"^(\.+)([\w.]*)$")


def normalize_python_specifier(specifier: str) -> str:
    """Translate ``..pkg.mod`` style relative imports into ``../pkg/mod`` paths."""
    match = _PYTHON_RELATIVE.match(specifier)
    if match is None:
        return specifier
    dots, module = match.groups()
    prefix = "./" if len(dots) == 1 else "../" * (len(dots) - 1)
    if not module:
        return prefix.rstrip("/") or "."
    return prefix + module.replace(".", "/")


class ImportResolver:
    """Maps raw import specifiers to files on disk.

    Relative specifiers resolve against the importing file's directory.
    Others are tried against the alias rules, then against the resolution
    root when they look like project paths. Anything left over is treated as
    an external package and resolves to ``None``.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        rules: Sequence[PathAliasRule] = (),
        exists: Callable[[str], bool] = os.path.isfile,
    ) -> None:
        self.base_url = base_url
        self.rules = tuple(rules)
        self._exists = exists

    @classmethod
    def for_root(cls, root: Path) -> "ImportResolver":
        config: AliasConfig = load_alias_config(root)
        return cls(base_url=config.base_url, rules=config.rules)

    def resolve(self, from_file: str, specifier: str) -> Optional[str]:
        """Return the normalised path of the first existing candidate, or None."""
        if not specifier:
            return None
        if from_file.endswith(".py"):
            specifier = normalize_python_specifier(specifier)

        for base in self._base_candidates(from_file, specifier):
            for candidate in expand_candidates(base):
                if self._exists(candidate):
                    return candidate
        return None

    def _base_candidates(self, from_file: str, specifier: str) -> List[str]:
        if specifier.startswith("."):
            return [os.path.join(os.path.dirname(from_file), specifier)]

        for rule in self.rules:
            if rule.matches(specifier):
                return rule.expand(specifier)

        if self.base_url and _looks_like_project_path(specifier):
            return [os.path.join(self.base_url, specifier)]
        return []


def expand_candidates(base: str) -> Iterator[str]:
    """Yield ``base``, ``base`` plus each extension, then ``base/index.<ext>``."""
    normalized = os.path.normpath(base)
    yield normalized
    if not os.path.splitext(normalized)[1]:
        for extension in RESOLVABLE_EXTENSIONS:
            yield normalized + extension
    for extension in RESOLVABLE_EXTENSIONS:
        yield os.path.join(normalized, f"index{extension}")


def _looks_like_project_path(specifier: str) -> bool:
    if "/" in specifier or specifier.startswith(("@", "~")):
        return True
    return bool(os.path.splitext(specifier)[1])


__all__ = [
    "ImportResolver",
    "RESOLVABLE_EXTENSIONS",
    "expand_candidates",
    "normalize_python_specifier",
]
