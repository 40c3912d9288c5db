"""Repository walking utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence, Set

from .logging import get_logger

logger = get_logger("scanner")


@dataclass(frozen=True)
class IgnoreRule:
    """Case-insensitive ignore pattern matched per path segment."""

    pattern: str

    def matches(self, rel_path: str) -> bool:
        if not self.pattern:
            return False
        target = rel_path.lower()
        if fnmatchcase(target, self.pattern):
            return True
        if "/" in self.pattern:
            return target.startswith(f"{self.pattern.rstrip('/')}/")
        return any(fnmatchcase(part, self.pattern) for part in target.split("/"))


def build_ignore_rules(patterns: Sequence[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for pattern in patterns:
        normalized = pattern.strip().replace("\\", "/").strip("/").lower()
        if normalized:
            rules.append(IgnoreRule(pattern=normalized))
    return rules


def should_ignore(rel_path: str, rules: Sequence[IgnoreRule]) -> bool:
    return any(rule.matches(rel_path) for rule in rules)


class RepoScanner:
    """Walks a directory tree yielding candidate source files."""

    def iter_files(self, root: Path, ignore_patterns: Sequence[str]) -> Iterator[Path]:
        """Yield regular files under ``root`` that survive the ignore rules.

        Symlinked directories are followed only when they lead outside
        ``root``, so files keep the paths git tracks. Each canonical directory
        is visited at most once so cycles terminate. Broken links and unreadable directories are
        skipped.
        """
        rules = build_ignore_rules(ignore_patterns)
        visited: Set[str] = set()
        try:
            root_real = os.path.realpath(root)
        except OSError:
            return
        visited.add(root_real)

        for dirpath, dirnames, filenames in os.walk(root, followlinks=True, onerror=self._on_error):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            # Real directories claim their canonical path before any link does.
            for name in sorted(dirnames, key=lambda item: (os.path.islink(current_dir / item), item)):
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if should_ignore(rel_path, rules):
                    continue
                candidate = current_dir / name
                try:
                    real = os.path.realpath(candidate)
                except OSError:
                    continue
                if os.path.islink(candidate) and _is_within(real, root_real):
                    logger.debug("Skipping symlink %s into the analysed tree", rel_path)
                    continue
                if real in visited:
                    logger.debug("Skipping already visited directory %s", rel_path)
                    continue
                visited.add(real)
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if should_ignore(rel_path, rules):
                    continue
                path = current_dir / filename
                # is_file() follows symlinks; broken links report False.
                if not path.is_file():
                    continue
                yield path

    @staticmethod
    def _on_error(error: OSError) -> None:
        logger.debug("Skipping unreadable path %s: %s", error.filename, error)


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


__all__ = ["IgnoreRule", "RepoScanner", "build_ignore_rules", "should_ignore"]
