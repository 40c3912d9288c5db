"""Heuristic detection of files nothing else imports."""

from __future__ import annotations

import os
import re
from pathlib import PurePosixPath
from typing import List, Optional, Sequence

from ..config import DEFAULT_ENTRY_POINTS
from ..models import CallGraph, DeadCodeEntry, FileAnalysis

DEAD_CODE_REASON = "No imports found from other files"
DEAD_CODE_CONFIDENCE = "medium"

_TEST_DIRECTORIES = {"test", "tests", "__tests__"}
_TEST_FILENAME = re.compile(r"\.(?:test|spec)\.[^./]+$")


def is_test_file(rel_path: str) -> bool:
    """True for files under a test directory or named ``*.test.<ext>`` / ``*.spec.<ext>``."""
    parts = PurePosixPath(rel_path.replace("\\", "/")).parts
    if not parts:
        return False
    if any(part in _TEST_DIRECTORIES for part in parts[:-1]):
        return True
    return bool(_TEST_FILENAME.search(parts[-1]))


def is_entry_point(path: str, entry_points: Sequence[str] = DEFAULT_ENTRY_POINTS) -> bool:
    """Compare the filename without extension against ``entry_points`` (case-sensitive)."""
    stem = os.path.splitext(os.path.basename(path))[0]
    return stem in entry_points


def detect_dead_code(
    analyses: Sequence[FileAnalysis],
    graph: CallGraph,
    *,
    root: Optional[str] = None,
    include_tests: bool = False,
    entry_points: Sequence[str] = DEFAULT_ENTRY_POINTS,
) -> List[DeadCodeEntry]:
    """Flag exporting files with no incoming edges.

    Entry points and (unless ``include_tests``) test files are never flagged.
    Files exported for plugins or loaded through computed paths will show up
    here too; the result is a list of candidates, not a verdict.
    """
    entries: List[DeadCodeEntry] = []
    for analysis in analyses:
        node = graph.get(analysis.path)
        if node is None or node.called_by:
            continue
        if not analysis.exports:
            continue
        if is_entry_point(analysis.path, entry_points):
            continue
        if not include_tests and is_test_file(_relative(analysis.path, root)):
            continue
        entries.append(
            DeadCodeEntry(
                path=analysis.path,
                reason=DEAD_CODE_REASON,
                exports=analysis.exports,
                confidence=DEAD_CODE_CONFIDENCE,
            )
        )
    return entries


def _relative(path: str, root: Optional[str]) -> str:
    if root:
        try:
            relative = os.path.relpath(path, root)
        except ValueError:
            return path
        if relative != ".." and not relative.startswith(".." + os.sep):
            return relative
    return path


__all__ = ["detect_dead_code", "is_entry_point", "is_test_file"]
