"""Commit-history mining backed by a single ``git log`` pass."""

from __future__ import annotations

import asyncio
import os
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..logging import get_logger
from ..models import CoChange, Commit, Contributor, FileOwnership, RepositoryIndex

logger = get_logger("git.history")

LOG_FORMAT = "--pretty=format:%H%x09%an%x09%aI%x09%s"

_COMMIT_HASH = re.compile(r"^[0-9a-f]{7,40}$", re.IGNORECASE)


class NotARepositoryError(RuntimeError):
    """Raised when the analysed root is not inside a git work tree."""


class GitCommandError(RuntimeError):
    """A git invocation exited with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(args)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else f"exit status {returncode}"
        super().__init__(f"{' '.join(self.argv)}: {detail}")


def parse_repository_log(raw_log: str, prefix: str = "") -> RepositoryIndex:
    """Parse ``git log --name-only`` output into a RepositoryIndex.

    Header lines are ``hash<TAB>author<TAB>date<TAB>subject``; every other
    non-empty line names a file touched by the preceding commit. ``prefix``
    is the analysed directory relative to the work-tree top: file lines
    outside it are dropped and the rest are made relative to it.
    """
    index = RepositoryIndex()
    current: Optional[Commit] = None
    current_files: List[str] = []

    for line in raw_log.split("\n"):
        if not line:
            continue
        parts = line.split("\t")
        if len(parts) >= 4 and _COMMIT_HASH.match(parts[0]):
            current = Commit(hash=parts[0], author=parts[1], date=parts[2], message="\t".join(parts[3:]))
            current_files = index.commit_files.setdefault(current.hash, [])
            index.commits.append(current)
            continue
        if current is None:
            continue

        file_path = line.strip().replace("\\", "/")
        if prefix:
            if not file_path.startswith(prefix):
                continue
            file_path = file_path[len(prefix):]
        if not file_path or file_path in current_files:
            continue
        current_files.append(file_path)
        index.file_commits.setdefault(file_path, []).append(current)

    return index


def parse_commit_date(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 date; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class GitHistory:
    """History Index for one repository root.

    The full log is read once, lazily, on the first query that needs it.
    Concurrent first callers share the same in-flight build; a failed build
    is forgotten so a later query can retry. Queries never raise: when
    history is unavailable they return empty defaults.
    """

    def __init__(self, repo_path: str | Path, runner: Callable[..., str] | None = None) -> None:
        self.repo_path = os.path.abspath(str(repo_path))
        self._runner = runner or self._default_runner
        self._prefix: Optional[str] = None
        self._not_repo_message: Optional[str] = None
        self._pending_check: Optional[asyncio.Future] = None
        self._index: Optional[RepositoryIndex] = None
        self._pending_index: Optional[asyncio.Future] = None
        self._file_history: Dict[str, List[Commit]] = {}

    # ------------------------------------------------------------------
    # Repository identity

    async def check_is_repo(self) -> None:
        """Raise NotARepositoryError if ``repo_path`` is not in a git work tree.

        git is consulted at most once per instance; the outcome is cached.
        """
        if self._prefix is not None:
            return
        if self._not_repo_message is not None:
            raise NotARepositoryError(self._not_repo_message)
        if self._pending_check is None:
            self._pending_check = asyncio.ensure_future(self._run_repo_check())
        pending = self._pending_check
        try:
            await pending
        finally:
            if self._pending_check is pending:
                self._pending_check = None

    async def _run_repo_check(self) -> None:
        try:
            output = await self._git("rev-parse", "--show-prefix")
        except (GitCommandError, OSError) as exc:
            self._not_repo_message = f"Not a git repository: {self.repo_path}"
            logger.warning("%s; history-derived fields will use defaults", self._not_repo_message)
            raise NotARepositoryError(self._not_repo_message) from exc
        self._prefix = output.strip().replace("\\", "/")

    def normalize_path(self, file_path: str | Path) -> str:
        """Return ``file_path`` relative to the repository root, or ``""`` if it escapes it."""
        text = str(file_path).strip()
        if not text:
            return ""
        absolute = text if os.path.isabs(text) else os.path.join(self.repo_path, text)
        relative = os.path.relpath(os.path.normpath(absolute), self.repo_path)
        if relative in {".", ".."} or relative.startswith(".." + os.sep) or os.path.isabs(relative):
            return ""
        return relative.replace(os.sep, "/")

    # ------------------------------------------------------------------
    # Index

    async def _get_repository_index(self) -> RepositoryIndex:
        if self._index is not None:
            return self._index
        if self._pending_index is None:
            self._pending_index = asyncio.ensure_future(self._build_index())
        pending = self._pending_index
        try:
            index = await pending
        except Exception as exc:
            if self._pending_index is pending:
                self._pending_index = None
                if not isinstance(exc, NotARepositoryError):
                    logger.warning("Failed to build history index: %s", exc)
            raise
        self._index = index
        self._pending_index = None
        return index

    async def _build_index(self) -> RepositoryIndex:
        await self.check_is_repo()
        raw_log = await self._git("log", "--name-only", "--date=iso-strict", LOG_FORMAT)
        index = parse_repository_log(raw_log, self._prefix or "")
        for file_path, commits in index.file_commits.items():
            self._file_history.setdefault(file_path, commits)
        logger.debug(
            "Indexed %d commits touching %d files", len(index.commits), len(index.file_commits)
        )
        return index

    # ------------------------------------------------------------------
    # Queries

    async def get_file_history(self, file_path: str | Path) -> List[Commit]:
        """Commits touching ``file_path``, most recent first."""
        try:
            await self.check_is_repo()
        except NotARepositoryError:
            return []
        key = self.normalize_path(file_path)
        if not key:
            return []

        cached = self._file_history.get(key)
        if cached is not None:
            return list(cached)

        try:
            index = await self._get_repository_index()
            history = index.file_commits.get(key, [])
        except (GitCommandError, OSError) as exc:
            logger.debug("History index unavailable (%s); reading log for %s", exc, key)
            try:
                history = await self._single_file_log(key)
            except (GitCommandError, OSError) as fallback_exc:
                logger.debug("Per-file log failed for %s: %s", key, fallback_exc)
                return []

        self._file_history[key] = history
        return list(history)

    async def _single_file_log(self, key: str) -> List[Commit]:
        raw_log = await self._git("log", "--date=iso-strict", LOG_FORMAT, "--", key)
        return parse_repository_log(raw_log).commits

    async def get_file_ownership(self, file_path: str | Path) -> FileOwnership:
        history = await self.get_file_history(file_path)
        if not history:
            return FileOwnership.unknown()

        counts: Dict[str, int] = {}
        for commit in history:
            counts[commit.author] = counts.get(commit.author, 0) + 1
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        contributors = tuple(Contributor(author=author, commits=total) for author, total in ranked)
        return FileOwnership(
            primary=contributors[0].author,
            contributors=contributors,
            total_commits=len(history),
        )

    async def get_change_frequency(self, file_path: str | Path) -> float:
        """Commits per day across the span between the oldest and newest commit."""
        history = await self.get_file_history(file_path)
        if len(history) < 2:
            return 0.0
        newest = parse_commit_date(history[0].date)
        oldest = parse_commit_date(history[-1].date)
        if newest is None or oldest is None:
            return 0.0
        days = (newest - oldest).total_seconds() / 86400
        return len(history) / days if days > 0 else 0.0

    async def get_files_changed_together(
        self, file_path: str | Path, threshold: float = 0.3
    ) -> List[CoChange]:
        key = self.normalize_path(file_path)
        if not key:
            return []
        try:
            index = await self._get_repository_index()
        except (NotARepositoryError, GitCommandError, OSError):
            return []

        history = await self.get_file_history(key)
        hashes = list(dict.fromkeys(commit.hash for commit in history))
        if not hashes:
            return []

        counts: Dict[str, int] = {}
        for commit_hash in hashes:
            for other in index.commit_files.get(commit_hash, ()):
                if other != key:
                    counts[other] = counts.get(other, 0) + 1

        total = len(hashes)
        related = [
            CoChange(file=other, count=count, correlation=count / total)
            for other, count in counts.items()
            if count / total >= threshold
        ]
        related.sort(key=lambda item: item.correlation, reverse=True)
        return related

    async def get_recently_modified_files(self, days_ago: int = 90) -> Dict[str, List[Commit]]:
        """Map each file touched since ``days_ago`` days to its recent commits.

        Commits whose date cannot be parsed are always kept.
        """
        try:
            index = await self._get_repository_index()
        except (NotARepositoryError, GitCommandError, OSError):
            return {}

        since = datetime.now(timezone.utc) - timedelta(days=days_ago)
        modifications: Dict[str, List[Commit]] = {}
        for commit in index.commits:
            committed = parse_commit_date(commit.date)
            if committed is not None and committed < since:
                continue
            for file_path in index.commit_files.get(commit.hash, ()):
                modifications.setdefault(file_path, []).append(commit)
        return modifications

    async def get_all_tracked_files(self) -> List[str]:
        try:
            await self.check_is_repo()
            output = await self._git("ls-files")
        except (NotARepositoryError, GitCommandError, OSError):
            return []
        return [line.strip() for line in output.splitlines() if line.strip()]

    # ------------------------------------------------------------------
    # Internals

    async def _git(self, *args: str) -> str:
        argv = ["git", "-c", "core.quotepath=off", *args]
        return await asyncio.to_thread(self._run, argv)

    def _run(self, args: Iterable[str]) -> str:
        return self._runner(args, cwd=Path(self.repo_path), capture_output=True)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        import subprocess

        argv = list(args)
        try:
            completed = subprocess.run(
                argv,
                cwd=str(cwd),
                check=True,
                text=True,
                capture_output=capture_output,
                encoding="utf-8",
                errors="replace",
            )
        except subprocess.CalledProcessError as exc:
            raise GitCommandError(argv, exc.returncode, exc.stderr or "") from exc
        return completed.stdout if capture_output else ""


__all__ = [
    "GitCommandError",
    "GitHistory",
    "NotARepositoryError",
    "parse_commit_date",
    "parse_repository_log",
]
