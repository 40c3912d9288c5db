from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def git_repo(repo_builder: RepoBuilder) -> RepoBuilder:
    """A repo builder with an initialised git repository; skipped without git."""
    if not RepoBuilder.git_available():
        pytest.skip("git executable not available")
    repo_builder.init_git()
    return repo_builder
