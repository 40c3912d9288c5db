"""Tests for the textual complexity heuristic."""

from __future__ import annotations

import pytest

from archaeologist.analyzers.patterns import calculate_complexity


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("const x = 1;", 1),
        ("if (x) { doSomething(); }", 2),
        ("const y = obj?.foo?.bar;", 1),
        ("const z = a ?? b;", 1),
        ("const w = cond ? a : b;", 2),
        ("if (a && b || c) { x(); } else { y(); }", 5),
        ("try { run(); } catch (err) { report(err); }", 3),
        ("switch (k) { case 1: break; case 2: break; }", 4),
    ],
)
def test_calculate_complexity(source: str, expected: int) -> None:
    assert calculate_complexity(source) == expected


def test_complexity_ignores_substrings_of_identifiers() -> None:
    assert calculate_complexity("const notify = forward + elsewhere;") == 1
