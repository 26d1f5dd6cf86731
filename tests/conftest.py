"""Shared test fixtures."""

from __future__ import annotations

import re

import pytest

from buildrun.console import Console


@pytest.fixture()
def log_lines() -> list[str]:
    return []


@pytest.fixture()
def console(log_lines: list[str]) -> Console:
    """Verbose console collecting every rendered line."""
    return Console(log_lines.append, debug=True, quiet=False)


def _assert_lines_match(expected: list[str], actual: list[str]) -> None:
    assert len(expected) == len(actual), f"{expected!r} != {actual!r}"
    for pattern, line in zip(expected, actual, strict=True):
        if pattern == line:
            continue
        assert re.fullmatch(pattern, line, flags=re.DOTALL), f"{line!r} !~ {pattern!r}"


@pytest.fixture()
def assert_lines_match():
    """Compare line by line, each expected line being a literal or a full-match regex."""
    return _assert_lines_match
