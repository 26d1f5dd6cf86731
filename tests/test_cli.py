from __future__ import annotations

import sys
from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from buildrun import __version__
from buildrun.main import buildrun

pytestmark = [
    allure.epic("Execution Core"),
    allure.feature("CLI"),
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("BUILDRUN_DEBUG", "BUILDRUN_QUIET", "BUILDRUN_OFFLINE", "BUILDRUN_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)


def test_version() -> None:
    result = CliRunner().invoke(buildrun, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_exec_succeeds_for_zero_exit_status() -> None:
    result = CliRunner().invoke(buildrun, ["exec", sys.executable, "-c", "pass"])

    assert result.exit_code == 0, result.output
    assert f"[run] {sys.executable} [-c, pass]" in result.output


def test_exec_reports_non_zero_exit_status() -> None:
    result = CliRunner().invoke(buildrun, ["exec", sys.executable, "-c", "raise SystemExit(3)"])

    assert result.exit_code != 0
    assert "0 expected, but got: 3" in result.output


def test_exec_reports_missing_program() -> None:
    result = CliRunner().invoke(buildrun, ["--quiet", "exec", "buildrun-no-such-command"])

    assert result.exit_code != 0
    assert "failed to launch" in result.output


def test_fetch_prints_local_path(tmp_path: Path) -> None:
    source = tmp_path / "lib.jar"
    source.write_bytes(b"jar")
    cache_dir = tmp_path / "cache"

    result = CliRunner().invoke(
        buildrun,
        ["--quiet", "fetch", source.as_uri(), "--cache-dir", str(cache_dir)],
    )

    assert result.exit_code == 0, result.output
    assert result.output.strip() == str(cache_dir / "lib.jar")
    assert (cache_dir / "lib.jar").read_bytes() == b"jar"


def test_fetch_offline_without_cache_fails(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        buildrun,
        [
            "fetch",
            "https://example.com/lib.jar",
            "--cache-dir",
            str(tmp_path),
            "--offline",
        ],
    )

    assert result.exit_code != 0
    assert "offline mode requested" in result.output


def test_invalid_environment_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUILDRUN_OFFLINE", "sometimes")

    result = CliRunner().invoke(buildrun, ["fetch", "https://example.com/lib.jar"])

    assert result.exit_code != 0
    assert "BUILDRUN_OFFLINE" in result.output
