from __future__ import annotations

import logging
import threading

import allure
import pytest

from buildrun.config import Settings
from buildrun.console import Console, logging_sink

pytestmark = [
    allure.epic("Execution Core"),
    allure.feature("Console"),
]


def test_log_is_muted_in_quiet_mode(log_lines: list[str]) -> None:
    console = Console(log_lines.append)
    console.log("log %s", "1")
    console.quiet = True
    console.log("log %s", "2")

    assert log_lines == ["log 1"]


def test_debug_requires_debug_and_not_quiet(log_lines: list[str]) -> None:
    console = Console(log_lines.append, debug=True)
    console.debug("debug %s", "1")
    console.quiet = True
    console.debug("debug %s", "2")
    console.quiet = False
    console.debug_enabled = False
    console.debug("debug %s", "3")

    assert log_lines == ["debug 1"]


def test_message_without_arguments_is_emitted_verbatim(log_lines: list[str]) -> None:
    Console(log_lines.append).log("100% done")

    assert log_lines == ["100% done"]


def test_from_settings_copies_verbosity_switches(log_lines: list[str]) -> None:
    console = Console.from_settings(Settings(debug=True, quiet=True), log_lines.append)

    assert console.debug_enabled
    assert console.quiet


def test_concurrent_log_calls_emit_whole_lines(log_lines: list[str]) -> None:
    console = Console(log_lines.append)

    def _spam(tag: str) -> None:
        for index in range(200):
            console.log("%s-%d", tag, index)

    threads = [threading.Thread(target=_spam, args=(tag,)) for tag in "abcd"]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(log_lines) == 800
    assert sorted(log_lines) == sorted(f"{tag}-{index}" for tag in "abcd" for index in range(200))


def test_logging_sink_forwards_to_stdlib_logger(caplog: pytest.LogCaptureFixture) -> None:
    target = logging.getLogger("buildrun.tests")
    console = Console(logging_sink(target))

    with caplog.at_level(logging.INFO, logger="buildrun.tests"):
        console.log("[run] %s...", "build")

    assert caplog.messages == ["[run] build..."]
