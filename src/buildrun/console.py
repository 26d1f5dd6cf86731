"""Line-oriented logger port shared by runner, commands and downloader."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from buildrun.config import Settings

LogSink = Callable[[str], None]

logger = logging.getLogger(__name__)


def logging_sink(target: logging.Logger | None = None) -> LogSink:
    """Return a sink forwarding rendered lines to a stdlib logger at INFO level."""

    destination = target or logger

    def _emit(line: str) -> None:
        destination.info("%s", line)

    return _emit


class Console:
    """Render `%`-style messages and hand them to a sink, one call per line.

    The sink is invoked under a lock, so concurrent workers never interleave
    partial lines. Verbosity policy comes from the caller: `log` is muted by
    `quiet`, `debug` needs `debug` and no `quiet`.
    """

    def __init__(
        self,
        sink: LogSink | None = None,
        *,
        debug: bool = False,
        quiet: bool = False,
    ) -> None:
        self.sink = sink or logging_sink()
        self.debug_enabled = debug
        self.quiet = quiet
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, sink: LogSink | None = None) -> Console:
        return cls(sink, debug=settings.debug, quiet=settings.quiet)

    def log(self, message: str, *args: object) -> None:
        if self.quiet:
            return
        self._emit(message, args)

    def debug(self, message: str, *args: object) -> None:
        if self.quiet or not self.debug_enabled:
            return
        self._emit(message, args)

    def _emit(self, message: str, args: tuple[object, ...]) -> None:
        line = message % args if args else message
        with self._lock:
            self.sink(line)
