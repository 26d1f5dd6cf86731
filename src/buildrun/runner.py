"""Run named batches of units under one all-zero-exit verdict."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait

from buildrun.command import Command, ToolResolver
from buildrun.config import Settings
from buildrun.console import Console
from buildrun.errors import NonZeroExitError
from buildrun.units import RunnableUnit

logger = logging.getLogger(__name__)


class TaskRunner:
    """Execute batches sequentially or on a shared thread pool.

    Sequential batches run on the caller's thread and stop at the first
    non-zero status. Concurrent batches let every dispatched unit finish
    before the statuses are checked in declaration order.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        max_workers: int | None = None,
        resolver: ToolResolver | None = None,
    ) -> None:
        self.console = console or Console()
        self.max_workers = max_workers or os.cpu_count() or 1
        self.resolver = resolver

    @classmethod
    def from_settings(cls, settings: Settings, console: Console | None = None) -> TaskRunner:
        return cls(
            console or Console.from_settings(settings),
            max_workers=settings.max_workers,
        )

    def run(self, name: str, units: Iterable[RunnableUnit], *, parallel: bool = False) -> int:
        """Run all units of the batch and return 0, or raise `NonZeroExitError`."""

        batch = list(units)
        self.console.log("[run] %s...", name)
        if parallel:
            status = self._run_concurrently(batch)
        else:
            status = self._run_sequentially(batch)
        if status != 0:
            error = NonZeroExitError(status)
            self.console.log("[run] %s failed: %s", name, error.message)
            raise error
        self.console.log("[run] %s done.", name)
        return 0

    def run_command(self, command: Command, name: str | None = None) -> int:
        """Run one command as a single-element sequential batch."""

        return self.run(name or str(command), [command])

    def run_executable(self, tool: str, *arguments: object) -> int:
        """Build a command bound to this runner's console and require exit status 0."""

        command = Command(tool, *arguments).set_logger(self.console)
        if self.resolver is not None:
            command.set_resolver(self.resolver)
        self.console.log("[run] %s [%s]", tool, ", ".join(command.arguments))
        status = command.execute()
        if status != 0:
            error = NonZeroExitError(status)
            self.console.log("[run] %s failed: %s", tool, error.message)
            raise error
        return status

    def _run_sequentially(self, batch: Sequence[RunnableUnit]) -> int:
        for unit in batch:
            status = unit()
            if status != 0:
                return status
        return 0

    def _run_concurrently(self, batch: Sequence[RunnableUnit]) -> int:
        if not batch:
            return 0
        workers = min(self.max_workers, len(batch))
        logger.debug("dispatching %d unit(s) to %d worker(s)", len(batch), workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(unit) for unit in batch]
            wait(futures)
        for future in futures:
            status = future.result()
            if status != 0:
                return status
        return 0
