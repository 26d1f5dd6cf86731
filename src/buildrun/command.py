"""External program invocation as a runnable unit."""

from __future__ import annotations

import io
import logging
import os
import shutil
import subprocess
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import IO, Any

from buildrun.console import Console
from buildrun.errors import LaunchError

ToolResolver = Callable[[str], str | None]

logger = logging.getLogger(__name__)


def which_resolver(tool: str) -> str | None:
    """Resolve a tool name against `PATH`, `None` when nothing is found."""

    return shutil.which(tool)


class MappingResolver:
    """Map abstract tool names to concrete programs, e.g. from a toolchain catalog."""

    def __init__(
        self,
        mapping: Mapping[str, str | os.PathLike[str]],
        *,
        fallback: ToolResolver | None = None,
    ) -> None:
        self._mapping = {name: os.fspath(program) for name, program in mapping.items()}
        self._fallback = fallback

    def __call__(self, tool: str) -> str | None:
        program = self._mapping.get(tool)
        if program is not None:
            return program
        if self._fallback is not None:
            return self._fallback(tool)
        return None


class Command:
    """Builder for one external process invocation.

    Mutators return the same instance so a command reads as a chain:
    `Command("java").add("--version").set_streams(out, out)`. The tool name is
    resolved on every `execute()` call, right before the process is launched.
    """

    def __init__(self, tool: str, *arguments: object) -> None:
        self.tool = tool
        self.arguments: list[str] = []
        self.working_directory: Path | None = None
        self.stdout: IO[Any] | None = None
        self.stderr: IO[Any] | None = None
        self.console = Console()
        self.resolver: ToolResolver = which_resolver
        self.add_all(arguments)

    @classmethod
    def build(cls, tool: str) -> Command:
        return cls(tool)

    def add(self, value: object) -> Command:
        self.arguments.append(os.fspath(value) if isinstance(value, os.PathLike) else str(value))
        return self

    add_argument = add

    def add_all(self, values: Iterable[object]) -> Command:
        for value in values:
            self.add(value)
        return self

    def set_streams(self, out: IO[Any] | None, err: IO[Any] | None) -> Command:
        self.stdout = out
        self.stderr = err
        return self

    def set_logger(self, console: Console) -> Command:
        self.console = console
        return self

    def set_resolver(self, resolver: ToolResolver) -> Command:
        self.resolver = resolver
        return self

    def set_working_directory(self, path: str | os.PathLike[str] | None) -> Command:
        self.working_directory = Path(path) if path is not None else None
        return self

    def to_list(self) -> list[str]:
        return [self.tool, *self.arguments]

    def __str__(self) -> str:
        return f"{self.tool} [{', '.join(self.arguments)}]"

    def __call__(self) -> int:
        return self.execute()

    def execute(self) -> int:
        """Launch the program, wait for it and return its exit status unchanged."""

        self.console.debug("running %s with %d argument(s)", self.tool, len(self.arguments))
        self.console.debug("%s", "\n".join(self.to_list()))
        program = self._resolve()
        stdout_target, capture_stdout = _redirect_target(self.stdout)
        stderr_target, capture_stderr = _redirect_target(self.stderr)
        try:
            process = subprocess.Popen(  # noqa: S603
                [program, *self.arguments],
                cwd=self.working_directory,
                stdout=stdout_target,
                stderr=stderr_target,
            )
        except (OSError, ValueError) as error:
            message = f"failed to launch `{program}`: {error}"
            self.console.log("%s", message)
            raise LaunchError(message, tool=self.tool, program=program) from error

        captured_out, captured_err = process.communicate()
        if capture_stdout and captured_out:
            _write_captured(self.stdout, captured_out)
        if capture_stderr and captured_err:
            _write_captured(self.stderr, captured_err)
        logger.debug("%s exited with status %d", program, process.returncode)
        return process.returncode

    def _resolve(self) -> str:
        program = self.resolver(self.tool)
        if program is None or program == self.tool:
            return self.tool
        self.console.debug("replaced executable `%s` with program `%s`", self.tool, program)
        return program


def _redirect_target(stream: IO[Any] | None) -> tuple[IO[Any] | int | None, bool]:
    """Return what to hand to `Popen` and whether output must be copied afterwards."""

    if stream is None:
        return None, False
    try:
        stream.fileno()
    except (AttributeError, OSError, ValueError):
        return subprocess.PIPE, True
    stream.flush()
    return stream, False


def _write_captured(stream: IO[Any] | None, data: bytes) -> None:
    if stream is None:
        return
    if isinstance(stream, io.RawIOBase | io.BufferedIOBase):
        stream.write(data)
    else:
        stream.write(data.decode(errors="replace"))
    stream.flush()
