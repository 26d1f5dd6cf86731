"""Error kinds raised by the execution core."""

from __future__ import annotations

from pathlib import Path


class BuildRunError(RuntimeError):
    """Base error for runner, command and downloader failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NonZeroExitError(BuildRunError):
    """A runnable unit inside a batch returned a non-zero status."""

    def __init__(self, status: int) -> None:
        super().__init__(f"0 expected, but got: {status}")
        self.status = status


class LaunchError(BuildRunError):
    """The resolved executable could not be started."""

    def __init__(self, message: str, *, tool: str, program: str) -> None:
        super().__init__(message)
        self.tool = tool
        self.program = program


class OfflineUnavailableError(BuildRunError):
    """Offline mode was requested but the resource is not cached locally."""

    def __init__(self, *, uri: str, path: Path) -> None:
        super().__init__(f"offline mode requested but no local file present: {path}")
        self.uri = uri
        self.path = path


class TransferError(BuildRunError):
    """Network or HTTP failure while probing or transferring a resource."""

    def __init__(self, message: str, *, uri: str) -> None:
        super().__init__(message)
        self.uri = uri
