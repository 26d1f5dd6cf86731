"""Execution core of a minimal build tool: task runner, commands and resource cache."""

from buildrun.command import Command, MappingResolver, ToolResolver, which_resolver
from buildrun.config import Settings
from buildrun.console import Console, LogSink, logging_sink
from buildrun.download import Downloader, FileTransport
from buildrun.errors import (
    BuildRunError,
    LaunchError,
    NonZeroExitError,
    OfflineUnavailableError,
    TransferError,
)
from buildrun.runner import TaskRunner
from buildrun.units import InlineTask, RunnableUnit

__version__ = "0.1.0"

__all__ = [
    "BuildRunError",
    "Command",
    "Console",
    "Downloader",
    "FileTransport",
    "InlineTask",
    "LaunchError",
    "LogSink",
    "MappingResolver",
    "NonZeroExitError",
    "OfflineUnavailableError",
    "RunnableUnit",
    "Settings",
    "TaskRunner",
    "ToolResolver",
    "TransferError",
    "__version__",
    "logging_sink",
    "which_resolver",
]
