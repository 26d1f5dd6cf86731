"""Runnable unit contract shared by inline tasks and external commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class RunnableUnit(Protocol):
    """Anything invocable that yields an integer exit status, 0 meaning success."""

    def __call__(self) -> int:
        """Run the unit once and return its exit status."""


@dataclass(slots=True)
class InlineTask:
    """In-process unit wrapping arbitrary caller logic."""

    name: str
    action: Callable[[], int]

    def __call__(self) -> int:
        return self.action()

    def __str__(self) -> str:
        return self.name
