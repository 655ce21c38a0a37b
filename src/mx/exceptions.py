"""Custom exceptions for mx."""

from __future__ import annotations

from typing import Sequence


class MxError(Exception):
    """Base exception for mx operations."""


class ParseError(MxError):
    """Error reading or parsing a Markdown document."""


class ConfigError(MxError):
    """Malformed configuration file or runtime override."""


class TaskNotFoundError(MxError):
    """Requested task has no matching section at the configured level."""

    def __init__(self, name: str, available: Sequence[str] = ()) -> None:
        self.name = name
        self.available = list(available)
        message = f"Task not found: {name}"
        if self.available:
            message += f" (available tasks: {', '.join(self.available)})"
        super().__init__(message)


class ExecutionError(MxError):
    """Error during code block execution."""


class ProcessSpawnError(ExecutionError):
    """Interpreter command could not be launched."""
