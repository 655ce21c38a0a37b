"""Runtime and configuration models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExecutionMode(str, Enum):
    """How a code block reaches the interpreter process."""

    STDIN = "stdin"
    FILE = "file"
    ARG = "arg"


class RuntimeDefinition(BaseModel):
    """Interpreter command paired with a code delivery mode.

    Attributes:
        command: Executable plus any pre-supplied arguments (e.g. "go run").
        execution_mode: Delivery mode; stdin when omitted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str = Field(..., min_length=1)
    execution_mode: ExecutionMode = ExecutionMode.STDIN


class MxConfig(BaseModel):
    """Validated contents of an mx configuration file.

    Attributes:
        heading_level: Heading depth whose sections are tasks.
        runtimes: Language overrides, either a bare command string (stdin
            mode) or a detailed runtime definition.
        fail_fast: Skip the remaining blocks of a task after a failure.
        timeout: Per-block timeout in seconds; None waits indefinitely.
    """

    model_config = ConfigDict(extra="forbid")

    heading_level: int = Field(2, ge=1, le=6)
    runtimes: dict[str, str | RuntimeDefinition] = Field(default_factory=dict)
    fail_fast: bool = False
    timeout: float | None = Field(None, gt=0)
