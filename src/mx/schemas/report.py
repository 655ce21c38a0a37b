"""Execution outcome models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from mx.schemas.runtime import ExecutionMode


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


class BlockOutcome(BaseModel):
    """Result of one code block."""

    index: int
    language: str | None = None
    status: OutcomeStatus
    exit_code: int | None = None
    reason: str | None = None
    mode: ExecutionMode | None = None

    @classmethod
    def success(
        cls, index: int, language: str | None, mode: ExecutionMode | None = None
    ) -> "BlockOutcome":
        return cls(
            index=index,
            language=language,
            status=OutcomeStatus.SUCCESS,
            exit_code=0,
            mode=mode,
        )

    @classmethod
    def failure(
        cls,
        index: int,
        language: str | None,
        *,
        exit_code: int | None = None,
        reason: str | None = None,
        mode: ExecutionMode | None = None,
    ) -> "BlockOutcome":
        return cls(
            index=index,
            language=language,
            status=OutcomeStatus.FAILURE,
            exit_code=exit_code,
            reason=reason,
            mode=mode,
        )

    @classmethod
    def skipped(cls, index: int, language: str | None, reason: str) -> "BlockOutcome":
        return cls(
            index=index, language=language, status=OutcomeStatus.SKIPPED, reason=reason
        )


class ExecutionReport(BaseModel):
    """Ordered per-block outcomes of a single task run."""

    task: str
    outcomes: list[BlockOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> list[BlockOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.FAILURE]

    @property
    def skipped(self) -> list[BlockOutcome]:
        return [o for o in self.outcomes if o.status is OutcomeStatus.SKIPPED]

    @property
    def succeeded(self) -> bool:
        """True when no executed block failed; unresolved skips do not count."""
        return not self.failures

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1
