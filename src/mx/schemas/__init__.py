"""Shared schemas for mx."""

from mx.schemas.document import CodeBlock, Section
from mx.schemas.report import BlockOutcome, ExecutionReport, OutcomeStatus
from mx.schemas.runtime import ExecutionMode, MxConfig, RuntimeDefinition

__all__ = [
    "BlockOutcome",
    "CodeBlock",
    "ExecutionMode",
    "ExecutionReport",
    "MxConfig",
    "OutcomeStatus",
    "RuntimeDefinition",
    "Section",
]
