"""mx: run the code blocks of a Markdown section as a task."""

from mx.config import load_config
from mx.document import load_document, parse_document
from mx.exceptions import (
    ConfigError,
    ExecutionError,
    MxError,
    ParseError,
    ProcessSpawnError,
    TaskNotFoundError,
)
from mx.registry import RuntimeRegistry, load_registry
from mx.runner import TaskRunner, run_task
from mx.schemas import (
    BlockOutcome,
    CodeBlock,
    ExecutionMode,
    ExecutionReport,
    MxConfig,
    OutcomeStatus,
    RuntimeDefinition,
    Section,
)
from mx.sections import find_task, list_tasks

__all__ = [
    "BlockOutcome",
    "CodeBlock",
    "ConfigError",
    "ExecutionError",
    "ExecutionMode",
    "ExecutionReport",
    "MxConfig",
    "MxError",
    "OutcomeStatus",
    "ParseError",
    "ProcessSpawnError",
    "RuntimeDefinition",
    "RuntimeRegistry",
    "Section",
    "TaskNotFoundError",
    "TaskRunner",
    "find_task",
    "list_tasks",
    "load_config",
    "load_document",
    "load_registry",
    "parse_document",
    "run_task",
]
