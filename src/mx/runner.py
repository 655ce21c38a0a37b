"""Execute the code blocks of a task section."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping, Sequence

from mx.exceptions import ProcessSpawnError, TaskNotFoundError
from mx.registry import RuntimeRegistry, command_argv
from mx.schemas import (
    BlockOutcome,
    CodeBlock,
    ExecutionMode,
    ExecutionReport,
    OutcomeStatus,
    RuntimeDefinition,
    Section,
)
from mx.sections import find_task, list_tasks

logger = logging.getLogger(__name__)

UNRESOLVED_LANGUAGE = "unresolved language"
ABORTED_AFTER_FAILURE = "aborted after failure"
CANCELLED = "cancelled"
TIMED_OUT = "timed out"

_FILE_SUFFIXES = {
    "go": "go",
    "golang": "go",
    "python": "py",
    "ruby": "rb",
    "javascript": "js",
    "js": "js",
    "typescript": "ts",
    "ts": "ts",
    "bash": "sh",
    "sh": "sh",
}
_TERMINATE_GRACE_S = 5.0


class TaskRunner:
    """Runs code blocks sequentially with runtimes from a registry.

    Failures do not stop the task unless fail_fast is set; every block gets an
    outcome in the report. A timeout terminates the running block and cancels
    the rest of the task.
    """

    def __init__(
        self,
        registry: RuntimeRegistry,
        *,
        fail_fast: bool = False,
        timeout: float | None = None,
        task_args: Sequence[str] = (),
    ) -> None:
        self.registry = registry
        self.fail_fast = fail_fast
        self.timeout = timeout
        self.env = task_environment(task_args)

    def run(self, section: Section) -> ExecutionReport:
        report = ExecutionReport(task=section.title)
        halt_reason: str | None = None

        for index, block in enumerate(section.code_blocks):
            if halt_reason is not None:
                report.outcomes.append(
                    BlockOutcome.skipped(index, block.language, halt_reason)
                )
                continue

            outcome = self.execute_block(index, block)
            report.outcomes.append(outcome)

            if outcome.reason == TIMED_OUT:
                halt_reason = CANCELLED
            elif self.fail_fast and outcome.status is OutcomeStatus.FAILURE:
                halt_reason = ABORTED_AFTER_FAILURE

        return report

    def execute_block(self, index: int, block: CodeBlock) -> BlockOutcome:
        """Run one block; spawn errors and non-zero exits become outcomes."""
        runtime = self.registry.resolve(block.language)
        if runtime is None:
            logger.warning(
                "Skipping block %d: no runtime for language %r", index, block.language
            )
            return BlockOutcome.skipped(index, block.language, UNRESOLVED_LANGUAGE)

        mode = runtime.execution_mode
        logger.debug(
            "Block %d: %s via %s (%s mode)",
            index,
            block.language,
            runtime.command,
            mode.value,
        )
        try:
            returncode = self._dispatch(runtime, block)
        except ProcessSpawnError as exc:
            logger.error("Block %d: %s", index, exc)
            return BlockOutcome.failure(index, block.language, reason=str(exc), mode=mode)
        except subprocess.TimeoutExpired:
            logger.error("Block %d: timed out after %ss", index, self.timeout)
            return BlockOutcome.failure(
                index, block.language, reason=TIMED_OUT, mode=mode
            )

        if returncode != 0:
            logger.warning("Block %d exited with status %d", index, returncode)
            return BlockOutcome.failure(
                index, block.language, exit_code=returncode, mode=mode
            )
        return BlockOutcome.success(index, block.language, mode=mode)

    def _dispatch(self, runtime: RuntimeDefinition, block: CodeBlock) -> int:
        argv = command_argv(runtime.command)

        if runtime.execution_mode is ExecutionMode.FILE:
            with temporary_source(block.body, block.language) as path:
                return self._spawn([*argv, str(path)])
        if runtime.execution_mode is ExecutionMode.ARG:
            return self._spawn([*argv, block.body])
        return self._spawn(argv, stdin_data=block.body)

    def _spawn(self, argv: list[str], *, stdin_data: str | None = None) -> int:
        """Start argv with inherited stdout/stderr and wait for it to exit.

        When stdin_data is given it is written to the child's stdin, which is
        then closed. On timeout or interrupt the child is terminated before the
        exception propagates.
        """
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if stdin_data is not None else None,
                env=self.env,
                text=True,
                encoding="utf-8",
            )
        except (OSError, ValueError) as exc:
            # ValueError: argv with an embedded NUL byte.
            raise ProcessSpawnError(f"Failed to spawn {argv[0]}: {exc}") from exc

        try:
            process.communicate(input=stdin_data, timeout=self.timeout)
        except BaseException:
            # Timeout or KeyboardInterrupt: do not leave the child running.
            _terminate(process)
            raise
        return process.returncode


def run_task(
    root: Section,
    name: str,
    heading_level: int,
    registry: RuntimeRegistry,
    *,
    fail_fast: bool = False,
    timeout: float | None = None,
    task_args: Sequence[str] = (),
) -> ExecutionReport:
    """Resolve a task by name and execute its code blocks.

    Raises:
        TaskNotFoundError: If no section at heading_level is titled name. No
            process is started in that case.
    """
    section = find_task(root, name, heading_level)
    if section is None:
        raise TaskNotFoundError(name, list_tasks(root, heading_level))
    runner = TaskRunner(
        registry, fail_fast=fail_fast, timeout=timeout, task_args=task_args
    )
    return runner.run(section)


@contextmanager
def temporary_source(body: str, language: str | None) -> Iterator[Path]:
    """Write body to a fresh temporary file and remove it on exit."""
    suffix = _file_suffix(language)
    handle = tempfile.NamedTemporaryFile(
        mode="w", encoding="utf-8", prefix="mx_", suffix=suffix, delete=False
    )
    path = Path(handle.name)
    try:
        with handle:
            handle.write(body)
        yield path
    finally:
        path.unlink(missing_ok=True)


def task_environment(
    task_args: Sequence[str], base: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Environment for interpreters: MX_ARGS plus one MX_ARG_<n> per argument."""
    env = dict(os.environ if base is None else base)
    if task_args:
        env["MX_ARGS"] = " ".join(task_args)
    for position, arg in enumerate(task_args):
        env[f"MX_ARG_{position}"] = arg
    return env


def _file_suffix(language: str | None) -> str:
    if not language:
        return ""
    extension = _FILE_SUFFIXES.get(language, language)
    return f".{extension}" if extension.isalnum() else ""


def _terminate(process: subprocess.Popen) -> None:
    if process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=_TERMINATE_GRACE_S)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()
