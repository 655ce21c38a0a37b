"""Command-line interface for mx.

Usage:
    mx                         List tasks in README.md
    mx <task> [<task> ...]     Run tasks (shorthand for `mx run`)
    mx run <task> [-- ARGS]    Run tasks, exposing ARGS as MX_ARGS / MX_ARG_<n>
    mx list                    List tasks with their descriptions
    mx init                    Write a sample mx.toml
    mx check                   Report configured runtimes missing from PATH
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from mx.config import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_TASKS_FILE,
    load_config,
    render_default_config,
    resolve_config_path,
)
from mx.document import load_document
from mx.exceptions import ConfigError, MxError, TaskNotFoundError
from mx.registry import load_registry, parse_runtime_override
from mx.runner import TaskRunner
from mx.schemas import ExecutionMode, ExecutionReport, MxConfig
from mx.sections import find_task, list_task_sections, list_tasks
from mx.utils.logging_config import configure_logging, get_logger

logger = get_logger(__name__)

COMMANDS = ("run", "list", "init", "check")
# Options that consume the following token; used to find the first positional.
_VALUE_OPTIONS = frozenset(
    {
        "-f",
        "--file",
        "-c",
        "--config",
        "-l",
        "--level",
        "-r",
        "--runtime",
        "-e",
        "--execution-mode",
        "--timeout",
        "-o",
        "--output",
    }
)


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    common.add_argument(
        "-c",
        "--config",
        type=Path,
        help=f"Configuration file (default: $MX_CONFIG or {DEFAULT_CONFIG_FILE})",
    )

    document = argparse.ArgumentParser(add_help=False)
    document.add_argument(
        "-f",
        "--file",
        type=Path,
        default=Path(DEFAULT_TASKS_FILE),
        help=f"Markdown file with tasks (default: {DEFAULT_TASKS_FILE})",
    )
    document.add_argument(
        "-l",
        "--level",
        type=int,
        choices=range(1, 7),
        metavar="{1-6}",
        help="Heading level of task sections",
    )

    parser = argparse.ArgumentParser(prog="mx", description="Markdown-based task runner.")
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser(
        "run", parents=[common, document], help="Run tasks from a Markdown file"
    )
    run.add_argument("tasks", nargs="*", metavar="TASK", help="Section titles to run")
    run.add_argument(
        "-r",
        "--runtime",
        action="append",
        default=[],
        metavar="LANG:COMMAND",
        help="Override the runtime for a language (e.g. python:python3.11)",
    )
    run.add_argument(
        "-e",
        "--execution-mode",
        choices=[mode.value for mode in ExecutionMode],
        default=ExecutionMode.STDIN.value,
        help="Execution mode for --runtime overrides",
    )
    run.add_argument(
        "--fail-fast",
        action="store_true",
        help="Skip the remaining blocks after the first failure",
    )
    run.add_argument(
        "--timeout", type=_positive_float, help="Per-block timeout in seconds"
    )
    run.set_defaults(handler=cmd_run)

    list_parser = subparsers.add_parser(
        "list", parents=[common, document], help="List tasks in a Markdown file"
    )
    list_parser.set_defaults(handler=cmd_list)

    init = subparsers.add_parser(
        "init", parents=[common], help="Write a sample configuration file"
    )
    init.add_argument(
        "-o", "--output", type=Path, default=Path(DEFAULT_CONFIG_FILE)
    )
    init.set_defaults(handler=cmd_init)

    check = subparsers.add_parser(
        "check", parents=[common], help="Check that configured runtimes are on PATH"
    )
    check.set_defaults(handler=cmd_check)

    return parser


def normalize_argv(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split off task arguments after `--` and route the shorthand form to `run`."""
    argv = list(argv)
    task_args: list[str] = []
    if "--" in argv:
        split = argv.index("--")
        argv, task_args = argv[:split], argv[split + 1 :]

    position = _first_positional(argv)
    if position is None:
        if any(a in ("-h", "--help") for a in argv):
            return argv, task_args
        return ["run", *argv], task_args
    if argv[position] not in COMMANDS:
        return ["run", *argv], task_args
    # Options given before the command belong to the subcommand parser.
    return [argv[position], *argv[:position], *argv[position + 1 :]], task_args


def _first_positional(argv: Sequence[str]) -> int | None:
    skip_next = False
    for position, token in enumerate(argv):
        if skip_next:
            skip_next = False
            continue
        if token in _VALUE_OPTIONS:
            skip_next = True
            continue
        if token.startswith("-"):
            continue
        return position
    return None


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value}")
    return number


def main(argv: Sequence[str] | None = None) -> int:
    raw = list(sys.argv[1:] if argv is None else argv)
    argv, task_args = normalize_argv(raw)
    args = build_parser().parse_args(argv)
    args.task_args = task_args

    configure_logging(logging.DEBUG if args.verbose else None)

    try:
        return args.handler(args)
    except MxError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130


def cmd_run(args: argparse.Namespace) -> int:
    config = _load_config(args)
    level = args.level or config.heading_level
    if not args.tasks:
        return _print_tasks(args.file, level)

    mode = ExecutionMode(args.execution_mode)
    overrides = [parse_runtime_override(value, mode) for value in args.runtime]
    registry = load_registry(config, overrides)
    root = load_document(args.file)

    sections = []
    for name in args.tasks:
        section = find_task(root, name, level)
        if section is None:
            raise TaskNotFoundError(name, list_tasks(root, level))
        sections.append(section)

    fail_fast = args.fail_fast or config.fail_fast
    runner = TaskRunner(
        registry,
        fail_fast=fail_fast,
        timeout=args.timeout if args.timeout is not None else config.timeout,
        task_args=args.task_args,
    )

    exit_code = 0
    for section in sections:
        print(f"Running task: {section.title}\n", flush=True)
        report = runner.run(section)
        _log_report(report)
        if not report.succeeded:
            exit_code = report.exit_code
            if fail_fast:
                break
    return exit_code


def cmd_list(args: argparse.Namespace) -> int:
    config = _load_config(args)
    return _print_tasks(args.file, args.level or config.heading_level)


def cmd_init(args: argparse.Namespace) -> int:
    output: Path = args.output
    if output.exists():
        raise ConfigError(f"Configuration file already exists: {output}")
    output.write_text(render_default_config(), encoding="utf-8")
    print(f"Configuration file created: {output}")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    registry = load_registry(_load_config(args))
    missing = registry.missing_runtimes()
    for language, binary in missing.items():
        print(f"{language}: '{binary}' not found in PATH")
    if missing:
        return 1
    print(f"All {len(registry)} runtimes are available")
    return 0


def _load_config(args: argparse.Namespace) -> MxConfig:
    return load_config(resolve_config_path(args.config))


def _print_tasks(path: Path, level: int) -> int:
    sections = list_task_sections(load_document(path), level)
    if not sections:
        print(f"No tasks found in {path}")
        return 0

    lines = [f"Available tasks in {path}", ""]
    for section in sections:
        if section.description:
            lines.append(f"  {section.title} - {section.description}")
        else:
            lines.append(f"  {section.title}")
    print("\n".join(lines))
    return 0


def _log_report(report: ExecutionReport) -> None:
    for outcome in report.skipped:
        logger.info(
            "Task %s: block %d (%s) skipped: %s",
            report.task,
            outcome.index,
            outcome.language or "no language",
            outcome.reason,
        )
    if report.failures:
        logger.error(
            "Task %s failed: %d of %d blocks failed",
            report.task,
            len(report.failures),
            len(report.outcomes),
        )
