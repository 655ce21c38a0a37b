"""Language to runtime resolution."""

from __future__ import annotations

import logging
import shlex
import shutil
from types import MappingProxyType
from typing import Iterable, Mapping

from mx.exceptions import ConfigError
from mx.schemas import ExecutionMode, MxConfig, RuntimeDefinition

logger = logging.getLogger(__name__)

DEFAULT_RUNTIMES: Mapping[str, RuntimeDefinition] = MappingProxyType(
    {
        "bash": RuntimeDefinition(command="bash"),
        "sh": RuntimeDefinition(command="sh"),
        "python": RuntimeDefinition(command="python3"),
        "ruby": RuntimeDefinition(command="ruby"),
        "node": RuntimeDefinition(command="node"),
        "javascript": RuntimeDefinition(command="node"),
        "js": RuntimeDefinition(command="node"),
        "go": RuntimeDefinition(command="go run", execution_mode=ExecutionMode.FILE),
        "golang": RuntimeDefinition(command="go run", execution_mode=ExecutionMode.FILE),
        "php": RuntimeDefinition(command="php"),
        "perl": RuntimeDefinition(command="perl"),
        "jq": RuntimeDefinition(command="jq"),
        "mq": RuntimeDefinition(command="mq"),
    }
)


class RuntimeRegistry:
    """Read-only mapping from fence language to runtime definition."""

    def __init__(self, runtimes: Mapping[str, RuntimeDefinition]) -> None:
        self._runtimes = MappingProxyType(dict(runtimes))

    def resolve(self, language: str | None) -> RuntimeDefinition | None:
        """Return the runtime for a language, or None when unresolved."""
        if not language:
            return None
        return self._runtimes.get(language)

    def languages(self) -> list[str]:
        return sorted(self._runtimes)

    def missing_runtimes(self) -> dict[str, str]:
        """Map each language whose executable is not on PATH to that executable."""
        missing: dict[str, str] = {}
        for language, runtime in sorted(self._runtimes.items()):
            binary = command_argv(runtime.command)[0]
            if shutil.which(binary) is None:
                missing[language] = binary
        return missing

    def __contains__(self, language: object) -> bool:
        return language in self._runtimes

    def __len__(self) -> int:
        return len(self._runtimes)


def load_registry(
    config: MxConfig,
    overrides: Iterable[tuple[str, RuntimeDefinition]] = (),
) -> RuntimeRegistry:
    """Build the effective registry for one invocation.

    Precedence, lowest first: built-in defaults, simple `lang = "cmd"` entries,
    detailed `[runtimes.lang]` tables, command-line overrides.
    """
    runtimes: dict[str, RuntimeDefinition] = dict(DEFAULT_RUNTIMES)

    simple = {k: v for k, v in config.runtimes.items() if isinstance(v, str)}
    detailed = {
        k: v for k, v in config.runtimes.items() if isinstance(v, RuntimeDefinition)
    }
    for language, command in simple.items():
        runtimes[language] = RuntimeDefinition(command=command)
    runtimes.update(detailed)
    for language, runtime in overrides:
        logger.debug(
            "Runtime override %s -> %s (%s)",
            language,
            runtime.command,
            runtime.execution_mode.value,
        )
        runtimes[language] = runtime

    for language, runtime in runtimes.items():
        if not command_argv(runtime.command):
            raise ConfigError(f"Empty command for runtime '{language}'")

    return RuntimeRegistry(runtimes)


def parse_runtime_override(
    value: str, execution_mode: ExecutionMode = ExecutionMode.STDIN
) -> tuple[str, RuntimeDefinition]:
    """Parse a `lang:command` override, e.g. `python:python3.11`.

    Raises:
        ConfigError: If the language or command part is missing.
    """
    language, sep, command = value.partition(":")
    language, command = language.strip(), command.strip()
    if not sep or not language or not command:
        raise ConfigError(
            f"Invalid runtime override '{value}' (expected LANG:COMMAND)"
        )
    return language, RuntimeDefinition(command=command, execution_mode=execution_mode)


def command_argv(command: str) -> list[str]:
    """Split a runtime command into argv using shell word rules."""
    try:
        return shlex.split(command)
    except ValueError as exc:
        raise ConfigError(f"Cannot parse runtime command '{command}': {exc}") from exc
