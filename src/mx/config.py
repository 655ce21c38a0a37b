"""Local configuration for mx."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import ValidationError

from mx.exceptions import ConfigError
from mx.registry import DEFAULT_RUNTIMES
from mx.schemas import ExecutionMode, MxConfig

logger = logging.getLogger(__name__)

DEFAULT_TASKS_FILE = "README.md"
DEFAULT_CONFIG_FILE = "mx.toml"
DEFAULT_HEADING_LEVEL = 2
DEFAULT_LOG_LEVEL = "INFO"

# Explicit config path used when no --config flag is given.
MX_CONFIG_PATH = os.getenv("MX_CONFIG")
MX_LOG_LEVEL = os.getenv("MX_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def resolve_config_path(explicit: Path | None, cwd: Path | None = None) -> Path | None:
    """Pick the configuration file to load.

    Order: the explicit path, then $MX_CONFIG, then mx.toml in the working
    directory if present. Returns None when built-in defaults should be used.
    """
    if explicit is not None:
        return explicit
    if MX_CONFIG_PATH:
        return Path(MX_CONFIG_PATH).expanduser()
    candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILE
    if candidate.is_file():
        return candidate
    return None


def parse_config(text: str, *, source: str = "<string>") -> MxConfig:
    """Parse and validate TOML configuration text.

    Raises:
        ConfigError: If the TOML is malformed or fails validation.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {source}: {exc}") from exc
    try:
        return MxConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {source}: {exc}") from exc


def load_config(path: Path | None) -> MxConfig:
    """Load configuration from a TOML file, or defaults when path is None."""
    if path is None:
        return MxConfig()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    logger.debug("Loaded configuration from %s", path)
    return parse_config(text, source=str(path))


def render_default_config() -> str:
    """Render the sample configuration written by `mx init`."""
    lines = [
        "# mx configuration",
        f"heading_level = {DEFAULT_HEADING_LEVEL}",
        "fail_fast = false",
        "",
        "[runtimes]",
    ]
    detailed: list[str] = []
    for language, runtime in DEFAULT_RUNTIMES.items():
        if runtime.execution_mode is ExecutionMode.STDIN:
            lines.append(f"{language} = {_toml_string(runtime.command)}")
        else:
            detailed.extend(
                [
                    "",
                    f"[runtimes.{language}]",
                    f"command = {_toml_string(runtime.command)}",
                    f"execution_mode = {_toml_string(runtime.execution_mode.value)}",
                ]
            )
    return "\n".join(lines + detailed) + "\n"


def _toml_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
