"""Tests for runtime registry construction and lookup."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from mx.config import parse_config
from mx.exceptions import ConfigError
from mx.registry import (
    DEFAULT_RUNTIMES,
    RuntimeRegistry,
    command_argv,
    load_registry,
    parse_runtime_override,
)
from mx.schemas import ExecutionMode, MxConfig, RuntimeDefinition


class TestDefaults:
    """Tests for the built-in runtime table."""

    def test_common_interpreters_are_registered(self) -> None:
        registry = load_registry(MxConfig())

        assert registry.resolve("bash") == RuntimeDefinition(command="bash")
        assert registry.resolve("python") == RuntimeDefinition(command="python3")
        assert registry.resolve("js").command == "node"

    def test_go_runs_from_a_file(self) -> None:
        runtime = load_registry(MxConfig()).resolve("go")

        assert runtime == RuntimeDefinition(
            command="go run", execution_mode=ExecutionMode.FILE
        )

    @pytest.mark.parametrize("language", [None, "", "toml", "Bash"])
    def test_unknown_languages_are_unresolved(self, language: str | None) -> None:
        assert load_registry(MxConfig()).resolve(language) is None


class TestOverrides:
    """Tests for merging configuration and command-line runtimes."""

    def test_simple_entry_overrides_default_with_stdin_mode(self) -> None:
        config = parse_config('[runtimes]\npython = "python3.12"\n')

        runtime = load_registry(config).resolve("python")

        assert runtime == RuntimeDefinition(command="python3.12")

    def test_simple_entry_forces_stdin_for_file_mode_default(self) -> None:
        """A plain string replaces the whole definition, mode included."""
        config = parse_config('[runtimes]\ngo = "gorun"\n')

        runtime = load_registry(config).resolve("go")

        assert runtime.execution_mode is ExecutionMode.STDIN

    def test_detailed_entry_sets_mode(self) -> None:
        config = parse_config(
            '[runtimes.rust]\ncommand = "rust-script"\nexecution_mode = "file"\n'
        )

        runtime = load_registry(config).resolve("rust")

        assert runtime == RuntimeDefinition(
            command="rust-script", execution_mode=ExecutionMode.FILE
        )

    def test_detailed_entry_mode_defaults_to_stdin(self) -> None:
        config = parse_config('[runtimes.deno]\ncommand = "deno run -"\n')

        assert load_registry(config).resolve("deno").execution_mode is ExecutionMode.STDIN

    def test_mixed_simple_and_detailed_entries(self) -> None:
        config = parse_config(
            "[runtimes]\n"
            'python = "python3.12"\n'
            "\n"
            "[runtimes.go]\n"
            'command = "go run"\n'
            'execution_mode = "stdin"\n'
        )

        registry = load_registry(config)

        assert registry.resolve("python") == RuntimeDefinition(command="python3.12")
        assert registry.resolve("go").execution_mode is ExecutionMode.STDIN

    def test_same_language_in_both_forms_is_a_config_error(self) -> None:
        """TOML rejects a key defined as both a string and a table."""
        with pytest.raises(ConfigError, match="Invalid TOML"):
            parse_config(
                '[runtimes]\npython = "python3"\n[runtimes.python]\ncommand = "pypy3"\n'
            )

    def test_cli_override_beats_config(self) -> None:
        config = parse_config('[runtimes.python]\ncommand = "python3.11"\n')
        override = parse_runtime_override("python:pypy3", ExecutionMode.FILE)

        runtime = load_registry(config, [override]).resolve("python")

        assert runtime == RuntimeDefinition(
            command="pypy3", execution_mode=ExecutionMode.FILE
        )

    def test_defaults_are_not_mutated(self) -> None:
        load_registry(parse_config('[runtimes]\nbash = "zsh"\n'))

        assert DEFAULT_RUNTIMES["bash"].command == "bash"

    def test_blank_command_is_rejected(self) -> None:
        with pytest.raises(ConfigError, match="Empty command"):
            load_registry(MxConfig(runtimes={"sh": "   "}))


class TestParseRuntimeOverride:
    """Tests for LANG:COMMAND values."""

    def test_splits_on_first_colon(self) -> None:
        language, runtime = parse_runtime_override("node:node --input-type=module")

        assert language == "node"
        assert runtime == RuntimeDefinition(command="node --input-type=module")

    @pytest.mark.parametrize("value", ["python", ":python3", "python:", "  :  "])
    def test_rejects_malformed_values(self, value: str) -> None:
        with pytest.raises(ConfigError, match="expected LANG:COMMAND"):
            parse_runtime_override(value)


class TestRegistry:
    """Tests for RuntimeRegistry and command splitting."""

    def test_is_read_only(self) -> None:
        source = {"sh": RuntimeDefinition(command="sh")}
        registry = RuntimeRegistry(source)
        source["sh"] = RuntimeDefinition(command="zsh")

        assert registry.resolve("sh").command == "sh"
        with pytest.raises(TypeError):
            registry._runtimes["bash"] = RuntimeDefinition(command="bash")  # type: ignore[index]

    def test_missing_runtimes_reports_binaries_not_on_path(self) -> None:
        """Only the first word of each command is looked up."""
        registry = RuntimeRegistry(
            {
                "go": RuntimeDefinition(command="go run"),
                "sh": RuntimeDefinition(command="sh"),
            }
        )

        def which(binary: str) -> str | None:
            return None if binary == "go" else "/bin/sh"

        with patch("mx.registry.shutil.which", side_effect=which):
            assert registry.missing_runtimes() == {"go": "go"}

    def test_command_argv_uses_shell_words(self) -> None:
        assert command_argv("'/opt/my python/bin/python' -u") == [
            "/opt/my python/bin/python",
            "-u",
        ]

    def test_command_argv_rejects_unbalanced_quotes(self) -> None:
        with pytest.raises(ConfigError, match="Cannot parse runtime command"):
            command_argv("python '-c")
