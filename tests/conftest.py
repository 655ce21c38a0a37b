"""Test setup for mx."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mx.registry import RuntimeRegistry  # noqa: E402
from mx.schemas import ExecutionMode, RuntimeDefinition  # noqa: E402

PYTHON = shlex.quote(sys.executable)


@pytest.fixture
def python_registry() -> RuntimeRegistry:
    """Registry whose runtimes all use the interpreter running the tests."""
    return RuntimeRegistry(
        {
            "python": RuntimeDefinition(command=PYTHON),
            "pyfile": RuntimeDefinition(command=PYTHON, execution_mode=ExecutionMode.FILE),
            "pyarg": RuntimeDefinition(
                command=f"{PYTHON} -c", execution_mode=ExecutionMode.ARG
            ),
        }
    )


@pytest.fixture
def tasks_file(tmp_path: Path) -> Path:
    """A small task document in a temporary directory."""
    path = tmp_path / "TASKS.md"
    path.write_text(
        "# Project\n"
        "\n"
        "Intro text.\n"
        "\n"
        "## Build\n"
        "\n"
        "Build the project.\n"
        "\n"
        "```python\n"
        "print('building')\n"
        "```\n"
        "\n"
        "## Test\n"
        "\n"
        "```python\n"
        "print('testing')\n"
        "```\n",
        encoding="utf-8",
    )
    return path
