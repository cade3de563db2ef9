"""Shared fixtures: stand the Python interpreter in for cargo."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from coderunner.config import RunnerSettings

ECHO_SOURCE = "import json, sys\njson.dump(json.load(sys.stdin), sys.stdout)\n"


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "workspaces"
    root.mkdir()
    return root


@pytest.fixture
def settings(workspace_root: Path) -> RunnerSettings:
    # ``python src/main.rs`` runs the workspace source as a Python script.
    return RunnerSettings(
        cargo_path=sys.executable,
        cargo_args=["src/main.rs"],
        timeout_s=20.0,
        workspace_root=str(workspace_root),
    )
