"""Throwaway cargo project directories for user code."""

from __future__ import annotations

import contextlib
import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .errors import WorkspaceCreationError

logger = logging.getLogger(__name__)

CARGO_TOML = """[package]
name = "coderunner_user"
version = "0.1.0"
edition = "2021"

[dependencies]
serde_json = "1.0"
"""

MANIFEST_NAME = "Cargo.toml"
SOURCE_DIR = "src"
SOURCE_NAME = "main.rs"
BUILD_DIR = "target"

DEFAULT_SOURCE = """fn main() {
    let input: Vec<serde_json::Value> = serde_json::from_reader(std::io::stdin()).expect("invalid JSON");
    let output: Vec<serde_json::Value> = input.into_iter().map(|item| item).collect();
    serde_json::to_writer(std::io::stdout(), &output).expect("write");
}
"""


@dataclass(frozen=True, slots=True)
class Workspace:
    path: Path

    @property
    def manifest_path(self) -> Path:
        return self.path / MANIFEST_NAME

    @property
    def source_path(self) -> Path:
        return self.path / SOURCE_DIR / SOURCE_NAME


def build_workspace(source: str, root: str | Path | None = None) -> Workspace:
    """Create a fresh directory holding the manifest and *source*."""

    try:
        path = Path(tempfile.mkdtemp(prefix="coderunner-", dir=root))
    except OSError as exc:
        raise WorkspaceCreationError("Could not create a workspace directory.", str(exc)) from exc

    ws = Workspace(path=path)
    try:
        ws.source_path.parent.mkdir(parents=True, exist_ok=True)
        ws.manifest_path.write_text(CARGO_TOML, encoding="utf-8")
        ws.source_path.write_text(source, encoding="utf-8")
    except OSError as exc:
        remove_workspace(ws)
        raise WorkspaceCreationError(f"Could not write workspace files in {path}.", str(exc)) from exc
    logger.debug("Built workspace at %s", path)
    return ws


def remove_workspace(ws: Workspace) -> None:
    shutil.rmtree(ws.path, ignore_errors=True)
    logger.debug("Removed workspace %s", ws.path)


def reset_build_artifacts(ws: Workspace) -> None:
    """Drop compiled output so the next run rebuilds from scratch."""

    shutil.rmtree(ws.path / BUILD_DIR, ignore_errors=True)


@contextlib.contextmanager
def workspace(source: str, root: str | Path | None = None) -> Iterator[Workspace]:
    """Yield a built workspace and remove it however the block exits."""

    ws = build_workspace(source, root)
    try:
        yield ws
    finally:
        remove_workspace(ws)
