from __future__ import annotations

from pathlib import Path

import pytest

from coderunner.errors import WorkspaceCreationError
from coderunner.workspace import CARGO_TOML, build_workspace, remove_workspace, reset_build_artifacts, workspace


def test_build_workspace_layout(workspace_root: Path) -> None:
    ws = build_workspace("fn main() {}\n", workspace_root)
    try:
        assert ws.path.parent == workspace_root
        assert ws.path.name.startswith("coderunner-")
        assert ws.manifest_path == ws.path / "Cargo.toml"
        assert ws.manifest_path.read_text(encoding="utf-8") == CARGO_TOML
        assert ws.source_path == ws.path / "src" / "main.rs"
        assert ws.source_path.read_text(encoding="utf-8") == "fn main() {}\n"
    finally:
        remove_workspace(ws)
    assert not ws.path.exists()


def test_manifest_declares_single_json_dependency() -> None:
    deps = CARGO_TOML.split("[dependencies]", 1)[1].strip().splitlines()
    assert deps == ['serde_json = "1.0"']


def test_each_workspace_is_unique(workspace_root: Path) -> None:
    with workspace("a", workspace_root) as first, workspace("b", workspace_root) as second:
        assert first.path != second.path


def test_workspace_context_removes_directory_on_error(workspace_root: Path) -> None:
    with pytest.raises(RuntimeError):
        with workspace("fn main() {}", workspace_root) as ws:
            path = ws.path
            raise RuntimeError("boom")
    assert not path.exists()
    assert list(workspace_root.iterdir()) == []


def test_unusable_root_raises_workspace_creation_error(tmp_path: Path) -> None:
    not_a_dir = tmp_path / "file"
    not_a_dir.write_text("x")
    with pytest.raises(WorkspaceCreationError):
        build_workspace("fn main() {}", not_a_dir)


def test_reset_build_artifacts_drops_target(workspace_root: Path) -> None:
    with workspace("fn main() {}", workspace_root) as ws:
        (ws.path / "target" / "debug").mkdir(parents=True)
        reset_build_artifacts(ws)
        assert not (ws.path / "target").exists()
        assert ws.source_path.exists()
