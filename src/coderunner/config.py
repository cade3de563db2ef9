"""Configuration helpers for runner settings and YAML configs."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULTS: dict[str, Any] = {
    "mode": "run-once-for-all-items",
    "runner": {
        # ``None`` leaves the value to the environment / field default.
        "cargo_path": None,
        "cargo_args": None,
        "timeout_s": None,
        "workspace_root": None,
        "continue_on_fail": None,
        "rebuild_per_record": None,
    },
}


def _overlay(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Return *base* updated from *layer*; ``None`` in *layer* keeps the base value."""

    merged = copy.deepcopy(base)
    for key, value in layer.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = _overlay(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(path: str | None, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
    """Layer DEFAULTS, the YAML file at *path* and *overrides*, in that order."""

    layers: list[dict[str, Any]] = []
    if path:
        with Path(path).open("r", encoding="utf-8") as fh:
            layers.append(yaml.safe_load(fh) or {})
    if overrides:
        layers.append(overrides)
    config = DEFAULTS
    for layer in layers:
        if not isinstance(layer, dict):
            raise ValueError(f"Config must be a mapping, got {type(layer).__name__}")
        config = _overlay(config, layer)
    return copy.deepcopy(config)


class RunnerSettings(BaseSettings):
    """Environment driven settings for the code runner."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, populate_by_name=True, extra="ignore")

    cargo_path: str = Field(default="cargo", alias="CODERUNNER_CARGO_PATH")
    cargo_args: list[str] = Field(default_factory=lambda: ["run", "--quiet"], alias="CODERUNNER_CARGO_ARGS")
    timeout_s: float = Field(default=120.0, gt=0, alias="CODERUNNER_TIMEOUT_S")
    workspace_root: str | None = Field(default=None, alias="CODERUNNER_WORKSPACE_ROOT")
    continue_on_fail: bool = Field(default=False, alias="CODERUNNER_CONTINUE_ON_FAIL")
    rebuild_per_record: bool = Field(default=False, alias="CODERUNNER_REBUILD_PER_RECORD")


def load_settings() -> RunnerSettings:
    """Return settings initialised from environment."""

    return RunnerSettings()


def settings_from_config(cfg: dict[str, Any]) -> RunnerSettings:
    """Build settings from the ``runner`` section of a loaded config.

    Keys left at ``None`` fall back to the environment and field defaults.
    """

    section = {key: value for key, value in (cfg.get("runner") or {}).items() if value is not None}
    return RunnerSettings(**section)
