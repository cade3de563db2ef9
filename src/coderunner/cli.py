"""Command line interface for coderunner."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from .config import load_config, settings_from_config
from .errors import CodeRunnerError
from .runner import CodeRunner, Mode
from .workspace import DEFAULT_SOURCE

logger = logging.getLogger(__name__)


def _read_input(path: str | None) -> list[Any]:
    if not path:
        return []
    if path == "-":
        raw = sys.stdin.read()
    else:
        raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw) if raw.strip() else []
    if not isinstance(data, list):
        data = [data]
    return data


def _fail(message: str, description: str | None = None) -> int:
    print(message, file=sys.stderr)
    if description:
        print(description, file=sys.stderr)
    return 1


def cmd_run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {
        "mode": args.mode,
        "runner": {
            "cargo_path": args.cargo_path,
            "timeout_s": args.timeout,
            "continue_on_fail": True if args.continue_on_fail else None,
        },
    }
    try:
        cfg = load_config(args.config, overrides=overrides)
        source = Path(args.source).read_text(encoding="utf-8")
        records = _read_input(args.input)
        settings = settings_from_config(cfg)
    except OSError as exc:
        return _fail(f"Could not read input: {exc}")
    except (ValueError, yaml.YAMLError) as exc:
        return _fail("Invalid input or configuration.", str(exc))

    try:
        outputs = CodeRunner(settings).run_sync(source, records, cfg["mode"])
    except CodeRunnerError as exc:
        return _fail(exc.message, exc.description)
    print(json.dumps([record.as_dict() for record in outputs], indent=2))
    return 0


def cmd_template(args: argparse.Namespace) -> int:  # noqa: ARG001
    sys.stdout.write(DEFAULT_SOURCE)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="coderunner", description="Run Rust code over JSON records")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="Build and run a source file")
    p_run.add_argument("--source", required=True, help="Path to the main.rs source")
    p_run.add_argument("--input", help="JSON file with input records, '-' for stdin")
    p_run.add_argument("--mode", choices=[mode.value for mode in Mode])
    p_run.add_argument("--config", help="YAML config file")
    p_run.add_argument("--cargo-path")
    p_run.add_argument("--timeout", type=float)
    p_run.add_argument("--continue-on-fail", action="store_true")
    p_run.set_defaults(func=cmd_run)

    p_template = sub.add_parser("template", help="Print the default echo program")
    p_template.set_defaults(func=cmd_template)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main(sys.argv[1:]))
