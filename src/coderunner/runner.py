"""Top-level orchestration: build a workspace, run per mode, normalise."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Sequence

from .cancellation import CancellationToken
from .config import RunnerSettings, load_settings
from .errors import (
    CodeRunnerError,
    EmptySourceError,
    ExecutionCancelledError,
    InvalidModeError,
    RunFailure,
    RunResult,
    RunSuccess,
)
from .executor import run_toolchain
from .normalize import OutputRecord, normalize_output
from .workspace import Workspace, reset_build_artifacts, workspace

logger = logging.getLogger(__name__)


class Mode(str, enum.Enum):
    ALL_ITEMS = "run-once-for-all-items"
    EACH_ITEM = "run-once-for-each-item"

    @classmethod
    def parse(cls, value: "Mode | str") -> "Mode":
        if isinstance(value, Mode):
            return value
        aliases = {
            "runOnceForAllItems": cls.ALL_ITEMS,
            "runOnceForEachItem": cls.EACH_ITEM,
        }
        if value in aliases:
            return aliases[value]
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(mode.value for mode in cls)
            raise InvalidModeError(f"Unknown mode {value!r}; expected one of {choices}") from None


def _degraded(error: CodeRunnerError, index: int) -> OutputRecord:
    return OutputRecord(json={"error": error.message}, index=index)


class CodeRunner:
    """Run user source through the toolchain over a list of JSON records."""

    def __init__(self, settings: RunnerSettings | None = None, *, continue_on_fail: bool | None = None) -> None:
        self.settings = settings if settings is not None else load_settings()
        self.continue_on_fail = (
            continue_on_fail if continue_on_fail is not None else self.settings.continue_on_fail
        )

    async def run(
        self,
        source: str,
        records: Sequence[Any],
        mode: Mode | str = Mode.ALL_ITEMS,
        cancel_token: CancellationToken | None = None,
    ) -> list[OutputRecord]:
        """Execute *source* and return the normalised output records.

        Raises a :class:`CodeRunnerError` subclass on failure unless
        ``continue_on_fail`` is set, in which case failures become
        ``{"error": message}`` records. Empty source and cancellation
        always raise.
        """

        mode = Mode.parse(mode)
        if not source or not source.strip():
            raise EmptySourceError("Rust code is empty. Add code to run.")
        records = list(records)

        with workspace(source, self.settings.workspace_root) as ws:
            if mode is Mode.ALL_ITEMS:
                return await self._run_all(ws, records, cancel_token)
            return await self._run_each(ws, records, cancel_token)

    async def _run_all(
        self,
        ws: Workspace,
        records: list[Any],
        cancel_token: CancellationToken | None,
    ) -> list[OutputRecord]:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        try:
            output = await run_toolchain(ws, records, self.settings, cancel_token)
        except ExecutionCancelledError:
            raise
        except CodeRunnerError as exc:
            if not self.continue_on_fail:
                raise
            logger.warning("Run failed, continuing: %s", exc.message)
            return [_degraded(exc, 0)]
        return normalize_output(output)

    async def _run_each(
        self,
        ws: Workspace,
        records: list[Any],
        cancel_token: CancellationToken | None,
    ) -> list[OutputRecord]:
        results: list[OutputRecord] = []
        for index, record in enumerate(records):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            if index and self.settings.rebuild_per_record:
                reset_build_artifacts(ws)
            try:
                output = await run_toolchain(ws, [record], self.settings, cancel_token)
            except ExecutionCancelledError:
                raise
            except CodeRunnerError as exc:
                if not self.continue_on_fail:
                    raise
                logger.warning("Record %d failed, continuing: %s", index, exc.message)
                results.append(_degraded(exc, index))
                continue
            items = normalize_output(output)
            payload = items[0].json if items else {}
            results.append(OutputRecord(json=payload, index=index))
        return results

    async def try_run(
        self,
        source: str,
        records: Sequence[Any],
        mode: Mode | str = Mode.ALL_ITEMS,
        cancel_token: CancellationToken | None = None,
    ) -> RunResult:
        """Like :meth:`run` but report failures as a :class:`RunFailure` value."""

        try:
            return RunSuccess(records=await self.run(source, records, mode, cancel_token))
        except CodeRunnerError as exc:
            return RunFailure.from_error(exc)

    def run_sync(
        self,
        source: str,
        records: Sequence[Any],
        mode: Mode | str = Mode.ALL_ITEMS,
    ) -> list[OutputRecord]:
        return asyncio.run(self.run(source, records, mode))
