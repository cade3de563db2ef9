"""Build-and-run the workspace with cargo, feeding JSON on stdin."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import signal
import time
from dataclasses import dataclass
from typing import Any, Sequence

from .cancellation import CancellationToken
from .config import RunnerSettings
from .errors import (
    ExecutionCancelledError,
    ExecutionFailedError,
    ExecutionTimeoutError,
    InvalidOutputError,
    ToolchainNotFoundError,
)
from .workspace import Workspace

logger = logging.getLogger(__name__)

STREAM_TAIL_CHARS = 500
OUTPUT_TAIL_CHARS = 1000
READ_CHUNK = 64 * 1024
# Grace period for the pipes to close once the child is gone.
READER_GRACE_S = 5.0


@dataclass(slots=True)
class ExecutionRequest:
    workspace: Workspace
    records: Sequence[Any]


@dataclass(slots=True)
class ExecutionResult:
    returncode: int | None
    stdout: bytes
    stderr: bytes


def _tail(data: bytes | bytearray, limit: int) -> str:
    return bytes(data).decode("utf-8", "replace")[-limit:]


def _toolchain_hint(cargo_path: str, exc: OSError) -> str:
    if cargo_path != "cargo":
        hint = f"Check that CODERUNNER_CARGO_PATH ({cargo_path}) is correct."
    else:
        hint = "Make sure cargo is on PATH or set CODERUNNER_CARGO_PATH."
    return f"{exc}\n\n{hint}\n\nInstall from https://rustup.rs"


async def _drain(stream: asyncio.StreamReader, buffer: bytearray) -> None:
    while True:
        chunk = await stream.read(READ_CHUNK)
        if not chunk:
            return
        buffer.extend(chunk)


async def _feed(stdin: asyncio.StreamWriter, payload: bytes) -> None:
    try:
        stdin.write(payload)
        await stdin.drain()
    except OSError as exc:
        # The child may exit without reading its input; its exit status decides.
        logger.debug("Child closed stdin early: %s", exc)
    finally:
        stdin.close()


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        if os.name == "posix":
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        pass


async def _settle_readers(readers: list[asyncio.Task]) -> None:
    _, pending = await asyncio.wait(readers, timeout=READER_GRACE_S)
    for task in pending:
        task.cancel()


async def execute(
    request: ExecutionRequest,
    settings: RunnerSettings,
    cancel_token: CancellationToken | None = None,
) -> ExecutionResult:
    """Run cargo once over ``request.records`` and capture both streams.

    Process exit, the timeout and the cancellation token race through one
    ``asyncio.wait`` call; whichever completes first decides the outcome and
    the others are discarded. A child that is still alive when this
    coroutine leaves is killed and reaped.
    """

    command = [settings.cargo_path, *settings.cargo_args]
    payload = json.dumps(list(request.records)).encode("utf-8")
    extra: dict[str, Any] = {}
    if os.name == "posix":
        extra["start_new_session"] = True

    start = time.perf_counter()
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            cwd=str(request.workspace.path),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            **extra,
        )
    except OSError as exc:
        raise ToolchainNotFoundError("Rust (cargo) not found.", _toolchain_hint(settings.cargo_path, exc)) from exc
    logger.debug("Started %s (pid %s) in %s", command, proc.pid, request.workspace.path)

    stdout = bytearray()
    stderr = bytearray()
    readers = [
        asyncio.create_task(_drain(proc.stdout, stdout)),
        asyncio.create_task(_drain(proc.stderr, stderr)),
    ]
    feeder = asyncio.create_task(_feed(proc.stdin, payload))
    exited = asyncio.create_task(proc.wait())
    waiters: set[asyncio.Task] = {exited}
    cancelled: asyncio.Task | None = None
    if cancel_token is not None:
        cancelled = asyncio.create_task(cancel_token.wait())
        waiters.add(cancelled)

    try:
        done, _ = await asyncio.wait(waiters, timeout=settings.timeout_s, return_when=asyncio.FIRST_COMPLETED)
        if exited not in done:
            _kill(proc)
            await proc.wait()
            await _settle_readers(readers)
            if cancelled is not None and cancelled in done:
                logger.warning("Cancelled child %s", proc.pid)
                raise ExecutionCancelledError("Execution was cancelled.", cancel_token.reason)
            logger.warning("Child %s timed out after %.1fs", proc.pid, settings.timeout_s)
            raise ExecutionTimeoutError(
                "Rust execution timed out (compile + run).",
                f"stdout: {_tail(stdout, STREAM_TAIL_CHARS)}\nstderr: {_tail(stderr, STREAM_TAIL_CHARS)}",
            )
        await _settle_readers(readers)
    finally:
        for task in (feeder, exited, cancelled):
            if task is not None and not task.done():
                task.cancel()
        if proc.returncode is None:
            _kill(proc)
            await proc.wait()

    duration = int((time.perf_counter() - start) * 1000)
    logger.debug("Child %s exited with %s after %dms", proc.pid, proc.returncode, duration)
    return ExecutionResult(returncode=proc.returncode, stdout=bytes(stdout), stderr=bytes(stderr))


def parse_output(result: ExecutionResult) -> Any:
    """Classify the exit status and decode stdout as one JSON value."""

    stdout = result.stdout.decode("utf-8", "replace")
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", "replace")
        raise ExecutionFailedError(result.returncode, stderr or stdout)
    try:
        return json.loads(stdout.strip() or "[]")
    except json.JSONDecodeError as exc:
        raise InvalidOutputError(
            "Rust code did not output valid JSON on stdout",
            stdout[-OUTPUT_TAIL_CHARS:] or "(empty)",
        ) from exc


async def run_toolchain(
    ws: Workspace,
    records: Sequence[Any],
    settings: RunnerSettings,
    cancel_token: CancellationToken | None = None,
) -> Any:
    result = await execute(ExecutionRequest(workspace=ws, records=records), settings, cancel_token)
    return parse_output(result)
