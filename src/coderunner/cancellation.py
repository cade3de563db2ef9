"""Cooperative cancellation shared by the runner and the process executor."""

from __future__ import annotations

import asyncio

from .errors import ExecutionCancelledError


class CancellationToken:
    """One-shot flag that can also be awaited.

    Firing the token makes the executor kill the active child and makes the
    runner skip any per-record iterations that have not started yet.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str | None = None) -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise ExecutionCancelledError("Execution was cancelled.", self.reason)
