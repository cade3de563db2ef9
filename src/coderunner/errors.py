"""Error kinds raised by the runner and the tagged result returned by ``try_run``."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union

from .normalize import OutputRecord


class ErrorKind(str, enum.Enum):
    EMPTY_SOURCE = "empty_source"
    WORKSPACE_CREATION = "workspace_creation"
    TOOLCHAIN_NOT_FOUND = "toolchain_not_found"
    EXECUTION_TIMEOUT = "execution_timeout"
    EXECUTION_FAILED = "execution_failed"
    INVALID_OUTPUT = "invalid_output"
    CANCELLED = "cancelled"
    INVALID_MODE = "invalid_mode"


class CodeRunnerError(RuntimeError):
    """Base class for every failure surfaced by the runner.

    ``message`` is a one-line summary, ``description`` holds bounded
    diagnostics (usually the tail of the child's output streams).
    """

    kind: ErrorKind

    def __init__(self, message: str, description: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.description = description

    def __str__(self) -> str:
        if self.description:
            return f"{self.message}\n{self.description}"
        return self.message


class EmptySourceError(CodeRunnerError):
    kind = ErrorKind.EMPTY_SOURCE


class WorkspaceCreationError(CodeRunnerError):
    kind = ErrorKind.WORKSPACE_CREATION


class ToolchainNotFoundError(CodeRunnerError):
    kind = ErrorKind.TOOLCHAIN_NOT_FOUND


class ExecutionTimeoutError(CodeRunnerError):
    kind = ErrorKind.EXECUTION_TIMEOUT


class ExecutionFailedError(CodeRunnerError):
    kind = ErrorKind.EXECUTION_FAILED

    def __init__(self, exit_code: int | None, description: str | None = None) -> None:
        super().__init__(f"Rust compilation or execution failed (exit code {exit_code})", description)
        self.exit_code = exit_code


class InvalidOutputError(CodeRunnerError):
    kind = ErrorKind.INVALID_OUTPUT


class ExecutionCancelledError(CodeRunnerError):
    kind = ErrorKind.CANCELLED


class InvalidModeError(CodeRunnerError, ValueError):
    kind = ErrorKind.INVALID_MODE


@dataclass(slots=True)
class RunSuccess:
    records: list[OutputRecord] = field(default_factory=list)
    ok: bool = True


@dataclass(slots=True)
class RunFailure:
    kind: ErrorKind
    message: str
    description: str | None = None
    ok: bool = False

    @classmethod
    def from_error(cls, error: CodeRunnerError) -> "RunFailure":
        return cls(kind=error.kind, message=error.message, description=error.description)


RunResult = Union[RunSuccess, RunFailure]
