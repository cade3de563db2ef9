"""coderunner public package exports."""

from .cancellation import CancellationToken
from .config import RunnerSettings, load_config, load_settings, settings_from_config
from .errors import (
    CodeRunnerError,
    EmptySourceError,
    ErrorKind,
    ExecutionCancelledError,
    ExecutionFailedError,
    ExecutionTimeoutError,
    InvalidModeError,
    InvalidOutputError,
    RunFailure,
    RunResult,
    RunSuccess,
    ToolchainNotFoundError,
    WorkspaceCreationError,
)
from .normalize import OutputRecord, normalize_output
from .runner import CodeRunner, Mode
from .workspace import DEFAULT_SOURCE

__all__ = [
    "CancellationToken",
    "CodeRunner",
    "CodeRunnerError",
    "DEFAULT_SOURCE",
    "EmptySourceError",
    "ErrorKind",
    "ExecutionCancelledError",
    "ExecutionFailedError",
    "ExecutionTimeoutError",
    "InvalidModeError",
    "InvalidOutputError",
    "Mode",
    "OutputRecord",
    "RunFailure",
    "RunResult",
    "RunSuccess",
    "RunnerSettings",
    "ToolchainNotFoundError",
    "WorkspaceCreationError",
    "load_config",
    "load_settings",
    "normalize_output",
    "settings_from_config",
]
