"""Build state management, result types and errors.

State machine for a transformation session:
IDLE → PREPARING_DEPENDENCIES → COPY_OK | COPY_FAILED → INSTALLING
     → INSTALL_OK | INSTALL_FAILED → CHECK_CANCELLED → COMPLETED | CANCELLED
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class BuildState(str, Enum):
    """Transformation build session states."""

    IDLE = "idle"
    PREPARING_DEPENDENCIES = "preparing_dependencies"
    COPY_OK = "copy_ok"
    COPY_FAILED = "copy_failed"  # logged, pipeline continues
    INSTALLING = "installing"
    INSTALL_OK = "install_ok"
    INSTALL_FAILED = "install_failed"
    CHECK_CANCELLED = "check_cancelled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self in (BuildState.INSTALL_FAILED, BuildState.CANCELLED, BuildState.COMPLETED)


class StepKind(str, Enum):
    """How a finished step affects the pipeline."""

    OK = "ok"
    NON_FATAL = "non_fatal"
    FATAL = "fatal"


class MavenBuildError(Exception):
    """Base error for Maven build operations."""

    code: str = "MavenBuildError"

    def __init__(
        self,
        message: str,
        output: str = "",
        exit_code: int | None = None,
        command: str | None = None,
    ):
        super().__init__(message)
        self.output = output
        self.exit_code = exit_code
        self.command = command

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "code": self.code,
        }
        if self.command:
            result["command"] = self.command
        if self.exit_code is not None:
            result["exitCode"] = self.exit_code
        if self.output:
            result["output"] = self.output
        return result


class LaunchError(MavenBuildError):
    """The build tool could not be started (not found, not executable)."""

    code = "LaunchError"


class MavenExecutionError(MavenBuildError):
    """Maven ran and failed during a fatal step (clean install)."""

    code = "MavenExecutionError"


class DependencyReportError(MavenBuildError):
    """The dependency-updates report command failed."""

    code = "DependencyReportError"


class TransformCancelledError(MavenBuildError):
    """The transformation was cancelled after the install step."""

    code = "TransformCancelled"


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a single external process invocation."""

    command: str
    status: int | None
    stdout: str = ""
    stderr: str = ""
    launch_error: LaunchError | None = None
    truncated: bool = False
    duration_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        """True only when the process launched and exited with status 0."""
        return self.launch_error is None and self.status == 0

    def error_log(self) -> str:
        """Captured diagnostics: launch error, then stderr, then stdout."""
        prefix = f"{self.launch_error}\n" if self.launch_error is not None else ""
        return f"{prefix}{self.stderr}\n{self.stdout}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "command": self.command,
            "success": self.succeeded,
            "durationMs": round(self.duration_ms, 2),
        }
        if self.status is not None:
            result["exitCode"] = self.status
        if self.launch_error is not None:
            result["launchError"] = str(self.launch_error)
        if self.truncated:
            result["truncated"] = True
        return result


@dataclass(frozen=True)
class StepOutcome:
    """Result of one orchestration step: OK, NON_FATAL or FATAL."""

    kind: StepKind
    result: ProcessResult
    error: MavenBuildError | None = None

    @classmethod
    def ok(cls, result: ProcessResult) -> StepOutcome:
        return cls(StepKind.OK, result)

    @classmethod
    def non_fatal(cls, result: ProcessResult, error: MavenBuildError) -> StepOutcome:
        return cls(StepKind.NON_FATAL, result, error)

    @classmethod
    def fatal(cls, result: ProcessResult, error: MavenBuildError) -> StepOutcome:
        return cls(StepKind.FATAL, result, error)

    def raise_for_fatal(self) -> None:
        """Raise the carried error if this outcome is fatal."""
        if self.kind == StepKind.FATAL and self.error is not None:
            raise self.error
