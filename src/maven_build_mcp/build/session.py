"""Transformation session context.

Holds everything a build step reads (command, JDK override, paths, flags)
and the append-only error log. One instance per transformation session,
passed explicitly to the orchestrator.
"""

from __future__ import annotations

import logging
import os
import tempfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

BUILD_LOG_FILENAME = "build-logs.txt"
DEFAULT_LOG_SUBDIR = "maven-build-mcp"


@dataclass(frozen=True)
class FolderInfo:
    """Dependencies folder: copy target and local repository root."""

    path: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", os.path.abspath(self.path))

    def ensure_exists(self) -> FolderInfo:
        """Create the folder if missing and verify it is writable.

        Raises:
            PermissionError: If the folder is not writable
        """
        os.makedirs(self.path, exist_ok=True)
        if not os.access(self.path, os.W_OK):
            raise PermissionError(f"Dependencies folder is not writable: {self.path}")
        return self


@dataclass
class TransformSession:
    """Explicit state for one transformation session."""

    project_path: str
    module_path: str | None = None
    maven_name: str = ""
    java_home: str | None = None
    skip_tests: bool = False
    source_jdk_version: str | None = None
    log_dir: str | None = None
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    _cancelled: bool = field(default=False, repr=False)
    _error_log: list[str] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        self.project_path = os.path.abspath(self.project_path)
        if self.module_path is None:
            self.module_path = self.project_path

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation; polled once after install succeeds."""
        if not self._cancelled:
            logger.info(f"Transformation {self.session_id} cancellation requested")
        self._cancelled = True

    @property
    def error_log(self) -> str:
        return "".join(self._error_log)

    def append_to_error_log(self, message: str) -> None:
        """Append a line to the session's error log."""
        self._error_log.append(f"{message}\n\n")

    def clear_error_log(self) -> None:
        self._error_log.clear()

    def clear_cancellation(self) -> None:
        self._cancelled = False

    def write_logs(self) -> Path:
        """Write the accumulated error log to a file.

        Returns:
            Path to build-logs.txt in ``log_dir``, or in a per-session
            directory under the temp directory
        """
        if self.log_dir:
            directory = Path(self.log_dir)
        else:
            directory = Path(tempfile.gettempdir()) / DEFAULT_LOG_SUBDIR / self.session_id
        directory.mkdir(parents=True, exist_ok=True)
        log_path = directory / BUILD_LOG_FILENAME
        log_path.write_text(self.error_log, encoding="utf-8")
        logger.debug(f"Wrote build logs to {log_path}")
        return log_path

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "sessionId": self.session_id,
            "projectPath": self.project_path,
            "modulePath": self.module_path,
            "mavenName": self.maven_name or None,
            "javaHome": self.java_home,
            "skipTests": self.skip_tests,
            "sourceJdkVersion": self.source_jdk_version,
            "cancelled": self._cancelled,
        }
