"""Build manager - singleton registry of transformation sessions.

Provides:
- One session + orchestrator per project
- Serialized Maven runs per session (asyncio.Lock)
- Global state listeners and cancellation
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from typing import Any

from .notifications import Notifier
from .orchestrator import BuildOrchestrator
from .runner import MAX_OUTPUT_BYTES
from .session import FolderInfo, TransformSession
from .state import BuildState
from .telemetry import LoggingTelemetrySink, TelemetrySink
from ..config import BuildSettings
from ..utils.version import VersionInfo

logger = logging.getLogger(__name__)


class _ManagedSession:
    def __init__(self, orchestrator: BuildOrchestrator):
        self.orchestrator = orchestrator
        self.lock = asyncio.Lock()


class BuildManager:
    """Singleton manager for transformation build sessions.

    Usage:
        manager = BuildManager()
        await manager.prepare_project_dependencies("/path/to/project", "/tmp/deps")
    """

    _instance: BuildManager | None = None

    def __new__(cls) -> BuildManager:
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        """Initialize manager (only once)."""
        if self._initialized:
            return
        self._sessions: dict[str, _ManagedSession] = {}
        self._global_listeners: list[Callable[[str, BuildState], None]] = []
        self._settings = BuildSettings()
        self._telemetry: TelemetrySink = LoggingTelemetrySink()
        self._notifier: Notifier | None = None
        self._initialized = True

    def configure(
        self,
        settings: BuildSettings | None = None,
        telemetry: TelemetrySink | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        """Set defaults used for sessions created after this call."""
        if settings is not None:
            self._settings = settings
        if telemetry is not None:
            self._telemetry = telemetry
        if notifier is not None:
            self._notifier = notifier

    def _normalize_path(self, path: str) -> str:
        """Normalize path for consistent key lookup."""
        return os.path.normcase(os.path.normpath(os.path.abspath(path)))

    def get_orchestrator(self, project_path: str) -> BuildOrchestrator:
        """Get or create the orchestrator for a project.

        Args:
            project_path: Root directory of the Maven project

        Returns:
            Orchestrator bound to the project's session
        """
        return self._get_managed(project_path).orchestrator

    def _get_managed(self, project_path: str) -> _ManagedSession:
        key = self._normalize_path(project_path)
        if key not in self._sessions:
            session = TransformSession(
                project_path=project_path,
                java_home=self._settings.java_home,
                skip_tests=self._settings.skip_tests,
                log_dir=self._settings.log_dir,
            )
            orchestrator = BuildOrchestrator(
                session,
                telemetry=self._telemetry,
                notifier=self._notifier,
                output_cap=self._settings.output_cap or MAX_OUTPUT_BYTES,
            )
            orchestrator.on_state_change(
                lambda state: self._notify_listeners(project_path, state)
            )
            self._sessions[key] = _ManagedSession(orchestrator)
        return self._sessions[key]

    def _notify_listeners(self, project: str, state: BuildState) -> None:
        """Notify global state listeners."""
        for listener in self._global_listeners:
            try:
                listener(project, state)
            except Exception:
                logger.exception("Global build listener error")

    def on_build_state_change(
        self, listener: Callable[[str, BuildState], None]
    ) -> None:
        """Register global build state change listener.

        Listener receives (project_path, new_state).
        """
        self._global_listeners.append(listener)

    async def prepare_project_dependencies(
        self,
        project_path: str,
        dependencies_folder: str,
        root_path: str | None = None,
        notifier: Notifier | None = None,
    ) -> BuildState:
        """Copy dependencies and install the project.

        Args:
            project_path: Root directory of the Maven project
            dependencies_folder: Folder receiving dependencies (created if missing)
            root_path: Directory with the root pom.xml (defaults to module path)
            notifier: Receives this call's notifications (defaults to the
                configured notifier)

        Returns:
            Terminal build state
        """
        managed = self._get_managed(project_path)
        folder = FolderInfo(dependencies_folder).ensure_exists()
        async with managed.lock:
            orchestrator = managed.orchestrator
            return await orchestrator.prepare_project_dependencies(
                folder, root_path or orchestrator.session.module_path, notifier
            )

    async def probe_versions(self, project_path: str) -> VersionInfo:
        """Report local Maven and Java versions for a project."""
        managed = self._get_managed(project_path)
        async with managed.lock:
            return await managed.orchestrator.probe_versions(project_path)

    async def dependency_update_report(
        self, project_path: str, dependencies_folder: str
    ) -> str:
        """Run the dependency-updates report into a folder."""
        managed = self._get_managed(project_path)
        folder = FolderInfo(dependencies_folder).ensure_exists()
        async with managed.lock:
            return await managed.orchestrator.dependency_update_report(folder)

    def cancel(self, project_path: str) -> bool:
        """Flag the project's session as cancelled.

        Returns:
            True if a session existed
        """
        key = self._normalize_path(project_path)
        if key in self._sessions:
            self._sessions[key].orchestrator.session.cancel()
            return True
        return False

    def cancel_all(self) -> int:
        """Flag every session as cancelled.

        Returns:
            Number of sessions flagged
        """
        for managed in self._sessions.values():
            managed.orchestrator.session.cancel()
        return len(self._sessions)

    def get_state(self, project_path: str) -> BuildState | None:
        """Get current build state for a project, or None if unknown."""
        key = self._normalize_path(project_path)
        if key in self._sessions:
            return self._sessions[key].orchestrator.state
        return None

    def get_error_log(self, project_path: str) -> str | None:
        """Get the accumulated error log for a project, or None if unknown."""
        key = self._normalize_path(project_path)
        if key in self._sessions:
            return self._sessions[key].orchestrator.session.error_log
        return None

    def get_error_log_for_session(self, session_id: str) -> str | None:
        """Get the error log of the session with this id, or None if unknown."""
        for managed in self._sessions.values():
            if managed.orchestrator.session.session_id == session_id:
                return managed.orchestrator.session.error_log
        return None

    def clear_session(self, project_path: str) -> bool:
        """Remove session for a project.

        Returns:
            True if session was removed
        """
        key = self._normalize_path(project_path)
        if key in self._sessions:
            del self._sessions[key]
            return True
        return False

    def to_dict(self) -> dict[str, Any]:
        """Get manager status as dictionary."""
        return {
            "sessions": {
                path: {
                    "state": managed.orchestrator.state.value,
                    "session": managed.orchestrator.session.to_dict(),
                }
                for path, managed in self._sessions.items()
            }
        }
