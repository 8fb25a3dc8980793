"""Build orchestrator - sequences Maven steps with per-step failure policy.

Step policy:
- copy-dependencies: best effort, failure is logged and the pipeline continues
- clean install: fatal, failure raises MavenExecutionError
- version probe: never raises, unparsed fields are None
- dependency-updates report: failure raises DependencyReportError
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from .notifications import (
    BUILD_SUCCEEDED_NOTIFICATION,
    CLEAN_INSTALL_ERROR_NOTIFICATION,
    LoggingNotifier,
    Notifier,
)
from .policy import (
    MavenCommand,
    build_environment,
    get_maven_command,
    normalize_command_name,
)
from .runner import MAX_OUTPUT_BYTES, ProcessRunner
from .session import FolderInfo, TransformSession
from .setup import BuildToolSetup, MavenSetup
from .state import (
    BuildState,
    DependencyReportError,
    MavenBuildError,
    MavenExecutionError,
    ProcessResult,
    StepKind,
    StepOutcome,
    TransformCancelledError,
)
from .telemetry import LoggingTelemetrySink, TelemetryEvent, TelemetrySink
from ..utils.version import VersionInfo, parse_version_output

logger = logging.getLogger(__name__)

# Pause before the first Maven run so an observing UI can render
YIELD_DELAY_SECONDS: float = 0.1

YieldPoint = Callable[[], Awaitable[None]]


async def default_yield_point() -> None:
    await asyncio.sleep(YIELD_DELAY_SECONDS)


class BuildOrchestrator:
    """Runs the Maven steps of one transformation session."""

    def __init__(
        self,
        session: TransformSession,
        setup: BuildToolSetup | None = None,
        runner: ProcessRunner | None = None,
        telemetry: TelemetrySink | None = None,
        notifier: Notifier | None = None,
        yield_point: YieldPoint | None = None,
        output_cap: int = MAX_OUTPUT_BYTES,
    ):
        self._session = session
        self._setup = setup or MavenSetup()
        self._runner = runner or ProcessRunner(output_cap)
        self._telemetry = telemetry or LoggingTelemetrySink()
        self._notifier = notifier or LoggingNotifier()
        self._yield_point = yield_point or default_yield_point
        self._output_cap = output_cap
        self._state = BuildState.IDLE
        self._state_listeners: list[Callable[[BuildState], None]] = []

    @property
    def session(self) -> TransformSession:
        return self._session

    @property
    def state(self) -> BuildState:
        """Current pipeline state."""
        return self._state

    def on_state_change(self, listener: Callable[[BuildState], None]) -> None:
        """Register state change listener."""
        self._state_listeners.append(listener)

    def _set_state(self, new_state: BuildState) -> None:
        """Update state and notify listeners."""
        old_state = self._state
        self._state = new_state
        if old_state != new_state:
            logger.info(f"Build state: {old_state.value} -> {new_state.value}")
            for listener in self._state_listeners:
                try:
                    listener(new_state)
                except Exception:
                    logger.exception("State listener error")

    async def _run(
        self,
        command: MavenCommand,
        cwd: str,
        folder: FolderInfo | None = None,
        java_home: str | None = None,
    ) -> ProcessResult:
        spec = get_maven_command(command, self._session, folder)
        return await self._runner.run(
            spec.executable,
            list(spec.args),
            cwd=cwd,
            env=build_environment(java_home),
            output_cap=self._output_cap,
        )

    async def _copy_step(self, folder: FolderInfo, module_path: str) -> StepOutcome:
        base_command = self._session.maven_name
        self._session.append_to_error_log(f"Running command {base_command} copy-dependencies")

        result = await self._run(
            MavenCommand.COPY_DEPENDENCIES, module_path, folder, self._session.java_home
        )

        if not result.succeeded:
            error_log = result.error_log()
            self._session.append_to_error_log(
                f"{base_command} copy-dependencies failed: \n {error_log}"
            )
            logger.info(
                f"CodeTransformation: Maven copy-dependencies command {base_command} failed, "
                f"but still continuing with transformation: {error_log}"
            )
            error = MavenBuildError(
                "Maven copy-deps error",
                output=error_log,
                exit_code=result.status,
                command=result.command,
            )
            return StepOutcome.non_fatal(result, error)

        self._session.append_to_error_log(f"{base_command} copy-dependencies succeeded")
        return StepOutcome.ok(result)

    async def _install_step(self, folder: FolderInfo, module_path: str) -> StepOutcome:
        base_command = self._session.maven_name
        self._session.append_to_error_log(f"Running command {base_command} clean install")
        arg_string = get_maven_command(MavenCommand.INSTALL, self._session, folder).arg_string

        start_time = time.perf_counter()
        result: ProcessResult | None = None
        try:
            result = await self._run(
                MavenCommand.INSTALL, module_path, folder, self._session.java_home
            )
        finally:
            succeeded = result is not None and result.succeeded
            self._telemetry.record(
                TelemetryEvent(
                    session_id=self._session.session_id,
                    build_command=normalize_command_name(base_command),
                    result="Succeeded" if succeeded else "Failed",
                    duration_ms=(time.perf_counter() - start_time) * 1000,
                    reason=None if succeeded else "MavenExecutionError",
                )
            )

        if not result.succeeded:
            error_log = result.error_log()
            self._session.append_to_error_log(
                f"{base_command} {arg_string} failed: \n {error_log}"
            )
            logger.error(
                f"CodeTransformation: Error in running Maven {arg_string} "
                f"command {base_command} = {error_log}"
            )
            error = MavenExecutionError(
                f"Maven {arg_string} error",
                output=error_log,
                exit_code=result.status,
                command=result.command,
            )
            if result.launch_error is not None:
                error.__cause__ = result.launch_error
            return StepOutcome.fatal(result, error)

        self._session.append_to_error_log(f"{base_command} {arg_string} succeeded")
        return StepOutcome.ok(result)

    async def copy_dependencies(self, folder: FolderInfo, module_path: str) -> StepOutcome:
        """Copy all dependencies into ``folder`` in repository layout.

        Best effort: a failure is logged and returned as NON_FATAL.
        """
        return await self._copy_step(folder, module_path)

    async def install_project(self, folder: FolderInfo, module_path: str) -> ProcessResult:
        """Run ``clean install`` against the project-local repository.

        Raises:
            MavenExecutionError: If Maven fails or cannot be launched
        """
        outcome = await self._install_step(folder, module_path)
        outcome.raise_for_fatal()
        return outcome.result

    async def prepare_project_dependencies(
        self,
        folder: FolderInfo,
        root_path: str,
        notifier: Notifier | None = None,
    ) -> BuildState:
        """Stage dependencies and build the project.

        Each call is a new run: the error log starts empty, and a
        cancellation request is consumed when the run ends.

        Args:
            folder: Dependencies folder (copy target and local repository)
            root_path: Directory holding the root pom.xml
            notifier: Receives this run's notifications (defaults to the
                orchestrator's notifier)

        Returns:
            BuildState.COMPLETED

        Raises:
            MavenExecutionError: If clean install fails
            TransformCancelledError: If cancelled after install
        """
        self._session.clear_error_log()
        try:
            return await self._prepare(folder, root_path, notifier or self._notifier)
        finally:
            self._session.clear_cancellation()

    async def _prepare(
        self, folder: FolderInfo, root_path: str, notifier: Notifier
    ) -> BuildState:
        self._set_state(BuildState.PREPARING_DEPENDENCIES)
        await self._setup.ensure_configured(self._session)
        logger.info("CodeTransformation: running Maven copy-dependencies")
        await self._yield_point()

        copy_outcome = await self._copy_step(folder, root_path)
        if copy_outcome.kind == StepKind.OK:
            self._set_state(BuildState.COPY_OK)
        else:
            logger.info(
                "CodeTransformation: Maven copy-dependencies failed, "
                "but transformation will continue and may succeed"
            )
            self._set_state(BuildState.COPY_FAILED)

        logger.info("CodeTransformation: running Maven install")
        self._set_state(BuildState.INSTALLING)
        install_outcome = await self._install_step(folder, root_path)
        if install_outcome.kind == StepKind.FATAL:
            self._set_state(BuildState.INSTALL_FAILED)
            await notifier.show_error(CLEAN_INSTALL_ERROR_NOTIFICATION)
            log_path = self._session.write_logs()
            await notifier.open_document(log_path)
            install_outcome.raise_for_fatal()
        self._set_state(BuildState.INSTALL_OK)

        self._set_state(BuildState.CHECK_CANCELLED)
        if self._session.is_cancelled:
            self._set_state(BuildState.CANCELLED)
            raise TransformCancelledError("Transformation cancelled")

        await notifier.show_info(BUILD_SUCCEEDED_NOTIFICATION)
        self._set_state(BuildState.COMPLETED)
        return self._state

    async def probe_versions(self, project_path: str | None = None) -> VersionInfo:
        """Report local Maven and Java versions from ``mvn -v``.

        Never raises; fields that cannot be determined are None. JAVA_HOME
        is not overridden so the user's own setting is reported.
        """
        await self._setup.ensure_configured(self._session)
        base_command = self._session.maven_name
        project_path = project_path or self._session.project_path

        result = await self._run(MavenCommand.VERSION, project_path)
        if result.launch_error is not None:
            logger.info(f"CodeTransformation: could not run {base_command}: {result.launch_error}")

        # None here usually means JAVA_HOME is set incorrectly
        versions = parse_version_output(result.stdout)
        logger.info(
            f"CodeTransformation: Ran {base_command} to get Maven version = "
            f"{versions.maven_version} and Java version = {versions.java_version} "
            f"with project JDK = {self._session.source_jdk_version}"
        )
        return versions

    async def dependency_update_report(self, folder: FolderInfo) -> str:
        """Generate the dependency-updates aggregate report into ``folder``.

        Maven looks for pom.xml in the dependencies folder.

        Returns:
            Raw stdout of the report command

        Raises:
            DependencyReportError: If the report command fails
        """
        await self._setup.ensure_configured(self._session)
        result = await self._run(
            MavenCommand.DEPENDENCY_UPDATES, folder.path, folder, self._session.java_home
        )
        if not result.succeeded:
            stderr = result.stderr
            if result.launch_error is not None:
                stderr = f"{result.launch_error}\n{stderr}"
            raise DependencyReportError(
                stderr, output=stderr, exit_code=result.status, command=result.command
            )
        return result.stdout
