"""Build orchestration for Maven-based code transformation.

Provides:
- Wrapper vs system Maven selection and JAVA_HOME override
- Shell invocation with bounded output capture
- Copy-dependencies / clean install sequencing with per-step failure policy
- Version probe and dependency-updates report
"""

from .manager import BuildManager
from .notifications import LoggingNotifier, Notifier
from .orchestrator import BuildOrchestrator
from .policy import BuildCommandSpec, MavenCommand, build_environment, normalize_command_name
from .runner import ProcessRunner
from .session import FolderInfo, TransformSession
from .setup import MavenSetup, detect_maven_command
from .state import (
    BuildState,
    DependencyReportError,
    LaunchError,
    MavenBuildError,
    MavenExecutionError,
    ProcessResult,
    StepKind,
    StepOutcome,
    TransformCancelledError,
)
from .telemetry import LoggingTelemetrySink, TelemetryEvent

__all__ = [
    "BuildManager",
    "BuildOrchestrator",
    "BuildCommandSpec",
    "MavenCommand",
    "build_environment",
    "normalize_command_name",
    "ProcessRunner",
    "FolderInfo",
    "TransformSession",
    "MavenSetup",
    "detect_maven_command",
    "BuildState",
    "StepKind",
    "StepOutcome",
    "ProcessResult",
    "MavenBuildError",
    "LaunchError",
    "MavenExecutionError",
    "DependencyReportError",
    "TransformCancelledError",
    "LoggingTelemetrySink",
    "TelemetryEvent",
    "LoggingNotifier",
    "Notifier",
]
