"""Build policy - Maven command selection, arguments and environment.

Every invocation gets:
- the command resolved for the session (wrapper script or system ``mvn``)
- a fixed argument list per operation
- a fresh copy of the ambient environment, optionally with JAVA_HOME replaced
"""

from __future__ import annotations

import ntpath
import os
import posixpath
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from .session import FolderInfo, TransformSession


POSIX_WRAPPER: Final[str] = "./mvnw"
WINDOWS_WRAPPER: Final[str] = ".\\mvnw.cmd"
SYSTEM_MAVEN: Final[str] = "mvn"

JAVA_HOME_VAR: Final[str] = "JAVA_HOME"


class MavenCommand(str, Enum):
    """Supported Maven operations."""

    COPY_DEPENDENCIES = "copy-dependencies"
    INSTALL = "clean install"
    VERSION = "-v"
    DEPENDENCY_UPDATES = "dependency-updates-report"


@dataclass(frozen=True)
class BuildCommandSpec:
    """Resolved executable plus the argument list for one operation."""

    executable: str
    args: tuple[str, ...]

    @property
    def arg_string(self) -> str:
        return " ".join(self.args)

    def __str__(self) -> str:
        return f"{self.executable} {self.arg_string}".strip()


def resolve_command(session: TransformSession) -> str:
    """Return the Maven command token for the session.

    The setup step must already have chosen one of ``./mvnw``,
    ``.\\mvnw.cmd`` or ``mvn``.
    """
    return session.maven_name


def build_environment(
    java_home: str | None = None,
    ambient: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Derive the environment for one invocation.

    Args:
        java_home: JDK home override, or None to keep the ambient value
        ambient: Source environment (defaults to ``os.environ``)

    Returns:
        A new dict; ``ambient`` itself is never modified
    """
    environment = dict(os.environ if ambient is None else ambient)
    if java_home is not None:
        environment[JAVA_HOME_VAR] = java_home
    return environment


def normalize_command_name(command: str) -> str:
    """Strip path separators from a command for telemetry labels.

    ``./mvnw`` → ``mvnw``, ``.\\mvnw.cmd`` → ``mvnw.cmd``, ``mvn`` → ``mvn``.
    """
    return ntpath.basename(posixpath.basename(command)) or command


def copy_dependencies_args(folder: FolderInfo) -> list[str]:
    return [
        "dependency:copy-dependencies",
        f"-DoutputDirectory={folder.path}",
        "-Dmdep.useRepositoryLayout=true",
        "-Dmdep.copyPom=true",
        "-Dmdep.addParentPoms=true",
        "-q",
    ]


def install_args(folder: FolderInfo, skip_tests: bool = False) -> list[str]:
    # IntelliJ runs 'clean' separately from 'install'; here they share one run
    args = [f"-Dmaven.repo.local={folder.path}", "clean", "install", "-q"]
    if skip_tests:
        args.append("-DskipTests")
    return args


def version_args() -> list[str]:
    return ["-v"]


def dependency_update_args(folder: FolderInfo) -> list[str]:
    return [
        "versions:dependency-updates-aggregate-report",
        f"-DoutputDirectory={folder.path}",
        "-DonlyProjectDependencies=true",
        "-DdependencyUpdatesReportFormats=xml",
    ]


def get_maven_command(
    command: MavenCommand,
    session: TransformSession,
    folder: FolderInfo | None = None,
) -> BuildCommandSpec:
    """Build the full command spec for an operation.

    Args:
        command: Maven operation to run
        session: Session supplying the resolved command and flags
        folder: Dependencies folder (required for all but VERSION)

    Returns:
        Executable plus argument list

    Raises:
        ValueError: If a folder is required but missing
    """
    executable = resolve_command(session)

    if command == MavenCommand.VERSION:
        return BuildCommandSpec(executable, tuple(version_args()))

    if folder is None:
        raise ValueError(f"Maven {command.value} requires a dependencies folder")

    if command == MavenCommand.COPY_DEPENDENCIES:
        args = copy_dependencies_args(folder)
    elif command == MavenCommand.INSTALL:
        args = install_args(folder, skip_tests=session.skip_tests)
    elif command == MavenCommand.DEPENDENCY_UPDATES:
        args = dependency_update_args(folder)
    else:
        raise ValueError(f"Unknown command: {command}")

    return BuildCommandSpec(executable, tuple(args))
