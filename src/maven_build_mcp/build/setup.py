"""Maven setup - choose wrapper script or system Maven for a session."""

from __future__ import annotations

import logging
import os
from typing import Protocol

from .policy import POSIX_WRAPPER, SYSTEM_MAVEN, WINDOWS_WRAPPER
from .session import TransformSession

logger = logging.getLogger(__name__)


class BuildToolSetup(Protocol):
    """Resolves the build tool before any Maven invocation."""

    async def ensure_configured(self, session: TransformSession) -> None: ...


def detect_maven_command(project_path: str, platform: str | None = None) -> str:
    """Pick the Maven command for a project.

    Prefers the project's wrapper script for the platform, falling back to
    the system ``mvn``.

    Args:
        project_path: Project root directory
        platform: ``os.name`` value to detect for (defaults to the host)

    Returns:
        One of ``./mvnw``, ``.\\mvnw.cmd`` or ``mvn``
    """
    platform = platform or os.name
    if platform == "nt":
        if os.path.isfile(os.path.join(project_path, "mvnw.cmd")):
            return WINDOWS_WRAPPER
    elif os.path.isfile(os.path.join(project_path, "mvnw")):
        return POSIX_WRAPPER
    return SYSTEM_MAVEN


class MavenSetup:
    """Default setup: detect the wrapper once per session."""

    def __init__(self, platform: str | None = None):
        self._platform = platform

    async def ensure_configured(self, session: TransformSession) -> None:
        if session.maven_name:
            return
        session.maven_name = detect_maven_command(session.project_path, self._platform)
        if session.maven_name == SYSTEM_MAVEN:
            logger.info("CodeTransformation: Maven wrapper not found, using system mvn")
        else:
            logger.info(f"CodeTransformation: using Maven wrapper {session.maven_name}")
        session.append_to_error_log(f"Using Maven command {session.maven_name}")
