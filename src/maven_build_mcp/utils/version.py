"""Version extraction from ``mvn -v`` output."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

MAVEN_VERSION_MARKER = "Apache Maven"
MAVEN_VERSION_TERMINATOR = " "
JAVA_VERSION_MARKER = "Java version: "
JAVA_VERSION_TERMINATOR = ","


@dataclass(frozen=True)
class VersionInfo:
    """Maven and Java versions reported by the local build tool.

    A None field means the value could not be parsed.
    """

    maven_version: str | None = None
    java_version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"mavenVersion": self.maven_version, "javaVersion": self.java_version}


def extract_version(text: str | None, marker: str, terminator: str) -> str | None:
    """Extract the token that follows ``marker`` in ``text``.

    The value is the rest of the marker's line, whitespace-trimmed and cut
    at the first ``terminator``. It never continues onto the next line.

    Args:
        text: Captured command output
        marker: Text immediately preceding the value
        terminator: Character that ends the value

    Returns:
        The value, or None if the marker is absent or the value is empty
    """
    if not text or not marker:
        return None

    index = text.find(marker)
    if index < 0:
        return None

    line = text[index + len(marker):].split("\n", 1)[0].strip()
    end = line.find(terminator) if terminator else -1
    if end >= 0:
        line = line[:end]

    return line.strip() or None


def parse_version_output(text: str | None) -> VersionInfo:
    """Parse Maven and Java versions from ``mvn -v`` output.

    The two extractions are independent: one failing never hides the other.
    """
    try:
        maven_version = extract_version(text, MAVEN_VERSION_MARKER, MAVEN_VERSION_TERMINATOR)
    except (TypeError, ValueError) as e:
        logger.debug(f"Failed to parse Maven version: {e}")
        maven_version = None

    try:
        # matches the value of JAVA_HOME
        java_version = extract_version(text, JAVA_VERSION_MARKER, JAVA_VERSION_TERMINATOR)
    except (TypeError, ValueError) as e:
        logger.debug(f"Failed to parse Java version: {e}")
        java_version = None

    return VersionInfo(maven_version=maven_version, java_version=java_version)
