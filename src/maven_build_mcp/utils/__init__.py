"""Utility modules for maven-build-mcp."""

from .project import ProjectRootConfig, find_maven_project_root, get_project_root, parse_file_uri
from .version import VersionInfo, extract_version, parse_version_output

__all__ = [
    "get_project_root",
    "find_maven_project_root",
    "parse_file_uri",
    "ProjectRootConfig",
    "VersionInfo",
    "extract_version",
    "parse_version_output",
]
