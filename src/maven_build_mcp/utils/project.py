"""Locating the Maven project a build runs against.

Sources are consulted in this order:
1. the first root advertised by the MCP client
2. MAVEN_BUILD_PROJECT_ROOT, then MCP_PROJECT_ROOT
3. the --project argument
4. the startup directory, searched upward for Maven markers with --project-from-cwd
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

if TYPE_CHECKING:
    from mcp.server.fastmcp import Context

logger = logging.getLogger(__name__)

POM_FILENAME = "pom.xml"
WRAPPER_FILENAMES = ("mvnw", "mvnw.cmd")
ROOT_ENV_VARS = ("MAVEN_BUILD_PROJECT_ROOT", "MCP_PROJECT_ROOT")


@dataclass
class ProjectRootConfig:
    """Startup inputs for project discovery."""

    startup_cwd: Path | None = None
    use_project_from_cwd: bool = False
    explicit_project_path: Path | None = None
    env_var_names: tuple[str, ...] = field(default_factory=lambda: ROOT_ENV_VARS)


_config = ProjectRootConfig()


def configure_project_root(
    *,
    use_project_from_cwd: bool = False,
    explicit_project_path: str | Path | None = None,
    startup_cwd: str | Path | None = None,
) -> None:
    """Record the CLI inputs used by get_project_root."""
    global _config
    _config = ProjectRootConfig(
        startup_cwd=Path(startup_cwd) if startup_cwd else None,
        use_project_from_cwd=use_project_from_cwd,
        explicit_project_path=Path(explicit_project_path) if explicit_project_path else None,
    )
    logger.debug(f"Project discovery: {_config}")


def get_config() -> ProjectRootConfig:
    return _config


def parse_file_uri(uri: str) -> Path | None:
    """Convert a ``file://`` URI into an absolute path.

    Returns None for other schemes or for URIs that do not name an
    absolute location.
    """
    parts = urlparse(str(uri))
    if parts.scheme != "file":
        logger.warning(f"Ignoring non-file root URI: {uri}")
        return None

    raw = unquote(parts.path)
    if sys.platform == "win32":
        # "/C:/work/app" -> "C:/work/app"
        if len(raw) > 2 and raw[0] == "/" and raw[2] == ":":
            raw = raw[1:]
        if parts.netloc:
            raw = f"\\\\{parts.netloc}{raw}"

    candidate = Path(raw)
    if candidate.is_absolute():
        return candidate
    logger.warning(f"Root URI does not resolve to an absolute path: {uri}")
    return None


def _walk_up(start: Path, boundary: Path | None) -> Iterator[Path]:
    """Yield ``start`` and its parents, stopping at ``boundary``."""
    for directory in (start, *start.parents):
        yield directory
        if boundary is not None and directory == boundary:
            break


def find_maven_project_root(start_dir: Path | None = None, boundary: Path | None = None) -> Path:
    """Find the Maven project that contains a directory.

    The nearest directory holding a Maven wrapper wins. Without a wrapper
    the topmost pom.xml of the unbroken chain above ``start_dir`` is the
    reactor root. A ``.git`` directory is the last resort.

    Args:
        start_dir: Where to begin. Defaults to CWD.
        boundary: Directory the search never leaves.

    Returns:
        The project directory, or the start directory if nothing matched
    """
    start = (start_dir or Path.cwd()).resolve()
    stop = boundary.resolve() if boundary is not None else None

    for directory in _walk_up(start, stop):
        if any((directory / name).is_file() for name in WRAPPER_FILENAMES):
            return directory

    reactor_root = None
    for directory in _walk_up(start, stop):
        if not (directory / POM_FILENAME).is_file():
            if reactor_root is not None:
                break
            continue
        reactor_root = directory
    if reactor_root is not None:
        return reactor_root

    return next(
        (d for d in _walk_up(start, stop) if (d / ".git").exists()),
        start,
    )


async def _root_from_client(ctx: Context) -> Path | None:
    try:
        result = await ctx.session.list_roots()
    except Exception as e:
        # Not every client implements roots/list
        logger.info(f"Client roots unavailable: {e}")
        return None
    if not result or not result.roots:
        return None
    path = parse_file_uri(str(result.roots[0].uri))
    if path is None or not path.is_dir():
        logger.warning(f"Client root is not a usable directory: {result.roots[0].uri}")
        return None
    logger.info(f"Maven project from client root: {path}")
    return path


def _root_from_env(names: tuple[str, ...]) -> Path | None:
    for name in names:
        value = os.environ.get(name)
        if not value:
            continue
        if Path(value).is_dir():
            logger.info(f"Maven project from {name}: {value}")
            return Path(value)
        logger.warning(f"{name} points to a missing directory: {value}")
    return None


async def get_project_root(ctx: Context | None = None) -> Path | None:
    """Pick the Maven project root from the sources listed in the module docs.

    Args:
        ctx: Tool context used to query client roots, or None

    Returns:
        The project directory, or None when no source provides one
    """
    config = get_config()

    if ctx is not None:
        path = await _root_from_client(ctx)
        if path is not None:
            return path

    path = _root_from_env(config.env_var_names)
    if path is not None:
        return path

    explicit = config.explicit_project_path
    if explicit is not None and explicit.is_dir():
        return explicit

    if config.startup_cwd is None:
        logger.warning("No Maven project root available")
        return None
    if config.use_project_from_cwd:
        return find_maven_project_root(config.startup_cwd)
    return config.startup_cwd
