"""MCP Server exposing the Maven build pipeline."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from mcp.server.fastmcp import Context, FastMCP
from pydantic import AnyUrl

from .build import BuildManager, LoggingNotifier, MavenBuildError
from .config import BuildSettings
from .utils.project import get_project_root

logger = logging.getLogger(__name__)

# Project used when the client provides no roots
_initial_project_path: str | None = None


class ClientNotifier(LoggingNotifier):
    """Notifier that also forwards messages to the MCP client."""

    def __init__(self, ctx: Context | None = None) -> None:
        super().__init__()
        self._ctx = ctx

    async def _forward(self, level: str, message: str) -> None:
        if self._ctx is None:
            return
        try:
            if level == "error":
                await self._ctx.error(message)
            else:
                await self._ctx.info(message)
        except Exception as e:
            # Forwarding failure shouldn't break the tool
            logger.debug(f"Could not forward notification to client: {e}")

    async def show_error(self, message: str) -> None:
        await super().show_error(message)
        await self._forward("error", message)

    async def show_info(self, message: str) -> None:
        await super().show_info(message)
        await self._forward("info", message)

    async def open_document(self, path: Path) -> None:
        await super().open_document(path)
        await self._forward("error", f"Build logs: {path}")


def get_manager() -> BuildManager:
    """Get the build manager singleton."""
    return BuildManager()


async def resolve_project_root(ctx: Context | None, project_path: str | None = None) -> str:
    """Resolve the project to operate on.

    Args:
        ctx: MCP Context for accessing client roots
        project_path: Explicit path from the tool call (wins if given)
    """
    if project_path:
        return os.path.abspath(project_path)
    root = await get_project_root(ctx)
    if root is not None:
        return str(root)
    return _initial_project_path or os.getcwd()


def create_server(
    project_path: str | None = None,
    settings: BuildSettings | None = None,
) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        project_path: Default Maven project root
        settings: Session defaults (JAVA_HOME override, skip tests, log dir)
    """
    global _initial_project_path
    _initial_project_path = project_path
    mcp = FastMCP("maven-build-mcp")

    manager = get_manager()
    manager.configure(settings=settings or BuildSettings.from_env())

    async def notify_state_changed(ctx: Context) -> None:
        """Notify client that maven://state resource has changed."""
        try:
            if ctx.session:
                await ctx.session.send_resource_updated(AnyUrl("maven://state"))
        except Exception as e:
            logger.debug(f"Resource update notification failed: {e}")

    @mcp.tool()
    async def prepare_project_dependencies(
        ctx: Context,
        dependencies_folder: str,
        root_path: str | None = None,
        project_path: str | None = None,
    ) -> dict:
        """
        Stage dependencies and build the Maven project.

        Runs `dependency:copy-dependencies` into dependencies_folder (best effort:
        a failure is logged and the pipeline continues), then
        `clean install` against dependencies_folder as the local repository.
        A failed install aborts and returns the captured Maven output.

        Args:
            dependencies_folder: Folder for copied dependencies (created if missing)
            root_path: Directory with the root pom.xml (defaults to the project)
            project_path: Maven project root (defaults to the client root)
        """
        try:
            project = await resolve_project_root(ctx, project_path)
            state = await manager.prepare_project_dependencies(
                project, dependencies_folder, root_path, notifier=ClientNotifier(ctx)
            )
            return {"success": True, "data": {"state": state.value}}
        except MavenBuildError as e:
            return {"success": False, "error": e.to_dict()}
        except Exception as e:
            return {"success": False, "error": str(e)}
        finally:
            await notify_state_changed(ctx)

    @mcp.tool()
    async def probe_maven_versions(ctx: Context, project_path: str | None = None) -> dict:
        """
        Report the local Maven and Java versions from `mvn -v`.

        Fields that cannot be parsed are null (usually a misconfigured JAVA_HOME).

        Args:
            project_path: Maven project root (defaults to the client root)
        """
        try:
            project = await resolve_project_root(ctx, project_path)
            versions = await manager.probe_versions(project)
            return {"success": True, "data": versions.to_dict()}
        except Exception as e:
            return {"success": False, "error": str(e)}

    @mcp.tool()
    async def run_dependency_update_report(
        ctx: Context,
        dependencies_folder: str,
        project_path: str | None = None,
    ) -> dict:
        """
        Run `versions:dependency-updates-aggregate-report` (XML) into dependencies_folder.

        Args:
            dependencies_folder: Folder holding the pom.xml and receiving the report
            project_path: Maven project root (defaults to the client root)
        """
        try:
            project = await resolve_project_root(ctx, project_path)
            output = await manager.dependency_update_report(project, dependencies_folder)
            return {"success": True, "data": {"output": output}}
        except MavenBuildError as e:
            return {"success": False, "error": e.to_dict()}
        except Exception as e:
            return {"success": False, "error": str(e)}

    @mcp.tool()
    async def get_build_state(ctx: Context, project_path: str | None = None) -> dict:
        """
        Get the build pipeline state for a project.

        Args:
            project_path: Maven project root (defaults to the client root)
        """
        project = await resolve_project_root(ctx, project_path)
        state = manager.get_state(project)
        return {"success": True, "data": {"state": state.value if state else None}}

    @mcp.tool()
    async def cancel_transform(ctx: Context, project_path: str | None = None) -> dict:
        """
        Cancel the transformation for a project.

        A running Maven command is not interrupted; cancellation is observed
        after clean install finishes.

        Args:
            project_path: Maven project root (defaults to the client root)
        """
        project = await resolve_project_root(ctx, project_path)
        if not manager.cancel(project):
            return {"success": False, "error": f"No build session for {project}"}
        return {"success": True, "data": {"cancelled": True}}

    # ============== Resources ==============

    @mcp.resource("maven://state", mime_type="application/json")
    async def maven_state_resource() -> str:
        """Build sessions and their states (JSON)."""
        return json.dumps(manager.to_dict(), indent=2)

    @mcp.resource("maven://error-log", mime_type="text/plain")
    async def maven_error_log_resource() -> str:
        """Accumulated Maven error log of the default project (plain text)."""
        return manager.get_error_log(_initial_project_path or os.getcwd()) or ""

    @mcp.resource("maven://sessions/{session_id}/error-log", mime_type="text/plain")
    async def maven_session_error_log_resource(session_id: str) -> str:
        """Error log of any session, by the sessionId listed in maven://state."""
        error_log = manager.get_error_log_for_session(session_id)
        if error_log is None:
            raise ValueError(f"Unknown build session: {session_id}")
        return error_log

    logger.info("Maven build MCP Server initialized")
    return mcp
