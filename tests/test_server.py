"""Tests for the MCP server surface."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import FakeRunner, make_result
from maven_build_mcp.build.manager import BuildManager
from maven_build_mcp.build.notifications import (
    BUILD_SUCCEEDED_NOTIFICATION,
    CLEAN_INSTALL_ERROR_NOTIFICATION,
)
from maven_build_mcp.build.state import BuildState, MavenExecutionError
from maven_build_mcp.config import BuildSettings
from maven_build_mcp.server import ClientNotifier, create_server, resolve_project_root


class TestClientNotifier:
    """Tests for forwarding notifications to the client."""

    @pytest.mark.asyncio
    async def test_forwards_to_context(self):
        ctx = MagicMock()
        ctx.error = AsyncMock()
        ctx.info = AsyncMock()
        notifier = ClientNotifier(ctx)

        await notifier.show_error("install failed")
        await notifier.show_info("build ok")
        await notifier.open_document(Path("/tmp/build-logs.txt"))

        ctx.error.assert_any_await("install failed")
        ctx.info.assert_awaited_once_with("build ok")
        assert notifier.messages == [("error", "install failed"), ("info", "build ok")]
        assert notifier.opened_documents == [Path("/tmp/build-logs.txt")]

    @pytest.mark.asyncio
    async def test_without_context_only_logs(self):
        notifier = ClientNotifier()
        await notifier.show_info("build ok")
        assert notifier.messages == [("info", "build ok")]

    @pytest.mark.asyncio
    async def test_forward_failure_is_contained(self):
        ctx = MagicMock()
        ctx.error = AsyncMock(side_effect=RuntimeError("closed"))
        notifier = ClientNotifier(ctx)

        await notifier.show_error("install failed")

        assert notifier.messages == [("error", "install failed")]

    @pytest.mark.asyncio
    async def test_concurrent_callers_keep_their_own_context(self):
        """Each call's messages reach only that call's client."""
        ctx_a, ctx_b = MagicMock(), MagicMock()
        for ctx in (ctx_a, ctx_b):
            ctx.error = AsyncMock()
            ctx.info = AsyncMock()
        notifier_a = ClientNotifier(ctx_a)
        notifier_b = ClientNotifier(ctx_b)

        await notifier_b.show_info("B built")
        await notifier_a.show_error("A failed")

        ctx_a.error.assert_awaited_once_with("A failed")
        ctx_a.info.assert_not_awaited()
        ctx_b.info.assert_awaited_once_with("B built")
        ctx_b.error.assert_not_awaited()


class TestResolveProjectRoot:
    """Tests for resolve_project_root."""

    @pytest.mark.asyncio
    async def test_explicit_path_wins(self, tmp_path):
        assert await resolve_project_root(None, str(tmp_path)) == str(tmp_path)


@pytest.mark.usefixtures("reset_manager")
class TestCreateServer:
    """Tests for server construction."""

    def test_configures_manager(self, tmp_path):
        server = create_server(str(tmp_path), BuildSettings(java_home="/opt/jdk-17"))

        assert server is not None
        session = BuildManager().get_orchestrator(str(tmp_path)).session
        assert session.java_home == "/opt/jdk-17"


async def _no_pause():
    return None


@pytest.mark.usefixtures("reset_manager")
class TestConcurrentPrepare:
    """Tests for notification routing across concurrent tool calls."""

    @pytest.mark.asyncio
    async def test_each_call_notifies_its_own_client(self, tmp_path):
        manager = BuildManager()
        project_a, project_b = str(tmp_path / "a"), str(tmp_path / "b")
        failing = FakeRunner([make_result(0), make_result(1, stderr="ERR")])
        for project, runner in ((project_a, failing), (project_b, FakeRunner())):
            orchestrator = manager.get_orchestrator(project)
            orchestrator.session.log_dir = str(tmp_path / "logs")
            orchestrator._runner = runner
            orchestrator._yield_point = _no_pause
        ctx_a, ctx_b = MagicMock(), MagicMock()
        for ctx in (ctx_a, ctx_b):
            ctx.error = AsyncMock()
            ctx.info = AsyncMock()

        results = await asyncio.gather(
            manager.prepare_project_dependencies(
                project_a, str(tmp_path / "deps-a"), notifier=ClientNotifier(ctx_a)
            ),
            manager.prepare_project_dependencies(
                project_b, str(tmp_path / "deps-b"), notifier=ClientNotifier(ctx_b)
            ),
            return_exceptions=True,
        )

        assert isinstance(results[0], MavenExecutionError)
        assert results[1] == BuildState.COMPLETED
        ctx_a.error.assert_any_await(CLEAN_INSTALL_ERROR_NOTIFICATION)
        ctx_a.info.assert_not_awaited()
        ctx_b.info.assert_awaited_once_with(BUILD_SUCCEEDED_NOTIFICATION)
        ctx_b.error.assert_not_awaited()
