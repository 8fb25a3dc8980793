"""Tests for Maven wrapper detection."""

import pytest

from maven_build_mcp.build.session import TransformSession
from maven_build_mcp.build.setup import MavenSetup, detect_maven_command


class TestDetectMavenCommand:
    """Tests for detect_maven_command."""

    def test_posix_wrapper(self, tmp_path):
        (tmp_path / "mvnw").touch()
        assert detect_maven_command(str(tmp_path), platform="posix") == "./mvnw"

    def test_windows_wrapper(self, tmp_path):
        (tmp_path / "mvnw.cmd").touch()
        assert detect_maven_command(str(tmp_path), platform="nt") == ".\\mvnw.cmd"

    def test_windows_ignores_posix_wrapper(self, tmp_path):
        (tmp_path / "mvnw").touch()
        assert detect_maven_command(str(tmp_path), platform="nt") == "mvn"

    def test_falls_back_to_system_maven(self, tmp_path):
        assert detect_maven_command(str(tmp_path), platform="posix") == "mvn"


class TestMavenSetup:
    """Tests for MavenSetup.ensure_configured."""

    @pytest.mark.asyncio
    async def test_sets_command_once(self, tmp_path):
        (tmp_path / "mvnw").touch()
        session = TransformSession(project_path=str(tmp_path))

        await MavenSetup(platform="posix").ensure_configured(session)

        assert session.maven_name == "./mvnw"
        assert "Using Maven command ./mvnw" in session.error_log

    @pytest.mark.asyncio
    async def test_keeps_existing_command(self, tmp_path):
        (tmp_path / "mvnw").touch()
        session = TransformSession(project_path=str(tmp_path), maven_name="mvn")

        await MavenSetup(platform="posix").ensure_configured(session)

        assert session.maven_name == "mvn"
        assert session.error_log == ""
