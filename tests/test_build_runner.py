"""Tests for process runner - shell invocation and output capture."""

import os
from unittest.mock import patch

import pytest

from maven_build_mcp.build.runner import ProcessRunner, format_command_line
from maven_build_mcp.build.state import LaunchError

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses POSIX shell commands")


class TestFormatCommandLine:
    """Tests for shell quoting."""

    @posix_only
    def test_plain_arguments_unchanged(self):
        assert format_command_line("./mvnw", ["clean", "install", "-q"]) == "./mvnw clean install -q"

    @posix_only
    def test_paths_with_spaces_quoted(self):
        line = format_command_line("mvn", ["-Dmaven.repo.local=/tmp/my deps"])
        assert line == "mvn '-Dmaven.repo.local=/tmp/my deps'"


@posix_only
class TestProcessRunner:
    """Tests for ProcessRunner.run with a real shell."""

    @pytest.mark.asyncio
    async def test_captures_stdout_and_status(self, tmp_path):
        runner = ProcessRunner()
        result = await runner.run("echo", ["hello"], cwd=str(tmp_path))

        assert result.status == 0
        assert result.succeeded
        assert result.stdout == "hello\n"
        assert result.launch_error is None

    @pytest.mark.asyncio
    async def test_non_zero_exit_is_not_an_exception(self, tmp_path):
        runner = ProcessRunner()
        result = await runner.run("sh", ["-c", "echo oops >&2; exit 3"], cwd=str(tmp_path))

        assert result.status == 3
        assert not result.succeeded
        assert result.stderr == "oops\n"
        assert result.launch_error is None

    @pytest.mark.asyncio
    async def test_runs_in_working_directory(self, tmp_path):
        runner = ProcessRunner()
        result = await runner.run("pwd", [], cwd=str(tmp_path))

        assert os.path.realpath(result.stdout.strip()) == os.path.realpath(str(tmp_path))

    @pytest.mark.asyncio
    async def test_uses_given_environment(self, tmp_path):
        runner = ProcessRunner()
        env = dict(os.environ, JAVA_HOME="/opt/jdk-test")
        result = await runner.run("sh", ["-c", "echo $JAVA_HOME"], cwd=str(tmp_path), env=env)

        assert result.stdout.strip() == "/opt/jdk-test"

    @pytest.mark.asyncio
    async def test_missing_command_is_launch_error(self, tmp_path):
        runner = ProcessRunner()
        result = await runner.run("definitely-not-a-real-mvn-binary", ["-v"], cwd=str(tmp_path))

        assert not result.succeeded
        assert isinstance(result.launch_error, LaunchError)
        assert result.status == 127

    @pytest.mark.asyncio
    async def test_not_executable_is_launch_error(self, tmp_path):
        wrapper = tmp_path / "mvnw"
        wrapper.write_text("#!/bin/sh\necho hi\n")
        wrapper.chmod(0o644)
        runner = ProcessRunner()

        result = await runner.run("./mvnw", ["-v"], cwd=str(tmp_path))

        if os.geteuid() == 0 and result.status == 0:
            pytest.skip("root can execute files without the execute bit")
        assert isinstance(result.launch_error, LaunchError)
        assert "permission denied" in str(result.launch_error)

    @pytest.mark.asyncio
    async def test_missing_cwd_is_launch_error(self, tmp_path):
        runner = ProcessRunner()
        result = await runner.run("echo", ["hi"], cwd=str(tmp_path / "missing"))

        assert result.status is None
        assert isinstance(result.launch_error, LaunchError)

    @pytest.mark.asyncio
    async def test_spawn_oserror_is_launch_error(self, tmp_path):
        runner = ProcessRunner()
        with patch(
            "asyncio.create_subprocess_shell", side_effect=OSError("no shell")
        ):
            result = await runner.run("mvn", ["-v"], cwd=str(tmp_path))

        assert isinstance(result.launch_error, LaunchError)
        assert "no shell" in str(result.launch_error)

    @pytest.mark.asyncio
    async def test_output_cap_truncates(self, tmp_path):
        runner = ProcessRunner(output_cap=100)
        result = await runner.run("head", ["-c", "10000", "/dev/zero"], cwd=str(tmp_path))

        assert result.truncated
        assert len(result.stdout) + len(result.stderr) <= 100

    @pytest.mark.asyncio
    async def test_output_cap_override_per_call(self, tmp_path):
        runner = ProcessRunner()
        result = await runner.run("echo", ["0123456789"], cwd=str(tmp_path), output_cap=4)

        assert result.truncated
        assert result.stdout == "0123"
