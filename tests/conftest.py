"""Pytest fixtures for maven-build-mcp tests."""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from maven_build_mcp.build.manager import BuildManager  # noqa: E402
from maven_build_mcp.build.state import ProcessResult  # noqa: E402


MAVEN_VERSION_OUTPUT = (
    "Apache Maven 3.9.4 (dfbb324ad4a7c8fb0bf182e6d91b0ae20e3d2dd9)\n"
    "Maven home: /opt/maven\n"
    "Java version: 17.0.1, vendor: Eclipse Adoptium, runtime: /opt/jdk-17\n"
    "Default locale: en_US, platform encoding: UTF-8\n"
    'OS name: "linux", version: "6.5.0", arch: "amd64", family: "unix"\n'
)


class FakeRunner:
    """Records invocations and replays queued results."""

    def __init__(self, results=None):
        self.calls = []
        self._results = list(results or [])

    def queue(self, *results):
        self._results.extend(results)

    async def run(self, command, args, cwd, env=None, output_cap=None):
        self.calls.append(
            {"command": command, "args": list(args), "cwd": cwd, "env": env, "output_cap": output_cap}
        )
        if self._results:
            return self._results.pop(0)
        return ProcessResult(command=f"{command} {' '.join(args)}", status=0)


def make_result(status=0, stdout="", stderr="", launch_error=None):
    """Build a ProcessResult for fake runs."""
    return ProcessResult(
        command="mvn",
        status=status,
        stdout=stdout,
        stderr=stderr,
        launch_error=launch_error,
    )


@pytest.fixture
def fake_runner():
    """Runner returning success unless results are queued."""
    return FakeRunner()


@pytest.fixture
def maven_version_output():
    """Typical `mvn -v` output."""
    return MAVEN_VERSION_OUTPUT


@pytest.fixture
def reset_manager():
    """Give each test a fresh BuildManager singleton."""
    BuildManager._instance = None
    yield
    BuildManager._instance = None
