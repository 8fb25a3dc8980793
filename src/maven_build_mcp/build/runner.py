"""Process runner - one shell invocation with bounded output capture.

Never raises for a failing build: non-zero exits land in
ProcessResult.status, launch failures in ProcessResult.launch_error.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import subprocess
import time
from collections.abc import Mapping, Sequence

from .state import LaunchError, ProcessResult

logger = logging.getLogger(__name__)

# Output buffer limit (combined stdout + stderr)
MAX_OUTPUT_BYTES: int = 8 * 1024 * 1024  # 8MB
READ_CHUNK_BYTES: int = 64 * 1024

# Shell exit codes meaning the command never ran
POSIX_NOT_EXECUTABLE: int = 126
POSIX_NOT_FOUND: int = 127
WINDOWS_NOT_FOUND: int = 9009


def format_command_line(command: str, args: Sequence[str]) -> str:
    """Quote a command and its arguments for the host shell."""
    if os.name == "nt":
        return subprocess.list2cmdline([command, *args])
    return " ".join(shlex.quote(part) for part in (command, *args))


def _launch_error_for_status(command: str, status: int | None) -> LaunchError | None:
    if status is None:
        return None
    if os.name == "nt":
        if status == WINDOWS_NOT_FOUND:
            return LaunchError(f"Command not found: {command}", exit_code=status, command=command)
        return None
    if status == POSIX_NOT_FOUND:
        return LaunchError(f"Command not found: {command}", exit_code=status, command=command)
    if status == POSIX_NOT_EXECUTABLE:
        return LaunchError(
            f"Command not executable (permission denied): {command}",
            exit_code=status,
            command=command,
        )
    return None


class ProcessRunner:
    """Runs a command through the host shell and captures its output."""

    def __init__(self, output_cap: int = MAX_OUTPUT_BYTES):
        self._output_cap = output_cap

    @property
    def output_cap(self) -> int:
        return self._output_cap

    async def run(
        self,
        command: str,
        args: Sequence[str],
        cwd: str,
        env: Mapping[str, str] | None = None,
        output_cap: int | None = None,
    ) -> ProcessResult:
        """Run command to completion.

        Args:
            command: Executable name or path (e.g. ``./mvnw``)
            args: Arguments, quoted for the shell
            cwd: Working directory (must exist)
            env: Environment for the child process
            output_cap: Max combined bytes of stdout + stderr to keep

        Returns:
            ProcessResult with exit status and captured output
        """
        cap = self._output_cap if output_cap is None else output_cap
        command_line = format_command_line(command, args)
        start_time = time.perf_counter()

        def elapsed() -> float:
            return (time.perf_counter() - start_time) * 1000

        if not os.path.isdir(cwd):
            error = LaunchError(f"Working directory does not exist: {cwd}", command=command_line)
            return ProcessResult(command_line, None, launch_error=error, duration_ms=elapsed())

        logger.debug(f"Running: {command_line} (cwd={cwd})")

        try:
            process = await asyncio.create_subprocess_shell(
                command_line,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=dict(env) if env is not None else None,
            )
        except OSError as e:
            error = LaunchError(f"Failed to launch {command}: {e}", command=command_line)
            return ProcessResult(command_line, None, launch_error=error, duration_ms=elapsed())

        stdout_chunks: list[bytes] = []
        stderr_chunks: list[bytes] = []
        captured = [0]
        truncated = [False]

        async def read_stream(stream: asyncio.StreamReader | None, chunks: list[bytes]) -> None:
            if stream is None:
                return
            while True:
                chunk = await stream.read(READ_CHUNK_BYTES)
                if not chunk:
                    break
                if truncated[0]:
                    continue
                remaining = cap - captured[0]
                if len(chunk) > remaining:
                    chunks.append(chunk[:remaining])
                    captured[0] = cap
                    truncated[0] = True
                    logger.warning(f"Output of {command} exceeded {cap} bytes, terminating")
                    try:
                        process.kill()
                    except ProcessLookupError:
                        pass
                    continue
                chunks.append(chunk)
                captured[0] += len(chunk)

        await asyncio.gather(
            read_stream(process.stdout, stdout_chunks),
            read_stream(process.stderr, stderr_chunks),
        )
        status = await process.wait()

        launch_error = None if truncated[0] else _launch_error_for_status(command, status)

        return ProcessResult(
            command=command_line,
            status=status,
            stdout=b"".join(stdout_chunks).decode("utf-8", errors="replace"),
            stderr=b"".join(stderr_chunks).decode("utf-8", errors="replace"),
            launch_error=launch_error,
            truncated=truncated[0],
            duration_ms=elapsed(),
        )
