"""Process-spawn path: run an upstream usage CLI and parse its JSON output."""

import json
import logging
import os
import subprocess
import tempfile
import threading
from typing import Any, BinaryIO, Dict, List, Optional, Union

from ..models import Agent, Period
from ..utils.options import LoadOptions
from ..utils.periods import PeriodWindow
from .commands import build_command

logger = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 10 * 1024 * 1024
DEFAULT_TIMEOUT = 120
READ_CHUNK_BYTES = 64 * 1024


class InvocationError(Exception):
    """Raised when an upstream report cannot be produced or parsed."""

    def __init__(self, message: str, command: Optional[List[str]] = None):
        super().__init__(message)
        self.command = command


def parse_cli_output(stdout: str) -> Any:
    """
    Parse CLI stdout as JSON, tolerating leading non-JSON noise.

    When the output does not parse as a whole, parsing restarts at the
    first line that opens a JSON object.

    Args:
        stdout: Captured standard output

    Returns:
        Parsed JSON value

    Raises:
        InvocationError: If no JSON document can be parsed
    """
    try:
        return json.loads(stdout)
    except json.JSONDecodeError as exc:
        first_error = exc

    lines = stdout.splitlines()
    for index, line in enumerate(lines):
        if line.strip().startswith("{"):
            try:
                return json.loads("\n".join(lines[index:]))
            except json.JSONDecodeError as exc:
                raise InvocationError(f"Could not parse CLI output as JSON: {exc}") from exc

    raise InvocationError(f"Could not parse CLI output as JSON: {first_error}") from first_error


def build_env(agent: Union[Agent, str]) -> Dict[str, str]:
    env = dict(os.environ)
    env["LOG_LEVEL"] = "0"
    if Agent(agent) is Agent.CLAUDE:
        env["CCUSAGE_OFFLINE"] = "1"
    return env


def read_capped(stream: BinaryIO, max_bytes: int) -> Optional[bytes]:
    """
    Read a stream to EOF, stopping once more than ``max_bytes`` arrive.

    Returns:
        The bytes read, or None when the stream exceeded ``max_bytes``
    """
    chunks: List[bytes] = []
    size = 0
    while True:
        chunk = stream.read(READ_CHUNK_BYTES)
        if not chunk:
            return b"".join(chunks)
        size += len(chunk)
        if size > max_bytes:
            return None
        chunks.append(chunk)


def run_cli_command(
    command: List[str],
    env: Optional[Dict[str, str]] = None,
    timeout: int = DEFAULT_TIMEOUT,
    max_output_bytes: int = MAX_OUTPUT_BYTES,
) -> Any:
    """
    Run a usage CLI and return its parsed JSON output.

    Stdout is read as it is produced; the child is killed as soon as it
    writes more than ``max_output_bytes`` or runs longer than ``timeout``.

    Args:
        command: Argument list
        env: Environment for the child process
        timeout: Timeout in seconds
        max_output_bytes: Ceiling on captured stdout

    Returns:
        Parsed JSON value

    Raises:
        InvocationError: On missing executable, timeout, non-zero exit,
            oversized output or unparseable output
    """
    display = " ".join(command)
    logger.debug("Running usage CLI: %s", display)

    with tempfile.TemporaryFile() as stderr_file:
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=stderr_file,
                env=env,
            )
        except FileNotFoundError as exc:
            raise InvocationError(
                f"CLI command failed: {command[0]!r} not found on PATH", command
            ) from exc

        timed_out = threading.Event()

        def expire() -> None:
            timed_out.set()
            process.kill()

        timer = threading.Timer(timeout, expire)
        timer.start()
        try:
            stdout = read_capped(process.stdout, max_output_bytes)
            if stdout is None:
                process.kill()
            returncode = process.wait()
        finally:
            timer.cancel()
            process.stdout.close()

        if timed_out.is_set():
            raise InvocationError(
                f"CLI command failed: {display} timed out after {timeout}s", command
            )

        if stdout is None:
            raise InvocationError(
                f"CLI command failed: output of {display} exceeds {max_output_bytes} bytes",
                command,
            )

        if returncode != 0:
            stderr_file.seek(0)
            stderr = stderr_file.read().decode("utf-8", errors="replace").strip()
            raise InvocationError(
                f"CLI command failed (exit {returncode}): {display}: {stderr[:500]}",
                command,
            )

    try:
        return parse_cli_output(stdout.decode("utf-8", errors="replace"))
    except InvocationError as exc:
        raise InvocationError(f"CLI command failed: {display}: {exc}", command) from exc


class SourceInvoker:
    """Runs the upstream CLI for a (source, period) request."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT, max_output_bytes: int = MAX_OUTPUT_BYTES):
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes

    def invoke(
        self,
        agent: Union[Agent, str],
        period: Union[Period, str],
        window: Optional[PeriodWindow],
        options: Optional[LoadOptions] = None,
    ) -> Any:
        """
        Produce the raw report for a source and period.

        Raises:
            InvocationError: If the CLI fails or its output cannot be parsed
        """
        command = build_command(agent, period, window, options)
        return run_cli_command(
            command,
            env=build_env(agent),
            timeout=self.timeout,
            max_output_bytes=self.max_output_bytes,
        )
