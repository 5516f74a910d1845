"""Tests for CLI command building and the process-spawn invoker."""

import io
import subprocess
import threading
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from agents_dashboard.models import Agent, CostMode, Period
from agents_dashboard.sources.commands import build_claude_command, build_opencode_command
from agents_dashboard.sources.invoker import (
    InvocationError,
    SourceInvoker,
    build_env,
    parse_cli_output,
    read_capped,
    run_cli_command,
)
from agents_dashboard.utils.options import LoadOptions
from agents_dashboard.utils.periods import PeriodWindow

WINDOW = PeriodWindow(since="20240301", until="20240313")


class TestBuildCommands:
    """Tests for invocation descriptors."""

    def test_claude_minimal(self) -> None:
        assert build_claude_command(Period.DAILY, WINDOW) == [
            "bunx", "ccusage@18.0.5", "daily", "--json", "--offline",
            "--since", "20240301", "--until", "20240313",
        ]

    def test_claude_all_options(self) -> None:
        options = LoadOptions(
            mode=CostMode.DISPLAY, timezone="UTC", start_of_week="monday", breakdown=True
        )
        command = build_claude_command(Period.WEEKLY, WINDOW, options)
        assert command[-7:] == [
            "--mode", "display", "--timezone", "UTC", "--start-of-week", "monday", "--breakdown",
        ]

    def test_start_of_week_only_for_weekly(self) -> None:
        command = build_claude_command(Period.MONTHLY, WINDOW, LoadOptions(start_of_week="monday"))
        assert "--start-of-week" not in command

    def test_blocks_ignore_window_and_options(self) -> None:
        command = build_claude_command(Period.BLOCKS, WINDOW, LoadOptions(mode=CostMode.AUTO))
        assert command == ["bunx", "ccusage@18.0.5", "blocks", "--json", "--offline", "--recent"]

    def test_opencode(self) -> None:
        assert build_opencode_command("session") == [
            "bunx", "@ccusage/opencode@18.0.5", "session", "--json",
        ]


class TestParseCliOutput:
    """Tests for parse_cli_output()."""

    def test_plain_json(self) -> None:
        assert parse_cli_output('{"daily": []}') == {"daily": []}

    def test_plain_array(self) -> None:
        assert parse_cli_output("[1, 2]") == [1, 2]

    def test_skips_leading_noise(self) -> None:
        stdout = "Resolving packages...\nwarn: something\n{\n  \"weekly\": []\n}\n"
        assert parse_cli_output(stdout) == {"weekly": []}

    def test_no_json_raises(self) -> None:
        with pytest.raises(InvocationError, match="Could not parse"):
            parse_cli_output("no json here")

    def test_broken_json_after_noise_raises(self) -> None:
        with pytest.raises(InvocationError):
            parse_cli_output("noise\n{\"daily\": [\n")


class FakeProcess:
    """Stands in for a Popen child; ``kill`` ends any pending read."""

    def __init__(self, stdout: bytes = b"{}", returncode: int = 0, stream: Any = None):
        self.stdout = stream if stream is not None else io.BytesIO(stdout)
        self.returncode = returncode
        self.killed = threading.Event()

    def kill(self) -> None:
        self.killed.set()

    def wait(self) -> int:
        return -9 if self.killed.is_set() else self.returncode


class EndlessStream:
    """A runaway child that never stops writing."""

    def __init__(self) -> None:
        self.reads = 0

    def read(self, size: int) -> bytes:
        self.reads += 1
        return b"x" * size

    def close(self) -> None:
        pass


class StalledStream:
    """A child that writes nothing until it is killed."""

    def __init__(self, process: FakeProcess):
        self.process = process

    def read(self, size: int) -> bytes:
        self.process.killed.wait(5)
        return b""

    def close(self) -> None:
        pass


def popen_returning(process: FakeProcess, stderr: bytes = b""):
    def _popen(command, **kwargs):
        if stderr:
            kwargs["stderr"].write(stderr)
        return process

    return _popen


class TestReadCapped:
    """Tests for read_capped()."""

    def test_reads_to_eof(self) -> None:
        assert read_capped(io.BytesIO(b"abc"), 3) == b"abc"

    def test_stops_at_ceiling(self) -> None:
        stream = EndlessStream()
        assert read_capped(stream, 200 * 1024) is None
        assert stream.reads == 4


class TestRunCliCommand:
    """Tests for run_cli_command()."""

    @patch("agents_dashboard.sources.invoker.subprocess.Popen")
    def test_success(self, mock_popen: MagicMock) -> None:
        mock_popen.side_effect = popen_returning(FakeProcess(b'{"daily": [{"date": "2024-03-13"}]}'))
        assert run_cli_command(["bunx", "ccusage"]) == {"daily": [{"date": "2024-03-13"}]}
        args, kwargs = mock_popen.call_args
        assert args[0] == ["bunx", "ccusage"]
        assert kwargs["stdout"] == subprocess.PIPE

    @patch("agents_dashboard.sources.invoker.subprocess.Popen")
    def test_non_zero_exit(self, mock_popen: MagicMock) -> None:
        mock_popen.side_effect = popen_returning(FakeProcess(b"", returncode=2), stderr=b"boom")
        with pytest.raises(InvocationError, match="exit 2") as exc_info:
            run_cli_command(["bunx", "ccusage"])
        assert "boom" in str(exc_info.value)
        assert exc_info.value.command == ["bunx", "ccusage"]

    @patch("agents_dashboard.sources.invoker.subprocess.Popen")
    def test_timeout_kills_child(self, mock_popen: MagicMock) -> None:
        process = FakeProcess()
        process.stdout = StalledStream(process)
        mock_popen.side_effect = popen_returning(process)

        with pytest.raises(InvocationError, match="timed out"):
            run_cli_command(["bunx"], timeout=0.05)
        assert process.killed.is_set()

    @patch("agents_dashboard.sources.invoker.subprocess.Popen")
    def test_missing_executable(self, mock_popen: MagicMock) -> None:
        mock_popen.side_effect = FileNotFoundError("bunx")
        with pytest.raises(InvocationError, match="not found"):
            run_cli_command(["bunx"])

    @patch("agents_dashboard.sources.invoker.subprocess.Popen")
    def test_output_ceiling(self, mock_popen: MagicMock) -> None:
        mock_popen.side_effect = popen_returning(FakeProcess(b"[" + b"1," * 20 + b"1]"))
        with pytest.raises(InvocationError, match="exceeds"):
            run_cli_command(["bunx"], max_output_bytes=10)

    @patch("agents_dashboard.sources.invoker.subprocess.Popen")
    def test_runaway_output_kills_child(self, mock_popen: MagicMock) -> None:
        stream = EndlessStream()
        process = FakeProcess(stream=stream)
        mock_popen.side_effect = popen_returning(process)

        with pytest.raises(InvocationError, match="exceeds"):
            run_cli_command(["bunx"], max_output_bytes=1024 * 1024)
        assert process.killed.is_set()
        assert stream.reads == 17

    @patch("agents_dashboard.sources.invoker.subprocess.Popen")
    def test_unparseable_output(self, mock_popen: MagicMock) -> None:
        mock_popen.side_effect = popen_returning(FakeProcess(b"Error: nothing to report"))
        with pytest.raises(InvocationError, match="CLI command failed"):
            run_cli_command(["bunx"])


class TestSourceInvoker:
    """Tests for SourceInvoker.invoke()."""

    @patch("agents_dashboard.sources.invoker.subprocess.Popen")
    def test_claude_env_and_command(self, mock_popen: MagicMock) -> None:
        mock_popen.side_effect = popen_returning(FakeProcess(b"[]"))
        SourceInvoker().invoke(Agent.CLAUDE, Period.DAILY, WINDOW)

        args, kwargs = mock_popen.call_args
        assert args[0][:3] == ["bunx", "ccusage@18.0.5", "daily"]
        assert kwargs["env"]["CCUSAGE_OFFLINE"] == "1"
        assert kwargs["env"]["LOG_LEVEL"] == "0"

    @patch("agents_dashboard.sources.invoker.subprocess.Popen")
    def test_opencode_command(self, mock_popen: MagicMock) -> None:
        mock_popen.side_effect = popen_returning(FakeProcess(b'{"daily": []}'))
        result = SourceInvoker(timeout=30).invoke(Agent.OPENCODE, Period.DAILY, WINDOW)

        args, _kwargs = mock_popen.call_args
        assert args[0] == ["bunx", "@ccusage/opencode@18.0.5", "daily", "--json"]
        assert result == {"daily": []}

    def test_opencode_env_not_offline(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CCUSAGE_OFFLINE", raising=False)
        env = build_env(Agent.OPENCODE)
        assert env["LOG_LEVEL"] == "0"
        assert "CCUSAGE_OFFLINE" not in env
