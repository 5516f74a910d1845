"""Parser for Claude Code transcript files containing token usage data."""

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple


@dataclass
class TokenUsage:
    """Represents token usage for a single message."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        """Add two TokenUsage instances together."""
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cache_creation_input_tokens=self.cache_creation_input_tokens
            + other.cache_creation_input_tokens,
            cache_read_input_tokens=self.cache_read_input_tokens
            + other.cache_read_input_tokens,
        )

    @property
    def total_tokens(self) -> int:
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_creation_input_tokens
            + self.cache_read_input_tokens
        )


@dataclass
class TranscriptMessage:
    """An assistant message that reported token usage."""

    timestamp: str
    session_id: str
    usage: TokenUsage
    model: Optional[str] = None
    message_id: Optional[str] = None
    request_id: Optional[str] = None
    cost_usd: Optional[float] = None
    cwd: Optional[str] = None

    @property
    def datetime(self) -> Optional[datetime]:
        """Get the local datetime from the ISO timestamp.

        Returns:
            datetime object or None if timestamp is invalid/empty
        """
        if not self.timestamp or not self.timestamp.strip():
            return None
        try:
            parsed = datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
        except (ValueError, AttributeError):
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone()
        return parsed

    @property
    def dedupe_key(self) -> Optional[Tuple[str, str]]:
        if self.message_id and self.request_id:
            return (self.message_id, self.request_id)
        return None

    @classmethod
    def from_dict(cls, data: dict, session_id: str = "") -> Optional["TranscriptMessage"]:
        """
        Create a TranscriptMessage from a parsed JSON line.

        Args:
            data: Parsed transcript line
            session_id: Fallback session id (the transcript file name)

        Returns:
            TranscriptMessage, or None when the line carries no usage
        """
        message = data.get("message") or {}
        if not isinstance(message, dict):
            message = {}

        # Usage lives on the nested message in current transcripts
        usage_data = message.get("usage") or data.get("usage")
        if not isinstance(usage_data, dict):
            return None

        usage = TokenUsage(
            input_tokens=usage_data.get("input_tokens") or 0,
            output_tokens=usage_data.get("output_tokens") or 0,
            cache_creation_input_tokens=usage_data.get("cache_creation_input_tokens") or 0,
            cache_read_input_tokens=usage_data.get("cache_read_input_tokens") or 0,
        )
        cost_usd = data.get("costUSD")

        return cls(
            timestamp=data.get("timestamp") or "",
            session_id=data.get("sessionId") or session_id,
            usage=usage,
            model=message.get("model") or data.get("model"),
            message_id=message.get("id"),
            request_id=data.get("requestId"),
            cost_usd=float(cost_usd) if isinstance(cost_usd, (int, float)) else None,
            cwd=data.get("cwd"),
        )


class TranscriptParser:
    """Parser for Claude Code transcript JSONL files."""

    def __init__(self, transcript_files: List[Path]):
        """
        Initialize transcript parser.

        Args:
            transcript_files: List of transcript JSONL file paths
        """
        self.transcript_files = transcript_files

    @classmethod
    def from_project_dirs(cls, project_dirs: List[Path]) -> "TranscriptParser":
        """Collect every ``*.jsonl`` file below the given projects directories."""
        files: List[Path] = []
        for project_dir in project_dirs:
            files.extend(sorted(project_dir.rglob("*.jsonl")))
        return cls(files)

    def parse_file(self, transcript_file: Path) -> Iterator[TranscriptMessage]:
        """
        Parse a single transcript file and yield messages with usage.

        Args:
            transcript_file: Path to transcript JSONL file

        Yields:
            TranscriptMessage instances
        """
        with open(transcript_file, "rb") as f:
            for raw_line in f:
                try:
                    line = raw_line.decode("utf-8").strip()
                    if not line:
                        continue
                    data = json.loads(line)
                except (UnicodeDecodeError, json.JSONDecodeError):
                    # Skip malformed lines
                    continue
                if not isinstance(data, dict):
                    continue

                message = TranscriptMessage.from_dict(data, session_id=transcript_file.stem)
                if message is None or message.datetime is None:
                    continue
                yield message

    def parse_all(self) -> Iterator[TranscriptMessage]:
        """
        Parse all transcript files, skipping duplicated messages.

        Resumed sessions replay earlier messages into new files, so each
        (message id, request id) pair is only counted once.

        Yields:
            TranscriptMessage instances
        """
        seen: Set[Tuple[str, str]] = set()
        for transcript_file in self.transcript_files:
            for message in self.parse_file(transcript_file):
                key = message.dedupe_key
                if key is not None:
                    if key in seen:
                        continue
                    seen.add(key)
                yield message
