"""In-process loading of Claude Code usage, without spawning the ccusage CLI.

Reads the transcript files directly and aggregates them into the same
record shapes ccusage reports, already typed, so no text parsing step is
needed.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..models import CostMode, Period
from ..parsers.transcripts import TokenUsage, TranscriptMessage, TranscriptParser
from ..utils.options import LoadOptions
from ..utils.paths import get_claude_project_dirs
from ..utils.periods import get_week_start
from ..utils.pricing import resolve_cost
from .invoker import InvocationError

logger = logging.getLogger(__name__)

LIBRARY_PERIODS = frozenset({Period.DAILY, Period.WEEKLY, Period.MONTHLY, Period.SESSION})


@dataclass
class UsageBucket:
    """Running totals for one date, week, month or session."""

    usage: TokenUsage = field(default_factory=TokenUsage)
    total_cost: float = 0.0
    models: List[str] = field(default_factory=list)
    last_activity: str = ""
    project_path: str = ""

    def add(self, message: TranscriptMessage, mode: CostMode) -> None:
        usage = message.usage
        self.usage = self.usage + usage
        self.total_cost += resolve_cost(
            mode,
            message.cost_usd,
            message.model,
            usage.input_tokens,
            usage.output_tokens,
            usage.cache_creation_input_tokens,
            usage.cache_read_input_tokens,
        )
        if message.model and message.model not in self.models:
            self.models.append(message.model)

    def to_record(self) -> Dict[str, object]:
        return {
            "inputTokens": self.usage.input_tokens,
            "outputTokens": self.usage.output_tokens,
            "cacheCreationTokens": self.usage.cache_creation_input_tokens,
            "cacheReadTokens": self.usage.cache_read_input_tokens,
            "totalTokens": self.usage.total_tokens,
            "totalCost": self.total_cost,
            "modelsUsed": list(self.models),
        }


class UsageDataLoader:
    """Aggregates Claude Code transcripts into daily, weekly, monthly and session records."""

    def __init__(self, project_dirs: Optional[List[Path]] = None):
        """
        Initialize the loader.

        Args:
            project_dirs: Claude ``projects`` directories. If not provided,
                          the configured data directories are used.
        """
        self._project_dirs = project_dirs

    @staticmethod
    def supports(period: Union[Period, str]) -> bool:
        return Period(period) in LIBRARY_PERIODS

    def _messages(self) -> List[TranscriptMessage]:
        project_dirs = self._project_dirs
        if project_dirs is None:
            project_dirs = get_claude_project_dirs()
        parser = TranscriptParser.from_project_dirs(project_dirs)
        try:
            return list(parser.parse_all())
        except OSError as exc:
            raise InvocationError(f"Failed to read Claude transcripts: {exc}") from exc

    def _aggregate(
        self,
        key_fn: Callable[[TranscriptMessage], str],
        mode: CostMode,
    ) -> Dict[str, UsageBucket]:
        buckets: Dict[str, UsageBucket] = {}
        for message in self._messages():
            key = key_fn(message)
            bucket = buckets.setdefault(key, UsageBucket())
            bucket.add(message, mode)

            activity = message.datetime.strftime("%Y-%m-%d")
            if activity > bucket.last_activity:
                bucket.last_activity = activity
            if message.cwd and not bucket.project_path:
                bucket.project_path = message.cwd
        return buckets

    def load_daily_usage_data(self, mode: Optional[CostMode] = None) -> List[Dict[str, object]]:
        buckets = self._aggregate(
            lambda message: message.datetime.strftime("%Y-%m-%d"), mode or CostMode.AUTO
        )
        return [{"date": key, **buckets[key].to_record()} for key in sorted(buckets)]

    def load_weekly_usage_data(
        self,
        mode: Optional[CostMode] = None,
        start_of_week: Optional[str] = None,
    ) -> List[Dict[str, object]]:
        buckets = self._aggregate(
            lambda message: get_week_start(message.datetime.date(), start_of_week).isoformat(),
            mode or CostMode.AUTO,
        )
        return [{"week": key, **buckets[key].to_record()} for key in sorted(buckets)]

    def load_monthly_usage_data(self, mode: Optional[CostMode] = None) -> List[Dict[str, object]]:
        buckets = self._aggregate(
            lambda message: message.datetime.strftime("%Y-%m"), mode or CostMode.AUTO
        )
        return [{"month": key, **buckets[key].to_record()} for key in sorted(buckets)]

    def load_session_data(self, mode: Optional[CostMode] = None) -> List[Dict[str, object]]:
        """Session records, most recently active first."""
        buckets = self._aggregate(lambda message: message.session_id, mode or CostMode.AUTO)
        records = [
            {
                "sessionId": key,
                "projectPath": bucket.project_path,
                "lastActivity": bucket.last_activity,
                **bucket.to_record(),
            }
            for key, bucket in buckets.items()
        ]
        records.sort(key=lambda record: record["lastActivity"], reverse=True)
        return records

    def load(
        self, period: Union[Period, str], options: Optional[LoadOptions] = None
    ) -> List[Dict[str, object]]:
        """
        Load typed records for one of the supported periods.

        Only the cost mode and week start are honored on this path.

        Raises:
            ValueError: If the period is not supported in-process
            InvocationError: If the transcripts cannot be read
        """
        period = Period(period)
        options = options or LoadOptions()
        logger.debug("Loading %s usage in-process", period.value)

        if period is Period.DAILY:
            return self.load_daily_usage_data(options.mode)
        if period is Period.WEEKLY:
            return self.load_weekly_usage_data(options.mode, options.start_of_week)
        if period is Period.MONTHLY:
            return self.load_monthly_usage_data(options.mode)
        if period is Period.SESSION:
            return self.load_session_data(options.mode)
        raise ValueError(f"Period {period.value!r} is not supported in-process")
