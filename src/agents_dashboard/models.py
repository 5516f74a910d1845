"""Canonical data model shared by the loader, the web layer and the CLI.

Every object here is created fresh per request. ``to_dict()`` produces the
JSON shape consumed by the dashboard pages, using camelCase keys.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Agent(str, Enum):
    """Usage-tracking agents whose local data can be reported."""

    CLAUDE = "claude"
    OPENCODE = "opencode"

    @classmethod
    def parse(cls, value: str) -> "Agent":
        """Parse a source name, case-insensitively.

        Raises:
            ValueError: If the name is not a known source
        """
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            raise ValueError(f"Unknown source: {value!r}") from None

    @property
    def supports_blocks(self) -> bool:
        return self is Agent.CLAUDE

    @property
    def display_name(self) -> str:
        return "Claude Code" if self is Agent.CLAUDE else "OpenCode"


class Period(str, Enum):
    """Reporting granularity."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SESSION = "session"
    BLOCKS = "blocks"

    @classmethod
    def parse(cls, value: str) -> "Period":
        """Parse a period name, case-insensitively.

        Raises:
            ValueError: If the name is not a known period
        """
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            raise ValueError(f"Unknown period: {value!r}") from None


OVERVIEW_PERIODS = (Period.DAILY, Period.WEEKLY, Period.MONTHLY, Period.SESSION)


class CostMode(str, Enum):
    """How costs are obtained for each usage entry."""

    AUTO = "auto"
    CALCULATE = "calculate"
    DISPLAY = "display"


@dataclass
class Summary:
    """Headline totals for a daily, weekly or monthly report."""

    period: str
    start: str
    total_tokens: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cost_usd: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "start": self.start,
            "totalTokens": self.total_tokens,
            "totalInputTokens": self.total_input_tokens,
            "totalOutputTokens": self.total_output_tokens,
            "totalCostUSD": self.total_cost_usd,
        }


@dataclass
class SeriesPoint:
    """One bucket of a cost/token chart."""

    label: str
    cost_usd: float = 0.0
    total_tokens: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "costUSD": self.cost_usd,
            "totalTokens": self.total_tokens,
        }


@dataclass
class SessionSummary:
    """Usage totals for a single agent session."""

    session_id: str
    source: str
    last_activity: str
    total_tokens: int = 0
    total_cost_usd: float = 0.0
    models_used: List[str] = field(default_factory=list)
    parent_session_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "sessionId": self.session_id,
            "source": self.source,
            "lastActivity": self.last_activity,
            "totalTokens": self.total_tokens,
            "totalCostUSD": self.total_cost_usd,
            "modelsUsed": list(self.models_used),
        }
        if self.parent_session_id is not None:
            data["parentSessionId"] = self.parent_session_id
        return data


@dataclass
class BlockSummary:
    """A billing block as tracked by the Claude usage CLI."""

    block_id: str
    start_time: str
    end_time: str
    is_active: bool = False
    total_tokens: int = 0
    cost_usd: float = 0.0
    models: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blockId": self.block_id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "isActive": self.is_active,
            "totalTokens": self.total_tokens,
            "costUSD": self.cost_usd,
            "models": list(self.models),
        }


@dataclass
class EmptyState:
    """Result of checking whether any local usage data exists for a source."""

    is_empty: bool = False
    missing_paths: List[str] = field(default_factory=list)
    checklist: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isEmpty": self.is_empty,
            "missingPaths": list(self.missing_paths),
            "checklist": list(self.checklist),
        }


@dataclass
class NormalizedData:
    """Output of a normalizer; exactly one part is meaningfully populated."""

    summary: Optional[Summary] = None
    series: List[SeriesPoint] = field(default_factory=list)
    sessions: List[SessionSummary] = field(default_factory=list)
    blocks: List[BlockSummary] = field(default_factory=list)


@dataclass
class UsageResponse:
    """Canonical response returned for every (source, period) request."""

    source: str
    period: str
    summary: Optional[Summary] = None
    series: List[SeriesPoint] = field(default_factory=list)
    sessions: List[SessionSummary] = field(default_factory=list)
    blocks: List[BlockSummary] = field(default_factory=list)
    empty_state: EmptyState = field(default_factory=EmptyState)
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_normalized(
        cls,
        source: str,
        period: str,
        data: NormalizedData,
        empty_state: EmptyState,
    ) -> "UsageResponse":
        """Merge normalized collections with the request metadata."""
        return cls(
            source=source,
            period=period,
            summary=data.summary,
            series=data.series,
            sessions=data.sessions,
            blocks=data.blocks,
            empty_state=empty_state,
            errors=[],
        )

    @classmethod
    def failure(
        cls,
        source: str,
        period: str,
        message: str,
        empty_state: Optional[EmptyState] = None,
    ) -> "UsageResponse":
        """Build a response with empty collections and a single error."""
        return cls(
            source=source,
            period=period,
            empty_state=empty_state if empty_state is not None else EmptyState(),
            errors=[message],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "period": self.period,
            "summary": self.summary.to_dict() if self.summary else None,
            "series": [point.to_dict() for point in self.series],
            "sessions": [session.to_dict() for session in self.sessions],
            "blocks": [block.to_dict() for block in self.blocks],
            "emptyState": self.empty_state.to_dict(),
            "errors": list(self.errors),
        }
