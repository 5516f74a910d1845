"""Usage loading: the single entry point that turns a (source, period) request
into a canonical UsageResponse.

Flow: empty-state check, period window, invocation (in-process loader or
CLI), date filtering where the upstream cannot filter, normalization.
Failures never escape ``load``; they are reported in ``errors``.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Callable, Dict, Iterable, Optional, Union

from ..models import (
    OVERVIEW_PERIODS,
    Agent,
    EmptyState,
    NormalizedData,
    Period,
    UsageResponse,
)
from ..parsers.reports import normalize_daily, normalize_monthly, normalize_weekly
from ..parsers.sessions import normalize_blocks, normalize_sessions
from ..sources.filters import filter_payload, filter_records
from ..sources.invoker import SourceInvoker
from ..sources.library import UsageDataLoader
from ..utils.options import LoadOptions
from ..utils.paths import detect_empty_state
from ..utils.periods import resolve_window

logger = logging.getLogger(__name__)


def normalize(period: Period, raw: Any, agent: Agent) -> NormalizedData:
    """Dispatch a raw report to the normalizer for its period."""
    if period is Period.DAILY:
        return normalize_daily(raw)
    if period is Period.WEEKLY:
        return normalize_weekly(raw)
    if period is Period.MONTHLY:
        return normalize_monthly(raw)
    if period is Period.SESSION:
        return normalize_sessions(raw, agent.value)
    return normalize_blocks(raw)


class UsageLoader:
    """Loads canonical usage reports for each source.

    Holds no per-request state; every call to ``load`` is independent.
    """

    def __init__(
        self,
        invoker: Optional[SourceInvoker] = None,
        library: Optional[UsageDataLoader] = None,
        empty_state_detector: Callable[[Agent], EmptyState] = detect_empty_state,
        today: Optional[Callable[[], date]] = None,
        use_library: bool = True,
    ):
        """
        Initialize the loader.

        Args:
            invoker: CLI invoker. Defaults to SourceInvoker().
            library: In-process Claude loader. Defaults to UsageDataLoader().
            empty_state_detector: Callable deciding whether local data exists
            today: Clock returning the current local date
            use_library: Prefer the in-process loader where it applies
        """
        self.invoker = invoker or SourceInvoker()
        self.library = library or UsageDataLoader()
        self.empty_state_detector = empty_state_detector
        self.today = today or date.today
        self.use_library = use_library

    def _uses_library(self, agent: Agent, period: Period) -> bool:
        return self.use_library and agent is Agent.CLAUDE and self.library.supports(period)

    def _fetch(self, agent: Agent, period: Period, options: LoadOptions) -> NormalizedData:
        window = resolve_window(period, options.start_of_week, today=self.today())

        if self._uses_library(agent, period):
            records = self.library.load(period, options)
            return normalize(period, filter_records(records, period, window), agent)

        raw = self.invoker.invoke(agent, period, window, options)
        if agent is Agent.OPENCODE:
            # The OpenCode CLI ignores date bounds
            raw = filter_payload(raw, period, window)
        return normalize(period, raw, agent)

    def load(
        self,
        agent: Union[Agent, str],
        period: Union[Period, str],
        options: Optional[LoadOptions] = None,
    ) -> UsageResponse:
        """
        Load a canonical usage report.

        Args:
            agent: Source to report on
            period: Reporting period
            options: Request-scoped load options

        Returns:
            UsageResponse; failures are captured in ``errors``
        """
        try:
            agent = Agent.parse(agent)
            period = Period.parse(period)
        except ValueError as exc:
            return UsageResponse.failure(
                str(getattr(agent, "value", agent)),
                str(getattr(period, "value", period)),
                str(exc),
                EmptyState(is_empty=True),
            )
        options = options or LoadOptions()

        if period is Period.BLOCKS and not agent.supports_blocks:
            return UsageResponse.failure(
                agent.value,
                period.value,
                f"Blocks reports not supported for {agent.display_name}",
                EmptyState(is_empty=True),
            )

        try:
            empty_state = self.empty_state_detector(agent)
        except Exception as exc:
            logger.warning("Failed to check local %s data: %s", agent.value, exc)
            return UsageResponse.failure(agent.value, period.value, str(exc))

        if empty_state.is_empty:
            return UsageResponse(source=agent.value, period=period.value, empty_state=empty_state)

        try:
            data = self._fetch(agent, period, options)
        except Exception as exc:
            logger.warning("Failed to load %s %s usage: %s", agent.value, period.value, exc)
            return UsageResponse.failure(agent.value, period.value, str(exc), empty_state)

        return UsageResponse.from_normalized(agent.value, period.value, data, empty_state)

    def load_many(
        self,
        agent: Union[Agent, str],
        periods: Iterable[Union[Period, str]],
        options: Optional[LoadOptions] = None,
    ) -> Dict[str, UsageResponse]:
        """
        Load several periods for one source concurrently.

        Each load is independent; a failure in one period is reported in
        that period's response and does not affect the others.

        Returns:
            Dict mapping period names to responses, in request order
        """
        periods = [Period(period) for period in periods]
        with ThreadPoolExecutor(max_workers=max(len(periods), 1)) as executor:
            futures = {
                period.value: executor.submit(self.load, agent, period, options)
                for period in periods
            }
            return {name: future.result() for name, future in futures.items()}

    def load_overview(
        self, agent: Union[Agent, str], options: Optional[LoadOptions] = None
    ) -> Dict[str, UsageResponse]:
        """Daily, weekly, monthly and session reports for one source."""
        return self.load_many(agent, OVERVIEW_PERIODS, options)
