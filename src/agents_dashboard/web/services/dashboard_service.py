"""Dashboard service for the web interface.

This service gives web routes a clean interface to usage data by wrapping
the UsageLoader, returning plain dicts suitable for JSON and for the page
shell's initial state.
"""

import logging
from typing import Any, Dict, Optional, Union

from ...analyzers.usage import UsageLoader
from ...models import OVERVIEW_PERIODS, Agent, Period, UsageResponse
from ...utils.options import LoadOptions

logger = logging.getLogger(__name__)


class DashboardService:
    """Service for providing dashboard data to web routes."""

    def __init__(self, loader: Optional[UsageLoader] = None):
        """
        Initialize dashboard service.

        Args:
            loader: Optional UsageLoader instance. If not provided, a loader
                    using the default invoker and data directories is created.
        """
        self.loader = loader or UsageLoader()

    # ========== Single reports ==========

    def get_usage(
        self,
        agent: Union[Agent, str],
        period: Union[Period, str],
        options: Optional[LoadOptions] = None,
    ) -> UsageResponse:
        """Canonical response for one source and period."""
        return self.loader.load(agent, period, options)

    def get_report(
        self,
        period: Union[Period, str],
        agent: Union[Agent, str] = Agent.CLAUDE,
        options: Optional[LoadOptions] = None,
    ) -> Dict[str, Any]:
        """Report page data: one period for one source."""
        return self.get_usage(agent, period, options).to_dict()

    # ========== Multi-period views ==========

    def get_overview(
        self, agent: Union[Agent, str], options: Optional[LoadOptions] = None
    ) -> Dict[str, Any]:
        """
        Get the overview page data.

        Args:
            agent: Source to show
            options: Request-scoped load options

        Returns:
            Dict with ``daily``, ``weekly``, ``monthly`` and ``sessions``
            responses
        """
        responses = self.loader.load_overview(agent, options)
        return {
            "daily": responses[Period.DAILY.value].to_dict(),
            "weekly": responses[Period.WEEKLY.value].to_dict(),
            "monthly": responses[Period.MONTHLY.value].to_dict(),
            "sessions": responses[Period.SESSION.value].to_dict(),
        }

    def get_agent_reports(
        self, agent: Union[Agent, str], options: Optional[LoadOptions] = None
    ) -> Dict[str, Any]:
        """All five reports for one source, keyed by period name."""
        periods = list(OVERVIEW_PERIODS) + [Period.BLOCKS]
        responses = self.loader.load_many(agent, periods, options)
        return {name: response.to_dict() for name, response in responses.items()}

    # ========== Session detail ==========

    def get_session_detail(
        self,
        session_id: str,
        agent: Union[Agent, str] = Agent.CLAUDE,
        options: Optional[LoadOptions] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Find one session in the source's current session report.

        Returns:
            Session dict, or None when the session is not in the report
        """
        response = self.get_usage(agent, Period.SESSION, options)
        for session in response.sessions:
            if session.session_id == session_id:
                return session.to_dict()

        logger.debug("Session %s not found for %s", session_id, Agent(agent).value)
        return None
