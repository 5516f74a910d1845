"""Page routes: render the HTML shell with server-loaded initial state."""

import json
import logging
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, current_app, render_template, request

from ...models import Agent, Period
from ...utils.options import LoadOptions

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint("dashboard", __name__)


def _serialize_state(state: Dict[str, Any]) -> str:
    """JSON for embedding in a <script> tag."""
    return json.dumps(state).replace("<", "\\u003c")


def _render_shell(
    state: Dict[str, Any], error: Optional[str] = None, status: int = 200
) -> Tuple[str, int]:
    return (
        render_template(
            "shell.html",
            initial_state=_serialize_state(state),
            error_message=error,
        ),
        status,
    )


def _requested_agent() -> Agent:
    """Source from the ``source``/``agent`` query param, defaulting to Claude."""
    raw = request.args.get("source") or request.args.get("agent")
    if not raw:
        return Agent.CLAUDE
    try:
        return Agent.parse(raw)
    except ValueError:
        return Agent.CLAUDE


@dashboard_bp.route("/")
def index() -> Tuple[str, int]:
    """
    Render the overview page.

    Loads the daily, weekly, monthly and session reports for the requested
    source concurrently and embeds them as initial state.
    """
    try:
        service = current_app.dashboard_service
        overview = service.get_overview(_requested_agent(), LoadOptions.from_args(request.args))
        return _render_shell({"overview": overview})

    except Exception as e:
        logger.error("Unexpected error loading overview: %s", e, exc_info=True)
        return _render_shell({}, error=f"Unable to load usage data: {e}", status=500)


@dashboard_bp.route("/agents/<agent>")
def agent_details(agent: str) -> Tuple[str, int]:
    """Render every report for one source."""
    try:
        parsed = Agent.parse(agent)
    except ValueError as e:
        return _render_shell({}, error=str(e), status=404)

    try:
        service = current_app.dashboard_service
        reports = service.get_agent_reports(parsed, LoadOptions.from_args(request.args))
        return _render_shell({"agentReports": reports})

    except Exception as e:
        logger.error("Unexpected error loading reports for %s: %s", agent, e, exc_info=True)
        return _render_shell({}, error=f"Unable to load usage data: {e}", status=500)


@dashboard_bp.route("/sessions/<session_id>")
def session_details(session_id: str) -> Tuple[str, int]:
    """Render one session from the source's current session report."""
    try:
        service = current_app.dashboard_service
        detail = service.get_session_detail(
            session_id, _requested_agent(), LoadOptions.from_args(request.args)
        )
        if detail is None:
            return _render_shell(
                {"sessionDetail": None}, error=f"Session {session_id} not found", status=404
            )
        return _render_shell({"sessionDetail": detail})

    except Exception as e:
        logger.error("Unexpected error loading session %s: %s", session_id, e, exc_info=True)
        return _render_shell({}, error=f"Unable to load usage data: {e}", status=500)


@dashboard_bp.route("/reports/<period>")
def report_details(period: str) -> Tuple[str, int]:
    """Render one report period for the requested source."""
    try:
        parsed = Period.parse(period)
    except ValueError as e:
        return _render_shell({}, error=str(e), status=404)

    try:
        service = current_app.dashboard_service
        report = service.get_report(
            parsed, _requested_agent(), LoadOptions.from_args(request.args)
        )
        return _render_shell({"report": report})

    except Exception as e:
        logger.error("Unexpected error loading %s report: %s", period, e, exc_info=True)
        return _render_shell({}, error=f"Unable to load usage data: {e}", status=500)
