"""JSON API consumed by the dashboard pages."""

import logging
from typing import Any, Tuple

from flask import Blueprint, current_app, jsonify, request

from ...models import Agent, EmptyState, Period, UsageResponse
from ...utils.options import LoadOptions

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _bad_request(source: str, period: str, message: str) -> Tuple[Any, int]:
    logger.debug("Rejected usage request: %s", message)
    response = UsageResponse.failure(
        source or Agent.CLAUDE.value,
        period or Period.DAILY.value,
        message,
        EmptyState(is_empty=True),
    )
    return jsonify(response.to_dict()), 400


@api_bp.route("/usage")
def usage() -> Tuple[Any, int]:
    """
    Load one usage report.

    Query params:
        source (or agent): claude|opencode
        period: daily|weekly|monthly|session|blocks
        mode, timezone, startOfWeek, breakdown: optional load options

    Returns:
        Canonical usage response as JSON; 400 with the same shape when
        source or period is missing or unknown
    """
    raw_source = request.args.get("source") or request.args.get("agent") or ""
    raw_period = request.args.get("period") or ""

    if not raw_source or not raw_period:
        return _bad_request(raw_source, raw_period, "Missing source or period parameter")

    try:
        agent = Agent.parse(raw_source)
        period = Period.parse(raw_period)
    except ValueError as e:
        return _bad_request(raw_source, raw_period, str(e))

    options = LoadOptions.from_args(request.args)
    response = current_app.dashboard_service.get_usage(agent, period, options)
    return jsonify(response.to_dict()), 200
