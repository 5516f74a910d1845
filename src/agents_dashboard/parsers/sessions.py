"""Normalizers for session and billing-block reports."""

from typing import Any, Mapping

from ..models import BlockSummary, NormalizedData, SessionSummary
from .fields import (
    as_int,
    as_str,
    as_str_list,
    cost,
    derived_total,
    entries_from,
    lookup,
    total_tokens,
)

SESSION_KEYS = ("sessions", "data")
BLOCK_KEYS = ("blocks", "data")


def parse_session(entry: Mapping[str, Any], source: str) -> SessionSummary:
    """Create a SessionSummary from one upstream session entry."""
    parent = lookup(entry, "parent_session_id")
    return SessionSummary(
        session_id=as_str(lookup(entry, "session_id")),
        source=source,
        last_activity=as_str(lookup(entry, "last_activity")),
        total_tokens=total_tokens(entry),
        total_cost_usd=cost(entry),
        models_used=as_str_list(lookup(entry, "models")),
        parent_session_id=as_str(parent) if parent else None,
    )


def parse_block(entry: Mapping[str, Any]) -> BlockSummary:
    """
    Create a BlockSummary from one upstream block entry.

    Blocks report tokens in a nested ``tokenCounts`` object; the flat
    ``totalTokens`` field wins when present.
    """
    counts = lookup(entry, "token_counts")
    if isinstance(counts, Mapping):
        tokens = as_int(lookup(entry, "total_tokens")) or derived_total(counts)
    else:
        tokens = total_tokens(entry)

    return BlockSummary(
        block_id=as_str(lookup(entry, "block_id")),
        start_time=as_str(entry.get("startTime")),
        end_time=as_str(entry.get("endTime")),
        is_active=bool(entry.get("isActive", False)),
        total_tokens=tokens,
        cost_usd=cost(entry),
        models=as_str_list(lookup(entry, "models")),
    )


def normalize_sessions(raw: Any, source: str) -> NormalizedData:
    """
    Normalize a session report.

    Each session is tagged with the requesting source, since upstream
    entries do not always carry it.
    """
    source = getattr(source, "value", source)
    sessions = [parse_session(entry, source) for entry in entries_from(raw, SESSION_KEYS)]
    return NormalizedData(sessions=sessions)


def normalize_blocks(raw: Any) -> NormalizedData:
    blocks = [parse_block(entry) for entry in entries_from(raw, BLOCK_KEYS)]
    return NormalizedData(blocks=blocks)
