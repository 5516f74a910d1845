"""Field alias resolution and envelope decoding for upstream payloads.

The two usage CLIs, and the CLI and in-process paths, disagree on field
names and on whether a report is a bare list or a list wrapped in an
object. Everything is resolved through ordered-fallback alias lookups so a
new upstream only needs new alias entries.
"""

from typing import Any, Iterable, List, Mapping, Optional, Sequence

# Canonical field -> upstream names, in lookup order
ALIASES = {
    "input_tokens": ("inputTokens", "input_tokens"),
    "output_tokens": ("outputTokens", "output_tokens"),
    "cache_creation_tokens": (
        "cacheCreationTokens",
        "cacheCreationInputTokens",
        "cache_creation_input_tokens",
    ),
    "cache_read_tokens": (
        "cacheReadTokens",
        "cacheReadInputTokens",
        "cache_read_input_tokens",
    ),
    "total_tokens": ("totalTokens", "total_tokens"),
    "cost": ("totalCostUSD", "totalCost", "costUSD"),
    "models": ("modelsUsed", "models"),
    "session_id": ("sessionId", "sessionID"),
    "parent_session_id": ("parentSessionId", "parentID"),
    "last_activity": ("lastActivity", "last_activity"),
    "block_id": ("id", "blockId"),
    "token_counts": ("tokenCounts",),
}

TOKEN_FIELDS = (
    "input_tokens",
    "output_tokens",
    "cache_creation_tokens",
    "cache_read_tokens",
)

TOTALS_KEYS = ("summary", "totals")


def lookup(entry: Mapping[str, Any], field: str, default: Any = None) -> Any:
    """Return the first non-null value among a field's aliases."""
    for name in ALIASES[field]:
        value = entry.get(name)
        if value is not None:
            return value
    return default


def as_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def as_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def as_str(value: Any) -> str:
    return "" if value is None else str(value)


def as_str_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None]


def token_count(entry: Mapping[str, Any], field: str) -> int:
    return as_int(lookup(entry, field))


def derived_total(entry: Mapping[str, Any]) -> int:
    """Sum of input, output, cache-creation and cache-read tokens."""
    return sum(token_count(entry, field) for field in TOKEN_FIELDS)


def total_tokens(entry: Mapping[str, Any]) -> int:
    """
    Token total of an entry.

    The explicit total wins when present and non-zero; otherwise the total
    is derived from the four token categories.
    """
    explicit = as_int(lookup(entry, "total_tokens"))
    return explicit or derived_total(entry)


def cost(entry: Mapping[str, Any]) -> float:
    return as_float(lookup(entry, "cost"))


def entries_from(raw: Any, keys: Sequence[str]) -> List[Mapping[str, Any]]:
    """
    Decode a report envelope into its list of entries.

    Args:
        raw: Either a bare list of entries or an object wrapping the list
        keys: Wrapper keys to try, in order

    Returns:
        The entries that are objects; an empty list for any other shape
    """
    if isinstance(raw, Mapping):
        items: Any = None
        for key in keys:
            candidate = raw.get(key)
            if isinstance(candidate, list):
                items = candidate
                break
    else:
        items = raw

    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, Mapping)]


def totals_from(raw: Any, keys: Iterable[str] = TOTALS_KEYS) -> Optional[Mapping[str, Any]]:
    """Return the upstream aggregate totals object, if the payload has one."""
    if not isinstance(raw, Mapping):
        return None
    for key in keys:
        candidate = raw.get(key)
        if isinstance(candidate, Mapping):
            return candidate
    return None
