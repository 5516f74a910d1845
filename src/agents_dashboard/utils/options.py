"""Request-scoped load options.

The dashboard pages keep these settings in browser storage and send them
with every request; the server never holds them as ambient state.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from ..models import CostMode

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class LoadOptions:
    """Optional knobs passed through to the upstream report."""

    mode: Optional[CostMode] = None
    timezone: Optional[str] = None
    start_of_week: Optional[str] = None
    breakdown: bool = False

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "LoadOptions":
        """
        Build options from HTTP query arguments.

        Unknown cost modes are dropped rather than rejected.

        Args:
            args: Mapping with optional ``mode``, ``timezone``,
                  ``startOfWeek`` and ``breakdown`` keys

        Returns:
            LoadOptions instance
        """
        mode = None
        raw_mode = args.get("mode")
        if raw_mode:
            try:
                mode = CostMode(raw_mode.strip().lower())
            except ValueError:
                mode = None

        return cls(
            mode=mode,
            timezone=args.get("timezone") or None,
            start_of_week=args.get("startOfWeek") or None,
            breakdown=(args.get("breakdown") or "").strip().lower() in TRUTHY,
        )

    @property
    def cost_mode(self) -> CostMode:
        return self.mode or CostMode.AUTO
