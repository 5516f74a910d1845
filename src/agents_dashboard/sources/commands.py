"""Command lines for the upstream usage CLIs."""

from typing import List, Optional, Union

from ..models import Agent, Period
from ..utils.options import LoadOptions
from ..utils.periods import PeriodWindow

CCUSAGE_PACKAGE = "ccusage@18.0.5"
OPENCODE_PACKAGE = "@ccusage/opencode@18.0.5"
RUNNER = "bunx"


def build_claude_command(
    period: Union[Period, str],
    window: Optional[PeriodWindow],
    options: Optional[LoadOptions] = None,
) -> List[str]:
    """
    Build the ccusage invocation for a period.

    Blocks reports ignore the window and ask ccusage for recent blocks
    instead. Options are only passed when the caller set them.

    Args:
        period: Reporting period
        window: Resolved date window (unused for blocks)
        options: Optional load options

    Returns:
        Argument list suitable for subprocess
    """
    period = Period(period)
    options = options or LoadOptions()
    command = [RUNNER, CCUSAGE_PACKAGE, period.value, "--json", "--offline"]

    if period is Period.BLOCKS:
        command.append("--recent")
        return command

    if window is not None:
        command.extend(["--since", window.since, "--until", window.until])

    if options.mode:
        command.extend(["--mode", options.mode.value])
    if options.timezone:
        command.extend(["--timezone", options.timezone])
    if options.start_of_week and period is Period.WEEKLY:
        command.extend(["--start-of-week", options.start_of_week])
    if options.breakdown:
        command.append("--breakdown")

    return command


def build_opencode_command(period: Union[Period, str]) -> List[str]:
    """OpenCode's report has no date or cost options; it always returns everything."""
    return [RUNNER, OPENCODE_PACKAGE, Period(period).value, "--json"]


def build_command(
    agent: Union[Agent, str],
    period: Union[Period, str],
    window: Optional[PeriodWindow],
    options: Optional[LoadOptions] = None,
) -> List[str]:
    if Agent(agent) is Agent.CLAUDE:
        return build_claude_command(period, window, options)
    return build_opencode_command(period)
