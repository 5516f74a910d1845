"""Local data locations for each source and empty-state detection."""

import logging
import os
from pathlib import Path
from typing import List, Union

from ..models import Agent, EmptyState

logger = logging.getLogger(__name__)

CLAUDE_CONFIG_DIR_ENV = "CLAUDE_CONFIG_DIR"
OPENCODE_DATA_DIR_ENV = "OPENCODE_DATA_DIR"


def get_claude_paths() -> List[Path]:
    """
    Get candidate Claude Code data directories.

    ``CLAUDE_CONFIG_DIR`` may hold a comma-separated list of config
    directories; each contributes itself and its ``projects`` subdirectory.

    Returns:
        Ordered list of candidate paths
    """
    config_dir = os.environ.get(CLAUDE_CONFIG_DIR_ENV)
    if config_dir:
        paths: List[Path] = []
        for entry in config_dir.split(","):
            entry = entry.strip()
            if not entry:
                continue
            paths.append(Path(entry))
            if not entry.rstrip("/").endswith("/projects"):
                paths.append(Path(entry) / "projects")
        return paths

    home = Path.home()
    return [
        home / ".config" / "claude" / "projects",
        home / ".claude" / "projects",
    ]


def get_claude_project_dirs() -> List[Path]:
    """Existing Claude ``projects`` directories that may hold transcripts."""
    return [
        path
        for path in get_claude_paths()
        if path.name == "projects" and path.is_dir()
    ]


def get_opencode_paths() -> List[Path]:
    """Get the candidate OpenCode storage directory."""
    data_dir = os.environ.get(OPENCODE_DATA_DIR_ENV)
    base = Path(data_dir) if data_dir else Path.home() / ".local" / "share" / "opencode"
    return [base / "storage"]


def get_candidate_paths(agent: Union[Agent, str]) -> List[Path]:
    agent = Agent(agent)
    if agent is Agent.CLAUDE:
        return get_claude_paths()
    return get_opencode_paths()


def get_checklist(agent: Union[Agent, str]) -> List[str]:
    """Ordered remediation steps shown when no local data is found."""
    agent = Agent(agent)
    return [
        "Install ccusage (or run via bunx/npx).",
        f"Run {agent.display_name} to generate local data.",
        "Verify data directories exist (see paths).",
        "Pricing cache missing; costs may be zero while offline.",
    ]


def detect_empty_state(agent: Union[Agent, str]) -> EmptyState:
    """
    Check whether any usage data has been produced for a source.

    The check is advisory: an existing directory does not guarantee that
    a report will contain entries.

    Args:
        agent: Source to check

    Returns:
        EmptyState; ``is_empty`` is True only when no candidate path exists
    """
    paths = get_candidate_paths(agent)
    if any(path.exists() for path in paths):
        return EmptyState(is_empty=False)

    logger.info("No local data found for %s", Agent(agent).value)
    return EmptyState(
        is_empty=True,
        missing_paths=[str(path) for path in paths],
        checklist=get_checklist(agent),
    )
