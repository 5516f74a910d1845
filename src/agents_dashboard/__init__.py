"""Local dashboard for Claude Code and OpenCode token usage and costs."""

__version__ = "0.1.0"
