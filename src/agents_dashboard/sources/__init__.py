"""Upstream usage data sources: CLI processes and the in-process loader."""
