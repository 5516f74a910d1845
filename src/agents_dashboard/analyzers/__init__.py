"""Orchestration of period resolution, invocation and normalization."""
