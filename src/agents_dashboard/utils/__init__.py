"""Shared helpers: period windows, data paths, options and pricing."""
