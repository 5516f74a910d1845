"""Normalizers that reshape upstream usage payloads into the canonical model."""
