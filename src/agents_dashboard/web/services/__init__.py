"""Services backing the web routes."""
