"""Flask web interface."""
