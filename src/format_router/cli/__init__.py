"""Command-line interface for format-router."""
