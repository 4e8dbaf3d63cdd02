"""CLI commands for bidi-console."""
