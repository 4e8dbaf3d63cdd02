"""Command line interface for bidi-console."""
