"""Version information for bidi-console."""

__version__ = "0.3.0"
