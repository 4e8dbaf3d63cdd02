"""Data models for bidi-console."""

from .log_entry import ConsoleLogEntry, LogLevel

__all__ = [
    'ConsoleLogEntry',
    'LogLevel'
]
