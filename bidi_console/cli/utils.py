"""Shared CLI helpers."""

from rich.console import Console

console = Console()

EXIT_PASS = 0
EXIT_ASSERTION_FAILURE = 1
EXIT_TEST_ERROR = 2
