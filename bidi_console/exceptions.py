"""Exceptions raised by bidi-console."""

from typing import Optional


class BiDiError(Exception):
    """Base class for browser driving errors."""

    pass


class BiDiCommandError(BiDiError):
    """Raised when the browser rejects a command."""

    def __init__(self, error: str, message: str = "", method: Optional[str] = None):
        self.error = error
        self.message = message
        self.method = method
        prefix = f"{method}: " if method else ""
        super().__init__(f"{prefix}{error}: {message}" if message else f"{prefix}{error}")


class NavigationError(BiDiCommandError):
    """Raised when a browsing context fails to load a URL."""

    pass


class NoSuchElementError(BiDiCommandError):
    """Raised when an element lookup matches nothing."""

    def __init__(self, element_id: str, context: str):
        self.element_id = element_id
        self.context = context
        super().__init__(
            "no such element",
            f"no element with id {element_id!r} in context {context}",
        )


class BrowserNotAvailableError(Exception):
    """Raised when no BiDi-capable browser session can be started."""

    pass


class TimeoutExpired(Exception):
    """Raised when a correlation slot is not resolved within its bound."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"no matching entry arrived within {timeout:g}s")


class CorrelationFailure(AssertionError):
    """Assertion failure for a console entry that did not correlate."""

    pass
