"""Console log entry model for WebDriver BiDi log events."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """Severity levels defined by the BiDi log module."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @classmethod
    def from_string(cls, level: Optional[str]) -> "LogLevel":
        """Convert a raw level string to LogLevel.

        Args:
            level: Level string as sent by the browser

        Returns:
            Matching LogLevel, INFO when the value is unknown
        """
        if not level:
            return cls.INFO
        normalized = level.lower()
        if normalized == "warning":
            return cls.WARN
        for member in cls:
            if member.value == normalized:
                return member
        return cls.INFO


@dataclass(frozen=True)
class ConsoleLogEntry:
    """A single entry delivered by a ``log.entryAdded`` event."""

    text: str
    type: str
    level: LogLevel
    method: Optional[str] = None
    timestamp: Optional[int] = None
    context: Optional[str] = None
    realm: Optional[str] = None
    args: List[Dict[str, Any]] = field(default_factory=list)
    stack_trace: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_bidi_params(cls, params: Dict[str, Any]) -> "ConsoleLogEntry":
        """Create an entry from the params of a ``log.entryAdded`` event.

        Args:
            params: Event params

        Returns:
            ConsoleLogEntry instance
        """
        source = params.get("source") or {}
        text = params.get("text")
        return cls(
            text=text if text is not None else "",
            type=params.get("type", "console"),
            level=LogLevel.from_string(params.get("level")),
            method=params.get("method"),
            timestamp=params.get("timestamp"),
            context=source.get("context"),
            realm=source.get("realm"),
            args=list(params.get("args") or []),
            stack_trace=params.get("stackTrace"),
            raw=dict(params),
        )

    @property
    def is_console(self) -> bool:
        return self.type == "console"

    @property
    def is_javascript_error(self) -> bool:
        return self.type == "javascript"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "type": self.type,
            "level": self.level.value,
            "method": self.method,
            "timestamp": self.timestamp,
            "context": self.context,
            "realm": self.realm,
        }
