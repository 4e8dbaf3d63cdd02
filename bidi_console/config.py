"""Harness configuration and logging setup."""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

CONFIG_DIR = Path.home() / ".bidi-console"
CONFIG_FILE = CONFIG_DIR / "config.json"
ENV_PREFIX = "BIDI_CONSOLE_"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

HELLO_PAGE_HTML = (
    "<!DOCTYPE html><html><head><title>Console log</title></head><body>"
    '<button id="hello" onclick="console.log(\'Hello, Console!\')">Hello</button>'
    "</body></html>"
)
DEFAULT_PAGE_URL = "data:text/html," + quote(HELLO_PAGE_HTML)


@dataclass(frozen=True)
class HarnessConfig:
    """Settings for a single-context log correlation run."""

    page_url: str = DEFAULT_PAGE_URL
    element_id: str = "hello"
    expected_text: str = "Hello, Console!"
    timeout: float = 5.0
    isolation_window: float = 1.0
    browser_binary: Optional[str] = None
    headless: bool = True
    remote_url: Optional[str] = None
    page_load_timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "HarnessConfig":
        """Build a config from a mapping, coercing strings to field types.

        Unknown keys are ignored.
        """
        values: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data or data[f.name] is None:
                continue
            values[f.name] = _coerce(f.name, data[f.name], getattr(cls, f.name))
        return cls(**values)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "HarnessConfig":
        """Build a config from ``BIDI_CONSOLE_*`` environment variables."""
        return cls.from_mapping(env_values(env))

    @classmethod
    def from_file(cls, path: Optional[Path] = None) -> "HarnessConfig":
        """Load a config from a JSON file.

        Args:
            path: Config file path, defaults to ~/.bidi-console/config.json

        Returns:
            HarnessConfig, with defaults when the file does not exist

        Raises:
            ValueError: If the file is not a JSON object
        """
        path = Path(path) if path else CONFIG_FILE
        if not path.exists():
            return cls()
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        return cls.from_mapping(data)

    @classmethod
    def load(
        cls, path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None
    ) -> "HarnessConfig":
        """Load file config, then apply environment overrides on top."""
        base = cls.from_file(path)
        present = env_values(env)
        env_config = cls.from_mapping(present)
        overrides = {name: getattr(env_config, name) for name in present}
        return replace(base, **overrides)

    def with_overrides(self, **overrides: Any) -> "HarnessConfig":
        """Return a copy with the non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def env_values(env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Return the raw ``BIDI_CONSOLE_*`` values that are set, keyed by field name."""
    env = os.environ if env is None else env
    values = {}
    for f in fields(HarnessConfig):
        key = ENV_PREFIX + f.name.upper()
        if env.get(key):
            values[f.name] = env[key]
    return values


def _coerce(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(default, float):
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value for {name}: {value!r}") from e
    return value


def configure_logging(
    level: str = "INFO", name: str = "bidi_console"
) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Only the named logger is touched; the root logger and its handlers are
    left alone.

    Args:
        level: Log level name
        name: Logger to configure

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_bidi_console", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._bidi_console = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.propagate = False

    # selenium logs every BiDi frame at DEBUG
    logging.getLogger("selenium").setLevel(logging.WARNING)
    return logger
