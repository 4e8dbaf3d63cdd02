"""bidi-console - single-context console log correlation over WebDriver BiDi."""

from ._version import __version__
from .config import HarnessConfig, configure_logging
from .exceptions import (
    BiDiCommandError,
    BiDiError,
    BrowserNotAvailableError,
    CorrelationFailure,
    NavigationError,
    NoSuchElementError,
    TimeoutExpired,
)
from .models import ConsoleLogEntry, LogLevel
from .scenario import SingleContextScenario, run_scenario, verify_entry
from .services import (
    BrowserSession,
    CorrelationSlot,
    LogInspector,
    perform_action,
    wait_for_one,
)

__all__ = [
    # Services
    'BrowserSession',
    'LogInspector',
    'CorrelationSlot',
    'perform_action',
    'wait_for_one',
    # Scenario
    'SingleContextScenario',
    'run_scenario',
    'verify_entry',
    # Models
    'ConsoleLogEntry',
    'LogLevel',
    # Config
    'HarnessConfig',
    'configure_logging',
    # Errors
    'BiDiError',
    'BiDiCommandError',
    'BrowserNotAvailableError',
    'CorrelationFailure',
    'NavigationError',
    'NoSuchElementError',
    'TimeoutExpired',
    # Version
    '__version__'
]
