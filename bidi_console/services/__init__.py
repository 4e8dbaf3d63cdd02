"""Services for bidi-console."""

from .action_driver import perform_action
from .browser_session import BrowserSession, Element, locate_browser
from .correlation import CorrelationSlot, SlotState, correlate, wait_for_one
from .log_inspector import LogInspector

__all__ = [
    "BrowserSession",
    "CorrelationSlot",
    "Element",
    "LogInspector",
    "SlotState",
    "correlate",
    "locate_browser",
    "perform_action",
    "wait_for_one",
]
