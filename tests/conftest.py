"""Shared fixtures and fakes for bidi-console tests."""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

from bidi_console.config import HarnessConfig

MAIN_TAB = "tab-main"
SECONDARY_TAB = "tab-secondary"


def log_event_params(
    context: str,
    text: str = "Hello, Console!",
    level: str = "info",
    entry_type: str = "console",
) -> Dict[str, Any]:
    """Build params shaped like a Firefox ``log.entryAdded`` event."""
    params = {
        "type": entry_type,
        "level": level,
        "text": text,
        "timestamp": 1700000000000,
        "source": {"realm": f"realm-{context}", "context": context},
    }
    if entry_type == "console":
        params["method"] = "log"
        params["args"] = [{"type": "string", "value": text}]
    else:
        params["stackTrace"] = {"callFrames": []}
    return params


class FakeConnection:
    """In-memory stand-in for Selenium's BiDi ``WebSocketConnection``."""

    def __init__(self):
        self.commands: List[tuple] = []
        self.responses: Dict[str, Any] = {}
        self.callbacks: Dict[str, List[Callable]] = {}

    def execute(self, command):
        payload = next(command)
        method, params = payload["method"], payload.get("params", {})
        self.commands.append((method, params))
        response = self.responses.get(method, {})
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(params)
        try:
            command.send(response)
        except StopIteration as done:
            return done.value
        raise AssertionError(f"{method} command generator did not finish")

    def add_callback(self, event, callback) -> int:
        def _callback(params):
            callback(event.from_json(params))

        self.callbacks.setdefault(event.event_class, []).append(_callback)
        return id(_callback)

    def remove_callback(self, event, callback_id) -> None:
        callbacks = self.callbacks.get(event.event_class, [])
        for callback in list(callbacks):
            if id(callback) == callback_id:
                callbacks.remove(callback)

    def emit(self, method, params):
        for callback in list(self.callbacks.get(method, [])):
            callback(params)

    def listener_count(self, method) -> int:
        return len(self.callbacks.get(method, []))

    def methods(self) -> List[str]:
        return [method for method, _ in self.commands]


class FakeSession:
    """Session exposing only a connection, for inspector tests."""

    def __init__(self, connection: Optional[FakeConnection] = None):
        self.connection = connection or FakeConnection()


class FakeElement:
    def __init__(self, session: "FakeTabsSession", context: str, element_id: str):
        self.session = session
        self.context = context
        self.element_id = element_id

    async def click(self):
        self.session.calls.append(("click", self.context, self.element_id))
        self.session.on_click(self.context)


class FakeTabsSession:
    """Two-tab browser whose clicks broadcast log events to every listener.

    The broadcast ignores subscription scoping, so any isolation observed in
    tests comes from the client side.
    """

    def __init__(self, emit_for: Optional[Dict[str, Dict[str, Any]]] = None):
        self.connection = FakeConnection()
        self.connection.responses["session.subscribe"] = {"subscription": "sub-1"}
        self.calls: List[tuple] = []
        self.current = MAIN_TAB
        self.closed = False
        self.close_error: Optional[Exception] = None
        self.find_error: Optional[Exception] = None
        if emit_for is None:
            emit_for = {
                MAIN_TAB: log_event_params(MAIN_TAB),
                SECONDARY_TAB: log_event_params(SECONDARY_TAB),
            }
        self.emit_for = emit_for

    def subscribed(self) -> bool:
        return "session.subscribe" in self.connection.methods()

    def on_click(self, context: str) -> None:
        params = self.emit_for.get(context)
        if params is not None:
            # deliver on a later loop iteration, like a real event
            asyncio.get_running_loop().call_soon(
                self.connection.emit, "log.entryAdded", params
            )

    async def current_context_handle(self):
        return self.current

    async def open_new_context(self, kind="tab"):
        self.calls.append(("open", kind))
        self.current = SECONDARY_TAB
        return SECONDARY_TAB

    async def switch_to(self, handle):
        self.calls.append(("switch", handle))
        self.current = handle

    async def navigate(self, url):
        self.calls.append(("navigate", self.current, self.subscribed()))

    async def find_element(self, element_id):
        if self.find_error is not None:
            raise self.find_error
        return FakeElement(self, self.current, element_id)

    async def close(self):
        self.calls.append(("close",))
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def tabs_session():
    return FakeTabsSession()


@pytest.fixture
def fast_config():
    return HarnessConfig(timeout=0.3, isolation_window=0.05)
