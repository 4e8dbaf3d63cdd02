"""Console log subscription scoped to a single browsing context."""

import asyncio
import logging
from typing import Any, Callable, Dict, Generator, List, Optional

from ..models import ConsoleLogEntry

logger = logging.getLogger(__name__)

LOG_ENTRY_ADDED = "log.entryAdded"

EntryCallback = Callable[[ConsoleLogEntry], Any]


class LogEntryAdded:
    """``log.entryAdded`` event type for Selenium's ``add_callback``.

    Selenium's own log event drops ``source``, so the raw params are passed
    through unchanged.
    """

    event_class = LOG_ENTRY_ADDED

    @classmethod
    def from_json(cls, params: Dict[str, Any]) -> Dict[str, Any]:
        return params


def bidi_command(
    method: str, params: Dict[str, Any]
) -> Generator[Dict[str, Any], Dict[str, Any], Dict[str, Any]]:
    """Command generator in the form ``WebSocketConnection.execute`` consumes."""
    result = yield {"method": method, "params": params}
    return result


class LogInspector:
    """Delivers ``log.entryAdded`` events from one browsing context.

    Scoping is applied twice: the subscription itself is limited to the
    context, and every delivered event is checked against it again, so
    entries from other tabs never reach the callbacks even if the browser
    broadcasts them.

    Selenium invokes event callbacks on its own threads; registered callbacks
    must be thread-safe.

    Example:
        inspector = await LogInspector.subscribe(main_tab, session)
        inspector.on_entry(lambda entry: print(entry.text))
        ...
        await inspector.close()
    """

    def __init__(self, context: str, session: Any):
        """Initialize inspector. Use ``subscribe`` to create a live one.

        Args:
            context: Browsing context id to listen to
            session: BrowserSession owning the BiDi connection
        """
        self.context = context
        self.session = session
        self.connection: Any = None
        self.subscription_id: Optional[str] = None
        self._callback_id: Optional[int] = None
        self._console_callbacks: List[EntryCallback] = []
        self._error_callbacks: List[EntryCallback] = []
        self._subscribed = False
        self._closed = False

    @classmethod
    async def subscribe(cls, context: str, session: Any) -> "LogInspector":
        """Create an inspector and subscribe it to the context's log events."""
        inspector = cls(context, session)
        await inspector._subscribe()
        return inspector

    @property
    def is_closed(self) -> bool:
        return self._closed

    def on_entry(self, callback: EntryCallback) -> None:
        """Register a callback for console API entries (console.log etc.)."""
        self._console_callbacks.append(callback)

    def on_javascript_error(self, callback: EntryCallback) -> None:
        """Register a callback for uncaught JavaScript errors."""
        self._error_callbacks.append(callback)

    async def close(self) -> None:
        """Stop listening and release the protocol subscription.

        Safe to call repeatedly and after the session has gone away; errors
        are logged and swallowed.
        """
        if self._closed:
            return
        self._closed = True
        self._console_callbacks.clear()
        self._error_callbacks.clear()

        if self.connection is None:
            return
        if self._callback_id is not None:
            try:
                self.connection.remove_callback(LogEntryAdded, self._callback_id)
            except Exception as e:
                logger.warning(f"Error removing log listener: {e}")
            self._callback_id = None

        if not self._subscribed:
            return
        self._subscribed = False

        if self.subscription_id:
            params: Dict[str, Any] = {"subscriptions": [self.subscription_id]}
        else:
            params = {"events": [LOG_ENTRY_ADDED], "contexts": [self.context]}
        try:
            await asyncio.to_thread(
                self.connection.execute, bidi_command("session.unsubscribe", params)
            )
            logger.debug(f"Unsubscribed from log events for context {self.context}")
        except Exception as e:
            logger.warning(f"Error closing LogInspector: {e}")

    async def _subscribe(self) -> None:
        self.connection = self.session.connection
        # listen before subscribing so no event can slip through in between
        self._callback_id = self.connection.add_callback(
            LogEntryAdded, self._handle_event
        )
        try:
            result = await asyncio.to_thread(
                self.connection.execute,
                bidi_command(
                    "session.subscribe",
                    {"events": [LOG_ENTRY_ADDED], "contexts": [self.context]},
                ),
            )
        except Exception:
            self.connection.remove_callback(LogEntryAdded, self._callback_id)
            self._callback_id = None
            self._closed = True
            raise
        self._subscribed = True
        self.subscription_id = (result or {}).get("subscription")
        logger.info(f"Subscribed to console logs of context {self.context}")

    def _handle_event(self, params: Dict[str, Any]) -> None:
        if self._closed:
            return

        source_context = (params.get("source") or {}).get("context")
        if source_context != self.context:
            logger.debug(
                f"Ignoring log entry from context {source_context} "
                f"(listening to {self.context})"
            )
            return

        entry = ConsoleLogEntry.from_bidi_params(params)
        if entry.is_console:
            callbacks = self._console_callbacks
        elif entry.is_javascript_error:
            callbacks = self._error_callbacks
        else:
            return

        for callback in list(callbacks):
            try:
                callback(entry)
            except Exception as e:
                logger.error(f"Error in log entry callback: {e}")
