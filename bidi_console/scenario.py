"""Two-tab console log correlation scenario.

Opens a second tab, subscribes to the console of the first tab only, clicks
the same button in both tabs and checks that exactly the first tab's entry is
captured.

Flow:
1. Bootstrap a BiDi session and remember the initial tab
2. Open the secondary tab
3. Subscribe to console entries of the main tab and attach a correlation slot
4. Click in the secondary tab, the slot must stay empty
5. Click in the main tab and wait for the slot within the timeout
6. Verify text, type and level, then tear everything down
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from .config import HarnessConfig
from .exceptions import CorrelationFailure, TimeoutExpired
from .models import ConsoleLogEntry, LogLevel
from .services.action_driver import perform_action
from .services.browser_session import BrowserSession
from .services.correlation import CorrelationSlot, correlate, wait_for_one
from .services.log_inspector import LogInspector

logger = logging.getLogger(__name__)

SessionFactory = Callable[[HarnessConfig], Awaitable[Any]]
InspectorFactory = Callable[[str, Any], Awaitable[Any]]


class SingleContextScenario:
    """Async context manager running the single-context subscription check."""

    def __init__(
        self,
        config: Optional[HarnessConfig] = None,
        log: Optional[logging.Logger] = None,
        session_factory: Optional[SessionFactory] = None,
        inspector_factory: Optional[InspectorFactory] = None,
    ):
        """Initialize scenario.

        Args:
            config: Harness configuration, defaults to HarnessConfig()
            log: Logger for progress messages, defaults to the module logger
            session_factory: Coroutine creating a browser session from config
            inspector_factory: Coroutine subscribing an inspector to a context
        """
        self.config = config or HarnessConfig()
        self.logger = log or logger
        self._session_factory = session_factory or BrowserSession.new_session
        self._inspector_factory = inspector_factory or LogInspector.subscribe

        self.session: Any = None
        self.inspector: Any = None
        self.slot: Optional[CorrelationSlot] = None
        self.main_tab: Optional[str] = None
        self.secondary_tab: Optional[str] = None

    async def __aenter__(self) -> "SingleContextScenario":
        try:
            await self.setup()
        except BaseException:
            await self.teardown()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.teardown()

    async def setup(self) -> None:
        """Start the browser session and record the main tab."""
        self.logger.info("Initializing browser session with BiDi support")
        self.session = await self._session_factory(self.config)
        self.main_tab = await self.session.current_context_handle()
        self.logger.info(f"Main tab handle assigned: {self.main_tab}")

    async def run(self) -> ConsoleLogEntry:
        """Run the scenario and return the captured entry.

        Raises:
            CorrelationFailure: If the entry leaks from the secondary tab, never
                arrives, or has unexpected fields
        """
        if self.session is None:
            raise RuntimeError("setup() must be called before run()")
        config = self.config

        self.secondary_tab = await self.session.open_new_context("tab")
        self.logger.info(f"Secondary tab handle assigned: {self.secondary_tab}")

        self.inspector = await self._inspector_factory(self.main_tab, self.session)
        self.slot = correlate(self.inspector)

        await perform_action(
            self.session, self.secondary_tab, config.page_url, config.element_id,
            label="secondary", log=self.logger,
        )
        if config.isolation_window > 0 and await self.slot.settled_within(
            config.isolation_window
        ):
            leaked = self.slot.value
            raise CorrelationFailure(
                f"Main tab subscription received an entry after clicking only in the "
                f"secondary tab: {leaked!r}"
            )

        await perform_action(
            self.session, self.main_tab, config.page_url, config.element_id,
            label="main", log=self.logger,
        )

        try:
            entry = await wait_for_one(self.slot, config.timeout)
        except TimeoutExpired as e:
            self.logger.error(f"Timeout waiting for console log entry: {e}")
            raise CorrelationFailure(
                f"Timed out after {config.timeout:g}s waiting for a console entry "
                f"from the main tab"
            ) from None

        self.logger.debug(f"Verifying console log entry: {entry!r}")
        verify_entry(entry, config.expected_text, expected_context=self.main_tab)
        return entry

    async def teardown(self) -> None:
        """Release the inspector and the session. Never raises."""
        self.logger.info("Tearing down session and log inspector")
        if self.inspector is not None:
            try:
                await self.inspector.close()
            except Exception as e:
                self.logger.warning(f"Error closing LogInspector: {e}")
            self.inspector = None

        if self.session is not None:
            try:
                await self.session.close()
            except Exception as e:
                self.logger.warning(f"Error closing browser session: {e}")
            self.session = None


def verify_entry(
    entry: ConsoleLogEntry,
    expected_text: str,
    expected_type: str = "console",
    expected_level: LogLevel = LogLevel.INFO,
    expected_context: Optional[str] = None,
) -> None:
    """Check the captured entry's fields, and its source context when given.

    Raises:
        CorrelationFailure: On the first mismatching field
    """
    if entry.text != expected_text:
        raise CorrelationFailure(
            f"Unexpected log text: {entry.text!r} != {expected_text!r}"
        )
    if entry.type != expected_type:
        raise CorrelationFailure(
            f"Unexpected log type: {entry.type!r} != {expected_type!r}"
        )
    if entry.level is not expected_level:
        raise CorrelationFailure(
            f"Unexpected log level: {entry.level.value!r} != {expected_level.value!r}"
        )
    if expected_context is not None and entry.context != expected_context:
        raise CorrelationFailure(
            f"Entry came from context {entry.context!r}, expected {expected_context!r}"
        )


async def run_scenario(
    config: Optional[HarnessConfig] = None, log: Optional[logging.Logger] = None
) -> ConsoleLogEntry:
    """Run the scenario end to end against a real browser."""
    async with SingleContextScenario(config, log=log) as scenario:
        return await scenario.run()
