"""Firefox session driven through Selenium with WebDriver BiDi enabled."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from selenium import webdriver
from selenium.common.exceptions import NoSuchElementException, WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.common.selenium_manager import SeleniumManager

from ..config import HarnessConfig
from ..exceptions import (
    BiDiCommandError,
    BrowserNotAvailableError,
    NavigationError,
    NoSuchElementError,
)

logger = logging.getLogger(__name__)

CONTEXT_KINDS = ("tab", "window")


class Element:
    """A located element, bound to the context it was found in."""

    def __init__(self, web_element: Any, context: str, element_id: str):
        self.web_element = web_element
        self.context = context
        self.element_id = element_id

    async def click(self) -> None:
        """Click the element.

        Raises:
            BiDiCommandError: If the browser refuses the click
        """
        try:
            await asyncio.to_thread(self.web_element.click)
        except WebDriverException as e:
            raise BiDiCommandError(
                "element click failed", e.msg or str(e), method="click"
            ) from e
        logger.debug(f"Clicked #{self.element_id} in context {self.context}")

    def __repr__(self) -> str:
        return f"Element(id={self.element_id!r}, context={self.context!r})"


class BrowserSession:
    """A Selenium driver with BiDi enabled plus the current browsing context.

    Selenium's driver API is blocking, so every call runs in a worker thread
    and the event loop stays free to receive log events. Window handles and
    BiDi browsing context ids are the same strings in Firefox.
    """

    def __init__(self, driver: Any):
        """Initialize session.

        Args:
            driver: Started Selenium WebDriver with ``webSocketUrl`` granted
        """
        self.driver = driver
        self._current_context: Optional[str] = None
        self._closed = False

    @classmethod
    async def new_session(cls, config: HarnessConfig) -> "BrowserSession":
        """Start Firefox (or a remote session) with BiDi enabled.

        Args:
            config: Harness configuration

        Returns:
            Ready BrowserSession

        Raises:
            BrowserNotAvailableError: If no BiDi session could be started
        """
        options = firefox_options(config)
        try:
            driver = await asyncio.to_thread(_start_driver, config, options)
        except WebDriverException as e:
            raise BrowserNotAvailableError(
                f"Could not start a BiDi session: {e.msg or e}"
            ) from e

        caps = driver.capabilities
        if not isinstance(caps.get("webSocketUrl"), str):
            await asyncio.to_thread(driver.quit)
            raise BrowserNotAvailableError(
                f"{caps.get('browserName', 'Browser')} did not grant a BiDi websocket"
            )

        logger.info(
            f"BiDi session {driver.session_id} started "
            f"({caps.get('browserName', 'browser')} {caps.get('browserVersion', '')})".rstrip()
        )
        return cls(driver)

    @property
    def connection(self) -> Any:
        """The driver's BiDi websocket connection, opened on first use."""
        return self.driver.script.conn

    async def current_context_handle(self) -> str:
        """Return the current top-level browsing context id."""
        if self._current_context is None:
            self._current_context = await asyncio.to_thread(
                lambda: self.driver.current_window_handle
            )
        return self._current_context

    async def get_top_level_contexts(self) -> List[str]:
        return await asyncio.to_thread(lambda: list(self.driver.window_handles))

    async def open_new_context(self, kind: str = "tab") -> str:
        """Open a new tab or window and make it current.

        Args:
            kind: ``tab`` or ``window``

        Returns:
            The new browsing context id
        """
        if kind not in CONTEXT_KINDS:
            raise ValueError(f"Unsupported context type: {kind}")

        def open_context() -> str:
            self.driver.switch_to.new_window(kind)
            return self.driver.current_window_handle

        handle = await asyncio.to_thread(open_context)
        self._current_context = handle
        logger.debug(f"Opened {kind} {handle}")
        return handle

    async def switch_to(self, handle: str) -> None:
        """Make ``handle`` the current context."""
        await asyncio.to_thread(self.driver.switch_to.window, handle)
        self._current_context = handle

    async def navigate(self, url: str) -> None:
        """Load ``url`` in the current context, returning once it has loaded.

        Raises:
            NavigationError: If the page fails to load
        """
        try:
            await asyncio.to_thread(self.driver.get, url)
        except WebDriverException as e:
            raise NavigationError(
                "navigation failed", e.msg or str(e), method="get"
            ) from e

    async def find_element(self, element_id: str) -> Element:
        """Locate the element with the given id in the current context.

        Raises:
            NoSuchElementError: If nothing matches
        """
        context = await self.current_context_handle()
        try:
            web_element = await asyncio.to_thread(
                self.driver.find_element, By.ID, element_id
            )
        except NoSuchElementException as e:
            raise NoSuchElementError(element_id, context) from e
        return Element(web_element, context, element_id)

    async def close(self) -> None:
        """Quit the driver, which also closes the BiDi websocket."""
        if self._closed:
            return
        self._closed = True
        session_id = self.driver.session_id
        await asyncio.to_thread(self.driver.quit)
        logger.info(f"BiDi session {session_id} closed")


def firefox_options(config: HarnessConfig) -> Any:
    """Build Firefox options with the BiDi websocket requested."""
    options = webdriver.FirefoxOptions()
    options.enable_bidi = True
    if config.headless:
        options.add_argument("-headless")
    if config.browser_binary:
        options.binary_location = config.browser_binary
    return options


def _start_driver(config: HarnessConfig, options: Any) -> Any:
    if config.remote_url:
        driver = webdriver.Remote(command_executor=config.remote_url, options=options)
    else:
        driver = webdriver.Firefox(options=options)
    try:
        driver.set_page_load_timeout(config.page_load_timeout)
    except WebDriverException:
        driver.quit()
        raise
    return driver


def locate_browser(browser_binary: Optional[str] = None) -> Dict[str, str]:
    """Resolve Firefox and geckodriver through Selenium Manager.

    Args:
        browser_binary: Explicit Firefox binary, if configured

    Returns:
        Mapping with ``browser_path`` and ``driver_path``

    Raises:
        BrowserNotAvailableError: If Firefox cannot be found
    """
    args = ["--browser", "firefox"]
    if browser_binary:
        args += ["--browser-path", browser_binary]
    try:
        paths = SeleniumManager().binary_paths(args)
    except WebDriverException as e:
        raise BrowserNotAvailableError(f"Firefox not found: {e.msg or e}") from e
    if not paths.get("browser_path"):
        raise BrowserNotAvailableError("Firefox not found by Selenium Manager")
    return paths
