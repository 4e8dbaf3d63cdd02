"""Navigate-and-click actions against a browsing context."""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


async def perform_action(
    session: Any,
    context: str,
    url: str,
    element_id: str,
    label: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> None:
    """Switch to ``context``, load ``url`` and click the element ``element_id``.

    Navigation waits for the page load to complete, so the click always
    targets the freshly loaded document.

    Args:
        session: BrowserSession to drive
        context: Browsing context id to act in
        url: URL to load
        element_id: Id of the element to click
        label: Human-readable tab name for log messages
        log: Logger to use instead of the module logger

    Raises:
        NavigationError: If the page fails to load
        NoSuchElementError: If the element is missing
    """
    log = log or logger
    label = label or context

    await session.switch_to(context)
    log.info(f"Navigating to page in {label} tab")
    await session.navigate(url)

    element = await session.find_element(element_id)
    await element.click()
    log.info(f"Clicked #{element_id} in {label} tab")
