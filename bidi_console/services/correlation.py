"""Single-assignment slot for correlating an async event with a waiting caller."""

import asyncio
import logging
import threading
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from ..exceptions import TimeoutExpired

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SlotState(Enum):
    EMPTY = "empty"
    RESOLVED = "resolved"
    EXPIRED = "expired"


class CorrelationSlot(Generic[T]):
    """Holds at most one value, delivered from any task or thread.

    The producer calls ``offer``; the first offer resolves the slot and every
    later one is ignored. The consumer awaits ``wait``, which either returns
    the value or expires the slot after a timeout. RESOLVED and EXPIRED are
    terminal.

    Must be created inside a running event loop.
    """

    def __init__(self, name: str = "slot"):
        self.name = name
        self._loop = asyncio.get_running_loop()
        self._loop_thread = threading.get_ident()
        self._future: asyncio.Future = self._loop.create_future()
        self._state = SlotState.EMPTY

    @property
    def state(self) -> SlotState:
        return self._state

    @property
    def value(self) -> Optional[T]:
        if self._state is SlotState.RESOLVED:
            return self._future.result()
        return None

    def offer(self, value: T) -> None:
        """Deliver a value. Thread-safe; only the first offer counts."""
        if threading.get_ident() == self._loop_thread:
            self._resolve(value)
        else:
            self._loop.call_soon_threadsafe(self._resolve, value)

    async def wait(self, timeout: float) -> T:
        """Wait for the value.

        Args:
            timeout: Seconds to wait

        Returns:
            The first offered value

        Raises:
            TimeoutExpired: If nothing was offered in time
        """
        if self._state is SlotState.EXPIRED:
            raise TimeoutExpired(timeout)

        done, _ = await asyncio.wait({self._future}, timeout=timeout)
        if not done:
            self._state = SlotState.EXPIRED
            self._future.cancel()
            logger.debug(f"{self.name} expired after {timeout:g}s")
            raise TimeoutExpired(timeout)
        return self._future.result()

    async def settled_within(self, timeout: float) -> bool:
        """Report whether a value arrives within ``timeout`` without expiring the slot."""
        if self._state is not SlotState.EMPTY:
            return self._state is SlotState.RESOLVED
        done, _ = await asyncio.wait({self._future}, timeout=timeout)
        return bool(done)

    def _resolve(self, value: Any) -> bool:
        if self._state is not SlotState.EMPTY or self._future.done():
            logger.debug(f"{self.name} is {self._state.value}, dropping late value")
            return False
        self._state = SlotState.RESOLVED
        self._future.set_result(value)
        return True

    def __repr__(self) -> str:
        return f"CorrelationSlot(name={self.name!r}, state={self._state.value})"


async def wait_for_one(slot: CorrelationSlot[T], timeout: float) -> T:
    """Return the first value delivered to ``slot`` or raise TimeoutExpired."""
    return await slot.wait(timeout)


def correlate(inspector: Any, name: str = "console entry") -> CorrelationSlot:
    """Attach a fresh slot to an inspector's console entries.

    Call this before triggering whatever produces the entry.
    """
    slot: CorrelationSlot = CorrelationSlot(name)
    inspector.on_entry(slot.offer)
    return slot
