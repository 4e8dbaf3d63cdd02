"""Unit tests for the single-assignment correlation slot."""

import asyncio
import threading
import time

import pytest

from bidi_console.exceptions import TimeoutExpired
from bidi_console.services.correlation import (
    CorrelationSlot,
    SlotState,
    correlate,
    wait_for_one,
)


class RecordingInspector:
    def __init__(self):
        self.callbacks = []

    def on_entry(self, callback):
        self.callbacks.append(callback)


class TestResolution:
    """Test delivering a value into the slot."""

    @pytest.mark.asyncio
    async def test_wait_returns_the_offered_object(self):
        """The waiter gets the very object that was offered."""
        slot = CorrelationSlot()
        entry = object()

        slot.offer(entry)
        result = await wait_for_one(slot, 1.0)

        assert result is entry
        assert slot.state is SlotState.RESOLVED
        assert slot.value is entry

    @pytest.mark.asyncio
    async def test_wait_resolves_on_later_offer(self):
        """An offer made while waiting wakes the waiter."""
        slot = CorrelationSlot()
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, slot.offer, "entry")

        assert await wait_for_one(slot, 1.0) == "entry"

    @pytest.mark.asyncio
    async def test_only_first_offer_counts(self):
        """Later offers never replace the first value."""
        slot = CorrelationSlot()

        slot.offer("first")
        slot.offer("second")

        assert await slot.wait(0.1) == "first"
        assert slot.value == "first"

    @pytest.mark.asyncio
    async def test_offer_from_another_thread(self):
        """Offers from a foreign thread, as Selenium makes them, resolve the slot."""
        slot = CorrelationSlot()
        thread = threading.Thread(target=slot.offer, args=("from-thread",))

        thread.start()
        result = await slot.wait(2.0)
        thread.join()

        assert result == "from-thread"


class TestExpiry:
    """Test the timeout path."""

    @pytest.mark.asyncio
    async def test_timeout_raises_and_expires(self):
        """No offer within the bound raises TimeoutExpired and expires the slot."""
        slot = CorrelationSlot()

        start = time.monotonic()
        with pytest.raises(TimeoutExpired) as exc_info:
            await wait_for_one(slot, 0.1)
        elapsed = time.monotonic() - start

        assert exc_info.value.timeout == 0.1
        assert 0.09 <= elapsed < 1.0
        assert slot.state is SlotState.EXPIRED
        assert slot.value is None

    @pytest.mark.asyncio
    async def test_late_offer_after_expiry_is_dropped(self):
        """EXPIRED is terminal: a late offer is ignored."""
        slot = CorrelationSlot()
        with pytest.raises(TimeoutExpired):
            await slot.wait(0.01)

        slot.offer("late")

        assert slot.state is SlotState.EXPIRED
        assert slot.value is None
        with pytest.raises(TimeoutExpired):
            await slot.wait(5.0)

    @pytest.mark.asyncio
    async def test_settled_within_does_not_expire(self):
        """The non-consuming check leaves an empty slot usable."""
        slot = CorrelationSlot()

        assert await slot.settled_within(0.02) is False
        assert slot.state is SlotState.EMPTY

        slot.offer("entry")

        assert await slot.settled_within(0.02) is True
        assert await slot.wait(0.1) == "entry"


class TestCorrelate:
    """Test wiring a slot to an inspector."""

    @pytest.mark.asyncio
    async def test_correlate_registers_offer_with_inspector(self):
        """correlate registers exactly one callback that feeds the slot."""
        inspector = RecordingInspector()

        slot = correlate(inspector)
        inspector.callbacks[0]("entry")

        assert len(inspector.callbacks) == 1
        assert await slot.wait(0.1) == "entry"
