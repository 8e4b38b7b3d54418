from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator

from slotwise.application.ports.slot_lock import SlotLockPort


class MemorySlotLock(SlotLockPort):
    """One asyncio.Lock per (business, day). Serializes bookings inside a single process only."""

    def __init__(self) -> None:
        self._locks: dict[tuple[str, date], asyncio.Lock] = {}
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, business_id: str, day: date) -> asyncio.Lock:
        key = (business_id, day)
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    @asynccontextmanager
    async def hold(self, business_id: str, day: date) -> AsyncIterator[None]:
        lock = self._get_lock(business_id, day)
        if lock.locked():
            self._logger.info(
                "Waiting for slot lock",
                extra={"business_id": business_id, "day": day.isoformat()},
            )
        async with lock:
            yield
