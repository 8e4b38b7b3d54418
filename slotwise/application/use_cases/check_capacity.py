from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from slotwise.application.exceptions import ValidationError
from slotwise.application.ports.record_store import RecordStorePort
from slotwise.application.utils.messages import message
from slotwise.application.utils.time_utils import TimeInterval, day_bounds, instant_to_local_date, overlaps
from slotwise.domain.entities.booking import Booking
from slotwise.domain.entities.business import Business


@dataclass(frozen=True)
class CapacityCheck:
    available: bool
    reason: str
    conflicting_booking: Booking | None
    peak_concurrency: int
    max_capacity: int


def overlapping_bookings(business_id: str, requested: TimeInterval, bookings: list[Booking]) -> list[Booking]:
    """Active bookings of business_id overlapping the requested interval, earliest first."""
    hits = [
        b
        for b in bookings
        if b.business_id == business_id
        and b.is_active
        and overlaps(requested.start, requested.end, b.start, b.end)
    ]
    return sorted(hits, key=lambda b: (b.start, b.id))


def peak_concurrency(requested: TimeInterval, bookings: list[Booking]) -> int:
    """
    Highest number of bookings running at the same moment inside `requested`.

    Sweep-line over booking endpoints clipped to the requested interval.
    Ends sort before starts at the same instant, so touching bookings never stack.
    """
    events: list[tuple[datetime, int]] = []
    for b in bookings:
        start = max(b.start, requested.start)
        end = min(b.end, requested.end)
        if start < end:
            events.append((start, 1))
            events.append((end, -1))
    events.sort()

    running = 0
    peak = 0
    for _, delta in events:
        running += delta
        peak = max(peak, running)
    return peak


def check_capacity(
    business_id: str,
    requested: TimeInterval,
    active_bookings: list[Booking],
    max_capacity: int | None = 1,
    locale: str | None = None,
) -> CapacityCheck:
    """Decide whether one more booking fits in `requested` without reaching max_capacity concurrently."""
    capacity = 1 if max_capacity is None else int(max_capacity)
    if capacity < 1:
        raise ValidationError(f"Slot capacity must be at least 1, got {capacity}")

    hits = overlapping_bookings(business_id, requested, active_bookings)
    peak = peak_concurrency(requested, hits)

    if peak >= capacity:
        return CapacityCheck(
            available=False,
            reason=message("slot_full", locale, capacity=capacity, count=peak),
            conflicting_booking=hits[0],
            peak_concurrency=peak,
            max_capacity=capacity,
        )
    return CapacityCheck(
        available=True,
        reason=message("slot_available", locale),
        conflicting_booking=None,
        peak_concurrency=peak,
        max_capacity=capacity,
    )


class SlotCapacityChecker:
    def __init__(self, store: RecordStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    async def load_day_bookings(self, business: Business, requested: TimeInterval) -> list[Booking]:
        """One query for the active bookings of the business day containing requested.start."""
        local_day = instant_to_local_date(requested.start, business.timezone)
        day_start, day_end = day_bounds(local_day, business.timezone)
        return await self._store.get_active_bookings(business.id, day_start, day_end)

    async def check(
        self,
        business: Business,
        requested: TimeInterval,
        bookings: list[Booking] | None = None,
    ) -> CapacityCheck:
        if bookings is None:
            bookings = await self.load_day_bookings(business, requested)

        result = check_capacity(business.id, requested, bookings, business.slot_capacity, business.locale)
        self._logger.debug(
            "Slot capacity checked",
            extra={
                "business_id": business.id,
                "capacity": result.max_capacity,
                "peak": result.peak_concurrency,
                "available": result.available,
            },
        )
        return result
