"""
Tests for slot capacity (sweep-line peak concurrency).
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from slotwise.application.exceptions import ValidationError
from slotwise.application.use_cases.check_capacity import SlotCapacityChecker, check_capacity, peak_concurrency
from slotwise.application.utils.time_utils import TimeInterval, local_to_instant
from slotwise.domain.entities.booking import BookingStatus
from slotwise.infrastructure.store.memory_store import MemoryRecordStore

MONDAY = "2025-06-02"
TZ = "Europe/Madrid"


def _interval(hhmm: str, minutes: int = 60) -> TimeInterval:
    return TimeInterval.from_start(local_to_instant(MONDAY, hhmm, TZ), minutes)


class CountingStore(MemoryRecordStore):
    def __init__(self) -> None:
        super().__init__()
        self.booking_reads = 0

    async def get_active_bookings(self, business_id, day_start, day_end):
        self.booking_reads += 1
        return await super().get_active_bookings(business_id, day_start, day_end)


@pytest.mark.asyncio
async def test_capacity_boundary_with_cancellation(store, salon, make_booking):
    business = replace(salon, max_capacity=2)
    store.put_business(business)
    store.put_booking(make_booking("b1", business.id, "14:00"))
    store.put_booking(make_booking("b2", business.id, "14:00"))
    checker = SlotCapacityChecker(store)

    full = await checker.check(business, _interval("14:00"))
    assert full.available is False
    assert full.peak_concurrency == 2
    assert full.reason == "Slot lleno: capacidad 2, citas 2"

    store.set_booking_status("b2", BookingStatus.cancelled)
    freed = await checker.check(business, _interval("14:00"))
    assert freed.available is True
    assert freed.peak_concurrency == 1


def test_back_to_back_bookings_never_stack(make_booking):
    """14:00-15:00 and 15:00-16:00 both overlap 14:00-16:00 but never run together."""
    bookings = [make_booking("b1", "salon-1", "14:00"), make_booking("b2", "salon-1", "15:00")]
    requested = _interval("14:00", 120)

    assert peak_concurrency(requested, bookings) == 1
    result = check_capacity("salon-1", requested, bookings, max_capacity=2)
    assert result.available is True


def test_partial_overlaps_stack_where_they_meet(make_booking):
    bookings = [
        make_booking("b1", "salon-1", "14:00", 90),
        make_booking("b2", "salon-1", "15:00", 60),
    ]
    result = check_capacity("salon-1", _interval("14:00", 180), bookings, max_capacity=2)
    assert result.available is False
    assert result.peak_concurrency == 2
    assert result.conflicting_booking.id == "b1"


def test_touching_booking_is_not_a_conflict(make_booking):
    bookings = [make_booking("b1", "salon-1", "13:00")]
    assert check_capacity("salon-1", _interval("14:00"), bookings).available is True


def test_inactive_and_foreign_bookings_are_ignored(make_booking):
    bookings = [
        make_booking("b1", "salon-1", "14:00", status=BookingStatus.cancelled),
        make_booking("b2", "salon-1", "14:00", status=BookingStatus.no_show),
        make_booking("b3", "other-business", "14:00"),
    ]
    assert check_capacity("salon-1", _interval("14:00"), bookings).available is True


def test_pending_booking_counts(make_booking):
    bookings = [make_booking("b1", "salon-1", "14:00", status=BookingStatus.pending)]
    result = check_capacity("salon-1", _interval("14:30"), bookings)
    assert result.available is False
    assert result.reason == "Slot lleno: capacidad 1, citas 1"


def test_missing_capacity_means_one_and_zero_is_rejected(make_booking):
    bookings = [make_booking("b1", "salon-1", "14:00")]
    assert check_capacity("salon-1", _interval("14:00"), bookings, max_capacity=None).available is False
    with pytest.raises(ValidationError):
        check_capacity("salon-1", _interval("14:00"), bookings, max_capacity=0)


def test_english_reason():
    result = check_capacity("salon-1", _interval("14:00"), [], max_capacity=1, locale="en")
    assert result.available is True
    assert result.reason == "Slot available"


@pytest.mark.asyncio
async def test_checker_reads_bookings_once_and_accepts_a_snapshot(salon, make_booking):
    counting = CountingStore()
    counting.put_business(salon)
    counting.put_booking(make_booking("b1", salon.id, "14:00"))
    checker = SlotCapacityChecker(counting)

    result = await checker.check(salon, _interval("14:30"))
    assert result.available is False
    assert counting.booking_reads == 1

    await checker.check(salon, _interval("14:30"), bookings=[])
    assert counting.booking_reads == 1
