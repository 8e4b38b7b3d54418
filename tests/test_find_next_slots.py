"""
Tests for next-slot suggestions and the public day listing.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from slotwise.application.exceptions import NotFoundError
from slotwise.application.use_cases.find_next_slots import (
    NextSlotFinder,
    find_next_slots,
    iter_candidate_intervals,
    list_available_slots,
)
from slotwise.application.utils.time_utils import local_to_instant
from slotwise.domain.entities.operating_hours import OperatingHoursRule

MONDAY = "2025-06-02"
TZ = "Europe/Madrid"


def _monday_rule(business_id: str = "salon-1") -> OperatingHoursRule:
    return OperatingHoursRule(business_id=business_id, day_of_week=1, open_time="09:00", close_time="18:00")


def test_suggestions_skip_the_busy_slot(salon, make_booking):
    bookings = [make_booking("b1", salon.id, "14:00")]
    after = local_to_instant(MONDAY, "14:00", TZ)

    slots = find_next_slots(salon, after, 60, rule=_monday_rule(), bookings=bookings)
    assert slots == ["15:00", "15:30", "16:00"]


def test_suggestions_stop_at_closing(salon):
    after = local_to_instant(MONDAY, "16:30", TZ)
    assert find_next_slots(salon, after, 60, rule=_monday_rule(), bookings=[]) == ["17:00"]


def test_suggestions_respect_max_and_are_increasing(salon):
    after = local_to_instant(MONDAY, "09:00", TZ)
    slots = find_next_slots(salon, after, 30, max_suggestions=5, increment_minutes=15, rule=_monday_rule(), bookings=[])
    assert slots == ["09:15", "09:30", "09:45", "10:00", "10:15"]
    assert slots == sorted(slots)


def test_closed_day_has_no_suggestions(salon):
    after = local_to_instant(MONDAY, "10:00", TZ)
    assert find_next_slots(salon, after, 60, rule=None, bookings=[]) == []


def test_business_block_is_skipped(salon, make_block):
    blocks = [make_block("x1", salon.id, "15:00", "16:00", reason="Formación")]
    after = local_to_instant(MONDAY, "14:00", TZ)

    slots = find_next_slots(salon, after, 60, rule=_monday_rule(), bookings=[], blocks=blocks)
    assert slots == ["16:00", "16:30", "17:00"]


def test_candidates_are_bounded():
    after = local_to_instant(MONDAY, "00:00", TZ)
    latest = after + timedelta(days=3)
    candidates = list(iter_candidate_intervals(after, 30, 30, latest, max_iterations=48))
    assert len(candidates) == 48
    assert candidates[0].start == after + timedelta(minutes=30)


def test_default_bound_covers_a_full_day_at_any_increment():
    after = local_to_instant(MONDAY, "00:00", TZ)
    latest = after + timedelta(days=3)
    assert len(list(iter_candidate_intervals(after, 10, 10, latest))) == 144
    assert len(list(iter_candidate_intervals(after, 30, 30, latest))) == 48


def test_small_increment_reaches_late_afternoon(salon, make_booking):
    bookings = [make_booking("b1", salon.id, "09:00", 510)]
    after = local_to_instant(MONDAY, "09:00", TZ)

    slots = find_next_slots(salon, after, 30, 2, 10, rule=_monday_rule(), bookings=bookings)
    assert slots == ["17:30"]


def test_day_listing_covers_opening_to_closing(salon):
    slots = list_available_slots(salon, MONDAY, 60, 15, rule=_monday_rule(), bookings=[])
    assert slots[0] == "09:00"
    assert slots[-1] == "17:00"
    assert len(slots) == 33


def test_day_listing_drops_overlapping_starts(salon, make_booking):
    bookings = [make_booking("b1", salon.id, "14:00")]
    slots = list_available_slots(salon, MONDAY, 60, 15, rule=_monday_rule(), bookings=bookings)
    assert "13:00" in slots
    assert "15:00" in slots
    for busy in ("13:15", "13:30", "13:45", "14:00", "14:15", "14:30", "14:45"):
        assert busy not in slots
    assert len(slots) == 26


@pytest.mark.asyncio
async def test_finder_loads_from_store(store, salon, make_booking):
    store.put_booking(make_booking("b1", salon.id, "14:00"))
    finder = NextSlotFinder(store)

    assert await finder.find(salon.id, local_to_instant(MONDAY, "14:00", TZ), 60) == ["15:00", "15:30", "16:00"]
    assert await finder.find_from_local(salon.id, MONDAY, "14:00", 60, max_suggestions=1) == ["15:00"]

    day = await finder.list_day(salon.id, MONDAY, 60)
    assert "14:00" not in day
    assert "15:00" in day


@pytest.mark.asyncio
async def test_finder_unknown_business(store):
    with pytest.raises(NotFoundError):
        await NextSlotFinder(store).find_from_local("missing", MONDAY, "10:00", 60)
