from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from itertools import islice
from typing import Callable, Iterable, Iterator

from slotwise.application.exceptions import NotFoundError
from slotwise.application.ports.record_store import RecordStorePort
from slotwise.application.use_cases.check_capacity import check_capacity
from slotwise.application.use_cases.validate_hours import validate_hours
from slotwise.application.utils.blocks import find_block
from slotwise.application.utils.time_utils import (
    TimeInterval,
    day_bounds,
    day_of_week_index,
    instant_to_local_date,
    instant_to_local_time_string,
    local_to_instant,
    parse_date,
)
from slotwise.domain.entities.blocked_slot import BlockedSlot
from slotwise.domain.entities.booking import Booking
from slotwise.domain.entities.business import Business
from slotwise.domain.entities.operating_hours import OperatingHoursRule

MINUTES_PER_DAY = 24 * 60


def iter_candidate_intervals(
    after: datetime,
    duration_minutes: int,
    increment_minutes: int,
    latest_end: datetime,
    max_iterations: int | None = None,
) -> Iterator[TimeInterval]:
    """
    Candidates at after + k*increment (k >= 1), in increasing order.
    Stops at the first candidate ending after latest_end, or after max_iterations
    (default: one day of increments, 48 at 30 minutes).
    """
    if increment_minutes <= 0:
        raise ValueError("increment_minutes must be positive")
    if max_iterations is None:
        max_iterations = MINUTES_PER_DAY // increment_minutes
    candidate_start = after
    for _ in range(max_iterations):
        candidate_start = candidate_start + timedelta(minutes=increment_minutes)
        interval = TimeInterval.from_start(candidate_start, duration_minutes)
        if interval.end > latest_end:
            return
        yield interval


def next_feasible_times(
    candidates: Iterable[TimeInterval],
    is_feasible: Callable[[TimeInterval], bool],
    max_suggestions: int,
    timezone: str,
) -> list[str]:
    feasible = (c for c in candidates if is_feasible(c))
    return [instant_to_local_time_string(c.start, timezone) for c in islice(feasible, max(0, max_suggestions))]


def closing_instant(target_date: date, rule: OperatingHoursRule | None, timezone: str) -> datetime | None:
    if rule is None or rule.is_closed or not rule.open_time or not rule.close_time:
        return None
    return local_to_instant(target_date, rule.close_time, timezone)


def _slot_predicate(
    business: Business,
    target_date: date,
    rule: OperatingHoursRule | None,
    bookings: list[Booking],
    blocks: Iterable[BlockedSlot],
) -> Callable[[TimeInterval], bool]:
    blocks = list(blocks)

    def is_feasible(interval: TimeInterval) -> bool:
        if not validate_hours(business, target_date, interval, rule).within_hours:
            return False
        if find_block(interval, blocks) is not None:
            return False
        return check_capacity(business.id, interval, bookings, business.slot_capacity, business.locale).available

    return is_feasible


def find_next_slots(
    business: Business,
    after_instant: datetime,
    duration_minutes: int,
    max_suggestions: int = 3,
    increment_minutes: int = 30,
    *,
    rule: OperatingHoursRule | None,
    bookings: list[Booking],
    blocks: Iterable[BlockedSlot] = (),
) -> list[str]:
    """Up to max_suggestions local "HH:MM" start times after after_instant, same local day only."""
    target_date = instant_to_local_date(after_instant, business.timezone)
    latest_end = closing_instant(target_date, rule, business.timezone)
    if latest_end is None:
        return []

    candidates = iter_candidate_intervals(after_instant, duration_minutes, increment_minutes, latest_end)
    is_feasible = _slot_predicate(business, target_date, rule, bookings, blocks)
    return next_feasible_times(candidates, is_feasible, max_suggestions, business.timezone)


def list_available_slots(
    business: Business,
    target_date: date | str,
    duration_minutes: int,
    interval_minutes: int = 15,
    *,
    rule: OperatingHoursRule | None,
    bookings: list[Booking],
    blocks: Iterable[BlockedSlot] = (),
) -> list[str]:
    """Every feasible start time from opening to closing, for public booking pages."""
    target_date = parse_date(target_date)
    latest_end = closing_instant(target_date, rule, business.timezone)
    if latest_end is None:
        return []

    opening = local_to_instant(target_date, rule.open_time, business.timezone)
    max_iterations = MINUTES_PER_DAY // interval_minutes + 1
    candidates = iter_candidate_intervals(
        opening - timedelta(minutes=interval_minutes),
        duration_minutes,
        interval_minutes,
        latest_end,
        max_iterations=max_iterations,
    )
    is_feasible = _slot_predicate(business, target_date, rule, bookings, blocks)
    return next_feasible_times(candidates, is_feasible, max_iterations, business.timezone)


class NextSlotFinder:
    def __init__(self, store: RecordStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    async def _get_business(self, business_id: str) -> Business:
        business = await self._store.get_business(business_id)
        if business is None or not business.is_active:
            raise NotFoundError(f"Business not found: {business_id}")
        return business

    async def _load_day(
        self,
        business: Business,
        target_date: date,
    ) -> tuple[OperatingHoursRule | None, list[Booking], list[BlockedSlot]]:
        day_start, day_end = day_bounds(target_date, business.timezone)
        rule = await self._store.get_operating_hours_rule(business.id, day_of_week_index(target_date), target_date)
        bookings = await self._store.get_active_bookings(business.id, day_start, day_end)
        blocks = await self._store.get_blocked_slots(business.id, day_start, day_end)
        return rule, bookings, blocks

    async def find(
        self,
        business_id: str,
        after_instant: datetime,
        duration_minutes: int,
        max_suggestions: int = 3,
        increment_minutes: int = 30,
    ) -> list[str]:
        business = await self._get_business(business_id)
        return await self._find(business, after_instant, duration_minutes, max_suggestions, increment_minutes)

    async def find_from_local(
        self,
        business_id: str,
        target_date: date | str,
        time: str,
        duration_minutes: int,
        max_suggestions: int = 3,
        increment_minutes: int = 30,
    ) -> list[str]:
        """Same as find() with the starting point given as business-local date and time."""
        business = await self._get_business(business_id)
        after_instant = local_to_instant(target_date, time, business.timezone)
        return await self._find(business, after_instant, duration_minutes, max_suggestions, increment_minutes)

    async def _find(
        self,
        business: Business,
        after_instant: datetime,
        duration_minutes: int,
        max_suggestions: int,
        increment_minutes: int,
    ) -> list[str]:
        target_date = instant_to_local_date(after_instant, business.timezone)
        rule, bookings, blocks = await self._load_day(business, target_date)
        slots = find_next_slots(
            business,
            after_instant,
            duration_minutes,
            max_suggestions,
            increment_minutes,
            rule=rule,
            bookings=bookings,
            blocks=blocks,
        )
        self._logger.info(
            "Next slots computed",
            extra={"business_id": business.id, "found": len(slots)},
        )
        return slots

    async def list_day(
        self,
        business_id: str,
        target_date: date | str,
        duration_minutes: int,
        interval_minutes: int = 15,
    ) -> list[str]:
        target_date = parse_date(target_date)
        business = await self._get_business(business_id)
        rule, bookings, blocks = await self._load_day(business, target_date)
        return list_available_slots(
            business,
            target_date,
            duration_minutes,
            interval_minutes,
            rule=rule,
            bookings=bookings,
            blocks=blocks,
        )
