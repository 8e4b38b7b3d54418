from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Sequence

from slotwise.application.exceptions import NotFoundError, ValidationError
from slotwise.application.ports.record_store import RecordStorePort
from slotwise.application.use_cases.assign_table import (
    DEFAULT_TABLE_DURATION_MINUTES,
    AssignmentResult,
    TableAssignmentEngine,
)
from slotwise.application.use_cases.check_capacity import check_capacity
from slotwise.application.use_cases.find_next_slots import find_next_slots
from slotwise.application.use_cases.validate_hours import find_shift, validate_hours
from slotwise.application.utils.blocks import find_block
from slotwise.application.utils.messages import message
from slotwise.application.utils.time_utils import (
    TimeInterval,
    day_bounds,
    day_of_week_index,
    local_to_instant,
    normalize_hhmm,
    parse_date,
)
from slotwise.domain.entities.booking import Booking
from slotwise.domain.entities.business import Business

DEFAULT_SERVICE_DURATION_MINUTES = 60
DEFAULT_PARTY_SIZE = 2


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    has_conflict: bool
    is_within_business_hours: bool
    message: str | None
    conflicting_booking: Booking | None = None
    suggested_times: tuple[str, ...] = ()
    assignment: AssignmentResult | None = None
    duration_minutes: int | None = None


def total_duration(
    duration_minutes: int | None = None,
    services: Sequence[Mapping[str, Any]] | None = None,
    default: int = DEFAULT_SERVICE_DURATION_MINUTES,
) -> int:
    """Sum of service durations (60 each when missing), else duration_minutes, else default."""
    if services:
        total = 0
        for service in services:
            value = service.get("duration_minutes")
            if value is None:
                value = service.get("durationMinutes")
            if value is None:
                value = DEFAULT_SERVICE_DURATION_MINUTES
            if int(value) <= 0:
                raise ValidationError(f"Service duration must be positive, got {value}")
            total += int(value)
        duration = total
    elif duration_minutes is not None:
        duration = int(duration_minutes)
    else:
        duration = default
    if duration <= 0:
        raise ValidationError(f"Duration must be positive, got {duration}")
    return duration


class CheckAvailabilityUseCase:
    def __init__(
        self,
        store: RecordStorePort,
        table_engine: TableAssignmentEngine | None = None,
        increment_minutes: int = 30,
        max_suggestions: int = 3,
        default_duration_minutes: int = DEFAULT_SERVICE_DURATION_MINUTES,
        default_table_duration_minutes: int = DEFAULT_TABLE_DURATION_MINUTES,
    ) -> None:
        self._store = store
        self._table_engine = table_engine or TableAssignmentEngine(
            store, increment_minutes=increment_minutes, max_suggestions=max_suggestions
        )
        self._default_duration_minutes = default_duration_minutes
        self._default_table_duration_minutes = default_table_duration_minutes
        self._increment_minutes = increment_minutes
        self._max_suggestions = max_suggestions
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        business_id: str,
        date: date | str | None,
        time: str | None,
        duration_minutes: int | None = None,
        services: Sequence[Mapping[str, Any]] | None = None,
        party_size: int | None = None,
        preference: str | None = None,
    ) -> AvailabilityResult:
        if not date or not time:
            raise ValidationError("Date and time are required")
        target_date = parse_date(date)
        time_str = normalize_hhmm(time)
        # Reject explicit bad durations before any store read.
        if duration_minutes is not None or services:
            total_duration(duration_minutes, services)

        business = await self._store.get_business(business_id)
        if business is None or not business.is_active:
            raise NotFoundError(f"Business not found: {business_id}")

        duration = total_duration(duration_minutes, services, self._default_duration(business, time_str))
        requested = TimeInterval.from_start(local_to_instant(target_date, time_str, business.timezone), duration)

        rule = await self._store.get_operating_hours_rule(business.id, day_of_week_index(target_date), target_date)
        hours = validate_hours(business, target_date, requested, rule)
        if not hours.within_hours:
            self._logger.info(
                "Outside business hours",
                extra={"business_id": business.id, "reason": hours.message},
            )
            return AvailabilityResult(
                available=False,
                has_conflict=False,
                is_within_business_hours=False,
                message=hours.message,
                duration_minutes=duration,
            )

        day_start, day_end = day_bounds(target_date, business.timezone)
        blocks = await self._store.get_blocked_slots(business.id, day_start, day_end)
        block = find_block(requested, blocks)
        if block is not None:
            return AvailabilityResult(
                available=False,
                has_conflict=True,
                is_within_business_hours=True,
                message=message("blocked", business.locale, reason=block.reason or message("blocked_default", business.locale)),
                duration_minutes=duration,
            )

        if business.uses_tables:
            return await self._check_tables(business, target_date, time_str, duration, party_size, preference)

        bookings = await self._store.get_active_bookings(business.id, day_start, day_end)
        capacity = check_capacity(business.id, requested, bookings, business.slot_capacity, business.locale)
        if not capacity.available:
            suggestions = find_next_slots(
                business,
                requested.start,
                duration,
                self._max_suggestions,
                self._increment_minutes,
                rule=rule,
                bookings=bookings,
                blocks=blocks,
            )
            self._logger.info(
                "Slot at capacity",
                extra={"business_id": business.id, "reason": capacity.reason, "suggestions": len(suggestions)},
            )
            return AvailabilityResult(
                available=False,
                has_conflict=True,
                is_within_business_hours=True,
                message=capacity.reason,
                conflicting_booking=capacity.conflicting_booking,
                suggested_times=tuple(suggestions),
                duration_minutes=duration,
            )

        return AvailabilityResult(
            available=True,
            has_conflict=False,
            is_within_business_hours=True,
            message=message("available", business.locale),
            duration_minutes=duration,
        )

    async def _check_tables(
        self,
        business: Business,
        target_date: date,
        time_str: str,
        duration: int,
        party_size: int | None,
        preference: str | None,
    ) -> AvailabilityResult:
        assignment = await self._table_engine.find_best_table(
            business.id,
            target_date,
            time_str,
            int(party_size or DEFAULT_PARTY_SIZE),
            duration,
            preference,
        )
        if not assignment.success:
            return AvailabilityResult(
                available=False,
                has_conflict=True,
                is_within_business_hours=True,
                message=assignment.message or message("no_tables_for_party", business.locale),
                suggested_times=assignment.suggested_times,
                assignment=assignment,
                duration_minutes=duration,
            )
        return AvailabilityResult(
            available=True,
            has_conflict=False,
            is_within_business_hours=True,
            message=message("table_available", business.locale),
            assignment=assignment,
            duration_minutes=duration,
        )

    def _default_duration(self, business: Business, time_str: str) -> int:
        if not business.uses_tables:
            return self._default_duration_minutes
        shift = find_shift(time_str, business.shifts)
        return shift.duration_minutes if shift else self._default_table_duration_minutes
