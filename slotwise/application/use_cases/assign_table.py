from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from slotwise.application.exceptions import NotFoundError, ValidationError
from slotwise.application.ports.record_store import RecordStorePort
from slotwise.application.use_cases.find_next_slots import (
    closing_instant,
    iter_candidate_intervals,
    next_feasible_times,
)
from slotwise.application.utils.blocks import find_block
from slotwise.application.utils.messages import message
from slotwise.application.utils.time_utils import (
    TimeInterval,
    day_bounds,
    day_of_week_index,
    local_to_instant,
    overlaps,
    parse_date,
)
from slotwise.domain.entities.blocked_slot import BlockedSlot
from slotwise.domain.entities.booking import Booking
from slotwise.domain.entities.business import Business, ResourcePriorityConfig
from slotwise.domain.entities.resource import Resource, ResourceCombination

DEFAULT_TABLE_DURATION_MINUTES = 90


@dataclass(frozen=True)
class ScoringPolicy:
    """Weights for table scoring. Higher total score is a better table."""

    base: int = 100
    # (max wasted-seat ratio, points), checked in order
    efficiency_bands: tuple[tuple[float, int], ...] = ((0.0, 40), (0.25, 30), (0.5, 15))
    requested_zone_bonus: int = 20
    fill_order_top: int = 20
    fill_order_step: int = 5
    size_order_top: int = 15
    size_order_step: int = 3
    priority_top: int = 25
    priority_step: int = 2


@dataclass(frozen=True)
class ScoredResource:
    resource: Resource
    score: int
    reason: str


@dataclass(frozen=True)
class AssignmentResult:
    success: bool
    message: str | None = None
    resource: Resource | None = None
    combination: ResourceCombination | None = None
    resources: tuple[Resource, ...] = ()
    alternatives: tuple[ScoredResource, ...] = ()
    score: int | None = None
    reason: str | None = None
    suggested_times: tuple[str, ...] = ()
    assignment_type: str | None = None  # "single" | "combination"

    @property
    def resource_ids(self) -> tuple[str, ...]:
        return tuple(r.id for r in self.resources)


def efficiency_points(capacity: int, party_size: int, policy: ScoringPolicy) -> int:
    wasted = max(0, capacity - party_size)
    ratio = wasted / capacity if capacity else 1.0
    for max_ratio, points in policy.efficiency_bands:
        if ratio <= max_ratio:
            return points
    return 0


def zone_points(
    resource: Resource,
    preference: str | None,
    priority_config: ResourcePriorityConfig,
    policy: ScoringPolicy,
) -> int:
    if preference and resource.zone == preference:
        return policy.requested_zone_bonus
    if resource.zone in priority_config.fill_order:
        index = priority_config.fill_order.index(resource.zone)
        return max(0, policy.fill_order_top - index * policy.fill_order_step)
    return 0


def size_points(resource: Resource, priority_config: ResourcePriorityConfig, policy: ScoringPolicy) -> int:
    if resource.capacity in priority_config.table_size_order:
        index = priority_config.table_size_order.index(resource.capacity)
        return max(0, policy.size_order_top - index * policy.size_order_step)
    return 0


def priority_points(resource: Resource, policy: ScoringPolicy) -> int:
    return max(0, policy.priority_top - (resource.priority or 0) * policy.priority_step)


def score_resource(
    resource: Resource,
    party_size: int,
    preference: str | None = None,
    priority_config: ResourcePriorityConfig | None = None,
    policy: ScoringPolicy | None = None,
) -> int:
    priority_config = priority_config or ResourcePriorityConfig()
    policy = policy or ScoringPolicy()
    return (
        policy.base
        + efficiency_points(resource.capacity, party_size, policy)
        + zone_points(resource, preference, priority_config, policy)
        + size_points(resource, priority_config, policy)
        + priority_points(resource, policy)
    )


def assignment_reason(resource: Resource, party_size: int, locale: str | None = None) -> str:
    label = resource.label or resource.id
    wasted = resource.capacity - party_size
    if wasted == 0:
        text = message("table_perfect", locale, label=label, party=party_size)
    elif wasted == 1:
        text = message("table_good", locale, label=label, capacity=resource.capacity, party=party_size)
    else:
        text = message("table_available_seats", locale, label=label, capacity=resource.capacity)
    if resource.zone:
        text += message("table_zone", locale, zone=resource.zone)
    return text


def eligible_resources(resources: Iterable[Resource], party_size: int) -> list[Resource]:
    return [r for r in resources if r.is_active and r.auto_assignable and r.fits(party_size)]


def is_resource_free(
    resource_id: str,
    requested: TimeInterval,
    bookings: Iterable[Booking],
    blocks: Iterable[BlockedSlot] = (),
) -> bool:
    for booking in bookings:
        if not booking.is_active or resource_id not in booking.resource_ids:
            continue
        if overlaps(requested.start, requested.end, booking.start, booking.end):
            return False
    return find_block(requested, blocks, resource_id=resource_id) is None


def rank_resources(
    resources: Iterable[Resource],
    party_size: int,
    preference: str | None,
    priority_config: ResourcePriorityConfig,
    policy: ScoringPolicy,
    locale: str | None = None,
) -> list[ScoredResource]:
    scored = [
        ScoredResource(
            resource=r,
            score=score_resource(r, party_size, preference, priority_config, policy),
            reason=assignment_reason(r, party_size, locale),
        )
        for r in resources
    ]
    scored.sort(key=lambda s: (-s.score, s.resource.priority, s.resource.capacity, s.resource.label, s.resource.id))
    return scored


def order_combinations(combinations: Iterable[ResourceCombination], party_size: int) -> list[ResourceCombination]:
    candidates = [c for c in combinations if c.is_active and c.fits(party_size)]
    return sorted(candidates, key=lambda c: (c.total_capacity - party_size, len(c.resource_ids), c.name, c.id))


class TableAssignmentEngine:
    """
    Picks a table for a party: filter by capacity, drop busy tables, score the rest.
    Falls back to predefined table combinations when no single table is big enough.
    Store failures come back as a failed result, never as an exception.
    """

    def __init__(
        self,
        store: RecordStorePort,
        policy: ScoringPolicy | None = None,
        increment_minutes: int = 30,
        max_suggestions: int = 3,
    ) -> None:
        self._store = store
        self._policy = policy or ScoringPolicy()
        self._increment_minutes = increment_minutes
        self._max_suggestions = max_suggestions
        self._logger = logging.getLogger(__name__)

    async def find_best_table(
        self,
        business_id: str,
        date: date | str,
        time: str,
        party_size: int,
        duration: int = DEFAULT_TABLE_DURATION_MINUTES,
        preference: str | None = None,
    ) -> AssignmentResult:
        if not business_id:
            raise ValidationError("business_id is required")
        if party_size is None or int(party_size) <= 0:
            raise ValidationError(f"Party size must be positive, got {party_size!r}")
        if duration is None or int(duration) <= 0:
            raise ValidationError(f"Duration must be positive, got {duration!r}")
        target_date = parse_date(date)
        party_size = int(party_size)

        try:
            business = await self._store.get_business(business_id)
        except (ValidationError, NotFoundError):
            raise
        except Exception as e:
            self._logger.exception(
                "Business lookup failed during table assignment",
                extra={"business_id": business_id, "party_size": party_size, "error": str(e)},
            )
            return AssignmentResult(success=False, message=message("assignment_error"))
        if business is None or not business.is_active:
            raise NotFoundError(f"Business not found: {business_id}")

        requested = TimeInterval.from_start(local_to_instant(target_date, time, business.timezone), int(duration))

        try:
            return await self._assign(business, target_date, requested, party_size, preference)
        except Exception as e:
            self._logger.exception(
                "Table assignment failed",
                extra={"business_id": business_id, "party_size": party_size, "error": str(e)},
            )
            return AssignmentResult(success=False, message=message("assignment_error", business.locale))

    async def _assign(
        self,
        business: Business,
        target_date: date,
        requested: TimeInterval,
        party_size: int,
        preference: str | None,
    ) -> AssignmentResult:
        locale = business.locale
        if not business.uses_tables:
            return AssignmentResult(success=False, message=message("tables_not_required", locale))

        self._logger.info(
            "Looking for table",
            extra={"business_id": business.id, "party_size": party_size, "preference": preference},
        )

        resources = await self._store.get_active_resources(business.id)
        if not resources:
            return AssignmentResult(success=False, message=message("no_tables_configured", locale))

        day_start, day_end = day_bounds(target_date, business.timezone)
        blocks = await self._store.get_blocked_slots(business.id, day_start, day_end)

        business_block = find_block(requested, blocks)
        if business_block is not None:
            return AssignmentResult(
                success=False,
                message=message("blocked", locale, reason=business_block.reason or message("blocked_default", locale)),
            )

        suitable = eligible_resources(resources, party_size)
        if not suitable:
            return await self._find_combination(business, requested, party_size, resources, blocks, day_start, day_end)

        bookings = await self._store.get_bookings_for_resources([r.id for r in suitable], day_start, day_end)
        free = [r for r in suitable if is_resource_free(r.id, requested, bookings, blocks)]

        if not free:
            return AssignmentResult(
                success=False,
                message=message("no_tables_at_time", locale),
                suggested_times=tuple(
                    await self._alternative_times(business, target_date, requested, suitable, bookings, blocks)
                ),
            )

        ranked = rank_resources(free, party_size, preference, business.resource_priority, self._policy, locale)
        best = ranked[0]
        self._logger.info(
            "Table assigned",
            extra={"business_id": business.id, "resource_id": best.resource.id, "score": best.score, "reason": best.reason},
        )
        return AssignmentResult(
            success=True,
            message=message("table_available", locale),
            resource=best.resource,
            resources=(best.resource,),
            alternatives=tuple(ranked[1:3]),
            score=best.score,
            reason=best.reason,
            assignment_type="single",
        )

    async def _find_combination(
        self,
        business: Business,
        requested: TimeInterval,
        party_size: int,
        resources: list[Resource],
        blocks: list[BlockedSlot],
        day_start: datetime,
        day_end: datetime,
    ) -> AssignmentResult:
        locale = business.locale
        self._logger.info(
            "No single table fits, trying combinations",
            extra={"business_id": business.id, "party_size": party_size},
        )
        combinations = order_combinations(
            await self._store.get_resource_combinations(business.id, party_size), party_size
        )
        by_id = {r.id: r for r in resources}
        member_ids = sorted({rid for c in combinations for rid in c.resource_ids})
        bookings = await self._store.get_bookings_for_resources(member_ids, day_start, day_end) if member_ids else []

        for combination in combinations:
            members = [by_id.get(rid) for rid in combination.resource_ids]
            if any(m is None for m in members):
                continue
            if all(is_resource_free(m.id, requested, bookings, blocks) for m in members):
                reason = message(
                    "combination", locale, name=combination.name or combination.id, capacity=combination.total_capacity
                )
                self._logger.info(
                    "Table combination assigned",
                    extra={"business_id": business.id, "combination_id": combination.id, "reason": reason},
                )
                return AssignmentResult(
                    success=True,
                    message=message("table_available", locale),
                    combination=combination,
                    resources=tuple(members),
                    reason=reason,
                    assignment_type="combination",
                )

        return AssignmentResult(
            success=False,
            message=message("no_tables_nor_combinations", locale, party=party_size),
        )

    async def _alternative_times(
        self,
        business: Business,
        target_date: date,
        requested: TimeInterval,
        suitable: list[Resource],
        bookings: list[Booking],
        blocks: list[BlockedSlot],
    ) -> list[str]:
        rule = await self._store.get_operating_hours_rule(business.id, day_of_week_index(target_date), target_date)
        latest_end = closing_instant(target_date, rule, business.timezone)
        if latest_end is None:
            return []

        def any_table_free(interval: TimeInterval) -> bool:
            if find_block(interval, blocks) is not None:
                return False
            return any(is_resource_free(r.id, interval, bookings, blocks) for r in suitable)

        candidates = iter_candidate_intervals(
            requested.start, requested.duration_minutes, self._increment_minutes, latest_end
        )
        return next_feasible_times(candidates, any_table_free, self._max_suggestions, business.timezone)
