from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

from slotwise.application.ports.record_store import RecordStorePort
from slotwise.application.use_cases.validate_hours import select_rule
from slotwise.application.utils.time_utils import ensure_aware, overlaps
from slotwise.domain.entities.blocked_slot import BlockedSlot
from slotwise.domain.entities.booking import Booking, BookingStatus
from slotwise.domain.entities.business import Business
from slotwise.domain.entities.operating_hours import OperatingHoursRule
from slotwise.domain.entities.resource import Resource, ResourceCombination


class MemoryRecordStore(RecordStorePort):
    def __init__(self) -> None:
        self._businesses: dict[str, Business] = {}
        self._rules: list[OperatingHoursRule] = []
        self._bookings: dict[str, Booking] = {}
        self._resources: dict[str, Resource] = {}
        self._combinations: dict[str, ResourceCombination] = {}
        self._blocks: dict[str, BlockedSlot] = {}

    # Seeding

    def put_business(self, business: Business) -> None:
        self._businesses[business.id] = business

    def put_rule(self, rule: OperatingHoursRule) -> None:
        self._rules.append(rule)

    def put_booking(self, booking: Booking) -> None:
        self._bookings[booking.id] = booking

    def put_resource(self, resource: Resource) -> None:
        self._resources[resource.id] = resource

    def put_combination(self, combination: ResourceCombination) -> None:
        self._combinations[combination.id] = combination

    def put_blocked_slot(self, block: BlockedSlot) -> None:
        self._blocks[block.id] = block

    def set_booking_status(self, booking_id: str, status: BookingStatus) -> Booking:
        booking = replace(self._bookings[booking_id], status=BookingStatus(status))
        self._bookings[booking_id] = booking
        return booking

    def all_bookings(self) -> list[Booking]:
        return sorted(self._bookings.values(), key=lambda b: (b.start, b.id))

    # RecordStorePort

    async def get_business(self, business_id: str) -> Business | None:
        return self._businesses.get(business_id)

    async def get_operating_hours_rule(
        self,
        business_id: str,
        day_of_week: int,
        specific_date: date | None = None,
    ) -> OperatingHoursRule | None:
        rules = [r for r in self._rules if r.business_id == business_id]
        if specific_date is not None:
            return select_rule(rules, specific_date)
        weekly = [r for r in rules if r.specific_date is None and r.day_of_week == day_of_week]
        return max(weekly, key=lambda r: r.priority) if weekly else None

    async def get_active_bookings(self, business_id: str, day_start: datetime, day_end: datetime) -> list[Booking]:
        return [
            b
            for b in self.all_bookings()
            if b.business_id == business_id and b.is_active and _starts_within(b, day_start, day_end)
        ]

    async def get_active_resources(self, business_id: str) -> list[Resource]:
        resources = [
            r for r in self._resources.values() if r.business_id == business_id and r.is_active and r.auto_assignable
        ]
        return sorted(resources, key=lambda r: (r.priority, r.label, r.id))

    async def get_resource_combinations(self, business_id: str, party_size: int) -> list[ResourceCombination]:
        return [
            c
            for c in self._combinations.values()
            if c.business_id == business_id and c.is_active and c.fits(party_size)
        ]

    async def get_bookings_for_resources(
        self,
        resource_ids: list[str],
        day_start: datetime,
        day_end: datetime,
    ) -> list[Booking]:
        wanted = set(resource_ids)
        return [
            b
            for b in self.all_bookings()
            if b.is_active and wanted.intersection(b.resource_ids) and _starts_within(b, day_start, day_end)
        ]

    async def get_blocked_slots(self, business_id: str, start: datetime, end: datetime) -> list[BlockedSlot]:
        return [
            s
            for s in sorted(self._blocks.values(), key=lambda s: (s.start, s.id))
            if s.business_id == business_id and s.is_active and overlaps(s.start, s.end, start, end)
        ]

    async def add_booking(self, booking: Booking) -> Booking:
        self.put_booking(booking)
        return booking


def _starts_within(booking: Booking, day_start: datetime, day_end: datetime) -> bool:
    return ensure_aware(day_start) <= booking.start < ensure_aware(day_end)
