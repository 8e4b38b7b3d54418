from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime

from slotwise.domain.entities.blocked_slot import BlockedSlot
from slotwise.domain.entities.booking import Booking
from slotwise.domain.entities.business import Business
from slotwise.domain.entities.operating_hours import OperatingHoursRule
from slotwise.domain.entities.resource import Resource, ResourceCombination


class RecordStorePort(ABC):
    """
    Read access to businesses, hours, bookings and tables.
    Adapters raise DependencyError when the underlying store fails.
    """

    @abstractmethod
    async def get_business(self, business_id: str) -> Business | None:
        raise NotImplementedError

    @abstractmethod
    async def get_operating_hours_rule(
        self,
        business_id: str,
        day_of_week: int,
        specific_date: date | None = None,
    ) -> OperatingHoursRule | None:
        """Return the applicable rule: a specific-date override beats a day-of-week rule."""
        raise NotImplementedError

    @abstractmethod
    async def get_active_bookings(self, business_id: str, day_start: datetime, day_end: datetime) -> list[Booking]:
        """Pending/confirmed bookings starting in [day_start, day_end)."""
        raise NotImplementedError

    @abstractmethod
    async def get_active_resources(self, business_id: str) -> list[Resource]:
        """Active, auto-assignable tables ordered by priority."""
        raise NotImplementedError

    @abstractmethod
    async def get_resource_combinations(self, business_id: str, party_size: int) -> list[ResourceCombination]:
        """Active combinations whose [min_capacity, total_capacity] covers party_size."""
        raise NotImplementedError

    @abstractmethod
    async def get_bookings_for_resources(
        self,
        resource_ids: list[str],
        day_start: datetime,
        day_end: datetime,
    ) -> list[Booking]:
        """Active bookings assigned to any of resource_ids starting in [day_start, day_end)."""
        raise NotImplementedError

    @abstractmethod
    async def get_blocked_slots(self, business_id: str, start: datetime, end: datetime) -> list[BlockedSlot]:
        """Active blocks (business-wide and per-table) overlapping [start, end)."""
        raise NotImplementedError

    @abstractmethod
    async def add_booking(self, booking: Booking) -> Booking:
        raise NotImplementedError
