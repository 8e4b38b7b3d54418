from __future__ import annotations

import pytest

from slotwise.application.utils.time_utils import local_to_instant
from slotwise.domain.entities.blocked_slot import BlockedSlot
from slotwise.domain.entities.booking import Booking, BookingStatus
from slotwise.domain.entities.business import Business, Shift
from slotwise.domain.entities.operating_hours import OperatingHoursRule
from slotwise.domain.entities.resource import Resource
from slotwise.infrastructure.store.memory_store import MemoryRecordStore

TZ = "Europe/Madrid"
MONDAY = "2025-06-02"  # day_of_week 1
TUESDAY = "2025-06-03"


@pytest.fixture
def store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture
def salon(store: MemoryRecordStore) -> Business:
    """Hair salon open Mondays 09:00-18:00, one client at a time."""
    business = Business(id="salon-1", timezone=TZ, name="Salón Lucía", max_capacity=1, slug="salon-lucia")
    store.put_business(business)
    store.put_rule(OperatingHoursRule(business_id=business.id, day_of_week=1, open_time="09:00", close_time="18:00"))
    return business


@pytest.fixture
def restaurant(store: MemoryRecordStore) -> Business:
    """Restaurant open Mondays 12:00-23:30 without shifts. Tables are added per test."""
    business = Business(id="resto-1", timezone=TZ, name="Casa Pepe", business_type="restaurant", slug="casa-pepe")
    store.put_business(business)
    store.put_rule(
        OperatingHoursRule(business_id=business.id, day_of_week=1, open_time="12:00:00", close_time="23:30:00")
    )
    return business


@pytest.fixture
def lunch_and_dinner() -> tuple[Shift, ...]:
    return (
        Shift(key="lunch", label="Comida", start="13:00", end="16:00", duration_minutes=90),
        Shift(key="dinner", label="Cena", start="20:00", end="23:30", duration_minutes=120),
    )


@pytest.fixture
def make_booking():
    def _make(
        booking_id: str,
        business_id: str,
        hhmm: str,
        duration: int = 60,
        day: str = MONDAY,
        status: BookingStatus = BookingStatus.confirmed,
        resource_ids: tuple[str, ...] = (),
    ) -> Booking:
        return Booking(
            id=booking_id,
            business_id=business_id,
            start=local_to_instant(day, hhmm, TZ),
            duration_minutes=duration,
            status=status,
            resource_ids=resource_ids,
            client_name="Cliente",
            client_phone="34600000000",
        )

    return _make


@pytest.fixture
def make_table():
    def _make(
        table_id: str,
        business_id: str,
        capacity: int,
        zone: str | None = "salon",
        priority: int = 0,
        label: str | None = None,
    ) -> Resource:
        return Resource(
            id=table_id,
            business_id=business_id,
            capacity=capacity,
            label=label or table_id,
            zone=zone,
            priority=priority,
        )

    return _make


@pytest.fixture
def make_block():
    def _make(
        block_id: str,
        business_id: str,
        start: str,
        end: str,
        reason: str | None = None,
        resource_id: str | None = None,
        day: str = MONDAY,
    ) -> BlockedSlot:
        return BlockedSlot(
            id=block_id,
            business_id=business_id,
            start=local_to_instant(day, start, TZ),
            end=local_to_instant(day, end, TZ),
            reason=reason,
            resource_id=resource_id,
        )

    return _make
