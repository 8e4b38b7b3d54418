from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"


ACTIVE_STATUSES = frozenset({BookingStatus.pending, BookingStatus.confirmed})


@dataclass(frozen=True)
class Booking:
    id: str
    business_id: str
    start: datetime  # aware, stored as UTC
    duration_minutes: int
    status: BookingStatus = BookingStatus.confirmed
    resource_ids: tuple[str, ...] = ()
    party_size: int | None = None
    client_name: str | None = None
    client_phone: str | None = None
    client_email: str | None = None
    service_name: str | None = None

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)

    @property
    def is_active(self) -> bool:
        return BookingStatus(self.status) in ACTIVE_STATUSES
