from __future__ import annotations

import json
import logging
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any

from slotwise.application.exceptions import DependencyError
from slotwise.domain.entities.blocked_slot import BlockedSlot
from slotwise.domain.entities.booking import Booking, BookingStatus
from slotwise.domain.entities.business import Business, ResourcePriorityConfig, Shift
from slotwise.domain.entities.operating_hours import OperatingHoursRule
from slotwise.domain.entities.resource import Resource, ResourceCombination
from slotwise.infrastructure.store.memory_store import MemoryRecordStore


class JsonRecordStore(MemoryRecordStore):
    """
    Record store backed by one JSON document:

        {"businesses": [...], "operating_hours": [...], "resources": [...],
         "combinations": [...], "blocked_slots": [...], "bookings": [...]}

    The document is read once at startup. Booking writes rewrite the file atomically.
    """

    def __init__(self, path: str = "./data/store.json", default_timezone: str | None = None) -> None:
        super().__init__()
        self._path = Path(path)
        self._default_timezone = default_timezone
        self._write_lock = threading.Lock()
        self._raw: dict[str, Any] = {}
        self._logger = logging.getLogger(__name__)
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            self._logger.info("Store file missing, starting empty", extra={"path": str(self._path)})
            return
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise DependencyError(f"Cannot read store file {self._path}: {e}") from e

        try:
            for item in data.get("businesses", []):
                self.put_business(self._deserialize_business(item))
            for item in data.get("operating_hours", []):
                self.put_rule(_deserialize_rule(item))
            for item in data.get("resources", []):
                self.put_resource(Resource(**item))
            for item in data.get("combinations", []):
                self.put_combination(
                    ResourceCombination(**{**item, "resource_ids": tuple(item.get("resource_ids", ()))})
                )
            for item in data.get("blocked_slots", []):
                self.put_blocked_slot(_deserialize_block(item))
            for item in data.get("bookings", []):
                self.put_booking(_deserialize_booking(item))
        except (KeyError, TypeError, ValueError) as e:
            raise DependencyError(f"Malformed store file {self._path}: {e}") from e

        self._raw = data
        self._logger.info(
            "Store loaded",
            extra={"path": str(self._path), "businesses": len(data.get("businesses", []))},
        )

    def _deserialize_business(self, data: dict[str, Any]) -> Business:
        timezone = data.get("timezone") or self._default_timezone
        if not timezone:
            raise ValueError(f"Business {data.get('id')} has no timezone")
        priority = data.get("resource_priority") or {}
        return Business(
            id=data["id"],
            timezone=timezone,
            name=data.get("name", ""),
            max_capacity=data.get("max_capacity"),
            business_type=data.get("business_type", "services"),
            locale=data.get("locale", "es"),
            resource_priority=ResourcePriorityConfig(
                fill_order=tuple(priority.get("fill_order", ResourcePriorityConfig.fill_order)),
                table_size_order=tuple(priority.get("table_size_order", ResourcePriorityConfig.table_size_order)),
            ),
            shifts=tuple(Shift(**s) for s in data.get("shifts", [])),
            slug=data.get("slug"),
            phone=data.get("phone"),
            is_active=data.get("is_active", True),
        )

    def _save(self) -> None:
        """Write the whole document atomically."""
        temp_path = self._path.with_suffix(".json.tmp")
        data = dict(self._raw)
        data["bookings"] = [_serialize_booking(b) for b in self.all_bookings()]
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise DependencyError(f"Cannot write store file {self._path}: {e}") from e
        self._raw = data

    async def add_booking(self, booking: Booking) -> Booking:
        with self._write_lock:
            previous = self._bookings.get(booking.id)
            self.put_booking(booking)
            try:
                self._save()
            except DependencyError:
                if previous is None:
                    self._bookings.pop(booking.id, None)
                else:
                    self._bookings[booking.id] = previous
                raise
        return booking

    def set_booking_status(self, booking_id: str, status: BookingStatus) -> Booking:
        with self._write_lock:
            booking = super().set_booking_status(booking_id, status)
            self._save()
        return booking


def _parse_instant(value: str) -> datetime:
    instant = datetime.fromisoformat(value)
    if instant.tzinfo is None:
        raise ValueError(f"Instant without UTC offset: {value}")
    return instant


def _deserialize_rule(data: dict[str, Any]) -> OperatingHoursRule:
    specific = data.get("specific_date")
    return OperatingHoursRule(
        business_id=data["business_id"],
        day_of_week=data.get("day_of_week"),
        specific_date=date.fromisoformat(specific) if specific else None,
        open_time=data.get("open_time"),
        close_time=data.get("close_time"),
        is_closed=data.get("is_closed", False),
        priority=data.get("priority", 0),
    )


def _deserialize_block(data: dict[str, Any]) -> BlockedSlot:
    return BlockedSlot(
        **{**data, "start": _parse_instant(data["start"]), "end": _parse_instant(data["end"])}
    )


def _deserialize_booking(data: dict[str, Any]) -> Booking:
    return Booking(
        **{
            **data,
            "start": _parse_instant(data["start"]),
            "status": BookingStatus(data.get("status", BookingStatus.confirmed.value)),
            "resource_ids": tuple(data.get("resource_ids", ())),
        }
    )


def _serialize_booking(booking: Booking) -> dict[str, Any]:
    return {
        "id": booking.id,
        "business_id": booking.business_id,
        "start": booking.start.isoformat(),
        "duration_minutes": booking.duration_minutes,
        "status": BookingStatus(booking.status).value,
        "resource_ids": list(booking.resource_ids),
        "party_size": booking.party_size,
        "client_name": booking.client_name,
        "client_phone": booking.client_phone,
        "client_email": booking.client_email,
        "service_name": booking.service_name,
    }
