from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from slotwise.application.exceptions import NotFoundError, ValidationError
from slotwise.application.ports.notification import NotificationPort
from slotwise.application.ports.record_store import RecordStorePort
from slotwise.application.ports.slot_lock import SlotLockPort
from slotwise.application.use_cases.assign_table import AssignmentResult
from slotwise.application.use_cases.check_availability import AvailabilityResult, CheckAvailabilityUseCase
from slotwise.application.utils.messages import message
from slotwise.application.utils.time_utils import local_to_instant, normalize_hhmm, parse_date
from slotwise.domain.entities.booking import Booking, BookingStatus

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class BookingRequest:
    business_id: str
    date: str
    time: str
    client_name: str
    client_phone: str
    client_email: str | None = None
    duration_minutes: int | None = None
    services: tuple[Mapping[str, Any], ...] = ()
    party_size: int | None = None
    preference: str | None = None
    service_name: str | None = None


@dataclass(frozen=True)
class BookingOutcome:
    created: bool
    message: str
    booking: Booking | None = None
    availability: AvailabilityResult | None = None
    assignment: AssignmentResult | None = None
    notified: bool = False


class CreateBookingUseCase:
    """
    Check availability, assign a table when needed, insert the booking and notify the client.
    The check and the insert run under one SlotLockPort hold for the business day.
    """

    def __init__(
        self,
        store: RecordStorePort,
        availability: CheckAvailabilityUseCase,
        lock: SlotLockPort,
        notifier: NotificationPort | None = None,
    ) -> None:
        self._store = store
        self._availability = availability
        self._lock = lock
        self._notifier = notifier
        self._logger = logging.getLogger(__name__)

    async def execute(self, request: BookingRequest) -> BookingOutcome:
        if not request.client_name or not request.client_phone:
            raise ValidationError("Client name and phone are required")
        if not request.date or not request.time:
            raise ValidationError("Date and time are required")
        if request.client_email and not EMAIL_RE.match(request.client_email):
            raise ValidationError("Invalid email format")
        target_date = parse_date(request.date)
        time_str = normalize_hhmm(request.time)

        business = await self._store.get_business(request.business_id)
        if business is None or not business.is_active:
            raise NotFoundError(f"Business not found: {request.business_id}")

        async with self._lock.hold(business.id, target_date):
            availability = await self._availability.execute(
                business.id,
                target_date,
                time_str,
                duration_minutes=request.duration_minutes,
                services=list(request.services) or None,
                party_size=request.party_size,
                preference=request.preference,
            )
            assignment = availability.assignment
            table_only_failure = assignment is not None and not assignment.success
            if not availability.available and not table_only_failure:
                self._logger.info(
                    "Booking rejected",
                    extra={"business_id": business.id, "reason": availability.message},
                )
                return BookingOutcome(
                    created=False,
                    message=f"{message('booking_unavailable', business.locale)} {availability.message or ''}".strip(),
                    availability=availability,
                )

            booking = Booking(
                id=uuid.uuid4().hex,
                business_id=business.id,
                start=local_to_instant(target_date, time_str, business.timezone),
                duration_minutes=availability.duration_minutes,
                status=BookingStatus.confirmed,
                resource_ids=assignment.resource_ids if assignment and assignment.success else (),
                party_size=request.party_size if business.uses_tables else None,
                client_name=request.client_name,
                client_phone=request.client_phone,
                client_email=request.client_email,
                service_name=request.service_name or _first_service_name(request.services),
            )
            booking = await self._store.add_booking(booking)

        self._logger.info(
            "Booking created",
            extra={"business_id": business.id, "booking_id": booking.id, "resource_ids": booking.resource_ids},
        )
        notified = await self._notify(business, booking, assignment)
        return BookingOutcome(
            created=True,
            message=message("booking_created", business.locale),
            booking=booking,
            availability=availability,
            assignment=assignment,
            notified=notified,
        )

    async def _notify(self, business, booking: Booking, assignment: AssignmentResult | None) -> bool:
        if self._notifier is None:
            return False
        resources = assignment.resources if assignment and assignment.success else ()
        try:
            return await self._notifier.send_booking_confirmation(business, booking, resources)
        except Exception as e:
            # The booking already exists; delivery problems never undo it.
            self._logger.error(
                "Booking confirmation failed",
                extra={"business_id": business.id, "booking_id": booking.id, "error": str(e)},
            )
            return False


def _first_service_name(services: tuple[Mapping[str, Any], ...]) -> str | None:
    for service in services:
        name = service.get("service_name") or service.get("serviceName")
        if name:
            return str(name)
    return None
