from __future__ import annotations

import logging

from slotwise.application.ports.notification import NotificationPort
from slotwise.domain.entities.booking import Booking
from slotwise.domain.entities.business import Business
from slotwise.domain.entities.resource import Resource
from slotwise.infrastructure.notifications.whatsapp_notifier import confirmation_text


class MockNotifier(NotificationPort):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self._logger = logging.getLogger(__name__)

    async def send_booking_confirmation(
        self,
        business: Business,
        booking: Booking,
        resources: tuple[Resource, ...] = (),
    ) -> bool:
        text = confirmation_text(business, booking, resources)
        self.sent.append((booking.id, text))
        self._logger.info(
            "Mock booking confirmation", extra={"booking_id": booking.id, "text": text}
        )
        return True
