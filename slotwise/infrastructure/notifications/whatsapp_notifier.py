from __future__ import annotations

import logging

from slotwise.application.ports.notification import NotificationPort
from slotwise.application.utils.messages import message
from slotwise.application.utils.time_utils import instant_to_local
from slotwise.domain.entities.booking import Booking
from slotwise.domain.entities.business import Business
from slotwise.domain.entities.resource import Resource
from slotwise.infrastructure.notifications.whatsapp_client import EvolutionWhatsAppClient


def confirmation_text(business: Business, booking: Booking, resources: tuple[Resource, ...] = ()) -> str:
    local_start = instant_to_local(booking.start, business.timezone)
    text = message(
        "confirmation",
        business.locale,
        name=booking.client_name or "",
        business=business.name or business.id,
        date=local_start.strftime("%d/%m/%Y"),
        time=local_start.strftime("%H:%M"),
    )
    if resources:
        tables = "+".join(r.label or r.id for r in resources)
        text += message("confirmation_tables", business.locale, tables=tables)
    return text


class WhatsAppNotifier(NotificationPort):
    def __init__(self, client: EvolutionWhatsAppClient, enabled: bool = True) -> None:
        self._client = client
        self._enabled = enabled
        self._logger = logging.getLogger(__name__)

    async def send_booking_confirmation(
        self,
        business: Business,
        booking: Booking,
        resources: tuple[Resource, ...] = (),
    ) -> bool:
        text = confirmation_text(business, booking, resources)
        if not self._enabled:
            self._logger.info(
                "NOTIFICATIONS_ENABLED=false -> skipping send",
                extra={"business_id": business.id, "booking_id": booking.id},
            )
            return False
        if not booking.client_phone or not business.slug:
            self._logger.warning(
                "Missing phone or WhatsApp instance, confirmation not sent",
                extra={"business_id": business.id, "booking_id": booking.id},
            )
            return False
        await self._client.send_text(instance=business.slug, number=booking.client_phone, text=text)
        self._logger.info(
            "Confirmation sent",
            extra={"business_id": business.id, "booking_id": booking.id},
        )
        return True

    async def aclose(self) -> None:
        await self._client.aclose()
