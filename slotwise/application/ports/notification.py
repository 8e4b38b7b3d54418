from __future__ import annotations

from abc import ABC, abstractmethod

from slotwise.domain.entities.booking import Booking
from slotwise.domain.entities.business import Business
from slotwise.domain.entities.resource import Resource


class NotificationPort(ABC):
    @abstractmethod
    async def send_booking_confirmation(
        self,
        business: Business,
        booking: Booking,
        resources: tuple[Resource, ...] = (),
    ) -> bool:
        """Send a confirmation to the client. Returns True if actually sent, False if skipped."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release transport resources. Adapters without any keep this no-op."""
        return None
