from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import date


class SlotLockPort(ABC):
    @abstractmethod
    def hold(self, business_id: str, day: date) -> AbstractAsyncContextManager[None]:
        """
        Serialize check-then-insert for one business day.
        Callers keep the hold for the whole availability check and booking insert.
        """
        raise NotImplementedError
