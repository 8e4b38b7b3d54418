from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class BlockedSlot:
    id: str
    business_id: str
    start: datetime
    end: datetime
    reason: str | None = None
    block_type: str = "time_range"  # "full_day", "time_range", "maintenance"
    resource_id: str | None = None  # None blocks the whole business
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError("Blocked slot must end after it starts")
