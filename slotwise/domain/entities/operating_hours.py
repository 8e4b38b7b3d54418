from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class OperatingHoursRule:
    business_id: str
    day_of_week: int | None = None  # 0=Sunday .. 6=Saturday
    specific_date: date | None = None  # overrides day_of_week rules
    open_time: str | None = None  # "HH:MM" or "HH:MM:SS"
    close_time: str | None = None
    is_closed: bool = False
    priority: int = 0

    def __post_init__(self) -> None:
        if self.day_of_week is None and self.specific_date is None:
            raise ValueError("Rule needs a day_of_week or a specific_date")
        if self.day_of_week is not None and not 0 <= self.day_of_week <= 6:
            raise ValueError(f"day_of_week out of range: {self.day_of_week}")
        if not self.is_closed and self.open_time and self.close_time:
            if self.open_time[:5] >= self.close_time[:5]:
                raise ValueError(f"open_time {self.open_time} must be before close_time {self.close_time}")

    @property
    def is_override(self) -> bool:
        return self.specific_date is not None
