from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Shift:
    key: str
    label: str
    start: str  # HH:MM
    end: str  # HH:MM, exclusive
    duration_minutes: int = 90
    enabled: bool = True


@dataclass(frozen=True)
class ResourcePriorityConfig:
    fill_order: tuple[str, ...] = ("salon", "terraza")
    table_size_order: tuple[int, ...] = (2, 4, 6, 8)


@dataclass(frozen=True)
class Business:
    id: str
    timezone: str
    name: str = ""
    max_capacity: int | None = None  # per-slot concurrency, None means 1
    business_type: str = "services"  # "restaurant" assigns tables
    locale: str = "es"
    resource_priority: ResourcePriorityConfig = field(default_factory=ResourcePriorityConfig)
    shifts: tuple[Shift, ...] = ()
    slug: str | None = None
    phone: str | None = None
    is_active: bool = True

    @property
    def slot_capacity(self) -> int:
        return 1 if self.max_capacity is None else self.max_capacity

    @property
    def uses_tables(self) -> bool:
        return self.business_type == "restaurant"
