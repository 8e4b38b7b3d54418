from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Resource:
    id: str
    business_id: str
    capacity: int
    label: str = ""  # table number shown to staff
    min_capacity: int = 1
    zone: str | None = None  # "salon", "terraza", ...
    priority: int = 0  # lower is more preferred
    auto_assignable: bool = True
    is_active: bool = True

    def fits(self, party_size: int) -> bool:
        return self.min_capacity <= party_size <= self.capacity


@dataclass(frozen=True)
class ResourceCombination:
    id: str
    business_id: str
    resource_ids: tuple[str, ...]
    total_capacity: int
    min_capacity: int = 1
    name: str = ""
    is_active: bool = True

    def fits(self, party_size: int) -> bool:
        return self.min_capacity <= party_size <= self.total_capacity
