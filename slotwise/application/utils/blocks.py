from __future__ import annotations

from typing import Iterable

from slotwise.application.utils.time_utils import TimeInterval, overlaps
from slotwise.domain.entities.blocked_slot import BlockedSlot


def find_block(
    interval: TimeInterval,
    blocks: Iterable[BlockedSlot],
    resource_id: str | None = None,
) -> BlockedSlot | None:
    """
    First active block overlapping interval.
    resource_id=None only looks at business-wide blocks; otherwise also at blocks for that table.
    """
    for block in blocks:
        if not block.is_active:
            continue
        if block.resource_id is not None and block.resource_id != resource_id:
            continue
        if overlaps(interval.start, interval.end, block.start, block.end):
            return block
    return None
