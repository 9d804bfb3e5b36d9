"""Drag geometry: turning pointer positions into candidate slot ranges.

These helpers only shape ranges. Whether a range is acceptable is decided
afterwards by the conflict policy.
"""

from __future__ import annotations

from tableboard.domain.models import DragMode, SlotRange
from tableboard.services.conflicts import clamp, normalize_range

MIN_RESERVATION_SLOTS = 2


def create_drag_range(
    anchor_slot: int,
    pointer_slot: int,
    total_slots: int,
    min_slots: int = MIN_RESERVATION_SLOTS,
) -> SlotRange:
    """Range swept while dragging out a new reservation on an empty row."""
    swept = normalize_range(anchor_slot, pointer_slot)
    end_slot = clamp(swept.end_slot, swept.start_slot + min_slots, total_slots)
    return SlotRange(start_slot=swept.start_slot, end_slot=end_slot)


def drag_range(
    mode: DragMode,
    origin: SlotRange,
    pointer_slot: int,
    total_slots: int,
    grab_offset_slots: int = 0,
    min_slots: int = MIN_RESERVATION_SLOTS,
) -> SlotRange:
    """Range of an existing reservation while it is moved or resized.

    A move keeps the length and slides the start so the grabbed point stays
    under the pointer. A resize moves one edge and keeps at least
    *min_slots* between the edges.
    """
    if mode == DragMode.MOVE:
        length = origin.length
        start = clamp(pointer_slot - grab_offset_slots, 0, total_slots - length)
        return SlotRange(start_slot=start, end_slot=start + length)
    if mode == DragMode.RESIZE_LEFT:
        start = clamp(pointer_slot, 0, origin.end_slot - min_slots)
        return SlotRange(start_slot=start, end_slot=origin.end_slot)
    end = clamp(pointer_slot, origin.start_slot + min_slots, total_slots)
    return SlotRange(start_slot=origin.start_slot, end_slot=end)


def duplicate_range(origin: SlotRange, total_slots: int) -> SlotRange | None:
    """Same-length range right after *origin*, or None if the grid ends first."""
    copy = SlotRange(start_slot=origin.end_slot, end_slot=origin.end_slot + origin.length)
    if copy.end_slot > total_slots:
        return None
    return copy


def row_from_pointer(
    client_y: float,
    body_top: float,
    scroll_top: float,
    row_height_px: float,
    row_count: int,
) -> int:
    y = (client_y - body_top) + scroll_top
    row = int(y // row_height_px) if row_height_px > 0 else 0
    return clamp(row, 0, max(0, row_count - 1))
