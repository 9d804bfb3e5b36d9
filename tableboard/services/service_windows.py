"""Service-hour windows: where on the grid reservations are allowed."""

from __future__ import annotations

import math
from typing import Iterable, Protocol, Sequence

from tableboard.domain.models import ServiceHours, ServiceWindow, TimelineConfig


class SlotSpan(Protocol):
    """Anything with half-open start and end slots."""

    start_slot: float
    end_slot: float


def is_within_service_windows(
    candidate: SlotSpan, windows: Sequence[ServiceWindow]
) -> bool:
    """Return True if *candidate* lies entirely inside one window.

    Straddling a window edge is a violation, not a partial allowance. An empty
    window list places no restriction.
    """
    if not windows:
        return True
    return any(
        candidate.start_slot >= w.start_slot and candidate.end_slot <= w.end_slot
        for w in windows
    )


def _minutes_of_day(hhmm: str, closing: bool = False) -> int:
    hours, minutes = (int(part) for part in hhmm.split(":"))
    # a closing time of 00:xx belongs to the end of the day
    if closing and hours == 0:
        hours = 24
    return hours * 60 + minutes


def windows_from_service_hours(
    service_hours: Iterable[ServiceHours], config: TimelineConfig
) -> list[ServiceWindow]:
    """Convert ``HH:MM`` opening hours into slot windows on *config*'s grid.

    Partial slots at either edge are excluded, windows are clipped to the
    grid, and windows left empty by clipping are dropped.
    """
    origin = config.start_hour * 60
    windows: list[ServiceWindow] = []
    for hours in service_hours:
        start = _minutes_of_day(hours.start) - origin
        end = _minutes_of_day(hours.end, closing=True) - origin
        start_slot = max(0, math.ceil(start / config.slot_minutes))
        end_slot = min(config.total_slots, end // config.slot_minutes)
        if end_slot > start_slot:
            windows.append(ServiceWindow(start_slot=start_slot, end_slot=end_slot))
    return sorted(windows, key=lambda w: w.start_slot)
