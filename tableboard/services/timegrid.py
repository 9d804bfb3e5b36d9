"""Mapping between wall-clock time, slot indices and pixels on the board grid.

Every function takes the ``TimelineConfig`` it works against; nothing here
keeps state. Slot arithmetic is done on the wall clock of the configured
zone, so a reservation drawn from 20:00 to 21:30 always spans six slots even
on a day whose UTC offset changes.
"""

from __future__ import annotations

import math
from datetime import datetime, time, timedelta

from dateutil import tz

from tableboard.domain.models import Reservation, SlotRange, TimelineConfig

_MINUTE = timedelta(minutes=1)
# two days inside datetime's range; zone offsets must not push past it
_EARLIEST = datetime.min + timedelta(days=2)
_LATEST = datetime.max - timedelta(days=2)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def snap(value: float) -> int:
    """Round to the nearest integer, halves going up.

    Drag gestures and stored timestamps share this convention so that a
    pointer and a reservation edge land on the same slot.
    """
    return math.floor(value + 0.5)


# ---------------------------------------------------------------------------
# Time <-> slots
# ---------------------------------------------------------------------------


def day_start(config: TimelineConfig) -> datetime:
    """Return the aware instant corresponding to slot 0."""
    return datetime.combine(
        config.board_date, time(hour=config.start_hour), tzinfo=config.zone
    )


def total_minutes(config: TimelineConfig) -> int:
    return config.total_minutes


def total_slots(config: TimelineConfig) -> int:
    return config.total_slots


def minutes_from_start(timestamp: datetime, config: TimelineConfig) -> int:
    """Signed whole minutes between ``day_start`` and *timestamp*.

    Naive timestamps are read as local time in the configured zone. The
    result is not clamped: it is negative before the window and larger than
    ``total_minutes`` after it.
    """
    if timestamp.tzinfo is None:
        local = timestamp
    else:
        local = timestamp.astimezone(config.zone).replace(tzinfo=None)
    origin = day_start(config).replace(tzinfo=None)
    return int((local - origin).total_seconds() / 60)


def slot_from_minutes(minutes: float, slot_minutes: int) -> int:
    return snap(minutes / slot_minutes)


def slot_to_minutes(slot: int, slot_minutes: int) -> int:
    return slot * slot_minutes


def timestamp_at_slot(config: TimelineConfig, slot: int) -> datetime:
    """Return the aware instant at the left edge of *slot*.

    Slots past midnight fall on the next calendar day. The UTC offset comes
    from the zone rules for that date; a wall time skipped by a DST jump is
    moved forward to the first existing instant. Slots too far out
    for ``datetime`` are pinned to the earliest or latest representable day.
    """
    midnight = datetime.combine(config.board_date, time())
    minutes = clamp(
        config.start_hour * 60 + slot * config.slot_minutes,
        (_EARLIEST - midnight) // _MINUTE,
        (_LATEST - midnight) // _MINUTE,
    )
    wall = midnight + timedelta(minutes=minutes)
    return tz.resolve_imaginary(wall.replace(tzinfo=config.zone))


def clock_label_at_slot(config: TimelineConfig, slot: int) -> str:
    """``HH:MM`` label for *slot*, wrapped to a 24 hour clock."""
    minutes = config.start_hour * 60 + slot * config.slot_minutes
    return f"{(minutes // 60) % 24:02d}:{minutes % 60:02d}"


def slot_range_of(reservation: Reservation, config: TimelineConfig) -> SlotRange:
    """Project a stored reservation onto the grid (nearest slot edges)."""
    return SlotRange(
        start_slot=slot_from_minutes(
            minutes_from_start(reservation.start_time, config), config.slot_minutes
        ),
        end_slot=slot_from_minutes(
            minutes_from_start(reservation.end_time, config), config.slot_minutes
        ),
    )


# ---------------------------------------------------------------------------
# Slots <-> pixels
# ---------------------------------------------------------------------------


def _slot_width(config: TimelineConfig, zoom: float) -> float:
    return config.cell_width_px * zoom


def slot_to_px(slot: float, config: TimelineConfig, zoom: float = 1.0) -> float:
    return slot * _slot_width(config, zoom)


def minutes_to_px(minutes: float, config: TimelineConfig, zoom: float = 1.0) -> float:
    return minutes / config.slot_minutes * _slot_width(config, zoom)


def px_to_slot(px: float, config: TimelineConfig, zoom: float = 1.0) -> int:
    width = _slot_width(config, zoom)
    if width <= 0:
        return 0
    return snap(px / width)


def px_to_snapped_minutes(px: float, config: TimelineConfig, zoom: float = 1.0) -> int:
    return px_to_slot(px, config, zoom) * config.slot_minutes


def slot_from_pointer(
    client_x: float,
    grid_left: float,
    scroll_left: float,
    zoom: float,
    config: TimelineConfig,
) -> int:
    """Slot under a pointer, clamped to the grid edges ``[0, total_slots]``."""
    x = (client_x - grid_left) + scroll_left
    return clamp(px_to_slot(x, config, zoom), 0, config.total_slots)
