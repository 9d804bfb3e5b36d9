"""Per-table occupancy: how full a table is, slot by slot."""

from __future__ import annotations

import math
from typing import Iterable

from tableboard.domain.models import (
    OccupancyBand,
    OccupancyLevel,
    Reservation,
    TimelineConfig,
)
from tableboard.services.timegrid import minutes_from_start

HIGH_RATIO = 0.8
MEDIUM_RATIO = 0.5


def slot_occupancy(
    reservations: Iterable[Reservation], config: TimelineConfig
) -> list[int]:
    """Seated guests per slot; a reservation covering part of a slot counts for it."""
    occupancy = [0] * config.total_slots
    for r in reservations:
        start = math.floor(minutes_from_start(r.start_time, config) / config.slot_minutes)
        end = math.ceil(minutes_from_start(r.end_time, config) / config.slot_minutes)
        for slot in range(max(0, start), min(end, config.total_slots)):
            occupancy[slot] += r.party_size
    return occupancy


def _level(ratio: float) -> OccupancyLevel | None:
    if ratio > HIGH_RATIO:
        return OccupancyLevel.HIGH
    if ratio > MEDIUM_RATIO:
        return OccupancyLevel.MEDIUM
    if ratio > 0:
        return OccupancyLevel.LOW
    return None


def occupancy_bands(occupancy: list[int], capacity: int) -> list[OccupancyBand]:
    """Collapse per-slot occupancy into contiguous runs of the same level."""
    bands: list[OccupancyBand] = []
    current: OccupancyBand | None = None
    for slot, seated in enumerate(occupancy):
        level = _level(seated / capacity) if capacity > 0 else None
        if level is not None and current is not None and current.level == level:
            current.end_slot = slot + 1
            continue
        if current is not None:
            bands.append(current)
            current = None
        if level is not None:
            current = OccupancyBand(start_slot=slot, end_slot=slot + 1, level=level)
    if current is not None:
        bands.append(current)
    return bands
