"""Tests for per-table occupancy bands."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from tableboard.domain.models import (
    Customer,
    OccupancyBand,
    OccupancyLevel,
    Reservation,
    TimelineConfig,
)
from tableboard.services.occupancy import occupancy_bands, slot_occupancy

BUENOS_AIRES = timezone(timedelta(hours=-3))
CONFIG = TimelineConfig(board_date=date(2025, 10, 15), start_hour=11, end_hour=24)


def _reservation(start: tuple[int, int], end: tuple[int, int], party_size: int) -> Reservation:
    return Reservation(
        table_id="T5",
        customer=Customer(name="Lucía Díaz", phone="+54 9 11 4321-8765"),
        party_size=party_size,
        start_time=datetime(2025, 10, 15, *start, tzinfo=BUENOS_AIRES),
        end_time=datetime(2025, 10, 15, *end, tzinfo=BUENOS_AIRES),
    )


def test_empty_table_has_zero_occupancy():
    assert slot_occupancy([], CONFIG) == [0] * 52


def test_occupancy_sums_party_sizes():
    occupancy = slot_occupancy(
        [_reservation((20, 0), (21, 0), 4), _reservation((20, 30), (21, 30), 3)], CONFIG
    )
    assert occupancy[36:42] == [4, 4, 7, 7, 3, 3]
    assert occupancy[35] == 0 and occupancy[42] == 0


def test_partially_covered_slots_count():
    occupancy = slot_occupancy([_reservation((12, 10), (12, 40), 2)], CONFIG)
    assert occupancy[4:7] == [2, 2, 2]
    assert occupancy[3] == 0 and occupancy[7] == 0


def test_reservations_outside_the_grid_are_clipped():
    occupancy = slot_occupancy([_reservation((10, 0), (11, 30), 2)], CONFIG)
    assert occupancy[:3] == [2, 2, 0]
    assert len(occupancy) == 52


def test_bands_merge_runs_of_the_same_level():
    occupancy = [0, 2, 2, 5, 5, 7, 8, 0]
    assert occupancy_bands(occupancy, 8) == [
        OccupancyBand(start_slot=1, end_slot=3, level=OccupancyLevel.LOW),
        OccupancyBand(start_slot=3, end_slot=5, level=OccupancyLevel.MEDIUM),
        OccupancyBand(start_slot=5, end_slot=7, level=OccupancyLevel.HIGH),
    ]


def test_level_thresholds_are_strict():
    # exactly half and exactly 0.8 stay in the lower band
    assert occupancy_bands([4], 8)[0].level == OccupancyLevel.LOW
    assert occupancy_bands([5], 8)[0].level == OccupancyLevel.MEDIUM
    assert occupancy_bands([8], 10)[0].level == OccupancyLevel.MEDIUM
    assert occupancy_bands([9], 10)[0].level == OccupancyLevel.HIGH


def test_zero_capacity_gives_no_bands():
    assert occupancy_bands([3, 3], 0) == []
