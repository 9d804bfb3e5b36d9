"""Tests for the synthetic reservation generator."""

from __future__ import annotations

import logging
import random
from datetime import date

import pytest

from tableboard.domain.models import (
    Capacity,
    Restaurant,
    SeedData,
    ServiceHours,
    ServiceWindow,
    Table,
    TimelineConfig,
)
from tableboard.repos.memory import build_seed_data
from tableboard.services.conflicts import ConflictPolicy, ranges_overlap
from tableboard.services.generator import generate_reservations, valid_start_slots
from tableboard.services.service_windows import (
    is_within_service_windows,
    windows_from_service_hours,
)
from tableboard.services.timegrid import slot_range_of


@pytest.fixture()
def config() -> TimelineConfig:
    return TimelineConfig(board_date=date(2025, 10, 15), start_hour=11, end_hour=24)


@pytest.fixture()
def seed(config) -> SeedData:
    return build_seed_data(config)


def _single_table_seed(config, service_hours) -> SeedData:
    return SeedData(
        board_date=config.board_date,
        restaurant=Restaurant(
            id="R9", name="Tiny", timezone=config.timezone, service_hours=service_hours
        ),
        tables=[Table(id="T1", sector_id="S1", name="Table 1", capacity=Capacity(min=2, max=4))],
    )


def _fingerprint(reservations, config):
    return [
        (
            r.id,
            r.table_id,
            slot_range_of(r, config).start_slot,
            slot_range_of(r, config).end_slot,
            r.party_size,
            r.customer.name,
        )
        for r in reservations
    ]


# ---------------------------------------------------------------------------
# Generated batches are always acceptable
# ---------------------------------------------------------------------------


def test_generated_reservations_respect_every_rule(seed, config):
    windows = windows_from_service_hours(seed.restaurant.service_hours, config)
    generated = generate_reservations(seed, 20, config, rng=random.Random(7))
    assert generated

    tables = {t.id: t for t in seed.tables}
    everything = seed.reservations + generated
    for r in generated:
        span = slot_range_of(r, config)
        assert span.length * config.slot_minutes >= 30
        assert is_within_service_windows(span, windows)
        assert tables[r.table_id].capacity.min <= r.party_size <= tables[r.table_id].capacity.max

    for i, a in enumerate(everything):
        for b in everything[i + 1:]:
            if a.table_id == b.table_id:
                assert not ranges_overlap(slot_range_of(a, config), slot_range_of(b, config))


def test_ids_are_sequential(seed, config):
    generated = generate_reservations(seed, 3, config, rng=random.Random(1))
    assert [r.id for r in generated] == ["GEN_0001", "GEN_0002", "GEN_0003"][: len(generated)]


def test_generated_customers_look_local(seed, config):
    generated = generate_reservations(seed, 5, config, rng=random.Random(3))
    for r in generated:
        assert r.customer.phone.startswith("+54 9 11 ")
        assert len(r.customer.name.split(" ")) == 2
        assert r.duration_minutes == slot_range_of(r, config).length * config.slot_minutes


def test_same_rng_seed_gives_same_batch(seed, config):
    first = generate_reservations(seed, 10, config, rng=random.Random(42))
    second = generate_reservations(seed, 10, config, rng=random.Random(42))
    assert _fingerprint(first, config) == _fingerprint(second, config)


# ---------------------------------------------------------------------------
# Shortfall and degenerate input
# ---------------------------------------------------------------------------


def test_shortfall_is_reported_not_raised(config, caplog):
    """A 12:00 to 14:30 lunch on a single table fits at most five half-hour stays."""
    seed = _single_table_seed(config, [ServiceHours(start="12:00", end="14:30")])
    with caplog.at_level(logging.WARNING, logger="tableboard.services.generator"):
        generated = generate_reservations(seed, 1000, config, rng=random.Random(0))

    assert 0 < len(generated) <= 5
    assert "Only generated" in caplog.text
    spans = [slot_range_of(r, config) for r in generated]
    for span in spans:
        assert 4 <= span.start_slot and span.end_slot <= 14
    for i, a in enumerate(spans):
        for b in spans[i + 1:]:
            assert not ranges_overlap(a, b)


@pytest.mark.parametrize("count", [0, -3])
def test_non_positive_count_returns_empty(seed, config, count):
    assert generate_reservations(seed, count, config, rng=random.Random(0)) == []


def test_no_tables_returns_empty(config):
    seed = _single_table_seed(config, [])
    seed.tables = []
    assert generate_reservations(seed, 5, config, rng=random.Random(0)) == []


def test_without_service_hours_the_whole_grid_is_used(config):
    seed = _single_table_seed(config, [])
    generated = generate_reservations(seed, 8, config, rng=random.Random(11))
    assert generated
    for r in generated:
        span = slot_range_of(r, config)
        assert 0 <= span.start_slot and span.end_slot <= config.total_slots


def test_explicit_policy_is_honoured(seed, config):
    dinner_only = ConflictPolicy(
        total_slots=config.total_slots,
        service_windows=[ServiceWindow(start_slot=36, end_slot=52)],
    )
    generated = generate_reservations(seed, 6, config, policy=dinner_only, rng=random.Random(5))
    assert all(slot_range_of(r, config).start_slot >= 36 for r in generated)


# ---------------------------------------------------------------------------
# valid_start_slots
# ---------------------------------------------------------------------------


def test_valid_start_slots_leave_room_for_the_shortest_stay():
    starts = valid_start_slots([ServiceWindow(start_slot=4, end_slot=8)], 52, 2)
    assert starts == [(4, 4), (5, 3), (6, 2)]


def test_valid_start_slots_without_windows_cover_the_grid():
    starts = valid_start_slots([], 6, 2)
    assert [slot for slot, _ in starts] == [0, 1, 2, 3, 4]


def test_released_cancellations_still_block_within_a_batch(seed, config):
    policy = ConflictPolicy(
        total_slots=config.total_slots,
        service_windows=windows_from_service_hours(seed.restaurant.service_hours, config),
        include_cancelled=False,
    )
    generated = generate_reservations(seed, 200, config, policy=policy, rng=random.Random(1))
    assert generated

    for i, a in enumerate(generated):
        for b in generated[i + 1:]:
            if a.table_id == b.table_id:
                assert not ranges_overlap(slot_range_of(a, config), slot_range_of(b, config))
