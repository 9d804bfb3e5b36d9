"""Tests for drag geometry."""

from __future__ import annotations

import pytest

from tableboard.domain.models import DragMode, SlotRange
from tableboard.services.placement import (
    create_drag_range,
    drag_range,
    duplicate_range,
    row_from_pointer,
)

TOTAL = 52


def _span(start: int, end: int) -> SlotRange:
    return SlotRange(start_slot=start, end_slot=end)


# ── create ─────────────────────────────────────────────────────────────


def test_create_drag_normalizes_direction():
    assert create_drag_range(10, 4, TOTAL) == _span(4, 10)
    assert create_drag_range(4, 10, TOTAL) == _span(4, 10)


def test_create_drag_has_minimum_length():
    assert create_drag_range(10, 10, TOTAL) == _span(10, 12)
    assert create_drag_range(10, 11, TOTAL) == _span(10, 12)


def test_create_drag_is_capped_at_grid_end():
    assert create_drag_range(40, 60, TOTAL) == _span(40, 52)


# ── move ───────────────────────────────────────────────────────────────


def test_move_keeps_length_and_grab_point():
    assert drag_range(DragMode.MOVE, _span(36, 42), 12, TOTAL, grab_offset_slots=2) == _span(10, 16)


@pytest.mark.parametrize("pointer, expected", [(-5, _span(0, 6)), (60, _span(46, 52))])
def test_move_is_clamped_to_grid(pointer, expected):
    assert drag_range(DragMode.MOVE, _span(36, 42), pointer, TOTAL) == expected


# ── resize ─────────────────────────────────────────────────────────────


def test_resize_left_moves_start_only():
    assert drag_range(DragMode.RESIZE_LEFT, _span(36, 42), 33, TOTAL) == _span(33, 42)


def test_resize_left_keeps_minimum_length():
    assert drag_range(DragMode.RESIZE_LEFT, _span(36, 42), 45, TOTAL) == _span(40, 42)
    assert drag_range(DragMode.RESIZE_LEFT, _span(36, 42), -3, TOTAL) == _span(0, 42)


def test_resize_right_moves_end_only():
    assert drag_range(DragMode.RESIZE_RIGHT, _span(36, 42), 46, TOTAL) == _span(36, 46)


def test_resize_right_keeps_minimum_length_and_grid_end():
    assert drag_range(DragMode.RESIZE_RIGHT, _span(36, 42), 30, TOTAL) == _span(36, 38)
    assert drag_range(DragMode.RESIZE_RIGHT, _span(36, 42), 70, TOTAL) == _span(36, 52)


# ── duplicate ──────────────────────────────────────────────────────────


def test_duplicate_lands_right_after_original():
    assert duplicate_range(_span(36, 42), TOTAL) == _span(42, 48)


def test_duplicate_may_end_exactly_at_grid_end():
    assert duplicate_range(_span(40, 46), TOTAL) == _span(46, 52)


def test_duplicate_past_grid_end_is_none():
    assert duplicate_range(_span(44, 50), TOTAL) is None


# ── rows ───────────────────────────────────────────────────────────────


def test_row_from_pointer():
    assert row_from_pointer(250, 100, 0, 60, 5) == 2
    assert row_from_pointer(250, 100, 120, 60, 5) == 4
    assert row_from_pointer(2000, 100, 0, 60, 5) == 4
    assert row_from_pointer(50, 100, 0, 60, 5) == 0


def test_row_from_pointer_with_no_rows():
    assert row_from_pointer(250, 100, 0, 60, 0) == 0
