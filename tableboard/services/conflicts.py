"""Service for deciding whether a candidate placement may occupy a table."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from tableboard.domain.models import (
    Candidate,
    ConflictCheck,
    ConflictReason,
    ExistingBooking,
    Reservation,
    ReservationStatus,
    ServiceWindow,
    SlotRange,
    TimelineConfig,
)
from tableboard.services.service_windows import SlotSpan, is_within_service_windows
from tableboard.services.timegrid import clamp, slot_range_of

__all__ = [
    "ConflictPolicy",
    "check_conflict",
    "clamp",
    "normalize_range",
    "ranges_overlap",
]


def normalize_range(a: int, b: int) -> SlotRange:
    """Order two unordered pointer slots into a range (no other repair)."""
    return SlotRange(start_slot=min(a, b), end_slot=max(a, b))


def ranges_overlap(a: SlotSpan, b: SlotSpan) -> bool:
    """Half-open overlap: touching ends (a.end == b.start) do NOT overlap."""
    return a.start_slot < b.end_slot and b.start_slot < a.end_slot


def _is_well_formed(candidate: Candidate, total_slots: int) -> bool:
    start, end = candidate.start_slot, candidate.end_slot
    return (
        math.isfinite(start)
        and math.isfinite(end)
        and start >= 0
        and end <= total_slots
        and start < end
    )


def check_conflict(
    candidate: Candidate,
    existing_same_table: Sequence[ExistingBooking],
    table_capacity_max: int,
    total_slots: int,
    service_windows: Sequence[ServiceWindow] | None = None,
) -> ConflictCheck:
    """Return the first rule *candidate* breaks, or a clean result.

    Rules, first failure wins:

    1. the range is finite, inside ``[0, total_slots]`` and not empty;
    2. the range sits inside one service window (skipped when none given);
    3. ``party_size`` does not exceed ``table_capacity_max``;
    4. the range overlaps no other booking on the table.

    Malformed ranges are reported as ``outside_service_hours``. Only the
    overlap rule fills ``conflicting_reservation_ids``, and it lists every
    colliding booking. A booking with the candidate's own id is skipped, so
    a reservation being moved never collides with itself.
    """
    if not _is_well_formed(candidate, total_slots):
        return ConflictCheck(
            has_conflict=True, reason=ConflictReason.OUTSIDE_SERVICE_HOURS
        )

    if service_windows and not is_within_service_windows(candidate, service_windows):
        return ConflictCheck(
            has_conflict=True, reason=ConflictReason.OUTSIDE_SERVICE_HOURS
        )

    if candidate.party_size > table_capacity_max:
        return ConflictCheck(has_conflict=True, reason=ConflictReason.CAPACITY_EXCEEDED)

    colliding = [
        booking.id
        for booking in existing_same_table
        if not (candidate.id and booking.id == candidate.id)
        and ranges_overlap(candidate, booking)
    ]
    if colliding:
        return ConflictCheck(
            has_conflict=True,
            conflicting_reservation_ids=colliding,
            reason=ConflictReason.OVERLAP,
        )

    return ConflictCheck(has_conflict=False)


class ConflictPolicy:
    """The one rule set shared by live drag previews, commits and the generator.

    ``include_cancelled`` decides whether cancelled reservations still block
    their slots. ``check_conflict`` itself never looks at status; the policy
    filters them out of the snapshot before the check when asked to.
    """

    def __init__(
        self,
        total_slots: int,
        service_windows: Sequence[ServiceWindow] = (),
        include_cancelled: bool = True,
    ) -> None:
        self.total_slots = total_slots
        self.service_windows = list(service_windows)
        self.include_cancelled = include_cancelled

    def existing_for_table(
        self,
        reservations: Iterable[Reservation],
        table_id: str,
        config: TimelineConfig,
        exclude_id: str | None = None,
    ) -> list[ExistingBooking]:
        """Snapshot the reservations on *table_id* in slot coordinates."""
        snapshot: list[ExistingBooking] = []
        for r in reservations:
            if r.table_id != table_id or r.id == exclude_id:
                continue
            if not self.include_cancelled and r.status == ReservationStatus.CANCELLED:
                continue
            span = slot_range_of(r, config)
            snapshot.append(
                ExistingBooking(
                    id=r.id,
                    table_id=r.table_id,
                    start_slot=span.start_slot,
                    end_slot=span.end_slot,
                    party_size=r.party_size,
                )
            )
        return snapshot

    def check(
        self,
        candidate: Candidate,
        existing_same_table: Sequence[ExistingBooking],
        table_capacity_max: int,
    ) -> ConflictCheck:
        return check_conflict(
            candidate,
            existing_same_table,
            table_capacity_max,
            self.total_slots,
            self.service_windows,
        )
