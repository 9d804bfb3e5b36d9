"""Domain events emitted when the board changes."""

from __future__ import annotations

from pydantic import BaseModel

from tableboard.domain.models import ConflictCheck, ReservationStatus, SlotRange


class ReservationCreated(BaseModel):
    """Fired after a new reservation is committed to the store."""

    reservation_id: str
    table_id: str
    slots: SlotRange
    duplicated_from: str | None = None


class ReservationMoved(BaseModel):
    """Fired after a move or resize is committed."""

    reservation_id: str
    from_table_id: str
    to_table_id: str
    from_slots: SlotRange
    to_slots: SlotRange


class ReservationStatusChanged(BaseModel):
    reservation_id: str
    previous: ReservationStatus
    current: ReservationStatus


class ReservationDeleted(BaseModel):
    reservation_id: str
    table_id: str


class PlacementRejected(BaseModel):
    """Fired when a commit is refused; *reservation_id* is None for new drafts."""

    reservation_id: str | None
    table_id: str
    slots: SlotRange
    check: ConflictCheck
