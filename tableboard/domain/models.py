"""Domain models for the reservation board."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import StrEnum

from dateutil import tz
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ReservationStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SEATED = "SEATED"
    FINISHED = "FINISHED"
    NO_SHOW = "NO_SHOW"
    CANCELLED = "CANCELLED"


class Priority(StrEnum):
    STANDARD = "STANDARD"
    VIP = "VIP"
    LARGE_GROUP = "LARGE_GROUP"


class ConflictReason(StrEnum):
    OVERLAP = "overlap"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    OUTSIDE_SERVICE_HOURS = "outside_service_hours"


class DragMode(StrEnum):
    MOVE = "move"
    RESIZE_LEFT = "resize_left"
    RESIZE_RIGHT = "resize_right"


class OccupancyLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityType(StrEnum):
    CREATED = "created"
    MOVED = "moved"
    STATUS_CHANGED = "status_changed"
    DELETED = "deleted"
    REJECTED = "rejected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Timeline grid
# ---------------------------------------------------------------------------


class TimelineConfig(BaseModel):
    """Immutable description of the board's day window.

    ``end_hour`` may be 24 to mean midnight at the end of ``board_date``.
    """

    model_config = ConfigDict(frozen=True)

    board_date: date
    start_hour: int = Field(ge=0, le=23)
    end_hour: int = Field(ge=1, le=24)
    slot_minutes: int = Field(default=15, gt=0)
    timezone: str = "America/Argentina/Buenos_Aires"
    cell_width_px: float = Field(default=60, gt=0)
    row_height_px: float = Field(default=60, gt=0)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if tz.gettz(value) is None:
            raise ValueError(f"unknown timezone: {value}")
        return value

    @model_validator(mode="after")
    def _window_fits_grid(self) -> TimelineConfig:
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be after start_hour")
        if self.total_minutes % self.slot_minutes:
            raise ValueError("window length must be a whole number of slots")
        return self

    @property
    def total_minutes(self) -> int:
        return (self.end_hour - self.start_hour) * 60

    @property
    def total_slots(self) -> int:
        return self.total_minutes // self.slot_minutes

    @property
    def zone(self):
        return tz.gettz(self.timezone)


class SlotRange(BaseModel):
    """Half-open ``[start_slot, end_slot)`` interval over slot indices."""

    start_slot: int
    end_slot: int

    @property
    def length(self) -> int:
        return self.end_slot - self.start_slot


class ServiceWindow(BaseModel):
    start_slot: int
    end_slot: int

    @model_validator(mode="after")
    def _end_after_start(self) -> ServiceWindow:
        if self.end_slot <= self.start_slot:
            raise ValueError("end_slot must be after start_slot")
        return self


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


class ServiceHours(BaseModel):
    """Opening interval as wall-clock ``HH:MM``; an ``end`` of ``00:00`` is midnight."""

    start: str = Field(pattern=r"^\d{2}:\d{2}$")
    end: str = Field(pattern=r"^\d{2}:\d{2}$")


class Restaurant(BaseModel):
    id: str
    name: str
    timezone: str
    service_hours: list[ServiceHours] = Field(default_factory=list)


class Sector(BaseModel):
    id: str
    name: str
    color: str
    sort_order: int = 0


class Capacity(BaseModel):
    min: int = Field(ge=1)
    max: int = Field(ge=1)

    @model_validator(mode="after")
    def _min_not_above_max(self) -> Capacity:
        if self.min > self.max:
            raise ValueError("capacity min must not exceed max")
        return self


class Table(BaseModel):
    id: str
    sector_id: str
    name: str
    capacity: Capacity
    sort_order: int = 0


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------


class Customer(BaseModel):
    name: str
    phone: str
    email: str | None = None
    notes: str | None = None


class Reservation(BaseModel):
    id: str = Field(default_factory=_new_id)
    table_id: str
    customer: Customer
    party_size: int = Field(gt=0)
    start_time: datetime
    end_time: datetime
    duration_minutes: int | None = None
    status: ReservationStatus = ReservationStatus.CONFIRMED
    priority: Priority = Priority.STANDARD
    notes: str | None = None
    source: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _end_after_start(self) -> Reservation:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.duration_minutes is None:
            self.duration_minutes = int(
                (self.end_time - self.start_time).total_seconds() // 60
            )
        return self


class Candidate(BaseModel):
    """A proposed placement, not yet committed.

    Slots are left as plain numbers so that non-finite or fractional values
    coming from pointer math reach the checker instead of failing here.
    """

    id: str | None = None
    table_id: str
    start_slot: int | float
    end_slot: int | float
    party_size: int


class ExistingBooking(BaseModel):
    """A stored reservation projected onto the slot grid."""

    id: str
    table_id: str
    start_slot: int
    end_slot: int
    party_size: int


class ConflictCheck(BaseModel):
    has_conflict: bool
    conflicting_reservation_ids: list[str] = Field(default_factory=list)
    reason: ConflictReason | None = None


class OccupancyBand(BaseModel):
    start_slot: int
    end_slot: int
    level: OccupancyLevel


class SeedData(BaseModel):
    board_date: date
    restaurant: Restaurant
    sectors: list[Sector] = Field(default_factory=list)
    tables: list[Table] = Field(default_factory=list)
    reservations: list[Reservation] = Field(default_factory=list)


class ActivityEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    reservation_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: ActivityType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class PlacementRequest(BaseModel):
    table_id: str
    start_slot: int
    end_slot: int
    party_size: int = Field(default=2, gt=0)


class ReservationCreateRequest(PlacementRequest):
    customer: Customer
    status: ReservationStatus = ReservationStatus.CONFIRMED
    priority: Priority = Priority.STANDARD
    notes: str | None = None
    source: str | None = None


class MoveRequest(BaseModel):
    """Pointer-driven move or edge resize of an existing reservation.

    ``pointer_slot`` is the snapped slot under the pointer. For a move it is
    offset by ``grab_offset_slots`` to find the new start; for a resize it is
    the new position of the dragged edge. ``table_id`` defaults to the
    reservation's current table.
    """

    mode: DragMode = DragMode.MOVE
    pointer_slot: int
    grab_offset_slots: int = 0
    table_id: str | None = None


class StatusUpdateRequest(BaseModel):
    status: ReservationStatus


class BoardConfigResponse(BaseModel):
    config: TimelineConfig
    total_slots: int
    service_windows: list[ServiceWindow]
