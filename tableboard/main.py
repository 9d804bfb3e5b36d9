"""FastAPI application: entry point for the reservation board."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Query, Response

from tableboard.core.config import Settings, configure_logging
from tableboard.domain.bus import EventBus
from tableboard.domain.events import (
    PlacementRejected,
    ReservationCreated,
    ReservationDeleted,
    ReservationMoved,
    ReservationStatusChanged,
)
from tableboard.domain.handlers import ActivityHandlers
from tableboard.domain.models import (
    ActivityEntry,
    BoardConfigResponse,
    Candidate,
    ConflictCheck,
    ConflictReason,
    MoveRequest,
    OccupancyBand,
    PlacementRequest,
    Reservation,
    ReservationCreateRequest,
    ReservationStatus,
    SlotRange,
    StatusUpdateRequest,
    Table,
)
from tableboard.repos.memory import (
    ActivityRepository,
    BoardRepository,
    ReservationRepository,
    build_seed_data,
)
from tableboard.services.conflicts import ConflictPolicy
from tableboard.services.generator import generate_reservations
from tableboard.services.occupancy import occupancy_bands, slot_occupancy
from tableboard.services.placement import drag_range, duplicate_range
from tableboard.services.service_windows import windows_from_service_hours
from tableboard.services.timegrid import slot_range_of, timestamp_at_slot

logger = logging.getLogger(__name__)

settings = Settings()
configure_logging(settings.log_level)

app = FastAPI(title=settings.project_name)

# ── Singletons (created at import time for simplicity) ────────────────
timeline_config = settings.timeline_config()
seed = build_seed_data(timeline_config)

event_bus = EventBus()
board_repo = BoardRepository(seed.restaurant, seed.sectors, seed.tables)
reservation_repo = ReservationRepository()
activity_repo = ActivityRepository()

activity_handlers = ActivityHandlers(bus=event_bus, activity_repo=activity_repo)

conflict_policy = ConflictPolicy(
    total_slots=timeline_config.total_slots,
    service_windows=windows_from_service_hours(
        seed.restaurant.service_hours, timeline_config
    ),
    include_cancelled=settings.include_cancelled,
)

_REJECTION_MESSAGES = {
    ConflictReason.OVERLAP: "Overlaps an existing reservation on this table.",
    ConflictReason.CAPACITY_EXCEEDED: "Party size exceeds the table's capacity.",
    ConflictReason.OUTSIDE_SERVICE_HOURS: "Outside service hours.",
}


def load_seed_reservations() -> None:
    """Fill the store with the fixed seed plus generated reservations."""
    generated = generate_reservations(
        seed, settings.seed_reservation_count, timeline_config, conflict_policy
    )
    reservation_repo.add_many(seed.reservations)
    reservation_repo.add_many(generated)
    logger.info(
        "Board for %s loaded with %d reservations on %d tables",
        timeline_config.board_date,
        len(seed.reservations) + len(generated),
        len(seed.tables),
    )


load_seed_reservations()


# ── Helpers ───────────────────────────────────────────────────────────


def _get_reservation(reservation_id: str) -> Reservation:
    reservation = reservation_repo.get(reservation_id)
    if reservation is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation


def _get_table(table_id: str) -> Table:
    table = board_repo.get_table(table_id)
    if table is None:
        raise HTTPException(status_code=404, detail="Table not found")
    return table


def _evaluate(candidate: Candidate) -> ConflictCheck:
    """Run the policy against a fresh snapshot of the candidate's table.

    Previews and commits both come through here, so a clean preview
    promises a successful commit on the same store state.
    """
    table = _get_table(candidate.table_id)
    existing = conflict_policy.existing_for_table(
        reservation_repo.list_all(), table.id, timeline_config
    )
    return conflict_policy.check(candidate, existing, table.capacity.max)


def _reject(candidate: Candidate, check: ConflictCheck) -> HTTPException:
    event_bus.publish(
        PlacementRejected(
            reservation_id=candidate.id,
            table_id=candidate.table_id,
            slots=SlotRange(
                start_slot=candidate.start_slot, end_slot=candidate.end_slot
            ),
            check=check,
        )
    )
    return HTTPException(
        status_code=409,
        detail={
            "reason": check.reason,
            "conflicting_reservation_ids": check.conflicting_reservation_ids,
            "message": _REJECTION_MESSAGES[check.reason],
        },
    )


def _move_candidate(reservation: Reservation, body: MoveRequest) -> Candidate:
    origin = slot_range_of(reservation, timeline_config)
    span = drag_range(
        body.mode,
        origin,
        body.pointer_slot,
        timeline_config.total_slots,
        grab_offset_slots=body.grab_offset_slots,
    )
    return Candidate(
        id=reservation.id,
        table_id=body.table_id or reservation.table_id,
        start_slot=span.start_slot,
        end_slot=span.end_slot,
        party_size=reservation.party_size,
    )


def _candidate_span(candidate: Candidate) -> SlotRange:
    return SlotRange(start_slot=candidate.start_slot, end_slot=candidate.end_slot)


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/config", response_model=BoardConfigResponse)
def get_config() -> BoardConfigResponse:
    """Return the timeline grid and the service windows on it."""
    return BoardConfigResponse(
        config=timeline_config,
        total_slots=timeline_config.total_slots,
        service_windows=conflict_policy.service_windows,
    )


@app.get("/tables", response_model=list[Table])
def list_tables(sector: list[str] | None = Query(default=None)) -> list[Table]:
    """Return tables in display order, optionally for some sectors only."""
    return board_repo.list_tables(sector)


@app.get("/tables/{table_id}/occupancy", response_model=list[OccupancyBand])
def get_table_occupancy(table_id: str) -> list[OccupancyBand]:
    """Return low/medium/high occupancy bands across the day for one table."""
    table = _get_table(table_id)
    occupancy = slot_occupancy(reservation_repo.list_for_table(table.id), timeline_config)
    return occupancy_bands(occupancy, table.capacity.max)


@app.get("/reservations", response_model=list[Reservation])
def list_reservations(
    sector: list[str] | None = Query(default=None),
    status: list[ReservationStatus] | None = Query(default=None),
    search: str = "",
) -> list[Reservation]:
    """Return reservations passing the sector, status and search filters."""
    table_ids = {t.id for t in board_repo.list_tables(sector)} if sector else None
    return reservation_repo.list_visible(table_ids=table_ids, statuses=status, search=search)


@app.get("/reservations/{reservation_id}", response_model=Reservation)
def get_reservation(reservation_id: str) -> Reservation:
    return _get_reservation(reservation_id)


@app.get("/reservations/{reservation_id}/activity", response_model=list[ActivityEntry])
def get_reservation_activity(reservation_id: str) -> list[ActivityEntry]:
    """Return the activity log of a reservation, including deleted ones."""
    return activity_repo.list_for_reservation(reservation_id)


@app.post("/reservations/check", response_model=ConflictCheck)
def check_new_reservation(body: PlacementRequest) -> ConflictCheck:
    """Live feedback while a new reservation is being dragged out."""
    return _evaluate(
        Candidate(
            table_id=body.table_id,
            start_slot=body.start_slot,
            end_slot=body.end_slot,
            party_size=body.party_size,
        )
    )


@app.post("/reservations", response_model=Reservation, status_code=201)
def create_reservation(body: ReservationCreateRequest) -> Reservation:
    """Commit a new reservation; 409 when the placement is not allowed."""
    candidate = Candidate(
        table_id=body.table_id,
        start_slot=body.start_slot,
        end_slot=body.end_slot,
        party_size=body.party_size,
    )
    check = _evaluate(candidate)
    if check.has_conflict:
        raise _reject(candidate, check)

    reservation = Reservation(
        table_id=body.table_id,
        customer=body.customer,
        party_size=body.party_size,
        start_time=timestamp_at_slot(timeline_config, body.start_slot),
        end_time=timestamp_at_slot(timeline_config, body.end_slot),
        duration_minutes=(body.end_slot - body.start_slot) * timeline_config.slot_minutes,
        status=body.status,
        priority=body.priority,
        notes=body.notes,
        source=body.source,
    )
    reservation_repo.add(reservation)
    event_bus.publish(
        ReservationCreated(
            reservation_id=reservation.id,
            table_id=reservation.table_id,
            slots=_candidate_span(candidate),
        )
    )
    return reservation


@app.post("/reservations/{reservation_id}/move/check", response_model=ConflictCheck)
def check_move(reservation_id: str, body: MoveRequest) -> ConflictCheck:
    """Live feedback while a reservation is dragged or resized."""
    reservation = _get_reservation(reservation_id)
    return _evaluate(_move_candidate(reservation, body))


@app.post("/reservations/{reservation_id}/move", response_model=Reservation)
def move_reservation(reservation_id: str, body: MoveRequest) -> Reservation:
    """Commit a move or resize on pointer release; 409 when not allowed."""
    reservation = _get_reservation(reservation_id)
    candidate = _move_candidate(reservation, body)
    check = _evaluate(candidate)
    if check.has_conflict:
        raise _reject(candidate, check)

    origin_table_id = reservation.table_id
    origin = slot_range_of(reservation, timeline_config)
    span = _candidate_span(candidate)

    reservation.table_id = candidate.table_id
    reservation.start_time = timestamp_at_slot(timeline_config, span.start_slot)
    reservation.end_time = timestamp_at_slot(timeline_config, span.end_slot)
    reservation.duration_minutes = span.length * timeline_config.slot_minutes
    reservation.updated_at = datetime.now(timezone.utc)

    event_bus.publish(
        ReservationMoved(
            reservation_id=reservation.id,
            from_table_id=origin_table_id,
            to_table_id=reservation.table_id,
            from_slots=origin,
            to_slots=span,
        )
    )
    return reservation


@app.post(
    "/reservations/{reservation_id}/duplicate",
    response_model=Reservation,
    status_code=201,
)
def duplicate_reservation(reservation_id: str) -> Reservation:
    """Copy a reservation into the slots right after it on the same table."""
    original = _get_reservation(reservation_id)
    span = duplicate_range(
        slot_range_of(original, timeline_config), timeline_config.total_slots
    )
    if span is None:
        raise HTTPException(
            status_code=409,
            detail={
                "reason": None,
                "conflicting_reservation_ids": [],
                "message": "No room left on the board to duplicate this reservation.",
            },
        )

    candidate = Candidate(
        table_id=original.table_id,
        start_slot=span.start_slot,
        end_slot=span.end_slot,
        party_size=original.party_size,
    )
    check = _evaluate(candidate)
    if check.has_conflict:
        raise _reject(candidate, check)

    copy = Reservation(
        **original.model_dump(
            exclude={
                "id",
                "start_time",
                "end_time",
                "duration_minutes",
                "created_at",
                "updated_at",
            }
        ),
        start_time=timestamp_at_slot(timeline_config, span.start_slot),
        end_time=timestamp_at_slot(timeline_config, span.end_slot),
    )
    reservation_repo.add(copy)
    event_bus.publish(
        ReservationCreated(
            reservation_id=copy.id,
            table_id=copy.table_id,
            slots=span,
            duplicated_from=original.id,
        )
    )
    return copy


@app.patch("/reservations/{reservation_id}/status", response_model=Reservation)
def update_reservation_status(reservation_id: str, body: StatusUpdateRequest) -> Reservation:
    """Change a reservation's status; 409 when it would reclaim re-booked slots."""
    reservation = _get_reservation(reservation_id)
    previous = reservation.status
    reclaims_slots = (
        not conflict_policy.include_cancelled
        and previous == ReservationStatus.CANCELLED
        and body.status != ReservationStatus.CANCELLED
    )
    if reclaims_slots:
        span = slot_range_of(reservation, timeline_config)
        candidate = Candidate(
            id=reservation.id,
            table_id=reservation.table_id,
            start_slot=span.start_slot,
            end_slot=span.end_slot,
            party_size=reservation.party_size,
        )
        check = _evaluate(candidate)
        if check.has_conflict:
            raise _reject(candidate, check)

    reservation.status = body.status
    reservation.updated_at = datetime.now(timezone.utc)
    event_bus.publish(
        ReservationStatusChanged(
            reservation_id=reservation.id, previous=previous, current=body.status
        )
    )
    return reservation


@app.delete("/reservations/{reservation_id}", status_code=204)
def delete_reservation(reservation_id: str) -> Response:
    reservation = _get_reservation(reservation_id)
    reservation_repo.delete(reservation.id)
    event_bus.publish(
        ReservationDeleted(reservation_id=reservation.id, table_id=reservation.table_id)
    )
    return Response(status_code=204)
