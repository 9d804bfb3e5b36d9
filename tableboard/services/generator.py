"""Service for generating synthetic, non-conflicting reservations."""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime

from tableboard.domain.models import (
    Candidate,
    Customer,
    ExistingBooking,
    Priority,
    Reservation,
    ReservationStatus,
    SeedData,
    ServiceWindow,
    Table,
    TimelineConfig,
)
from tableboard.services.conflicts import ConflictPolicy
from tableboard.services.service_windows import windows_from_service_hours
from tableboard.services.timegrid import timestamp_at_slot

logger = logging.getLogger(__name__)

FIRST_NAMES = ("Ana", "Juan", "Sofía", "Mateo", "Lucía", "Pedro", "Valen", "Nico", "Mili", "Tomi")
LAST_NAMES = ("Gómez", "Pérez", "Rodríguez", "Fernández", "López", "Martínez", "Díaz", "Sánchez")
SOURCES = ("web", "phone", "walkin", "app")

DURATION_MENU_MINUTES = (30, 45, 60, 75, 90, 105, 120)
MIN_DURATION_MINUTES = 30
ATTEMPTS_PER_RESERVATION = 10


def valid_start_slots(
    windows: list[ServiceWindow], total_slots: int, min_slots: int
) -> list[tuple[int, int]]:
    """Return ``(start_slot, room)`` for every slot that fits the shortest stay.

    ``room`` is the number of slots left before the end of the window the
    slot belongs to. With no windows the whole grid counts as one window.
    """
    spans = windows or [ServiceWindow(start_slot=0, end_slot=total_slots)]
    starts: list[tuple[int, int]] = []
    for window in spans:
        for slot in range(window.start_slot, window.end_slot):
            room = window.end_slot - slot
            if room >= min_slots:
                starts.append((slot, room))
    return starts


def generate_reservations(
    seed_data: SeedData,
    count: int,
    config: TimelineConfig,
    policy: ConflictPolicy | None = None,
    rng: random.Random | None = None,
) -> list[Reservation]:
    """Generate up to *count* reservations that the board would accept.

    Every candidate goes through *policy* (by default one built from the
    restaurant's service hours) against the seed reservations plus everything
    generated so far. The loop gives up after ``count * 10`` attempts, so the
    result may be shorter than requested; that is a normal outcome.
    """
    if count <= 0 or not seed_data.tables:
        return []

    rng = rng or random.Random()
    if policy is None:
        policy = ConflictPolicy(
            total_slots=config.total_slots,
            service_windows=windows_from_service_hours(
                seed_data.restaurant.service_hours, config
            ),
        )

    min_slots = math.ceil(MIN_DURATION_MINUTES / config.slot_minutes)
    starts = valid_start_slots(policy.service_windows, policy.total_slots, min_slots)
    if not starts:
        logger.warning("No valid start slots available for generated reservations")
        return []

    occupied: dict[str, list[ExistingBooking]] = {
        table.id: policy.existing_for_table(seed_data.reservations, table.id, config)
        for table in seed_data.tables
    }

    generated: list[Reservation] = []
    attempts = 0
    max_attempts = count * ATTEMPTS_PER_RESERVATION

    while len(generated) < count and attempts < max_attempts:
        attempts += 1

        table = rng.choice(seed_data.tables)
        start_slot, room = rng.choice(starts)
        slots = min(rng.choice(DURATION_MENU_MINUTES) // config.slot_minutes, room)
        if slots * config.slot_minutes < MIN_DURATION_MINUTES:
            continue

        candidate = Candidate(
            table_id=table.id,
            start_slot=start_slot,
            end_slot=start_slot + slots,
            party_size=rng.randint(table.capacity.min, table.capacity.max),
        )
        if policy.check(candidate, occupied[table.id], table.capacity.max).has_conflict:
            continue

        reservation = _synthesize(
            f"GEN_{len(generated) + 1:04d}", table, candidate, config, rng
        )
        generated.append(reservation)
        # a generated booking blocks later picks whatever its status
        occupied[table.id].append(
            ExistingBooking(
                id=reservation.id,
                table_id=table.id,
                start_slot=candidate.start_slot,
                end_slot=candidate.end_slot,
                party_size=candidate.party_size,
            )
        )

    if len(generated) < count:
        logger.warning(
            "Only generated %d of %d requested reservations due to constraints",
            len(generated),
            count,
        )
    logger.info(
        "Generated %d reservations in %d attempts", len(generated), attempts
    )
    return generated


def _synthesize(
    reservation_id: str,
    table: Table,
    candidate: Candidate,
    config: TimelineConfig,
    rng: random.Random,
) -> Reservation:
    now = datetime.now(config.zone)
    return Reservation(
        id=reservation_id,
        table_id=table.id,
        customer=Customer(
            name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
            phone=f"+54 9 11 {rng.randint(1000, 9999)}-{rng.randint(1000, 9999)}",
        ),
        party_size=candidate.party_size,
        start_time=timestamp_at_slot(config, candidate.start_slot),
        end_time=timestamp_at_slot(config, candidate.end_slot),
        duration_minutes=(candidate.end_slot - candidate.start_slot) * config.slot_minutes,
        status=rng.choice(list(ReservationStatus)),
        priority=rng.choice(list(Priority)),
        source=rng.choice(SOURCES),
        created_at=now,
        updated_at=now,
    )
