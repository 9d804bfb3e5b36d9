"""Domain event handlers: wired up at application startup."""

from __future__ import annotations

import logging

from tableboard.domain.bus import EventBus
from tableboard.domain.events import (
    PlacementRejected,
    ReservationCreated,
    ReservationDeleted,
    ReservationMoved,
    ReservationStatusChanged,
)
from tableboard.domain.models import ActivityEntry, ActivityType
from tableboard.repos.memory import ActivityRepository

logger = logging.getLogger(__name__)


class ActivityHandlers:
    """Records every board change in the activity log."""

    def __init__(self, bus: EventBus, activity_repo: ActivityRepository) -> None:
        self.bus = bus
        self.activity_repo = activity_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(ReservationCreated, self.on_reservation_created)
        self.bus.subscribe(ReservationMoved, self.on_reservation_moved)
        self.bus.subscribe(ReservationStatusChanged, self.on_status_changed)
        self.bus.subscribe(ReservationDeleted, self.on_reservation_deleted)
        self.bus.subscribe(PlacementRejected, self.on_placement_rejected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_reservation_created(self, event: ReservationCreated) -> None:
        logger.info(
            "Reservation %s created on table %s, slots %d-%d",
            event.reservation_id,
            event.table_id,
            event.slots.start_slot,
            event.slots.end_slot,
        )
        payload = {"table_id": event.table_id, "slots": event.slots.model_dump()}
        if event.duplicated_from:
            payload["duplicated_from"] = event.duplicated_from
        self.activity_repo.add(
            ActivityEntry(
                reservation_id=event.reservation_id,
                type=ActivityType.CREATED,
                payload=payload,
            )
        )

    def on_reservation_moved(self, event: ReservationMoved) -> None:
        logger.info(
            "Reservation %s moved from %s to %s, slots %d-%d",
            event.reservation_id,
            event.from_table_id,
            event.to_table_id,
            event.to_slots.start_slot,
            event.to_slots.end_slot,
        )
        self.activity_repo.add(
            ActivityEntry(
                reservation_id=event.reservation_id,
                type=ActivityType.MOVED,
                payload={
                    "from_table_id": event.from_table_id,
                    "to_table_id": event.to_table_id,
                    "from_slots": event.from_slots.model_dump(),
                    "to_slots": event.to_slots.model_dump(),
                },
            )
        )

    def on_status_changed(self, event: ReservationStatusChanged) -> None:
        logger.info(
            "Reservation %s status %s -> %s",
            event.reservation_id,
            event.previous,
            event.current,
        )
        self.activity_repo.add(
            ActivityEntry(
                reservation_id=event.reservation_id,
                type=ActivityType.STATUS_CHANGED,
                payload={"previous": event.previous, "current": event.current},
            )
        )

    def on_reservation_deleted(self, event: ReservationDeleted) -> None:
        logger.info("Reservation %s deleted from table %s", event.reservation_id, event.table_id)
        self.activity_repo.add(
            ActivityEntry(
                reservation_id=event.reservation_id,
                type=ActivityType.DELETED,
                payload={"table_id": event.table_id},
            )
        )

    def on_placement_rejected(self, event: PlacementRejected) -> None:
        logger.info(
            "Placement on table %s, slots %s-%s rejected: %s",
            event.table_id,
            event.slots.start_slot,
            event.slots.end_slot,
            event.check.reason,
        )
        # rejected drafts have no reservation to attach an entry to
        if event.reservation_id is None:
            return
        self.activity_repo.add(
            ActivityEntry(
                reservation_id=event.reservation_id,
                type=ActivityType.REJECTED,
                payload={
                    "table_id": event.table_id,
                    "slots": event.slots.model_dump(),
                    "reason": event.check.reason,
                    "conflicting_reservation_ids": event.check.conflicting_reservation_ids,
                },
            )
        )
