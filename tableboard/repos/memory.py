"""In-memory repositories for the board's reference data, reservations and activity."""

from __future__ import annotations

from datetime import datetime, time
from typing import Iterable

from tableboard.domain.models import (
    ActivityEntry,
    Capacity,
    Customer,
    Priority,
    Reservation,
    ReservationStatus,
    Restaurant,
    Sector,
    SeedData,
    ServiceHours,
    Table,
    TimelineConfig,
)


class ReservationRepository:
    """Dict-backed store for Reservation instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Reservation] = {}

    def add(self, reservation: Reservation) -> None:
        """Insert or replace a reservation."""
        self._store[reservation.id] = reservation

    def add_many(self, reservations: Iterable[Reservation]) -> None:
        for reservation in reservations:
            self.add(reservation)

    def get(self, reservation_id: str) -> Reservation | None:
        return self._store.get(reservation_id)

    def list_all(self) -> list[Reservation]:
        return list(self._store.values())

    def list_for_table(self, table_id: str) -> list[Reservation]:
        """Return the reservations on one table, earliest first."""
        return sorted(
            [r for r in self._store.values() if r.table_id == table_id],
            key=lambda r: r.start_time,
        )

    def list_visible(
        self,
        table_ids: set[str] | None = None,
        statuses: Iterable[ReservationStatus] | None = None,
        search: str = "",
    ) -> list[Reservation]:
        """Apply the board filters.

        *table_ids* of None means every table; an empty status filter means
        every status. *search* matches case-insensitively against customer
        name or phone.
        """
        result = self.list_all()
        if table_ids is not None:
            result = [r for r in result if r.table_id in table_ids]
        wanted = set(statuses or ())
        if wanted:
            result = [r for r in result if r.status in wanted]
        needle = search.strip().lower()
        if needle:
            result = [
                r
                for r in result
                if needle in r.customer.name.lower() or needle in r.customer.phone.lower()
            ]
        return result

    def delete(self, reservation_id: str) -> None:
        self._store.pop(reservation_id, None)


class BoardRepository:
    """Static reference data: the restaurant, its sectors and its tables."""

    def __init__(
        self, restaurant: Restaurant, sectors: list[Sector], tables: list[Table]
    ) -> None:
        self.restaurant = restaurant
        self._sectors = list(sectors)
        self._tables = {t.id: t for t in tables}

    def list_sectors(self) -> list[Sector]:
        return sorted(self._sectors, key=lambda s: s.sort_order)

    def list_tables(self, sector_ids: Iterable[str] | None = None) -> list[Table]:
        """Tables in display order, optionally limited to some sectors."""
        sector_order = {s.id: s.sort_order for s in self._sectors}
        tables = sorted(
            self._tables.values(),
            key=lambda t: (sector_order.get(t.sector_id, 0), t.sort_order),
        )
        wanted = set(sector_ids or ())
        if wanted:
            tables = [t for t in tables if t.sector_id in wanted]
        return tables

    def get_table(self, table_id: str) -> Table | None:
        return self._tables.get(table_id)


class ActivityRepository:
    """List-backed store for ActivityEntry instances."""

    def __init__(self) -> None:
        self._entries: list[ActivityEntry] = []

    def add(self, entry: ActivityEntry) -> None:
        self._entries.append(entry)

    def list_for_reservation(self, reservation_id: str) -> list[ActivityEntry]:
        return sorted(
            [e for e in self._entries if e.reservation_id == reservation_id],
            key=lambda e: e.timestamp,
        )


# ---------------------------------------------------------------------------
# Seed data – one restaurant with a lunch and a dinner service
# ---------------------------------------------------------------------------


def _at(config: TimelineConfig, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(config.board_date, time(hour, minute), tzinfo=config.zone)


def _seed_reservations(config: TimelineConfig) -> list[Reservation]:
    created = _at(config, config.start_hour)
    return [
        Reservation(
            id="RES_001",
            table_id="T1",
            customer=Customer(
                name="John Doe", phone="+54 9 11 5555-1234", email="john@example.com"
            ),
            party_size=2,
            start_time=_at(config, 20),
            end_time=_at(config, 21, 30),
            status=ReservationStatus.CONFIRMED,
            priority=Priority.STANDARD,
            source="web",
            created_at=created,
            updated_at=created,
        ),
        Reservation(
            id="RES_002",
            table_id="T3",
            customer=Customer(
                name="Jane Smith", phone="+54 9 11 5555-5678", email="jane@example.com"
            ),
            party_size=6,
            start_time=_at(config, 20, 30),
            end_time=_at(config, 22),
            status=ReservationStatus.SEATED,
            priority=Priority.VIP,
            notes="Birthday celebration",
            source="phone",
            created_at=created,
            updated_at=created,
        ),
    ]


def build_seed_data(config: TimelineConfig) -> SeedData:
    """Return the built-in restaurant, laid out on *config*'s date."""
    return SeedData(
        board_date=config.board_date,
        restaurant=Restaurant(
            id="R1",
            name="Bistro Central",
            timezone=config.timezone,
            service_hours=[
                ServiceHours(start="12:00", end="16:00"),
                ServiceHours(start="20:00", end="00:00"),
            ],
        ),
        sectors=[
            Sector(id="S1", name="Main Hall", color="#3B82F6", sort_order=0),
            Sector(id="S2", name="Terrace", color="#10B981", sort_order=1),
        ],
        tables=[
            Table(id="T1", sector_id="S1", name="Table 1", capacity=Capacity(min=2, max=2), sort_order=0),
            Table(id="T2", sector_id="S1", name="Table 2", capacity=Capacity(min=2, max=4), sort_order=1),
            Table(id="T3", sector_id="S1", name="Table 3", capacity=Capacity(min=4, max=6), sort_order=2),
            Table(id="T4", sector_id="S2", name="Table 4", capacity=Capacity(min=2, max=4), sort_order=0),
            Table(id="T5", sector_id="S2", name="Table 5", capacity=Capacity(min=4, max=8), sort_order=1),
        ],
        reservations=_seed_reservations(config),
    )
