"""
In-memory booking store for tests and local experiments.

Each space gets its own asyncio.Lock, which plays the role of the row lock
taken by the SQL store. Every read and write yields to the event loop once,
the way a database round-trip would, so concurrent callers really do
interleave and a missing lock shows up as a double booking.
"""

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import AsyncIterator, Iterable, Optional

from space_reservations.booking import entities
from space_reservations.booking.errors import OverlapConstraintError
from space_reservations.booking.ports import ReservationStore
from space_reservations.booking.time_range import TimeRange


class InMemoryReservationStore(ReservationStore):
    def __init__(
        self,
        spaces: Iterable[entities.Space] = (),
        reservations: Iterable[entities.Reservation] = (),
        *,
        enforce_overlap: bool = False,
    ):
        self.spaces: dict[int, entities.Space] = {space.id: space for space in spaces}
        self.reservations: dict[int, entities.Reservation] = {}
        self.enforce_overlap = enforce_overlap
        self.queries: list[str] = []
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._next_id = 1
        for reservation in reservations:
            self._store(reservation)

    @asynccontextmanager
    async def locked_space(self, space_id: int) -> AsyncIterator[None]:
        async with self._locks[space_id]:
            yield

    async def find_space(self, space_id: int) -> Optional[entities.Space]:
        await self._round_trip("find_space")
        return self.spaces.get(space_id)

    async def count_any(self, space_id: int) -> int:
        await self._round_trip("count_any")
        return sum(1 for r in self.reservations.values() if r.space_id == space_id)

    async def delete_space(self, space_id: int) -> None:
        await self._round_trip("delete_space")
        self.spaces.pop(space_id, None)

    async def find_reservation(self, reservation_id: int) -> Optional[entities.Reservation]:
        await self._round_trip("find_reservation")
        return self.reservations.get(reservation_id)

    async def find_overlapping(
        self,
        space_id: int,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> list[entities.Reservation]:
        await self._round_trip("find_overlapping")
        wanted = TimeRange(start, end)
        return sorted(
            (
                r for r in self.reservations.values()
                if r.space_id == space_id and r.id != exclude_id and r.time_range.overlaps(wanted)
            ),
            key=lambda r: r.start_time,
        )

    async def count_in_date_range(
        self,
        user_email: str,
        week_start: date,
        week_end: date,
        exclude_id: Optional[int] = None,
    ) -> int:
        await self._round_trip("count_in_date_range")
        return sum(
            1 for r in self.reservations.values()
            if r.user_email == user_email
            and week_start <= r.reservation_date <= week_end
            and r.id != exclude_id
        )

    async def insert(self, reservation: entities.Reservation) -> entities.Reservation:
        await self._round_trip("insert")
        self._check_overlap(reservation)
        return self._store(reservation)

    async def update(self, reservation_id: int, fields: dict) -> entities.Reservation:
        await self._round_trip("update")
        current = self.reservations.get(reservation_id)
        if current is None:
            raise LookupError(f"Reservation {reservation_id} does not exist")
        updated = replace(current, updated_at=datetime.now(timezone.utc), **fields)
        self._check_overlap(updated)
        self.reservations[reservation_id] = updated
        return updated

    async def delete(self, reservation_id: int) -> None:
        await self._round_trip("delete")
        self.reservations.pop(reservation_id, None)

    def _store(self, reservation: entities.Reservation) -> entities.Reservation:
        reservation_id = reservation.id if reservation.id is not None else self._next_id
        self._next_id = max(self._next_id, reservation_id) + 1
        stored = replace(
            reservation,
            id=reservation_id,
            created_at=reservation.created_at or datetime.now(timezone.utc),
        )
        self.reservations[reservation_id] = stored
        return stored

    def _check_overlap(self, reservation: entities.Reservation) -> None:
        # Mirrors the PostgreSQL exclusion constraint when switched on.
        if not self.enforce_overlap:
            return
        for other in self.reservations.values():
            if (
                other.space_id == reservation.space_id
                and other.id != reservation.id
                and other.time_range.overlaps(reservation.time_range)
            ):
                raise OverlapConstraintError(reservation.space_id)

    async def _round_trip(self, query: str) -> None:
        self.queries.append(query)
        await asyncio.sleep(0)
