"""
SQLAlchemy implementation of the booking store.

CONCURRENCY STRATEGY: Per-space pessimistic lock + exclusion constraint
======================================================================

Problem:
  Two users ask for the same room at 10:00 at the same moment.
  Both read "no overlapping reservation", both insert.
  Result: Double booking.

Solution:
  1. `locked_space()` opens the write transaction with
       SELECT id FROM spaces WHERE id = :space_id FOR UPDATE
     Every create/update/delete touching that space queues on the same row
     lock, so evaluate + insert runs one request at a time per space.
     Requests for other spaces are not blocked.
  2. On PostgreSQL the excl_reservations_space_overlap exclusion constraint
     rejects an overlapping row as soon as the INSERT or UPDATE is flushed
     (the constraint is not DEFERRABLE), even if a code path skips the lock.
     `_flush` translates that violation into OverlapConstraintError and the
     service re-runs the evaluation.

  Space deletion takes the same row lock, so a reservation cannot be
  created for a space that is concurrently judged empty and deleted.

  SQLite (tests) has no row locks; SQLAlchemy drops FOR UPDATE there and the
  single-writer database serializes transactions instead.
"""

from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import AsyncIterator, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from space_reservations.booking import entities
from space_reservations.booking.errors import OverlapConstraintError
from space_reservations.booking.ports import ReservationStore
from space_reservations.core.logging import get_logger
from space_reservations.models.reservation import OVERLAP_CONSTRAINT_NAME, Reservation
from space_reservations.models.space import Space

logger = get_logger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything stored is UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def space_to_entity(row: Space) -> entities.Space:
    return entities.Space(
        id=row.id,
        name=row.name,
        location=row.location,
        capacity=row.capacity,
        description=row.description,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def reservation_to_entity(row: Reservation) -> entities.Reservation:
    return entities.Reservation(
        id=row.id,
        space_id=row.space_id,
        user_email=row.user_email,
        reservation_date=row.reservation_date,
        start_time=_as_utc(row.start_time),
        end_time=_as_utc(row.end_time),
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class SqlAlchemyReservationStore(ReservationStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def locked_space(self, space_id: int) -> AsyncIterator[None]:
        try:
            await self.db.execute(select(Space.id).where(Space.id == space_id).with_for_update())
            yield
            await self.db.commit()
        except BaseException:
            await self.db.rollback()
            raise

    async def find_space(self, space_id: int) -> Optional[entities.Space]:
        row = await self.db.get(Space, space_id)
        return space_to_entity(row) if row else None

    async def count_any(self, space_id: int) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Reservation).where(Reservation.space_id == space_id)
        )
        return result.scalar_one()

    async def delete_space(self, space_id: int) -> None:
        await self.db.execute(delete(Space).where(Space.id == space_id))

    async def find_reservation(self, reservation_id: int) -> Optional[entities.Reservation]:
        # populate_existing: re-read even if the row is already in the identity map
        row = await self.db.get(Reservation, reservation_id, populate_existing=True)
        return reservation_to_entity(row) if row else None

    async def find_overlapping(
        self,
        space_id: int,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> list[entities.Reservation]:
        # Same predicate as TimeRange.overlaps: existing.start < end AND start < existing.end
        query = select(Reservation).where(
            Reservation.space_id == space_id,
            Reservation.start_time < end,
            Reservation.end_time > start,
        )
        if exclude_id is not None:
            query = query.where(Reservation.id != exclude_id)
        result = await self.db.execute(query.order_by(Reservation.start_time))
        return [reservation_to_entity(row) for row in result.scalars().all()]

    async def count_in_date_range(
        self,
        user_email: str,
        week_start: date,
        week_end: date,
        exclude_id: Optional[int] = None,
    ) -> int:
        query = (
            select(func.count())
            .select_from(Reservation)
            .where(
                Reservation.user_email == user_email,
                Reservation.reservation_date.between(week_start, week_end),
            )
        )
        if exclude_id is not None:
            query = query.where(Reservation.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalar_one()

    async def insert(self, reservation: entities.Reservation) -> entities.Reservation:
        row = Reservation(
            space_id=reservation.space_id,
            user_email=reservation.user_email,
            reservation_date=reservation.reservation_date,
            start_time=reservation.start_time,
            end_time=reservation.end_time,
        )
        self.db.add(row)
        await self._flush(reservation.space_id)
        await self.db.refresh(row)
        return reservation_to_entity(row)

    async def update(self, reservation_id: int, fields: dict) -> entities.Reservation:
        row = await self.db.get(Reservation, reservation_id)
        if row is None:
            raise LookupError(f"Reservation {reservation_id} does not exist")
        for name, value in fields.items():
            setattr(row, name, value)
        await self._flush(row.space_id)
        await self.db.refresh(row)
        return reservation_to_entity(row)

    async def delete(self, reservation_id: int) -> None:
        await self.db.execute(delete(Reservation).where(Reservation.id == reservation_id))

    async def _flush(self, space_id: int) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            if OVERLAP_CONSTRAINT_NAME in str(e.orig):
                logger.warning("overlap_constraint_violation", space_id=space_id)
                raise OverlapConstraintError(space_id) from e
            raise
