"""
Shared route dependencies.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from space_reservations.booking.ports import ReservationStore
from space_reservations.db.session import get_db
from space_reservations.repositories.sqlalchemy_store import SqlAlchemyReservationStore


async def get_store(db: AsyncSession = Depends(get_db)) -> ReservationStore:
    return SqlAlchemyReservationStore(db)
