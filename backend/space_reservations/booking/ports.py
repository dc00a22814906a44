"""
Store interfaces consumed by the booking engine.

The policy only reads; writes are performed by the caller once a
Decision admits the request. Any persistence backend with transactions
can implement these:
- SqlAlchemyReservationStore: PostgreSQL / SQLite through an AsyncSession
- InMemoryReservationStore: dict-backed, for tests and local experiments
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import date, datetime
from typing import Optional

from space_reservations.booking.entities import Reservation, Space


class SpaceReader(ABC):
    @abstractmethod
    async def find_space(self, space_id: int) -> Optional[Space]:
        """Return the space or None when it does not exist."""
        pass


class SpaceReservationCounter(ABC):
    @abstractmethod
    async def count_any(self, space_id: int) -> int:
        """Count every reservation referencing the space, past or future."""
        pass


class SpaceWriter(ABC):
    @abstractmethod
    async def delete_space(self, space_id: int) -> None:
        pass


class ReservationReader(ABC):
    @abstractmethod
    async def find_reservation(self, reservation_id: int) -> Optional[Reservation]:
        pass

    @abstractmethod
    async def find_overlapping(
        self,
        space_id: int,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> list[Reservation]:
        """
        Reservations of `space_id` whose [start_time, end_time) overlaps
        [start, end). `exclude_id` is left out of the result.
        """
        pass

    @abstractmethod
    async def count_in_date_range(
        self,
        user_email: str,
        week_start: date,
        week_end: date,
        exclude_id: Optional[int] = None,
    ) -> int:
        """
        Count reservations of `user_email` whose reservation_date lies in
        [week_start, week_end], both ends inclusive.
        """
        pass


class ReservationWriter(ABC):
    @abstractmethod
    async def insert(self, reservation: Reservation) -> Reservation:
        """
        Persist a new reservation and return it with its id.

        Raises:
            OverlapConstraintError: the store itself detected an overlap
        """
        pass

    @abstractmethod
    async def update(self, reservation_id: int, fields: dict) -> Reservation:
        pass

    @abstractmethod
    async def delete(self, reservation_id: int) -> None:
        pass


class ReservationStore(
    SpaceReader,
    SpaceReservationCounter,
    SpaceWriter,
    ReservationReader,
    ReservationWriter,
):
    """Everything the reservation and space-deletion use cases need."""

    @abstractmethod
    def locked_space(self, space_id: int) -> AbstractAsyncContextManager[None]:
        """
        Serialize work on one space.

        Evaluate-then-write sequences for the same space run one at a time
        inside this context, and its body is a single transaction: it is
        committed on normal exit and rolled back when the body raises.
        """
        pass
