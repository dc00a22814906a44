"""Detection of overlapping reservations on a space."""

from typing import Optional

from space_reservations.booking.entities import Reservation
from space_reservations.booking.ports import ReservationReader
from space_reservations.booking.time_range import TimeRange


class ConflictChecker:
    """
    Finds the reservations of a space that overlap a candidate range.

    The store narrows the rows with its own query; the result is filtered
    again with TimeRange.overlaps so the half-open rule has a single source
    of truth whatever backend sits behind the reader.
    """

    def __init__(self, reservations: ReservationReader):
        self._reservations = reservations

    async def find_conflicts(
        self,
        space_id: int,
        candidate: TimeRange,
        exclude_reservation_id: Optional[int] = None,
    ) -> list[Reservation]:
        rows = await self._reservations.find_overlapping(
            space_id,
            candidate.start,
            candidate.end,
            exclude_id=exclude_reservation_id,
        )
        return [
            reservation
            for reservation in rows
            if reservation.id != exclude_reservation_id and reservation.time_range.overlaps(candidate)
        ]
