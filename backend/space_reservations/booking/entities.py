"""
Plain records exchanged between the booking engine and its stores.

Stores map their own row types onto these, so the engine never touches
ORM instances or sessions.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from space_reservations.booking.time_range import TimeRange


@dataclass(frozen=True, slots=True)
class Space:
    id: int
    name: str
    location: str
    capacity: int
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class Reservation:
    id: Optional[int]
    space_id: int
    user_email: str
    reservation_date: date
    start_time: datetime
    end_time: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)


@dataclass(frozen=True, slots=True)
class BookingCandidate:
    """A reservation as proposed by a caller, before it has an id."""

    space_id: int
    user_email: str
    reservation_date: date
    start_time: datetime
    end_time: datetime

    def to_reservation(self) -> Reservation:
        return Reservation(
            id=None,
            space_id=self.space_id,
            user_email=self.user_email,
            reservation_date=self.reservation_date,
            start_time=self.start_time,
            end_time=self.end_time,
        )


@dataclass(frozen=True, slots=True)
class ReservationPatch:
    """Fields a reservation owner may change. `None` keeps the stored value."""

    reservation_date: Optional[date] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def is_empty(self) -> bool:
        return self.reservation_date is None and self.start_time is None and self.end_time is None

    def apply(self, reservation: Reservation) -> BookingCandidate:
        merged = replace(
            reservation,
            reservation_date=self.reservation_date or reservation.reservation_date,
            start_time=self.start_time or reservation.start_time,
            end_time=self.end_time or reservation.end_time,
        )
        return BookingCandidate(
            space_id=merged.space_id,
            user_email=merged.user_email,
            reservation_date=merged.reservation_date,
            start_time=merged.start_time,
            end_time=merged.end_time,
        )

    def changed_fields(self) -> dict:
        fields = {
            "reservation_date": self.reservation_date,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }
        return {name: value for name, value in fields.items() if value is not None}
