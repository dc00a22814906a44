"""Half-open time interval used for every overlap decision."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from space_reservations.booking.errors import InvalidRangeError


@dataclass(frozen=True, slots=True)
class TimeRange:
    """
    A `[start, end)` interval.

    The end instant is excluded, so a range ending at 12:00 and another
    starting at 12:00 do not overlap and a space can be booked back to back.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidRangeError(self.start, self.end)

    def overlaps(self, other: "TimeRange") -> bool:
        return self.start < other.end and other.start < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start
