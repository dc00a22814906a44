"""
Weekly reservation quota.

WEEK BOUNDARY
=============

A user may hold at most `limit` reservations whose reservation_date falls in
the same calendar week. The week is fixed, not rolling: it starts on
WEEK_START (Monday, as in ISO 8601) and ends six days later. Both bounds are
calendar dates and both are inclusive, so there is no "23:59:59.999" edge to
get wrong and no dependency on a locale default for the first weekday.
"""

from datetime import date, timedelta
from typing import Optional

from space_reservations.booking.ports import ReservationReader

MONDAY = 0
SUNDAY = 6
WEEK_START = MONDAY
WEEKLY_RESERVATION_LIMIT = 3


def week_bounds(reference_date: date, week_start: int = WEEK_START) -> tuple[date, date]:
    """Return (first_day, last_day) of the calendar week holding reference_date."""
    offset = (reference_date.weekday() - week_start) % 7
    first_day = reference_date - timedelta(days=offset)
    return first_day, first_day + timedelta(days=6)


class WeeklyQuotaChecker:
    def __init__(
        self,
        reservations: ReservationReader,
        limit: int = WEEKLY_RESERVATION_LIMIT,
        week_start: int = WEEK_START,
    ):
        if not MONDAY <= week_start <= SUNDAY:
            raise ValueError(f"week_start must be between {MONDAY} and {SUNDAY}, got {week_start}")
        self._reservations = reservations
        self.limit = limit
        self.week_start = week_start

    def week_bounds(self, reference_date: date) -> tuple[date, date]:
        return week_bounds(reference_date, self.week_start)

    async def count_in_week(
        self,
        user_email: str,
        reference_date: date,
        exclude_reservation_id: Optional[int] = None,
    ) -> int:
        first_day, last_day = self.week_bounds(reference_date)
        return await self._reservations.count_in_date_range(
            user_email,
            first_day,
            last_day,
            exclude_id=exclude_reservation_id,
        )
