"""
Booking policy: decides whether a reservation may be admitted.

DECISION PIPELINE
=================

  Proposed -> DateChecked -> SpaceChecked -> ConflictChecked -> QuotaChecked -> Admitted
       \\             \\              \\                \\
        PAST_DATE    SPACE_NOT_FOUND  TIME_CONFLICT    QUOTA_EXCEEDED

The order is fixed and every step short-circuits. The date check needs no
store access, so a request for yesterday never reaches the database.

Evaluation is read-only: it never writes, never retries, and two calls on an
unchanged store return equal Decisions. Persisting an admitted candidate is
the caller's job, and the caller must hold `store.locked_space(space_id)`
around evaluate + write (see services/reservation_service.py), otherwise two
requests can both be admitted for the same slot.
"""

from datetime import date, datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from space_reservations.booking.conflicts import ConflictChecker
from space_reservations.booking.decision import Decision, RejectedReason
from space_reservations.booking.entities import BookingCandidate, ReservationPatch
from space_reservations.booking.ports import ReservationReader, SpaceReader, SpaceReservationCounter
from space_reservations.booking.quota import WEEK_START, WEEKLY_RESERVATION_LIMIT, WeeklyQuotaChecker
from space_reservations.booking.time_range import TimeRange


def today_in(timezone_name: str) -> Callable[[], date]:
    zone = ZoneInfo(timezone_name)
    return lambda: datetime.now(zone).date()


class BookingPolicy:
    def __init__(
        self,
        spaces: SpaceReader,
        reservations: ReservationReader,
        space_counter: SpaceReservationCounter,
        *,
        weekly_limit: int = WEEKLY_RESERVATION_LIMIT,
        week_start: int = WEEK_START,
        today: Optional[Callable[[], date]] = None,
    ):
        self._spaces = spaces
        self._reservations = reservations
        self._space_counter = space_counter
        self._today = today or today_in("UTC")
        self.conflicts = ConflictChecker(reservations)
        self.quota = WeeklyQuotaChecker(reservations, limit=weekly_limit, week_start=week_start)

    async def evaluate(
        self,
        candidate: BookingCandidate,
        exclude_reservation_id: Optional[int] = None,
    ) -> Decision:
        """
        Run the pipeline for one candidate.

        Raises:
            InvalidRangeError: start_time is not before end_time. This is a
                malformed request, not a business rejection, so it is raised
                before any check runs.
        """
        time_range = TimeRange(candidate.start_time, candidate.end_time)

        if candidate.reservation_date < self._today():
            return Decision.reject(RejectedReason.PAST_DATE)

        space = await self._spaces.find_space(candidate.space_id)
        if space is None:
            return Decision.reject(RejectedReason.SPACE_NOT_FOUND, space_id=candidate.space_id)

        conflicts = await self.conflicts.find_conflicts(
            candidate.space_id,
            time_range,
            exclude_reservation_id=exclude_reservation_id,
        )
        if conflicts:
            return Decision.reject(
                RejectedReason.TIME_CONFLICT,
                space_id=candidate.space_id,
                conflicting_ids=tuple(sorted(r.id for r in conflicts)),
            )

        held = await self.quota.count_in_week(
            candidate.user_email,
            candidate.reservation_date,
            exclude_reservation_id=exclude_reservation_id,
        )
        if held >= self.quota.limit:
            week_start, _ = self.quota.week_bounds(candidate.reservation_date)
            return Decision.reject(
                RejectedReason.QUOTA_EXCEEDED,
                week_start=week_start,
                count=held,
                limit=self.quota.limit,
            )

        return Decision.admit()

    async def evaluate_create(
        self,
        space_id: int,
        user_email: str,
        reservation_date: date,
        start_time: datetime,
        end_time: datetime,
    ) -> Decision:
        return await self.evaluate(
            BookingCandidate(
                space_id=space_id,
                user_email=user_email,
                reservation_date=reservation_date,
                start_time=start_time,
                end_time=end_time,
            )
        )

    async def evaluate_update(self, reservation_id: int, patch: ReservationPatch) -> Decision:
        """Re-run the whole pipeline on the patched reservation, ignoring its stored self."""
        current = await self._reservations.find_reservation(reservation_id)
        if current is None:
            return Decision.reject(RejectedReason.RESERVATION_NOT_FOUND, reservation_id=reservation_id)
        return await self.evaluate(patch.apply(current), exclude_reservation_id=reservation_id)

    async def evaluate_space_deletion(self, space_id: int) -> Decision:
        space = await self._spaces.find_space(space_id)
        if space is None:
            return Decision.reject(RejectedReason.SPACE_NOT_FOUND, space_id=space_id)

        referencing = await self._space_counter.count_any(space_id)
        if referencing > 0:
            return Decision.reject(
                RejectedReason.SPACE_HAS_RESERVATIONS,
                space_id=space_id,
                count=referencing,
            )
        return Decision.admit()
