"""
Builds the booking policy from settings.
"""

from space_reservations.booking.policy import BookingPolicy, today_in
from space_reservations.booking.ports import ReservationStore
from space_reservations.core.config import get_settings


def build_policy(store: ReservationStore) -> BookingPolicy:
    settings = get_settings()
    return BookingPolicy(
        store,
        store,
        store,
        weekly_limit=settings.WEEKLY_RESERVATION_LIMIT,
        week_start=settings.WEEK_START_DAY,
        today=today_in(settings.BOOKING_TIMEZONE),
    )
