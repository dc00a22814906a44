"""
Booking engine: overlap exclusion and weekly quota for space reservations.
Free of HTTP and ORM concerns; stores plug in through `ports`.
"""

from .decision import Decision, RejectedReason
from .entities import BookingCandidate, Reservation, ReservationPatch, Space
from .errors import BookingError, InvalidRangeError, OverlapConstraintError
from .policy import BookingPolicy
from .time_range import TimeRange

__all__ = [
    "BookingPolicy", "Decision", "RejectedReason",
    "BookingCandidate", "Reservation", "ReservationPatch", "Space",
    "BookingError", "InvalidRangeError", "OverlapConstraintError",
    "TimeRange",
]
