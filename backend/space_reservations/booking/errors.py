"""
Exceptions raised by the booking engine.

Business rejections are NOT exceptions: they come back as a `Decision`.
These classes cover the two other failure families, malformed input and
store faults the caller may want to retry.
"""


class BookingError(Exception):
    """Base class for booking engine errors."""


class InvalidRangeError(BookingError, ValueError):
    """A time range whose start is not strictly before its end."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Start time {start.isoformat()} must be before end time {end.isoformat()}")


class OverlapConstraintError(BookingError):
    """
    The store refused a write because it would overlap another reservation
    of the same space (database exclusion constraint). Re-running the
    evaluation usually turns this into a TIME_CONFLICT decision.
    """

    def __init__(self, space_id: int):
        self.space_id = space_id
        super().__init__(f"Overlapping reservation rejected by the store for space {space_id}")
