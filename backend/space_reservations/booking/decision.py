"""
Structured admit/reject result of a booking evaluation.

Rejections are ordinary values rather than exceptions, so the policy stays
free of HTTP concerns. The service layer maps a rejected Decision onto a
status code; the Decision itself carries enough detail (week start, limit,
conflicting ids) to render a precise message without recomputing anything.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class RejectedReason(str, Enum):
    PAST_DATE = "past_date"
    SPACE_NOT_FOUND = "space_not_found"
    RESERVATION_NOT_FOUND = "reservation_not_found"
    TIME_CONFLICT = "time_conflict"
    QUOTA_EXCEEDED = "quota_exceeded"
    SPACE_HAS_RESERVATIONS = "space_has_reservations"


@dataclass(frozen=True, slots=True)
class Decision:
    admitted: bool
    reason: Optional[RejectedReason] = None
    space_id: Optional[int] = None
    reservation_id: Optional[int] = None
    week_start: Optional[date] = None
    count: Optional[int] = None
    limit: Optional[int] = None
    conflicting_ids: tuple[int, ...] = ()

    @classmethod
    def admit(cls) -> "Decision":
        return cls(admitted=True)

    @classmethod
    def reject(cls, reason: RejectedReason, **detail) -> "Decision":
        return cls(admitted=False, reason=reason, **detail)

    @property
    def message(self) -> str:
        if self.admitted:
            return "Admitted"
        if self.reason is RejectedReason.PAST_DATE:
            return "Reservation date cannot be in the past"
        if self.reason is RejectedReason.SPACE_NOT_FOUND:
            return f"Space with ID {self.space_id} not found"
        if self.reason is RejectedReason.RESERVATION_NOT_FOUND:
            return f"Reservation with ID {self.reservation_id} not found"
        if self.reason is RejectedReason.TIME_CONFLICT:
            return "There is already a reservation for this space at the specified time"
        if self.reason is RejectedReason.QUOTA_EXCEEDED:
            return (
                "You have reached the maximum number of reservations allowed for the week "
                f"starting on {self.week_start.isoformat()} ({self.limit})"
            )
        if self.reason is RejectedReason.SPACE_HAS_RESERVATIONS:
            return "Cannot delete space with existing reservations"
        return "Rejected"

    def as_detail(self) -> dict:
        """JSON-friendly view used as the body of an HTTP error."""
        detail = {
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
        }
        if self.week_start is not None:
            detail["week_start"] = self.week_start.isoformat()
        if self.count is not None:
            detail["count"] = self.count
        if self.limit is not None:
            detail["limit"] = self.limit
        if self.conflicting_ids:
            detail["conflicting_ids"] = list(self.conflicting_ids)
        return detail
