"""
Maps rejected booking decisions onto HTTP errors.

The policy returns plain Decision values; this is the only place that knows
which status code each rejection reason deserves.
"""

from fastapi import HTTPException, status

from space_reservations.booking.decision import Decision, RejectedReason

STATUS_BY_REASON = {
    RejectedReason.PAST_DATE: status.HTTP_400_BAD_REQUEST,
    RejectedReason.SPACE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RejectedReason.RESERVATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RejectedReason.TIME_CONFLICT: status.HTTP_409_CONFLICT,
    RejectedReason.QUOTA_EXCEEDED: status.HTTP_409_CONFLICT,
    RejectedReason.SPACE_HAS_RESERVATIONS: status.HTTP_409_CONFLICT,
}


def raise_for_decision(decision: Decision) -> None:
    if decision.admitted:
        return
    raise HTTPException(
        status_code=STATUS_BY_REASON.get(decision.reason, status.HTTP_400_BAD_REQUEST),
        detail=decision.as_detail(),
    )
