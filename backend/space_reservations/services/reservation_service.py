"""
Reservation use cases: create, update, delete, read.

CONCURRENCY STRATEGY: Evaluate and write under one per-space lock
=================================================================

The booking policy only reads. Admitting a reservation and persisting it
must happen as one step, otherwise two requests can both see a free slot:

  async with store.locked_space(space_id):    # row lock + transaction
      decision = await policy.evaluate(...)   # conflict + quota reads
      await store.insert(...)                 # write while still locked

If the store still refuses the write with OverlapConstraintError (the
PostgreSQL exclusion constraint caught something the lock did not cover),
the whole sequence is re-run up to BOOKING_MAX_RETRY_ATTEMPTS times. A
second evaluation normally sees the competing row and returns TIME_CONFLICT.

The weekly quota is checked under the space lock only, so two simultaneous
requests by the same user on different spaces can exceed the quota by one.
The sequential path enforces it exactly.
"""

from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from space_reservations.booking import entities
from space_reservations.booking.decision import Decision, RejectedReason
from space_reservations.booking.errors import InvalidRangeError, OverlapConstraintError
from space_reservations.booking.policy import BookingPolicy
from space_reservations.booking.ports import ReservationStore
from space_reservations.core.config import get_settings
from space_reservations.core.logging import get_logger
from space_reservations.core.metrics import booking_evaluation_latency, record_decision, record_retry
from space_reservations.models.reservation import Reservation
from space_reservations.repositories.sqlalchemy_store import reservation_to_entity
from space_reservations.schemas.reservation import ReservationCreate, ReservationUpdate
from space_reservations.services.policy_factory import build_policy
from space_reservations.services.rejections import raise_for_decision

logger = get_logger(__name__)


def _reject(operation: str, decision: Decision, **context) -> None:
    logger.info(
        "reservation_rejected",
        operation=operation,
        reason=decision.reason.value,
        **context,
    )
    raise_for_decision(decision)


def _invalid_range(error: InvalidRangeError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


async def get_owned_reservation(
    store: ReservationStore,
    reservation_id: int,
    user_email: str,
) -> entities.Reservation:
    """Load a reservation and check that `user_email` owns it (404 / 403)."""
    reservation = await store.find_reservation(reservation_id)
    if reservation is None:
        raise_for_decision(
            Decision.reject(RejectedReason.RESERVATION_NOT_FOUND, reservation_id=reservation_id)
        )
    if reservation.user_email != user_email:
        logger.warning(
            "reservation_access_denied",
            reservation_id=reservation_id,
            user_email=user_email,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized to modify this reservation",
        )
    return reservation


async def create_reservation(
    store: ReservationStore,
    user_email: str,
    data: ReservationCreate,
    policy: Optional[BookingPolicy] = None,
) -> entities.Reservation:
    """
    Admit and persist a reservation.
    Raises HTTPException carrying the rejection detail when not admitted.
    """
    policy = policy or build_policy(store)
    candidate = entities.BookingCandidate(
        space_id=data.space_id,
        user_email=user_email,
        reservation_date=data.reservation_date,
        start_time=data.start_time,
        end_time=data.end_time,
    )
    max_attempts = get_settings().BOOKING_MAX_RETRY_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        try:
            with booking_evaluation_latency.labels(operation="create").time():
                async with store.locked_space(candidate.space_id):
                    decision = await policy.evaluate(candidate)
                    record_decision("create", decision)
                    if not decision.admitted:
                        _reject("create", decision, space_id=candidate.space_id, user_email=user_email)
                    reservation = await store.insert(candidate.to_reservation())
        except InvalidRangeError as e:
            raise _invalid_range(e)
        except OverlapConstraintError:
            record_retry()
            logger.info("reservation_retry", space_id=candidate.space_id, attempt=attempt)
            continue

        logger.info(
            "reservation_created",
            reservation_id=reservation.id,
            space_id=reservation.space_id,
            user_email=user_email,
            duration_minutes=int(reservation.time_range.duration.total_seconds() // 60),
            attempt=attempt,
        )
        return reservation

    decision = Decision.reject(RejectedReason.TIME_CONFLICT, space_id=candidate.space_id)
    record_decision("create", decision)
    _reject("create", decision, space_id=candidate.space_id, attempts=max_attempts)


async def update_reservation(
    store: ReservationStore,
    reservation_id: int,
    user_email: str,
    data: ReservationUpdate,
    policy: Optional[BookingPolicy] = None,
) -> entities.Reservation:
    """
    Re-run the booking pipeline on the patched reservation and persist it.
    The reservation never conflicts with, or counts against, its own stored self.
    """
    current = await get_owned_reservation(store, reservation_id, user_email)
    patch = data.to_patch()
    if patch.is_empty():
        return current

    policy = policy or build_policy(store)
    max_attempts = get_settings().BOOKING_MAX_RETRY_ATTEMPTS

    for attempt in range(1, max_attempts + 1):
        try:
            with booking_evaluation_latency.labels(operation="update").time():
                async with store.locked_space(current.space_id):
                    decision = await policy.evaluate_update(reservation_id, patch)
                    record_decision("update", decision)
                    if not decision.admitted:
                        _reject("update", decision, reservation_id=reservation_id)
                    updated = await store.update(reservation_id, patch.changed_fields())
        except InvalidRangeError as e:
            raise _invalid_range(e)
        except OverlapConstraintError:
            record_retry()
            logger.info("reservation_retry", reservation_id=reservation_id, attempt=attempt)
            continue

        logger.info("reservation_updated", reservation_id=reservation_id, attempt=attempt)
        return updated

    decision = Decision.reject(RejectedReason.TIME_CONFLICT, space_id=current.space_id)
    record_decision("update", decision)
    _reject("update", decision, reservation_id=reservation_id, attempts=max_attempts)


async def delete_reservation(store: ReservationStore, reservation_id: int, user_email: str) -> None:
    """Delete a reservation owned by `user_email`."""
    current = await get_owned_reservation(store, reservation_id, user_email)
    async with store.locked_space(current.space_id):
        await store.delete(reservation_id)
    logger.info("reservation_deleted", reservation_id=reservation_id, space_id=current.space_id)


async def get_reservation(store: ReservationStore, reservation_id: int) -> entities.Reservation:
    reservation = await store.find_reservation(reservation_id)
    if reservation is None:
        raise_for_decision(
            Decision.reject(RejectedReason.RESERVATION_NOT_FOUND, reservation_id=reservation_id)
        )
    return reservation


async def list_reservations(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 10,
    user_email: Optional[str] = None,
    space_id: Optional[int] = None,
) -> tuple[list[entities.Reservation], int]:
    """List reservations ordered by start time, optionally for one user or one space."""
    query = select(Reservation)
    if user_email is not None:
        query = query.where(Reservation.user_email == user_email)
    if space_id is not None:
        query = query.where(Reservation.space_id == space_id)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    result = await db.execute(
        query
        .order_by(Reservation.start_time.asc(), Reservation.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return [reservation_to_entity(row) for row in result.scalars().all()], total
