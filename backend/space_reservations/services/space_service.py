"""
Space service handling CRUD operations.

Deletion goes through the booking policy: a space that is referenced by any
reservation, past or future, cannot be deleted. The check and the delete run
under the same per-space lock that reservation writes take, so a booking
cannot slip in between.
"""

import math
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from space_reservations.booking.policy import BookingPolicy
from space_reservations.booking.ports import ReservationStore
from space_reservations.core.logging import get_logger
from space_reservations.core.metrics import record_decision
from space_reservations.models.space import Space
from space_reservations.schemas.space import SpaceCreate, SpaceUpdate
from space_reservations.services.policy_factory import build_policy
from space_reservations.services.rejections import raise_for_decision

logger = get_logger(__name__)


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total else 0


async def create_space(db: AsyncSession, space_data: SpaceCreate) -> Space:
    space = Space(
        name=space_data.name,
        location=space_data.location,
        capacity=space_data.capacity,
        description=space_data.description,
    )
    db.add(space)
    await db.flush()
    await db.refresh(space)

    logger.info("space_created", space_id=space.id, name=space.name, capacity=space.capacity)
    return space


async def get_space(db: AsyncSession, space_id: int) -> Space:
    """Get a single space by ID."""
    result = await db.execute(select(Space).where(Space.id == space_id))
    space = result.scalar_one_or_none()

    if not space:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Space with ID {space_id} not found",
        )
    return space


async def list_spaces(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 10,
) -> tuple[list[Space], int]:
    """List spaces with pagination, ordered by id."""
    total = (await db.execute(select(func.count()).select_from(Space))).scalar()

    result = await db.execute(
        select(Space)
        .order_by(Space.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def update_space(db: AsyncSession, space_id: int, space_data: SpaceUpdate) -> Space:
    space = await get_space(db, space_id)

    # description is the only nullable column; an explicit null clears it
    changes = {
        field: value
        for field, value in space_data.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }
    for field, value in changes.items():
        setattr(space, field, value)
    await db.flush()
    await db.refresh(space)

    logger.info("space_updated", space_id=space_id, fields=sorted(changes))
    return space


async def delete_space(
    store: ReservationStore,
    space_id: int,
    policy: Optional[BookingPolicy] = None,
) -> None:
    """
    Delete a space that no reservation references.
    Raises 404 when the space is unknown and 409 when reservations exist.
    """
    policy = policy or build_policy(store)

    async with store.locked_space(space_id):
        decision = await policy.evaluate_space_deletion(space_id)
        record_decision("delete_space", decision)
        if not decision.admitted:
            logger.info(
                "space_deletion_rejected",
                space_id=space_id,
                reason=decision.reason.value,
                reservations=decision.count,
            )
            raise_for_decision(decision)
        await store.delete_space(space_id)

    logger.info("space_deleted", space_id=space_id)
