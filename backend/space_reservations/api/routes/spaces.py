"""
Space endpoints with Redis caching on list operations.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from space_reservations.api.deps import get_store
from space_reservations.booking.ports import ReservationStore
from space_reservations.core.logging import get_logger
from space_reservations.core.security import CurrentUser, get_current_user
from space_reservations.db.session import get_db
from space_reservations.schemas.space import SpaceCreate, SpaceListResponse, SpaceResponse, SpaceUpdate
from space_reservations.services.cache_service import (
    get_cached_spaces,
    invalidate_space_cache,
    set_cached_spaces,
)
from space_reservations.services.space_service import (
    create_space,
    delete_space,
    get_space,
    list_spaces,
    total_pages,
    update_space,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/spaces", tags=["Spaces"])


@router.post("/", response_model=SpaceResponse, status_code=status.HTTP_201_CREATED)
async def create_space_endpoint(
    space_data: SpaceCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new space. Requires authentication."""
    space = await create_space(db, space_data)
    await db.commit()
    await invalidate_space_cache()
    return space


@router.get("/", response_model=SpaceListResponse)
async def list_spaces_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    List spaces with pagination.
    Results are cached in Redis and invalidated whenever a space changes.
    """
    cached = await get_cached_spaces(page, page_size)
    if cached:
        logger.info("spaces_list_cache_hit", page=page)
        cached["cached"] = True
        return SpaceListResponse(**cached)

    spaces, total = await list_spaces(db, page, page_size)

    response_data = {
        "spaces": [SpaceResponse.model_validate(s).model_dump(mode="json") for s in spaces],
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages(total, page_size),
        "cached": False,
    }

    await set_cached_spaces(page, page_size, response_data)

    return SpaceListResponse(**response_data)


@router.get("/{space_id}", response_model=SpaceResponse)
async def get_space_endpoint(
    space_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_space(db, space_id)


@router.put("/{space_id}", response_model=SpaceResponse)
async def update_space_endpoint(
    space_id: int,
    space_data: SpaceUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    space = await update_space(db, space_id, space_data)
    await db.commit()
    await invalidate_space_cache()
    return space


@router.delete("/{space_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_space_endpoint(
    space_id: int,
    user: CurrentUser = Depends(get_current_user),
    store: ReservationStore = Depends(get_store),
):
    """Delete a space. Refused with 409 while any reservation references it."""
    await delete_space(store, space_id)
    await invalidate_space_cache()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
