"""
Reservation endpoints backed by the booking policy.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from space_reservations.api.deps import get_store
from space_reservations.booking.ports import ReservationStore
from space_reservations.core.security import CurrentUser, get_current_user
from space_reservations.db.session import get_db
from space_reservations.schemas.reservation import (
    ReservationCreate,
    ReservationListResponse,
    ReservationResponse,
    ReservationUpdate,
)
from space_reservations.services.reservation_service import (
    create_reservation,
    delete_reservation,
    get_reservation,
    list_reservations,
    update_reservation,
)
from space_reservations.services.space_service import total_pages

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.post("/", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation_endpoint(
    reservation_data: ReservationCreate,
    user: CurrentUser = Depends(get_current_user),
    store: ReservationStore = Depends(get_store),
):
    """
    Book a space for the authenticated user.

    Rejections come back with a structured detail:
    400 past date, 404 unknown space, 409 time conflict or weekly quota reached.
    """
    return await create_reservation(store, user.email, reservation_data)


@router.get("/", response_model=ReservationListResponse)
async def list_reservations_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    mine: bool = Query(False, description="Only reservations of the authenticated user"),
    space_id: Optional[int] = Query(None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    reservations, total = await list_reservations(
        db,
        page,
        page_size,
        user_email=user.email if mine else None,
        space_id=space_id,
    )
    return ReservationListResponse(
        reservations=[ReservationResponse.model_validate(r) for r in reservations],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation_endpoint(
    reservation_id: int,
    user: CurrentUser = Depends(get_current_user),
    store: ReservationStore = Depends(get_store),
):
    return await get_reservation(store, reservation_id)


@router.put("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation_endpoint(
    reservation_id: int,
    reservation_data: ReservationUpdate,
    user: CurrentUser = Depends(get_current_user),
    store: ReservationStore = Depends(get_store),
):
    """Move a reservation. Only its owner may do so; the booking rules run again."""
    return await update_reservation(store, reservation_id, user.email, reservation_data)


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation_endpoint(
    reservation_id: int,
    user: CurrentUser = Depends(get_current_user),
    store: ReservationStore = Depends(get_store),
):
    """Cancel a reservation. Only its owner may do so."""
    await delete_reservation(store, reservation_id, user.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
