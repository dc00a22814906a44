from space_reservations.schemas.user import UserCreate, UserResponse, UserLogin, Token
from space_reservations.schemas.space import SpaceCreate, SpaceUpdate, SpaceResponse, SpaceListResponse
from space_reservations.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ReservationResponse,
    ReservationListResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token",
    "SpaceCreate", "SpaceUpdate", "SpaceResponse", "SpaceListResponse",
    "ReservationCreate", "ReservationUpdate", "ReservationResponse", "ReservationListResponse",
]
