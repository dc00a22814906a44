"""
Pydantic schemas for reservation-related request/response validation.

Incoming instants are normalised to UTC here; a timestamp without an
offset is read as UTC. The booking engine only ever sees aware datetimes.
"""

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from space_reservations.booking.entities import ReservationPatch


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ReservationCreate(BaseModel):
    space_id: int
    reservation_date: date
    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def normalise_to_utc(cls, value: datetime) -> datetime:
        return _to_utc(value)

    @model_validator(mode="after")
    def check_range(self) -> "ReservationCreate":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class ReservationUpdate(BaseModel):
    reservation_date: Optional[date] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalise_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_utc(value)

    def to_patch(self) -> ReservationPatch:
        return ReservationPatch(
            reservation_date=self.reservation_date,
            start_time=self.start_time,
            end_time=self.end_time,
        )


class ReservationResponse(BaseModel):
    id: int
    space_id: int
    user_email: str
    reservation_date: date
    start_time: datetime
    end_time: datetime
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReservationListResponse(BaseModel):
    reservations: list[ReservationResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
