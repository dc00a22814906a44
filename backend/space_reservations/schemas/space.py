"""
Pydantic schemas for space-related request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SpaceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    capacity: int = Field(..., gt=0, le=10000)
    description: Optional[str] = Field(None, max_length=1000)


class SpaceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    capacity: Optional[int] = Field(None, gt=0, le=10000)
    description: Optional[str] = Field(None, max_length=1000)


class SpaceResponse(BaseModel):
    id: int
    name: str
    location: str
    capacity: int
    description: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SpaceListResponse(BaseModel):
    spaces: list[SpaceResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    cached: bool = False
