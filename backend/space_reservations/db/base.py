"""
Declarative base and shared columns for all ORM models.
"""

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    # NULL until the first update
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())
