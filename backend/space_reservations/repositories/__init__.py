"""
Store adapters for the booking engine ports.
"""

from .memory_store import InMemoryReservationStore
from .sqlalchemy_store import SqlAlchemyReservationStore

__all__ = ["InMemoryReservationStore", "SqlAlchemyReservationStore"]
