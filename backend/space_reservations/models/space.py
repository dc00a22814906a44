"""
Space model: a bookable room or resource.

A space is never deleted while reservations reference it. The policy layer
enforces that with a readable error; the RESTRICT foreign key on
reservations.space_id is the last line of defence.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String

from space_reservations.db.base import Base, TimestampMixin


class Space(Base, TimestampMixin):
    __tablename__ = "spaces"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    capacity = Column(Integer, nullable=False)
    description = Column(String(1000), nullable=True)

    __table_args__ = (
        CheckConstraint("capacity > 0", name="check_space_capacity_positive"),
    )

    def __repr__(self) -> str:
        return f"<Space(id={self.id}, name={self.name}, capacity={self.capacity})>"
