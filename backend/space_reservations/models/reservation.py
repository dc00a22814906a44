"""
Reservation model: one user booking one space for a half-open time range.

Key design decisions:
- `user_email` is the owner handle; there is no foreign key to users
- Composite index (space_id, start_time, end_time) serves the overlap query
- Composite index (user_email, reservation_date) serves the weekly quota count
- On PostgreSQL the initial migration adds an exclusion constraint
  (excl_reservations_space_overlap) over tstzrange(start_time, end_time, '[)')
  so overlapping rows for one space cannot be committed even if the
  application lock is bypassed
"""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String

from space_reservations.db.base import Base, TimestampMixin

OVERLAP_CONSTRAINT_NAME = "excl_reservations_space_overlap"


class Reservation(Base, TimestampMixin):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    space_id = Column(Integer, ForeignKey("spaces.id", ondelete="RESTRICT"), nullable=False)
    user_email = Column(String(255), nullable=False)
    reservation_date = Column(Date, nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_reservation_range"),
        Index("ix_reservations_space_time", "space_id", "start_time", "end_time"),
        Index("ix_reservations_user_date", "user_email", "reservation_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reservation(id={self.id}, space={self.space_id}, user={self.user_email}, "
            f"{self.start_time}..{self.end_time})>"
        )
