"""
Database seeder: demo users, then spaces, then reservations.

Each step is skipped when its table already has rows, so running the
seeder twice is harmless. Reservations go through the booking policy and
the per-space lock like any API request; a planned reservation the rules
refuse is logged and left out.

Run with `space-reservations-seed` (see pyproject.toml) after migrating.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from space_reservations.booking import BookingCandidate, BookingPolicy
from space_reservations.booking.policy import today_in
from space_reservations.core.config import get_settings
from space_reservations.core.logging import get_logger, setup_logging
from space_reservations.core.security import hash_password
from space_reservations.db.session import AsyncSessionLocal, engine
from space_reservations.models.reservation import Reservation
from space_reservations.models.space import Space
from space_reservations.models.user import User
from space_reservations.repositories.sqlalchemy_store import SqlAlchemyReservationStore
from space_reservations.services.policy_factory import build_policy

logger = get_logger(__name__)

SEED_PASSWORD = "password123"

SEED_USERS = [
    ("user1@example.com", "Regular User 1"),
    ("user2@example.com", "Regular User 2"),
    ("user3@example.com", "Regular User 3"),
]

SEED_SPACES = [
    ("Conference Room A", "Building 1, Floor 2", 20, "Large conference room with projector and whiteboard"),
    ("Meeting Room B", "Building 1, Floor 3", 8, "Small meeting room with video conferencing equipment"),
    ("Auditorium", "Building 2, Ground Floor", 100, "Large auditorium for presentations and events"),
    ("Collaboration Space", "Building 3, Floor 1", 15, "Open space with flexible seating for team collaboration"),
    ("Executive Boardroom", "Building 1, Floor 5", 12, "Premium boardroom with high-end AV equipment"),
]

# (space index, user email, days after the seeded week's Monday, start hour, end hour)
SEED_RESERVATIONS = [
    (0, "user1@example.com", 0, 9, 11),
    (0, "user2@example.com", 0, 11, 12),
    (1, "user1@example.com", 1, 13, 15),
    (2, "user2@example.com", 1, 10, 12),
    (2, "user2@example.com", 2, 6, 7),
    (3, "user1@example.com", 2, 9, 17),
    (4, "user3@example.com", 3, 9, 17),
    (4, "user3@example.com", 3, 6, 7),
    (1, "user1@example.com", 7, 14, 16),
]


def seed_week_start(today: date) -> date:
    """The Monday after `today`, so every seeded reservation lies in the future."""
    return today + timedelta(days=7 - today.weekday())


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def seed_users(db: AsyncSession) -> int:
    logger.info("seeding_users")
    if await _count(db, User) > 0:
        logger.info("users_already_seeded")
        return 0

    for email, name in SEED_USERS:
        db.add(User(email=email, name=name, hashed_password=hash_password(SEED_PASSWORD)))
    await db.commit()

    logger.info("users_seeded", count=len(SEED_USERS))
    return len(SEED_USERS)


async def seed_spaces(db: AsyncSession) -> int:
    logger.info("seeding_spaces")
    if await _count(db, Space) > 0:
        logger.info("spaces_already_seeded")
        return 0

    for name, location, capacity, description in SEED_SPACES:
        db.add(Space(name=name, location=location, capacity=capacity, description=description))
    await db.commit()

    logger.info("spaces_seeded", count=len(SEED_SPACES))
    return len(SEED_SPACES)


async def seed_reservations(
    store: SqlAlchemyReservationStore,
    policy: BookingPolicy,
    today: date,
) -> int:
    logger.info("seeding_reservations")
    db = store.db
    if await _count(db, Reservation) > 0:
        logger.info("reservations_already_seeded")
        return 0

    space_ids = (await db.execute(select(Space.id).order_by(Space.id))).scalars().all()
    if not space_ids:
        logger.warning("no_spaces_found", message="Cannot seed reservations")
        return 0

    monday = seed_week_start(today)
    seeded = 0
    for space_index, user_email, day_offset, start_hour, end_hour in SEED_RESERVATIONS:
        if space_index >= len(space_ids):
            continue
        day = monday + timedelta(days=day_offset)
        candidate = BookingCandidate(
            space_id=space_ids[space_index],
            user_email=user_email,
            reservation_date=day,
            start_time=datetime(day.year, day.month, day.day, start_hour, tzinfo=timezone.utc),
            end_time=datetime(day.year, day.month, day.day, end_hour, tzinfo=timezone.utc),
        )
        async with store.locked_space(candidate.space_id):
            decision = await policy.evaluate(candidate)
            if not decision.admitted:
                logger.warning(
                    "seed_reservation_skipped",
                    space_id=candidate.space_id,
                    user_email=user_email,
                    reason=decision.reason.value,
                )
                continue
            await store.insert(candidate.to_reservation())
        seeded += 1

    logger.info("reservations_seeded", count=seeded)
    return seeded


async def seed_database(db: AsyncSession, today: Optional[date] = None) -> dict:
    """Run every seeder in order and return how many rows each one added."""
    today = today or today_in(get_settings().BOOKING_TIMEZONE)()
    store = SqlAlchemyReservationStore(db)

    counts = {
        "users": await seed_users(db),
        "spaces": await seed_spaces(db),
        "reservations": await seed_reservations(store, build_policy(store), today),
    }
    logger.info("database_seeded", **counts)
    return counts


async def main() -> None:
    setup_logging()
    logger.info("seeding_started")
    try:
        async with AsyncSessionLocal() as db:
            await seed_database(db)
    except Exception as e:
        logger.error("seeding_failed", error=str(e))
        raise
    finally:
        await engine.dispose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
