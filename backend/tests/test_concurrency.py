"""
Concurrency tests for reservation creation and space deletion.

The in-memory store yields to the event loop on every read and write, so
requests gathered together interleave exactly like overlapping HTTP
requests would.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone

import pytest
from fastapi import HTTPException
from structlog.testing import capture_logs

from space_reservations.booking import BookingPolicy, OverlapConstraintError, Space
from space_reservations.core.config import get_settings
from space_reservations.repositories import InMemoryReservationStore
from space_reservations.schemas.reservation import ReservationCreate
from space_reservations.services.reservation_service import create_reservation
from space_reservations.services.space_service import delete_space

TODAY = date(2030, 1, 7)
ROOM = 1
OTHER_ROOM = 2


class UnlockedStore(InMemoryReservationStore):
    """Store whose per-space lock does nothing."""

    @asynccontextmanager
    async def locked_space(self, space_id: int):
        yield


class RefusingStore(InMemoryReservationStore):
    """Store that always reports an overlap on write, as a stuck constraint would."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.insert_attempts = 0

    async def insert(self, reservation):
        self.insert_attempts += 1
        raise OverlapConstraintError(reservation.space_id)


def spaces() -> list[Space]:
    return [
        Space(id=ROOM, name="Room 1", location="Floor 1", capacity=8),
        Space(id=OTHER_ROOM, name="Room 2", location="Floor 2", capacity=4),
    ]


def policy_for(store: InMemoryReservationStore) -> BookingPolicy:
    return BookingPolicy(store, store, store, today=lambda: TODAY)


def request(start: int, end: int, space_id: int = ROOM) -> ReservationCreate:
    return ReservationCreate(
        space_id=space_id,
        reservation_date=TODAY,
        start_time=datetime(2030, 1, 7, start, tzinfo=timezone.utc),
        end_time=datetime(2030, 1, 7, end, tzinfo=timezone.utc),
    )


async def race(store: InMemoryReservationStore, *attempts: tuple[str, ReservationCreate]):
    policy = policy_for(store)
    return await asyncio.gather(
        *(create_reservation(store, email, data, policy=policy) for email, data in attempts),
        return_exceptions=True,
    )


def split(results):
    admitted = [r for r in results if not isinstance(r, BaseException)]
    rejected = [r for r in results if isinstance(r, BaseException)]
    return admitted, rejected


@pytest.mark.asyncio
async def test_simultaneous_requests_for_same_slot():
    """Exactly one of two overlapping requests wins; the other gets a time conflict."""
    store = InMemoryReservationStore(spaces())

    results = await race(
        store,
        ("alice@example.com", request(10, 12)),
        ("bob@example.com", request(11, 13)),
    )

    admitted, rejected = split(results)
    assert len(admitted) == 1
    assert len(rejected) == 1
    assert isinstance(rejected[0], HTTPException)
    assert rejected[0].status_code == 409
    assert rejected[0].detail["reason"] == "time_conflict"
    assert rejected[0].detail["conflicting_ids"] == [admitted[0].id]
    assert len(store.reservations) == 1


@pytest.mark.asyncio
async def test_many_simultaneous_requests_for_same_slot():
    store = InMemoryReservationStore(spaces())

    results = await race(
        store,
        *((f"user{i}@example.com", request(10, 11)) for i in range(10)),
    )

    admitted, rejected = split(results)
    assert len(admitted) == 1
    assert all(e.status_code == 409 for e in rejected)
    assert len(store.reservations) == 1


@pytest.mark.asyncio
async def test_simultaneous_requests_for_different_spaces():
    store = InMemoryReservationStore(spaces())

    results = await race(
        store,
        ("alice@example.com", request(10, 12, space_id=ROOM)),
        ("bob@example.com", request(10, 12, space_id=OTHER_ROOM)),
    )

    admitted, rejected = split(results)
    assert len(admitted) == 2
    assert rejected == []


@pytest.mark.asyncio
async def test_without_space_lock_both_requests_are_admitted():
    """Shows the race the lock exists for: both evaluations see a free slot."""
    store = UnlockedStore(spaces())

    results = await race(
        store,
        ("alice@example.com", request(10, 12)),
        ("bob@example.com", request(11, 13)),
    )

    admitted, _ = split(results)
    assert len(admitted) == 2


@pytest.mark.asyncio
async def test_overlap_constraint_triggers_reevaluation():
    """Without the lock, the store constraint catches the loser, which is re-evaluated into a conflict."""
    store = UnlockedStore(spaces(), enforce_overlap=True)

    results = await race(
        store,
        ("alice@example.com", request(10, 12)),
        ("bob@example.com", request(11, 13)),
    )

    admitted, rejected = split(results)
    assert len(admitted) == 1
    assert len(rejected) == 1
    assert rejected[0].status_code == 409
    assert rejected[0].detail["reason"] == "time_conflict"
    assert len(store.reservations) == 1
    # One evaluation for the winner, two for the loser
    assert store.queries.count("find_space") == 3


@pytest.mark.asyncio
async def test_retries_are_bounded():
    store = RefusingStore(spaces())

    with pytest.raises(HTTPException) as exc_info:
        await create_reservation(store, "alice@example.com", request(10, 11), policy=policy_for(store))

    assert exc_info.value.status_code == 409
    assert exc_info.value.detail["reason"] == "time_conflict"
    assert store.insert_attempts == get_settings().BOOKING_MAX_RETRY_ATTEMPTS


@pytest.mark.asyncio
@pytest.mark.parametrize("delete_first", [True, False])
async def test_space_deletion_and_reservation_do_not_interleave(delete_first):
    """Either the space goes and the booking finds no space, or the booking lands and deletion is refused."""
    store = InMemoryReservationStore(spaces())
    policy = policy_for(store)

    deletion = delete_space(store, ROOM, policy=policy)
    booking = create_reservation(store, "alice@example.com", request(10, 11), policy=policy)
    operations = (deletion, booking) if delete_first else (booking, deletion)
    results = await asyncio.gather(*operations, return_exceptions=True)
    deleted, booked = (results[0], results[1]) if delete_first else (results[1], results[0])

    # No reservation may outlive its space
    assert all(r.space_id in store.spaces for r in store.reservations.values())

    if delete_first:
        assert deleted is None
        assert ROOM not in store.spaces
        assert isinstance(booked, HTTPException)
        assert booked.status_code == 404
        assert booked.detail["reason"] == "space_not_found"
        assert store.reservations == {}
    else:
        assert booked.space_id == ROOM
        assert isinstance(deleted, HTTPException)
        assert deleted.status_code == 409
        assert deleted.detail["reason"] == "space_has_reservations"
        assert ROOM in store.spaces


@pytest.mark.asyncio
async def test_without_space_lock_deletion_can_orphan_a_reservation():
    """Shows the race the shared lock prevents: both see the space and no reservations."""
    store = UnlockedStore(spaces())
    policy = policy_for(store)

    await asyncio.gather(
        create_reservation(store, "alice@example.com", request(10, 11), policy=policy),
        delete_space(store, ROOM, policy=policy),
        return_exceptions=True,
    )

    assert ROOM not in store.spaces
    assert [r.space_id for r in store.reservations.values()] == [ROOM]


@pytest.mark.asyncio
async def test_created_reservation_logs_its_duration():
    store = InMemoryReservationStore(spaces())

    with capture_logs() as logs:
        await create_reservation(store, "alice@example.com", request(9, 11), policy=policy_for(store))

    created = [entry for entry in logs if entry["event"] == "reservation_created"]
    assert created[0]["duration_minutes"] == 120
