"""Unit tests for reservation holds."""

import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from datetime import date

import pytest

from apps.bookings.domain.locks import PROBE, BookingLockManager, InMemoryLockStore
from shared.domain.exceptions import PersistenceError
from shared.domain.value_objects import Stay

JUNE_1_3 = Stay(date(2025, 6, 1), date(2025, 6, 3))
JUNE_2_4 = Stay(date(2025, 6, 2), date(2025, 6, 4))


@pytest.fixture
def store():
    return InMemoryLockStore()


@pytest.fixture
def locks(store, clock):
    return BookingLockManager(store, ttl_seconds=600, expiring_seconds=60, probe_seconds=60, clock=clock)


def test_second_session_is_refused_until_the_hold_expires(locks, clock):
    assert locks.acquire(["R1"], JUNE_1_3, "session-a") is True
    assert locks.acquire(["R1"], JUNE_2_4, "session-b") is False

    clock.advance(600)
    assert locks.acquire(["R1"], JUNE_2_4, "session-b") is False

    clock.advance(1)
    assert locks.acquire(["R1"], JUNE_2_4, "session-b") is True
    assert locks.has_lock("session-a") is False


def test_non_overlapping_requests_do_not_contend(locks):
    assert locks.acquire(["R1"], JUNE_1_3, "session-a")
    assert locks.acquire(["R1"], Stay(date(2025, 6, 3), date(2025, 6, 5)), "session-b")
    assert locks.acquire(["R2"], JUNE_1_3, "session-c")


def test_concurrent_acquires_grant_one_hold():
    locks = BookingLockManager(InMemoryLockStore())
    workers = 16
    barrier = threading.Barrier(workers)

    def attempt(n):
        barrier.wait()
        return locks.acquire(["R1", "R2"], JUNE_1_3, f"session-{n}")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(attempt, range(workers)))

    assert results.count(True) == 1


def test_concurrent_acquires_on_different_rooms_all_succeed():
    locks = BookingLockManager(InMemoryLockStore())

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda n: locks.acquire([f"R{n}"], JUNE_1_3, f"session-{n}"), range(8)))

    assert all(results)


def test_reacquire_replaces_the_previous_hold(locks):
    locks.acquire(["R1"], JUNE_1_3, "session-a")

    assert locks.acquire(["R2"], JUNE_1_3, "session-a")

    assert locks.status("session-a").room_ids == ["R2"]
    assert locks.acquire(["R1"], JUNE_1_3, "session-b")


def test_release(locks):
    locks.acquire(["R1"], JUNE_1_3, "session-a")

    assert locks.release("session-a") is True
    assert locks.release("session-a") is False
    assert locks.acquire(["R1"], JUNE_1_3, "session-b")


def test_failed_acquire_leaves_an_advisory_probe(locks, store):
    locks.acquire(["R1"], JUNE_1_3, "session-a")
    locks.acquire(["R1"], JUNE_2_4, "session-b")

    assert locks.other_active_sessions("session-a", ["R1"], JUNE_1_3) == 1
    assert [e.kind for e in store.for_session("session-b")] == [PROBE]
    assert locks.has_lock("session-b") is False

    locks.release("session-a")
    assert locks.acquire(["R1"], JUNE_1_3, "session-c") is True


def test_probes_expire(locks, clock):
    locks.acquire(["R1"], JUNE_1_3, "session-a")
    locks.acquire(["R1"], JUNE_1_3, "session-b")

    clock.advance(61)

    assert locks.other_active_sessions("session-a", ["R1"], JUNE_1_3) == 0


def test_hold_must_cover_every_requested_cell(locks):
    locks.acquire(["R1", "R2"], JUNE_1_3, "session-a")

    assert locks.holds_cells("session-a", ["R1", "R2"], JUNE_1_3)
    assert locks.holds_cells("session-a", ["R1"], Stay(date(2025, 6, 1), date(2025, 6, 2)))
    assert not locks.holds_cells("session-a", ["R1", "R3"], JUNE_1_3)
    assert not locks.holds_cells("session-a", ["R1"], JUNE_2_4)
    assert not locks.holds_cells("session-a", [], JUNE_1_3)


def test_expiry_information(locks, clock):
    locks.acquire(["R1"], JUNE_1_3, "session-a")
    assert locks.lock_expires_at("session-a") == clock.now + locks.ttl
    assert not locks.is_lock_expiring("session-a")

    clock.advance(541)

    status = locks.status("session-a")
    assert status.has_lock
    assert status.seconds_remaining == 59
    assert status.is_expiring
    assert locks.is_lock_expiring("session-a")


def test_status_without_hold(locks):
    status = locks.status("nobody")

    assert status.has_lock is False
    assert status.to_dict()["expires_at"] is None
    assert locks.is_lock_expiring("nobody") is False


def test_empty_requests_are_refused(locks):
    assert locks.acquire([], JUNE_1_3, "session-a") is False
    assert locks.acquire(["R1"], JUNE_1_3, "") is False


def test_purge_expired(locks, store, clock):
    locks.acquire(["R1"], JUNE_1_3, "session-a")
    clock.advance(601)

    assert locks.purge_expired() == 1
    assert store.for_session("session-a") == []


class BrokenStore(InMemoryLockStore):
    @contextmanager
    def guard(self, room_ids):
        raise PersistenceError("lock store down")
        yield

    def release(self, session_id):
        raise PersistenceError("lock store down")


def test_store_failure_refuses_the_hold():
    locks = BookingLockManager(BrokenStore())

    assert locks.acquire(["R1"], JUNE_1_3, "session-a") is False
    assert locks.release("session-a") is False
