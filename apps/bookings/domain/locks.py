"""
Booking Lock Manager

Short-lived exclusive holds over (room, night) cells. This is the
mechanism that keeps two sessions from committing the same room for
overlapping nights.

Rules:
- a hold lasts a fixed TTL (10 minutes by default), no heartbeat
- a hold is dead as soon as ``now > expires_at``, whether or not it was purged
- acquire never waits and never raises on contention, it returns False
- a session acquiring again replaces its own previous hold
- failed acquires leave a short-lived "probe" so other sessions can see
  that someone else is looking at the same rooms (advisory only)

Mutual exclusion is per room: the store's ``guard`` serializes the
check-then-write for the rooms involved, taken in sorted order.
"""

import logging
import threading
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, ContextManager, Dict, Iterable, Iterator, List, Optional, Protocol, Sequence

from shared.domain.exceptions import PersistenceError
from shared.domain.value_objects import Stay

logger = logging.getLogger(__name__)

HOLD = 'hold'
PROBE = 'probe'

DEFAULT_TTL_SECONDS = 600
DEFAULT_EXPIRING_SECONDS = 60
DEFAULT_PROBE_SECONDS = 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LockEntry:
    """One room held (or probed) by one session for a stay."""
    session_id: str
    room_id: str
    stay: Stay
    acquired_at: datetime
    expires_at: datetime
    kind: str = HOLD

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def overlaps(self, room_id: str, stay: Stay) -> bool:
        return self.room_id == room_id and self.stay.overlaps_with(stay)

    def covers(self, room_id: str, stay: Stay) -> bool:
        return (
            self.room_id == room_id
            and self.stay.start_date <= stay.start_date
            and self.stay.end_date >= stay.end_date
        )


@dataclass
class LockStatus:
    session_id: str
    has_lock: bool
    room_ids: List[str]
    stay: Optional[Stay]
    expires_at: Optional[datetime]
    seconds_remaining: int
    is_expiring: bool

    def to_dict(self) -> dict:
        return {
            'session_id': self.session_id,
            'has_lock': self.has_lock,
            'room_ids': self.room_ids,
            'stay': self.stay.to_dict() if self.stay else None,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
            'seconds_remaining': self.seconds_remaining,
            'is_expiring': self.is_expiring,
        }


class LockStore(Protocol):
    """
    Storage for lock entries. Every method may raise PersistenceError.

    ``guard(room_ids)`` must give mutual exclusion per room for the
    duration of the block.
    """

    def guard(self, room_ids: Sequence[str]) -> ContextManager[None]:
        ...

    def overlapping(self, room_ids: Sequence[str], stay: Stay) -> List[LockEntry]:
        ...

    def for_session(self, session_id: str) -> List[LockEntry]:
        ...

    def replace_holds(self, session_id: str, entries: Sequence[LockEntry]) -> None:
        ...

    def add(self, entries: Sequence[LockEntry]) -> None:
        ...

    def release(self, session_id: str) -> int:
        ...

    def purge_expired(self, now: datetime, room_ids: Optional[Sequence[str]] = None) -> int:
        ...


class InMemoryLockStore:
    """
    Process-local store: one ``threading.Lock`` per room for the guard,
    plus a short internal lock protecting the entry list itself.
    """

    def __init__(self):
        self._entries: List[LockEntry] = []
        self._data_lock = threading.Lock()
        self._stripes: Dict[str, threading.Lock] = {}
        self._stripes_lock = threading.Lock()

    def _stripe(self, room_id: str) -> threading.Lock:
        with self._stripes_lock:
            return self._stripes.setdefault(room_id, threading.Lock())

    @contextmanager
    def guard(self, room_ids: Sequence[str]) -> Iterator[None]:
        with ExitStack() as stack:
            for room_id in sorted(set(room_ids)):
                stack.enter_context(self._stripe(room_id))
            yield

    def overlapping(self, room_ids: Sequence[str], stay: Stay) -> List[LockEntry]:
        with self._data_lock:
            return [e for e in self._entries if any(e.overlaps(room_id, stay) for room_id in room_ids)]

    def for_session(self, session_id: str) -> List[LockEntry]:
        with self._data_lock:
            return [e for e in self._entries if e.session_id == session_id]

    def replace_holds(self, session_id: str, entries: Sequence[LockEntry]) -> None:
        with self._data_lock:
            self._entries = [e for e in self._entries if e.session_id != session_id]
            self._entries.extend(entries)

    def add(self, entries: Sequence[LockEntry]) -> None:
        with self._data_lock:
            self._entries.extend(entries)

    def release(self, session_id: str) -> int:
        with self._data_lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if e.session_id != session_id]
            return before - len(self._entries)

    def purge_expired(self, now: datetime, room_ids: Optional[Sequence[str]] = None) -> int:
        with self._data_lock:
            before = len(self._entries)
            self._entries = [
                e for e in self._entries
                if not (e.is_expired(now) and (room_ids is None or e.room_id in room_ids))
            ]
            return before - len(self._entries)


class BookingLockManager:
    """
    Usage:
        locks = BookingLockManager(InMemoryLockStore())
        if locks.acquire(['R1'], stay, session_id):
            ...
        locks.release(session_id)
    """

    def __init__(
        self,
        store: LockStore,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        expiring_seconds: int = DEFAULT_EXPIRING_SECONDS,
        probe_seconds: int = DEFAULT_PROBE_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.ttl = timedelta(seconds=ttl_seconds)
        self.expiring = timedelta(seconds=expiring_seconds)
        self.probe_ttl = timedelta(seconds=probe_seconds)
        self.clock = clock

    def acquire(self, room_ids: Iterable[str], stay: Stay, session_id: str) -> bool:
        rooms = sorted(set(room_ids))
        if not rooms or not session_id:
            return False

        try:
            with self.store.guard(rooms):
                now = self.clock()
                self.store.purge_expired(now, rooms)
                blocking = [
                    entry for entry in self.store.overlapping(rooms, stay)
                    if entry.kind == HOLD and entry.session_id != session_id and not entry.is_expired(now)
                ]
                if blocking:
                    self.store.add([
                        LockEntry(session_id, room_id, stay, now, now + self.probe_ttl, PROBE)
                        for room_id in rooms
                    ])
                    holders = sorted({entry.session_id for entry in blocking})
                    logger.info(f"Lock contention for session {session_id} on {rooms} ({stay}), held by {holders}")
                    return False

                expires_at = now + self.ttl
                self.store.replace_holds(session_id, [
                    LockEntry(session_id, room_id, stay, now, expires_at, HOLD) for room_id in rooms
                ])
        except PersistenceError as exc:
            logger.error(f"Lock store unavailable, refusing lock for session {session_id}: {exc}")
            return False

        logger.info(f"Lock granted to session {session_id} on {rooms} ({stay}) until {expires_at.isoformat()}")
        return True

    def release(self, session_id: str) -> bool:
        try:
            released = self.store.release(session_id)
        except PersistenceError as exc:
            logger.error(f"Could not release locks of session {session_id}: {exc}")
            return False
        if released:
            logger.info(f"Session {session_id} released {released} lock entries")
        return bool(released)

    def _live_holds(self, session_id: str) -> List[LockEntry]:
        now = self.clock()
        try:
            self.store.purge_expired(now)
            entries = self.store.for_session(session_id)
        except PersistenceError as exc:
            logger.error(f"Lock store unavailable while inspecting session {session_id}: {exc}")
            return []
        return [e for e in entries if e.kind == HOLD and not e.is_expired(now)]

    def has_lock(self, session_id: str) -> bool:
        return bool(self._live_holds(session_id))

    def holds_cells(self, session_id: str, room_ids: Iterable[str], stay: Stay) -> bool:
        """True only if an unexpired hold of this session covers every requested cell."""
        holds = self._live_holds(session_id)
        rooms = set(room_ids)
        if not rooms:
            return False
        return all(any(h.covers(room_id, stay) for h in holds) for room_id in rooms)

    def lock_expires_at(self, session_id: str) -> Optional[datetime]:
        holds = self._live_holds(session_id)
        return min((h.expires_at for h in holds), default=None)

    def is_lock_expiring(self, session_id: str) -> bool:
        expires_at = self.lock_expires_at(session_id)
        if expires_at is None:
            return False
        return expires_at - self.clock() < self.expiring

    def other_active_sessions(self, session_id: str, room_ids: Iterable[str], stay: Stay) -> int:
        """Distinct other sessions holding or probing overlapping cells. Advisory only."""
        now = self.clock()
        try:
            entries = self.store.overlapping(sorted(set(room_ids)), stay)
        except PersistenceError:
            return 0
        return len({e.session_id for e in entries if e.session_id != session_id and not e.is_expired(now)})

    def status(self, session_id: str) -> LockStatus:
        holds = self._live_holds(session_id)
        now = self.clock()
        expires_at = min((h.expires_at for h in holds), default=None)
        remaining = max(0, int((expires_at - now).total_seconds())) if expires_at else 0
        return LockStatus(
            session_id=session_id,
            has_lock=bool(holds),
            room_ids=sorted({h.room_id for h in holds}),
            stay=holds[0].stay if holds else None,
            expires_at=expires_at,
            seconds_remaining=remaining,
            is_expiring=bool(expires_at) and expires_at - now < self.expiring,
        )

    def purge_expired(self) -> int:
        return self.store.purge_expired(self.clock())
