from __future__ import annotations

import json
import threading
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from ..common.datetime_utils import now_utc
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone

SWEEP_INTERVAL = timedelta(minutes=5)


class SessionStore(Protocol):
    """Server-side session records keyed by session id."""

    def load(self, sid: str) -> Optional[dict]:
        """Return the stored data, or None if unknown or expired."""

        raise NotImplementedError

    def save(self, sid: str, data: dict, *, expires_at: datetime) -> None:
        raise NotImplementedError

    def delete(self, sid: str) -> None:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Process-local store. Sessions vanish on restart."""

    def __init__(self, *, clock=now_utc, sweep_interval: timedelta = SWEEP_INTERVAL):
        self._items: dict[str, tuple[dict, datetime]] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep: Optional[datetime] = None

    def _sweep(self, now: datetime) -> None:
        # Caller holds the lock. Runs at most once per sweep interval.
        if self._next_sweep is not None and now < self._next_sweep:
            return
        expired = [sid for sid, (_, expires_at) in self._items.items() if expires_at <= now]
        for sid in expired:
            del self._items[sid]
        self._next_sweep = now + self._sweep_interval

    def load(self, sid: str) -> Optional[dict]:
        with self._lock:
            item = self._items.get(sid)
            if item is None:
                return None
            data, expires_at = item
            if expires_at <= self._clock():
                del self._items[sid]
                return None
            return dict(data)

    def save(self, sid: str, data: dict, *, expires_at: datetime) -> None:
        with self._lock:
            self._sweep(self._clock())
            self._items[sid] = (dict(data), expires_at)

    def delete(self, sid: str) -> None:
        with self._lock:
            self._items.pop(sid, None)

    def __len__(self) -> int:
        return len(self._items)


class MySQLSessionStore(SessionStore):
    """Sessions table store; survives restarts and works across processes."""

    def __init__(self, conn_factory: DatabaseConnection, *, clock=now_utc, sweep_interval: timedelta = SWEEP_INTERVAL):
        self._conn_factory = conn_factory
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep: Optional[datetime] = None
        self._sweep_lock = threading.Lock()

    def _sweep_due(self, now: datetime) -> bool:
        with self._sweep_lock:
            if self._next_sweep is not None and now < self._next_sweep:
                return False
            self._next_sweep = now + self._sweep_interval
            return True

    @staticmethod
    def _naive_utc(value: datetime) -> datetime:
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def load(self, sid: str) -> Optional[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT data FROM sessions WHERE sid=%s AND expires_at > %s",
                (sid, self._naive_utc(self._clock())),
            )
            row = fetchone(cur)
            if not row:
                return None
            return json.loads(row["data"])

    def save(self, sid: str, data: dict, *, expires_at: datetime) -> None:
        now = self._clock()
        with db_cursor(self._conn_factory) as (_, cur):
            if self._sweep_due(now):
                cur.execute("DELETE FROM sessions WHERE expires_at <= %s", (self._naive_utc(now),))
            cur.execute(
                """
                INSERT INTO sessions(sid, data, expires_at)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE data=VALUES(data), expires_at=VALUES(expires_at)
                """,
                (sid, json.dumps(data), self._naive_utc(expires_at)),
            )

    def delete(self, sid: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE sid=%s", (sid,))
