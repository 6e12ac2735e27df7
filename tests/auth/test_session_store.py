from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.client_records.client_records.auth.session_interface import ServerSideSession
from src.client_records.client_records.auth.session_store import InMemorySessionStore, MySQLSessionStore

NOW = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


class MovableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def test_saved_session_loads_until_it_expires():
    clock = MovableClock(NOW)
    store = InMemorySessionStore(clock=clock)
    store.save("sid-1", {"is_authenticated": True}, expires_at=NOW + timedelta(hours=24))

    clock.now = NOW + timedelta(hours=23, minutes=59)
    assert store.load("sid-1") == {"is_authenticated": True}

    clock.now = NOW + timedelta(hours=24)
    assert store.load("sid-1") is None
    assert len(store) == 0


def test_delete_and_unknown_sid():
    store = InMemorySessionStore(clock=MovableClock(NOW))
    store.save("sid-1", {"a": 1}, expires_at=NOW + timedelta(hours=1))

    store.delete("sid-1")
    store.delete("never-existed")

    assert store.load("sid-1") is None


def test_loaded_data_is_a_copy():
    store = InMemorySessionStore(clock=MovableClock(NOW))
    store.save("sid-1", {"a": 1}, expires_at=NOW + timedelta(hours=1))

    store.load("sid-1")["a"] = 2

    assert store.load("sid-1") == {"a": 1}


def test_regenerate_remembers_previous_id():
    sess = ServerSideSession({"a": 1}, sid="old")

    sess.regenerate()

    assert sess.sid != "old"
    assert sess.rotated_from == "old"
    assert sess.modified is True


def test_regenerate_on_new_session_has_nothing_to_drop():
    sess = ServerSideSession(sid="fresh", new=True)

    sess.regenerate()

    assert sess.rotated_from is None


def test_abandoned_sessions_are_dropped_on_a_later_save():
    clock = MovableClock(NOW)
    store = InMemorySessionStore(clock=clock)
    for i in range(10):
        store.save(f"sid-{i}", {"a": i}, expires_at=NOW + timedelta(hours=24))

    clock.now = NOW + timedelta(days=30)
    store.save("fresh", {"a": 1}, expires_at=clock.now + timedelta(hours=24))

    assert len(store) == 1
    assert store.load("fresh") == {"a": 1}


def test_sweep_does_not_drop_live_sessions():
    clock = MovableClock(NOW)
    store = InMemorySessionStore(clock=clock, sweep_interval=timedelta(0))
    store.save("short", {}, expires_at=NOW + timedelta(minutes=1))
    store.save("long", {}, expires_at=NOW + timedelta(hours=24))

    clock.now = NOW + timedelta(minutes=2)
    store.save("other", {}, expires_at=clock.now + timedelta(hours=24))

    assert len(store) == 2
    assert store.load("long") == {}


class RecordingCursor:
    def __init__(self, executed):
        self._executed = executed
        self.rowcount = 0

    def execute(self, sql, params=None):
        self._executed.append((" ".join(sql.split()), params))

    def close(self):
        pass


class RecordingConnection:
    def __init__(self):
        self.executed = []

    def cursor(self, dictionary=True):
        return RecordingCursor(self.executed)

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


class RecordingFactory:
    def __init__(self):
        self.conn = RecordingConnection()

    def connect(self):
        return self.conn


def test_mysql_store_deletes_expired_rows_once_per_interval():
    clock = MovableClock(NOW)
    factory = RecordingFactory()
    store = MySQLSessionStore(factory, clock=clock, sweep_interval=timedelta(minutes=5))

    store.save("a", {"x": 1}, expires_at=NOW + timedelta(hours=24))
    store.save("b", {"x": 2}, expires_at=NOW + timedelta(hours=24))
    clock.now = NOW + timedelta(minutes=6)
    store.save("c", {"x": 3}, expires_at=clock.now + timedelta(hours=24))

    sweeps = [params for sql, params in factory.conn.executed if sql.startswith("DELETE FROM sessions")]
    assert sweeps == [(NOW.replace(tzinfo=None),), ((NOW + timedelta(minutes=6)).replace(tzinfo=None),)]
    inserts = [params[0] for sql, params in factory.conn.executed if sql.startswith("INSERT INTO sessions")]
    assert inserts == ["a", "b", "c"]
