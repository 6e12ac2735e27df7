from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

TEST_PASSWORD = "test-password"


class SteppingClock:
    """Deterministic clock: each call is one second after the previous one."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> SteppingClock:
    return SteppingClock(fixed_now)


@pytest.fixture
def valid_payload() -> dict:
    return {
        "name": "Ram Gopal",
        "gender": "Male",
        "mobile": "9990001111",
        "dob": "1990-01-01",
        "birthTime": "10:30",
        "dot": "2024-05-01",
    }


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.client_records.client_records.main import create_app

    app = create_app({"CLIENTS_FILE": str(tmp_path / "data" / "clients.json"), "TESTING": True})
    return app


@pytest.fixture
def http(app):
    return app.test_client()


@pytest.fixture
def logged_in(http):
    res = http.post("/login", json={"password": TEST_PASSWORD})
    assert res.get_json()["success"] is True
    return http
