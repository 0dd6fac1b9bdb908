from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conference_schedule.errors import PersistenceFailure
from conference_schedule.models import Session

# Tuesday
BASE = datetime(2024, 11, 12, 3, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class MemoryStorage:
    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data = dict(data or {})
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise PersistenceFailure("read failed")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceFailure("write failed")
        self.data[key] = value


@pytest.fixture
def make_session():
    def _make(session_id, start: datetime = BASE, minutes: int = 30, **fields) -> Session:
        data = {
            "id": session_id,
            "title": f"Talk {session_id}",
            "description": "",
            "slot_start": start.isoformat(),
            "slot_end": (start + timedelta(minutes=minutes)).isoformat(),
        }
        data.update(fields)
        return Session.model_validate(data)

    return _make


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()
