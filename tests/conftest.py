"""
Shared fixtures: a fixed clock and an in-memory store.

Every test runs at 2025-06-12 09:30 in America/Chicago unless it moves the
clock itself.
"""
from datetime import datetime

import pytest

from factories import CHICAGO, FixedClock
from slotbook.services.memory_store import InMemoryStore


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 12, 9, 30, 15, tzinfo=CHICAGO)


@pytest.fixture
def clock(now) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()
