"""Shared fixtures for the leaderboard test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core import EventBus
from modules.leaderboard import LeaderboardStore
from web import app as web_app


class TickingClock:
    """Returns strictly increasing UTC timestamps, one millisecond apart."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(milliseconds=1)
        return self.current


@pytest.fixture
def board_path(tmp_path):
    return tmp_path / "data" / "leaderboard.json"


@pytest.fixture
def store(board_path):
    return LeaderboardStore(board_path, clock=TickingClock())


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def core(store, bus):
    installed = web_app.install_core(web_app.build_core(store, event_bus=bus))
    yield installed
    installed.shutdown()


@pytest.fixture
def client(core):
    web_app.app.config["TESTING"] = True
    with web_app.app.test_client() as test_client:
        yield test_client
