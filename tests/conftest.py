"""Shared fixtures."""

import pytest

from onair.application.cache import CoverCache
from tests.fakes import (
    FakeArtworkSearch,
    FakeClock,
    FakePlayLogRepository,
    FakeStatusClient,
    FakeTrackRepository,
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cover_cache(clock: FakeClock) -> CoverCache:
    return CoverCache(ttl_seconds=600, negative_ttl_seconds=300, clock=clock)


@pytest.fixture
def track_repository() -> FakeTrackRepository:
    return FakeTrackRepository()


@pytest.fixture
def play_log_repository() -> FakePlayLogRepository:
    return FakePlayLogRepository()


@pytest.fixture
def artwork_search() -> FakeArtworkSearch:
    return FakeArtworkSearch()


@pytest.fixture
def status_client() -> FakeStatusClient:
    return FakeStatusClient()
