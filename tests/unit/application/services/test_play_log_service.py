"""Unit tests for PlayLogService (dedup-on-write and history reads)."""

from datetime import UTC, datetime, timedelta

import pytest

from onair.application.services import PlayLogService, clamp_limit, collapse_adjacent
from onair.config import PlayLogSettings
from onair.domain.entities import PlayLogEntry
from onair.domain.exceptions import StoreUnavailableError, ValidationError
from onair.domain.value_objects import TrackIdentity
from tests.fakes import FakePlayLogRepository

T0 = datetime(2026, 2, 14, 20, 0, tzinfo=UTC)

X = TrackIdentity.from_raw("Daft Punk - One More Time")
Y = TrackIdentity.from_raw("Moby - Porcelain")


def entry(identity: TrackIdentity, played_at: datetime) -> PlayLogEntry:
    return PlayLogEntry(
        track_key=identity.key,
        artist=identity.artist,
        title=identity.title,
        played_at=played_at,
        raw=identity.raw,
    )


@pytest.fixture
def service(play_log_repository: FakePlayLogRepository) -> PlayLogService:
    return PlayLogService(play_log_repository, PlayLogSettings())


class TestClampLimit:
    """Test limit coercion."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("50", 30),
            (50, 30),
            ("abc", 12),
            ("", 12),
            (None, 12),
            ("nan", 12),
            ("inf", 12),
            (0, 1),
            (-5, 1),
            ("7.9", 7),
            (" 5 ", 5),
        ],
    )
    def test_clamp(self, value: object, expected: int) -> None:
        assert clamp_limit(value) == expected

    def test_service_uses_configured_bounds(self, play_log_repository) -> None:
        service = PlayLogService(
            play_log_repository, PlayLogSettings(default_limit=5, max_limit=10)
        )
        assert service.clamp(None) == 5
        assert service.clamp("99") == 10


class TestMaybeLogPlay:
    """Test the consecutive-duplicate suppression."""

    async def test_sequence_x_x_y_x_inserts_three(
        self, service: PlayLogService, play_log_repository
    ) -> None:
        results = []
        for offset, identity in enumerate([X, X, Y, X]):
            results.append(
                await service.maybe_log_play(identity, T0 + timedelta(minutes=offset))
            )

        assert results == [True, False, True, True]
        assert [e.track_key for e in play_log_repository.appended] == [X.key, Y.key, X.key]

    async def test_key_comparison_ignores_surface_formatting(
        self, service: PlayLogService, play_log_repository
    ) -> None:
        await service.maybe_log_play(X, T0)
        again = TrackIdentity.from_raw("DAFT PUNK  -  one more time")

        assert await service.maybe_log_play(again, T0 + timedelta(minutes=1)) is False
        assert len(play_log_repository.appended) == 1

    async def test_entry_fields(self, service: PlayLogService, play_log_repository) -> None:
        await service.maybe_log_play(TrackIdentity.from_raw("undefined - Moby - Porcelain"), T0)

        logged = play_log_repository.appended[0]
        assert logged.artist == "Moby"
        assert logged.title == "Porcelain"
        assert logged.raw == "Moby - Porcelain"
        assert logged.played_at == T0

    async def test_empty_identity_is_not_logged(self, service: PlayLogService) -> None:
        assert await service.maybe_log_play(TrackIdentity.from_raw("")) is False

    async def test_naive_timestamp_rejected(self, service: PlayLogService) -> None:
        with pytest.raises(ValidationError):
            await service.maybe_log_play(X, datetime(2026, 2, 14, 20, 0))

    async def test_store_failure_propagates(
        self, service: PlayLogService, play_log_repository
    ) -> None:
        play_log_repository.down = True
        with pytest.raises(StoreUnavailableError):
            await service.maybe_log_play(X, T0)


class TestHistory:
    """Test history reads."""

    async def test_newest_first(self, service: PlayLogService, play_log_repository) -> None:
        play_log_repository.entries = [entry(X, T0), entry(Y, T0 + timedelta(minutes=4))]

        history = await service.history(10, now=T0 + timedelta(hours=1))
        assert [e.track_key for e in history] == [Y.key, X.key]

    async def test_limit_is_clamped_to_thirty(
        self, service: PlayLogService, play_log_repository
    ) -> None:
        play_log_repository.entries = [
            entry(X if i % 2 else Y, T0 + timedelta(minutes=4 * i)) for i in range(40)
        ]

        history = await service.history("50", now=T0 + timedelta(days=1))
        assert len(history) == 30

    async def test_adjacent_duplicates_collapsed(
        self, service: PlayLogService, play_log_repository
    ) -> None:
        # two racing writers both inserted Y
        play_log_repository.entries = [
            entry(X, T0),
            entry(Y, T0 + timedelta(minutes=4)),
            entry(Y, T0 + timedelta(minutes=4, seconds=1)),
        ]

        history = await service.history(10, now=T0 + timedelta(hours=1))
        assert [e.track_key for e in history] == [Y.key, X.key]

    async def test_current_track_hidden_inside_window(
        self, service: PlayLogService, play_log_repository
    ) -> None:
        play_log_repository.entries = [entry(Y, T0), entry(X, T0 + timedelta(minutes=4))]
        now = T0 + timedelta(minutes=5)

        history = await service.history(10, exclude=X, now=now)
        assert [e.track_key for e in history] == [Y.key]

    async def test_current_track_shown_outside_window(
        self, service: PlayLogService, play_log_repository
    ) -> None:
        play_log_repository.entries = [entry(Y, T0), entry(X, T0 + timedelta(minutes=4))]
        now = T0 + timedelta(minutes=10)

        history = await service.history(10, exclude=X, now=now)
        assert [e.track_key for e in history] == [X.key, Y.key]


def test_collapse_adjacent_keeps_recurring_tracks() -> None:
    entries = [entry(X, T0), entry(Y, T0), entry(X, T0), entry(X, T0)]
    assert [e.track_key for e in collapse_adjacent(entries)] == [X.key, Y.key, X.key]
