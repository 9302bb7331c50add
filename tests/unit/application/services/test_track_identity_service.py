"""Unit tests for TrackIdentityService."""

import pytest

from onair.application.services import TrackIdentityService
from onair.domain.entities import TrackRecord
from onair.domain.exceptions import StoreUnavailableError
from onair.domain.value_objects import TrackIdentity
from tests.fakes import FakeTrackRepository


class TestResolve:
    """Test lookup-or-create."""

    async def test_creates_missing_record(self, track_repository: FakeTrackRepository) -> None:
        service = TrackIdentityService(track_repository)
        identity = TrackIdentity.from_raw("Moby - Porcelain")

        record = await service.resolve(identity)

        assert record is not None
        assert record.track_key == "moby - porcelain"
        assert record.artist == "Moby"
        assert record.title == "Porcelain"
        assert not record.cover_locked
        assert not record.cover_override
        assert track_repository.created == ["moby - porcelain"]

    async def test_existing_record_is_not_rewritten(self) -> None:
        existing = TrackRecord(
            id=3, track_key="moby - porcelain", artist="Moby", title="Porcelain"
        )
        repo = FakeTrackRepository([existing])
        service = TrackIdentityService(repo)

        record = await service.resolve(TrackIdentity.from_raw("MOBY - porcelain"))

        assert record is existing
        assert record.artist == "Moby"
        assert repo.created == []

    async def test_resolving_twice_creates_once(
        self, track_repository: FakeTrackRepository
    ) -> None:
        service = TrackIdentityService(track_repository)
        identity = TrackIdentity.from_raw("Moby - Porcelain")

        first = await service.resolve(identity)
        second = await service.resolve(identity)

        assert first is second
        assert len(track_repository.created) == 1

    async def test_empty_artist_is_not_persisted(
        self, track_repository: FakeTrackRepository
    ) -> None:
        service = TrackIdentityService(track_repository)

        assert await service.resolve(TrackIdentity(artist="", title="Porcelain")) is None
        assert track_repository.created == []

    async def test_store_down_raises(self, track_repository: FakeTrackRepository) -> None:
        track_repository.down = True
        service = TrackIdentityService(track_repository)

        with pytest.raises(StoreUnavailableError):
            await service.resolve(TrackIdentity.from_raw("Moby - Porcelain"))
