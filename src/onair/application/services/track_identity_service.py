"""Track identity resolution: TrackIdentity -> TrackRecord in the item store."""

import logging

from onair.domain.entities import TrackRecord
from onair.domain.ports import ITrackRepository
from onair.domain.value_objects import TrackIdentity

logger = logging.getLogger(__name__)


class TrackIdentityService:
    """Look up or create the store record for a track key."""

    def __init__(self, track_repository: ITrackRepository) -> None:
        self.tracks = track_repository

    # Hey future me - existing records are returned AS-IS. We never rewrite artist/title on a
    # record that already exists, even if the feed now spells it differently: same key means
    # same track, and operators fix spelling by hand in the CMS. Overwriting would undo that.
    async def resolve(self, identity: TrackIdentity) -> TrackRecord | None:
        """Return the record for this identity, creating it if needed.

        Returns:
            TrackRecord, or None when nothing should be persisted (empty artist)

        Raises:
            StoreUnavailableError: Store unreachable (caller degrades)
        """
        record = await self.tracks.get_by_key(identity.key)
        if record is not None:
            return record

        if not identity.artist:
            return None

        record = await self.tracks.create(identity.key, identity.artist, identity.title)
        logger.info("Created track record %s for %r", record.id, identity.key)
        return record
