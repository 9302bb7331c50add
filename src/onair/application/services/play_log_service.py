"""Play log: dedup-on-write and history reads.

Hey future me - the dedup contract is "no two CONSECUTIVE entries with the same key", not
"each track once". A track can come back after others played, that's a legit new play.

It is check-then-insert with NO transaction: two serverless invocations polling at the same
moment can both read "last = X", both see Y, both insert Y. We accept that - closing the race
needs a conditional write the store doesn't have, and a doubled row is harmless because
history() collapses adjacent duplicates on the way out.
"""

import logging
from datetime import UTC, datetime, timedelta

from onair.config.settings import PlayLogSettings
from onair.domain.entities import PlayLogEntry
from onair.domain.exceptions import ValidationError
from onair.domain.ports import IPlayLogRepository
from onair.domain.value_objects import TrackIdentity

logger = logging.getLogger(__name__)


def clamp_limit(
    value: object, default: int = 12, minimum: int = 1, maximum: int = 30
) -> int:
    """Coerce a caller-supplied limit into [minimum, maximum].

    Garbage ("abc", None, "", NaN) falls back to the default instead of being rejected.

    Examples:
        >>> clamp_limit("50")
        30
        >>> clamp_limit("abc")
        12
        >>> clamp_limit(0)
        1
    """
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        number = float(default)
    if number != number or number in (float("inf"), float("-inf")):  # NaN / inf
        number = float(default)
    return max(minimum, min(maximum, int(number)))


def collapse_adjacent(entries: list[PlayLogEntry]) -> list[PlayLogEntry]:
    """Drop entries whose key equals the key of the entry right before them."""
    collapsed: list[PlayLogEntry] = []
    for entry in entries:
        if collapsed and collapsed[-1].track_key == entry.track_key:
            continue
        collapsed.append(entry)
    return collapsed


class PlayLogService:
    """Append-only play history with consecutive-duplicate suppression."""

    def __init__(
        self,
        play_log_repository: IPlayLogRepository,
        settings: PlayLogSettings | None = None,
    ) -> None:
        self.plays = play_log_repository
        self.settings = settings or PlayLogSettings()

    async def last_entry(self) -> PlayLogEntry | None:
        """Most recent play, or None for an empty log."""
        entries = await self.plays.latest(limit=1)
        return entries[0] if entries else None

    async def maybe_log_play(
        self, identity: TrackIdentity, played_at: datetime | None = None
    ) -> bool:
        """Append a play unless the latest entry has the same key.

        Args:
            identity: What is playing now
            played_at: Aware datetime, defaults to now (UTC)

        Returns:
            True if a row was inserted

        Raises:
            ValidationError: played_at is naive
            StoreUnavailableError: read or write failed
        """
        if identity.is_empty:
            return False

        if played_at is None:
            played_at = datetime.now(UTC)
        elif played_at.tzinfo is None:
            raise ValidationError("played_at must be timezone-aware")

        last = await self.last_entry()
        if last is not None and last.track_key == identity.key:
            return False

        await self.plays.append(
            PlayLogEntry(
                track_key=identity.key,
                artist=identity.artist,
                title=identity.title,
                played_at=played_at.astimezone(UTC),
                raw=identity.raw,
            )
        )
        logger.info("Logged play %r", identity.key)
        return True

    async def history(
        self,
        limit: object = None,
        exclude: TrackIdentity | None = None,
        now: datetime | None = None,
    ) -> list[PlayLogEntry]:
        """Recent plays, newest first.

        Args:
            limit: Clamped to [1, max_limit]; garbage -> default_limit
            exclude: Current track - its entry is hidden while it is "fresh"
                (played within exclude_window_seconds) so it isn't shown twice
            now: Reference time for the window, defaults to now (UTC)

        Raises:
            StoreUnavailableError: read failed
        """
        size = self.clamp(limit)
        entries = await self.recent(size)
        return self.select_history(entries, size, exclude=exclude, now=now)

    def clamp(self, limit: object) -> int:
        """clamp_limit() with this service's configured bounds."""
        return clamp_limit(
            self.settings.default_limit if limit is None else limit,
            default=self.settings.default_limit,
            maximum=self.settings.max_limit,
        )

    async def recent(self, size: int) -> list[PlayLogEntry]:
        """Newest entries with adjacent duplicates collapsed.

        Over-fetches a little: the excluded current entry and collapsed dupes eat slots.
        """
        return collapse_adjacent(await self.plays.latest(limit=size + 2))

    def select_history(
        self,
        entries: list[PlayLogEntry],
        size: int,
        exclude: TrackIdentity | None = None,
        now: datetime | None = None,
    ) -> list[PlayLogEntry]:
        """Apply the current-track exclusion window and cut to size."""
        now = now or datetime.now(UTC)
        window = timedelta(seconds=self.settings.exclude_window_seconds)

        if exclude is not None and not exclude.is_empty:
            entries = [
                entry
                for entry in entries
                if not (entry.track_key == exclude.key and abs(now - entry.played_at) <= window)
            ]

        return entries[:size]
