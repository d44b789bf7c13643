"""Updates to the children of ways and relations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

# Update timestamps on or after this moment are commit times; earlier ones
# are element timestamps.
COMMIT_INFO_START = datetime(2012, 9, 12, 9, 30, 3, tzinfo=timezone.utc)

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass
class Update:
    """A change to the child at ``index`` of a way or relation."""

    index: int = 0
    version: int = 0
    timestamp: datetime = ZERO_TIME
    changeset_id: int = 0
    lat: float = 0.0
    lon: float = 0.0
    reverse: bool = False


class UpdateIndexOutOfRangeError(IndexError):
    """Raised when an update refers to a child index that does not exist."""

    def __init__(self, index: int) -> None:
        super().__init__(f"osm: index {index} is out of range")
        self.index = index


class Updates(list[Update]):
    """A collection of updates."""

    def up_to(self, t: datetime) -> Updates:
        """Return the updates taking place up to and including ``t``."""
        return Updates(u for u in self if u.timestamp <= t)

    def sort_by_timestamp(self) -> None:
        """Sort in place by timestamp, ascending."""
        self.sort(key=lambda u: u.timestamp)

    def sort_by_index(self) -> None:
        """Sort in place by index, then timestamp, ascending."""
        self.sort(key=lambda u: (u.index, u.timestamp))