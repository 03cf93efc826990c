# /mm2plex/errors.py
# mm2plex - error taxonomy shared by the engine, the Plex client and the CLI.
from __future__ import annotations

from typing import Iterable, Sequence

__all__ = [
    "SyncError",
    "ConfigError",
    "CollectionError",
    "RemoteError",
    "IndexingError",
    "SeriesMatchError",
]


class SyncError(RuntimeError):
    pass


class ConfigError(SyncError):
    """Missing or contradictory run configuration, raised before any work starts."""


class CollectionError(SyncError):
    pass


class RemoteError(SyncError):
    """A single remote call failed (transport, auth, not found)."""


class IndexingError(SyncError):
    """Listing sections or walking the series tree failed; nothing was applied."""


class SeriesMatchError(SyncError):
    """Local series names that resolve neither directly nor through an alias.

    ``known`` holds every remote series as ``(title, key)`` so the caller can
    write the missing alias entries in one pass.
    """

    def __init__(
        self,
        unmatched: Sequence[str],
        known: Iterable[tuple[str, str]],
        *,
        unresolved_aliases: Sequence[str] = (),
    ):
        self.unmatched = list(unmatched)
        self.known = list(known)
        self.unresolved_aliases = list(unresolved_aliases)
        super().__init__(f"Could not match all series! ({len(self.unmatched)} unmatched)")
