# /mm2plex/reconcile/_applier.py
from __future__ import annotations

from ._types import LibraryClient
from .._logging import log as _root_log
from ..errors import RemoteError

log = _root_log.child("apply")


class StateApplier:
    """Issues one mark-watched or mark-unwatched call per matched record."""

    def __init__(self, client: LibraryClient, *, dry_run: bool = False):
        self.client = client
        self.dry_run = bool(dry_run)
        self.calls = 0

    def apply(self, remote_id: str, watched: bool) -> bool:
        if self.dry_run:
            log.debug(f"pretend: #{remote_id} -> {'watched' if watched else 'unwatched'}")
            return True
        self.calls += 1
        try:
            if watched:
                self.client.mark_watched(remote_id)
            else:
                self.client.mark_unwatched(remote_id)
        except RemoteError as e:
            log.error(f"marking #{remote_id} {'watched' if watched else 'unwatched'} failed: {e}")
            return False
        return True
