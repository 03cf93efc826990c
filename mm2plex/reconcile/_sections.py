# /mm2plex/reconcile/_sections.py
from __future__ import annotations

from collections.abc import Iterable, Sequence

from ._types import LibraryClient, RemoteSection
from .._logging import log as _root_log
from ..errors import IndexingError, RemoteError

log = _root_log.child("library")


def filter_sections(sections: Iterable[RemoteSection], allow: Iterable[str] | None = None) -> list[RemoteSection]:
    """Sections whose title is in ``allow``, in server order; all of them when ``allow`` is empty."""
    wanted = [str(t) for t in (allow or []) if str(t).strip()]
    out = [s for s in sections if s is not None]
    if not wanted:
        return out
    return [s for s in out if s.title in wanted]


def load_sections(client: LibraryClient, allow: Sequence[str] | None = None) -> list[RemoteSection]:
    log.info("Checking Plex Library...")
    try:
        found = list(client.list_sections())
    except RemoteError as e:
        raise IndexingError(f"Listing library sections failed: {e}") from e
    log.info(f"Found {len(found)} sections.")
    picked = filter_sections(found, allow)
    log.info(f"Filtered to {len(picked)} sections: " + ", ".join(s.title for s in picked))
    return picked
