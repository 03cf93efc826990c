# /mm2plex/reconcile/_verify.py
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from ._types import CollectionRecord, EpisodeRecord
from .._logging import log as _root_log
from ..errors import SeriesMatchError

if TYPE_CHECKING:
    from ._tv import SeriesIndex

log = _root_log.child("tv")


def local_series_names(records: Iterable[CollectionRecord]) -> list[str]:
    seen: dict[str, None] = {}
    for rec in records:
        if isinstance(rec, EpisodeRecord):
            seen.setdefault(rec.series, None)
    return list(seen)


def verify_series(
    records: Iterable[CollectionRecord],
    index: "SeriesIndex",
    *,
    unresolved_aliases: Sequence[str] = (),
) -> None:
    """Every local series name must be in the index before anything is marked."""
    log.info("Checking that Plex TV Series names match...")
    unmatched = [name for name in local_series_names(records) if name not in index]
    if unmatched:
        log.error(f"{len(unmatched)} TV Series not matched.")
        raise SeriesMatchError(unmatched, index.known(), unresolved_aliases=unresolved_aliases)
    log.success("All good!")
