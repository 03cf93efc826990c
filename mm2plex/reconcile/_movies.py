# /mm2plex/reconcile/_movies.py
# Movie matching by external id, first section with a hit wins.
from __future__ import annotations

from collections.abc import Sequence

from ._types import (
    CollectionRecord,
    LibraryClient,
    Match,
    MatchOutcome,
    MovieRecord,
    RemoteSection,
)
from .._logging import GREEN, YELLOW, colorize, log as _root_log
from ..errors import RemoteError

log = _root_log.child("movies")


class MovieMatcher:
    kind = "movies"

    def __init__(self, client: LibraryClient):
        self.client = client
        self.sections: list[RemoteSection] = []

    def prepare(self, sections: Sequence[RemoteSection], records: Sequence[CollectionRecord]) -> None:
        self.sections = list(sections)

    def match(self, record: CollectionRecord) -> Match:
        if not isinstance(record, MovieRecord):
            raise TypeError(f"MovieMatcher cannot match {type(record).__name__}")

        if not record.external_id:
            log.warn(colorize("✖ no IMDB", YELLOW, on=log.use_color), record.title)
            return Match.failed(MatchOutcome.NO_EXTERNAL_ID)

        errors: list[str] = []
        for section in self.sections:
            try:
                hits = self.client.find_by_external_id(section.key, record.external_id)
            except RemoteError as e:
                log.error(f"lookup failed in {section.title!r} for {record.label()}: {e}")
                errors.append(str(e))
                continue
            if hits:
                hit = hits[0]
                log.info(colorize(f"✔ #{hit.rating_key}", GREEN, on=log.use_color), record.title)
                return Match.matched(hit.rating_key)

        log.warn(colorize("✖ no matches", YELLOW, on=log.use_color), record.title)
        return Match.failed(MatchOutcome.NO_REMOTE_MATCH, detail="; ".join(errors))
