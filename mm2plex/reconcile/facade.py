# /mm2plex/reconcile/facade.py
# One reconciliation pipeline for movies and TV:
#   sections -> matcher.prepare -> per record: match -> apply -> aggregate
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ._types import (
    CollectionRecord,
    EpisodeRecord,
    LibraryClient,
    Matcher,
    MovieRecord,
    RunResult,
)
from ._applier import StateApplier
from ._movies import MovieMatcher
from ._results import ResultAggregator
from ._sections import load_sections
from ._tv import TvMatcher
from .._logging import log as _root_log
from ..config_base import DIRECTIONS, SyncOptions
from ..errors import ConfigError, IndexingError, SeriesMatchError

log = _root_log.child("sync")

_RECORD_TYPES: dict[str, type] = {"movies": MovieRecord, "tv": EpisodeRecord}


def select_candidates(records: Iterable[CollectionRecord], direction: str, kind: str | None = None) -> list[CollectionRecord]:
    """Records whose desired state matches the run direction; unowned episodes never qualify."""
    if direction not in DIRECTIONS:
        raise ConfigError(f"Unknown direction {direction!r}")
    want = direction == "watched"
    rtype = _RECORD_TYPES.get(kind or "")
    out: list[CollectionRecord] = []
    for rec in records:
        if rtype is not None and not isinstance(rec, rtype):
            continue
        if isinstance(rec, EpisodeRecord) and not rec.owned:
            continue
        if bool(rec.watched) != want:
            continue
        out.append(rec)
    return out


class Reconciler:
    def __init__(
        self,
        client: LibraryClient,
        *,
        direction: str,
        dry_run: bool = False,
        sections: Sequence[str] | None = None,
    ):
        if direction not in DIRECTIONS:
            raise ConfigError(f"Unknown direction {direction!r}")
        self.client = client
        self.direction = direction
        self.dry_run = bool(dry_run)
        self.sections = list(sections or [])

    def run(self, records: Iterable[CollectionRecord], matcher: Matcher) -> RunResult:
        agg = ResultAggregator(kind=matcher.kind, direction=self.direction, dry_run=self.dry_run)
        candidates = select_candidates(records, self.direction, matcher.kind)
        log.info(f"Marking {len(candidates)} {self.direction}...")

        try:
            sections = load_sections(self.client, self.sections)
            matcher.prepare(sections, candidates)
        except (IndexingError, SeriesMatchError) as e:
            agg.unresolved_aliases = list(getattr(matcher, "unresolved_aliases", []) or [])
            log.error(str(e))
            agg.fail(e)
            return agg.result()
        agg.unresolved_aliases = list(getattr(matcher, "unresolved_aliases", []) or [])

        applier = StateApplier(self.client, dry_run=self.dry_run)
        for rec in candidates:
            log.info(f"{rec.label()}: {'watched' if rec.watched else 'unwatched'}")
            match = matcher.match(rec)
            applied = applier.apply(match.remote_id, rec.watched) if match.ok and match.remote_id else False
            agg.add(rec, match, applied)

        result = agg.result()
        log.info(f"{result.applied} {'accepted (pretend)' if self.dry_run else 'marked'}, "
                 f"{len(result.unresolved)} not set, {applier.calls} Plex requests")
        return result

    def run_movies(self, records: Iterable[CollectionRecord]) -> RunResult:
        return self.run(records, MovieMatcher(self.client))

    def run_tv(self, records: Iterable[CollectionRecord], aliases: Mapping[str, str] | None = None) -> RunResult:
        return self.run(records, TvMatcher(self.client, dict(aliases or {})))


def reconcile(
    client: LibraryClient,
    records: Iterable[CollectionRecord],
    options: SyncOptions,
    aliases: Mapping[str, str] | None = None,
) -> RunResult:
    options.validate()
    rec = Reconciler(client, direction=options.direction, dry_run=options.dry_run, sections=options.sections)
    if options.kind == "tv":
        return rec.run_tv(records, aliases)
    return rec.run_movies(records)
