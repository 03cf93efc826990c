# /mm2plex/reconcile/_tv.py
# Full series/season/episode index of the selected sections, and the matcher on top of it.
from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from ._types import (
    CollectionRecord,
    EpisodeRecord,
    LibraryClient,
    Match,
    MatchOutcome,
    RemoteEpisode,
    RemoteSeason,
    RemoteSection,
    RemoteSeries,
)
from ._aliases import apply_aliases
from ._verify import verify_series
from .._logging import GREEN, YELLOW, colorize, log as _root_log
from ..errors import IndexingError, RemoteError

log = _root_log.child("tv")


@dataclass
class SeriesEntry:
    key: str
    title: str
    rating_key: str = ""
    seasons: dict[int, dict[int, str]] = field(default_factory=dict)

    def episode_id(self, season: int, episode: int) -> str | None:
        return (self.seasons.get(season) or {}).get(episode)

    @property
    def episode_count(self) -> int:
        return sum(len(eps) for eps in self.seasons.values())


class SeriesIndex:
    """Series title -> SeriesEntry. Aliased names point at the same entry object."""

    def __init__(self) -> None:
        self._by_name: dict[str, SeriesEntry] = {}
        self._entries: list[SeriesEntry] = []

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)

    def get(self, name: str) -> SeriesEntry | None:
        return self._by_name.get(name)

    def names(self) -> list[str]:
        return list(self._by_name)

    def entries(self) -> list[SeriesEntry]:
        return list(self._entries)

    def known(self) -> list[tuple[str, str]]:
        """Every indexed series as (title, key), shadowed duplicates included, then alias names."""
        out = [(entry.title, entry.key) for entry in self._entries]
        seen = set(out)
        for name, entry in self._by_name.items():
            if (name, entry.key) not in seen:
                seen.add((name, entry.key))
                out.append((name, entry.key))
        return out

    def add_series(self, series: RemoteSeries) -> SeriesEntry:
        entry = SeriesEntry(key=series.key, title=series.title, rating_key=series.rating_key)
        self._entries.append(entry)
        if series.title in self._by_name:
            log.warn(f"duplicate series title {series.title!r}: keeping "
                     f"{self._by_name[series.title].key}, {series.key} reachable by alias only")
        else:
            self._by_name[series.title] = entry
        return entry

    def add_episode(self, entry: SeriesEntry, season: int, episode: int, remote_id: str) -> bool:
        eps = entry.seasons.setdefault(season, {})
        if episode in eps:
            log.warn(f"{entry.title}: season {season} episode {episode} already indexed "
                     f"as #{eps[episode]}, ignoring #{remote_id}")
            return False
        eps[episode] = remote_id
        return True

    def find_entry(self, ref: str) -> SeriesEntry | None:
        """Entry by children key, bare rating key, or remote title."""
        want = str(ref or "").strip()
        if not want:
            return None
        for entry in self._entries:
            if entry.key == want:
                return entry
        for entry in self._entries:
            if entry.rating_key and entry.rating_key == want:
                return entry
        for entry in self._entries:
            if entry.title == want:
                return entry
        return None

    def alias(self, name: str, entry: SeriesEntry) -> None:
        self._by_name[name] = entry


class TreeNode(NamedTuple):
    section: RemoteSection
    series: RemoteSeries
    season: Optional[RemoteSeason]
    episode: Optional[RemoteEpisode]


def walk_series(client: LibraryClient, sections: Sequence[RemoteSection]) -> Iterator[TreeNode]:
    """Depth-first walk over every series, season and episode, one remote call at a time.

    Series without seasons and seasons without episodes still yield one node so
    their names are indexed.
    """
    for section in sections:
        try:
            shows = list(client.list_series(section.key))
        except RemoteError as e:
            raise IndexingError(f"Listing series of section {section.title!r} failed: {e}") from e
        log.info(f"Found {colorize(str(len(shows)), GREEN, on=log.use_color)} TV shows in {section.title}.")

        for series in shows:
            log.info(f"{series.title}: {series.child_count or 0} seasons, {series.leaf_count or 0} episodes")
            try:
                seasons = list(client.list_seasons(series.key))
            except RemoteError as e:
                raise IndexingError(f"Listing seasons of {series.title!r} failed: {e}") from e
            if not seasons:
                yield TreeNode(section, series, None, None)
                continue

            for season in seasons:
                try:
                    episodes = list(client.list_episodes(season.key))
                except RemoteError as e:
                    raise IndexingError(f"Listing episodes of {series.title!r} {season.title} failed: {e}") from e
                log.debug(f"  {season.title}: {season.leaf_count or len(episodes)} episodes")
                if not episodes:
                    yield TreeNode(section, series, season, None)
                    continue
                for episode in episodes:
                    yield TreeNode(section, series, season, episode)


def build_series_index(client: LibraryClient, sections: Sequence[RemoteSection]) -> SeriesIndex:
    log.info("Finding Plex TV Series...")
    index = SeriesIndex()
    current: dict[tuple[str, str], SeriesEntry] = {}

    for node in walk_series(client, sections):
        slot = (node.section.key, node.series.key)
        entry = current.get(slot)
        if entry is None:
            entry = current[slot] = index.add_series(node.series)

        season, episode = node.season, node.episode
        if season is None or episode is None:
            continue
        if season.index is None or episode.index is None:
            # "All episodes" pseudo-season and unnumbered specials have no ordinal
            continue
        if log.debug_enabled:
            state = colorize("Watched", GREEN, on=log.use_color) if episode.watched \
                else colorize("Unwatched", YELLOW, on=log.use_color)
            log.debug(f"    {episode.title}: {state}")
        index.add_episode(entry, season.index, episode.index, episode.rating_key)

    log.info(f"Indexed {len(index.entries())} series, "
             f"{sum(e.episode_count for e in index.entries())} episodes.")
    return index


class TvMatcher:
    kind = "tv"

    def __init__(self, client: LibraryClient, aliases: dict[str, str] | None = None):
        self.client = client
        self.aliases = dict(aliases or {})
        self.index: SeriesIndex | None = None
        self.unresolved_aliases: list[str] = []

    def prepare(self, sections: Sequence[RemoteSection], records: Sequence[CollectionRecord]) -> None:
        index = build_series_index(self.client, sections)
        self.unresolved_aliases = apply_aliases(index, self.aliases)
        verify_series(records, index, unresolved_aliases=self.unresolved_aliases)
        self.index = index

    def match(self, record: CollectionRecord) -> Match:
        if not isinstance(record, EpisodeRecord):
            raise TypeError(f"TvMatcher cannot match {type(record).__name__}")
        if self.index is None:
            raise RuntimeError("TvMatcher.prepare() must run before match()")

        entry = self.index.get(record.series)
        if entry is None:
            return Match.failed(MatchOutcome.SERIES_UNMATCHED)
        remote_id = entry.episode_id(record.season, record.episode)
        if not remote_id:
            if record.season not in entry.seasons:
                detail = f"no season {record.season} in {entry.key}"
            else:
                detail = f"no episode {record.episode} in season {record.season}"
            log.warn(colorize("✖", YELLOW, on=log.use_color), record.label(), f"({detail})")
            return Match.failed(MatchOutcome.SEASON_EPISODE_UNMATCHED, detail=detail)
        return Match.matched(remote_id)
