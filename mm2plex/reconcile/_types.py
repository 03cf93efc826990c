# /mm2plex/reconcile/_types.py
# records, remote entries, outcomes and protocols for the reconciliation engine.
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from collections.abc import Sequence
from typing import Protocol, Union

from ..errors import SyncError


# --- local collection records ------------------------------------------------

@dataclass(frozen=True)
class MovieRecord:
    title: str
    external_id: str | None
    watched: bool

    def label(self) -> str:
        return f"{self.title} ({self.external_id or 'tt?'})"


@dataclass(frozen=True)
class EpisodeRecord:
    series: str
    season: int
    episode: int
    title: str
    watched: bool
    owned: bool = True

    def label(self) -> str:
        return f"{self.series} Season {self.season} Episode {self.episode}: {self.title}"


CollectionRecord = Union[MovieRecord, EpisodeRecord]


# --- remote entries -----------------------------------------------------------

@dataclass(frozen=True)
class RemoteSection:
    key: str
    title: str
    type: str = ""


@dataclass(frozen=True)
class RemoteEntry:
    rating_key: str
    title: str = ""
    guid: str = ""


@dataclass(frozen=True)
class RemoteSeries:
    key: str
    title: str
    rating_key: str = ""
    child_count: int | None = None
    leaf_count: int | None = None


@dataclass(frozen=True)
class RemoteSeason:
    key: str
    index: int | None
    title: str = ""
    leaf_count: int | None = None


@dataclass(frozen=True)
class RemoteEpisode:
    rating_key: str
    index: int | None
    title: str = ""
    view_count: int = 0

    @property
    def watched(self) -> bool:
        return self.view_count > 0


class LibraryClient(Protocol):
    def list_sections(self) -> Sequence[RemoteSection]: ...
    def find_by_external_id(self, section_key: str, external_id: str) -> Sequence[RemoteEntry]: ...
    def list_series(self, section_key: str) -> Sequence[RemoteSeries]: ...
    def list_seasons(self, series_key: str) -> Sequence[RemoteSeason]: ...
    def list_episodes(self, season_key: str) -> Sequence[RemoteEpisode]: ...
    def mark_watched(self, remote_id: str) -> None: ...
    def mark_unwatched(self, remote_id: str) -> None: ...


# --- outcomes -----------------------------------------------------------------

class MatchOutcome(str, enum.Enum):
    MATCHED = "matched"
    NO_EXTERNAL_ID = "no_external_id"
    NO_REMOTE_MATCH = "no_remote_match"
    SERIES_UNMATCHED = "series_unmatched"
    SEASON_EPISODE_UNMATCHED = "season_episode_unmatched"
    MUTATION_FAILED = "mutation_failed"


@dataclass(frozen=True)
class Match:
    outcome: MatchOutcome
    remote_id: str | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is MatchOutcome.MATCHED and bool(self.remote_id)

    @classmethod
    def matched(cls, remote_id: str) -> "Match":
        return cls(MatchOutcome.MATCHED, str(remote_id))

    @classmethod
    def failed(cls, outcome: MatchOutcome, detail: str = "") -> "Match":
        return cls(outcome, None, detail)


class Matcher(Protocol):
    kind: str

    def prepare(self, sections: Sequence[RemoteSection], records: Sequence[CollectionRecord]) -> None: ...
    def match(self, record: CollectionRecord) -> Match: ...


@dataclass(frozen=True)
class Unresolved:
    record: CollectionRecord
    outcome: MatchOutcome
    detail: str = ""


@dataclass
class RunResult:
    kind: str
    direction: str
    dry_run: bool = False
    unresolved: list[Unresolved] = field(default_factory=list)
    applied: int = 0
    hard_error: SyncError | None = None
    unresolved_aliases: list[str] = field(default_factory=list)

    @property
    def unset_records(self) -> list[CollectionRecord]:
        return [u.record for u in self.unresolved]

    @property
    def verdict(self) -> str:
        if self.hard_error is not None:
            return "error"
        if self.unresolved:
            return "degraded"
        return "ok"

    @property
    def ok(self) -> bool:
        return self.hard_error is None
