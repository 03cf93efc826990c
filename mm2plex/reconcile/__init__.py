from __future__ import annotations

from ._types import (
    CollectionRecord,
    EpisodeRecord,
    LibraryClient,
    Match,
    MatchOutcome,
    Matcher,
    MovieRecord,
    RemoteEntry,
    RemoteEpisode,
    RemoteSeason,
    RemoteSection,
    RemoteSeries,
    RunResult,
    Unresolved,
)
from ._sections import filter_sections, load_sections
from ._movies import MovieMatcher
from ._tv import SeriesEntry, SeriesIndex, TreeNode, TvMatcher, build_series_index, walk_series
from ._aliases import apply_aliases, load_alias_table
from ._verify import local_series_names, verify_series
from ._applier import StateApplier
from ._results import ResultAggregator
from .facade import Reconciler, reconcile, select_candidates

__all__ = [
    "CollectionRecord", "EpisodeRecord", "MovieRecord",
    "LibraryClient", "Match", "MatchOutcome", "Matcher", "RunResult", "Unresolved",
    "RemoteEntry", "RemoteEpisode", "RemoteSeason", "RemoteSection", "RemoteSeries",
    "filter_sections", "load_sections",
    "MovieMatcher", "TvMatcher", "SeriesEntry", "SeriesIndex", "TreeNode",
    "build_series_index", "walk_series",
    "apply_aliases", "load_alias_table",
    "local_series_names", "verify_series",
    "StateApplier", "ResultAggregator",
    "Reconciler", "reconcile", "select_candidates",
]
