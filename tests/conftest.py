# mm2plex test scripts
from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# plain output for substring asserts; loggers read this at import time
os.environ.setdefault("NO_COLOR", "1")

from mm2plex.errors import RemoteError  # noqa: E402
from mm2plex.reconcile import (  # noqa: E402
    RemoteEntry,
    RemoteEpisode,
    RemoteSeason,
    RemoteSection,
    RemoteSeries,
)


@dataclass
class FakeLibrary:
    """In-memory LibraryClient. Calls listed in ``fail`` raise RemoteError."""

    sections: list[RemoteSection] = field(default_factory=list)
    movies: dict[str, dict[str, list[RemoteEntry]]] = field(default_factory=dict)
    series: dict[str, list[RemoteSeries]] = field(default_factory=dict)
    seasons: dict[str, list[RemoteSeason]] = field(default_factory=dict)
    episodes: dict[str, list[RemoteEpisode]] = field(default_factory=dict)
    fail: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)
    marked: list[tuple[str, str]] = field(default_factory=list)

    def _call(self, name: str, arg: str = "") -> None:
        tag = f"{name}:{arg}" if arg else name
        self.calls.append(tag)
        if tag in self.fail or name in self.fail:
            raise RemoteError(f"boom {tag}")

    # reads
    def list_sections(self) -> list[RemoteSection]:
        self._call("list_sections")
        return list(self.sections)

    def find_by_external_id(self, section_key: str, external_id: str) -> list[RemoteEntry]:
        self._call("find", f"{section_key}/{external_id}")
        return list(self.movies.get(section_key, {}).get(external_id, []))

    def list_series(self, section_key: str) -> list[RemoteSeries]:
        self._call("list_series", section_key)
        return list(self.series.get(section_key, []))

    def list_seasons(self, series_key: str) -> list[RemoteSeason]:
        self._call("list_seasons", series_key)
        return list(self.seasons.get(series_key, []))

    def list_episodes(self, season_key: str) -> list[RemoteEpisode]:
        self._call("list_episodes", season_key)
        return list(self.episodes.get(season_key, []))

    # writes
    def mark_watched(self, remote_id: str) -> None:
        self._call("mark_watched", remote_id)
        self.marked.append(("watched", remote_id))

    def mark_unwatched(self, remote_id: str) -> None:
        self._call("mark_unwatched", remote_id)
        self.marked.append(("unwatched", remote_id))

    # builders
    def add_section(self, key: str, title: str, type: str = "movie") -> RemoteSection:
        sec = RemoteSection(key=key, title=title, type=type)
        self.sections.append(sec)
        return sec

    def add_movie(self, section_key: str, external_id: str, rating_key: str, title: str = "") -> None:
        self.movies.setdefault(section_key, {}).setdefault(external_id, []).append(
            RemoteEntry(rating_key=rating_key, title=title, guid=f"com.plexapp.agents.imdb://{external_id}?lang=en")
        )

    def add_show(
        self,
        section_key: str,
        title: str,
        rating_key: str,
        tree: dict[int, dict[int, str]],
        *,
        watched: set[str] = frozenset(),  # type: ignore[assignment]
    ) -> str:
        """tree: season index -> episode index -> episode rating key. Returns the series key."""
        key = f"/library/metadata/{rating_key}/children"
        self.series.setdefault(section_key, []).append(
            RemoteSeries(key=key, title=title, rating_key=rating_key,
                         child_count=len(tree), leaf_count=sum(len(e) for e in tree.values()))
        )
        seasons: list[RemoteSeason] = []
        for s_idx, eps in tree.items():
            s_key = f"/library/metadata/{rating_key}{s_idx:02d}/children"
            seasons.append(RemoteSeason(key=s_key, index=s_idx, title=f"Season {s_idx}", leaf_count=len(eps)))
            self.episodes[s_key] = [
                RemoteEpisode(rating_key=rk, index=e_idx, title=f"Episode {e_idx}",
                              view_count=1 if rk in watched else 0)
                for e_idx, rk in eps.items()
            ]
        self.seasons[key] = seasons
        return key

    @property
    def mutations(self) -> list[str]:
        return [c for c in self.calls if c.startswith(("mark_watched", "mark_unwatched"))]


@pytest.fixture()
def library() -> FakeLibrary:
    return FakeLibrary()


@pytest.fixture()
def config_base(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("MM2PLEX_CONFIG_BASE", str(tmp_path))
    monkeypatch.delenv("MM2PLEX_CONFIG", raising=False)
    return tmp_path
