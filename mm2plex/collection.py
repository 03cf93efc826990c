# /mm2plex/collection.py
# My Movies "Collection.xml" reader: disc titles and TV episodes as collection records.
from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterator, Optional

from ._logging import GREEN, YELLOW, colorize, log as _root_log
from .errors import CollectionError
from .id_map import normalize_imdb
from .reconcile._types import CollectionRecord, EpisodeRecord, MovieRecord

__all__ = ["read_collection", "movie_records", "episode_records", "load_records"]

log = _root_log.child("collection")


def _text(node: Optional[ET.Element], path: str) -> str:
    if node is None:
        return ""
    el = node.find(path)
    return (el.text or "").strip() if el is not None else ""


def _int(v: str) -> Optional[int]:
    try:
        return int(v)
    except ValueError:
        return None


def _is_true(v: Optional[str]) -> bool:
    return (v or "").strip() == "True"


def read_collection(path: str | Path) -> ET.Element:
    p = Path(path)
    log.info(f"Reading {colorize(str(p), GREEN, on=log.use_color)}...")
    try:
        data = p.read_bytes()
    except OSError as e:
        raise CollectionError(f"Cannot read {p}: {e}") from e
    log.info("Parsing XML...")
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise CollectionError(f"{p} is not valid XML: {e}") from e
    if root.tag != "Collection" or (root.find("DiscTitles") is None and root.find("TVSeries") is None):
        raise CollectionError("XML does not have DiscTitles or TVSeries!")
    return root


def movie_records(root: ET.Element) -> Iterator[MovieRecord]:
    titles = root.findall("DiscTitles/DiscTitle")
    log.info(f"Checking {len(titles)} titles...")
    for disc in titles:
        pd = disc.find("PersonalData")
        watched = pd is not None and _is_true(pd.get("Watched"))
        rec = MovieRecord(
            title=_text(disc, "LocalTitle"),
            external_id=normalize_imdb(_text(disc, "IMDB")),
            watched=watched,
        )
        state = colorize("Watched", GREEN, on=log.use_color) if watched else colorize("Unwatched", YELLOW, on=log.use_color)
        log.debug(f"{rec.label()}: {state}")
        yield rec


def episode_records(root: ET.Element) -> Iterator[EpisodeRecord]:
    all_series = root.findall("TVSeries/Series")
    log.info(f"Checking {len(all_series)} series...")
    for series in all_series:
        series_title = _text(series, "LanguageSpecific/Title")
        episodes = series.findall("Episodes/Episode")
        log.info(f"{series_title} : {len(episodes)} episodes")
        for ep in episodes:
            season = _int(_text(ep, "Global/SeasonNumber"))
            number = _int(_text(ep, "Global/EpisodeNumber"))
            title = _text(ep, "LanguageSpecific/Title")
            if season is None or number is None:
                log.warn(f"{series_title}: {title!r} has no season/episode number, skipping")
                continue
            rec = EpisodeRecord(
                series=series_title,
                season=season,
                episode=number,
                title=title,
                watched=_is_true(_text(ep, "Personal/Watched")),
                owned=_is_true(_text(ep, "Global/Owned")),
            )
            log.debug(f"Season {season} Episode {number}: {title}: "
                      f"{'watched' if rec.watched else 'unwatched'}{'' if rec.owned else ' (unowned, skipping)'}")
            yield rec


def load_records(path: str | Path, kind: str) -> list[CollectionRecord]:
    root = read_collection(path)
    if kind == "tv":
        return list(episode_records(root))
    return list(movie_records(root))
