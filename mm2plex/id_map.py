# /mm2plex/id_map.py
# External identifier handling.
# - Normalize IMDb ids read from the collection file.
# - Expand an id into the GUID forms Plex filters on.
# - Pull ids back out of Plex GUIDs for diagnostics.

from __future__ import annotations
import re
from typing import Dict, List, Optional, Pattern, Tuple

__all__ = ["normalize_imdb", "candidate_guids", "ids_from_guid"]

_CLEAN_SENTINELS = {"none", "null", "nan", "undefined", "unknown", "0", ""}


def _norm_str(v: object) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def normalize_imdb(val: object) -> Optional[str]:
    """Return ``tt\\d+`` or None. Accepts plain ids and strings containing one."""
    s = _norm_str(val)
    if not s or s.lower() in _CLEAN_SENTINELS:
        return None
    m = re.search(r"(tt\d+)", s.lower())
    if m:
        return m.group(1)
    digits = re.sub(r"\D+", "", s)
    return f"tt{digits}" if digits and int(digits) else None


# First form is the raw id: the collection's own value, as Plex's legacy agents store it
_GUID_PREFIXES: Tuple[str, ...] = ("", "imdb://", "com.plexapp.agents.imdb://")


def candidate_guids(external_id: str) -> List[str]:
    ident = (external_id or "").strip()
    if not ident:
        return []
    out: List[str] = []
    for prefix in _GUID_PREFIXES:
        g = f"{prefix}{ident}"
        if g not in out:
            out.append(g)
    return out


_GUID_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"com\.plexapp\.agents\.imdb://(?P<imdb>tt\d+)", re.I), "imdb"),
    (re.compile(r"com\.plexapp\.agents\.themoviedb://(?P<tmdb>\d+)", re.I), "tmdb"),
    (re.compile(r"com\.plexapp\.agents\.thetvdb://(?P<tvdb>\d+)", re.I), "tvdb"),
    (re.compile(r"imdb://(?:title/)?(?P<imdb>tt\d+)", re.I), "imdb"),
    (re.compile(r"tmdb://(?:(?:movie|show|tv)/)?(?P<tmdb>\d+)", re.I), "tmdb"),
    (re.compile(r"tvdb://(?:(?:series|show|tv)/)?(?P<tvdb>\d+)", re.I), "tvdb"),
    (re.compile(r"^plex://", re.I), "guid"),
)


def ids_from_guid(guid: Optional[str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    g = _norm_str(guid)
    if not g:
        return out
    for rx, label in _GUID_PATTERNS:
        m = rx.search(g)
        if not m:
            continue
        if label == "guid":
            out.setdefault("guid", g)
        else:
            raw = m.groupdict().get(label)
            if raw and label not in out:
                out[label] = raw.lower() if label == "imdb" else raw
    return out
