# /mm2plex/plex/client.py
# Plex Media Server library client: the reads and the two writes the engine needs.
from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import requests

try:
    from plexapi.exceptions import BadRequest, NotFound, Unauthorized
    from plexapi.server import PlexServer
except Exception as e:
    raise RuntimeError("plexapi is required for mm2plex.plex") from e

from ._common import (
    LIBRARY_IDENTIFIER,
    build_session,
    iter_items,
    normalize_baseurl,
    parse_int_or_none,
)
from .._logging import GREEN, colorize, log as _root_log
from ..errors import ConfigError, RemoteError
from ..id_map import candidate_guids, ids_from_guid
from ..reconcile._types import (
    RemoteEntry,
    RemoteEpisode,
    RemoteSeason,
    RemoteSection,
    RemoteSeries,
)

__all__ = ["PLEXConfig", "PLEXError", "PLEXAuthError", "PLEXNotFound", "PlexLibraryClient", "connect"]

log = _root_log.child("plex")


class PLEXError(RemoteError):
    pass


class PLEXAuthError(PLEXError):
    pass


class PLEXNotFound(PLEXError):
    pass


@dataclass
class PLEXConfig:
    baseurl: str
    token: str
    timeout: float = 10.0
    verify_ssl: bool = True

    @classmethod
    def from_config(cls, cfg: dict[str, Any], *, host: str | None = None, token: str | None = None) -> "PLEXConfig":
        plex = dict(cfg.get("plex") or {})
        baseurl = normalize_baseurl(host or plex.get("server_url") or "")
        tok = (token or plex.get("token") or "").strip()
        if not baseurl or not tok:
            raise ConfigError("Plex host and token are required (--host/--token or plex.server_url/plex.token)")
        return cls(
            baseurl=baseurl,
            token=tok,
            timeout=float(plex.get("timeout") or 10.0),
            verify_ssl=bool(plex.get("verify_ssl", True)),
        )


def _wrap(exc: Exception, what: str) -> PLEXError:
    if isinstance(exc, Unauthorized):
        return PLEXAuthError(f"{what}: unauthorized ({exc})")
    if isinstance(exc, NotFound):
        return PLEXNotFound(f"{what}: not found ({exc})")
    return PLEXError(f"{what}: {exc}")


class PlexLibraryClient:
    """LibraryClient over a plexapi PlexServer. Every method is one or more sequential queries."""

    def __init__(self, server: Any):
        self.server = server

    def _query(self, path: str) -> ET.Element | None:
        try:
            return self.server.query(path)
        except (BadRequest, NotFound, Unauthorized, requests.RequestException) as e:
            raise _wrap(e, path) from e

    @property
    def version(self) -> str:
        return str(getattr(self.server, "version", "") or "")

    # reads
    def list_sections(self) -> list[RemoteSection]:
        root = self._query("/library/sections")
        return [
            RemoteSection(key=str(a.get("key") or ""), title=str(a.get("title") or ""), type=str(a.get("type") or ""))
            for a in iter_items(root, "Directory")
            if a.get("key")
        ]

    def find_by_external_id(self, section_key: str, external_id: str) -> list[RemoteEntry]:
        for guid in candidate_guids(external_id):
            qs = urlencode({"guid": guid})
            root = self._query(f"/library/sections/{section_key}/all?{qs}")
            hits = [
                RemoteEntry(rating_key=str(a["ratingKey"]), title=str(a.get("title") or ""), guid=str(a.get("guid") or ""))
                for a in iter_items(root)
                if a.get("ratingKey")
            ]
            if hits:
                log.debug(f"{external_id} -> #{hits[0].rating_key} via guid={guid} {ids_from_guid(hits[0].guid)}")
                return hits
        return []

    def list_series(self, section_key: str) -> list[RemoteSeries]:
        root = self._query(f"/library/sections/{section_key}/all")
        out: list[RemoteSeries] = []
        for a in iter_items(root, "Directory"):
            if (a.get("type") or "show") != "show" or not a.get("key"):
                continue
            out.append(RemoteSeries(
                key=str(a["key"]),
                title=str(a.get("title") or ""),
                rating_key=str(a.get("ratingKey") or ""),
                child_count=parse_int_or_none(a.get("childCount")),
                leaf_count=parse_int_or_none(a.get("leafCount")),
            ))
        return out

    def list_seasons(self, series_key: str) -> list[RemoteSeason]:
        root = self._query(series_key)
        out: list[RemoteSeason] = []
        for a in iter_items(root, "Directory"):
            if not a.get("key"):
                continue
            if a.get("type") and a.get("type") != "season":
                continue
            out.append(RemoteSeason(
                key=str(a["key"]),
                index=parse_int_or_none(a.get("index")),
                title=str(a.get("title") or ""),
                leaf_count=parse_int_or_none(a.get("leafCount")),
            ))
        return out

    def list_episodes(self, season_key: str) -> list[RemoteEpisode]:
        root = self._query(season_key)
        return [
            RemoteEpisode(
                rating_key=str(a["ratingKey"]),
                index=parse_int_or_none(a.get("index")),
                title=str(a.get("title") or ""),
                view_count=parse_int_or_none(a.get("viewCount")) or 0,
            )
            for a in iter_items(root, "Video")
            if a.get("ratingKey")
        ]

    # writes
    def mark_watched(self, remote_id: str) -> None:
        qs = urlencode({"identifier": LIBRARY_IDENTIFIER, "key": remote_id})
        self._query(f"/:/scrobble?{qs}")

    def mark_unwatched(self, remote_id: str) -> None:
        qs = urlencode({"identifier": LIBRARY_IDENTIFIER, "key": remote_id})
        self._query(f"/:/unscrobble?{qs}")


def connect(cfg: PLEXConfig) -> PlexLibraryClient:
    log.info(f"Connecting to Plex server at {cfg.baseurl}...")
    session = build_session(verify_ssl=cfg.verify_ssl)
    try:
        server = PlexServer(cfg.baseurl, cfg.token, session=session, timeout=cfg.timeout)
    except (BadRequest, NotFound, Unauthorized, requests.RequestException) as e:
        raise _wrap(e, f"connect {cfg.baseurl}") from e
    client = PlexLibraryClient(server)
    log.info(f"Plex server version {colorize(client.version, GREEN, on=log.use_color)}")
    return client
