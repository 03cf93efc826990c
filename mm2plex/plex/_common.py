# /mm2plex/plex/_common.py
# Plex helpers: client identity, headers, session and XML attribute parsing.
from __future__ import annotations

import os
import uuid
import xml.etree.ElementTree as ET
from typing import Any, Iterator, Mapping
from urllib.parse import urlparse

import requests

__all__ = [
    "CLIENT_ID",
    "LIBRARY_IDENTIFIER",
    "DEFAULT_PORT",
    "plex_headers",
    "build_session",
    "normalize_baseurl",
    "parse_int_or_none",
    "iter_items",
]

CLIENT_ID = os.environ.get("MM2PLEX_CLIENT_ID") or f"mm2plex-{uuid.uuid4().hex[:8]}"
LIBRARY_IDENTIFIER = "com.plexapp.plugins.library"
DEFAULT_PORT = 32400


def plex_headers(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    headers: dict[str, str] = {
        "Accept": "application/xml",
        "User-Agent": os.environ.get("MM2PLEX_UA") or "mm2plex/1.0",
        "X-Plex-Product": "mm2plex",
        "X-Plex-Version": "1.0",
        "X-Plex-Client-Identifier": CLIENT_ID,
    }
    if extra:
        headers.update({str(k): str(v) for k, v in extra.items()})
    return headers


def build_session(*, verify_ssl: bool = True) -> requests.Session:
    s = requests.Session()
    s.headers.update(plex_headers())
    s.verify = bool(verify_ssl)
    return s


def normalize_baseurl(host: str) -> str:
    """'plexserver' -> 'http://plexserver:32400'; full URLs are kept (minus trailing slash)."""
    raw = (host or "").strip().rstrip("/")
    if not raw:
        return ""
    if "://" not in raw:
        raw = f"http://{raw}"
    p = urlparse(raw)
    if p.port is None and not p.path:
        raw = f"{raw}:{DEFAULT_PORT}"
    return raw


def parse_int_or_none(v: Any) -> int | None:
    try:
        if v is None:
            return None
        if isinstance(v, (int, float)):
            return int(v)
        s = str(v).strip()
        if not s:
            return None
        return int(s)
    except (TypeError, ValueError):
        return None


def iter_items(root: ET.Element | None, *tags: str) -> Iterator[dict[str, str]]:
    """Attributes of the MediaContainer children with one of ``tags`` (any tag if none given)."""
    if root is None:
        return
    for child in root:
        if tags and child.tag not in tags:
            continue
        yield dict(child.attrib or {})
