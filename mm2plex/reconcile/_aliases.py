# /mm2plex/reconcile/_aliases.py
# Series name overrides ("series fix" file): local series name -> Plex series key.
from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from .._logging import log as _root_log
from ..errors import ConfigError

if TYPE_CHECKING:
    from ._tv import SeriesIndex

log = _root_log.child("aliases")


def load_alias_table(path: str | Path | None) -> dict[str, str]:
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"{p} not found!")
    try:
        data = json.loads(p.read_text("utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot read series fix file {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{p} must be a JSON object of \"Local Series\": \"/library/metadata/n/children\"")
    return {str(k): str(v) for k, v in data.items() if v is not None and str(v).strip()}


def apply_aliases(index: "SeriesIndex", aliases: Mapping[str, str] | None) -> list[str]:
    """Register every alias name as a second pointer to its series entry.

    Returns the local names whose remote key matched no indexed series.
    """
    if not aliases:
        return []
    log.info(f"Fixing TV series mappings ({len(aliases)} entries)")
    unresolved: list[str] = []
    for local_name, remote_key in aliases.items():
        entry = index.find_entry(remote_key)
        if entry is None:
            log.warn(f"{local_name} -> {remote_key}: no Plex series with that key")
            unresolved.append(local_name)
            continue
        index.alias(local_name, entry)
        log.info(f"{local_name} -> {remote_key} ({entry.title})")
    return unresolved
