# /mm2plex/config_base.py
from __future__ import annotations

import copy
import json
import os
import secrets
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .errors import ConfigError

# ------------------------------------------------------------
# Base dir resolution
# ------------------------------------------------------------
def CONFIG_BASE() -> Path:
    """
    Determine the base directory for config files.

    Priority:
      1) $MM2PLEX_CONFIG_BASE if set
      2) current working directory
    """
    env = os.getenv("MM2PLEX_CONFIG_BASE")
    if env:
        return Path(env)
    return Path.cwd()


KINDS = ("movies", "tv")
DIRECTIONS = ("watched", "unwatched")

# Default config structure
DEFAULT_CFG: Dict[str, Any] = {
    "plex": {
        "server_url": "",                               # http(s)://host:32400 or bare host (port 32400 assumed)
        "token": "",                                    # X-Plex-Token
        "timeout": 10.0,                                # HTTP timeout (seconds)
        "verify_ssl": True,                             # Verify TLS certificates
    },

    "sync": {
        "collection_file": "",                          # My Movies Collection.xml
        "sections": [],                                 # Library section titles to use (empty = all)
        "series_fix": "",                               # JSON alias file: {"Local Series": "/library/metadata/n/children"}
        "dry_run": False,                               # Match and report only; never mark anything
    },

    "runtime": {
        "debug": False,                                 # Debug level console output
        "log_json": "",                                 # Optional JSON-lines log file
    },
}


# ------------------------------------------------------------
# Helpers: paths, IO, merging
# ------------------------------------------------------------
def _cfg_file(path: Optional[str | Path] = None) -> Path:
    if path:
        return Path(path)
    env = os.getenv("MM2PLEX_CONFIG")
    if env:
        return Path(env)
    return CONFIG_BASE() / "config.json"


def config_path() -> Path:
    return _cfg_file()


def _read_json(p: Path) -> Dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write_json_atomic(p: Path, data: Dict[str, Any]) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    suffix = f".{time.time_ns()}.{os.getpid()}.{secrets.token_hex(4)}.tmp"
    tmp = p.with_suffix(suffix)

    with tmp.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    tmp.replace(p)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)  # type: ignore[assignment]
        else:
            out[k] = v
    return out


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, Iterable):
        return [str(x) for x in value if isinstance(x, (str, int, float))]
    return []


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------
def load_config(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """
    Read config.json and merge it over DEFAULT_CFG.

    A missing default file is fine; an explicit path that does not exist or a
    file that is not valid JSON is a ConfigError.
    """
    p = _cfg_file(path)
    user_cfg: Dict[str, Any] = {}
    if p.exists():
        try:
            user_cfg = _read_json(p)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read config {p}: {e}") from e
        if not isinstance(user_cfg, dict):
            raise ConfigError(f"Config {p} must contain a JSON object")
    elif path:
        raise ConfigError(f"{p} not found!")

    cfg = _deep_merge(DEFAULT_CFG, user_cfg)
    cfg["sync"]["sections"] = _as_list(cfg["sync"].get("sections"))
    return cfg


def save_config(cfg: Dict[str, Any], path: Optional[str | Path] = None) -> None:
    _write_json_atomic(_cfg_file(path), dict(cfg or {}))


# ------------------------------------------------------------
# Run options
# ------------------------------------------------------------
@dataclass
class SyncOptions:
    kind: str
    direction: str
    dry_run: bool = False
    sections: List[str] = field(default_factory=list)
    alias_file: Optional[str] = None

    @property
    def set_watched(self) -> bool:
        return self.direction == "watched"

    def validate(self) -> "SyncOptions":
        if self.kind not in KINDS:
            raise ConfigError(f"Unknown media kind {self.kind!r}; use one of {', '.join(KINDS)}")
        if self.direction not in DIRECTIONS:
            raise ConfigError(f"Unknown direction {self.direction!r}; use one of {', '.join(DIRECTIONS)}")
        if self.alias_file and self.kind != "tv":
            raise ConfigError("--series-fix only applies to --tv")
        return self

    @classmethod
    def from_flags(
        cls,
        *,
        watched: bool,
        unwatched: bool,
        movies: bool,
        tv: bool,
        dry_run: bool = False,
        sections: Iterable[str] = (),
        alias_file: Optional[str] = None,
    ) -> "SyncOptions":
        if not watched and not unwatched:
            raise ConfigError("--watched or --unwatched must be set")
        if watched and unwatched:
            raise ConfigError("--watched and --unwatched cannot both be set")
        if not tv and not movies:
            raise ConfigError("--tv or --movies must be set")
        if tv and movies:
            raise ConfigError("--tv and --movies cannot both be set")
        return cls(
            kind="tv" if tv else "movies",
            direction="watched" if watched else "unwatched",
            dry_run=bool(dry_run),
            sections=_as_list(list(sections)),
            alias_file=alias_file or None,
        ).validate()

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], **flags: Any) -> "SyncOptions":
        sync = cfg.get("sync") or {}
        sections = flags.pop("sections", None) or sync.get("sections") or []
        alias_file = flags.pop("alias_file", None) or sync.get("series_fix") or None
        dry_run = bool(flags.pop("dry_run", False) or sync.get("dry_run"))
        return cls.from_flags(sections=sections, alias_file=alias_file, dry_run=dry_run, **flags)
