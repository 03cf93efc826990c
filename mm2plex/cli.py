#!/usr/bin/python3
# /mm2plex/cli.py
# mm2plex command line: read the collection, connect to Plex, reconcile, report.
from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from . import __VERSION__
from ._logging import RED, YELLOW, colorize, log as _root_log
from .collection import load_records
from .config_base import SyncOptions, load_config
from .errors import CollectionError, ConfigError, RemoteError, SeriesMatchError
from .reconcile import EpisodeRecord, RunResult, Unresolved, load_alias_table, reconcile

log = _root_log.child("mm2plex")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 10

USAGE = "Usage: mm2plex --file 'Collection.xml' --host 'plexserver' --token 'foo' (--movies|--tv) (--watched|--unwatched)"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mm2plex",
        description="Set Plex watched/unwatched status from a My Movies Collection.xml file.",
    )
    parser.add_argument("--file", help="My Movies Collection.xml file name")
    parser.add_argument("--host", help="Plex host (name, host:port or URL)")
    parser.add_argument("--token", help="Plex token")
    parser.add_argument("--section", action="append", default=[], help="Section title to use (repeatable; default all)")
    parser.add_argument("--pretend", action="store_true", help="Pretend (don't set status)")
    parser.add_argument("--watched", action="store_true", help="Set Watched titles")
    parser.add_argument("--unwatched", action="store_true", help="Set Unwatched titles")
    parser.add_argument("--movies", action="store_true", help="Operate on Movies")
    parser.add_argument("--tv", action="store_true", help="Operate on TV shows")
    parser.add_argument("--series-fix", dest="series_fix", help="Series fix JSON file (local series name -> Plex series key)")
    parser.add_argument("--config", help="config.json path (default: $MM2PLEX_CONFIG or ./config.json)")
    parser.add_argument("--debug", action="store_true", help="Show debug messages")
    parser.add_argument("--log-json", dest="log_json", help="Also write JSON-lines log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__VERSION__}")
    return parser


def describe(item: Unresolved, direction: str) -> str:
    rec = item.record
    if isinstance(rec, EpisodeRecord):
        head = f"{rec.series} Season {rec.season} Episode {rec.episode} {rec.title}"
    else:
        head = f"{rec.title} ({rec.external_id or 'tt?'})"
    line = f"✖ {head} to {direction} [{item.outcome.value}]"
    if item.detail:
        line = f"{line} {item.detail}"
    return line


def alias_skeleton(err: SeriesMatchError) -> list[str]:
    lines = ["{"]
    for i, name in enumerate(err.unmatched):
        comma = "," if i < len(err.unmatched) - 1 else ""
        lines.append(f'    "{name}": "/library/metadata/n/children"{comma}')
    lines.append("}")
    return lines


def render_report(result: RunResult, out=None) -> None:
    out = out or log.child("report")
    on = out.use_color

    err = result.hard_error
    if isinstance(err, SeriesMatchError):
        out.error(f"{len(err.unmatched)} TV Series not matched.")
        if err.unresolved_aliases:
            out.error("Series fix entries with no matching Plex series: " + ", ".join(err.unresolved_aliases))
        out.error("Use --series-fix to fix matchings. Example:")
        for line in alias_skeleton(err):
            out.error(line)
        out.error("Use these Plex TV series keys:")
        for title, key in err.known:
            out.error(f"\t{title}: {key}")
    else:
        if err is not None:
            out.error(colorize(str(err), RED, on=on))
        if result.unresolved_aliases:
            out.warn(colorize("Series fix entries with no matching Plex series: "
                              + ", ".join(result.unresolved_aliases), YELLOW, on=on))

    if result.dry_run:
        out.warn(colorize("Pretend mode!  Did not change anything.", YELLOW, on=on))

    if result.unresolved:
        out.warn(colorize("Could not set:", YELLOW, on=on))
        for item in result.unresolved:
            out.warn(colorize(f"\t {describe(item, result.direction)}", YELLOW, on=on))

    out.info("Done!")


def exit_code(result: RunResult) -> int:
    return EXIT_ERROR if result.verdict == "error" else EXIT_OK


def run(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # imported here so --help works without the Plex stack
    from .plex import PLEXConfig, connect

    try:
        cfg = load_config(args.config)
        runtime = cfg.get("runtime") or {}
        if args.debug or runtime.get("debug"):
            _root_log.set_level("debug")
        log_json = args.log_json or runtime.get("log_json")
        if log_json:
            _root_log.enable_json(log_json)

        collection_file = args.file or (cfg.get("sync") or {}).get("collection_file")
        if not collection_file:
            raise ConfigError(USAGE)
        plex_cfg = PLEXConfig.from_config(cfg, host=args.host, token=args.token)
        options = SyncOptions.from_config(
            cfg,
            watched=args.watched,
            unwatched=args.unwatched,
            movies=args.movies,
            tv=args.tv,
            dry_run=args.pretend,
            sections=args.section,
            alias_file=args.series_fix,
        )
        aliases = load_alias_table(options.alias_file) if options.kind == "tv" else {}
    except ConfigError as e:
        log.error(str(e))
        return EXIT_USAGE

    try:
        records = load_records(collection_file, options.kind)
        client = connect(plex_cfg)
        result = reconcile(client, records, options, aliases)
    except (CollectionError, RemoteError) as e:
        log.error(colorize(str(e), RED, on=log.use_color))
        return EXIT_ERROR
    except KeyboardInterrupt:
        log.info("INTERRUPTED")
        return EXIT_INTERRUPTED

    render_report(result)
    return exit_code(result)


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
