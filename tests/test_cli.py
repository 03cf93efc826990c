# mm2plex test scripts
from __future__ import annotations

import json
from pathlib import Path

import pytest

from mm2plex import cli
from mm2plex.errors import IndexingError, SeriesMatchError
from mm2plex.reconcile import EpisodeRecord, MatchOutcome, MovieRecord, RunResult, Unresolved

COLLECTION = """<Collection>
  <DiscTitles>
    <DiscTitle><LocalTitle>Alien</LocalTitle><IMDB>tt0078748</IMDB><PersonalData Watched="True" /></DiscTitle>
    <DiscTitle><LocalTitle>Lost Film</LocalTitle><IMDB>tt0000001</IMDB><PersonalData Watched="True" /></DiscTitle>
  </DiscTitles>
  <TVSeries>
    <Series>
      <LanguageSpecific><Title>Baz</Title></LanguageSpecific>
      <Episodes>
        <Episode>
          <Global><SeasonNumber>1</SeasonNumber><EpisodeNumber>1</EpisodeNumber><Owned>True</Owned></Global>
          <LanguageSpecific><Title>Pilot</Title></LanguageSpecific>
          <Personal><Watched>True</Watched></Personal>
        </Episode>
      </Episodes>
    </Series>
  </TVSeries>
</Collection>
"""


def test_describe() -> None:
    ep = Unresolved(EpisodeRecord("Foo", 1, 2, "Two", True), MatchOutcome.SEASON_EPISODE_UNMATCHED, "no season 1")
    mv = Unresolved(MovieRecord("Home Video", None, True), MatchOutcome.NO_EXTERNAL_ID)

    assert cli.describe(ep, "watched") == "✖ Foo Season 1 Episode 2 Two to watched [season_episode_unmatched] no season 1"
    assert cli.describe(mv, "unwatched") == "✖ Home Video (tt?) to unwatched [no_external_id]"


def test_alias_skeleton_is_valid_json() -> None:
    err = SeriesMatchError(["Foo", "Bar"], [("Foo (2010)", "/library/metadata/1/children")])
    text = "\n".join(cli.alias_skeleton(err))
    assert json.loads(text) == {"Foo": "/library/metadata/n/children", "Bar": "/library/metadata/n/children"}


def test_report_for_series_mismatch(capsys: pytest.CaptureFixture[str]) -> None:
    err = SeriesMatchError(["Baz"], [("Foo", "/library/metadata/10/children")])
    result = RunResult(kind="tv", direction="watched", hard_error=err)

    cli.render_report(result)

    out = capsys.readouterr().out
    assert "1 TV Series not matched." in out
    assert "Use --series-fix to fix matchings. Example:" in out
    assert '"Baz": "/library/metadata/n/children"' in out
    assert "\tFoo: /library/metadata/10/children" in out
    assert out.rstrip().endswith("Done!")
    assert cli.exit_code(result) == cli.EXIT_ERROR


def test_report_for_degraded_dry_run(capsys: pytest.CaptureFixture[str]) -> None:
    result = RunResult(
        kind="movies",
        direction="watched",
        dry_run=True,
        unresolved=[Unresolved(MovieRecord("Lost Film", "tt1", True), MatchOutcome.NO_REMOTE_MATCH)],
        applied=3,
    )

    cli.render_report(result)

    out = capsys.readouterr().out
    assert "Pretend mode!  Did not change anything." in out
    assert "Could not set:" in out
    assert "Lost Film (tt1) to watched [no_remote_match]" in out
    assert cli.exit_code(result) == cli.EXIT_OK


def test_report_lists_stale_series_fix_entries(capsys: pytest.CaptureFixture[str]) -> None:
    result = RunResult(kind="tv", direction="watched", applied=1, unresolved_aliases=["Lost"])

    cli.render_report(result)

    out = capsys.readouterr().out
    assert "Series fix entries with no matching Plex series: Lost" in out
    assert cli.exit_code(result) == cli.EXIT_OK


def test_report_for_other_hard_error(capsys: pytest.CaptureFixture[str]) -> None:
    result = RunResult(kind="tv", direction="watched", hard_error=IndexingError("Listing series failed"))
    cli.render_report(result)
    assert "Listing series failed" in capsys.readouterr().out


def test_run_without_direction_is_a_usage_error(config_base: Path) -> None:
    p = config_base / "Collection.xml"
    p.write_text(COLLECTION, "utf-8")
    code = cli.run(["--file", str(p), "--host", "plex", "--token", "t", "--movies"])
    assert code == cli.EXIT_USAGE


def test_run_without_file_is_a_usage_error(config_base: Path) -> None:
    assert cli.run(["--host", "plex", "--token", "t", "--movies", "--watched"]) == cli.EXIT_USAGE


@pytest.fixture()
def fake_connect(monkeypatch: pytest.MonkeyPatch, library):
    import mm2plex.plex

    library.add_section("1", "Movies")
    library.add_movie("1", "tt0078748", "500", "Alien")
    library.add_section("2", "TV Shows", "show")
    library.add_show("2", "Foo", "10", {1: {1: "101"}})
    seen = []

    def _connect(cfg):
        seen.append(cfg)
        return library

    monkeypatch.setattr(mm2plex.plex, "connect", _connect)
    return seen


def test_run_movies_end_to_end(config_base: Path, fake_connect, library, capsys) -> None:
    p = config_base / "Collection.xml"
    p.write_text(COLLECTION, "utf-8")

    code = cli.run(["--file", str(p), "--host", "plex", "--token", "t", "--movies", "--watched"])

    assert code == cli.EXIT_OK
    assert fake_connect[0].baseurl == "http://plex:32400"
    assert library.marked == [("watched", "500")]
    out = capsys.readouterr().out
    assert "Lost Film (tt0000001) to watched [no_remote_match]" in out


def test_run_tv_with_series_fix(config_base: Path, fake_connect, library) -> None:
    p = config_base / "Collection.xml"
    p.write_text(COLLECTION, "utf-8")
    fix = config_base / "series.json"
    fix.write_text(json.dumps({"Baz": "/library/metadata/10/children"}), "utf-8")
    argv = ["--file", str(p), "--host", "plex", "--token", "t", "--tv", "--watched"]

    assert cli.run(argv) == cli.EXIT_ERROR
    assert library.mutations == []

    assert cli.run(argv + ["--series-fix", str(fix)]) == cli.EXIT_OK
    assert library.marked == [("watched", "101")]


def test_run_missing_series_fix_file(config_base: Path, fake_connect) -> None:
    p = config_base / "Collection.xml"
    p.write_text(COLLECTION, "utf-8")
    code = cli.run(["--file", str(p), "--host", "plex", "--token", "t", "--tv", "--watched",
                    "--series-fix", str(config_base / "missing.json")])
    assert code == cli.EXIT_USAGE
