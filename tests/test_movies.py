# mm2plex test scripts
from __future__ import annotations

from mm2plex.reconcile import MatchOutcome, MovieMatcher, MovieRecord


def _matcher(library) -> MovieMatcher:
    m = MovieMatcher(library)
    m.prepare(library.sections, [])
    return m


def test_missing_external_id_never_queries(library) -> None:
    library.add_section("1", "Movies")
    library.add_movie("1", "tt0078748", "500")

    match = _matcher(library).match(MovieRecord("Alien", None, True))

    assert match.outcome is MatchOutcome.NO_EXTERNAL_ID
    assert match.remote_id is None
    assert not [c for c in library.calls if c.startswith("find")]


def test_first_section_with_a_hit_wins(library) -> None:
    library.add_section("1", "Movies")
    library.add_section("2", "More Movies")
    library.add_movie("1", "tt0078748", "500")
    library.add_movie("2", "tt0078748", "900")

    match = _matcher(library).match(MovieRecord("Alien", "tt0078748", True))

    assert match.ok and match.remote_id == "500"
    assert [c for c in library.calls if c.startswith("find")] == ["find:1/tt0078748"]


def test_later_section_is_used_when_earlier_has_no_hit(library) -> None:
    library.add_section("1", "Movies")
    library.add_section("2", "More Movies")
    library.add_movie("2", "tt0078748", "900")

    match = _matcher(library).match(MovieRecord("Alien", "tt0078748", True))

    assert match.remote_id == "900"


def test_first_result_of_the_section_is_taken(library) -> None:
    library.add_section("1", "Movies")
    library.add_movie("1", "tt0078748", "500")
    library.add_movie("1", "tt0078748", "501")

    assert _matcher(library).match(MovieRecord("Alien", "tt0078748", True)).remote_id == "500"


def test_no_hit_anywhere(library) -> None:
    library.add_section("1", "Movies")
    match = _matcher(library).match(MovieRecord("Alien", "tt0078748", True))
    assert match.outcome is MatchOutcome.NO_REMOTE_MATCH


def test_no_sections_means_no_match(library) -> None:
    match = _matcher(library).match(MovieRecord("Alien", "tt0078748", True))
    assert match.outcome is MatchOutcome.NO_REMOTE_MATCH


def test_lookup_failure_is_per_record(library) -> None:
    library.add_section("1", "Movies")
    library.add_movie("1", "tt2", "2")
    library.fail.add("find:1/tt1")
    m = _matcher(library)

    bad = m.match(MovieRecord("One", "tt1", True))
    good = m.match(MovieRecord("Two", "tt2", True))

    assert bad.outcome is MatchOutcome.NO_REMOTE_MATCH
    assert "boom" in bad.detail
    assert good.remote_id == "2"


def test_lookup_failure_falls_through_to_later_sections(library) -> None:
    library.add_section("1", "Movies")
    library.add_section("2", "4K Movies")
    library.add_movie("2", "tt0078748", "900")
    library.fail.add("find:1/tt0078748")

    match = _matcher(library).match(MovieRecord("Alien", "tt0078748", True))

    assert match.ok and match.remote_id == "900"
    assert [c for c in library.calls if c.startswith("find")] == ["find:1/tt0078748", "find:2/tt0078748"]
