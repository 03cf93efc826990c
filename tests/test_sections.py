# mm2plex test scripts
from __future__ import annotations

import pytest

from mm2plex.errors import IndexingError
from mm2plex.reconcile import RemoteSection, filter_sections, load_sections

SECTIONS = [
    RemoteSection("1", "Movies", "movie"),
    RemoteSection("2", "TV Shows", "show"),
    RemoteSection("3", "Kids Movies", "movie"),
]


def test_no_allow_list_keeps_every_section_in_order() -> None:
    assert filter_sections(SECTIONS) == SECTIONS
    assert filter_sections(SECTIONS, []) == SECTIONS


def test_allow_list_keeps_server_order_not_allow_order() -> None:
    picked = filter_sections(SECTIONS, ["Kids Movies", "Movies"])
    assert [s.key for s in picked] == ["1", "3"]


def test_empty_intersection_is_not_an_error() -> None:
    assert filter_sections(SECTIONS, ["Music"]) == []


def test_load_sections_wraps_remote_failure(library) -> None:
    library.fail.add("list_sections")
    with pytest.raises(IndexingError):
        load_sections(library, None)


def test_load_sections_filters(library) -> None:
    library.add_section("1", "Movies")
    library.add_section("2", "TV Shows", "show")
    assert [s.title for s in load_sections(library, ["TV Shows"])] == ["TV Shows"]
