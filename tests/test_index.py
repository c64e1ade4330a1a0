"""Unit tests for building the sorted, sharded URL index."""

from __future__ import annotations

import pytest

from navtree.index import build_nav_index, collect_index_entries, viewer_path
from navtree.model import NavNode, NavTreeError, SubtreeRef


def _single_root_tree() -> list[NavNode]:
    return [
        NavNode(
            "PING",
            "index.html",
            [
                NavNode("About...", "d3/df9/mainpage_about.html"),
                NavNode(
                    "Modules",
                    "modules.html",
                    SubtreeRef(
                        "modules",
                        (
                            NavNode("Geo", "d0/d04/group___geo.html"),
                            NavNode("Export", "de/d2d/sas_silc_ffile_export.html"),
                        ),
                    ),
                ),
            ],
        )
    ]


def test_viewer_path_drops_single_root_position() -> None:
    assert viewer_path((0,), single_root=True) == ()
    assert viewer_path((0, 2, 1), single_root=True) == (2, 1)
    assert viewer_path((1, 0), single_root=False) == (1, 0)


def test_single_root_paths_count_below_root() -> None:
    entries = collect_index_entries(_single_root_tree())
    assert entries == {
        "index.html": (),
        "d3/df9/mainpage_about.html": (0,),
        "modules.html": (1,),
        "d0/d04/group___geo.html": (1, 0),
        "de/d2d/sas_silc_ffile_export.html": (1, 1),
    }, f"unexpected index entries: {entries!r}"


def test_multi_root_paths_keep_top_level_position() -> None:
    tree = [
        NavNode("Main", "index.html"),
        NavNode("Pages", "pages.html", [NavNode("Todo", "todo.html")]),
    ]
    entries = collect_index_entries(tree)
    assert entries["todo.html"] == (1, 0), (
        f"expected full trail for multi-root trees, got {entries['todo.html']!r}"
    )


def test_duplicate_url_keeps_first_occurrence() -> None:
    tree = [
        NavNode(
            "Root",
            "index.html",
            [NavNode("First", "page.html"), NavNode("Second", "page.html")],
        )
    ]
    assert collect_index_entries(tree)["page.html"] == (0,)


def test_unresolved_subtrees_are_not_indexed() -> None:
    tree = [NavNode("Root", "index.html", [NavNode("Mods", "modules.html", "modules")])]
    assert set(collect_index_entries(tree)) == {"index.html", "modules.html"}


def test_index_is_sorted_and_heads_start_each_shard() -> None:
    index = build_nav_index(_single_root_tree(), shard_size=2)
    urls = index.urls()
    assert urls == sorted(urls), "index urls must be in lexicographic order"
    assert urls == [
        "d0/d04/group___geo.html",
        "d3/df9/mainpage_about.html",
        "de/d2d/sas_silc_ffile_export.html",
        "index.html",
        "modules.html",
    ]
    assert len(index.shards) == 3, "five urls in shards of two give three shards"
    assert index.heads == tuple(shard.first_url for shard in index.shards)
    assert index.lookup("de/d2d/sas_silc_ffile_export.html") == (1, 1)


def test_default_shard_size_keeps_small_trees_in_one_shard() -> None:
    index = build_nav_index(_single_root_tree())
    assert index.heads == ("d0/d04/group___geo.html",)
    assert len(index.shards[0].entries) == 5


def test_empty_tree_builds_empty_index() -> None:
    index = build_nav_index([])
    assert index.heads == ()
    assert index.shards == ()


@pytest.mark.parametrize("shard_size", [0, -3])
def test_shard_size_must_be_positive(shard_size: int) -> None:
    with pytest.raises(NavTreeError, match="positive integer"):
        build_nav_index(_single_root_tree(), shard_size=shard_size)
