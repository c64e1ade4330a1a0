"""Unit tests for reading whole navigation bundles from disk or HTTP."""

from __future__ import annotations

import typing as typ

import pytest
import requests

from navtree.index import build_nav_index
from navtree.model import NavDocument, NavNode, SubtreeRef
from navtree.reader import LocalSource, is_remote, open_source, read_navtree
from navtree.remote import RemoteSource
from navtree.writer import NavTreeWriter

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture


def _bundle_document() -> NavDocument:
    geo = SubtreeRef(
        "modules",
        (
            NavNode("Geo", "d0/d04/group___geo.html"),
            NavNode(
                "Export",
                "de/d2d/sas_silc_ffile_export.html",
                SubtreeRef(
                    "de/d2d/export", (NavNode("Usage", "de/d2d/usage.html"),)
                ),
            ),
        ),
    )
    tree = (
        NavNode(
            "PING",
            "index.html",
            [
                NavNode("About...", "d3/df9/mainpage_about.html"),
                NavNode("Modules", "modules.html", geo),
            ],
        ),
    )
    return NavDocument(tree=tree, index=build_nav_index(tree, shard_size=3))


@pytest.fixture
def bundle_dir(tmp_path: Path) -> Path:
    """Write a bundle with nested external subtrees and two index shards."""
    output_dir = tmp_path / "html"
    NavTreeWriter(_bundle_document(), output_dir).run()
    return output_dir


def test_read_navtree_resolves_subtrees_and_shards(bundle_dir: Path) -> None:
    document = read_navtree(bundle_dir)
    expected = _bundle_document()
    assert document.tree == expected.tree, "subtrees should be resolved recursively"
    assert document.index == expected.index, "all shards should be loaded"
    assert document.strings == expected.strings


def test_read_navtree_accepts_data_file_path(bundle_dir: Path) -> None:
    document = read_navtree(bundle_dir / "navtreedata.js")
    assert document.index.has_shards


def test_read_navtree_without_resolving(bundle_dir: Path) -> None:
    document = read_navtree(bundle_dir, resolve=False)
    modules = document.tree[0].child_nodes()[1]
    assert modules.children == SubtreeRef("modules"), (
        "unresolved reads keep subtree references by name"
    )
    assert not document.index.has_shards
    assert len(document.index.heads) == 2


def test_missing_subtree_stays_unresolved(
    bundle_dir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    (bundle_dir / "de" / "d2d" / "export.js").unlink()
    with caplog.at_level("WARNING", logger="navtree.reader"):
        document = read_navtree(bundle_dir)
    export = document.tree[0].child_nodes()[1].child_nodes()[1]
    assert export.children == SubtreeRef("de/d2d/export")
    assert "de/d2d/export.js" in caplog.text, "missing subtrees should be logged"


def test_missing_shard_drops_all_shards(bundle_dir: Path) -> None:
    (bundle_dir / "navtreeindex1.js").unlink()
    document = read_navtree(bundle_dir)
    assert not document.index.has_shards, "shards are loaded all or none"
    assert len(document.index.heads) == 2, "heads survive a missing shard"


def test_self_referencing_subtree_is_left_unresolved(tmp_path: Path) -> None:
    (tmp_path / "navtreedata.js").write_text(
        'var NAVTREE = [ [ "Loop", "loop.html", "loop" ] ];\n'
        "var NAVTREEINDEX = [];\n",
        encoding="utf-8",
    )
    (tmp_path / "loop.js").write_text(
        'var loop = [ [ "Again", "again.html", "loop" ] ];\n', encoding="utf-8"
    )
    document = read_navtree(tmp_path)
    inner = document.tree[0].child_nodes()[0]
    assert inner.children == SubtreeRef("loop"), "cycles must stop at the repeat"


def test_missing_data_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="navtreedata.js"):
        read_navtree(tmp_path)


def test_open_source_picks_local_or_remote(tmp_path: Path) -> None:
    source, filename = open_source(tmp_path)
    assert isinstance(source, LocalSource)
    assert filename == "navtreedata.js"

    remote, remote_name = open_source("https://docs.example.invalid/html/data.js")
    assert isinstance(remote, RemoteSource)
    assert remote.base_url == "https://docs.example.invalid/html/"
    assert remote_name == "data.js"
    remote.close()

    assert is_remote("http://example.invalid")
    assert not is_remote(tmp_path)


def test_read_navtree_from_url(mocker: MockerFixture, bundle_dir: Path) -> None:
    """Remote bundles are fetched relative to the base URL."""
    session = mocker.Mock(spec=requests.Session)

    def _get(url: str, timeout: float) -> typ.Any:
        name = url.removeprefix("https://docs.example.invalid/html/")
        path = bundle_dir / name
        response = mocker.Mock()
        response.headers = {"Content-Type": "application/javascript"}
        if path.is_file():
            response.status_code = 200
            response.text = path.read_text(encoding="utf-8")
        else:
            response.status_code = 404
        return response

    session.get.side_effect = _get
    mocker.patch("navtree.remote.build_session", return_value=session)

    document = read_navtree("https://docs.example.invalid/html")

    assert document.tree == _bundle_document().tree
    requested = [call.args[0] for call in session.get.call_args_list]
    assert requested[0] == "https://docs.example.invalid/html/navtreedata.js"
    assert "https://docs.example.invalid/html/de/d2d/export.js" in requested
    session.close.assert_called_once()
