"""Tests for the ``navtree`` command functions.

The commands are called directly rather than through argument parsing, with
``tmp_path`` as the working directory so printed paths are predictable.
"""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

from navtree import cli
from navtree.reader import read_navtree

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

CONFIG = """
defaults:
  output_dir: site/html
tree:
  - label: PING
    url: index.html
    children:
      - label: About...
        url: d3/df9/mainpage_about.html
      - label: quantile
        url: d6/d70/quantile.html
        file: d6/d70/quantile
        children:
          - label: Usage
            url: d6/d70/quantile.html#usage
"""


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Write ``navtree.yaml`` into a temporary working directory."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "navtree.yaml").write_text(dedent(CONFIG).lstrip(), encoding="utf-8")
    return tmp_path


@pytest.fixture
def built(workspace: Path) -> Path:
    """Build the bundle and return its output directory."""
    cli.build(config=workspace / "navtree.yaml")
    return workspace / "site" / "html"


def test_build_writes_bundle_and_reports_paths(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.build(config=workspace / "navtree.yaml")

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "wrote site/html/navtreedata.js",
        "wrote site/html/navtreeindex0.js",
        "wrote site/html/d6/d70/quantile.js",
    ], f"unexpected build output: {lines!r}"


def test_build_output_dir_override(workspace: Path) -> None:
    cli.build(config=workspace / "navtree.yaml", output_dir=workspace / "other")
    assert (workspace / "other" / "navtreedata.js").is_file()
    assert not (workspace / "site").exists()


def test_check_passes_for_built_bundle(
    built: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    capsys.readouterr()
    cli.check(str(built))
    assert capsys.readouterr().out == "ok: 4 entries checked\n"


def test_check_exits_on_errors(
    built: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (built / "navtreedata.js").write_text(
        'var NAVTREE = [ [ "", "index.html", null ] ];\nvar NAVTREEINDEX = [];\n',
        encoding="utf-8",
    )
    capsys.readouterr()
    with pytest.raises(SystemExit) as excinfo:
        cli.check(str(built))
    assert excinfo.value.code == 1
    assert "error: tree[0]: Entry label is empty." in capsys.readouterr().out


def test_check_warnings_fail_only_when_strict(
    built: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.check(str(built), html_root=built)
    out = capsys.readouterr().out
    assert "warning: tree[0]: Page 'index.html' not found" in out
    assert out.endswith("ok: 4 entries checked\n"), "warnings alone should pass"

    with pytest.raises(SystemExit):
        cli.check(str(built), html_root=built, strict=True)


def test_check_uses_link_checker_for_base_url(
    built: Path, mocker: MockerFixture, capsys: pytest.CaptureFixture[str]
) -> None:
    checker = mocker.Mock(return_value=False)
    factory = mocker.patch("navtree.cli.RemoteLinkChecker", return_value=checker)
    capsys.readouterr()

    with pytest.raises(SystemExit):
        cli.check(str(built), base_url="https://docs.example.invalid/", strict=True)

    factory.assert_called_once_with("https://docs.example.invalid/")
    checker.close.assert_called_once()
    assert "is not reachable" in capsys.readouterr().out


def test_convert_to_yaml_and_json(built: Path, workspace: Path) -> None:
    cli.convert(str(built), output=workspace / "exported.yaml")
    cli.convert(str(built), output=workspace / "exported.json")

    exported = (workspace / "exported.yaml").read_text(encoding="utf-8")
    assert "file: d6/d70/quantile" in exported
    assert (workspace / "exported.json").read_text(encoding="utf-8").startswith("{")


def test_convert_rejects_unknown_format(built: Path, workspace: Path) -> None:
    with pytest.raises(ValueError, match="Unsupported output format"):
        cli.convert(str(built), output=workspace / "exported.toml")


def test_build_then_read_round_trip(built: Path) -> None:
    config_tree = cli.load_navtree_config(cli.DEFAULT_CONFIG).tree
    assert read_navtree(built).tree == config_tree


def test_configure_logging_reads_environment(
    monkeypatch: pytest.MonkeyPatch, mocker: MockerFixture
) -> None:
    basic_config = mocker.patch("navtree.cli.logging.basicConfig")
    monkeypatch.setenv("NAVTREE_LOG_LEVEL", "debug")
    cli.configure_logging()
    basic_config.assert_called_once_with(level="DEBUG", format=cli.LOG_FORMAT)
