"""Unit tests for reading navigation scripts back into model values."""

from __future__ import annotations

import pytest

from navtree.model import NavNode, SubtreeRef
from navtree.parser import (
    NavTreeParseError,
    decode_string,
    parse_index_shard,
    parse_navtree_data,
    parse_nodes,
    parse_script,
    parse_subtree,
    tokenize,
)


def test_modules_entry_parses_to_subtree_reference() -> None:
    (node,) = parse_nodes([["Modules", "modules.html", "modules"]])
    assert node.label == "Modules"
    assert node.url == "modules.html"
    assert node.children == SubtreeRef("modules"), (
        f"expected a reference to the 'modules' subtree, got {node.children!r}"
    )


def test_two_element_entries_are_leaves() -> None:
    (node,) = parse_nodes([["About", "about.html"]])
    assert node == NavNode("About", "about.html")


def test_parse_script_handles_comments_quotes_and_trailing_commas() -> None:
    source = """
    // generated file
    var A = [ 'single', "double", 12, null, true, false, ];
    /* block
       comment */
    let B = { "x.html": [0, 1], y: [], };
    const C = 'don\\'t';
    """
    declarations = parse_script(source)
    assert declarations == {
        "A": ["single", "double", 12, None, True, False],
        "B": {"x.html": [0, 1], "y": []},
        "C": "don't",
    }, f"unexpected declarations: {declarations!r}"


def test_final_semicolon_is_optional() -> None:
    assert parse_script("var A = []") == {"A": []}


@pytest.mark.parametrize(
    ("literal", "expected"),
    [
        ('"plain"', "plain"),
        ('"tab\\there"', "tab\there"),
        ('"\\u00dcber"', "Über"),
        ('"\\x41"', "A"),
        ('"\\u{1F600}"', "\U0001f600"),
        ('"\\ud83d\\ude00"', "\U0001f600"),
        ("'quote\\''", "quote'"),
    ],
)
def test_decode_string_escapes(literal: str, expected: str) -> None:
    assert decode_string(literal) == expected


def test_tokenize_reports_position_of_bad_character() -> None:
    with pytest.raises(NavTreeParseError) as excinfo:
        tokenize('var A =\n  [ "ok", @ ];')
    assert excinfo.value.line == 2, "error should point at the second line"
    assert excinfo.value.column == 11, "error should point at the '@'"
    assert "line 2, column 11" in str(excinfo.value)


@pytest.mark.parametrize(
    "source",
    [
        "var A = [ 1, 2",
        "A = [];",
        "var A = [ 1 2 ];",
        'var A = "unterminated;',
        "var A = { [1]: 2 };",
        'var X = "\\u{110000}";',
        'var X = "\\u{FFFFFFFFFFFFFFFFFFFFFF}";',
        'var X = [ [ "a\\ud800", "a.html", null ] ];',
        "var X = { '\\udc00': 1 };",
    ],
)
def test_malformed_scripts_raise(source: str) -> None:
    with pytest.raises(NavTreeParseError):
        parse_script(source)


def test_bad_string_escape_reports_string_position() -> None:
    with pytest.raises(NavTreeParseError, match="outside the Unicode range") as excinfo:
        parse_script('var NAVTREE =\n[ [ "Home", "\\u{110000}", null ] ];')
    assert (excinfo.value.line, excinfo.value.column) == (2, 13), (
        "error should point at the opening quote of the bad string"
    )


@pytest.mark.parametrize("literal", ['"a\\ud800"', '"\\udc00b"', '"\\ude00\\ud83d"'])
def test_decode_string_rejects_unpaired_surrogates(literal: str) -> None:
    with pytest.raises(NavTreeParseError, match="unpaired surrogate"):
        decode_string(literal)


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ({"a": 1}, "must be an array"),
        ([["Only label"]], "2- or 3-element"),
        ([[1, "url.html", None]], "string label"),
        ([["Label", "url.html", []]], "empty children"),
        ([["Label", "url.html", 5]], "children must be"),
    ],
)
def test_malformed_entries_raise(value: object, message: str) -> None:
    with pytest.raises(NavTreeParseError, match=message):
        parse_nodes(value)


def test_parse_navtree_data_collects_heads_and_messages() -> None:
    source = """
    var NAVTREE = [ [ "Home", "index.html", [ [ "A", "a.html", null ] ] ] ];
    var NAVTREEINDEX = [ "a.html" ];
    var SYNCONMSG = 'on';
    var CUSTOMMSG = 'custom';
    var NAVTREEVERSION = 3;
    """
    document = parse_navtree_data(source)
    assert document.tree[0].child_nodes() == (NavNode("A", "a.html"),)
    assert document.index.heads == ("a.html",)
    assert not document.index.has_shards, "navtreedata.js only carries heads"
    assert document.strings.items() == [("SYNCONMSG", "on"), ("CUSTOMMSG", "custom")]


def test_parse_navtree_data_requires_tree_declaration() -> None:
    with pytest.raises(NavTreeParseError, match="No 'NAVTREE' declaration"):
        parse_navtree_data("var NAVTREEINDEX = [];")


def test_parse_navtree_data_rejects_non_string_heads() -> None:
    with pytest.raises(NavTreeParseError, match="array of url strings"):
        parse_navtree_data("var NAVTREE = []; var NAVTREEINDEX = [ 1 ];")


def test_parse_navtree_data_with_custom_variable_names() -> None:
    source = 'var SIDEBAR = [ [ "Home", "index.html", null ] ]; var IDX = [];'
    document = parse_navtree_data(source, tree_var="SIDEBAR", index_var="IDX")
    assert document.tree_var == "SIDEBAR"
    assert document.index_var == "IDX"
    assert len(document.strings) == 0


def test_parse_subtree_prefers_named_declaration() -> None:
    source = """
    var other = [ [ "Other", "other.html", null ] ];
    var quantile = [ [ "Usage", "d6/d70/quantile.html#usage", null ] ];
    """
    nodes = parse_subtree(source, "quantile")
    assert nodes == (NavNode("Usage", "d6/d70/quantile.html#usage"),)
    assert parse_subtree(source)[0].label == "Other", (
        "without a name the first array declaration is used"
    )


def test_parse_subtree_without_array_raises() -> None:
    with pytest.raises(NavTreeParseError, match="No subtree array"):
        parse_subtree("var X = 'text';")


def test_parse_index_shard() -> None:
    source = 'var NAVTREEINDEX0 =\n{\n"a.html":[0],\n"index.html":[]\n};\n'
    name, shard = parse_index_shard(source)
    assert name == "NAVTREEINDEX0"
    assert shard.entries == (("a.html", (0,)), ("index.html", ()))


def test_parse_index_shard_rejects_non_integer_paths() -> None:
    with pytest.raises(NavTreeParseError, match="array of integers"):
        parse_index_shard('var NAVTREEINDEX0 = { "a.html": ["x"] };')
