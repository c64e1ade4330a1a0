r"""Parse navigation bundle scripts back into model values.

The bundle files only use a small slice of JavaScript: ``var`` declarations
whose values are nested array and object literals of strings, integers, and
``null``. This module tokenizes that slice with a single regular expression,
builds plain Python values with a recursive-descent parser, and converts the
values into :mod:`navtree.model` objects.

Example
-------
>>> from navtree.parser import parse_navtree_data
>>> doc = parse_navtree_data('var NAVTREE = [ [ "Modules", "modules.html", "modules" ] ];')
>>> doc.tree[0].children.name
'modules'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ

from ._constants import DEFAULT_INDEX_VAR, DEFAULT_TREE_VAR
from .model import (
    IndexShard,
    NavDocument,
    NavIndex,
    NavNode,
    NavTreeError,
    SubtreeRef,
    UIStrings,
)

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<line_comment>//[^\n]*)
    | (?P<block_comment>/\*.*?\*/)
    | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
    | (?P<number>-?\d+(?:\.\d+)?)
    | (?P<name>[A-Za-z_$][A-Za-z0-9_$]*)
    | (?P<punct>[\[\]{},:;=])
    """,
    re.VERBOSE | re.DOTALL,
)
ESCAPE_PATTERN = re.compile(
    r"\\(?:u\{(?P<braced>[0-9A-Fa-f]+)\}|u(?P<unicode>[0-9A-Fa-f]{4})"
    r"|x(?P<hex>[0-9A-Fa-f]{2})|(?P<char>.))",
    re.DOTALL,
)
_SURROGATE_PATTERN = re.compile("[\ud800-\udfff]")
_MAX_CODE_POINT = 0x10FFFF
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_SKIPPED = frozenset({"space", "line_comment", "block_comment"})
_DECLARATION_KEYWORDS = frozenset({"var", "let", "const"})
_LITERAL_NAMES: dict[str, object] = {"null": None, "true": True, "false": False}

JsValue = typ.Any


class NavTreeParseError(NavTreeError):
    """Raised when a bundle script cannot be parsed."""

    def __init__(
        self, message: str, *, line: int | None = None, column: int | None = None
    ) -> None:
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


@dc.dataclass(slots=True)
class Token:
    """Lexical token with its offset in the source text."""

    kind: str
    text: str
    offset: int


def _position(source: str, offset: int) -> tuple[int, int]:
    """Return the 1-based line and column for ``offset``."""
    line = source.count("\n", 0, offset) + 1
    column = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, column


def tokenize(source: str) -> list[Token]:
    """Split ``source`` into tokens, dropping whitespace and comments.

    Raises
    ------
    NavTreeParseError
        If a character cannot start any token (for example an unterminated
        string or block comment).
    """
    tokens: list[Token] = []
    offset = 0
    length = len(source)
    while offset < length:
        match = TOKEN_PATTERN.match(source, offset)
        if match is None:
            line, column = _position(source, offset)
            msg = f"Unexpected character {source[offset]!r}"
            raise NavTreeParseError(msg, line=line, column=column)
        kind = typ.cast("str", match.lastgroup)
        if kind not in _SKIPPED:
            tokens.append(Token(kind, match.group(), offset))
        offset = match.end()
    return tokens


def decode_string(literal: str) -> str:
    """Decode a quoted JavaScript string literal into its text.

    Raises
    ------
    NavTreeParseError
        If an escape names a code point above ``U+10FFFF`` or the text holds
        a surrogate without its pair. The error carries no position; callers
        parsing a script add it.
    """
    body = literal[1:-1]

    def _replace(match: re.Match[str]) -> str:
        if match.group("braced") is not None:
            code_point = int(match.group("braced"), 16)
            if code_point > _MAX_CODE_POINT:
                msg = f"Escape {match.group()!r} is outside the Unicode range"
                raise NavTreeParseError(msg)
            return chr(code_point)
        if match.group("unicode") is not None:
            return chr(int(match.group("unicode"), 16))
        if match.group("hex") is not None:
            return chr(int(match.group("hex"), 16))
        char = match.group("char")
        return _SIMPLE_ESCAPES.get(char, char)

    decoded = ESCAPE_PATTERN.sub(_replace, body)
    if not _SURROGATE_PATTERN.search(decoded):
        return decoded
    # Recombine surrogate pairs written as two \u escapes.
    try:
        return decoded.encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError as exc:
        msg = f"String {literal!r} contains an unpaired surrogate"
        raise NavTreeParseError(msg) from exc


class _ScriptParser:
    """Recursive-descent parser over the token stream of one script."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens = tokenize(source)
        self.pos = 0

    def parse(self) -> dict[str, JsValue]:
        declarations: dict[str, JsValue] = {}
        while not self._at_end():
            if self._peek_is(";"):
                self.pos += 1
                continue
            keyword = self._expect_kind("name")
            if keyword.text not in _DECLARATION_KEYWORDS:
                msg = f"Expected a 'var' declaration, found {keyword.text!r}"
                self._fail(msg, keyword)
            name = self._expect_kind("name")
            self._expect("=")
            declarations[name.text] = self._value()
            if not self._at_end():
                self._expect(";")
        return declarations

    def _value(self) -> JsValue:
        token = self._next("a value")
        match token.kind:
            case "string":
                return self._string(token)
            case "number":
                return float(token.text) if "." in token.text else int(token.text)
            case "name" if token.text in _LITERAL_NAMES:
                return _LITERAL_NAMES[token.text]
            case "punct" if token.text == "[":
                return self._array()
            case "punct" if token.text == "{":
                return self._object()
            case _:
                self._fail(f"Unexpected {token.text!r}", token)
        return None  # pragma: no cover - _fail always raises

    def _array(self) -> list[JsValue]:
        items: list[JsValue] = []
        while not self._peek_is("]"):
            items.append(self._value())
            if not self._peek_is("]"):
                self._expect(",")
        self._expect("]")
        return items

    def _object(self) -> dict[str, JsValue]:
        members: dict[str, JsValue] = {}
        while not self._peek_is("}"):
            key = self._next("an object key")
            if key.kind == "string":
                name = self._string(key)
            elif key.kind in {"name", "number"}:
                name = key.text
            else:
                self._fail(f"Unexpected {key.text!r} in object", key)
            self._expect(":")
            members[name] = self._value()
            if not self._peek_is("}"):
                self._expect(",")
        self._expect("}")
        return members

    def _string(self, token: Token) -> str:
        try:
            return decode_string(token.text)
        except NavTreeParseError as exc:
            line, column = _position(self.source, token.offset)
            raise NavTreeParseError(str(exc), line=line, column=column) from exc

    def _at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def _peek_is(self, text: str) -> bool:
        if self._at_end():
            return False
        token = self.tokens[self.pos]
        return token.kind == "punct" and token.text == text

    def _next(self, expected: str) -> Token:
        if self._at_end():
            line, column = _position(self.source, len(self.source))
            msg = f"Unexpected end of input, expected {expected}"
            raise NavTreeParseError(msg, line=line, column=column)
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _expect(self, text: str) -> Token:
        token = self._next(repr(text))
        if token.kind != "punct" or token.text != text:
            self._fail(f"Expected {text!r}, found {token.text!r}", token)
        return token

    def _expect_kind(self, kind: str) -> Token:
        token = self._next(f"a {kind}")
        if token.kind != kind:
            self._fail(f"Expected a {kind}, found {token.text!r}", token)
        return token

    def _fail(self, message: str, token: Token) -> typ.NoReturn:
        line, column = _position(self.source, token.offset)
        raise NavTreeParseError(message, line=line, column=column)


def parse_script(source: str) -> dict[str, JsValue]:
    """Parse ``var`` declarations into a name to value mapping.

    Parameters
    ----------
    source : str
        Script text made of ``var NAME = <literal>;`` declarations and
        comments.

    Returns
    -------
    dict[str, object]
        Declared values in source order. Arrays become lists, objects become
        dicts, ``null`` becomes ``None``.

    Raises
    ------
    NavTreeParseError
        If the text is not a sequence of literal declarations.
    """
    return _ScriptParser(source).parse()


def parse_nodes(
    value: JsValue, *, where: str = DEFAULT_TREE_VAR
) -> tuple[NavNode, ...]:
    """Convert a parsed entry list into :class:`NavNode` values.

    Parameters
    ----------
    value : object
        List of ``[label, url]`` or ``[label, url, children]`` entries, where
        children is ``None``, a nested list, or a subtree reference string.
    where : str, optional
        Location prefix used in error messages.

    Raises
    ------
    NavTreeParseError
        If an entry has the wrong shape or an inline children list is empty.
    """
    if not isinstance(value, list):
        msg = f"{where} must be an array of entries."
        raise NavTreeParseError(msg)
    return tuple(
        _parse_entry(entry, f"{where}[{position}]")
        for position, entry in enumerate(value)
    )


def _parse_entry(entry: JsValue, where: str) -> NavNode:
    if not isinstance(entry, list) or len(entry) not in {2, 3}:
        msg = f"{where} must be a 2- or 3-element array."
        raise NavTreeParseError(msg)
    label, url = entry[0], entry[1]
    if not isinstance(label, str) or not isinstance(url, str):
        msg = f"{where} must start with a string label and a string url."
        raise NavTreeParseError(msg)
    raw_children = entry[2] if len(entry) == 3 else None
    match raw_children:
        case None:
            children = None
        case str() as name:
            children = SubtreeRef(name)
        case list() if not raw_children:
            msg = f"{where} has an empty children array; leaves use null."
            raise NavTreeParseError(msg)
        case list():
            children = parse_nodes(raw_children, where=f"{where}[2]")
        case _:
            msg = f"{where} children must be null, an array, or a reference string."
            raise NavTreeParseError(msg)
    return NavNode(label, url, children)


def parse_navtree_data(
    source: str,
    *,
    tree_var: str = DEFAULT_TREE_VAR,
    index_var: str = DEFAULT_INDEX_VAR,
) -> NavDocument:
    """Parse ``navtreedata.js`` into a :class:`NavDocument`.

    The index carries the shard heads only; shard tables live in separate
    files (see :mod:`navtree.reader`). Every other string-valued declaration
    is kept as a UI message, in source order.

    Raises
    ------
    NavTreeParseError
        If the script is malformed or ``tree_var`` is not declared.
    """
    declarations = parse_script(source)
    if tree_var not in declarations:
        msg = f"No '{tree_var}' declaration found."
        raise NavTreeParseError(msg)
    tree = parse_nodes(declarations[tree_var], where=tree_var)

    raw_heads = declarations.get(index_var)
    if raw_heads is None:
        logger.warning("No '%s' declaration found; index is empty", index_var)
        raw_heads = []
    if not isinstance(raw_heads, list) or not all(
        isinstance(head, str) for head in raw_heads
    ):
        msg = f"{index_var} must be an array of url strings."
        raise NavTreeParseError(msg)

    messages: dict[str, str] = {}
    for name, value in declarations.items():
        if name in {tree_var, index_var}:
            continue
        if isinstance(value, str):
            messages[name] = value
        else:
            logger.debug("Ignoring non-string declaration '%s'", name)

    return NavDocument(
        tree=tree,
        index=NavIndex(heads=tuple(raw_heads)),
        strings=UIStrings.from_mapping(messages),
        tree_var=tree_var,
        index_var=index_var,
    )


def parse_subtree(source: str, var_name: str | None = None) -> tuple[NavNode, ...]:
    """Parse an external subtree script and return its entries.

    Parameters
    ----------
    source : str
        Script declaring the subtree array.
    var_name : str, optional
        Declaration to read. Defaults to the first array-valued declaration.
    """
    declarations = parse_script(source)
    if var_name is not None and var_name in declarations:
        return parse_nodes(declarations[var_name], where=var_name)
    for name, value in declarations.items():
        if isinstance(value, list):
            return parse_nodes(value, where=name)
    msg = "No subtree array declaration found."
    raise NavTreeParseError(msg)


def parse_index_shard(source: str) -> tuple[str, IndexShard]:
    """Parse a ``navtreeindex<k>.js`` script.

    Returns
    -------
    tuple[str, IndexShard]
        Declared variable name and the shard entries in source order.
    """
    for name, value in parse_script(source).items():
        if not isinstance(value, dict):
            continue
        entries: list[tuple[str, tuple[int, ...]]] = []
        for url, path in value.items():
            if not isinstance(path, list) or not all(
                isinstance(step, int) and not isinstance(step, bool) for step in path
            ):
                msg = f"{name}[{url!r}] must be an array of integers."
                raise NavTreeParseError(msg)
            entries.append((url, tuple(path)))
        return name, IndexShard(tuple(entries))
    msg = "No index shard object declaration found."
    raise NavTreeParseError(msg)


__all__ = [
    "NavTreeParseError",
    "Token",
    "decode_string",
    "parse_index_shard",
    "parse_navtree_data",
    "parse_nodes",
    "parse_script",
    "parse_subtree",
    "tokenize",
]
