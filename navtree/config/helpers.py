"""Utility helpers shared by the navtree configuration loader."""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ

from navtree._constants import DEFAULT_MESSAGES, DEFAULT_SHARD_SIZE
from navtree.model import NavNode, NavTreeError, SubtreeRef, UIStrings

from .models import NavTreeConfigError

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _required_str(payload: typ.Mapping[str, typ.Any], key: str, where: str) -> str:
    """Return ``payload[key]`` as a string, rejecting missing or blank values."""
    value = _optional_str(payload.get(key))
    if value is None:
        msg = f"Entry {where} is missing '{key}'."
        raise NavTreeConfigError(msg)
    return value


def _identifier(value: object, key: str) -> str:
    """Return ``value`` when it is a valid JavaScript identifier."""
    text = str(value).strip()
    if not IDENTIFIER_PATTERN.match(text):
        msg = f"'{key}' must be a JavaScript identifier, got {text!r}."
        raise NavTreeConfigError(msg)
    return text


def _coerce_shard_size(value: object | None) -> int:
    """Return the configured shard size as a positive integer."""
    if value is None:
        return DEFAULT_SHARD_SIZE
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"'shard_size' must be a positive integer, got {value!r}."
        raise NavTreeConfigError(msg)
    return value


def _build_messages(payload: object | None) -> UIStrings:
    """Build UI strings from the ``messages`` mapping, defaulting when absent."""
    if payload is None:
        return UIStrings.from_mapping(DEFAULT_MESSAGES)
    if not isinstance(payload, cabc.Mapping):
        msg = "'messages' must be a mapping of names to text."
        raise NavTreeConfigError(msg)
    messages: dict[str, str] = {}
    for key, text in payload.items():
        name = _identifier(key, "messages")
        messages[name] = "" if text is None else str(text)
    return UIStrings.from_mapping(messages)


def _build_nodes(payload: object, where: str) -> tuple[NavNode, ...]:
    """Build the entries of a ``tree`` or ``children`` sequence.

    Parameters
    ----------
    payload : object
        Sequence of entries. Each entry is either a mapping with ``label``,
        ``url`` and optional ``children``/``file``/``ref`` keys, or a compact
        ``[label, url]`` / ``[label, url, children]`` sequence mirroring the
        generated JavaScript.
    where : str
        Location used in error messages, such as ``tree[0].children``.

    Raises
    ------
    NavTreeConfigError
        If the sequence is empty or any entry is malformed.
    """
    if not isinstance(payload, list) or not payload:
        msg = f"{where} must be a non-empty list of entries."
        raise NavTreeConfigError(msg)
    return tuple(
        _build_node(entry, f"{where}[{position}]")
        for position, entry in enumerate(payload)
    )


def _build_node(payload: object, where: str) -> NavNode:
    """Build a single :class:`NavNode` from a mapping or compact sequence."""
    match payload:
        case cabc.Mapping():
            return _build_mapping_node(payload, where)
        case [label, url]:
            return _build_compact_node(label, url, None, where)
        case [label, url, children]:
            return _build_compact_node(label, url, children, where)
        case _:
            msg = f"Entry {where} must be a mapping or a [label, url, children] list."
            raise NavTreeConfigError(msg)


def _build_mapping_node(payload: typ.Mapping[str, typ.Any], where: str) -> NavNode:
    label = _required_str(payload, "label", where)
    url = _required_str(payload, "url", where)
    ref = _optional_str(payload.get("ref"))
    file_ref = _optional_str(payload.get("file"))
    raw_children = payload.get("children")

    if ref and file_ref:
        msg = f"Entry {where} cannot set both 'ref' and 'file'."
        raise NavTreeConfigError(msg)
    if ref:
        if raw_children is not None:
            msg = (
                f"Entry {where} sets 'ref' and 'children'; use 'file' to define "
                "the entries of an external subtree."
            )
            raise NavTreeConfigError(msg)
        return _make_node(label, url, SubtreeRef(ref), where)
    if file_ref:
        if raw_children is None:
            msg = f"Entry {where} sets 'file' without 'children'."
            raise NavTreeConfigError(msg)
        nodes = _build_nodes(raw_children, f"{where}.children")
        return _make_node(label, url, SubtreeRef(file_ref, nodes), where)
    if raw_children is None:
        return _make_node(label, url, None, where)
    return _make_node(
        label, url, _build_nodes(raw_children, f"{where}.children"), where
    )


def _build_compact_node(
    label: object, url: object, children: object, where: str
) -> NavNode:
    label_text = _optional_str(label)
    url_text = _optional_str(url)
    if label_text is None or url_text is None:
        msg = f"Entry {where} needs a non-empty label and url."
        raise NavTreeConfigError(msg)
    match children:
        case None:
            return _make_node(label_text, url_text, None, where)
        case str() as name if name.strip():
            return _make_node(label_text, url_text, SubtreeRef(name), where)
        case _:
            nodes = _build_nodes(children, f"{where}[2]")
            return _make_node(label_text, url_text, nodes, where)


def _make_node(
    label: str,
    url: str,
    children: tuple[NavNode, ...] | SubtreeRef | None,
    where: str,
) -> NavNode:
    try:
        return NavNode(label, url, children)
    except NavTreeError as exc:  # pragma: no cover - guarded by _build_nodes
        msg = f"Entry {where} is invalid: {exc}"
        raise NavTreeConfigError(msg) from exc


__all__ = [
    "IDENTIFIER_PATTERN",
    "_build_messages",
    "_build_nodes",
    "_coerce_shard_size",
    "_identifier",
    "_optional_str",
]
