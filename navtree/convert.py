"""Export navigation documents to editable YAML or JSON.

Reading a published bundle and exporting it as ``navtree.yaml`` gives a
starting point that can be edited and rebuilt with ``navtree build``. The YAML
written here loads back through :func:`navtree.config.load_navtree_config`
into an equal tree: resolved external subtrees become ``file`` entries and
unresolved ones ``ref`` entries.

Example
-------
.. code-block:: python

    from pathlib import Path
    from navtree.convert import write_config
    from navtree.reader import read_navtree

    document = read_navtree(Path("html"))
    write_config(document, Path("navtree.yaml"))

"""

from __future__ import annotations

import typing as typ

import msgspec.json
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from ._constants import DEFAULT_INDEX_VAR, DEFAULT_TREE_VAR
from .model import SubtreeRef

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .model import NavDocument, NavNode


def _build_roundtrip_yaml() -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    yaml.width = 120
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


def _node_to_map(node: NavNode) -> CommentedMap:
    entry = CommentedMap()
    entry["label"] = node.label
    entry["url"] = node.url
    match node.children:
        case SubtreeRef(name=name, nodes=None):
            entry["ref"] = name
        case SubtreeRef(name=name, nodes=nodes):
            entry["file"] = name
            entry["children"] = _nodes_to_seq(nodes)
        case tuple() as children:
            entry["children"] = _nodes_to_seq(children)
    return entry


def _nodes_to_seq(nodes: cabc.Iterable[NavNode]) -> CommentedSeq:
    return CommentedSeq(_node_to_map(node) for node in nodes)


def _inferred_shard_size(document: NavDocument) -> int | None:
    """Return the shard size implied by a multi-shard index, if any."""
    shards = document.index.shards
    if len(shards) < 2:
        return None
    return len(shards[0].entries)


def document_to_config(document: NavDocument) -> CommentedMap:
    """Return ``document`` as a ``navtree.yaml`` mapping.

    Only settings that differ from the loader defaults, or that can be
    inferred from the document (the shard size of a multi-shard index), are
    written under ``defaults``.
    """
    defaults = CommentedMap()
    shard_size = _inferred_shard_size(document)
    if shard_size is not None:
        defaults["shard_size"] = shard_size
    if document.tree_var != DEFAULT_TREE_VAR:
        defaults["tree_var"] = document.tree_var
    if document.index_var != DEFAULT_INDEX_VAR:
        defaults["index_var"] = document.index_var

    config = CommentedMap()
    if defaults:
        config["defaults"] = defaults
    config["messages"] = CommentedMap(document.strings.items())
    config["tree"] = _nodes_to_seq(document.tree)
    return config


def write_config(document: NavDocument, path: Path) -> Path:
    """Write ``document`` as YAML to ``path`` and return the path."""
    yaml = _build_roundtrip_yaml()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.dump(document_to_config(document), handle)
    return path


def _node_literal(node: NavNode) -> list[object]:
    match node.children:
        case None:
            children: object = None
        case SubtreeRef(name=name):
            children = name
        case tuple() as nodes:
            children = [_node_literal(child) for child in nodes]
        case _:
            children = None
    return [node.label, node.url, children]


def document_to_json(document: NavDocument, *, indent: int = 2) -> bytes:
    """Encode the shape of ``navtreedata.js`` as JSON.

    The payload maps the tree variable to nested ``[label, url, children]``
    triples, the index variable to the shard heads, and each UI message name
    to its text.
    """
    payload: dict[str, object] = {
        document.tree_var: [_node_literal(node) for node in document.tree],
        document.index_var: list(document.index.heads),
    }
    payload.update(document.strings.items())
    encoded = msgspec.json.encode(payload)
    if indent:
        encoded = msgspec.json.format(encoded, indent=indent)
    return encoded


def write_json(document: NavDocument, path: Path) -> Path:
    """Write :func:`document_to_json` output to ``path`` and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(document_to_json(document) + b"\n")
    return path


__all__ = [
    "document_to_config",
    "document_to_json",
    "write_config",
    "write_json",
]
