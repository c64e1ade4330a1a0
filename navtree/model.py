"""Immutable values describing a documentation navigation bundle.

A bundle is the trio of structures a documentation viewer loads to draw its
sidebar: the nested tree of labelled links (:class:`NavNode`), the flat,
sorted index of page URLs used for sharded lookup (:class:`NavIndex`), and the
toggle messages shown next to the tree (:class:`UIStrings`).
:class:`NavDocument` groups them together with the variable names used in the
generated JavaScript.

Examples
--------
>>> from navtree.model import NavNode, SubtreeRef
>>> node = NavNode("Modules", "modules.html", SubtreeRef("modules"))
>>> node.children.var_name
'modules'
>>> NavNode("About", "about.html").is_leaf
True
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import re

from ._constants import (
    DEFAULT_INDEX_VAR,
    DEFAULT_MESSAGES,
    DEFAULT_TREE_VAR,
    SUBTREE_FILE_SUFFIX,
    SYNC_OFF_KEY,
    SYNC_ON_KEY,
)

_IDENTIFIER_INVALID = re.compile(r"[^A-Za-z0-9_$]")

TreePath = tuple[int, ...]


class NavTreeError(ValueError):
    """Raised when navigation data violates the tree invariants."""


@dc.dataclass(frozen=True, slots=True)
class SubtreeRef:
    """Reference to a subtree defined in its own script file.

    Attributes
    ----------
    name : str
        Reference as it appears in the parent entry, for example
        ``"d6/d70/quantile"``. The subtree lives in ``<name>.js``.
    nodes : tuple[NavNode, ...] | None
        Entries of the subtree once resolved, or ``None`` when the subtree is
        only known by name.
    """

    name: str
    nodes: tuple[NavNode, ...] | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            msg = "Subtree reference name cannot be empty."
            raise NavTreeError(msg)
        if self.nodes is not None:
            nodes = tuple(self.nodes)
            if not nodes:
                msg = f"Subtree '{self.name}' must contain at least one entry."
                raise NavTreeError(msg)
            object.__setattr__(self, "nodes", nodes)

    @property
    def var_name(self) -> str:
        """Return the JavaScript variable that holds the subtree entries."""
        basename = self.name.rstrip("/").rsplit("/", 1)[-1]
        return _IDENTIFIER_INVALID.sub("_", basename) or "_"

    @property
    def filename(self) -> str:
        """Return the bundle-relative script path for the subtree."""
        return f"{self.name}{SUBTREE_FILE_SUFFIX}"

    @property
    def is_resolved(self) -> bool:
        """Return ``True`` when the subtree entries are known."""
        return self.nodes is not None

    def resolved(self, nodes: cabc.Iterable[NavNode]) -> SubtreeRef:
        """Return a copy of the reference carrying ``nodes``."""
        return SubtreeRef(self.name, tuple(nodes))


Children = tuple["NavNode", ...] | SubtreeRef | None


@dc.dataclass(frozen=True, slots=True)
class NavNode:
    """One entry of the sidebar tree.

    Attributes
    ----------
    label : str
        Text shown in the sidebar.
    url : str
        Page path relative to the documentation root, optionally with a
        ``#fragment``.
    children : tuple[NavNode, ...] | SubtreeRef | None
        ``None`` for a leaf, a non-empty tuple of inline entries, or a
        reference to an external subtree.
    """

    label: str
    url: str
    children: Children = None

    def __post_init__(self) -> None:
        children = self.children
        if children is None or isinstance(children, SubtreeRef):
            return
        if isinstance(children, str):
            object.__setattr__(self, "children", SubtreeRef(children))
            return
        nodes = tuple(children)
        if not nodes:
            msg = f"Entry '{self.label}' has an empty children list; use None."
            raise NavTreeError(msg)
        object.__setattr__(self, "children", nodes)

    @property
    def is_leaf(self) -> bool:
        """Return ``True`` when the entry has no children at all."""
        return self.children is None

    def child_nodes(self) -> tuple[NavNode, ...]:
        """Return inline children or resolved subtree entries, else ``()``."""
        match self.children:
            case SubtreeRef(nodes=nodes):
                return nodes or ()
            case tuple() as nodes:
                return nodes
            case _:
                return ()


@dc.dataclass(frozen=True, slots=True)
class IndexShard:
    """One ``navtreeindex<k>.js`` table mapping URLs to tree paths."""

    entries: tuple[tuple[str, TreePath], ...]

    @property
    def first_url(self) -> str | None:
        """Return the first URL in the shard, or ``None`` when empty."""
        return self.entries[0][0] if self.entries else None

    def urls(self) -> list[str]:
        """Return the shard URLs in stored order."""
        return [url for url, _path in self.entries]


@dc.dataclass(frozen=True, slots=True)
class NavIndex:
    """Sorted URL index used by the viewer to locate pages in the tree.

    Attributes
    ----------
    heads : tuple[str, ...]
        First URL of every shard, in sorted order. This is the list written to
        ``navtreedata.js``.
    shards : tuple[IndexShard, ...]
        Full shard tables. Empty when only ``navtreedata.js`` was read.
    """

    heads: tuple[str, ...] = ()
    shards: tuple[IndexShard, ...] = ()

    @property
    def has_shards(self) -> bool:
        """Return ``True`` when shard tables are available."""
        return bool(self.shards)

    def urls(self) -> list[str]:
        """Return every indexed URL, or only the heads when shards are absent."""
        if not self.shards:
            return list(self.heads)
        return [url for shard in self.shards for url in shard.urls()]

    def lookup(self, url: str) -> TreePath | None:
        """Return the tree path stored for ``url``, or ``None``."""
        for shard in self.shards:
            for candidate, path in shard.entries:
                if candidate == url:
                    return path
        return None


@dc.dataclass(frozen=True, slots=True)
class UIStrings:
    """Ordered message key to display text pairs for the viewer controls."""

    entries: tuple[tuple[str, str], ...] = tuple(DEFAULT_MESSAGES.items())

    @classmethod
    def from_mapping(cls, mapping: cabc.Mapping[str, str]) -> UIStrings:
        """Build strings from ``mapping``, keeping its iteration order."""
        return cls(tuple((str(key), str(text)) for key, text in mapping.items()))

    def __getitem__(self, key: str) -> str:
        for candidate, text in self.entries:
            if candidate == key:
                return text
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return any(candidate == key for candidate, _text in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the text for ``key`` or ``default``."""
        try:
            return self[key]
        except KeyError:
            return default

    def items(self) -> list[tuple[str, str]]:
        return list(self.entries)

    def as_dict(self) -> dict[str, str]:
        return dict(self.entries)

    @property
    def sync_on(self) -> str | None:
        """Message shown while panel synchronisation is enabled."""
        return self.get(SYNC_ON_KEY)

    @property
    def sync_off(self) -> str | None:
        """Message shown while panel synchronisation is disabled."""
        return self.get(SYNC_OFF_KEY)


@dc.dataclass(frozen=True, slots=True)
class NavDocument:
    """Everything written to (or read from) a navigation bundle."""

    tree: tuple[NavNode, ...]
    index: NavIndex = dc.field(default_factory=NavIndex)
    strings: UIStrings = dc.field(default_factory=UIStrings)
    tree_var: str = DEFAULT_TREE_VAR
    index_var: str = DEFAULT_INDEX_VAR

    def __post_init__(self) -> None:
        object.__setattr__(self, "tree", tuple(self.tree))

    def walk(self) -> cabc.Iterator[tuple[TreePath, NavNode]]:
        """Yield ``(path, node)`` pairs for the whole tree, depth first."""
        return walk(self.tree)

    def subtrees(self) -> list[SubtreeRef]:
        """Return every external subtree reference, first occurrence only."""
        seen: set[str] = set()
        refs: list[SubtreeRef] = []
        for _path, node in self.walk():
            if isinstance(node.children, SubtreeRef) and node.children.name not in seen:
                seen.add(node.children.name)
                refs.append(node.children)
        return refs


def walk(
    nodes: cabc.Iterable[NavNode], prefix: TreePath = ()
) -> cabc.Iterator[tuple[TreePath, NavNode]]:
    """Yield ``(path, node)`` pairs depth first in document order.

    Parameters
    ----------
    nodes : Iterable[NavNode]
        Sibling entries to traverse.
    prefix : tuple[int, ...], optional
        Path of the parent entry; positions are appended to it.

    Yields
    ------
    tuple[tuple[int, ...], NavNode]
        Full position trail from the top-level list and the entry itself.
        Resolved external subtrees are descended into; unresolved ones are
        not.
    """
    for position, node in enumerate(nodes):
        path = (*prefix, position)
        yield path, node
        yield from walk(node.child_nodes(), path)


def iter_urls(nodes: cabc.Iterable[NavNode]) -> cabc.Iterator[str]:
    """Yield every URL in ``nodes`` in depth-first order."""
    for _path, node in walk(nodes):
        yield node.url


__all__ = [
    "Children",
    "IndexShard",
    "NavDocument",
    "NavIndex",
    "NavNode",
    "NavTreeError",
    "SubtreeRef",
    "TreePath",
    "UIStrings",
    "iter_urls",
    "walk",
]
