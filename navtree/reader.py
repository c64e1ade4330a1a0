"""Read a published navigation bundle from disk or over HTTP.

``navtreedata.js`` on its own only names its external subtrees and the first
URL of each index shard. :func:`read_navtree` follows those references,
loading every ``<subtree>.js`` script and every ``navtreeindex<k>.js`` shard
next to it, so that the returned :class:`~navtree.model.NavDocument` describes
the whole bundle.

Examples
--------
>>> from pathlib import Path
>>> from navtree.reader import read_navtree
>>> doc = read_navtree(Path("html"))  # doctest: +SKIP
>>> doc.index.has_shards  # doctest: +SKIP
True
>>> remote = read_navtree("https://docs.example.invalid/html/")  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

from ._constants import (
    DEFAULT_INDEX_VAR,
    DEFAULT_TREE_VAR,
    INDEX_SHARD_TEMPLATE,
    INDEX_SHARD_VAR_TEMPLATE,
    NAVTREE_DATA_FILENAME,
)
from .model import NavIndex, NavNode, SubtreeRef
from .parser import parse_index_shard, parse_navtree_data, parse_subtree
from .remote import RemoteSource

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .model import IndexShard, NavDocument

logger = logging.getLogger(__name__)


class BundleSource(typ.Protocol):
    """Anything able to return the text of a bundle-relative file."""

    def read(self, name: str) -> str | None: ...

    def close(self) -> None: ...


class LocalSource:
    """Read bundle scripts from a directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def read(self, name: str) -> str | None:
        """Return the text of ``root / name`` or ``None`` when it is missing."""
        path = self.root / name
        if not path.is_file():
            logger.debug("No local file at %s", path)
            return None
        return path.read_text(encoding="utf-8")

    def close(self) -> None:
        return None


def is_remote(location: str | Path) -> bool:
    """Return ``True`` when ``location`` is an ``http(s)`` URL."""
    return isinstance(location, str) and location.startswith(("http://", "https://"))


def open_source(location: str | Path) -> tuple[BundleSource, str]:
    """Return the source for ``location`` and the name of its data script.

    ``location`` may be a directory, a path to the data script, or a URL to
    either. URLs ending in ``.js`` name the script; any other URL is treated
    as the bundle directory.
    """
    if is_remote(location):
        url = str(location)
        if url.endswith(".js"):
            base, _, filename = url.rpartition("/")
            return RemoteSource(base), filename
        return RemoteSource(url), NAVTREE_DATA_FILENAME
    path = Path(location)
    if path.is_dir():
        return LocalSource(path), NAVTREE_DATA_FILENAME
    return LocalSource(path.parent), path.name


def read_navtree(
    location: str | Path,
    *,
    resolve: bool = True,
    tree_var: str = DEFAULT_TREE_VAR,
    index_var: str = DEFAULT_INDEX_VAR,
) -> NavDocument:
    """Read a navigation bundle.

    Parameters
    ----------
    location : str | Path
        Bundle directory, path to ``navtreedata.js``, or an ``http(s)`` URL to
        either.
    resolve : bool, optional
        Load external subtrees and index shards. Defaults to ``True``.
    tree_var, index_var : str, optional
        Variable names of the tree and index declarations.

    Returns
    -------
    NavDocument
        Parsed document. Subtrees and shards whose files are missing stay
        unresolved or absent; the gaps are logged and left for validation to
        report.

    Raises
    ------
    FileNotFoundError
        If the data script itself does not exist.
    NavTreeParseError
        If any script is malformed.
    RemoteFetchError
        If a remote file cannot be retrieved for reasons other than 404.
    """
    source, filename = open_source(location)
    try:
        text = source.read(filename)
        if text is None:
            msg = f"Navigation data '{filename}' not found at '{location}'."
            raise FileNotFoundError(msg)
        document = parse_navtree_data(text, tree_var=tree_var, index_var=index_var)
        if not resolve:
            return document
        tree = _resolve_nodes(document.tree, source, {}, frozenset())
        shards = _load_shards(document, source)
    finally:
        source.close()
    return dc.replace(
        document, tree=tree, index=NavIndex(heads=document.index.heads, shards=shards)
    )


def _resolve_nodes(
    nodes: cabc.Iterable[NavNode],
    source: BundleSource,
    cache: dict[str, tuple[NavNode, ...] | None],
    visiting: frozenset[str],
) -> tuple[NavNode, ...]:
    """Return ``nodes`` with every reachable external subtree resolved."""
    resolved: list[NavNode] = []
    for node in nodes:
        match node.children:
            case SubtreeRef() as ref:
                children: tuple[NavNode, ...] | SubtreeRef | None = _resolve_ref(
                    ref, source, cache, visiting
                )
            case tuple() as inline:
                children = _resolve_nodes(inline, source, cache, visiting)
            case _:
                children = None
        resolved.append(NavNode(node.label, node.url, children))
    return tuple(resolved)


def _resolve_ref(
    ref: SubtreeRef,
    source: BundleSource,
    cache: dict[str, tuple[NavNode, ...] | None],
    visiting: frozenset[str],
) -> SubtreeRef:
    if ref.name in visiting:
        logger.warning(
            "Subtree '%s' references itself; leaving it unresolved", ref.name
        )
        return SubtreeRef(ref.name)
    if ref.name not in cache:
        text = source.read(ref.filename)
        if text is None:
            logger.warning("Subtree script '%s' not found", ref.filename)
            cache[ref.name] = None
        else:
            nodes = parse_subtree(text, ref.var_name)
            cache[ref.name] = _resolve_nodes(
                nodes, source, cache, visiting | {ref.name}
            )
    nodes = cache[ref.name]
    if nodes is None:
        return SubtreeRef(ref.name)
    return ref.resolved(nodes)


def _load_shards(
    document: NavDocument, source: BundleSource
) -> tuple[IndexShard, ...]:
    """Load one shard per index head, or none when any shard is missing."""
    shards: list[IndexShard] = []
    for number in range(len(document.index.heads)):
        filename = INDEX_SHARD_TEMPLATE.format(number=number)
        text = source.read(filename)
        if text is None:
            logger.warning("Index shard '%s' not found; using heads only", filename)
            return ()
        var_name, shard = parse_index_shard(text)
        expected = INDEX_SHARD_VAR_TEMPLATE.format(
            var=document.index_var, number=number
        )
        if var_name != expected:
            logger.warning(
                "Index shard '%s' declares '%s', expected '%s'",
                filename,
                var_name,
                expected,
            )
        shards.append(shard)
    return tuple(shards)


__all__ = [
    "BundleSource",
    "LocalSource",
    "is_remote",
    "open_source",
    "read_navtree",
]
