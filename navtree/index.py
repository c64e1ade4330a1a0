"""Build the sorted, sharded URL index for a navigation tree.

The viewer resolves the current page by looking its URL up in the index: the
``NAVTREEINDEX`` list in ``navtreedata.js`` names the first URL of every shard
so the viewer knows which ``navtreeindex<k>.js`` file to load, and each shard
maps URLs to the position trail of the entry in the tree.

Examples
--------
>>> from navtree.index import build_nav_index
>>> from navtree.model import NavNode
>>> tree = [NavNode("Home", "index.html", [NavNode("B", "b.html"), NavNode("A", "a.html")])]
>>> index = build_nav_index(tree, shard_size=2)
>>> index.heads
('a.html', 'index.html')
>>> index.lookup("b.html")
(0,)
"""

from __future__ import annotations

import logging
import typing as typ

from ._constants import DEFAULT_SHARD_SIZE
from .model import IndexShard, NavIndex, NavTreeError, TreePath, walk

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .model import NavNode

logger = logging.getLogger(__name__)


def viewer_path(path: TreePath, *, single_root: bool) -> TreePath:
    """Return the index path for a full position trail.

    The viewer counts positions below the root entry when the tree has a single
    root, so the root itself maps to ``()`` and its children to ``(i,)``.
    Multi-root trees keep the full trail.
    """
    if single_root:
        return path[1:]
    return path


def collect_index_entries(nodes: cabc.Sequence[NavNode]) -> dict[str, TreePath]:
    """Map every URL in ``nodes`` to its index path.

    Parameters
    ----------
    nodes : Sequence[NavNode]
        Top-level tree entries.

    Returns
    -------
    dict[str, tuple[int, ...]]
        URL to path mapping. A URL seen more than once keeps the path of its
        first depth-first occurrence.
    """
    single_root = len(nodes) == 1
    entries: dict[str, TreePath] = {}
    for path, node in walk(nodes):
        if node.url in entries:
            logger.debug("Skipping duplicate index entry for %s", node.url)
            continue
        entries[node.url] = viewer_path(path, single_root=single_root)
    return entries


def build_nav_index(
    nodes: cabc.Sequence[NavNode], *, shard_size: int = DEFAULT_SHARD_SIZE
) -> NavIndex:
    """Build the :class:`NavIndex` for ``nodes``.

    Parameters
    ----------
    nodes : Sequence[NavNode]
        Top-level tree entries. Resolved external subtrees are indexed too.
    shard_size : int, optional
        Maximum number of URLs per shard file. Defaults to ``250``.

    Returns
    -------
    NavIndex
        Heads and shards with URLs in lexicographic order.

    Raises
    ------
    NavTreeError
        If ``shard_size`` is not a positive integer.
    """
    if shard_size < 1:
        msg = f"Shard size must be a positive integer, got {shard_size}."
        raise NavTreeError(msg)

    entries = collect_index_entries(nodes)
    ordered = sorted(entries.items())
    shards = tuple(
        IndexShard(tuple(ordered[start : start + shard_size]))
        for start in range(0, len(ordered), shard_size)
    )
    heads = tuple(shard.entries[0][0] for shard in shards)
    logger.debug("Indexed %d URLs into %d shard(s)", len(ordered), len(shards))
    return NavIndex(heads=heads, shards=shards)


__all__ = ["build_nav_index", "collect_index_entries", "viewer_path"]
