"""Typed dataclasses describing navtree build configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from navtree._constants import (
    DEFAULT_INDEX_VAR,
    DEFAULT_SHARD_SIZE,
    DEFAULT_TREE_VAR,
)
from navtree.index import build_nav_index
from navtree.model import NavDocument, NavNode, NavTreeError, UIStrings


class NavTreeConfigError(NavTreeError):
    """Raised when the navtree configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class NavTreeConfig:
    """A fully resolved navigation bundle definition sourced from YAML."""

    tree: tuple[NavNode, ...]
    output_dir: Path = Path("html")
    shard_size: int = DEFAULT_SHARD_SIZE
    tree_var: str = DEFAULT_TREE_VAR
    index_var: str = DEFAULT_INDEX_VAR
    strings: UIStrings = dc.field(default_factory=UIStrings)

    def document(self) -> NavDocument:
        """Return the document to write, with its index built from the tree."""
        return NavDocument(
            tree=self.tree,
            index=build_nav_index(self.tree, shard_size=self.shard_size),
            strings=self.strings,
            tree_var=self.tree_var,
            index_var=self.index_var,
        )


__all__ = ["NavTreeConfig", "NavTreeConfigError"]
