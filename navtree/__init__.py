"""Build, read, and check documentation sidebar navigation bundles.

This package writes the ``navtreedata.js`` bundle a documentation viewer
loads to draw its sidebar tree, reads published bundles back, and validates
that every page in the tree is indexed and reachable.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``NavNode``, ``NavIndex``, ``UIStrings``, ``NavDocument``: bundle values.
- ``build_nav_index``, ``read_navtree``, ``validate_document``: core
  operations.

Examples
--------
>>> from navtree import NavNode, build_nav_index
>>> build_nav_index([NavNode("Home", "index.html")]).heads
('index.html',)
>>> from navtree import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main
from .index import build_nav_index
from .model import (
    NavDocument,
    NavIndex,
    NavNode,
    NavTreeError,
    SubtreeRef,
    UIStrings,
)
from .reader import read_navtree
from .validation import validate_document
from .writer import NavTreeWriter

__all__ = [
    "NavDocument",
    "NavIndex",
    "NavNode",
    "NavTreeError",
    "NavTreeWriter",
    "SubtreeRef",
    "UIStrings",
    "app",
    "build_nav_index",
    "main",
    "read_navtree",
    "validate_document",
]
