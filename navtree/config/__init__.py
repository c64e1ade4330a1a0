"""Load and validate navtree YAML configuration.

This subpackage parses a ``navtree.yaml`` file describing a documentation
sidebar, applies defaults for output location, shard size, variable names,
and UI messages, and produces a :class:`NavTreeConfig` whose
:meth:`~NavTreeConfig.document` is ready for
:class:`~navtree.writer.NavTreeWriter`.

Examples
--------
>>> from pathlib import Path
>>> from navtree.config import load_navtree_config
>>> config = load_navtree_config(Path("navtree.yaml"))  # doctest: +SKIP
>>> config.tree[0].label  # doctest: +SKIP
'PING'
"""

from .loader import load_navtree_config
from .models import NavTreeConfig, NavTreeConfigError

__all__ = ["NavTreeConfig", "NavTreeConfigError", "load_navtree_config"]
