"""Load navtree configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from navtree._constants import DEFAULT_INDEX_VAR, DEFAULT_TREE_VAR

from .helpers import (
    _build_messages,
    _build_nodes,
    _coerce_shard_size,
    _identifier,
)
from .models import NavTreeConfig, NavTreeConfigError

DEFAULT_OUTPUT_DIR = Path("html")


def load_navtree_config(path: Path) -> NavTreeConfig:
    """Load the YAML configuration describing a navigation bundle.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``navtree.yaml``).

    Returns
    -------
    NavTreeConfig
        Parsed configuration, including the tree, output directory, shard
        size, variable names, and UI messages.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    NavTreeConfigError
        If the tree is missing or any entry, default, or message is invalid.
        The message names the offending entry, such as
        ``tree[0].children[3]``.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from navtree.config import load_navtree_config
    >>> config = load_navtree_config(Path("navtree.yaml"))  # doctest: +SKIP
    >>> config.output_dir  # doctest: +SKIP
    PosixPath('html')
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    defaults = raw.get("defaults", {}) or {}
    if not isinstance(defaults, dict):
        msg = "'defaults' must be a mapping."
        raise NavTreeConfigError(msg)

    tree_raw = raw.get("tree")
    if not tree_raw:
        msg = "No tree entries defined in navtree configuration."
        raise NavTreeConfigError(msg)

    tree_var = _identifier(defaults.get("tree_var", DEFAULT_TREE_VAR), "tree_var")
    index_var = _identifier(defaults.get("index_var", DEFAULT_INDEX_VAR), "index_var")
    strings = _build_messages(raw.get("messages"))
    declared = [tree_var, index_var, *(key for key, _text in strings.items())]
    if len(set(declared)) != len(declared):
        msg = f"Variable names must be distinct, got {', '.join(declared)}."
        raise NavTreeConfigError(msg)

    return NavTreeConfig(
        tree=_build_nodes(tree_raw, "tree"),
        output_dir=Path(defaults.get("output_dir", DEFAULT_OUTPUT_DIR)),
        shard_size=_coerce_shard_size(defaults.get("shard_size")),
        tree_var=tree_var,
        index_var=index_var,
        strings=strings,
    )


__all__ = ["DEFAULT_OUTPUT_DIR", "load_navtree_config"]
