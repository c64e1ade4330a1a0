"""Serialise navigation documents into the viewer's JavaScript bundle.

The bundle consists of ``navtreedata.js`` (tree, shard heads, and UI
messages), one ``navtreeindex<k>.js`` file per index shard, and one script per
external subtree. File skeletons live in Jinja templates under
``navtree/templates``; the nested entry lists are laid out by
:func:`format_nodes` so the output matches the documentation generator's
literal form exactly, except that every file written here ends with a
newline where the generator stops at the final ``;``. An empty tree renders
as ``[\\n];`` and is left to validation to report.

Typical usage pairs the writer with a loaded config:

>>> from pathlib import Path
>>> from navtree.config import load_navtree_config
>>> from navtree.writer import NavTreeWriter
>>> config = load_navtree_config(Path("navtree.yaml"))  # doctest: +SKIP
>>> writer = NavTreeWriter(config.document(), config.output_dir)  # doctest: +SKIP
>>> writer.run()  # doctest: +SKIP
[PosixPath('html/navtreedata.js'), PosixPath('html/navtreeindex0.js'), ...]
"""

from __future__ import annotations

import logging
import os
import typing as typ
from pathlib import Path

import msgspec.json
from jinja2 import Environment, FileSystemLoader, select_autoescape

from ._constants import (
    INDEX_SHARD_TEMPLATE,
    INDEX_SHARD_VAR_TEMPLATE,
    NAVTREE_DATA_FILENAME,
)
from .model import NavTreeError, SubtreeRef

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .model import IndexShard, NavDocument, NavNode

logger = logging.getLogger(__name__)

_INDENT = "  "


def js_string(value: str) -> str:
    """Return ``value`` as a double-quoted JavaScript string literal."""
    return msgspec.json.encode(value).decode("utf-8")


def js_single_string(value: str) -> str:
    """Return ``value`` as a single-quoted JavaScript string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f"'{escaped}'"


def format_entry(node: NavNode, depth: int = 0) -> str:
    """Return the literal for one entry indented for ``depth``."""
    indent = _INDENT * (depth + 1)
    head = f"{indent}[ {js_string(node.label)}, {js_string(node.url)}, "
    match node.children:
        case None:
            return f"{head}null ]"
        case SubtreeRef(name=name):
            return f"{head}{js_string(name)} ]"
        case children:
            body = format_nodes(children, depth + 1)
            return f"{head}[\n{body}\n{indent}] ]"


def format_nodes(nodes: cabc.Iterable[NavNode], depth: int = 0) -> str:
    """Return the comma-separated entry lines for ``nodes``.

    Parameters
    ----------
    nodes : Iterable[NavNode]
        Sibling entries in display order.
    depth : int, optional
        Nesting level of the siblings; each level adds two spaces of
        indentation. Defaults to ``0`` (top-level entries).

    Returns
    -------
    str
        Entry literals joined by ``",\\n"``, without a trailing newline.
        External subtrees are written as their quoted reference name; their
        entries belong in a separate file.
    """
    return ",\n".join(format_entry(node, depth) for node in nodes)


def _ensure_newline(text: str) -> str:
    if not text.endswith("\n"):
        text += "\n"
    return text


class NavTreeRenderer:
    """Render bundle files from the packaged Jinja templates."""

    def __init__(self, *, templates_dir: Path | None = None) -> None:
        """Initialize the Jinja environment.

        Parameters
        ----------
        templates_dir : Path, optional
            Directory containing ``navtreedata.js.jinja``,
            ``navtreeindex.js.jinja``, and ``subtree.js.jinja``. Defaults to
            the ``navtree/templates`` directory when ``None``.
        """
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["js_string"] = js_string
        self.env.filters["js_single_string"] = js_single_string

    def navtree_data(self, document: NavDocument) -> str:
        """Return the contents of ``navtreedata.js`` for ``document``."""
        template = self.env.get_template("navtreedata.js.jinja")
        text = template.render(
            tree_var=document.tree_var,
            tree_body=format_nodes(document.tree),
            index_var=document.index_var,
            heads=document.index.heads,
            strings=document.strings.items(),
        )
        return _ensure_newline(text)

    def index_shard(self, index_var: str, number: int, shard: IndexShard) -> str:
        """Return the contents of shard ``number``."""
        template = self.env.get_template("navtreeindex.js.jinja")
        text = template.render(
            var_name=INDEX_SHARD_VAR_TEMPLATE.format(var=index_var, number=number),
            entries=shard.entries,
        )
        return _ensure_newline(text)

    def subtree(self, ref: SubtreeRef) -> str:
        """Return the script defining the entries of a resolved subtree."""
        if ref.nodes is None:
            msg = f"Subtree '{ref.name}' is not resolved and cannot be rendered."
            raise NavTreeError(msg)
        template = self.env.get_template("subtree.js.jinja")
        text = template.render(var_name=ref.var_name, body=format_nodes(ref.nodes))
        return _ensure_newline(text)


def render_navtree_data(document: NavDocument) -> str:
    """Return ``navtreedata.js`` for ``document`` using the packaged templates."""
    return NavTreeRenderer().navtree_data(document)


def render_index_shard(index_var: str, number: int, shard: IndexShard) -> str:
    """Return ``navtreeindex<number>.js`` for ``shard``."""
    return NavTreeRenderer().index_shard(index_var, number, shard)


def render_subtree(ref: SubtreeRef) -> str:
    """Return the script for a resolved external subtree."""
    return NavTreeRenderer().subtree(ref)


class NavTreeWriter:
    """Write a navigation document as a bundle of viewer scripts."""

    def __init__(
        self,
        document: NavDocument,
        output_dir: Path,
        *,
        renderer: NavTreeRenderer | None = None,
    ) -> None:
        self.document = document
        self.output_dir = output_dir
        self.renderer = renderer or NavTreeRenderer()

    def run(self) -> list[Path]:
        """Render and write every bundle file, returning the written paths.

        Returns
        -------
        list[Path]
            ``navtreedata.js`` first, then the index shards in order, then the
            resolved external subtrees in tree order.

        Raises
        ------
        NavTreeError
            If a subtree reference would place its file outside
            ``output_dir``.

        Notes
        -----
        Unresolved subtree references are written into the tree as names only;
        their files are expected to be provided by someone else and are left
        untouched.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written = [
            self._write(
                NAVTREE_DATA_FILENAME, self.renderer.navtree_data(self.document)
            )
        ]
        for number, shard in enumerate(self.document.index.shards):
            filename = INDEX_SHARD_TEMPLATE.format(number=number)
            text = self.renderer.index_shard(self.document.index_var, number, shard)
            written.append(self._write(filename, text))
        for ref in self.document.subtrees():
            if not ref.is_resolved:
                logger.info("Leaving external subtree '%s' untouched", ref.name)
                continue
            written.append(self._write(ref.filename, self.renderer.subtree(ref)))
        return written

    def _write(self, relative: str, text: str) -> Path:
        target = self._resolve_target(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        logger.debug("Wrote %s", target)
        return target

    def _resolve_target(self, relative: str) -> Path:
        """Return ``output_dir / relative``, refusing paths that escape it."""
        root = Path(os.path.abspath(self.output_dir))
        target = Path(os.path.abspath(root / relative))
        if target != root and root not in target.parents:
            msg = f"Refusing to write '{relative}' outside {self.output_dir}."
            raise NavTreeError(msg)
        return self.output_dir / relative


__all__ = [
    "NavTreeRenderer",
    "NavTreeWriter",
    "format_entry",
    "format_nodes",
    "js_single_string",
    "js_string",
    "render_index_shard",
    "render_navtree_data",
    "render_subtree",
]
