"""Cyclopts CLI entrypoint for building and checking documentation sidebars.

The ``navtree`` console script defined here writes the viewer bundle
(``navtreedata.js``, its index shards, and external subtree scripts) from a
``navtree.yaml`` description, validates published bundles, and converts them
back into editable YAML or JSON. Typical usage involves running
``navtree build`` in CI after the documentation pages are generated, and
``navtree check`` against the output directory before publishing.

Examples
--------
Build the bundle for the default configuration:

>>> from navtree.cli import main
>>> main()  # doctest: +SKIP

Check a published bundle against its pages:

>>> from navtree.cli import app
>>> app(["check", "html", "--html-root", "html"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import os
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_navtree_config
from .convert import write_config, write_json
from .reader import read_navtree
from .remote import RemoteLinkChecker
from .validation import has_errors, validate_document
from .writer import NavTreeWriter

DEFAULT_CONFIG = Path("navtree.yaml")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="navtree", config=cyclopts.config.Env("NAVTREE_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Write navtreedata.js, index shards, and subtree scripts.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to navtree config", env_var="NAVTREE_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="NAVTREE_OUTPUT_DIR"),
    ] = None,
) -> None:
    """Build the navigation bundle described by a config file.

    Parameters
    ----------
    config : Path, optional
        Path to the ``navtree.yaml`` configuration file (overridable via
        ``NAVTREE_CONFIG``).
    output_dir : Path or None, optional
        Directory receiving the bundle; defaults to ``defaults.output_dir``
        from the configuration.

    Returns
    -------
    None
        Writes the bundle files and prints each generated path.
    """
    nav_config = load_navtree_config(config)
    target = output_dir or nav_config.output_dir
    written = NavTreeWriter(nav_config.document(), target).run()
    for path in written:
        print(f"wrote {_format_path(path)}")


@app.command(help="Validate a navigation bundle and report problems.")
def check(
    location: typ.Annotated[
        str, Parameter(help="Bundle directory, navtreedata.js path, or URL")
    ],
    *,
    html_root: typ.Annotated[
        Path | None,
        Parameter(
            help="Directory holding the generated pages",
            env_var="NAVTREE_HTML_ROOT",
        ),
    ] = None,
    base_url: typ.Annotated[
        str | None,
        Parameter(
            help="Published site URL used to check that pages answer",
            env_var="NAVTREE_BASE_URL",
        ),
    ] = None,
    strict: typ.Annotated[
        bool, Parameter(help="Treat warnings as failures")
    ] = False,
) -> None:
    """Read a bundle, validate it, and exit non-zero on problems.

    Parameters
    ----------
    location : str
        Bundle directory, path to ``navtreedata.js``, or an ``http(s)`` URL to
        either.
    html_root : Path or None, optional
        When given, every tree URL must name a file below this directory.
    base_url : str or None, optional
        When given, every tree URL is requested relative to this URL and must
        answer with a status below 400.
    strict : bool, optional
        Fail on warnings as well as errors.

    Raises
    ------
    SystemExit
        With status ``1`` when errors (or, with ``strict``, any issues) are
        found.
    """
    document = read_navtree(location)
    checker = RemoteLinkChecker(base_url) if base_url else None
    try:
        issues = validate_document(
            document, html_root=html_root, link_checker=checker
        )
    finally:
        if checker is not None:
            checker.close()

    for issue in issues:
        print(issue)
    if has_errors(issues) or (strict and issues):
        raise SystemExit(1)
    print(f"ok: {len(list(document.walk()))} entries checked")


@app.command(help="Convert a navigation bundle into navtree.yaml or JSON.")
def convert(
    location: typ.Annotated[
        str, Parameter(help="Bundle directory, navtreedata.js path, or URL")
    ],
    *,
    output: typ.Annotated[
        Path, Parameter(help="Destination file (.yaml, .yml, or .json)")
    ] = DEFAULT_CONFIG,
) -> None:
    """Export a bundle for editing or for consumption by other tools.

    Raises
    ------
    ValueError
        If ``output`` does not end in ``.yaml``, ``.yml``, or ``.json``.
    """
    suffix = output.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        msg = f"Unsupported output format '{output.suffix}'; use .yaml or .json."
        raise ValueError(msg)
    document = read_navtree(location)
    if suffix == ".json":
        path = write_json(document, output)
    else:
        path = write_config(document, output)
    print(f"wrote {_format_path(path)}")


def configure_logging() -> None:
    """Configure the root logger from ``NAVTREE_LOG_LEVEL`` (default WARNING)."""
    level = os.getenv("NAVTREE_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main() -> None:
    """Invoke the Cyclopts application that powers the `navtree` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    configure_logging()
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
