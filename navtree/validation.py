"""Check navigation documents before they are published.

The checks fall into two groups. Structural problems (empty labels or URLs,
malformed children, an index that is not sorted or does not match its shards)
are errors: a viewer would misbehave on them. Content gaps (pages missing from
the index, unresolved external subtrees, URLs whose pages cannot be found) are
warnings: the viewer tolerates them but readers may hit dead ends.

Examples
--------
>>> from navtree.model import NavDocument, NavNode
>>> from navtree.validation import has_errors, validate_document
>>> issues = validate_document(NavDocument(tree=(NavNode("", "index.html"),)))
>>> has_errors(issues)
True
>>> print(issues[0])
error: tree[0]: Entry label is empty.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .index import collect_index_entries
from .model import NavNode, SubtreeRef, TreePath

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .model import NavDocument

Severity = typ.Literal["error", "warning"]
LinkChecker = typ.Callable[[str], bool]


@dc.dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One problem found in a navigation document.

    Attributes
    ----------
    severity : {"error", "warning"}
        Errors make the document unusable; warnings flag gaps.
    location : str
        Where the problem sits, such as ``tree[0].children[3]`` or
        ``index.shards[1]``.
    message : str
        Human readable description.
    """

    severity: Severity
    location: str
    message: str

    def __str__(self) -> str:
        return f"{self.severity}: {self.location}: {self.message}"


def describe_path(path: TreePath) -> str:
    """Return a readable location such as ``tree[0].children[2]``."""
    if not path:
        return "tree"
    head, *rest = path
    return f"tree[{head}]" + "".join(f".children[{step}]" for step in rest)


def has_errors(issues: cabc.Iterable[ValidationIssue]) -> bool:
    """Return ``True`` when any issue has error severity."""
    return any(issue.severity == "error" for issue in issues)


def validate_document(
    document: NavDocument,
    *,
    html_root: Path | None = None,
    link_checker: LinkChecker | None = None,
) -> list[ValidationIssue]:
    """Validate the tree and index of ``document``.

    Parameters
    ----------
    document : NavDocument
        Document to check. Resolved external subtrees are checked like inline
        children.
    html_root : Path, optional
        Directory holding the generated pages. When given, every URL (with its
        fragment stripped) must name an existing file below it.
    link_checker : Callable[[str], bool], optional
        Callable reporting whether a URL is reachable, such as
        :class:`~navtree.remote.RemoteLinkChecker`.

    Returns
    -------
    list[ValidationIssue]
        Issues in discovery order: tree issues first, then index issues.
    """
    checker = _TreeChecker(html_root=html_root, link_checker=link_checker)
    if not document.tree:
        checker.error("tree", "Navigation tree has no entries.")
    checker.check_nodes(document.tree, ())
    issues = checker.issues
    issues.extend(_check_index(document, complete=not checker.unresolved))
    return issues


class _TreeChecker:
    """Walk the tree collecting issues and remembering what it saw."""

    def __init__(
        self, *, html_root: Path | None, link_checker: LinkChecker | None
    ) -> None:
        self.html_root = html_root
        self.link_checker = link_checker
        self.issues: list[ValidationIssue] = []
        self.unresolved: set[str] = set()
        self._seen_urls: set[str] = set()
        self._checked_pages: set[str] = set()

    def error(self, location: str, message: str) -> None:
        self.issues.append(ValidationIssue("error", location, message))

    def warning(self, location: str, message: str) -> None:
        self.issues.append(ValidationIssue("warning", location, message))

    def check_nodes(self, nodes: cabc.Iterable[object], prefix: TreePath) -> None:
        for position, node in enumerate(nodes):
            path = (*prefix, position)
            if not isinstance(node, NavNode):
                self.error(describe_path(path), "Entry is not a navigation node.")
                continue
            self._check_node(node, path)

    def _check_node(self, node: NavNode, path: TreePath) -> None:
        location = describe_path(path)
        if not isinstance(node.label, str) or not node.label.strip():
            self.error(location, "Entry label is empty.")
        if not isinstance(node.url, str) or not node.url.strip():
            self.error(location, "Entry url is empty.")
        else:
            self._check_url(node.url, location)

        match node.children:
            case None:
                return
            case SubtreeRef() as ref:
                if ref.nodes is None:
                    if ref.name not in self.unresolved:
                        self.unresolved.add(ref.name)
                        self.warning(
                            location,
                            f"External subtree '{ref.name}' is not resolved; "
                            "its entries are not checked.",
                        )
                    return
                self.check_nodes(ref.nodes, path)
            case tuple() as children if not children:
                self.error(location, "Children list is empty; leaves use null.")
            case tuple() as children:
                self.check_nodes(children, path)
            case _:
                self.error(
                    location,
                    "Children must be null, a list of entries, or a subtree reference.",
                )

    def _check_url(self, url: str, location: str) -> None:
        if url in self._seen_urls:
            self.warning(location, f"Duplicate url '{url}'.")
            return
        self._seen_urls.add(url)
        page = url.split("#", 1)[0]
        # Pages are checked once; fragments of the same page add nothing.
        if not page or page in self._checked_pages:
            return
        self._checked_pages.add(page)
        if self.html_root is not None and not (self.html_root / page).is_file():
            self.warning(location, f"Page '{page}' not found under {self.html_root}.")
        if self.link_checker is not None and not self.link_checker(page):
            self.warning(location, f"Url '{url}' is not reachable.")


def _check_index(document: NavDocument, *, complete: bool) -> list[ValidationIssue]:
    """Return index issues; ``complete`` is false when subtrees are unresolved."""
    issues: list[ValidationIssue] = []
    index = document.index
    heads = list(index.heads)
    if heads != sorted(heads):
        issues.append(
            ValidationIssue("error", "index.heads", "Index heads are not sorted.")
        )

    if not index.shards:
        if document.tree:
            issues.append(
                ValidationIssue(
                    "warning",
                    "index",
                    "Index has shard heads only; completeness is not checked.",
                )
            )
        return issues

    issues.extend(_check_shards(document))

    expected = collect_index_entries(document.tree)
    indexed: dict[str, TreePath] = {}
    for shard in index.shards:
        for url, path in shard.entries:
            indexed.setdefault(url, path)
    for url, path in expected.items():
        if url not in indexed:
            issues.append(
                ValidationIssue(
                    "warning", "index", f"Url '{url}' is missing from the index."
                )
            )
        elif indexed[url] != path:
            issues.append(
                ValidationIssue(
                    "warning",
                    "index",
                    f"Index path for '{url}' is {list(indexed[url])}, "
                    f"expected {list(path)}.",
                )
            )
    if complete:
        for url in indexed:
            if url not in expected:
                issues.append(
                    ValidationIssue(
                        "warning", "index", f"Indexed url '{url}' is not in the tree."
                    )
                )
    return issues


def _check_shards(document: NavDocument) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    index = document.index
    if len(index.heads) != len(index.shards):
        issues.append(
            ValidationIssue(
                "error",
                "index.heads",
                f"Index lists {len(index.heads)} heads for {len(index.shards)} shards.",
            )
        )
    for number, shard in enumerate(index.shards):
        location = f"index.shards[{number}]"
        if not shard.entries:
            issues.append(ValidationIssue("error", location, "Index shard is empty."))
            continue
        if number < len(index.heads) and index.heads[number] != shard.first_url:
            issues.append(
                ValidationIssue(
                    "error",
                    location,
                    f"Head '{index.heads[number]}' does not match first url "
                    f"'{shard.first_url}'.",
                )
            )
    urls = index.urls()
    if urls != sorted(urls):
        issues.append(
            ValidationIssue("error", "index.shards", "Index urls are not sorted.")
        )
    return issues


__all__ = [
    "LinkChecker",
    "Severity",
    "ValidationIssue",
    "describe_path",
    "has_errors",
    "validate_document",
]
