"""Path resolution — turning ``/home/user/notes.txt`` into a node.

Resolution walks the tree one segment at a time:

- A leading ``/`` starts the walk at the root; anything else starts at
  the *base* directory (the caller's working directory).
- Empty segments (``//``, leading or trailing slashes) are skipped.
- ``.`` stays put and ``..`` climbs to the parent.  The root is its own
  parent, so ``..`` can never escape the tree.
- Any other segment is looked up by name in the current directory.

A missing segment is **not** an error here.  ``mkdir`` and friends need
to ask "does this exist?" before creating it, so the resolver reports
how far it got (``node``), whether it reached the end (``exists``), and
what was left over (``remainder``).

``node_path`` is the reverse trip: follow parent links up to the root
and join the names back together.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from iris_os.fs.node import ROOT_NAME
from iris_os.fs.results import FilesystemCorruptionError

if TYPE_CHECKING:
    from iris_os.fs.node import Node

SEPARATOR = "/"
CURRENT_DIR = "."
PARENT_DIR = ".."


@dataclass(frozen=True)
class ResolveResult:
    """Where a path walk ended up.

    Attributes:
        node: The resolved node, or the last node reached before the
            walk stopped.
        exists: True if every segment was consumed.
        remainder: The unresolved segments joined by ``/`` (None when
            ``exists`` is True).

    """

    node: Node
    exists: bool
    remainder: str | None = None


def split_segments(path: str) -> list[str]:
    """Split *path* on ``/`` and drop empty segments.

    Examples::

        "/home//user/" → ["home", "user"]
        "../docs"      → ["..", "docs"]
        "/"            → []

    """
    return [part for part in path.split(SEPARATOR) if part]


def resolve(path: str, base: Node | None = None, *, root: Node) -> ResolveResult:
    """Walk *path* from *base* (or the root) and report where it ends.

    Args:
        path: Absolute or relative slash-delimited path.
        base: Starting directory for relative paths (default: root).
        root: The root of the tree.

    Returns:
        A ``ResolveResult``; never raises for a missing path.

    """
    if path == SEPARATOR:
        return ResolveResult(node=root, exists=True)

    current = root if path.startswith(SEPARATOR) or base is None else base
    parts = split_segments(path)

    for i, part in enumerate(parts):
        if part == CURRENT_DIR and current.is_directory:
            continue
        if part == PARENT_DIR and current.is_directory:
            current = current.parent or root
            continue

        # Nothing can be looked up inside a file, not even . or ..
        child = current.children.get(part) if current.is_directory else None
        if child is None:
            return ResolveResult(
                node=current,
                exists=False,
                remainder=SEPARATOR.join(parts[i:]),
            )
        current = child

    return ResolveResult(node=current, exists=True)


def node_path(node: Node) -> str:
    """Return the canonical absolute path of *node*.

    Raises:
        FilesystemCorruptionError: If a parent link is dangling or the
            parent does not list the node under its name.

    """
    names: list[str] = []
    current = node
    while current.has_parent_link:
        parent = current.parent
        if parent is None:
            msg = f"Dangling parent reference on node: {current.name}"
            raise FilesystemCorruptionError(msg)
        if parent.children.get(current.name) is not current:
            msg = f"Parent {parent.name} does not list child: {current.name}"
            raise FilesystemCorruptionError(msg)
        names.append(current.name)
        current = parent

    if current.name != ROOT_NAME:
        msg = f"Node is not attached to the tree: {node.name}"
        raise FilesystemCorruptionError(msg)

    return SEPARATOR + SEPARATOR.join(reversed(names))


def absolute_path(path: str, cwd: str = SEPARATOR) -> str:
    """Join *path* onto *cwd* and collapse ``.``/``..`` lexically.

    Used for messages and for building the absolute path an operation
    works on.  ``..`` at the root stays at the root, same as resolution.

    Examples::

        absolute_path("docs", "/home/user")    → "/home/user/docs"
        absolute_path("../..", "/home/user")   → "/"
        absolute_path("/etc/./hosts", "/tmp")  → "/etc/hosts"

    """
    joined = path if path.startswith(SEPARATOR) else f"{cwd}{SEPARATOR}{path}"
    stack: list[str] = []
    for part in split_segments(joined):
        if part == CURRENT_DIR:
            continue
        if part == PARENT_DIR:
            if stack:
                stack.pop()
            continue
        stack.append(part)
    return SEPARATOR + SEPARATOR.join(stack)


def parent_and_name(path: str) -> tuple[str, str]:
    """Split an absolute path into (parent_path, final_segment).

    The final segment is returned raw, so it may be ``.`` or ``..``.

    Examples::

        "/foo/bar/baz.txt" → ("/foo/bar", "baz.txt")
        "/hello.txt"       → ("/", "hello.txt")
        "/"                → ("/", "")

    """
    parts = split_segments(path)
    if not parts:
        return (SEPARATOR, "")
    return (SEPARATOR + SEPARATOR.join(parts[:-1]), parts[-1])
