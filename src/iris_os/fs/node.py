"""Nodes — the records that make up the in-memory file tree.

Each node is either a **file** (holds text content) or a **directory**
(holds named children).  Unlike an inode table, the tree here is made
of the nodes themselves:

- A directory *owns* its children through a ``dict[str, Node]``.
  Dropping a directory drops everything below it.
- A child points back at its parent through a **weak reference**.  The
  back-link is only used to walk upward (path reconstruction) and to
  unlink a node from its parent; it never keeps the parent alive.

The name lives on the node and must match the key the parent stores it
under.  ``attach`` and ``detach`` are the only places that touch both
sides of the link, so the two stay consistent.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

ROOT_NAME = "/"


class NodeKind(StrEnum):
    """The kind of object a node represents."""

    FILE = "file"
    DIRECTORY = "directory"


def _now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class EntryInfo:
    """Read-only snapshot of a node, as returned by directory listings.

    ``size`` is the content length for files and ``None`` for
    directories; ``display_size`` renders the directory sentinel as ``-``.
    """

    name: str
    kind: NodeKind
    size: int | None
    modified_at: datetime

    @property
    def is_directory(self) -> bool:
        """Return True if the entry is a directory."""
        return self.kind is NodeKind.DIRECTORY

    @property
    def display_size(self) -> str:
        """Return the size as text, ``-`` for directories."""
        return "-" if self.size is None else str(self.size)


@dataclass(eq=False)
class Node:
    """A file or directory in the tree.

    Nodes compare by identity: two files with the same name and content
    are still different nodes.
    """

    name: str
    kind: NodeKind
    content: str = ""
    children: dict[str, Node] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]
    created_at: datetime = field(default_factory=_now)
    modified_at: datetime = field(default_factory=_now)
    _parent_ref: weakref.ReferenceType[Node] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Reject content on directories and children on files."""
        if self.kind is NodeKind.DIRECTORY and self.content:
            msg = f"Directory cannot hold content: {self.name}"
            raise ValueError(msg)
        if self.kind is NodeKind.FILE and self.children:
            msg = f"File cannot have children: {self.name}"
            raise ValueError(msg)

    @classmethod
    def directory(cls, name: str) -> Node:
        """Create an empty, unattached directory."""
        return cls(name=name, kind=NodeKind.DIRECTORY)

    @classmethod
    def file(cls, name: str, content: str = "") -> Node:
        """Create an unattached file with *content*."""
        return cls(name=name, kind=NodeKind.FILE, content=content)

    @property
    def is_directory(self) -> bool:
        """Return True if this node is a directory."""
        return self.kind is NodeKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        """Return True if this node is a file."""
        return self.kind is NodeKind.FILE

    @property
    def parent(self) -> Node | None:
        """Return the owning directory, or None for a root or detached node."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def has_parent_link(self) -> bool:
        """Return True if the node was ever linked under a parent.

        A node whose link is set but whose ``parent`` is None has lost
        its parent, which should never happen while it is in the tree.
        """
        return self._parent_ref is not None

    @property
    def size(self) -> int:
        """Return the content length (always 0 for directories)."""
        return len(self.content)

    def touch(self) -> None:
        """Bump the modification timestamp."""
        self.modified_at = _now()

    def attach(self, child: Node) -> None:
        """Link *child* under this directory by its current name.

        Raises:
            ValueError: If this node is a file or the name is taken.

        """
        if not self.is_directory:
            msg = f"Not a directory: {self.name}"
            raise ValueError(msg)
        if child.name in self.children:
            msg = f"Already exists: {child.name}"
            raise ValueError(msg)
        self.children[child.name] = child
        child._parent_ref = weakref.ref(self)  # noqa: SLF001

    def detach(self, child: Node) -> None:
        """Unlink *child* from this directory.

        Raises:
            ValueError: If *child* is not linked here under its name.

        """
        if self.children.get(child.name) is not child:
            msg = f"Not a child of {self.name}: {child.name}"
            raise ValueError(msg)
        del self.children[child.name]
        child._parent_ref = None  # noqa: SLF001

    def to_info(self) -> EntryInfo:
        """Create a read-only snapshot of this node."""
        return EntryInfo(
            name=self.name,
            kind=self.kind,
            size=None if self.is_directory else self.size,
            modified_at=self.modified_at,
        )
