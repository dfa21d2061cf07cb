"""In-memory file system — tree operations over nodes.

``FileSystem`` owns one root directory and exposes the primitive
operations a shell needs: ``mkdir``, ``write_file``, ``read_file``,
``list_directory``, ``delete``, ``move`` and ``copy``.

Every operation takes a path that may be relative, plus the caller's
working directory as a plain string.  The file system never stores a
working directory of its own; the shell owns that cursor and passes it
in on every call.

Each operation validates everything it needs *before* touching the
tree.  A failed ``move`` therefore never leaves a node half-unlinked:
an operation either applies completely or not at all.

Failures are returned, not raised (see ``iris_os.fs.results``).
"""

from __future__ import annotations

from dataclasses import dataclass

from iris_os.fs.node import ROOT_NAME, EntryInfo, Node
from iris_os.fs.resolver import (
    CURRENT_DIR,
    PARENT_DIR,
    SEPARATOR,
    ResolveResult,
    absolute_path,
    node_path,
    parent_and_name,
    resolve,
    split_segments,
)
from iris_os.fs.results import FilesystemCorruptionError, FsErrorKind, FsResult

DEFAULT_HOME = "/home/user"
DEFAULT_DIRECTORIES = ("/home", "/bin", "/etc")
README_PATH = "/README.txt"
README_TEXT = (
    "Welcome to IrisOS!\n\n"
    "This is a text-based operating system.\n"
    'Type "help" to see available commands.\n'
)


def listing_order(entry: EntryInfo) -> tuple[bool, str]:
    """Sort key for listings: directories first, then by name."""
    return (not entry.is_directory, entry.name)


def _join(path: str, cwd: str) -> str:
    """Prefix a relative *path* with *cwd* without normalising it."""
    if path.startswith(SEPARATOR):
        return path
    return f"{SEPARATOR}{cwd.strip(SEPARATOR)}{SEPARATOR}{path}"


@dataclass(frozen=True)
class _Slot:
    """The place a path names: a parent directory and a final name.

    ``name`` is empty when the path names the root itself.
    """

    display: str
    parent_display: str
    parent: ResolveResult
    name: str


class FileSystem:
    """An in-memory hierarchical file system.

    The file system starts with a single empty root directory named
    ``/``.  ``seed_filesystem`` adds the default layout.
    """

    def __init__(self) -> None:
        """Create a file system with an empty root directory."""
        self._root = Node.directory(ROOT_NAME)

    @property
    def root(self) -> Node:
        """Return the root directory."""
        return self._root

    # -- Resolution ------------------------------------------------------

    def resolve(self, path: str, cwd: str = SEPARATOR) -> ResolveResult:
        """Resolve *path* against *cwd* (see ``iris_os.fs.resolver.resolve``)."""
        return resolve(_join(path, cwd), root=self._root)

    def exists(self, path: str, cwd: str = SEPARATOR) -> bool:
        """Check whether *path* names an existing node."""
        return self.resolve(path, cwd).exists

    @staticmethod
    def path_of(node: Node) -> str:
        """Return the canonical absolute path of *node*."""
        return node_path(node)

    def _slot(self, path: str, cwd: str) -> _Slot:
        """Locate the parent directory and final name that *path* refers to."""
        joined = _join(path, cwd)
        parent_raw, name = parent_and_name(joined)
        return _Slot(
            display=absolute_path(joined),
            parent_display=absolute_path(parent_raw),
            parent=resolve(parent_raw, root=self._root),
            name=name,
        )

    def _occupant(self, slot: _Slot) -> Node | None:
        """Return the node already sitting at *slot*, if any.

        Only meaningful once the slot's parent is known to be a
        directory.  ``.``, ``..`` and the root always name an existing
        directory.
        """
        parent = slot.parent.node
        if not slot.name:
            return self._root
        if slot.name in (CURRENT_DIR, PARENT_DIR):
            return resolve(slot.name, parent, root=self._root).node
        return parent.children.get(slot.name)

    @staticmethod
    def _is_within(node: Node, ancestor: Node) -> bool:
        """Return True if *node* is *ancestor* or lies below it."""
        current: Node | None = node
        while current is not None:
            if current is ancestor:
                return True
            current = current.parent
        return False

    @staticmethod
    def _unlink(node: Node) -> None:
        """Remove *node* from its parent's children."""
        parent = node.parent
        if parent is None or parent.children.get(node.name) is not node:
            msg = f"Cannot unlink node with broken parent link: {node.name}"
            raise FilesystemCorruptionError(msg)
        parent.detach(node)

    # -- Operations ------------------------------------------------------

    def mkdir(self, path: str, cwd: str = SEPARATOR) -> FsResult:
        """Create an empty directory.

        Fails with ``PARENT_NOT_FOUND``, ``NOT_A_DIRECTORY`` (the parent
        is a file) or ``ALREADY_EXISTS``.
        """
        slot = self._slot(path, cwd)
        if not slot.parent.exists:
            return FsResult.fail(
                FsErrorKind.PARENT_NOT_FOUND,
                f"Parent directory does not exist: {slot.parent_display}",
            )
        parent = slot.parent.node
        if not parent.is_directory:
            return FsResult.fail(
                FsErrorKind.NOT_A_DIRECTORY, f"{slot.parent_display} is not a directory"
            )
        if self._occupant(slot) is not None:
            return FsResult.fail(FsErrorKind.ALREADY_EXISTS, f"{slot.display} already exists")

        parent.attach(Node.directory(slot.name))
        return FsResult.ok(f"Directory created: {slot.display}")

    def write_file(self, path: str, content: str, cwd: str = SEPARATOR) -> FsResult:
        """Create a file, or replace the content of an existing one.

        Overwriting bumps the file's modification time.  Fails with
        ``PARENT_NOT_FOUND``, ``NOT_A_DIRECTORY`` or
        ``CANNOT_OVERWRITE_DIRECTORY``.
        """
        slot = self._slot(path, cwd)
        if not slot.parent.exists:
            return FsResult.fail(
                FsErrorKind.PARENT_NOT_FOUND,
                f"Parent directory does not exist: {slot.parent_display}",
            )
        parent = slot.parent.node
        if not parent.is_directory:
            return FsResult.fail(
                FsErrorKind.NOT_A_DIRECTORY, f"{slot.parent_display} is not a directory"
            )

        existing = self._occupant(slot)
        if existing is not None and existing.is_directory:
            return FsResult.fail(
                FsErrorKind.CANNOT_OVERWRITE_DIRECTORY,
                f"Cannot overwrite directory with file: {slot.display}",
            )

        if existing is not None:
            existing.content = content
            existing.touch()
        else:
            parent.attach(Node.file(slot.name, content))
        return FsResult.ok(f"File written: {slot.display}")

    def read_file(self, path: str, cwd: str = SEPARATOR) -> FsResult:
        """Return a file's content in ``FsResult.content``.

        Fails with ``NOT_FOUND`` or ``NOT_A_FILE``.
        """
        display = absolute_path(path, cwd)
        found = self.resolve(path, cwd)
        if not found.exists:
            return FsResult.fail(FsErrorKind.NOT_FOUND, f"File not found: {display}")
        if not found.node.is_file:
            return FsResult.fail(FsErrorKind.NOT_A_FILE, f"{display} is not a file")
        return FsResult.ok(content=found.node.content)

    def list_directory(self, path: str = SEPARATOR, cwd: str = SEPARATOR) -> FsResult:
        """Return snapshots of a directory's direct children in ``items``.

        Entries come back unordered; callers sort with ``listing_order``.
        Fails with ``NOT_FOUND`` or ``NOT_A_DIRECTORY``.
        """
        display = absolute_path(path, cwd)
        found = self.resolve(path, cwd)
        if not found.exists:
            return FsResult.fail(FsErrorKind.NOT_FOUND, f"Directory not found: {display}")
        if not found.node.is_directory:
            return FsResult.fail(FsErrorKind.NOT_A_DIRECTORY, f"{display} is not a directory")
        items = tuple(child.to_info() for child in found.node.children.values())
        return FsResult.ok(f"{len(items)} entries in {display}", items=items)

    def delete(self, path: str, cwd: str = SEPARATOR) -> FsResult:
        """Delete a file or an empty directory.

        There is no recursive delete.  Fails with ``CANNOT_DELETE_ROOT``,
        ``NOT_FOUND`` or ``DIRECTORY_NOT_EMPTY``.
        """
        display = absolute_path(path, cwd)
        found = self.resolve(path, cwd)
        if found.exists and found.node is self._root:
            return FsResult.fail(FsErrorKind.CANNOT_DELETE_ROOT, "Cannot delete root directory")
        if not found.exists:
            return FsResult.fail(FsErrorKind.NOT_FOUND, f"Path not found: {display}")

        node = found.node
        if node.is_directory and node.children:
            return FsResult.fail(
                FsErrorKind.DIRECTORY_NOT_EMPTY, f"Directory not empty: {display}"
            )

        self._unlink(node)
        return FsResult.ok(f"Deleted: {display}")

    def move(self, src: str, dst: str, cwd: str = SEPARATOR) -> FsResult:
        """Move or rename a node.

        The node keeps its identity and content; only its name and
        parent change.  Fails with ``NOT_FOUND`` (source),
        ``INVALID_DESTINATION`` (missing or non-directory destination
        parent, or a destination inside the source) or
        ``ALREADY_EXISTS``.
        """
        src_display = absolute_path(src, cwd)
        found = self.resolve(src, cwd)
        if not found.exists:
            return FsResult.fail(FsErrorKind.NOT_FOUND, f"Source not found: {src_display}")

        slot = self._slot(dst, cwd)
        failure = self._check_destination(slot)
        if failure is not None:
            return failure

        node = found.node
        dst_parent = slot.parent.node
        if self._is_within(dst_parent, node):
            return FsResult.fail(
                FsErrorKind.INVALID_DESTINATION,
                f"Cannot move {src_display} into itself: {slot.display}",
            )

        self._unlink(node)
        node.name = slot.name
        dst_parent.attach(node)
        node.touch()
        return FsResult.ok(f"Moved {src_display} to {slot.display}")

    def copy(self, src: str, dst: str, cwd: str = SEPARATOR) -> FsResult:
        """Copy a node, leaving the source untouched.

        Files are duplicated with their content.  Directories are copied
        **shallowly**: the destination is a new empty directory and the
        source's children are not copied.  Failure kinds are the same
        as ``move``.
        """
        src_display = absolute_path(src, cwd)
        found = self.resolve(src, cwd)
        if not found.exists:
            return FsResult.fail(FsErrorKind.NOT_FOUND, f"Source not found: {src_display}")

        slot = self._slot(dst, cwd)
        failure = self._check_destination(slot)
        if failure is not None:
            return failure

        source = found.node
        if source.is_file:
            slot.parent.node.attach(Node.file(slot.name, source.content))
            return FsResult.ok(f"Copied {src_display} to {slot.display}")

        slot.parent.node.attach(Node.directory(slot.name))
        return FsResult.ok(f"Copied directory {src_display} to {slot.display}")

    def _check_destination(self, slot: _Slot) -> FsResult | None:
        """Validate a move/copy destination; return a failure or None."""
        if not slot.parent.exists:
            return FsResult.fail(
                FsErrorKind.INVALID_DESTINATION,
                f"Destination parent directory not found: {slot.parent_display}",
            )
        if not slot.parent.node.is_directory:
            return FsResult.fail(
                FsErrorKind.INVALID_DESTINATION,
                f"Destination is not a directory: {slot.parent_display}",
            )
        if self._occupant(slot) is not None:
            return FsResult.fail(
                FsErrorKind.ALREADY_EXISTS, f"Destination already exists: {slot.display}"
            )
        return None


def seed_filesystem(fs: FileSystem, *, home: str = DEFAULT_HOME) -> None:
    """Create the default layout: system directories, a home, and a README.

    Missing ancestors of *home* are created along the way.

    Raises:
        FilesystemCorruptionError: If the default layout cannot be built.

    """
    directories = list(DEFAULT_DIRECTORIES)
    parts = split_segments(home)
    directories.extend(SEPARATOR + SEPARATOR.join(parts[: i + 1]) for i in range(len(parts)))

    for directory in directories:
        if fs.exists(directory):
            continue
        result = fs.mkdir(directory)
        if not result.success:
            msg = f"Cannot seed file system: {result.message}"
            raise FilesystemCorruptionError(msg)

    result = fs.write_file(README_PATH, README_TEXT)
    if not result.success:
        msg = f"Cannot seed file system: {result.message}"
        raise FilesystemCorruptionError(msg)
