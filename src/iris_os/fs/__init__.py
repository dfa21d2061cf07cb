"""File system subsystem — nodes, path resolution, and tree operations.

Re-exports public symbols so callers can write::

    from iris_os.fs import FileSystem, FsErrorKind
"""

from iris_os.fs.filesystem import FileSystem, listing_order, seed_filesystem
from iris_os.fs.node import EntryInfo, Node, NodeKind
from iris_os.fs.resolver import ResolveResult, absolute_path, node_path, resolve
from iris_os.fs.results import FilesystemCorruptionError, FsErrorKind, FsResult

__all__ = [
    "EntryInfo",
    "FileSystem",
    "FilesystemCorruptionError",
    "FsErrorKind",
    "FsResult",
    "Node",
    "NodeKind",
    "ResolveResult",
    "absolute_path",
    "listing_order",
    "node_path",
    "resolve",
    "seed_filesystem",
]
