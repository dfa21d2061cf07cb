"""Operation results and the error taxonomy for tree operations.

Missing paths and name clashes are ordinary outcomes for a shell:
callers probe for existence all the time.  Tree operations therefore
*return* an ``FsResult`` instead of raising.  ``success`` says which way
it went; on failure ``error`` names the condition and ``message`` holds
a human-readable description.

Genuine invariant violations (a node whose parent has vanished, a
parent that doesn't list its child) are programming errors and raise
``FilesystemCorruptionError`` instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from iris_os.fs.node import EntryInfo


class FsErrorKind(StrEnum):
    """Expected, recoverable failure conditions of tree operations."""

    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    NOT_A_FILE = "not_a_file"
    ALREADY_EXISTS = "already_exists"
    PARENT_NOT_FOUND = "parent_not_found"
    CANNOT_OVERWRITE_DIRECTORY = "cannot_overwrite_directory"
    DIRECTORY_NOT_EMPTY = "directory_not_empty"
    CANNOT_DELETE_ROOT = "cannot_delete_root"
    INVALID_DESTINATION = "invalid_destination"


class FilesystemCorruptionError(RuntimeError):
    """Raise when the tree breaks one of its structural invariants."""


@dataclass(frozen=True)
class FsResult:
    """Uniform outcome of a tree operation.

    Attributes:
        success: Whether the operation took effect.
        message: Human-readable description of what happened.
        content: File content, set by ``read_file``.
        items: Directory entries, set by ``list_directory``.
        error: The failure kind, set only when ``success`` is False.

    """

    success: bool
    message: str = ""
    content: str | None = None
    items: tuple[EntryInfo, ...] | None = None
    error: FsErrorKind | None = None

    @classmethod
    def ok(
        cls,
        message: str = "",
        *,
        content: str | None = None,
        items: tuple[EntryInfo, ...] | None = None,
    ) -> FsResult:
        """Build a successful result."""
        return cls(success=True, message=message, content=content, items=items)

    @classmethod
    def fail(cls, error: FsErrorKind, message: str) -> FsResult:
        """Build a failed result carrying *error*."""
        return cls(success=False, message=message, error=error)

    def __bool__(self) -> bool:
        """Return ``success`` so results can be tested directly."""
        return self.success
