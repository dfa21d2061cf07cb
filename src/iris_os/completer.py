"""Context-aware tab completer for the IrisOS shell.

The completer separates **what to complete** (pure logic, fully
testable) from **how to wire it** (readline integration in the REPL).

The ``complete(text, state)`` method is the readline callback.  It
delegates to ``completions(text, line)`` which analyses the input
context and returns a list of candidate strings.
"""

from __future__ import annotations

import readline
from typing import TYPE_CHECKING

from iris_os.fs.filesystem import listing_order
from iris_os.fs.resolver import SEPARATOR
from iris_os.shell import COMMAND_HELP
from iris_os.system import SystemState

if TYPE_CHECKING:
    from iris_os.shell import Shell

# Commands whose arguments are filesystem paths.
_PATH_COMMANDS: frozenset[str] = frozenset(
    ["ls", "cd", "mkdir", "touch", "cat", "write", "rm", "mv", "cp"]
)

# Commands that only take directories.
_DIRECTORY_COMMANDS: frozenset[str] = frozenset(["cd", "mkdir"])


class Completer:
    """Context-aware tab completer for the IrisOS shell."""

    def __init__(self, shell: Shell) -> None:
        """Create a completer attached to a shell instance.

        Args:
            shell: The shell whose verbs and working directory are used
                   to generate completion candidates.

        """
        self._shell = shell

    def complete(self, text: str, state: int) -> str | None:
        """Readline callback — return the *state*-th candidate for *text*.

        Args:
            text: The partial word being completed.
            state: Index into the candidate list (0, 1, 2, …).

        Returns:
            The candidate at *state*, or ``None`` when exhausted.

        """
        line = readline.get_line_buffer()
        candidates = self.completions(text, line)
        if state < len(candidates):
            return candidates[state]
        return None

    def completions(self, text: str, line: str) -> list[str]:
        """Return completion candidates based on context.

        Args:
            text: The partial word under the cursor.
            line: The full input line so far.

        """
        words = line.lstrip().split()

        # No words yet, or still typing the first word → command completion
        if not words or (len(words) == 1 and not line.endswith(" ")):
            return self._complete_commands(text)

        cmd = words[0]
        if cmd == "help":
            return sorted(name for name in COMMAND_HELP if name.startswith(text))
        if cmd in _PATH_COMMANDS or text.startswith(SEPARATOR):
            return self._complete_paths(text, directories_only=cmd in _DIRECTORY_COMMANDS)
        return []

    def _complete_commands(self, text: str) -> list[str]:
        """Complete command names from the shell's dispatch table."""
        return [cmd for cmd in self._shell.command_names if cmd.startswith(text)]

    def _complete_paths(self, text: str, *, directories_only: bool = False) -> list[str]:
        """Complete paths relative to the shell's working directory.

        Split the partial path into a directory and a name prefix, list
        the directory, and filter by prefix.  Directories get a trailing
        ``/``.  Hidden entries are offered only when the prefix starts
        with ``.``.
        """
        last_slash = text.rfind(SEPARATOR)
        directory = text[: last_slash + 1]
        prefix = text[last_slash + 1 :]

        if self._shell.system.state is not SystemState.RUNNING:
            return []
        result = self._shell.system.filesystem.list_directory(
            directory or ".", self._shell.cwd
        )
        if not result.success or result.items is None:
            return []

        candidates: list[str] = []
        for item in sorted(result.items, key=listing_order):
            if not item.name.startswith(prefix):
                continue
            if item.name.startswith(".") and not prefix.startswith("."):
                continue
            if directories_only and not item.is_directory:
                continue
            suffix = SEPARATOR if item.is_directory else ""
            candidates.append(f"{directory}{item.name}{suffix}")
        return candidates
