"""The shell — command interpreter for the operating system.

The shell reads a command line, splits it into a verb and arguments,
dispatches to a handler, and returns the output as a string.

The shell owns the one piece of session state the file system does
not: the **current working directory**.  Every filesystem verb passes
``cwd`` to the tree operation, which resolves relative paths against
it.  ``cd`` is the only verb that moves the cursor, and it stores the
canonical path of the directory it landed on.

Design choices:
    - **Returns strings, not prints.**  The caller (REPL or web app)
      decides how to display output.
    - **Command dispatch via a dict.**  The verb set is closed and
      known up front; adding one means a method plus a table entry.
    - **Failures become ``Error: ...`` text.**  Tree operations return
      results instead of raising, so handlers just check ``success``.
"""

from __future__ import annotations

import platform
import sys
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from iris_os.fs.filesystem import FileSystem, listing_order
from iris_os.fs.resolver import SEPARATOR, absolute_path, split_segments
from iris_os.fs.results import FsErrorKind, FsResult
from iris_os.logging import LogLevel
from iris_os.system import System, SystemState
from iris_os.terminal import format_table

# Type alias for a command handler: takes a list of args, returns output.
_Handler = Callable[[list[str]], str]

_SOURCE = "shell"
_HOME = "~"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_MIN_TRANSFER_ARGS = 2
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class CommandHelp:
    """Help text for one shell verb."""

    description: str
    usage: str
    examples: tuple[str, ...] = ()
    options: tuple[str, ...] = ()


COMMAND_HELP: dict[str, CommandHelp] = {
    "help": CommandHelp("Display available commands", "help [command]", ("help", "help ls")),
    "ls": CommandHelp(
        "List directory contents",
        "ls [options] [directory]",
        ("ls", "ls -l", "ls /home"),
        ("-l: Long format with details", "-a: Show hidden files"),
    ),
    "cd": CommandHelp("Change current directory", "cd [directory]", ("cd /home", "cd ..", "cd ~")),
    "pwd": CommandHelp("Print working directory", "pwd", ("pwd",)),
    "mkdir": CommandHelp(
        "Create a new directory", "mkdir [directory]", ("mkdir test", "mkdir /home/user/docs")
    ),
    "touch": CommandHelp(
        "Create an empty file", "touch [filename]", ("touch test.txt", "touch /home/user/file.md")
    ),
    "cat": CommandHelp(
        "Display file contents", "cat [filename]", ("cat README.txt", "cat /home/user/notes.md")
    ),
    "write": CommandHelp(
        "Create or replace a text file",
        "write [filename] [text...]",
        ("write note.txt Remember the milk", 'write todo.md "- ship it"'),
    ),
    "rm": CommandHelp(
        "Remove a file or empty directory",
        "rm [options] [path]",
        ("rm file.txt", "rm /home/user/empty-dir"),
        ("-r: Accepted for compatibility; directories must still be empty",),
    ),
    "mv": CommandHelp(
        "Move or rename files and directories",
        "mv [source] [destination]",
        ("mv file.txt newname.txt", "mv file.txt /home/user/"),
    ),
    "cp": CommandHelp(
        "Copy files and directories (directories are copied empty)",
        "cp [source] [destination]",
        ("cp file.txt copy.txt", "cp file.txt /home/user/"),
    ),
    "echo": CommandHelp(
        "Display a line of text", "echo [text]", ("echo Hello World", 'echo "Text with spaces"')
    ),
    "clear": CommandHelp("Clear the terminal screen", "clear", ("clear",)),
    "date": CommandHelp("Display the current date and time", "date", ("date",)),
    "whoami": CommandHelp("Display current user", "whoami", ("whoami",)),
    "sysinfo": CommandHelp("Display system information", "sysinfo", ("sysinfo",)),
    "history": CommandHelp("Show command history", "history", ("history",)),
    "log": CommandHelp(
        "Show the system log",
        "log [level]",
        ("log", "log warning"),
        ("level: debug, info, warning or error (minimum severity)",),
    ),
    "exit": CommandHelp("Exit the IrisOS shell", "exit", ("exit", "shutdown")),
}


def parse_command(line: str) -> tuple[str, list[str]]:
    """Split a command line into a verb and its arguments.

    Whitespace separates arguments.  Single or double quotes group text
    (including spaces) into one argument, and a backslash makes the
    next character literal.

    Examples::

        'ls -l /home'          → ("ls", ["-l", "/home"])
        'echo "a  b" c'        → ("echo", ["a  b", "c"])
        r'touch my\\ file.txt' → ("touch", ["my file.txt"])

    Raises:
        ValueError: If a quote is left open.

    """
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None
    has_token = False
    escape_next = False

    for char in line.strip():
        if escape_next:
            current.append(char)
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            has_token = True
            continue
        if quote is not None:
            if char == quote:
                quote = None
            else:
                current.append(char)
            continue
        if char in ("'", '"'):
            quote = char
            has_token = True
            continue
        if char.isspace():
            if has_token:
                tokens.append("".join(current))
                current = []
                has_token = False
            continue
        current.append(char)
        has_token = True

    if quote is not None:
        msg = f"unterminated quote: {quote}"
        raise ValueError(msg)
    if has_token:
        tokens.append("".join(current))

    if not tokens:
        return ("", [])
    return (tokens[0], tokens[1:])


def _split_options(args: list[str]) -> tuple[set[str], list[str]]:
    """Separate ``-xy`` style flags (as single letters) from operands."""
    flags: set[str] = set()
    operands: list[str] = []
    for arg in args:
        if arg.startswith("-") and len(arg) > 1:
            flags.update(arg[1:])
        else:
            operands.append(arg)
    return flags, operands


class Shell:
    """Command interpreter bound to a running system.

    The constructor enforces that the system is running — commands
    make no sense without a file system to act on.
    """

    EXIT_SENTINEL = "__EXIT__"

    def __init__(self, *, system: System, cwd: str = SEPARATOR) -> None:
        """Create a shell attached to a running system.

        Args:
            system: A booted system instance.
            cwd: Initial working directory (must be an existing directory).

        Raises:
            RuntimeError: If the system is not running.
            ValueError: If *cwd* is not an existing directory.

        """
        if system.state is not SystemState.RUNNING:
            msg = f"Shell requires a running system (state: {system.state}, not running)"
            raise RuntimeError(msg)

        self._system = system
        found = system.filesystem.resolve(cwd)
        if not found.exists or not found.node.is_directory:
            msg = f"Initial directory does not exist: {cwd}"
            raise ValueError(msg)
        self._cwd = system.filesystem.path_of(found.node)
        self._history: list[str] = []

        # Command dispatch table: verb -> handler method.
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "ls": self._cmd_ls,
            "cd": self._cmd_cd,
            "pwd": self._cmd_pwd,
            "mkdir": self._cmd_mkdir,
            "touch": self._cmd_touch,
            "cat": self._cmd_cat,
            "write": self._cmd_write,
            "rm": self._cmd_rm,
            "mv": self._cmd_mv,
            "cp": self._cmd_cp,
            "echo": self._cmd_echo,
            "clear": self._cmd_clear,
            "date": self._cmd_date,
            "whoami": self._cmd_whoami,
            "sysinfo": self._cmd_sysinfo,
            "history": self._cmd_history,
            "log": self._cmd_log,
            "exit": self._cmd_exit,
            "shutdown": self._cmd_exit,
        }

    @property
    def system(self) -> System:
        """Return the system this shell is attached to."""
        return self._system

    @property
    def cwd(self) -> str:
        """Return the current working directory."""
        return self._cwd

    @property
    def command_names(self) -> list[str]:
        """Return all verbs the shell understands, sorted."""
        return sorted(self._commands)

    @property
    def _fs(self) -> FileSystem:
        return self._system.filesystem

    def execute(self, command: str) -> str:
        """Parse and execute one command line.

        Args:
            command: The raw command string (e.g. "ls -l /home").

        Returns:
            The command output, ``""`` for silent commands, an
            ``Error: ...`` / ``Usage: ...`` message, or ``EXIT_SENTINEL``.

        """
        stripped = command.strip()
        if stripped:
            self._history.append(stripped)

        if self._system.state is not SystemState.RUNNING:
            return "Error: system is not running"

        try:
            name, args = parse_command(stripped)
        except ValueError as e:
            return f"Error: {e}"
        if not name:
            return ""

        handler = self._commands.get(name)
        if handler is None:
            return f"Unknown command: {name}. Type 'help' for available commands."

        self._system.logger.log(LogLevel.DEBUG, f"exec: {stripped}", source=_SOURCE)
        return handler(args)

    # -- Helpers ---------------------------------------------------------

    def _expand_home(self, path: str) -> str:
        """Replace a leading ``~`` with the configured home directory."""
        home = self._system.config.home
        if path == _HOME:
            return home
        if path.startswith(_HOME + SEPARATOR):
            return home.rstrip(SEPARATOR) + path[len(_HOME) :]
        return path

    def _report(self, result: FsResult) -> str:
        """Turn a tree-operation result into shell output."""
        if result.success:
            return result.message
        self._system.logger.log(
            LogLevel.WARNING, f"{result.error}: {result.message}", source=_SOURCE
        )
        return f"Error: {result.message}"

    def _into_directory(self, src: str, dst: str) -> str:
        """Retarget *dst* to ``dst/<name of src>`` when it is a directory.

        This gives ``mv a.txt /home/user/`` the usual meaning of "move
        into that directory".
        """
        found = self._fs.resolve(dst, self._cwd)
        src_parts = split_segments(src)
        if not found.exists or not found.node.is_directory or not src_parts:
            return dst
        return f"{dst.rstrip(SEPARATOR)}{SEPARATOR}{src_parts[-1]}"

    # -- Command handlers ------------------------------------------------

    def _cmd_help(self, args: list[str]) -> str:
        """List commands, or describe one in detail."""
        if not args:
            rows = [
                {"Command": name, "Description": info.description}
                for name, info in COMMAND_HELP.items()
            ]
            return (
                "IrisOS Available Commands:\n\n"
                + format_table(rows)
                + "\n\nType 'help [command]' for more information on a specific command."
            )

        name = args[0]
        info = COMMAND_HELP.get(name)
        if info is None:
            return f"Error: No help available for '{name}'. Type 'help' for a list of commands."

        lines = [name.upper(), f"Description: {info.description}", f"Usage: {info.usage}"]
        if info.options:
            lines.append("Options:")
            lines.extend(f"  {option}" for option in info.options)
        if info.examples:
            lines.append("Examples:")
            lines.extend(f"  {example}" for example in info.examples)
        return "\n".join(lines)

    def _cmd_ls(self, args: list[str]) -> str:
        """List directory contents, directories first."""
        flags, operands = _split_options(args)
        target = self._expand_home(operands[-1]) if operands else self._cwd

        result = self._fs.list_directory(target, self._cwd)
        if not result.success or result.items is None:
            return self._report(result)

        items = sorted(result.items, key=listing_order)
        if "a" not in flags:
            items = [item for item in items if not item.name.startswith(".")]
        if not items:
            return "<empty directory>"

        if "l" in flags:
            rows = [
                {
                    "Type": "d" if item.is_directory else "-",
                    "Name": item.name,
                    "Size": item.display_size,
                    "Modified": item.modified_at.astimezone().strftime(_TIMESTAMP_FORMAT),
                }
                for item in items
            ]
            return format_table(rows)
        return "\n".join(item.name for item in items)

    def _cmd_cd(self, args: list[str]) -> str:
        """Change the working directory (no argument or ``~`` → home)."""
        target = self._expand_home(args[0] if args else _HOME)
        found = self._fs.resolve(target, self._cwd)
        display = absolute_path(target, self._cwd)
        if not found.exists:
            return self._report(
                FsResult.fail(FsErrorKind.NOT_FOUND, f"Directory not found: {display}")
            )
        if not found.node.is_directory:
            return self._report(
                FsResult.fail(FsErrorKind.NOT_A_DIRECTORY, f"Not a directory: {display}")
            )
        self._cwd = self._fs.path_of(found.node)
        return ""

    def _cmd_pwd(self, _args: list[str]) -> str:
        """Print the working directory."""
        return self._cwd

    def _cmd_mkdir(self, args: list[str]) -> str:
        """Create a directory."""
        if not args:
            return "Usage: mkdir <path>"
        return self._report(self._fs.mkdir(self._expand_home(args[0]), self._cwd))

    def _cmd_touch(self, args: list[str]) -> str:
        """Create an empty file, or bump the timestamp of an existing one."""
        if not args:
            return "Usage: touch <path>"
        path = self._expand_home(args[0])
        existing = self._fs.read_file(path, self._cwd)
        content = existing.content if existing.success and existing.content else ""
        return self._report(self._fs.write_file(path, content, self._cwd))

    def _cmd_cat(self, args: list[str]) -> str:
        """Print file contents."""
        if not args:
            return "Usage: cat <path>"
        result = self._fs.read_file(self._expand_home(args[0]), self._cwd)
        if not result.success:
            return self._report(result)
        return result.content or ""

    def _cmd_write(self, args: list[str]) -> str:
        """Write text to a file, replacing any previous content."""
        if len(args) < _MIN_TRANSFER_ARGS:
            return "Usage: write <path> <content...>"
        path = self._expand_home(args[0])
        return self._report(self._fs.write_file(path, " ".join(args[1:]), self._cwd))

    def _cmd_rm(self, args: list[str]) -> str:
        """Remove a file or empty directory."""
        _flags, operands = _split_options(args)
        if not operands:
            return "Usage: rm [-r] <path>"
        return self._report(self._fs.delete(self._expand_home(operands[-1]), self._cwd))

    def _cmd_mv(self, args: list[str]) -> str:
        """Move or rename a file or directory."""
        if len(args) < _MIN_TRANSFER_ARGS:
            return "Usage: mv <source> <destination>"
        src = self._expand_home(args[0])
        dst = self._into_directory(src, self._expand_home(args[1]))
        return self._report(self._fs.move(src, dst, self._cwd))

    def _cmd_cp(self, args: list[str]) -> str:
        """Copy a file, or create an empty copy of a directory."""
        if len(args) < _MIN_TRANSFER_ARGS:
            return "Usage: cp <source> <destination>"
        src = self._expand_home(args[0])
        dst = self._into_directory(src, self._expand_home(args[1]))
        return self._report(self._fs.copy(src, dst, self._cwd))

    def _cmd_echo(self, args: list[str]) -> str:
        """Echo arguments back as output."""
        return " ".join(args)

    def _cmd_clear(self, _args: list[str]) -> str:
        """Clear the terminal screen."""
        return _CLEAR_SCREEN

    def _cmd_date(self, _args: list[str]) -> str:
        """Show the current local date and time."""
        return datetime.now().astimezone().strftime("%a %b %d %Y %H:%M:%S %Z")

    def _cmd_whoami(self, _args: list[str]) -> str:
        """Show the current user."""
        config = self._system.config
        return f"{config.username}@{config.hostname}"

    def _cmd_sysinfo(self, _args: list[str]) -> str:
        """Show system information."""
        config = self._system.config
        mode = "safe" if config.safe_mode else "normal"
        return "\n".join(
            [
                "IrisOS System Information",
                f"System: IrisOS v{config.version}",
                f"Platform: Python {platform.python_version()}",
                f"Runtime: {sys.platform}",
                f"Uptime: {int(self._system.uptime)} seconds",
                f"Mode: {mode}",
            ]
        )

    def _cmd_history(self, _args: list[str]) -> str:
        """Show command history."""
        if not self._history:
            return "No history."
        return "\n".join(f"  {i + 1}  {cmd}" for i, cmd in enumerate(self._history))

    def _cmd_log(self, args: list[str]) -> str:
        """Show log entries, optionally at or above a minimum level."""
        min_level: LogLevel | None = None
        if args:
            try:
                min_level = LogLevel[args[0].upper()]
            except KeyError:
                return f"Error: unknown log level '{args[0]}'"
        entries = self._system.logger.filter(min_level=min_level)
        return "\n".join(str(e) for e in entries) if entries else "No log entries."

    def _cmd_exit(self, _args: list[str]) -> str:
        """Shut down the system and signal the REPL to stop."""
        self._system.shutdown()
        return self.EXIT_SENTINEL
