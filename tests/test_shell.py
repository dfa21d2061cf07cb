"""Tests for the shell module.

The shell is the command interpreter — it parses user input, dispatches
to verbs, and returns string output.  It owns the working directory
and passes it to every filesystem operation.
"""

import pytest

from iris_os.config import SystemConfig
from iris_os.logging import LogLevel
from iris_os.shell import Shell, parse_command
from iris_os.system import System, SystemState


def _booted_shell(config: SystemConfig | None = None) -> tuple[System, Shell]:
    """Create a booted system and shell for testing."""
    system = System(config)
    system.boot()
    return system, Shell(system=system)


class TestParseCommand:
    """Verify tokenising of command lines."""

    def test_simple_words(self) -> None:
        """Whitespace separates verb and arguments."""
        assert parse_command("ls  -l   /home") == ("ls", ["-l", "/home"])

    def test_empty_line(self) -> None:
        """A blank line has no verb."""
        assert parse_command("   ") == ("", [])

    def test_double_quotes_group(self) -> None:
        """Double quotes keep spaces inside one argument."""
        assert parse_command('echo "a  b" c') == ("echo", ["a  b", "c"])

    def test_single_quotes_keep_double(self) -> None:
        """A different quote character inside quotes is literal."""
        assert parse_command("echo 'say \"hi\"'") == ("echo", ['say "hi"'])

    def test_backslash_escapes_space(self) -> None:
        """A backslash makes the next character literal."""
        assert parse_command(r"touch my\ file.txt") == ("touch", ["my file.txt"])

    def test_empty_quotes_make_empty_argument(self) -> None:
        """A quoted empty string is still an argument."""
        assert parse_command('write a.txt ""') == ("write", ["a.txt", ""])

    def test_unterminated_quote_raises(self) -> None:
        """An open quote at end of line is an error."""
        with pytest.raises(ValueError, match="unterminated"):
            parse_command('echo "oops')


class TestShellCreation:
    """Verify shell initialisation."""

    def test_shell_requires_running_system(self) -> None:
        """The shell should reject a system that hasn't booted."""
        with pytest.raises(RuntimeError, match="not running"):
            Shell(system=System())

    def test_shell_starts_at_root(self) -> None:
        """The default working directory is the root."""
        _system, shell = _booted_shell()
        assert shell.cwd == "/"

    def test_shell_initial_cwd_must_exist(self) -> None:
        """A missing initial directory is rejected."""
        system = System()
        system.boot()
        with pytest.raises(ValueError, match="does not exist"):
            Shell(system=system, cwd="/nope")

    def test_command_names_sorted(self) -> None:
        """command_names lists every verb in order."""
        _system, shell = _booted_shell()
        assert shell.command_names == sorted(shell.command_names)
        assert {"ls", "cd", "mv", "cp", "exit"} <= set(shell.command_names)


class TestShellExecute:
    """Verify command dispatch."""

    def test_empty_command_returns_empty(self) -> None:
        """An empty command should produce no output."""
        _system, shell = _booted_shell()
        assert shell.execute("") == ""

    def test_unknown_command_returns_error(self) -> None:
        """An unknown command should produce an error message."""
        _system, shell = _booted_shell()
        result = shell.execute("foobar")
        assert "Unknown command" in result
        assert "foobar" in result

    def test_parse_error_reported(self) -> None:
        """A malformed line becomes an error string."""
        _system, shell = _booted_shell()
        assert shell.execute('echo "oops').startswith("Error:")

    def test_commands_are_logged(self) -> None:
        """Each executed verb is logged at DEBUG."""
        system, shell = _booted_shell()
        shell.execute("pwd")
        messages = [e.message for e in system.logger.filter(source="shell")]
        assert "exec: pwd" in messages


class TestShellHelp:
    """Verify the help command."""

    def test_help_lists_commands(self) -> None:
        """Help should list available commands."""
        _system, shell = _booted_shell()
        result = shell.execute("help")
        for name in ("ls", "cd", "mkdir", "help"):
            assert name in result

    def test_help_for_command(self) -> None:
        """Help with a verb shows usage, options and examples."""
        _system, shell = _booted_shell()
        result = shell.execute("help ls")
        assert "Usage: ls" in result
        assert "-l" in result
        assert "Examples:" in result

    def test_help_unknown(self) -> None:
        """Help for an unknown verb is an error."""
        _system, shell = _booted_shell()
        assert shell.execute("help nope").startswith("Error:")


class TestNavigation:
    """Verify cd and pwd."""

    def test_cd_absolute(self) -> None:
        """Cd to an absolute path moves the cursor."""
        _system, shell = _booted_shell()
        assert shell.execute("cd /home/user") == ""
        assert shell.execute("pwd") == "/home/user"

    def test_cd_relative_and_parent(self) -> None:
        """Relative paths and '..' are resolved against cwd."""
        _system, shell = _booted_shell()
        shell.execute("cd home")
        shell.execute("cd user")
        assert shell.cwd == "/home/user"
        shell.execute("cd ..")
        assert shell.cwd == "/home"

    def test_cd_stores_canonical_path(self) -> None:
        """The cursor holds the canonical path, not the typed one."""
        _system, shell = _booted_shell()
        shell.execute("cd /home//./user/../user/")
        assert shell.cwd == "/home/user"

    def test_cd_home(self) -> None:
        """Cd with no argument or '~' goes to the home directory."""
        _system, shell = _booted_shell()
        shell.execute("cd")
        assert shell.cwd == "/home/user"
        shell.execute("cd /")
        shell.execute("cd ~")
        assert shell.cwd == "/home/user"

    def test_cd_above_root_stays(self) -> None:
        """'..' at the root stays at the root."""
        _system, shell = _booted_shell()
        shell.execute("cd ../../..")
        assert shell.cwd == "/"

    def test_cd_missing(self) -> None:
        """Cd to a missing directory fails and leaves cwd unchanged."""
        _system, shell = _booted_shell()
        result = shell.execute("cd /nope")
        assert result.startswith("Error:")
        assert shell.cwd == "/"

    def test_cd_file(self) -> None:
        """Cd to a file fails."""
        _system, shell = _booted_shell()
        assert shell.execute("cd /README.txt") == "Error: Not a directory: /README.txt"

    def test_cd_failure_shows_normalised_path(self) -> None:
        """The error names the absolute path, not the typed one."""
        _system, shell = _booted_shell()
        shell.execute("cd /home")
        assert shell.execute("cd ./user/../nope") == "Error: Directory not found: /home/nope"

    def test_cd_failure_is_logged(self) -> None:
        """A failed cd is logged as a warning like other filesystem verbs."""
        system, shell = _booted_shell()
        shell.execute("cd /nope")
        warnings = system.logger.filter(min_level=LogLevel.WARNING, source="shell")
        assert [e.message for e in warnings] == ["not_found: Directory not found: /nope"]


class TestShellFilesystemCommands:
    """Verify ls, mkdir, touch, cat, write, rm, mv and cp."""

    def test_ls_root(self) -> None:
        """Ls on root shows the seeded layout, directories first."""
        _system, shell = _booted_shell()
        assert shell.execute("ls /").splitlines() == ["bin", "etc", "home", "README.txt"]

    def test_ls_defaults_to_cwd(self) -> None:
        """Ls without a path lists the working directory."""
        _system, shell = _booted_shell()
        shell.execute("cd /home")
        assert shell.execute("ls") == "user"

    def test_ls_empty_directory(self) -> None:
        """An empty directory prints a placeholder."""
        _system, shell = _booted_shell()
        assert shell.execute("ls /bin") == "<empty directory>"

    def test_ls_hides_dotfiles(self) -> None:
        """Dotfiles are hidden unless -a is given."""
        _system, shell = _booted_shell()
        shell.execute("touch /bin/.hidden")
        assert shell.execute("ls /bin") == "<empty directory>"
        assert shell.execute("ls -a /bin") == ".hidden"

    def test_ls_long(self) -> None:
        """Ls -l shows a table with type, name and size."""
        _system, shell = _booted_shell()
        shell.execute("write /etc/motd hello")
        shell.execute("mkdir /etc/conf.d")
        result = shell.execute("ls -l /etc")
        lines = result.splitlines()
        assert lines[0].split() == ["Type", "Name", "Size", "Modified"]
        assert lines[2].split()[:3] == ["d", "conf.d", "-"]
        assert lines[3].split()[:3] == ["-", "motd", "5"]

    def test_ls_missing(self) -> None:
        """Ls on a missing path is an error."""
        _system, shell = _booted_shell()
        assert shell.execute("ls /nope").startswith("Error:")

    def test_mkdir_then_ls(self) -> None:
        """Creating a directory should make it appear in ls."""
        _system, shell = _booted_shell()
        assert "Directory created: /docs" in shell.execute("mkdir /docs")
        assert "docs" in shell.execute("ls /")

    def test_mkdir_relative(self) -> None:
        """Mkdir resolves relative names against cwd."""
        _system, shell = _booted_shell()
        shell.execute("cd ~")
        shell.execute("mkdir projects")
        assert shell.execute("ls /home/user") == "projects"

    def test_mkdir_duplicate(self) -> None:
        """Mkdir of an existing path reports the clash."""
        _system, shell = _booted_shell()
        assert "already exists" in shell.execute("mkdir /home")

    def test_mkdir_missing_arg(self) -> None:
        """Mkdir without an argument should produce a usage error."""
        _system, shell = _booted_shell()
        assert shell.execute("mkdir").startswith("Usage:")

    def test_write_then_cat(self) -> None:
        """Writing to a file then reading it back with cat."""
        _system, shell = _booted_shell()
        shell.execute("write /hello.txt Hello, OS!")
        assert shell.execute("cat /hello.txt") == "Hello, OS!"

    def test_write_quoted(self) -> None:
        """Quoted content keeps its spacing."""
        _system, shell = _booted_shell()
        shell.execute('write /a.txt "two  spaces"')
        assert shell.execute("cat /a.txt") == "two  spaces"

    def test_touch_creates_empty(self) -> None:
        """Touch creates an empty file."""
        _system, shell = _booted_shell()
        shell.execute("touch /empty.txt")
        assert shell.execute("cat /empty.txt") == ""

    def test_touch_keeps_content(self) -> None:
        """Touch on an existing file keeps its content."""
        _system, shell = _booted_shell()
        shell.execute("write /a.txt keep me")
        shell.execute("touch /a.txt")
        assert shell.execute("cat /a.txt") == "keep me"

    def test_cat_nonexistent_file(self) -> None:
        """Cat on a missing file should produce an error."""
        _system, shell = _booted_shell()
        result = shell.execute("cat /nope.txt")
        assert result == "Error: File not found: /nope.txt"

    def test_cat_readme(self) -> None:
        """The seeded README is readable."""
        _system, shell = _booted_shell()
        assert "Welcome to IrisOS" in shell.execute("cat README.txt")

    def test_cat_home_tilde(self) -> None:
        """A leading '~/' expands to the home directory."""
        _system, shell = _booted_shell()
        shell.execute("write ~/notes.txt hi")
        assert shell.execute("cat /home/user/notes.txt") == "hi"

    def test_rm_file(self) -> None:
        """Rm should delete a file."""
        _system, shell = _booted_shell()
        shell.execute("touch /hello.txt")
        assert "Deleted" in shell.execute("rm /hello.txt")
        assert "hello.txt" not in shell.execute("ls /")

    def test_rm_non_empty_directory(self) -> None:
        """Rm -r is accepted but still refuses non-empty directories."""
        _system, shell = _booted_shell()
        result = shell.execute("rm -r /home")
        assert result == "Error: Directory not empty: /home"

    def test_rm_root(self) -> None:
        """The root cannot be removed."""
        _system, shell = _booted_shell()
        assert shell.execute("rm /") == "Error: Cannot delete root directory"

    def test_rm_missing_operand(self) -> None:
        """Rm with only flags is a usage error."""
        _system, shell = _booted_shell()
        assert shell.execute("rm -r").startswith("Usage:")

    def test_mv_rename(self) -> None:
        """Mv renames within a directory."""
        _system, shell = _booted_shell()
        shell.execute("write /a.txt data")
        assert "Moved /a.txt to /b.txt" in shell.execute("mv /a.txt /b.txt")
        assert shell.execute("cat /b.txt") == "data"
        assert shell.execute("cat /a.txt").startswith("Error:")

    def test_mv_into_directory(self) -> None:
        """Mv onto an existing directory moves the source inside it."""
        _system, shell = _booted_shell()
        shell.execute("write /a.txt data")
        shell.execute("mv /a.txt /home/user/")
        assert shell.execute("cat /home/user/a.txt") == "data"

    def test_mv_missing_args(self) -> None:
        """Mv needs two operands."""
        _system, shell = _booted_shell()
        assert shell.execute("mv /a.txt").startswith("Usage:")

    def test_cp_file(self) -> None:
        """Cp duplicates a file."""
        _system, shell = _booted_shell()
        shell.execute("write /a.txt data")
        shell.execute("cp /a.txt /b.txt")
        assert shell.execute("cat /a.txt") == "data"
        assert shell.execute("cat /b.txt") == "data"

    def test_cp_directory_is_shallow(self) -> None:
        """Cp of a directory creates an empty directory."""
        _system, shell = _booted_shell()
        shell.execute("mkdir /d")
        shell.execute("write /d/f.txt x")
        assert "Copied directory /d to /e" in shell.execute("cp /d /e")
        assert shell.execute("ls /e") == "<empty directory>"

    def test_failures_are_logged(self) -> None:
        """Failed filesystem operations are logged as warnings."""
        system, shell = _booted_shell()
        shell.execute("cat /nope.txt")
        warnings = system.logger.filter(min_level=LogLevel.WARNING, source="shell")
        assert any("not_found" in e.message for e in warnings)


class TestMiscCommands:
    """Verify echo, whoami, sysinfo, history, log, clear and date."""

    def test_echo(self) -> None:
        """Echo joins its arguments."""
        _system, shell = _booted_shell()
        assert shell.execute("echo Hello   World") == "Hello World"

    def test_whoami_uses_config(self) -> None:
        """Whoami reports the configured user and host."""
        _system, shell = _booted_shell(SystemConfig(username="alice", hostname="box"))
        assert shell.execute("whoami") == "alice@box"

    def test_sysinfo(self) -> None:
        """Sysinfo shows version and platform details."""
        _system, shell = _booted_shell()
        result = shell.execute("sysinfo")
        assert "IrisOS v1.0" in result
        assert "Python" in result

    def test_history(self) -> None:
        """History lists previous commands in order."""
        _system, shell = _booted_shell()
        shell.execute("pwd")
        shell.execute("echo hi")
        result = shell.execute("history")
        assert "1  pwd" in result
        assert "2  echo hi" in result

    def test_log_shows_boot(self) -> None:
        """The log includes the boot message."""
        _system, shell = _booted_shell()
        assert "booted" in shell.execute("log info")

    def test_log_unknown_level(self) -> None:
        """An unknown level name is an error."""
        _system, shell = _booted_shell()
        assert shell.execute("log loud").startswith("Error:")

    def test_clear_returns_escape(self) -> None:
        """Clear returns the ANSI clear-screen sequence."""
        _system, shell = _booted_shell()
        assert shell.execute("clear").startswith("\x1b[2J")

    def test_date_not_empty(self) -> None:
        """Date returns some text."""
        _system, shell = _booted_shell()
        assert shell.execute("date")


class TestShellExit:
    """Verify the exit command."""

    def test_exit_returns_sentinel(self) -> None:
        """The exit command should return the EXIT sentinel."""
        _system, shell = _booted_shell()
        assert shell.execute("exit") == Shell.EXIT_SENTINEL

    def test_shutdown_alias(self) -> None:
        """Shutdown behaves like exit."""
        system, shell = _booted_shell()
        assert shell.execute("shutdown") == Shell.EXIT_SENTINEL
        assert system.state is SystemState.SHUTDOWN

    def test_commands_after_exit(self) -> None:
        """Once the system stops, commands report an error."""
        _system, shell = _booted_shell()
        shell.execute("exit")
        assert shell.execute("ls") == "Error: system is not running"
