"""Interactive REPL (Read-Eval-Print Loop) for IrisOS.

The REPL is the terminal interface.  It loads the configuration, boots
a system, creates a shell, and enters the classic loop:

    1. **Read** — display a prompt and read user input.
    2. **Eval** — pass the command to ``shell.execute()``.
    3. **Print** — display the result.
    4. **Loop** — repeat until the shell returns the exit sentinel.

The shell is fully testable (returns strings, no I/O); this module is
the thin I/O wrapper around it.  ``build_prompt`` and
``format_welcome`` are pure and testable; ``run()`` is the entrypoint.
"""

import readline
import sys
from pathlib import Path

from iris_os.completer import Completer
from iris_os.config import ConfigError, SystemConfig, load_config
from iris_os.shell import Shell
from iris_os.system import System, SystemState
from iris_os.terminal import color_text, format_prompt

_LOGO = (
    "  _____       _       ____   _____ ",
    " |_   _|     (_)     / __ \\ / ____|",
    "   | |  _ __  _ ___ | |  | | (___  ",
    "   | | | '_ \\| / __|| |  | |\\___ \\ ",
    "  _| |_| | | | \\__ \\| |__| |____) |",
    " |_____|_| |_|_|___/ \\____/|_____/ ",
)


def format_welcome(config: SystemConfig, boot_log: list[str]) -> str:
    """Format the welcome banner shown after boot.

    The boot log is included only in verbose mode; safe mode adds a
    warning line.

    Args:
        config: The effective system configuration.
        boot_log: Messages from ``System.dmesg()``.

    """
    parts = ["\n".join(_LOGO), f"\nWelcome to IrisOS v{config.version}\n"]
    if config.verbose:
        parts.append("\n".join(f"  {msg}" for msg in boot_log) + "\n")
    if config.safe_mode:
        parts.append("IrisOS is running in Safe Mode\n")
    parts.append('Type "help" to see available commands.\n')
    return "\n".join(parts)


def build_prompt(shell: Shell, *, color: bool = False) -> str:
    """Build the prompt string for the shell's current state.

    Returns:
        A prompt like ``user@irisos:/home/user$ ``, or ``irisos $ `` once
        the system has stopped.

    """
    config = shell.system.config
    if shell.system.state is not SystemState.RUNNING:
        return f"{config.hostname} $ "
    return format_prompt(config.username, config.hostname, shell.cwd, color=color)


def run(config_path: Path | None = None) -> None:
    """Boot IrisOS and run the interactive REPL.

    This is the main entrypoint.  It handles:
    - Configuration (optional JSON file plus ``IRISOS_*`` variables).
    - System boot and shell creation.
    - The read-eval-print loop with tab completion.
    - Graceful handling of Ctrl+C and Ctrl+D.
    - Clean shutdown.
    """
    if config_path is None and len(sys.argv) > 1:
        config_path = Path(sys.argv[1])

    try:
        config = load_config(config_path)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    system = System(config)
    system.boot()
    shell = Shell(system=system)
    use_color = sys.stdout.isatty()

    # Wire up tab completion via readline.
    completer = Completer(shell)
    readline.set_completer(completer.complete)
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")

    banner = format_welcome(config, system.dmesg())
    print(color_text(banner, "cyan") if use_color else banner)  # noqa: T201

    try:
        while system.state is SystemState.RUNNING:
            try:
                command = input(build_prompt(shell, color=use_color))
            except EOFError:
                # Ctrl+D
                print()  # noqa: T201
                break

            result = shell.execute(command)
            if result == Shell.EXIT_SENTINEL:
                break
            if result:
                print(result)  # noqa: T201

    except KeyboardInterrupt:
        # Ctrl+C
        print("\nInterrupted.")  # noqa: T201

    finally:
        if system.state is SystemState.RUNNING:
            system.shutdown()
        print("System halted.")  # noqa: T201
