"""Terminal formatting helpers — colours, tables, and the prompt.

All helpers are pure functions that return strings.  Colour is applied
with ANSI escape codes; ``strip_ansi`` removes them again, which
``format_table`` relies on to measure column widths.
"""

import re
from collections.abc import Mapping, Sequence

_ANSI_RE = re.compile(r"\x1b\[\d+m")

COLORS: dict[str, str] = {
    "black": "\x1b[30m",
    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "blue": "\x1b[34m",
    "magenta": "\x1b[35m",
    "cyan": "\x1b[36m",
    "white": "\x1b[37m",
}
RESET = "\x1b[0m"

_COLUMN_GAP = 2


def color_text(text: str, color: str) -> str:
    """Wrap *text* in the ANSI code for *color* (unknown colours: no code)."""
    return f"{COLORS.get(color, '')}{text}{RESET}"


def strip_ansi(text: str) -> str:
    """Remove ANSI colour codes from *text*."""
    return _ANSI_RE.sub("", text)


def format_table(rows: Sequence[Mapping[str, object]]) -> str:
    """Render *rows* as a left-aligned text table with a header.

    Columns come from the first row's keys.  Widths are measured on the
    visible text, so coloured cells line up with plain ones.

    Example::

        Type  Name    Size
        ------------------
        d     docs    -
        -     a.txt   5

    """
    if not rows:
        return ""

    columns = list(rows[0].keys())
    widths = {col: len(col) for col in columns}
    for row in rows:
        for col in columns:
            widths[col] = max(widths[col], len(strip_ansi(str(row.get(col, "")))))

    def _cell(value: object, col: str) -> str:
        text = str(value)
        padding = widths[col] + _COLUMN_GAP - len(strip_ansi(text))
        return text + " " * padding

    lines = ["".join(_cell(col, col) for col in columns).rstrip()]
    lines.append("-" * sum(widths[col] + _COLUMN_GAP for col in columns))
    lines.extend(
        "".join(_cell(row.get(col, ""), col) for col in columns).rstrip() for row in rows
    )
    return "\n".join(lines)


def format_prompt(username: str, hostname: str, cwd: str, *, color: bool = False) -> str:
    """Build the shell prompt, e.g. ``user@irisos:/home/user$ ``."""
    if color:
        return (
            f"{color_text(username, 'green')}@{color_text(hostname, 'green')}"
            f":{color_text(cwd, 'blue')}$ "
        )
    return f"{username}@{hostname}:{cwd}$ "
