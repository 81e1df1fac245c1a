import os
import sys


def _interactive() -> bool:
    return sys.stdout.isatty()


def get_terminal_size() -> tuple[int, int]:
    """(columns, rows) of the attached terminal, falling back to 80x24 when piped."""
    if not _interactive():
        return (80, 24)
    size = os.get_terminal_size()
    return (size.columns, size.lines)


def supports_truecolour() -> bool:
    """Guess whether stdout understands ANSI colour escapes."""
    if not _interactive() or "NO_COLOR" in os.environ:
        return False
    return os.environ.get("TERM", "").lower() not in ("", "dumb", "unknown")
