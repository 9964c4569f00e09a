"""Tokenizing of response text and quoting of command arguments."""

import re

# A double-quoted run (quotes dropped) or a run of non-whitespace.
# An unterminated quote swallows the rest of the line.
_ATOM_RE = re.compile(r'"([^"]*)"?|(\S+)')


def split_atoms(text: str) -> list[str]:
    """
    Split text into whitespace-separated atoms.

    Double-quoted substrings form a single atom with the quotes removed,
    so ``'wn "WordNet (r) 3.0"'`` yields ``["wn", "WordNet (r) 3.0"]``.
    """
    atoms = []
    for match in _ATOM_RE.finditer(text):
        quoted, bare = match.groups()
        atoms.append(bare if bare is not None else quoted)
    return atoms


def is_quoted(arg: str) -> bool:
    """Check whether an argument already carries a double quote at either end."""
    return arg.startswith('"') or arg.endswith('"')


def quote_argument(arg: str) -> str:
    """
    Wrap an argument in double quotes if it contains whitespace.

    Arguments that already start or end with a double quote are sent as they
    are. Embedded quotes and backslashes are not escaped.
    """
    if any(ch.isspace() for ch in arg) and not is_quoted(arg):
        return f'"{arg}"'
    return arg


def format_command(keyword: str, *args: str) -> str:
    """
    Build a command line (without terminator) from a keyword and its arguments.

    Raises:
        ValueError: If an argument contains a CR or LF, which would split the
            command into several lines on the wire
    """
    for arg in args:
        if "\r" in arg or "\n" in arg:
            raise ValueError(f"Command argument contains a line break: {arg!r}")
    return " ".join([keyword, *(quote_argument(arg) for arg in args)])
