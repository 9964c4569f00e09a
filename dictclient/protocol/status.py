"""Parsing of DICT status lines ("<3-digit code> <detail text>")."""

import re
from dataclasses import dataclass

from dictclient.exceptions import ProtocolError

_STATUS_RE = re.compile(r"^(\d{3})(?:\s+(.*))?$")


@dataclass(frozen=True)
class Status:
    """A parsed server status line."""

    code: int
    detail: str = ""

    @property
    def is_preliminary(self) -> bool:
        """True for 1yz codes, which announce that text follows."""
        return 100 <= self.code < 200


def parse_status(line: str) -> Status:
    """
    Parse one response line into a Status.

    Args:
        line: A response line with its line terminator already removed

    Returns:
        Status with the numeric code and the (possibly empty) detail text

    Raises:
        ProtocolError: If the line does not start with a three-digit code
    """
    match = _STATUS_RE.match(line.strip())
    if match is None:
        raise ProtocolError(f"Not a status line: {line!r}")
    return Status(int(match.group(1)), match.group(2) or "")
