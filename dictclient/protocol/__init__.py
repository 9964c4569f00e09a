"""Line-level helpers for the DICT wire protocol."""

from dictclient.protocol.atoms import format_command, is_quoted, quote_argument, split_atoms
from dictclient.protocol.status import Status, parse_status

__all__ = [
    "Status",
    "parse_status",
    "split_atoms",
    "is_quoted",
    "quote_argument",
    "format_command",
]
