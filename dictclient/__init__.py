"""Client for the DICT dictionary server protocol (RFC 2229).

Applications that want the package log output on the console (and optionally
in a rotating file) call :func:`setup_logging` once at startup; it reads the
log settings from :mod:`dictclient.config`.
"""

from dictclient.connection import DEFAULT_PORT, DictionaryConnection, connect
from dictclient.exceptions import (
    ConnectionClosedError,
    DictConnectionError,
    ProtocolError,
    TransportError,
)
from dictclient.logging_config import setup_logging
from dictclient.models import Database, Definition, MatchingStrategy

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_PORT",
    "DictionaryConnection",
    "connect",
    "Database",
    "Definition",
    "MatchingStrategy",
    "DictConnectionError",
    "TransportError",
    "ProtocolError",
    "ConnectionClosedError",
    "setup_logging",
]
