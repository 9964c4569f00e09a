"""DICT protocol session (RFC 2229).

:class:`DictionaryConnection` owns one stream socket and the buffered reader
and writer wrapped around it for the whole life of the session. Every public
operation writes one command line and reads the complete response before
returning, so the next command always starts on a fresh response.

Responses come in three shapes:

.. code-block:: text

    220 welcome text                         single status line

    110 2 databases present                  count-prefixed block
    eng-lat "English-Latin"
    fra-eng "French-English"
    .
    250 ok

    150 2 definitions retrieved              nested blocks
    151 "hello" eng-lat "English-Latin"
    <body lines>
    .
    151 ...
    250 ok

A 1yz status announces that text follows; any other status ends the
response. The session tracks which side of that line it is on, so an error
that leaves part of a response unread closes the session instead of letting
the next command read stale text.
"""

import logging
import re
import socket
import threading
from collections.abc import Iterator
from contextlib import contextmanager, suppress

from dictclient.config import settings
from dictclient.exceptions import (
    ConnectionClosedError,
    DictConnectionError,
    ProtocolError,
    TransportError,
)
from dictclient.models import Database, Definition, MatchingStrategy
from dictclient.protocol import Status, format_command, parse_status, split_atoms

logger = logging.getLogger(__name__)

DEFAULT_PORT = 2628

# Status codes (RFC 2229, section 3)
DATABASES_PRESENT = 110
STRATEGIES_AVAILABLE = 111
DEFINITIONS_RETRIEVED = 150
DEFINITION_FOLLOWS = 151
MATCHES_FOUND = 152
SERVER_READY = 220
COMMAND_OK = 250
NO_MATCH = 552

_ANGLE_GROUP_RE = re.compile(r"<([^<>]*)>")


def parse_banner(detail: str) -> tuple[tuple[str, ...], str | None]:
    """
    Extract capabilities and message id from a 220 banner.

    The banner ends with ``<capability.capability> <message-id>``; either
    group may be missing on minimal servers.

    Returns:
        Tuple of (capabilities, message_id)
    """
    groups = _ANGLE_GROUP_RE.findall(detail)
    if not groups:
        return (), None
    message_id = f"<{groups[-1]}>"
    if len(groups) < 2:
        return (), message_id
    capabilities = tuple(cap for cap in groups[-2].split(".") if cap)
    return capabilities, message_id


def _name_of(value: Database | MatchingStrategy | str) -> str:
    return value if isinstance(value, str) else value.name


class DictionaryConnection:
    """
    A session with a DICT server.

    The connection is opened and the welcome status checked on construction.
    Operations are serialized with a per-session lock; independent sessions
    share nothing.

    Parameters:
        host: Name or address of the DICT server.
        port: TCP port, 2628 by default.
        encoding: Wire encoding. Defaults to ``settings.dict_encoding``.

    Raises:
        TransportError: If the server cannot be reached or drops the connection.
        ProtocolError: If the server does not answer with 220.
    """

    def __init__(self, host: str, port: int = DEFAULT_PORT, encoding: str | None = None) -> None:
        self.host = host
        self.port = port
        self.encoding = encoding or settings.dict_encoding
        self._lock = threading.RLock()
        self._databases: dict[str, Database] = {}
        # True from sending a command until its final (non-1yz) status is read
        self._response_pending = False
        self._closed = False

        try:
            self._sock = socket.create_connection((host, port))
        except OSError as e:
            self._closed = True
            raise TransportError(f"Cannot connect to {host}:{port}: {e}") from e
        self._reader = self._sock.makefile("rb")
        self._writer = self._sock.makefile("wb")

        try:
            self.banner = self._expect_status(SERVER_READY)
        except DictConnectionError:
            self._closed = True
            self._release()
            raise
        self.capabilities, self.message_id = parse_banner(self.banner.detail)
        logger.info(f"Connected to DICT server {host}:{port}")

    def __enter__(self) -> "DictionaryConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<DictionaryConnection {self.host}:{self.port} ({state})>"

    @property
    def is_open(self) -> bool:
        """True until the session is closed or abandoned."""
        return not self._closed

    @property
    def databases(self) -> dict[str, Database]:
        """Copy of the name -> Database mapping from the latest SHOW DB."""
        return dict(self._databases)

    def close(self) -> None:
        """
        Send QUIT and close the socket.

        Failures while sending QUIT, reading its reply or closing the socket are
        suppressed; this method never raises. Calling it again is a no-op.

        If another thread is in the middle of an operation, the socket is shut
        down instead so that the blocked read returns; that operation then
        fails with TransportError and releases the resources.
        """
        if self._closed:
            return
        if not self._lock.acquire(blocking=False):
            self._closed = True
            logger.debug(f"Shutting down {self.host}:{self.port} under an active operation")
            with suppress(OSError):
                self._sock.shutdown(socket.SHUT_RDWR)
            return
        try:
            if self._closed:
                return
            self._closed = True
            try:
                self._send("QUIT")
            except DictConnectionError as e:
                logger.debug(f"Ignoring failure to send QUIT: {e}")
            try:
                self._read_line()
            except DictConnectionError as e:
                logger.debug(f"Ignoring failure to read QUIT reply: {e}")
            self._release()
            logger.info(f"Closed connection to {self.host}:{self.port}")
        finally:
            self._lock.release()

    def list_databases(self) -> list[Database]:
        """
        Retrieve the databases offered by the server (SHOW DB).

        The session's name -> Database mapping is replaced by the result, which
        is what DEFINE uses to resolve the source of each definition.

        Returns:
            Databases in the order the server listed them
        """
        with self._exchange():
            self._send("SHOW", "DB")
            status = self._expect_status(DATABASES_PRESENT)
            databases: dict[str, Database] = {}
            for atoms in self._read_listing(status):
                name, description = self._name_and_description(atoms)
                databases[name] = Database(name, description)
            self._databases = databases
            logger.debug(f"Server lists {len(databases)} databases")
            return list(databases.values())

    def list_strategies(self) -> list[MatchingStrategy]:
        """Retrieve the matching strategies supported by the server (SHOW STRAT)."""
        with self._exchange():
            self._send("SHOW", "STRAT")
            status = self._expect_status(STRATEGIES_AVAILABLE)
            strategies = [
                MatchingStrategy(*self._name_and_description(atoms))
                for atoms in self._read_listing(status)
            ]
            return list(dict.fromkeys(strategies))

    def match(
        self,
        word: str,
        strategy: MatchingStrategy | str,
        database: Database | str = Database.ALL,
    ) -> list[str]:
        """
        Find headwords matching a word with the given strategy (MATCH).

        Database and strategy names are sent as given; '*' and '!' select all
        databases or the first one with a hit.

        Args:
            word: The word or pattern to match
            strategy: Strategy to apply (e.g. "exact", "prefix")
            database: Database to search, all databases by default

        Returns:
            Matched headwords in first-seen order without duplicates; empty if
            the server found no match
        """
        with self._exchange():
            self._send("MATCH", _name_of(database), _name_of(strategy), word)
            status = self._expect_status(MATCHES_FOUND, NO_MATCH)
            if status.code == NO_MATCH:
                return []

            headwords: dict[str, None] = {}
            for atoms in self._read_listing(status):
                if len(atoms) < 2:
                    raise ProtocolError(f"Malformed match line: {atoms!r}")
                headwords.setdefault(atoms[1])
            return list(headwords)

    def define(self, word: str, database: Database | str = Database.ALL) -> list[Definition]:
        """
        Retrieve all definitions of a word (DEFINE).

        The database list is fetched first if this session has not seen one,
        so that every definition can name its source database. A source the
        list does not contain is kept by name with ``database=None``.

        Args:
            word: The word to define
            database: Database to search, all databases by default

        Returns:
            Definitions in server order; empty if none were found
        """
        with self._exchange():
            if not self._databases:
                self.list_databases()

            self._send("DEFINE", _name_of(database), word)
            status = self._expect_status(DEFINITIONS_RETRIEVED, NO_MATCH)
            if status.code == NO_MATCH:
                return []

            definitions = []
            for _ in range(self._read_count(status)):
                header = self._expect_status(DEFINITION_FOLLOWS)
                atoms = split_atoms(header.detail)
                if len(atoms) < 2:
                    raise ProtocolError(
                        f"Missing database name in definition header: {header.detail!r}",
                        expected=(DEFINITION_FOLLOWS,),
                        actual=header.code,
                    )
                database_name = atoms[1]
                source = self._databases.get(database_name)
                if source is None:
                    logger.debug(f"Definition from unlisted database '{database_name}'")
                definitions.append(
                    Definition(
                        headword=word,
                        database_name=database_name,
                        database=source,
                        body=tuple(self._read_text_block()),
                    )
                )
            self._expect_status(COMMAND_OK)
            return definitions

    @contextmanager
    def _exchange(self) -> Iterator[None]:
        """Run one command/response exchange under the session lock."""
        with self._lock:
            if self._closed:
                raise ConnectionClosedError(f"Connection to {self.host}:{self.port} is closed")
            try:
                yield
            except TransportError as e:
                self._abandon(str(e))
                raise
            except BaseException as e:
                if self._response_pending:
                    self._abandon(f"response left unread after {type(e).__name__}: {e}")
                raise
            finally:
                if self._closed:
                    self._release()

    def _abandon(self, reason: str) -> None:
        if not self._closed:
            logger.warning(f"Abandoning connection to {self.host}:{self.port}: {reason}")
        self._closed = True
        self._release()

    def _release(self) -> None:
        for stream in (self._reader, self._writer, self._sock):
            with suppress(OSError):
                stream.close()

    def _send(self, keyword: str, *args: str) -> None:
        line = format_command(keyword, *args)
        data = line.encode(self.encoding) + b"\r\n"
        logger.debug(f"C: {line}")
        try:
            self._writer.write(data)
            self._writer.flush()
        except (OSError, ValueError) as e:
            raise TransportError(f"Write to {self.host}:{self.port} failed: {e}") from e
        self._response_pending = True

    def _read_line(self) -> str:
        try:
            raw = self._reader.readline()
        except (OSError, ValueError) as e:
            raise TransportError(f"Read from {self.host}:{self.port} failed: {e}") from e
        if not raw:
            raise TransportError(f"Connection to {self.host}:{self.port} closed by server")
        return raw.decode(self.encoding, errors="replace").rstrip("\r\n")

    def _read_status(self) -> Status:
        line = self._read_line()
        logger.debug(f"S: {line}")
        # Stays set if the line cannot be parsed
        self._response_pending = True
        status = parse_status(line)
        self._response_pending = status.is_preliminary
        return status

    def _expect_status(self, *codes: int) -> Status:
        """Read a status and fail unless its code is one of ``codes``."""
        status = self._read_status()
        if status.code not in codes:
            wanted = "/".join(str(code) for code in codes)
            raise ProtocolError(
                f"Expected status {wanted}, got {status.code} {status.detail}".rstrip(),
                expected=codes,
                actual=status.code,
            )
        return status

    def _read_count(self, status: Status) -> int:
        atoms = split_atoms(status.detail)
        try:
            return int(atoms[0])
        except (IndexError, ValueError) as e:
            raise ProtocolError(
                f"Missing item count in status {status.code} {status.detail!r}",
                expected=(status.code,),
                actual=status.code,
            ) from e

    def _read_listing(self, status: Status) -> list[list[str]]:
        """Read a count-prefixed block: N data lines, '.', then 250."""
        count = self._read_count(status)
        rows = [split_atoms(self._read_line()) for _ in range(count)]
        terminator = self._read_line()
        if not terminator.startswith("."):
            raise ProtocolError(f"Expected '.' after {count} lines, got {terminator!r}")
        self._expect_status(COMMAND_OK)
        return rows

    def _read_text_block(self) -> list[str]:
        """Read body lines up to (and consuming) the line starting with '.'."""
        lines = []
        line = self._read_line()
        while not line.startswith("."):
            lines.append(line)
            line = self._read_line()
        return lines

    @staticmethod
    def _name_and_description(atoms: list[str]) -> tuple[str, str]:
        if not atoms:
            raise ProtocolError("Empty line in listing")
        return atoms[0], atoms[1] if len(atoms) > 1 else ""


def connect(host: str | None = None, port: int | None = None) -> DictionaryConnection:
    """Open a session, taking missing host/port values from settings."""
    return DictionaryConnection(host or settings.dict_host, port or settings.dict_port)
