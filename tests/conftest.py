"""Pytest configuration and fixtures."""

import socket
import time
from collections.abc import Generator
from contextlib import suppress
from unittest.mock import patch

import pytest

from dictclient.connection import DictionaryConnection

WELCOME = "220 dict.example.org dictd 1.13 <auth.mime> <42.1700000000@dict.example.org>"


class ScriptedServer:
    """Server end of a socket pair that replays canned response lines."""

    def __init__(self) -> None:
        self.client_sock, self.sock = socket.socketpair()
        self.sock.settimeout(2.0)
        self._received = b""

    def push(self, *lines: str) -> None:
        """Queue response lines for the client to read."""
        self.sock.sendall("".join(f"{line}\r\n" for line in lines).encode("utf-8"))

    def received(self) -> list[str]:
        """Return every command line the client has sent so far."""
        self.sock.setblocking(False)
        try:
            while True:
                try:
                    chunk = self.sock.recv(4096)
                except BlockingIOError:
                    break
                if not chunk:
                    break
                self._received += chunk
        finally:
            self.sock.settimeout(2.0)
        return self._received.decode("utf-8").split("\r\n")[:-1]

    def clear(self) -> None:
        """Forget the commands received so far."""
        self.received()
        self._received = b""

    def wait_for(self, line: str, timeout: float = 2.0) -> bool:
        """Poll until the client has sent ``line``."""
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if line in self.received():
                return True
            time.sleep(0.01)
        return False

    def hang_up(self) -> None:
        """Stop sending; the client sees end-of-stream after queued lines."""
        self.sock.shutdown(socket.SHUT_WR)

    def close(self) -> None:
        for sock in (self.sock, self.client_sock):
            with suppress(OSError):
                sock.close()


@pytest.fixture
def server() -> Generator[ScriptedServer, None, None]:
    """Scripted peer handed to the client in place of a real TCP connection."""
    scripted = ScriptedServer()
    with patch(
        "dictclient.connection.socket.create_connection",
        return_value=scripted.client_sock,
    ) as create_connection:
        scripted.create_connection = create_connection
        yield scripted
    scripted.close()


@pytest.fixture
def conn(server: ScriptedServer) -> Generator[DictionaryConnection, None, None]:
    """An open session that has already read the welcome banner."""
    server.push(WELCOME)
    connection = DictionaryConnection("dict.example.org")
    yield connection
    if connection.is_open:
        server.push("221 bye")
        connection.close()


@pytest.fixture
def database_listing() -> list[str]:
    """SHOW DB response with two databases."""
    return [
        "110 2 databases present",
        'eng-lat "English-Latin"',
        'fra-eng "French-English"',
        ".",
        "250 ok",
    ]
