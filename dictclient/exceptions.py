"""Exception hierarchy for DICT protocol sessions.

Everything the package raises derives from :class:`DictConnectionError`, so
callers that do not care about the failure mode can catch the base class.
"""


class DictConnectionError(Exception):
    """Base exception for all DICT connection failures."""


class TransportError(DictConnectionError):
    """Raised when the socket cannot be opened, read or written.

    A transport failure is terminal: the session is closed and must be
    replaced by a new connection.
    """


class ProtocolError(DictConnectionError):
    """Raised when the server response does not fit the current exchange.

    Attributes:
        expected: Status codes that would have been accepted at that point
            (empty when the problem is not a status code, e.g. a bad sentinel).
        actual: The status code received, or None if no status was parsed.
    """

    def __init__(
        self,
        message: str,
        expected: tuple[int, ...] = (),
        actual: int | None = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ConnectionClosedError(DictConnectionError):
    """Raised when a command is issued on a session that is already closed."""
