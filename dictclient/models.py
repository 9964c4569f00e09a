"""Value objects returned by DICT queries."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass(frozen=True)
class Database:
    """A dictionary database offered by the server."""

    name: str
    description: str = ""

    ALL: ClassVar["Database"]
    FIRST_MATCH: ClassVar["Database"]

    @property
    def is_special(self) -> bool:
        """True for the '*' and '!' pseudo-databases."""
        return self.name in ("*", "!")

    def __str__(self) -> str:
        return self.description or self.name


Database.ALL = Database("*", "All databases")
Database.FIRST_MATCH = Database("!", "First database with a match")


@dataclass(frozen=True)
class MatchingStrategy:
    """A server-side algorithm for matching headwords (exact, prefix, ...)."""

    name: str
    description: str = ""

    def __str__(self) -> str:
        return self.description or self.name


@dataclass(frozen=True)
class Definition:
    """One definition block returned by DEFINE.

    ``database`` is None when the server named a database that was not in the
    session's database list; ``database_name`` always holds the raw name.
    """

    headword: str
    database_name: str
    database: Database | None = None
    body: tuple[str, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        """Body lines joined with newlines."""
        return "\n".join(self.body)
