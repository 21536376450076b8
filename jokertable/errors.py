"""Exception hierarchy raised by the table engine."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

__all__ = [
    "ErrorKind",
    "TableError",
    "InvalidInput",
    "PreconditionViolation",
    "AlreadyDrawn",
    "HandOverflow",
    "NotYourTurn",
    "MustDrawFirst",
    "GameNotStarted",
    "GameFinished",
    "NotFound",
    "RuleViolation",
    "InsufficientCards",
]


class ErrorKind(str, Enum):
    """Discriminates engine failures for collaborators (HTTP status, socket error)."""

    INVALID_INPUT = "invalid_input"
    PRECONDITION_VIOLATION = "precondition_violation"
    NOT_FOUND = "not_found"
    RULE_VIOLATION = "rule_violation"
    INSUFFICIENT_CARDS = "insufficient_cards"


class TableError(RuntimeError):
    """Base class for every decision outcome the engine rejects."""

    kind: ClassVar[ErrorKind]

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_payload(self) -> dict[str, str]:
        return {"kind": self.kind.value, "code": self.code, "message": str(self)}


class InvalidInput(TableError):
    """Raised for malformed identifiers or wrong cardinality."""

    kind = ErrorKind.INVALID_INPUT


class PreconditionViolation(TableError):
    """Raised when an action is not allowed in the current turn context."""

    kind = ErrorKind.PRECONDITION_VIOLATION


class AlreadyDrawn(PreconditionViolation):
    """Raised when a player draws twice without discarding."""


class HandOverflow(PreconditionViolation):
    """Raised when a draw would exceed the maximum hand size."""


class NotYourTurn(PreconditionViolation):
    """Raised when a turn-consuming action comes from a player not holding the turn."""


class MustDrawFirst(PreconditionViolation):
    """Raised when a player discards before drawing this turn."""


class GameNotStarted(PreconditionViolation):
    """Raised when acting on a game that has not been dealt."""


class GameFinished(PreconditionViolation):
    """Raised when acting on a game that already has a winner."""


class NotFound(TableError):
    """Raised when a game, player, card, or meld index does not exist as expected."""

    kind = ErrorKind.NOT_FOUND


class RuleViolation(TableError):
    """Raised when cards do not satisfy set, sequence, or extension rules."""

    kind = ErrorKind.RULE_VIOLATION


class InsufficientCards(TableError):
    """Raised when the deck cannot supply a fresh deal."""

    kind = ErrorKind.INSUFFICIENT_CARDS
