"""State-change notifications emitted by the table engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol

__all__ = [
    "EventKind",
    "TableEvent",
    "NotificationSink",
    "NullSink",
    "RecordingSink",
    "LoggingSink",
]


class EventKind(str, Enum):
    GAME_STARTED = "game_started"
    CARD_DRAWN = "card_drawn"
    CARD_DISCARDED = "card_discarded"
    MELD_LAID = "meld_laid"
    CARD_ADDED_TO_MELD = "card_added_to_meld"
    CARD_MOVED = "card_moved"
    MELD_DISSOLVED = "meld_dissolved"
    WILDCARD_REVEALED = "wildcard_revealed"
    WINNER_DECLARED = "winner_declared"
    GAME_RESTARTED = "game_restarted"


@dataclass(frozen=True, slots=True)
class TableEvent:
    """One notification for the transport layer.

    ``private_to`` names the only player allowed to see ``details``; ``None``
    means the event may be broadcast to the whole table.
    """

    kind: EventKind
    game_id: int
    player_id: int | None
    details: Mapping[str, Any] = field(default_factory=dict)
    private_to: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.kind.value,
            "game_id": self.game_id,
            "player_id": self.player_id,
            "details": dict(self.details),
            "private_to": self.private_to,
        }


class NotificationSink(Protocol):
    """Receives events after the originating operation has committed."""

    def publish(self, event: TableEvent) -> None:  # pragma: no cover - protocol only
        ...


class NullSink:
    """Sink that drops every event."""

    def publish(self, event: TableEvent) -> None:
        return None


@dataclass(slots=True)
class RecordingSink:
    """Sink that keeps events in memory, in publish order."""

    events: list[TableEvent] = field(default_factory=list)

    def publish(self, event: TableEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[EventKind]:
        return [event.kind for event in self.events]

    def of_kind(self, kind: EventKind) -> list[TableEvent]:
        return [event for event in self.events if event.kind is kind]

    def clear(self) -> None:
        self.events.clear()


class LoggingSink:
    """Sink that writes each event to a logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.level = level

    def publish(self, event: TableEvent) -> None:
        self.logger.log(
            self.level,
            "game %s: %s by %s %s",
            event.game_id,
            event.kind.value,
            event.player_id,
            dict(event.details),
        )
