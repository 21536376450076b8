"""Typed records and read projections for a game table."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Final

from .cards import DECK_SIZE, Card, Rank
from .errors import InsufficientCards, InvalidInput

__all__ = [
    "GameStatus",
    "GameRecord",
    "PlayerHand",
    "TableState",
    "TableConfig",
    "PlayerSummary",
    "GameSnapshot",
    "DEFAULT_CONFIG",
    "utcnow",
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GameStatus(str, Enum):
    """Externally visible lifecycle of a game."""

    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass(slots=True)
class GameRecord:
    """Lobby-level description of a game, owned by the lobby collaborator."""

    id: int
    name: str
    max_players: int = 2
    status: GameStatus = GameStatus.WAITING
    created_by: int | None = None
    player_ids: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.status = GameStatus(self.status)


@dataclass(slots=True)
class PlayerHand:
    """Per-player bookkeeping for one game.

    ``melds`` holds one list of card ids per laid group, in lay order.
    """

    game_id: int
    player_id: int
    turn_order: int
    melds: list[list[int]] = field(default_factory=list)
    has_drawn: bool = False
    joker_revealed: bool = False


@dataclass(slots=True)
class TableState:
    """The single per-game row tracking turn progress."""

    game_id: int
    current_turn_player: int
    hidden_wildcard_rank: Rank
    winner: int | None = None
    turn_number: int = 1
    last_action: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        self.hidden_wildcard_rank = Rank(self.hidden_wildcard_rank)

    def touch(self, action: str) -> None:
        self.last_action = action
        self.updated_at = utcnow()


@dataclass(frozen=True, slots=True)
class TableConfig:
    """Runtime configuration for dealing a table."""

    hand_size: int = 13
    min_players: int = 2
    max_players: int = 4

    def __post_init__(self) -> None:
        if self.hand_size < 1:
            raise ValueError("hand_size must be positive")
        if not 1 <= self.min_players <= self.max_players:
            raise ValueError("player bounds are inconsistent")

    @property
    def max_hand_size(self) -> int:
        """Largest hand a player may hold: the deal plus one undiscarded draw."""

        return self.hand_size + 1

    def cards_needed(self, player_count: int) -> int:
        """Return the cards consumed by the deal, including the opening discard."""

        return player_count * self.hand_size + 1

    def check_player_count(self, player_count: int) -> None:
        """Raise when ``player_count`` cannot be dealt under this configuration."""

        if not self.min_players <= player_count <= self.max_players:
            raise InvalidInput(
                f"a table seats {self.min_players} to {self.max_players} players, got {player_count}"
            )
        needed = self.cards_needed(player_count)
        if needed > DECK_SIZE:
            raise InsufficientCards(
                f"{player_count} players x {self.hand_size} cards + 1 discard needs {needed} cards,"
                f" the deck holds {DECK_SIZE}; lower hand_size to seat this many players"
            )


DEFAULT_CONFIG: Final[TableConfig] = TableConfig()


@dataclass(frozen=True, slots=True)
class PlayerSummary:
    """Public information about one seated player."""

    player_id: int
    turn_order: int
    card_count: int
    has_drawn: bool
    joker_revealed: bool
    melds: tuple[tuple[Card, ...], ...] = ()


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """Externally visible state of a game table."""

    game_id: int
    status: GameStatus
    current_turn_player: int | None
    hidden_wildcard_rank: Rank | None
    winner: int | None
    turn_number: int
    players: tuple[PlayerSummary, ...]
    discard_top: Card | None
    discard_count: int
    deck_count: int

    @property
    def player_order(self) -> list[int]:
        return [player.player_id for player in self.players]

    def player(self, player_id: int) -> PlayerSummary:
        for summary in self.players:
            if summary.player_id == player_id:
                return summary
        raise KeyError(player_id)
