"""Persistence adapter protocol and the in-memory implementation.

The engine addresses everything by game id. A mutating operation runs inside
``TableStore.transaction`` which holds the game's exclusive lock and commits
all writes at once, or none of them if the block raises.
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Protocol, Sequence

from .cards import Card, CardLocation
from .state import GameRecord, PlayerHand, TableState

__all__ = ["TableSession", "TableStore", "MemorySession", "MemoryTableStore", "ReadOnlySession"]

logger = logging.getLogger(__name__)


class ReadOnlySession(RuntimeError):
    """Raised when a snapshot session is asked to write."""


class TableSession(Protocol):
    """Row-level access to one game, valid for the life of its context."""

    game_id: int

    def get_game(self) -> GameRecord | None: ...

    def put_game(self, game: GameRecord) -> None: ...

    def clear_table(self) -> None: ...

    def replace_cards(self, cards: Sequence[Card]) -> None: ...

    def get_card(self, card_id: int) -> Card | None: ...

    def update_card(self, card: Card) -> None: ...

    def cards(self, location: CardLocation | None = None, owner: int | None = None) -> list[Card]: ...

    def get_hand(self, player_id: int) -> PlayerHand | None: ...

    def put_hand(self, hand: PlayerHand) -> None: ...

    def hands(self) -> list[PlayerHand]: ...

    def get_state(self) -> TableState | None: ...

    def put_state(self, state: TableState) -> None: ...


class TableStore(Protocol):
    """Durable home of cards, hands, and table state."""

    def add_game(self, game: GameRecord) -> None: ...

    def transaction(self, game_id: int) -> AbstractContextManager[TableSession]: ...

    def snapshot(self, game_id: int) -> AbstractContextManager[TableSession]: ...


@dataclass(slots=True)
class _GameRows:
    game: GameRecord | None = None
    cards: dict[int, Card] = field(default_factory=dict)
    hands: dict[int, PlayerHand] = field(default_factory=dict)
    state: TableState | None = None


class MemorySession:
    """Session over a private copy of one game's rows."""

    def __init__(self, game_id: int, rows: _GameRows, *, writable: bool) -> None:
        self.game_id = game_id
        self._rows = rows
        self._writable = writable

    def _check_writable(self) -> None:
        if not self._writable:
            raise ReadOnlySession(f"snapshot of game {self.game_id} is read-only")

    def get_game(self) -> GameRecord | None:
        return copy.deepcopy(self._rows.game)

    def put_game(self, game: GameRecord) -> None:
        self._check_writable()
        self._rows.game = copy.deepcopy(game)

    def clear_table(self) -> None:
        self._check_writable()
        self._rows.cards.clear()
        self._rows.hands.clear()
        self._rows.state = None

    def replace_cards(self, cards: Sequence[Card]) -> None:
        self._check_writable()
        self._rows.cards = {card.id: copy.copy(card) for card in cards}

    def get_card(self, card_id: int) -> Card | None:
        card = self._rows.cards.get(card_id)
        return copy.copy(card) if card is not None else None

    def update_card(self, card: Card) -> None:
        self._check_writable()
        if card.id not in self._rows.cards:
            raise KeyError(f"card {card.id} does not exist in game {self.game_id}")
        self._rows.cards[card.id] = copy.copy(card)

    def cards(self, location: CardLocation | None = None, owner: int | None = None) -> list[Card]:
        selected = [
            copy.copy(card)
            for card in self._rows.cards.values()
            if (location is None or card.location == location) and (owner is None or card.owner == owner)
        ]
        return sorted(selected, key=lambda card: (card.position, card.id))

    def get_hand(self, player_id: int) -> PlayerHand | None:
        return copy.deepcopy(self._rows.hands.get(player_id))

    def put_hand(self, hand: PlayerHand) -> None:
        self._check_writable()
        self._rows.hands[hand.player_id] = copy.deepcopy(hand)

    def hands(self) -> list[PlayerHand]:
        return [copy.deepcopy(hand) for hand in sorted(self._rows.hands.values(), key=lambda h: h.turn_order)]

    def get_state(self) -> TableState | None:
        return copy.deepcopy(self._rows.state)

    def put_state(self, state: TableState) -> None:
        self._check_writable()
        self._rows.state = copy.deepcopy(state)


class MemoryTableStore:
    """Process-local store with one lock per game id.

    Writers to the same game are serialised; different games proceed in
    parallel. Readers work on a copy of the last committed rows.
    """

    def __init__(self) -> None:
        self._rows: dict[int, _GameRows] = {}
        self._locks: dict[int, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, game_id: int) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(game_id)
            if lock is None:
                lock = self._locks[game_id] = threading.RLock()
            return lock

    def add_game(self, game: GameRecord) -> None:
        with self.transaction(game.id) as session:
            session.put_game(game)

    @contextmanager
    def transaction(self, game_id: int) -> Iterator[MemorySession]:
        with self._lock_for(game_id):
            working = copy.deepcopy(self._rows.get(game_id) or _GameRows())
            try:
                yield MemorySession(game_id, working, writable=True)
            except BaseException:
                logger.debug("game %s: transaction rolled back", game_id)
                raise
            self._rows[game_id] = working

    @contextmanager
    def snapshot(self, game_id: int) -> Iterator[MemorySession]:
        committed = self._rows.get(game_id) or _GameRows()
        yield MemorySession(game_id, copy.deepcopy(committed), writable=False)
