"""SQLite-backed persistence adapter.

Tables mirror the web application's schema (``games``, ``game_cards``,
``player_hands``, ``game_state``). Rows are converted to typed records at
this boundary; the engine never sees ``sqlite3.Row`` objects.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Sequence

from .cards import Card, CardLocation
from .state import GameRecord, PlayerHand, TableState
from .store import ReadOnlySession

__all__ = ["SCHEMA", "SqliteSession", "SqliteTableStore", "get_connection"]

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS games (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    created_by INTEGER,
    state TEXT NOT NULL DEFAULT 'waiting',
    max_players INTEGER NOT NULL DEFAULT 2
        CONSTRAINT games_max_players_between_2_and_4 CHECK (max_players >= 2 AND max_players <= 4),
    player_ids TEXT NOT NULL DEFAULT '[]'
);

CREATE TABLE IF NOT EXISTS game_cards (
    game_id INTEGER NOT NULL REFERENCES games (id) ON DELETE CASCADE,
    id INTEGER NOT NULL,
    suit TEXT NOT NULL,
    rank TEXT NOT NULL,
    location TEXT NOT NULL DEFAULT 'deck',
    player_id INTEGER,
    position INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (game_id, id)
);
CREATE INDEX IF NOT EXISTS game_cards_game_location ON game_cards (game_id, location);
CREATE INDEX IF NOT EXISTS game_cards_game_player ON game_cards (game_id, player_id);

CREATE TABLE IF NOT EXISTS player_hands (
    game_id INTEGER NOT NULL REFERENCES games (id) ON DELETE CASCADE,
    player_id INTEGER NOT NULL,
    hand_order INTEGER NOT NULL,
    melds TEXT NOT NULL DEFAULT '[]',
    has_drawn INTEGER NOT NULL DEFAULT 0,
    joker_revealed INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (game_id, player_id)
);

CREATE TABLE IF NOT EXISTS game_state (
    game_id INTEGER PRIMARY KEY REFERENCES games (id) ON DELETE CASCADE,
    current_turn_player_id INTEGER,
    hidden_joker_rank TEXT NOT NULL,
    winner_id INTEGER,
    turn_number INTEGER NOT NULL DEFAULT 0,
    last_action TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def get_connection(db_path: str = ":memory:") -> sqlite3.Connection:
    """Open a connection in autocommit mode with foreign keys enforced."""

    conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _game_from_row(row: sqlite3.Row) -> GameRecord:
    return GameRecord(
        id=row["id"],
        name=row["name"],
        max_players=row["max_players"],
        status=row["state"],
        created_by=row["created_by"],
        player_ids=[int(player_id) for player_id in json.loads(row["player_ids"])],
    )


def _card_from_row(row: sqlite3.Row) -> Card:
    return Card(
        id=row["id"],
        suit=row["suit"],
        rank=row["rank"],
        location=row["location"],
        owner=row["player_id"],
        position=row["position"],
    )


def _hand_from_row(row: sqlite3.Row) -> PlayerHand:
    return PlayerHand(
        game_id=row["game_id"],
        player_id=row["player_id"],
        turn_order=row["hand_order"],
        melds=[[int(card_id) for card_id in group] for group in json.loads(row["melds"])],
        has_drawn=bool(row["has_drawn"]),
        joker_revealed=bool(row["joker_revealed"]),
    )


def _state_from_row(row: sqlite3.Row) -> TableState:
    return TableState(
        game_id=row["game_id"],
        current_turn_player=row["current_turn_player_id"],
        hidden_wildcard_rank=row["hidden_joker_rank"],
        winner=row["winner_id"],
        turn_number=row["turn_number"],
        last_action=row["last_action"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class SqliteSession:
    """Session bound to an open SQLite transaction."""

    def __init__(self, conn: sqlite3.Connection, game_id: int, *, writable: bool) -> None:
        self._conn = conn
        self.game_id = game_id
        self._writable = writable

    def _write(self, query: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        if not self._writable:
            raise ReadOnlySession(f"snapshot of game {self.game_id} is read-only")
        return self._conn.execute(query, params)

    def _one(self, query: str, params: Sequence[Any]) -> sqlite3.Row | None:
        return self._conn.execute(query, params).fetchone()

    def get_game(self) -> GameRecord | None:
        row = self._one("SELECT * FROM games WHERE id = ?", (self.game_id,))
        return _game_from_row(row) if row is not None else None

    def put_game(self, game: GameRecord) -> None:
        self._write(
            """
            INSERT INTO games (id, name, created_by, state, max_players, player_ids)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (id) DO UPDATE SET
                name = excluded.name,
                created_by = excluded.created_by,
                state = excluded.state,
                max_players = excluded.max_players,
                player_ids = excluded.player_ids
            """,
            (
                game.id,
                game.name,
                game.created_by,
                game.status.value,
                game.max_players,
                json.dumps(list(game.player_ids)),
            ),
        )

    def clear_table(self) -> None:
        self._write("DELETE FROM game_cards WHERE game_id = ?", (self.game_id,))
        self._write("DELETE FROM player_hands WHERE game_id = ?", (self.game_id,))
        self._write("DELETE FROM game_state WHERE game_id = ?", (self.game_id,))

    def replace_cards(self, cards: Sequence[Card]) -> None:
        self._write("DELETE FROM game_cards WHERE game_id = ?", (self.game_id,))
        self._conn.executemany(
            """
            INSERT INTO game_cards (game_id, id, suit, rank, location, player_id, position)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (self.game_id, card.id, card.suit.value, card.rank.value, card.location.value, card.owner, card.position)
                for card in cards
            ],
        )

    def get_card(self, card_id: int) -> Card | None:
        row = self._one("SELECT * FROM game_cards WHERE game_id = ? AND id = ?", (self.game_id, card_id))
        return _card_from_row(row) if row is not None else None

    def update_card(self, card: Card) -> None:
        cursor = self._write(
            """
            UPDATE game_cards SET location = ?, player_id = ?, position = ?
            WHERE game_id = ? AND id = ?
            """,
            (card.location.value, card.owner, card.position, self.game_id, card.id),
        )
        if cursor.rowcount != 1:
            raise KeyError(f"card {card.id} does not exist in game {self.game_id}")

    def cards(self, location: CardLocation | None = None, owner: int | None = None) -> list[Card]:
        query = "SELECT * FROM game_cards WHERE game_id = ?"
        params: list[Any] = [self.game_id]
        if location is not None:
            query += " AND location = ?"
            params.append(CardLocation(location).value)
        if owner is not None:
            query += " AND player_id = ?"
            params.append(owner)
        query += " ORDER BY position, id"
        return [_card_from_row(row) for row in self._conn.execute(query, params).fetchall()]

    def get_hand(self, player_id: int) -> PlayerHand | None:
        row = self._one(
            "SELECT * FROM player_hands WHERE game_id = ? AND player_id = ?", (self.game_id, player_id)
        )
        return _hand_from_row(row) if row is not None else None

    def put_hand(self, hand: PlayerHand) -> None:
        self._write(
            """
            INSERT INTO player_hands (game_id, player_id, hand_order, melds, has_drawn, joker_revealed)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (game_id, player_id) DO UPDATE SET
                hand_order = excluded.hand_order,
                melds = excluded.melds,
                has_drawn = excluded.has_drawn,
                joker_revealed = excluded.joker_revealed
            """,
            (
                self.game_id,
                hand.player_id,
                hand.turn_order,
                json.dumps([list(group) for group in hand.melds]),
                int(hand.has_drawn),
                int(hand.joker_revealed),
            ),
        )

    def hands(self) -> list[PlayerHand]:
        rows = self._conn.execute(
            "SELECT * FROM player_hands WHERE game_id = ? ORDER BY hand_order", (self.game_id,)
        ).fetchall()
        return [_hand_from_row(row) for row in rows]

    def get_state(self) -> TableState | None:
        row = self._one("SELECT * FROM game_state WHERE game_id = ?", (self.game_id,))
        return _state_from_row(row) if row is not None else None

    def put_state(self, state: TableState) -> None:
        self._write(
            """
            INSERT INTO game_state (
                game_id, current_turn_player_id, hidden_joker_rank, winner_id,
                turn_number, last_action, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (game_id) DO UPDATE SET
                current_turn_player_id = excluded.current_turn_player_id,
                hidden_joker_rank = excluded.hidden_joker_rank,
                winner_id = excluded.winner_id,
                turn_number = excluded.turn_number,
                last_action = excluded.last_action,
                updated_at = excluded.updated_at
            """,
            (
                self.game_id,
                state.current_turn_player,
                state.hidden_wildcard_rank.value,
                state.winner,
                state.turn_number,
                state.last_action,
                state.created_at.isoformat(),
                state.updated_at.isoformat(),
            ),
        )


class SqliteTableStore:
    """Store persisting every game in one SQLite database.

    A single connection is shared, so transactions are serialised across all
    games, which also satisfies the per-game exclusion the engine needs.
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self.db_path = db_path
        self._conn = get_connection(db_path)
        self._lock = threading.RLock()
        self._conn.executescript(SCHEMA)
        logger.info("SQLite table store ready at %s", db_path)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def add_game(self, game: GameRecord) -> None:
        with self.transaction(game.id) as session:
            session.put_game(game)

    @contextmanager
    def _begin(self, game_id: int, *, writable: bool) -> Iterator[SqliteSession]:
        with self._lock:
            self._conn.execute("BEGIN IMMEDIATE" if writable else "BEGIN")
            try:
                yield SqliteSession(self._conn, game_id, writable=writable)
            except BaseException:
                self._conn.execute("ROLLBACK")
                logger.debug("game %s: transaction rolled back", game_id)
                raise
            self._conn.execute("COMMIT")

    def transaction(self, game_id: int):
        return self._begin(game_id, writable=True)

    def snapshot(self, game_id: int):
        return self._begin(game_id, writable=False)
