"""Tests for the SQLite persistence adapter."""

from __future__ import annotations

import random
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterator

import pytest

from conftest import GAME_ID, Rigger, codes_of, ids
from jokertable.cards import DECK_SIZE, CardLocation, Rank
from jokertable.errors import AlreadyDrawn, RuleViolation
from jokertable.sqlite_store import SqliteTableStore
from jokertable.state import GameRecord, GameStatus
from jokertable.store import ReadOnlySession
from jokertable.table import RummyTable


@pytest.fixture
def sqlite_store() -> Iterator[SqliteTableStore]:
    store = SqliteTableStore()
    yield store
    store.close()


@pytest.fixture
def sqlite_table(sqlite_store: SqliteTableStore) -> RummyTable:
    sqlite_store.add_game(GameRecord(id=GAME_ID, name="sqlite table", max_players=2, created_by=1))
    table = RummyTable(sqlite_store, rng=random.Random(42))
    table.initialize_game(GAME_ID, [1, 2])
    return table


def test_deal_and_turn_through_sqlite(sqlite_table: RummyTable) -> None:
    snapshot = sqlite_table.get_game_state(GAME_ID)
    assert snapshot.deck_count == 25
    assert snapshot.discard_count == 1
    assert [player.card_count for player in snapshot.players] == [13, 13]

    sqlite_table.draw_from_deck(GAME_ID, 1)
    with pytest.raises(AlreadyDrawn):
        sqlite_table.draw_from_deck(GAME_ID, 1)
    hand = sqlite_table.get_player_hand(GAME_ID, 1)
    sqlite_table.discard_card(GAME_ID, 1, hand[-1].id)

    snapshot = sqlite_table.get_game_state(GAME_ID)
    assert snapshot.deck_count == 24
    assert snapshot.current_turn_player == 2
    assert snapshot.player(1).card_count == 13
    assert not snapshot.player(1).has_drawn


def test_rows_round_trip_as_typed_records(sqlite_table: RummyTable, sqlite_store: SqliteTableStore) -> None:
    rig = Rigger(sqlite_store)
    rig.wildcard(Rank.KING)
    rig.hand(1, ["5S", "6S", "7S", "2C"])
    sqlite_table.lay_meld(GAME_ID, 1, ids("5S", "6S", "7S"))

    with sqlite_store.snapshot(GAME_ID) as session:
        game = session.get_game()
        hand = session.get_hand(1)
        state = session.get_state()
        laid = session.cards(CardLocation.LAID, owner=1)
        every_card = session.cards()

    assert game is not None and game.status is GameStatus.IN_PROGRESS
    assert game.player_ids == [1, 2]
    assert game.created_by == 1
    assert hand is not None
    assert hand.melds == [ids("5S", "6S", "7S")]
    assert hand.joker_revealed is True
    assert hand.has_drawn is False
    assert state is not None
    assert state.hidden_wildcard_rank is Rank.KING
    assert isinstance(state.updated_at, datetime)
    assert codes_of(laid) == ["5S", "6S", "7S"]
    assert len(every_card) == DECK_SIZE


def test_failed_operation_rolls_back(sqlite_table: RummyTable, sqlite_store: SqliteTableStore) -> None:
    rig = Rigger(sqlite_store)
    rig.wildcard(Rank.KING)
    rig.hand(1, ["5S", "6S", "7S", "8D"])
    sqlite_table.lay_meld(GAME_ID, 1, ids("5S", "6S", "7S"))

    with pytest.raises(RuleViolation):
        sqlite_table.add_to_meld(GAME_ID, 1, 0, ids("8D")[0])

    assert codes_of(sqlite_table.get_player_hand(GAME_ID, 1)) == ["8D"]


def test_snapshot_is_read_only(sqlite_table: RummyTable, sqlite_store: SqliteTableStore) -> None:
    with sqlite_store.snapshot(GAME_ID) as session:
        state = session.get_state()
        assert state is not None
        with pytest.raises(ReadOnlySession):
            session.put_state(state)


def test_max_players_check_constraint(sqlite_store: SqliteTableStore) -> None:
    with pytest.raises(sqlite3.IntegrityError):
        sqlite_store.add_game(GameRecord(id=50, name="crowded", max_players=5))


def test_state_survives_reopening(tmp_path: Path) -> None:
    db_path = str(tmp_path / "tables.db")
    store = SqliteTableStore(db_path)
    store.add_game(GameRecord(id=GAME_ID, name="durable", max_players=2))
    table = RummyTable(store, rng=random.Random(5))
    table.initialize_game(GAME_ID, [1, 2])
    table.draw_from_deck(GAME_ID, 1)
    before = table.get_game_state(GAME_ID)
    hand_before = codes_of(table.get_player_hand(GAME_ID, 1))
    store.close()

    reopened = RummyTable(SqliteTableStore(db_path))
    after = reopened.get_game_state(GAME_ID)

    assert after.hidden_wildcard_rank == before.hidden_wildcard_rank
    assert after.deck_count == 24
    assert after.player(1).has_drawn
    assert codes_of(reopened.get_player_hand(GAME_ID, 1)) == hand_before
