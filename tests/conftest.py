"""Shared fixtures for table tests."""

from __future__ import annotations

import random
from typing import Sequence

import pytest

from jokertable.cards import Card, CardLocation, Rank, id_from_code
from jokertable.events import RecordingSink
from jokertable.state import GameRecord
from jokertable.store import MemoryTableStore, TableStore
from jokertable.table import RummyTable

GAME_ID = 7
SEED = 1234


class Rigger:
    """Rewrites committed rows so a test can start from a known position."""

    def __init__(self, store: TableStore, game_id: int = GAME_ID) -> None:
        self.store = store
        self.game_id = game_id

    def hand(self, player_id: int, codes: Sequence[str], *, has_drawn: bool | None = None) -> list[int]:
        """Give ``player_id`` exactly the cards in ``codes``, keeping every pile sized as before."""

        wanted = [id_from_code(code) for code in codes]
        with self.store.transaction(self.game_id) as session:
            deck_bottom = max((card.position for card in session.cards(CardLocation.DECK)), default=-1) + 1
            for card in session.cards(CardLocation.PLAYER_HAND, owner=player_id):
                if card.id not in wanted:
                    card.move(CardLocation.DECK, position=deck_bottom)
                    session.update_card(card)
                    deck_bottom += 1

            for position, identifier in enumerate(wanted):
                card = session.get_card(identifier)
                assert card is not None
                if card.location is CardLocation.DECK or card.owner == player_id:
                    pass
                else:
                    replacement = self._spare_deck_card(session.cards(CardLocation.DECK), wanted)
                    replacement.move(card.location, owner=card.owner, position=card.position)
                    session.update_card(replacement)
                card.move(CardLocation.PLAYER_HAND, owner=player_id, position=position)
                session.update_card(card)

            if has_drawn is not None:
                hand = session.get_hand(player_id)
                assert hand is not None
                hand.has_drawn = has_drawn
                session.put_hand(hand)
        return wanted

    @staticmethod
    def _spare_deck_card(deck: Sequence[Card], wanted: Sequence[int]) -> Card:
        for card in deck:
            if card.id not in wanted:
                return card
        raise AssertionError("deck has no spare card to swap in")

    def wildcard(self, rank: Rank | str) -> None:
        with self.store.transaction(self.game_id) as session:
            state = session.get_state()
            assert state is not None
            state.hidden_wildcard_rank = Rank(rank)
            session.put_state(state)

    def move_all(self, source: CardLocation, target: CardLocation, *, owner: int | None = None) -> None:
        """Move every card in ``source`` onto ``target``, appended after what is there."""

        with self.store.transaction(self.game_id) as session:
            cards = session.cards(target, owner=owner)
            position = max((card.position for card in cards), default=-1) + 1
            for card in session.cards(source):
                card.move(target, owner=owner, position=position)
                session.update_card(card)
                position += 1


def ids(*codes: str) -> list[int]:
    return [id_from_code(code) for code in codes]


def codes_of(cards: Sequence[Card]) -> list[str]:
    return [card.code for card in cards]


@pytest.fixture
def store() -> MemoryTableStore:
    return MemoryTableStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def table(store: MemoryTableStore, sink: RecordingSink) -> RummyTable:
    store.add_game(GameRecord(id=GAME_ID, name="test table", max_players=4))
    return RummyTable(store, sink=sink, rng=random.Random(SEED))


@pytest.fixture
def dealt(table: RummyTable, sink: RecordingSink) -> RummyTable:
    """A two-player table for players 1 and 2, events cleared."""

    table.initialize_game(GAME_ID, [1, 2])
    sink.clear()
    return table


@pytest.fixture
def rig(store: MemoryTableStore) -> Rigger:
    return Rigger(store)

