"""Tests for deck assembly and discard recycling."""

from __future__ import annotations

import random

from jokertable.cards import DECK_SIZE, Card, CardLocation
from jokertable.deck import build_deck, recycle_discard


def _discard_pile(codes: list[str]) -> list[Card]:
    return [
        Card.from_code(code, location=CardLocation.DISCARD, position=position)
        for position, code in enumerate(codes)
    ]


def test_build_deck_has_every_card_once() -> None:
    deck = build_deck(random.Random(5))

    assert len(deck) == DECK_SIZE
    assert len({(card.suit, card.rank) for card in deck}) == DECK_SIZE
    assert {card.location for card in deck} == {CardLocation.DECK}
    assert [card.position for card in deck] == list(range(DECK_SIZE))


def test_build_deck_is_deterministic_under_seed() -> None:
    first = [card.id for card in build_deck(random.Random(99))]
    second = [card.id for card in build_deck(random.Random(99))]
    other = [card.id for card in build_deck(random.Random(100))]

    assert first == second
    assert first != other


def test_recycle_keeps_visible_top_discard() -> None:
    pile = _discard_pile(["2H", "3H", "4H", "5H", "9S"])
    top = pile[-1]

    recycled = recycle_discard(pile, random.Random(1))

    assert {card.code for card in recycled} == {"2H", "3H", "4H", "5H"}
    assert all(card.location is CardLocation.DECK for card in recycled)
    assert sorted(card.position for card in recycled) == [0, 1, 2, 3]
    assert top.location is CardLocation.DISCARD
    assert top.position == 0


def test_recycle_single_card_pile_goes_whole() -> None:
    pile = _discard_pile(["QC"])

    recycled = recycle_discard(pile, random.Random(1))

    assert [card.code for card in recycled] == ["QC"]
    assert pile[0].location is CardLocation.DECK


def test_recycle_empty_pile() -> None:
    assert recycle_discard([], random.Random(1)) == []
