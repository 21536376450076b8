"""Deck assembly, shuffling, and discard recycling."""

from __future__ import annotations

import random
from typing import Protocol, Sequence

from .cards import DECK_SIZE, Card, CardLocation, iter_full_deck

__all__ = ["ShuffleSource", "build_deck", "shuffle_cards", "recycle_discard"]


class ShuffleSource(Protocol):
    """Anything exposing ``random.Random``-compatible ``shuffle`` and ``choice``."""

    def shuffle(self, x: list, /) -> None:  # pragma: no cover - protocol only
        ...

    def choice(self, seq: Sequence, /):  # pragma: no cover - protocol only
        ...


def shuffle_cards(cards: Sequence[Card], rng: ShuffleSource) -> list[Card]:
    """Return ``cards`` in a new random order with positions renumbered from zero."""

    shuffled = list(cards)
    rng.shuffle(shuffled)
    for position, card in enumerate(shuffled):
        card.position = position
    return shuffled


def build_deck(rng: ShuffleSource | None = None) -> list[Card]:
    """Return a fresh 52-card deck, every card in the deck zone, in shuffled order.

    The lowest ``position`` is the top of the deck.
    """

    if rng is None:
        rng = random.Random()
    deck = shuffle_cards(list(iter_full_deck()), rng)
    if len(deck) != DECK_SIZE or len({(card.suit, card.rank) for card in deck}) != DECK_SIZE:
        raise RuntimeError("deck assembly produced duplicate or missing cards")
    return deck


def recycle_discard(discard: Sequence[Card], rng: ShuffleSource) -> list[Card]:
    """Turn the discard pile into a new deck and return the recycled cards.

    ``discard`` must be ordered by position. When the pile holds at least two
    cards the top discard stays visible at position zero; otherwise the whole
    pile is recycled.
    """

    if not discard:
        return []
    if len(discard) > 1:
        top_card = discard[-1]
        pool = list(discard[:-1])
        top_card.position = 0
    else:
        pool = list(discard)
    recycled = shuffle_cards(pool, rng)
    for card in recycled:
        card.move(CardLocation.DECK, position=card.position)
    return recycled
