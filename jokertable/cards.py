"""Card abstractions and helpers for the hidden-joker table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable, Iterator


class Suit(str, Enum):
    """Enumeration of the four suits in a standard deck."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def letter(self) -> str:
        return self.value[0].upper()


class Rank(str, Enum):
    """Enumeration of ranks ordered Ace-low, as used by sequences."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    @classmethod
    def ordered(cls) -> tuple["Rank", ...]:
        """Return ranks from Ace (1) to King (13)."""

        return tuple(cls)

    @property
    def number(self) -> int:
        """Return the sequence value of the rank, Ace being 1."""

        return RANK_NUMBERS[self]


class CardLocation(str, Enum):
    """Zones a card can occupy during a game."""

    DECK = "deck"
    DISCARD = "discard"
    PLAYER_HAND = "player_hand"
    LAID = "laid"


SUITS: Final[tuple[Suit, ...]] = tuple(Suit)
RANKS: Final[tuple[Rank, ...]] = Rank.ordered()
RANK_NUMBERS: Final[dict[Rank, int]] = {rank: idx + 1 for idx, rank in enumerate(Rank)}
DECK_SIZE: Final[int] = len(SUITS) * len(RANKS)
OWNED_LOCATIONS: Final[frozenset[CardLocation]] = frozenset(
    {CardLocation.PLAYER_HAND, CardLocation.LAID}
)

_SUIT_BY_LETTER: Final[dict[str, Suit]] = {suit.letter: suit for suit in Suit}


def card_id(suit: Suit, rank: Rank) -> int:
    """Return the per-game identifier for the (suit, rank) pair."""

    return SUITS.index(suit) * len(RANKS) + RANKS.index(rank)


def decode_id(identifier: int) -> tuple[Suit, Rank]:
    """Return the (suit, rank) pair encoded by ``identifier``."""

    if not 0 <= identifier < DECK_SIZE:
        raise ValueError(f"card identifier {identifier} out of range")
    return SUITS[identifier // len(RANKS)], RANKS[identifier % len(RANKS)]


def parse_code(code: str) -> tuple[Suit, Rank]:
    """Parse a short code such as ``"9H"`` or ``"10s"`` into suit and rank."""

    text = code.strip().upper()
    if len(text) < 2:
        raise ValueError(f"invalid card code '{code}'")
    rank_text, suit_text = text[:-1], text[-1]
    try:
        return _SUIT_BY_LETTER[suit_text], Rank(rank_text)
    except (KeyError, ValueError):
        raise ValueError(f"invalid card code '{code}'") from None


def id_from_code(code: str) -> int:
    suit, rank = parse_code(code)
    return card_id(suit, rank)


@dataclass(slots=True)
class Card:
    """A physical card row belonging to one game.

    ``owner`` is set exactly when the card sits in a player's hand or in one of
    that player's laid melds.
    """

    id: int
    suit: Suit
    rank: Rank
    location: CardLocation = CardLocation.DECK
    owner: int | None = None
    position: int = 0

    def __post_init__(self) -> None:
        self.suit = Suit(self.suit)
        self.rank = Rank(self.rank)
        self.location = CardLocation(self.location)
        owned = self.location in OWNED_LOCATIONS
        if owned and self.owner is None:
            raise ValueError(f"card {self.id} in {self.location.value} requires an owner")
        if not owned and self.owner is not None:
            raise ValueError(f"card {self.id} in {self.location.value} cannot have an owner")

    @classmethod
    def from_code(cls, code: str, **fields: object) -> "Card":
        """Build a card from a short code; mostly useful for tests and the CLI."""

        suit, rank = parse_code(code)
        return cls(id=card_id(suit, rank), suit=suit, rank=rank, **fields)  # type: ignore[arg-type]

    @property
    def code(self) -> str:
        return f"{self.rank.value}{self.suit.letter}"

    def is_wildcard(self, wildcard_rank: Rank | None) -> bool:
        """Return ``True`` when this card acts as a joker for ``wildcard_rank``."""

        return wildcard_rank is not None and self.rank == wildcard_rank

    def move(self, location: CardLocation, *, owner: int | None = None, position: int = 0) -> None:
        """Relocate the card in place, keeping the owner invariant."""

        if location in OWNED_LOCATIONS and owner is None:
            raise ValueError(f"moving card {self.id} to {location.value} requires an owner")
        self.location = location
        self.owner = owner if location in OWNED_LOCATIONS else None
        self.position = position


def iter_full_deck() -> Iterator[Card]:
    """Yield one card per (suit, rank) pair in canonical order."""

    for suit in SUITS:
        for rank in RANKS:
            yield Card(id=card_id(suit, rank), suit=suit, rank=rank)


def sort_by_rank(cards: Iterable[Card]) -> list[Card]:
    return sorted(cards, key=lambda c: (c.rank.number, SUITS.index(c.suit)))


def format_cards(cards: Iterable[Card]) -> str:
    return " ".join(card.code for card in cards)
