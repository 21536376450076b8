"""Meld validation with a hidden wildcard rank.

Validators are pure: they only look at the suit and rank of the cards handed
in, so callers must pass the live card rows every time a meld changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Sequence

from .cards import Card, Rank

__all__ = [
    "MeldKind",
    "MeldCheck",
    "MIN_MELD_SIZE",
    "MAX_SET_SIZE",
    "split_wildcards",
    "count_gaps",
    "validate_set",
    "validate_sequence",
    "classify_meld",
    "arrange_sequence",
]

MIN_MELD_SIZE: Final[int] = 3
MAX_SET_SIZE: Final[int] = 4
MAX_SEQUENCE_SIZE: Final[int] = len(Rank)


class MeldKind(str, Enum):
    SET = "set"
    SEQUENCE = "sequence"


@dataclass(frozen=True, slots=True)
class MeldCheck:
    """Outcome of validating one group of cards."""

    valid: bool
    kind: MeldKind | None = None
    pure: bool = False
    reason: str = ""

    def __bool__(self) -> bool:
        return self.valid


def _reject(reason: str, kind: MeldKind | None = None) -> MeldCheck:
    return MeldCheck(valid=False, kind=kind, reason=reason)


def split_wildcards(cards: Sequence[Card], wildcard_rank: Rank | None) -> tuple[list[Card], list[Card]]:
    """Return ``(naturals, wildcards)`` preserving input order."""

    naturals: list[Card] = []
    wildcards: list[Card] = []
    for card in cards:
        (wildcards if card.is_wildcard(wildcard_rank) else naturals).append(card)
    return naturals, wildcards


def validate_set(cards: Sequence[Card], wildcard_rank: Rank | None = None) -> MeldCheck:
    """Check whether ``cards`` form a set of three or four cards of one rank.

    Suits may repeat once a wildcard is involved; a set made only of natural
    cards needs distinct suits.
    """

    if not MIN_MELD_SIZE <= len(cards) <= MAX_SET_SIZE:
        return _reject("a set needs three or four cards", MeldKind.SET)
    naturals, wildcards = split_wildcards(cards, wildcard_rank)
    if not naturals:
        return _reject("a set needs at least one non-wildcard card", MeldKind.SET)
    if len({card.rank for card in naturals}) != 1:
        return _reject("set cards must share one rank", MeldKind.SET)
    if not wildcards and len({card.suit for card in naturals}) != len(naturals):
        return _reject("set repeats a suit", MeldKind.SET)
    return MeldCheck(valid=True, kind=MeldKind.SET)


def _sequence_numbers(
    cards: Sequence[Card], wildcard_rank: Rank | None
) -> tuple[list[int], int] | str:
    """Return sorted natural rank numbers and the wildcard count, or a reason string."""

    naturals, wildcards = split_wildcards(cards, wildcard_rank)
    if not naturals:
        return "a sequence needs at least one non-wildcard card"
    if len({card.suit for card in naturals}) != 1:
        return "sequence cards must share one suit"
    numbers = sorted(card.rank.number for card in naturals)
    if len(set(numbers)) != len(numbers):
        return "sequence repeats a rank"
    return numbers, len(wildcards)


def count_gaps(numbers: Sequence[int]) -> int:
    """Return how many rank slots are missing between sorted ``numbers``."""

    return sum(high - low - 1 for low, high in zip(numbers, numbers[1:]))


def validate_sequence(cards: Sequence[Card], wildcard_rank: Rank | None = None) -> MeldCheck:
    """Check whether ``cards`` form a same-suit run, Ace low and no wraparound.

    Wildcards may fill missing ranks. The run is pure only when it holds no
    wildcard at all.
    """

    if len(cards) < MIN_MELD_SIZE:
        return _reject("a sequence needs at least three cards", MeldKind.SEQUENCE)
    if len(cards) > MAX_SEQUENCE_SIZE:
        return _reject("a sequence cannot exceed thirteen cards", MeldKind.SEQUENCE)
    parsed = _sequence_numbers(cards, wildcard_rank)
    if isinstance(parsed, str):
        return _reject(parsed, MeldKind.SEQUENCE)
    numbers, wildcard_count = parsed
    gaps = count_gaps(numbers)
    if gaps > wildcard_count:
        return _reject("not enough wildcards to fill the sequence gaps", MeldKind.SEQUENCE)
    return MeldCheck(valid=True, kind=MeldKind.SEQUENCE, pure=wildcard_count == 0)


def classify_meld(cards: Sequence[Card], wildcard_rank: Rank | None = None) -> MeldCheck:
    """Return the first valid reading of ``cards``.

    A pure sequence wins over everything, then a set, then an impure sequence.
    """

    sequence = validate_sequence(cards, wildcard_rank)
    if sequence.valid and sequence.pure:
        return sequence
    as_set = validate_set(cards, wildcard_rank)
    if as_set.valid:
        return as_set
    if sequence.valid:
        return sequence
    return _reject(f"{as_set.reason}; {sequence.reason}")


def arrange_sequence(cards: Sequence[Card], wildcard_rank: Rank | None = None) -> list[Card]:
    """Return a valid sequence laid out low to high with wildcards in their slots.

    Wildcards first fill internal gaps; spare ones extend the top end while
    ranks remain, then the bottom end.
    """

    parsed = _sequence_numbers(cards, wildcard_rank)
    if isinstance(parsed, str):
        raise ValueError(parsed)
    naturals, wildcards = split_wildcards(cards, wildcard_rank)
    by_number = {card.rank.number: card for card in naturals}
    spare = list(wildcards)

    low, high = min(by_number), max(by_number)
    arranged: list[Card] = []
    for number in range(low, high + 1):
        if number in by_number:
            arranged.append(by_number[number])
        elif spare:
            arranged.append(spare.pop(0))
        else:
            raise ValueError("not enough wildcards to fill the sequence gaps")
    while spare and high < MAX_SEQUENCE_SIZE:
        arranged.append(spare.pop(0))
        high += 1
    while spare and low > 1:
        arranged.insert(0, spare.pop(0))
        low -= 1
    if spare:
        raise ValueError("sequence cannot hold every wildcard")
    return arranged
