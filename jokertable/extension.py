"""Decide whether and where a single card extends a laid meld."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .cards import Card, Rank
from .melds import (
    MAX_SEQUENCE_SIZE,
    MeldCheck,
    arrange_sequence,
    split_wildcards,
    validate_sequence,
    validate_set,
)

__all__ = [
    "ExtensionPosition",
    "ExtensionResult",
    "resolve_extension",
    "splice_into_sequence",
    "can_extend_set",
]


class ExtensionPosition(str, Enum):
    START = "start"
    END = "end"
    MIDDLE = "middle"


@dataclass(frozen=True, slots=True)
class ExtensionResult:
    """Verdict for adding one card to a sequence."""

    can_extend: bool
    position: ExtensionPosition | None = None
    reason: str = ""

    def __bool__(self) -> bool:
        return self.can_extend


def _reject(reason: str) -> ExtensionResult:
    return ExtensionResult(can_extend=False, reason=reason)


def _wildcard_position(sequence: Sequence[Card], wildcard_rank: Rank | None) -> ExtensionResult:
    arranged = arrange_sequence(sequence, wildcard_rank)
    leading = 0
    for card in arranged:
        if not card.is_wildcard(wildcard_rank):
            break
        leading += 1
    low = arranged[leading].rank.number - leading
    high = low + len(arranged) - 1
    if high < MAX_SEQUENCE_SIZE:
        return ExtensionResult(can_extend=True, position=ExtensionPosition.END)
    if low > 1:
        return ExtensionResult(can_extend=True, position=ExtensionPosition.START)
    return _reject("sequence already spans Ace to King")


def resolve_extension(
    sequence: Sequence[Card], candidate: Card, wildcard_rank: Rank | None = None
) -> ExtensionResult:
    """Return where ``candidate`` may join the already-valid ``sequence``.

    A natural card goes at the ``start`` when it is exactly one rank below the
    lowest natural, at the ``end`` when exactly one above the highest, or in the
    ``middle`` when it fills an internal gap. A wildcard goes wherever a rank
    slot remains, preferring the high end.
    """

    current = validate_sequence(sequence, wildcard_rank)
    if not current.valid:
        return _reject(f"target is not a valid sequence: {current.reason}")
    if any(card.id == candidate.id for card in sequence):
        return _reject("card is already part of the sequence")

    if candidate.is_wildcard(wildcard_rank):
        if len(sequence) + 1 > MAX_SEQUENCE_SIZE:
            return _reject("sequence already spans Ace to King")
        return _wildcard_position(sequence, wildcard_rank)

    naturals, _ = split_wildcards(sequence, wildcard_rank)
    if candidate.suit != naturals[0].suit:
        return _reject("suit does not match the sequence")

    combined = validate_sequence([*sequence, candidate], wildcard_rank)
    if not combined.valid:
        return _reject(combined.reason)

    numbers = [card.rank.number for card in naturals]
    lowest, highest = min(numbers), max(numbers)
    number = candidate.rank.number
    if number == lowest - 1:
        return ExtensionResult(can_extend=True, position=ExtensionPosition.START)
    if number == highest + 1:
        return ExtensionResult(can_extend=True, position=ExtensionPosition.END)
    if lowest < number < highest:
        return ExtensionResult(can_extend=True, position=ExtensionPosition.MIDDLE)
    return _reject("card is not adjacent to the sequence")


def splice_into_sequence(
    sequence: Sequence[Card],
    candidate: Card,
    result: ExtensionResult,
    wildcard_rank: Rank | None = None,
) -> list[Card]:
    """Return the sequence with ``candidate`` inserted at the resolved position.

    Wildcards are simply prepended or appended; natural cards are placed by
    rank, which also moves any wildcard they displace.
    """

    if not result.can_extend or result.position is None:
        raise ValueError("cannot splice a rejected extension")
    if candidate.is_wildcard(wildcard_rank):
        if result.position is ExtensionPosition.START:
            return [candidate, *sequence]
        return [*sequence, candidate]
    return arrange_sequence([*sequence, candidate], wildcard_rank)


def can_extend_set(cards: Sequence[Card], candidate: Card, wildcard_rank: Rank | None = None) -> MeldCheck:
    """Return the validation of ``cards`` grown by ``candidate`` as a set."""

    if any(card.id == candidate.id for card in cards):
        return MeldCheck(valid=False, reason="card is already part of the set")
    return validate_set([*cards, candidate], wildcard_rank)
