"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from rich.console import RenderableType
from rich.panel import Panel

from ..cards import Card, Rank, Suit
from ..state import GameSnapshot
from .views import TableSummaryView

_SUIT_SYMBOLS = {
    Suit.SPADES: ("♠", "cyan"),
    Suit.HEARTS: ("♥", "red"),
    Suit.DIAMONDS: ("♦", "magenta"),
    Suit.CLUBS: ("♣", "green"),
}


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    symbol, color = _SUIT_SYMBOLS[card.suit]
    return f"[{color}]{card.rank.value}{symbol}[/{color}]"


def render_snapshot(
    snapshot: GameSnapshot,
    hands: Mapping[int, Sequence[Card]] | None = None,
    *,
    reveal_players: Iterable[int] | None = None,
    wildcard_rank: Rank | None = None,
    title: str = "Joker Table",
) -> RenderableType:
    """Return a Rich panel describing the current table state."""

    view = TableSummaryView(
        snapshot=snapshot,
        card_formatter=format_card,
        hands=dict(hands or {}),
        reveal_players=set(reveal_players or set()),
        wildcard_rank=wildcard_rank,
    )
    return Panel(view.render(), title=title, padding=(0, 1), border_style="cyan")
