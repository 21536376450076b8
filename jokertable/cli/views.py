"""Composable view primitives for the table CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence, Set

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table

from ..cards import Card, Rank
from ..melds import classify_meld
from ..state import GameSnapshot


@dataclass(slots=True)
class TableSummaryView:
    """Renderable summarising one game snapshot."""

    snapshot: GameSnapshot
    card_formatter: Callable[[Card], str]
    hands: Mapping[int, Sequence[Card]] = field(default_factory=dict)
    reveal_players: Set[int] = field(default_factory=set)
    wildcard_rank: Rank | None = None

    def _cards_markup(self, cards: Sequence[Card]) -> str:
        if not cards:
            return "-"
        return " ".join(self.card_formatter(card) for card in cards)

    def _metadata_panel(self) -> Panel:
        snapshot = self.snapshot
        grid = Table.grid(expand=True)
        grid.add_column(justify="left")
        grid.add_row(f"[cyan]Status[/cyan]: {snapshot.status.value}")
        grid.add_row(f"[cyan]Turn[/cyan]: {snapshot.turn_number}")
        grid.add_row(f"[cyan]Deck[/cyan]: {snapshot.deck_count} card(s)")
        if snapshot.discard_top is not None:
            top_card = self.card_formatter(snapshot.discard_top)
            grid.add_row(f"[cyan]Discard[/cyan]: {top_card} ({snapshot.discard_count} card(s))")
        else:
            grid.add_row("[cyan]Discard[/cyan]: -")
        wildcard = self.wildcard_rank.value if self.wildcard_rank is not None else "hidden"
        grid.add_row(f"[cyan]Wildcard[/cyan]: {wildcard}")
        return Panel(grid, title="Table State", box=box.SQUARE, border_style="blue")

    def render(self) -> RenderableType:
        snapshot = self.snapshot
        table = Table(box=box.ROUNDED, expand=True)
        table.add_column("Player", justify="left", style="bold")
        table.add_column("Hand", justify="left")
        table.add_column("Melds", justify="right")
        table.add_column("Status", justify="left")

        for player in snapshot.players:
            name = f"P{player.player_id}"
            if player.player_id == snapshot.current_turn_player:
                name = f"[bold yellow]{name}[/bold yellow]"
            if player.player_id in self.reveal_players and player.player_id in self.hands:
                hand_display = self._cards_markup(self.hands[player.player_id])
            else:
                hand_display = f"{player.card_count} cards"
            status = "Drawn" if player.has_drawn else "Waiting"
            if snapshot.winner == player.player_id:
                status = "[bold green]Winner[/bold green]"
            table.add_row(name, hand_display, str(len(player.melds)), status)

        components: list[RenderableType] = [table, self._metadata_panel()]

        if any(player.melds for player in snapshot.players):
            meld_table = Table(box=box.MINIMAL, expand=True)
            meld_table.add_column("Meld", justify="left", style="bold")
            meld_table.add_column("Owner", justify="left")
            meld_table.add_column("Kind", justify="left")
            meld_table.add_column("Cards", justify="left")

            for player in snapshot.players:
                for idx, meld in enumerate(player.melds):
                    check = classify_meld(meld, self.wildcard_rank)
                    kind_label = check.kind.value.title() if check.kind else "?"
                    meld_table.add_row(f"M{idx}", f"P{player.player_id}", kind_label, self._cards_markup(meld))

            components.append(Panel(meld_table, title="Table Melds", box=box.SQUARE, border_style="green"))

        return Group(*components)
