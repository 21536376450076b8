"""Typer entry-point wiring for the joker table CLI."""

from __future__ import annotations

import logging
import random
from typing import Sequence

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..cards import id_from_code
from ..errors import TableError
from ..events import LoggingSink
from ..sqlite_store import SqliteTableStore
from ..state import GameRecord, TableConfig
from ..store import MemoryTableStore, TableStore
from ..table import RummyTable
from .render import format_card, render_snapshot

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()

GAME_ID = 1

COMMANDS = (
    ("d", "draw from the deck"),
    ("p", "take the top discard"),
    ("x CARD", "discard CARD, e.g. x 10H"),
    ("l CARD CARD CARD...", "lay a new meld"),
    ("a MELD CARD", "add CARD to your meld number MELD"),
    ("m CARD MELD|h", "move CARD to meld MELD or back to hand"),
    ("w", "claim the win"),
    ("q", "quit"),
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _open_store(db: str | None) -> TableStore:
    if db:
        return SqliteTableStore(db)
    return MemoryTableStore()


def _start_table(players: int, hand_size: int, seed: int | None, db: str | None) -> RummyTable:
    try:
        config = TableConfig(hand_size=hand_size)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    store = _open_store(db)
    store.add_game(GameRecord(id=GAME_ID, name="hot seat", max_players=max(players, 2)))
    table = RummyTable(store, sink=LoggingSink(), rng=random.Random(seed), config=config)
    try:
        table.initialize_game(GAME_ID, list(range(1, players + 1)))
    except TableError as exc:
        console.print(f"[red]{exc.code}[/red]: {exc}")
        raise typer.Exit(code=1) from exc
    return table


def _help_table() -> Table:
    table = Table(title="Commands", box=box.SIMPLE_HEAVY)
    table.add_column("Input", justify="left", style="bold")
    table.add_column("Action", justify="left")
    for usage, action in COMMANDS:
        table.add_row(usage, action)
    return table


def _need(args: Sequence[str], count: int, usage: str) -> None:
    if len(args) < count:
        raise ValueError(f"usage: {usage}")


def _apply_command(table: RummyTable, player_id: int, line: str) -> bool:
    """Run one hot-seat command for ``player_id``; return ``False`` to stop playing."""

    parts = line.split()
    if not parts:
        return True
    verb, args = parts[0].lower(), parts[1:]

    if verb in {"q", "quit"}:
        return False
    if verb == "d":
        card = table.draw_from_deck(GAME_ID, player_id)
        console.print(f"Drew {format_card(card)}" if card else "Both piles are empty.")
    elif verb == "p":
        card = table.draw_from_discard(GAME_ID, player_id)
        console.print(f"Took {format_card(card)}" if card else "The discard pile is empty.")
    elif verb == "x":
        _need(args, 1, "x CARD")
        card = table.discard_card(GAME_ID, player_id, id_from_code(args[0]))
        console.print(f"Discarded {format_card(card)}")
    elif verb == "l":
        check = table.lay_meld(GAME_ID, player_id, [id_from_code(code) for code in args])
        label = "pure sequence" if check.pure else check.kind.value if check.kind else "meld"
        console.print(f"Laid a {label}.")
    elif verb == "a":
        _need(args, 2, "a MELD CARD")
        position = table.add_to_meld(GAME_ID, player_id, int(args[0]), id_from_code(args[1]))
        console.print(f"Added at the {position.value}.")
    elif verb == "m":
        _need(args, 2, "m CARD MELD|h")
        target = None if args[1].lower() in {"h", "hand"} else int(args[1])
        table.move_card(GAME_ID, player_id, id_from_code(args[0]), target)
        console.print("Moved.")
    elif verb == "w":
        table.claim_win(GAME_ID, player_id)
    else:
        console.print(_help_table())
    return True


@app.command()
def deal(
    players: int = typer.Option(2, min=2, max=4, help="Number of seated players."),
    hand_size: int = typer.Option(13, min=1, help="Cards dealt to each player."),
    seed: int | None = typer.Option(None, help="Random seed for reproducible deals (omit for randomness)."),
    db: str | None = typer.Option(None, help="SQLite database path (omit for an in-memory table)."),
    reveal: bool = typer.Option(False, "--reveal", help="Show every player's hand and the wildcard rank."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity."),
) -> None:
    """Deal one table and print it."""

    _configure_logging(verbose)
    table = _start_table(players, hand_size, seed, db)
    snapshot = table.get_game_state(GAME_ID)
    reveal_players = snapshot.player_order if reveal else []
    hands = {player_id: table.get_player_hand(GAME_ID, player_id) for player_id in reveal_players}
    console.print(
        render_snapshot(
            snapshot,
            hands,
            reveal_players=reveal_players,
            wildcard_rank=snapshot.hidden_wildcard_rank if reveal else None,
        )
    )


@app.command()
def play(
    players: int = typer.Option(2, min=2, max=4, help="Number of seated players."),
    hand_size: int = typer.Option(13, min=1, help="Cards dealt to each player."),
    seed: int | None = typer.Option(None, help="Random seed for reproducible games (omit for randomness)."),
    db: str | None = typer.Option(None, help="SQLite database path (omit for an in-memory table)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity."),
) -> None:
    """Play a hot-seat game in the terminal."""

    _configure_logging(verbose)
    table = _start_table(players, hand_size, seed, db)
    console.print(_help_table())

    while True:
        snapshot = table.get_game_state(GAME_ID)
        if snapshot.winner is not None:
            console.print(f"[bold green]P{snapshot.winner} wins![/bold green]")
            break
        actor = snapshot.current_turn_player
        if actor is None:  # pragma: no cover - the table was just dealt
            break
        console.print(
            render_snapshot(
                snapshot,
                {actor: table.get_player_hand(GAME_ID, actor)},
                reveal_players=[actor],
                wildcard_rank=table.visible_wildcard_rank(GAME_ID, actor),
            )
        )
        line = typer.prompt(f"P{actor}")
        try:
            keep_playing = _apply_command(table, actor, line)
        except TableError as exc:
            console.print(f"[red]{exc.code}[/red]: {exc}")
            continue
        except ValueError as exc:
            console.print(f"[red]Invalid input[/red]: {exc}")
            continue
        if not keep_playing:
            break


def main() -> None:
    """Entry-point for ``python -m jokertable.cli.main``."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
