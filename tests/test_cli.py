from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from jokertable.cli.main import app

runner = CliRunner()


def test_deal_prints_the_table() -> None:
    result = runner.invoke(app, ["deal", "--seed", "3"])

    assert result.exit_code == 0, result.output
    assert "Deck" in result.output
    assert "25 card(s)" in result.output
    assert "hidden" in result.output


def test_deal_four_players_needs_smaller_hands() -> None:
    rejected = runner.invoke(app, ["deal", "--players", "4"])
    accepted = runner.invoke(app, ["deal", "--players", "4", "--hand-size", "12"])

    assert rejected.exit_code == 1
    assert "InsufficientCards" in rejected.output
    assert accepted.exit_code == 0, accepted.output
    assert "Deck: 3 card(s)" in accepted.output


def test_deal_reveal_shows_wildcard() -> None:
    result = runner.invoke(app, ["deal", "--seed", "3", "--reveal"])

    assert result.exit_code == 0, result.output
    assert "hidden" not in result.output


def test_play_draw_then_quit() -> None:
    result = runner.invoke(app, ["play", "--seed", "3"], input="d\nq\n")

    assert result.exit_code == 0, result.output
    assert "Drew" in result.output


def test_play_reports_rule_errors_and_keeps_going() -> None:
    result = runner.invoke(app, ["play", "--seed", "3"], input="x 2H\nl 2H\nbogus\nq\n")

    assert result.exit_code == 0, result.output
    assert "MustDrawFirst" in result.output
    assert "InvalidInput" in result.output
    assert "Commands" in result.output


def test_play_with_sqlite_file(tmp_path: Path) -> None:
    db_path = tmp_path / "hotseat.db"

    result = runner.invoke(app, ["play", "--seed", "3", "--db", str(db_path)], input="d\nq\n")

    assert result.exit_code == 0, result.output
    assert db_path.exists()
