from __future__ import annotations

import logging

import pytest

from jokertable.events import EventKind, LoggingSink, NullSink, RecordingSink, TableEvent


def _event(kind: EventKind = EventKind.CARD_DISCARDED) -> TableEvent:
    return TableEvent(kind, 3, 1, {"card_id": 12, "card": "KH"})


def test_event_to_dict() -> None:
    assert _event().to_dict() == {
        "event": "card_discarded",
        "game_id": 3,
        "player_id": 1,
        "details": {"card_id": 12, "card": "KH"},
        "private_to": None,
    }


def test_recording_sink_filters_by_kind() -> None:
    sink = RecordingSink()
    sink.publish(_event())
    sink.publish(_event(EventKind.WINNER_DECLARED))

    assert sink.kinds() == [EventKind.CARD_DISCARDED, EventKind.WINNER_DECLARED]
    assert len(sink.of_kind(EventKind.WINNER_DECLARED)) == 1
    sink.clear()
    assert sink.events == []


def test_null_sink_drops_events() -> None:
    assert NullSink().publish(_event()) is None


def test_logging_sink_writes_one_record(caplog: pytest.LogCaptureFixture) -> None:
    sink = LoggingSink(logging.getLogger("jokertable.test"))

    with caplog.at_level(logging.INFO, logger="jokertable.test"):
        sink.publish(_event())

    assert len(caplog.records) == 1
    assert "card_discarded" in caplog.records[0].getMessage()
