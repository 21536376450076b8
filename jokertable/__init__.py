"""Top-level package for the hidden-wildcard rummy table engine."""

from . import cards, deck, errors, events, extension, melds, state, store, table
from .table import RummyTable

__all__ = [
    "RummyTable",
    "cards",
    "deck",
    "errors",
    "events",
    "extension",
    "melds",
    "state",
    "store",
    "table",
]
