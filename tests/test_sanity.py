"""Sanity tests ensuring the scaffolding imports correctly."""

from __future__ import annotations

import importlib

import pytest


@pytest.mark.parametrize(
    "module_name",
    [
        "jokertable",
        "jokertable.cards",
        "jokertable.deck",
        "jokertable.melds",
        "jokertable.extension",
        "jokertable.table",
        "jokertable.sqlite_store",
        "jokertable.cli.main",
    ],
)
def test_modules_import(module_name: str) -> None:
    """Ensure all foundational modules can be imported."""

    assert importlib.import_module(module_name)
