"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides
fixtures available to all test files.
"""

from decimal import Decimal

import pytest

from oddeven.escrow import Funds
from oddeven.lobby import clear_games, create_game


@pytest.fixture(autouse=True)
def _empty_registry():
    """Every test starts with an empty in-memory game registry."""
    clear_games()
    yield
    clear_games()


@pytest.fixture
def xrd():
    """Return a factory for XRD funds."""

    def make(amount) -> Funds:
        return Funds(amount=Decimal(str(amount)), currency="XRD")

    return make


@pytest.fixture
def game():
    """A fresh game with a stake of 100 XRD."""
    g, _ = create_game(Decimal("100"), "XRD")
    return g


@pytest.fixture
def joined(game, xrd):
    """A game with both participants joined. Returns (game, badge_a, badge_b)."""
    badge_a, _ = game.join(xrd(150))
    badge_b, _ = game.join(xrd(100))
    return game, badge_a, badge_b
