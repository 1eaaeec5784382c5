"""
Shared pytest fixtures for blackjack trainer tests.

Provides convenience wrappers around str_to_card for building known hands,
stacked shoes and tables with a predetermined deal order.
"""

from __future__ import annotations

import pytest

from blackjack_trainer.engine.cards import str_to_card
from blackjack_trainer.engine.shoe import Shoe
from blackjack_trainer.engine.table_rules import GameRules, preset_id_for
from blackjack_trainer.game.state import GameState, initial_state
from blackjack_trainer.game.table import Table


def hand(*card_strs: str) -> tuple[int, ...]:
    """Build a hand tuple from human-readable card strings.

    Examples:
        >>> hand('AS', 'AC')   # Ace of Spades, Ace of Clubs
        (51, 48)
        >>> hand('7C', '7D', '7H')
        (20, 21, 22)
    """
    return tuple(str_to_card(s) for s in card_strs)


def card(card_str: str) -> int:
    return str_to_card(card_str)


def stacked_table(
    *card_strs: str,
    rules: GameRules | None = None,
    balance: int = 1000,
    counting_system: str = 'hi-lo',
) -> Table:
    """Table whose shoe deals ``card_strs`` first (P1, D1, P2, D2, then draws).

    The shoe holds enough decks for the stacked cards; the clock is fixed.
    """
    rules = rules or GameRules()
    state = initial_state(
        rules=rules,
        starting_balance=balance,
        counting_system=counting_system,
        preset_id=preset_id_for(rules),
        session_start=0.0,
    )
    shoe = Shoe.stacked(hand(*card_strs), rules.deck_count, rules.penetration)
    return Table(state, shoe, clock=lambda: 1000.0)


@pytest.fixture
def fresh_state() -> GameState:
    """Default rules, 1000 balance, betting phase."""
    return initial_state(starting_balance=1000, session_start=0.0)


@pytest.fixture
def h():
    """Expose the hand() helper as a fixture for convenience."""
    return hand
