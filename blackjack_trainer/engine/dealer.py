"""Dealer drawing policy (S17 / H17)."""

from __future__ import annotations

from .hand import calculate_value, is_soft
from .table_rules import GameRules


def dealer_should_hit(cards: tuple[int, ...], rules: GameRules) -> bool:
    """Return True if the dealer must draw another card.

    The dealer hits 16 or less, stands on 18+, and at 17 hits only a soft 17
    under H17 rules.

    Examples:
        >>> dealer_should_hit(hand('AC', '6D'), GameRules(dealer_hits_soft17=True))
        True
        >>> dealer_should_hit(hand('AC', '6D'), GameRules(dealer_hits_soft17=False))
        False
    """
    value = calculate_value(cards)
    if value < 17:
        return True
    if value == 17:
        return rules.dealer_hits_soft17 and is_soft(cards)
    return False


def rule_label(rules: GameRules) -> str:
    return 'H17' if rules.dealer_hits_soft17 else 'S17'
