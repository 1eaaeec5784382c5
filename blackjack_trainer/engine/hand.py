"""
Hand evaluation: total calculation, Ace demotion, and hand classification.

Standard blackjack Ace valuation:
    Every Ace starts at 11. While the total exceeds 21 and an Ace is still
    counted as 11, one Ace is demoted to 1 (total -= 10). Exactly as many Aces
    are demoted as needed, never more.

A hand is *soft* when at least one Ace is still counted as 11 after demotion.

All functions operate on tuples of card integers (see cards.py). The
PlayerHand record lives here too because settlement, the reducer and the AI
all read it through these helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .cards import RANK_ACE, RANK_VALUES, ranks_pair


# ─── Enumerations ─────────────────────────────────────────────────────────────

class HandStatus(Enum):
    ACTIVE = 'active'
    STAND = 'stand'
    BUST = 'bust'
    BLACKJACK = 'blackjack'
    SURRENDER = 'surrender'


class HandResult(Enum):
    """Settlement category of a finished hand (player's perspective)."""
    WIN = 'win'
    LOSE = 'lose'
    PUSH = 'push'
    BLACKJACK = 'blackjack'
    BUST = 'bust'
    SURRENDER = 'surrender'


# ─── Evaluation ───────────────────────────────────────────────────────────────

def _total_and_soft_aces(cards: tuple[int, ...]) -> tuple[int, int]:
    """Return (total, aces still counted as 11) after greedy demotion."""
    total = 0
    aces = 0
    for card in cards:
        rank = card // 4
        total += RANK_VALUES[rank]
        if rank == RANK_ACE:
            aces += 1

    while total > 21 and aces > 0:
        total -= 10
        aces -= 1

    return total, aces


def calculate_value(cards: tuple[int, ...]) -> int:
    """Calculate the best total for a hand.

    Aces count 11 and are demoted to 1 one at a time while the hand would
    otherwise bust. If every Ace is demoted and the hand still exceeds 21,
    that bust total is returned.

    Examples:
        >>> calculate_value(hand('AC', 'AD', 'AH', '8S'))  # one Ace stays 11
        21
        >>> calculate_value(hand('AC', '10D', '5H'))
        16
        >>> calculate_value(hand('KC', 'QD', '5H'))
        25
    """
    return _total_and_soft_aces(cards)[0]


def is_soft(cards: tuple[int, ...]) -> bool:
    """Return True if some Ace can remain valued at 11 without busting.

    Examples:
        >>> is_soft(hand('AC', '6D'))         # soft 17
        True
        >>> is_soft(hand('AC', '6D', '10H'))  # Ace forced to 1: hard 17
        False
        >>> is_soft(hand('AC', 'AD', '9H'))   # soft 21
        True
    """
    total, aces = _total_and_soft_aces(cards)
    return aces > 0 and total <= 21


def is_blackjack(cards: tuple[int, ...]) -> bool:
    """Return True only for an exactly-two-card 21.

    Examples:
        >>> is_blackjack(hand('AS', 'KH'))
        True
        >>> is_blackjack(hand('7C', '7D', '7H'))
        False
    """
    return len(cards) == 2 and calculate_value(cards) == 21


def is_bust(cards: tuple[int, ...]) -> bool:
    return calculate_value(cards) > 21


def can_split(cards: tuple[int, ...]) -> bool:
    """Return True for a two-card pair (any two ten-value cards pair)."""
    return len(cards) == 2 and ranks_pair(cards[0], cards[1])


def compare_hands(player_value: int, dealer_value: int) -> HandResult:
    """Compare final totals: dealer bust wins, player bust loses, else numeric.

    Examples:
        >>> compare_hands(18, 22)
        <HandResult.WIN: 'win'>
        >>> compare_hands(22, 18)
        <HandResult.LOSE: 'lose'>
        >>> compare_hands(19, 19)
        <HandResult.PUSH: 'push'>
    """
    if dealer_value > 21:
        return HandResult.WIN
    if player_value > 21:
        return HandResult.LOSE
    if player_value > dealer_value:
        return HandResult.WIN
    if player_value < dealer_value:
        return HandResult.LOSE
    return HandResult.PUSH


def hand_description(cards: tuple[int, ...]) -> tuple[str, int | None]:
    """Return a (message key, value) pair describing a hand for display.

    Keys: 'blackjack' (value None), 'bustValue', 'soft', 'value'.
    """
    value = calculate_value(cards)
    if is_blackjack(cards):
        return 'blackjack', None
    if value > 21:
        return 'bustValue', value
    if is_soft(cards):
        return 'soft', value
    return 'value', value


# ─── Player hand record ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlayerHand:
    """One player hand within a round.

    Attributes:
        cards:       Cards in deal order.
        bet:         Stake on this hand in whole currency units.
        status:      Lifecycle status; only ACTIVE hands accept actions.
        doubled:     True once the hand has been doubled down.
        is_split:    True if the hand was produced by a split.
        split_count: Number of splits in this hand's lineage (0..max_splits).
        hand_id:     Stable identifier, 'hand-0', 'hand-0-1', ...
        result:      Settlement category once resolved.
        payout:      Amount returned to the balance once resolved.
    """
    cards: tuple[int, ...]
    bet: int
    status: HandStatus = HandStatus.ACTIVE
    doubled: bool = False
    is_split: bool = False
    split_count: int = 0
    hand_id: str = 'hand-0'
    result: HandResult | None = None
    payout: int | None = None

    @property
    def value(self) -> int:
        return calculate_value(self.cards)

    @property
    def is_active(self) -> bool:
        return self.status == HandStatus.ACTIVE
