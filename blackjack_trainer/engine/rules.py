"""
Settlement and payout calculation.

Settlement priority (highest to lowest):
    1. Player surrendered        → SURRENDER, half the bet back (rounded down)
    2. Player bust (>21)         → BUST, nothing back
    3. Player blackjack          → PUSH against a dealer blackjack, else
                                   BLACKJACK paid bet × (1 + payout multiplier)
    4. Dealer blackjack          → LOSE
    5. Dealer bust               → WIN, bet × 2
    6. Higher total              → WIN, bet × 2
    7. Equal totals              → PUSH, bet back
    8. Otherwise                 → LOSE

Payout convention: the payout is the amount *returned* to the balance (stake
included), since the stake was deducted when it was placed.

Rounding: every half-unit ambiguity resolves against the player. Amounts
paid to the player round down (floor); amounts charged to the player round
up (ceil).
"""

from __future__ import annotations

import math
from typing import NamedTuple

from .hand import HandResult, HandStatus, PlayerHand
from .table_rules import GameRules


class PayoutResult(NamedTuple):
    result: HandResult
    payout: int


# ─── Core settlement function ─────────────────────────────────────────────────

def calculate_payout(
    hand: PlayerHand,
    dealer_value: int,
    dealer_has_blackjack: bool,
    rules: GameRules,
) -> PayoutResult:
    """Settle one finished player hand against the dealer.

    Args:
        hand:                 The player's finished hand.
        dealer_value:         Dealer's final total.
        dealer_has_blackjack: True if the dealer's first two cards are a natural.
        rules:                Table rules (blackjack payout multiplier).

    Returns:
        PayoutResult(result, payout) where payout is the amount returned.

    Examples:
        >>> calculate_payout(PlayerHand(hand('AS', 'KH'), 100, HandStatus.BLACKJACK),
        ...                  19, False, GameRules())
        PayoutResult(result=<HandResult.BLACKJACK: 'blackjack'>, payout=250)
    """
    # ── Rule 1: Surrender returns half, rounded down ──────────────────────────
    if hand.status == HandStatus.SURRENDER:
        return PayoutResult(HandResult.SURRENDER, math.floor(hand.bet * 0.5))

    player_value = hand.value

    # ── Rule 2: Player bust loses even if the dealer busts too ────────────────
    if hand.status == HandStatus.BUST or player_value > 21:
        return PayoutResult(HandResult.BUST, 0)

    # ── Rule 3: Player blackjack ──────────────────────────────────────────────
    if hand.status == HandStatus.BLACKJACK:
        if dealer_has_blackjack:
            return PayoutResult(HandResult.PUSH, hand.bet)
        return PayoutResult(
            HandResult.BLACKJACK,
            math.floor(hand.bet * (1 + rules.blackjack_payout)),
        )

    # ── Rule 4: Dealer natural beats any non-blackjack hand ───────────────────
    if dealer_has_blackjack:
        return PayoutResult(HandResult.LOSE, 0)

    # ── Rules 5–8: Total comparison ───────────────────────────────────────────
    if dealer_value > 21 or player_value > dealer_value:
        return PayoutResult(HandResult.WIN, hand.bet * 2)
    if player_value == dealer_value:
        return PayoutResult(HandResult.PUSH, hand.bet)
    return PayoutResult(HandResult.LOSE, 0)


# ─── Insurance ────────────────────────────────────────────────────────────────

def calculate_insurance_payout(insurance_bet: int, dealer_has_blackjack: bool) -> int:
    """Return the insurance payout (2:1 plus the stake back, rounded down).

    ``insurance_bet <= 0`` is the not-offered (0) or declined (-1) sentinel
    and always pays nothing.

    Examples:
        >>> calculate_insurance_payout(13, True)
        39
        >>> calculate_insurance_payout(-1, True)
        0
    """
    if insurance_bet <= 0 or not dealer_has_blackjack:
        return 0
    return math.floor(insurance_bet * 3)


def insurance_cost(bet: int) -> int:
    """Return the insurance stake for a bet: half, rounded up.

    Examples:
        >>> insurance_cost(25)
        13
        >>> insurance_cost(100)
        50
    """
    return math.ceil(bet / 2)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals with halves rounded toward +infinity.

    Display figures (true count, house edge, RTP) use this instead of the
    built-in round(), which rounds halves to even.

    Examples:
        >>> round_half_up(2.25, 1)
        2.3
        >>> round_half_up(-2.25, 1)
        -2.2
    """
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale
