"""
Theoretical house edge from table rules.

Additive rule-of-thumb model in percentage points, starting from 0.43% for
6 decks, S17, DAS, no surrender, 3:2 blackjack and four split hands:

    decks            (deck_count - 6) × 0.05
    H17              +0.22
    6:5 blackjack    +1.39   (2:1 → -2.27, linear in between)
    no DAS           +0.14
    late surrender   -0.08
    resplit Aces     -0.08
    hit split Aces   -0.14
    double 9-11      +0.09   (10-11 → +0.18)
    2 / 3 max hands  +0.05 / +0.02

Positive = house advantage. Results are rounded to 2 decimals.
"""

from __future__ import annotations

from typing import NamedTuple

from blackjack_trainer.engine.rules import round_half_up
from blackjack_trainer.engine.table_rules import DoubleOn, GameRules

BASE_EDGE: float = 0.43

H17_ADJUSTMENT: float = 0.22
NO_DAS_ADJUSTMENT: float = 0.14
LATE_SURRENDER_ADJUSTMENT: float = -0.08
RESPLIT_ACES_ADJUSTMENT: float = -0.08
HIT_SPLIT_ACES_ADJUSTMENT: float = -0.14

_DOUBLE_ON_ADJUSTMENT: dict[DoubleOn, float] = {
    DoubleOn.ANY: 0.0,
    DoubleOn.NINE_TO_ELEVEN: 0.09,
    DoubleOn.TEN_TO_ELEVEN: 0.18,
}

_MAX_HANDS_ADJUSTMENT: dict[int, float] = {2: 0.05, 3: 0.02}


class EdgeComponent(NamedTuple):
    """One line of the house edge breakdown.

    ``key`` and ``params`` are a message key and its template parameters for
    the display layer.
    """
    key: str
    value: float
    params: dict


# ─── Adjustments ──────────────────────────────────────────────────────────────

def deck_count_adjustment(deck_count: int) -> float:
    return round_half_up((deck_count - 6) * 0.05, 2)


def blackjack_payout_adjustment(payout: float) -> float:
    """Edge change relative to 3:2.

    Examples:
        >>> blackjack_payout_adjustment(1.2)
        1.39
        >>> blackjack_payout_adjustment(1.5)
        0.0
    """
    if payout == 1.5:
        return 0.0
    if payout == 1.2:
        return 1.39
    if payout == 2.0:
        return -2.27
    if payout < 1.5:
        return (1.5 - payout) / (1.5 - 1.2) * 1.39
    return -(payout - 1.5) / (2.0 - 1.5) * 2.27


def max_hands_adjustment(max_hands: int) -> float:
    return _MAX_HANDS_ADJUSTMENT.get(max_hands, 0.0)


# ─── Public API ───────────────────────────────────────────────────────────────

def edge_breakdown(rules: GameRules) -> list[EdgeComponent]:
    """Return every non-trivial contribution to the house edge.

    The base line and the S17 / DAS lines are always present (the latter two
    at 0.0 when they are already part of the base).
    """
    components = [EdgeComponent('base', BASE_EDGE, {})]

    deck_adj = deck_count_adjustment(rules.deck_count)
    if deck_adj != 0:
        components.append(EdgeComponent('deckCount', deck_adj, {'decks': rules.deck_count}))

    if rules.dealer_hits_soft17:
        components.append(EdgeComponent('h17', H17_ADJUSTMENT, {}))
    else:
        components.append(EdgeComponent('s17', 0.0, {}))

    bj_adj = blackjack_payout_adjustment(rules.blackjack_payout)
    if bj_adj != 0:
        components.append(
            EdgeComponent('blackjackPayout', bj_adj, {'payout': payout_label(rules.blackjack_payout)})
        )

    if rules.double_after_split:
        components.append(EdgeComponent('das', 0.0, {}))
    else:
        components.append(EdgeComponent('noDas', NO_DAS_ADJUSTMENT, {}))

    if rules.late_surrender:
        components.append(EdgeComponent('lateSurrender', LATE_SURRENDER_ADJUSTMENT, {}))
    if rules.can_resplit_aces:
        components.append(EdgeComponent('resplitAces', RESPLIT_ACES_ADJUSTMENT, {}))
    if rules.can_hit_split_aces:
        components.append(EdgeComponent('hitSplitAces', HIT_SPLIT_ACES_ADJUSTMENT, {}))

    double_adj = _DOUBLE_ON_ADJUSTMENT[rules.double_on]
    if double_adj != 0:
        components.append(EdgeComponent('doubleOn', double_adj, {'range': rules.double_on.value}))

    max_hands = rules.max_splits + 1
    split_adj = max_hands_adjustment(max_hands)
    if split_adj != 0:
        components.append(EdgeComponent('maxHands', split_adj, {'hands': max_hands}))

    return components


def calculate_house_edge(rules: GameRules) -> float:
    """Return the house edge in percent, rounded to 2 decimals.

    Examples:
        >>> calculate_house_edge(VEGAS_STRIP)     # base 0.43 - 0.08 surrender
        0.35
        >>> calculate_house_edge(SINGLE_DECK)
        2.16
    """
    edge = BASE_EDGE
    edge += deck_count_adjustment(rules.deck_count)
    if rules.dealer_hits_soft17:
        edge += H17_ADJUSTMENT
    edge += blackjack_payout_adjustment(rules.blackjack_payout)
    if not rules.double_after_split:
        edge += NO_DAS_ADJUSTMENT
    if rules.late_surrender:
        edge += LATE_SURRENDER_ADJUSTMENT
    if rules.can_resplit_aces:
        edge += RESPLIT_ACES_ADJUSTMENT
    if rules.can_hit_split_aces:
        edge += HIT_SPLIT_ACES_ADJUSTMENT
    edge += _DOUBLE_ON_ADJUSTMENT[rules.double_on]
    edge += max_hands_adjustment(rules.max_splits + 1)
    return round_half_up(edge, 2)


def player_advantage(rules: GameRules) -> float:
    return -calculate_house_edge(rules)


def payout_label(payout: float) -> str:
    """Return the conventional ratio label ('3:2', '6:5', ...)."""
    if payout == 1.5:
        return '3:2'
    if payout == 1.2:
        return '6:5'
    if payout == 2.0:
        return '2:1'
    return f"{payout}:1"
