"""
Rule-conditioned basic strategy lookup.

BasicStrategy(rules) selects the H17 or S17 table set once at construction
and, when doubling after a split is not allowed, downgrades the DAS-only
small-pair splits to Hit. Lookup order in get_optimal_action:

    1. Splittable pair with split available and table says SP → SP
    2. Soft hand  → soft row 'A{non-Ace total}' (capped at A9)
    3. Hard hand  → hard row by total (SU falls back to H, RS to S, when
                    surrender is unavailable)
    4. DH / DS resolve to D when doubling is available, else H / S

A soft 12 (an unsplit pair of Aces) has no soft row and is hit; hard totals
below 5 (an unsplit pair of 2s) use the 5 row.
"""

from __future__ import annotations

from enum import Enum

from blackjack_trainer.engine.cards import RANK_KEYS, card_value, is_ace, rank_key
from blackjack_trainer.engine.hand import calculate_value, is_soft
from blackjack_trainer.engine.hand import can_split as is_pair
from blackjack_trainer.engine.table_rules import GameRules

from .tables import (
    HARD_H17,
    HARD_ROWS,
    HARD_S17,
    NO_DAS_PAIR_CHANGES,
    PAIR_ROWS,
    PAIRS_H17,
    PAIRS_S17,
    SOFT_H17,
    SOFT_ROWS,
    SOFT_S17,
    Table,
)


class StrategyAction(Enum):
    """Canonical strategy codes."""
    HIT = 'H'
    STAND = 'S'
    DOUBLE = 'D'
    DOUBLE_OR_HIT = 'DH'
    DOUBLE_OR_STAND = 'DS'
    SPLIT = 'SP'
    SURRENDER = 'SU'

    @property
    def description_key(self) -> str:
        return _DESCRIPTION_KEYS[self]


_DESCRIPTION_KEYS = {
    StrategyAction.HIT: 'hit',
    StrategyAction.STAND: 'stand',
    StrategyAction.DOUBLE: 'doubleDown',
    StrategyAction.DOUBLE_OR_HIT: 'doubleOrHit',
    StrategyAction.DOUBLE_OR_STAND: 'doubleOrStand',
    StrategyAction.SPLIT: 'split',
    StrategyAction.SURRENDER: 'surrender',
}


def soft_key(cards: tuple[int, ...]) -> str:
    """Return the soft-table row key for a soft hand: A plus the non-Ace total,
    capped at 9. Every Ace counts toward the A, so A,A,5 reads as A5.

    Examples:
        >>> soft_key(hand('AS', '6D'))
        'A6'
        >>> soft_key(hand('AS', 'AD', '5C'))
        'A5'
    """
    rest = sum(card_value(c) for c in cards if not is_ace(c))
    return f"A{min(rest, 9)}"


class BasicStrategy:
    """Basic strategy for one rule set.

    Args:
        rules: Table rules. Only dealer_hits_soft17 and double_after_split
               change the tables; surrender/double/split availability is
               supplied per decision.
    """

    def __init__(self, rules: GameRules) -> None:
        self.rules = rules
        if rules.dealer_hits_soft17:
            self._hard: Table = HARD_H17
            self._soft: Table = SOFT_H17
            self._pairs: Table = dict(PAIRS_H17)
        else:
            self._hard = HARD_S17
            self._soft = SOFT_S17
            self._pairs = dict(PAIRS_S17)

        if not rules.double_after_split:
            self._pairs.update(NO_DAS_PAIR_CHANGES)

    # ─── Lookup ───────────────────────────────────────────────────────────────

    def get_optimal_action(
        self,
        cards: tuple[int, ...],
        dealer_up_card: int,
        can_double: bool,
        can_split: bool,
        can_surrender: bool,
    ) -> StrategyAction:
        """Return the basic strategy action for a hand.

        Args:
            cards:          Player's cards.
            dealer_up_card: Dealer's visible card.
            can_double:     Doubling is currently permitted on this hand.
            can_split:      Splitting is currently permitted on this hand.
            can_surrender:  Surrender is currently permitted on this hand.

        Returns:
            One of HIT, STAND, DOUBLE, SPLIT, SURRENDER. The conditional codes
            DH/DS never escape this method.
        """
        dealer_key = rank_key(dealer_up_card)

        if can_split and is_pair(cards):
            if self._pairs.get((rank_key(cards[0]), dealer_key)) == 'SP':
                return StrategyAction.SPLIT

        if is_soft(cards):
            code = self._soft.get((soft_key(cards), dealer_key))
            if code is None:
                # Soft 12 (A,A not split) is the only soft total without a row.
                return StrategyAction.HIT
            return self._resolve_conditional(code, can_double)

        total = max(calculate_value(cards), HARD_ROWS[0])
        code = self._hard.get((total, dealer_key), 'S')
        if code in ('SU', 'RS'):
            if can_surrender:
                return StrategyAction.SURRENDER
            return StrategyAction.HIT if code == 'SU' else StrategyAction.STAND
        return self._resolve_conditional(code, can_double)

    @staticmethod
    def _resolve_conditional(code: str, can_double: bool) -> StrategyAction:
        if code == 'DH':
            return StrategyAction.DOUBLE if can_double else StrategyAction.HIT
        if code == 'DS':
            return StrategyAction.DOUBLE if can_double else StrategyAction.STAND
        return StrategyAction(code)

    # ─── Chart access ─────────────────────────────────────────────────────────

    def table_code(self, kind: str, row_key: object, dealer_key: str) -> str:
        """Return the raw table code for one cell ('hard', 'soft' or 'pairs')."""
        return self._table(kind)[(row_key, dealer_key)]

    def chart(self, kind: str) -> list[tuple[str, list[str]]]:
        """Return display rows ``(label, codes vs 2..A)`` for one table.

        Raises:
            ValueError: If ``kind`` is not 'hard', 'soft' or 'pairs'.
        """
        table = self._table(kind)
        if kind == 'hard':
            rows: list = HARD_ROWS
            labels = [str(r) for r in rows]
        elif kind == 'soft':
            rows = SOFT_ROWS
            labels = [f"A,{r[1:]}" for r in rows]
        else:
            rows = PAIR_ROWS
            labels = [f"{r},{r}" for r in rows]
        return [
            (label, [table[(row, d)] for d in RANK_KEYS])
            for label, row in zip(labels, rows)
        ]

    def _table(self, kind: str) -> Table:
        if kind == 'hard':
            return self._hard
        if kind == 'soft':
            return self._soft
        if kind == 'pairs':
            return self._pairs
        raise ValueError(f"Unknown strategy table: {kind!r}")