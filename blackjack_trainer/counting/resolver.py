"""
Deviation lookup and count conversion.

StrategyResolver is bound to one StrategySet (the set paired with the active
counting system). Lookup order in find_deviation:

    1. Pair hand   → exact '{rank},{rank}' row vs dealer
    2. Soft hand   → 'A{n}' row vs dealer (when a soft key is supplied)
    3. Otherwise   → hand-total row vs dealer

Soft hands never fall through to total rows: a soft 16 is not a hard 16.
"""

from __future__ import annotations

from blackjack_trainer.engine.cards import CARDS_PER_DECK, normalize_rank, rank_key
from blackjack_trainer.engine.rules import round_half_up

from .deviations import StrategyDeviation, StrategySet
from .registry import get_strategy_set_for_system
from .systems import CountingSystem


class StrategyResolver:
    """Index-play lookup over one deviation set."""

    def __init__(self, strategy_set: StrategySet) -> None:
        self.strategy_set = strategy_set
        self._index: dict[tuple[str, str], StrategyDeviation] = {}
        for deviation in strategy_set.play_deviations:
            # First row wins for a duplicated (hand, dealer) key.
            self._index.setdefault((deviation.hand, deviation.dealer), deviation)

    @classmethod
    def for_system(cls, system_id: str) -> StrategyResolver:
        """Build a resolver over the set locked to ``system_id``.

        Raises:
            PairingError: If the system has no registered set.
        """
        return cls(get_strategy_set_for_system(system_id))

    def find_deviation(
        self,
        hand_value: int,
        dealer_card: int,
        is_pair: bool,
        pair_rank: str | None = None,
        soft_key: str | None = None,
    ) -> StrategyDeviation | None:
        """Return the deviation row for a hand, or None.

        Args:
            hand_value:  Current hand total.
            dealer_card: Dealer's up card.
            is_pair:     True if the hand is a two-card pair.
            pair_rank:   Rank name of the paired cards ('K', '8', 'A', ...).
            soft_key:    'A{n}' row key when the hand is soft; tried before the
                         hand total, which stays the fallback.

        Examples:
            >>> StrategyResolver.for_system('hi-lo').find_deviation(
            ...     20, str_to_card('6D'), True, 'K').hand
            '10,10'
        """
        dealer_key = rank_key(dealer_card)

        if is_pair and pair_rank:
            rank = normalize_rank(pair_rank)
            deviation = self._index.get((f"{rank},{rank}", dealer_key))
            if deviation is not None:
                return deviation

        if soft_key is not None:
            deviation = self._index.get((soft_key, dealer_key))
            if deviation is not None:
                return deviation

        return self._index.get((str(hand_value), dealer_key))

    @staticmethod
    def should_deviate(deviation: StrategyDeviation, effective_count: float) -> bool:
        """Return True if the count has crossed the deviation's index.

        Examples:
            >>> dev = StrategyDeviation('13', '2', 'S', 'H', -1)
            >>> StrategyResolver.should_deviate(dev, -1)
            True
            >>> StrategyResolver.should_deviate(dev, -0.9)
            False
        """
        if deviation.threshold < 0:
            return effective_count <= deviation.threshold
        return effective_count >= deviation.threshold

    @staticmethod
    def should_take_insurance(effective_count: float, insurance_index: float) -> bool:
        return effective_count >= insurance_index

    @property
    def insurance_deviation(self) -> StrategyDeviation | None:
        return self.strategy_set.insurance_deviation

    @property
    def deviations(self) -> tuple[StrategyDeviation, ...]:
        return self.strategy_set.deviations

    def __len__(self) -> int:
        return len(self.strategy_set.deviations)


# ─── Count conversion ─────────────────────────────────────────────────────────

def true_count(running_count: int, cards_remaining: int) -> float:
    """Running count per deck remaining, rounded half-up to 1 decimal.

    Returns 0.0 when no cards remain.

    Examples:
        >>> true_count(6, 156)   # 3 decks left
        2.0
        >>> true_count(5, 0)
        0.0
    """
    if cards_remaining <= 0:
        return 0.0
    return round_half_up(running_count / (cards_remaining / CARDS_PER_DECK), 1)


def effective_count(running_count: int, cards_remaining: int, system: CountingSystem) -> float:
    """True count for a balanced system, the raw running count otherwise."""
    if system.is_balanced:
        return true_count(running_count, cards_remaining)
    return running_count
