"""
AI player decisions: bet sizing, insurance and play.

AIPlayer is stateless apart from its BasicStrategy and StrategyResolver.
Every Decision carries a Reasoning (message key plus parameters) for the
display layer to render; no prose is produced here.

Bet ladder (unit = min bet), by effective count:

    < 1   1 unit
    < 2   2 units
    < 3   4 units
    < 4   8 units
    else  12 units

clamped to [min_bet, max_bet], then to the balance when the balance is short.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from blackjack_trainer.counting.resolver import StrategyResolver
from blackjack_trainer.engine.cards import RANK_NAMES, card_rank, rank_key
from blackjack_trainer.engine.hand import calculate_value, can_split, is_soft
from blackjack_trainer.engine.rules import round_half_up
from blackjack_trainer.engine.table_rules import GameRules
from blackjack_trainer.strategy.basic import BasicStrategy, StrategyAction, soft_key


class AIAction(Enum):
    HIT = 'hit'
    STAND = 'stand'
    DOUBLE_DOWN = 'doubleDown'
    SPLIT = 'split'
    SURRENDER = 'surrender'
    BET = 'bet'
    TAKE_INSURANCE = 'take_insurance'
    DECLINE_INSURANCE = 'decline_insurance'


class Reasoning(NamedTuple):
    key: str
    params: dict


@dataclass(frozen=True)
class Decision:
    action: AIAction
    reasoning: Reasoning
    bet_amount: int | None = None
    insurance_amount: int | None = None
    deviation_applied: bool = False
    strategy_code: str | None = None


_BET_LADDER: tuple[tuple[float, int], ...] = ((1, 1), (2, 2), (3, 4), (4, 8))
_MAX_UNITS = 12

_DOUBLE_CODES = frozenset({'D', 'DH', 'DS'})


def bet_units(effective_count: float) -> int:
    """Return the bet spread for a count.

    Examples:
        >>> bet_units(0.9), bet_units(2.5), bet_units(7)
        (1, 4, 12)
    """
    for limit, units in _BET_LADDER:
        if effective_count < limit:
            return units
    return _MAX_UNITS


def _count_param(effective_count: float) -> float:
    return round_half_up(effective_count, 1)


class AIPlayer:
    """Decision engine bound to one rule set and one deviation set.

    Args:
        strategy: Basic strategy for the table rules.
        resolver: Index plays for the active counting system; None plays
                  basic strategy only.
    """

    def __init__(self, strategy: BasicStrategy, resolver: StrategyResolver | None = None) -> None:
        self.strategy = strategy
        self.resolver = resolver

    @classmethod
    def for_table(cls, rules: GameRules, system_id: str) -> AIPlayer:
        return cls(BasicStrategy(rules), StrategyResolver.for_system(system_id))

    # ─── Betting ──────────────────────────────────────────────────────────────

    def calculate_bet(self, balance: int, effective_count: float, min_bet: int, max_bet: int) -> Decision:
        """Size the next bet from the count.

        Examples:
            >>> AIPlayer(BasicStrategy(GameRules())).calculate_bet(1000, 2.5, 10, 500).bet_amount
            40
        """
        units = bet_units(effective_count)
        bet = max(min_bet, min(min_bet * units, max_bet))
        if balance < bet:
            bet = max(min_bet, min(balance, max_bet))

        if effective_count >= 2:
            outlook = 'favorable'
        elif effective_count <= 0:
            outlook = 'unfavorable'
        else:
            outlook = 'neutral'

        reasoning = Reasoning('ai.bet.template', {
            'count': _count_param(effective_count),
            'outlook': outlook,
            'units': units,
            'betAmount': bet,
        })
        return Decision(AIAction.BET, reasoning, bet_amount=bet)

    # ─── Insurance ────────────────────────────────────────────────────────────

    def decide_insurance(
        self,
        effective_count: float,
        insurance_index: float,
        max_insurance_amount: int,
        balance: int,
    ) -> Decision:
        """Take insurance once the count reaches the system's index and the
        balance covers the stake; decline otherwise."""
        params = {'count': _count_param(effective_count), 'index': insurance_index}
        if not StrategyResolver.should_take_insurance(effective_count, insurance_index):
            return Decision(AIAction.DECLINE_INSURANCE, Reasoning('ai.insurance.declineInsurance', params))
        if balance < max_insurance_amount:
            return Decision(AIAction.DECLINE_INSURANCE, Reasoning('ai.insurance.insufficientBalance', params))
        return Decision(
            AIAction.TAKE_INSURANCE,
            Reasoning('ai.insurance.takeInsurance', params),
            insurance_amount=max_insurance_amount,
        )

    # ─── Play ─────────────────────────────────────────────────────────────────

    def decide_action(
        self,
        cards: tuple[int, ...],
        dealer_up_card: int,
        can_double: bool,
        can_split: bool,
        can_surrender: bool,
        effective_count: float | None = None,
    ) -> Decision:
        """Choose a play: basic strategy, overridden by a triggered index play
        whose action is currently available.

        A split that turns out to be unavailable is re-derived from basic
        strategy with splitting disabled.
        """
        basic = self.strategy.get_optimal_action(cards, dealer_up_card, can_double, can_split, can_surrender)
        code = basic.value
        deviation = None

        if effective_count is not None and self.resolver is not None:
            found = self._find_deviation(cards, dealer_up_card)
            if (
                found is not None
                and self.resolver.should_deviate(found, effective_count)
                and _available(found.deviation_action, can_double, can_split, can_surrender)
            ):
                deviation = found
                code = found.deviation_action

        action = self._to_action(code, cards, dealer_up_card, can_double, can_split, can_surrender)

        params = {
            'handType': 'soft' if is_soft(cards) else 'hard',
            'handValue': calculate_value(cards),
            'dealerValue': rank_key(dealer_up_card),
            'strategyCode': code,
            'action': action.value,
        }
        if deviation is None:
            reasoning = Reasoning('ai.action.template', params)
        else:
            description = deviation.description
            params.update({
                'count': _count_param(effective_count),
                'deviation': description.key,
                'deviationParams': description.params,
            })
            reasoning = Reasoning('ai.action.deviationTemplate', params)

        return Decision(action, reasoning, deviation_applied=deviation is not None, strategy_code=code)

    def _find_deviation(self, cards: tuple[int, ...], dealer_up_card: int):
        pair = can_split(cards)
        return self.resolver.find_deviation(
            calculate_value(cards),
            dealer_up_card,
            pair,
            RANK_NAMES[card_rank(cards[0])] if pair else None,
            soft_key(cards) if is_soft(cards) else None,
        )

    def _to_action(
        self,
        code: str,
        cards: tuple[int, ...],
        dealer_up_card: int,
        can_double: bool,
        can_split: bool,
        can_surrender: bool,
    ) -> AIAction:
        if code == 'H':
            return AIAction.HIT
        if code == 'S':
            return AIAction.STAND
        if code in _DOUBLE_CODES:
            if can_double:
                return AIAction.DOUBLE_DOWN
            return AIAction.STAND if code == 'DS' else AIAction.HIT
        if code == 'SP':
            if can_split:
                return AIAction.SPLIT
            fallback = self.strategy.get_optimal_action(cards, dealer_up_card, can_double, False, can_surrender)
            return AIAction.HIT if fallback == StrategyAction.HIT else AIAction.STAND
        if code == 'SU':
            return AIAction.SURRENDER
        return AIAction.STAND


def _available(code: str, can_double: bool, can_split: bool, can_surrender: bool) -> bool:
    if code in _DOUBLE_CODES:
        return can_double
    if code == 'SP':
        return can_split
    if code == 'SU':
        return can_surrender
    return True
