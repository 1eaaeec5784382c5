"""Tests for blackjack_trainer/game/predicates.py — action availability and count views."""

from __future__ import annotations

from dataclasses import replace

from blackjack_trainer.engine.table_rules import DoubleOn, GameRules
from blackjack_trainer.game import predicates
from blackjack_trainer.game.actions import DealInitialCards, PlaceBet, SplitCards, Stand
from blackjack_trainer.game.reducer import reduce
from blackjack_trainer.game.state import initial_state
from tests.conftest import hand


def dealt(player, dealer, rules=None, bet=100, balance=1000):
    state = initial_state(rules=rules or GameRules(), starting_balance=balance, session_start=0.0)
    state = reduce(state, PlaceBet(bet))
    return reduce(state, DealInitialCards(hand(*player), hand(*dealer), 300, 312))


def split(state, first, second):
    return reduce(state, SplitCards(hand(first, second), 298, 312))


class TestPlayerPredicates:
    def test_fresh_hand_allows_everything_but_split(self):
        state = dealt(('10C', '6D'), ('7H', 'KS'))
        assert predicates.can_hit(state)
        assert predicates.can_stand(state)
        assert predicates.can_double(state)
        assert predicates.can_surrender(state)
        assert not predicates.can_split(state)

    def test_nothing_allowed_in_betting(self):
        state = initial_state(session_start=0.0)
        assert predicates.hit_block_reason(state) == predicates.NOT_ALLOWED
        assert not predicates.can_stand(state)
        assert not predicates.can_double(state)

    def test_nothing_allowed_after_stand(self):
        state = reduce(dealt(('10C', '6D'), ('7H', 'KS')), Stand())
        assert not predicates.can_hit(state)

    def test_double_reason_insufficient(self):
        state = dealt(('6C', '5D'), ('7H', 'KS'), bet=600)
        assert predicates.double_block_reason(state) == 'insufficientToDouble'

    def test_double_restricted_totals(self):
        rules = GameRules(double_on=DoubleOn.NINE_TO_ELEVEN)
        assert predicates.can_double(dealt(('5C', '4D'), ('7H', 'KS'), rules=rules))
        assert not predicates.can_double(dealt(('5C', '3D'), ('7H', 'KS'), rules=rules))

    def test_double_after_split_needs_das(self):
        das = split(dealt(('8C', '8D'), ('6H', 'KS')), '3H', '2S')
        no_das = split(dealt(('8C', '8D'), ('6H', 'KS'), rules=GameRules(double_after_split=False)), '3H', '2S')
        assert predicates.can_double(das)
        assert not predicates.can_double(no_das)

    def test_split_reason_insufficient(self):
        state = dealt(('8C', '8D'), ('6H', 'KS'), bet=600)
        assert predicates.split_block_reason(state) == 'insufficientToSplit'

    def test_max_splits_zero_blocks_split(self):
        state = dealt(('8C', '8D'), ('6H', 'KS'), rules=GameRules(max_splits=0))
        assert not predicates.can_split(state)

    def test_resplit_aces(self):
        no_resplit = GameRules(can_hit_split_aces=True)
        resplit = GameRules(can_hit_split_aces=True, can_resplit_aces=True)
        assert not predicates.can_split(split(dealt(('AC', 'AD'), ('6H', 'KS'), rules=no_resplit), 'AH', '5S'))
        assert predicates.can_split(split(dealt(('AC', 'AD'), ('6H', 'KS'), rules=resplit), 'AH', '5S'))

    def test_no_surrender_after_split(self):
        state = split(dealt(('8C', '8D'), ('6H', 'KS')), '3H', '2S')
        assert not predicates.can_surrender(state)


class TestInsurancePredicates:
    def test_offered_against_ace(self):
        state = dealt(('10C', '9D'), ('AS', '7H'), bet=25)
        assert predicates.insurance_offered(state)
        assert predicates.insurance_amount(state) == 13
        assert predicates.can_take_insurance(state)

    def test_not_offered_when_disallowed(self):
        state = dealt(('10C', '9D'), ('AS', '7H'), rules=GameRules(insurance_allowed=False))
        assert not predicates.insurance_offered(state)
        assert predicates.insurance_block_reason(state) == 'insuranceUnavailable'

    def test_offered_but_unaffordable(self):
        state = dealt(('10C', '9D'), ('AS', '7H'), bet=1000)
        assert predicates.insurance_offered(state)
        assert predicates.insurance_block_reason(state) == 'insufficientBalance'


class TestRoundProgress:
    def test_all_hands_done(self):
        state = dealt(('10C', '9D'), ('7H', 'KS'))
        assert not predicates.all_hands_done(state)
        assert predicates.all_hands_done(reduce(state, Stand()))

    def test_dealer_full_value_includes_hole_card(self):
        state = dealt(('10C', '9D'), ('7H', 'KS'))
        assert state.dealer_value == 7
        assert predicates.dealer_full_value(state) == 17

    def test_penetration_boundary(self):
        assert predicates.penetration_reached(78, 312, 0.75)
        assert not predicates.penetration_reached(79, 312, 0.75)
        assert not predicates.penetration_reached(0, 0, 0.75)


class TestCountViews:
    def test_true_count_from_state(self):
        state = replace(initial_state(session_start=0.0), running_count=6, cards_remaining=156)
        assert predicates.true_count(state) == 2.0
        assert predicates.effective_count(state) == 2.0

    def test_effective_count_for_unbalanced_system(self):
        state = replace(
            initial_state(counting_system='ko', session_start=0.0),
            running_count=6,
            cards_remaining=156,
        )
        assert predicates.counting_system(state).id == 'ko'
        assert predicates.effective_count(state) == 6
