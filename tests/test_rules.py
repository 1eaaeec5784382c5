"""
Tests for settlement and table rules.

Covers:
    - engine/rules.py: calculate_payout priority order, insurance payout and
      cost, rounding direction (payouts floor, costs ceil)
    - engine/table_rules.py: validation, presets, custom overrides, dict I/O
    - engine/dealer.py: S17 / H17 drawing policy
"""

from __future__ import annotations

import pytest

from blackjack_trainer.engine.dealer import dealer_should_hit, rule_label
from blackjack_trainer.engine.hand import HandResult, HandStatus, PlayerHand
from blackjack_trainer.engine.rules import (
    PayoutResult,
    calculate_insurance_payout,
    calculate_payout,
    insurance_cost,
    round_half_up,
)
from blackjack_trainer.engine.table_rules import (
    ATLANTIC_CITY,
    DEFAULT_RULES,
    PRESETS,
    SINGLE_DECK,
    VEGAS_STRIP,
    DoubleOn,
    GameRules,
    RulesError,
    custom_rules,
    get_preset,
    preset_id_for,
)
from tests.conftest import hand

RULES = GameRules()
SIX_FIVE = GameRules(blackjack_payout=1.2)


def settle(cards, bet=100, status=HandStatus.STAND, dealer=19, dealer_bj=False, rules=RULES):
    return calculate_payout(PlayerHand(hand(*cards), bet, status), dealer, dealer_bj, rules)


# ─── calculate_payout ─────────────────────────────────────────────────────────

class TestCalculatePayout:
    def test_blackjack_pays_three_to_two(self):
        result = settle(('AS', 'KH'), status=HandStatus.BLACKJACK)
        assert result == PayoutResult(HandResult.BLACKJACK, 250)

    def test_blackjack_six_to_five(self):
        result = settle(('AS', 'KH'), status=HandStatus.BLACKJACK, rules=SIX_FIVE)
        assert result == PayoutResult(HandResult.BLACKJACK, 220)

    def test_blackjack_against_dealer_blackjack_pushes(self):
        result = settle(('AS', 'KH'), status=HandStatus.BLACKJACK, dealer=21, dealer_bj=True)
        assert result == PayoutResult(HandResult.PUSH, 100)

    def test_surrender_returns_half(self):
        assert settle(('10C', '6D'), status=HandStatus.SURRENDER) == PayoutResult(HandResult.SURRENDER, 50)

    def test_surrender_beats_dealer_blackjack_check(self):
        result = settle(('10C', '6D'), status=HandStatus.SURRENDER, dealer=21, dealer_bj=True)
        assert result.result == HandResult.SURRENDER

    def test_bust_loses_even_if_dealer_busts(self):
        result = settle(('10C', '6D', '9H'), status=HandStatus.BUST, dealer=24)
        assert result == PayoutResult(HandResult.BUST, 0)

    def test_dealer_blackjack_beats_21(self):
        result = settle(('7C', '7D', '7H'), dealer=21, dealer_bj=True)
        assert result == PayoutResult(HandResult.LOSE, 0)

    def test_dealer_bust_pays_even_money(self):
        assert settle(('10C', '2D'), dealer=23) == PayoutResult(HandResult.WIN, 200)

    def test_higher_total_wins(self):
        assert settle(('10C', 'QD'), dealer=19) == PayoutResult(HandResult.WIN, 200)

    def test_equal_totals_push(self):
        assert settle(('10C', '9D'), dealer=19) == PayoutResult(HandResult.PUSH, 100)

    def test_lower_total_loses(self):
        assert settle(('10C', '8D'), dealer=19) == PayoutResult(HandResult.LOSE, 0)

    def test_doubled_bet_paid_on_full_stake(self):
        assert settle(('5C', '6D', '10H'), bet=200, dealer=20) == PayoutResult(HandResult.WIN, 400)


class TestRoundingDirection:
    def test_odd_surrender_floors(self):
        # 27 / 2 = 13.5 → 13
        assert settle(('10C', '6D'), bet=27, status=HandStatus.SURRENDER).payout == 13

    def test_odd_blackjack_floors(self):
        # 27 × 2.5 = 67.5 → 67
        assert settle(('AS', 'KH'), bet=27, status=HandStatus.BLACKJACK).payout == 67

    def test_odd_insurance_cost_ceils(self):
        # 25 / 2 = 12.5 → 13
        assert insurance_cost(25) == 13

    def test_even_insurance_cost(self):
        assert insurance_cost(100) == 50

    @pytest.mark.parametrize('bet', [1, 3, 25, 27, 99])
    def test_cost_always_exceeds_half_payout_for_odd_bets(self, bet):
        surrender = settle(('10C', '6D'), bet=bet, status=HandStatus.SURRENDER).payout
        assert surrender < insurance_cost(bet)


class TestInsurancePayout:
    def test_pays_two_to_one_plus_stake(self):
        assert calculate_insurance_payout(13, True) == 39

    def test_nothing_without_dealer_blackjack(self):
        assert calculate_insurance_payout(50, False) == 0

    @pytest.mark.parametrize('sentinel', [0, -1])
    def test_sentinels_pay_nothing(self, sentinel):
        assert calculate_insurance_payout(sentinel, True) == 0


class TestRoundHalfUp:
    def test_half_rounds_up(self):
        assert round_half_up(2.25, 1) == 2.3
        assert round_half_up(0.5) == 1

    def test_negative_half_rounds_toward_positive(self):
        assert round_half_up(-2.25, 1) == -2.2


# ─── GameRules ────────────────────────────────────────────────────────────────

class TestGameRules:
    def test_defaults_are_vegas_strip(self):
        assert DEFAULT_RULES == VEGAS_STRIP == GameRules()
        assert RULES.deck_count == 6
        assert RULES.total_cards == 312

    @pytest.mark.parametrize('overrides', [
        {'deck_count': 0},
        {'deck_count': 9},
        {'penetration': 0.4},
        {'penetration': 0.95},
        {'blackjack_payout': 2.0},
        {'max_splits': 4},
        {'double_on': '9-11'},
    ])
    def test_out_of_domain_values_raise(self, overrides):
        with pytest.raises(RulesError):
            GameRules(**overrides)

    def test_rules_error_is_value_error(self):
        assert issubclass(RulesError, ValueError)

    def test_double_on_allows(self):
        assert DoubleOn.ANY.allows(5)
        assert DoubleOn.NINE_TO_ELEVEN.allows(9)
        assert not DoubleOn.TEN_TO_ELEVEN.allows(9)
        assert DoubleOn.TEN_TO_ELEVEN.allows(11)

    def test_to_dict_stores_double_on_value(self):
        data = SINGLE_DECK.to_dict()
        assert data['double_on'] == '10-11'
        assert data['deck_count'] == 1

    def test_from_dict_round_trips(self):
        assert GameRules.from_dict(SINGLE_DECK.to_dict()) == SINGLE_DECK

    def test_from_dict_partial_uses_base(self):
        rules = GameRules.from_dict({'deck_count': 2, 'unknown': True}, base=ATLANTIC_CITY)
        assert rules.deck_count == 2
        assert rules.penetration == ATLANTIC_CITY.penetration

    def test_from_dict_bad_double_on(self):
        with pytest.raises(RulesError):
            GameRules.from_dict({'double_on': '8-11'})


class TestPresets:
    def test_three_presets(self):
        assert set(PRESETS) == {'vegas_strip', 'single_deck', 'atlantic_city'}

    def test_get_preset(self):
        assert get_preset('atlantic_city').deck_count == 8

    def test_unknown_preset_raises(self):
        with pytest.raises(RulesError):
            get_preset('monte_carlo')

    def test_custom_override(self):
        rules = custom_rules('vegas_strip', deck_count=2)
        assert rules.deck_count == 2
        assert rules.late_surrender == VEGAS_STRIP.late_surrender

    def test_custom_override_is_validated(self):
        with pytest.raises(RulesError):
            custom_rules('vegas_strip', max_splits=7)

    def test_preset_id_for(self):
        assert preset_id_for(SINGLE_DECK) == 'single_deck'
        assert preset_id_for(custom_rules(deck_count=2)) == 'custom'


# ─── Dealer ───────────────────────────────────────────────────────────────────

class TestDealerShouldHit:
    def test_hits_16(self):
        assert dealer_should_hit(hand('10C', '6D'), RULES)

    def test_stands_hard_17(self):
        assert not dealer_should_hit(hand('10C', '7D'), GameRules(dealer_hits_soft17=True))

    def test_soft_17_s17_stands(self):
        assert not dealer_should_hit(hand('AC', '6D'), RULES)

    def test_soft_17_h17_hits(self):
        assert dealer_should_hit(hand('AC', '6D'), GameRules(dealer_hits_soft17=True))

    def test_stands_soft_18(self):
        assert not dealer_should_hit(hand('AC', '7D'), GameRules(dealer_hits_soft17=True))

    def test_rule_label(self):
        assert rule_label(RULES) == 'S17'
        assert rule_label(SINGLE_DECK) == 'H17'
