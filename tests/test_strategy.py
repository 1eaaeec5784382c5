"""
Tests for blackjack_trainer/strategy/ — basic strategy lookup and house edge.

Covers:
    - Pair / soft / hard lookup order and conditional codes (DH, DS, SU)
    - Rule-conditioned tables (H17 changes, no-DAS pair changes)
    - Chart access for reports
    - Additive house edge model and its breakdown
"""

from __future__ import annotations

import pytest

from blackjack_trainer.engine.cards import str_to_card
from blackjack_trainer.engine.table_rules import (
    ATLANTIC_CITY,
    SINGLE_DECK,
    VEGAS_STRIP,
    DoubleOn,
    GameRules,
)
from blackjack_trainer.strategy.basic import BasicStrategy, StrategyAction, soft_key
from blackjack_trainer.strategy.house_edge import (
    blackjack_payout_adjustment,
    calculate_house_edge,
    edge_breakdown,
    payout_label,
    player_advantage,
)
from tests.conftest import hand

S17 = BasicStrategy(GameRules())
H17 = BasicStrategy(GameRules(dealer_hits_soft17=True))
NO_DAS = BasicStrategy(GameRules(double_after_split=False))


def best(strategy, cards, dealer, can_double=True, can_split=True, can_surrender=True):
    return strategy.get_optimal_action(
        hand(*cards), str_to_card(dealer), can_double, can_split, can_surrender
    )


# ─── Hard totals ──────────────────────────────────────────────────────────────

class TestHardTotals:
    def test_twelve_vs_seven_hits(self):
        assert best(S17, ('10C', '2D'), '7H') == StrategyAction.HIT

    def test_twelve_vs_three_hits(self):
        assert best(S17, ('10C', '2D'), '3H') == StrategyAction.HIT

    def test_twelve_vs_four_stands(self):
        assert best(S17, ('10C', '2D'), '4H') == StrategyAction.STAND

    def test_eleven_vs_ace_doubles(self):
        assert best(S17, ('6C', '5D'), 'AH') == StrategyAction.DOUBLE

    def test_eleven_without_double_hits(self):
        assert best(S17, ('6C', '5D'), 'AH', can_double=False) == StrategyAction.HIT

    def test_sixteen_vs_ten_surrenders(self):
        assert best(S17, ('10C', '6D'), 'KH') == StrategyAction.SURRENDER

    def test_sixteen_vs_ten_without_surrender_hits(self):
        assert best(S17, ('10C', '6D'), 'KH', can_surrender=False) == StrategyAction.HIT

    def test_seventeen_stands_everywhere(self):
        for dealer in ('2C', '7C', 'AC'):
            assert best(S17, ('10C', '7D'), dealer) == StrategyAction.STAND

    def test_multi_card_total(self):
        assert best(S17, ('5C', '4D', '3H'), '6S') == StrategyAction.STAND


# ─── Soft totals ──────────────────────────────────────────────────────────────

class TestSoftTotals:
    def test_soft_key(self):
        assert soft_key(hand('AS', '6D')) == 'A6'

    def test_three_card_soft_key(self):
        assert soft_key(hand('AS', 'AD', '5C')) == 'A5'

    def test_extra_ace_counts_toward_the_a(self):
        # A,A,6 uses the A6 row (hit v 2), not A7
        assert soft_key(hand('AS', 'AD', '6C')) == 'A6'
        assert best(S17, ('AS', 'AD', '6C'), '2H', can_double=False) == StrategyAction.HIT

    def test_soft_key_capped_at_a9(self):
        assert soft_key(hand('AS', '5D', '5C')) == 'A9'

    def test_soft_eighteen_vs_three_doubles(self):
        assert best(S17, ('AS', '7D'), '3H') == StrategyAction.DOUBLE

    def test_soft_eighteen_vs_three_no_double_stands(self):
        assert best(S17, ('AS', '7D'), '3H', can_double=False) == StrategyAction.STAND

    def test_soft_eighteen_vs_nine_hits(self):
        assert best(S17, ('AS', '7D'), '9H') == StrategyAction.HIT

    def test_soft_thirteen_vs_five_double_or_hit(self):
        assert best(S17, ('AS', '2D'), '5H') == StrategyAction.DOUBLE
        assert best(S17, ('AS', '2D'), '5H', can_double=False) == StrategyAction.HIT

    def test_unsplit_aces_hit(self):
        assert best(S17, ('AS', 'AD'), '6H', can_split=False) == StrategyAction.HIT

    def test_soft_hand_never_uses_hard_row(self):
        # soft 16 vs 10 would be SU on the hard table; on the soft table it is H
        assert best(S17, ('AS', '5D'), 'KH') == StrategyAction.HIT


# ─── Pairs ────────────────────────────────────────────────────────────────────

class TestPairs:
    def test_eights_vs_six_split(self):
        assert best(S17, ('8C', '8D'), '6H') == StrategyAction.SPLIT

    def test_eights_without_split_play_hard_sixteen(self):
        assert best(S17, ('8C', '8D'), '6H', can_split=False) == StrategyAction.STAND

    def test_aces_always_split(self):
        assert best(S17, ('AC', 'AD'), 'AH') == StrategyAction.SPLIT

    def test_tens_never_split(self):
        assert best(S17, ('KC', 'QD'), '6H') == StrategyAction.STAND

    def test_fives_play_as_ten(self):
        assert best(S17, ('5C', '5D'), '9H') == StrategyAction.DOUBLE

    def test_unsplit_twos_use_lowest_hard_row(self):
        assert best(S17, ('2C', '2D'), '6H', can_split=False) == StrategyAction.HIT

    def test_nines_vs_seven_stand(self):
        assert best(S17, ('9C', '9D'), '7H') == StrategyAction.STAND


# ─── Rule conditioning ────────────────────────────────────────────────────────

class TestRuleConditioning:
    def test_fifteen_vs_ace_h17_surrenders(self):
        assert best(H17, ('10C', '5D'), 'AH') == StrategyAction.SURRENDER

    def test_fifteen_vs_ace_s17_hits(self):
        assert best(S17, ('10C', '5D'), 'AH') == StrategyAction.HIT

    def test_seventeen_vs_ace_h17_surrenders(self):
        assert best(H17, ('10C', '7D'), 'AH') == StrategyAction.SURRENDER

    def test_seventeen_vs_ace_h17_stands_without_surrender(self):
        assert best(H17, ('10C', '7D'), 'AH', can_surrender=False) == StrategyAction.STAND

    def test_seventeen_vs_ace_s17_stands(self):
        assert best(S17, ('10C', '7D'), 'AH') == StrategyAction.STAND

    def test_soft_nineteen_vs_six_h17_doubles(self):
        assert best(H17, ('AS', '8D'), '6H') == StrategyAction.DOUBLE
        assert best(S17, ('AS', '8D'), '6H') == StrategyAction.STAND

    def test_no_das_drops_small_pair_splits(self):
        assert best(S17, ('2C', '2D'), '3H') == StrategyAction.SPLIT
        assert best(NO_DAS, ('2C', '2D'), '3H') == StrategyAction.HIT

    def test_no_das_keeps_eights(self):
        assert best(NO_DAS, ('8C', '8D'), '10H') == StrategyAction.SPLIT

    def test_conditional_codes_never_escape(self):
        for dealer in ('2C', '5C', '9C', 'AC'):
            for cards in (('6C', '5D'), ('AS', '7D'), ('AS', '2D')):
                action = best(S17, cards, dealer, can_double=False)
                assert action not in (StrategyAction.DOUBLE_OR_HIT, StrategyAction.DOUBLE_OR_STAND)


class TestCharts:
    def test_hard_chart_rows(self):
        rows = S17.chart('hard')
        assert rows[0][0] == '5'
        assert rows[-1][0] == '21'
        assert all(len(codes) == 10 for _, codes in rows)

    def test_soft_chart_labels(self):
        assert [label for label, _ in S17.chart('soft')][0] == 'A,2'

    def test_pair_chart_labels(self):
        assert S17.chart('pairs')[-1][0] == 'A,A'

    def test_table_code(self):
        assert S17.table_code('hard', 16, '10') == 'SU'
        assert S17.table_code('soft', 'A7', '3') == 'DS'

    def test_unknown_chart_raises(self):
        with pytest.raises(ValueError):
            S17.chart('doubles')

    def test_description_key(self):
        assert StrategyAction.DOUBLE_OR_HIT.description_key == 'doubleOrHit'


# ─── House edge ───────────────────────────────────────────────────────────────

class TestHouseEdge:
    def test_vegas_strip(self):
        assert calculate_house_edge(VEGAS_STRIP) == 0.35

    def test_atlantic_city(self):
        # 0.43 + 2 extra decks × 0.05 − 0.08 surrender
        assert calculate_house_edge(ATLANTIC_CITY) == 0.45

    def test_single_deck(self):
        assert calculate_house_edge(SINGLE_DECK) == 2.16

    def test_six_five_costs_house_edge(self):
        assert blackjack_payout_adjustment(1.2) == 1.39
        assert calculate_house_edge(GameRules(blackjack_payout=1.2)) == pytest.approx(1.74)

    def test_double_restrictions(self):
        edge = calculate_house_edge(GameRules(double_on=DoubleOn.NINE_TO_ELEVEN))
        assert edge == pytest.approx(0.44)

    def test_player_advantage_is_negated_edge(self):
        assert player_advantage(VEGAS_STRIP) == -0.35

    def test_breakdown_sums_to_edge(self):
        for rules in (VEGAS_STRIP, SINGLE_DECK, ATLANTIC_CITY):
            total = sum(c.value for c in edge_breakdown(rules))
            assert total == pytest.approx(calculate_house_edge(rules), abs=0.01)

    def test_breakdown_always_has_base(self):
        keys = [c.key for c in edge_breakdown(VEGAS_STRIP)]
        assert keys[0] == 'base'
        assert 's17' in keys and 'das' in keys

    def test_breakdown_max_hands(self):
        components = {c.key: c for c in edge_breakdown(SINGLE_DECK)}
        assert components['maxHands'].params == {'hands': 2}

    def test_payout_labels(self):
        assert payout_label(1.5) == '3:2'
        assert payout_label(1.2) == '6:5'
