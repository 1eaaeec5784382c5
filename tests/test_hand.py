"""Tests for blackjack_trainer/engine/hand.py — values, softness and classification."""

from __future__ import annotations

import pytest

from blackjack_trainer.engine.hand import (
    HandResult,
    HandStatus,
    PlayerHand,
    calculate_value,
    can_split,
    compare_hands,
    hand_description,
    is_blackjack,
    is_bust,
    is_soft,
)
from tests.conftest import hand


# ─── calculate_value tests ────────────────────────────────────────────────────

class TestCalculateValue:
    def test_simple_total(self):
        assert calculate_value(hand('10C', '9H')) == 19

    def test_ace_eleven_when_safe(self):
        assert calculate_value(hand('AS', '7H')) == 18

    def test_three_aces_and_eight_is_21(self):
        # Exactly two Aces are demoted; the third stays 11.
        assert calculate_value(hand('AC', 'AD', 'AH', '8S')) == 21

    def test_ace_ten_five_is_16(self):
        assert calculate_value(hand('AC', '10D', '5H')) == 16

    def test_two_aces_is_12(self):
        assert calculate_value(hand('AC', 'AD')) == 12

    def test_all_aces_demoted_still_bust(self):
        assert calculate_value(hand('AC', 'KD', 'QH', '5S')) == 26

    def test_hard_bust_total_returned(self):
        assert calculate_value(hand('KC', 'QD', '5H')) == 25

    def test_empty_hand(self):
        assert calculate_value(()) == 0

    def test_never_demotes_more_than_needed(self):
        # A,A,9: one Ace demoted → 21, not 11
        assert calculate_value(hand('AC', 'AD', '9H')) == 21


class TestIsSoft:
    def test_ace_six_is_soft(self):
        assert is_soft(hand('AC', '6D'))

    def test_ace_six_ten_is_hard(self):
        assert not is_soft(hand('AC', '6D', '10H'))

    def test_two_aces_nine_is_soft(self):
        assert is_soft(hand('AC', 'AD', '9H'))

    def test_no_ace_is_hard(self):
        assert not is_soft(hand('10C', '6D'))

    def test_bust_is_not_soft(self):
        assert not is_soft(hand('AC', 'KD', 'QH', '5S'))


class TestClassification:
    def test_ace_king_is_blackjack(self):
        assert is_blackjack(hand('AS', 'KH'))

    def test_three_sevens_is_not_blackjack(self):
        assert calculate_value(hand('7C', '7D', '7H')) == 21
        assert not is_blackjack(hand('7C', '7D', '7H'))

    def test_is_bust(self):
        assert is_bust(hand('10C', '6D', '8H'))
        assert not is_bust(hand('10C', '6D', '5H'))

    def test_pair_of_eights_splits(self):
        assert can_split(hand('8C', '8D'))

    def test_king_queen_splits(self):
        assert can_split(hand('KC', 'QD'))

    def test_three_cards_do_not_split(self):
        assert not can_split(hand('8C', '8D', '8H'))


class TestCompareHands:
    @pytest.mark.parametrize('player, dealer, expected', [
        (18, 22, HandResult.WIN),
        (22, 18, HandResult.LOSE),
        (19, 19, HandResult.PUSH),
        (20, 19, HandResult.WIN),
        (17, 19, HandResult.LOSE),
    ])
    def test_compare(self, player, dealer, expected):
        assert compare_hands(player, dealer) == expected


class TestHandDescription:
    def test_blackjack(self):
        assert hand_description(hand('AS', 'KH')) == ('blackjack', None)

    def test_bust(self):
        assert hand_description(hand('KC', 'QD', '5H')) == ('bustValue', 25)

    def test_soft(self):
        assert hand_description(hand('AC', '6D')) == ('soft', 17)

    def test_hard(self):
        assert hand_description(hand('10C', '6D')) == ('value', 16)


class TestPlayerHand:
    def test_defaults(self):
        ph = PlayerHand(hand('10C', '6D'), 25)
        assert ph.status == HandStatus.ACTIVE
        assert ph.is_active
        assert ph.value == 16
        assert ph.hand_id == 'hand-0'
        assert ph.result is None

    def test_stood_hand_not_active(self):
        assert not PlayerHand(hand('10C', '6D'), 25, HandStatus.STAND).is_active
