"""Tests for blackjack_trainer/engine/cards.py — encoding and rank keys."""

from __future__ import annotations

import pytest

from blackjack_trainer.engine.cards import (
    CARDS_PER_DECK,
    RANK_KEYS,
    card_rank,
    card_suit,
    card_to_str,
    card_value,
    hand_to_str,
    is_ace,
    normalize_rank,
    rank_key,
    ranks_pair,
    str_to_card,
)
from tests.conftest import hand


class TestEncoding:
    def test_two_of_clubs_is_zero(self):
        assert str_to_card('2C') == 0

    def test_ace_of_spades_is_51(self):
        assert str_to_card('AS') == 51

    def test_ten_parses_two_character_rank(self):
        assert str_to_card('10H') == 34

    def test_round_trip_every_card(self):
        for c in range(CARDS_PER_DECK):
            assert str_to_card(card_to_str(c)) == c

    def test_rank_and_suit(self):
        c = str_to_card('QD')
        assert card_rank(c) == 10
        assert card_suit(c) == 1

    @pytest.mark.parametrize('bad', ['1C', 'AX', '', 'KK', '11S'])
    def test_bad_strings_raise(self, bad):
        with pytest.raises(ValueError):
            str_to_card(bad)

    def test_hand_to_str(self):
        assert hand_to_str(hand('AC', '10D')) == 'AC 10D'


class TestValues:
    def test_face_cards_are_ten(self):
        for s in ('10C', 'JD', 'QH', 'KS'):
            assert card_value(str_to_card(s)) == 10

    def test_ace_counts_eleven(self):
        assert card_value(str_to_card('AH')) == 11

    def test_is_ace(self):
        assert is_ace(str_to_card('AD'))
        assert not is_ace(str_to_card('KD'))


class TestRankKeys:
    def test_rank_keys_are_table_columns(self):
        assert RANK_KEYS == ['2', '3', '4', '5', '6', '7', '8', '9', '10', 'A']

    @pytest.mark.parametrize('s', ['10C', 'JD', 'QH', 'KS'])
    def test_ten_value_cards_share_a_key(self, s):
        assert rank_key(str_to_card(s)) == '10'

    def test_ace_key(self):
        assert rank_key(str_to_card('AC')) == 'A'

    def test_normalize_rank(self):
        assert normalize_rank('K') == '10'
        assert normalize_rank('9') == '9'
        assert normalize_rank('A') == 'A'

    def test_mixed_ten_values_pair(self):
        assert ranks_pair(str_to_card('KH'), str_to_card('10D'))

    def test_different_ranks_do_not_pair(self):
        assert not ranks_pair(str_to_card('9H'), str_to_card('8D'))
