"""
Count-triggered deviations from basic strategy (index plays).

A deviation row reads: with ``hand`` against dealer ``dealer``, play
``deviation_action`` instead of ``basic_action`` once the effective count
crosses ``threshold``.

Hand keys:
    '16'     hard (or any non-pair) total
    '10,10'  pair, by rank key
    'A8'     soft hand, Ace plus the rest
    'any'    the insurance row (dealer key is always 'A')

Threshold sign decides the direction: a negative threshold applies at
count <= threshold, zero or positive at count >= threshold.

Each set is keyed to one counting system (see registry.py) and holds at
most one row per (pair key, dealer) and one per (hand key, dealer).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

INSURANCE_HAND = 'any'
TAKE_INSURANCE = 'take_insurance'
DECLINE_INSURANCE = 'decline'

_ACTION_KEYS = {
    'H': 'hit',
    'S': 'stand',
    'D': 'doubleDown',
    'DH': 'doubleDown',
    'DS': 'doubleDown',
    'SP': 'split',
    'SU': 'surrender',
    TAKE_INSURANCE: 'takeInsurance',
}


class Description(NamedTuple):
    """Message key plus template parameters for the display layer."""
    key: str
    params: dict


@dataclass(frozen=True)
class StrategyDeviation:
    """One index play.

    Attributes:
        hand:             Hand key (total, pair, soft or 'any').
        dealer:           Dealer up-card rank key.
        basic_action:     Code basic strategy would play.
        deviation_action: Code to play once triggered.
        threshold:        Effective-count index.
        count_label:      'TC' for true-count sets, 'RC' for running-count sets.
        note:             Optional annotation ('keyCount', 'pivot', ...).
    """
    hand: str
    dealer: str
    basic_action: str
    deviation_action: str
    threshold: int
    count_label: str = 'TC'
    note: str | None = None

    @property
    def is_insurance(self) -> bool:
        return self.hand == INSURANCE_HAND

    @property
    def comparator(self) -> str:
        return '<=' if self.threshold < 0 else '>='

    @property
    def description(self) -> Description:
        """Describe the play, e.g. key 'deviation.stand' with hand '16', dealer '10'."""
        params = {
            'hand': self.hand,
            'dealer': self.dealer,
            'count': self.count_label,
            'comparator': self.comparator,
            'threshold': self.threshold,
        }
        if self.note:
            params['note'] = self.note
        return Description(f"deviation.{_ACTION_KEYS[self.deviation_action]}", params)


@dataclass(frozen=True)
class StrategySet:
    id: str
    name: str
    system_id: str
    uses_true_count: bool
    deviations: tuple[StrategyDeviation, ...]

    @property
    def description_key(self) -> str:
        return f"strategySet.{self.id}"

    @property
    def insurance_deviation(self) -> StrategyDeviation | None:
        for deviation in self.deviations:
            if deviation.is_insurance:
                return deviation
        return None

    @property
    def play_deviations(self) -> tuple[StrategyDeviation, ...]:
        """Every row except the insurance row."""
        return tuple(d for d in self.deviations if not d.is_insurance)


def _rows(count_label: str, *rows: tuple) -> tuple[StrategyDeviation, ...]:
    return tuple(StrategyDeviation(*row[:5], count_label, *row[5:]) for row in rows)


# ─── Illustrious 18 (Hi-Lo) ───────────────────────────────────────────────────

ILLUSTRIOUS_18 = StrategySet(
    id='illustrious18',
    name='Illustrious 18',
    system_id='hi-lo',
    uses_true_count=True,
    deviations=_rows(
        'TC',
        ('any',   'A',  DECLINE_INSURANCE, TAKE_INSURANCE, 3),
        ('16',    '10', 'H', 'SU', 0),
        ('15',    '10', 'H', 'SU', 4),
        ('10,10', '5',  'S', 'SP', 5),
        ('10,10', '6',  'S', 'SP', 4),
        ('10',    '10', 'H', 'DH', 4),
        ('12',    '3',  'H', 'S',  2),
        ('12',    '2',  'H', 'S',  3),
        ('11',    'A',  'H', 'DH', 1),
        ('9',     '2',  'H', 'DH', 1),
        ('10',    'A',  'H', 'DH', 4),
        ('9',     '7',  'H', 'DH', 3),
        ('16',    '9',  'H', 'S',  5),
        ('13',    '2',  'S', 'H',  -1),
        ('12',    '4',  'S', 'H',  0),
        ('12',    '5',  'S', 'H',  -2),
        ('12',    '6',  'S', 'H',  -1),
        ('13',    '3',  'S', 'H',  -2),
    ),
)

# ─── KO Preferred (KO, running count) ─────────────────────────────────────────

KO_PREFERRED = StrategySet(
    id='ko_preferred',
    name='KO Preferred',
    system_id='ko',
    uses_true_count=False,
    deviations=_rows(
        'RC',
        ('any',   'A',  DECLINE_INSURANCE, TAKE_INSURANCE, 3),
        ('16',    '10', 'H', 'S',  -4, 'keyCount'),
        ('12',    '4',  'S', 'H',  -20, 'initialRunningCount'),
        ('12',    '5',  'S', 'H',  -20),
        ('12',    '6',  'S', 'H',  -20),
        ('13',    '2',  'S', 'H',  -20),
        ('13',    '3',  'S', 'H',  -20),
        ('11',    'A',  'H', 'DH', 4, 'pivot'),
        ('10',    '10', 'H', 'DH', 4),
        ('10',    'A',  'H', 'DH', 4),
        ('9',     '2',  'H', 'DH', 4),
        ('9',     '7',  'H', 'DH', 4),
        ('10,10', '5',  'S', 'SP', 4),
        ('10,10', '6',  'S', 'SP', 4),
    ),
)

# ─── Omega II Matrix ──────────────────────────────────────────────────────────

OMEGA_MATRIX = StrategySet(
    id='omega_matrix',
    name='Omega II Matrix',
    system_id='omega-ii',
    uses_true_count=True,
    deviations=_rows(
        'TC',
        ('any',   'A',  DECLINE_INSURANCE, TAKE_INSURANCE, 6),
        ('16',    '10', 'H', 'S',  0),
        ('16',    '9',  'H', 'S',  7),
        ('15',    '10', 'H', 'S',  6),
        ('13',    '2',  'S', 'H',  -1),
        ('13',    '3',  'S', 'H',  -3),
        ('12',    '2',  'H', 'S',  5),
        ('12',    '3',  'H', 'S',  2),
        ('12',    '4',  'S', 'H',  0),
        ('12',    '5',  'S', 'H',  -2),
        ('12',    '6',  'S', 'H',  -5),
        ('10',    '10', 'H', 'DH', 9),
        ('10',    'A',  'H', 'DH', 8),
        ('9',     '2',  'H', 'DH', 4),
        ('9',     '7',  'H', 'DH', 7),
        ('10,10', '5',  'S', 'SP', 9),
        ('10,10', '6',  'S', 'SP', 8),
    ),
)

# ─── Zen Count Indices ────────────────────────────────────────────────────────

ZEN_INDICES = StrategySet(
    id='zen_indices',
    name='Zen Count Indices',
    system_id='zen',
    uses_true_count=True,
    deviations=_rows(
        'TC',
        ('any',   'A',  DECLINE_INSURANCE, TAKE_INSURANCE, 3),
        ('16',    '10', 'H', 'S',  0),
        ('15',    '10', 'H', 'S',  4),
        ('16',    '9',  'H', 'S',  5),
        ('13',    '2',  'S', 'H',  -1),
        ('13',    '3',  'S', 'H',  -2),
        ('12',    '2',  'H', 'S',  3),
        ('12',    '3',  'H', 'S',  2),
        ('12',    '4',  'S', 'H',  0),
        ('12',    '5',  'S', 'H',  -2),
        ('12',    '6',  'S', 'H',  -1),
        ('11',    'A',  'H', 'DH', 1),
        ('10',    '10', 'H', 'DH', 4),
        ('10',    'A',  'H', 'DH', 4),
        ('9',     '2',  'H', 'DH', 1),
        ('9',     '7',  'H', 'DH', 3),
        ('10,10', '5',  'S', 'SP', 5),
        ('10,10', '6',  'S', 'SP', 4),
        ('15',    '9',  'H', 'SU', 2),
        ('15',    'A',  'H', 'SU', 1),
    ),
)

# ─── Catch 22 (CAC2) ──────────────────────────────────────────────────────────

CATCH_22 = StrategySet(
    id='catch22',
    name='Catch 22',
    system_id='cac2',
    uses_true_count=True,
    deviations=_rows(
        'TC',
        ('any',   'A',  DECLINE_INSURANCE, TAKE_INSURANCE, 3),
        ('16',    '10', 'H', 'S',  0),
        ('15',    '10', 'H', 'S',  4),
        ('15',    '9',  'H', 'S',  3),
        ('16',    '9',  'H', 'S',  5),
        ('10',    '10', 'H', 'DH', 5),
        ('10',    'A',  'H', 'DH', 5),
        ('11',    'A',  'H', 'DH', 1),
        ('9',     '2',  'H', 'DH', 2),
        ('9',     '7',  'H', 'DH', 4),
        ('8',     '5',  'H', 'DH', 3),
        ('8',     '6',  'H', 'DH', 3),
        ('A8',    '5',  'S', 'DS', 2),
        ('A8',    '6',  'S', 'DS', 1),
        ('12',    '2',  'H', 'S',  4),
        ('12',    '3',  'H', 'S',  2),
        ('12',    '4',  'S', 'H',  0),
        ('12',    '5',  'S', 'H',  -2),
        ('12',    '6',  'S', 'H',  -2),
        ('13',    '2',  'S', 'H',  -1),
        ('13',    '3',  'S', 'H',  -2),
        ('10,10', '5',  'S', 'SP', 6),
        ('10,10', '6',  'S', 'SP', 5),
    ),
)

ALL_STRATEGY_SETS: tuple[StrategySet, ...] = (
    ILLUSTRIOUS_18,
    KO_PREFERRED,
    OMEGA_MATRIX,
    ZEN_INDICES,
    CATCH_22,
)
