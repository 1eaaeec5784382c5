"""
Basic strategy tables (multi-deck, DAS) for S17 and H17 dealers.

Each row lists the action against dealer up-cards 2, 3, 4, 5, 6, 7, 8, 9, 10, A.

Action codes:
    H   hit                 S   stand
    DH  double, else hit    DS  double, else stand
    SP  split               SU  surrender, else hit
    RS  surrender, else stand

Row keys:
    hard   int total 5–21
    soft   'A2'..'A9' (Ace counted 11 plus the rest of the hand)
    pairs  '2'..'10', 'A' (rank key of each card in the pair)

Tables are written as compact strings and expanded once at import into
``{(row_key, dealer_key): code}`` dicts.
"""

from __future__ import annotations

from blackjack_trainer.engine.cards import RANK_KEYS

Table = dict[tuple[object, str], str]

# ─── S17, DAS ─────────────────────────────────────────────────────────────────

_HARD_S17 = {
    5:  'H  H  H  H  H  H  H  H  H  H',
    6:  'H  H  H  H  H  H  H  H  H  H',
    7:  'H  H  H  H  H  H  H  H  H  H',
    8:  'H  H  H  H  H  H  H  H  H  H',
    9:  'H  DH DH DH DH H  H  H  H  H',
    10: 'DH DH DH DH DH DH DH DH H  H',
    11: 'DH DH DH DH DH DH DH DH DH DH',
    12: 'H  H  S  S  S  H  H  H  H  H',
    13: 'S  S  S  S  S  H  H  H  H  H',
    14: 'S  S  S  S  S  H  H  H  H  H',
    15: 'S  S  S  S  S  H  H  H  SU H',
    16: 'S  S  S  S  S  H  H  SU SU SU',
    17: 'S  S  S  S  S  S  S  S  S  S',
    18: 'S  S  S  S  S  S  S  S  S  S',
    19: 'S  S  S  S  S  S  S  S  S  S',
    20: 'S  S  S  S  S  S  S  S  S  S',
    21: 'S  S  S  S  S  S  S  S  S  S',
}

_SOFT_S17 = {
    'A2': 'H  H  H  DH DH H  H  H  H  H',
    'A3': 'H  H  H  DH DH H  H  H  H  H',
    'A4': 'H  H  DH DH DH H  H  H  H  H',
    'A5': 'H  H  DH DH DH H  H  H  H  H',
    'A6': 'H  DH DH DH DH H  H  H  H  H',
    'A7': 'S  DS DS DS DS S  S  H  H  H',
    'A8': 'S  S  S  S  S  S  S  S  S  S',
    'A9': 'S  S  S  S  S  S  S  S  S  S',
}

_PAIRS_DAS = {
    '2':  'SP SP SP SP SP SP H  H  H  H',
    '3':  'SP SP SP SP SP SP H  H  H  H',
    '4':  'H  H  H  SP SP H  H  H  H  H',
    '5':  'DH DH DH DH DH DH DH DH H  H',
    '6':  'SP SP SP SP SP H  H  H  H  H',
    '7':  'SP SP SP SP SP SP H  H  H  H',
    '8':  'SP SP SP SP SP SP SP SP SP SP',
    '9':  'SP SP SP SP SP S  SP SP S  S',
    '10': 'S  S  S  S  S  S  S  S  S  S',
    'A':  'SP SP SP SP SP SP SP SP SP SP',
}

# ─── H17, DAS (differences from S17) ──────────────────────────────────────────

_HARD_H17_CHANGES = {
    (15, 'A'): 'SU',
    (17, 'A'): 'RS',
}

_SOFT_H17_CHANGES = {
    ('A7', '2'): 'DS',
    ('A8', '6'): 'DS',
}

# 8,8 v A stays a split under H17: the pair table holds split decisions only,
# so the surrender alternative is not encoded.

# Small-pair splits that are only profitable when doubling after a split is allowed.
NO_DAS_PAIR_CHANGES: dict[tuple[object, str], str] = {
    ('2', '2'): 'H',
    ('2', '3'): 'H',
    ('3', '2'): 'H',
    ('3', '3'): 'H',
    ('4', '5'): 'H',
    ('4', '6'): 'H',
    ('6', '7'): 'H',
}


def _expand(rows: dict) -> Table:
    table: Table = {}
    for row_key, row in rows.items():
        codes = row.split()
        if len(codes) != len(RANK_KEYS):
            raise ValueError(f"Strategy row {row_key!r} has {len(codes)} cells, expected 10.")
        for dealer_key, code in zip(RANK_KEYS, codes):
            table[(row_key, dealer_key)] = code
    return table


HARD_S17: Table = _expand(_HARD_S17)
SOFT_S17: Table = _expand(_SOFT_S17)
PAIRS_S17: Table = _expand(_PAIRS_DAS)

HARD_H17: Table = {**HARD_S17, **_HARD_H17_CHANGES}
SOFT_H17: Table = {**SOFT_S17, **_SOFT_H17_CHANGES}
PAIRS_H17: Table = dict(PAIRS_S17)

HARD_ROWS: list[int] = list(_HARD_S17)
SOFT_ROWS: list[str] = list(_SOFT_S17)
PAIR_ROWS: list[str] = list(_PAIRS_DAS)
