"""
Card constants, encoding, and human-readable I/O helpers.

Card encoding (integer 0–51):
    rank_index = card // 4  ->  0=2, 1=3, ..., 7=9, 8=10, 9=J, 10=Q, 11=K, 12=A
    suit_index = card % 4   ->  0=C, 1=D, 2=H, 3=S

A card is an immutable int; a hand is a tuple of ints. A multi-deck shoe
simply holds every encoding deck_count times. String representations are
used at I/O boundaries (tests, reports, snapshots).

Strategy tables and counting systems key cards by *rank key*: '2'..'9',
'10' (for 10/J/Q/K) and 'A'.
"""

from __future__ import annotations

# Point value lookup: index matches rank_index. Ace counts 11 until demoted.
RANK_VALUES: list[int] = [2, 3, 4, 5, 6, 7, 8, 9, 10, 10, 10, 10, 11]

RANK_NAMES: list[str] = ['2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A']
SUIT_NAMES: list[str] = ['C', 'D', 'H', 'S']

RANK_ACE: int = 12
RANK_TEN: int = 8
RANK_JACK: int = 9
RANK_QUEEN: int = 10
RANK_KING: int = 11

TEN_VALUE_RANKS: frozenset[int] = frozenset({RANK_TEN, RANK_JACK, RANK_QUEEN, RANK_KING})

# Dealer up-card buckets in table column order.
RANK_KEYS: list[str] = ['2', '3', '4', '5', '6', '7', '8', '9', '10', 'A']

CARDS_PER_DECK: int = 52


def card_rank(card: int) -> int:
    """Return the rank index (0–12) of a card.

    Examples:
        >>> card_rank(0)   # 2 of Clubs
        0
        >>> card_rank(51)  # Ace of Spades
        12
    """
    return card // 4


def card_suit(card: int) -> int:
    """Return the suit index (0–3) of a card."""
    return card % 4


def card_value(card: int) -> int:
    """Return the point value of a card, counting an Ace as 11.

    Examples:
        >>> card_value(36)   # Jack of Clubs -> 10
        10
        >>> card_value(48)   # Ace of Clubs -> 11
        11
    """
    return RANK_VALUES[card // 4]


def is_ace(card: int) -> bool:
    return card // 4 == RANK_ACE


def rank_key(card: int) -> str:
    """Return the normalized rank key of a card ('10' for any ten-value card).

    Examples:
        >>> rank_key(str_to_card('KH'))
        '10'
        >>> rank_key(str_to_card('AS'))
        'A'
        >>> rank_key(str_to_card('7D'))
        '7'
    """
    return normalize_rank(RANK_NAMES[card // 4])


def normalize_rank(rank: str) -> str:
    """Collapse J/Q/K to '10'; every other rank name is returned unchanged."""
    return '10' if rank in ('J', 'Q', 'K') else rank


def ranks_pair(a: int, b: int) -> bool:
    """Return True if two cards form a splittable pair.

    Ten-value ranks (10/J/Q/K) pair with each other; all other ranks must
    match exactly.

    Examples:
        >>> ranks_pair(str_to_card('KH'), str_to_card('10D'))
        True
        >>> ranks_pair(str_to_card('9H'), str_to_card('8D'))
        False
    """
    return rank_key(a) == rank_key(b)


def card_to_str(card: int) -> str:
    """Convert a card integer to its human-readable string representation.

    Examples:
        >>> card_to_str(0)   # 2 of Clubs
        '2C'
        >>> card_to_str(51)  # Ace of Spades
        'AS'
        >>> card_to_str(32)  # 10 of Clubs
        '10C'
    """
    return RANK_NAMES[card // 4] + SUIT_NAMES[card % 4]


def str_to_card(s: str) -> int:
    """Parse a human-readable card string to its integer encoding.

    The format is <rank><suit> where suit is the last character.
    Rank can be '2'-'9', '10', 'J', 'Q', 'K', or 'A'.

    Raises:
        ValueError: If the rank or suit is not recognised.

    Examples:
        >>> str_to_card('2C')
        0
        >>> str_to_card('AS')
        51
        >>> str_to_card('10C')
        32
    """
    suit_char = s[-1:]
    rank_str = s[:-1]
    if rank_str not in RANK_NAMES or suit_char not in SUIT_NAMES:
        raise ValueError(f"Unrecognised card string: {s!r}")
    return RANK_NAMES.index(rank_str) * 4 + SUIT_NAMES.index(suit_char)


def hand_to_str(cards: tuple[int, ...]) -> str:
    """Convert a hand (tuple of card ints) to a human-readable string.

    Examples:
        >>> hand_to_str((48, 51))
        'AC AS'
    """
    return ' '.join(card_to_str(c) for c in cards)
