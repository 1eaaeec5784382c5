"""
Card counting tag systems.

Each system assigns an integer weight per rank key ('2'..'10', 'A'; J/Q/K
share the '10' weight) and is locked to exactly one deviation set through
``strategy_set_id``.

    system     level  balanced  Ace  insurance  paired set
    hi-lo      1      yes       -1   TC >= 3    illustrious18
    ko         1      no        -1   RC >= 3    ko_preferred
    omega-ii   2      yes        0   TC >= 6    omega_matrix
    zen        2      yes       -1   TC >= 3    zen_indices
    cac2       2      yes       -1   TC >= 3    catch22

Balanced systems sum to zero over a full deck and are converted to a true
count before use; KO sums to +4 per deck and is used as a running count.
"""

from __future__ import annotations

from dataclasses import dataclass

from blackjack_trainer.engine.cards import RANK_KEYS, rank_key


@dataclass(frozen=True)
class CountingSystem:
    """One tag system and its fixed pairing.

    Attributes:
        id:                  Stable identifier ('hi-lo', 'ko', ...).
        name:                Display name.
        values:              Tag per rank key.
        is_balanced:         True if the count is converted to a true count.
        insurance_index:     Effective count at which insurance is taken.
        strategy_set_id:     Id of the one deviation set this system uses.
        betting_correlation: Published betting correlation.
        playing_efficiency:  Published playing efficiency.
    """
    id: str
    name: str
    values: dict[str, int]
    is_balanced: bool
    insurance_index: int
    strategy_set_id: str
    betting_correlation: float
    playing_efficiency: float

    def card_value(self, card: int) -> int:
        """Return the tag of one card.

        Examples:
            >>> HI_LO.card_value(str_to_card('KH'))
            -1
            >>> OMEGA_II.card_value(str_to_card('AS'))
            0
        """
        return self.values[rank_key(card)]

    def count_cards(self, cards: tuple[int, ...]) -> int:
        return sum(self.values[rank_key(c)] for c in cards)

    def full_deck_sum(self) -> int:
        """Sum of tags over one 52-card deck (0 for a balanced system)."""
        return sum(self.values[k] * (16 if k == '10' else 4) for k in RANK_KEYS)


def _tags(*weights: int) -> dict[str, int]:
    return dict(zip(RANK_KEYS, weights))


# ─── Systems ──────────────────────────────────────────────────────────────────
#                       2  3  4  5  6  7  8  9  10  A

HI_LO = CountingSystem(
    id='hi-lo',
    name='Hi-Lo',
    values=_tags(1, 1, 1, 1, 1, 0, 0, 0, -1, -1),
    is_balanced=True,
    insurance_index=3,
    strategy_set_id='illustrious18',
    betting_correlation=0.97,
    playing_efficiency=0.51,
)

KO = CountingSystem(
    id='ko',
    name='KO',
    values=_tags(1, 1, 1, 1, 1, 1, 0, 0, -1, -1),
    is_balanced=False,
    insurance_index=3,
    strategy_set_id='ko_preferred',
    betting_correlation=0.98,
    playing_efficiency=0.55,
)

OMEGA_II = CountingSystem(
    id='omega-ii',
    name='Omega II',
    # Published Omega II tags: the 9 counts -1, the Ace is neutral.
    values=_tags(1, 1, 2, 2, 2, 1, 0, -1, -2, 0),
    is_balanced=True,
    insurance_index=6,
    strategy_set_id='omega_matrix',
    betting_correlation=0.99,
    playing_efficiency=0.67,
)

ZEN_COUNT = CountingSystem(
    id='zen',
    name='Zen Count',
    values=_tags(1, 1, 2, 2, 2, 1, 0, 0, -2, -1),
    is_balanced=True,
    insurance_index=3,
    strategy_set_id='zen_indices',
    betting_correlation=0.96,
    playing_efficiency=0.63,
)

CAC2 = CountingSystem(
    id='cac2',
    name='CAC2',
    values=_tags(1, 2, 2, 2, 1, 1, 0, 0, -2, -1),
    is_balanced=True,
    insurance_index=3,
    strategy_set_id='catch22',
    betting_correlation=0.98,
    playing_efficiency=0.60,
)

ALL_COUNTING_SYSTEMS: tuple[CountingSystem, ...] = (HI_LO, KO, OMEGA_II, ZEN_COUNT, CAC2)

COUNTING_SYSTEMS: dict[str, CountingSystem] = {s.id: s for s in ALL_COUNTING_SYSTEMS}

DEFAULT_SYSTEM_ID = 'hi-lo'


def get_counting_system(system_id: str) -> CountingSystem:
    """Return a counting system by id.

    Raises:
        KeyError: If the id is not one of the five registered systems.
    """
    try:
        return COUNTING_SYSTEMS[system_id]
    except KeyError:
        raise KeyError(f"Unknown counting system: {system_id!r}") from None


def is_valid_system_id(system_id: str) -> bool:
    return system_id in COUNTING_SYSTEMS
