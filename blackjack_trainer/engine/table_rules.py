"""
Table rule configuration and named presets.

GameRules is the single source for everything rule-dependent: the basic
strategy table set, the house edge, the dealer policy and the action
predicates are all derived from one instance, never from a mix of fields.

Presets:
    vegas_strip    6 decks, S17, 3:2, DAS, late surrender
    single_deck    1 deck, H17, 6:5, no DAS, double on 10-11 only
    atlantic_city  8 decks, S17, 3:2, DAS, late surrender

'custom' rules are any preset with per-field overrides (see custom_rules).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any


class RulesError(ValueError):
    """Raised when a GameRules field is outside its allowed domain."""


class DoubleOn(Enum):
    ANY = 'any'
    NINE_TO_ELEVEN = '9-11'
    TEN_TO_ELEVEN = '10-11'

    def allows(self, total: int) -> bool:
        """Return True if doubling is permitted on this hand total.

        Examples:
            >>> DoubleOn.TEN_TO_ELEVEN.allows(9)
            False
            >>> DoubleOn.NINE_TO_ELEVEN.allows(9)
            True
        """
        if self is DoubleOn.NINE_TO_ELEVEN:
            return 9 <= total <= 11
        if self is DoubleOn.TEN_TO_ELEVEN:
            return 10 <= total <= 11
        return True


BLACKJACK_PAYOUTS: tuple[float, ...] = (1.5, 1.2)


@dataclass(frozen=True)
class GameRules:
    """Immutable table rule set.

    Attributes:
        deck_count:         Decks in the shoe (1–8).
        penetration:        Fraction dealt before reshuffle (0.5–0.9).
        dealer_hits_soft17: H17 if True, S17 if False.
        blackjack_payout:   Blackjack win multiplier: 1.5 (3:2) or 1.2 (6:5).
        double_after_split: DAS allowed.
        late_surrender:     Late surrender offered on the first two cards.
        max_splits:         Maximum number of splits per round (0–3).
        can_resplit_aces:   Split Aces may be split again.
        can_hit_split_aces: Split Aces may take more than one card.
        insurance_allowed:  Insurance is offered against a dealer Ace.
        double_on:          Hand totals on which doubling is permitted.
    """
    deck_count: int = 6
    penetration: float = 0.75
    dealer_hits_soft17: bool = False
    blackjack_payout: float = 1.5
    double_after_split: bool = True
    late_surrender: bool = True
    max_splits: int = 3
    can_resplit_aces: bool = False
    can_hit_split_aces: bool = False
    insurance_allowed: bool = True
    double_on: DoubleOn = DoubleOn.ANY

    def __post_init__(self) -> None:
        for name in ('deck_count', 'max_splits'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise RulesError(f"{name} must be an int, got {value!r}")
        if not 1 <= self.deck_count <= 8:
            raise RulesError(f"deck_count must be in 1..8, got {self.deck_count}")
        if not 0.5 <= self.penetration <= 0.9:
            raise RulesError(f"penetration must be in [0.5, 0.9], got {self.penetration}")
        if self.blackjack_payout not in BLACKJACK_PAYOUTS:
            raise RulesError(
                f"blackjack_payout must be one of {BLACKJACK_PAYOUTS}, got {self.blackjack_payout}"
            )
        if not 0 <= self.max_splits <= 3:
            raise RulesError(f"max_splits must be in 0..3, got {self.max_splits}")
        if not isinstance(self.double_on, DoubleOn):
            raise RulesError(f"double_on must be a DoubleOn, got {self.double_on!r}")

    @property
    def total_cards(self) -> int:
        return self.deck_count * 52

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping; double_on is stored by its value ('any', ...)."""
        data = dataclasses.asdict(self)
        data['double_on'] = self.double_on.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], base: GameRules | None = None) -> GameRules:
        """Build rules from a (possibly partial) mapping.

        Unknown keys are ignored; missing keys fall back to ``base``.

        Raises:
            RulesError: If a present field has an invalid value.
        """
        base = base or cls()
        known = {f.name for f in dataclasses.fields(cls)}
        overrides = {k: v for k, v in data.items() if k in known}
        if 'double_on' in overrides:
            try:
                overrides['double_on'] = DoubleOn(overrides['double_on'])
            except ValueError:
                raise RulesError(f"Unknown double_on value: {overrides['double_on']!r}") from None
        return dataclasses.replace(base, **overrides)


# ─── Presets ──────────────────────────────────────────────────────────────────

VEGAS_STRIP = GameRules()

SINGLE_DECK = GameRules(
    deck_count=1,
    penetration=0.60,
    dealer_hits_soft17=True,
    blackjack_payout=1.2,
    double_after_split=False,
    late_surrender=False,
    max_splits=1,
    double_on=DoubleOn.TEN_TO_ELEVEN,
)

ATLANTIC_CITY = GameRules(deck_count=8, penetration=0.70)

PRESETS: dict[str, GameRules] = {
    'vegas_strip': VEGAS_STRIP,
    'single_deck': SINGLE_DECK,
    'atlantic_city': ATLANTIC_CITY,
}

PRESET_NAMES: dict[str, str] = {
    'vegas_strip': 'Vegas Strip',
    'single_deck': 'Single Deck',
    'atlantic_city': 'Atlantic City',
    'custom': 'Custom',
}

DEFAULT_PRESET_ID = 'vegas_strip'
DEFAULT_RULES = VEGAS_STRIP


def get_preset(preset_id: str) -> GameRules:
    """Return the rules bundle for a named preset.

    Raises:
        RulesError: If the preset id is unknown.
    """
    try:
        return PRESETS[preset_id]
    except KeyError:
        raise RulesError(f"Unknown preset: {preset_id!r}") from None


def custom_rules(base: str | GameRules = DEFAULT_PRESET_ID, **overrides: Any) -> GameRules:
    """Return a preset with per-field overrides applied.

    Examples:
        >>> custom_rules('vegas_strip', deck_count=2).deck_count
        2
    """
    rules = get_preset(base) if isinstance(base, str) else base
    return dataclasses.replace(rules, **overrides)


def preset_id_for(rules: GameRules) -> str:
    """Return the preset id whose bundle equals ``rules``, else 'custom'."""
    for preset_id, preset in PRESETS.items():
        if preset == rules:
            return preset_id
    return 'custom'
