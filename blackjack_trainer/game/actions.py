"""
Closed set of reducer actions.

Every state change is one of these frozen dataclasses. Card-bearing actions
carry the shoe counters observed right after the draw so the count delta,
the hand mutation and the shoe counters land in a single reducer step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from blackjack_trainer.engine.table_rules import GameRules


# ─── Configuration ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SetRules:
    """Replace the table rules; ``preset_id`` None means derive it from ``rules``."""
    rules: GameRules
    preset_id: str | None = None


@dataclass(frozen=True)
class ResetGame:
    starting_balance: int | None = None
    timestamp: float | None = None


@dataclass(frozen=True)
class SetCountingSystem:
    system_id: str


# ─── Betting ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlaceBet:
    amount: int


@dataclass(frozen=True)
class ClearBet:
    pass


@dataclass(frozen=True)
class DealInitialCards:
    player_cards: tuple[int, int]
    dealer_cards: tuple[int, int]
    cards_remaining: int
    total_cards: int


@dataclass(frozen=True)
class TakeInsurance:
    pass


@dataclass(frozen=True)
class DeclineInsurance:
    pass


# ─── Player actions ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class HitCard:
    card: int
    cards_remaining: int
    total_cards: int


@dataclass(frozen=True)
class Stand:
    pass


@dataclass(frozen=True)
class DoubleDownCard:
    card: int
    cards_remaining: int
    total_cards: int


@dataclass(frozen=True)
class SplitCards:
    new_cards: tuple[int, int]
    cards_remaining: int
    total_cards: int


@dataclass(frozen=True)
class Surrender:
    pass


# ─── Dealer and settlement ────────────────────────────────────────────────────

@dataclass(frozen=True)
class DealerRevealHoleCard:
    pass


@dataclass(frozen=True)
class DealerHitCard:
    card: int
    cards_remaining: int
    total_cards: int


@dataclass(frozen=True)
class DealerStand:
    pass


@dataclass(frozen=True)
class ResolveHands:
    timestamp: float


@dataclass(frozen=True)
class CompleteRound:
    pass


# ─── Count, shoe and display ──────────────────────────────────────────────────

@dataclass(frozen=True)
class ResetCount:
    pass


@dataclass(frozen=True)
class ShuffleShoe:
    pass


@dataclass(frozen=True)
class UpdateShoeState:
    cards_remaining: int
    total_cards: int


@dataclass(frozen=True)
class ToggleStrategyHint:
    pass


@dataclass(frozen=True)
class ToggleCountDisplay:
    pass


@dataclass(frozen=True)
class ToggleStatsPanel:
    pass


@dataclass(frozen=True)
class SetMessage:
    message: str


ACTION_TYPES: tuple[type, ...] = (
    SetRules,
    ResetGame,
    SetCountingSystem,
    PlaceBet,
    ClearBet,
    DealInitialCards,
    TakeInsurance,
    DeclineInsurance,
    HitCard,
    Stand,
    DoubleDownCard,
    SplitCards,
    Surrender,
    DealerRevealHoleCard,
    DealerHitCard,
    DealerStand,
    ResolveHands,
    CompleteRound,
    ResetCount,
    ShuffleShoe,
    UpdateShoeState,
    ToggleStrategyHint,
    ToggleCountDisplay,
    ToggleStatsPanel,
    SetMessage,
)

GameAction = Union[
    SetRules,
    ResetGame,
    SetCountingSystem,
    PlaceBet,
    ClearBet,
    DealInitialCards,
    TakeInsurance,
    DeclineInsurance,
    HitCard,
    Stand,
    DoubleDownCard,
    SplitCards,
    Surrender,
    DealerRevealHoleCard,
    DealerHitCard,
    DealerStand,
    ResolveHands,
    CompleteRound,
    ResetCount,
    ShuffleShoe,
    UpdateShoeState,
    ToggleStrategyHint,
    ToggleCountDisplay,
    ToggleStatsPanel,
    SetMessage,
]
