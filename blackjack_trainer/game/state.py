"""
Game state records.

GameState is the root aggregate: one immutable snapshot per reducer step.
Every collection is a tuple and every record a frozen dataclass, so a state
can be shared freely between the reducer, the table driver and the AI loop
without defensive copies.

Sentinels:
    insurance_bet   -1 declined, 0 not offered / no bet, > 0 staked
    dealer_value    up card only while the hole card is hidden
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum

from blackjack_trainer.counting.systems import DEFAULT_SYSTEM_ID
from blackjack_trainer.engine.hand import HandResult, PlayerHand
from blackjack_trainer.engine.table_rules import DEFAULT_PRESET_ID, DEFAULT_RULES, GameRules

DEFAULT_STARTING_BALANCE = 25_000

BALANCE_HISTORY_LIMIT = 1000
HAND_HISTORY_LIMIT = 100


class Phase(Enum):
    BETTING = 'betting'
    PLAYER_TURN = 'player_turn'
    DEALER_TURN = 'dealer_turn'
    RESOLUTION = 'resolution'
    GAME_OVER = 'game_over'


@dataclass(frozen=True)
class SessionStats:
    """Cumulative session statistics.

    ``total_wagered`` includes double, split and insurance stakes;
    ``total_won`` is everything returned to the balance (stakes included).
    """
    session_start: float
    starting_balance: int
    current_balance: int
    hands_played: int = 0
    hands_won: int = 0
    hands_lost: int = 0
    hands_pushed: int = 0
    blackjacks: int = 0
    busts: int = 0
    surrenders: int = 0
    total_wagered: int = 0
    total_won: int = 0
    net_profit: int = 0
    splits_made: int = 0
    double_downs: int = 0
    insurance_taken: int = 0
    hard_hands: int = 0
    soft_hands: int = 0
    pairs: int = 0


@dataclass(frozen=True)
class BalanceSnapshot:
    balance: int
    timestamp: float
    hand_number: int


@dataclass(frozen=True)
class CompletedHand:
    """One settled player hand, kept in the bounded hand history."""
    hand_number: int
    hand_id: str
    cards: tuple[int, ...]
    dealer_cards: tuple[int, ...]
    bet: int
    result: HandResult
    payout: int
    timestamp: float


@dataclass(frozen=True)
class GameState:
    phase: Phase
    rules: GameRules
    selected_preset_id: str
    cards_remaining: int
    total_cards: int
    penetration_reached: bool
    balance: int
    current_bet: int
    last_bet: int
    hands: tuple[PlayerHand, ...]
    active_hand_index: int
    insurance_bet: int
    dealer_hand: tuple[int, ...]
    dealer_value: int
    dealer_hole_card_hidden: bool
    dealer_standing: bool
    running_count: int
    counting_system: str
    statistics: SessionStats
    balance_history: tuple[BalanceSnapshot, ...] = ()
    hand_history: tuple[CompletedHand, ...] = ()
    show_strategy_hint: bool = True
    show_count_display: bool = True
    show_stats_panel: bool = False
    message: str = 'placeBet'

    @property
    def active_hand(self) -> PlayerHand | None:
        if 0 <= self.active_hand_index < len(self.hands):
            return self.hands[self.active_hand_index]
        return None

    @property
    def dealer_up_card(self) -> int | None:
        return self.dealer_hand[0] if self.dealer_hand else None


def initial_statistics(starting_balance: int, session_start: float | None = None) -> SessionStats:
    return SessionStats(
        session_start=time.time() if session_start is None else session_start,
        starting_balance=starting_balance,
        current_balance=starting_balance,
    )


def initial_state(
    rules: GameRules = DEFAULT_RULES,
    starting_balance: int = DEFAULT_STARTING_BALANCE,
    counting_system: str = DEFAULT_SYSTEM_ID,
    preset_id: str = DEFAULT_PRESET_ID,
    session_start: float | None = None,
) -> GameState:
    """Return a fresh session in the betting phase with a full shoe.

    Examples:
        >>> s = initial_state()
        >>> s.phase, s.cards_remaining, s.message
        (<Phase.BETTING: 'betting'>, 312, 'placeBet')
    """
    return GameState(
        phase=Phase.BETTING,
        rules=rules,
        selected_preset_id=preset_id,
        cards_remaining=rules.total_cards,
        total_cards=rules.total_cards,
        penetration_reached=False,
        balance=starting_balance,
        current_bet=0,
        last_bet=0,
        hands=(),
        active_hand_index=0,
        insurance_bet=0,
        dealer_hand=(),
        dealer_value=0,
        dealer_hole_card_hidden=False,
        dealer_standing=False,
        running_count=0,
        counting_system=counting_system,
        statistics=initial_statistics(starting_balance, session_start),
    )
