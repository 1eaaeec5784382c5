"""
AI control loop as a pure state machine.

    AIController.tick(ai_state, game_state, now_ms) -> (AIState, [Effect])

The controller never touches the table. It reads a GameState snapshot and
returns the next AIState plus the effects a driver (see runner.py) applies.
Each tick runs, in order:

    1. rules changed while playing   → pause, notice 'aiPausedRuleChange'
    2. game phase changed            → re-sync AI phase (PHASE_MAP), reset counters
    3. time in phase > stuck timeout → resync by game phase (stop if unmapped)
    4. iterations > cap              → corrective dealer play / resync (stop if unmapped)
    5. balance below playable floor  → stop (only between rounds)
    6. phase handler                 → at most one table effect, iteration + 1

AI phases:
    idle → waiting_bet → placing_bet → dealing_cards → waiting_deal_complete
         → [insurance_decision] → deciding_action → waiting_dealer
         → waiting_resolution → starting_next_round → waiting_bet ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Union

from blackjack_trainer.engine.table_rules import GameRules
from blackjack_trainer.game import predicates
from blackjack_trainer.game.state import GameState, Phase
from blackjack_trainer.settings import Settings

from .player import AIAction, AIPlayer, Decision

logger = logging.getLogger(__name__)


class AIPhase(Enum):
    IDLE = 'idle'
    WAITING_BET = 'waiting_bet'
    PLACING_BET = 'placing_bet'
    DEALING_CARDS = 'dealing_cards'
    WAITING_DEAL_COMPLETE = 'waiting_deal_complete'
    INSURANCE_DECISION = 'insurance_decision'
    DECIDING_ACTION = 'deciding_action'
    WAITING_DEALER = 'waiting_dealer'
    WAITING_RESOLUTION = 'waiting_resolution'
    STARTING_NEXT_ROUND = 'starting_next_round'


PHASE_MAP: dict[Phase, AIPhase] = {
    Phase.BETTING: AIPhase.WAITING_BET,
    Phase.PLAYER_TURN: AIPhase.DECIDING_ACTION,
    Phase.DEALER_TURN: AIPhase.WAITING_DEALER,
    Phase.RESOLUTION: AIPhase.WAITING_RESOLUTION,
}


@dataclass(frozen=True)
class ControllerConfig:
    min_bet: int = 10
    max_bet: int = 500
    min_balance: int = 10
    stuck_timeout_ms: float = 10_000
    # At slow speeds the timeout stretches to this many tick intervals.
    stuck_timeout_ticks: int = 20
    max_iterations: int = 50
    min_speed_ms: int = 50
    max_speed_ms: int = 5000
    resolution_wait_ms: float = 1000

    @classmethod
    def from_settings(cls, settings: Settings) -> ControllerConfig:
        """Bet bounds from process settings; the playable floor is the min bet."""
        return cls(min_bet=settings.min_bet, max_bet=settings.max_bet, min_balance=settings.min_bet)


@dataclass(frozen=True)
class AIStatistics:
    rounds_played: int = 0
    decisions_made: int = 0
    total_bet: int = 0
    bets_placed: int = 0

    @property
    def average_bet(self) -> float:
        return self.total_bet / self.bets_placed if self.bets_placed else 0.0


@dataclass(frozen=True)
class AIState:
    is_enabled: bool = False
    is_playing: bool = False
    speed: int = 500
    current_decision: Decision | None = None
    statistics: AIStatistics = field(default_factory=AIStatistics)
    ai_phase: AIPhase = AIPhase.IDLE
    phase_enter_time: float = 0.0
    iteration_count: int = 0
    last_game_phase: Phase | None = None
    stuck_detected: bool = False
    error_message: str | None = None
    rules: GameRules | None = None


# ─── Effects ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlaceBetEffect:
    amount: int


@dataclass(frozen=True)
class DealEffect:
    pass


@dataclass(frozen=True)
class TakeInsuranceEffect:
    pass


@dataclass(frozen=True)
class DeclineInsuranceEffect:
    pass


@dataclass(frozen=True)
class PlayActionEffect:
    action: AIAction


@dataclass(frozen=True)
class PlayDealerEffect:
    """Advance the dealer one step, or play the hand out when ``to_completion``."""
    to_completion: bool = False


@dataclass(frozen=True)
class NewRoundEffect:
    pass


@dataclass(frozen=True)
class MessageEffect:
    code: str
    params: dict = field(default_factory=dict)


Effect = Union[
    PlaceBetEffect,
    DealEffect,
    TakeInsuranceEffect,
    DeclineInsuranceEffect,
    PlayActionEffect,
    PlayDealerEffect,
    NewRoundEffect,
    MessageEffect,
]

Step = tuple[AIState, list]


class AIController:
    """Pure transition function for the AI loop.

    Args:
        config: Loop constants (bet bounds, timeouts, caps).
    """

    def __init__(self, config: ControllerConfig | None = None) -> None:
        self.config = config or ControllerConfig()
        self._players: dict[tuple[GameRules, str], AIPlayer] = {}

    def player_for(self, game: GameState) -> AIPlayer:
        key = (game.rules, game.counting_system)
        player = self._players.get(key)
        if player is None:
            player = self._players[key] = AIPlayer.for_table(game.rules, game.counting_system)
        return player

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    def start(self, ai: AIState, game: GameState, now: float) -> Step:
        if game.balance < self.config.min_balance:
            ai = replace(ai, error_message='insufficientBalance')
            return ai, [MessageEffect('aiInsufficientBalance', {'minimum': self.config.min_balance})]
        ai = replace(
            ai,
            is_enabled=True,
            is_playing=True,
            ai_phase=PHASE_MAP.get(game.phase, AIPhase.WAITING_BET),
            phase_enter_time=now,
            iteration_count=0,
            last_game_phase=game.phase,
            stuck_detected=False,
            error_message=None,
            rules=game.rules,
        )
        logger.info("AI started in %s", ai.ai_phase.value)
        return ai, [MessageEffect('aiStarted')]

    def pause(self, ai: AIState) -> AIState:
        return replace(ai, is_playing=False)

    def resume(self, ai: AIState, game: GameState, now: float) -> AIState:
        """Resume after a pause, accepting the current rules."""
        if not ai.is_enabled:
            return ai
        return replace(ai, is_playing=True, phase_enter_time=now, iteration_count=0, rules=game.rules)

    def stop(self, ai: AIState) -> AIState:
        """User stop: clear everything except speed and statistics."""
        return AIState(speed=ai.speed, statistics=ai.statistics)

    def set_speed(self, ai: AIState, speed_ms: int) -> AIState:
        speed = max(self.config.min_speed_ms, min(int(speed_ms), self.config.max_speed_ms))
        return replace(ai, speed=speed)

    def reset_statistics(self, ai: AIState) -> AIState:
        return replace(ai, statistics=AIStatistics())

    def stuck_timeout(self, ai: AIState) -> float:
        """Milliseconds in one AI phase before the loop counts as stuck."""
        return max(self.config.stuck_timeout_ms, self.config.stuck_timeout_ticks * ai.speed)

    # ─── Tick ─────────────────────────────────────────────────────────────────

    def tick(self, ai: AIState, game: GameState, now: float) -> Step:
        """Advance the loop by one step. A disabled or paused AI does nothing."""
        if not ai.is_enabled or not ai.is_playing:
            return ai, []

        if ai.rules is not None and game.rules != ai.rules:
            logger.info("Rules changed while the AI was playing; pausing")
            return replace(ai, is_playing=False), [MessageEffect('aiPausedRuleChange')]

        if game.phase != ai.last_game_phase:
            mapped = PHASE_MAP.get(game.phase, ai.ai_phase)
            logger.debug("Game phase %s -> AI phase %s", game.phase.value, mapped.value)
            ai = replace(
                ai,
                ai_phase=mapped,
                phase_enter_time=now,
                iteration_count=0,
                last_game_phase=game.phase,
                stuck_detected=False,
            )

        if now - ai.phase_enter_time > self.stuck_timeout(ai):
            return self._handle_stuck(ai, game, now)

        if ai.iteration_count > self.config.max_iterations:
            return self._handle_infinite_loop(ai, game, now)

        if game.phase in (Phase.BETTING, Phase.GAME_OVER) and game.balance < self.config.min_balance:
            return self.halt(ai, 'insufficientBalance')

        ai, effects = self._handle_phase(ai, game, now)
        return replace(ai, iteration_count=ai.iteration_count + 1), effects

    # ─── Failure containment ──────────────────────────────────────────────────

    def halt(self, ai: AIState, reason: str) -> Step:
        """Stop the AI on a fault and report ``reason``."""
        logger.warning("AI stopped: %s", reason)
        ai = replace(ai, is_enabled=False, is_playing=False, ai_phase=AIPhase.IDLE, error_message=reason)
        return ai, [MessageEffect('aiStopped', {'reason': reason})]

    def _handle_stuck(self, ai: AIState, game: GameState, now: float) -> Step:
        logger.error(
            "AI stuck in %s for %.0f ms (game phase %s)",
            ai.ai_phase.value, now - ai.phase_enter_time, game.phase.value,
        )
        if game.phase not in PHASE_MAP:
            return self.halt(ai, 'unrecoverableStuck')

        ai = replace(ai, stuck_detected=True, error_message='stuck')
        if game.phase == Phase.RESOLUTION:
            return _resync(ai, AIPhase.WAITING_BET, now), [NewRoundEffect()]
        return _resync(ai, PHASE_MAP[game.phase], now), []

    def _handle_infinite_loop(self, ai: AIState, game: GameState, now: float) -> Step:
        logger.error(
            "AI loop exceeded %d iterations in %s (game phase %s)",
            self.config.max_iterations, ai.ai_phase.value, game.phase.value,
        )
        if game.phase not in PHASE_MAP:
            return self.halt(ai, 'infiniteLoop')

        ai = replace(ai, stuck_detected=True, error_message='infiniteLoop')
        if game.phase == Phase.DEALER_TURN or (
            game.phase == Phase.PLAYER_TURN and predicates.all_hands_done(game)
        ):
            return _resync(ai, AIPhase.WAITING_DEALER, now), [PlayDealerEffect(to_completion=True)]
        if game.phase == Phase.RESOLUTION:
            return _resync(ai, AIPhase.WAITING_BET, now), [NewRoundEffect()]
        return _resync(ai, PHASE_MAP[game.phase], now), []

    # ─── Phase handlers ───────────────────────────────────────────────────────

    def _handle_phase(self, ai: AIState, game: GameState, now: float) -> Step:
        handler = getattr(self, f"_on_{ai.ai_phase.value}")
        return handler(ai, game, now)

    def _on_idle(self, ai: AIState, game: GameState, now: float) -> Step:
        return _enter(ai, PHASE_MAP.get(game.phase, AIPhase.WAITING_BET), now), []

    def _on_waiting_bet(self, ai: AIState, game: GameState, now: float) -> Step:
        if game.phase == Phase.BETTING:
            return _enter(ai, AIPhase.PLACING_BET, now), []
        return _route(ai, game, now), []

    def _on_placing_bet(self, ai: AIState, game: GameState, now: float) -> Step:
        if game.phase != Phase.BETTING:
            return _route(ai, game, now), []
        decision = self.player_for(game).calculate_bet(
            game.balance,
            predicates.effective_count(game),
            self.config.min_bet,
            self.config.max_bet,
        )
        stats = ai.statistics
        ai = replace(
            ai,
            current_decision=decision,
            statistics=replace(
                stats,
                decisions_made=stats.decisions_made + 1,
                bets_placed=stats.bets_placed + 1,
                total_bet=stats.total_bet + decision.bet_amount,
            ),
        )
        return _enter(ai, AIPhase.DEALING_CARDS, now), [PlaceBetEffect(decision.bet_amount)]

    def _on_dealing_cards(self, ai: AIState, game: GameState, now: float) -> Step:
        if game.phase != Phase.BETTING:
            return _route(ai, game, now), []
        if game.current_bet <= 0:
            return _enter(ai, AIPhase.PLACING_BET, now), []
        return _enter(ai, AIPhase.WAITING_DEAL_COMPLETE, now), [DealEffect()]

    def _on_waiting_deal_complete(self, ai: AIState, game: GameState, now: float) -> Step:
        if game.phase == Phase.BETTING:
            # The deal was refused; bet again.
            return _enter(ai, AIPhase.PLACING_BET, now), []
        return _route(ai, game, now), []

    def _on_insurance_decision(self, ai: AIState, game: GameState, now: float) -> Step:
        if not predicates.insurance_offered(game):
            return _route(ai, game, now), []
        decision = self.player_for(game).decide_insurance(
            predicates.effective_count(game),
            predicates.counting_system(game).insurance_index,
            predicates.insurance_amount(game),
            game.balance,
        )
        effect = TakeInsuranceEffect() if decision.action == AIAction.TAKE_INSURANCE else DeclineInsuranceEffect()
        ai = _record(ai, decision)
        return _enter(ai, AIPhase.DECIDING_ACTION, now), [effect]

    def _on_deciding_action(self, ai: AIState, game: GameState, now: float) -> Step:
        if game.phase != Phase.PLAYER_TURN:
            return _route(ai, game, now), []
        if predicates.insurance_offered(game):
            return _enter(ai, AIPhase.INSURANCE_DECISION, now), []
        hand = game.active_hand
        if hand is None or not hand.is_active:
            return ai, []
        decision = self.player_for(game).decide_action(
            hand.cards,
            game.dealer_up_card,
            predicates.can_double(game),
            predicates.can_split(game),
            predicates.can_surrender(game),
            predicates.effective_count(game),
        )
        ai = replace(_record(ai, decision), phase_enter_time=now)
        return ai, [PlayActionEffect(decision.action)]

    def _on_waiting_dealer(self, ai: AIState, game: GameState, now: float) -> Step:
        if game.phase == Phase.DEALER_TURN:
            return ai, [PlayDealerEffect()]
        return _route(ai, game, now), []

    def _on_waiting_resolution(self, ai: AIState, game: GameState, now: float) -> Step:
        if game.phase != Phase.RESOLUTION:
            return _route(ai, game, now), []
        if now - ai.phase_enter_time < max(ai.speed * 2, self.config.resolution_wait_ms):
            return ai, []
        stats = ai.statistics
        ai = replace(ai, statistics=replace(stats, rounds_played=stats.rounds_played + 1))
        return _enter(ai, AIPhase.STARTING_NEXT_ROUND, now), []

    def _on_starting_next_round(self, ai: AIState, game: GameState, now: float) -> Step:
        if game.phase != Phase.RESOLUTION:
            return _route(ai, game, now), []
        return _enter(ai, AIPhase.WAITING_BET, now), [NewRoundEffect()]


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _enter(ai: AIState, phase: AIPhase, now: float) -> AIState:
    if phase == ai.ai_phase:
        return ai
    return replace(ai, ai_phase=phase, phase_enter_time=now, iteration_count=0)


def _resync(ai: AIState, phase: AIPhase, now: float) -> AIState:
    """Enter ``phase`` with a fresh timer and counter, even if already there."""
    return replace(ai, ai_phase=phase, phase_enter_time=now, iteration_count=0)


def _route(ai: AIState, game: GameState, now: float) -> AIState:
    """Move to the AI phase matching the game phase; stay put if unmapped."""
    return _enter(ai, PHASE_MAP.get(game.phase, ai.ai_phase), now)


def _record(ai: AIState, decision: Decision) -> AIState:
    stats = ai.statistics
    return replace(
        ai,
        current_decision=decision,
        statistics=replace(stats, decisions_made=stats.decisions_made + 1),
    )
