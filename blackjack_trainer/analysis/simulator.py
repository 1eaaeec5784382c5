"""
Monte Carlo session simulator for the AI player.

Plays the AI end-to-end against a Table: the same controller, runner,
reducer and shoe an interactive session uses, with a simulated clock so
phase timing advances one ``speed`` interval per tick instead of in real
time. Per-round balance changes are collected and summarised into mean
result, standard deviation, 95% confidence interval and RTP.

Usage (standalone report):
    python -m blackjack_trainer.analysis.simulator [n_rounds] [system_id]
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from blackjack_trainer.ai.controller import AIController, AIStatistics
from blackjack_trainer.ai.runner import AIRunner
from blackjack_trainer.counting.systems import DEFAULT_SYSTEM_ID, get_counting_system
from blackjack_trainer.engine.shoe import Shoe
from blackjack_trainer.engine.table_rules import DEFAULT_RULES, GameRules
from blackjack_trainer.game.state import DEFAULT_STARTING_BALANCE, GameState, initial_state
from blackjack_trainer.game.table import Table
from blackjack_trainer.strategy.house_edge import calculate_house_edge

from .session import calculate_rtp

# Ticks allowed per requested round before the run is abandoned.
TICKS_PER_ROUND_LIMIT = 500

# ─── Result type ──────────────────────────────────────────────────────────────


@dataclass
class SimulationResult:
    """Aggregate statistics from a simulated AI session.

    Attributes:
        n_rounds:         Rounds actually settled (may be short of the request
                          if the AI stopped, e.g. on an exhausted bankroll).
        system_id:        Counting system the AI played.
        starting_balance: Balance at the start of the run.
        final_balance:    Balance at the end of the run.
        mean_result:      Mean balance change per round (chips).
        std_result:       Sample standard deviation of the per-round change.
        ci_95_low:        Lower bound of the 95% CI for mean_result.
        ci_95_high:       Upper bound of the 95% CI for mean_result.
        rtp:              Session return to player (%), from SessionStats.
        house_edge_pct:   Theoretical house edge of the rule set (%).
        n_wins:           Rounds with a positive balance change.
        n_losses:         Rounds with a negative balance change.
        n_pushes:         Rounds with no balance change.
        ai_statistics:    The controller's own counters.
        stop_reason:      Why the AI stopped early, or None.
        results:          Raw per-round change array, or None unless requested.
    """

    n_rounds: int
    system_id: str
    starting_balance: int
    final_balance: int
    mean_result: float
    std_result: float
    ci_95_low: float
    ci_95_high: float
    rtp: float
    house_edge_pct: float
    n_wins: int
    n_losses: int
    n_pushes: int
    ai_statistics: AIStatistics
    stop_reason: str | None = None
    results: np.ndarray | None = None

    @property
    def net_profit(self) -> int:
        return self.final_balance - self.starting_balance

    def __str__(self) -> str:
        return (
            f"Rounds: {self.n_rounds:,} | "
            f"System: {self.system_id} | "
            f"Net: {self.net_profit:+,} | "
            f"Mean/round: {self.mean_result:+.2f} "
            f"(95% CI [{self.ci_95_low:+.2f}, {self.ci_95_high:+.2f}]) | "
            f"RTP: {self.rtp:.2f}% | "
            f"House edge: {self.house_edge_pct:.2f}%"
        )


# ─── Simulation ───────────────────────────────────────────────────────────────


class _SimulatedClock:
    def __init__(self) -> None:
        self.ms = 0.0

    def now_ms(self) -> float:
        return self.ms

    def now_s(self) -> float:
        return self.ms / 1000


def _seeded_randbelow(seed: int | None):
    rng = np.random.default_rng(seed)

    def randbelow(n: int) -> int:
        return int(rng.integers(n))

    return randbelow


def simulate_session(
    n_rounds: int = 1000,
    rules: GameRules = DEFAULT_RULES,
    system_id: str = DEFAULT_SYSTEM_ID,
    starting_balance: int = DEFAULT_STARTING_BALANCE,
    seed: int | None = 42,
    speed: int = 50,
    controller: AIController | None = None,
    return_results: bool = False,
) -> SimulationResult:
    """Let the AI play ``n_rounds`` and summarise the outcome.

    Args:
        n_rounds:         Rounds to play.
        rules:            Table rules.
        system_id:        Counting system the AI uses for bets and index plays.
        starting_balance: Opening bankroll.
        seed:             Shuffle seed. None for a non-deterministic run.
        speed:            AI tick interval in ms; the simulated clock advances
                          by this much per tick.
        controller:       Custom controller (e.g. different bet bounds).
        return_results:   Attach the per-round change array to the result.

    Returns:
        SimulationResult for the run.

    Raises:
        KeyError: If ``system_id`` is not a known counting system.
    """
    get_counting_system(system_id)
    clock = _SimulatedClock()
    state = initial_state(
        rules=rules,
        starting_balance=starting_balance,
        counting_system=system_id,
        session_start=clock.now_s(),
    )
    shoe = Shoe(rules.deck_count, rules.penetration, _seeded_randbelow(seed))
    table = Table(state, shoe, clock=clock.now_s)
    runner = AIRunner(table, controller, clock_ms=clock.now_ms, speed=speed)

    balances = [starting_balance]

    def record(game: GameState) -> None:
        if game.statistics.hands_played > len(balances) - 1:
            balances.append(game.balance)

    table.subscribe(record)
    runner.start()

    tick_limit = n_rounds * TICKS_PER_ROUND_LIMIT
    ticks = 0
    while runner.is_active and len(balances) - 1 < n_rounds and ticks < tick_limit:
        runner.step()
        clock.ms += runner.ai.speed
        ticks += 1

    changes = np.diff(np.array(balances, dtype=np.float64))
    n = len(changes)
    mean = float(np.mean(changes)) if n else 0.0
    std = float(np.std(changes, ddof=1)) if n > 1 else 0.0
    ci_margin = 1.96 * std / math.sqrt(n) if n else 0.0

    return SimulationResult(
        n_rounds=n,
        system_id=system_id,
        starting_balance=starting_balance,
        final_balance=table.state.balance,
        mean_result=mean,
        std_result=std,
        ci_95_low=mean - ci_margin,
        ci_95_high=mean + ci_margin,
        rtp=calculate_rtp(table.state.statistics).rtp,
        house_edge_pct=calculate_house_edge(rules),
        n_wins=int(np.sum(changes > 0)),
        n_losses=int(np.sum(changes < 0)),
        n_pushes=int(np.sum(changes == 0)),
        ai_statistics=runner.ai.statistics,
        stop_reason=runner.ai.error_message if not runner.ai.is_enabled else None,
        results=changes if return_results else None,
    )


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from blackjack_trainer.ai.controller import ControllerConfig
    from blackjack_trainer.counting.systems import ALL_COUNTING_SYSTEMS
    from blackjack_trainer.settings import configure_logging, get_settings

    settings = get_settings()
    configure_logging(settings.log_level)

    n = int(sys.argv[1]) if len(sys.argv) > 1 else 2000
    systems = [sys.argv[2]] if len(sys.argv) > 2 else [s.id for s in ALL_COUNTING_SYSTEMS]

    print(f"AI Session Simulation — {n:,} rounds per counting system\n")
    for system in systems:
        print(simulate_session(
            n_rounds=n,
            system_id=system,
            starting_balance=settings.starting_balance,
            controller=AIController(ControllerConfig.from_settings(settings)),
        ))
