"""Return-to-player and bankroll analysis of a played session.

Provides:
- RTP from session statistics (total returned / total wagered × 100)
- RTP category and comparison against the rule set's expected RTP
- Balance trajectory statistics (per-hand change distribution, drawdown,
  95% confidence interval of the mean change)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np
from scipy import stats

from blackjack_trainer.engine.rules import round_half_up
from blackjack_trainer.game.state import BalanceSnapshot, SessionStats

# Difference (percentage points) still treated as "playing as expected".
EXPECTED_TOLERANCE = 0.5

# ─── Dataclasses ──────────────────────────────────────────────────────────────


@dataclass
class RTPData:
    """Return to player for a session.

    Attributes:
        rtp:           total_won / total_wagered × 100, 2 dp (0 before any bet).
        total_wagered: Sum of all stakes, including doubles, splits, insurance.
        total_won:     Everything returned to the balance, stakes included.
        net_profit:    total_won − total_wagered.
        hands_played:  Rounds settled.
        avg_bet:       Mean amount wagered per round, 2 dp.
        avg_return:    Mean amount returned per round, 2 dp.
    """

    rtp: float
    total_wagered: int
    total_won: int
    net_profit: int
    hands_played: int
    avg_bet: float
    avg_return: float


@dataclass
class RTPComparison:
    difference: float
    performance: str  # 'above' | 'expected' | 'below'


@dataclass
class TrajectoryStats:
    """Distribution of per-hand balance changes.

    Attributes:
        n_hands:      Number of balance changes (snapshots − 1).
        start:        First recorded balance.
        end:          Last recorded balance.
        peak:         Highest recorded balance.
        max_drawdown: Largest peak-to-trough fall.
        mean_change:  Mean per-hand balance change.
        std_change:   Sample standard deviation of the change (0 with < 2 changes).
        ci_95_low:    Lower bound of the 95% CI for mean_change (t distribution).
        ci_95_high:   Upper bound of the 95% CI for mean_change.
    """

    n_hands: int
    start: int
    end: int
    peak: int
    max_drawdown: int
    mean_change: float
    std_change: float
    ci_95_low: float
    ci_95_high: float


# ─── RTP ──────────────────────────────────────────────────────────────────────


def calculate_rtp(session: SessionStats) -> RTPData:
    """Compute RTP for a session.

    Examples:
        >>> calculate_rtp(replace(stats, total_wagered=1000, total_won=995)).rtp
        99.5
    """
    wagered = session.total_wagered
    played = session.hands_played
    rtp = session.total_won / wagered * 100 if wagered > 0 else 0.0
    return RTPData(
        rtp=round_half_up(rtp, 2),
        total_wagered=wagered,
        total_won=session.total_won,
        net_profit=session.net_profit,
        hands_played=played,
        avg_bet=round_half_up(wagered / played, 2) if played else 0.0,
        avg_return=round_half_up(session.total_won / played, 2) if played else 0.0,
    )


def rtp_category(rtp: float) -> str:
    """Bucket an RTP: unknown (no data), excellent, good, average or poor."""
    if rtp == 0:
        return 'unknown'
    if rtp >= 100:
        return 'excellent'
    if rtp >= 99:
        return 'good'
    if rtp >= 95:
        return 'average'
    return 'poor'


def expected_rtp(house_edge: float) -> float:
    return 100 - house_edge


def compare_rtp_to_expected(actual_rtp: float, house_edge: float) -> RTPComparison:
    difference = actual_rtp - expected_rtp(house_edge)
    if abs(difference) < EXPECTED_TOLERANCE:
        performance = 'expected'
    elif difference > 0:
        performance = 'above'
    else:
        performance = 'below'
    return RTPComparison(difference=round_half_up(difference, 2), performance=performance)


# ─── Trajectory ───────────────────────────────────────────────────────────────


def balance_trajectory(history: Iterable[BalanceSnapshot]) -> TrajectoryStats | None:
    """Summarise a balance history. Returns None with fewer than two snapshots."""
    balances = np.array([s.balance for s in history], dtype=np.float64)
    if len(balances) < 2:
        return None

    changes = np.diff(balances)
    n = len(changes)
    mean = float(np.mean(changes))
    std = float(np.std(changes, ddof=1)) if n > 1 else 0.0
    if n > 1 and std > 0:
        margin = float(stats.t.ppf(0.975, df=n - 1)) * std / math.sqrt(n)
    else:
        margin = 0.0

    running_peak = np.maximum.accumulate(balances)
    return TrajectoryStats(
        n_hands=n,
        start=int(balances[0]),
        end=int(balances[-1]),
        peak=int(running_peak[-1]),
        max_drawdown=int(np.max(running_peak - balances)),
        mean_change=mean,
        std_change=std,
        ci_95_low=mean - margin,
        ci_95_high=mean + margin,
    )
