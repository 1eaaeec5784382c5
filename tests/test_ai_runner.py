"""Tests for blackjack_trainer/ai/runner.py — applying controller effects to a Table."""

from __future__ import annotations

import asyncio

import pytest

from blackjack_trainer.ai.controller import MessageEffect
from blackjack_trainer.ai.player import AIAction
from blackjack_trainer.ai.runner import AIRunner
from blackjack_trainer.engine.shoe import ShoeEmptyError
from blackjack_trainer.engine.table_rules import SINGLE_DECK
from blackjack_trainer.game.state import Phase
from tests.conftest import stacked_table


class FakeClock:
    def __init__(self) -> None:
        self.ms = 0.0

    def __call__(self) -> float:
        return self.ms


def run_until(runner, clock, done, max_steps=200, step_ms=100):
    for _ in range(max_steps):
        if done():
            return
        runner.step()
        clock.ms += step_ms
    raise AssertionError("condition not reached")


class TestStep:
    def test_full_round(self):
        # player 10,9 = 19 stands; dealer 10,7 = 17 stands
        table = stacked_table('10C', '10H', '9D', '7S')
        clock = FakeClock()
        runner = AIRunner(table, clock_ms=clock)
        runner.start()
        assert runner.is_active

        run_until(runner, clock, lambda: runner.ai.statistics.rounds_played == 1)

        state = table.state
        assert state.statistics.hands_played == 1
        assert state.statistics.hands_won == 1
        assert state.balance == 1010
        assert runner.ai.statistics.bets_placed == 1
        assert runner.ai.current_decision.action == AIAction.STAND

    def test_next_round_starts(self):
        table = stacked_table('10C', '10H', '9D', '7S')
        clock = FakeClock()
        runner = AIRunner(table, clock_ms=clock)
        runner.start()
        run_until(runner, clock, lambda: runner.ai.statistics.rounds_played == 1)
        run_until(runner, clock, lambda: table.state.phase == Phase.BETTING)
        assert table.state.current_bet == 10

    def test_start_message_reaches_table(self):
        table = stacked_table()
        runner = AIRunner(table, clock_ms=FakeClock())
        runner.start()
        assert runner.messages[-1].code == 'aiStarted'
        assert table.state.message == 'aiStarted'

    def test_start_refused_on_low_balance(self):
        table = stacked_table(balance=5)
        runner = AIRunner(table, clock_ms=FakeClock())
        runner.start()
        assert not runner.is_active
        assert table.state.message == 'aiInsufficientBalance'

    def test_rule_change_pauses(self):
        table = stacked_table()
        runner = AIRunner(table, clock_ms=FakeClock())
        runner.start()
        runner.set_rules(SINGLE_DECK)
        runner.step()
        assert runner.ai.is_enabled
        assert not runner.is_active
        assert runner.messages[-1].code == 'aiPausedRuleChange'

        runner.resume()
        assert runner.is_active
        assert runner.ai.rules == SINGLE_DECK

    def test_pause_and_stop(self):
        runner = AIRunner(stacked_table(), clock_ms=FakeClock())
        runner.start()
        runner.pause()
        assert not runner.is_active
        runner.stop()
        assert not runner.ai.is_enabled

    def test_speed(self):
        runner = AIRunner(stacked_table(), clock_ms=FakeClock(), speed=10)
        assert runner.ai.speed == 50
        assert runner.set_speed(1200).speed == 1200

    def test_shoe_failure_stops_ai(self, monkeypatch):
        table = stacked_table()
        clock = FakeClock()
        runner = AIRunner(table, clock_ms=clock)

        def broken_deal():
            raise ShoeEmptyError("Cannot deal from an empty shoe.")

        monkeypatch.setattr(table, 'deal', broken_deal)
        runner.start()
        run_until(runner, clock, lambda: not runner.ai.is_enabled)
        assert runner.ai.error_message == 'shoeEmpty'
        assert runner.messages[-1] == MessageEffect('aiStopped', {'reason': 'shoeEmpty'})
        assert table.state.message == 'aiStopped'

    def test_unknown_effect_raises(self):
        runner = AIRunner(stacked_table(), clock_ms=FakeClock())
        with pytest.raises(TypeError):
            runner._apply([object()])

    def test_non_playing_action_raises(self):
        runner = AIRunner(stacked_table(), clock_ms=FakeClock())
        with pytest.raises(ValueError):
            runner._play(AIAction.BET)


class TestRun:
    def test_run_respects_tick_budget(self):
        table = stacked_table('10C', '10H', '9D', '7S')
        runner = AIRunner(table, speed=50)
        runner.start()
        ai = asyncio.run(runner.run(max_ticks=5))
        assert ai.is_enabled
        assert ai.statistics.bets_placed == 1
        assert table.state.phase != Phase.BETTING

    def test_run_returns_immediately_when_inactive(self):
        runner = AIRunner(stacked_table(), speed=50)
        ai = asyncio.run(runner.run())
        assert ai.statistics.decisions_made == 0
