"""
Drives an AIController against a live Table.

    runner = AIRunner(Table())
    runner.start()
    asyncio.run(runner.run(max_ticks=500))

step() performs one controller tick and applies the returned effects to the
table. run() repeats step() every ``speed`` milliseconds until the AI stops,
pauses, or the tick budget runs out.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from blackjack_trainer.engine.shoe import ShoeEmptyError
from blackjack_trainer.engine.table_rules import GameRules
from blackjack_trainer.game.actions import SetMessage
from blackjack_trainer.game.table import Table
from blackjack_trainer.settings import Settings, get_settings

from .controller import (
    AIController,
    AIState,
    ControllerConfig,
    DealEffect,
    DeclineInsuranceEffect,
    MessageEffect,
    NewRoundEffect,
    PlaceBetEffect,
    PlayActionEffect,
    PlayDealerEffect,
    TakeInsuranceEffect,
)
from .player import AIAction

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class AIRunner:
    """Owns the AIState for one table.

    Args:
        table:      Table the AI plays at.
        controller: Transition function; a default-configured one if omitted.
        clock_ms:   Millisecond clock used for phase timing.
        speed:      Initial delay between ticks in milliseconds.
    """

    def __init__(
        self,
        table: Table,
        controller: AIController | None = None,
        clock_ms: Callable[[], float] = _monotonic_ms,
        speed: int | None = None,
    ) -> None:
        self.table = table
        self.controller = controller or AIController()
        self.clock_ms = clock_ms
        self.ai = AIState()
        if speed is not None:
            self.ai = self.controller.set_speed(self.ai, speed)
        self.messages: list[MessageEffect] = []

    @classmethod
    def from_settings(
        cls,
        table: Table,
        settings: Settings | None = None,
        clock_ms: Callable[[], float] = _monotonic_ms,
    ) -> AIRunner:
        """Runner with bet bounds and tick speed taken from process settings."""
        settings = settings or get_settings()
        controller = AIController(ControllerConfig.from_settings(settings))
        return cls(table, controller, clock_ms, speed=settings.ai_speed_ms)

    @property
    def is_active(self) -> bool:
        return self.ai.is_enabled and self.ai.is_playing

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    def start(self) -> AIState:
        self.ai, effects = self.controller.start(self.ai, self.table.state, self.clock_ms())
        self._apply(effects)
        return self.ai

    def pause(self) -> AIState:
        self.ai = self.controller.pause(self.ai)
        return self.ai

    def resume(self) -> AIState:
        self.ai = self.controller.resume(self.ai, self.table.state, self.clock_ms())
        return self.ai

    def stop(self) -> AIState:
        self.ai = self.controller.stop(self.ai)
        return self.ai

    def set_speed(self, speed_ms: int) -> AIState:
        self.ai = self.controller.set_speed(self.ai, speed_ms)
        return self.ai

    def reset_statistics(self) -> AIState:
        self.ai = self.controller.reset_statistics(self.ai)
        return self.ai

    def set_rules(self, rules: GameRules, preset_id: str | None = None) -> None:
        """Change table rules; a playing AI pauses itself on its next tick."""
        self.table.set_rules(rules, preset_id)

    # ─── Loop ─────────────────────────────────────────────────────────────────

    def step(self) -> AIState:
        """One controller tick. A table that cannot deal stops the AI."""
        self.ai, effects = self.controller.tick(self.ai, self.table.state, self.clock_ms())
        try:
            self._apply(effects)
        except ShoeEmptyError:
            logger.exception("Table could not apply AI effects")
            self.ai, effects = self.controller.halt(self.ai, 'shoeEmpty')
            self._apply(effects)
        return self.ai

    async def run(self, max_ticks: int | None = None) -> AIState:
        """Tick until the AI is no longer active or ``max_ticks`` is reached."""
        ticks = 0
        while self.is_active and (max_ticks is None or ticks < max_ticks):
            self.step()
            ticks += 1
            await asyncio.sleep(self.ai.speed / 1000)
        logger.info(
            "AI loop finished after %d ticks (%d rounds played)",
            ticks, self.ai.statistics.rounds_played,
        )
        return self.ai

    # ─── Effects ──────────────────────────────────────────────────────────────

    def _apply(self, effects: list) -> None:
        table = self.table
        for effect in effects:
            if isinstance(effect, PlaceBetEffect):
                table.place_bet(effect.amount)
            elif isinstance(effect, DealEffect):
                table.deal()
            elif isinstance(effect, TakeInsuranceEffect):
                table.take_insurance()
            elif isinstance(effect, DeclineInsuranceEffect):
                table.decline_insurance()
            elif isinstance(effect, PlayActionEffect):
                self._play(effect.action)
            elif isinstance(effect, PlayDealerEffect):
                if effect.to_completion:
                    table.play_dealer()
                else:
                    table.advance()
            elif isinstance(effect, NewRoundEffect):
                table.new_round()
            elif isinstance(effect, MessageEffect):
                self.messages.append(effect)
                table.dispatch(SetMessage(effect.code))
            else:
                raise TypeError(f"Unknown AI effect: {effect!r}")

    def _play(self, action: AIAction) -> None:
        table = self.table
        if action == AIAction.HIT:
            table.hit()
        elif action == AIAction.STAND:
            table.stand()
        elif action == AIAction.DOUBLE_DOWN:
            table.double_down()
        elif action == AIAction.SPLIT:
            table.split()
        elif action == AIAction.SURRENDER:
            table.surrender()
        else:
            raise ValueError(f"Not a playing action: {action.value}")
