"""
Table driver: one shoe plus one reducer-owned GameState.

Table draws cards from its Shoe and turns every player or dealer move into
a single reducer action. It checks availability through predicates.py
before drawing, so a refused action never burns a card.

Dealer play is stepwise. Each advance() call enters the reducer at most once:

    hole card hidden        → DealerRevealHoleCard
    dealer busted           → ResolveHands
    dealer_should_hit       → DealerHitCard
    not yet standing        → DealerStand
    standing                → ResolveHands

so a caller can pace the dealer with its own timer, or call play_dealer()
to run every step at once.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from blackjack_trainer.engine.dealer import dealer_should_hit
from blackjack_trainer.engine.shoe import Shoe
from blackjack_trainer.engine.table_rules import GameRules

from . import predicates
from .actions import (
    ClearBet,
    CompleteRound,
    DealerHitCard,
    DealerRevealHoleCard,
    DealerStand,
    DealInitialCards,
    DeclineInsurance,
    DoubleDownCard,
    GameAction,
    HitCard,
    PlaceBet,
    ResetGame,
    ResolveHands,
    SetCountingSystem,
    SetMessage,
    SetRules,
    ShuffleShoe,
    SplitCards,
    Stand,
    Surrender,
    TakeInsurance,
)
from .reducer import reduce
from .state import GameState, Phase, initial_state

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

# Fewest undealt cards a round may start with; below this the shoe is
# reshuffled even if the cut card has not come out.
ROUND_RESERVE = 10


class Table:
    """Shoe, state and dispatch for one player seat.

    Args:
        state: Starting state; defaults to a fresh initial_state().
        shoe:  Shoe to draw from; defaults to a freshly shuffled shoe sized
               from ``state.rules``.
        clock: Returns the current time in seconds; stamps ResolveHands.
    """

    def __init__(
        self,
        state: GameState | None = None,
        shoe: Shoe | None = None,
        clock: Clock = time.time,
    ) -> None:
        self.state = state or initial_state()
        self.clock = clock
        if shoe is None:
            shoe = Shoe(self.state.rules.deck_count, self.state.rules.penetration)
        self.shoe = shoe
        self._listeners: list[Callable[[GameState], None]] = []

    # ─── Dispatch ─────────────────────────────────────────────────────────────

    def dispatch(self, action: GameAction) -> GameState:
        self.state = reduce(self.state, action)
        for listener in self._listeners:
            listener(self.state)
        return self.state

    def subscribe(self, listener: Callable[[GameState], None]) -> None:
        """Register a read-only observer called after every dispatch."""
        self._listeners.append(listener)

    def _in_play(self) -> list[int]:
        cards = [c for h in self.state.hands for c in h.cards]
        return cards + list(self.state.dealer_hand)

    def _deal_card(self, *pending: int) -> int:
        """Deal one card, restocking from the discards if the shoe is dry.

        ``pending`` are cards already drawn for the action in progress.
        """
        if self.shoe.cards_remaining() == 0:
            logger.warning("Shoe ran out mid-round; reshuffling the discards")
            self.shoe.restock(self._in_play() + list(pending))
            self.dispatch(ShuffleShoe())
        return self.shoe.deal()

    def _draw(self) -> tuple[int, int, int]:
        card = self._deal_card()
        return card, self.shoe.cards_remaining(), self.shoe.total_cards

    # ─── Configuration ────────────────────────────────────────────────────────

    def set_rules(self, rules: GameRules, preset_id: str | None = None) -> GameState:
        """Change rules between rounds and start a fresh shoe for them."""
        state = self.dispatch(SetRules(rules, preset_id))
        if state.rules == rules and state.message == 'rulesUpdated':
            self.shoe = Shoe(rules.deck_count, rules.penetration, self.shoe.randbelow)
        return state

    def set_counting_system(self, system_id: str) -> GameState:
        return self.dispatch(SetCountingSystem(system_id))

    def reset(self, starting_balance: int | None = None) -> GameState:
        self.shoe.reset()
        return self.dispatch(ResetGame(starting_balance, self.clock()))

    # ─── Betting ──────────────────────────────────────────────────────────────

    def place_bet(self, amount: int) -> GameState:
        return self.dispatch(PlaceBet(amount))

    def clear_bet(self) -> GameState:
        return self.dispatch(ClearBet())

    def deal(self) -> GameState:
        """Deal a new round in P, D, P, D order, reshuffling first if the
        cut card has been reached or fewer than ROUND_RESERVE cards are left."""
        state = self.state
        if state.phase != Phase.BETTING:
            return self.dispatch(SetMessage(predicates.NOT_ALLOWED))
        if state.current_bet <= 0:
            return self.dispatch(SetMessage('placeBetFirst'))
        if state.current_bet > state.balance:
            return self.dispatch(SetMessage('insufficientBalance'))

        if self.shoe.should_reshuffle() or self.shoe.cards_remaining() < ROUND_RESERVE:
            logger.info("Reshuffling with %d cards left", self.shoe.cards_remaining())
            self.shoe.reset()
            self.dispatch(ShuffleShoe())

        player_1 = self.shoe.deal()
        dealer_1 = self.shoe.deal()
        player_2 = self.shoe.deal()
        dealer_2 = self.shoe.deal()
        return self.dispatch(DealInitialCards(
            (player_1, player_2),
            (dealer_1, dealer_2),
            self.shoe.cards_remaining(),
            self.shoe.total_cards,
        ))

    def take_insurance(self) -> GameState:
        return self.dispatch(TakeInsurance())

    def decline_insurance(self) -> GameState:
        return self.dispatch(DeclineInsurance())

    # ─── Player actions ───────────────────────────────────────────────────────

    def hit(self) -> GameState:
        reason = predicates.hit_block_reason(self.state)
        if reason is not None:
            return self.dispatch(SetMessage(reason))
        return self.dispatch(HitCard(*self._draw()))

    def stand(self) -> GameState:
        return self.dispatch(Stand())

    def double_down(self) -> GameState:
        reason = predicates.double_block_reason(self.state)
        if reason is not None:
            return self.dispatch(SetMessage(reason))
        return self.dispatch(DoubleDownCard(*self._draw()))

    def split(self) -> GameState:
        reason = predicates.split_block_reason(self.state)
        if reason is not None:
            return self.dispatch(SetMessage(reason))
        first = self._deal_card()
        second = self._deal_card(first)
        return self.dispatch(SplitCards((first, second), self.shoe.cards_remaining(), self.shoe.total_cards))

    def surrender(self) -> GameState:
        return self.dispatch(Surrender())

    # ─── Dealer ───────────────────────────────────────────────────────────────

    def advance(self) -> bool:
        """Run one dealer step. Returns False when there is nothing to do."""
        state = self.state
        if state.phase != Phase.DEALER_TURN:
            return False
        if state.dealer_hole_card_hidden:
            self.dispatch(DealerRevealHoleCard())
        elif state.dealer_value > 21 or state.dealer_standing:
            self.dispatch(ResolveHands(self.clock()))
        elif dealer_should_hit(state.dealer_hand, state.rules):
            self.dispatch(DealerHitCard(*self._draw()))
        else:
            self.dispatch(DealerStand())
        return True

    def play_dealer(self) -> GameState:
        """Play the dealer hand out and settle the round."""
        while self.advance():
            pass
        return self.state

    def new_round(self) -> GameState:
        return self.dispatch(CompleteRound())
