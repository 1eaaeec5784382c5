"""
Pure action-availability predicates and count views over a GameState.

The reducer, the table driver and the AI all decide availability through
these functions. Each ``*_block_reason`` returns the message code the reducer
reports when the action is refused, or None when it is allowed.
"""

from __future__ import annotations

from blackjack_trainer.counting import resolver
from blackjack_trainer.counting.systems import CountingSystem, get_counting_system
from blackjack_trainer.engine.cards import is_ace
from blackjack_trainer.engine.hand import HandStatus, calculate_value
from blackjack_trainer.engine.hand import can_split as is_pair
from blackjack_trainer.engine.rules import insurance_cost

from .state import GameState, Phase

NOT_ALLOWED = 'actionNotAllowed'


def _playable(state: GameState) -> bool:
    hand = state.active_hand
    return state.phase == Phase.PLAYER_TURN and hand is not None and hand.is_active


# ─── Player actions ───────────────────────────────────────────────────────────

def hit_block_reason(state: GameState) -> str | None:
    return None if _playable(state) else NOT_ALLOWED


def double_block_reason(state: GameState) -> str | None:
    """Why the active hand cannot be doubled, or None.

    Doubling needs a two-card active hand whose total the rules allow,
    DAS for a split hand, and a balance covering the extra stake.
    """
    if not _playable(state):
        return NOT_ALLOWED
    hand = state.active_hand
    rules = state.rules
    if len(hand.cards) != 2 or not rules.double_on.allows(hand.value):
        return NOT_ALLOWED
    if hand.is_split and not rules.double_after_split:
        return NOT_ALLOWED
    if state.balance < hand.bet:
        return 'insufficientToDouble'
    return None


def split_block_reason(state: GameState) -> str | None:
    """Why the active hand cannot be split, or None.

    The table allows ``max_splits + 1`` hands in total; split Aces split
    again only with ``can_resplit_aces``.
    """
    if not _playable(state):
        return NOT_ALLOWED
    hand = state.active_hand
    rules = state.rules
    if not is_pair(hand.cards):
        return NOT_ALLOWED
    if len(state.hands) >= rules.max_splits + 1:
        return NOT_ALLOWED
    if hand.is_split and is_ace(hand.cards[0]) and not rules.can_resplit_aces:
        return NOT_ALLOWED
    if state.balance < hand.bet:
        return 'insufficientToSplit'
    return None


def surrender_block_reason(state: GameState) -> str | None:
    if not state.rules.late_surrender or not _playable(state):
        return NOT_ALLOWED
    hand = state.active_hand
    if len(state.hands) != 1 or hand.is_split or len(hand.cards) != 2:
        return NOT_ALLOWED
    return None


def can_hit(state: GameState) -> bool:
    return hit_block_reason(state) is None


def can_stand(state: GameState) -> bool:
    return _playable(state)


def can_double(state: GameState) -> bool:
    return double_block_reason(state) is None


def can_split(state: GameState) -> bool:
    return split_block_reason(state) is None


def can_surrender(state: GameState) -> bool:
    return surrender_block_reason(state) is None


# ─── Insurance ────────────────────────────────────────────────────────────────

def insurance_offered(state: GameState) -> bool:
    """Return True while insurance is open: dealer Ace up, nothing decided yet,
    and the single original hand untouched. Balance is not considered."""
    if not state.rules.insurance_allowed or not _playable(state):
        return False
    up = state.dealer_up_card
    if up is None or not is_ace(up) or state.insurance_bet != 0:
        return False
    hand = state.active_hand
    return len(state.hands) == 1 and not hand.is_split and len(hand.cards) == 2


def insurance_amount(state: GameState) -> int:
    """Insurance stake for the current bet (half, rounded up)."""
    hand = state.active_hand
    bet = hand.bet if hand is not None else state.current_bet
    return insurance_cost(bet)


def insurance_block_reason(state: GameState) -> str | None:
    if not insurance_offered(state):
        return 'insuranceUnavailable'
    if state.balance < insurance_amount(state):
        return 'insufficientBalance'
    return None


def can_take_insurance(state: GameState) -> bool:
    return insurance_block_reason(state) is None


# ─── Round progress ───────────────────────────────────────────────────────────

def all_hands_done(state: GameState) -> bool:
    """True once no player hand is still ACTIVE (vacuously true with no hands)."""
    return all(h.status != HandStatus.ACTIVE for h in state.hands)


def dealer_full_value(state: GameState) -> int:
    """Dealer total including the hole card, hidden or not."""
    return calculate_value(state.dealer_hand)


def penetration_reached(cards_remaining: int, total_cards: int, penetration: float) -> bool:
    """True once the undealt fraction drops to ``1 - penetration`` or below.

    Examples:
        >>> penetration_reached(78, 312, 0.75)
        True
        >>> penetration_reached(79, 312, 0.75)
        False
    """
    if total_cards <= 0:
        return False
    return cards_remaining / total_cards <= 1 - penetration


# ─── Count views ──────────────────────────────────────────────────────────────

def counting_system(state: GameState) -> CountingSystem:
    return get_counting_system(state.counting_system)


def true_count(state: GameState) -> float:
    return resolver.true_count(state.running_count, state.cards_remaining)


def effective_count(state: GameState) -> float:
    """Count the active system acts on: TC if balanced, RC otherwise."""
    return resolver.effective_count(state.running_count, state.cards_remaining, counting_system(state))
