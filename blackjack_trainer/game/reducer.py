"""
Pure game state reducer.

    reduce(state, action) -> new GameState

Phase machine:
    betting → (deal) → player_turn | dealer_turn (player natural)
    player_turn → (every hand stood / busted / surrendered) → dealer_turn
    dealer_turn → (reveal, hits, stand) → resolution (ResolveHands)
    resolution → (CompleteRound) → betting | game_over (balance exhausted)

Refused actions never raise: the state comes back unchanged except for the
message code explaining the refusal (see predicates.py). A second
ResolveHands on an already resolved round returns the very same state.

Running count: the three visible cards are counted at the deal, the hole
card when it is revealed, every later card as it is drawn.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from blackjack_trainer.counting.systems import CountingSystem, get_counting_system
from blackjack_trainer.engine.cards import card_value, is_ace
from blackjack_trainer.engine.hand import (
    HandResult,
    HandStatus,
    PlayerHand,
    calculate_value,
    can_split,
    is_blackjack,
    is_soft,
)
from blackjack_trainer.engine.rules import calculate_insurance_payout, calculate_payout
from blackjack_trainer.engine.table_rules import preset_id_for

from . import predicates
from .actions import (
    ACTION_TYPES,
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
    ResetCount,
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
    ToggleCountDisplay,
    ToggleStatsPanel,
    ToggleStrategyHint,
    UpdateShoeState,
)
from .state import (
    BALANCE_HISTORY_LIMIT,
    HAND_HISTORY_LIMIT,
    BalanceSnapshot,
    CompletedHand,
    GameState,
    Phase,
    initial_state,
)

logger = logging.getLogger(__name__)


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _refuse(state: GameState, message: str) -> GameState:
    return replace(state, message=message)


def _system(state: GameState) -> CountingSystem:
    return get_counting_system(state.counting_system)


def _counted(state: GameState, *cards: int) -> int:
    return state.running_count + _system(state).count_cards(cards)


def _shoe_fields(state: GameState, cards_remaining: int, total_cards: int) -> dict:
    return {
        'cards_remaining': cards_remaining,
        'total_cards': total_cards,
        'penetration_reached': predicates.penetration_reached(
            cards_remaining, total_cards, state.rules.penetration
        ),
    }


def _replace_hand(hands: tuple[PlayerHand, ...], index: int, *new: PlayerHand) -> tuple[PlayerHand, ...]:
    return hands[:index] + new + hands[index + 1:]


def _next_turn(hands: tuple[PlayerHand, ...], start: int, current: int) -> dict:
    """Phase and active index after a hand finishes.

    Play moves to the first ACTIVE hand at or after ``start``; with none left
    the round moves to the dealer and the index stays on ``current``.
    """
    for index in range(start, len(hands)):
        if hands[index].status == HandStatus.ACTIVE:
            return {'phase': Phase.PLAYER_TURN, 'active_hand_index': index}
    return {'phase': Phase.DEALER_TURN, 'active_hand_index': current}


def _turn_message(turn: dict, busted: bool = False) -> str:
    if busted:
        return 'bust'
    return 'yourTurn' if turn['phase'] == Phase.PLAYER_TURN else 'dealerTurn'


# ─── Configuration ────────────────────────────────────────────────────────────

def _set_rules(state: GameState, action: SetRules) -> GameState:
    if state.phase not in (Phase.BETTING, Phase.GAME_OVER) or state.hands:
        return _refuse(state, 'rulesLockedMidRound')
    rules = action.rules
    return replace(
        state,
        rules=rules,
        selected_preset_id=action.preset_id or preset_id_for(rules),
        cards_remaining=rules.total_cards,
        total_cards=rules.total_cards,
        penetration_reached=False,
        running_count=0,
        message='rulesUpdated',
    )


def _reset_game(state: GameState, action: ResetGame) -> GameState:
    starting = action.starting_balance
    if starting is None:
        starting = state.statistics.starting_balance
    return initial_state(
        rules=state.rules,
        starting_balance=starting,
        counting_system=state.counting_system,
        preset_id=state.selected_preset_id,
        session_start=action.timestamp,
    )


def _set_counting_system(state: GameState, action: SetCountingSystem) -> GameState:
    system = get_counting_system(action.system_id)
    return replace(state, counting_system=system.id, running_count=0, message='countingSystemChanged')


# ─── Betting and dealing ──────────────────────────────────────────────────────

def _place_bet(state: GameState, action: PlaceBet) -> GameState:
    if state.phase != Phase.BETTING:
        return _refuse(state, predicates.NOT_ALLOWED)
    if action.amount <= 0:
        return _refuse(state, 'invalidBet')
    if action.amount > state.balance:
        return _refuse(state, 'insufficientBalance')
    return replace(state, current_bet=action.amount, message='betPlaced')


def _clear_bet(state: GameState, action: ClearBet) -> GameState:
    if state.phase != Phase.BETTING:
        return _refuse(state, predicates.NOT_ALLOWED)
    return replace(state, current_bet=0, message='placeBet')


def _deal(state: GameState, action: DealInitialCards) -> GameState:
    if state.phase != Phase.BETTING:
        return _refuse(state, predicates.NOT_ALLOWED)
    if state.current_bet <= 0:
        return _refuse(state, 'placeBetFirst')
    if state.current_bet > state.balance:
        return _refuse(state, 'insufficientBalance')

    cards = tuple(action.player_cards)
    dealer = tuple(action.dealer_cards)
    natural = is_blackjack(cards)
    hand = PlayerHand(
        cards=cards,
        bet=state.current_bet,
        status=HandStatus.BLACKJACK if natural else HandStatus.ACTIVE,
    )

    stats = state.statistics
    stats = replace(
        stats,
        total_wagered=stats.total_wagered + state.current_bet,
        pairs=stats.pairs + (1 if can_split(cards) else 0),
        soft_hands=stats.soft_hands + (1 if is_soft(cards) and not can_split(cards) else 0),
        hard_hands=stats.hard_hands + (1 if not is_soft(cards) and not can_split(cards) else 0),
    )

    return replace(
        state,
        phase=Phase.DEALER_TURN if natural else Phase.PLAYER_TURN,
        hands=(hand,),
        active_hand_index=0,
        insurance_bet=0,
        dealer_hand=dealer,
        dealer_value=card_value(dealer[0]),
        dealer_hole_card_hidden=True,
        dealer_standing=False,
        balance=state.balance - state.current_bet,
        last_bet=state.current_bet,
        running_count=_counted(state, cards[0], dealer[0], cards[1]),
        statistics=stats,
        message='blackjack' if natural else 'yourTurn',
        **_shoe_fields(state, action.cards_remaining, action.total_cards),
    )


def _take_insurance(state: GameState, action: TakeInsurance) -> GameState:
    reason = predicates.insurance_block_reason(state)
    if reason is not None:
        return _refuse(state, reason)
    amount = predicates.insurance_amount(state)
    stats = state.statistics
    return replace(
        state,
        insurance_bet=amount,
        balance=state.balance - amount,
        statistics=replace(
            stats,
            insurance_taken=stats.insurance_taken + 1,
            total_wagered=stats.total_wagered + amount,
        ),
        message='insuranceTaken',
    )


def _decline_insurance(state: GameState, action: DeclineInsurance) -> GameState:
    if not predicates.insurance_offered(state):
        return _refuse(state, 'insuranceUnavailable')
    return replace(state, insurance_bet=-1, message='insuranceDeclined')


# ─── Player actions ───────────────────────────────────────────────────────────

def _hit(state: GameState, action: HitCard) -> GameState:
    reason = predicates.hit_block_reason(state)
    if reason is not None:
        return _refuse(state, reason)

    index = state.active_hand_index
    current = state.hands[index]
    cards = current.cards + (action.card,)
    busted = calculate_value(cards) > 21
    hand = replace(current, cards=cards, status=HandStatus.BUST if busted else HandStatus.ACTIVE)
    hands = _replace_hand(state.hands, index, hand)

    if busted:
        turn = _next_turn(hands, index + 1, index)
    else:
        turn = {'phase': Phase.PLAYER_TURN, 'active_hand_index': index}

    return replace(
        state,
        hands=hands,
        running_count=_counted(state, action.card),
        message=_turn_message(turn, busted),
        **turn,
        **_shoe_fields(state, action.cards_remaining, action.total_cards),
    )


def _stand(state: GameState, action: Stand) -> GameState:
    if not predicates.can_stand(state):
        return _refuse(state, predicates.NOT_ALLOWED)
    index = state.active_hand_index
    hands = _replace_hand(state.hands, index, replace(state.hands[index], status=HandStatus.STAND))
    turn = _next_turn(hands, index + 1, index)
    return replace(state, hands=hands, message=_turn_message(turn), **turn)


def _double_down(state: GameState, action: DoubleDownCard) -> GameState:
    reason = predicates.double_block_reason(state)
    if reason is not None:
        return _refuse(state, reason)

    index = state.active_hand_index
    current = state.hands[index]
    cards = current.cards + (action.card,)
    busted = calculate_value(cards) > 21
    hand = replace(
        current,
        cards=cards,
        bet=current.bet * 2,
        doubled=True,
        status=HandStatus.BUST if busted else HandStatus.STAND,
    )
    hands = _replace_hand(state.hands, index, hand)
    turn = _next_turn(hands, index + 1, index)

    stats = state.statistics
    return replace(
        state,
        hands=hands,
        balance=state.balance - current.bet,
        running_count=_counted(state, action.card),
        statistics=replace(
            stats,
            double_downs=stats.double_downs + 1,
            total_wagered=stats.total_wagered + current.bet,
        ),
        message=_turn_message(turn, busted),
        **turn,
        **_shoe_fields(state, action.cards_remaining, action.total_cards),
    )


def _split(state: GameState, action: SplitCards) -> GameState:
    reason = predicates.split_block_reason(state)
    if reason is not None:
        return _refuse(state, reason)

    index = state.active_hand_index
    original = state.hands[index]
    # Split Aces take exactly one card each unless the table allows hitting them.
    locked = is_ace(original.cards[0]) and not state.rules.can_hit_split_aces
    status = HandStatus.STAND if locked else HandStatus.ACTIVE

    new_hands = tuple(
        replace(
            original,
            cards=(kept, drawn),
            status=status,
            is_split=True,
            split_count=original.split_count + 1,
            hand_id=f"{original.hand_id}-{n}",
        )
        for n, (kept, drawn) in enumerate(zip(original.cards, action.new_cards), start=1)
    )
    hands = _replace_hand(state.hands, index, *new_hands)
    turn = _next_turn(hands, index, index)

    stats = state.statistics
    return replace(
        state,
        hands=hands,
        balance=state.balance - original.bet,
        running_count=_counted(state, *action.new_cards),
        statistics=replace(
            stats,
            splits_made=stats.splits_made + 1,
            total_wagered=stats.total_wagered + original.bet,
        ),
        message='splitPlayFirstHand' if turn['phase'] == Phase.PLAYER_TURN else 'dealerTurn',
        **turn,
        **_shoe_fields(state, action.cards_remaining, action.total_cards),
    )


def _surrender(state: GameState, action: Surrender) -> GameState:
    reason = predicates.surrender_block_reason(state)
    if reason is not None:
        return _refuse(state, reason)
    index = state.active_hand_index
    hands = _replace_hand(state.hands, index, replace(state.hands[index], status=HandStatus.SURRENDER))
    stats = state.statistics
    return replace(
        state,
        hands=hands,
        phase=Phase.DEALER_TURN,
        statistics=replace(stats, surrenders=stats.surrenders + 1),
        message='surrendered',
    )


# ─── Dealer ───────────────────────────────────────────────────────────────────

def _reveal_hole_card(state: GameState, action: DealerRevealHoleCard) -> GameState:
    if state.phase != Phase.DEALER_TURN or not state.dealer_hole_card_hidden:
        return _refuse(state, predicates.NOT_ALLOWED)
    return replace(
        state,
        dealer_hole_card_hidden=False,
        dealer_value=calculate_value(state.dealer_hand),
        running_count=_counted(state, state.dealer_hand[1]),
        message='dealerRevealsHoleCard',
    )


def _dealer_hit(state: GameState, action: DealerHitCard) -> GameState:
    if state.phase != Phase.DEALER_TURN or state.dealer_hole_card_hidden or state.dealer_standing:
        return _refuse(state, predicates.NOT_ALLOWED)
    dealer = state.dealer_hand + (action.card,)
    value = calculate_value(dealer)
    return replace(
        state,
        dealer_hand=dealer,
        dealer_value=value,
        running_count=_counted(state, action.card),
        message='dealerBusts' if value > 21 else 'dealerHits',
        **_shoe_fields(state, action.cards_remaining, action.total_cards),
    )


def _dealer_stand(state: GameState, action: DealerStand) -> GameState:
    if state.phase != Phase.DEALER_TURN or state.dealer_hole_card_hidden:
        return _refuse(state, predicates.NOT_ALLOWED)
    return replace(state, dealer_standing=True, message='dealerStands')


# ─── Settlement ───────────────────────────────────────────────────────────────

def _resolve(state: GameState, action: ResolveHands) -> GameState:
    if state.phase == Phase.RESOLUTION and state.hands and state.hands[0].result is not None:
        logger.warning("ResolveHands received for an already resolved round; ignoring")
        return state
    if state.phase != Phase.DEALER_TURN or not state.hands:
        return _refuse(state, predicates.NOT_ALLOWED)

    dealer_value = calculate_value(state.dealer_hand)
    dealer_blackjack = is_blackjack(state.dealer_hand)

    won = lost = pushed = blackjacks = busts = 0
    total_payout = 0
    resolved = []
    for hand in state.hands:
        outcome = calculate_payout(hand, dealer_value, dealer_blackjack, state.rules)
        total_payout += outcome.payout
        if outcome.result == HandResult.WIN:
            won += 1
        elif outcome.result == HandResult.BLACKJACK:
            won += 1
            blackjacks += 1
        elif outcome.result == HandResult.BUST:
            lost += 1
            busts += 1
        elif outcome.result in (HandResult.LOSE, HandResult.SURRENDER):
            lost += 1
        else:
            pushed += 1
        resolved.append(replace(hand, result=outcome.result, payout=outcome.payout))

    total_payout += calculate_insurance_payout(state.insurance_bet, dealer_blackjack)

    balance = state.balance + total_payout
    stats = state.statistics
    hand_number = stats.hands_played + 1

    snapshot = BalanceSnapshot(balance=balance, timestamp=action.timestamp, hand_number=hand_number)
    completed = tuple(
        CompletedHand(
            hand_number=hand_number,
            hand_id=h.hand_id,
            cards=h.cards,
            dealer_cards=state.dealer_hand,
            bet=h.bet,
            result=h.result,
            payout=h.payout,
            timestamp=action.timestamp,
        )
        for h in resolved
    )

    logger.debug(
        "Resolved round %d: dealer %d, payout %d, balance %d -> %d",
        hand_number, dealer_value, total_payout, state.balance, balance,
    )

    return replace(
        state,
        phase=Phase.RESOLUTION,
        hands=tuple(resolved),
        balance=balance,
        dealer_value=dealer_value,
        dealer_hole_card_hidden=False,
        balance_history=(state.balance_history + (snapshot,))[-BALANCE_HISTORY_LIMIT:],
        hand_history=(state.hand_history + completed)[-HAND_HISTORY_LIMIT:],
        statistics=replace(
            stats,
            hands_played=hand_number,
            hands_won=stats.hands_won + won,
            hands_lost=stats.hands_lost + lost,
            hands_pushed=stats.hands_pushed + pushed,
            blackjacks=stats.blackjacks + blackjacks,
            busts=stats.busts + busts,
            total_won=stats.total_won + total_payout,
            current_balance=balance,
            net_profit=balance - stats.starting_balance,
        ),
        message='roundComplete',
    )


def _complete_round(state: GameState, action: CompleteRound) -> GameState:
    if state.phase != Phase.RESOLUTION:
        return _refuse(state, predicates.NOT_ALLOWED)
    exhausted = state.balance <= 0
    return replace(
        state,
        phase=Phase.GAME_OVER if exhausted else Phase.BETTING,
        hands=(),
        dealer_hand=(),
        dealer_value=0,
        dealer_hole_card_hidden=False,
        dealer_standing=False,
        current_bet=state.last_bet,
        active_hand_index=0,
        insurance_bet=0,
        message='gameOver' if exhausted else 'placeNextBet',
    )


# ─── Count, shoe and display ──────────────────────────────────────────────────

def _reset_count(state: GameState, action: ResetCount) -> GameState:
    return replace(state, running_count=0)


def _shuffle_shoe(state: GameState, action: ShuffleShoe) -> GameState:
    return replace(
        state,
        cards_remaining=state.total_cards,
        penetration_reached=False,
        running_count=0,
        message='shoeShuffled',
    )


def _update_shoe_state(state: GameState, action: UpdateShoeState) -> GameState:
    return replace(state, **_shoe_fields(state, action.cards_remaining, action.total_cards))


def _toggle_strategy_hint(state: GameState, action: ToggleStrategyHint) -> GameState:
    return replace(state, show_strategy_hint=not state.show_strategy_hint)


def _toggle_count_display(state: GameState, action: ToggleCountDisplay) -> GameState:
    return replace(state, show_count_display=not state.show_count_display)


def _toggle_stats_panel(state: GameState, action: ToggleStatsPanel) -> GameState:
    return replace(state, show_stats_panel=not state.show_stats_panel)


def _set_message(state: GameState, action: SetMessage) -> GameState:
    return replace(state, message=action.message)


# ─── Dispatch ─────────────────────────────────────────────────────────────────

_HANDLERS: dict[type, Callable[[GameState, GameAction], GameState]] = {
    SetRules: _set_rules,
    ResetGame: _reset_game,
    SetCountingSystem: _set_counting_system,
    PlaceBet: _place_bet,
    ClearBet: _clear_bet,
    DealInitialCards: _deal,
    TakeInsurance: _take_insurance,
    DeclineInsurance: _decline_insurance,
    HitCard: _hit,
    Stand: _stand,
    DoubleDownCard: _double_down,
    SplitCards: _split,
    Surrender: _surrender,
    DealerRevealHoleCard: _reveal_hole_card,
    DealerHitCard: _dealer_hit,
    DealerStand: _dealer_stand,
    ResolveHands: _resolve,
    CompleteRound: _complete_round,
    ResetCount: _reset_count,
    ShuffleShoe: _shuffle_shoe,
    UpdateShoeState: _update_shoe_state,
    ToggleStrategyHint: _toggle_strategy_hint,
    ToggleCountDisplay: _toggle_count_display,
    ToggleStatsPanel: _toggle_stats_panel,
    SetMessage: _set_message,
}

_unhandled = set(ACTION_TYPES) - set(_HANDLERS)
if _unhandled:
    raise TypeError(f"Reducer has no handler for: {sorted(t.__name__ for t in _unhandled)}")


def reduce(state: GameState, action: GameAction) -> GameState:
    """Apply one action and return the next state.

    Raises:
        TypeError: If ``action`` is not one of the action dataclasses.
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown action type: {type(action).__name__}")
    return handler(state, action)
