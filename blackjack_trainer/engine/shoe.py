"""
Multi-deck shoe with penetration-based reshuffle trigger.

The shoe is a numpy int8 array holding every card encoding deck_count times.
A single cursor splits it in two:

    cards[:remaining]  -> undealt cards; the next card dealt is cards[remaining - 1]
    cards[remaining:]  -> dealt buffer (most recently dealt first)

so ``cards_remaining() + len(dealt_cards()) == total_cards`` holds by
construction. Shuffles are Fisher-Yates driven by ``secrets.randbelow``; an
alternative index source can be injected for reproducible simulations.
"""

from __future__ import annotations

import secrets
from typing import Callable, Iterable

import numpy as np

from .cards import CARDS_PER_DECK, card_to_str

# randbelow(n) -> uniformly random int in [0, n)
IndexSource = Callable[[int], int]


class ShoeEmptyError(ValueError):
    """Raised when dealing from a shoe with no cards left."""


class Shoe:
    """A shuffled multi-deck draw source.

    Args:
        deck_count:  Number of 52-card decks (1–8).
        penetration: Fraction of the shoe dealt before a reshuffle is due.
        randbelow:   Random index source for the shuffle. Defaults to the
                     cryptographically sourced ``secrets.randbelow``.

    Examples:
        >>> shoe = Shoe(deck_count=6, penetration=0.75)
        >>> shoe.total_cards
        312
        >>> card = shoe.deal()
        >>> shoe.cards_remaining()
        311
    """

    def __init__(
        self,
        deck_count: int = 6,
        penetration: float = 0.75,
        randbelow: IndexSource = secrets.randbelow,
    ) -> None:
        if deck_count < 1:
            raise ValueError(f"deck_count must be positive, got {deck_count}")
        self.deck_count = deck_count
        self.penetration = penetration
        self._randbelow = randbelow
        self._cards = np.tile(np.arange(CARDS_PER_DECK, dtype=np.int8), deck_count)
        self._remaining = len(self._cards)
        self.shuffle()

    # ─── Construction helpers ─────────────────────────────────────────────────

    @classmethod
    def stacked(
        cls,
        draws: Iterable[int],
        deck_count: int = 1,
        penetration: float = 0.75,
        randbelow: IndexSource = secrets.randbelow,
    ) -> Shoe:
        """Build a shoe whose next draws are exactly ``draws``, in order.

        The remaining cards stay shuffled underneath. Used for deterministic
        test setups.

        Raises:
            ValueError: If a requested card is not available in the shoe.

        Examples:
            >>> shoe = Shoe.stacked([str_to_card('AS'), str_to_card('KH')])
            >>> card_to_str(shoe.deal()), card_to_str(shoe.deal())
            ('AS', 'KH')
        """
        draws = list(draws)
        shoe = cls(deck_count, penetration, randbelow)
        rest = [int(c) for c in shoe._cards]
        for card in draws:
            try:
                rest.remove(card)
            except ValueError:
                raise ValueError(
                    f"Card {card_to_str(card)} is not available in a {deck_count}-deck shoe."
                ) from None
        shoe._cards = np.array(rest + draws[::-1], dtype=np.int8)
        return shoe

    # ─── Core operations ──────────────────────────────────────────────────────

    def shuffle(self) -> None:
        """Fisher-Yates shuffle of the undealt portion of the shoe."""
        cards = self._cards
        for i in range(self._remaining - 1, 0, -1):
            j = self._randbelow(i + 1)
            cards[i], cards[j] = cards[j], cards[i]

    def deal(self) -> int:
        """Deal the next card.

        Raises:
            ShoeEmptyError: If no cards remain. Table restocks from the
                discards before this can happen in play.
        """
        if self._remaining == 0:
            raise ShoeEmptyError("Cannot deal from an empty shoe.")
        self._remaining -= 1
        return int(self._cards[self._remaining])

    def should_reshuffle(self) -> bool:
        dealt = len(self._cards) - self._remaining
        return dealt / len(self._cards) >= self.penetration

    def reset(self) -> None:
        """Return the dealt cards to the shoe and reshuffle everything."""
        self._remaining = len(self._cards)
        self.shuffle()

    def restock(self, in_play: Iterable[int]) -> None:
        """Return every dealt card except ``in_play`` to the shoe and shuffle.

        Used when the shoe runs dry mid-round: the cards still on the table
        stay out, the discards go back in.

        Raises:
            ValueError: If ``in_play`` holds a card the shoe does not contain.
        """
        held = [int(c) for c in in_play]
        rest = [int(c) for c in np.tile(np.arange(CARDS_PER_DECK, dtype=np.int8), self.deck_count)]
        for card in held:
            try:
                rest.remove(card)
            except ValueError:
                raise ValueError(f"Card {card_to_str(card)} is not part of this shoe.") from None
        self._cards = np.array(rest + held[::-1], dtype=np.int8)
        self._remaining = len(rest)
        self.shuffle()

    # ─── Counters ─────────────────────────────────────────────────────────────

    @property
    def total_cards(self) -> int:
        return len(self._cards)

    def cards_remaining(self) -> int:
        return self._remaining

    def dealt_cards(self) -> tuple[int, ...]:
        """Cards dealt since the last reset, in deal order."""
        return tuple(int(c) for c in self._cards[self._remaining:][::-1])

    @property
    def randbelow(self) -> IndexSource:
        return self._randbelow

    def decks_remaining(self) -> float:
        return self._remaining / CARDS_PER_DECK
