"""
Card universe for Court Piece.

Defines the immutable Card, deck construction with fresh card ids, an
unbiased Fisher-Yates shuffle, and the Deck used to deal hands in batches.
"""

import random
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from courtpiece.game.constants import (
    SUITS,
    RANKS,
    RANK_VALUES,
    SUIT_SYMBOLS,
    TEN_RANK,
)


@dataclass(frozen=True)
class Card:
    """
    Immutable playing card.

    Attributes:
        id: Opaque unique identifier, fresh for every deck
        suit: Card suit (spades, hearts, diamonds, clubs)
        rank: Card rank (2-10, J, Q, K, A)
    """

    suit: str
    rank: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        """Validate card creation."""
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}. Must be one of {SUITS}")
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}. Must be one of {RANKS}")

    @property
    def value(self) -> int:
        """Numeric value for comparison (2=2, J=11, Q=12, K=13, A=14)."""
        return RANK_VALUES[self.rank]

    @property
    def is_ten(self) -> bool:
        return self.rank == TEN_RANK

    def to_dict(self) -> dict:
        return {"id": self.id, "suit": self.suit, "rank": self.rank}

    def __str__(self) -> str:
        """String representation: 'A♠'"""
        return f"{self.rank}{SUIT_SYMBOLS[self.suit]}"

    def __repr__(self) -> str:
        return f"Card('{self.rank}', '{self.suit}', id='{self.id}')"


def create_deck() -> List[Card]:
    """
    Build the 52-card universe, one card per (suit, rank).

    Every call mints new card ids, so cards from two decks never compare equal.
    """
    return [Card(suit, rank) for suit in SUITS for rank in RANKS]


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Shuffle a deck in place with the Fisher-Yates algorithm.

    Walks from the last position down, swapping each card with a uniformly
    chosen card at or before it, so every ordering is equally likely.

    Args:
        deck: Cards to shuffle (modified in place)
        rng: Random source; defaults to the module-level generator

    Returns:
        The same list, shuffled
    """
    rng = rng or random
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randrange(i + 1)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


class Deck:
    """
    Standard 52-card deck with shuffling and batch dealing.

    Attributes:
        cards: Cards still in the deck, top of deck first
    """

    def __init__(self):
        self.cards: List[Card] = []
        self.reset()

    def reset(self) -> None:
        """Replace the deck with a fresh 52-card universe."""
        self.cards = create_deck()

    def shuffle(self, rng: Optional[random.Random] = None) -> None:
        shuffle_deck(self.cards, rng)

    def deal(self, num_cards: int, num_players: int) -> List[List[Card]]:
        """
        Deal a batch of cards to each player.

        Each player receives a contiguous block of ``num_cards`` cards from
        the top of the deck, in seat order.

        Args:
            num_cards: Number of cards each player receives in this batch
            num_players: Number of players receiving cards

        Returns:
            List of hands (each hand is a list of Cards)

        Raises:
            ValueError: If not enough cards remain
        """
        total_needed = num_cards * num_players

        if total_needed > len(self.cards):
            raise ValueError(
                f"Cannot deal {num_cards} cards to {num_players} players "
                f"(need {total_needed}, only {len(self.cards)} available)"
            )

        hands: List[List[Card]] = []
        for _ in range(num_players):
            hand = self.cards[:num_cards]
            del self.cards[:num_cards]
            hands.append(hand)

        return hands

    def remaining_cards(self) -> int:
        """Return number of cards left in deck."""
        return len(self.cards)
