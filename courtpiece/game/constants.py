"""
Game constants for Court Piece (Dehla Pakad).

This module defines the card universe, seating and partnership layout,
dealing batches, and the phase names used by the game engine.
"""

from typing import Dict, List, Tuple

# Card definitions
SUITS = ['spades', 'hearts', 'diamonds', 'clubs']
SUIT_SYMBOLS = {
    'spades': '♠',
    'hearts': '♥',
    'diamonds': '♦',
    'clubs': '♣',
}

RANKS = ['2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A']
RANK_VALUES = {rank: idx for idx, rank in enumerate(RANKS, start=2)}

# The scoring currency: whoever captures more tens wins
TEN_RANK = '10'
TOTAL_TENS = 4

# Table layout
NUM_PLAYERS = 4
DECK_SIZE = 52
HAND_SIZE = 13
TOTAL_TRICKS = 13

# Deal split: the trump caller picks the hidden trump from the first batch
FIRST_BATCH_SIZE = 5
SECOND_BATCH_SIZE = 8

# Partnerships are fixed by seat: opposite seats play together
TEAM1 = 'team1'
TEAM2 = 'team2'
TEAM_KEYS: Tuple[str, str] = (TEAM1, TEAM2)
TEAM_SEATS: Dict[str, List[int]] = {
    TEAM1: [0, 2],
    TEAM2: [1, 3],
}

# Game phases (linear, a rematch starts a fresh game)
STATUS_DEALING = 'dealing'
STATUS_CALLING_TRUMP = 'calling_trump'
STATUS_PLAYING = 'playing'
STATUS_FINISHED = 'finished'
GAME_STATUSES = [
    STATUS_DEALING,
    STATUS_CALLING_TRUMP,
    STATUS_PLAYING,
    STATUS_FINISHED,
]

# Placeholder values for cards a viewer is not allowed to see
HIDDEN_CARD_ID = 'hidden'
UNKNOWN = 'unknown'
