"""
Court Piece Game Engine Package.

This package contains the core game logic for Court Piece (Dehla Pakad),
including the deck, game state, trick engine, fallback driver and the
per-player view filter.
"""

from courtpiece.game.constants import (
    SUITS,
    RANKS,
    RANK_VALUES,
    NUM_PLAYERS,
    DECK_SIZE,
    TOTAL_TRICKS,
    TEAM1,
    TEAM2,
    STATUS_DEALING,
    STATUS_CALLING_TRUMP,
    STATUS_PLAYING,
    STATUS_FINISHED,
)
from courtpiece.game.cards import Card, Deck, create_deck, shuffle_deck
from courtpiece.game.state import (
    CourtPieceException,
    InvalidPlayerCountException,
    InvalidPhaseException,
    NotYourTurnException,
    CardNotInHandException,
    TrumpNotRevealedException,
    MustFollowSuitException,
    UnknownPlayerException,
    GameStateException,
    IllegalPlayException,
    PlayedCard,
    TeamState,
    GameState,
    check_invariants,
)
from courtpiece.game.engine import (
    initialize_game,
    set_trump,
    reveal_trump,
    play_card,
    resolve_trick,
    get_legal_cards,
)
from courtpiece.game.driver import play_random_card, forfeit
from courtpiece.game.actions import (
    SetTrump,
    RevealTrump,
    PlayCard,
    PlayRandomCard,
    Forfeit,
    apply_action,
)
from courtpiece.game.view import HiddenCard, VisibleCard, PlayerView, project_for_player

__all__ = [
    "SUITS",
    "RANKS",
    "RANK_VALUES",
    "NUM_PLAYERS",
    "DECK_SIZE",
    "TOTAL_TRICKS",
    "TEAM1",
    "TEAM2",
    "STATUS_DEALING",
    "STATUS_CALLING_TRUMP",
    "STATUS_PLAYING",
    "STATUS_FINISHED",
    "Card",
    "Deck",
    "create_deck",
    "shuffle_deck",
    "CourtPieceException",
    "InvalidPlayerCountException",
    "InvalidPhaseException",
    "NotYourTurnException",
    "CardNotInHandException",
    "TrumpNotRevealedException",
    "MustFollowSuitException",
    "UnknownPlayerException",
    "GameStateException",
    "IllegalPlayException",
    "PlayedCard",
    "TeamState",
    "GameState",
    "check_invariants",
    "initialize_game",
    "set_trump",
    "reveal_trump",
    "play_card",
    "resolve_trick",
    "get_legal_cards",
    "play_random_card",
    "forfeit",
    "SetTrump",
    "RevealTrump",
    "PlayCard",
    "PlayRandomCard",
    "Forfeit",
    "apply_action",
    "HiddenCard",
    "VisibleCard",
    "PlayerView",
    "project_for_player",
]
