"""
Game state model for Court Piece.

This module holds the canonical data structures the engine mutates (hands,
the trick in progress, team tallies, trump, turn, status and the audit log)
together with the exception taxonomy for rejected actions and the card
conservation checks used by tests and the simulator.
"""

import copy
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from courtpiece.game.cards import Card
from courtpiece.game.constants import (
    DECK_SIZE,
    NUM_PLAYERS,
    STATUS_DEALING,
    STATUS_FINISHED,
    TEAM1,
    TEAM2,
    TEAM_KEYS,
    TEN_RANK,
    TOTAL_TENS,
    TOTAL_TRICKS,
)


# ============================================================================
# Custom Exceptions
# ============================================================================


class CourtPieceException(Exception):
    """Base exception for Court Piece game errors."""

    pass


class InvalidPlayerCountException(CourtPieceException):
    """Raised when a game is set up without exactly four distinct players."""

    pass


class InvalidPhaseException(CourtPieceException):
    """Raised when an action is attempted outside the phase that allows it."""

    def __init__(self, action: str, status: str):
        self.action = action
        self.status = status
        super().__init__(f"Cannot {action}: game is in '{status}' phase")


class UnknownPlayerException(CourtPieceException):
    """Raised when a player id is not seated at the table."""

    pass


class GameStateException(CourtPieceException):
    """Raised when the state violates a card conservation invariant."""

    pass


class IllegalPlayException(CourtPieceException):
    """Base for rejected card plays and trump calls."""

    def __init__(self, player_id: str, card_id: Optional[str], reason: str):
        self.player_id = player_id
        self.card_id = card_id
        self.reason = reason
        super().__init__(f"{player_id} cannot play {card_id}: {reason}")


class NotYourTurnException(IllegalPlayException):
    """Raised when the actor is not the player whose turn it is."""

    pass


class CardNotInHandException(IllegalPlayException):
    """Raised when the referenced card id is absent from the actor's hand."""

    pass


class TrumpNotRevealedException(IllegalPlayException):
    """Raised when the concealed trump card is played before the reveal."""

    pass


class MustFollowSuitException(IllegalPlayException):
    """Raised when a player holding the lead suit plays another suit."""

    pass


# ============================================================================
# State Classes
# ============================================================================


@dataclass(frozen=True)
class PlayedCard:
    """A card on the table, tagged with the player who played it."""

    player_id: str
    card: Card

    def to_dict(self) -> dict:
        return {"playerId": self.player_id, "card": self.card.to_dict()}


@dataclass
class TeamState:
    """
    Running tally for one partnership.

    Attributes:
        players: The two seated player ids (opposite seats)
        tricks_won: Tricks captured this game
        tens_collected: Rank-10 cards among the captured cards
        won_cards: Every card captured in the team's tricks
    """

    players: List[str]
    tricks_won: int = 0
    tens_collected: int = 0
    won_cards: List[Card] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "players": list(self.players),
            "tricksWon": self.tricks_won,
            "tensCollected": self.tens_collected,
            "wonCards": [card.to_dict() for card in self.won_cards],
        }


@dataclass
class GameState:
    """
    Canonical state of one match.

    Owned by the transport layer (one per room). The engine functions mutate
    it in place; use ``courtpiece.game.actions.apply_action`` for
    copy-on-write updates.

    Attributes:
        room_id: Room this match belongs to
        players: Four player ids in seat / turn order
        hands: Cards held by each player, in dealing order
        current_trick: Cards played so far in the trick in progress
        trump_suit: Suit of the hidden trump card (None until called)
        hidden_trump_card: The designated trump card, still in the caller's hand
        is_trump_revealed: Whether the trump suit is public
        trump_caller_id: Player who chooses the hidden trump
        trump_revealer_id: Player whose action revealed the trump
        current_turn: Player expected to act next
        teams: Team tallies keyed 'team1' (seats 0, 2) and 'team2' (seats 1, 3)
        status: 'dealing', 'calling_trump', 'playing' or 'finished'
        winner: Winning team key once finished
        logs: Append-only human-readable event log
        last_trick_winner: Winner of the most recently resolved trick
        last_trick_cards: Cards of the most recently resolved trick
        forfeited_by: Player who forfeited the match, if any
    """

    room_id: str
    players: List[str]
    trump_caller_id: str
    current_turn: str
    teams: Dict[str, TeamState]
    hands: Dict[str, List[Card]] = field(default_factory=dict)
    current_trick: List[PlayedCard] = field(default_factory=list)
    trump_suit: Optional[str] = None
    hidden_trump_card: Optional[Card] = None
    is_trump_revealed: bool = False
    trump_revealer_id: Optional[str] = None
    status: str = STATUS_DEALING
    winner: Optional[str] = None
    logs: List[str] = field(default_factory=list)
    last_trick_winner: Optional[str] = None
    last_trick_cards: Optional[List[PlayedCard]] = None
    forfeited_by: Optional[str] = None

    def seat_of(self, player_id: str) -> int:
        """Return the seat index of a player."""
        try:
            return self.players.index(player_id)
        except ValueError:
            raise UnknownPlayerException(
                f"Player {player_id} is not seated in room {self.room_id}"
            ) from None

    def next_player(self, player_id: str) -> str:
        """Return the player seated after ``player_id`` (wraps around)."""
        return self.players[(self.seat_of(player_id) + 1) % NUM_PLAYERS]

    def team_of(self, player_id: str) -> str:
        """Return the team key ('team1' or 'team2') of a player."""
        for key in TEAM_KEYS:
            if player_id in self.teams[key].players:
                return key
        raise UnknownPlayerException(
            f"Player {player_id} is not on a team in room {self.room_id}"
        )

    @staticmethod
    def opposing_team(team_key: str) -> str:
        return TEAM2 if team_key == TEAM1 else TEAM1

    @property
    def lead_suit(self) -> Optional[str]:
        """Suit of the first card in the current trick (None if empty)."""
        if not self.current_trick:
            return None
        return self.current_trick[0].card.suit

    @property
    def is_finished(self) -> bool:
        return self.status == STATUS_FINISHED

    def is_hidden_trump(self, card_id: str) -> bool:
        """True if ``card_id`` is the trump card and it is still concealed."""
        return (
            self.hidden_trump_card is not None
            and not self.is_trump_revealed
            and card_id == self.hidden_trump_card.id
        )

    def total_tricks(self) -> int:
        return sum(team.tricks_won for team in self.teams.values())

    def all_cards(self) -> List[Card]:
        """Every card currently in hands, the trick and the won piles."""
        cards: List[Card] = []
        for player_id in self.players:
            cards.extend(self.hands.get(player_id, []))
        cards.extend(played.card for played in self.current_trick)
        for key in TEAM_KEYS:
            cards.extend(self.teams[key].won_cards)
        return cards

    def copy(self) -> "GameState":
        """Deep copy, so the copy can be mutated without touching this state."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        """
        Serialize the canonical state (all cards visible).

        Only for trusted consumers; players must receive
        ``project_for_player(...).to_dict()`` instead.
        """
        return {
            "roomId": self.room_id,
            "players": list(self.players),
            "hands": {
                pid: [card.to_dict() for card in self.hands.get(pid, [])]
                for pid in self.players
            },
            "currentTrick": [played.to_dict() for played in self.current_trick],
            "trumpSuit": self.trump_suit,
            "hiddenTrumpCard": (
                self.hidden_trump_card.to_dict() if self.hidden_trump_card else None
            ),
            "isTrumpRevealed": self.is_trump_revealed,
            "trumpCallerId": self.trump_caller_id,
            "trumpRevealerId": self.trump_revealer_id,
            "currentTurn": self.current_turn,
            "teams": {key: self.teams[key].to_dict() for key in TEAM_KEYS},
            "status": self.status,
            "winner": self.winner,
            "logs": list(self.logs),
            "lastTrickWinner": self.last_trick_winner,
            "lastTrickCards": (
                [played.to_dict() for played in self.last_trick_cards]
                if self.last_trick_cards is not None
                else None
            ),
            "forfeitedBy": self.forfeited_by,
        }


def check_invariants(state: GameState) -> None:
    """
    Verify card conservation and score accounting.

    Checks that hands, the trick and both won piles together hold all 52
    cards exactly once, that trick and ten tallies are consistent with the
    won piles, and that no more than 13 tricks have been resolved.

    Raises:
        GameStateException: On the first violated invariant
    """
    cards = state.all_cards()
    if state.status != STATUS_DEALING and len(cards) != DECK_SIZE:
        raise GameStateException(
            f"Card conservation violated: {len(cards)} cards in play, "
            f"expected {DECK_SIZE}"
        )

    ids = [card.id for card in cards]
    if len(set(ids)) != len(ids):
        raise GameStateException("Duplicate card ids across hands, trick and piles")

    if state.total_tricks() > TOTAL_TRICKS:
        raise GameStateException(
            f"{state.total_tricks()} tricks resolved, at most {TOTAL_TRICKS} exist"
        )

    total_tens = 0
    for key in TEAM_KEYS:
        team = state.teams[key]
        tens_in_pile = sum(1 for card in team.won_cards if card.rank == TEN_RANK)
        if tens_in_pile != team.tens_collected:
            raise GameStateException(
                f"{key} tallied {team.tens_collected} tens but holds {tens_in_pile}"
            )
        if len(team.won_cards) != team.tricks_won * NUM_PLAYERS:
            raise GameStateException(
                f"{key} won {team.tricks_won} tricks but holds "
                f"{len(team.won_cards)} cards"
            )
        total_tens += team.tens_collected

    if total_tens > TOTAL_TENS:
        raise GameStateException(f"{total_tens} tens collected, only {TOTAL_TENS} exist")

    if len(state.current_trick) >= NUM_PLAYERS:
        raise GameStateException("Unresolved trick holds four or more cards")
