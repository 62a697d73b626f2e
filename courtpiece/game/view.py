"""
Per-player projection of the game state.

Builds the redacted view each player receives on broadcast. Hidden
information never leaves the server:

    - other players' hands become HiddenCard placeholders
    - during trump calling only the first dealt batch is shown, to everyone
    - the trump suit and card stay hidden from everyone but the caller
      until revealed
    - the opposing team's captured cards become placeholders

Cards already on the table are public. The view is built from immutable
values, so nothing in it aliases the canonical state.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from courtpiece.game.cards import Card
from courtpiece.game.constants import (
    FIRST_BATCH_SIZE,
    HIDDEN_CARD_ID,
    STATUS_CALLING_TRUMP,
    TEAM_KEYS,
    UNKNOWN,
)
from courtpiece.game.state import GameState, PlayedCard


@dataclass(frozen=True)
class VisibleCard:
    """A card whose identity the viewer may see."""

    id: str
    suit: str
    rank: str

    @classmethod
    def of(cls, card: Card) -> "VisibleCard":
        return cls(id=card.id, suit=card.suit, rank=card.rank)

    def to_dict(self) -> dict:
        return {"id": self.id, "suit": self.suit, "rank": self.rank}


@dataclass(frozen=True)
class HiddenCard:
    """Card back: carries no id, suit or rank."""

    def to_dict(self) -> dict:
        return {"id": HIDDEN_CARD_ID, "suit": UNKNOWN, "rank": UNKNOWN}


CardView = Union[VisibleCard, HiddenCard]


@dataclass(frozen=True)
class PlayedCardView:
    player_id: str
    card: VisibleCard

    @classmethod
    def of(cls, played: PlayedCard) -> "PlayedCardView":
        return cls(player_id=played.player_id, card=VisibleCard.of(played.card))

    def to_dict(self) -> dict:
        return {"playerId": self.player_id, "card": self.card.to_dict()}


@dataclass(frozen=True)
class TeamView:
    players: Tuple[str, ...]
    tricks_won: int
    tens_collected: int
    won_cards: Tuple[CardView, ...]

    def to_dict(self) -> dict:
        return {
            "players": list(self.players),
            "tricksWon": self.tricks_won,
            "tensCollected": self.tens_collected,
            "wonCards": [card.to_dict() for card in self.won_cards],
        }


@dataclass(frozen=True)
class PlayerView:
    """
    What one player is allowed to know about the game.

    Mirrors GameState field for field, with hidden cards replaced by
    HiddenCard and the trump fields nulled where they are secret.
    """

    viewer_id: str
    room_id: str
    players: Tuple[str, ...]
    hands: Dict[str, Tuple[CardView, ...]]
    current_trick: Tuple[PlayedCardView, ...]
    trump_suit: Optional[str]
    hidden_trump_card: Optional[VisibleCard]
    is_trump_revealed: bool
    trump_caller_id: str
    trump_revealer_id: Optional[str]
    current_turn: str
    teams: Dict[str, TeamView]
    status: str
    winner: Optional[str]
    logs: Tuple[str, ...]
    last_trick_winner: Optional[str]
    last_trick_cards: Optional[Tuple[PlayedCardView, ...]]
    forfeited_by: Optional[str]

    def hand_size(self, player_id: str) -> int:
        return len(self.hands[player_id])

    def to_dict(self) -> dict:
        """JSON-ready payload for the transport layer."""
        return {
            "viewerId": self.viewer_id,
            "roomId": self.room_id,
            "players": list(self.players),
            "hands": {
                pid: [card.to_dict() for card in cards]
                for pid, cards in self.hands.items()
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
            "teams": {key: team.to_dict() for key, team in self.teams.items()},
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


def project_for_player(
    state: GameState, player_id: str, hide_second_batch: bool = True
) -> PlayerView:
    """
    Build the redacted view of ``state`` for one player.

    Args:
        state: Canonical game state (not modified)
        player_id: Viewer
        hide_second_batch: While trump is being called, show only the first
            dealt batch of every hand, the viewer's own included

    Returns:
        PlayerView safe to send to ``player_id``

    Raises:
        UnknownPlayerException: If the viewer is not seated at this table
    """
    my_team = state.team_of(player_id)
    other_team = state.opposing_team(my_team)

    hands: Dict[str, Tuple[CardView, ...]] = {}
    for pid in state.players:
        cards = state.hands.get(pid, [])
        if hide_second_batch and state.status == STATUS_CALLING_TRUMP:
            cards = cards[:FIRST_BATCH_SIZE]
        if pid == player_id:
            hands[pid] = tuple(VisibleCard.of(card) for card in cards)
        else:
            hands[pid] = tuple(HiddenCard() for _ in cards)

    trump_visible = state.is_trump_revealed or player_id == state.trump_caller_id
    trump_suit = state.trump_suit if trump_visible else None
    hidden_trump_card = None
    if trump_visible and state.hidden_trump_card is not None:
        hidden_trump_card = VisibleCard.of(state.hidden_trump_card)

    teams: Dict[str, TeamView] = {}
    for key in TEAM_KEYS:
        team = state.teams[key]
        if key == other_team:
            won_cards: Tuple[CardView, ...] = tuple(HiddenCard() for _ in team.won_cards)
        else:
            won_cards = tuple(VisibleCard.of(card) for card in team.won_cards)
        teams[key] = TeamView(
            players=tuple(team.players),
            tricks_won=team.tricks_won,
            tens_collected=team.tens_collected,
            won_cards=won_cards,
        )

    last_trick_cards = None
    if state.last_trick_cards is not None:
        last_trick_cards = tuple(PlayedCardView.of(p) for p in state.last_trick_cards)

    return PlayerView(
        viewer_id=player_id,
        room_id=state.room_id,
        players=tuple(state.players),
        hands=hands,
        current_trick=tuple(PlayedCardView.of(p) for p in state.current_trick),
        trump_suit=trump_suit,
        hidden_trump_card=hidden_trump_card,
        is_trump_revealed=state.is_trump_revealed,
        trump_caller_id=state.trump_caller_id,
        trump_revealer_id=state.trump_revealer_id,
        current_turn=state.current_turn,
        teams=teams,
        status=state.status,
        winner=state.winner,
        logs=tuple(state.logs),
        last_trick_winner=state.last_trick_winner,
        last_trick_cards=last_trick_cards,
        forfeited_by=state.forfeited_by,
    )
