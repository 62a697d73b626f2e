"""
Player actions as values, applied with copy-on-write.

The engine functions mutate a GameState in place. ``apply_action`` wraps them
so the transport layer can submit an action and receive a new state, keeping
its stored state untouched when the action is rejected.
"""

import random
from dataclasses import dataclass
from typing import Optional, Union

from courtpiece.game.driver import forfeit, play_random_card
from courtpiece.game.engine import play_card, reveal_trump, set_trump
from courtpiece.game.state import GameState


@dataclass(frozen=True)
class SetTrump:
    card_id: str
    player_id: Optional[str] = None


@dataclass(frozen=True)
class RevealTrump:
    player_id: Optional[str] = None


@dataclass(frozen=True)
class PlayCard:
    player_id: str
    card_id: str


@dataclass(frozen=True)
class PlayRandomCard:
    """Timeout fallback: a random legal card for the player on turn."""

    player_id: str


@dataclass(frozen=True)
class Forfeit:
    player_id: str


Action = Union[SetTrump, RevealTrump, PlayCard, PlayRandomCard, Forfeit]


def apply_action(
    state: GameState,
    action: Action,
    in_place: bool = False,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Apply one action to a game.

    Args:
        state: Current game
        action: Action to apply
        in_place: Mutate ``state`` directly instead of a deep copy
        rng: Random source for PlayRandomCard

    Returns:
        The updated state (``state`` itself when in_place is True)

    Raises:
        CourtPieceException: If the engine rejects the action
        TypeError: If the action type is unknown
    """
    target = state if in_place else state.copy()

    if isinstance(action, SetTrump):
        return set_trump(target, action.card_id, action.player_id)
    if isinstance(action, RevealTrump):
        return reveal_trump(target, action.player_id)
    if isinstance(action, PlayCard):
        return play_card(target, action.player_id, action.card_id)
    if isinstance(action, PlayRandomCard):
        return play_random_card(target, action.player_id, rng)
    if isinstance(action, Forfeit):
        return forfeit(target, action.player_id)

    raise TypeError(f"Unknown action: {action!r}")
