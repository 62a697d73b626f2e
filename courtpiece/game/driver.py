"""
Fallback moves for the turn clock and player forfeits.

The turn timer itself lives with the transport layer; when a player fails to
act in time it calls ``play_random_card`` for them. ``forfeit`` ends the match
in favour of the other partnership.
"""

import logging
import random
from typing import Optional

from courtpiece.game.constants import STATUS_FINISHED, STATUS_PLAYING
from courtpiece.game.engine import get_legal_cards, play_card, reveal_trump
from courtpiece.game.state import GameState, InvalidPhaseException

logger = logging.getLogger(__name__)


def play_random_card(
    state: GameState, player_id: str, rng: Optional[random.Random] = None
) -> GameState:
    """
    Play a uniformly random legal card on behalf of a player.

    Returns the state unchanged if the game is not being played, it is not
    the player's turn, or the player has no cards. When the only card left
    is the concealed trump, the trump is revealed first so it can be played.

    Args:
        state: Current game
        player_id: Player whose turn timed out
        rng: Random source for the pick

    Returns:
        The updated state
    """
    if state.status != STATUS_PLAYING or state.current_turn != player_id:
        return state

    hand = state.hands.get(player_id, [])
    if not hand:
        return state

    rng = rng or random
    legal_cards = get_legal_cards(state, player_id)
    if not legal_cards:
        # Only the concealed trump remains
        reveal_trump(state, player_id)
        legal_cards = get_legal_cards(state, player_id)

    card = rng.choice(legal_cards)
    logger.warning(
        f"Room {state.room_id}: auto-playing {card} for {player_id}"
    )
    return play_card(state, player_id, card.id)


def forfeit(state: GameState, player_id: str) -> GameState:
    """
    End the match immediately; the forfeiting player's opponents win.

    Raises:
        InvalidPhaseException: Unless the game is in the 'playing' phase
        UnknownPlayerException: If the player is not seated at this table
    """
    if state.status != STATUS_PLAYING:
        raise InvalidPhaseException("forfeit", state.status)

    losing_team = state.team_of(player_id)
    state.winner = state.opposing_team(losing_team)
    state.status = STATUS_FINISHED
    state.forfeited_by = player_id
    state.logs.append(f"{player_id} forfeited. Winner: {state.winner}")

    logger.warning(
        f"Room {state.room_id}: {player_id} forfeited, {state.winner} wins"
    )
    return state
