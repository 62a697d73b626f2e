"""
Match registry: the room -> GameState store owned by the transport layer.

Replaces ambient global maps with one explicit component. Matches are
inserted when a room starts a game and removed when the room empties.
Every mutation of a room goes through ``apply`` under that room's lock, so
a timeout firing at the same moment as a player's move is serialized.
Rooms are independent and can be driven from different threads.
"""

import logging
import random
import threading
from typing import Dict, List, Optional, Sequence

from courtpiece.config import GameConfig
from courtpiece.game.actions import Action, PlayRandomCard, apply_action
from courtpiece.game.engine import initialize_game
from courtpiece.game.state import CourtPieceException, GameState
from courtpiece.game.view import PlayerView, project_for_player

logger = logging.getLogger(__name__)


class UnknownRoomException(CourtPieceException):
    """Raised when no match is registered for a room."""

    pass


class MatchRegistry:
    """
    Keyed store of active matches with per-room serialization.

    Attributes:
        config: Match configuration (turn timeout, view policy)
    """

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or GameConfig()
        self._rng = rng
        self._games: Dict[str, GameState] = {}
        self._room_locks: Dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    def _room_lock(self, room_id: str) -> threading.RLock:
        with self._lock:
            if room_id not in self._games:
                raise UnknownRoomException(f"No match registered for room {room_id}")
            return self._room_locks[room_id]

    def create_match(
        self,
        room_id: str,
        player_ids: Sequence[str],
        previous_winner_team: Optional[str] = None,
    ) -> GameState:
        """
        Deal a new match for a room, replacing any previous one.

        Raises:
            InvalidPlayerCountException: Unless exactly four distinct players
        """
        with self._lock:
            room_lock = self._room_locks.setdefault(room_id, threading.RLock())

        # Waits for any action still running on the room's previous match
        with room_lock:
            try:
                state = initialize_game(
                    room_id, player_ids, previous_winner_team, self._rng
                )
            except (CourtPieceException, ValueError):
                with self._lock:
                    if room_id not in self._games:
                        self._room_locks.pop(room_id, None)
                raise
            with self._lock:
                self._games[room_id] = state
                self._room_locks.setdefault(room_id, room_lock)
        logger.info(f"Room {room_id}: match created for {list(player_ids)}")
        return state

    def rematch(self, room_id: str) -> GameState:
        """
        Start the next game with the same players.

        The previous winners keep the trump call.
        """
        with self._room_lock(room_id):
            previous = self.get(room_id)
            return self.create_match(room_id, previous.players, previous.winner)

    def get(self, room_id: str) -> GameState:
        with self._lock:
            try:
                return self._games[room_id]
            except KeyError:
                raise UnknownRoomException(
                    f"No match registered for room {room_id}"
                ) from None

    def remove(self, room_id: str) -> None:
        """Drop a room's match (last player left). Unknown rooms are ignored."""
        with self._lock:
            self._games.pop(room_id, None)
            self._room_locks.pop(room_id, None)
        logger.info(f"Room {room_id}: match removed")

    def room_ids(self) -> List[str]:
        with self._lock:
            return list(self._games)

    def __contains__(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._games

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def apply(self, room_id: str, action: Action) -> GameState:
        """
        Apply an action to a room's match.

        The action runs on a copy; the stored state is replaced only when
        the action succeeds and the room still holds the match it ran on.

        Raises:
            UnknownRoomException: If the room has no match
            CourtPieceException: If the engine rejects the action
        """
        with self._room_lock(room_id):
            current = self.get(room_id)
            try:
                updated = apply_action(current, action, rng=self._rng)
            except CourtPieceException as e:
                logger.debug(f"Room {room_id}: rejected {action}: {e}")
                raise
            with self._lock:
                # The room may have been emptied or re-dealt while the action ran
                if self._games.get(room_id) is current:
                    self._games[room_id] = updated
                else:
                    logger.warning(
                        f"Room {room_id}: match replaced during {action}, result dropped"
                    )
            return updated

    def handle_timeout(self, room_id: str) -> GameState:
        """Auto-play for whoever is on turn (called by the turn clock)."""
        with self._room_lock(room_id):
            current = self.get(room_id)
            return self.apply(room_id, PlayRandomCard(current.current_turn))

    def views(self, room_id: str) -> Dict[str, PlayerView]:
        """Redacted view of the room's match for every seated player."""
        state = self.get(room_id)
        hide = self.config.hide_second_batch_during_trump_call
        return {
            pid: project_for_player(state, pid, hide_second_batch=hide)
            for pid in state.players
        }
