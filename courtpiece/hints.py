"""
Hint collaborator interface.

The hint text itself comes from an external text-generation service, which
is plugged in as a ``provider`` callable. This module owns what goes in and
comes out of that call:

    1. Context gathering: the player's hand, the partner's hand, the trump
       as far as the player may know it, and the player's strong suits
    2. Prompt rendering from that context
    3. Per-player cooldown between requests
    4. A fixed fallback hint when the provider fails
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from courtpiece.game.constants import NUM_PLAYERS
from courtpiece.game.state import CourtPieceException, GameState

logger = logging.getLogger(__name__)

FALLBACK_HINT = "The stars are clouded. No hint is available."
STRONG_SUIT_MIN_CARDS = 4


class HintCooldownException(CourtPieceException):
    """Raised when a player asks for a hint before the cooldown has passed."""

    def __init__(self, player_id: str, retry_after: float):
        self.player_id = player_id
        self.retry_after = retry_after
        super().__init__(
            "The spirits are silent. You must wait before seeking another sign."
        )


@dataclass(frozen=True)
class HintContext:
    """
    Input handed to the hint provider.

    Attributes:
        player_id: Player asking for the hint
        hand: Player's cards, as 'rank of suit' strings
        teammate_hand: Partner's cards, same format
        trump_suit: Trump suit if the player knows it, else None
        is_trump_revealed: Whether the trump is public
        strong_suits: Suits the player holds at least four cards of
    """

    player_id: str
    hand: Tuple[str, ...]
    teammate_hand: Tuple[str, ...]
    trump_suit: Optional[str]
    is_trump_revealed: bool
    strong_suits: Tuple[str, ...]


def build_hint_context(state: GameState, player_id: str) -> HintContext:
    """
    Gather the hint input for a player.

    The trump suit is included only when the player could see it in their
    own view (revealed, or they are the caller).

    Raises:
        UnknownPlayerException: If the player is not seated at this table
    """
    seat = state.seat_of(player_id)
    teammate_id = state.players[(seat + 2) % NUM_PLAYERS]

    hand = state.hands.get(player_id, [])
    teammate_hand = state.hands.get(teammate_id, [])

    suit_counts = Counter(card.suit for card in hand)
    strong_suits = tuple(
        suit for suit, count in suit_counts.items() if count >= STRONG_SUIT_MIN_CARDS
    )

    knows_trump = state.is_trump_revealed or player_id == state.trump_caller_id

    return HintContext(
        player_id=player_id,
        hand=tuple(f"{c.rank} of {c.suit}" for c in hand),
        teammate_hand=tuple(f"{c.rank} of {c.suit}" for c in teammate_hand),
        trump_suit=state.trump_suit if knows_trump else None,
        is_trump_revealed=state.is_trump_revealed,
        strong_suits=strong_suits,
    )


def build_hint_prompt(context: HintContext) -> str:
    """Render the text prompt sent to the text-generation service."""
    lines: List[str] = [
        "Give one short, cryptic, poetic hint to a Court Piece (Dehla Pakad) player.",
        "The team that captures more of the four tens wins; use high cards and",
        "trumps to capture tens. Never name ranks or suits directly. Under 20 words.",
        "",
        f"Player holds: {', '.join(context.hand) or 'nothing'}.",
        f"Partner holds: {', '.join(context.teammate_hand) or 'nothing'}.",
        f"Trump suit: {context.trump_suit or 'Not yet known'}.",
        f"Trump revealed: {context.is_trump_revealed}.",
        f"Strong suits: {', '.join(context.strong_suits) or 'None'}.",
    ]
    return "\n".join(lines)


class HintService:
    """
    Rate-limited front for an external hint provider.

    Attributes:
        provider: Callable taking a HintContext and returning hint text
        cooldown_seconds: Minimum time between two hints for one player
    """

    def __init__(
        self,
        provider: Callable[[HintContext], str],
        cooldown_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.provider = provider
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._last_hint_time: Dict[str, float] = {}

    def request_hint(self, state: GameState, player_id: str) -> str:
        """
        Ask the provider for a hint on behalf of a player.

        The cooldown starts only when the provider answers; a failed call
        returns FALLBACK_HINT and the player may retry straight away.

        Raises:
            HintCooldownException: If the player's cooldown has not passed
            UnknownPlayerException: If the player is not seated at this table
        """
        now = self._clock()
        self._prune(now)
        last = self._last_hint_time.get(player_id)
        if last is not None and now - last < self.cooldown_seconds:
            raise HintCooldownException(player_id, self.cooldown_seconds - (now - last))

        context = build_hint_context(state, player_id)
        try:
            hint = self.provider(context).strip()
        except Exception as e:
            logger.error(f"Hint provider failed for {player_id}: {e}")
            return FALLBACK_HINT

        self._last_hint_time[player_id] = now
        return hint

    def forget(self, player_id: str) -> None:
        """Clear a player's cooldown (they left the room)."""
        self._last_hint_time.pop(player_id, None)

    def _prune(self, now: float) -> None:
        expired = [
            pid for pid, last in self._last_hint_time.items()
            if now - last >= self.cooldown_seconds
        ]
        for pid in expired:
            del self._last_hint_time[pid]
