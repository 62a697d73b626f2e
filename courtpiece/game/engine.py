"""
Core game logic for Court Piece (Dehla Pakad).

Implements the game-state machine for one match:

    dealing -> calling_trump -> playing -> finished

Every action validates completely before it mutates anything, so a rejected
action raises and leaves the state exactly as it was. Functions mutate the
given GameState in place and return it; callers that need copy-on-write use
``courtpiece.game.actions.apply_action``.
"""

import logging
import random
from typing import List, Optional, Sequence

from courtpiece.game.cards import Card, Deck
from courtpiece.game.constants import (
    FIRST_BATCH_SIZE,
    NUM_PLAYERS,
    SECOND_BATCH_SIZE,
    STATUS_CALLING_TRUMP,
    STATUS_DEALING,
    STATUS_FINISHED,
    STATUS_PLAYING,
    TEAM1,
    TEAM2,
    TEAM_KEYS,
    TEAM_SEATS,
    TOTAL_TRICKS,
)
from courtpiece.game.state import (
    CardNotInHandException,
    GameState,
    InvalidPhaseException,
    InvalidPlayerCountException,
    MustFollowSuitException,
    NotYourTurnException,
    PlayedCard,
    TeamState,
    TrumpNotRevealedException,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Dealing / Setup
# ============================================================================


def choose_trump_caller(
    player_ids: Sequence[str],
    previous_winner_team: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Pick the player who calls trump.

    The winners of the previous game keep the call: one of their two seats is
    chosen uniformly. For the first game any of the four seats may be chosen.

    Raises:
        ValueError: If previous_winner_team is not 'team1' or 'team2'
    """
    rng = rng or random
    if previous_winner_team is None:
        return player_ids[rng.randrange(NUM_PLAYERS)]
    if previous_winner_team not in TEAM_SEATS:
        raise ValueError(
            f"previous_winner_team must be one of {list(TEAM_KEYS)}, "
            f"got {previous_winner_team!r}"
        )
    return player_ids[rng.choice(TEAM_SEATS[previous_winner_team])]


def initialize_game(
    room_id: str,
    player_ids: Sequence[str],
    previous_winner_team: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Create a new match and deal all 52 cards.

    Seats 0 and 2 form team1, seats 1 and 3 form team2. Each player first
    receives 5 cards (the batch the hidden trump is chosen from) and then
    the remaining 8. The trump caller acts first.

    Args:
        room_id: Room the match belongs to
        player_ids: Exactly four distinct player ids, in seat order
        previous_winner_team: Winner of the previous game, for rematches
        rng: Random source for caller selection and the shuffle

    Returns:
        GameState in the 'calling_trump' phase

    Raises:
        InvalidPlayerCountException: Unless exactly four distinct ids are given
        ValueError: If previous_winner_team is not a team key
    """
    players = list(player_ids)
    if len(players) != NUM_PLAYERS:
        raise InvalidPlayerCountException(
            f"Game requires exactly {NUM_PLAYERS} players, got {len(players)}"
        )
    if len(set(players)) != NUM_PLAYERS:
        raise InvalidPlayerCountException(
            f"Game requires {NUM_PLAYERS} distinct players, got {players}"
        )

    trump_caller_id = choose_trump_caller(players, previous_winner_team, rng)

    state = GameState(
        room_id=room_id,
        players=players,
        trump_caller_id=trump_caller_id,
        current_turn=trump_caller_id,
        teams={
            key: TeamState(players=[players[seat] for seat in TEAM_SEATS[key]])
            for key in TEAM_KEYS
        },
        hands={pid: [] for pid in players},
        status=STATUS_DEALING,
        logs=[f"Game initialized. {trump_caller_id} will call trump."],
    )

    deal_cards(state, rng)
    logger.info(
        f"Room {room_id}: new game dealt, {trump_caller_id} calls trump"
    )
    return state


def deal_cards(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """
    Deal a freshly shuffled deck in two batches (5 then 8 per player).

    Raises:
        InvalidPhaseException: Unless the game is in the 'dealing' phase
    """
    if state.status != STATUS_DEALING:
        raise InvalidPhaseException("deal cards", state.status)

    deck = Deck()
    deck.shuffle(rng)

    for batch_size in (FIRST_BATCH_SIZE, SECOND_BATCH_SIZE):
        batches = deck.deal(batch_size, NUM_PLAYERS)
        for player_id, cards in zip(state.players, batches):
            state.hands[player_id].extend(cards)

    state.status = STATUS_CALLING_TRUMP
    return state


# ============================================================================
# Trump Selection
# ============================================================================


def _find_card(hand: List[Card], card_id: str) -> Optional[int]:
    for idx, card in enumerate(hand):
        if card.id == card_id:
            return idx
    return None


def set_trump(
    state: GameState, card_id: str, player_id: Optional[str] = None
) -> GameState:
    """
    Designate a card from the caller's hand as the hidden trump.

    The card stays in the caller's hand; only its suit becomes trump, and it
    stays concealed from the other players until revealed. It must come
    from the first dealt batch, the only cards the caller has seen. The
    caller keeps the turn and leads the first trick.

    Args:
        state: Game in the 'calling_trump' phase
        card_id: Id of a card in the trump caller's hand
        player_id: Acting player, if the transport layer knows it

    Raises:
        InvalidPhaseException: Unless the game is in the 'calling_trump' phase
        NotYourTurnException: If player_id is given and is not the caller
        CardNotInHandException: If the card is not among the first dealt
            batch of the caller's hand
    """
    if state.status != STATUS_CALLING_TRUMP:
        raise InvalidPhaseException("call trump", state.status)

    caller = state.trump_caller_id
    if player_id is not None and player_id != caller:
        raise NotYourTurnException(
            player_id, card_id, f"only {caller} may call trump"
        )

    hand = state.hands[caller]
    idx = _find_card(hand, card_id)
    if idx is None:
        raise CardNotInHandException(caller, card_id, "selected card not in hand")
    if idx >= FIRST_BATCH_SIZE:
        raise CardNotInHandException(
            caller, card_id, "trump must come from the first dealt batch"
        )

    trump_card = hand[idx]
    state.hidden_trump_card = trump_card
    state.trump_suit = trump_card.suit
    state.is_trump_revealed = False
    state.status = STATUS_PLAYING
    state.logs.append("Trump card selected (hidden).")

    logger.debug(f"Room {state.room_id}: {caller} hid trump {trump_card}")
    return state


def reveal_trump(state: GameState, player_id: Optional[str] = None) -> GameState:
    """
    Make the trump suit public.

    No-op when no hidden trump has been chosen or it is already revealed,
    or when the game is not being played.

    Args:
        state: Current game
        player_id: Player asking for the reveal, recorded as the revealer
    """
    if state.status != STATUS_PLAYING:
        return state
    if state.hidden_trump_card is None or state.is_trump_revealed:
        return state

    trump_card = state.hidden_trump_card
    state.is_trump_revealed = True
    state.trump_revealer_id = player_id
    state.logs.append(
        f"Trump revealed! It is {trump_card.suit} ({trump_card.rank})."
    )

    logger.debug(f"Room {state.room_id}: trump {trump_card} revealed by {player_id}")
    return state


# ============================================================================
# Trick Engine
# ============================================================================


def get_legal_cards(state: GameState, player_id: str) -> List[Card]:
    """
    Get the cards a player may legally play right now.

    Rules:
    - The concealed trump card is never playable while hidden
    - First card of a trick: any other card
    - Holding the lead suit (concealed trump aside): must play the lead suit
    - Otherwise: any card

    Args:
        state: Current game
        player_id: Player whose options to list

    Returns:
        Legal cards in hand order (empty if the hand is empty)
    """
    candidates = [
        card for card in state.hands.get(player_id, [])
        if not state.is_hidden_trump(card.id)
    ]

    lead_suit = state.lead_suit
    if lead_suit is None:
        return candidates

    following = [card for card in candidates if card.suit == lead_suit]
    if following:
        return following

    return candidates


def play_card(state: GameState, player_id: str, card_id: str) -> GameState:
    """
    Play a card into the current trick.

    Validation order: phase, turn, concealed trump, card in hand, follow
    suit. A player who breaks suit while the trump is hidden reveals it.
    The fourth card resolves the trick before returning.

    Args:
        state: Game in the 'playing' phase
        player_id: Acting player
        card_id: Id of the card to play

    Raises:
        InvalidPhaseException: Unless the game is in the 'playing' phase
        NotYourTurnException: If it is not player_id's turn
        TrumpNotRevealedException: If card_id is the concealed trump card
        CardNotInHandException: If the card is not in the player's hand
        MustFollowSuitException: If the player holds the lead suit but
            played another suit
    """
    if state.status != STATUS_PLAYING:
        raise InvalidPhaseException("play a card", state.status)

    if state.current_turn != player_id:
        raise NotYourTurnException(
            player_id, card_id, f"it is {state.current_turn}'s turn"
        )

    if state.is_hidden_trump(card_id):
        raise TrumpNotRevealedException(
            player_id,
            card_id,
            "cannot play the hidden trump card until it is revealed",
        )

    hand = state.hands[player_id]
    idx = _find_card(hand, card_id)
    if idx is None:
        raise CardNotInHandException(player_id, card_id, "card not in hand")

    card = hand[idx]
    lead_suit = state.lead_suit

    if lead_suit is not None and card.suit != lead_suit:
        # The concealed trump cannot be offered, so it does not oblige a follow
        holds_lead_suit = any(
            c.suit == lead_suit and not state.is_hidden_trump(c.id) for c in hand
        )
        if holds_lead_suit:
            raise MustFollowSuitException(
                player_id, card_id, f"must follow suit: {lead_suit}"
            )

    # Validation complete: mutate
    del hand[idx]
    state.current_trick.append(PlayedCard(player_id, card))
    logger.debug(f"Room {state.room_id}: {player_id} played {card}")

    if (
        lead_suit is not None
        and card.suit != lead_suit
        and state.hidden_trump_card is not None
        and not state.is_trump_revealed
    ):
        # Breaking suit forces the trump into the open
        state.is_trump_revealed = True
        state.trump_revealer_id = player_id
        state.logs.append(f"Trump revealed: {state.trump_suit}")
        logger.debug(f"Room {state.room_id}: {player_id} broke suit, trump revealed")

    state.current_turn = state.next_player(player_id)

    if len(state.current_trick) == NUM_PLAYERS:
        resolve_trick(state)

    return state


def determine_trick_winner(
    trick: Sequence[PlayedCard],
    trump_suit: Optional[str],
    is_trump_revealed: bool,
) -> PlayedCard:
    """
    Find the winning play of a trick with a single left-to-right scan.

    Winner logic:
    1. Once revealed, the first trump played (the lead card included) beats
       every non-trump card and only a higher trump beats it afterwards
    2. Until a trump appears, the highest card of the lead suit wins
    3. Off-suit cards (and trump-suit cards while trump is hidden) never win

    Raises:
        ValueError: If the trick is empty
    """
    if not trick:
        raise ValueError("Cannot determine winner: no cards played")

    lead_suit = trick[0].card.suit
    best = trick[0]
    trump_played = is_trump_revealed and lead_suit == trump_suit

    for played in trick[1:]:
        card = played.card
        if is_trump_revealed and card.suit == trump_suit:
            if not trump_played or card.value > best.card.value:
                best = played
                trump_played = True
        elif not trump_played and card.suit == lead_suit:
            if card.value > best.card.value:
                best = played

    return best


def resolve_trick(state: GameState) -> GameState:
    """
    Award the completed trick and check for the end of the game.

    The winning team takes the trick, its four cards and any tens among
    them; the winner leads the next trick. After the 13th trick the team
    with more tens wins, with tricks won breaking a 2-2 tie.
    """
    best = determine_trick_winner(
        state.current_trick, state.trump_suit, state.is_trump_revealed
    )
    winner_id = best.player_id
    team_key = state.team_of(winner_id)
    team = state.teams[team_key]

    trick_cards = [played.card for played in state.current_trick]
    team.tricks_won += 1
    team.won_cards.extend(trick_cards)
    team.tens_collected += sum(1 for card in trick_cards if card.is_ten)

    state.logs.append(f"{winner_id} won the trick.")
    logger.info(
        f"Room {state.room_id}: {winner_id} ({team_key}) won trick "
        f"{state.total_tricks()} with {best.card}"
    )

    state.last_trick_winner = winner_id
    state.last_trick_cards = list(state.current_trick)
    state.current_trick = []
    state.current_turn = winner_id

    if state.total_tricks() == TOTAL_TRICKS:
        state.status = STATUS_FINISHED
        state.winner = decide_winner(state)
        state.logs.append(f"Game finished. Winner: {state.winner}")
        logger.info(f"Room {state.room_id}: game finished, {state.winner} wins")

    return state


def decide_winner(state: GameState) -> str:
    """
    Decide the winning team from the final tallies.

    More tens wins; a tie on tens (2-2) goes to the team with more tricks.
    Thirteen tricks cannot split evenly, so the last branch never decides a
    real game.
    """
    team1 = state.teams[TEAM1]
    team2 = state.teams[TEAM2]

    if team1.tens_collected != team2.tens_collected:
        return TEAM1 if team1.tens_collected > team2.tens_collected else TEAM2
    return TEAM1 if team1.tricks_won > team2.tricks_won else TEAM2
