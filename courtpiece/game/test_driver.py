"""
Tests for the timeout fallback, forfeits and copy-on-write actions.
"""

import random

import pytest

from courtpiece.game.actions import (
    Forfeit,
    PlayCard,
    PlayRandomCard,
    RevealTrump,
    SetTrump,
    apply_action,
)
from courtpiece.game.cards import Card
from courtpiece.game.constants import (
    STATUS_CALLING_TRUMP,
    STATUS_FINISHED,
    STATUS_PLAYING,
    TEAM1,
    TEAM2,
)
from courtpiece.game.driver import forfeit, play_random_card
from courtpiece.game.engine import initialize_game
from courtpiece.game.state import (
    GameState,
    InvalidPhaseException,
    MustFollowSuitException,
    TeamState,
    UnknownPlayerException,
)

PLAYERS = ["p1", "p2", "p3", "p4"]


def card(rank: str, suit: str) -> Card:
    return Card(suit, rank, id=f"{rank}-{suit}")


def make_playing_state(hands, caller="p1", turn="p1", trump_card=None, revealed=False):
    state = GameState(
        room_id="r1",
        players=list(PLAYERS),
        trump_caller_id=caller,
        current_turn=turn,
        teams={
            TEAM1: TeamState(players=["p1", "p3"]),
            TEAM2: TeamState(players=["p2", "p4"]),
        },
        hands={pid: list(hands.get(pid, [])) for pid in PLAYERS},
        status=STATUS_PLAYING,
    )
    if trump_card is not None:
        state.trump_suit = trump_card.suit
        state.hidden_trump_card = trump_card
        state.is_trump_revealed = revealed
    return state


# ============================================================================
# Test Random Fallback
# ============================================================================


class TestPlayRandomCard:
    """Test the timeout fallback move."""

    def test_noop_when_not_playing(self):
        """Test that the fallback does nothing before play starts."""
        state = initialize_game("r1", PLAYERS)
        before = state.to_dict()
        result = play_random_card(state, state.trump_caller_id)
        assert result is state
        assert state.to_dict() == before

    def test_noop_when_not_your_turn(self):
        """Test that the fallback does nothing for a player not on turn."""
        state = make_playing_state({"p2": [card("A", "spades")]}, turn="p1")
        play_random_card(state, "p2")
        assert state.hands["p2"] == [card("A", "spades")]
        assert state.current_trick == []

    def test_noop_on_empty_hand(self):
        """Test that the fallback does nothing with an empty hand."""
        state = make_playing_state({})
        play_random_card(state, "p1")
        assert state.current_trick == []
        assert state.current_turn == "p1"

    def test_plays_one_card(self):
        """Test that the fallback plays exactly one card."""
        state = make_playing_state({"p1": [card("A", "spades"), card("2", "clubs")]})
        play_random_card(state, "p1", random.Random(1))

        assert len(state.hands["p1"]) == 1
        assert len(state.current_trick) == 1
        assert state.current_turn == "p2"

    def test_always_follows_suit(self):
        """Test that the fallback follows the lead suit."""
        for seed in range(30):
            state = make_playing_state(
                {
                    "p1": [card("K", "spades")],
                    "p2": [card("2", "spades"), card("A", "diamonds"), card("9", "spades")],
                }
            )
            play_random_card(state, "p1", random.Random(seed))
            play_random_card(state, "p2", random.Random(seed))
            assert state.current_trick[-1].card.suit == "spades"

    def test_picks_among_all_legal_cards(self):
        """Test that every legal card can be picked."""
        seen = set()
        for seed in range(60):
            state = make_playing_state(
                {"p1": [card("A", "spades"), card("2", "clubs"), card("7", "diamonds")]}
            )
            play_random_card(state, "p1", random.Random(seed))
            seen.add(state.current_trick[0].card.id)
        assert seen == {"A-spades", "2-clubs", "7-diamonds"}

    def test_never_plays_concealed_trump(self):
        """Test that the fallback skips the concealed trump."""
        trump = card("Q", "hearts")
        for seed in range(30):
            state = make_playing_state(
                {"p1": [trump, card("2", "clubs")]}, trump_card=trump
            )
            play_random_card(state, "p1", random.Random(seed))
            assert state.current_trick[0].card.id == "2-clubs"
            assert trump in state.hands["p1"]

    def test_reveals_when_only_concealed_trump_left(self):
        """Test revealing and playing the trump when nothing else is left."""
        trump = card("Q", "hearts")
        state = make_playing_state({"p1": [trump]}, trump_card=trump)

        play_random_card(state, "p1", random.Random(0))

        assert state.is_trump_revealed is True
        assert state.trump_revealer_id == "p1"
        assert state.current_trick[0].card == trump
        assert state.hands["p1"] == []

    def test_fourth_card_resolves_trick(self):
        """Test that a fallback fourth card resolves the trick."""
        state = make_playing_state(
            {
                "p1": [card("2", "clubs")],
                "p2": [card("3", "clubs")],
                "p3": [card("4", "clubs")],
                "p4": [card("5", "clubs")],
            }
        )
        for pid in PLAYERS:
            play_random_card(state, pid, random.Random(0))

        assert state.current_trick == []
        assert state.last_trick_winner == "p4"
        assert state.teams[TEAM2].tricks_won == 1


# ============================================================================
# Test Forfeit
# ============================================================================


class TestForfeit:
    """Test forfeiting a match."""

    @pytest.mark.parametrize(
        "player_id,winner", [("p1", TEAM2), ("p3", TEAM2), ("p2", TEAM1), ("p4", TEAM1)]
    )
    def test_opponents_win(self, player_id, winner):
        """Test that the forfeiting team loses."""
        state = make_playing_state({"p1": [card("A", "spades")]})
        forfeit(state, player_id)

        assert state.status == STATUS_FINISHED
        assert state.winner == winner
        assert state.forfeited_by == player_id
        assert state.logs[-1] == f"{player_id} forfeited. Winner: {winner}"

    def test_forfeit_before_play(self):
        """Test that forfeiting during the trump call is rejected."""
        state = initialize_game("r1", PLAYERS)
        with pytest.raises(InvalidPhaseException):
            forfeit(state, "p1")
        assert state.status == STATUS_CALLING_TRUMP

    def test_forfeit_after_finish(self):
        """Test that a finished game cannot be forfeited again."""
        state = make_playing_state({})
        forfeit(state, "p1")
        with pytest.raises(InvalidPhaseException):
            forfeit(state, "p2")
        assert state.winner == TEAM2

    def test_forfeit_unknown_player(self):
        """Test forfeit by a player not at the table."""
        state = make_playing_state({})
        with pytest.raises(UnknownPlayerException):
            forfeit(state, "ghost")
        assert state.status == STATUS_PLAYING


# ============================================================================
# Test Actions
# ============================================================================


class TestApplyAction:
    """Test copy-on-write application of actions."""

    def test_copy_on_write(self):
        """Test that apply_action leaves the original state alone."""
        state = make_playing_state({"p1": [card("A", "spades")]})
        updated = apply_action(state, PlayCard("p1", "A-spades"))

        assert updated is not state
        assert updated.current_trick[0].card.id == "A-spades"
        assert state.current_trick == []
        assert state.hands["p1"] == [card("A", "spades")]

    def test_in_place(self):
        """Test applying an action in place."""
        state = make_playing_state({"p1": [card("A", "spades")]})
        updated = apply_action(state, PlayCard("p1", "A-spades"), in_place=True)
        assert updated is state
        assert state.hands["p1"] == []

    def test_rejected_action_leaves_original(self):
        """Test that a rejected action leaves the state unchanged."""
        state = make_playing_state(
            {"p1": [card("K", "spades")], "p2": [card("2", "spades"), card("A", "clubs")]}
        )
        state = apply_action(state, PlayCard("p1", "K-spades"))
        before = state.to_dict()

        with pytest.raises(MustFollowSuitException):
            apply_action(state, PlayCard("p2", "A-clubs"))
        assert state.to_dict() == before

    def test_set_trump_and_reveal(self):
        """Test SetTrump and RevealTrump actions."""
        state = initialize_game("r1", PLAYERS)
        caller = state.trump_caller_id
        chosen = state.hands[caller][2]

        state = apply_action(state, SetTrump(chosen.id, caller))
        assert state.status == STATUS_PLAYING
        assert state.hidden_trump_card.id == chosen.id

        state = apply_action(state, RevealTrump(caller))
        assert state.is_trump_revealed is True

    def test_play_random_card_action(self):
        """Test the PlayRandomCard action."""
        state = make_playing_state({"p1": [card("A", "spades")]})
        updated = apply_action(state, PlayRandomCard("p1"), rng=random.Random(0))
        assert updated.current_trick[0].card.id == "A-spades"

    def test_forfeit_action(self):
        """Test the Forfeit action."""
        state = make_playing_state({})
        updated = apply_action(state, Forfeit("p2"))
        assert updated.winner == TEAM1
        assert state.status == STATUS_PLAYING

    def test_unknown_action(self):
        """Test that an unknown action raises TypeError."""
        state = make_playing_state({})
        with pytest.raises(TypeError, match="Unknown action"):
            apply_action(state, "play")
