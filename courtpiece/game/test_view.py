"""
Tests for the per-player view filter.

Checks that each projection hides exactly what the viewer may not know and
never aliases the canonical state.
"""

import dataclasses

import pytest

from courtpiece.game.cards import Card
from courtpiece.game.constants import (
    FIRST_BATCH_SIZE,
    HAND_SIZE,
    STATUS_PLAYING,
    TEAM1,
    TEAM2,
)
from courtpiece.game.engine import initialize_game, play_card, set_trump
from courtpiece.game.state import GameState, TeamState, UnknownPlayerException
from courtpiece.game.view import HiddenCard, PlayerView, VisibleCard, project_for_player

PLAYERS = ["p1", "p2", "p3", "p4"]


def card(rank: str, suit: str) -> Card:
    return Card(suit, rank, id=f"{rank}-{suit}")


@pytest.fixture
def dealt_game():
    """Game waiting for the trump call."""
    return initialize_game("r1", PLAYERS)


@pytest.fixture
def playing_game():
    """Game in progress: p1 called trump with Q♥, p1 and p2 have played."""
    trump = card("Q", "hearts")
    state = GameState(
        room_id="r1",
        players=list(PLAYERS),
        trump_caller_id="p1",
        current_turn="p1",
        teams={
            TEAM1: TeamState(
                players=["p1", "p3"],
                tricks_won=1,
                tens_collected=1,
                won_cards=[
                    card("10", "clubs"),
                    card("2", "clubs"),
                    card("3", "clubs"),
                    card("4", "clubs"),
                ],
            ),
            TEAM2: TeamState(
                players=["p2", "p4"],
                tricks_won=1,
                tens_collected=0,
                won_cards=[
                    card("5", "diamonds"),
                    card("6", "diamonds"),
                    card("A", "diamonds"),
                    card("7", "diamonds"),
                ],
            ),
        },
        hands={
            "p1": [card("K", "spades"), trump, card("8", "clubs")],
            "p2": [card("2", "spades"), card("9", "clubs")],
            "p3": [card("A", "spades"), card("J", "clubs")],
            "p4": [card("3", "spades"), card("5", "clubs")],
        },
        status=STATUS_PLAYING,
        trump_suit="hearts",
        hidden_trump_card=trump,
    )
    play_card(state, "p1", "K-spades")
    play_card(state, "p2", "2-spades")
    return state


class TestHands:
    """Test hand redaction."""

    def test_own_hand_visible(self, playing_game):
        """Test that the viewer sees their own cards."""
        view = project_for_player(playing_game, "p2")
        assert view.hands["p2"] == (VisibleCard("9-clubs", "clubs", "9"),)

    def test_other_hands_hidden(self, playing_game):
        """Test that other hands become placeholders of the same size."""
        view = project_for_player(playing_game, "p2")
        for pid in ("p1", "p3", "p4"):
            assert all(isinstance(c, HiddenCard) for c in view.hands[pid])
            assert view.hand_size(pid) == len(playing_game.hands[pid])

    def test_hidden_cards_leak_nothing(self, playing_game):
        """Test that placeholders serialize with no card identity."""
        payload = project_for_player(playing_game, "p2").to_dict()
        for c in payload["hands"]["p1"]:
            assert c == {"id": "hidden", "suit": "unknown", "rank": "unknown"}

    def test_first_batch_only_while_calling_trump(self, dealt_game):
        """Nobody, the owner included, sees the second batch before the call."""
        for viewer in PLAYERS:
            view = project_for_player(dealt_game, viewer)
            for pid in PLAYERS:
                assert view.hand_size(pid) == FIRST_BATCH_SIZE
            own = [c.id for c in view.hands[viewer]]
            assert own == [c.id for c in dealt_game.hands[viewer][:FIRST_BATCH_SIZE]]

    def test_second_batch_policy_can_be_disabled(self, dealt_game):
        """Test showing the whole hand during the trump call when configured."""
        view = project_for_player(dealt_game, "p1", hide_second_batch=False)
        assert view.hand_size("p1") == HAND_SIZE

    def test_full_hand_after_trump_call(self, dealt_game):
        """Test that the full hand is shown once trump is called."""
        caller = dealt_game.trump_caller_id
        set_trump(dealt_game, dealt_game.hands[caller][0].id)
        view = project_for_player(dealt_game, caller)
        assert view.hand_size(caller) == HAND_SIZE

    def test_unknown_viewer(self, playing_game):
        """Test that a viewer not at the table is rejected."""
        with pytest.raises(UnknownPlayerException):
            project_for_player(playing_game, "ghost")


class TestTrump:
    """Test trump redaction."""

    def test_caller_sees_hidden_trump(self, playing_game):
        """Test that the caller sees the concealed trump."""
        view = project_for_player(playing_game, "p1")
        assert view.trump_suit == "hearts"
        assert view.hidden_trump_card == VisibleCard("Q-hearts", "hearts", "Q")
        assert view.is_trump_revealed is False

    @pytest.mark.parametrize("viewer", ["p2", "p3", "p4"])
    def test_others_do_not_see_hidden_trump(self, playing_game, viewer):
        """Test that the concealed trump is hidden from everyone but the caller."""
        view = project_for_player(playing_game, viewer)
        assert view.trump_suit is None
        assert view.hidden_trump_card is None
        assert "hearts" not in str(view.to_dict()["logs"])

    def test_everyone_sees_revealed_trump(self, playing_game):
        """Test that a revealed trump is visible to all."""
        play_card(playing_game, "p3", "A-spades")
        play_card(playing_game, "p4", "3-spades")
        playing_game.is_trump_revealed = True

        for viewer in PLAYERS:
            view = project_for_player(playing_game, viewer)
            assert view.trump_suit == "hearts"
            assert view.hidden_trump_card.id == "Q-hearts"


class TestWonCards:
    """Test won-pile redaction."""

    def test_own_team_pile_visible(self, playing_game):
        """Test that a team sees its own captured cards."""
        view = project_for_player(playing_game, "p3")
        ids = [c.id for c in view.teams[TEAM1].won_cards]
        assert ids == ["10-clubs", "2-clubs", "3-clubs", "4-clubs"]

    def test_opposing_pile_hidden(self, playing_game):
        """Test that the opposing captured cards are hidden, count kept."""
        view = project_for_player(playing_game, "p3")
        pile = view.teams[TEAM2].won_cards
        assert len(pile) == 4
        assert all(isinstance(c, HiddenCard) for c in pile)

    def test_scores_pass_through(self, playing_game):
        """Test that tricks and tens are public."""
        view = project_for_player(playing_game, "p2")
        assert view.teams[TEAM1].tricks_won == 1
        assert view.teams[TEAM1].tens_collected == 1
        assert view.teams[TEAM2].players == ("p2", "p4")


class TestPublicFields:
    """Test fields every player sees."""

    def test_trick_is_public(self, playing_game):
        """Test that the current trick is the same for every viewer."""
        for viewer in PLAYERS:
            view = project_for_player(playing_game, viewer)
            assert [(p.player_id, p.card.id) for p in view.current_trick] == [
                ("p1", "K-spades"),
                ("p2", "2-spades"),
            ]

    def test_turn_status_logs(self, playing_game):
        """Test turn, status and log passthrough."""
        view = project_for_player(playing_game, "p4")
        assert view.current_turn == "p3"
        assert view.status == STATUS_PLAYING
        assert view.logs == tuple(playing_game.logs)
        assert view.trump_caller_id == "p1"

    def test_to_dict_shape(self, playing_game):
        """Test the camelCase payload shape."""
        payload = project_for_player(playing_game, "p1").to_dict()
        assert payload["viewerId"] == "p1"
        assert payload["currentTurn"] == "p3"
        assert payload["trumpSuit"] == "hearts"
        assert payload["currentTrick"][0] == {
            "playerId": "p1",
            "card": {"id": "K-spades", "suit": "spades", "rank": "K"},
        }
        assert payload["teams"][TEAM2]["tricksWon"] == 1
        assert payload["lastTrickCards"] is None


class TestNoAliasing:
    """The projection is detached from canonical state."""

    def test_view_is_frozen(self, playing_game):
        """Test that a view cannot be modified."""
        view = project_for_player(playing_game, "p1")
        assert isinstance(view, PlayerView)
        with pytest.raises(dataclasses.FrozenInstanceError):
            view.status = "finished"

    def test_state_changes_do_not_reach_view(self, playing_game):
        """Test that later state changes do not leak into a view."""
        view = project_for_player(playing_game, "p1")
        hand_before = view.hands["p1"]
        logs_before = view.logs

        playing_game.hands["p1"].clear()
        playing_game.logs.append("tampered")
        playing_game.teams[TEAM1].won_cards.clear()

        assert view.hands["p1"] == hand_before
        assert view.logs == logs_before
        assert len(view.teams[TEAM1].won_cards) == 4

    def test_projection_does_not_mutate_state(self, dealt_game):
        """Test that building views leaves the state untouched."""
        before = dealt_game.to_dict()
        for viewer in PLAYERS:
            project_for_player(dealt_game, viewer).to_dict()
        assert dealt_game.to_dict() == before
