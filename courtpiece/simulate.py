"""
Self-play Simulator

Plays complete Court Piece matches where every move is the timeout fallback
(a uniformly random legal card) and reports aggregate statistics. Useful as
a soak test of the engine: every state along the way is checked for card
conservation.

Usage:
    # 100 matches with the default config
    courtpiece-simulate

    # Reproducible run
    courtpiece-simulate --games 500 --seed 42

    # Custom config
    courtpiece-simulate --config configs/table.json --log-level DEBUG
"""

import argparse
import logging
import random
import sys
from typing import Any, Dict, List, Optional

import numpy as np

from courtpiece.config import GameConfig
from courtpiece.game.constants import (
    FIRST_BATCH_SIZE,
    STATUS_PLAYING,
    TEAM1,
    TEAM2,
)
from courtpiece.game.driver import play_random_card
from courtpiece.game.engine import initialize_game, set_trump
from courtpiece.game.state import GameState, check_invariants

logger = logging.getLogger(__name__)

PLAYER_IDS = ['north', 'east', 'south', 'west']


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Simulate Court Piece matches with random legal play",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        '--games',
        type=int,
        default=None,
        help='Number of matches to play (overrides config)',
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible runs',
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to a JSON config file',
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (overrides config)',
    )
    return parser.parse_args(argv)


def setup_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def play_match(
    room_id: str,
    previous_winner_team: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Play one match to completion with random legal moves.

    The trump caller picks a random card from the first dealt batch.

    Raises:
        GameStateException: If any intermediate state loses or duplicates a card
    """
    rng = rng or random
    state = initialize_game(room_id, PLAYER_IDS, previous_winner_team, rng)
    check_invariants(state)

    first_batch = state.hands[state.trump_caller_id][:FIRST_BATCH_SIZE]
    set_trump(state, rng.choice(first_batch).id)

    while state.status == STATUS_PLAYING:
        play_random_card(state, state.current_turn, rng)
        check_invariants(state)

    return state


def run_simulation(num_games: int, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """
    Play a series of matches, each winner keeping the trump call.

    Args:
        num_games: Number of matches
        rng: Random source

    Returns:
        Statistics:
        - games_played: Number of matches
        - team1_wins / team2_wins: Matches won by each team
        - team1_win_rate: Fraction won by team1
        - avg_tens: Mean tens captured per team
        - avg_tricks: Mean tricks captured per team
        - caller_team_win_rate: Fraction won by the trump caller's team
    """
    tens = {TEAM1: [], TEAM2: []}
    tricks = {TEAM1: [], TEAM2: []}
    wins = {TEAM1: 0, TEAM2: 0}
    caller_team_wins = 0

    previous_winner = None
    for game_idx in range(num_games):
        state = play_match(f"sim-{game_idx}", previous_winner, rng)

        for key in (TEAM1, TEAM2):
            tens[key].append(state.teams[key].tens_collected)
            tricks[key].append(state.teams[key].tricks_won)
        wins[state.winner] += 1
        if state.team_of(state.trump_caller_id) == state.winner:
            caller_team_wins += 1
        previous_winner = state.winner

        if (game_idx + 1) % 50 == 0:
            logger.info(f"Progress: {game_idx + 1}/{num_games} matches")

    return {
        'games_played': num_games,
        'team1_wins': wins[TEAM1],
        'team2_wins': wins[TEAM2],
        'team1_win_rate': wins[TEAM1] / num_games if num_games else 0.0,
        'avg_tens': {
            key: float(np.mean(values)) if values else 0.0
            for key, values in tens.items()
        },
        'avg_tricks': {
            key: float(np.mean(values)) if values else 0.0
            for key, values in tricks.items()
        },
        'caller_team_win_rate': caller_team_wins / num_games if num_games else 0.0,
    }


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    config = GameConfig.from_file(args.config) if args.config else GameConfig()
    if args.games is not None:
        config.simulation_games = args.games
    if args.log_level is not None:
        config.log_level = args.log_level

    try:
        config.validate()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level)
    logger.info(f"Simulating {config.simulation_games} matches (seed={args.seed})")

    rng = random.Random(args.seed)
    results = run_simulation(config.simulation_games, rng)

    print(f"\nSimulation complete!")
    print(f"  Matches: {results['games_played']}")
    print(f"  Team1 wins: {results['team1_wins']} ({results['team1_win_rate']:.1%})")
    print(f"  Team2 wins: {results['team2_wins']}")
    print(f"  Caller's team win rate: {results['caller_team_win_rate']:.1%}")
    for key in (TEAM1, TEAM2):
        print(
            f"  {key}: avg tens {results['avg_tens'][key]:.2f}, "
            f"avg tricks {results['avg_tricks'][key]:.2f}"
        )
    return 0


if __name__ == '__main__':
    sys.exit(main())
