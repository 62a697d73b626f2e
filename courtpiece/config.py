"""
Game Configuration System

Centralized configuration for the match registry, hint service and the
self-play simulator.
"""

import json
from dataclasses import dataclass, asdict
from typing import Dict, Any


LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class GameConfig:
    """Configuration for running Court Piece matches."""

    # Turn clock: the transport layer auto-plays after this many seconds
    turn_timeout_seconds: float = 45.0

    # Minimum delay between two hint requests from the same player
    hint_cooldown_seconds: float = 60.0

    # Show only the first dealt batch while trump is being called
    hide_second_batch_during_trump_call: bool = True

    # Logging
    log_level: str = 'INFO'

    # Simulator
    simulation_games: int = 100

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert config to dictionary.

        Returns:
            Dictionary representation of config
        """
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'GameConfig':
        """
        Create config from dictionary.

        Keys that are not config fields are ignored.

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            GameConfig instance
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_dict = {k: v for k, v in config_dict.items() if k in valid_keys}
        return cls(**filtered_dict)

    @classmethod
    def from_file(cls, filepath: str) -> 'GameConfig':
        """
        Load config from JSON file.

        Args:
            filepath: Path to JSON config file

        Returns:
            GameConfig instance
        """
        with open(filepath, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    def save(self, filepath: str):
        """
        Save config to JSON file.

        Args:
            filepath: Path to save config to
        """
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if config is valid

        Raises:
            ValueError: If config values are invalid
        """
        if self.turn_timeout_seconds <= 0:
            raise ValueError(
                f"turn_timeout_seconds must be positive, got {self.turn_timeout_seconds}"
            )

        if self.hint_cooldown_seconds < 0:
            raise ValueError(
                f"hint_cooldown_seconds must be non-negative, "
                f"got {self.hint_cooldown_seconds}"
            )

        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {LOG_LEVELS}, got {self.log_level}"
            )

        if self.simulation_games <= 0:
            raise ValueError(
                f"simulation_games must be positive, got {self.simulation_games}"
            )

        return True

    def __str__(self) -> str:
        """String representation of config."""
        lines = ["Game Configuration:"]
        lines.append(f"  Turn timeout: {self.turn_timeout_seconds}s")
        lines.append(f"  Hint cooldown: {self.hint_cooldown_seconds}s")
        lines.append(
            f"  Hide second batch during trump call: "
            f"{self.hide_second_batch_during_trump_call}"
        )
        lines.append(f"  Log level: {self.log_level}")
        lines.append(f"  Simulation games: {self.simulation_games}")
        return "\n".join(lines)


def get_default_config() -> GameConfig:
    """
    Get the default match configuration.

    Returns:
        GameConfig with default values
    """
    return GameConfig()
