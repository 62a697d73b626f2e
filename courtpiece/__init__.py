"""
Court Piece (Dehla Pakad) server-side game engine.

Subpackages:
    game: deck, state machine, trick engine, fallback driver, view filter

Modules:
    config: GameConfig
    registry: MatchRegistry (room -> match store)
    hints: hint collaborator interface
    simulate: self-play simulator CLI
"""

__version__ = "1.0.0"
