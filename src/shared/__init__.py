"""
Shared Models

Game and selection types used across the standings engine.
"""

from .game_models import (
    Game,
    GameOutcome,
    GameSelection,
    GameStatus,
    Selections,
    resolve_outcome
)

__all__ = [
    'Game',
    'GameOutcome',
    'GameSelection',
    'GameStatus',
    'Selections',
    'resolve_outcome'
]
