"""
Team Registry Module

Immutable team, conference and division lookups shared by the engine.
"""

from .league_team_registry import (
    Team,
    TeamRegistry,
    create_nfl_registry,
    load_teams
)

__all__ = [
    'Team',
    'TeamRegistry',
    'create_nfl_registry',
    'load_teams'
]
