"""
Shared Game Models

Schedule entries, hypothetical selections and the resolved outcome of a
game. Used by the record aggregator and everything built on top of it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Type

from config.engine_settings import EngineSettings


class GameStatus(Enum):
    """Lifecycle of a scheduled game"""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    FINAL = "final"


class GameSelection(Enum):
    """Hypothetical outcome picked for an undecided game"""
    HOME = "home"
    AWAY = "away"
    TIE = "tie"
    NONE = "none"


# game_id -> hypothetical outcome
Selections = Dict[str, GameSelection]


@dataclass(frozen=True)
class Game:
    """
    Single regular season game.

    Scores are only meaningful once the game is final; a final game
    without both scores is rejected at construction.
    """
    game_id: str
    week: int
    home_team_id: int
    away_team_id: int
    status: GameStatus = GameStatus.SCHEDULED
    home_score: Optional[int] = None
    away_score: Optional[int] = None

    def __post_init__(self):
        if self.home_team_id == self.away_team_id:
            raise ValueError(f"Game {self.game_id}: team {self.home_team_id} cannot play itself")
        if self.status == GameStatus.FINAL and (self.home_score is None or self.away_score is None):
            raise ValueError(f"Game {self.game_id} is final but is missing a score")

    @property
    def is_final(self) -> bool:
        return self.status == GameStatus.FINAL

    def involves(self, team_id: int) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def opponent_of(self, team_id: int) -> int:
        if team_id == self.home_team_id:
            return self.away_team_id
        if team_id == self.away_team_id:
            return self.home_team_id
        raise ValueError(f"Team {team_id} does not play in game {self.game_id}")


@dataclass(frozen=True)
class GameOutcome:
    """Scores that count toward standings for one game."""
    home_team_id: int
    away_team_id: int
    home_score: int
    away_score: int
    is_projected: bool = False   # True when built from a selection

    @property
    def is_tie(self) -> bool:
        return self.home_score == self.away_score

    @property
    def winner_team_id(self) -> Optional[int]:
        if self.home_score > self.away_score:
            return self.home_team_id
        if self.away_score > self.home_score:
            return self.away_team_id
        return None

    def points_for(self, team_id: int) -> int:
        return self.home_score if team_id == self.home_team_id else self.away_score

    def points_against(self, team_id: int) -> int:
        return self.away_score if team_id == self.home_team_id else self.home_score

    def result_for(self, team_id: int) -> str:
        """'W', 'L' or 'T' from the given team's point of view."""
        if self.is_tie:
            return 'T'
        return 'W' if self.winner_team_id == team_id else 'L'


def resolve_outcome(
    game: Game,
    selections: Optional[Mapping[str, GameSelection]] = None,
    settings: Type[EngineSettings] = EngineSettings
) -> Optional[GameOutcome]:
    """
    Determine whether and how a game counts toward standings.

    Final games always use their real score, regardless of any selection
    for the same game id. Undecided games count only when they carry a
    home/away/tie selection, using placeholder scores.

    Returns:
        GameOutcome, or None when the game contributes to no record
    """
    if game.is_final:
        return GameOutcome(
            home_team_id=game.home_team_id,
            away_team_id=game.away_team_id,
            home_score=game.home_score,
            away_score=game.away_score,
        )

    selection = (selections or {}).get(game.game_id, GameSelection.NONE)

    if selection == GameSelection.HOME:
        home_score, away_score = settings.PLACEHOLDER_WINNER_SCORE, settings.PLACEHOLDER_LOSER_SCORE
    elif selection == GameSelection.AWAY:
        home_score, away_score = settings.PLACEHOLDER_LOSER_SCORE, settings.PLACEHOLDER_WINNER_SCORE
    elif selection == GameSelection.TIE:
        home_score = away_score = settings.PLACEHOLDER_TIE_SCORE
    else:
        return None

    return GameOutcome(
        home_team_id=game.home_team_id,
        away_team_id=game.away_team_id,
        home_score=home_score,
        away_score=away_score,
        is_projected=True,
    )
