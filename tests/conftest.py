"""
Pytest configuration for test discovery and imports.

Provides fixtures for testing including:
- The standard 32-team registry
- A miniature two-team-per-division league for scenario searches
- A schedule builder for final and scheduled games
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

import pytest


# Determine paths
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
tests_path = project_root / "tests"


def pytest_configure(config):
    """Configure pytest - runs very early in startup.

    src/ must come first so engine packages resolve before any
    same-named test directories.
    """
    if str(src_path) in sys.path:
        sys.path.remove(str(src_path))
    sys.path.insert(0, str(src_path))


from shared.game_models import Game, GameStatus  # noqa: E402
from team_registry.league_team_registry import Team, TeamRegistry, create_nfl_registry  # noqa: E402


MINI_DIVISIONS = [
    ('AFC', 'AFC East'), ('AFC', 'AFC North'), ('AFC', 'AFC South'), ('AFC', 'AFC West'),
    ('NFC', 'NFC East'), ('NFC', 'NFC North'), ('NFC', 'NFC South'), ('NFC', 'NFC West'),
]


# ============================================================================
# SCHEDULE BUILDER
# ============================================================================

class ScheduleBuilder:
    """
    Builds Game lists with unique ids and increasing weeks.

    Usage:
        schedule = ScheduleBuilder()
        schedule.win(1, 2)              # team 1 beats team 2 at home
        schedule.final(3, 4, 20, 20)    # tie
        schedule.scheduled(5, 6)        # not yet played
        games = schedule.games
    """

    def __init__(self, prefix: str = "g"):
        self.prefix = prefix
        self.games: List[Game] = []

    def _next_id(self) -> str:
        return f"{self.prefix}{len(self.games) + 1:04d}"

    def _next_week(self, week: Optional[int]) -> int:
        return week if week is not None else len(self.games) + 1

    def final(self, home: int, away: int, home_score: int, away_score: int, week: Optional[int] = None) -> Game:
        game = Game(
            game_id=self._next_id(),
            week=self._next_week(week),
            home_team_id=home,
            away_team_id=away,
            status=GameStatus.FINAL,
            home_score=home_score,
            away_score=away_score,
        )
        self.games.append(game)
        return game

    def win(self, winner: int, loser: int, week: Optional[int] = None) -> Game:
        """Final game won by the home team 27-20."""
        return self.final(winner, loser, 27, 20, week)

    def wins(self, winner: int, loser: int, count: int) -> List[Game]:
        return [self.win(winner, loser) for _ in range(count)]

    def scheduled(self, home: int, away: int, week: Optional[int] = None) -> Game:
        game = Game(
            game_id=self._next_id(),
            week=self._next_week(week),
            home_team_id=home,
            away_team_id=away,
        )
        self.games.append(game)
        return game


# ============================================================================
# REGISTRY FIXTURES
# ============================================================================

@pytest.fixture(scope="session")
def nfl_registry():
    """Standard 32-team NFL registry."""
    return create_nfl_registry()


@pytest.fixture(scope="session")
def mini_registry():
    """
    16-team league: 2 conferences x 4 divisions x 2 teams.

    AFC East 1-2, AFC North 3-4, AFC South 5-6, AFC West 7-8,
    NFC East 9-10, NFC North 11-12, NFC South 13-14, NFC West 15-16.
    Eight teams per conference leave exactly one team out of the playoffs.
    """
    teams = []
    team_id = 1
    for conference, division in MINI_DIVISIONS:
        for _ in range(2):
            teams.append(Team(
                team_id=team_id,
                city=f"City {team_id}",
                nickname=f"Team {team_id}",
                abbreviation=f"T{team_id:02d}",
                conference=conference,
                division=division,
            ))
            team_id += 1
    return TeamRegistry(teams)


# ============================================================================
# SCHEDULE FIXTURES
# ============================================================================

@pytest.fixture
def schedule():
    """Fresh schedule builder per test."""
    return ScheduleBuilder()


@pytest.fixture(scope="session")
def season_2024_games(nfl_registry):
    """
    All 272 games of the 2024 regular season as final games.

    Rows in fixtures/season_2024_games.json are
    [game_id, week, home_abbr, away_abbr, home_score, away_score].
    """
    fixture_file = tests_path / "playoff_system" / "fixtures" / "season_2024_games.json"
    with open(fixture_file, 'r', encoding='utf-8') as f:
        rows = json.load(f)

    games = []
    for game_id, week, home, away, home_score, away_score in rows:
        games.append(Game(
            game_id=game_id,
            week=week,
            home_team_id=nfl_registry.get_team_by_abbreviation(home).team_id,
            away_team_id=nfl_registry.get_team_by_abbreviation(away).team_id,
            status=GameStatus.FINAL,
            home_score=home_score,
            away_score=away_score,
        ))
    return games
