"""
Team Record

Per-team season record derived from the schedule on every calculation.
Records are rebuilt from scratch each time; nothing here is persisted.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set


def win_percentage(wins: int, losses: int, ties: int) -> float:
    """Win percentage with ties counted as half a win (0.0 with no games)."""
    games = wins + losses + ties
    if games == 0:
        return 0.0
    return (wins + ties * 0.5) / games


def format_record(wins: int, losses: int, ties: int) -> str:
    """Get record as string (e.g., '10-7' or '10-6-1')."""
    if ties > 0:
        return f"{wins}-{losses}-{ties}"
    return f"{wins}-{losses}"


@dataclass(frozen=True)
class GameLine:
    """One contributing game from a single team's point of view."""
    game_id: str
    week: int
    opponent_id: int
    result: str                 # 'W', 'L' or 'T'
    points_for: int
    points_against: int
    is_projected: bool = False  # placeholder score from a selection


@dataclass
class TeamRecord:
    """Regular season record with division/conference splits."""
    team_id: int
    wins: int = 0
    losses: int = 0
    ties: int = 0
    division_wins: int = 0
    division_losses: int = 0
    division_ties: int = 0
    conference_wins: int = 0
    conference_losses: int = 0
    conference_ties: int = 0
    points_for: int = 0
    points_against: int = 0
    opponents: Set[int] = field(default_factory=set)
    results: List[GameLine] = field(default_factory=list)

    def add_game(self, line: GameLine, is_division: bool, is_conference: bool) -> None:
        """
        Count a contributing game.

        Division games always count toward the conference split as well.
        """
        self.results.append(line)
        self.opponents.add(line.opponent_id)
        self.points_for += line.points_for
        self.points_against += line.points_against

        if line.result == 'W':
            self.wins += 1
        elif line.result == 'L':
            self.losses += 1
        else:
            self.ties += 1

        if is_division:
            if line.result == 'W':
                self.division_wins += 1
            elif line.result == 'L':
                self.division_losses += 1
            else:
                self.division_ties += 1

        if is_conference or is_division:
            if line.result == 'W':
                self.conference_wins += 1
            elif line.result == 'L':
                self.conference_losses += 1
            else:
                self.conference_ties += 1

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def win_percentage(self) -> float:
        return win_percentage(self.wins, self.losses, self.ties)

    @property
    def division_win_percentage(self) -> float:
        return win_percentage(self.division_wins, self.division_losses, self.division_ties)

    @property
    def conference_win_percentage(self) -> float:
        return win_percentage(self.conference_wins, self.conference_losses, self.conference_ties)

    @property
    def point_differential(self) -> int:
        return self.points_for - self.points_against

    @property
    def record_string(self) -> str:
        return format_record(self.wins, self.losses, self.ties)

    @property
    def division_record(self) -> str:
        return format_record(self.division_wins, self.division_losses, self.division_ties)

    @property
    def conference_record(self) -> str:
        return format_record(self.conference_wins, self.conference_losses, self.conference_ties)

    @property
    def defeated_opponents(self) -> Set[int]:
        """Distinct opponents beaten at least once (ties do not count)."""
        return {line.opponent_id for line in self.results if line.result == 'W'}

    @property
    def streak(self) -> str:
        """Current streak, e.g. 'W3' or 'L1' (empty with no games)."""
        if not self.results:
            return ""

        current = self.results[-1].result
        streak_count = 0
        for line in reversed(self.results):
            if line.result != current:
                break
            streak_count += 1

        return f"{current}{streak_count}"

    @property
    def last_five(self) -> str:
        """Record over the five most recent contributing games, e.g. '3-2'."""
        recent = [line.result for line in self.results[-5:]]
        return format_record(recent.count('W'), recent.count('L'), recent.count('T'))

    def results_against(self, opponent_ids: Iterable[int]) -> List[GameLine]:
        opponent_set = set(opponent_ids)
        return [line for line in self.results if line.opponent_id in opponent_set]

    def win_percentage_against(self, opponent_ids: Iterable[int]) -> Optional[float]:
        """
        Win percentage in games against the given opponents only.

        Returns:
            Float, or None when no such game has been played
        """
        lines = self.results_against(opponent_ids)
        if not lines:
            return None
        return win_percentage(
            sum(1 for line in lines if line.result == 'W'),
            sum(1 for line in lines if line.result == 'L'),
            sum(1 for line in lines if line.result == 'T'),
        )
