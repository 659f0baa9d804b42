"""
League Team Registry

Immutable lookup table of teams, conferences and divisions.
A registry is built explicitly and passed to every engine component;
there is no module-level instance, so tests can run the engine against
synthetic leagues of any shape.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional


logger = logging.getLogger(__name__)

DEFAULT_TEAMS_FILE = Path(__file__).parent / "nfl_teams.json"


@dataclass(frozen=True)
class Team:
    """Complete team information"""
    team_id: int
    city: str
    nickname: str
    abbreviation: str
    conference: str        # "AFC" or "NFC"
    division: str          # e.g., "AFC North"

    @property
    def full_name(self) -> str:
        return f"{self.city} {self.nickname}"

    @classmethod
    def from_dict(cls, team_id: int, data: Dict[str, Any]) -> 'Team':
        """Create Team from dictionary data"""
        return cls(
            team_id=team_id,
            city=data['city'],
            nickname=data['nickname'],
            abbreviation=data['abbreviation'],
            conference=data['conference'],
            division=data['division'],
        )

    def __str__(self) -> str:
        return self.abbreviation


class TeamRegistry:
    """
    Read-only collection of teams with conference/division indices.

    Conference and division lists keep team id order, so every caller
    sees the same deterministic iteration order.
    """

    def __init__(self, teams: Iterable[Team]):
        self._teams: Dict[int, Team] = {}
        self._abbreviation_to_id: Dict[str, int] = {}
        self._conferences: Dict[str, List[int]] = {}
        self._divisions: Dict[str, List[int]] = {}

        for team in sorted(teams, key=lambda t: t.team_id):
            if team.team_id in self._teams:
                raise ValueError(f"Duplicate team_id in registry: {team.team_id}")
            self._teams[team.team_id] = team

        self._build_lookup_indices()

    def _build_lookup_indices(self) -> None:
        for team_id, team in self._teams.items():
            self._abbreviation_to_id[team.abbreviation.upper()] = team_id
            self._conferences.setdefault(team.conference, []).append(team_id)
            self._divisions.setdefault(team.division, []).append(team_id)

    def __iter__(self) -> Iterator[Team]:
        return iter(self._teams.values())

    def __len__(self) -> int:
        return len(self._teams)

    def __contains__(self, team_id: object) -> bool:
        return team_id in self._teams

    @property
    def team_ids(self) -> List[int]:
        return list(self._teams.keys())

    @property
    def conferences(self) -> List[str]:
        return sorted(self._conferences.keys())

    def get_team(self, team_id: int) -> Team:
        """
        Get a team by id.

        Raises:
            KeyError: If the team id is not registered
        """
        try:
            return self._teams[team_id]
        except KeyError:
            raise KeyError(f"Unknown team_id: {team_id}") from None

    def find_team(self, team_id: int) -> Optional[Team]:
        return self._teams.get(team_id)

    def get_team_by_abbreviation(self, abbreviation: str) -> Optional[Team]:
        team_id = self._abbreviation_to_id.get(abbreviation.upper())
        if team_id is None:
            return None
        return self._teams[team_id]

    def get_conference_teams(self, conference: str) -> List[Team]:
        return [self._teams[tid] for tid in self._conferences.get(conference, [])]

    def get_division_teams(self, division: str) -> List[Team]:
        return [self._teams[tid] for tid in self._divisions.get(division, [])]

    def get_divisions(self, conference: Optional[str] = None) -> List[str]:
        """Division names, optionally limited to one conference."""
        divisions = sorted(self._divisions.keys())
        if conference is None:
            return divisions
        return [
            division for division in divisions
            if self._teams[self._divisions[division][0]].conference == conference
        ]

    def same_division(self, team_a: int, team_b: int) -> bool:
        return self._teams[team_a].division == self._teams[team_b].division

    def same_conference(self, team_a: int, team_b: int) -> bool:
        return self._teams[team_a].conference == self._teams[team_b].conference


def load_teams(teams_file: Path = DEFAULT_TEAMS_FILE) -> List[Team]:
    """
    Load team definitions from a JSON file.

    The file maps team id strings to team data, optionally nested
    under a top-level "teams" key.
    """
    if not teams_file.exists():
        raise FileNotFoundError(f"Teams file not found: {teams_file}")

    with open(teams_file, 'r', encoding='utf-8') as f:
        data = json.load(f)

    teams_data = data.get("teams", data)
    return [Team.from_dict(int(team_id), team_data) for team_id, team_data in teams_data.items()]


def create_nfl_registry(teams_file: Path = DEFAULT_TEAMS_FILE) -> TeamRegistry:
    """Build the standard 32-team registry."""
    registry = TeamRegistry(load_teams(teams_file))
    logger.debug(f"Loaded {len(registry)} teams from {teams_file.name}")
    return registry
