"""
Playoff Seeding Data Models

Standings output for one calculation: a 16-team order per conference with
seeds 1-7, clinch status and elimination flags. Instances are rebuilt on
every calculation and never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from standings.team_record import TeamRecord
from team_registry.league_team_registry import Team


class ClinchStatus(Enum):
    """Best playoff status a team holds"""
    BYE = "bye"              # Seed 1, first-round bye
    DIVISION = "division"    # Division title
    PLAYOFF = "playoff"      # Playoff berth


@dataclass(frozen=True)
class MagicNumber:
    """
    Additional wins needed to lock each target.

    0 means already locked; None means no number of wins is enough on
    its own (or the team has no games left to influence it).
    """
    playoff: Optional[int] = None
    division: Optional[int] = None
    bye: Optional[int] = None
    scenarios: int = 0        # Standings calculations performed

    def for_target(self, target: str) -> Optional[int]:
        return getattr(self, target)


@dataclass(frozen=True)
class Standing:
    """
    One team's place in its conference standings.

    Contains complete record information and seeding context.
    """
    team: Team
    record: TeamRecord
    seed: Optional[int] = None               # 1-7, None outside the playoffs
    clinched: Optional[ClinchStatus] = None
    is_eliminated: bool = False
    magic_number: Optional[MagicNumber] = None

    @property
    def team_id(self) -> int:
        return self.team.team_id

    @property
    def wins(self) -> int:
        return self.record.wins

    @property
    def losses(self) -> int:
        return self.record.losses

    @property
    def ties(self) -> int:
        return self.record.ties

    @property
    def win_percentage(self) -> float:
        return self.record.win_percentage

    @property
    def record_string(self) -> str:
        return self.record.record_string

    @property
    def is_division_winner(self) -> bool:
        return self.seed is not None and self.seed <= 4

    @property
    def seed_label(self) -> str:
        """Get seed label (e.g., '#1 Seed (Bye)' or '#6 Seed (Wild Card)')."""
        if self.seed is None:
            return "Out"
        if self.seed == 1:
            return "#1 Seed (Bye)"
        elif self.seed <= 4:
            return f"#{self.seed} Seed (Division Winner)"
        return f"#{self.seed} Seed (Wild Card)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'team_id': self.team_id,
            'abbreviation': self.team.abbreviation,
            'division': self.team.division,
            'seed': self.seed,
            'record': self.record_string,
            'win_percentage': round(self.win_percentage, 6),
            'division_record': self.record.division_record,
            'conference_record': self.record.conference_record,
            'points_for': self.record.points_for,
            'points_against': self.record.points_against,
            'streak': self.record.streak,
            'clinched': self.clinched.value if self.clinched else None,
            'is_eliminated': self.is_eliminated,
        }


@dataclass
class ConferenceSeeding:
    """
    Standings for a single conference (AFC or NFC).

    standings holds every conference team, best to worst; the first
    seven carry seeds 1-7.
    """
    conference: str
    standings: List[Standing]

    def __post_init__(self):
        self._by_team: Dict[int, Standing] = {s.team_id: s for s in self.standings}

    @property
    def seeds(self) -> List[Standing]:
        """Seeded teams ordered 1-7."""
        return sorted((s for s in self.standings if s.seed is not None), key=lambda s: s.seed)

    @property
    def division_winners(self) -> List[Standing]:
        return [s for s in self.seeds if s.seed <= 4]

    @property
    def wildcards(self) -> List[Standing]:
        return [s for s in self.seeds if s.seed > 4]

    @property
    def clinched_teams(self) -> List[int]:
        return [s.team_id for s in self.standings if s.clinched is not None]

    @property
    def eliminated_teams(self) -> List[int]:
        return [s.team_id for s in self.standings if s.is_eliminated]

    @property
    def team_order(self) -> List[int]:
        return [s.team_id for s in self.standings]

    def get_seed_by_number(self, seed_number: int) -> Optional[Standing]:
        """Get standing holding a seed number (1-7)."""
        for standing in self.standings:
            if standing.seed == seed_number:
                return standing
        return None

    def get_standing(self, team_id: int) -> Optional[Standing]:
        return self._by_team.get(team_id)

    def get_seed_map(self) -> Dict[int, int]:
        """seed number -> team_id"""
        return {s.seed: s.team_id for s in self.seeds}


@dataclass
class PlayoffSeeding:
    """
    Complete standings for both conferences.

    This is the main output of the PlayoffSeeder calculation. It carries
    no timestamps: identical inputs produce equal objects and identical
    to_dict() output.
    """
    afc: ConferenceSeeding
    nfc: ConferenceSeeding
    tiebreakers_applied: List[Dict[str, Any]] = field(default_factory=list)

    def __post_init__(self):
        self._by_team: Dict[int, Standing] = {}
        for conference in self.conferences:
            for standing in conference.standings:
                self._by_team[standing.team_id] = standing

    @property
    def conferences(self) -> List[ConferenceSeeding]:
        return [self.afc, self.nfc]

    def get_conference(self, conference: str) -> ConferenceSeeding:
        for seeding in self.conferences:
            if seeding.conference == conference:
                return seeding
        raise KeyError(f"Unknown conference: {conference}")

    @property
    def all_standings(self) -> List[Standing]:
        return self.afc.standings + self.nfc.standings

    def get_standing(self, team_id: int) -> Optional[Standing]:
        """O(1) lookup of any team's standing."""
        return self._by_team.get(team_id)

    def get_seed(self, team_id: int) -> Optional[int]:
        standing = self._by_team.get(team_id)
        return standing.seed if standing else None

    def is_in_playoffs(self, team_id: int) -> bool:
        return self.get_seed(team_id) is not None

    def is_clinched(self, team_id: int) -> bool:
        standing = self._by_team.get(team_id)
        return standing is not None and standing.clinched is not None

    def is_eliminated(self, team_id: int) -> bool:
        standing = self._by_team.get(team_id)
        return standing is not None and standing.is_eliminated

    def get_matchups(self) -> Dict[str, List[Tuple[int, int]]]:
        """
        Wild card round matchups, higher seed first.

        Returns:
            {'AFC': [(2, 7), (3, 6), (4, 5)], 'NFC': [...]} as team ids
        """
        matchups = {}
        for conference in self.conferences:
            seed_map = conference.get_seed_map()
            matchups[conference.conference] = [
                (seed_map[high], seed_map[low]) for high, low in ((2, 7), (3, 6), (4, 5))
            ]
        return matchups

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: Dict[str, Any] = {}
        for conference in self.conferences:
            result[conference.conference.lower()] = {
                'standings': [standing.to_dict() for standing in conference.standings],
                'seeds': [standing.team_id for standing in conference.seeds],
            }
        result['tiebreakers_applied'] = list(self.tiebreakers_applied)
        return result
