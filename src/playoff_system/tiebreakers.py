"""
Tiebreaker Resolver

Orders a group of teams with identical win percentage using the NFL
tiebreaking cascade:

1. Head-to-head (only when every pair in the group has met)
2. Division record (division ties only)
3. Record in common games (minimum 4 common opponents)
4. Conference record
5. Strength of victory
6. Strength of schedule
7. Combined conference ranking in points scored and points allowed
8. Point differential
9. Team id (deterministic fallback)

Each step computes one value per team. The teams holding the best value
are separated from the rest; both the separated subset and the remaining
teams then restart the cascade from step 1. A step that separates no
one hands the whole group to the next step.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Type

from config.engine_settings import EngineSettings
from standings.team_record import TeamRecord
from team_registry.league_team_registry import TeamRegistry


logger = logging.getLogger(__name__)


class TieType(Enum):
    """Which rule set the cascade runs under"""
    DIVISION = "division"    # Division title, or ranking division winners
    WILDCARD = "wildcard"    # Wildcard spots


class TiebreakerStep(Enum):
    """Cascade steps, declared in the order they are applied"""
    HEAD_TO_HEAD = "head_to_head"
    DIVISION_RECORD = "division_record"
    COMMON_GAMES = "common_games"
    CONFERENCE_RECORD = "conference_record"
    STRENGTH_OF_VICTORY = "strength_of_victory"
    STRENGTH_OF_SCHEDULE = "strength_of_schedule"
    CONFERENCE_POINTS_RANK = "conference_points_rank"
    POINT_DIFFERENTIAL = "point_differential"
    TEAM_ID = "team_id"

    @property
    def display_name(self) -> str:
        return self.value.replace('_', ' ').title()


# Steps that compute a metric; TEAM_ID is the terminal fallback
CASCADE_STEPS = tuple(step for step in TiebreakerStep if step != TiebreakerStep.TEAM_ID)


@dataclass(frozen=True)
class TiebreakerApplication:
    """Record of one step separating a tied group."""
    step: TiebreakerStep
    tie_type: TieType
    teams: Tuple[int, ...]        # The tied group, team id order
    separated: Tuple[int, ...]    # Teams holding the best value
    context: str = ""             # e.g. "AFC East title"

    def to_dict(self) -> Dict[str, object]:
        return {
            'step': self.step.value,
            'tie_type': self.tie_type.value,
            'teams': list(self.teams),
            'separated': list(self.separated),
            'context': self.context,
        }


def strength_of_victory(team_id: int, records: Mapping[int, TeamRecord]) -> float:
    """
    Average full-season win percentage of the distinct opponents a team beat.

    Ties are not victories. A team without a win has a strength of victory of 0.
    """
    beaten = [
        records[opponent_id].win_percentage
        for opponent_id in sorted(records[team_id].defeated_opponents)
        if opponent_id in records
    ]
    if not beaten:
        return 0.0
    return sum(beaten) / len(beaten)


def strength_of_schedule(team_id: int, records: Mapping[int, TeamRecord]) -> float:
    """Average full-season win percentage of every distinct opponent played."""
    faced = [
        records[opponent_id].win_percentage
        for opponent_id in sorted(records[team_id].opponents)
        if opponent_id in records
    ]
    if not faced:
        return 0.0
    return sum(faced) / len(faced)


def conference_points_ranks(team_ids: Iterable[int], records: Mapping[int, TeamRecord]) -> Dict[int, int]:
    """
    Combined points-scored and points-allowed rank for each team.

    Ranks are competition ranks (equal values share a rank) over the
    given teams; lower combined rank is better.
    """
    pool = [records[tid] for tid in team_ids if tid in records]
    ranks = {}
    for record in pool:
        scored_rank = 1 + sum(1 for other in pool if other.points_for > record.points_for)
        allowed_rank = 1 + sum(1 for other in pool if other.points_against < record.points_against)
        ranks[record.team_id] = scored_rank + allowed_rank
    return ranks


class TiebreakerResolver:
    """
    Strict ordering of tied teams.

    A resolver is built per standings calculation; it caches nothing that
    outlives the records it was given.

    Usage:
        resolver = TiebreakerResolver(registry, records)
        ordered = resolver.order([5, 8, 6], TieType.DIVISION)
    """

    def __init__(
        self,
        registry: TeamRegistry,
        records: Mapping[int, TeamRecord],
        settings: Type[EngineSettings] = EngineSettings
    ):
        self.registry = registry
        self.records = records
        self.settings = settings
        self.applications: List[TiebreakerApplication] = []
        self._points_ranks: Dict[str, Dict[int, int]] = {}

    def order(self, team_ids: Iterable[int], tie_type: TieType, context: str = "") -> List[int]:
        """
        Order tied teams best first.

        Args:
            team_ids: Teams sharing the same win percentage (any order)
            tie_type: DIVISION or WILDCARD rule set
            context: Label stored with every recorded step

        Returns:
            Team ids, best first. Identical input sets always give
            identical output, whatever their input order.
        """
        group = sorted(set(team_ids))
        missing = [tid for tid in group if tid not in self.records]
        if missing:
            raise ValueError(f"No records for tied teams: {missing}")
        return self._break_tie(group, tie_type, context)

    def _break_tie(self, group: List[int], tie_type: TieType, context: str) -> List[int]:
        if len(group) <= 1:
            return list(group)

        for step in CASCADE_STEPS:
            values = self.evaluate_step(step, group, tie_type)
            if values is None:
                continue

            best = max(values.values())
            separated = [tid for tid in group if values[tid] == best]
            if len(separated) == len(group):
                continue

            still_tied = [tid for tid in group if values[tid] != best]
            self._record(step, tie_type, group, separated, context)
            return (
                self._break_tie(separated, tie_type, context)
                + self._break_tie(still_tied, tie_type, context)
            )

        self._record(TiebreakerStep.TEAM_ID, tie_type, group, group[:1], context)
        return list(group)

    def _record(
        self,
        step: TiebreakerStep,
        tie_type: TieType,
        group: List[int],
        separated: List[int],
        context: str
    ) -> None:
        self.applications.append(TiebreakerApplication(
            step=step,
            tie_type=tie_type,
            teams=tuple(group),
            separated=tuple(separated),
            context=context,
        ))
        logger.debug(
            f"{context or tie_type.value}: {step.display_name} separates "
            f"{separated} from {[tid for tid in group if tid not in separated]}"
        )

    def evaluate_step(
        self,
        step: TiebreakerStep,
        group: List[int],
        tie_type: TieType
    ) -> Optional[Dict[int, float]]:
        """
        Compute one step's value for every team in the group.

        Higher values are better for every step. Returns None when the
        step does not apply to this group.
        """
        if step == TiebreakerStep.HEAD_TO_HEAD:
            values = self._head_to_head(group)
        elif step == TiebreakerStep.DIVISION_RECORD:
            if tie_type != TieType.DIVISION:
                return None
            values = {tid: self.records[tid].division_win_percentage for tid in group}
        elif step == TiebreakerStep.COMMON_GAMES:
            values = self._common_games(group)
        elif step == TiebreakerStep.CONFERENCE_RECORD:
            values = {tid: self.records[tid].conference_win_percentage for tid in group}
        elif step == TiebreakerStep.STRENGTH_OF_VICTORY:
            values = {tid: strength_of_victory(tid, self.records) for tid in group}
        elif step == TiebreakerStep.STRENGTH_OF_SCHEDULE:
            values = {tid: strength_of_schedule(tid, self.records) for tid in group}
        elif step == TiebreakerStep.CONFERENCE_POINTS_RANK:
            values = {tid: -self._conference_points_rank(tid) for tid in group}
        elif step == TiebreakerStep.POINT_DIFFERENTIAL:
            values = {tid: self.records[tid].point_differential for tid in group}
        else:
            return None

        if values is None:
            return None
        return {tid: round(value, self.settings.METRIC_PRECISION) for tid, value in values.items()}

    def _head_to_head(self, group: List[int]) -> Optional[Dict[int, float]]:
        for team_a, team_b in combinations(group, 2):
            if team_b not in self.records[team_a].opponents:
                return None

        values = {}
        for tid in group:
            others = [other for other in group if other != tid]
            values[tid] = self.records[tid].win_percentage_against(others)
        return values

    def common_opponents(self, group: List[int]) -> List[int]:
        """Opponents every team in the group has played, excluding the group itself."""
        common = set(self.records[group[0]].opponents)
        for tid in group[1:]:
            common &= self.records[tid].opponents
        return sorted(common - set(group))

    def _common_games(self, group: List[int]) -> Optional[Dict[int, float]]:
        common = self.common_opponents(group)
        if len(common) < self.settings.MIN_COMMON_OPPONENTS:
            return None
        return {tid: self.records[tid].win_percentage_against(common) for tid in group}

    def _conference_points_rank(self, team_id: int) -> int:
        conference = self.registry.get_team(team_id).conference
        if conference not in self._points_ranks:
            conference_ids = [team.team_id for team in self.registry.get_conference_teams(conference)]
            self._points_ranks[conference] = conference_points_ranks(conference_ids, self.records)
        return self._points_ranks[conference][team_id]
