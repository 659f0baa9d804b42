"""
Record Aggregator

Reduces a schedule plus hypothetical selections into per-team records.
Pure calculation: every call starts from empty records, so it can be
invoked once per selection change without leftover state.
"""

import logging
from typing import Dict, Iterable, Mapping, Optional, Sequence, Type

from config.engine_settings import EngineSettings
from shared.game_models import Game, GameSelection, resolve_outcome
from team_registry.league_team_registry import TeamRegistry
from .team_record import GameLine, TeamRecord


logger = logging.getLogger(__name__)


class RecordAggregator:
    """
    Builds TeamRecord objects for a set of teams.

    Usage:
        aggregator = RecordAggregator(registry)
        records = aggregator.calculate_team_records(games, selections)
        afc_records = aggregator.calculate_team_records(games, selections, conference='AFC')
    """

    def __init__(
        self,
        registry: TeamRegistry,
        settings: Type[EngineSettings] = EngineSettings
    ):
        self.registry = registry
        self.settings = settings

    def calculate_team_records(
        self,
        games: Sequence[Game],
        selections: Optional[Mapping[str, GameSelection]] = None,
        team_ids: Optional[Iterable[int]] = None,
        conference: Optional[str] = None
    ) -> Dict[int, TeamRecord]:
        """
        Calculate records for the requested teams.

        Args:
            games: Full schedule (order does not matter)
            selections: game_id -> hypothetical outcome for undecided games
            team_ids: Teams to include (default: every registered team)
            conference: Limit to one conference's teams

        Returns:
            Dict mapping team_id to TeamRecord, in team id order.
            Games involving a team outside the included set are skipped.
        """
        included = self._included_team_ids(team_ids, conference)
        records = {team_id: TeamRecord(team_id=team_id) for team_id in included}

        contributing = 0
        for game in sorted(games, key=lambda g: (g.week, g.game_id)):
            home_record = records.get(game.home_team_id)
            away_record = records.get(game.away_team_id)
            if home_record is None or away_record is None:
                continue

            outcome = resolve_outcome(game, selections, self.settings)
            if outcome is None:
                continue

            is_division = self.registry.same_division(game.home_team_id, game.away_team_id)
            is_conference = self.registry.same_conference(game.home_team_id, game.away_team_id)

            for record, opponent_id in (
                (home_record, game.away_team_id),
                (away_record, game.home_team_id),
            ):
                record.add_game(
                    GameLine(
                        game_id=game.game_id,
                        week=game.week,
                        opponent_id=opponent_id,
                        result=outcome.result_for(record.team_id),
                        points_for=outcome.points_for(record.team_id),
                        points_against=outcome.points_against(record.team_id),
                        is_projected=outcome.is_projected,
                    ),
                    is_division=is_division,
                    is_conference=is_conference,
                )
            contributing += 1

        logger.debug(
            f"Aggregated {contributing} of {len(games)} games into {len(records)} team records"
        )
        return records

    def _included_team_ids(
        self,
        team_ids: Optional[Iterable[int]],
        conference: Optional[str]
    ) -> list:
        if team_ids is None:
            candidates = self.registry.team_ids
        else:
            candidates = sorted(set(team_ids))
            unknown = [tid for tid in candidates if tid not in self.registry]
            if unknown:
                raise ValueError(f"Unknown team ids: {unknown}")

        if conference is not None:
            candidates = [
                tid for tid in candidates
                if self.registry.get_team(tid).conference == conference
            ]
        return candidates


def calculate_team_records(
    registry: TeamRegistry,
    games: Sequence[Game],
    selections: Optional[Mapping[str, GameSelection]] = None,
    settings: Type[EngineSettings] = EngineSettings
) -> Dict[int, TeamRecord]:
    """Convenience wrapper: league-wide records for one schedule state."""
    return RecordAggregator(registry, settings).calculate_team_records(games, selections)
