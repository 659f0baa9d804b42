"""
Playoff Seeder

Calculates NFL playoff seeding from a schedule and hypothetical selections.
Pure calculation logic - no persistence or side effects.
Can calculate seeding at any point in the season.

Seeding procedure per conference:
1. Division winners: best win percentage in each division, ties broken
   with the division rule set
2. Seeds 1-4: division winners ranked by win percentage, ties broken
   with the division rule set
3. Seeds 5-7: best three of the remaining teams, ties broken with the
   wildcard rule set after reducing each division to its best team
4. Positions 8+: win percentage, then strength of schedule, then team id
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Type

from config.engine_settings import EngineSettings
from shared.game_models import Game, GameSelection
from standings.record_aggregator import RecordAggregator
from standings.team_record import TeamRecord
from team_registry.league_team_registry import TeamRegistry
from .playoff_exceptions import InsufficientTeamDataException, InvalidSeedingException
from .seeding_models import ClinchStatus, ConferenceSeeding, PlayoffSeeding, Standing
from .tiebreakers import TieType, TiebreakerResolver, strength_of_schedule


logger = logging.getLogger(__name__)


class PlayoffSeeder:
    """
    Calculates conference standings and playoff seeds.

    Usage:
        seeder = PlayoffSeeder(create_nfl_registry())
        seeding = seeder.calculate_seeding(games, selections)
        seeding.afc.seeds[0].team.abbreviation   # '#1 seed'
        seeding.get_standing(14).seed

    The seeder keeps no state between calls; every calculation builds
    fresh records, a fresh resolver and fresh Standing objects.
    """

    def __init__(
        self,
        registry: TeamRegistry,
        settings: Type[EngineSettings] = EngineSettings
    ):
        self.registry = registry
        self.settings = settings
        self.aggregator = RecordAggregator(registry, settings)

    def calculate_seeding(
        self,
        games: Sequence[Game],
        selections: Optional[Mapping[str, GameSelection]] = None
    ) -> PlayoffSeeding:
        """
        Calculate standings and seeds for both conferences.

        Args:
            games: Full regular season schedule
            selections: game_id -> hypothetical outcome for undecided games

        Returns:
            PlayoffSeeding with both conferences' standings
        """
        records = self.aggregator.calculate_team_records(games, selections)
        resolver = TiebreakerResolver(self.registry, records, self.settings)

        afc = self._seed_conference('AFC', records, resolver)
        nfc = self._seed_conference('NFC', records, resolver)

        return PlayoffSeeding(
            afc=afc,
            nfc=nfc,
            tiebreakers_applied=[application.to_dict() for application in resolver.applications]
        )

    def calculate_conference_seeding(
        self,
        conference: str,
        games: Sequence[Game],
        selections: Optional[Mapping[str, GameSelection]] = None,
        records: Optional[Mapping[int, TeamRecord]] = None
    ) -> ConferenceSeeding:
        """
        Calculate standings for a single conference.

        Args:
            conference: 'AFC' or 'NFC'
            games: Full regular season schedule
            selections: game_id -> hypothetical outcome
            records: Precomputed league-wide records (skips aggregation)
        """
        if records is None:
            records = self.aggregator.calculate_team_records(games, selections)
        resolver = TiebreakerResolver(self.registry, records, self.settings)
        return self._seed_conference(conference, records, resolver)

    def _seed_conference(
        self,
        conference: str,
        records: Mapping[int, TeamRecord],
        resolver: TiebreakerResolver
    ) -> ConferenceSeeding:
        divisions = self._validate_conference(conference)

        # Step 1: Division winners
        division_winners = []
        division_pool = []
        for division in divisions:
            team_ids = [team.team_id for team in self.registry.get_division_teams(division)]
            leader = self._get_division_winner(division, team_ids, records, resolver)
            division_winners.append(leader)
            division_pool.extend(tid for tid in team_ids if tid != leader)

        # Step 2: Seeds 1-4
        ranked_winners = []
        for group in self._group_by_win_percentage(division_winners, records):
            if len(group) == 1:
                ranked_winners.extend(group)
            else:
                ranked_winners.extend(
                    resolver.order(group, TieType.DIVISION, context=f"{conference} division winner seeding")
                )

        # Step 3: Seeds 5-7
        wildcards = self._select_wildcards(conference, division_pool, records, resolver)

        # Step 4: Everyone else
        remainder = [tid for tid in division_pool if tid not in wildcards]
        remainder.sort(key=lambda tid: self._non_playoff_sort_key(tid, records))

        standings = []
        for position, team_id in enumerate(ranked_winners + wildcards + remainder, start=1):
            seed = position if position <= self.settings.PLAYOFF_TEAMS_PER_CONFERENCE else None
            standings.append(Standing(
                team=self.registry.get_team(team_id),
                record=records[team_id],
                seed=seed,
                clinched=self._position_clinch_status(seed),
                is_eliminated=seed is None,
            ))

        seeding = ConferenceSeeding(conference=conference, standings=standings)
        self._validate_seeding(seeding)

        logger.info(
            f"{conference} seeds: " + ", ".join(
                f"{s.seed}. {s.team.abbreviation} ({s.record_string})" for s in seeding.seeds
            )
        )
        return seeding

    def _validate_conference(self, conference: str) -> List[str]:
        teams = self.registry.get_conference_teams(conference)
        divisions = self.registry.get_divisions(conference)

        if not teams:
            raise InsufficientTeamDataException(
                f"No teams registered for conference '{conference}'",
                missing_field="conference",
                conference=conference
            )
        if len(teams) < self.settings.PLAYOFF_TEAMS_PER_CONFERENCE:
            raise InsufficientTeamDataException(
                f"{conference} has {len(teams)} teams, fewer than "
                f"{self.settings.PLAYOFF_TEAMS_PER_CONFERENCE} playoff spots",
                conference=conference
            )
        if len(divisions) != self.settings.DIVISION_WINNER_SEEDS:
            raise InsufficientTeamDataException(
                f"{conference} has {len(divisions)} divisions, expected "
                f"{self.settings.DIVISION_WINNER_SEEDS}",
                missing_field="division",
                conference=conference
            )
        return divisions

    def _get_division_winner(
        self,
        division: str,
        team_ids: List[int],
        records: Mapping[int, TeamRecord],
        resolver: TiebreakerResolver
    ) -> int:
        leaders = self._group_by_win_percentage(team_ids, records)[0]
        if len(leaders) == 1:
            return leaders[0]
        return resolver.order(leaders, TieType.DIVISION, context=f"{division} title")[0]

    def _select_wildcards(
        self,
        conference: str,
        pool: List[int],
        records: Mapping[int, TeamRecord],
        resolver: TiebreakerResolver
    ) -> List[int]:
        selected: List[int] = []
        for group in self._group_by_win_percentage(pool, records):
            open_slots = self.settings.WILDCARD_SEEDS - len(selected)
            if open_slots <= 0:
                break
            if len(group) == 1:
                selected.extend(group)
            else:
                selected.extend(self._order_wildcard_tie(conference, group, open_slots, resolver))
        return selected

    def _order_wildcard_tie(
        self,
        conference: str,
        group: List[int],
        picks: int,
        resolver: TiebreakerResolver
    ) -> List[int]:
        """
        Pick the best teams out of a wildcard tie, one at a time.

        Only the top team of each division is eligible at each pick, so
        a division's ordering is always settled by the division rules
        before its teams are compared with other divisions.
        """
        remaining = list(group)
        ordered: List[int] = []

        while remaining and len(ordered) < picks:
            if len(remaining) == 1:
                ordered.append(remaining[0])
                break

            by_division: Dict[str, List[int]] = {}
            for team_id in remaining:
                by_division.setdefault(self.registry.get_team(team_id).division, []).append(team_id)

            candidates = []
            for division in sorted(by_division):
                members = by_division[division]
                if len(members) == 1:
                    candidates.append(members[0])
                else:
                    candidates.append(
                        resolver.order(members, TieType.DIVISION, context=f"{division} wildcard elimination")[0]
                    )

            if len(candidates) == 1:
                best = candidates[0]
            else:
                best = resolver.order(candidates, TieType.WILDCARD, context=f"{conference} wildcard")[0]

            ordered.append(best)
            remaining.remove(best)

        return ordered

    def _group_by_win_percentage(
        self,
        team_ids: List[int],
        records: Mapping[int, TeamRecord]
    ) -> List[List[int]]:
        """Teams grouped by identical win percentage, best group first."""
        groups: Dict[float, List[int]] = {}
        for team_id in sorted(team_ids):
            pct = round(records[team_id].win_percentage, self.settings.METRIC_PRECISION)
            groups.setdefault(pct, []).append(team_id)
        return [groups[pct] for pct in sorted(groups, reverse=True)]

    def _non_playoff_sort_key(self, team_id: int, records: Mapping[int, TeamRecord]):
        precision = self.settings.METRIC_PRECISION
        return (
            -round(records[team_id].win_percentage, precision),
            -round(strength_of_schedule(team_id, records), precision),
            team_id,
        )

    def _position_clinch_status(self, seed: Optional[int]) -> Optional[ClinchStatus]:
        """Provisional status from current position; refined by ClinchingCalculator."""
        if seed is None:
            return None
        if seed == 1:
            return ClinchStatus.BYE
        if seed <= self.settings.DIVISION_WINNER_SEEDS:
            return ClinchStatus.DIVISION
        return ClinchStatus.PLAYOFF

    def _validate_seeding(self, seeding: ConferenceSeeding) -> None:
        seeds = seeding.seeds
        expected = list(range(1, self.settings.PLAYOFF_TEAMS_PER_CONFERENCE + 1))

        if [s.seed for s in seeds] != expected:
            raise InvalidSeedingException(
                f"Seeds {[s.seed for s in seeds]} are not a permutation of {expected}",
                conference=seeding.conference
            )

        winner_divisions = [s.team.division for s in seeding.division_winners]
        if len(set(winner_divisions)) != self.settings.DIVISION_WINNER_SEEDS:
            raise InvalidSeedingException(
                f"Division winner seeds do not cover {self.settings.DIVISION_WINNER_SEEDS} "
                f"distinct divisions: {winner_divisions}",
                conference=seeding.conference
            )
