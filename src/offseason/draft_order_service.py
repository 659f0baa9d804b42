"""
Draft Order Service

Calculates first-round NFL draft order from final standings and playoff
results, real or hypothetical.

NFL Draft Order Rules:
1. Picks 1-18: Non-playoff teams (worst -> best by record, SOS tiebreaker)
2. Picks 19-24: Wild Card Round losers
3. Picks 25-28: Divisional Round losers
4. Picks 29-30: Conference Championship losers
5. Pick 31: Super Bowl loser
6. Pick 32: Super Bowl winner

Within each tier teams are ordered worst record first, then weaker
strength of schedule first, then team id.

When a playoff round is not fully decided, each team already known to
have lost in it gets a pick range [pick, pick_max] covering every place
it could still occupy once the round's other games finish. The tier's
full block of picks is reserved either way.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from playoff_system.bracket_models import PlayoffBracket
from playoff_system.seeding_models import PlayoffSeeding
from playoff_system.tiebreakers import strength_of_schedule
from standings.team_record import TeamRecord


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DraftPick:
    """Single first-round draft slot"""
    pick: int
    team_id: int
    record: str                     # e.g., "4-13"
    reason: str                     # e.g., "non_playoff", "wild_card_loss"
    strength_of_schedule: float
    pick_max: Optional[int] = None  # Set when the exact pick is not yet known

    @property
    def is_uncertain(self) -> bool:
        return self.pick_max is not None and self.pick_max != self.pick

    @property
    def pick_label(self) -> str:
        if self.is_uncertain:
            return f"{self.pick}-{self.pick_max}"
        return str(self.pick)

    def __str__(self) -> str:
        return (f"Pick {self.pick_label}: Team {self.team_id} - "
                f"{self.reason} ({self.record}, SOS: {self.strength_of_schedule:.3f})")


class DraftOrderService:
    """
    Service for calculating round 1 draft order from a PlayoffSeeding
    and a PlayoffBracket.
    """

    PICKS_PER_ROUND = 32

    # Playoff team counts
    NON_PLAYOFF_TEAMS = 18
    WILD_CARD_LOSERS = 6
    DIVISIONAL_LOSERS = 4
    CONFERENCE_LOSERS = 2
    SUPER_BOWL_LOSER = 1
    SUPER_BOWL_WINNER = 1

    # (round name, tier size, reason)
    PLAYOFF_TIERS = (
        ('wild_card', WILD_CARD_LOSERS, 'wild_card_loss'),
        ('divisional', DIVISIONAL_LOSERS, 'divisional_loss'),
        ('conference', CONFERENCE_LOSERS, 'conference_loss'),
    )

    def __init__(self):
        self._sos_cache: Dict[int, float] = {}

    def calculate_draft_order(
        self,
        seeding: PlayoffSeeding,
        bracket: PlayoffBracket
    ) -> List[DraftPick]:
        """
        Calculate round 1 draft order.

        Args:
            seeding: Final regular season standings (all 32 teams)
            bracket: Playoff bracket built from the same seeding

        Returns:
            DraftPick list ordered by pick. Fully decided tiers produce one
            pick per team; partially decided tiers produce ranged picks for
            the known losers only; undecided Super Bowl slots are omitted.

        Raises:
            ValueError: If inputs are invalid
        """
        logger.info("Calculating draft order...")
        self._sos_cache = {}

        records = {standing.team_id: standing.record for standing in seeding.all_standings}
        self._validate_inputs(seeding, bracket, records)

        picks: List[DraftPick] = []
        next_pick = 1

        # 1. Non-playoff teams
        non_playoff = [s.team_id for s in seeding.all_standings if s.seed is None]
        for team_id in self._sort_teams_by_record(non_playoff, records):
            picks.append(self._create_pick(next_pick, team_id, 'non_playoff', records))
            next_pick += 1

        # 2-4. Wild card, divisional and conference losers
        for round_name, tier_size, reason in self.PLAYOFF_TIERS:
            picks.extend(self._tier_picks(bracket, round_name, tier_size, reason, next_pick, records))
            next_pick += tier_size

        # 5-6. Super Bowl
        super_bowl = bracket.super_bowl
        if super_bowl is not None and super_bowl.is_decided:
            picks.append(self._create_pick(next_pick, super_bowl.loser_team_id, 'super_bowl_loss', records))
            picks.append(self._create_pick(next_pick + 1, super_bowl.winner_team_id, 'super_bowl_win', records))

        picks.sort(key=lambda p: (p.pick, p.pick_max or p.pick, p.team_id))
        logger.info(f"Draft order calculation complete: {len(picks)} picks assigned")
        return picks

    def calculate_strength_of_schedule(
        self,
        team_id: int,
        records: Mapping[int, TeamRecord]
    ) -> float:
        """
        Calculate strength of schedule for a team.

        SOS = average win% of all distinct opponents faced

        Returns:
            Float between 0.0 and 1.0
        """
        if team_id in self._sos_cache:
            return self._sos_cache[team_id]

        if team_id not in records:
            raise ValueError(f"No record for team {team_id}")

        sos = strength_of_schedule(team_id, records)
        self._sos_cache[team_id] = sos
        logger.debug(f"Team {team_id} SOS: {sos:.3f} (based on {len(records[team_id].opponents)} opponents)")
        return sos

    def _validate_inputs(
        self,
        seeding: PlayoffSeeding,
        bracket: PlayoffBracket,
        records: Mapping[int, TeamRecord]
    ) -> None:
        if len(records) != self.PICKS_PER_ROUND:
            raise ValueError(f"Expected {self.PICKS_PER_ROUND} team records, got {len(records)}")

        seeded = sorted(s.team_id for s in seeding.all_standings if s.seed is not None)
        if len(seeded) != self.PICKS_PER_ROUND - self.NON_PLAYOFF_TEAMS:
            raise ValueError(
                f"Expected {self.PICKS_PER_ROUND - self.NON_PLAYOFF_TEAMS} playoff teams, got {len(seeded)}"
            )

        if sorted(bracket.playoff_team_ids) != seeded:
            raise ValueError("Bracket seeds do not match the standings' playoff teams")

        logger.debug("Input validation passed")

    def _tier_picks(
        self,
        bracket: PlayoffBracket,
        round_name: str,
        tier_size: int,
        reason: str,
        start_pick: int,
        records: Mapping[int, TeamRecord]
    ) -> List[DraftPick]:
        known_losers = bracket.get_round_losers(round_name)
        ordered = self._sort_teams_by_record(known_losers, records)

        if len(known_losers) == tier_size:
            return [
                self._create_pick(start_pick + offset, team_id, reason, records)
                for offset, team_id in enumerate(ordered)
            ]

        potential = self._potential_losers(bracket, round_name)
        picks = []
        for team_id in ordered:
            low, high = self._calculate_pick_range(team_id, known_losers, potential, tier_size, records)
            picks.append(self._create_pick(start_pick + low, team_id, reason, records, start_pick + high))
        return picks

    def _potential_losers(self, bracket: PlayoffBracket, round_name: str) -> List[int]:
        """
        Teams that could still lose in a round but have not yet.

        These are the teams still alive: playoff teams not yet eliminated
        by an earlier round and not already decided in this one.
        """
        eliminated = set(bracket.eliminated_before(round_name))
        decided = set()
        for game in bracket.get_round(round_name).games:
            if game.is_decided:
                decided.update(game.team_ids)
        return [
            team_id for team_id in bracket.playoff_team_ids
            if team_id not in eliminated and team_id not in decided
            and not (round_name == 'wild_card' and bracket.get_seed(team_id) == 1)
        ]

    def _calculate_pick_range(
        self,
        team_id: int,
        known_losers: Sequence[int],
        potential_losers: Sequence[int],
        tier_size: int,
        records: Mapping[int, TeamRecord]
    ) -> Tuple[int, int]:
        """
        Range of zero-based positions a known loser can take in its tier.

        The low end counts only known losers that pick earlier. The high
        end adds undecided teams that would pick earlier if they lost,
        limited by the open slots and by the known losers picking later.
        """
        key = self._draft_sort_key(team_id, records)
        others = [tid for tid in known_losers if tid != team_id]

        known_worse = sum(1 for tid in others if self._draft_sort_key(tid, records) < key)
        known_better = sum(1 for tid in others if self._draft_sort_key(tid, records) > key)
        unknown_worse = sum(
            1 for tid in potential_losers
            if tid not in known_losers and self._draft_sort_key(tid, records) < key
        )

        open_slots = tier_size - len(known_losers)
        low = known_worse
        high = min(known_worse + min(unknown_worse, open_slots), tier_size - 1 - known_better)
        return low, max(low, high)

    def _sort_teams_by_record(
        self,
        team_ids: Sequence[int],
        records: Mapping[int, TeamRecord]
    ) -> List[int]:
        """Worst record first; weaker schedule first; then team id."""
        return sorted(team_ids, key=lambda tid: self._draft_sort_key(tid, records))

    def _draft_sort_key(self, team_id: int, records: Mapping[int, TeamRecord]) -> Tuple[float, float, int]:
        return (
            round(records[team_id].win_percentage, 6),
            round(self.calculate_strength_of_schedule(team_id, records), 6),
            team_id,
        )

    def _create_pick(
        self,
        pick: int,
        team_id: int,
        reason: str,
        records: Mapping[int, TeamRecord],
        pick_max: Optional[int] = None
    ) -> DraftPick:
        return DraftPick(
            pick=pick,
            team_id=team_id,
            record=records[team_id].record_string,
            reason=reason,
            strength_of_schedule=self.calculate_strength_of_schedule(team_id, records),
            pick_max=pick_max if pick_max is not None and pick_max != pick else None,
        )
