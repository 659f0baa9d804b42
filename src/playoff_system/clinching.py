"""
Clinching Calculator

Magic numbers and elimination on top of the standings engine.

Both questions are answered by running the seeder against hypothetical
completions of the remaining schedule. A "remaining" game is one that
does not yet count toward standings: not final and without a selection.
Remaining games are completed with home or away wins only.

When few enough other conference-relevant games are left, every outcome
combination is tried. Otherwise both answers fall back to counting
proofs over best and worst possible records, which only ever report a
team as eliminated or a target as locked when that is certain.

- Elimination: the team wins every remaining game of its own and still
  misses the playoffs in every scenario.
- Magic number: the smallest k such that winning any k of the team's
  remaining games (losing the rest) holds the target in every scenario.
"""

import logging
from dataclasses import replace
from itertools import combinations, product
from math import comb
from typing import Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Type

from config.engine_settings import EngineSettings
from shared.game_models import Game, GameSelection, resolve_outcome
from standings.team_record import TeamRecord, win_percentage
from team_registry.league_team_registry import TeamRegistry
from .playoff_seeder import PlayoffSeeder
from .seeding_models import ClinchStatus, ConferenceSeeding, MagicNumber, PlayoffSeeding, Standing


logger = logging.getLogger(__name__)

TARGETS = ('playoff', 'division', 'bye')


class ClinchingCalculator:
    """
    Clinch, elimination and magic number calculations.

    Usage:
        calculator = ClinchingCalculator(registry)
        calculator.is_eliminated(12, games, selections)
        calculator.calculate_magic_number(14, games, selections, 'bye')
        annotated = calculator.annotate(seeding, games, selections)
    """

    def __init__(
        self,
        registry: TeamRegistry,
        settings: Type[EngineSettings] = EngineSettings
    ):
        self.registry = registry
        self.settings = settings
        self.seeder = PlayoffSeeder(registry, settings)
        self.scenarios_evaluated = 0
        # selections -> records, only populated while annotate() runs
        self._records_cache: Optional[Dict[FrozenSet, Dict[int, TeamRecord]]] = None

    # ================================================================
    # PUBLIC API
    # ================================================================

    def is_eliminated(
        self,
        team_id: int,
        games: Sequence[Game],
        selections: Optional[Mapping[str, GameSelection]] = None
    ) -> bool:
        """
        Check whether a team can no longer reach a playoff seed.

        Returns:
            True only when the team misses the playoffs in every scenario
            (see module docstring)
        """
        selections = dict(selections or {})
        team = self.registry.get_team(team_id)
        own_games, other_games = self._split_remaining(team_id, games, selections)
        relevant = [g for g in other_games if self._touches_conference(g, team.conference)]
        relevant_ids = {g.game_id for g in relevant}
        irrelevant = [g for g in other_games if g.game_id not in relevant_ids]

        base = dict(selections)
        base.update(self._own_outcomes(team_id, own_games, won=own_games))
        base.update({g.game_id: GameSelection.HOME for g in irrelevant})

        if len(relevant) > self.settings.EXHAUSTIVE_ELIMINATION_LIMIT:
            return self._eliminated_by_count(team_id, games, base, relevant)

        # Quick check before enumerating
        favorable = dict(base)
        favorable.update(self._complete(relevant, self._favorable_winner, team_id, games, base))
        if self._holds_target(team_id, games, favorable, 'playoff'):
            return False

        for outcome in product((GameSelection.HOME, GameSelection.AWAY), repeat=len(relevant)):
            scenario = dict(base)
            scenario.update({g.game_id: pick for g, pick in zip(relevant, outcome)})
            if self._holds_target(team_id, games, scenario, 'playoff'):
                return False
        return True

    def calculate_magic_number(
        self,
        team_id: int,
        games: Sequence[Game],
        selections: Optional[Mapping[str, GameSelection]] = None,
        target: str = 'playoff'
    ) -> Optional[int]:
        """
        Minimum additional wins that lock the target.

        Args:
            team_id: Team to evaluate
            games: Full schedule
            selections: Current hypothetical selections (treated as settled)
            target: 'playoff', 'division' or 'bye'

        Returns:
            0 if already locked, the number of wins needed otherwise,
            or None when winning out does not guarantee the target
        """
        if target not in TARGETS:
            raise ValueError(f"Unknown clinch target '{target}', expected one of {TARGETS}")
        if self.registry.find_team(team_id) is None:
            logger.warning(f"Magic number requested for unknown team {team_id}")
            return None
        return self._magic_number(team_id, games, dict(selections or {}), target)

    def calculate_magic_numbers(
        self,
        team_id: int,
        games: Sequence[Game],
        selections: Optional[Mapping[str, GameSelection]] = None
    ) -> MagicNumber:
        """
        Magic numbers for every target.

        A bye implies the division and a division implies a playoff
        spot, so the bye number caps the others and a playoff spot that
        cannot be guaranteed rules out both stronger targets.
        """
        if self.registry.find_team(team_id) is None:
            logger.warning(f"Magic numbers requested for unknown team {team_id}")
            return MagicNumber()

        selections = dict(selections or {})
        start = self.scenarios_evaluated

        bye = self._magic_number(team_id, games, selections, 'bye')
        if bye == 0:
            return MagicNumber(playoff=0, division=0, bye=0, scenarios=self.scenarios_evaluated - start)

        playoff = self._magic_number(team_id, games, selections, 'playoff', ceiling=bye)
        if playoff is None:
            return MagicNumber(scenarios=self.scenarios_evaluated - start)

        division = self._magic_number(team_id, games, selections, 'division', ceiling=bye)
        return MagicNumber(
            playoff=playoff,
            division=division,
            bye=bye,
            scenarios=self.scenarios_evaluated - start
        )

    def annotate(
        self,
        seeding: PlayoffSeeding,
        games: Sequence[Game],
        selections: Optional[Mapping[str, GameSelection]] = None
    ) -> PlayoffSeeding:
        """
        Replace position-based clinch flags with computed ones.

        Returns:
            New PlayoffSeeding; the input is not modified
        """
        start = self.scenarios_evaluated
        self._records_cache = {}
        try:
            conferences = []
            for conference in seeding.conferences:
                standings = [
                    self._annotate_standing(standing, games, selections)
                    for standing in conference.standings
                ]
                conferences.append(ConferenceSeeding(conference=conference.conference, standings=standings))
        finally:
            self._records_cache = None

        logger.info(f"Clinching annotated after {self.scenarios_evaluated - start} scenarios")
        return PlayoffSeeding(
            afc=conferences[0],
            nfc=conferences[1],
            tiebreakers_applied=list(seeding.tiebreakers_applied)
        )

    # ================================================================
    # SCENARIO EVALUATION
    # ================================================================

    def _annotate_standing(
        self,
        standing: Standing,
        games: Sequence[Game],
        selections: Optional[Mapping[str, GameSelection]]
    ) -> Standing:
        start = self.scenarios_evaluated
        if self.is_eliminated(standing.team_id, games, selections):
            magic = MagicNumber(scenarios=self.scenarios_evaluated - start)
            return replace(standing, clinched=None, is_eliminated=True, magic_number=magic)

        magic = self.calculate_magic_numbers(standing.team_id, games, selections)
        magic = replace(magic, scenarios=self.scenarios_evaluated - start)

        clinched = None
        if magic.bye == 0:
            clinched = ClinchStatus.BYE
        elif magic.division == 0:
            clinched = ClinchStatus.DIVISION
        elif magic.playoff == 0:
            clinched = ClinchStatus.PLAYOFF
        return replace(standing, clinched=clinched, is_eliminated=False, magic_number=magic)

    def _magic_number(
        self,
        team_id: int,
        games: Sequence[Game],
        selections: Mapping[str, GameSelection],
        target: str,
        ceiling: Optional[int] = None
    ) -> Optional[int]:
        own_games, other_games = self._split_remaining(team_id, games, selections)
        remaining = len(own_games)

        # Fail fast: if winning out is not enough nothing smaller is
        if ceiling is None and not self._locked_with(
                team_id, games, selections, own_games, other_games, own_games, target):
            return None

        for wins in range(remaining + 1):
            if ceiling is not None and wins >= ceiling:
                return ceiling
            if comb(remaining, wins) > self.settings.MAGIC_NUMBER_COMBINATION_LIMIT:
                locked = self._locked_by_count(team_id, games, selections, wins, target)
            else:
                locked = all(
                    self._locked_with(team_id, games, selections, own_games, other_games, won, target)
                    for won in combinations(own_games, wins)
                )
            if locked:
                return wins
        return None

    def _split_remaining(
        self,
        team_id: int,
        games: Sequence[Game],
        selections: Mapping[str, GameSelection]
    ) -> Tuple[List[Game], List[Game]]:
        own, other = [], []
        for game in sorted(games, key=lambda g: (g.week, g.game_id)):
            if resolve_outcome(game, selections, self.settings) is not None:
                continue
            if game.home_team_id not in self.registry or game.away_team_id not in self.registry:
                continue
            (own if game.involves(team_id) else other).append(game)
        return own, other

    def _touches_conference(self, game: Game, conference: str) -> bool:
        return (
            self.registry.get_team(game.home_team_id).conference == conference
            or self.registry.get_team(game.away_team_id).conference == conference
        )

    def _own_outcomes(
        self,
        team_id: int,
        own_games: Iterable[Game],
        won: Iterable[Game]
    ) -> Dict[str, GameSelection]:
        won_ids = {g.game_id for g in won}
        outcomes = {}
        for game in own_games:
            team_wins = game.game_id in won_ids
            team_is_home = game.home_team_id == team_id
            outcomes[game.game_id] = GameSelection.HOME if team_wins == team_is_home else GameSelection.AWAY
        return outcomes

    def _holds_target(
        self,
        team_id: int,
        games: Sequence[Game],
        scenario: Mapping[str, GameSelection],
        target: str
    ) -> bool:
        self.scenarios_evaluated += 1
        conference = self.registry.get_team(team_id).conference
        standing = self.seeder.calculate_conference_seeding(conference, games, scenario).get_standing(team_id)
        if standing.seed is None:
            return False
        if target == 'bye':
            return standing.seed == 1
        if target == 'division':
            return standing.seed <= self.settings.DIVISION_WINNER_SEEDS
        return True

    def _locked_with(
        self,
        team_id: int,
        games: Sequence[Game],
        selections: Mapping[str, GameSelection],
        own_games: List[Game],
        other_games: List[Game],
        won: Sequence[Game],
        target: str
    ) -> bool:
        """Whether winning exactly `won` holds the target in every scenario."""
        conference = self.registry.get_team(team_id).conference
        relevant = [g for g in other_games if self._touches_conference(g, conference)]
        if len(relevant) > self.settings.EXHAUSTIVE_ELIMINATION_LIMIT:
            return self._locked_by_count(team_id, games, selections, len(won), target)

        base = dict(selections)
        base.update(self._own_outcomes(team_id, own_games, won))
        relevant_ids = {g.game_id for g in relevant}
        base.update({g.game_id: GameSelection.HOME for g in other_games if g.game_id not in relevant_ids})

        # Quick rejection before enumerating
        adversarial = dict(base)
        adversarial.update(self._complete(relevant, self._adversarial_winner, team_id, games, base))
        if not self._holds_target(team_id, games, adversarial, target):
            return False

        for outcome in product((GameSelection.HOME, GameSelection.AWAY), repeat=len(relevant)):
            scenario = dict(base)
            scenario.update({g.game_id: pick for g, pick in zip(relevant, outcome)})
            if not self._holds_target(team_id, games, scenario, target):
                return False
        return True

    def _locked_by_count(
        self,
        team_id: int,
        games: Sequence[Game],
        selections: Mapping[str, GameSelection],
        wins: int,
        target: str
    ) -> bool:
        """
        Prove a target is locked without enumerating scenarios.

        The team's worst finish (winning `wins` remaining games, losing
        the rest) is compared with every conference rival's best finish
        (winning all of its remaining games, including any against the
        team). A rival that can reach the team's worst win percentage
        can catch it.

        - bye: no rival can catch the team
        - division: no division rival can catch the team
        - playoff: the division is locked, or fewer rivals that can catch
          the team are left outside the division titles than there are
          wildcard spots
        """
        team = self.registry.get_team(team_id)
        records = self._records_for(games, selections)
        own_games, other_games = self._split_remaining(team_id, games, selections)
        open_games = own_games + other_games
        record = records[team_id]
        worst = win_percentage(record.wins + wins, record.losses + len(own_games) - wins, record.ties)

        precision = self.settings.METRIC_PRECISION
        catchers_by_division: Dict[str, int] = {}
        for rival in self.registry.get_conference_teams(team.conference):
            if rival.team_id == team_id:
                continue
            rival_record = records[rival.team_id]
            left = sum(1 for g in open_games if g.involves(rival.team_id))
            best = win_percentage(rival_record.wins + left, rival_record.losses, rival_record.ties)
            if round(best, precision) >= round(worst, precision):
                catchers_by_division[rival.division] = catchers_by_division.get(rival.division, 0) + 1

        if target == 'bye':
            return not catchers_by_division
        division_locked = catchers_by_division.get(team.division, 0) == 0
        if target == 'division' or division_locked:
            return division_locked

        # Within each division the best catcher may take the title
        non_winners = sum(count - 1 for count in catchers_by_division.values())
        return non_winners < self.settings.WILDCARD_SEEDS

    def _records_for(
        self,
        games: Sequence[Game],
        selections: Mapping[str, GameSelection]
    ) -> Dict[int, TeamRecord]:
        if self._records_cache is None:
            return self.seeder.aggregator.calculate_team_records(games, selections)
        key = frozenset(selections.items())
        if key not in self._records_cache:
            self._records_cache[key] = self.seeder.aggregator.calculate_team_records(games, selections)
        return self._records_cache[key]

    # ================================================================
    # COMPLETION STRATEGIES
    # ================================================================

    def _complete(
        self,
        relevant: List[Game],
        chooser: Callable[[Game, Mapping[int, float], int], int],
        team_id: int,
        games: Sequence[Game],
        base: Mapping[str, GameSelection]
    ) -> Dict[str, GameSelection]:
        current = self._current_win_percentages(games, base)
        outcomes = {}
        for game in relevant:
            winner = chooser(game, current, team_id)
            outcomes[game.game_id] = GameSelection.HOME if winner == game.home_team_id else GameSelection.AWAY
        return outcomes

    def _current_win_percentages(
        self,
        games: Sequence[Game],
        selections: Mapping[str, GameSelection]
    ) -> Dict[int, float]:
        records: Mapping[int, TeamRecord] = self.seeder.aggregator.calculate_team_records(games, selections)
        return {
            tid: win_percentage(record.wins, record.losses, record.ties)
            for tid, record in records.items()
        }

    def _adversarial_winner(self, game: Game, current: Mapping[int, float], team_id: int) -> int:
        """
        Winner that hurts the team most.

        A conference rival beats a non-conference opponent; between two
        rivals the division rival, then the better current record wins.
        """
        team = self.registry.get_team(team_id)
        home = self.registry.get_team(game.home_team_id)
        away = self.registry.get_team(game.away_team_id)

        home_rival = home.conference == team.conference
        away_rival = away.conference == team.conference
        if home_rival != away_rival:
            return home.team_id if home_rival else away.team_id

        home_division = home.division == team.division
        away_division = away.division == team.division
        if home_division != away_division:
            return home.team_id if home_division else away.team_id

        if current.get(away.team_id, 0.0) > current.get(home.team_id, 0.0):
            return away.team_id
        return home.team_id

    def _favorable_winner(self, game: Game, current: Mapping[int, float], team_id: int) -> int:
        """
        Winner that helps the team most: conference rivals lose,
        and between two rivals the one with the better record loses.
        """
        team = self.registry.get_team(team_id)
        home = self.registry.get_team(game.home_team_id)
        away = self.registry.get_team(game.away_team_id)

        home_rival = home.conference == team.conference
        away_rival = away.conference == team.conference
        if home_rival != away_rival:
            return away.team_id if home_rival else home.team_id

        if current.get(home.team_id, 0.0) > current.get(away.team_id, 0.0):
            return away.team_id
        return home.team_id

    def _eliminated_by_count(
        self,
        team_id: int,
        games: Sequence[Game],
        base: Mapping[str, GameSelection],
        relevant: List[Game]
    ) -> bool:
        """
        Prove elimination without enumerating scenarios.

        Uses the team's best possible finish (base already has it winning
        out) against rivals' worst possible finish (losing every remaining
        game). The team is out when a division rival is guaranteed to
        finish ahead of it and, across the conference, at least as many
        guaranteed-ahead teams remain outside the division-winner seeds
        as there are wildcard spots.
        """
        team = self.registry.get_team(team_id)
        records = self.seeder.aggregator.calculate_team_records(games, base)
        best_pct = records[team_id].win_percentage

        floors: Dict[int, float] = {}
        for rival in self.registry.get_conference_teams(team.conference):
            if rival.team_id == team_id:
                continue
            record = records[rival.team_id]
            left = sum(1 for g in relevant if g.involves(rival.team_id))
            floors[rival.team_id] = win_percentage(record.wins, record.losses + left, record.ties)

        ahead_by_division: Dict[str, int] = {}
        for rival_id, floor in floors.items():
            if floor > best_pct:
                division = self.registry.get_team(rival_id).division
                ahead_by_division[division] = ahead_by_division.get(division, 0) + 1

        if ahead_by_division.get(team.division, 0) == 0:
            return False

        # At most one guaranteed-ahead team per division can take its title
        non_winners_ahead = sum(max(0, count - 1) for count in ahead_by_division.values())
        return non_winners_ahead >= self.settings.WILDCARD_SEEDS
