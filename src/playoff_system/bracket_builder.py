"""
Bracket Builder

Derives the playoff bracket from conference seeds.

Matchups for each round come only from the winners computed for the
previous round; team fields listed on upstream playoff games are never
used to create matchups. A matchup's winner is taken from a real result
whose winner plays in that matchup, otherwise from a user pick naming one
of its two teams.

Re-seeding rules:
- Wild Card: 2 vs 7, 3 vs 6, 4 vs 5 (seed 1 has a bye)
- Divisional: seed 1 hosts the lowest remaining seed; the other two meet
- Conference: the two divisional winners, higher seed hosts
- Super Bowl: AFC champion vs NFC champion
"""

import logging
from typing import Dict, List, Optional, Sequence

from .bracket_models import (
    ROUND_NAMES,
    PlayoffBracket,
    PlayoffGameResult,
    PlayoffMatchup,
    PlayoffPicks,
    PlayoffRound,
)
from .playoff_exceptions import InvalidSeedingException
from .seeding_models import PlayoffSeeding


logger = logging.getLogger(__name__)

CONFERENCES = ('AFC', 'NFC')

WILD_CARD_PAIRINGS = ((2, 7), (3, 6), (4, 5))


class BracketBuilder:
    """
    Builds a PlayoffBracket from seeds, real results and picks.

    Usage:
        builder = BracketBuilder()
        bracket = builder.build_from_seeding(seeding, results, picks)
        bracket.get_round('divisional').games
    """

    def build_from_seeding(
        self,
        seeding: PlayoffSeeding,
        results: Sequence[PlayoffGameResult] = (),
        picks: Optional[PlayoffPicks] = None
    ) -> PlayoffBracket:
        seeds = {conference.conference: conference.get_seed_map() for conference in seeding.conferences}
        return self.build(seeds, results, picks)

    def build(
        self,
        seeds: Dict[str, Dict[int, int]],
        results: Sequence[PlayoffGameResult] = (),
        picks: Optional[PlayoffPicks] = None
    ) -> PlayoffBracket:
        """
        Build the bracket.

        Args:
            seeds: conference -> {seed: team_id} for seeds 1-7
            results: Real playoff games; only their winners are used
            picks: User picks for games without a real result

        Returns:
            PlayoffBracket with every round, later rounds as far as
            the decided winners allow
        """
        self._validate_seeds(seeds)
        picks = picks or PlayoffPicks()
        rounds = {name: PlayoffRound(round_name=name) for name in ROUND_NAMES}
        champions: Dict[str, Optional[int]] = {}

        for conference in CONFERENCES:
            seed_map = seeds[conference]
            seed_of = {team_id: seed for seed, team_id in seed_map.items()}

            wild_card = [
                self._create_matchup('wild_card', conference, number, seed_map[high], seed_map[low], seed_of)
                for number, (high, low) in enumerate(WILD_CARD_PAIRINGS, start=1)
            ]
            self._decide(wild_card, results, picks)
            rounds['wild_card'].games.extend(wild_card)

            champions[conference] = None
            wild_card_winners = [game.winner_team_id for game in wild_card]
            if None in wild_card_winners:
                continue

            remaining = sorted(wild_card_winners, key=lambda tid: seed_of[tid])
            top_seed = seed_map[1]
            divisional = [
                self._create_matchup('divisional', conference, 1, top_seed, remaining[-1], seed_of),
                self._create_matchup('divisional', conference, 2, remaining[0], remaining[1], seed_of),
            ]
            self._decide(divisional, results, picks)
            rounds['divisional'].games.extend(divisional)

            divisional_winners = [game.winner_team_id for game in divisional]
            if None in divisional_winners:
                continue

            finalists = sorted(divisional_winners, key=lambda tid: seed_of[tid])
            championship = [
                self._create_matchup('conference', conference, 1, finalists[0], finalists[1], seed_of)
            ]
            self._decide(championship, results, picks)
            rounds['conference'].games.extend(championship)
            champions[conference] = championship[0].winner_team_id

        if champions['AFC'] is not None and champions['NFC'] is not None:
            super_bowl = [
                PlayoffMatchup(
                    round_name='super_bowl',
                    conference=None,
                    game_number=1,
                    home_team_id=champions['AFC'],
                    away_team_id=champions['NFC'],
                )
            ]
            self._decide(super_bowl, results, picks)
            rounds['super_bowl'].games.extend(super_bowl)

        bracket = PlayoffBracket(seeds={conf: dict(seeds[conf]) for conf in CONFERENCES}, rounds=rounds)
        bracket.validate()

        logger.debug(
            "Bracket built: " + ", ".join(
                f"{name}={len(rounds[name].games)} games/{len(rounds[name].winners)} decided"
                for name in ROUND_NAMES
            )
        )
        return bracket

    def _validate_seeds(self, seeds: Dict[str, Dict[int, int]]) -> None:
        for conference in CONFERENCES:
            seed_map = seeds.get(conference)
            if seed_map is None:
                raise InvalidSeedingException(f"Missing seeds for {conference}", conference=conference)
            if sorted(seed_map) != list(range(1, 8)):
                raise InvalidSeedingException(
                    f"Seeds {sorted(seed_map)} are not 1-7",
                    conference=conference
                )
            if len(set(seed_map.values())) != 7:
                raise InvalidSeedingException("Duplicate team in seeds", conference=conference)

    def _create_matchup(
        self,
        round_name: str,
        conference: str,
        game_number: int,
        home_team_id: int,
        away_team_id: int,
        seed_of: Dict[int, int]
    ) -> PlayoffMatchup:
        return PlayoffMatchup(
            round_name=round_name,
            conference=conference,
            game_number=game_number,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            home_seed=seed_of.get(home_team_id),
            away_seed=seed_of.get(away_team_id),
        )

    def _decide(
        self,
        matchups: List[PlayoffMatchup],
        results: Sequence[PlayoffGameResult],
        picks: PlayoffPicks
    ) -> None:
        """Fill in each matchup's winner from results first, then picks."""
        for matchup in matchups:
            winner = self._winner_from_results(matchup, results)
            if winner is not None:
                matchup.winner_team_id = winner
                continue

            for picked in picks.for_round(matchup.round_name, matchup.conference):
                if matchup.involves(picked):
                    matchup.winner_team_id = picked
                    matchup.is_projected = True
                    break

    def _winner_from_results(
        self,
        matchup: PlayoffMatchup,
        results: Sequence[PlayoffGameResult]
    ) -> Optional[int]:
        for result in results:
            if result.round_name != matchup.round_name or not result.is_final:
                continue
            if matchup.involves(result.winner_team_id):
                return result.winner_team_id
        return None
