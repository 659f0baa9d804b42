"""
Unit Tests for DraftOrderService

Tests draft order calculation including:
- Full first round from a decided postseason
- Tier ordering (non-playoff, then each playoff round)
- Pick ranges while a round is undecided
- Strength of schedule tiebreakers
- Edge cases and validation
"""

import pytest

from offseason.draft_order_service import DraftOrderService, DraftPick
from playoff_system.bracket_builder import BracketBuilder
from playoff_system.bracket_models import ConferencePicks, PlayoffGameResult, PlayoffPicks
from playoff_system.playoff_seeder import PlayoffSeeder
from standings.team_record import TeamRecord


def chalk_picks(seeding):
    """Higher seed wins every game; the AFC top seed wins the Super Bowl."""
    conference_picks = {}
    for conference in seeding.conferences:
        seeds = conference.get_seed_map()
        conference_picks[conference.conference] = ConferencePicks(
            wild_card=[seeds[2], seeds[3], seeds[4]],
            divisional=[seeds[1], seeds[2]],
            championship=seeds[1],
        )
    return PlayoffPicks(
        afc=conference_picks['AFC'],
        nfc=conference_picks['NFC'],
        super_bowl=seeding.afc.get_seed_map()[1],
    )


class TestDraftOrderService:
    """Test suite for DraftOrderService"""

    @pytest.fixture
    def service(self):
        """Create service instance for testing"""
        return DraftOrderService()

    @pytest.fixture(scope="class")
    def seeding(self, nfl_registry, season_2024_games):
        return PlayoffSeeder(nfl_registry).calculate_seeding(season_2024_games)

    @pytest.fixture
    def full_bracket(self, seeding):
        return BracketBuilder().build_from_seeding(seeding, picks=chalk_picks(seeding))

    def _team(self, registry, abbreviation):
        return registry.get_team_by_abbreviation(abbreviation).team_id

    # ============================================================================
    # BASIC FUNCTIONALITY TESTS
    # ============================================================================

    def test_full_first_round(self, service, seeding, full_bracket):
        """A decided postseason yields picks 1-32 with no ranges"""
        draft_order = service.calculate_draft_order(seeding, full_bracket)

        assert [pick.pick for pick in draft_order] == list(range(1, 33))
        assert len({pick.team_id for pick in draft_order}) == 32
        assert not any(pick.is_uncertain for pick in draft_order)
        assert all(isinstance(pick, DraftPick) for pick in draft_order)

    def test_non_playoff_teams_draft_first(self, service, seeding, full_bracket):
        draft_order = service.calculate_draft_order(seeding, full_bracket)
        non_playoff = draft_order[:18]

        assert all(pick.reason == "non_playoff" for pick in non_playoff)
        assert all(seeding.get_seed(pick.team_id) is None for pick in non_playoff)

        win_pcts = [seeding.get_standing(pick.team_id).win_percentage for pick in non_playoff]
        assert win_pcts == sorted(win_pcts)

    def test_worst_records_pick_first(self, service, nfl_registry, seeding, full_bracket):
        """CLE, NYG and TEN all finished 3-14"""
        draft_order = service.calculate_draft_order(seeding, full_bracket)

        first_three = {pick.team_id for pick in draft_order[:3]}
        assert first_three == {self._team(nfl_registry, abbr) for abbr in ('CLE', 'NYG', 'TEN')}
        assert all(pick.record == "3-14" for pick in draft_order[:3])

    def test_playoff_tiers(self, service, seeding, full_bracket):
        draft_order = service.calculate_draft_order(seeding, full_bracket)
        by_pick = {pick.pick: pick for pick in draft_order}

        assert {by_pick[n].reason for n in range(19, 25)} == {"wild_card_loss"}
        assert {by_pick[n].reason for n in range(25, 29)} == {"divisional_loss"}
        assert {by_pick[n].reason for n in range(29, 31)} == {"conference_loss"}
        assert by_pick[31].reason == "super_bowl_loss"
        assert by_pick[32].reason == "super_bowl_win"

        assert sorted(by_pick[n].team_id for n in range(19, 25)) == sorted(
            full_bracket.get_round_losers('wild_card')
        )

    def test_super_bowl_teams_last(self, service, nfl_registry, seeding, full_bracket):
        draft_order = service.calculate_draft_order(seeding, full_bracket)

        assert draft_order[31].team_id == self._team(nfl_registry, 'KC')
        assert draft_order[30].team_id == self._team(nfl_registry, 'DET')

    def test_wild_card_tier_ordered_by_record(self, service, nfl_registry, seeding, full_bracket):
        """PIT and DEN (10-7) first, WSH (12-5) and MIN (14-3) last"""
        draft_order = service.calculate_draft_order(seeding, full_bracket)
        by_pick = {pick.pick: pick.team_id for pick in draft_order}

        assert {by_pick[19], by_pick[20]} == {self._team(nfl_registry, 'PIT'), self._team(nfl_registry, 'DEN')}
        assert by_pick[23] == self._team(nfl_registry, 'WSH')
        assert by_pick[24] == self._team(nfl_registry, 'MIN')

    # ============================================================================
    # PARTIAL POSTSEASON
    # ============================================================================

    def test_no_playoff_results(self, service, seeding):
        bracket = BracketBuilder().build_from_seeding(seeding)
        draft_order = service.calculate_draft_order(seeding, bracket)

        assert [pick.pick for pick in draft_order] == list(range(1, 19))

    def test_pick_ranges_for_undecided_round(self, service, nfl_registry, seeding):
        """
        AFC wild card games are final; NFC games are still open.

        The 11-6 Chargers sit behind the two 10-7 AFC losers, and can
        drop behind the NFC's 10-7 division winners if those lose.
        """
        afc = seeding.afc.get_seed_map()
        results = [
            PlayoffGameResult('wild_card', afc[2], afc[7], winner_team_id=afc[2]),
            PlayoffGameResult('wild_card', afc[3], afc[6], winner_team_id=afc[3]),
            PlayoffGameResult('wild_card', afc[4], afc[5], winner_team_id=afc[4]),
        ]
        bracket = BracketBuilder().build_from_seeding(seeding, results=results)
        draft_order = service.calculate_draft_order(seeding, bracket)

        wild_card = [pick for pick in draft_order if pick.reason == "wild_card_loss"]
        assert len(wild_card) == 3
        assert len(draft_order) == 21

        chargers = next(pick for pick in wild_card if pick.team_id == self._team(nfl_registry, 'LAC'))
        assert chargers.pick == 21
        assert chargers.pick_max in (23, 24)
        assert chargers.is_uncertain
        assert chargers.pick_label == f"21-{chargers.pick_max}"

        assert min(pick.pick for pick in wild_card) == 19
        assert all(19 <= pick.pick <= (pick.pick_max or pick.pick) <= 24 for pick in wild_card)

    def test_calculate_pick_range(self, service):
        """
        Six-slot tier with two known losers (1: 5-12, 2: 9-8) and four
        undecided teams (3: 7-10, 4: 10-7, 5: 6-11, 6: 8-9).
        """
        records = {
            1: TeamRecord(team_id=1, wins=5, losses=12),
            2: TeamRecord(team_id=2, wins=9, losses=8),
            3: TeamRecord(team_id=3, wins=7, losses=10),
            4: TeamRecord(team_id=4, wins=10, losses=7),
            5: TeamRecord(team_id=5, wins=6, losses=11),
            6: TeamRecord(team_id=6, wins=8, losses=9),
        }

        assert service._calculate_pick_range(1, [1, 2], [3, 4, 5, 6], 6, records) == (0, 0)
        assert service._calculate_pick_range(2, [1, 2], [3, 4, 5, 6], 6, records) == (1, 4)

    # ============================================================================
    # TIEBREAKER TESTS
    # ============================================================================

    def test_strength_of_schedule_tiebreaker(self, service, nfl_registry, schedule):
        """
        Equal records: the team with the easier schedule drafts first.

        BUF (1-1) played NE (1-1) and MIA (0-2): SOS 0.25
        NE (1-1) played BUF (1-1) and CIN (1-0): SOS 0.75
        """
        schedule.win(3, 1)      # NE beats BUF
        schedule.win(1, 2)      # BUF beats MIA
        schedule.win(4, 2)      # NYJ beats MIA
        schedule.win(6, 3)      # CIN beats NE
        records = PlayoffSeeder(nfl_registry).aggregator.calculate_team_records(schedule.games)

        assert records[1].win_percentage == records[3].win_percentage
        assert service.calculate_strength_of_schedule(1, records) == pytest.approx(0.25)
        assert service.calculate_strength_of_schedule(3, records) == pytest.approx(0.75)

        assert service._sort_teams_by_record([3, 1], records) == [1, 3]

    def test_sos_cache_usage(self, service, seeding, full_bracket):
        service.calculate_draft_order(seeding, full_bracket)
        assert len(service._sos_cache) == 32

    def test_sos_missing_team(self, service):
        with pytest.raises(ValueError, match="No record"):
            service.calculate_strength_of_schedule(1, {})

    # ============================================================================
    # VALIDATION TESTS
    # ============================================================================

    def test_invalid_team_count(self, service, mini_registry):
        seeding = PlayoffSeeder(mini_registry).calculate_seeding([])
        bracket = BracketBuilder().build_from_seeding(seeding)

        with pytest.raises(ValueError, match="Expected 32 team records"):
            service.calculate_draft_order(seeding, bracket)

    def test_bracket_must_match_standings(self, service, seeding):
        seeds = {conference.conference: conference.get_seed_map() for conference in seeding.conferences}
        outside_team = seeding.afc.standings[-1].team_id
        seeds['AFC'][7] = outside_team
        bracket = BracketBuilder().build(seeds)

        with pytest.raises(ValueError, match="do not match"):
            service.calculate_draft_order(seeding, bracket)

    # ============================================================================
    # DATA STRUCTURE TESTS
    # ============================================================================

    def test_draft_pick_string_representation(self):
        pick = DraftPick(pick=7, team_id=12, record="5-12", reason="non_playoff", strength_of_schedule=0.5123)

        assert str(pick) == "Pick 7: Team 12 - non_playoff (5-12, SOS: 0.512)"
        assert not pick.is_uncertain

        ranged = DraftPick(pick=19, team_id=8, record="10-7", reason="wild_card_loss",
                           strength_of_schedule=0.5, pick_max=22)
        assert ranged.is_uncertain
        assert str(ranged).startswith("Pick 19-22: Team 8")
