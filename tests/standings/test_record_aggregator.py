"""
Tests for RecordAggregator and TeamRecord.

Covers:
- Division / conference splits
- Selections and placeholder scores
- Skipped games (undecided, outside the team set)
- Input order independence
- Streak and last-five summaries
"""

import pytest

from shared.game_models import GameSelection
from standings.record_aggregator import RecordAggregator, calculate_team_records
from standings.team_record import TeamRecord, format_record, win_percentage


BUF, MIA, NE, NYJ, BAL, DAL = 1, 2, 3, 4, 5, 17


class TestRecordAggregator:
    """Record aggregation over the NFL registry"""

    @pytest.fixture
    def aggregator(self, nfl_registry):
        return RecordAggregator(nfl_registry)

    # ============================================================================
    # SPLITS
    # ============================================================================

    def test_division_game_counts_for_division_and_conference(self, aggregator, schedule):
        schedule.final(BUF, MIA, 30, 10)
        records = aggregator.calculate_team_records(schedule.games)

        buf = records[BUF]
        assert (buf.wins, buf.losses, buf.ties) == (1, 0, 0)
        assert buf.division_record == "1-0"
        assert buf.conference_record == "1-0"
        assert buf.points_for == 30
        assert buf.points_against == 10

        mia = records[MIA]
        assert mia.division_record == "0-1"
        assert mia.conference_record == "0-1"

    def test_conference_game_outside_division(self, aggregator, schedule):
        schedule.win(BAL, BUF)
        records = aggregator.calculate_team_records(schedule.games)

        assert records[BAL].conference_record == "1-0"
        assert records[BAL].division_record == "0-0"

    def test_interconference_game_counts_overall_only(self, aggregator, schedule):
        schedule.win(DAL, BUF)
        records = aggregator.calculate_team_records(schedule.games)

        assert records[BUF].record_string == "0-1"
        assert records[BUF].conference_record == "0-0"
        assert records[BUF].division_record == "0-0"
        assert records[DAL].wins == 1

    def test_tie_counts_as_half_win(self, aggregator, schedule):
        schedule.final(BUF, MIA, 20, 20)
        schedule.win(BUF, NE)
        records = aggregator.calculate_team_records(schedule.games)

        assert records[BUF].record_string == "1-0-1"
        assert records[BUF].win_percentage == pytest.approx(0.75)
        assert records[BUF].division_ties == 1
        assert records[MIA].win_percentage == pytest.approx(0.5)

    # ============================================================================
    # SELECTIONS AND SKIPPED GAMES
    # ============================================================================

    def test_unselected_scheduled_game_is_skipped(self, aggregator, schedule):
        schedule.scheduled(BUF, MIA)
        records = aggregator.calculate_team_records(schedule.games)

        assert records[BUF].games_played == 0
        assert records[BUF].opponents == set()
        assert records[BUF].win_percentage == 0.0

    def test_selection_adds_projected_game(self, aggregator, schedule):
        game = schedule.scheduled(BUF, MIA)
        records = aggregator.calculate_team_records(schedule.games, {game.game_id: GameSelection.AWAY})

        assert records[MIA].wins == 1
        assert records[MIA].points_for == 24
        assert records[MIA].points_against == 17
        assert records[MIA].results[0].is_projected
        assert records[BUF].opponents == {MIA}

    def test_opponent_sets_are_distinct(self, aggregator, schedule):
        schedule.win(BUF, MIA)
        schedule.win(MIA, BUF)
        schedule.win(BUF, NE)
        records = aggregator.calculate_team_records(schedule.games)

        assert records[BUF].opponents == {MIA, NE}
        assert records[BUF].defeated_opponents == {MIA, NE}
        assert records[MIA].defeated_opponents == {BUF}

    def test_team_filter_skips_games_outside_set(self, aggregator, schedule):
        schedule.win(BUF, MIA)
        schedule.win(BUF, DAL)
        records = aggregator.calculate_team_records(schedule.games, team_ids=[BUF, MIA])

        assert sorted(records) == [BUF, MIA]
        assert records[BUF].record_string == "1-0"

    def test_unknown_team_ids_rejected(self, aggregator):
        with pytest.raises(ValueError, match="Unknown team ids"):
            aggregator.calculate_team_records([], team_ids=[BUF, 99])

    def test_conference_filter(self, aggregator, schedule):
        schedule.win(BUF, DAL)
        records = aggregator.calculate_team_records(schedule.games, conference='AFC')

        assert len(records) == 16
        assert DAL not in records
        # Game against a team outside the set does not count
        assert records[BUF].games_played == 0

    def test_input_order_does_not_matter(self, aggregator, schedule):
        schedule.win(BUF, MIA)
        schedule.final(NE, NYJ, 10, 13)
        schedule.win(MIA, NE)
        schedule.final(NYJ, BUF, 17, 17)

        forward = aggregator.calculate_team_records(schedule.games)
        backward = aggregator.calculate_team_records(list(reversed(schedule.games)))

        assert forward == backward

    def test_no_state_between_calls(self, aggregator, schedule):
        schedule.win(BUF, MIA)
        aggregator.calculate_team_records(schedule.games)
        records = aggregator.calculate_team_records(schedule.games)

        assert records[BUF].wins == 1

    def test_wins_balance_losses(self, aggregator, schedule):
        """Every decided game adds one win and one loss league-wide."""
        schedule.win(BUF, MIA)
        schedule.win(NE, NYJ)
        schedule.final(BAL, BUF, 13, 31)
        schedule.win(DAL, NE)
        schedule.final(MIA, NYJ, 20, 20)
        schedule.scheduled(NYJ, BAL)
        records = aggregator.calculate_team_records(schedule.games, {schedule.games[-1].game_id: GameSelection.AWAY})

        assert sum(r.wins for r in records.values()) == 5
        assert sum(r.losses for r in records.values()) == 5
        assert sum(r.ties for r in records.values()) == 2

    def test_module_function(self, nfl_registry, schedule):
        schedule.win(BUF, MIA)
        records = calculate_team_records(nfl_registry, schedule.games)
        assert len(records) == 32
        assert records[BUF].wins == 1


class TestTeamRecord:
    """TeamRecord summaries"""

    def test_streak_and_last_five(self, nfl_registry, schedule):
        schedule.win(BUF, MIA)
        schedule.win(BUF, NE)
        schedule.win(NYJ, BUF)
        schedule.win(BUF, MIA)
        schedule.win(BUF, NE)
        schedule.win(BUF, NYJ)
        record = RecordAggregator(nfl_registry).calculate_team_records(schedule.games)[BUF]

        assert record.streak == "W3"
        assert record.last_five == "4-1"

    def test_empty_record(self):
        record = TeamRecord(team_id=1)
        assert record.streak == ""
        assert record.last_five == "0-0"
        assert record.record_string == "0-0"
        assert record.win_percentage_against([2, 3]) is None

    def test_win_percentage_against(self, nfl_registry, schedule):
        schedule.win(BUF, MIA)
        schedule.win(NE, BUF)
        schedule.win(BUF, BAL)
        record = RecordAggregator(nfl_registry).calculate_team_records(schedule.games)[BUF]

        assert record.win_percentage_against([MIA, NE]) == pytest.approx(0.5)
        assert record.win_percentage_against([BAL]) == pytest.approx(1.0)
        assert len(record.results_against([MIA, BAL])) == 2

    def test_helpers(self):
        assert win_percentage(0, 0, 0) == 0.0
        assert win_percentage(10, 6, 1) == pytest.approx(10.5 / 17)
        assert format_record(10, 7, 0) == "10-7"
        assert format_record(10, 6, 1) == "10-6-1"
