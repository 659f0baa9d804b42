"""
Standings

Record aggregation from schedules and hypothetical selections.
"""

from .record_aggregator import RecordAggregator, calculate_team_records
from .team_record import GameLine, TeamRecord, format_record, win_percentage

__all__ = [
    'RecordAggregator',
    'calculate_team_records',
    'GameLine',
    'TeamRecord',
    'format_record',
    'win_percentage',
]
