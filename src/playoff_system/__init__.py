"""
Playoff System

NFL tiebreakers, playoff seeding, clinching and bracket components.
"""

from .playoff_seeder import PlayoffSeeder
from .seeding_models import ClinchStatus, ConferenceSeeding, MagicNumber, PlayoffSeeding, Standing
from .tiebreakers import TieType, TiebreakerApplication, TiebreakerResolver, TiebreakerStep
from .clinching import ClinchingCalculator
from .bracket_builder import BracketBuilder
from .bracket_models import (
    ConferencePicks,
    PlayoffBracket,
    PlayoffGameResult,
    PlayoffMatchup,
    PlayoffPicks,
    PlayoffRound,
)
from .playoff_exceptions import (
    InsufficientTeamDataException,
    InvalidBracketException,
    InvalidRoundException,
    InvalidSeedingException,
    PlayoffException,
)

__all__ = [
    'PlayoffSeeder',
    'ClinchStatus',
    'ConferenceSeeding',
    'MagicNumber',
    'PlayoffSeeding',
    'Standing',
    'TieType',
    'TiebreakerApplication',
    'TiebreakerResolver',
    'TiebreakerStep',
    'ClinchingCalculator',
    'BracketBuilder',
    'ConferencePicks',
    'PlayoffBracket',
    'PlayoffGameResult',
    'PlayoffMatchup',
    'PlayoffPicks',
    'PlayoffRound',
    'InsufficientTeamDataException',
    'InvalidBracketException',
    'InvalidRoundException',
    'InvalidSeedingException',
    'PlayoffException',
]
