"""
Playoff Bracket Data Models

Data structures for a seeded playoff bracket: matchups per round, the
results and picks that decide them, and the bracket as a whole.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .playoff_exceptions import InvalidBracketException, InvalidRoundException


ROUND_NAMES = ['wild_card', 'divisional', 'conference', 'super_bowl']

ROUND_DISPLAY_NAMES = {
    'wild_card': 'Wild Card',
    'divisional': 'Divisional Round',
    'conference': 'Conference Championship',
    'super_bowl': 'Super Bowl'
}

EXPECTED_GAME_COUNTS = {
    'wild_card': 6,      # 3 AFC + 3 NFC
    'divisional': 4,     # 2 AFC + 2 NFC
    'conference': 2,     # 1 AFC + 1 NFC
    'super_bowl': 1
}


def validate_round_name(round_name: str) -> str:
    if round_name not in ROUND_NAMES:
        raise InvalidRoundException(round_name, valid_rounds=list(ROUND_NAMES))
    return round_name


@dataclass(frozen=True)
class PlayoffGameResult:
    """
    A real playoff game reported by a schedule provider.

    Only the winner is used, and only for the matchup that contains it;
    the listed home/away teams never create matchups on their own.
    """
    round_name: str
    home_team_id: int
    away_team_id: int
    winner_team_id: Optional[int] = None
    conference: Optional[str] = None

    def __post_init__(self):
        validate_round_name(self.round_name)

    @property
    def is_final(self) -> bool:
        return self.winner_team_id is not None


@dataclass
class ConferencePicks:
    """User picks for one conference; None marks an unpicked game."""
    wild_card: List[Optional[int]] = field(default_factory=lambda: [None, None, None])
    divisional: List[Optional[int]] = field(default_factory=lambda: [None, None])
    championship: Optional[int] = None

    def for_round(self, round_name: str) -> List[int]:
        if round_name == 'wild_card':
            picks = self.wild_card
        elif round_name == 'divisional':
            picks = self.divisional
        elif round_name == 'conference':
            picks = [self.championship]
        else:
            picks = []
        return [team_id for team_id in picks if team_id is not None]


@dataclass
class PlayoffPicks:
    """Hypothetical winners picked by the user for undecided playoff games."""
    afc: ConferencePicks = field(default_factory=ConferencePicks)
    nfc: ConferencePicks = field(default_factory=ConferencePicks)
    super_bowl: Optional[int] = None

    def for_round(self, round_name: str, conference: Optional[str]) -> List[int]:
        if round_name == 'super_bowl':
            return [self.super_bowl] if self.super_bowl is not None else []
        conference_picks = self.afc if conference == 'AFC' else self.nfc
        return conference_picks.for_round(round_name)


@dataclass
class PlayoffMatchup:
    """
    Represents a single playoff game with complete context.

    The home team is the higher seed; the Super Bowl lists the AFC
    champion as home team.
    """
    round_name: str              # 'wild_card', 'divisional', 'conference', 'super_bowl'
    conference: Optional[str]    # 'AFC', 'NFC', or None for Super Bowl
    game_number: int             # Game within round and conference
    home_team_id: int
    away_team_id: int
    home_seed: Optional[int] = None
    away_seed: Optional[int] = None
    winner_team_id: Optional[int] = None
    is_projected: bool = False   # Winner came from a pick, not a result

    def involves(self, team_id: Optional[int]) -> bool:
        return team_id is not None and team_id in (self.home_team_id, self.away_team_id)

    @property
    def is_decided(self) -> bool:
        return self.winner_team_id is not None

    @property
    def loser_team_id(self) -> Optional[int]:
        if self.winner_team_id is None:
            return None
        if self.winner_team_id == self.home_team_id:
            return self.away_team_id
        return self.home_team_id

    @property
    def team_ids(self) -> List[int]:
        return [self.home_team_id, self.away_team_id]

    def is_super_bowl(self) -> bool:
        return self.round_name == 'super_bowl'

    @property
    def matchup_string(self) -> str:
        """Get matchup as string (e.g., '(7) Team 8 @ (2) Team 1')."""
        if self.conference:
            return (
                f"({self.away_seed}) Team {self.away_team_id} @ "
                f"({self.home_seed}) Team {self.home_team_id}"
            )
        return f"Team {self.away_team_id} @ Team {self.home_team_id}"

    @property
    def round_display_name(self) -> str:
        return ROUND_DISPLAY_NAMES.get(self.round_name, self.round_name)


@dataclass
class PlayoffRound:
    """
    Collection of playoff matchups for a specific round.

    A round can be partially built: later rounds only contain matchups
    whose participants are already decided.
    """
    round_name: str
    games: List[PlayoffMatchup] = field(default_factory=list)

    def get_afc_games(self) -> List[PlayoffMatchup]:
        return [g for g in self.games if g.conference == 'AFC']

    def get_nfc_games(self) -> List[PlayoffMatchup]:
        return [g for g in self.games if g.conference == 'NFC']

    def get_conference_games(self, conference: Optional[str]) -> List[PlayoffMatchup]:
        return [g for g in self.games if g.conference == conference]

    def get_game_count(self) -> int:
        return len(self.games)

    @property
    def expected_game_count(self) -> int:
        return EXPECTED_GAME_COUNTS.get(self.round_name, 0)

    @property
    def is_complete(self) -> bool:
        return (
            len(self.games) == self.expected_game_count
            and all(g.is_decided for g in self.games)
        )

    @property
    def winners(self) -> List[int]:
        return [g.winner_team_id for g in self.games if g.is_decided]

    @property
    def losers(self) -> List[int]:
        return [g.loser_team_id for g in self.games if g.is_decided]

    @property
    def undecided_team_ids(self) -> List[int]:
        return [tid for g in self.games if not g.is_decided for tid in g.team_ids]

    def validate(self) -> bool:
        """
        Validate round structure.

        Raises:
            InvalidBracketException: If round is invalid
        """
        if len(self.games) > self.expected_game_count:
            raise InvalidBracketException(
                f"Too many games for {self.round_name}",
                round_name=self.round_name,
                expected_game_count=self.expected_game_count,
                actual_game_count=len(self.games)
            )

        seen = set()
        for game in self.games:
            if game.round_name != self.round_name:
                raise InvalidBracketException(
                    f"Game round_name '{game.round_name}' doesn't match round '{self.round_name}'",
                    round_name=self.round_name
                )
            if game.home_team_id == game.away_team_id:
                raise InvalidBracketException(
                    f"Team {game.home_team_id} is on both sides of a matchup",
                    round_name=self.round_name
                )
            if game.winner_team_id is not None and not game.involves(game.winner_team_id):
                raise InvalidBracketException(
                    f"Winner {game.winner_team_id} is not in matchup {game.matchup_string}",
                    round_name=self.round_name
                )
            for team_id in game.team_ids:
                if team_id in seen:
                    raise InvalidBracketException(
                        f"Team {team_id} appears in more than one {self.round_name} game",
                        round_name=self.round_name
                    )
                seen.add(team_id)

        if self.round_name != 'super_bowl' and len(self.games) == self.expected_game_count:
            expected_per_conf = self.expected_game_count // 2
            afc_count = len(self.get_afc_games())
            nfc_count = len(self.get_nfc_games())
            if afc_count != expected_per_conf or nfc_count != expected_per_conf:
                raise InvalidBracketException(
                    f"Expected {expected_per_conf} games per conference, "
                    f"got AFC: {afc_count}, NFC: {nfc_count}",
                    round_name=self.round_name,
                    expected_game_count=self.expected_game_count,
                    actual_game_count=len(self.games)
                )

        return True


@dataclass
class PlayoffBracket:
    """
    Complete bracket for one postseason, derived from seeds.

    Every round is present; undecided later rounds are simply empty or
    partially filled.
    """
    seeds: Dict[str, Dict[int, int]]          # conference -> seed -> team_id
    rounds: Dict[str, PlayoffRound]

    def get_round(self, round_name: str) -> PlayoffRound:
        validate_round_name(round_name)
        return self.rounds[round_name]

    def get_round_losers(self, round_name: str) -> List[int]:
        return self.get_round(round_name).losers

    @property
    def super_bowl(self) -> Optional[PlayoffMatchup]:
        games = self.rounds['super_bowl'].games
        return games[0] if games else None

    @property
    def champion(self) -> Optional[int]:
        game = self.super_bowl
        return game.winner_team_id if game else None

    @property
    def playoff_team_ids(self) -> List[int]:
        return [team_id for seed_map in self.seeds.values() for team_id in seed_map.values()]

    def get_seed(self, team_id: int) -> Optional[int]:
        for seed_map in self.seeds.values():
            for seed, seeded_team in seed_map.items():
                if seeded_team == team_id:
                    return seed
        return None

    def eliminated_before(self, round_name: str) -> List[int]:
        """Teams that lost in any round earlier than round_name."""
        index = ROUND_NAMES.index(validate_round_name(round_name))
        return [tid for name in ROUND_NAMES[:index] for tid in self.rounds[name].losers]

    def validate(self) -> bool:
        for round_name in ROUND_NAMES:
            self.rounds[round_name].validate()
        return True
