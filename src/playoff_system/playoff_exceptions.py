"""
Playoff System Exceptions

Raised when a league or bracket cannot produce a valid playoff field.
Ties are never errors: every tiebreaker cascade ends in a deterministic
order, so these only signal structural problems in the inputs or a
broken guarantee in the output.

    PlayoffException
    ├── InvalidRoundException          unknown round name
    ├── InvalidSeedingException        seeds that are not a 1-7 permutation
    ├── InvalidBracketException        matchups that cannot exist in a round
    └── InsufficientTeamDataException  conference too small to seed

Every exception carries an error_code and a context_dict naming the
conference, round or team involved.
"""

from typing import Any, Dict, Optional, Sequence


class PlayoffException(Exception):
    """
    Base exception for playoff system errors.

    Attributes:
        message: Human-readable error message
        error_code: Stable code for programmatic handling (e.g. "PLAYOFF_SEED")
        context_dict: Conference, round, team and similar details
    """

    error_code = "PLAYOFF"

    def __init__(self, message: str, context_dict: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context_dict = {k: v for k, v in (context_dict or {}).items() if v is not None}
        super().__init__(self._build_error_message())

    def _build_error_message(self) -> str:
        if not self.context_dict:
            return f"[{self.error_code}] {self.message}"
        details = ", ".join(f"{key}={value}" for key, value in self.context_dict.items())
        return f"[{self.error_code}] {self.message} ({details})"

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for logs and API responses"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "context": dict(self.context_dict),
        }


class InvalidRoundException(PlayoffException):
    """Raised for a round name outside wild_card/divisional/conference/super_bowl."""

    error_code = "PLAYOFF_ROUND"

    def __init__(self, round_name: str, valid_rounds: Optional[Sequence[str]] = None):
        self.round_name = round_name
        super().__init__(
            f"Invalid playoff round: '{round_name}'",
            {"round": round_name, "valid_rounds": list(valid_rounds) if valid_rounds else None},
        )


class InvalidSeedingException(PlayoffException):
    """
    Raised when a seed map cannot back a bracket, or when computed
    seeding breaks a structural guarantee (seeds 1-7 exactly once,
    division winners from distinct divisions).
    """

    error_code = "PLAYOFF_SEED"

    def __init__(self, message: str, conference: Optional[str] = None, team_id: Optional[int] = None):
        self.conference = conference
        super().__init__(message, {"conference": conference, "team_id": team_id})


class InvalidBracketException(PlayoffException):
    """Raised when a round holds games that cannot all be part of one bracket."""

    error_code = "PLAYOFF_BRACKET"

    def __init__(
        self,
        message: str,
        round_name: Optional[str] = None,
        expected_game_count: Optional[int] = None,
        actual_game_count: Optional[int] = None
    ):
        self.round_name = round_name
        super().__init__(message, {
            "round": round_name,
            "expected_games": expected_game_count,
            "actual_games": actual_game_count,
        })


class InsufficientTeamDataException(PlayoffException):
    """
    Raised when the registry cannot support a conference's seeding:
    no teams, fewer teams than playoff spots, or the wrong number of
    divisions.
    """

    error_code = "PLAYOFF_TEAMS"

    def __init__(self, message: str, conference: Optional[str] = None, missing_field: Optional[str] = None):
        self.conference = conference
        super().__init__(message, {"conference": conference, "missing_field": missing_field})
