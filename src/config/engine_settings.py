"""
Centralized Standings Engine Settings

Plain class-level constants consumed by the record aggregator, the
tiebreaker resolver, the seeder and the clinching calculator.
Subclass and override to run the engine with a different league shape.
"""


class EngineSettings:
    """
    Standings engine controls.

    Every component takes a ``settings`` argument that defaults to this
    class, so tests can pass a subclass with overridden values.
    """

    # ================================================================
    # HYPOTHETICAL GAME SCORES
    # ================================================================

    PLACEHOLDER_WINNER_SCORE = 24
    PLACEHOLDER_LOSER_SCORE = 17
    PLACEHOLDER_TIE_SCORE = 20
    # Used for non-final games that carry a user selection.
    # Home pick -> 24-17, away pick -> 17-24, tie pick -> 20-20

    # ================================================================
    # TIEBREAKER THRESHOLDS
    # ================================================================

    MIN_COMMON_OPPONENTS = 4
    # Common-games step applies only when every tied team shares
    # at least this many distinct opponents

    METRIC_PRECISION = 6
    # Decimal places kept before comparing win-percentage style metrics

    # ================================================================
    # PLAYOFF SHAPE
    # ================================================================

    PLAYOFF_TEAMS_PER_CONFERENCE = 7
    DIVISION_WINNER_SEEDS = 4
    WILDCARD_SEEDS = 3

    # ================================================================
    # CLINCHING / ELIMINATION SEARCH
    # ================================================================

    EXHAUSTIVE_ELIMINATION_LIMIT = 8
    # Remaining conference-relevant games at or below this count are
    # enumerated outcome by outcome (2^n scenarios)

    MAGIC_NUMBER_COMBINATION_LIMIT = 64
    # Win subsets are enumerated while C(n, k) stays at or below this
    # count; larger searches use a single pessimistic subset
