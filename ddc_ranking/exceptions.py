"""
Exception classes for the ranking system.

Centralized location for all custom exceptions to avoid circular imports.
"""


class RankingError(Exception):
    """Base exception for all ranking errors."""
    pass


class ValidationError(RankingError):
    """Base exception for validation-related errors."""
    pass


class InvalidTournamentError(ValidationError):
    """Raised when a result file cannot form a tournament."""
    pass


class TieConsistencyError(InvalidTournamentError):
    """Raised when finishing positions do not follow the tie rule."""

    def __init__(self, position: int, expected: int):
        self.position: int = position
        self.expected: int = expected
        super().__init__(
            f"Inconsistent ranks: found position {position}, expected {expected}"
        )


class RepeatedPlayerError(InvalidTournamentError):
    """Raised when a team pairs a player with themself."""

    def __init__(self, player_id: int):
        self.player_id: int = player_id
        super().__init__(f"Repeated player: {player_id}")


class ConfigurationError(RankingError):
    """Base exception for configuration-related errors."""
    pass
