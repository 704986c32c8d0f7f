"""
Scoring curve implementations.

Map a finishing position to the points each player of a team receives.
"""

from typing_extensions import override

from ..exceptions import ConfigurationError
from ..interfaces import ScoringCurve

FINISH_DECAY = 1.1
PLAYER_SHARE = 0.5


class DecayCurve(ScoringCurve):
    """
    Geometric decay over finishing position.

    A player earns level_weight * player_share / finish_decay ** position.
    With split_ties, a tie group instead earns the mean over the positions
    it consumes, e.g. a two-way tie at 2 averages positions 2 and 3.
    """

    def __init__(
        self,
        finish_decay: float = FINISH_DECAY,
        player_share: float = PLAYER_SHARE,
        split_ties: bool = False,
    ):
        if finish_decay < 1.0:
            raise ConfigurationError(f"finish_decay must be >= 1, got {finish_decay}")
        if player_share < 0:
            raise ConfigurationError(f"player_share must be >= 0, got {player_share}")
        self.finish_decay: float = finish_decay
        self.player_share: float = player_share
        self.split_ties: bool = split_ties

    def _at(self, position: int, level_weight: float) -> float:
        # Negative exponent underflows to 0.0 for huge positions instead of overflowing
        return level_weight * self.player_share * self.finish_decay**-position

    @override
    def points(self, position: int, tie_group_size: int, level_weight: float) -> float:
        if not self.split_ties or tie_group_size <= 1:
            return self._at(position, level_weight)
        consumed = range(position, position + tie_group_size)
        return sum(self._at(p, level_weight) for p in consumed) / tie_group_size

    def __repr__(self) -> str:
        return (
            f"DecayCurve(finish_decay={self.finish_decay}, "
            f"player_share={self.player_share}, split_ties={self.split_ties})"
        )


class LinearCurve(ScoringCurve):
    """
    Linear fall-off to zero.

    Position 1 earns the full level weight; each place below loses
    1/field_size of it, reaching zero past field_size.
    """

    def __init__(self, field_size: int = 32):
        if field_size < 1:
            raise ConfigurationError(f"field_size must be >= 1, got {field_size}")
        self.field_size: int = field_size

    @override
    def points(self, position: int, tie_group_size: int, level_weight: float) -> float:
        return level_weight * max(0, self.field_size + 1 - position) / self.field_size

    def __repr__(self) -> str:
        return f"LinearCurve(field_size={self.field_size})"
