"""
Points assignment.

Turns a validated tournament into per-player point awards.
"""

import datetime

from ..interfaces import ScoringCurve
from ..logging_config import get_logger
from ..models import PlayerId, PointAward, TournamentResult

AGE_DECAY = 1.1

# Module-level logger
logger = get_logger("points")


def age_factor(tournament_date: datetime.date, as_of: datetime.date, age_decay: float = AGE_DECAY) -> float:
    """Decay applied to a tournament for each season it lies before as_of."""
    seasons = max(0, as_of.year - tournament_date.year)
    return 1.0 / age_decay**seasons


def assign_points(
    tournament: TournamentResult,
    level_weight: float,
    curve: ScoringCurve,
    age_factor: float = 1.0,
) -> list[PointAward]:
    """
    Award points to every player in a tournament.

    Both players of a team, and every team in a tie group, receive the same
    points. A player entered more than once keeps their best award.

    Args:
        tournament: Validated tournament result
        level_weight: Weight of the tournament's level
        curve: Scoring curve mapping positions to points
        age_factor: Multiplier for the tournament's age

    Returns:
        Awards sorted by player ID
    """
    best = dict[PlayerId, float]()
    for group in tournament.tie_groups:
        points = curve.points(group.position, group.size, level_weight) * age_factor
        for team in group.teams:
            for player_id in team.players:
                if player_id in best:
                    logger.warning(
                        f"Player {player_id} appears more than once in {tournament.source}, keeping best result"
                    )
                    points_for_player = max(best[player_id], points)
                else:
                    points_for_player = points
                best[player_id] = points_for_player

    return [
        PointAward(player_id=player_id, tournament=tournament.source, points=points)
        for player_id, points in sorted(best.items())
    ]
