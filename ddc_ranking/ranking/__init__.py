"""
Ranking aggregation.

Combines point awards across tournaments into a deterministic ranking.
"""

from .aggregator import aggregate, player_scores, rank_scores

__all__ = ["aggregate", "player_scores", "rank_scores"]
