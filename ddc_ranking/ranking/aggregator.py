"""
Ranking aggregator.

Reduces point awards from every ingested tournament to one sorted ranking.
"""

import math
from collections import defaultdict
from collections.abc import Iterable

from ..exceptions import ConfigurationError
from ..logging_config import get_logger
from ..models import AggregationMode, PlayerId, PointAward, RankingEntry

RECORD_LENGTH = 10

# Module-level logger
logger = get_logger("aggregator")


def player_scores(
    awards: Iterable[PointAward],
    mode: AggregationMode = AggregationMode.BEST_K,
    best_k: int = RECORD_LENGTH,
) -> dict[PlayerId, float]:
    """
    Aggregate score per player.

    Each player's awards are put in a canonical order (points descending,
    then tournament) before summing with math.fsum, so totals do not depend
    on the order awards arrive in.
    """
    if best_k < 1:
        raise ConfigurationError(f"best_k must be >= 1, got {best_k}")

    by_player = defaultdict[PlayerId, list[PointAward]](list)
    for award in awards:
        by_player[award.player_id].append(award)

    scores = dict[PlayerId, float]()
    for player_id in sorted(by_player):
        ordered = sorted(by_player[player_id], key=lambda a: (-a.points, a.tournament))
        if mode is AggregationMode.BEST_K:
            ordered = ordered[:best_k]
        scores[player_id] = math.fsum(a.points for a in ordered)
    return scores


def rank_scores(scores: dict[PlayerId, float]) -> list[RankingEntry]:
    """
    Order players by score descending, then player ID ascending.

    Equal scores share a rank and the next rank skips: 1, 2, 2, 4.
    Open question: tied players could instead get distinct ranks by player ID.
    """
    ordered = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    entries = list[RankingEntry]()
    rank = 0
    prev_score: float | None = None
    for index, (player_id, score) in enumerate(ordered, 1):
        if score != prev_score:
            rank = index
            prev_score = score
        entries.append(RankingEntry(player_id=player_id, score=score, rank=rank))
    return entries


def aggregate(
    awards: Iterable[PointAward],
    mode: AggregationMode = AggregationMode.BEST_K,
    best_k: int = RECORD_LENGTH,
) -> list[RankingEntry]:
    """
    Compute the ranking from all qualifying awards.

    Players without awards are absent rather than listed with zero.

    Args:
        awards: Awards from every tournament inside the window
        mode: Sum every award, or only each player's best_k highest
        best_k: Number of awards counted in BEST_K mode

    Returns:
        Ranking entries sorted by rank
    """
    scores = player_scores(awards, mode, best_k)
    entries = rank_scores(scores)
    logger.info(f"Ranked {len(entries)} players ({mode.value}, best_k={best_k})")
    return entries
