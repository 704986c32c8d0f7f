"""
ddc-ranking - Double disc court player rankings

Computes a deterministic world ranking from historical tournament result
files organized by level, with tie-consistent position validation,
level-weighted scoring and best-K aggregation.
"""

from .config import RankingConfig, load_config
from .interfaces import ResultFile, ResultSource, ScoringCurve
from .models import (
    AggregationMode,
    Diagnostic,
    DiagnosticKind,
    Level,
    PointAward,
    RankingEntry,
    RankingSnapshot,
    Team,
    TournamentResult,
)
from .pipeline import RankingPipeline

__version__ = "0.1.0"
__all__ = [
    "AggregationMode",
    "Diagnostic",
    "DiagnosticKind",
    "Level",
    "PointAward",
    "RankingEntry",
    "RankingSnapshot",
    "Team",
    "TournamentResult",
    "ResultFile",
    "ResultSource",
    "ScoringCurve",
    "RankingConfig",
    "load_config",
    "RankingPipeline",
]
