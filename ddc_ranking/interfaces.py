"""
Abstract base classes defining the interfaces for the ranking system.

All interfaces are synchronous; the pipeline runs file reads in a threadpool.
"""

import datetime
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TypedDict

from .models import Diagnostic, Level


class SnapshotSummary(TypedDict):
    """TypedDict for the summary printed alongside a ranking."""
    as_of: str
    players: int
    tournaments_ingested: int
    tournaments_in_window: int
    rejected_files: int
    malformed_lines: int


@dataclass(frozen=True)
class ResultFile:
    """A discovered result file: its level, date and a way to read it."""

    level: Level
    date: datetime.date
    source: str
    reader: Callable[[], Iterable[str]]

    def read_lines(self) -> Iterable[str]:
        """Read the file's lines. May raise OSError or UnicodeDecodeError."""
        return self.reader()


class ResultSource(ABC):
    """Interface for discovering tournament result files."""

    @abstractmethod
    def list_files(self) -> Iterable[ResultFile]:
        """Return all discovered result files."""
        pass

    @abstractmethod
    def discovery_diagnostics(self) -> Sequence[Diagnostic]:
        """Directories and files skipped while discovering."""
        pass


class ScoringCurve(ABC):
    """
    Interface mapping a finishing position to points.

    Implementations must return points >= 0, non-increasing in position
    and non-decreasing in level weight.
    """

    @abstractmethod
    def points(self, position: int, tie_group_size: int, level_weight: float) -> float:
        """
        Points for one player finishing at a position.

        Args:
            position: Finishing position shared by the tie group (>= 1)
            tie_group_size: Number of teams sharing the position
            level_weight: Weight of the tournament's level

        Returns:
            Points for each player of each team in the tie group
        """
        pass
