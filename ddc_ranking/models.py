"""
Core dataclasses for the ranking system.

Defines teams, tournament results, point awards, ranking entries and
the diagnostics reported while ingesting result files.
"""

import datetime
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from itertools import groupby

from .exceptions import RepeatedPlayerError, ValidationError

PlayerId = int


class Level(str, Enum):
    """Tournament level; the value doubles as the directory name."""

    SMALL = "small"
    MEDIUM = "medium"
    MAJOR = "major"
    CHAMPIONSHIP = "championship"

    @classmethod
    def from_directory_name(cls, name: str) -> "Level | None":
        try:
            return cls(name)
        except ValueError:
            return None


class AggregationMode(str, Enum):
    """How a player's awards combine into one score."""

    SUM = "sum"
    BEST_K = "best_k"


class DiagnosticKind(str, Enum):
    """Category of a skipped line, file or directory."""

    IO_ERROR = "io_error"
    MALFORMED_LINE = "malformed_line"
    TIE_CONSISTENCY = "tie_consistency"
    REPEATED_PLAYER = "repeated_player"
    UNKNOWN_LEVEL_DIRECTORY = "unknown_level_directory"
    INVALID_FILE_NAME = "invalid_file_name"


# Kinds that stop a whole file from contributing a tournament
REJECTION_KINDS = frozenset(
    {
        DiagnosticKind.IO_ERROR,
        DiagnosticKind.TIE_CONSISTENCY,
        DiagnosticKind.REPEATED_PLAYER,
        DiagnosticKind.INVALID_FILE_NAME,
    }
)


@dataclass(frozen=True)
class Team:
    """Unordered pair of distinct players, stored lowest id first."""

    low: PlayerId
    high: PlayerId

    def __post_init__(self) -> None:
        if self.low == self.high:
            raise RepeatedPlayerError(self.low)
        if self.low > self.high:
            raise ValidationError("Team players must be ordered; use Team.of()")

    @classmethod
    def of(cls, player_a: PlayerId, player_b: PlayerId) -> "Team":
        """Build a team from two players in any order."""
        if player_a == player_b:
            raise RepeatedPlayerError(player_a)
        return cls(min(player_a, player_b), max(player_a, player_b))

    @property
    def players(self) -> tuple[PlayerId, PlayerId]:
        return (self.low, self.high)


@dataclass(frozen=True)
class TieGroup:
    """Maximal run of teams sharing one finishing position."""

    position: int
    teams: tuple[Team, ...]

    @property
    def size(self) -> int:
        return len(self.teams)


@dataclass(frozen=True)
class TournamentResult:
    """
    Validated result of one tournament.

    Entries are sorted by position; source order is kept within a tie group.
    Only the result builder should construct these from raw data, since it
    is the one that checks tie consistency.
    """

    date: datetime.date
    level: Level
    source: str
    entries: tuple[tuple[int, Team], ...] = ()

    @property
    def tie_groups(self) -> tuple[TieGroup, ...]:
        return tuple(
            TieGroup(position, tuple(team for _, team in group))
            for position, group in groupby(self.entries, key=lambda entry: entry[0])
        )

    @property
    def players(self) -> frozenset[PlayerId]:
        return frozenset(p for _, team in self.entries for p in team.players)


@dataclass(frozen=True)
class PointAward:
    """Points one player earned from one tournament."""

    player_id: PlayerId
    tournament: str
    points: float

    def __post_init__(self) -> None:
        if self.points < 0:
            raise ValidationError(
                f"points cannot be negative, got {self.points} for player {self.player_id}"
            )


@dataclass(frozen=True)
class RankingEntry:
    """One row of the ranking snapshot."""

    player_id: PlayerId
    score: float
    rank: int


@dataclass(frozen=True)
class Diagnostic:
    """A skipped line, rejected file or ignored directory."""

    kind: DiagnosticKind
    source: str
    message: str
    line_number: int | None = None
    position: int | None = None

    @property
    def rejects_file(self) -> bool:
        return self.kind in REJECTION_KINDS

    def sort_key(self) -> tuple[str, int, str]:
        return (self.source, self.line_number or 0, self.kind.value)


@dataclass(frozen=True)
class RankingSnapshot:
    """Freshly computed ranking plus everything skipped along the way."""

    as_of: datetime.date
    entries: tuple[RankingEntry, ...]
    diagnostics: tuple[Diagnostic, ...] = ()
    tournaments_ingested: int = 0
    tournaments_in_window: int = 0
    level_counts: dict[Level, int] = field(default_factory=dict, hash=False)

    def rejected_sources(self) -> list[str]:
        """Sources that contributed no tournament, in sorted order."""
        return sorted({d.source for d in self.diagnostics if d.rejects_file})

    def malformed_line_counts(self) -> dict[str, int]:
        """Number of malformed lines per source."""
        counts = Counter(
            d.source
            for d in self.diagnostics
            if d.kind is DiagnosticKind.MALFORMED_LINE
        )
        return dict(sorted(counts.items()))

    def entry_for(self, player_id: PlayerId) -> RankingEntry | None:
        return next((e for e in self.entries if e.player_id == player_id), None)
