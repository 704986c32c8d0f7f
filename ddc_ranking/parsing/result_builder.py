"""
Result file builder.

Assembles the line outcomes of one file into a validated TournamentResult,
or rejects the file.
"""

import datetime
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import groupby

from ..exceptions import InvalidTournamentError, RepeatedPlayerError, TieConsistencyError
from ..logging_config import get_logger
from ..models import Diagnostic, DiagnosticKind, Level, Team, TournamentResult
from .line_parser import Entry, LineOutcome, MalformedLine

# Module-level logger
logger = get_logger("result_builder")


@dataclass(frozen=True)
class BuildResult:
    """Outcome of building one file: a tournament, or the error rejecting it."""

    source: str
    tournament: TournamentResult | None
    diagnostics: tuple[Diagnostic, ...] = ()
    error: InvalidTournamentError | None = field(default=None, compare=False)

    @property
    def accepted(self) -> bool:
        return self.tournament is not None


def validate_positions(positions: Iterable[int]) -> list[tuple[int, int]]:
    """
    Check that sorted positions form tie-consistent groups.

    Each group's successor must sit at the group's position plus its size,
    starting from 1: [1, 2, 2, 4] is valid, [1, 2, 2, 3] is not.

    Returns:
        (position, group size) for each tie group

    Raises:
        TieConsistencyError: naming the first offending position
    """
    groups = list[tuple[int, int]]()
    expected = 1
    for position, group in groupby(sorted(positions)):
        if position != expected:
            raise TieConsistencyError(position, expected)
        size = sum(1 for _ in group)
        groups.append((position, size))
        expected = position + size
    return groups


def build_tournament(
    outcomes: Iterable[LineOutcome],
    level: Level,
    date: datetime.date,
    source: str,
) -> BuildResult:
    """
    Build a tournament from the parsed lines of one file.

    Malformed lines are recorded as diagnostics and skipped. A tie-consistency
    violation or a self-paired team rejects the whole file.

    Args:
        outcomes: Line parser outcomes in file order
        level: Level the file was discovered under
        date: Date taken from the file name
        source: Identity of the file, e.g. its path

    Returns:
        BuildResult with either a tournament or an error
    """
    entries = list[Entry]()
    diagnostics = list[Diagnostic]()

    for outcome in outcomes:
        if isinstance(outcome, Entry):
            entries.append(outcome)
        elif isinstance(outcome, MalformedLine):
            logger.debug(f"{source}:{outcome.line_number}: {outcome.reason}, skipping")
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.MALFORMED_LINE,
                    source=source,
                    message=outcome.reason,
                    line_number=outcome.line_number,
                )
            )

    # Stable sort keeps source order within a tie group
    entries.sort(key=lambda e: e.position)

    try:
        validate_positions(e.position for e in entries)
        results = tuple((e.position, Team.of(e.player_a, e.player_b)) for e in entries)
    except TieConsistencyError as e:
        logger.warning(f"Rejecting {source}: {e}")
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.TIE_CONSISTENCY,
                source=source,
                message=str(e),
                position=e.position,
            )
        )
        return BuildResult(source, None, tuple(diagnostics), e)
    except RepeatedPlayerError as e:
        logger.warning(f"Rejecting {source}: {e}")
        line_number = next(
            (x.line_number for x in entries if x.player_a == x.player_b == e.player_id),
            None,
        )
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.REPEATED_PLAYER,
                source=source,
                message=str(e),
                line_number=line_number,
            )
        )
        return BuildResult(source, None, tuple(diagnostics), e)

    tournament = TournamentResult(date=date, level=level, source=source, entries=results)
    logger.debug(
        f"Built {source}: {len(results)} entries in {len(tournament.tie_groups)} tie groups"
    )
    return BuildResult(source, tournament, tuple(diagnostics))
