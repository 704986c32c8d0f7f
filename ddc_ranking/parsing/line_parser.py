"""
Line parser for tournament result files.

Classifies one raw line as an entry, a skip or a malformed line.
No file I/O happens here.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from ..models import PlayerId

COMMENT_PREFIX = "#"
REQUIRED_FIELDS = 3


@dataclass(frozen=True)
class Entry:
    """A parsed finishing position and the team's two players."""

    position: int
    player_a: PlayerId
    player_b: PlayerId
    line_number: int = 0


@dataclass(frozen=True)
class Skip:
    """A line with nothing to parse."""

    reason: str
    line_number: int = 0


@dataclass(frozen=True)
class MalformedLine:
    """A line with enough fields that are not all integers."""

    line_number: int
    text: str
    reason: str


LineOutcome = Entry | Skip | MalformedLine


def _parse_field(value: str) -> int | None:
    # int() would also accept "+1", "1_000" and non-ASCII digits
    if not (value.isascii() and value.isdigit()):
        return None
    try:
        return int(value)
    except ValueError:
        # Longer than the interpreter's int string conversion limit
        return None


def parse_line(line: str, line_number: int = 0) -> LineOutcome:
    """
    Classify one raw line.

    Args:
        line: Raw text line, with or without its trailing newline
        line_number: 1-based line number for diagnostics

    Returns:
        Entry, Skip or MalformedLine
    """
    stripped = line.strip()
    if not stripped:
        return Skip("empty line", line_number)
    if stripped.startswith(COMMENT_PREFIX):
        return Skip("comment", line_number)

    fields = stripped.split()
    if len(fields) < REQUIRED_FIELDS:
        return Skip(f"only {len(fields)} field(s)", line_number)

    position_str, player_a_str, player_b_str = fields[:REQUIRED_FIELDS]
    position = _parse_field(position_str)
    if position is None:
        return MalformedLine(
            line_number, stripped, f"could not parse '{position_str}' as position"
        )

    players = list[int]()
    for value in (player_a_str, player_b_str):
        player_id = _parse_field(value)
        if player_id is None:
            return MalformedLine(
                line_number, stripped, f"could not parse '{value}' as player ID"
            )
        if player_id == 0:
            return MalformedLine(line_number, stripped, "player ID must be positive")
        players.append(player_id)

    return Entry(position, players[0], players[1], line_number)


def parse_lines(lines: Iterable[str]) -> list[LineOutcome]:
    """Parse every line of a file, numbering lines from 1."""
    return [parse_line(line, number) for number, line in enumerate(lines, 1)]
