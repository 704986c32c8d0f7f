"""
Parsing of tournament result files.

Available components:
- parse_line / parse_lines: classify raw lines as entries, skips or malformed lines
- build_tournament: validate one file's entries into a TournamentResult
"""

from .line_parser import Entry, LineOutcome, MalformedLine, Skip, parse_line, parse_lines
from .result_builder import BuildResult, build_tournament, validate_positions

__all__ = [
    "Entry",
    "LineOutcome",
    "MalformedLine",
    "Skip",
    "parse_line",
    "parse_lines",
    "BuildResult",
    "build_tournament",
    "validate_positions",
]
