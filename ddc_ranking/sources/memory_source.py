"""
In-memory result source.

Holds result file contents directly; useful for tests and for callers
that already have results loaded from elsewhere.
"""

import datetime
from collections.abc import Iterable, Sequence

from typing_extensions import override

from ..interfaces import ResultFile, ResultSource
from ..models import Diagnostic, Level


class MemoryResultSource(ResultSource):
    """Result source backed by strings."""

    def __init__(self) -> None:
        self._files = list[ResultFile]()

    def add(
        self,
        level: Level,
        date: datetime.date,
        text: str,
        source: str | None = None,
    ) -> ResultFile:
        """
        Register one result file.

        Args:
            level: Tournament level
            date: Tournament date
            text: File contents
            source: Identity of the file (default: "<level>/<date>.tsv")

        Returns:
            The registered ResultFile
        """
        if source is None:
            source = f"{Level(level).value}/{date.isoformat()}.tsv"
        lines = text.splitlines()
        result_file = ResultFile(
            level=Level(level), date=date, source=source, reader=lambda: list(lines)
        )
        self._files.append(result_file)
        return result_file

    def add_file(self, result_file: ResultFile) -> None:
        """Register a prebuilt ResultFile, e.g. one with a failing reader."""
        self._files.append(result_file)

    @override
    def list_files(self) -> Iterable[ResultFile]:
        return list(self._files)

    @override
    def discovery_diagnostics(self) -> Sequence[Diagnostic]:
        return []
