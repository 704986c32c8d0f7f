"""
Directory result source implementation.

Discovers result files laid out as <root>/<level>/**/<YYYY-MM-DD>*.tsv.
Symlinked directories are followed; files resolving outside the root are
skipped.
"""

import datetime
import re
from collections.abc import Iterable, Iterator, Sequence
from functools import partial
from pathlib import Path

from typing_extensions import override

from ..interfaces import ResultFile, ResultSource
from ..logging_config import get_logger
from ..models import Diagnostic, DiagnosticKind, Level

RESULT_FILE_RE = re.compile(r"(?P<date>\d{4}-\d{2}-\d{2}).*\.tsv")


def read_result_lines(path: Path) -> list[str]:
    """Read a result file as UTF-8 lines."""
    return path.read_text(encoding="utf-8").splitlines()


class DirectoryResultSource(ResultSource):
    """
    Result source that walks one directory per tournament level.

    Treats result files as opaque - only stores paths; reading happens
    when the pipeline calls ResultFile.read_lines().
    """

    def __init__(self, root: Path):
        """
        Initialize directory result source.

        Args:
            root: Directory containing one subdirectory per level
        """
        self.root: Path = Path(root)

        # Setup logger
        self.logger = get_logger("directory_source")

        # Validate directory exists and is a directory
        if not self.root.exists():
            raise FileNotFoundError(f"Results directory does not exist: {self.root}")

        if not self.root.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {self.root}")

        self._files = list[ResultFile]()
        self._diagnostics = list[Diagnostic]()
        self._loaded: bool = False

    def _discover(self) -> None:
        """Walk the root once and record files and diagnostics."""
        if self._loaded:
            return

        for child in sorted(self.root.iterdir()):
            if not child.is_dir():
                self.logger.debug(f"Ignoring non-directory at results root: {child}")
                continue

            level = Level.from_directory_name(child.name)
            if level is None:
                self.logger.warning(f"Skipping unknown level directory: {child}")
                self._diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.UNKNOWN_LEVEL_DIRECTORY,
                        source=str(child),
                        message=f"'{child.name}' is not a level ({', '.join(lvl.value for lvl in Level)})",
                    )
                )
                continue

            self._discover_level(level, child)

        self._loaded = True
        self.logger.info(f"Discovered {len(self._files)} result files in {self.root}")

    def _walk(self, directory: Path, ancestors: frozenset[Path]) -> Iterator[Path]:
        """Yield .tsv files below directory, following symlinked directories."""
        real = directory.resolve()
        if real in ancestors:
            self.logger.warning(f"Skipping symlink loop at {directory}")
            return
        try:
            children = sorted(directory.iterdir())
        except OSError as e:
            self.logger.warning(f"Could not list {directory}: {e}")
            return
        for child in children:
            if child.is_dir():
                yield from self._walk(child, ancestors | {real})
            elif child.suffix == ".tsv":
                yield child

    def _discover_level(self, level: Level, level_dir: Path) -> None:
        for path in sorted(self._walk(level_dir, frozenset())):
            # Security: Ensure file is within the results directory (path traversal protection)
            try:
                path.resolve().relative_to(self.root.resolve())
            except ValueError:
                self.logger.warning(f"Skipping file outside results directory: {path}")
                continue
            if not path.is_file():
                continue

            match = RESULT_FILE_RE.fullmatch(path.name)
            if match is None:
                self.logger.debug(f"Ignoring file without a date prefix: {path}")
                continue

            try:
                date = datetime.date.fromisoformat(match["date"])
            except ValueError as e:
                self.logger.warning(f"Skipping {path}: invalid date: {e}")
                self._diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.INVALID_FILE_NAME,
                        source=str(path),
                        message=f"invalid date '{match['date']}': {e}",
                    )
                )
                continue

            self._files.append(
                ResultFile(
                    level=level,
                    date=date,
                    source=str(path),
                    reader=partial(read_result_lines, path),
                )
            )

    @override
    def list_files(self) -> Iterable[ResultFile]:
        """Return all discovered result files."""
        self._discover()
        return list(self._files)

    @override
    def discovery_diagnostics(self) -> Sequence[Diagnostic]:
        """Directories and files skipped while discovering."""
        self._discover()
        return list(self._diagnostics)

    def clear_cache(self) -> None:
        """Forget discovered files so the next access walks the root again."""
        self._files.clear()
        self._diagnostics.clear()
        self._loaded = False
