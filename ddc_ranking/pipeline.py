"""
Ranking pipeline.

Coordinates result source, parsing, scoring and aggregation components.
Files are read and validated on a threadpool; everything after that is a
single deterministic reduction on the calling thread.
"""

import datetime
from collections import Counter
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from loguru import Logger

from .config import RankingConfig, build_curve
from .interfaces import ResultFile, ResultSource, ScoringCurve, SnapshotSummary
from .logging_config import get_logger
from .models import Diagnostic, DiagnosticKind, Level, PointAward, RankingSnapshot, TournamentResult
from .parsing.line_parser import parse_lines
from .parsing.result_builder import build_tournament
from .ranking.aggregator import aggregate
from .scoring.points import age_factor, assign_points


@dataclass(frozen=True)
class FileOutcome:
    """What one result file contributed: a tournament and/or diagnostics."""

    source: str
    level: Level
    date: datetime.date
    tournament: TournamentResult | None
    diagnostics: tuple[Diagnostic, ...] = ()


def load_result_file(result_file: ResultFile) -> FileOutcome:
    """
    Read, parse and validate one result file.

    Pure worker function - receives data, returns result, touches no shared
    state. Unreadable files become an IO_ERROR diagnostic.
    """
    try:
        lines = list(result_file.read_lines())
    except (OSError, UnicodeDecodeError) as e:
        get_logger("pipeline").warning(f"Could not read {result_file.source}: {e}")
        diagnostic = Diagnostic(
            kind=DiagnosticKind.IO_ERROR,
            source=result_file.source,
            message=f"{type(e).__name__}: {e}",
        )
        return FileOutcome(
            result_file.source, result_file.level, result_file.date, None, (diagnostic,)
        )

    built = build_tournament(
        parse_lines(lines), result_file.level, result_file.date, result_file.source
    )
    return FileOutcome(
        result_file.source,
        result_file.level,
        result_file.date,
        built.tournament,
        built.diagnostics,
    )


class RankingPipeline:
    """Recomputes a ranking snapshot from a full result corpus."""

    def __init__(
        self,
        source: ResultSource,
        config: RankingConfig | None = None,
        curve: ScoringCurve | None = None,
    ):
        """
        Initialize pipeline with its components.

        Args:
            source: Where result files come from
            config: Run configuration (default: RankingConfig())
            curve: Scoring curve (default: DecayCurve from config)
        """
        self.source: ResultSource = source
        self.config: RankingConfig = config or RankingConfig()
        self.curve: ScoringCurve = curve or build_curve(self.config)

        # Setup logger
        self.logger: Logger = get_logger("pipeline")

    def run(self) -> RankingSnapshot:
        """Run the full pipeline and return a fresh snapshot."""
        self.logger.info(f"Starting ranking run with config: {self.config}")

        files = [f for f in self.source.list_files() if f.level in self.config.levels]
        self.logger.info(f"Loading {len(files)} result files")

        outcomes = self.load_files(files)
        # Arrival order from the threadpool is arbitrary; fix it before reducing
        outcomes.sort(key=lambda o: (o.date, o.level.value, o.source))

        diagnostics = list(self.source.discovery_diagnostics())
        tournaments = list[TournamentResult]()
        for outcome in outcomes:
            diagnostics.extend(outcome.diagnostics)
            if outcome.tournament is not None:
                tournaments.append(outcome.tournament)
        diagnostics.sort(key=Diagnostic.sort_key)

        in_window = [t for t in tournaments if self.config.in_window(t.date)]
        self.logger.info(
            f"Ingested {len(tournaments)} tournaments, {len(in_window)} inside window "
            f"{self.config.window_start() or 'start'}..{self.config.as_of}"
        )

        awards = self.assign_all(in_window)
        entries = aggregate(awards, self.config.aggregation, self.config.best_k)

        snapshot = RankingSnapshot(
            as_of=self.config.as_of,
            entries=tuple(entries),
            diagnostics=tuple(diagnostics),
            tournaments_ingested=len(tournaments),
            tournaments_in_window=len(in_window),
            level_counts=dict(sorted(Counter(t.level for t in in_window).items())),
        )
        self.logger.info(
            f"Ranking complete: {len(entries)} players, "
            f"{len(snapshot.rejected_sources())} rejected files"
        )
        return snapshot

    def load_files(self, files: Sequence[ResultFile]) -> list[FileOutcome]:
        """
        Load files on a threadpool.

        On KeyboardInterrupt pending files are cancelled and the interrupt
        propagates; no partially read file reaches aggregation.
        """
        outcomes = list[FileOutcome]()
        executor = ThreadPoolExecutor(max_workers=self.config.max_workers)
        try:
            futures: dict[Future[FileOutcome], ResultFile] = {
                executor.submit(load_result_file, f): f for f in files
            }
            for future in as_completed(futures):
                outcome = future.result()
                self._log_outcome(outcome)
                outcomes.append(outcome)
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return outcomes

    def assign_all(self, tournaments: Iterable[TournamentResult]) -> list[PointAward]:
        """Point awards for every tournament, scaled by level weight and age."""
        awards = list[PointAward]()
        for tournament in tournaments:
            factor = age_factor(tournament.date, self.config.as_of, self.config.age_decay)
            awards.extend(
                assign_points(
                    tournament,
                    self.config.weight_for(tournament.level),
                    self.curve,
                    age_factor=factor,
                )
            )
        return awards

    def _log_outcome(self, outcome: FileOutcome) -> None:
        malformed = sum(
            1 for d in outcome.diagnostics if d.kind is DiagnosticKind.MALFORMED_LINE
        )
        if outcome.tournament is None:
            self.logger.info(f"Rejected {outcome.source}")
        elif malformed:
            self.logger.info(
                f"Loaded {outcome.source} ({len(outcome.tournament.entries)} entries, {malformed} malformed lines)"
            )
        else:
            self.logger.debug(
                f"Loaded {outcome.source} ({len(outcome.tournament.entries)} entries)"
            )


def summarize(snapshot: RankingSnapshot) -> SnapshotSummary:
    """Counts describing a snapshot, for reports."""
    return SnapshotSummary(
        as_of=snapshot.as_of.isoformat(),
        players=len(snapshot.entries),
        tournaments_ingested=snapshot.tournaments_ingested,
        tournaments_in_window=snapshot.tournaments_in_window,
        rejected_files=len(snapshot.rejected_sources()),
        malformed_lines=sum(snapshot.malformed_line_counts().values()),
    )
