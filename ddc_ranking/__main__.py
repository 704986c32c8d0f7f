"""
CLI entry point for ddc-ranking.

Reads a directory of level directories of TSV results and prints the
ranking with columns rank, score, player ID.
"""

import argparse
import calendar
import datetime
import json
import re
import sys
from argparse import Namespace
from pathlib import Path
from typing import TypedDict

from prettytable import PrettyTable

from .config import RankingConfig, load_config
from .exceptions import ConfigurationError
from .interfaces import SnapshotSummary
from .logging_config import get_logger, setup_logging
from .models import AggregationMode, Level, RankingSnapshot
from .pipeline import RankingPipeline, summarize
from .scoring.curves import DecayCurve
from .sources.directory_source import DirectoryResultSource

DATE_BOUND_RE = re.compile(r"(?P<year>\d{4})(-(?P<month>\d{2})(-(?P<day>\d{2}))?)?")


class CLIArgs(TypedDict):
    """Typed representation of parsed CLI arguments."""
    dir: str
    from_date: str | None
    to_date: str | None
    config: str | None
    window_days: int | None
    aggregation: str | None
    best_k: int | None
    workers: int | None
    split_ties: bool
    disabled_levels: list[Level]
    output_format: str
    debug: bool
    log_level: str
    log_file: str | None


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="ddc-ranking",
        description="Rank players from a directory of level directories of TSV tournament results",
    )

    # Required arguments
    _ = parser.add_argument(
        "-d", "--dir",
        required=True,
        help="Directory containing one directory of TSV results per level"
    )

    # Window
    _ = parser.add_argument(
        "-f", "--from",
        dest="from_date",
        help="Earliest tournament date: YYYY, YYYY-MM or YYYY-MM-DD"
    )
    _ = parser.add_argument(
        "-t", "--to",
        dest="to_date",
        help="Latest tournament date and ranking date (default: today)"
    )
    _ = parser.add_argument(
        "--window-days",
        type=int,
        help="Only count tournaments this many days before the ranking date"
    )

    # Scoring
    _ = parser.add_argument(
        "-C", "--config",
        help="TOML file with decays, record length and level weights"
    )
    _ = parser.add_argument(
        "--aggregation",
        choices=[mode.value for mode in AggregationMode],
        help="Sum all results or only the best K (default: best_k)"
    )
    _ = parser.add_argument(
        "-k", "--best-k",
        type=int,
        help="Number of results counted per player (default: 10)"
    )
    _ = parser.add_argument(
        "--split-ties",
        action="store_true",
        help="Tied teams share the points of the positions they consume"
    )
    _ = parser.add_argument(
        "--workers",
        type=int,
        help="Number of worker threads for reading files (default: 4)"
    )

    # Level selection
    for level in Level:
        _ = parser.add_argument(
            f"--no-{level.value}",
            dest="disabled_levels",
            action="append_const",
            const=level,
            help=f"Ignore {level.value} tournaments"
        )

    # Output
    _ = parser.add_argument(
        "--format",
        dest="output_format",
        choices=["table", "tsv", "json"],
        default="table",
        help="Output format (default: table)"
    )
    _ = parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level (default: WARNING)"
    )
    _ = parser.add_argument(
        "--log-file",
        help="Also write logs to this file"
    )

    return parser.parse_args(argv)


def args_to_typed(ns: Namespace) -> CLIArgs:
    """Convert argparse Namespace to typed CLIArgs."""
    return CLIArgs(
        dir=ns.dir,
        from_date=ns.from_date,
        to_date=ns.to_date,
        config=ns.config,
        window_days=ns.window_days,
        aggregation=ns.aggregation,
        best_k=ns.best_k,
        workers=ns.workers,
        split_ties=ns.split_ties,
        disabled_levels=list(ns.disabled_levels or []),
        output_format=ns.output_format,
        debug=ns.debug,
        log_level=ns.log_level,
        log_file=ns.log_file,
    )


def parse_date_bound(value: str, upper: bool) -> datetime.date:
    """
    Parse a partial date as the start or end of the period it names.

    "2023" is 2023-01-01 as a lower bound and 2023-12-31 as an upper bound;
    "2024-02" ends on 2024-02-29.

    Raises:
        ConfigurationError: If the value is not a valid partial date
    """
    match = DATE_BOUND_RE.fullmatch(value.strip())
    if match is None:
        raise ConfigurationError(f"Could not parse date: {value!r}")

    year = int(match["year"])
    month = int(match["month"]) if match["month"] else (12 if upper else 1)
    if not 1 <= month <= 12:
        raise ConfigurationError(f"Invalid month in date: {value!r}")
    if match["day"]:
        day = int(match["day"])
    else:
        day = calendar.monthrange(year, month)[1] if upper else 1

    try:
        return datetime.date(year, month, day)
    except ValueError as e:
        raise ConfigurationError(f"Invalid date {value!r}: {e}") from e


def build_config(args: CLIArgs) -> RankingConfig:
    """Combine the config file (if any) with command line overrides."""
    overrides = dict[str, object]()
    if args["to_date"]:
        overrides["as_of"] = parse_date_bound(args["to_date"], upper=True)
    if args["from_date"]:
        overrides["window_from"] = parse_date_bound(args["from_date"], upper=False)
    if args["window_days"] is not None:
        overrides["window_days"] = args["window_days"]
    if args["aggregation"]:
        overrides["aggregation"] = AggregationMode(args["aggregation"])
    if args["best_k"] is not None:
        overrides["best_k"] = args["best_k"]
    if args["workers"] is not None:
        overrides["max_workers"] = args["workers"]
    if args["disabled_levels"]:
        overrides["levels"] = frozenset(Level) - set(args["disabled_levels"])

    if args["config"]:
        return load_config(Path(args["config"]), **overrides)
    return RankingConfig(**overrides)  # type: ignore[arg-type]


def render_table(snapshot: RankingSnapshot) -> str:
    table = PrettyTable()
    table.field_names = ["Rank", "Player ID", "Score"]
    table.align["Rank"] = "r"
    table.align["Player ID"] = "r"
    table.align["Score"] = "r"
    for entry in snapshot.entries:
        table.add_row([entry.rank, entry.player_id, f"{entry.score:.3f}"])
    return table.get_string()


def render_tsv(snapshot: RankingSnapshot) -> str:
    return "\n".join(
        f"{entry.rank}\t{entry.score}\t{entry.player_id}" for entry in snapshot.entries
    )


def render_json(snapshot: RankingSnapshot) -> str:
    data = {
        "summary": summarize(snapshot),
        "ranking": [
            {"rank": e.rank, "player_id": e.player_id, "score": e.score}
            for e in snapshot.entries
        ],
        "diagnostics": [
            {
                "kind": d.kind.value,
                "source": d.source,
                "message": d.message,
                "line_number": d.line_number,
                "position": d.position,
            }
            for d in snapshot.diagnostics
        ],
    }
    return json.dumps(data, indent=2)


RENDERERS = {"table": render_table, "tsv": render_tsv, "json": render_json}


def print_summary(summary: SnapshotSummary, snapshot: RankingSnapshot) -> None:
    """Print diagnostics summary to stderr, keeping stdout for the ranking."""
    print(
        f"Ranking as of {summary['as_of']}: {summary['players']} players from "
        f"{summary['tournaments_in_window']} tournaments "
        f"({summary['tournaments_ingested']} ingested)",
        file=sys.stderr,
    )
    if summary["rejected_files"]:
        print(f"Rejected {summary['rejected_files']} file(s):", file=sys.stderr)
        for d in snapshot.diagnostics:
            if d.rejects_file:
                print(f"  {d.source}: {d.message}", file=sys.stderr)
    if summary["malformed_lines"]:
        print(f"Skipped {summary['malformed_lines']} malformed line(s):", file=sys.stderr)
        for source, count in snapshot.malformed_line_counts().items():
            print(f"  {source}: {count}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = args_to_typed(parse_args(argv))

    # Setup logging
    setup_logging(
        level=args["log_level"],
        debug=args["debug"],
        log_file=Path(args["log_file"]) if args["log_file"] else None,
    )
    logger = get_logger("main")

    try:
        config = build_config(args)
        source = DirectoryResultSource(Path(args["dir"]))
    except (ConfigurationError, FileNotFoundError, NotADirectoryError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not config.levels:
        logger.warning("All levels disabled, nothing to rank")
        return 0

    curve = DecayCurve(finish_decay=config.finish_decay, split_ties=args["split_ties"])
    pipeline = RankingPipeline(source, config, curve)

    try:
        snapshot = pipeline.run()
    except KeyboardInterrupt:
        logger.warning("Ranking interrupted by user")
        print("\nRanking interrupted by user", file=sys.stderr)
        return 130

    output = RENDERERS[args["output_format"]](snapshot)
    if output:
        print(output)
    print_summary(summarize(snapshot), snapshot)
    return 0


if __name__ == "__main__":
    sys.exit(main())
