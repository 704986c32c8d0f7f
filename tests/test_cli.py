"""
Tests for the command line interface.
"""

import datetime
import json
import tempfile
from pathlib import Path

import pytest

from ddc_ranking.__main__ import build_config, args_to_typed, main, parse_args, parse_date_bound
from ddc_ranking.exceptions import ConfigurationError
from ddc_ranking.models import AggregationMode, Level


def make_results(root: Path) -> None:
    small = root / "small"
    small.mkdir(parents=True)
    (small / "2024-01-01.tsv").write_text("1\t10\t20\n2\t30\t40\n", encoding="utf-8")
    (small / "2024-02-01.tsv").write_text("1\t10\t20\n1\t30\t40\n", encoding="utf-8")


class TestParseDateBound:
    """Test partial date parsing."""

    @pytest.mark.parametrize(
        "value, upper, expected",
        [
            ("2023", False, datetime.date(2023, 1, 1)),
            ("2023", True, datetime.date(2023, 12, 31)),
            ("2024-02", True, datetime.date(2024, 2, 29)),
            ("2023-02", True, datetime.date(2023, 2, 28)),
            ("2023-05", False, datetime.date(2023, 5, 1)),
            ("2023-05-17", True, datetime.date(2023, 5, 17)),
        ],
    )
    def test_parses_partial_dates(self, value: str, upper: bool, expected: datetime.date) -> None:
        assert parse_date_bound(value, upper) == expected

    @pytest.mark.parametrize("value", ["23", "2023-13", "2023-02-30", "yesterday"])
    def test_rejects_invalid_dates(self, value: str) -> None:
        with pytest.raises(ConfigurationError):
            parse_date_bound(value, upper=False)


class TestBuildConfig:
    """Test CLI flags becoming a RankingConfig."""

    def test_flags_override_defaults(self) -> None:
        args = args_to_typed(
            parse_args(
                [
                    "--dir", "results",
                    "--from", "2022",
                    "--to", "2023-06",
                    "--aggregation", "sum",
                    "--no-small",
                    "--no-major",
                ]
            )
        )

        config = build_config(args)

        assert config.window_from == datetime.date(2022, 1, 1)
        assert config.as_of == datetime.date(2023, 6, 30)
        assert config.aggregation is AggregationMode.SUM
        assert config.levels == frozenset({Level.MEDIUM, Level.CHAMPIONSHIP})


class TestMain:
    """Test main() end to end."""

    def test_tsv_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            # Arrange
            root = Path(temp_dir)
            make_results(root)

            # Act
            exit_code = main(["--dir", str(root), "--to", "2024", "--format", "tsv", "--aggregation", "sum"])

            # Assert
            assert exit_code == 0
            lines = capsys.readouterr().out.strip().splitlines()
            rows = [line.split("\t") for line in lines]
            assert [(r[0], r[2]) for r in rows] == [("1", "10"), ("1", "20"), ("3", "30"), ("3", "40")]

    def test_json_output_includes_diagnostics(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            make_results(root)
            (root / "small" / "2024-03-01.tsv").write_text("2\t1\t2\n", encoding="utf-8")

            exit_code = main(["--dir", str(root), "--to", "2024", "--format", "json"])

            assert exit_code == 0
            data = json.loads(capsys.readouterr().out)
            assert data["summary"]["rejected_files"] == 1
            assert data["diagnostics"][0]["kind"] == "tie_consistency"
            assert data["diagnostics"][0]["position"] == 2
            assert {row["player_id"] for row in data["ranking"]} == {10, 20, 30, 40}

    def test_table_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            make_results(root)

            assert main(["--dir", str(root), "--to", "2024"]) == 0

            out = capsys.readouterr().out
            assert "Player ID" in out
            assert "10" in out

    def test_missing_directory_fails(self, capsys: pytest.CaptureFixture[str]) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            exit_code = main(["--dir", str(Path(temp_dir) / "missing")])
            assert exit_code == 1
            assert "does not exist" in capsys.readouterr().err
