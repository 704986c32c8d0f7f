"""
Tests for scoring curves and points assignment.

Focus on tie equality, monotonicity and level weighting.
"""

import datetime

import pytest

from ddc_ranking.exceptions import ConfigurationError
from ddc_ranking.models import Level, TournamentResult
from ddc_ranking.parsing.line_parser import parse_lines
from ddc_ranking.parsing.result_builder import build_tournament
from ddc_ranking.scoring.curves import DecayCurve, LinearCurve
from ddc_ranking.scoring.points import age_factor, assign_points

DATE = datetime.date(2024, 1, 1)

EXAMPLE_LINES = [
    "1    235476  529052",
    "2    23342   4235211978",
    "2    234871  1387235",
    "4    5690845 5638906",
]


def tournament_from(lines: list[str], level: Level = Level.SMALL, source: str = "t.tsv") -> TournamentResult:
    result = build_tournament(parse_lines(lines), level, DATE, source)
    assert result.tournament is not None
    return result.tournament


class TestDecayCurve:
    """Test DecayCurve numbers and contract."""

    def test_default_formula(self) -> None:
        """Points are weight * share / decay ** position."""
        curve = DecayCurve()
        assert curve.points(1, 1, 50.0) == pytest.approx(50.0 * 0.5 / 1.1)
        assert curve.points(3, 1, 250.0) == pytest.approx(250.0 * 0.5 / 1.1**3)

    @pytest.mark.parametrize("curve", [DecayCurve(), DecayCurve(split_ties=True), LinearCurve(8)])
    def test_non_increasing_in_position(self, curve) -> None:
        """Worse positions never earn more."""
        points = [curve.points(p, 1, 100.0) for p in range(1, 20)]
        assert points == sorted(points, reverse=True)
        assert all(p >= 0 for p in points)

    @pytest.mark.parametrize("curve", [DecayCurve(), DecayCurve(split_ties=True), LinearCurve(8)])
    def test_non_decreasing_in_weight(self, curve) -> None:
        """Heavier levels never earn less."""
        points = [curve.points(3, 2, w) for w in (0.0, 50.0, 125.0, 200.0, 250.0)]
        assert points == sorted(points)
        assert points[0] == 0.0

    def test_split_ties_averages_consumed_positions(self) -> None:
        """A two-way tie at 2 averages positions 2 and 3."""
        curve = DecayCurve(split_ties=True)
        plain = DecayCurve()
        expected = (plain.points(2, 1, 100.0) + plain.points(3, 1, 100.0)) / 2
        assert curve.points(2, 2, 100.0) == pytest.approx(expected)
        assert curve.points(2, 1, 100.0) == plain.points(2, 1, 100.0)

    @pytest.mark.parametrize("curve", [DecayCurve(), DecayCurve(finish_decay=10.0), DecayCurve(split_ties=True)])
    def test_huge_position_scores_zero_without_error(self, curve) -> None:
        """Very deep finishes decay towards zero instead of overflowing."""
        # Act
        points = curve.points(10_000, 3, 250.0)

        # Assert
        assert points >= 0
        assert points < curve.points(1, 1, 250.0)

    def test_rejects_growing_decay(self) -> None:
        """A decay below 1 would reward worse positions."""
        with pytest.raises(ConfigurationError):
            DecayCurve(finish_decay=0.9)


class TestLinearCurve:
    """Test LinearCurve."""

    def test_reaches_zero_past_field_size(self) -> None:
        curve = LinearCurve(field_size=4)
        assert curve.points(1, 1, 100.0) == 100.0
        assert curve.points(4, 1, 100.0) == 25.0
        assert curve.points(5, 1, 100.0) == 0.0
        assert curve.points(50, 1, 100.0) == 0.0


class TestAssignPoints:
    """Test assign_points through its public interface."""

    def test_example_tie_gets_identical_points(self) -> None:
        """Second-place tied players all get the same points."""
        # Arrange
        tournament = tournament_from(EXAMPLE_LINES)
        curve = DecayCurve()

        # Act
        awards = {a.player_id: a.points for a in assign_points(tournament, 50.0, curve)}

        # Assert
        assert len(awards) == 8, "Every player should receive an award"
        second = {awards[p] for p in (23342, 4235211978, 234871, 1387235)}
        assert len(second) == 1, "Tied players should receive identical points"
        assert second.pop() == pytest.approx(curve.points(2, 2, 50.0))
        assert awards[5690845] == awards[5638906] == pytest.approx(curve.points(4, 1, 50.0))
        assert awards[235476] == awards[529052] > awards[23342] > awards[5690845]

    def test_awards_reference_tournament_and_sorted(self) -> None:
        """Awards name their tournament and come sorted by player."""
        tournament = tournament_from(EXAMPLE_LINES, source="small/2024-01-01.tsv")
        awards = assign_points(tournament, 50.0, DecayCurve())
        assert [a.player_id for a in awards] == sorted(a.player_id for a in awards)
        assert {a.tournament for a in awards} == {"small/2024-01-01.tsv"}

    def test_better_position_earns_at_least_as_much(self) -> None:
        """Two otherwise identical players: the better finisher earns >=."""
        tournament = tournament_from(["1\t1\t2", "2\t3\t4", "3\t5\t6"])
        awards = {a.player_id: a.points for a in assign_points(tournament, 125.0, LinearCurve(4))}
        assert awards[1] >= awards[3] >= awards[5]

    def test_empty_tournament_has_no_awards(self) -> None:
        tournament = tournament_from(["# empty"])
        assert assign_points(tournament, 250.0, DecayCurve()) == []

    def test_repeated_player_keeps_best_award(self) -> None:
        """A player entered twice gets one award, for the better finish."""
        # Arrange
        tournament = tournament_from(["1\t1\t2", "2\t1\t3"])
        curve = DecayCurve()

        # Act
        awards = assign_points(tournament, 100.0, curve)

        # Assert
        player_1 = [a for a in awards if a.player_id == 1]
        assert len(player_1) == 1
        assert player_1[0].points == pytest.approx(curve.points(1, 1, 100.0))

    def test_age_factor_scales_points(self) -> None:
        tournament = tournament_from(["1\t1\t2"])
        fresh = assign_points(tournament, 100.0, DecayCurve())
        aged = assign_points(tournament, 100.0, DecayCurve(), age_factor=0.5)
        assert aged[0].points == pytest.approx(fresh[0].points / 2)


class TestAgeFactor:
    """Test season decay."""

    def test_same_season_is_undecayed(self) -> None:
        assert age_factor(datetime.date(2024, 1, 1), datetime.date(2024, 12, 31)) == 1.0

    def test_decays_per_season(self) -> None:
        factor = age_factor(datetime.date(2022, 6, 1), datetime.date(2024, 1, 1), age_decay=1.1)
        assert factor == pytest.approx(1 / 1.1**2)

    def test_no_decay_when_disabled(self) -> None:
        assert age_factor(datetime.date(2000, 1, 1), datetime.date(2024, 1, 1), age_decay=1.0) == 1.0
