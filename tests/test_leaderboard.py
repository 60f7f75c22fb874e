"""Tests for the leaderboard computation."""

from decimal import Decimal

from core.leaderboard import compute_leaderboard
from core.models import PollType
from tests.conftest import MARGIN, WINNER, settlement


class TestTotals:
    def setup_method(self):
        self.records = [
            settlement("u1", "1", "winner", "10"),
            settlement("u1", "1", "victory_margin", "-3"),
            settlement("u2", "1", "winner", "-10"),
        ]

    def test_totals(self):
        board = compute_leaderboard(self.records)
        assert board.totals == {"u1": Decimal("7"), "u2": Decimal("-10")}

    def test_ranking(self):
        assert compute_leaderboard(self.records).ranking == ["u1", "u2"]

    def test_by_category(self):
        board = compute_leaderboard(self.records)
        assert board.by_category == {
            "u1": {WINNER: Decimal("10"), MARGIN: Decimal("-3")},
            "u2": {WINNER: Decimal("-10"), MARGIN: Decimal("0")},
        }

    def test_total_matches_categories(self):
        board = compute_leaderboard(self.records + [settlement("u2", "2", "toss", "4.25")])
        for row in board.rows:
            assert row.total == sum(row.by_category.values(), Decimal("0"))

    def test_categories_regular_first(self):
        board = compute_leaderboard(self.records + [
            settlement("u1", "2", "top_scorer", "1"),
            settlement("u1", "2", "toss", "1"),
            settlement("u1", "2", "another", "1"),
        ])
        assert board.categories[:2] == [WINNER, MARGIN]
        assert all(isinstance(c, PollType) for c in board.categories)
        assert [str(c) for c in board.categories] == [
            "winner", "victory_margin", "another", "top_scorer", "toss"]

    def test_full_precision(self):
        board = compute_leaderboard([
            settlement("u1", "1", "winner", "0.1"),
            settlement("u1", "2", "winner", "0.2"),
            settlement("u1", "3", "winner", "0.005"),
        ])
        assert board.totals["u1"] == Decimal("0.305")

    def test_empty(self):
        board = compute_leaderboard([])
        assert board.rows == []
        assert board.match_ids == []
        assert board.cumulative_series == {}


class TestRanking:
    def test_ties_share_rank_and_sort_by_name(self):
        board = compute_leaderboard([
            settlement("zed", "1", "winner", "5"),
            settlement("amy", "1", "winner", "5"),
            settlement("bob", "1", "winner", "9"),
            settlement("cat", "1", "winner", "-1"),
        ])
        assert [(r.user_name, r.rank, r.tied) for r in board.rows] == [
            ("bob", 1, False),
            ("amy", 2, True),
            ("zed", 2, True),
            ("cat", 4, False),
        ]

    def test_equal_decimals_with_different_exponents_tie(self):
        board = compute_leaderboard([
            settlement("amy", "1", "winner", "5.0"),
            settlement("bob", "1", "winner", "5"),
        ])
        assert [r.rank for r in board.rows] == [1, 1]


class TestCumulativeSeries:
    def test_numeric_match_order(self):
        board = compute_leaderboard([
            settlement("u1", "10", "winner", "1"),
            settlement("u1", "9", "winner", "2"),
            settlement("u1", "2", "winner", "3"),
        ])
        assert board.match_ids == ["2", "9", "10"]
        assert board.cumulative_series["u1"] == [
            Decimal("0"), Decimal("3"), Decimal("5"), Decimal("6")]

    def test_missing_matches_carry_forward(self):
        board = compute_leaderboard([
            settlement("u1", "1", "winner", "10"),
            settlement("u1", "1", "victory_margin", "-3"),
            settlement("u2", "2", "winner", "-10"),
        ])
        assert board.cumulative_series == {
            "u1": [Decimal("0"), Decimal("7"), Decimal("7")],
            "u2": [Decimal("0"), Decimal("0"), Decimal("-10")],
        }

    def test_series_construction(self):
        records = [
            settlement(user, str(m), "winner", str(m * sign))
            for user, sign in [("u1", 1), ("u2", -1)]
            for m in (3, 1, 12, 7)
        ]
        board = compute_leaderboard(records)
        for user, series in board.cumulative_series.items():
            assert len(series) == len(board.match_ids) + 1
            assert series[0] == 0
            assert series[-1] == board.totals[user]

    def test_to_dict(self):
        board = compute_leaderboard([settlement("u1", "1", "winner", "2.50")])
        assert board.to_dict() == {
            "categories": ["winner"],
            "match_ids": ["1"],
            "rows": [{
                "user_name": "u1",
                "rank": 1,
                "tied": False,
                "total": "2.50",
                "by_category": {"winner": "2.50"},
            }],
            "cumulative_series": {"u1": ["0", "2.50"]},
        }
