"""Leaderboard computation from the settlement table."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Self

from core.margins import match_number
from core.models import REGULAR_POLL_TYPES, PollType, SettlementRecord

ZERO = Decimal("0")


@dataclass
class LeaderboardRow:
    """One user's standing.

    Attributes:
        user_name: The user the row is for
        rank: 1-indexed position (users with equal totals share a rank)
        tied: Whether another user has the same total
        total: Sum of all settlement amounts
        by_category: poll_type -> sum of settlement amounts for that poll type
    """
    user_name: str
    rank: int
    tied: bool
    total: Decimal
    by_category: dict[PollType, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_name": self.user_name,
            "rank": self.rank,
            "tied": self.tied,
            "total": str(self.total),
            "by_category": {str(k): str(v) for k, v in self.by_category.items()},
        }

    @classmethod
    def build_ranking(
        cls,
        ordered: list[str | list[str]],
        totals: dict[str, Decimal],
        by_category: dict[str, dict[PollType, Decimal]],
    ) -> list[Self]:
        """Build rows from users ordered best to worst.

        Each element of `ordered` is either a single user or a list of users
        sharing a total. Tied users share the rank of the first of them, and
        the next rank skips past the group.
        """
        rows = []
        rank = 1
        for entry in ordered:
            group = entry if isinstance(entry, list) else [entry]
            tied = isinstance(entry, list)
            for name in group:
                rows.append(cls(
                    user_name=name,
                    rank=rank,
                    tied=tied,
                    total=totals[name],
                    by_category=dict(by_category[name]),
                ))
            rank += len(group)
        return rows


@dataclass
class Leaderboard:
    """Ranked totals, category breakdowns and cumulative earnings.

    Attributes:
        rows: Users ranked by total, best first
        categories: Poll types present in the settlement table
        match_ids: Matches present, in numeric order
        cumulative_series: user -> running total, starting at 0 before the
            first match, one entry per match after that
    """
    rows: list[LeaderboardRow]
    categories: list[PollType]
    match_ids: list[str]
    cumulative_series: dict[str, list[Decimal]]

    @property
    def totals(self) -> dict[str, Decimal]:
        return {row.user_name: row.total for row in self.rows}

    @property
    def by_category(self) -> dict[str, dict[PollType, Decimal]]:
        return {row.user_name: dict(row.by_category) for row in self.rows}

    @property
    def ranking(self) -> list[str]:
        return [row.user_name for row in self.rows]

    def to_dict(self) -> dict[str, Any]:
        return {
            "categories": [str(c) for c in self.categories],
            "match_ids": self.match_ids,
            "rows": [row.to_dict() for row in self.rows],
            "cumulative_series": {
                user: [str(v) for v in series]
                for user, series in self.cumulative_series.items()
            },
        }


def category_sort_key(poll_type: PollType) -> tuple[int, str]:
    """Regular poll types first in their usual order, then ad-hoc ones by name."""
    if poll_type.is_regular:
        return (REGULAR_POLL_TYPES.index(poll_type), "")
    return (len(REGULAR_POLL_TYPES), poll_type.name)


def match_sort_key(match_id: str) -> tuple[int, int, str]:
    """Numeric match ids in numeric order, anything else after them."""
    number = match_number(match_id)
    if number is None:
        return (1, 0, match_id)
    return (0, number, match_id)


def compute_leaderboard(records: Iterable[SettlementRecord]) -> Leaderboard:
    """Compute the leaderboard from settlement records.

    Amounts are summed as Decimals; rounding for display is left to the
    caller.
    """
    records = list(records)

    categories = sorted({r.poll_type for r in records}, key=category_sort_key)
    match_ids = sorted({r.match_id for r in records}, key=match_sort_key)
    users = sorted({r.user_name for r in records})

    by_category: dict[str, dict[PollType, Decimal]] = {
        user: {category: ZERO for category in categories} for user in users
    }
    per_match: dict[str, dict[str, Decimal]] = {user: {} for user in users}

    for record in records:
        by_category[record.user_name][record.poll_type] += record.amount
        earned = per_match[record.user_name]
        earned[record.match_id] = earned.get(record.match_id, ZERO) + record.amount

    totals = {user: sum(by_category[user].values(), ZERO) for user in users}

    # Group by total, best first; users in a group are already name-ordered
    total_groups: dict[Decimal, list[str]] = {}
    for user in users:
        total_groups.setdefault(totals[user], []).append(user)

    ordered: list[str | list[str]] = []
    for total in sorted(total_groups, reverse=True):
        group = total_groups[total]
        ordered.append(group[0] if len(group) == 1 else group)

    cumulative_series: dict[str, list[Decimal]] = {}
    for user in users:
        series = [ZERO]
        for match_id in match_ids:
            series.append(series[-1] + per_match[user].get(match_id, ZERO))
        cumulative_series[user] = series

    return Leaderboard(
        rows=LeaderboardRow.build_ranking(ordered, totals, by_category),
        categories=categories,
        match_ids=match_ids,
        cumulative_series=cumulative_series,
    )
