"""Poll registry: closing instants and option sets for every poll."""

from datetime import datetime

from core.margins import margin_options_for
from core.models import (
    REGULAR_POLL_TYPES,
    AdhocPollOption,
    Match,
    PollKind,
    PollType,
)

PollKey = tuple[str, PollType]


def get_poll_types() -> list[PollType]:
    """The regular poll types every match carries."""
    return list(REGULAR_POLL_TYPES)


class PollRegistry:
    """Read-only view over the match table and the ad-hoc poll table.

    Regular polls (winner, victory margin) share the close time of their
    match. Ad-hoc polls are keyed by (match, poll type, option) and each
    option row may close at a different instant; the group as a whole is
    displayed with the latest of those.
    """

    def __init__(self, matches: list[Match], adhoc_options: list[AdhocPollOption] | None = None):
        self._matches: dict[str, Match] = {m.match_id: m for m in matches}
        self._adhoc: dict[PollKey, dict[str, datetime]] = {}
        for row in adhoc_options or []:
            options = self._adhoc.setdefault((row.match_id, row.poll_type), {})
            options[row.option] = row.poll_close_time

    @property
    def matches(self) -> list[Match]:
        """All matches ordered by date, undated ones last."""
        return sorted(
            self._matches.values(),
            key=lambda m: (m.date is None, m.date or m.poll_close_time),
        )

    def get_match(self, match_id: str) -> Match | None:
        return self._matches.get(str(match_id))

    def upcoming_matches(self, now: datetime) -> list[Match]:
        """Matches dated at or after `now`, in date order."""
        return [m for m in self.matches if m.date is not None and m.date >= now]

    def polls_for(self, match_id: str) -> list[PollType]:
        """Every poll registered for a match: regular ones first, then ad-hoc."""
        match_id = str(match_id)
        polls = list(REGULAR_POLL_TYPES) if match_id in self._matches else []
        polls.extend(sorted(pt for (mid, pt) in self._adhoc if mid == match_id))
        return polls

    def closing_time_of(
        self, match_id: str, poll_type: PollType, option: str | None = None
    ) -> datetime | None:
        """Resolve the closing instant of a poll, or None if it isn't registered.

        Args:
            match_id: Match identifier
            poll_type: Poll to look up
            option: For ad-hoc polls, the option whose own close time is
                wanted. Without it, the group's display close time is
                returned. Ignored for regular polls.
        """
        match_id = str(match_id)
        match poll_type.kind:
            case PollKind.WINNER | PollKind.VICTORY_MARGIN:
                found = self._matches.get(match_id)
                return found.poll_close_time if found else None
            case PollKind.ADHOC:
                options = self._adhoc.get((match_id, poll_type))
                if not options:
                    return None
                if option is None:
                    return max(options.values())
                return options.get(option)
        raise ValueError(f"Unhandled poll kind: {poll_type.kind}")

    def display_closing_time(self, match_id: str, poll_type: PollType) -> datetime | None:
        return self.closing_time_of(match_id, poll_type)

    def closing_index(self) -> dict[PollKey, datetime]:
        """Map every registered (match, poll type) to its display close time."""
        index: dict[PollKey, datetime] = {}
        for match in self._matches.values():
            for poll_type in REGULAR_POLL_TYPES:
                index[(match.match_id, poll_type)] = match.poll_close_time
        for key, options in self._adhoc.items():
            index[key] = max(options.values())
        return index

    def options_for(self, match_id: str, poll_type: PollType) -> list[str] | None:
        """Valid options of a poll, or None if the poll isn't registered."""
        match_id = str(match_id)
        match poll_type.kind:
            case PollKind.WINNER:
                found = self._matches.get(match_id)
                return found.teams if found else None
            case PollKind.VICTORY_MARGIN:
                if match_id not in self._matches:
                    return None
                return list(margin_options_for(match_id))
            case PollKind.ADHOC:
                options = self._adhoc.get((match_id, poll_type))
                return list(options) if options else None
        raise ValueError(f"Unhandled poll kind: {poll_type.kind}")

    def is_open(
        self, match_id: str, poll_type: PollType, now: datetime, option: str | None = None
    ) -> bool:
        close_time = self.closing_time_of(match_id, poll_type, option)
        return close_time is not None and now < close_time
