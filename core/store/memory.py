"""In-memory storage backend, for tests and local runs."""

from core.models import AdhocPollOption, Match, PollType, SettlementRecord, Vote
from core.store.base import PollStore


class MemoryStore(PollStore):
    """Keeps every table in a plain list. Votes are kept in insertion order."""

    def __init__(
        self,
        matches: list[Match] | None = None,
        adhoc_options: list[AdhocPollOption] | None = None,
        votes: list[Vote] | None = None,
        settlements: list[SettlementRecord] | None = None,
        ai_votes: dict[str, str] | None = None,
    ):
        self.matches = list(matches or [])
        self.adhoc_options = list(adhoc_options or [])
        self.votes = list(votes or [])
        self.settlements = list(settlements or [])
        self.ai_votes = dict(ai_votes or {})

    def fetch_votes(
        self, match_id: str | None = None, poll_type: PollType | None = None
    ) -> list[Vote]:
        selected = [
            v for v in self.votes
            if (match_id is None or v.match_id == str(match_id))
            and (poll_type is None or v.poll_type == poll_type)
        ]
        # Stable sort: equal timestamps stay in ledger order
        return sorted(selected, key=lambda v: v.created_timestamp, reverse=True)

    def insert_vote(self, vote: Vote) -> None:
        self.votes.append(vote)

    def fetch_matches(self) -> list[Match]:
        return sorted(self.matches, key=lambda m: (m.date is None, m.date or m.poll_close_time))

    def fetch_adhoc_options(self) -> list[AdhocPollOption]:
        return list(self.adhoc_options)

    def fetch_settlements(self) -> list[SettlementRecord]:
        return list(self.settlements)

    def fetch_ai_votes(self) -> dict[str, str]:
        return dict(self.ai_votes)
