"""Abstract base class for storage backends."""

from abc import ABC, abstractmethod

from core.models import AdhocPollOption, Match, PollType, SettlementRecord, Vote
from core.registry import PollRegistry


class PollStore(ABC):
    """Abstract storage collaborator.

    The vote ledger is append-only: implementations provide inserts and
    filtered reads, never updates or deletes. Any backend failure must be
    raised as core.errors.UpstreamError so callers can abort the request.
    """

    @abstractmethod
    def fetch_votes(
        self, match_id: str | None = None, poll_type: PollType | None = None
    ) -> list[Vote]:
        """Fetch votes, newest first, optionally filtered by match and poll type."""
        pass

    @abstractmethod
    def insert_vote(self, vote: Vote) -> None:
        """Append one vote to the ledger."""
        pass

    @abstractmethod
    def fetch_matches(self) -> list[Match]:
        """Fetch every match, ordered by date."""
        pass

    @abstractmethod
    def fetch_adhoc_options(self) -> list[AdhocPollOption]:
        """Fetch every ad-hoc poll option row."""
        pass

    @abstractmethod
    def fetch_settlements(self) -> list[SettlementRecord]:
        """Fetch the externally scored settlement table."""
        pass

    def fetch_ai_votes(self) -> dict[str, str]:
        """Fetch AI prediction reasoning keyed by match id.

        Backends without an AI prediction table return an empty mapping.
        """
        return {}

    def load_registry(self) -> PollRegistry:
        """Build a PollRegistry from the match and ad-hoc poll tables."""
        return PollRegistry(self.fetch_matches(), self.fetch_adhoc_options())
