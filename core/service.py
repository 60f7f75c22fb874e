"""Orchestrator: fetch from the store and run the core computations.

Every call fetches fresh rows; nothing is cached between requests.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from core.aggregate import VoteAggregation, aggregate_votes
from core.eligibility import submit_vote
from core.errors import InvalidOption, Unauthorized
from core.leaderboard import Leaderboard, compute_leaderboard
from core.margins import margin_options_for
from core.models import Identity, Match, PollKind, PollType, Vote, format_timestamp
from core.registry import PollRegistry
from core.store.base import PollStore


@dataclass
class PollInfo:
    """One poll of a match: its options (key -> label) and close time."""
    poll_type: PollType
    options: dict[str, str]
    closes_at: datetime
    is_open: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "poll_type": str(self.poll_type),
            "options": self.options,
            "closes_at": format_timestamp(self.closes_at),
            "is_open": self.is_open,
        }


@dataclass
class MatchPolls:
    """A match together with every poll registered for it."""
    match: Match
    polls: list[PollInfo] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return any(p.is_open for p in self.polls)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.match.to_dict(),
            "is_open": self.is_open,
            "polls": [p.to_dict() for p in self.polls],
        }


def require_identity(identity: Identity | None) -> Identity:
    if identity is None or not identity.is_authenticated:
        raise Unauthorized("Unauthorized")
    return identity


def parse_poll_type(raw: str | PollType) -> PollType:
    try:
        return PollType.parse(raw)
    except ValueError as e:
        raise InvalidOption(f"Invalid poll type: {e}") from e


def describe_polls(registry: PollRegistry, match: Match, now: datetime) -> MatchPolls:
    """List every poll of a match with option labels and open/closed state."""
    result = MatchPolls(match=match)
    for poll_type in registry.polls_for(match.match_id):
        options = registry.options_for(match.match_id, poll_type) or []
        if poll_type.kind is PollKind.VICTORY_MARGIN:
            labels = margin_options_for(match.match_id)
        else:
            labels = {option: option for option in options}
        result.polls.append(PollInfo(
            poll_type=poll_type,
            options=labels,
            closes_at=registry.display_closing_time(match.match_id, poll_type),
            is_open=registry.is_open(match.match_id, poll_type, now),
        ))
    return result


def get_upcoming_polls(
    store: PollStore, identity: Identity | None, now: datetime | None = None
) -> list[MatchPolls]:
    """Polls of every match that hasn't started yet, for a signed-in user."""
    require_identity(identity)
    if now is None:
        now = datetime.now(timezone.utc)
    registry = store.load_registry()
    return [describe_polls(registry, m, now) for m in registry.upcoming_matches(now)]


def get_all_votes(store: PollStore, identity: Identity | None) -> VoteAggregation:
    """Aggregate the whole ledger, including the caller's own current choices.

    Raises:
        Unauthorized: No signed-in user
        UpstreamError: Any fetch failed; no partial result is returned
    """
    identity = require_identity(identity)
    registry = store.load_registry()
    votes = store.fetch_votes()
    return aggregate_votes(votes, registry, identity.email)


def cast_vote(
    store: PollStore,
    identity: Identity | None,
    match_id: str,
    option: str,
    poll_type: str | PollType,
    now: datetime | None = None,
) -> Vote:
    """Submit a vote on behalf of the signed-in user."""
    identity = require_identity(identity)
    registry = store.load_registry()
    return submit_vote(
        store, registry, match_id, option, parse_poll_type(poll_type), identity, now
    )


def get_leaderboard(store: PollStore) -> Leaderboard:
    return compute_leaderboard(store.fetch_settlements())


def get_ai_votes(store: PollStore) -> dict[str, str]:
    return store.fetch_ai_votes()
