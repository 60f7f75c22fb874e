"""Vote aggregation: effective votes, per-option tallies and voter rosters."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from core.models import PollKind, PollType, Vote, Voter
from core.registry import PollRegistry

logger = logging.getLogger(__name__)

# match_id -> poll_type -> option -> value
Counts = dict[str, dict[PollType, dict[str, int]]]
Rosters = dict[str, dict[PollType, dict[str, list[Voter]]]]
UserVotes = dict[str, dict[PollType, str]]


def percentage(count: int, total: int) -> float:
    """Share of `total` held by `count`, in percent. A zero total gives 0."""
    if total <= 0:
        return 0.0
    return count * 100.0 / total


@dataclass
class PollTally:
    """Counts and rosters of a single poll."""
    match_id: str
    poll_type: PollType
    counts: dict[str, int] = field(default_factory=dict)
    voters: dict[str, list[Voter]] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def percentages(self) -> dict[str, float]:
        total = self.total
        return {option: percentage(count, total) for option, count in self.counts.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "poll_type": str(self.poll_type),
            "counts": dict(self.counts),
            "total": self.total,
            "percentages": self.percentages,
            "voters": {
                option: [v.to_dict() for v in voters]
                for option, voters in self.voters.items()
            },
        }


@dataclass
class VoteAggregation:
    """Derived views over the vote ledger.

    Attributes:
        counts: match_id -> poll_type -> option -> number of effective votes
        voters: match_id -> poll_type -> option -> voters, in processing order
        user_votes: match_id -> poll_type -> option, for the requesting user
        effective_votes: The effective votes themselves, most recent first
    """
    counts: Counts = field(default_factory=dict)
    voters: Rosters = field(default_factory=dict)
    user_votes: UserVotes = field(default_factory=dict)
    effective_votes: list[Vote] = field(default_factory=list)

    def tally(self, match_id: str, poll_type: PollType) -> PollTally:
        """Return the tally of one poll (empty if nobody voted)."""
        match_id = str(match_id)
        counts = self.counts.get(match_id, {}).get(poll_type, {})
        voters = self.voters.get(match_id, {}).get(poll_type, {})
        return PollTally(
            match_id=match_id,
            poll_type=poll_type,
            counts=dict(counts),
            voters={option: list(vs) for option, vs in voters.items()},
        )

    def user_choice(self, match_id: str, poll_type: PollType) -> str | None:
        return self.user_votes.get(str(match_id), {}).get(poll_type)

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain nested mappings keyed by strings."""
        return {
            "vote_counts": {
                match_id: {str(pt): dict(options) for pt, options in polls.items()}
                for match_id, polls in self.counts.items()
            },
            "percentages": {
                match_id: {
                    str(pt): self.tally(match_id, pt).percentages for pt in polls
                }
                for match_id, polls in self.counts.items()
            },
            "voters_by_match": {
                match_id: {
                    str(pt): {
                        option: [v.to_dict() for v in voters]
                        for option, voters in options.items()
                    }
                    for pt, options in polls.items()
                }
                for match_id, polls in self.voters.items()
            },
            "user_votes": {
                match_id: {str(pt): option for pt, option in polls.items()}
                for match_id, polls in self.user_votes.items()
            },
        }


def most_recent_first(votes: Iterable[Vote]) -> list[Vote]:
    """Order votes newest first.

    Votes with identical timestamps keep ledger order reversed, so the one
    that appears later in the input counts as the more recent.
    """
    indexed = list(enumerate(votes))
    indexed.sort(key=lambda iv: (iv[1].created_timestamp, iv[0]), reverse=True)
    return [vote for _, vote in indexed]


def effective_votes(votes: Iterable[Vote], registry: PollRegistry) -> list[Vote]:
    """Select each user's effective vote per poll.

    A vote survives only if its poll is registered and it was cast at or
    before the poll's closing instant; of the survivors, the most recent one
    per (match, poll type, user) wins. Ad-hoc votes are checked against
    their option's own close time, so a vote for an option that was never
    registered is discarded even when its poll group is registered.

    Returns the effective votes, most recent first.
    """
    index = registry.closing_index()
    seen: set[tuple[str, PollType, str]] = set()
    selected: list[Vote] = []

    for vote in most_recent_first(votes):
        if vote.poll_type.kind is PollKind.ADHOC:
            close_time = registry.closing_time_of(
                vote.match_id, vote.poll_type, vote.option_voted
            )
        else:
            close_time = index.get((vote.match_id, vote.poll_type))

        if close_time is None:
            logger.debug("Discarding vote for unregistered poll %s/%s",
                         vote.match_id, vote.poll_type)
            continue
        if vote.created_timestamp > close_time:
            logger.debug("Discarding vote by %s on %s/%s cast after close",
                         vote.user_email, vote.match_id, vote.poll_type)
            continue

        key = (vote.match_id, vote.poll_type, vote.user_email)
        if key in seen:
            continue
        seen.add(key)
        selected.append(vote)

    return selected


def aggregate_votes(
    votes: Iterable[Vote],
    registry: PollRegistry,
    requesting_email: str | None = None,
) -> VoteAggregation:
    """Aggregate the vote ledger into counts, rosters and the user's choices.

    Args:
        votes: Every vote in the ledger, in ledger order
        registry: Closing times of all known polls
        requesting_email: Email of the user whose own choices are wanted

    Returns:
        VoteAggregation where every user counts at most once per poll
    """
    result = VoteAggregation()

    for vote in effective_votes(votes, registry):
        option_counts = result.counts.setdefault(vote.match_id, {}).setdefault(vote.poll_type, {})
        option_counts[vote.option_voted] = option_counts.get(vote.option_voted, 0) + 1

        roster = result.voters.setdefault(vote.match_id, {}).setdefault(vote.poll_type, {})
        roster.setdefault(vote.option_voted, []).append(vote.voter)

        if requesting_email and vote.user_email == requesting_email:
            result.user_votes.setdefault(vote.match_id, {})[vote.poll_type] = vote.option_voted

        result.effective_votes.append(vote)

    return result
