"""Eligibility gate: accepts a new vote only while its poll is open."""

import logging
from datetime import datetime, timezone

from core.errors import InvalidOption, PollClosed, PollNotFound, Unauthorized
from core.models import DEFAULT_USER_NAME, Identity, PollType, Vote
from core.registry import PollRegistry
from core.store.base import PollStore

logger = logging.getLogger(__name__)


def check_eligibility(
    registry: PollRegistry,
    match_id: str,
    option: str,
    poll_type: PollType,
    identity: Identity | None,
    now: datetime,
) -> None:
    """Raise if a vote with these details would be rejected.

    Raises:
        Unauthorized: No identity, or the identity has no email
        PollNotFound: The poll (or, for ad-hoc polls, the option) isn't registered
        PollClosed: `now` is at or after the poll's closing instant
        InvalidOption: The option isn't one of the poll's options
    """
    if identity is None or not identity.is_authenticated:
        raise Unauthorized("Unauthorized")

    # Ad-hoc options carry their own close time; regular polls share the match's
    close_time = registry.closing_time_of(match_id, poll_type, option)
    if close_time is None and not poll_type.is_regular:
        if registry.display_closing_time(match_id, poll_type) is not None:
            raise InvalidOption(f"'{option}' is not an option of poll {poll_type}")
    if close_time is None:
        raise PollNotFound(f"No poll {poll_type} for match {match_id}")

    if now >= close_time:
        raise PollClosed("Poll has closed")

    options = registry.options_for(match_id, poll_type) or []
    if option not in options:
        raise InvalidOption(f"'{option}' is not an option of poll {poll_type}")


def submit_vote(
    store: PollStore,
    registry: PollRegistry,
    match_id: str,
    option: str,
    poll_type: PollType,
    identity: Identity | None,
    now: datetime | None = None,
) -> Vote:
    """Validate and append a new vote to the ledger.

    Earlier votes by the same user are left alone; the newest one before
    closing is picked at read time.

    Returns:
        The Vote that was inserted
    """
    if now is None:
        now = datetime.now(timezone.utc)
    match_id = str(match_id)

    try:
        check_eligibility(registry, match_id, option, poll_type, identity, now)
    except (PollClosed, PollNotFound, InvalidOption) as e:
        logger.info("Rejected vote by %s on %s/%s: %s",
                    identity.email, match_id, poll_type, e)
        raise

    vote = Vote(
        match_id=match_id,
        poll_type=poll_type,
        option_voted=option,
        user_email=identity.email,
        user_name=identity.name or DEFAULT_USER_NAME,
        created_timestamp=now,
    )
    store.insert_vote(vote)
    logger.info("Accepted vote by %s on %s/%s", identity.email, match_id, poll_type)
    return vote
