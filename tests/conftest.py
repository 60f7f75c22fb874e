"""Shared test helpers."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.models import AdhocPollOption, Match, PollType, SettlementRecord, Vote
from core.registry import PollRegistry
from core.store.memory import MemoryStore

CLOSE = datetime(2025, 4, 1, 14, 0, tzinfo=timezone.utc)

WINNER = PollType.winner()
MARGIN = PollType.victory_margin()


def at(minutes: int) -> datetime:
    """An instant `minutes` relative to CLOSE (negative = before closing)."""
    return CLOSE + timedelta(minutes=minutes)


def make_vote(
    match_id: str,
    poll_type: PollType | str,
    option: str,
    email: str,
    when: datetime,
    name: str | None = None,
) -> Vote:
    return Vote(
        match_id=match_id,
        poll_type=PollType.parse(poll_type),
        option_voted=option,
        user_email=email,
        user_name=name or email.split("@")[0],
        created_timestamp=when,
    )


def make_match(
    match_id: str,
    team_1: str = "CSK",
    team_2: str = "MI",
    close: datetime = CLOSE,
    date: datetime | None = None,
) -> Match:
    return Match(
        match_id=match_id,
        team_1=team_1,
        team_2=team_2,
        poll_close_time=close,
        date=date or close + timedelta(minutes=30),
    )


def make_adhoc(match_id: str, poll_type: str, option: str, close: datetime = CLOSE) -> AdhocPollOption:
    return AdhocPollOption(
        match_id=match_id,
        poll_type=PollType.adhoc(poll_type),
        option=option,
        poll_close_time=close,
    )


def settlement(user: str, match_id: str, poll_type: str, amount: str) -> SettlementRecord:
    return SettlementRecord(
        user_name=user, match_id=match_id,
        poll_type=PollType.parse(poll_type), amount=Decimal(amount),
    )


@pytest.fixture
def registry():
    """Matches 1 and 25 close at CLOSE; match 1 has a two-option ad-hoc poll.

    The "toss" option "CSK" closes at CLOSE, "MI" an hour later.
    """
    return PollRegistry(
        [make_match("1"), make_match("25", "RCB", "KKR")],
        [
            make_adhoc("1", "toss", "CSK"),
            make_adhoc("1", "toss", "MI", close=at(60)),
        ],
    )


@pytest.fixture
def store():
    return MemoryStore(
        matches=[make_match("1"), make_match("25", "RCB", "KKR")],
        adhoc_options=[
            make_adhoc("1", "toss", "CSK"),
            make_adhoc("1", "toss", "MI", close=at(60)),
        ],
    )
