"""Core data models for votes, polls and settlements."""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Self

DEFAULT_USER_NAME = "Empty"


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 instant into a timezone-aware datetime.

    Naive values are taken to be UTC. A trailing "Z" is accepted.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: datetime) -> str:
    """Format an instant the way the ledger stores it (ISO-8601, UTC)."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class PollKind(str, Enum):
    WINNER = "winner"
    VICTORY_MARGIN = "victory_margin"
    ADHOC = "adhoc"


@dataclass(frozen=True, order=True)
class PollType:
    """A poll discriminant: one of the two regular polls or a named ad-hoc poll.

    Attributes:
        kind: Which family of poll this is
        name: The stored discriminant string ("winner", "victory_margin",
              or the ad-hoc poll's own name)

    Example:
        >>> PollType.parse("winner") == PollType.winner()
        True
        >>> PollType.parse("top_scorer")
        PollType(kind=<PollKind.ADHOC: 'adhoc'>, name='top_scorer')
    """
    kind: PollKind
    name: str

    @classmethod
    def winner(cls) -> Self:
        return cls(PollKind.WINNER, PollKind.WINNER.value)

    @classmethod
    def victory_margin(cls) -> Self:
        return cls(PollKind.VICTORY_MARGIN, PollKind.VICTORY_MARGIN.value)

    @classmethod
    def adhoc(cls, name: str) -> Self:
        if name in (PollKind.WINNER.value, PollKind.VICTORY_MARGIN.value):
            raise ValueError(f"'{name}' is a regular poll type, not an ad-hoc one")
        if not name:
            raise ValueError("Ad-hoc poll type needs a name")
        return cls(PollKind.ADHOC, name)

    @classmethod
    def parse(cls, raw: str | Self) -> Self:
        """Map a stored discriminant string onto a PollType."""
        if isinstance(raw, PollType):
            return raw
        if not isinstance(raw, str):
            raise ValueError(f"Poll type must be a string, got {type(raw).__name__}")
        name = raw.strip()
        if name == PollKind.WINNER.value:
            return cls.winner()
        if name == PollKind.VICTORY_MARGIN.value:
            return cls.victory_margin()
        return cls.adhoc(name)

    @property
    def is_regular(self) -> bool:
        return self.kind is not PollKind.ADHOC

    def __str__(self) -> str:
        return self.name


REGULAR_POLL_TYPES = (PollType.winner(), PollType.victory_margin())


@dataclass(frozen=True)
class Identity:
    """The authenticated principal supplied by the identity provider."""
    email: str | None
    name: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.email and self.email.strip())


@dataclass(frozen=True)
class Voter:
    name: str
    email: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email}


@dataclass(frozen=True)
class Vote:
    """A single entry of the append-only vote ledger.

    Attributes:
        match_id: Identifier of the match (numeric string)
        poll_type: Which poll of the match the vote is for
        option_voted: Team name, margin tier key, or ad-hoc option
        user_email: Stable identity of the voter
        user_name: Display name, "Empty" when the provider gave none
        created_timestamp: Instant of submission (timezone-aware)
    """
    match_id: str
    poll_type: PollType
    option_voted: str
    user_email: str
    created_timestamp: datetime
    user_name: str = DEFAULT_USER_NAME

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Self:
        """Build a Vote from a VOTES row."""
        return cls(
            match_id=str(row["match_id"]),
            poll_type=PollType.parse(row["poll_type"]),
            option_voted=row["option_voted"],
            user_email=row["user_email"],
            user_name=row.get("user_name") or DEFAULT_USER_NAME,
            created_timestamp=parse_timestamp(row["created_timestamp"]),
        )

    def to_row(self) -> dict[str, str]:
        return {
            "match_id": self.match_id,
            "user_email": self.user_email,
            "user_name": self.user_name,
            "poll_type": str(self.poll_type),
            "option_voted": self.option_voted,
            "created_timestamp": format_timestamp(self.created_timestamp),
        }

    @property
    def voter(self) -> Voter:
        return Voter(name=self.user_name, email=self.user_email)


@dataclass(frozen=True)
class Match:
    """A fixture from the MATCHES table; carries the regular polls' close time."""
    match_id: str
    team_1: str
    team_2: str
    poll_close_time: datetime
    date: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Self:
        date = row.get("Date")
        return cls(
            match_id=str(row["Match_ID"]),
            team_1=row.get("Team_1") or "",
            team_2=row.get("Team_2") or "",
            poll_close_time=parse_timestamp(row["Poll_Close_Time"]),
            date=parse_timestamp(date) if date else None,
        )

    @property
    def teams(self) -> list[str]:
        return [self.team_1, self.team_2]

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "team_1": self.team_1,
            "team_2": self.team_2,
            "date": format_timestamp(self.date) if self.date else None,
            "poll_close_time": format_timestamp(self.poll_close_time),
        }


@dataclass(frozen=True)
class AdhocPollOption:
    """One option row of an ad-hoc poll, with its own close time."""
    match_id: str
    poll_type: PollType
    option: str
    poll_close_time: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Self:
        return cls(
            match_id=str(row["match_id"]),
            poll_type=PollType.adhoc(row["poll_type"]),
            option=row["option"],
            poll_close_time=parse_timestamp(row["poll_close_time"]),
        )


@dataclass(frozen=True)
class SettlementRecord:
    """Signed monetary outcome of one poll for one user, scored out of band."""
    user_name: str
    match_id: str
    poll_type: PollType
    amount: Decimal

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Self:
        # str() first so floats from JSON keep their printed digits
        return cls(
            user_name=row["user_name"],
            match_id=str(row["match_id"]),
            poll_type=PollType.parse(row["poll_type"]),
            amount=Decimal(str(row["amount"])),
        )
