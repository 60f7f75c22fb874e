"""Storage backend for a Supabase project, over its PostgREST API."""

import logging
from typing import Any

import httpx

from core.config import Settings
from core.errors import UpstreamError
from core.models import AdhocPollOption, Match, PollType, SettlementRecord, Vote
from core.store.base import PollStore

logger = logging.getLogger(__name__)

MATCHES_TABLE = "MATCHES"
VOTES_TABLE = "VOTES"
ADHOC_TABLE = "ADHOC_POLLS"
SETTLEMENTS_TABLE = "LEADERBOARD"
AI_VOTES_TABLE = "AI_VOTES"

# Row decoding failures: bad keys, non-string fields, bad timestamps or amounts
ROW_ERRORS = (KeyError, TypeError, ValueError, ArithmeticError)

VOTE_COLUMNS = "match_id,user_email,user_name,option_voted,poll_type,created_timestamp"


class SupabaseStore(PollStore):
    """PostgREST client for the polling tables.

    Every call is a single HTTP request; there are no retries. Transport
    errors and non-2xx responses are raised as UpstreamError.

    Args:
        settings: Project URL, API key and timeout
        transport: Optional httpx transport (tests pass an httpx.MockTransport)
    """

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self.settings = settings
        self._client = httpx.Client(
            base_url=f"{settings.supabase_url}/rest/v1",
            headers={
                "apikey": settings.supabase_key,
                "Authorization": f"Bearer {settings.supabase_key}",
                "x-server-side": "1",
            },
            timeout=settings.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, table: str, **kwargs) -> httpx.Response:
        logger.debug("%s %s %s", method, table, kwargs.get("params", ""))
        try:
            response = self._client.request(method, f"/{table}", **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("Supabase %s %s failed: HTTP %s",
                           method, table, e.response.status_code)
            raise UpstreamError(
                f"HTTP error from {table}: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.warning("Supabase %s %s failed: %s", method, table, e)
            raise UpstreamError(f"Error reaching {table}: {e}") from e
        return response

    def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        response = self._request("GET", table, params=params)
        try:
            rows = response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from {table}: {e}") from e
        if not isinstance(rows, list):
            raise UpstreamError(f"Expected a list of rows from {table}")
        return rows

    def _decode_skipping(self, table: str, rows: list[dict[str, Any]], decode) -> list:
        """Decode rows, dropping any that cannot be read.

        Used for tables whose unreadable rows would be ignored downstream
        anyway: a vote or ad-hoc option that does not decode is never part
        of a registered poll.
        """
        decoded = []
        for row in rows:
            try:
                decoded.append(decode(row))
            except ROW_ERRORS as e:
                logger.warning("Skipping unreadable %s row %r: %s", table, row, e)
        return decoded

    def _decode_strict(self, table: str, rows: list[dict[str, Any]], decode) -> list:
        """Decode rows, failing the request on the first unreadable one."""
        try:
            return [decode(row) for row in rows]
        except ROW_ERRORS as e:
            raise UpstreamError(f"Unreadable row in {table}: {e}") from e

    def fetch_votes(
        self, match_id: str | None = None, poll_type: PollType | None = None
    ) -> list[Vote]:
        params = {"select": VOTE_COLUMNS, "order": "created_timestamp.desc"}
        if match_id is not None:
            params["match_id"] = f"eq.{match_id}"
        if poll_type is not None:
            params["poll_type"] = f"eq.{poll_type}"
        rows = self._select(VOTES_TABLE, params)
        return self._decode_skipping(VOTES_TABLE, rows, Vote.from_row)

    def insert_vote(self, vote: Vote) -> None:
        self._request(
            "POST", VOTES_TABLE,
            json=vote.to_row(),
            headers={"Prefer": "return=minimal"},
        )

    def fetch_matches(self) -> list[Match]:
        rows = self._select(MATCHES_TABLE, {"select": "*", "order": "Date.asc"})
        return self._decode_strict(MATCHES_TABLE, rows, Match.from_row)

    def fetch_adhoc_options(self) -> list[AdhocPollOption]:
        rows = self._select(ADHOC_TABLE, {
            "select": "match_id,poll_type,option,poll_close_time",
        })
        return self._decode_skipping(ADHOC_TABLE, rows, AdhocPollOption.from_row)

    def fetch_settlements(self) -> list[SettlementRecord]:
        rows = self._select(SETTLEMENTS_TABLE, {
            "select": "user_name,match_id,poll_type,amount",
        })
        return self._decode_strict(SETTLEMENTS_TABLE, rows, SettlementRecord.from_row)

    def fetch_ai_votes(self) -> dict[str, str]:
        rows = self._select(AI_VOTES_TABLE, {"select": "match_id,reasoning"})
        return {str(row["match_id"]): row["reasoning"] for row in rows}
