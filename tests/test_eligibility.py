"""Tests for the eligibility gate."""

import pytest

from core.aggregate import aggregate_votes
from core.eligibility import check_eligibility, submit_vote
from core.errors import InvalidOption, PollClosed, PollNotFound, Unauthorized
from core.models import DEFAULT_USER_NAME, Identity, PollType
from tests.conftest import CLOSE, MARGIN, WINNER, at

TOSS = PollType.adhoc("toss")
ASHA = Identity(email="asha@example.com", name="Asha")


class TestSubmitVote:
    def test_accepts_open_poll(self, store, registry):
        vote = submit_vote(store, registry, "1", "CSK", WINNER, ASHA, now=at(-10))
        assert store.votes == [vote]
        assert vote.created_timestamp == at(-10)
        assert vote.user_email == "asha@example.com"
        assert vote.user_name == "Asha"

    def test_missing_name_uses_placeholder(self, store, registry):
        vote = submit_vote(store, registry, "1", "A", MARGIN,
                           Identity(email="x@example.com"), now=at(-10))
        assert vote.user_name == DEFAULT_USER_NAME

    def test_never_replaces_earlier_votes(self, store, registry):
        submit_vote(store, registry, "1", "CSK", WINNER, ASHA, now=at(-20))
        submit_vote(store, registry, "1", "MI", WINNER, ASHA, now=at(-10))
        assert [v.option_voted for v in store.votes] == ["CSK", "MI"]
        result = aggregate_votes(store.votes, registry, ASHA.email)
        assert result.user_votes == {"1": {WINNER: "MI"}}

    def test_match_id_normalised_to_string(self, store, registry):
        vote = submit_vote(store, registry, 25, "RCB", WINNER, ASHA, now=at(-10))
        assert vote.match_id == "25"


class TestRejections:
    @pytest.mark.parametrize("identity", [None, Identity(email=None), Identity(email="")])
    def test_unauthorized(self, store, registry, identity):
        with pytest.raises(Unauthorized):
            submit_vote(store, registry, "1", "CSK", WINNER, identity, now=at(-10))
        assert store.votes == []

    def test_closed_at_close_instant(self, store, registry):
        with pytest.raises(PollClosed):
            submit_vote(store, registry, "1", "CSK", WINNER, ASHA, now=CLOSE)
        assert store.votes == []

    def test_closed_after(self, store, registry):
        with pytest.raises(PollClosed, match="Poll has closed"):
            submit_vote(store, registry, "1", "CSK", WINNER, ASHA, now=at(1))

    def test_unknown_match(self, store, registry):
        with pytest.raises(PollNotFound):
            submit_vote(store, registry, "99", "CSK", WINNER, ASHA, now=at(-10))

    def test_unknown_adhoc_poll(self, store, registry):
        with pytest.raises(PollNotFound):
            submit_vote(store, registry, "25", "RCB", TOSS, ASHA, now=at(-10))

    def test_option_not_a_team(self, store, registry):
        with pytest.raises(InvalidOption):
            submit_vote(store, registry, "1", "RCB", WINNER, ASHA, now=at(-10))

    def test_option_not_a_margin_tier(self, store, registry):
        with pytest.raises(InvalidOption):
            submit_vote(store, registry, "1", "E", MARGIN, ASHA, now=at(-10))

    def test_unregistered_adhoc_option(self, store, registry):
        with pytest.raises(InvalidOption):
            submit_vote(store, registry, "1", "RR", TOSS, ASHA, now=at(-10))


class TestAdhocClosing:
    def test_option_closing_later_still_open(self, store, registry):
        vote = submit_vote(store, registry, "1", "MI", TOSS, ASHA, now=at(30))
        assert vote.poll_type == TOSS

    def test_option_closing_earlier_is_closed(self, store, registry):
        with pytest.raises(PollClosed):
            submit_vote(store, registry, "1", "CSK", TOSS, ASHA, now=at(30))

    def test_check_without_writing(self, store, registry):
        check_eligibility(registry, "1", "MI", TOSS, ASHA, at(30))
        assert store.votes == []
