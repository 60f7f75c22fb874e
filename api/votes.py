"""Vercel serverless function for reading tallies and casting votes."""

import json

from api._common import (
    create_response,
    error_response,
    identity_from_request,
    open_store,
    preflight_response,
    read_json,
)
from core.errors import PollError
from core.service import cast_vote, get_all_votes

REQUIRED_FIELDS = ("match_id", "option", "poll_type")


def invalid_fields(data: dict) -> list[str]:
    """Names of body fields that are missing or of the wrong JSON type."""
    bad = [k for k in REQUIRED_FIELDS if not data.get(k)]
    if "option" not in bad and not isinstance(data["option"], str):
        bad.append("option")
    if "poll_type" not in bad and not isinstance(data["poll_type"], str):
        bad.append("poll_type")
    # bool is an int subclass, so it is ruled out explicitly
    match_id = data.get("match_id")
    if "match_id" not in bad and (
        isinstance(match_id, bool) or not isinstance(match_id, (str, int))
    ):
        bad.append("match_id")
    return bad


def respond(request, store):
    identity = identity_from_request(request)

    if request.method == "GET":
        return create_response(get_all_votes(store, identity).to_dict())

    data = read_json(request)
    bad = invalid_fields(data)
    if bad:
        return create_response(
            {"error": f"Missing or invalid {', '.join(bad)} in request body"},
            status=400,
        )

    vote = cast_vote(
        store, identity, str(data["match_id"]), data["option"], data["poll_type"]
    )
    return create_response({"ok": True, "vote": vote.to_row()}, status=201)


def handler(request, store=None):
    """Handle vote requests.

    Accepts:
    - GET: returns vote counts, percentages, voter rosters and the caller's
      own choices
    - POST with JSON body: {"match_id": "...", "option": "...", "poll_type": "..."}

    The caller must be signed in (X-User-Email header) for both.
    """
    if request.method == "OPTIONS":
        return preflight_response("GET, POST, OPTIONS")

    if request.method not in ("GET", "POST"):
        return create_response(
            {"error": "Method not allowed. Use GET or POST."},
            status=405,
        )

    try:
        if store is not None:
            return respond(request, store)
        with open_store() as store:
            return respond(request, store)
    except PollError as e:
        return error_response(e)
    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except Exception as e:
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )
