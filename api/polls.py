"""Vercel serverless function listing upcoming matches and their polls."""

from api._common import (
    create_response,
    error_response,
    identity_from_request,
    open_store,
    preflight_response,
)
from core.errors import PollError
from core.service import get_ai_votes, get_upcoming_polls


def respond(request, store):
    matches = get_upcoming_polls(store, identity_from_request(request))
    ai_votes = get_ai_votes(store)
    return create_response({
        "matches": [m.to_dict() for m in matches],
        "ai_votes": ai_votes,
    })


def handler(request, store=None):
    """Return upcoming matches with their polls and AI predictions.

    Only signed-in users may list polls.
    """
    if request.method == "OPTIONS":
        return preflight_response("GET, OPTIONS")

    if request.method != "GET":
        return create_response(
            {"error": "Method not allowed. Use GET."},
            status=405,
        )

    try:
        if store is not None:
            return respond(request, store)
        with open_store() as store:
            return respond(request, store)
    except PollError as e:
        return error_response(e)
    except Exception as e:
        return create_response(
            {"error": f"Failed to load polls: {e}"},
            status=500,
        )
