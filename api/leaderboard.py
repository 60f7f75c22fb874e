"""Vercel serverless function for the leaderboard."""

from api._common import create_response, error_response, open_store, preflight_response
from core.errors import PollError
from core.service import get_leaderboard


def respond(request, store):
    return create_response(get_leaderboard(store).to_dict())


def handler(request, store=None):
    """Return ranked totals, category breakdowns and cumulative earnings."""
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
            {"error": f"Internal error: {e}"},
            status=500,
        )
