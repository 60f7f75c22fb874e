"""Shared helpers for the serverless handlers."""

import json
import logging
import sys
from pathlib import Path

# Add the project root to the path so we can import core modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import Settings
from core.errors import (
    ConfigError,
    InvalidOption,
    PollClosed,
    PollError,
    PollNotFound,
    Unauthorized,
    UpstreamError,
)
from core.models import Identity
from core.store.supabase import SupabaseStore

logger = logging.getLogger("api")

ERROR_STATUS: dict[type[PollError], int] = {
    Unauthorized: 401,
    PollNotFound: 404,
    PollClosed: 409,
    InvalidOption: 400,
    UpstreamError: 502,
    ConfigError: 500,
}

_logging_configured = False


def configure_logging(settings: Settings | None = None) -> None:
    global _logging_configured
    if _logging_configured:
        return
    level = settings.log_level if settings else "INFO"
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    _logging_configured = True


def open_store() -> SupabaseStore:
    """Build the Supabase-backed store from environment settings."""
    settings = Settings.from_env()
    configure_logging(settings)
    return SupabaseStore(settings)


def identity_from_request(request) -> Identity | None:
    """Read the principal forwarded by the identity proxy, if any."""
    email = request.headers.get("x-user-email", "").strip()
    if not email:
        return None
    name = request.headers.get("x-user-name", "").strip() or None
    return Identity(email=email, name=name)


def read_json(request) -> dict:
    """Decode a JSON object body; json.JSONDecodeError propagates."""
    try:
        body = request.body.decode("utf-8") if request.body else "{}"
    except UnicodeDecodeError as e:
        raise InvalidOption(f"Request body must be UTF-8: {e.reason}") from e
    data = json.loads(body)
    if not isinstance(data, dict):
        raise InvalidOption("Request body must be a JSON object")
    return data


def error_response(error: PollError):
    status = ERROR_STATUS.get(type(error), 500)
    if status >= 500:
        logger.error("Request failed: %s", error)
    return create_response({"error": str(error)}, status=status)


def preflight_response(methods: str):
    return create_response(
        "",
        status=204,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": methods,
            "Access-Control-Allow-Headers": "Content-Type, X-User-Email, X-User-Name",
        },
    )


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, (dict, list)):
        body = json.dumps(body)

    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
