"""Errors raised by the polling core."""


class PollError(Exception):
    """Base class for errors surfaced to the caller."""
    pass


class Unauthorized(PollError):
    """No authenticated principal where one is required."""
    pass


class PollNotFound(PollError):
    """The (match, poll type) pair is not in the registry."""
    pass


class PollClosed(PollError):
    """The poll's closing instant has passed."""
    pass


class InvalidOption(PollError):
    """The chosen option is not one of the poll's options."""
    pass


class UpstreamError(PollError):
    """The storage backend failed; the request is aborted."""
    pass


class ConfigError(PollError):
    """Required settings are missing or malformed."""
    pass
