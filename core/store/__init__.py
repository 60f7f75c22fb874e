"""Storage backends for the vote ledger, poll tables and settlements."""

from .base import PollStore

__all__ = ["PollStore"]
