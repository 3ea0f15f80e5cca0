"""Ping queue exceptions."""

from ..core.error import BaseError


class QueueError(BaseError):
    """The queue backend failed."""


class InvalidJobError(QueueError):
    """A job can never be processed and must be dropped."""
