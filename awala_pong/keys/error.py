"""Private key store exceptions."""

from ..core.error import BaseError


class KeyStoreError(BaseError):
    """The private key store failed to process a request."""


class UnknownKeyError(KeyStoreError):
    """The requested key does not exist or is bound to someone else."""
