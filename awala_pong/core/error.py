"""Common exception classes."""

import re

_LINE_BREAK = re.compile(r"\s*\n\s*")


def _one_line(err: BaseException) -> str:
    text = str(err.args[0]).strip() if err.args else err.__class__.__name__
    return _LINE_BREAK.sub(". ", text).rstrip(".")


class BaseError(Exception):
    """Generic exception class which other exceptions should inherit from."""

    @property
    def message(self) -> str:
        """The error message, without surrounding whitespace."""
        return str(self.args[0]).strip() if self.args else ""

    @property
    def roll_up(self) -> str:
        """
        The message followed by those of its causes, on a single line.

        Suitable for log fields and HTTP bodies.
        """
        parts = []
        err = self
        while err is not None:
            parts.append(_one_line(err))
            err = err.__cause__
        return ". ".join(parts) + "."


class StartupError(BaseError):
    """A service cannot start with its current configuration."""
