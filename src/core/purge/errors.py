"""Purge engine errors.

Every failure carries a ``PurgeErrorKind`` so the command layer can
report it without inspecting message text. None of these are retried.
"""

from src.core.purge.enums import PurgeErrorKind


class PurgeError(Exception):
    """Base class for failures that abort a purge invocation."""

    kind: PurgeErrorKind


class DiscordApiError(PurgeError):
    """A Discord REST call failed (network, auth, permission, or 429)."""

    kind = PurgeErrorKind.transport

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SpamChannelError(PurgeError):
    """Saving the bot spam channel failed."""

    kind = PurgeErrorKind.persistence


class StalePlanError(PurgeError):
    """A plan aged past the bulk-delete ceiling before it was executed."""

    kind = PurgeErrorKind.contract_violation
