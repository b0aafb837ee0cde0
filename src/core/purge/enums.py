"""Purge engine enums."""

from enum import StrEnum, auto


class Environment(StrEnum):
    """Deployment environment. Staging forces every purge into dry-run."""

    production = auto()
    staging = auto()


class ConfirmationDecision(StrEnum):
    """Outcome of the interactive confirmation step.

    ``timed_out`` leaves the prompt's buttons enabled; a click that
    arrives afterwards is acknowledged as a no-op and changes nothing.
    """

    confirmed = auto()
    declined = auto()
    timed_out = auto()


class ConfirmationChoice(StrEnum):
    """Button a requester can press on the confirmation prompt."""

    proceed = auto()
    cancel = auto()


class PurgeOutcome(StrEnum):
    """How a purge_old invocation ended when it did not raise."""

    nothing_to_do = auto()
    declined = auto()
    timed_out = auto()
    completed = auto()


class PurgeErrorKind(StrEnum):
    """Failure families callers can branch on without reading messages."""

    transport = auto()
    persistence = auto()
    contract_violation = auto()
