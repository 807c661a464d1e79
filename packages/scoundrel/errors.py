"""
Error taxonomy for the engine.

Rejections are ordinary values: an illegal action comes back inside an
``ActionResult`` with a ``Rejection`` and the state is left untouched.
Exceptions are reserved for two cases:

- ``ActionRejectedError``: opt-in, raised by ``ActionResult.raise_for_rejection``
- ``InvariantViolation``: corrupted engine state (a logic defect, not a
  player mistake). It subclasses ``AssertionError`` so it can never be
  mistaken for a recoverable rejection.
"""

from dataclasses import dataclass
from enum import Enum


class RejectionReason(Enum):
    """Why an action was refused."""
    INVALID_ACTION = "invalid_action"    # Not legal in the current phase
    OUT_OF_RANGE = "out_of_range"        # Slot outside 1..4 or empty
    WEAPON_UNUSABLE = "weapon_unusable"  # Ceiling too low, or no weapon


@dataclass(frozen=True)
class Rejection:
    """A refused action and the message to show the player."""
    reason: RejectionReason
    message: str

    def __str__(self) -> str:
        return f"{self.reason.value}: {self.message}"


class ScoundrelError(Exception):
    """Base class for exceptions raised by the engine."""


class ActionRejectedError(ScoundrelError):
    """Raised on request when an action was rejected."""

    def __init__(self, rejection: Rejection):
        super().__init__(str(rejection))
        self.rejection = rejection

    @property
    def reason(self) -> RejectionReason:
        return self.rejection.reason


class InvariantViolation(AssertionError):
    """Engine state broke one of its invariants."""
