"""Confirmation gate for mutating commands."""

from enum import Enum

from devvoice.errors import GateAlreadySettledError

AFFIRMATIVE_WORDS = ("confirm", "proceed", "yes")


class GateState(str, Enum):
    """Confirmation gate states."""

    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


def is_affirmative(text: str) -> bool:
    """Check whether a follow-up utterance confirms the pending action."""
    normalized = text.lower()
    return any(word in normalized for word in AFFIRMATIVE_WORDS)


class ConfirmationGate:
    """Two-state gate for one mutating turn.

    A gate starts awaiting confirmation and settles exactly once. Create a new
    gate for every mutating intent; a settled gate is discarded.
    """

    def __init__(self) -> None:
        self.state = GateState.AWAITING_CONFIRMATION

    @property
    def settled(self) -> bool:
        return self.state != GateState.AWAITING_CONFIRMATION

    @property
    def confirmed(self) -> bool:
        return self.state == GateState.CONFIRMED

    def evaluate(self, follow_up: str) -> GateState:
        """Settle the gate from the follow-up utterance.

        Args:
            follow_up: The transcript captured after the confirmation prompt

        Returns:
            CONFIRMED if it contains confirm/proceed/yes, CANCELLED otherwise

        Raises:
            GateAlreadySettledError: If the gate was already evaluated
        """
        if self.settled:
            raise GateAlreadySettledError(f"Confirmation gate already {self.state.value}")
        self.state = GateState.CONFIRMED if is_affirmative(follow_up) else GateState.CANCELLED
        return self.state
