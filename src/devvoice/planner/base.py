"""Planner interface and result model."""

from typing import Protocol

from pydantic import BaseModel, Field

from devvoice.commands.intents import Intent, IntentResult
from devvoice.commands.session_memory import SessionMemory

# Results below this confidence are answered with a clarifying question
CLARIFY_THRESHOLD = 0.6

DEFAULT_CLARIFYING_QUESTION = "I'm not sure what you meant. Could you rephrase that?"


class PlannerResult(BaseModel):
    """A planner's reading of one utterance.

    The intent is always a member of the closed Intent set. A planner never
    produces command strings; resolution to a command happens afterwards.
    """

    intent: Intent
    parameters: dict[str, str] = Field(default_factory=dict)
    plan_steps: list[str] = Field(default_factory=list)
    explanation: str | None = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    clarifying_question: str | None = None
    source: str = "keyword"

    @property
    def needs_clarification(self) -> bool:
        return self.confidence < CLARIFY_THRESHOLD

    def to_intent_result(self) -> IntentResult:
        return IntentResult(
            intent=self.intent,
            confidence=self.confidence,
            parameters=dict(self.parameters),
        )


class Planner(Protocol):
    """Protocol for planners."""

    def plan(self, utterance: str, memory: SessionMemory) -> PlannerResult:
        """Interpret an utterance in the context of the session.

        Args:
            utterance: Transcribed user text
            memory: Current session memory (last action, last failure)

        Returns:
            PlannerResult with an intent from the closed set

        Raises:
            PlannerError: If the planner could not produce a valid result
        """
        ...
