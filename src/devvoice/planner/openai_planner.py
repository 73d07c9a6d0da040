"""OpenAI planner implementation.

This planner asks an OpenAI chat model to pick one intent from the closed
set and extract its parameters. It requires the openai package to be
installed and an API key to be configured.
"""

import json
import logging
import os
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from devvoice.commands.intents import Intent
from devvoice.commands.session_memory import SessionMemory
from devvoice.errors import MissingCredentialError, PlannerError
from devvoice.planner.base import PlannerResult

logger = logging.getLogger(__name__)

# Try to import openai - if not available, class instantiation will fail with helpful error
try:
    import openai

    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False
    openai = None  # type: ignore

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_CONFIDENCE = 0.5

INTENT_DESCRIPTIONS = {
    Intent.RUN_TESTS: "Run test suite",
    Intent.GIT_STATUS: "Check git status",
    Intent.RUN_LINT: "Run linter",
    Intent.RUN_BUILD: "Build project",
    Intent.CREATE_BRANCH: "Create new git branch (requires parameters.name)",
    Intent.MAKE_COMMIT: "Create git commit (requires parameters.message)",
    Intent.EXPLAIN_FAILURE: "Explain why last command failed",
    Intent.DETAILS: "Show more details about last output",
    Intent.REPEAT_LAST: "Repeat last summary",
    Intent.HELP: "Show help",
    Intent.EXIT: "Exit the application",
}


class _ModelReply(BaseModel):
    """Shape of the JSON object the model is asked to return."""

    intent: str = Intent.UNKNOWN.value
    parameters: dict[str, Any] = Field(default_factory=dict)
    plan_steps: list[Any] = Field(default_factory=list)
    explanation: str | None = None
    confidence: float | None = None
    clarifying_question: str | None = None


def build_system_prompt(memory: SessionMemory) -> str:
    """System prompt listing the allowed intents and the session context."""
    intent_lines = "\n".join(
        f"- {intent.value}: {description}" for intent, description in INTENT_DESCRIPTIONS.items()
    )
    prompt = (
        "You are a helpful developer assistant that understands voice commands "
        "for git and development tasks.\n\n"
        "CRITICAL RULES:\n"
        f"1. You can ONLY choose from these intents: {', '.join(i.value for i in INTENT_DESCRIPTIONS)}\n"
        "2. NEVER output raw shell commands or command strings\n"
        "3. Extract parameters like branch names and commit messages from user text\n"
        "4. Return JSON with: intent, parameters (object), plan_steps (array of strings), "
        "explanation (optional), confidence (0-1)\n"
        "5. If confidence < 0.6, include a clarifying_question instead of executing\n\n"
        f"Available intents:\n{intent_lines}\n"
    )

    context = memory.context()
    if context["last_failure"]:
        prompt += f"\nLast failure context: {json.dumps(context['last_failure'], indent=2)}"
    if context["last_action"]:
        prompt += f"\nLast action: {context['last_action']}"
    return prompt


def build_user_prompt(utterance: str) -> str:
    return (
        f'User said: "{utterance}"\n\n'
        "Analyze this request and return a JSON object with:\n"
        "- intent: one of the available intents\n"
        '- parameters: object with extracted parameters (e.g., {"name": "branch-name"} '
        'for CREATE_BRANCH, {"message": "commit message"} for MAKE_COMMIT)\n'
        "- plan_steps: array of human-readable steps that will be executed\n"
        "- explanation: optional explanation (especially for EXPLAIN_FAILURE intent)\n"
        "- confidence: number between 0 and 1\n"
        "- clarifying_question: optional question if confidence < 0.6\n\n"
        "Return ONLY valid JSON, no markdown, no code blocks."
    )


def parse_model_reply(content: str | None) -> PlannerResult:
    """Validate the model's JSON reply and map it onto a PlannerResult.

    Unknown intents become UNKNOWN, confidence is clamped to [0, 1] and
    parameter values are converted to strings.

    Raises:
        PlannerError: If the reply is not a valid JSON object
    """
    if not content:
        raise PlannerError("Empty response from planner model")

    try:
        reply = _ModelReply.model_validate_json(content)
    except ValidationError as e:
        raise PlannerError(f"Failed to parse planner response: {content[:200]}") from e

    intent = Intent.coerce(reply.intent)
    if intent == Intent.UNKNOWN and reply.intent.strip().upper() != Intent.UNKNOWN.value:
        logger.warning("Invalid intent from planner model: %s, defaulting to UNKNOWN", reply.intent)

    confidence = DEFAULT_CONFIDENCE if reply.confidence is None else reply.confidence
    confidence = max(0.0, min(1.0, confidence))

    return PlannerResult(
        intent=intent,
        parameters={
            str(key): str(value) for key, value in reply.parameters.items() if value is not None
        },
        plan_steps=[str(step) for step in reply.plan_steps],
        explanation=reply.explanation,
        confidence=confidence,
        clarifying_question=reply.clarifying_question,
        source="openai",
    )


class OpenAIPlanner:
    """Planner backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = 30.0,
        client: Any = None,
    ):
        """Initialize OpenAI planner.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            model: Chat model (defaults to DEVVOICE_PLANNER_MODEL env var or gpt-4o-mini)
            timeout: Request timeout in seconds (default: 30)
            client: Pre-built client, used instead of constructing one

        Raises:
            MissingCredentialError: If OpenAI API key is not configured
            ImportError: If openai package is not installed
        """
        self.model = model or os.environ.get("DEVVOICE_PLANNER_MODEL", DEFAULT_MODEL)
        self.timeout = timeout

        if client is not None:
            self.client = client
            return

        if not OPENAI_AVAILABLE or openai is None:
            raise ImportError(
                "OpenAI package not installed. Install with: pip install 'devvoice[openai]'"
            )

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise MissingCredentialError("OPENAI_API_KEY is required for the OpenAI planner")

        self.client = openai.OpenAI(api_key=api_key, timeout=self.timeout)
        logger.info("Initialized OpenAI planner: model=%s, timeout=%s", self.model, self.timeout)

    def plan(self, utterance: str, memory: SessionMemory) -> PlannerResult:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": build_system_prompt(memory)},
                    {"role": "user", "content": build_user_prompt(utterance)},
                ],
                temperature=0.3,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise PlannerError(f"OpenAI planner request failed: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise PlannerError("Malformed response from planner model") from e

        result = parse_model_reply(content)
        logger.info(
            "OpenAI plan: intent=%s, confidence=%.2f", result.intent.value, result.confidence
        )
        return result
