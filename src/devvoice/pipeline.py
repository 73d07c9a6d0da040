"""One voice turn: plan, resolve, confirm, execute, summarize, remember.

The pipeline is transport-agnostic. The CLI drives it with recorded audio and
the HTTP API drives it with request bodies; both supply the utterance text and
the session's memory and get a TurnOutcome back.

Mutating intents take two calls: ``handle`` returns NEEDS_CONFIRMATION with a
fresh gate, and ``confirm`` settles that gate with the follow-up utterance. A
confirmed plan is resolved again before it runs, so no command template is
ever held across the confirmation prompt.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import duckdb

from devvoice.commands.confirmation import ConfirmationGate, GateState
from devvoice.commands.intents import SESSION_INTENTS, CommandPlan, Intent, create_plan
from devvoice.commands.session_memory import (
    NOTHING_TO_REPEAT_MESSAGE,
    SessionMemory,
    explain_failure,
    get_details,
    update_memory,
)
from devvoice.commands.whitelist import (
    CommandTemplate,
    ResolutionRefusal,
    StagedProbe,
    resolve,
)
from devvoice.db.action_logs import write_action_log
from devvoice.executor import ExecutionResult, execute_command
from devvoice.logging_utils import log_info, log_warning, new_turn_id
from devvoice.metrics import MetricsCollector
from devvoice.planner import DEFAULT_CLARIFYING_QUESTION, KeywordPlanner, Planner, PlannerResult
from devvoice.summarizer import summarize

logger = logging.getLogger(__name__)

GOODBYE_MESSAGE = "Goodbye!"
CANCELLED_MESSAGE = "Action cancelled."
UNKNOWN_MESSAGE = 'I didn\'t understand that. Try saying "help" for available commands.'
HELP_MESSAGE = (
    "Available commands: run tests, git status, run lint, run build, create branch, "
    "commit, explain failure, details, repeat, help, exit."
)
CONFIRMATION_PROMPT = "This action requires confirmation: {description}. Say confirm to proceed."

# Details can be long; only the start is spoken
SPOKEN_DETAILS_LIMIT = 200

Executor = Callable[[CommandTemplate, float | None], ExecutionResult]


class TurnStatus(str, Enum):
    """How a turn ended."""

    OK = "ok"
    EXECUTED = "executed"
    NEEDS_CONFIRMATION = "needs_confirmation"
    CANCELLED = "cancelled"
    REFUSED = "refused"
    CLARIFY = "clarify"
    UNKNOWN = "unknown"
    EXIT = "exit"


@dataclass
class TurnOutcome:
    """Everything a surface needs to report one turn."""

    status: TurnStatus
    intent: Intent
    message: str
    spoken_text: str = ""
    plan: CommandPlan | None = None
    plan_steps: list[str] = field(default_factory=list)
    explanation: str | None = None
    command: str | None = None
    result: ExecutionResult | None = None
    refusal: ResolutionRefusal | None = None
    gate: ConfirmationGate | None = None

    def __post_init__(self) -> None:
        if not self.spoken_text:
            self.spoken_text = self.message

    @property
    def should_exit(self) -> bool:
        return self.status == TurnStatus.EXIT

    @property
    def needs_confirmation(self) -> bool:
        return self.status == TurnStatus.NEEDS_CONFIRMATION


def _speakable_details(details: str) -> str:
    if len(details) > SPOKEN_DETAILS_LIMIT:
        details = details[:SPOKEN_DETAILS_LIMIT] + "..."
    return f"Details: {details}"


class VoicePipeline:
    """Runs turns against one repository."""

    def __init__(
        self,
        repo_path: str,
        planner: Planner | None = None,
        executor: Executor | None = None,
        staged_probe: StagedProbe | None = None,
        *,
        command_timeout: float | None = None,
        action_log: duckdb.DuckDBPyConnection | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """Create a pipeline.

        Args:
            repo_path: Repository root every command runs in
            planner: Interprets utterances (defaults to the keyword planner)
            executor: Runs a resolved template (defaults to execute_command)
            staged_probe: Staged-change check used when resolving commits
            command_timeout: Wall-clock ceiling for each command, in seconds
            action_log: DuckDB connection for the executed-command audit log
            metrics: Collector for turn and execution metrics
        """
        self.repo_path = repo_path
        self.planner = planner or KeywordPlanner()
        self.executor = executor or execute_command
        self.staged_probe = staged_probe
        self.command_timeout = command_timeout
        self.action_log = action_log
        self.metrics = metrics

    def handle(
        self,
        utterance: str,
        memory: SessionMemory,
        session_id: str | None = None,
    ) -> TurnOutcome:
        """Run one turn for an utterance.

        Low-confidence plans are answered with a clarifying question, even
        for session-only intents. Session-only intents are answered from
        memory and never touch it.
        Mutating intents stop at NEEDS_CONFIRMATION; pass the outcome to
        ``confirm`` with the follow-up utterance.
        """
        new_turn_id()
        result = self.planner.plan(utterance, memory)
        plan = create_plan(result.to_intent_result())
        log_info(
            logger,
            "Planned turn",
            intent=plan.intent.value,
            confidence=f"{result.confidence:.2f}",
            source=result.source,
        )

        # UNKNOWN carries its own reply, with or without a question
        if result.needs_clarification and plan.intent != Intent.UNKNOWN:
            return self._finish(self._clarify(plan, result))

        if plan.intent in SESSION_INTENTS:
            return self._finish(self._answer_from_session(plan, result, memory))

        resolution = resolve(
            plan.intent, plan.parameters, self.repo_path, staged_probe=self.staged_probe
        )
        if isinstance(resolution, ResolutionRefusal):
            return self._finish(self._refuse(plan, resolution, result.plan_steps))

        if plan.requires_confirmation:
            return self._finish(
                TurnOutcome(
                    status=TurnStatus.NEEDS_CONFIRMATION,
                    intent=plan.intent,
                    message=CONFIRMATION_PROMPT.format(description=plan.description),
                    plan=plan,
                    plan_steps=result.plan_steps,
                    command=resolution.display(),
                    gate=ConfirmationGate(),
                )
            )

        return self._finish(
            self._execute(plan, resolution, memory, session_id, plan_steps=result.plan_steps)
        )

    def confirm(
        self,
        pending: TurnOutcome | CommandPlan,
        follow_up: str,
        memory: SessionMemory,
        session_id: str | None = None,
    ) -> TurnOutcome:
        """Settle a pending mutating plan with the follow-up utterance.

        Args:
            pending: A NEEDS_CONFIRMATION outcome, or a bare plan (a new gate is used)
            follow_up: The utterance captured after the confirmation prompt
            memory: The session's memory
            session_id: Session id for the action log

        Raises:
            GateAlreadySettledError: If the outcome's gate was already evaluated
            ValueError: If there is no plan to confirm
        """
        if isinstance(pending, CommandPlan):
            plan, gate, steps = pending, ConfirmationGate(), []
        else:
            if pending.plan is None:
                raise ValueError("Outcome has no plan awaiting confirmation")
            plan, gate, steps = pending.plan, pending.gate or ConfirmationGate(), pending.plan_steps

        state = gate.evaluate(follow_up)
        if self.metrics is not None:
            self.metrics.record_confirmation(state.value)

        if state == GateState.CANCELLED:
            log_info(logger, "Action cancelled", intent=plan.intent.value)
            return self._finish(
                TurnOutcome(
                    status=TurnStatus.CANCELLED,
                    intent=plan.intent,
                    message=CANCELLED_MESSAGE,
                    plan=plan,
                    plan_steps=steps,
                )
            )

        # Fresh template: the repository may have changed since the prompt
        resolution = resolve(
            plan.intent, plan.parameters, self.repo_path, staged_probe=self.staged_probe
        )
        if isinstance(resolution, ResolutionRefusal):
            return self._finish(self._refuse(plan, resolution, steps))

        return self._finish(self._execute(plan, resolution, memory, session_id, plan_steps=steps))

    def _answer_from_session(
        self, plan: CommandPlan, result: PlannerResult, memory: SessionMemory
    ) -> TurnOutcome:
        intent = plan.intent
        common = {"intent": intent, "plan": plan, "plan_steps": result.plan_steps}

        if intent == Intent.EXIT:
            return TurnOutcome(status=TurnStatus.EXIT, message=GOODBYE_MESSAGE, **common)
        if intent == Intent.HELP:
            return TurnOutcome(status=TurnStatus.OK, message=HELP_MESSAGE, **common)
        if intent == Intent.REPEAT_LAST:
            return TurnOutcome(
                status=TurnStatus.OK,
                message=memory.last_summary or NOTHING_TO_REPEAT_MESSAGE,
                **common,
            )
        if intent == Intent.DETAILS:
            details = get_details(memory)
            return TurnOutcome(
                status=TurnStatus.OK,
                message=details,
                spoken_text=_speakable_details(details),
                **common,
            )
        if intent == Intent.EXPLAIN_FAILURE:
            return TurnOutcome(
                status=TurnStatus.OK,
                message=explain_failure(memory),
                explanation=result.explanation,
                **common,
            )
        if result.clarifying_question:
            return TurnOutcome(
                status=TurnStatus.CLARIFY, message=result.clarifying_question, **common
            )
        return TurnOutcome(status=TurnStatus.UNKNOWN, message=UNKNOWN_MESSAGE, **common)

    def _clarify(self, plan: CommandPlan, result: PlannerResult) -> TurnOutcome:
        log_info(logger, "Low confidence, asking to clarify", confidence=result.confidence)
        return TurnOutcome(
            status=TurnStatus.CLARIFY,
            intent=plan.intent,
            message=result.clarifying_question or DEFAULT_CLARIFYING_QUESTION,
            plan=plan,
            plan_steps=result.plan_steps,
        )

    def _refuse(
        self, plan: CommandPlan, refusal: ResolutionRefusal, plan_steps: list[str]
    ) -> TurnOutcome:
        log_info(logger, "Command refused", intent=plan.intent.value, reason=refusal.reason.value)
        return TurnOutcome(
            status=TurnStatus.REFUSED,
            intent=plan.intent,
            message=refusal.message,
            plan=plan,
            plan_steps=plan_steps,
            refusal=refusal,
        )

    def _execute(
        self,
        plan: CommandPlan,
        template: CommandTemplate,
        memory: SessionMemory,
        session_id: str | None,
        plan_steps: list[str],
    ) -> TurnOutcome:
        result = self.executor(template, self.command_timeout)
        summary = summarize(plan.intent, result)
        update_memory(memory, plan.intent, result, summary)

        log_info(
            logger,
            "Command executed",
            intent=plan.intent.value,
            command=template.display(),
            exit_code=result.exit_code,
        )
        self._record_execution(plan, template, result, session_id)

        return TurnOutcome(
            status=TurnStatus.EXECUTED,
            intent=plan.intent,
            message=summary,
            plan=plan,
            plan_steps=plan_steps,
            command=template.display(),
            result=result,
        )

    def _record_execution(
        self,
        plan: CommandPlan,
        template: CommandTemplate,
        result: ExecutionResult,
        session_id: str | None,
    ) -> None:
        if self.metrics is not None:
            self.metrics.record_execution(result.duration_seconds, result.success)

        if self.action_log is None:
            return
        try:
            write_action_log(
                self.action_log,
                session_id=session_id,
                intent=plan.intent.value,
                command=template.display(),
                exit_code=result.exit_code,
                ok=result.success,
                duration_ms=result.duration_seconds * 1000.0,
            )
        except duckdb.Error as e:
            log_warning(logger, "Failed to write action log", error=e)

    def _finish(self, outcome: TurnOutcome) -> TurnOutcome:
        if self.metrics is not None:
            self.metrics.record_turn(outcome.intent.value, outcome.status.value)
        return outcome
