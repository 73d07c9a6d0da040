"""Command system for the voice developer assistant.

This module implements:
- Intent classification from transcripts
- Whitelisted command resolution
- Confirmation gate and pending actions
- Per-session memory for follow-up commands
"""

from .confirmation import ConfirmationGate, GateState
from .intent_parser import IntentParser
from .intents import CommandPlan, Intent, IntentResult, create_plan
from .pending_actions import PendingAction, PendingActionManager
from .session_memory import SessionMemory, SessionStore
from .whitelist import CommandTemplate, RefusalReason, ResolutionRefusal, resolve

__all__ = [
    "CommandPlan",
    "CommandTemplate",
    "ConfirmationGate",
    "GateState",
    "Intent",
    "IntentParser",
    "IntentResult",
    "PendingAction",
    "PendingActionManager",
    "RefusalReason",
    "ResolutionRefusal",
    "SessionMemory",
    "SessionStore",
    "create_plan",
    "resolve",
]
