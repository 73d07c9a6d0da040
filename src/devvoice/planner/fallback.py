"""Planner that falls back to keyword matching when the primary planner fails."""

import logging

from devvoice.commands.session_memory import SessionMemory
from devvoice.errors import DevVoiceError
from devvoice.planner.base import Planner, PlannerResult
from devvoice.planner.keyword import KeywordPlanner

logger = logging.getLogger(__name__)


class FallbackPlanner:
    """Try the primary planner first; use the keyword planner on any failure."""

    def __init__(self, primary: Planner, fallback: KeywordPlanner | None = None):
        self.primary = primary
        self.fallback = fallback or KeywordPlanner()

    def plan(self, utterance: str, memory: SessionMemory) -> PlannerResult:
        try:
            return self.primary.plan(utterance, memory)
        except DevVoiceError as e:
            logger.warning("Planner error, falling back to keyword matching: %s", e)
            return self.fallback.plan(utterance, memory)
