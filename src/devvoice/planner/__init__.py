"""Planner overlay: turns an utterance into a planned intent.

The keyword planner is always available. The OpenAI planner is used when an
API key is configured and the agent is not disabled; it is wrapped so that any
failure falls back to keyword matching.
"""

import logging

from devvoice.config import AppConfig
from devvoice.planner.base import (
    CLARIFY_THRESHOLD,
    DEFAULT_CLARIFYING_QUESTION,
    Planner,
    PlannerResult,
)
from devvoice.planner.fallback import FallbackPlanner
from devvoice.planner.keyword import KeywordPlanner

logger = logging.getLogger(__name__)

__all__ = [
    "CLARIFY_THRESHOLD",
    "DEFAULT_CLARIFYING_QUESTION",
    "FallbackPlanner",
    "KeywordPlanner",
    "Planner",
    "PlannerResult",
    "get_planner",
]


def get_planner(config: AppConfig | None = None) -> Planner:
    """Get the configured planner.

    Returns:
    - KeywordPlanner if the agent is disabled or DEVVOICE_PLANNER=keyword
    - FallbackPlanner(OpenAIPlanner) if DEVVOICE_PLANNER=openai, or when the
      planner is unset and OPENAI_API_KEY is configured
    - KeywordPlanner when the OpenAI planner cannot be initialized

    Args:
        config: Application config (defaults to AppConfig.from_env())
    """
    config = config or AppConfig.from_env()

    if config.no_agent:
        return KeywordPlanner()

    planner_type = config.planner
    if planner_type is None:
        planner_type = "openai" if config.openai_api_key else "keyword"

    if planner_type == "keyword":
        return KeywordPlanner()

    try:
        from devvoice.planner.openai_planner import OpenAIPlanner

        return FallbackPlanner(OpenAIPlanner(api_key=config.openai_api_key))
    except ImportError:
        logger.error(
            "OpenAI planner requested but openai package not installed. "
            "Install with: pip install 'devvoice[openai]'"
        )
    except Exception as e:
        logger.error("Failed to initialize OpenAI planner: %s", e)

    logger.warning("Falling back to keyword planner")
    return KeywordPlanner()
