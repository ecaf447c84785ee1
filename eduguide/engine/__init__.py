"""Deterministic advisor engine - extraction, intent, scoring and replies."""

from .advisor import AdvisorEngine, process_message
from .composer import ResponseComposer, TurnContext, refusal_response
from .extractor import extract_profile_updates
from .intent import OUT_OF_SCOPE, Intent, classify_intent, is_out_of_scope
from .scorer import rank_colleges, recommend, score_college

__all__ = [
    "AdvisorEngine",
    "process_message",
    "ResponseComposer",
    "TurnContext",
    "refusal_response",
    "extract_profile_updates",
    "OUT_OF_SCOPE",
    "Intent",
    "classify_intent",
    "is_out_of_scope",
    "rank_colleges",
    "recommend",
    "score_college",
]
