"""Services - enrichment around the deterministic engine.

Each service is independent and can be swapped for testing.
"""

from .chat_service import ChatService
from .llm_service import (
    BaseLLMService,
    GeminiService,
    LLMService,
    LLMServiceError,
    OpenAIService,
)
from .outcome import Unavailable, available
from .research_service import ResearchService, ResearchServiceError

__all__ = [
    "ChatService",
    "BaseLLMService",
    "GeminiService",
    "LLMService",
    "LLMServiceError",
    "OpenAIService",
    "Unavailable",
    "available",
    "ResearchService",
    "ResearchServiceError",
]
