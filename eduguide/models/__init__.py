"""Data models - Pure data structures with no business logic."""

from .college import CollegeEntry, SchoolType, ScoredCandidate
from .profile import UserProfile, unique_strings
from .response import (
    AIResponse,
    ChatRequest,
    ChatResponse,
    ChatSource,
    ChatTurn,
    ResearchNote,
)

__all__ = [
    "CollegeEntry",
    "SchoolType",
    "ScoredCandidate",
    "UserProfile",
    "unique_strings",
    "AIResponse",
    "ChatRequest",
    "ChatResponse",
    "ChatSource",
    "ChatTurn",
    "ResearchNote",
]
