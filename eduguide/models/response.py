"""Advisor response data models.

Pure data structures returned by the engine and the chat wrapper.
"""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Literal

from .college import CollegeEntry
from .profile import UserProfile

ChatMode = Literal["demo", "dashboard"]


@dataclass
class AIResponse:
    """Deterministic engine output.

    ``colleges`` and ``follow_up_questions`` stay ``None`` for branches that
    never attach them. ``profile_updates`` may be an empty patch, which is
    serialised as ``{}`` rather than omitted.
    """
    content: str
    colleges: list[CollegeEntry] | None = None
    profile_updates: UserProfile | None = None
    follow_up_questions: list[str] | None = None
    intent: str = "general"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"content": self.content}
        if self.colleges is not None:
            data["colleges"] = [c.to_dict() for c in self.colleges]
        if self.profile_updates is not None:
            data["profileUpdates"] = self.profile_updates.to_dict()
        if self.follow_up_questions is not None:
            data["followUpQuestions"] = list(self.follow_up_questions)
        return data


@dataclass
class ChatTurn:
    """One prior message in the conversation."""
    role: Literal["user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatSource:
    """Citation for a piece of live research."""
    title: str
    url: str
    note: str

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "url": self.url, "note": self.note}


@dataclass
class ResearchNote:
    """Keyword-scored summary of one college's official site."""
    college: CollegeEntry
    summary: str
    source: ChatSource


@dataclass
class ChatRequest:
    """Input to the enrichment wrapper."""
    message: str
    current_profile: UserProfile = dataclass_field(default_factory=UserProfile)
    history: list[ChatTurn] = dataclass_field(default_factory=list)
    mode: ChatMode = "dashboard"
    user_name: str | None = None


@dataclass
class ChatResponse(AIResponse):
    """Engine output enriched with research citations."""
    sources: list[ChatSource] = dataclass_field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["sources"] = [s.to_dict() for s in self.sources]
        return data
