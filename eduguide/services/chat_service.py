"""Chat Service - Enriches engine replies with live research and LLM prose.

This module handles:
- Running the deterministic advisor engine for every turn
- Researching mentioned or recommended colleges on their official sites
- Rewriting the reply with an LLM when one is configured
- Falling back to a template reply when it is not

Interface Contract:
- generate(request) -> ChatResponse
- Never raises for research or LLM failures; colleges and profile updates
  always come from the engine
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace

from config import MAX_HISTORY_TURNS
from eduguide.engine import OUT_OF_SCOPE, AdvisorEngine
from eduguide.models import (
    AIResponse,
    ChatRequest,
    ChatResponse,
    CollegeEntry,
    ResearchNote,
    UserProfile,
    unique_strings,
)

from .llm_service import LLMServiceError
from .outcome import Outcome, Unavailable, available
from .research_service import detect_assignment_support_intent, pick_research_colleges

logger = logging.getLogger(__name__)

DEFAULT_FOLLOW_UPS = [
    "Want me to narrow these down by cost, acceptance rate, or something else?",
    "Should I pull up transfer pathways or financial aid details for any of these?",
]

BUDGET_PHRASES = {
    "low": "on a tight budget",
    "medium": "mid-range budget",
    "high": "budget not an issue",
}

PERSONA_INSTRUCTIONS = [
    "You are EduGuide's expert college advisor and academic support assistant. You're the smartest, most "
    "connected friend a college student could have: someone who went through the system and knows the "
    "shortcuts, the tricks, and the traps.",
    "TONE: Warm, direct, and curious about this student's specific situation. Sound like a real person, not "
    "a corporate assistant. Use contractions. Be informal where it fits ('weed-out course', 'reach school', "
    "'waitlisted'). Skip hollow openers like 'Great question!' or 'Certainly!'. Just answer.",
    "DEPTH: Every response should feel tailored. Reference the student's actual GPA, state, major, and budget "
    "when you have them. Explain WHY a school fits or doesn't fit THIS student.",
    "ENGAGEMENT: Always end with 1-2 sharp follow-up questions that move the student toward a real decision. "
    "Make them specific, not 'Do you have any other questions?'.",
    "RESEARCH: When fresh official-site data is provided, weave it in naturally ('their admissions page says...'). "
    "Never invent facts, stats, or deadlines you don't have. If you don't have live data, say so and offer what "
    "you do know.",
    "FORMAT: Keep it tight and scannable. 2-4 short paragraphs or crisp bullet points. No walls of text.",
]

ASSIGNMENT_INSTRUCTIONS = """ASSIGNMENT MODE: The student needs help with coursework right now. This is a core free feature for signed-in students. Be their sharp study partner:
  - First make sure you understand exactly what the assignment is asking. If unclear, ask one clarifying question.
  - Break the prompt into what the instructor actually wants to see.
  - Explain any concepts or terms the student needs to do this well.
  - Suggest a clear structure or approach: a roadmap they can own, not a finished essay.
  - Offer to review their draft, check their thesis, explain a concept in more depth, or practice questions with them.
  - Be substantive. A student stuck on Organic Chemistry at midnight needs real help, not platitudes."""

COURSEWORK_MENTION = (
    "If coursework comes up in passing, mention that you can help with assignments too: prompt breakdowns, "
    "concept explanations, outlines, study plans, and draft review, all free for signed-in students."
)

MODE_INSTRUCTIONS = {
    "demo": (
        "DEMO MODE: The student is not signed in yet. Give them real value immediately so they see the product "
        "is worth it, and naturally mention that signing up unlocks saved preferences, deeper school tracking, "
        "and free assignment help for every class they're in."
    ),
    "dashboard": (
        "DASHBOARD MODE: The student is signed in. You already know pieces of their profile. Pick up where you "
        "left off. Be their go-to person, not a service bot."
    ),
}


def normalize_profile_updates(current: UserProfile, patch: UserProfile | None) -> UserProfile | None:
    """Carry the known demographics, preferred states and interests into the patch.

    The web client stores patch values as-is, so these lists must hold the
    full de-duplicated union rather than only this turn's finds.
    """
    if patch is None:
        return None
    return replace(
        patch,
        demographics=unique_strings([*(current.demographics or []), *(patch.demographics or [])]) or None,
        preferred_states=unique_strings([*(current.preferred_states or []), *(patch.preferred_states or [])]) or None,
        interests=unique_strings([*(current.interests or []), *(patch.interests or [])]) or None,
    )


def summarize_college_fit(colleges: list[CollegeEntry] | None) -> str:
    if not colleges:
        return "No college matches were generated yet."
    return "\n".join(
        f"{c.name} ({c.location}) | {c.type} | {c.tuition} | majors: {', '.join(c.majors[:3])}"
        for c in colleges[:4]
    )


def build_prompt(
    request: ChatRequest,
    draft: AIResponse,
    merged_profile: UserProfile,
    research: list[ResearchNote],
) -> str:
    """Assemble the generation prompt for one turn."""
    history = "\n".join(
        f"{'Assistant' if turn.role == 'assistant' else 'User'}: {turn.content}"
        for turn in request.history[-MAX_HISTORY_TURNS:]
    )
    if research:
        research_block = "\n".join(
            f"- {note.college.name}: {note.summary} (source: {note.source.url})" for note in research
        )
    else:
        research_block = "No fresh official-site research was available for this turn."

    return "\n\n".join([
        f"Mode: {request.mode or 'dashboard'}",
        f"User name: {request.user_name or 'Student'}",
        f"Current merged profile: {json.dumps(merged_profile.to_dict())}",
        f"Recent conversation:\n{history or 'No prior conversation.'}",
        f"User message: {request.message}",
        f"Local recommendation engine draft:\n{draft.content}",
        f"Recommended colleges:\n{summarize_college_fit(draft.colleges)}",
        f"Fresh official-school research:\n{research_block}",
    ])


def build_system_instructions(mode: str | None, assignment_support: bool) -> str:
    """Persona instructions with the assignment and mode paragraphs appended."""
    parts = list(PERSONA_INSTRUCTIONS)
    parts.append(ASSIGNMENT_INSTRUCTIONS if assignment_support else COURSEWORK_MENTION)
    parts.append(MODE_INSTRUCTIONS["demo" if mode == "demo" else "dashboard"])
    return "\n\n".join(parts)


def build_fallback_response(
    request: ChatRequest,
    draft: AIResponse,
    merged_profile: UserProfile,
    research: list[ResearchNote],
) -> str:
    """Template reply used when no LLM text is available. Never empty."""
    name = request.user_name
    blocks: list[str] = []

    if detect_assignment_support_intent(request.message):
        blocks.append(
            f"{name + ', ' if name else ''}let's work through this together. Paste the assignment prompt and tell "
            "me what class it's for. I'll break it down, explain the concepts, and help you map out the best approach."
        )
        if research:
            blocks.append("\n\n".join(f"From {note.college.name}'s site: {note.summary}" for note in research))
    elif draft.colleges:
        bits = [
            f"GPA {merged_profile.gpa:g}" if merged_profile.gpa else None,
            f"in {merged_profile.state}" if merged_profile.state else None,
            f"studying {merged_profile.intended_major}" if merged_profile.intended_major else None,
            BUDGET_PHRASES.get(merged_profile.budget or ""),
        ]
        bits = [bit for bit in bits if bit]
        addressed = f", {name}" if name else ""
        if bits:
            blocks.append(f"Here's what fits your profile{addressed}: {', '.join(bits)}.")
        else:
            blocks.append(f"Here are some strong options to start with{addressed}:")

        blocks.append("\n\n".join(
            f"**{c.name}** ({c.location}): {c.description} Tuition: {c.tuition}. "
            f"Strong in {' and '.join(c.majors[:2])}."
            for c in draft.colleges[:3]
        ))
        if research:
            blocks.append("From the official sites:\n" + "\n".join(
                f"- **{note.college.name}**: {note.summary}" for note in research
            ))
    else:
        blocks.append(draft.content)
        if research:
            blocks.append("\n\n".join(f"From {note.college.name}'s official site: {note.summary}" for note in research))

    follow_ups = draft.follow_up_questions[:2] if draft.follow_up_questions is not None else DEFAULT_FOLLOW_UPS
    blocks.append("\n".join(f"→ {question}" for question in follow_ups))

    return "\n\n".join(block for block in blocks if block)


class ChatService:
    """Service for enriched advisor chat turns."""

    def __init__(self, engine=None, llm_service=None, research_service=None):
        """Initialize with optional dependencies.

        Args:
            engine: Advisor engine. If None, uses the bundled catalog.
            llm_service: LLM service for prose. If None, uses default.
            research_service: Official-site researcher. If None, creates default.
        """
        self._engine = engine
        self._llm = llm_service
        self._research = research_service

    @property
    def engine(self) -> AdvisorEngine:
        """Lazy load advisor engine."""
        if self._engine is None:
            self._engine = AdvisorEngine()
        return self._engine

    @property
    def llm(self):
        """Lazy load LLM service."""
        if self._llm is None:
            from eduguide.services.llm_service import LLMService
            self._llm = LLMService.get_instance()
        return self._llm

    @property
    def research(self):
        """Lazy load research service."""
        if self._research is None:
            from eduguide.services.research_service import ResearchService
            self._research = ResearchService()
        return self._research

    def generate(self, request: ChatRequest) -> ChatResponse:
        """Answer one chat turn.

        Args:
            request: Message, profile so far, history, mode and user name

        Returns:
            ChatResponse: Engine colleges and profile updates, generated or
                fallback content, and citations for any research used
        """
        current = request.current_profile
        baseline = self.engine.process_message(request.message, current, request.user_name)

        if baseline.intent == OUT_OF_SCOPE:
            return ChatResponse(
                content=baseline.content,
                profile_updates=baseline.profile_updates,
                follow_up_questions=baseline.follow_up_questions,
                intent=baseline.intent,
            )

        patch = normalize_profile_updates(current, baseline.profile_updates)
        merged = current.merged_with(patch)
        draft = replace(baseline, profile_updates=patch)

        targets = pick_research_colleges(request.message, self.engine.catalog, baseline.colleges)
        research = self.research.gather(targets, request.message, merged)

        content = available(self._generate_content(request, draft, merged, research))
        if not content:
            content = build_fallback_response(request, draft, merged, research)

        return ChatResponse(
            content=content,
            colleges=baseline.colleges,
            profile_updates=patch,
            follow_up_questions=baseline.follow_up_questions,
            intent=baseline.intent,
            sources=[note.source for note in research],
        )

    def _generate_content(
        self,
        request: ChatRequest,
        draft: AIResponse,
        merged: UserProfile,
        research: list[ResearchNote],
    ) -> Outcome[str]:
        instructions = build_system_instructions(request.mode, detect_assignment_support_intent(request.message))
        prompt = build_prompt(request, draft, merged, research)
        try:
            return self.llm.call(prompt, instructions=instructions)
        except LLMServiceError as e:
            logger.warning("[chat] generation unavailable, using fallback: %s", e)
            return Unavailable(str(e))
