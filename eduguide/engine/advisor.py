"""Deterministic advisor entry point.

Wires the scope guard, extractor, intent classifier and composer together.
Nothing here does I/O; the only shared state is the read-only catalog.
"""

from __future__ import annotations

import logging

from eduguide.data import CollegeCatalog
from eduguide.models import AIResponse, UserProfile

from .composer import ResponseComposer, TurnContext, refusal_response
from .extractor import extract_profile_updates
from .intent import classify_intent, is_out_of_scope

logger = logging.getLogger(__name__)


class AdvisorEngine:
    """Turns one student message into an ``AIResponse``."""

    def __init__(self, catalog: CollegeCatalog | None = None):
        self._catalog = catalog

    @property
    def catalog(self) -> CollegeCatalog:
        """Lazy load the bundled catalog unless one was injected."""
        if self._catalog is None:
            self._catalog = CollegeCatalog.default()
        return self._catalog

    def process_message(
        self,
        message: str,
        current_profile: UserProfile | None = None,
        user_name: str | None = None,
    ) -> AIResponse:
        """Answer one message.

        Args:
            message: Raw student message
            current_profile: Profile accumulated by the caller so far
            user_name: Optional display name used in greetings

        Returns:
            AIResponse: Reply text, ranked colleges where the intent calls
                for them, and the profile patch extracted from this turn
        """
        if is_out_of_scope(message):
            logger.info("[advisor] out-of-scope request refused")
            return refusal_response()

        current = current_profile or UserProfile()
        patch = extract_profile_updates(message, current)
        intent = classify_intent(message)
        logger.debug("[advisor] intent=%s patch=%s", intent.value, patch.to_dict())

        context = TurnContext(
            profile=current.merged_with(patch),
            patch=patch,
            user_name=user_name,
        )
        return ResponseComposer(self.catalog).compose(intent, context)


_default_engine = AdvisorEngine()


def process_message(
    message: str,
    current_profile: UserProfile | None = None,
    user_name: str | None = None,
) -> AIResponse:
    """Answer one message against the bundled catalog."""
    return _default_engine.process_message(message, current_profile, user_name)
