"""LLM Service - Abstraction layer for text generation calls.

This module provides a unified interface for calling different LLM providers
(OpenAI, Gemini) with consistent error handling and response formatting.

Interface Contract:
- ``call`` returns the generated text, stripped
- All methods raise LLMServiceError on failure, including missing API keys
  and empty output
- Callers should not depend on specific LLM provider details
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

import google.generativeai as genai
from openai import OpenAI

from config import DEFAULT_MODEL, GENERATION_TIMEOUT, LLM_PROVIDER, OPENAI_CHAT_MODEL


class LLMServiceError(Exception):
    """Raised when LLM call fails."""
    pass


class BaseLLMService(ABC):
    """Abstract base class for LLM services."""

    @abstractmethod
    def call(self, prompt: str, *, instructions: str | None = None) -> str:
        """Call the LLM with a prompt.

        Args:
            prompt: The prompt to send to the LLM
            instructions: Optional system/persona instructions

        Returns:
            str: The LLM response text

        Raises:
            LLMServiceError: If the call fails
        """
        pass


def _require_text(text: str | None, provider: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise LLMServiceError(f"{provider} returned an empty response")
    return cleaned


class OpenAIService(BaseLLMService):
    """OpenAI Responses API implementation."""

    def __init__(self, model: str = OPENAI_CHAT_MODEL, timeout: float = GENERATION_TIMEOUT):
        self.model = model
        self.timeout = timeout
        self._client: OpenAI | None = None

    def _get_client(self) -> OpenAI:
        """Get or create OpenAI client (lazy initialization)."""
        if self._client is None:
            api_key = os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise LLMServiceError("OPENAI_API_KEY environment variable not set")
            self._client = OpenAI(api_key=api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def call(self, prompt: str, *, instructions: str | None = None) -> str:
        """Call OpenAI model."""
        client = self._get_client()
        try:
            response = client.responses.create(
                model=self.model,
                instructions=instructions,
                input=prompt,
            )
        except Exception as e:
            raise LLMServiceError(f"OpenAI call failed: {e}") from e
        return _require_text(response.output_text, "OpenAI")


class GeminiService(BaseLLMService):
    """Google Gemini LLM service implementation."""

    def __init__(self, model: str = DEFAULT_MODEL, timeout: float = GENERATION_TIMEOUT):
        self.model = model
        self.timeout = timeout
        self._configured = False

    def _configure(self) -> None:
        """Configure Gemini API (lazy initialization)."""
        if self._configured:
            return
        api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            raise LLMServiceError("GEMINI_API_KEY or GOOGLE_API_KEY environment variable not set")
        genai.configure(api_key=api_key)
        self._configured = True

    def call(self, prompt: str, *, instructions: str | None = None) -> str:
        """Call Gemini model."""
        self._configure()
        try:
            model = genai.GenerativeModel(self.model, system_instruction=instructions)
            response = model.generate_content(prompt, request_options={"timeout": self.timeout})
            text = response.text
        except Exception as e:
            raise LLMServiceError(f"Gemini call failed: {e}") from e
        return _require_text(text, "Gemini")


def create_service(provider: str = LLM_PROVIDER) -> BaseLLMService:
    """Build the service for a provider name ("openai" or "gemini")."""
    if provider == "gemini":
        return GeminiService()
    if provider == "openai":
        return OpenAIService()
    raise LLMServiceError(f"Unknown LLM provider: {provider}")


# Default service instance (can be swapped for testing)
class LLMService:
    """Facade for LLM services with provider switching."""

    _instance: BaseLLMService | None = None

    @classmethod
    def get_instance(cls) -> BaseLLMService:
        """Get the configured LLM service instance."""
        if cls._instance is None:
            cls._instance = create_service()
        return cls._instance

    @classmethod
    def set_instance(cls, service: BaseLLMService) -> None:
        """Set a custom LLM service (useful for testing)."""
        cls._instance = service

    @classmethod
    def reset(cls) -> None:
        """Reset to default service."""
        cls._instance = None
