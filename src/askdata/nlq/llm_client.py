"""Model client adapters for the NLQ pipeline.

Each adapter sends one single-turn prompt to its provider and returns the
generated text. No retries happen here; callers decide retry policy.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from openai import OpenAI, OpenAIError

from askdata.core.config import settings
from askdata.nlq.errors import (
    EmptyGenerationError,
    MalformedProviderResponseError,
    ModelProviderError,
)

logger = logging.getLogger(__name__)


class LLMClient(ABC):
    """Provider-independent text generation interface."""

    provider_name: str = ""

    def __init__(self, model: str | None = None, timeout_seconds: int | None = None):
        """Initialize LLM client.

        Args:
            model: Model name (default: from settings)
            timeout_seconds: Request timeout (default: settings.LLM_TIMEOUT_SECONDS)
        """
        self.model_name = model or settings.llm_model
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.LLM_TIMEOUT_SECONDS
        )
        self._client: Any = None

    def generate_text(self, prompt: str, correlation_id: str | None = None) -> str:
        """Send a prompt and return the first generated text segment.

        Args:
            prompt: Prompt text
            correlation_id: Optional correlation ID for logging

        Returns:
            Generated text (not stripped)

        Raises:
            ModelProviderError: If the provider call fails
            MalformedProviderResponseError: If the response shape is unexpected
            EmptyGenerationError: If the generated text is empty
        """
        log_extra = {"correlation_id": correlation_id} if correlation_id else {}

        logger.debug(
            f"Calling {self.provider_name} API",
            extra={**log_extra, "model": self.model_name},
        )

        response = self._call_provider(prompt, log_extra)
        text = self._extract_text(response, log_extra)

        if not text or not text.strip():
            logger.error(f"{self.provider_name} returned empty text", extra=log_extra)
            raise EmptyGenerationError("Model returned an empty response")

        logger.debug(
            f"{self.provider_name} API response received",
            extra={**log_extra, "llm_response": text},
        )
        return text

    @abstractmethod
    def _call_provider(self, prompt: str, log_extra: dict[str, Any]) -> Any:
        """Invoke the provider SDK and return its raw response."""

    @abstractmethod
    def _extract_text(self, response: Any, log_extra: dict[str, Any]) -> str | None:
        """Pull the generated text out of a raw provider response."""


class GeminiClient(LLMClient):
    """Client for Google Gemini through the google-genai SDK."""

    provider_name = "Gemini"

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        timeout_seconds: int | None = None,
    ):
        super().__init__(model=model or settings.GEMINI_MODEL, timeout_seconds=timeout_seconds)
        self.api_key = api_key or settings.GEMINI_API_KEY

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            logger.info(f"Initializing Gemini client: {self.model_name}")
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=genai_types.HttpOptions(timeout=self.timeout_seconds * 1000),
            )
        return self._client

    def _call_provider(self, prompt: str, log_extra: dict[str, Any]) -> Any:
        try:
            return self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
            )
        except genai_errors.APIError as e:
            logger.error(
                f"Gemini API error: {e}",
                extra={**log_extra, "status_code": getattr(e, "code", None)},
            )
            raise ModelProviderError(f"LLM API call failed: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected error calling Gemini: {e}", extra=log_extra)
            raise ModelProviderError(f"Unexpected error: {e}") from e

    def _extract_text(self, response: Any, log_extra: dict[str, Any]) -> str | None:
        return extract_gemini_text(response, log_extra)


def extract_gemini_text(response: Any, log_extra: dict[str, Any] | None = None) -> str | None:
    """Return the first text part of the first candidate.

    Raises:
        MalformedProviderResponseError: If candidates, content or parts are missing
    """
    candidates = getattr(response, "candidates", None)
    content = getattr(candidates[0], "content", None) if candidates else None
    parts = getattr(content, "parts", None) if content is not None else None

    if not parts:
        logger.error(
            "Unexpected Gemini response structure, cannot extract text",
            extra={**(log_extra or {}), "candidate_count": len(candidates or [])},
        )
        raise MalformedProviderResponseError("Failed to parse Gemini response structure")

    return getattr(parts[0], "text", None)


class OpenAICompatibleClient(LLMClient):
    """Client for any OpenAI-compatible chat completions endpoint."""

    provider_name = "OpenAI"

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: int | None = None,
    ):
        super().__init__(model=model or settings.OPENAI_MODEL, timeout_seconds=timeout_seconds)
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.base_url = base_url or settings.OPENAI_BASE_URL

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            logger.info(f"Initializing OpenAI-compatible client: {self.model_name}")
            self._client = OpenAI(
                base_url=self.base_url,
                api_key=self.api_key,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
        return self._client

    def _call_provider(self, prompt: str, log_extra: dict[str, Any]) -> Any:
        try:
            return self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.1,  # Low temperature for deterministic SQL generation
            )
        except OpenAIError as e:
            logger.error(f"OpenAI API error: {e}", extra=log_extra)
            raise ModelProviderError(f"LLM API call failed: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected error calling OpenAI: {e}", extra=log_extra)
            raise ModelProviderError(f"Unexpected error: {e}") from e

    def _extract_text(self, response: Any, log_extra: dict[str, Any]) -> str | None:
        choices = getattr(response, "choices", None)
        message = getattr(choices[0], "message", None) if choices else None

        if message is None:
            logger.error("Unexpected OpenAI response structure, cannot extract text", extra=log_extra)
            raise MalformedProviderResponseError("Failed to parse OpenAI response structure")

        return getattr(message, "content", None)


# Global LLM client (singleton, created on first use)
_llm_client: LLMClient | None = None


def get_llm_client() -> LLMClient:
    """Get or create the LLM client for the configured provider.

    Returns:
        LLMClient instance

    Raises:
        ValueError: If LLM_PROVIDER is not supported
    """
    global _llm_client

    if _llm_client is None:
        provider = settings.LLM_PROVIDER.lower()
        if provider == "gemini":
            _llm_client = GeminiClient()
        elif provider == "openai":
            _llm_client = OpenAICompatibleClient()
        else:
            raise ValueError(f"Unsupported LLM_PROVIDER: {settings.LLM_PROVIDER}")
        logger.info(f"Using LLM provider: {_llm_client.provider_name}")

    return _llm_client
