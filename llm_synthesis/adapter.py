"""LLM adapters for insight generation.

Provides a base interface and concrete adapters for the generateContent
HTTP API, OpenAI-compatible APIs, and a deterministic mock for testing.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import requests
from openai import OpenAI, OpenAIError

from llm_synthesis.errors import LLMResponseShapeError, LLMTransportError
from llm_synthesis.schema import GenerateContentRequest
from llm_synthesis.validator import extract_generated_text

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send a prompt to the LLM and return the generated text.

        Args:
            prompt: The fully formatted prompt string.

        Returns:
            The first generated text segment.

        Raises:
            LLMTransportError: On network failure or a non-JSON body.
            LLMResponseShapeError: When the body lacks generated text.
        """


class GeminiLLMAdapter(BaseLLMAdapter):
    """Adapter for the generateContent REST endpoint.

    Issues exactly one POST per call. HTTP error statuses are not raised:
    their JSON bodies carry no candidates and surface as shape errors.
    """

    def __init__(
        self,
        model: str = DEFAULT_GEMINI_MODEL,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout_seconds: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialise the generateContent adapter.

        Args:
            model: Model identifier used in the endpoint path.
            api_key: API key sent as the ``key`` query parameter.
            base_url: API root, without trailing slash.
            timeout_seconds: Per-request timeout.
            session: Optional requests session (injected in tests).
        """
        self._model = model
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    def generate(self, prompt: str) -> str:
        payload = GenerateContentRequest.from_prompt(prompt).to_payload()
        params = {"key": self._api_key} if self._api_key else None

        try:
            response = self._session.post(
                self.endpoint,
                params=params,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise LLMTransportError(f"generateContent request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise LLMTransportError(
                f"generateContent response was not valid JSON (status={response.status_code})."
            ) from exc

        if response.status_code >= 400:
            logger.warning(
                "generateContent returned status=%s model=%s",
                response.status_code,
                self._model,
            )
        return extract_generated_text(body)


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialise the OpenAI adapter.

        Args:
            model: Model identifier.
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            base_url: Optional base URL for OpenAI-compatible endpoints.
            timeout_seconds: Per-request timeout.
        """
        resolved_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        client_kwargs: dict = {
            "api_key": resolved_key,
            "timeout": timeout_seconds,
            "max_retries": 0,
        }
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model

    def generate(self, prompt: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
                stream=False,
            )
        except OpenAIError as exc:
            raise LLMTransportError(f"chat completion request failed: {exc}") from exc

        if not response.choices:
            raise LLMResponseShapeError(errors=["choices: empty or missing"])
        content = response.choices[0].message.content
        if content is None:
            raise LLMResponseShapeError(errors=["choices.0.message.content: missing"])
        return content


# ---------------------------------------------------------------------------
# Fixed mock response used for local testing.
# ---------------------------------------------------------------------------
_MOCK_RESPONSE = (
    "Mock insight for testing purposes. The open rate is in a typical range; "
    "test a shorter subject line and move the primary call to action higher "
    "in the email to lift click rate."
)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed analysis.

    Used for local testing and demos where no LLM API is available.
    """

    def generate(self, prompt: str) -> str:
        """Return a fixed string regardless of input.

        Args:
            prompt: Ignored - present only to satisfy the interface.

        Returns:
            A fixed analysis text.
        """
        return _MOCK_RESPONSE
