"""
app/services/insight_service.py

Builds the analysis prompt for one record and asks the configured LLM
adapter for a free-text insight.

Adapter failures never propagate from here: a response without generated
text and a transport failure each map to a fixed fallback message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from app.config import LLMSettings, get_llm_settings
from app.domain.email_metrics import INSIGHT_PROMPT_LINES, EmailRecord
from app.logging_utils import log_event
from llm_synthesis.adapter import (
    BaseLLMAdapter,
    GeminiLLMAdapter,
    MockLLMAdapter,
    OpenAILLMAdapter,
)
from llm_synthesis.errors import LLMResponseShapeError, LLMTransportError
from llm_synthesis.prompt_builder import EmailInsightPromptBuilder

logger = logging.getLogger(__name__)

UNEXPECTED_RESPONSE_MESSAGE = "Failed to get insights. Unexpected response from AI."
TRANSPORT_ERROR_MESSAGE = "Error generating insights. Please try again."


class InsightStatus(str, Enum):
    SUCCESS = "success"
    UNEXPECTED_RESPONSE = "unexpected_response"
    TRANSPORT_ERROR = "transport_error"
    STALE = "stale"


@dataclass(frozen=True)
class InsightOutcome:
    """
    Result of one insight request.
    """

    status: InsightStatus
    text: str
    row_id: int
    prompt: str

    @property
    def is_fallback(self) -> bool:
        return self.status in (InsightStatus.UNEXPECTED_RESPONSE, InsightStatus.TRANSPORT_ERROR)


class InsightService:
    """
    Issues exactly one adapter call per request; never retries.
    """

    def __init__(
        self,
        *,
        adapter: BaseLLMAdapter,
        prompt_builder: EmailInsightPromptBuilder | None = None,
    ) -> None:
        self._adapter = adapter
        self._prompt_builder = prompt_builder or EmailInsightPromptBuilder(INSIGHT_PROMPT_LINES)

    def build_prompt(self, record: EmailRecord) -> str:
        return self._prompt_builder.build_prompt(record.as_dict())

    def generate_insight(self, record: EmailRecord) -> InsightOutcome:
        """
        Generate an insight for ``record``, substituting fallback text on
        adapter failures.
        """

        prompt = self.build_prompt(record)
        try:
            text = self._adapter.generate(prompt)
        except LLMResponseShapeError as exc:
            logger.error(
                "Unexpected AI response structure row_id=%s errors=%s body=%r",
                record.row_id,
                exc.errors,
                exc.raw_response,
            )
            return InsightOutcome(
                status=InsightStatus.UNEXPECTED_RESPONSE,
                text=UNEXPECTED_RESPONSE_MESSAGE,
                row_id=record.row_id,
                prompt=prompt,
            )
        except LLMTransportError as exc:
            logger.error("Error fetching AI insights row_id=%s error=%s", record.row_id, exc)
            return InsightOutcome(
                status=InsightStatus.TRANSPORT_ERROR,
                text=TRANSPORT_ERROR_MESSAGE,
                row_id=record.row_id,
                prompt=prompt,
            )

        log_event(
            logger,
            logging.INFO,
            "insight_generated",
            row_id=record.row_id,
            chars=len(text),
        )
        return InsightOutcome(
            status=InsightStatus.SUCCESS,
            text=text,
            row_id=record.row_id,
            prompt=prompt,
        )


def build_llm_adapter(settings: LLMSettings) -> BaseLLMAdapter:
    """
    Instantiate the adapter selected by ``settings.adapter``.

    mock   -> MockLLMAdapter (no API key required)
    openai -> OpenAILLMAdapter
    gemini -> GeminiLLMAdapter (default)
    """

    if settings.adapter == "mock":
        return MockLLMAdapter()

    if settings.adapter == "openai":
        openai_kwargs: dict = {
            "api_key": settings.api_key,
            "base_url": settings.base_url,
            "timeout_seconds": settings.timeout_seconds,
        }
        if settings.model:
            openai_kwargs["model"] = settings.model
        return OpenAILLMAdapter(**openai_kwargs)

    gemini_kwargs: dict = {
        "api_key": settings.api_key,
        "timeout_seconds": settings.timeout_seconds,
    }
    if settings.model:
        gemini_kwargs["model"] = settings.model
    if settings.base_url:
        gemini_kwargs["base_url"] = settings.base_url
    return GeminiLLMAdapter(**gemini_kwargs)


@lru_cache(maxsize=1)
def get_insight_service() -> InsightService:
    """
    Return a singleton insight service configured from settings.
    """

    return InsightService(adapter=build_llm_adapter(get_llm_settings()))
