"""Exceptions raised by LLM adapters.

Both concrete errors are recoverable: the insight service maps each one to
a fixed fallback message instead of failing the request.
"""

from typing import List, Optional


class LLMAdapterError(Exception):
    """Base class for failures while obtaining generated text."""


class LLMTransportError(LLMAdapterError):
    """Raised on network failures or a response body that is not JSON."""


class LLMResponseShapeError(LLMAdapterError):
    """Raised when a response parses but lacks the generated text.

    Attributes:
        errors: Human-readable descriptions of what was missing.
        raw_response: The decoded body that failed validation.
    """

    def __init__(self, errors: List[str], raw_response: Optional[object] = None) -> None:
        self.errors = errors
        self.raw_response = raw_response
        super().__init__("Unexpected LLM response structure: " + "; ".join(errors))
