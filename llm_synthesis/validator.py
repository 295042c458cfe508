"""Validation layer for raw generateContent responses.

Extracts ``candidates[0].content.parts[0].text`` from a decoded JSON body.
"""

from typing import Any

from pydantic import ValidationError

from llm_synthesis.errors import LLMResponseShapeError
from llm_synthesis.schema import GenerateContentResponse


def extract_generated_text(body: Any) -> str:
    """Return the first generated text segment of a response body.

    Steps:
        1. Require a JSON object.
        2. Validate against GenerateContentResponse.
        3. Walk to the first candidate's first part.

    Args:
        body: Decoded JSON response body.

    Returns:
        The generated text (may be empty if the model returned "").

    Raises:
        LLMResponseShapeError: If any step of the expected structure is missing.
    """
    if not isinstance(body, dict):
        raise LLMResponseShapeError(
            errors=["top-level JSON must be an object"],
            raw_response=body,
        )

    try:
        response = GenerateContentResponse.model_validate(body)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ]
        raise LLMResponseShapeError(errors=errors, raw_response=body) from exc

    if not response.candidates:
        raise LLMResponseShapeError(errors=["candidates: empty or missing"], raw_response=body)

    content = response.candidates[0].content
    if content is None:
        raise LLMResponseShapeError(errors=["candidates.0.content: missing"], raw_response=body)
    if not content.parts:
        raise LLMResponseShapeError(
            errors=["candidates.0.content.parts: empty or missing"],
            raw_response=body,
        )

    text = content.parts[0].text
    if text is None:
        raise LLMResponseShapeError(
            errors=["candidates.0.content.parts.0.text: missing"],
            raw_response=body,
        )
    return text
