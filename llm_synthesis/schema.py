"""Wire models for the generateContent text-generation protocol."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Part(BaseModel):
    """One segment of a conversational turn."""

    model_config = ConfigDict(extra="allow")

    text: Optional[str] = None


class Content(BaseModel):
    """A conversational turn made of one or more parts."""

    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    parts: List[Part] = Field(default_factory=list)


class Candidate(BaseModel):
    model_config = ConfigDict(extra="allow")

    content: Optional[Content] = None
    finish_reason: Optional[str] = Field(default=None, alias="finishReason")


class GenerateContentRequest(BaseModel):
    """Request body carrying the prompt as the sole user turn."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    contents: List[Content] = Field(min_length=1)

    @classmethod
    def from_prompt(cls, prompt: str) -> "GenerateContentRequest":
        return cls(contents=[Content(role="user", parts=[Part(text=prompt)])])

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


class GenerateContentResponse(BaseModel):
    """Response body; only ``candidates`` is read."""

    model_config = ConfigDict(extra="allow")

    candidates: List[Candidate] = Field(default_factory=list)
