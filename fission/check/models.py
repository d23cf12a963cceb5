"""Data models for the atomicity check."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LLMAnalysis(BaseModel):
    """The oracle's opinion on whether a commit is atomic."""

    is_atomic: bool
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    reasoning: str = ""
    concerns: list[str] = []
    split_suggestion: Optional[str] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, value):
        """Oracles occasionally answer 85 for 0.85 or overshoot 1.0."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if value > 1:
                value = value / 100 if value <= 100 else 1.0
            return max(0.0, min(1.0, float(value)))
        return value

    @field_validator("concerns", mode="before")
    @classmethod
    def default_concerns(cls, value):
        return value or []


class AtomicityReport(BaseModel):
    """Result of checking one commit."""

    short_hash: str
    message: str
    files: list[str] = []
    insertions: int = 0
    deletions: int = 0
    is_atomic: bool
    score: float  # 0-100
    issues: list[str] = []
    warnings: list[str] = []
    suggestions: list[str] = []
    llm_analysis: Optional[LLMAnalysis] = None
