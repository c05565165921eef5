# SPDX-License-Identifier: Apache-2.0
"""Dataset quality analysis with Claude, with heuristic scoring when the call fails."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from functools import lru_cache

import anthropic
from anthropic import Anthropic
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from arbase.config import settings
from arbase.services.scoring_service import extract_confidence_score, heuristic_confidence_score

logger = logging.getLogger("arbase.ai")

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


class AIAssessment(BaseModel):
    """The JSON document the model is asked to return."""

    confidence_score: int = Field(ge=0, le=100, description="Overall dataset quality/legitimacy, 0-100")
    summary: str = Field(default="", max_length=2000)
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


@dataclass
class DatasetProfile:
    title: str
    description: str = ""
    research_field: str = ""
    file_name: str = ""
    row_count: int = 0
    column_count: int = 0
    columns: list[str] = field(default_factory=list)
    sample_rows: list[dict] = field(default_factory=list)
    completeness: float | None = None


@dataclass
class AnalysisResult:
    confidence_score: int
    summary: str
    strengths: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    source: str = "heuristic"  # ai | ai_text | heuristic

    def to_dict(self) -> dict:
        return asdict(self)


def build_prompt(profile: DatasetProfile) -> str:
    completeness = f"{profile.completeness:.2f}%" if profile.completeness is not None else "unknown"
    summary = {
        "title": profile.title,
        "description": profile.description,
        "research_field": profile.research_field,
        "file_name": profile.file_name,
        "row_count": profile.row_count,
        "column_count": profile.column_count,
        "columns": profile.columns[:50],
        "sample_rows": profile.sample_rows[:5],
    }
    return (
        "You are a research data validator for Africa Research Base.\n"
        "Score this dataset from 0 to 100 on data quality (30%), research relevance to its field and "
        "African context (25%), metadata quality (20%), data structure (15%) and usability (10%).\n\n"
        f"Completeness: {completeness}\n"
        f"Dataset:\n{json.dumps(summary, indent=2, default=str)}\n\n"
        "Return ONLY a JSON object, no markdown, with this structure:\n"
        '{"confidence_score": <integer 0-100>, "summary": "<2-3 sentences>", '
        '"strengths": ["..."], "improvements": ["..."], "tags": ["<3-5 short tags>"]}'
    )


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip()).strip()


def heuristic_analysis(profile: DatasetProfile) -> AnalysisResult:
    score = heuristic_confidence_score(profile.title, profile.description, profile.row_count, profile.column_count)
    return AnalysisResult(
        confidence_score=score,
        summary="Basic automated analysis (AI service unavailable)",
        strengths=["Dataset uploaded successfully", "Basic structure validated"],
        improvements=["Pending detailed AI analysis when the service is available"],
        tags=[t for t in [profile.research_field.lower(), "research", "africa"] if t],
        source="heuristic",
    )


class DatasetAnalyzer:
    """Scores datasets with Claude. Without an API key every call uses the heuristic scorer."""

    def __init__(self, client: Anthropic | None = None, model: str | None = None):
        if client is None and settings.anthropic_api_key:
            client = Anthropic(api_key=settings.anthropic_api_key, timeout=settings.ai_timeout_seconds)
        if client is None:
            logger.warning("Anthropic API key not configured - dataset analysis uses heuristic scoring")
        self.client = client
        self.model = model or settings.anthropic_model

    def analyze(self, profile: DatasetProfile) -> AnalysisResult:
        if self.client is None:
            return heuristic_analysis(profile)
        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=settings.ai_max_tokens,
                temperature=0.2,
                messages=[{"role": "user", "content": build_prompt(profile)}],
            )
        except anthropic.APIError as e:
            logger.error("AI analysis failed for %r, using heuristic score: %s", profile.title, e)
            return heuristic_analysis(profile)
        text = "".join(
            getattr(block, "text", "") for block in message.content if getattr(block, "type", "") == "text"
        )
        return self.parse_response(text)

    def parse_response(self, text: str) -> AnalysisResult:
        try:
            assessment = AIAssessment.model_validate_json(strip_code_fences(text))
        except PydanticValidationError:
            score = extract_confidence_score(text)
            logger.warning("AI response did not match the assessment schema; extracted score %d from text", score)
            return AnalysisResult(confidence_score=score, summary=text.strip()[:2000], source="ai_text")
        return AnalysisResult(
            confidence_score=assessment.confidence_score,
            summary=assessment.summary,
            strengths=assessment.strengths,
            improvements=assessment.improvements,
            tags=[t.strip() for t in assessment.tags if t.strip()][:5],
            source="ai",
        )


@lru_cache
def get_analyzer() -> DatasetAnalyzer:
    return DatasetAnalyzer()
