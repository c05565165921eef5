# SPDX-License-Identifier: Apache-2.0
"""Dataset analyzer: structured output, text fallback, heuristic fallback."""
import anthropic
import httpx

from arbase.services.ai_service import (
    DatasetAnalyzer,
    DatasetProfile,
    build_prompt,
    heuristic_analysis,
    strip_code_fences,
)
from arbase.services.scoring_service import DEFAULT_CONFIDENCE_SCORE, heuristic_confidence_score
from conftest import FakeAnthropic, assessment_json

PROFILE = DatasetProfile(
    title="Malaria incidence by district",
    description="Monthly confirmed malaria cases reported by district health offices in Ghana.",
    research_field="health",
    file_name="malaria.csv",
    row_count=240,
    column_count=6,
    columns=["district", "month", "cases"],
    sample_rows=[{"district": "Accra", "month": "2021-01", "cases": "120"}],
    completeness=98.5,
)


def test_structured_response_parsed():
    fake = FakeAnthropic(text=assessment_json(84))
    result = DatasetAnalyzer(client=fake, model="test-model").analyze(PROFILE)
    assert result.confidence_score == 84
    assert result.source == "ai"
    assert result.tags == ["agriculture", "climate"]
    call = fake.messages.calls[0]
    assert call["model"] == "test-model"
    assert "Malaria incidence by district" in call["messages"][0]["content"]


def test_fenced_json_accepted():
    fake = FakeAnthropic(text="```json\n" + assessment_json(77) + "\n```")
    result = DatasetAnalyzer(client=fake).analyze(PROFILE)
    assert result.confidence_score == 77
    assert result.source == "ai"


def test_out_of_range_score_falls_back_to_text():
    fake = FakeAnthropic(text=assessment_json(140))
    result = DatasetAnalyzer(client=fake).analyze(PROFILE)
    assert result.source == "ai_text"
    assert 0 <= result.confidence_score <= 100


def test_prose_response_uses_extracted_number():
    fake = FakeAnthropic(text="I would rate this dataset 73 out of 100.")
    result = DatasetAnalyzer(client=fake).analyze(PROFILE)
    assert result.confidence_score == 73
    assert result.source == "ai_text"


def test_prose_without_number_uses_default():
    fake = FakeAnthropic(text="Looks reasonable.")
    result = DatasetAnalyzer(client=fake).analyze(PROFILE)
    assert result.confidence_score == DEFAULT_CONFIDENCE_SCORE


def test_api_error_uses_heuristic():
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    fake = FakeAnthropic(error=anthropic.APIConnectionError(request=request))
    result = DatasetAnalyzer(client=fake).analyze(PROFILE)
    assert result.source == "heuristic"
    assert result.confidence_score == heuristic_confidence_score(
        PROFILE.title, PROFILE.description, PROFILE.row_count, PROFILE.column_count
    )


def test_no_client_uses_heuristic():
    analyzer = DatasetAnalyzer()
    assert analyzer.client is None
    assert analyzer.analyze(PROFILE).source == "heuristic"


def test_heuristic_analysis_tags_include_field():
    result = heuristic_analysis(PROFILE)
    assert "health" in result.tags
    assert 50 <= result.confidence_score <= 100


def test_prompt_mentions_completeness_and_schema():
    prompt = build_prompt(PROFILE)
    assert "98.50%" in prompt
    assert "confidence_score" in prompt


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'
