# SPDX-License-Identifier: Apache-2.0
"""AI confidence extraction, heuristic fallback scoring, and upload reward points."""
from __future__ import annotations

import re

DEFAULT_CONFIDENCE_SCORE = 65

UPLOAD_POINTS_BASE = 50
# (minimum score, bonus) from highest to lowest; only the first match applies
UPLOAD_POINTS_BANDS = (
    (90, 50),
    (80, 40),
    (70, 30),
    (60, 20),
    (50, 10),
)
WELCOME_BONUS_POINTS = 100
REVIEW_POINTS = 20
VERIFICATION_BONUS_POINTS = 200
# uploads scoring at least this are marked ai_verified
AI_VERIFIED_MIN_SCORE = 50

_SCORE_RE = re.compile(r"\b(\d{1,3})\b")


def clamp_score(value: float) -> int:
    return max(0, min(100, int(value)))


def extract_confidence_score(text: str | None, default: int = DEFAULT_CONFIDENCE_SCORE) -> int:
    """First standalone 1-3 digit number in free-text model output, clamped to [0, 100]."""
    match = _SCORE_RE.search(text or "")
    if match is None:
        return default
    return clamp_score(int(match.group(1)))


def heuristic_confidence_score(
    title: str,
    description: str,
    row_count: int,
    column_count: int,
) -> int:
    """Deterministic 50-100 score from metadata sizes, used when the AI call is unavailable."""
    score = 50
    title_len = len(title or "")
    description_len = len(description or "")

    if title_len > 10:
        score += 5
    if title_len > 30:
        score += 5

    if description_len > 50:
        score += 5
    if description_len > 150:
        score += 5
    if description_len > 300:
        score += 5

    if row_count > 10:
        score += 5
    if row_count > 100:
        score += 5
    if row_count > 1000:
        score += 5

    if column_count >= 3:
        score += 5
    if column_count >= 5:
        score += 5

    return min(score, 100)


def calculate_upload_points(score: int) -> int:
    points = UPLOAD_POINTS_BASE
    for minimum, bonus in UPLOAD_POINTS_BANDS:
        if score >= minimum:
            return points + bonus
    return points


def points_breakdown(score: int) -> dict[str, int]:
    total = calculate_upload_points(score)
    return {"base": UPLOAD_POINTS_BASE, "quality": total - UPLOAD_POINTS_BASE}
