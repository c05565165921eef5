# SPDX-License-Identifier: Apache-2.0
"""Human review scoring and the weighted final verification score."""
from __future__ import annotations

from collections.abc import Iterable

from arbase.core.exceptions import ValidationError

AI_WEIGHT = 0.4
HUMAN_WEIGHT = 0.6
VERIFICATION_THRESHOLD = 70
MIN_RATING = 1
MAX_RATING = 5
RATING_FIELDS = ("accuracy_rating", "completeness_rating", "relevance_rating", "methodology_rating")
RECOMMENDATIONS = ("approve", "reject", "needs_improvement")


def validate_ratings(ratings: dict[str, int]) -> None:
    """Every rating must be an integer 1-5."""
    for name in RATING_FIELDS:
        value = ratings.get(name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} is required and must be an integer")
        if not MIN_RATING <= value <= MAX_RATING:
            raise ValidationError("Ratings must be between 1 and 5")


def compute_human_score(ratings: dict[str, int]) -> float:
    validate_ratings(ratings)
    mean_rating = sum(ratings[name] for name in RATING_FIELDS) / len(RATING_FIELDS)
    return mean_rating / MAX_RATING * 100


def compute_final_score(ai_score: float, human_scores: Iterable[float]) -> float:
    scores = list(human_scores)
    if not scores:
        raise ValueError("At least one human score is required")
    return combine_scores(ai_score, sum(scores) / len(scores))


def combine_scores(ai_score: float, mean_human_score: float) -> float:
    # rounded so float noise cannot flip a score sitting exactly on the threshold
    return round(ai_score * AI_WEIGHT + mean_human_score * HUMAN_WEIGHT, 6)


def is_verified(final_score: float) -> bool:
    return final_score >= VERIFICATION_THRESHOLD
