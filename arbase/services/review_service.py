# SPDX-License-Identifier: Apache-2.0
"""Review submission: insert, re-aggregate, verify, and reward in a single transaction."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from arbase.core.exceptions import ConflictError, NotFoundError, ValidationError
from arbase.models import Dataset, Review, User
from arbase.services.points_service import award_points
from arbase.services.scoring_service import REVIEW_POINTS, VERIFICATION_BONUS_POINTS
from arbase.services.verification_service import (
    RATING_FIELDS,
    RECOMMENDATIONS,
    combine_scores,
    compute_human_score,
    is_verified,
)

logger = logging.getLogger("arbase.reviews")


@dataclass
class ReviewOutcome:
    review: Review
    dataset: Dataset
    ai_score: int
    mean_human_score: float
    final_score: float
    verified: bool
    newly_verified: bool
    reviewer_points: int
    uploader_bonus: int


def submit_review(
    session,
    dataset_id: int,
    reviewer: User,
    ratings: dict[str, int],
    feedback: str = "",
    recommendation: str = "approve",
) -> ReviewOutcome:
    """
    Record one reviewer's ratings and recompute the dataset's verification state.
    The dataset row is locked for the whole read-aggregate-write cycle; the
    (dataset_id, reviewer_id) unique constraint rejects concurrent duplicates.
    Commits on success, rolls back on any error.
    """
    if recommendation not in RECOMMENDATIONS:
        raise ValidationError(f"recommendation must be one of {', '.join(RECOMMENDATIONS)}")
    human_score = compute_human_score(ratings)

    dataset = session.exec(select(Dataset).where(Dataset.id == dataset_id).with_for_update()).first()
    if dataset is None:
        raise NotFoundError("Dataset not found")
    if dataset.uploader_id == reviewer.id:
        raise ValidationError("You cannot review your own dataset")
    existing = session.exec(
        select(Review.id).where(Review.dataset_id == dataset_id, Review.reviewer_id == reviewer.id)
    ).first()
    if existing is not None:
        raise ConflictError("You have already reviewed this dataset")

    review = Review(
        dataset_id=dataset_id,
        reviewer_id=reviewer.id,
        human_score=human_score,
        feedback=feedback,
        recommendation=recommendation,
        **{name: ratings[name] for name in RATING_FIELDS},
    )
    session.add(review)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise ConflictError("You have already reviewed this dataset")

    mean_human, review_count = session.exec(
        select(func.avg(Review.human_score), func.count(Review.id)).where(Review.dataset_id == dataset_id)
    ).one()
    mean_human = float(mean_human)
    ai_score = dataset.ai_confidence_score or 0
    final_score = combine_scores(ai_score, mean_human)
    verified = is_verified(final_score)
    newly_verified = verified and dataset.verified_at is None

    now = datetime.utcnow()
    dataset.human_verification_score = round(mean_human, 2)
    dataset.final_verification_score = final_score
    dataset.total_reviews = review_count
    dataset.is_verified = verified
    dataset.status = "verified" if verified else "under_review"
    dataset.updated_at = now
    if newly_verified:
        dataset.verified_at = now
        dataset.is_public = True
    session.add(dataset)

    award_points(
        session,
        reviewer.id,
        REVIEW_POINTS,
        "review",
        f"Reviewed dataset: {dataset.title}",
        dataset_id=dataset_id,
        details={"human_score": human_score},
    )
    uploader_bonus = 0
    if newly_verified:
        uploader_bonus = VERIFICATION_BONUS_POINTS
        award_points(
            session,
            dataset.uploader_id,
            uploader_bonus,
            "verification_bonus",
            f"Dataset verified: {dataset.title}",
            dataset_id=dataset_id,
            details={"final_score": final_score},
        )
        logger.info("Dataset %s verified with final score %.2f", dataset_id, final_score)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("You have already reviewed this dataset")
    session.refresh(review)
    session.refresh(dataset)
    return ReviewOutcome(
        review=review,
        dataset=dataset,
        ai_score=ai_score,
        mean_human_score=mean_human,
        final_score=final_score,
        verified=verified,
        newly_verified=newly_verified,
        reviewer_points=REVIEW_POINTS,
        uploader_bonus=uploader_bonus,
    )


def review_stats(reviews: list[Review]) -> dict:
    n = len(reviews)

    def avg(name: str) -> float:
        return round(sum(getattr(r, name) for r in reviews) / n, 2) if n else 0.0

    return {
        "total_reviews": n,
        "avg_accuracy": avg("accuracy_rating"),
        "avg_completeness": avg("completeness_rating"),
        "avg_relevance": avg("relevance_rating"),
        "avg_methodology": avg("methodology_rating"),
        "recommendations": {rec: sum(1 for r in reviews if r.recommendation == rec) for rec in RECOMMENDATIONS},
    }
