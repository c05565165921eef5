# SPDX-License-Identifier: Apache-2.0
"""Human peer review: submit, list per dataset, review queue."""
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from arbase.core.auth import get_current_user
from arbase.core.security import rate_limit, sanitize_text
from arbase.database import Session, engine
from arbase.models import Dataset, Review, User
from arbase.routers.datasets import serialize_dataset
from arbase.schemas import ReviewSubmit
from arbase.services.review_service import review_stats, submit_review
from arbase.services.verification_service import AI_WEIGHT, HUMAN_WEIGHT, RATING_FIELDS, VERIFICATION_THRESHOLD
from sqlmodel import select

router = APIRouter(tags=["reviews"])

PENDING_STATUSES = ("ai_verified", "under_review")


def _review_dict(review: Review, reviewer: User | None = None) -> dict:
    out = {
        "id": review.id,
        "dataset_id": review.dataset_id,
        "reviewer_id": review.reviewer_id,
        "accuracy_rating": review.accuracy_rating,
        "completeness_rating": review.completeness_rating,
        "relevance_rating": review.relevance_rating,
        "methodology_rating": review.methodology_rating,
        "human_score": review.human_score,
        "feedback": review.feedback,
        "recommendation": review.recommendation,
        "created_at": review.created_at.isoformat(),
    }
    if reviewer is not None:
        out["reviewer"] = {"full_name": reviewer.full_name, "institution": reviewer.institution}
    return out


@router.post("", status_code=201)
@rate_limit("60/hour")
def reviews_submit(request: Request, body: ReviewSubmit, user: User = Depends(get_current_user)):
    """Submit a review. Re-aggregates the dataset score and pays out points."""
    ratings = {name: getattr(body, name) for name in RATING_FIELDS}
    with Session(engine) as session:
        outcome = submit_review(
            session,
            body.dataset_id,
            user,
            ratings,
            feedback=sanitize_text(body.feedback, 5000),
            recommendation=body.recommendation,
        )
        dataset = outcome.dataset
        message = f"Review submitted! You earned {outcome.reviewer_points} points!"
        if outcome.newly_verified:
            message += f" Dataset verified; the uploader earned {outcome.uploader_bonus} bonus points."
        return {
            "success": True,
            "review": _review_dict(outcome.review),
            "verification": {
                "ai_score": outcome.ai_score,
                "human_score": round(outcome.mean_human_score, 2),
                "final_score": round(outcome.final_score, 2),
                "weights": {"ai": AI_WEIGHT, "human": HUMAN_WEIGHT},
                "threshold": VERIFICATION_THRESHOLD,
                "is_verified": outcome.verified,
                "total_reviews": dataset.total_reviews,
                "status": dataset.status,
            },
            "rewards": {
                "points_earned": outcome.reviewer_points,
                "uploader_bonus": outcome.uploader_bonus,
            },
            "message": message,
        }


@router.get("")
def reviews_for_dataset(dataset_id: int | None = None):
    """Reviews of one dataset with aggregate stats."""
    if dataset_id is None:
        raise HTTPException(status_code=400, detail="dataset_id is required")
    with Session(engine) as session:
        if session.get(Dataset, dataset_id) is None:
            raise HTTPException(status_code=404, detail="Dataset not found")
        rows = session.exec(
            select(Review, User)
            .join(User, User.id == Review.reviewer_id)
            .where(Review.dataset_id == dataset_id)
            .order_by(Review.created_at.desc())
        ).all()
        return {
            "success": True,
            "reviews": [_review_dict(r, u) for r, u in rows],
            "stats": review_stats([r for r, _ in rows]),
        }


@router.get("/pending")
def reviews_pending(limit: int = Query(20, ge=1, le=100), user: User = Depends(get_current_user)):
    """Datasets awaiting review that the caller may still review, oldest first."""
    with Session(engine) as session:
        reviewed = select(Review.dataset_id).where(Review.reviewer_id == user.id)
        rows = session.exec(
            select(Dataset)
            .where(
                Dataset.status.in_(PENDING_STATUSES),
                Dataset.uploader_id != user.id,
                Dataset.id.not_in(reviewed),
            )
            .order_by(Dataset.created_at.asc(), Dataset.id.asc())
            .limit(limit)
        ).all()
        return {"success": True, "datasets": [serialize_dataset(d) for d in rows]}
