# SPDX-License-Identifier: Apache-2.0
"""Platform-wide statistics."""
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import select

from arbase.database import Session, get_session
from arbase.models import Dataset, User

router = APIRouter(tags=["stats"])

RECENT_LIMIT = 5
TOP_CONTRIBUTORS_LIMIT = 5


@router.get("")
def platform_stats(session: Session = Depends(get_session)):
    """Totals, field distribution, recent public datasets, top contributors by points."""
    total_datasets = session.exec(select(func.count(Dataset.id))).one()
    verified_datasets = session.exec(select(func.count(Dataset.id)).where(Dataset.is_verified == True)).one()  # noqa: E712
    total_downloads = session.exec(select(func.coalesce(func.sum(Dataset.download_count), 0))).one()
    total_users = session.exec(select(func.count(User.id))).one()
    fields = session.exec(
        select(Dataset.research_field, func.count(Dataset.id))
        .group_by(Dataset.research_field)
        .order_by(func.count(Dataset.id).desc())
    ).all()
    recent = session.exec(
        select(Dataset)
        .where(Dataset.is_public == True)  # noqa: E712
        .order_by(Dataset.created_at.desc(), Dataset.id.desc())
        .limit(RECENT_LIMIT)
    ).all()
    top = session.exec(
        select(User).order_by(User.total_points.desc(), User.id.asc()).limit(TOP_CONTRIBUTORS_LIMIT)
    ).all()
    return {
        "total_datasets": total_datasets,
        "verified_datasets": verified_datasets,
        "total_downloads": int(total_downloads),
        "total_users": total_users,
        "field_distribution": {f or "other": n for f, n in fields},
        "recent_datasets": [
            {
                "id": d.id,
                "title": d.title,
                "research_field": d.research_field,
                "final_verification_score": d.final_verification_score,
                "created_at": d.created_at.isoformat(),
            }
            for d in recent
        ],
        "top_contributors": [
            {"id": u.id, "full_name": u.full_name, "institution": u.institution, "total_points": u.total_points}
            for u in top
        ],
    }
