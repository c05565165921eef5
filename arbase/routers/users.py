# SPDX-License-Identifier: Apache-2.0
"""Current user profile and points ledger."""
import json

from fastapi import APIRouter, Depends, Query

from arbase.core.auth import get_current_user
from arbase.database import Session, get_session
from arbase.models import User
from arbase.services.points_service import ledger_for_user

router = APIRouter(tags=["users"])


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {
        "success": True,
        "user": {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "institution": user.institution,
            "research_field": user.research_field,
            "country": user.country,
            "role": user.role,
            "wallet_address": user.wallet_address,
            "total_points": user.total_points,
            "created_at": user.created_at.isoformat(),
        },
    }


@router.get("/me/points")
def my_points(
    limit: int = Query(100, ge=1, le=500),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Ledger entries, newest first."""
    entries = ledger_for_user(session, user.id, limit=limit)
    current = session.get(User, user.id)
    return {
        "success": True,
        "total_points": current.total_points if current else user.total_points,
        "transactions": [
            {
                "id": t.id,
                "points": t.points,
                "transaction_type": t.transaction_type,
                "dataset_id": t.dataset_id,
                "description": t.description,
                "details": json.loads(t.details or "{}"),
                "created_at": t.created_at.isoformat(),
            }
            for t in entries
        ],
    }
