# SPDX-License-Identifier: Apache-2.0
"""Append-only points ledger. Every entry moves users.total_points in the same transaction."""
from __future__ import annotations

import json
import logging

from sqlmodel import select

from arbase.core.exceptions import NotFoundError
from arbase.models import PointsTransaction, User

logger = logging.getLogger("arbase.points")


def award_points(
    session,
    user_id: int,
    points: int,
    transaction_type: str,
    description: str,
    dataset_id: int | None = None,
    details: dict | None = None,
) -> PointsTransaction:
    """Append a ledger entry and add `points` to the user's total. Caller commits."""
    user = session.exec(select(User).where(User.id == user_id).with_for_update()).first()
    if user is None:
        raise NotFoundError("User not found")
    user.total_points = (user.total_points or 0) + points
    entry = PointsTransaction(
        user_id=user_id,
        points=points,
        transaction_type=transaction_type,
        dataset_id=dataset_id,
        description=description,
        details=json.dumps(details or {}, sort_keys=True),
    )
    session.add(user)
    session.add(entry)
    logger.info("Awarding %d points to user %s (%s)", points, user_id, transaction_type)
    return entry


def ledger_for_user(session, user_id: int, limit: int = 100) -> list[PointsTransaction]:
    stmt = (
        select(PointsTransaction)
        .where(PointsTransaction.user_id == user_id)
        .order_by(PointsTransaction.id.desc())
        .limit(limit)
    )
    return list(session.exec(stmt).all())
