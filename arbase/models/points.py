# SPDX-License-Identifier: Apache-2.0
"""Points ledger model (append-only)."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class PointsTransaction(SQLModel, table=True):
    __tablename__ = "points_transactions"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    points: int
    transaction_type: str = ""
    dataset_id: int | None = Field(default=None, foreign_key="datasets.id")
    description: str = ""
    details: str = "{}"
    created_at: datetime = Field(default_factory=datetime.utcnow)
