# SPDX-License-Identifier: Apache-2.0
"""Review model. One row per (dataset, reviewer); never updated."""
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class Review(SQLModel, table=True):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("dataset_id", "reviewer_id", name="uq_reviews_dataset_reviewer"),)
    id: int | None = Field(default=None, primary_key=True)
    dataset_id: int = Field(foreign_key="datasets.id", index=True)
    reviewer_id: int = Field(foreign_key="users.id", index=True)
    accuracy_rating: int
    completeness_rating: int
    relevance_rating: int
    methodology_rating: int
    human_score: float
    feedback: str = ""
    recommendation: str = "approve"
    created_at: datetime = Field(default_factory=datetime.utcnow)
