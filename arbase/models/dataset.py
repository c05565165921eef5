# SPDX-License-Identifier: Apache-2.0
"""Dataset model."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class Dataset(SQLModel, table=True):
    __tablename__ = "datasets"
    id: int | None = Field(default=None, primary_key=True)
    uploader_id: int = Field(foreign_key="users.id", index=True)
    title: str
    description: str = ""
    research_field: str = Field(default="other", index=True)
    tags: str = "[]"

    file_name: str = ""
    file_path: str = ""
    file_size: int = 0
    file_type: str = ""
    file_url: str = ""
    content_hash: str = ""

    row_count: int = 0
    column_count: int = 0
    completeness_score: float | None = None

    ai_confidence_score: int | None = None
    ai_analysis: str = "{}"
    ai_verified_at: datetime | None = None

    status: str = Field(default="pending", index=True)
    is_public: bool = Field(default=False, index=True)
    is_verified: bool = False
    human_verification_score: float | None = None
    final_verification_score: float | None = None
    total_reviews: int = 0
    verified_at: datetime | None = None

    price_usd: float = 0.0
    view_count: int = 0
    download_count: int = 0

    chain_tx_signature: str | None = None
    chain_address: str | None = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
