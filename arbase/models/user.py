# SPDX-License-Identifier: Apache-2.0
"""User model."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    full_name: str = ""
    hashed_password: str
    institution: str = ""
    research_field: str = ""
    country: str = ""
    role: str = "researcher"
    wallet_address: str | None = None
    total_points: int = 0
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
