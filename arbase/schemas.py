# SPDX-License-Identifier: Apache-2.0
"""Pydantic request schemas."""
from pydantic import BaseModel, Field as PydanticField


class SignupRequest(BaseModel):
    email: str = PydanticField(..., max_length=254)
    password: str = PydanticField(..., max_length=128)
    full_name: str = PydanticField(..., min_length=2, max_length=200)
    institution: str = PydanticField("", max_length=200)
    research_field: str = PydanticField("", max_length=100)
    country: str = PydanticField("", max_length=100)
    wallet_address: str | None = PydanticField(None, max_length=64)


class LoginRequest(BaseModel):
    email: str
    password: str


class ReviewSubmit(BaseModel):
    dataset_id: int
    accuracy_rating: int
    completeness_rating: int
    relevance_rating: int
    methodology_rating: int
    feedback: str = PydanticField("", max_length=5000)
    recommendation: str = "approve"


class AnalyzeRequest(BaseModel):
    dataset_id: int
