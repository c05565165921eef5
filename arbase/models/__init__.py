# SPDX-License-Identifier: Apache-2.0
"""SQLModel table definitions."""
from arbase.models.dataset import Dataset
from arbase.models.points import PointsTransaction
from arbase.models.review import Review
from arbase.models.user import User

__all__ = [
    "Dataset",
    "PointsTransaction",
    "Review",
    "User",
]
