# SPDX-License-Identifier: Apache-2.0
"""Re-run AI analysis on a stored dataset (uploader only)."""
import json
import logging
from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request

from arbase.core.auth import get_current_user
from arbase.core.exceptions import PermissionDeniedError
from arbase.core.security import rate_limit
from arbase.database import Session, engine
from arbase.models import Dataset, User
from arbase.schemas import AnalyzeRequest
from arbase.services.ai_service import DatasetAnalyzer, DatasetProfile, get_analyzer
from arbase.services.file_service import TableProfile, profile_csv, read_stored_file
from arbase.services.scoring_service import AI_VERIFIED_MIN_SCORE

router = APIRouter(tags=["analyze"])
logger = logging.getLogger("arbase.analyze")

REANALYZABLE_STATUSES = ("pending", "ai_verified")


def _profile_for(dataset: Dataset) -> TableProfile:
    if Path(dataset.file_name).suffix.lower() == ".csv":
        data = read_stored_file(dataset.file_path)
        if data is not None:
            return profile_csv(data)
    return TableProfile(
        row_count=dataset.row_count,
        column_count=dataset.column_count,
        completeness=dataset.completeness_score,
    )


@router.post("/analyze")
@rate_limit("20/hour")
def analyze_dataset(
    request: Request,
    body: AnalyzeRequest,
    user: User = Depends(get_current_user),
    analyzer: DatasetAnalyzer = Depends(get_analyzer),
):
    """Refresh the AI score. Only allowed before human review has started."""
    with Session(engine) as session:
        dataset = session.get(Dataset, body.dataset_id)
        if not dataset:
            raise HTTPException(status_code=404, detail="Dataset not found")
        if dataset.uploader_id != user.id:
            raise PermissionDeniedError("Only the uploader can re-analyze a dataset")
        if dataset.status not in REANALYZABLE_STATUSES:
            raise HTTPException(status_code=409, detail="Dataset is already under human review")

        table = _profile_for(dataset)
        result = analyzer.analyze(DatasetProfile(
            title=dataset.title,
            description=dataset.description,
            research_field=dataset.research_field,
            file_name=dataset.file_name,
            row_count=table.row_count,
            column_count=table.column_count,
            columns=table.columns,
            sample_rows=table.sample_rows,
            completeness=table.completeness,
        ))
        now = datetime.utcnow()
        dataset.ai_confidence_score = result.confidence_score
        dataset.ai_analysis = json.dumps(result.to_dict())
        dataset.ai_verified_at = now
        dataset.status = "ai_verified" if result.confidence_score >= AI_VERIFIED_MIN_SCORE else "pending"
        dataset.updated_at = now
        session.add(dataset)
        session.commit()
        logger.info("Dataset %s re-analyzed: score %d (%s)", dataset.id, result.confidence_score, result.source)
        return {"success": True, "dataset_id": dataset.id, "analysis": result.to_dict()}
