# SPDX-License-Identifier: Apache-2.0
"""Dataset upload (AI scoring, points, chain registration), search, details, download."""
import base64
import json
import logging
from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from arbase.config import ALLOWED_UPLOAD_EXTENSIONS, MAX_UPLOAD_BYTES, MAX_UPLOAD_MB
from arbase.core.auth import get_current_user
from arbase.core.exceptions import ChainRegistrationError
from arbase.core.security import escape_like, rate_limit, sanitize_text, sha256_hex
from arbase.database import Session, engine, session_scope
from arbase.models import Dataset, User
from arbase.services.ai_service import DatasetAnalyzer, DatasetProfile, get_analyzer
from arbase.services.chain_service import SolanaRegistrar, get_registrar
from arbase.services.file_service import TableProfile, profile_csv, read_stored_file, store_upload
from arbase.services.points_service import award_points
from arbase.services.scoring_service import AI_VERIFIED_MIN_SCORE, calculate_upload_points, points_breakdown

router = APIRouter(tags=["datasets"])
logger = logging.getLogger("arbase.datasets")

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def _parse_tags(raw: str) -> list[str]:
    """Accept a JSON list or a comma-separated string."""
    raw = (raw or "").strip()
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
        items = parsed if isinstance(parsed, list) else [parsed]
    except json.JSONDecodeError:
        items = raw.split(",")
    tags = []
    for t in items:
        tag = sanitize_text(str(t), 50).lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags[:10]


def serialize_dataset(d: Dataset) -> dict:
    """Public view of a dataset (no server file path)."""
    try:
        tags = json.loads(d.tags or "[]")
    except (json.JSONDecodeError, TypeError):
        tags = []
    try:
        analysis = json.loads(d.ai_analysis or "{}")
    except (json.JSONDecodeError, TypeError):
        analysis = {"summary": d.ai_analysis}
    return {
        "id": d.id,
        "uploader_id": d.uploader_id,
        "title": d.title,
        "description": d.description,
        "research_field": d.research_field,
        "tags": tags,
        "file_name": d.file_name,
        "file_size": d.file_size,
        "file_type": d.file_type,
        "file_url": d.file_url,
        "content_hash": d.content_hash,
        "row_count": d.row_count,
        "column_count": d.column_count,
        "completeness_score": d.completeness_score,
        "ai_confidence_score": d.ai_confidence_score,
        "ai_analysis": analysis,
        "ai_verified_at": d.ai_verified_at.isoformat() if d.ai_verified_at else None,
        "status": d.status,
        "is_public": d.is_public,
        "is_verified": d.is_verified,
        "human_verification_score": d.human_verification_score,
        "final_verification_score": d.final_verification_score,
        "total_reviews": d.total_reviews,
        "verified_at": d.verified_at.isoformat() if d.verified_at else None,
        "price_usd": d.price_usd,
        "view_count": d.view_count,
        "download_count": d.download_count,
        "chain_tx_signature": d.chain_tx_signature,
        "chain_address": d.chain_address,
        "created_at": d.created_at.isoformat(),
        "updated_at": d.updated_at.isoformat(),
    }


def _award_upload_points(dataset: Dataset, score: int, row_count: int) -> int:
    """Ledger failures are logged and do not fail the upload."""
    points = calculate_upload_points(score)
    try:
        with session_scope() as session:
            award_points(
                session,
                dataset.uploader_id,
                points,
                "dataset_upload",
                f"Uploaded dataset: {dataset.title}",
                dataset_id=dataset.id,
                details={"ai_score": score, "row_count": row_count, "breakdown": points_breakdown(score)},
            )
    except SQLAlchemyError as e:
        logger.error("Points award failed for dataset %s: %s", dataset.id, e)
        return 0
    return points


def _register_on_chain(registrar: SolanaRegistrar, dataset_id: int) -> str | None:
    """Chain registration is optional; failures are logged and do not fail the upload."""
    if not registrar.enabled:
        return None
    with Session(engine) as session:
        dataset = session.get(Dataset, dataset_id)
        try:
            receipt = registrar.register_dataset(dataset)
        except ChainRegistrationError as e:
            logger.error("Chain registration failed for dataset %s: %s", dataset_id, e)
            return None
        dataset.chain_tx_signature = receipt.signature
        dataset.chain_address = receipt.dataset_address
        session.add(dataset)
        session.commit()
        return receipt.signature


@router.post("/upload", status_code=201)
@rate_limit("30/hour")
def datasets_upload(
    request: Request,
    file: UploadFile = File(...),
    title: str = Form(...),
    research_field: str = Form(...),
    description: str = Form(""),
    tags: str = Form(""),
    row_count: int | None = Form(None),
    column_count: int | None = Form(None),
    price_usd: float = Form(0.0),
    user: User = Depends(get_current_user),
    analyzer: DatasetAnalyzer = Depends(get_analyzer),
    registrar: SolanaRegistrar = Depends(get_registrar),
):
    """Multipart upload. Stores the file, scores it, persists it, rewards the uploader."""
    original_name = file.filename or ""
    extension = Path(original_name).suffix.lower()
    if extension not in ALLOWED_UPLOAD_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Invalid file type. Supported: CSV, Excel, PDF, TXT")
    contents = file.file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Empty file")
    if len(contents) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail=f"File too large. Maximum size: {MAX_UPLOAD_MB}MB")
    if price_usd < 0:
        raise HTTPException(status_code=400, detail="Price cannot be negative")
    title = sanitize_text(title, 200)
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    description = sanitize_text(description, 5000)
    research_field = sanitize_text(research_field, 100).lower() or "other"

    if extension == ".csv":
        table = profile_csv(contents)
    else:
        table = TableProfile(row_count=max(row_count or 0, 0), column_count=max(column_count or 0, 0))
    stored = store_upload(contents, original_name)

    analysis = analyzer.analyze(DatasetProfile(
        title=title,
        description=description,
        research_field=research_field,
        file_name=original_name,
        row_count=table.row_count,
        column_count=table.column_count,
        columns=table.columns,
        sample_rows=table.sample_rows,
        completeness=table.completeness,
    ))
    tag_list = _parse_tags(tags) or [t.lower() for t in analysis.tags]
    score = analysis.confidence_score

    with Session(engine) as session:
        dataset = Dataset(
            uploader_id=user.id,
            title=title,
            description=description or analysis.summary,
            research_field=research_field,
            tags=json.dumps(tag_list),
            file_name=sanitize_text(original_name, 255),
            file_path=str(stored.path),
            file_size=len(contents),
            file_type=extension.lstrip("."),
            file_url=stored.url,
            content_hash=sha256_hex(contents),
            row_count=table.row_count,
            column_count=table.column_count,
            completeness_score=table.completeness,
            ai_confidence_score=score,
            ai_analysis=json.dumps(analysis.to_dict()),
            ai_verified_at=datetime.utcnow(),
            status="ai_verified" if score >= AI_VERIFIED_MIN_SCORE else "pending",
            is_public=False,
            price_usd=price_usd,
        )
        session.add(dataset)
        session.commit()
        session.refresh(dataset)
    logger.info("Dataset %s uploaded by user %s (score %d, %s)", dataset.id, user.id, score, analysis.source)

    points = _award_upload_points(dataset, score, table.row_count)
    signature = _register_on_chain(registrar, dataset.id)

    with Session(engine) as session:
        dataset = session.get(Dataset, dataset.id)
        uploader = session.get(User, user.id)
        return {
            "success": True,
            "dataset": serialize_dataset(dataset),
            "ai_analysis": analysis.to_dict(),
            "rewards": {
                "points_earned": points,
                "breakdown": points_breakdown(score) if points else {},
                "new_total_points": uploader.total_points if uploader else 0,
            },
            "chain": {"registered": signature is not None, "tx_signature": signature},
            "message": f"Upload successful! You earned {points} points!",
        }


@router.get("")
def datasets_list(
    field: str | None = None,
    tag: str | None = None,
    search: str | None = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0,
):
    """Public datasets, newest first, with optional field/tag/text filters."""
    if limit < 1:
        limit = DEFAULT_LIMIT
    limit = min(limit, MAX_LIMIT)
    offset = max(offset, 0)
    conditions = [Dataset.is_public == True]  # noqa: E712
    if field:
        conditions.append(Dataset.research_field == field.lower())
    if tag:
        conditions.append(Dataset.tags.contains(json.dumps(tag.lower()), autoescape=True))
    if search:
        pattern = f"%{escape_like(search)}%"
        conditions.append(or_(
            Dataset.title.ilike(pattern, escape="\\"),
            Dataset.description.ilike(pattern, escape="\\"),
            Dataset.file_name.ilike(pattern, escape="\\"),
        ))
    with Session(engine) as session:
        total = session.exec(select(func.count(Dataset.id)).where(*conditions)).one()
        rows = session.exec(
            select(Dataset).where(*conditions).order_by(Dataset.created_at.desc(), Dataset.id.desc())
            .offset(offset).limit(limit)
        ).all()
        return {
            "datasets": [serialize_dataset(d) for d in rows],
            "total": total,
            "limit": limit,
            "offset": offset,
            "has_more": total > offset + limit,
        }


@router.get("/mine")
def datasets_mine(user: User = Depends(get_current_user)):
    """All of the caller's uploads, public or not."""
    with Session(engine) as session:
        rows = session.exec(
            select(Dataset).where(Dataset.uploader_id == user.id).order_by(Dataset.created_at.desc())
        ).all()
        return {"success": True, "datasets": [serialize_dataset(d) for d in rows]}


@router.get("/{dataset_id}")
def dataset_detail(dataset_id: int):
    with Session(engine) as session:
        dataset = session.get(Dataset, dataset_id)
        if not dataset:
            raise HTTPException(status_code=404, detail="Dataset not found")
        dataset.view_count = (dataset.view_count or 0) + 1
        session.add(dataset)
        session.commit()
        session.refresh(dataset)
        return serialize_dataset(dataset)


@router.post("/{dataset_id}/download")
def dataset_download(dataset_id: int, user: User = Depends(get_current_user)):
    """Base64 file content. Paid datasets are not payment-checked and no payment body is read."""
    with Session(engine) as session:
        dataset = session.get(Dataset, dataset_id)
        if not dataset:
            raise HTTPException(status_code=404, detail="Dataset not found")
        data = read_stored_file(dataset.file_path)
        if data is None:
            raise HTTPException(status_code=404, detail="File not found")
        dataset.download_count = (dataset.download_count or 0) + 1
        dataset.updated_at = datetime.utcnow()
        session.add(dataset)
        session.commit()
        session.refresh(dataset)
        logger.info("Dataset %s downloaded by user %s", dataset_id, user.id)
        return {
            "success": True,
            "file_name": dataset.file_name,
            "file_data": base64.b64encode(data).decode("ascii"),
            "dataset": {
                "id": dataset.id,
                "title": dataset.title,
                "description": dataset.description,
                "uploader_id": dataset.uploader_id,
                "download_count": dataset.download_count,
            },
        }
