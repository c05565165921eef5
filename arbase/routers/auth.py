# SPDX-License-Identifier: Apache-2.0
"""Signup (with welcome points) and login."""
import logging

from fastapi import APIRouter, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from arbase.config import settings
from arbase.core.auth import EMAIL_RE, create_access_token, get_password_hash, password_problems, verify_password
from arbase.core.security import rate_limit, sanitize_text
from arbase.database import Session, engine
from arbase.models import User
from arbase.schemas import LoginRequest, SignupRequest
from arbase.services.points_service import award_points
from arbase.services.scoring_service import WELCOME_BONUS_POINTS

router = APIRouter(tags=["auth"])
logger = logging.getLogger("arbase.auth")


@router.post("/signup", status_code=201)
@rate_limit(settings.signup_rate_limit)
def signup(request: Request, body: SignupRequest):
    """Create an account and credit the welcome bonus."""
    email = body.email.strip().lower()
    details = []
    if not EMAIL_RE.match(email):
        details.append({"field": "email", "message": "Invalid email address"})
    details.extend({"field": "password", "message": m} for m in password_problems(body.password))
    if details:
        raise HTTPException(status_code=400, detail={"error": "Validation failed", "details": details})

    with Session(engine) as session:
        if session.exec(select(User.id).where(User.email == email)).first() is not None:
            raise HTTPException(status_code=409, detail="An account with this email already exists")
        user = User(
            email=email,
            full_name=sanitize_text(body.full_name, 200),
            hashed_password=get_password_hash(body.password),
            institution=sanitize_text(body.institution, 200),
            research_field=sanitize_text(body.research_field, 100),
            country=sanitize_text(body.country, 100),
            wallet_address=body.wallet_address,
        )
        session.add(user)
        try:
            session.flush()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=409, detail="An account with this email already exists")
        award_points(
            session,
            user.id,
            WELCOME_BONUS_POINTS,
            "signup_bonus",
            "Welcome bonus for new account",
        )
        session.commit()
        session.refresh(user)
        logger.info("User %s signed up", user.id)
        return {
            "success": True,
            "user": {"id": user.id, "email": user.email, "full_name": user.full_name},
            "rewards": {
                "welcome_points": WELCOME_BONUS_POINTS,
                "total_points": user.total_points,
            },
            "access_token": create_access_token({"sub": str(user.id)}),
            "token_type": "bearer",
            "message": f"Account created successfully! You earned {WELCOME_BONUS_POINTS} points!",
        }


@router.post("/login")
def login(body: LoginRequest):
    with Session(engine) as session:
        user = session.exec(select(User).where(User.email == body.email.strip().lower())).first()
    if user is None or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Incorrect email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is inactive")
    return {
        "success": True,
        "access_token": create_access_token({"sub": str(user.id)}),
        "token_type": "bearer",
    }
