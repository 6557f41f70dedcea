import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wedsnap.database import get_db
from wedsnap.dependencies import get_current_couple
from wedsnap.models.user import User
from wedsnap.schemas.auth import CoupleResponse, LoginRequest, LoginResponse, SignupRequest
from wedsnap.services.security import create_access_token, hash_password, verify_password
from wedsnap.utils.exceptions import AppException, ConflictError
from wedsnap.utils.response import success_response

router = APIRouter(prefix="/auth", tags=["auth"])


def _normalize_email(email: str) -> str:
    return email.strip().lower()


@router.post("/signup", status_code=201)
async def signup(request: SignupRequest, db: AsyncSession = Depends(get_db)):
    email = _normalize_email(request.email)
    result = await db.execute(select(User).where(User.email == email))
    if result.scalars().first() is not None:
        raise ConflictError("An account with this email already exists")

    user = User(
        id=str(uuid.uuid4()),
        email=email,
        password_hash=hash_password(request.password),
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    db.add(user)
    await db.commit()

    return success_response(
        data=LoginResponse(
            user_id=user.id, email=user.email, access_token=create_access_token(user.id)
        ).model_dump(),
        message="Account created",
    )


@router.post("/login")
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == _normalize_email(request.email)))
    user = result.scalars().first()

    if user is None:
        raise AppException("Invalid credentials", status_code=400)

    if not verify_password(request.password, user.password_hash):
        raise AppException("Invalid credentials", status_code=400)

    return success_response(
        data=LoginResponse(
            user_id=user.id, email=user.email, access_token=create_access_token(user.id)
        ).model_dump()
    )


@router.get("/me")
async def me(couple: User = Depends(get_current_couple)):
    return success_response(data=CoupleResponse.model_validate(couple).model_dump())
