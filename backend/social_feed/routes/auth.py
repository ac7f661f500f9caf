import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from ..auth import hash_password, verify_password, generate_access_token, get_current_user
from ..config import Settings
from ..database import get_db_async, get_settings
from ..errors import AuthenticationError, ConflictError
from ..models import User
from ..schemas import AuthOut, LoginIn, RegisterIn, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

def to_user_out(u: User) -> UserOut:
    return UserOut(
        id=u.id,
        username=u.username,
        email=u.email,
        avatar_url=u.avatar_url,
        bio=u.bio or "",
        created_at=u.created_at,
    )

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=AuthOut)
async def register(payload: RegisterIn, db: AsyncSession = Depends(get_db_async), settings: Settings = Depends(get_settings)):
    existing = await db.scalar(select(User).where(User.email == payload.email))
    if existing:
        raise ConflictError("Email already registered")

    u = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        avatar_url=payload.avatar_url,
        bio=payload.bio.strip(),
    )
    db.add(u)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already registered")
    await db.refresh(u)

    logger.info("registered user %s", u.id)
    return AuthOut(
        message="User registered successfully",
        user=to_user_out(u),
        token=generate_access_token(u.id, settings),
    )

@router.post("/login", response_model=AuthOut)
async def login(payload: LoginIn, db: AsyncSession = Depends(get_db_async), settings: Settings = Depends(get_settings)):
    u = await db.scalar(select(User).where(User.email == payload.email.strip().lower()))
    if not u or not verify_password(payload.password, u.password_hash):
        raise AuthenticationError("Invalid credentials")

    logger.info("user %s logged in", u.id)
    return AuthOut(
        message="Login successful",
        user=to_user_out(u),
        token=generate_access_token(u.id, settings),
    )

@router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return {"user": to_user_out(current_user)}
