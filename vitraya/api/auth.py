import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.orm import Session

from vitraya.core.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SECURE,
    create_access_token,
    create_session_token,
    decode_access_token,
    get_password_hash,
    session_max_age,
    verify_password,
)
from vitraya.db.models import User
from vitraya.db.session import get_db
from vitraya.services.firebase_auth import verify_id_token

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/auth", tags=["auth"])
session_router = APIRouter(prefix="/api/auth", tags=["auth"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    first_name: Optional[str] = Field(default=None, max_length=128)
    last_name: Optional[str] = Field(default=None, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id_token: Optional[str] = Field(default=None, alias="idToken")


class StatusResponse(BaseModel):
    status: str = "success"


class UserProfileResponse(BaseModel):
    id: int
    email: str
    auth_provider: str
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    photo_url: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime


def _bad_credentials() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _join_name(first_name: Optional[str], last_name: Optional[str]) -> Optional[str]:
    joined = " ".join(part.strip() for part in (first_name or "", last_name or "") if part and part.strip())
    return joined or None


def split_display_name(display_name: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    parts = (display_name or "").split()
    if not parts:
        return None, None
    return parts[0], " ".join(parts[1:]) or None


def set_session_cookie(response: Response, user: User) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_session_token(str(user.id)),
        max_age=int(session_max_age().total_seconds()),
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="strict",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="strict",
        path="/",
    )


def profile_response(user: User) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        auth_provider=user.auth_provider,
        display_name=user.display_name,
        first_name=user.first_name,
        last_name=user.last_name,
        photo_url=user.photo_url,
        phone=user.phone,
        bio=user.bio,
        created_at=user.created_at,
    )


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the caller from a bearer token, falling back to the session cookie."""
    credential = token or request.cookies.get(SESSION_COOKIE_NAME)
    if not credential:
        raise _bad_credentials()
    try:
        user_id = int(decode_access_token(credential))
    except (JWTError, ValueError):
        raise _bad_credentials()

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise _bad_credentials()
    return user


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)) -> TokenResponse:
    existing = db.query(User).filter(User.email == payload.email.lower()).first()
    if existing:
        raise HTTPException(status_code=409, detail="Email already registered")

    first_name = (payload.first_name or "").strip() or None
    last_name = (payload.last_name or "").strip() or None
    user = User(
        email=payload.email.lower(),
        password_hash=get_password_hash(payload.password),
        auth_provider="password",
        first_name=first_name,
        last_name=last_name,
        display_name=_join_name(first_name, last_name),
    )
    db.add(user)
    db.commit()

    token = create_access_token(
        subject=str(user.id), expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return TokenResponse(access_token=token)


@router.post("/login", response_model=TokenResponse)
def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> TokenResponse:
    user = db.query(User).filter(User.email == form_data.username.lower()).first()
    if not user or not verify_password(form_data.password, user.password_hash):
        raise _bad_credentials()

    user.last_login_at = datetime.utcnow()
    db.commit()

    set_session_cookie(response, user)
    token = create_access_token(
        subject=str(user.id), expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return TokenResponse(access_token=token)


@router.post("/logout", response_model=StatusResponse)
def logout(response: Response) -> StatusResponse:
    clear_session_cookie(response)
    return StatusResponse()


@router.get("/me", response_model=UserProfileResponse)
def me(user: User = Depends(get_current_user)) -> UserProfileResponse:
    return profile_response(user)


def _upsert_google_user(db: Session, claims: dict) -> User:
    uid = str(claims.get("uid") or claims.get("sub") or "").strip()
    email = str(claims.get("email") or "").strip().lower()
    if not uid or not email:
        raise HTTPException(status_code=401, detail="Failed to create session")

    user = db.query(User).filter(User.firebase_uid == uid).first()
    if not user:
        user = db.query(User).filter(User.email == email).first()
    if not user:
        display_name = (claims.get("name") or "").strip() or None
        first_name, last_name = split_display_name(display_name)
        user = User(
            email=email,
            auth_provider="google",
            display_name=display_name,
            first_name=first_name,
            last_name=last_name,
            photo_url=claims.get("picture"),
        )
        db.add(user)
    user.firebase_uid = uid
    user.last_login_at = datetime.utcnow()
    db.commit()
    return user


@session_router.post("/session", response_model=StatusResponse)
def create_session(
    payload: SessionRequest, response: Response, db: Session = Depends(get_db)
) -> StatusResponse:
    id_token = (payload.id_token or "").strip()
    if not id_token:
        raise HTTPException(status_code=400, detail="ID token is required")

    claims = verify_id_token(id_token)
    if not claims:
        raise HTTPException(status_code=401, detail="Failed to create session")

    user = _upsert_google_user(db, claims)
    logger.info("session_created user_id=%s provider=%s", user.id, user.auth_provider)
    set_session_cookie(response, user)
    return StatusResponse()
