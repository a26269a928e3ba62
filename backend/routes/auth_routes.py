import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.auth.dependencies import actor_from_user, get_current_user
from backend.auth.passwords import verify_password
from backend.database import get_db
from backend.models.user import User

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError('Email is required.')
        return normalized


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'


class MeResponse(BaseModel):
    id: int
    email: str | None = None
    name: str | None = None
    role: str


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email).first()
    if user is None or not verify_password(data.password, user.hashed_password or ''):
        logger.warning('Failed login attempt for %s', data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Invalid email or password',
        )

    actor_from_user(user)  # rejects unknown roles
    token = jwt_handler.create_access_token(subject=str(user.id))
    return TokenResponse(access_token=token)


@router.get('/me', response_model=MeResponse)
def me(current_user: User = Depends(get_current_user)):
    actor = actor_from_user(current_user)
    return MeResponse(
        id=current_user.id,
        email=current_user.email,
        name=current_user.name,
        role=actor.role.value,
    )
