from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.auth.context import ActorContext, Role
from backend.database import get_db
from backend.models.user import User

security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except Exception as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    subject = payload.get("sub")
    if not subject or not str(subject).isdigit():
        raise HTTPException(status_code=401, detail="Invalid token subject")

    user = db.query(User).filter(User.id == int(subject)).first()
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def actor_from_user(user: User) -> ActorContext:
    try:
        role = Role((user.role or Role.USER.value).strip().lower())
    except ValueError as exc:
        raise HTTPException(status_code=401, detail="Invalid user role") from exc
    return ActorContext(actor_id=user.id, role=role)


def get_actor(current_user: User = Depends(get_current_user)) -> ActorContext:
    return actor_from_user(current_user)
