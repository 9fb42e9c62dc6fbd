"""Authentication dependencies resolving the caller of a request."""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from studytrack.app.core.errors import UnauthorizedError
from studytrack.app.core.security import decode_access_token
from studytrack.app.db.session import get_db
from studytrack.app.models.user import User
from studytrack.app.services.authorization import Caller


def get_current_user(db: Session = Depends(get_db), authorization: str | None = Header(default=None)) -> User:
    # Expect Authorization: Bearer <token>
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Authentication failed: No token provided")
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise UnauthorizedError(f"Authentication failed: {exc}") from exc

    try:
        user_id_int = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Authentication failed: Invalid token") from None

    user = db.query(User).filter(User.id == user_id_int).first()
    if not user:
        raise UnauthorizedError("Authentication failed: User not found")
    return user


def get_current_caller(current_user: User = Depends(get_current_user)) -> Caller:
    """The role is read from the database so a role change applies at once."""
    return Caller.from_user(current_user)
