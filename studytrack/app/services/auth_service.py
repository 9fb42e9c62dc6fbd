"""Identity operations: first-run setup, registration, login and refresh."""

import logging

from sqlalchemy.orm import Session

from studytrack.app.core.errors import ConflictError, UnauthorizedError
from studytrack.app.core.roles import Role
from studytrack.app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
)
from studytrack.app.models.setup_state import SETUP_ROW_ID, SetupState
from studytrack.app.models.user import User
from studytrack.app.schemas.auth import AuthResponse, TokenPair
from studytrack.app.schemas.user import UserRead
from studytrack.app.services.authorization import Caller
from studytrack.app.services.common import commit, normalize_email
from studytrack.app.services.user_service import DUPLICATE_EMAIL_MESSAGE, build_user

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
SETUP_DONE_MESSAGE = "Setup already completed. Users already exist in the system."

_dummy_hash = None


def _burn_password_check(password: str) -> None:
    """Spend the same hashing effort for unknown emails as for real ones."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = get_password_hash("not-a-real-password")
    verify_password(password, _dummy_hash)


def issue_tokens(user: User) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(user.id, email=user.email, role=user.role),
        refresh_token=create_refresh_token(user.id, email=user.email, role=user.role),
    )


def _auth_response(user: User) -> AuthResponse:
    tokens = issue_tokens(user)
    return AuthResponse(
        user=UserRead.model_validate(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


def setup(db: Session, *, name: str, email: str, password: str) -> AuthResponse:
    """Create the first super admin. Only allowed while no user exists."""
    if db.query(User.id).first() is not None:
        raise ConflictError(SETUP_DONE_MESSAGE)
    user = build_user(db, name=name, email=email, password=password, role=Role.SUPER_ADMIN)
    db.add(SetupState(id=SETUP_ROW_ID))
    commit(db, conflict_message=SETUP_DONE_MESSAGE, failure_message="Error during setup")
    db.refresh(user)
    logger.info("Initial super admin %s created", user.id)
    return _auth_response(user)


def register(db: Session, *, name: str, email: str, password: str) -> AuthResponse:
    """Public self-registration; always yields a parent account."""
    user = build_user(db, name=name, email=email, password=password, role=Role.USER)
    commit(db, conflict_message=DUPLICATE_EMAIL_MESSAGE, failure_message="Error registering user")
    db.refresh(user)
    logger.info("User %s registered", user.id)
    return _auth_response(user)


def login(db: Session, *, email: str, password: str) -> AuthResponse:
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user:
        _burn_password_check(password)
    if not user or not verify_password(password, user.hashed_password):
        logger.info("Failed login attempt")
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
    logger.info("User %s logged in", user.id)
    return _auth_response(user)


def refresh(db: Session, *, refresh_token: str) -> TokenPair:
    try:
        payload = decode_refresh_token(refresh_token)
    except ValueError as exc:
        raise UnauthorizedError(f"Authentication failed: {exc}") from exc
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Authentication failed: Invalid token") from None
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UnauthorizedError("User not found")
    return issue_tokens(user)


def logout(*, caller: Caller) -> None:
    # Tokens are stateless; the client drops them
    logger.info("User %s logged out", caller.id)


def get_self(db: Session, *, caller: Caller) -> User:
    user = db.query(User).filter(User.id == caller.id).first()
    if not user:
        raise UnauthorizedError("User not found")
    return user
