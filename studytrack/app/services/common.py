"""Helpers shared by the service modules: input cleaning and commits."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from studytrack.app.core.errors import ConflictError, ServerError, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def clean_name(value: Optional[str], label: str, max_length: int) -> str:
    """Strip a display name and reject empty or oversized values."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{label} name is required")
    if len(cleaned) > max_length:
        raise ValidationError(f"{label} name cannot be more than {max_length} characters")
    return cleaned


def normalize_email(email: Optional[str]) -> str:
    cleaned = (email or "").strip().lower()
    if not cleaned:
        raise ValidationError("Email is required")
    return cleaned


def check_password(password: Optional[str]) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def commit(db: Session, *, conflict_message: str = "Resource already exists", failure_message: str = "Database error") -> None:
    """Commit the session; roll back and translate store errors on failure.

    A uniqueness violation becomes ``ConflictError``; any other store error is
    logged and becomes ``ServerError``. Either way nothing of the unit of work
    is persisted.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity error: %s", conflict_message)
        raise ConflictError(conflict_message) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(failure_message)
        raise ServerError(failure_message) from exc
