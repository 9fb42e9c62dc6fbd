"""User management for super admins, and self-service profile updates."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from studytrack.app.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from studytrack.app.core.roles import Role
from studytrack.app.core.security import get_password_hash
from studytrack.app.models.progress import Progress
from studytrack.app.models.user import User
from studytrack.app.services.authorization import (
    Caller,
    can_change_role,
    can_delete_user,
    can_manage_users,
    can_update_user,
    can_view_all_users,
    can_view_user,
    ensure,
)
from studytrack.app.services.common import check_password, clean_name, commit, normalize_email

logger = logging.getLogger(__name__)

USER_NAME_MAX = 50
DUPLICATE_EMAIL_MESSAGE = "Email already in use"


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User")
    return user


def email_taken(db: Session, email: str, exclude_user_id: Optional[int] = None) -> bool:
    query = db.query(User.id).filter(User.email == email)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def build_user(db: Session, *, name: str, email: str, password: str, role: Role) -> User:
    """Validate the fields of a new account and add it to the session."""
    cleaned_name = clean_name(name, "User", USER_NAME_MAX)
    cleaned_email = normalize_email(email)
    check_password(password)
    if email_taken(db, cleaned_email):
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
    user = User(
        name=cleaned_name,
        email=cleaned_email,
        hashed_password=get_password_hash(password),
        role=Role(role).value,
    )
    db.add(user)
    return user


def list_users(db: Session, *, caller: Caller) -> List[User]:
    if can_view_all_users(caller):
        return db.query(User).order_by(User.id.asc()).all()
    return [_get_user(db, caller.id)]


def get_user(db: Session, *, caller: Caller, user_id: int) -> User:
    user = _get_user(db, user_id)
    ensure(can_view_user(caller, user.id), "Access denied to this user")
    return user


def create_user(db: Session, *, caller: Caller, name: str, email: str, password: str, role: Role = Role.USER) -> User:
    ensure(can_manage_users(caller), "Access denied: requires super admin privileges")
    user = build_user(db, name=name, email=email, password=password, role=role)
    commit(db, conflict_message=DUPLICATE_EMAIL_MESSAGE, failure_message="Error creating user")
    db.refresh(user)
    logger.info("User %s created with role %s by user %s", user.id, user.role, caller.id)
    return user


def update_user(
    db: Session,
    *,
    caller: Caller,
    user_id: int,
    name: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
    role: Optional[Role] = None,
) -> User:
    user = _get_user(db, user_id)
    ensure(can_update_user(caller, user.id), "Access denied to this user")

    if role is not None and Role(role).value != user.role:
        if not can_change_role(caller):
            raise ForbiddenError("Only super admins can change user roles")
        if user.id == caller.id:
            raise ValidationError("Cannot change your own role")
        if Role(role) is not Role.USER:
            # Only parent accounts carry children
            for link in user.parent_links:
                db.delete(link)
        logger.info("User %s role changed from %s to %s by user %s", user.id, user.role, Role(role).value, caller.id)
        user.role = Role(role).value

    if name is not None:
        user.name = clean_name(name, "User", USER_NAME_MAX)
    if email is not None:
        cleaned_email = normalize_email(email)
        if email_taken(db, cleaned_email, exclude_user_id=user.id):
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE)
        user.email = cleaned_email
    if password is not None:
        user.hashed_password = get_password_hash(check_password(password))

    commit(db, conflict_message=DUPLICATE_EMAIL_MESSAGE, failure_message="Error updating user")
    db.refresh(user)
    logger.info("User %s updated by user %s", user.id, caller.id)
    return user


def delete_user(db: Session, *, caller: Caller, user_id: int) -> None:
    ensure(can_delete_user(caller), "Access denied: requires super admin privileges")
    user = _get_user(db, user_id)
    if user.id == caller.id:
        raise ValidationError("Cannot delete your own account")
    db.query(Progress).filter(Progress.updated_by_id == user.id).update(
        {Progress.updated_by_id: None}, synchronize_session=False
    )
    db.delete(user)
    commit(db, failure_message="Error deleting user")
    logger.info("User %s deleted by user %s", user_id, caller.id)
