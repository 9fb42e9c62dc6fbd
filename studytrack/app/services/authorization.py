"""Role-based access rules.

Every predicate here is pure: it looks only at the caller and at data already
loaded by the service, performs no queries and never raises. Services combine
them with :func:`ensure`, which turns a failed check into ``ForbiddenError``.

Policy for forbidden-but-existing resources is uniform: services first load
the resource (``NotFoundError`` if it is missing) and then check access
(``ForbiddenError`` if the caller may not see it).
"""

from dataclasses import dataclass
from typing import Iterable

from studytrack.app.core.errors import ForbiddenError
from studytrack.app.core.roles import Role


@dataclass(frozen=True)
class Caller:
    """Authenticated identity on whose behalf a service call runs."""

    id: int
    role: Role

    @classmethod
    def from_user(cls, user) -> "Caller":
        return cls(id=user.id, role=Role(user.role))


def _is_staff(role: Role) -> bool:
    # Role() rejects values outside the closed set
    return Role(role).is_staff


def can_view_all_students(caller: Caller) -> bool:
    return _is_staff(caller.role)


def can_access_student(caller: Caller, parent_ids: Iterable[int]) -> bool:
    """Staff see every student, parents only their own children."""
    if _is_staff(caller.role):
        return True
    return caller.id in set(parent_ids)


def can_manage_students(caller: Caller) -> bool:
    return _is_staff(caller.role)


def can_view_curriculum(caller: Caller) -> bool:
    # Read-only access for every authenticated role
    return caller.role in (Role.SUPER_ADMIN, Role.ADMIN, Role.USER)


def can_manage_curriculum(caller: Caller) -> bool:
    return _is_staff(caller.role)


def can_view_progress(caller: Caller, student_parent_ids: Iterable[int]) -> bool:
    """A progress row is visible exactly when its student is."""
    return can_access_student(caller, student_parent_ids)


def can_write_progress(caller: Caller) -> bool:
    return _is_staff(caller.role)


def can_view_all_users(caller: Caller) -> bool:
    return caller.role is Role.SUPER_ADMIN


def can_view_user(caller: Caller, target_user_id: int) -> bool:
    return caller.role is Role.SUPER_ADMIN or caller.id == target_user_id


def can_update_user(caller: Caller, target_user_id: int) -> bool:
    return caller.role is Role.SUPER_ADMIN or caller.id == target_user_id


def can_manage_users(caller: Caller) -> bool:
    return caller.role is Role.SUPER_ADMIN


def can_change_role(caller: Caller) -> bool:
    return caller.role is Role.SUPER_ADMIN


def can_delete_user(caller: Caller) -> bool:
    return caller.role is Role.SUPER_ADMIN


def ensure(allowed: bool, message: str = "Forbidden") -> None:
    if not allowed:
        raise ForbiddenError(message)
