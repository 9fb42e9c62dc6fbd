"""Closed set of user roles."""

from enum import Enum


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    USER = "user"

    @property
    def is_staff(self) -> bool:
        return self in (Role.SUPER_ADMIN, Role.ADMIN)
