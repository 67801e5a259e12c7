"""Role-based access control for learntrack.

Hierarchical roles, carried in the access token issued by the identity
service:
- ADMIN (level 3): Runs maintenance tasks such as the relation backfill
- TEACHER (level 2): Arranges course modules and module lessons
- STUDENT (level 1): Learner with course access
- USER (level 0): Registered user
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles with hierarchical levels. Higher level = more permissions."""

    USER = "user"
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.USER: 0,
    UserRole.STUDENT: 1,
    UserRole.TEACHER: 2,
    UserRole.ADMIN: 3,
}


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role (0 for unknown roles)."""
    if isinstance(role, str):
        try:
            role = UserRole(role)
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.TEACHER)
        True
        >>> has_permission("student", "teacher")
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)
