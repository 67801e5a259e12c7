"""Tests for auth permissions."""

import pytest

from learntrack.auth.permissions import (
    ROLE_HIERARCHY,
    UserRole,
    get_role_level,
    has_permission,
)


class TestUserRole:
    """Tests for UserRole enum."""

    def test_role_hierarchy(self) -> None:
        """Roles should have correct hierarchy levels."""
        assert ROLE_HIERARCHY[UserRole.USER] == 0
        assert ROLE_HIERARCHY[UserRole.STUDENT] == 1
        assert ROLE_HIERARCHY[UserRole.TEACHER] == 2
        assert ROLE_HIERARCHY[UserRole.ADMIN] == 3

    def test_all_roles_have_levels(self) -> None:
        for role in UserRole:
            assert role in ROLE_HIERARCHY


class TestGetRoleLevel:
    """Tests for get_role_level function."""

    @pytest.mark.parametrize(
        "role,expected_level",
        [
            ("user", 0),
            ("student", 1),
            ("teacher", 2),
            ("admin", 3),
        ],
    )
    def test_string_roles(self, role: str, expected_level: int) -> None:
        """Should accept role names as strings."""
        assert get_role_level(role) == expected_level

    def test_unknown_role(self) -> None:
        """Unknown roles get the lowest level."""
        assert get_role_level("superuser") == 0


class TestHasPermission:
    """Tests for has_permission function."""

    @pytest.mark.parametrize(
        "user_role,required,expected",
        [
            (UserRole.ADMIN, UserRole.TEACHER, True),
            (UserRole.TEACHER, UserRole.TEACHER, True),
            (UserRole.STUDENT, UserRole.TEACHER, False),
            (UserRole.TEACHER, UserRole.ADMIN, False),
            ("student", "user", True),
        ],
    )
    def test_hierarchy(self, user_role, required, expected: bool) -> None:
        assert has_permission(user_role, required) is expected
