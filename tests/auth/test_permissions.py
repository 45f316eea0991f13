"""Tests for auth permissions."""

from types import SimpleNamespace

import pytest

from src.auth.permissions import (
    ROLE_HIERARCHY,
    SYSTEM_PRINCIPAL,
    Principal,
    UserRole,
    can_modify,
    get_role_level,
    has_permission,
    is_author,
)


class TestUserRole:
    """Tests for UserRole enum."""

    def test_role_values(self) -> None:
        """Roles should have correct string values."""
        assert UserRole.USER.value == "user"
        assert UserRole.ADMIN.value == "admin"

    def test_all_roles_have_levels(self) -> None:
        """All UserRole members should have defined levels."""
        for role in UserRole:
            assert role in ROLE_HIERARCHY


class TestGetRoleLevel:
    """Tests for get_role_level function."""

    @pytest.mark.parametrize(
        "role,expected_level",
        [
            (UserRole.USER, 0),
            (UserRole.ADMIN, 1),
            ("user", 0),
            ("ADMIN", 1),
        ],
    )
    def test_levels(self, role: UserRole | str, expected_level: int) -> None:
        assert get_role_level(role) == expected_level

    def test_invalid_role_returns_zero(self) -> None:
        """Invalid roles should return level 0."""
        assert get_role_level("invalid") == 0
        assert get_role_level("superadmin") == 0


class TestHasPermission:
    """Tests for has_permission function."""

    def test_admin_has_all_permissions(self) -> None:
        assert has_permission(UserRole.ADMIN, UserRole.USER) is True
        assert has_permission(UserRole.ADMIN, UserRole.ADMIN) is True

    def test_user_permissions(self) -> None:
        """User should only have base access."""
        assert has_permission(UserRole.USER, UserRole.USER) is True
        assert has_permission(UserRole.USER, UserRole.ADMIN) is False


class TestOwnership:
    """Tests for the author-or-admin predicate."""

    @pytest.fixture
    def post(self) -> SimpleNamespace:
        return SimpleNamespace(author_id=7)

    def test_author(self, post) -> None:
        author = Principal(user_id=7, nickname="writer")
        assert is_author(author, post) is True
        assert can_modify(author, post) is True

    def test_stranger(self, post) -> None:
        stranger = Principal(user_id=8, nickname="reader")
        assert is_author(stranger, post) is False
        assert can_modify(stranger, post) is False

    def test_admin_overrides(self, post) -> None:
        admin = Principal(user_id=8, nickname="mod", role=UserRole.ADMIN)
        assert admin.is_admin is True
        assert can_modify(admin, post) is True

    def test_anonymous(self, post) -> None:
        assert is_author(None, post) is False
        assert can_modify(None, post) is False

    def test_system_principal_is_admin(self, post) -> None:
        assert SYSTEM_PRINCIPAL.is_admin is True
        assert can_modify(SYSTEM_PRINCIPAL, post) is True
