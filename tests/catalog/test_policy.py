"""Tests for the product access policy."""

import pytest

from catalog_api.catalog.policy import Decision, authorize
from catalog_api.domain.entities import Role, new_id


class TestAuthorize:
    """Tests for authorize."""

    @pytest.mark.parametrize("owner_id", [new_id(), "someone-else", "", None, 42])
    def test_admin_always_allowed(self, owner_id: object) -> None:
        """Admins may mutate any product."""
        assert authorize(new_id(), Role.ADMIN, owner_id) is Decision.ALLOW

    def test_admin_role_as_string(self) -> None:
        """Role given as its string value is honored."""
        assert authorize("u1", "admin", "u2") is Decision.ALLOW

    def test_owner_allowed(self) -> None:
        """Users may mutate their own products."""
        user_id = new_id()
        assert authorize(user_id, Role.USER, user_id) is Decision.ALLOW

    def test_other_user_denied(self) -> None:
        """Users may not mutate products owned by others."""
        assert authorize(new_id(), Role.USER, new_id()) is Decision.DENY

    @pytest.mark.parametrize(
        ("caller_id", "owner_id"),
        [
            (None, None),
            ("", ""),
            (None, "u1"),
            ("u1", None),
            (1, "1"),
            ("1", 1),
        ],
    )
    def test_absent_or_mismatched_ids_denied(self, caller_id: object, owner_id: object) -> None:
        """Absent ids and ids of different types never match."""
        assert authorize(caller_id, Role.USER, owner_id) is Decision.DENY

    @pytest.mark.parametrize("role", [None, "", "superuser", "ADMIN", 7])
    def test_unknown_roles_need_ownership(self, role: object) -> None:
        """Anything but the admin role falls back to the ownership check."""
        assert authorize("u1", role, "u2") is Decision.DENY
        assert authorize("u1", role, "u1") is Decision.ALLOW
