from __future__ import annotations

from datetime import datetime, timezone

import pytest

from fakes import MANAGER_ID, STAFF_ID
from staff_reporting.core.enums import ErrorCode, Role
from staff_reporting.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError

NOW = datetime(2026, 2, 10, 0, 0, tzinfo=timezone.utc)


def test_login_records_access(container, repos):
    user = container.auth_service.authenticate(" AOKI@example.com ", "staff123", ip_address="10.0.0.5", now=NOW)

    assert user.user_id == STAFF_ID
    assert user.role is Role.STAFF
    [log] = repos["access_logs_repo"].rows
    assert log.ip_address == "10.0.0.5"
    assert log.login_time == NOW

    container.auth_service.logout(STAFF_ID, now=NOW)
    assert repos["access_logs_repo"].rows[0].logout_time == NOW


@pytest.mark.parametrize("email,password", [("aoki@example.com", "wrong"), ("nobody@example.com", "staff123")])
def test_bad_credentials(container, email, password):
    with pytest.raises(AuthenticationError) as exc:
        container.auth_service.authenticate(email, password)
    assert exc.value.message == "Invalid email or password"


def test_placeholder_hash_never_matches(container, repos):
    repos["users_repo"].create_user(full_name="Seeded", email="seed@example.com", password_hash="CHANGE_ME", role=Role.STAFF)

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("seed@example.com", "CHANGE_ME")


def test_inactive_staff_cannot_log_in(container):
    container.user_service.set_active(current_role=Role.MANAGER, user_id=STAFF_ID, is_active=False)

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("aoki@example.com", "staff123")


def test_register_staff(container, repos):
    uid = container.user_service.register_staff(
        current_role=Role.MANAGER, full_name="Chiba Staff", email="Chiba@Example.com", password="secret1"
    )

    user = repos["users_repo"].get_by_id(uid)
    assert user.email == "chiba@example.com"
    assert user.role is Role.STAFF
    assert container.auth_service.authenticate("chiba@example.com", "secret1").user_id == uid


def test_register_staff_rules(container):
    svc = container.user_service

    with pytest.raises(AuthorizationError):
        svc.register_staff(current_role=Role.STAFF, full_name="X", email="x@example.com", password="secret1")
    with pytest.raises(ValidationError) as exc:
        svc.register_staff(current_role=Role.MANAGER, full_name="X", email="aoki@example.com", password="secret1")
    assert exc.value.code is ErrorCode.INVALID_FORMAT
    with pytest.raises(ValidationError):
        svc.register_staff(current_role=Role.MANAGER, full_name="X", email="x@example.com", password="123")


def test_flags_only_apply_to_staff(container, repos):
    svc = container.user_service

    svc.set_next_day_active(current_role=Role.MANAGER, user_id=STAFF_ID, next_day_active=False)
    assert repos["users_repo"].get_by_id(STAFF_ID).next_day_active is False

    with pytest.raises(NotFoundError):
        svc.set_active(current_role=Role.MANAGER, user_id=MANAGER_ID, is_active=False)
    with pytest.raises(AuthorizationError):
        svc.set_active(current_role=Role.STAFF, user_id=STAFF_ID, is_active=False)


def test_list_staff_is_sorted_by_name(container):
    assert [u.full_name for u in container.user_service.list_staff()] == ["Aoki Staff", "Baba Staff"]
