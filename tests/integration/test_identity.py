"""Integration tests for identity_service: login protection, MFA and admin tools."""

import uuid
from datetime import timedelta

import pyotp
import pytest
from libs.common.datetime_utils import utc_now
from services.identity_service.app.main import app
from services.identity_service.models import AuditLog, Profile, UserRole
from sqlalchemy import select
from tests.conftest import make_user, override_auth


# ---------------------------------------------------------------------------
# Pre-login check and attempt tracking
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pre_login_check_unknown_email(identity_client):
    response = await identity_client.post(
        "/auth/pre-login-check", json={"email": "nobody@example.com"}
    )
    assert response.status_code == 200
    assert response.json() == {"userExists": False, "canProceed": True}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pre_login_check_requires_email(identity_client):
    response = await identity_client.post("/auth/pre-login-check", json={"email": "  "})
    assert response.status_code == 400
    assert response.json() == {"error": "Email is required"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pre_login_check_is_case_insensitive(identity_client, db_session):
    user = await make_user(db_session, email="Jane.Doe@Example.com")
    response = await identity_client.post(
        "/auth/pre-login-check", json={"email": "jane.doe@example.com"}
    )
    data = response.json()
    assert data["canProceed"] is True
    assert data["userId"] == str(user.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pre_login_check_reports_lock(identity_client, db_session):
    user = await make_user(
        db_session, account_locked_until=utc_now() + timedelta(minutes=10)
    )
    response = await identity_client.post("/auth/pre-login-check", json={"email": user.email})
    data = response.json()
    assert data["canProceed"] is False
    assert data["reason"] == "locked"
    assert data["minutesRemaining"] == 10


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pre_login_check_inactive_user(identity_client, db_session):
    user = await make_user(db_session, is_active=False)
    response = await identity_client.post("/auth/pre-login-check", json={"email": user.email})
    assert response.json()["reason"] == "inactive"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_failed_attempt_increments_and_locks(identity_client, db_session):
    user = await make_user(db_session, failed_login_attempts=4)
    response = await identity_client.post(
        "/auth/update-login-attempts",
        json={"userId": str(user.id), "increment": True, "shouldLock": True},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["failedAttempts"] == 5
    assert data["accountLockedUntil"] is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reset_attempts_requires_own_token(identity_client, db_session):
    user = await make_user(db_session, failed_login_attempts=3)
    payload = {"userId": str(user.id), "reset": True}

    response = await identity_client.post("/auth/update-login-attempts", json=payload)
    assert response.status_code == 401

    with override_auth(app, user):
        response = await identity_client.post("/auth/update-login-attempts", json=payload)
    assert response.status_code == 200
    assert response.json()["failedAttempts"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_attempts_validates_input(identity_client):
    response = await identity_client.post(
        "/auth/update-login-attempts", json={"userId": "bad", "increment": True}
    )
    assert response.status_code == 400
    response = await identity_client.post(
        "/auth/update-login-attempts", json={"userId": str(uuid.uuid4())}
    )
    assert response.json() == {"error": "Must specify either reset or increment"}


# ---------------------------------------------------------------------------
# Session redirect
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_session_redirect_requires_auth(identity_client):
    response = await identity_client.get("/auth/session-redirect")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_session_redirect_for_background_checker(identity_client, db_session):
    user = await make_user(db_session, UserRole.BACKGROUND_CHECKER)
    with override_auth(app, user):
        response = await identity_client.get("/auth/session-redirect")
    assert response.json() == {
        "redirectPath": "/email-mfa-setup",
        "mfaMethod": "email",
        "role": "backgroundchecker",
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_session_redirect_after_mfa(identity_client, db_session):
    user = await make_user(db_session, UserRole.HR, mfa_enabled=True)
    with override_auth(app, user):
        response = await identity_client.get(
            "/auth/session-redirect", params={"mfa_verified": "true"}
        )
    assert response.json()["redirectPath"] == "/hr-dashboard"


# ---------------------------------------------------------------------------
# MFA
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_totp_enrolment_and_login(identity_client, db_session):
    user = await make_user(db_session, UserRole.MANAGER)
    with override_auth(app, user):
        setup = await identity_client.post("/auth/mfa/setup")
        assert setup.status_code == 200
        secret = setup.json()["secret"]
        assert setup.json()["qrCode"].startswith("data:image/png;base64,")

        bad = await identity_client.post(
            "/auth/mfa/verify", json={"code": "000000", "secret": "JBSWY3DPEHPK3PXP"}
        )
        assert bad.status_code == 400

        confirm = await identity_client.post(
            "/auth/mfa/verify", json={"code": pyotp.TOTP(secret).now(), "secret": secret}
        )
        assert confirm.status_code == 200
        backup_codes = confirm.json()["backupCodes"]
        assert len(backup_codes) == 10

        login = await identity_client.post(
            "/auth/mfa/verify-login", json={"code": pyotp.TOTP(secret).now()}
        )
        assert login.status_code == 200
        assert login.json() == {"success": True, "redirectPath": "/dashboard"}

        backup = await identity_client.post(
            "/auth/mfa/verify-login", json={"code": backup_codes[0], "isBackupCode": True}
        )
        assert backup.status_code == 200
        reused = await identity_client.post(
            "/auth/mfa/verify-login", json={"code": backup_codes[0], "isBackupCode": True}
        )
        assert reused.status_code == 400

    assert user.profile.mfa_secret != secret
    assert backup_codes[0] not in user.profile.backup_codes


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verify_login_rejects_malformed_code(identity_client, db_session):
    user = await make_user(db_session)
    with override_auth(app, user):
        response = await identity_client.post("/auth/mfa/verify-login", json={"code": "12ab"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid code format"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_email_login_code_flow(identity_client, db_session, monkeypatch):
    sent = {}

    async def _fake_send(email, code, ttl_minutes):
        sent["code"] = code
        return True

    monkeypatch.setattr(
        "services.identity_service.services.mfa.send_mfa_login_code_email", _fake_send
    )
    user = await make_user(db_session, UserRole.BACKGROUND_CHECKER)
    with override_auth(app, user):
        response = await identity_client.post("/auth/mfa/send-login-code")
        assert response.status_code == 200
        assert user.mfa_login_code != sent["code"]

        wrong = "000000" if sent["code"] != "000000" else "111111"
        response = await identity_client.post(
            "/auth/mfa/verify-login-code", json={"code": wrong}
        )
        assert response.status_code == 400

        response = await identity_client.post(
            "/auth/mfa/verify-login-code", json={"code": sent["code"]}
        )
    assert response.status_code == 200
    assert response.json()["redirectPath"] == "/background-checks"
    assert user.mfa_login_code is None
    assert user.profile.mfa_enabled is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_email_login_code_send_failure(identity_client, db_session):
    user = await make_user(db_session, UserRole.BACKGROUND_CHECKER)
    with override_auth(app, user):
        response = await identity_client.post("/auth/mfa/send-login-code")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to send verification code"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_expired_email_code(identity_client, db_session):
    user = await make_user(
        db_session,
        mfa_login_code="hash",
        mfa_login_code_expires_at=utc_now() - timedelta(minutes=1),
    )
    with override_auth(app, user):
        response = await identity_client.post(
            "/auth/mfa/verify-login-code", json={"code": "123456"}
        )
    assert response.json() == {
        "error": "Verification code has expired. Please request a new code."
    }


# ---------------------------------------------------------------------------
# Admin tools
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reset_password_requires_exec(identity_client, db_session):
    actor = await make_user(db_session, UserRole.HR)
    with override_auth(app, actor):
        response = await identity_client.post(
            "/users/reset-password", json={"userId": str(uuid.uuid4())}
        )
    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized: Admin/Exec access required"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reset_password_issues_temporary_password(
    identity_client, db_session, monkeypatch
):
    updated = {}

    async def _fake_get_auth_user(user_id):
        return object()

    async def _fake_update(user_id, password):
        updated[user_id] = password

    monkeypatch.setattr(
        "services.identity_service.services.accounts.get_auth_user", _fake_get_auth_user
    )
    monkeypatch.setattr(
        "services.identity_service.services.accounts.update_auth_password", _fake_update
    )
    actor = await make_user(db_session, UserRole.EXEC)
    target = await make_user(db_session, first_name="Ada", mfa_enabled=True)

    with override_auth(app, actor):
        response = await identity_client.post(
            "/users/reset-password", json={"userId": str(target.id)}
        )

    assert response.status_code == 200, response.text
    data = response.json()
    assert len(data["temporaryPassword"]) == 16
    assert updated[str(target.id)] == data["temporaryPassword"]
    assert data["firstName"] == "Ada"
    assert data["emailSent"] is False
    assert target.is_temporary_password is True
    assert target.profile.mfa_enabled is False

    logs = (await db_session.execute(select(AuditLog))).scalars().all()
    assert [log.action for log in logs] == ["password_reset_by_admin"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_users_for_hr(identity_client, db_session):
    hr = await make_user(db_session, UserRole.HR)
    await make_user(db_session, UserRole.VENDOR, first_name="Vera")
    with override_auth(app, hr):
        response = await identity_client.get("/users", params={"role": "vendor"})
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["users"][0]["first_name"] == "Vera"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_cannot_list_users(identity_client, db_session):
    vendor = await make_user(db_session)
    with override_auth(app, vendor):
        response = await identity_client.get("/users")
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_role_change_is_audited(identity_client, db_session):
    actor = await make_user(db_session, UserRole.ADMIN)
    target = await make_user(db_session)
    with override_auth(app, actor):
        response = await identity_client.patch(
            f"/users/{target.id}/role", json={"role": "manager"}
        )
        assert response.json()["role"] == "manager"
        audit = await identity_client.get("/audit", params={"action": "user_role_changed"})
    entries = audit.json()
    assert len(entries) == 1
    assert entries[0]["metadata"]["to"] == "manager"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_setup_verification_rejects_wrong_code(identity_client, db_session):
    user = await make_user(db_session, UserRole.MANAGER)
    secret = pyotp.random_base32()
    current = pyotp.TOTP(secret).now()
    wrong = "000000" if current != "000000" else "111111"
    with override_auth(app, user):
        response = await identity_client.post(
            "/auth/mfa/verify", json={"code": wrong, "secret": secret}
        )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid verification code. Please try again."}
    assert user.profile.mfa_enabled is False

    logs = (await db_session.execute(select(AuditLog))).scalars().all()
    assert [(log.action, log.success) for log in logs] == [("mfa_verification_failed", False)]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_backup_login_without_remaining_codes(identity_client, db_session):
    user = await make_user(db_session, mfa_enabled=True, backup_codes=[])
    with override_auth(app, user):
        response = await identity_client.post(
            "/auth/mfa/verify-login", json={"code": "ABCD1234", "isBackupCode": True}
        )
    assert response.status_code == 400
    assert response.json() == {"error": "No backup codes available"}


# ---------------------------------------------------------------------------
# Password changes and recovery
# ---------------------------------------------------------------------------


@pytest.fixture
def auth_passwords(monkeypatch):
    """Stand-in for the Supabase auth calls; ``current`` is the accepted password."""
    state = {"current": "OldPass1!", "updated": {}, "reset_emails": []}

    async def _verify(email, password):
        return password == state["current"]

    async def _update(user_id, password):
        state["updated"][user_id] = password

    async def _send_reset(email, redirect_to):
        state["reset_emails"].append((email, redirect_to))

    module = "services.identity_service.services.accounts"
    monkeypatch.setattr(f"{module}.verify_auth_password", _verify)
    monkeypatch.setattr(f"{module}.update_auth_password", _update)
    monkeypatch.setattr(f"{module}.send_password_reset_email", _send_reset)
    return state


@pytest.mark.asyncio
@pytest.mark.integration
async def test_change_password_clears_temporary_flags(
    identity_client, db_session, auth_passwords
):
    user = await make_user(
        db_session,
        is_temporary_password=True,
        must_change_password=True,
        password_expires_at=utc_now() + timedelta(days=7),
    )
    with override_auth(app, user):
        response = await identity_client.post(
            "/auth/change-password",
            json={"currentPassword": "OldPass1!", "newPassword": "NewPass2@"},
        )
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Password updated successfully"}
    assert auth_passwords["updated"] == {str(user.id): "NewPass2@"}
    assert user.is_temporary_password is False
    assert user.must_change_password is False
    assert user.password_expires_at is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_change_password_wrong_current_password(
    identity_client, db_session, auth_passwords
):
    user = await make_user(db_session)
    with override_auth(app, user):
        response = await identity_client.post(
            "/auth/change-password",
            json={"currentPassword": "Guess1!x", "newPassword": "NewPass2@"},
        )
    assert response.status_code == 400
    assert response.json() == {"error": "Current password is incorrect"}
    assert auth_passwords["updated"] == {}

    logs = (await db_session.execute(select(AuditLog))).scalars().all()
    assert [log.action for log in logs] == ["password_change_failed"]


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "body, error",
    [
        ({"newPassword": "NewPass2@"}, "Current password is required"),
        ({"currentPassword": "OldPass1!"}, "New password is required"),
        (
            {"currentPassword": "OldPass1!", "newPassword": "OldPass1!"},
            "New password must be different from current password",
        ),
        (
            {"currentPassword": "OldPass1!", "newPassword": "short"},
            "Password must be at least 8 characters long",
        ),
    ],
)
async def test_change_password_validation(
    identity_client, db_session, auth_passwords, body, error
):
    user = await make_user(db_session)
    with override_auth(app, user):
        response = await identity_client.post("/auth/change-password", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": error}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_forgot_password_hides_unknown_accounts(identity_client, auth_passwords):
    response = await identity_client.post(
        "/auth/forgot-password", json={"email": "nobody@example.com"}
    )
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert auth_passwords["reset_emails"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_forgot_password_sends_reset_link(identity_client, db_session, auth_passwords):
    user = await make_user(db_session)
    response = await identity_client.post("/auth/forgot-password", json={"email": user.email})
    assert response.status_code == 200
    assert auth_passwords["reset_emails"] == [
        (user.email, "http://localhost:3000/reset-password")
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_forgot_password_refused_for_temporary_password(
    identity_client, db_session, auth_passwords
):
    user = await make_user(db_session, is_temporary_password=True)
    response = await identity_client.post("/auth/forgot-password", json={"email": user.email})
    assert response.status_code == 403
    assert "temporary password" in response.json()["error"]
    assert auth_passwords["reset_emails"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_recover_password_clears_flags(identity_client, db_session):
    user = await make_user(
        db_session, must_change_password=True, failed_login_attempts=3
    )
    with override_auth(app, user):
        response = await identity_client.post("/auth/recover-password")
    assert response.json() == {"success": True}
    assert user.must_change_password is False
    assert user.failed_login_attempts == 0

    logs = (await db_session.execute(select(AuditLog))).scalars().all()
    assert [log.action for log in logs] == ["password_recovered"]


# ---------------------------------------------------------------------------
# Deactivation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_hr_deactivates_user(identity_client, db_session):
    hr = await make_user(db_session, UserRole.HR)
    target = await make_user(db_session)
    with override_auth(app, hr):
        response = await identity_client.post(f"/users/{target.id}/deactivate")
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert target.is_active is False

    check = await identity_client.post("/auth/pre-login-check", json={"email": target.email})
    assert check.json()["reason"] == "inactive"

    logs = (await db_session.execute(select(AuditLog))).scalars().all()
    assert [log.action for log in logs] == ["user_deactivated"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_cannot_deactivate(identity_client, db_session):
    vendor = await make_user(db_session)
    target = await make_user(db_session)
    with override_auth(app, vendor):
        response = await identity_client.post(f"/users/{target.id}/deactivate")
    assert response.status_code == 403
    assert target.is_active is True


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_profile_loads_its_user_eagerly(db_session):
    user = await make_user(db_session, first_name="Eager")
    db_session.expunge_all()

    profile = (
        await db_session.execute(select(Profile).where(Profile.user_id == user.id))
    ).scalar_one()

    assert profile.user.id == user.id
    assert profile.user.email == user.email
