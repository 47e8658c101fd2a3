"""Lookup tables for where a user is sent after login and onboarding."""

from typing import Optional

PAYROLL_PACKET_PATHS = {
    "ny": "/payroll-packet-ny",
    "new york": "/payroll-packet-ny",
    "ca": "/payroll-packet-ca",
    "california": "/payroll-packet-ca",
    "az": "/payroll-packet-az",
    "arizona": "/payroll-packet-az",
    "wi": "/payroll-packet-wi",
    "wisconsin": "/payroll-packet-wi",
}
DEFAULT_PACKET_PATH = "/dashboard"

BACKGROUND_CHECKER_ROLES = frozenset({"backgroundchecker", "background-checker"})

ROLE_LANDING_PATHS = {
    "backgroundchecker": "/background-checks",
    "background-checker": "/background-checks",
    "hr": "/hr-dashboard",
    "exec": "/hr-dashboard",
    "admin": "/hr-dashboard",
    "manager": "/dashboard",
    "supervisor": "/dashboard",
    "supervisor2": "/dashboard",
    "finance": "/dashboard",
}
DEFAULT_LANDING_PATH = "/"


def payroll_packet_path(state: Optional[str]) -> str:
    return PAYROLL_PACKET_PATHS.get((state or "").strip().lower(), DEFAULT_PACKET_PATH)


def is_background_checker(role: Optional[str]) -> bool:
    return (role or "").lower() in BACKGROUND_CHECKER_ROLES


def mfa_method_for_role(role: Optional[str]) -> str:
    return "email" if is_background_checker(role) else "totp"


def role_landing_path(role: Optional[str]) -> str:
    return ROLE_LANDING_PATHS.get((role or "").lower(), DEFAULT_LANDING_PATH)


def post_login_redirect(
    role: Optional[str],
    *,
    has_temporary_password: bool,
    mfa_enabled: bool,
    mfa_verified: bool,
) -> str:
    if has_temporary_password:
        return "/password"
    if not mfa_enabled:
        return "/email-mfa-setup" if is_background_checker(role) else "/mfa-setup"
    if not mfa_verified:
        return "/verify-mfa"
    return role_landing_path(role)
