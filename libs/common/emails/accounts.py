"""
Account security email templates.
"""
from datetime import datetime

from libs.common.config import get_settings
from libs.common.emails.core import send_email


async def send_temporary_password_email(
    to_email: str,
    first_name: str,
    temporary_password: str,
    expires_at: datetime,
) -> bool:
    """Send admin-issued temporary credentials."""
    login_url = f"{get_settings().FRONTEND_URL}/login"
    expires_display = expires_at.strftime("%B %d, %Y")
    greeting = f"Hi {first_name}," if first_name else "Hi there,"

    subject = "Your PDS Account Password Has Been Reset"
    body = f"""{greeting}

An administrator has reset the password for your PDS account.

Email: {to_email}
Temporary password: {temporary_password}

This temporary password expires on {expires_display}. You will be asked to
choose a new password and set up multi-factor authentication again the next
time you sign in.

Sign in: {login_url}

If you did not expect this change, contact your HR representative.

PDS Staffing
"""
    html_body = f"""<p>{greeting}</p>
<p>An administrator has reset the password for your PDS account.</p>
<table>
  <tr><td><strong>Email</strong></td><td>{to_email}</td></tr>
  <tr><td><strong>Temporary password</strong></td><td><code>{temporary_password}</code></td></tr>
</table>
<p>This temporary password expires on <strong>{expires_display}</strong>.
You will be asked to choose a new password and set up multi-factor
authentication again the next time you sign in.</p>
<p><a href="{login_url}">Sign in to PDS</a></p>
<p>If you did not expect this change, contact your HR representative.</p>
"""
    return await send_email(to_email, subject, body, html_body)


async def send_mfa_login_code_email(to_email: str, code: str, ttl_minutes: int) -> bool:
    subject = "Your PDS Verification Code"
    body = f"""Your PDS verification code is: {code}

This code expires in {ttl_minutes} minutes. If you did not try to sign in,
you can ignore this email.
"""
    html_body = f"""<p>Your PDS verification code is:</p>
<p style="font-size:28px;letter-spacing:6px;font-weight:bold">{code}</p>
<p>This code expires in {ttl_minutes} minutes. If you did not try to sign in,
you can ignore this email.</p>
"""
    return await send_email(to_email, subject, body, html_body)
