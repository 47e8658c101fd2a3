"""
Supabase client accessors.

The supabase-py client is synchronous; async callers wrap its calls in
``asyncio.to_thread`` so the event loop is never blocked.
"""

import asyncio
from functools import lru_cache
from typing import Any, Optional

from supabase import Client, create_client

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


class SupabaseError(Exception):
    """Raised when a Supabase admin or storage call fails."""


@lru_cache
def get_supabase_client() -> Client:
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)


@lru_cache
def get_supabase_admin_client() -> Client:
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


async def get_auth_user(user_id: str) -> Optional[Any]:
    """Fetch a user from Supabase Auth, or None when it does not exist."""
    admin = get_supabase_admin_client()
    try:
        response = await asyncio.to_thread(admin.auth.admin.get_user_by_id, user_id)
    except Exception as exc:
        logger.warning(
            "Auth user lookup failed",
            extra={"extra_fields": {"user_id": user_id, "error": str(exc)}},
        )
        return None
    return getattr(response, "user", None)


async def update_auth_password(user_id: str, password: str) -> None:
    admin = get_supabase_admin_client()
    try:
        await asyncio.to_thread(
            admin.auth.admin.update_user_by_id, user_id, {"password": password}
        )
    except Exception as exc:
        raise SupabaseError(f"Failed to update password: {exc}") from exc


async def verify_auth_password(email: str, password: str) -> bool:
    """Check a password by signing in with it on the public client."""
    client = get_supabase_client()
    try:
        await asyncio.to_thread(
            client.auth.sign_in_with_password, {"email": email, "password": password}
        )
    except Exception as exc:
        logger.info(
            "Password check rejected",
            extra={"extra_fields": {"error": str(exc)}},
        )
        return False
    return True


async def send_password_reset_email(email: str, redirect_to: str) -> None:
    client = get_supabase_client()
    try:
        await asyncio.to_thread(
            client.auth.reset_password_for_email, email, {"redirect_to": redirect_to}
        )
    except Exception as exc:
        raise SupabaseError(f"Failed to send password reset email: {exc}") from exc


async def upload_file(bucket: str, path: str, data: bytes, content_type: str) -> str:
    """Upload (or replace) an object and return its public URL."""
    storage = get_supabase_admin_client().storage.from_(bucket)
    try:
        await asyncio.to_thread(
            storage.upload,
            path=path,
            file=data,
            file_options={"content-type": content_type, "upsert": "true"},
        )
    except Exception as exc:
        raise SupabaseError(f"Failed to upload file: {exc}") from exc
    return storage.get_public_url(path)
