"""Request dependencies resolving the caller's application account and role.

Usage:
    from services.identity_service.dependencies import require_roles

    @router.get("/hr-only")
    async def handler(account: User = Depends(require_roles("hr", "exec"))):
        ...
"""
import uuid
from typing import Callable

from fastapi import Depends, HTTPException, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.identity_service.models import User
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


async def get_current_account(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> User:
    try:
        user_id = uuid.UUID(current_user.user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def require_roles(*roles: str, detail: str = "Unauthorized") -> Callable:
    """Build a dependency that admits only accounts holding one of ``roles``."""
    allowed = {role.lower() for role in roles}

    async def _require(account: User = Depends(get_current_account)) -> User:
        if account.role.value not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return account

    return _require
