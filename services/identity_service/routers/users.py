"""Admin user management endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from libs.common.logging import get_logger
from libs.common.validators import is_valid_uuid
from libs.db.session import get_async_db
from services.identity_service.dependencies import require_roles
from services.identity_service.models import EXEC_ROLES, HR_ROLES, User, UserRole
from services.identity_service.schemas import (
    BackgroundCheckFlagRequest,
    ResetPasswordRequest,
    RoleUpdateRequest,
    UserListResponse,
    UserSummary,
)
from services.identity_service.services.accounts import (
    get_user_or_404,
    reset_password_by_admin,
)
from services.identity_service.services.audit import log_audit_event
from services.identity_service.services.profiles import profile_names
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


def _summary(user: User) -> UserSummary:
    first_name, last_name = profile_names(user.profile)
    return UserSummary(
        id=user.id,
        email=user.email,
        role=user.role,
        division=user.division,
        is_active=user.is_active,
        first_name=first_name,
        last_name=last_name,
        background_check_completed=user.background_check_completed,
        created_at=user.created_at,
    )


@router.post("/reset-password")
async def reset_password(
    payload: ResetPasswordRequest,
    request: Request,
    actor: User = Depends(
        require_roles(*EXEC_ROLES, detail="Unauthorized: Admin/Exec access required")
    ),
    db: AsyncSession = Depends(get_async_db),
):
    """Issue a temporary password and clear the user's MFA enrolment."""
    if not is_valid_uuid(payload.user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Valid user ID is required"
        )
    return await reset_password_by_admin(
        db,
        actor=actor,
        user_id=uuid.UUID(payload.user_id),
        send_email=payload.send_email,
        request=request,
    )


@router.get("", response_model=UserListResponse)
async def list_users(
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    _: User = Depends(require_roles(*HR_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(User).order_by(User.email)
    if role is not None:
        query = query.where(User.role == role)
    if is_active is not None:
        query = query.where(User.is_active == is_active)

    result = await db.execute(query)
    users = [_summary(user) for user in result.scalars().all()]
    return UserListResponse(users=users, count=len(users))


@router.patch("/{user_id}/role", response_model=UserSummary)
async def update_role(
    user_id: uuid.UUID,
    payload: RoleUpdateRequest,
    request: Request,
    actor: User = Depends(require_roles(*EXEC_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    user = await get_user_or_404(db, user_id)
    previous = user.role.value
    user.role = payload.role
    log_audit_event(
        db,
        user_id=actor.id,
        action="user_role_changed",
        resource_type="user",
        metadata={"target_user_id": str(user.id), "from": previous, "to": payload.role.value},
        request=request,
    )
    await db.commit()
    return _summary(user)


@router.patch("/{user_id}/background-check", response_model=UserSummary)
async def set_background_check(
    user_id: uuid.UUID,
    payload: BackgroundCheckFlagRequest,
    _: User = Depends(require_roles(*HR_ROLES, "backgroundchecker")),
    db: AsyncSession = Depends(get_async_db),
):
    user = await get_user_or_404(db, user_id)
    user.background_check_completed = payload.completed
    await db.commit()
    return _summary(user)


@router.post("/{user_id}/deactivate", response_model=UserSummary)
async def deactivate_user(
    user_id: uuid.UUID,
    request: Request,
    actor: User = Depends(require_roles(*HR_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    user = await get_user_or_404(db, user_id)
    user.is_active = False
    log_audit_event(
        db,
        user_id=actor.id,
        action="user_deactivated",
        resource_type="user",
        metadata={"target_user_id": str(user.id)},
        request=request,
    )
    await db.commit()
    logger.info("User %s deactivated by %s", user.id, actor.id)
    return _summary(user)
