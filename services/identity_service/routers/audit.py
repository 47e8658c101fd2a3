"""Audit trail browsing for executives."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.db.session import get_async_db
from services.identity_service.dependencies import require_roles
from services.identity_service.models import EXEC_ROLES, AuditLog, User
from services.identity_service.schemas import AuditLogResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=list[AuditLogResponse])
async def list_audit_events(
    user_id: Optional[uuid.UUID] = Query(None),
    action: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    _: User = Depends(require_roles(*EXEC_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(AuditLog).order_by(AuditLog.created_at.desc()).limit(limit)
    if user_id is not None:
        query = query.where(AuditLog.user_id == user_id)
    if action:
        query = query.where(AuditLog.action == action)
    result = await db.execute(query)
    return result.scalars().all()
