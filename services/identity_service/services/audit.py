"""Security audit trail writes."""

import uuid
from typing import Any, Optional

from fastapi import Request
from libs.common.logging import get_logger
from libs.common.rate_limit import get_client_ip
from services.identity_service.models import AuditLog
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def log_audit_event(
    db: AsyncSession,
    *,
    user_id: Optional[uuid.UUID],
    action: str,
    resource_type: str = "auth",
    success: bool = True,
    metadata: Optional[dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> AuditLog:
    """
    Stage an audit event on the session; the caller owns the commit.
    """
    entry = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        success=success,
        details=metadata or {},
        ip_address=get_client_ip(request) if request else None,
        user_agent=request.headers.get("User-Agent") if request else None,
    )
    db.add(entry)
    logger.info(
        "Audit event %s",
        action,
        extra={"extra_fields": {"user_id": str(user_id) if user_id else None, "success": success}},
    )
    return entry
