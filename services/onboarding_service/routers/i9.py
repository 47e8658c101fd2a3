"""I-9 identity document endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from libs.common.validators import is_valid_uuid
from libs.db.session import get_async_db
from services.identity_service.dependencies import get_current_account
from services.identity_service.models import HR_ROLES, User
from services.onboarding_service.schemas import I9DocumentsResponse
from services.onboarding_service.services.documents import (
    get_documents,
    resolve_document_key,
    store_document,
    validate_document,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/i9-documents", tags=["i9-documents"])


@router.post("/upload")
async def upload_i9_document(
    document_type: Optional[str] = Form(None, alias="documentType"),
    file: Optional[UploadFile] = File(None),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    if not document_type or file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Missing documentType or file"
        )

    key = resolve_document_key(document_type)
    content = await file.read()
    validate_document(content, file.content_type or "")

    filename = file.filename or "document"
    _, url = await store_document(
        db,
        user_id=account.id,
        key=key,
        filename=filename,
        data=content,
        content_type=(file.content_type or "").lower(),
    )
    return {
        "success": True,
        "url": url,
        "filename": filename,
        "documentType": document_type,
        "normalizedKey": key.value,
    }


@router.get("", response_model=Optional[I9DocumentsResponse])
async def get_i9_documents(
    user_id: Optional[str] = Query(None, alias="userId"),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Documents for the caller, or for ``userId`` when the caller is HR."""
    target = account.id
    if user_id and user_id != str(account.id):
        if account.role.value not in HR_ROLES:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions to view employee documents",
            )
        if not is_valid_uuid(user_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Valid user ID is required"
            )
        target = uuid.UUID(user_id)

    return await get_documents(db, target)
