"""I-9 document slot mapping and upload."""

import re
import uuid
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.common.supabase import SupabaseError, upload_file
from services.onboarding_service.models import I9Document, I9DocumentKey
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

MAX_DOCUMENT_BYTES = 10 * 1024 * 1024
ALLOWED_DOCUMENT_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "application/pdf",
}

# I-9 list names used by the current form, plus the legacy slot names
DOCUMENT_TYPE_MAP = {
    "i9_list_a": I9DocumentKey.ADDITIONAL_DOC,
    "i9_list_b": I9DocumentKey.DRIVERS_LICENSE,
    "i9_list_c": I9DocumentKey.SSN_DOCUMENT,
    "drivers_license": I9DocumentKey.DRIVERS_LICENSE,
    "ssn_document": I9DocumentKey.SSN_DOCUMENT,
    "additional_doc": I9DocumentKey.ADDITIONAL_DOC,
}


def resolve_document_key(document_type: Optional[str]) -> I9DocumentKey:
    key = DOCUMENT_TYPE_MAP.get((document_type or "").strip().lower())
    if key is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid document type"
        )
    return key


def validate_document(data: bytes, content_type: str) -> None:
    if (content_type or "").lower() not in ALLOWED_DOCUMENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Only JPG, PNG, WEBP, and PDF are allowed.",
        )
    if len(data) > MAX_DOCUMENT_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File too large. Maximum size is 10MB.",
        )


def safe_filename(filename: Optional[str]) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9._-]", "_", filename or "document")
    return cleaned[-120:] or "document"


def storage_path(user_id: uuid.UUID, key: I9DocumentKey, filename: str, now: datetime) -> str:
    return f"{user_id}/{key.value}/{int(now.timestamp() * 1000)}-{safe_filename(filename)}"


async def get_documents(db: AsyncSession, user_id: uuid.UUID) -> Optional[I9Document]:
    result = await db.execute(select(I9Document).where(I9Document.user_id == user_id))
    return result.scalar_one_or_none()


async def store_document(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    key: I9DocumentKey,
    filename: str,
    data: bytes,
    content_type: str,
) -> tuple[I9Document, str]:
    """Upload the file and point the user's document slot at it."""
    now = utc_now()
    path = storage_path(user_id, key, filename, now)
    try:
        url = await upload_file(
            get_settings().I9_DOCUMENTS_BUCKET, path, data, content_type
        )
    except SupabaseError as exc:
        logger.error("I-9 upload failed for %s: %s", user_id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload document",
        )

    record = await get_documents(db, user_id)
    if record is None:
        record = I9Document(user_id=user_id)
        db.add(record)

    setattr(record, f"{key.value}_url", url)
    setattr(record, f"{key.value}_filename", filename)
    setattr(record, f"{key.value}_uploaded_at", now)
    await db.commit()
    logger.info("Stored I-9 %s for user %s", key.value, user_id)
    return record, url
