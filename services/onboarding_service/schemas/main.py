import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.identity_service.models.enums import OnboardingStatus
from services.onboarding_service.models.enums import BackgroundCheckStatus


class OnboardingStatusUpdate(BaseModel):
    status: OnboardingStatus


class BackgroundCheckUpdate(BaseModel):
    user_id: uuid.UUID = Field(alias="userId")
    status: BackgroundCheckStatus
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class I9DocumentsResponse(BaseModel):
    user_id: uuid.UUID
    drivers_license_url: Optional[str] = None
    drivers_license_filename: Optional[str] = None
    drivers_license_uploaded_at: Optional[datetime] = None
    ssn_document_url: Optional[str] = None
    ssn_document_filename: Optional[str] = None
    ssn_document_uploaded_at: Optional[datetime] = None
    additional_doc_url: Optional[str] = None
    additional_doc_filename: Optional[str] = None
    additional_doc_uploaded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BackgroundCheckRow(BaseModel):
    user_id: uuid.UUID
    email: str
    full_name: str
    state: Optional[str] = None
    status: BackgroundCheckStatus = BackgroundCheckStatus.PENDING
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    has_i9_documents: bool = False
