import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.onboarding_service.models.enums import BackgroundCheckStatus, enum_values
from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class I9Document(Base):
    """Uploaded identity documents; one row per user, one column set per slot."""

    __tablename__ = "i9_documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True
    )

    drivers_license_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    drivers_license_filename: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    drivers_license_uploaded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    ssn_document_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ssn_document_filename: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    ssn_document_uploaded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    additional_doc_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    additional_doc_filename: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    additional_doc_uploaded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def has_any_document(self) -> bool:
        return bool(
            self.drivers_license_url or self.ssn_document_url or self.additional_doc_url
        )


class BackgroundCheck(Base):
    __tablename__ = "background_checks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True
    )
    status: Mapped[BackgroundCheckStatus] = mapped_column(
        SAEnum(
            BackgroundCheckStatus,
            name="background_check_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=BackgroundCheckStatus.PENDING,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    checked_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
