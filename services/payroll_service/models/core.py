import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.payroll_service.models.enums import SickLeaveStatus, enum_values
from sqlalchemy import Date, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class EventPayment(Base):
    """Event-level payroll summary; one row per event."""

    __tablename__ = "event_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), unique=True, index=True
    )

    # Fraction of net sales, e.g. 0.15
    commission_pool_percent: Mapped[float] = mapped_column(Float, default=0)
    commission_pool_dollars: Mapped[float] = mapped_column(Float, default=0)
    total_tips: Mapped[float] = mapped_column(Float, default=0)

    total_regular_hours: Mapped[float] = mapped_column(Float, default=0)
    total_overtime_hours: Mapped[float] = mapped_column(Float, default=0)
    total_doubletime_hours: Mapped[float] = mapped_column(Float, default=0)
    total_regular_pay: Mapped[float] = mapped_column(Float, default=0)
    total_overtime_pay: Mapped[float] = mapped_column(Float, default=0)
    total_doubletime_pay: Mapped[float] = mapped_column(Float, default=0)
    total_commissions: Mapped[float] = mapped_column(Float, default=0)
    total_tips_distributed: Mapped[float] = mapped_column(Float, default=0)
    total_payment: Mapped[float] = mapped_column(Float, default=0)

    base_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    net_sales: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


class EventVendorPayment(Base):
    __tablename__ = "event_vendor_payments"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_vendor_payment"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_payment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("event_payments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    actual_hours: Mapped[float] = mapped_column(Float, default=0)
    regular_hours: Mapped[float] = mapped_column(Float, default=0)
    overtime_hours: Mapped[float] = mapped_column(Float, default=0)
    doubletime_hours: Mapped[float] = mapped_column(Float, default=0)

    regular_pay: Mapped[float] = mapped_column(Float, default=0)
    overtime_pay: Mapped[float] = mapped_column(Float, default=0)
    doubletime_pay: Mapped[float] = mapped_column(Float, default=0)

    commissions: Mapped[float] = mapped_column(Float, default=0)
    tips: Mapped[float] = mapped_column(Float, default=0)
    total_pay: Mapped[float] = mapped_column(Float, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


class PaymentAdjustment(Base):
    """Manual per-vendor correction; positive or negative."""

    __tablename__ = "payment_adjustments"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_payment_adjustment"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    adjustment_amount: Mapped[float] = mapped_column(Float, default=0)
    adjustment_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


class StateRate(Base):
    __tablename__ = "state_rates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    state_code: Mapped[str] = mapped_column(String(2), unique=True, index=True)
    state_name: Mapped[str] = mapped_column(String(100), nullable=False)
    base_rate: Mapped[float] = mapped_column(Float, default=0)
    overtime_rate: Mapped[float] = mapped_column(Float, default=1.5)
    doubletime_rate: Mapped[float] = mapped_column(Float, default=0)
    tax_rate: Mapped[float] = mapped_column(Float, default=0)
    effective_date: Mapped[date] = mapped_column(Date, default=lambda: utc_now().date())
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


class SickLeave(Base):
    """
    Sick leave request or HR ledger entry.

    HR bookkeeping rows are tagged by a marker prefix in ``reason``; see
    ``services.payroll_service.services.sick_leave``.
    """

    __tablename__ = "sick_leaves"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    duration_hours: Mapped[float] = mapped_column(Float, default=0)
    status: Mapped[SickLeaveStatus] = mapped_column(
        SAEnum(
            SickLeaveStatus,
            name="leave_status",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=SickLeaveStatus.PENDING,
        index=True,
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
