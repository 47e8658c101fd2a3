"""Pydantic schemas for Payroll Service."""

import uuid
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from services.payroll_service.models import SickLeaveStatus


class EventPaymentResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    commission_pool_percent: float = 0
    commission_pool_dollars: float = 0
    total_tips: float = 0
    total_regular_hours: float = 0
    total_overtime_hours: float = 0
    total_doubletime_hours: float = 0
    total_regular_pay: float = 0
    total_overtime_pay: float = 0
    total_doubletime_pay: float = 0
    total_commissions: float = 0
    total_tips_distributed: float = 0
    total_payment: float = 0
    base_rate: Optional[float] = None
    net_sales: Optional[float] = None
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VendorPaymentResponse(BaseModel):
    event_id: uuid.UUID
    user_id: uuid.UUID
    actual_hours: float = 0
    regular_hours: float = 0
    overtime_hours: float = 0
    doubletime_hours: float = 0
    regular_pay: float = 0
    overtime_pay: float = 0
    doubletime_pay: float = 0
    commissions: float = 0
    tips: float = 0
    total_pay: float = 0

    model_config = ConfigDict(from_attributes=True)


class VendorPaymentInput(BaseModel):
    user_id: uuid.UUID = Field(..., alias="userId")
    actual_hours: float = Field(default=0, alias="actualHours")
    regular_hours: float = Field(default=0, alias="regularHours")
    overtime_hours: float = Field(default=0, alias="overtimeHours")
    doubletime_hours: float = Field(default=0, alias="doubletimeHours")
    regular_pay: float = Field(default=0, alias="regularPay")
    overtime_pay: float = Field(default=0, alias="overtimePay")
    doubletime_pay: float = Field(default=0, alias="doubletimePay")
    commissions: float = 0
    tips: float = 0
    total_pay: float = Field(default=0, alias="totalPay")

    model_config = ConfigDict(populate_by_name=True)


class SavePaymentRequest(BaseModel):
    """
    Event payment summary to save.

    Without ``vendorPayments`` the calculator's rows for the event are saved.
    """

    commission_pool_percent: Optional[float] = Field(default=None, alias="commissionPoolPercent")
    commission_pool_dollars: Optional[float] = Field(default=None, alias="commissionPoolDollars")
    total_tips: Optional[float] = Field(default=None, alias="totalTips")
    base_rate: Optional[float] = Field(default=None, alias="baseRate")
    net_sales: Optional[float] = Field(default=None, alias="netSales")
    vendor_payments: Any = Field(default=None, alias="vendorPayments")

    model_config = ConfigDict(populate_by_name=True)


class PaymentAdjustmentItem(BaseModel):
    event_id: uuid.UUID
    user_id: uuid.UUID
    adjustment_amount: float = 0
    adjustment_note: Optional[str] = None


class PaymentAdjustmentsSave(BaseModel):
    adjustments: Any = None


class PaymentAdjustmentResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    adjustment_amount: float
    adjustment_note: Optional[str] = None
    created_by: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StateRateUpdate(BaseModel):
    base_rate: float = Field(..., ge=0)
    state_name: Optional[str] = None
    overtime_rate: Optional[float] = Field(None, gt=0)
    doubletime_rate: Optional[float] = Field(None, ge=0)
    tax_rate: Optional[float] = Field(None, ge=0, le=100)
    effective_date: Optional[date] = None


class StateRateResponse(BaseModel):
    state_code: str
    state_name: str
    base_rate: float
    overtime_rate: float
    doubletime_rate: float
    tax_rate: float
    effective_date: date
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SickLeaveResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    start_date: date
    end_date: date
    duration_hours: float
    status: SickLeaveStatus
    reason: Optional[str] = None
    approved_by: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SickLeaveStatusUpdate(BaseModel):
    id: Optional[str] = None
    status: Optional[str] = None


class SickLeaveHrAction(BaseModel):
    """HR ledger edit; ``hours`` is accepted as an alias of ``duration_hours``."""

    user_id: Optional[str] = None
    operation: str = "add"
    duration_hours: Optional[float] = None
    hours: Optional[float] = None
    reason: Optional[str] = None
    adjustment_field: Optional[str] = None
    target_hours: Optional[float] = None


class SickLeaveRequestCreate(BaseModel):
    leave_date: Optional[str] = Field(None, alias="date")
    hours: Any = None

    model_config = ConfigDict(populate_by_name=True)
