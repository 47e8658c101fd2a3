"""Payroll Service models package."""

from services.payroll_service.models.core import (
    EventPayment,
    EventVendorPayment,
    PaymentAdjustment,
    SickLeave,
    StateRate,
)
from services.payroll_service.models.enums import SickLeaveStatus

__all__ = [
    "EventPayment",
    "EventVendorPayment",
    "PaymentAdjustment",
    "SickLeave",
    "SickLeaveStatus",
    "StateRate",
]
