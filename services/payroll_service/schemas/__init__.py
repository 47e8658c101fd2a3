"""Payroll Service schemas package."""

from services.payroll_service.schemas.main import (  # noqa: F401
    EventPaymentResponse,
    PaymentAdjustmentItem,
    PaymentAdjustmentResponse,
    PaymentAdjustmentsSave,
    SavePaymentRequest,
    SickLeaveHrAction,
    SickLeaveRequestCreate,
    SickLeaveResponse,
    SickLeaveStatusUpdate,
    StateRateResponse,
    StateRateUpdate,
    VendorPaymentInput,
    VendorPaymentResponse,
)

__all__ = [
    "EventPaymentResponse",
    "PaymentAdjustmentItem",
    "PaymentAdjustmentResponse",
    "PaymentAdjustmentsSave",
    "SavePaymentRequest",
    "SickLeaveHrAction",
    "SickLeaveRequestCreate",
    "SickLeaveResponse",
    "SickLeaveStatusUpdate",
    "StateRateResponse",
    "StateRateUpdate",
    "VendorPaymentInput",
    "VendorPaymentResponse",
]
