"""Payroll service routers."""

from services.payroll_service.routers.event_payroll import router as event_payroll_router
from services.payroll_service.routers.payments import router as payments_router
from services.payroll_service.routers.paystubs import my_paystubs_router
from services.payroll_service.routers.paystubs import router as paystubs_router
from services.payroll_service.routers.rates import router as rates_router
from services.payroll_service.routers.sick_leaves import router as sick_leaves_router

__all__ = [
    "event_payroll_router",
    "my_paystubs_router",
    "payments_router",
    "paystubs_router",
    "rates_router",
    "sick_leaves_router",
]
