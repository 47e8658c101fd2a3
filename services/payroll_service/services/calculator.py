"""
Per-event vendor pay calculation.

All amounts are in dollars. The calculator is pure: callers gather hours,
rates and the commission pool and pass them in.

Arizona and New York pay the base rate with the commission pool split evenly
across eligible vendors. Weekly overtime applies once prior hours for the week
plus this event's hours exceed 40, and because overtime is paid on the loaded
rate (which includes commission) the per-vendor commission is found by
fixed-point iteration.

Other states pay 1.5x the base rate and top up to the member's share of the
pool. Every worked event pays at least ``MINIMUM_EVENT_PAY``.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

DEFAULT_BASE_RATE = 17.28
MINIMUM_EVENT_PAY = 150.0
WEEKLY_OVERTIME_THRESHOLD = 40.0
OVERTIME_MULTIPLIER = 1.5
NON_AZ_NY_RATE_MULTIPLIER = 1.5

COMMISSION_ITERATIONS = 20
COMMISSION_TOLERANCE = 0.01

AZ_NY_STATES = frozenset({"AZ", "NY"})
NO_REST_BREAK_STATES = frozenset({"NV", "WI", "AZ", "NY"})


def normalize_state(value: Optional[str]) -> str:
    return (value or "").strip().upper()


def normalize_division(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def effective_hours(
    actual_hours: Optional[float] = 0,
    worked_hours: Optional[float] = 0,
    regular_hours: Optional[float] = 0,
    overtime_hours: Optional[float] = 0,
    doubletime_hours: Optional[float] = 0,
) -> float:
    """First positive of actual, worked, then regular + overtime + doubletime."""
    actual = float(actual_hours or 0)
    if actual > 0:
        return actual
    worked = float(worked_hours or 0)
    if worked > 0:
        return worked
    summed = float(regular_hours or 0) + float(overtime_hours or 0) + float(doubletime_hours or 0)
    return summed if summed > 0 else 0.0


def resolve_base_rate(
    configured_rate: Optional[float],
    summary_rate: Optional[float],
    default: float = DEFAULT_BASE_RATE,
) -> float:
    if configured_rate and configured_rate > 0:
        return float(configured_rate)
    if summary_rate and summary_rate > 0:
        return float(summary_rate)
    return default


def commission_pool_dollars(
    summary: Optional[Mapping[str, Any]],
    event: Optional[Mapping[str, Any]] = None,
) -> float:
    """
    Commission pool for an event.

    Taken from the saved payment summary when it has one, otherwise derived
    from the event's ticket sales, tips and tax rate.
    """
    summary = summary or {}
    net_sales = float(summary.get("net_sales") or 0)
    percent = float(summary.get("commission_pool_percent") or 0)
    pool = (
        net_sales * percent
        or float(summary.get("commission_pool_dollars") or 0)
        or float(summary.get("total_commissions") or 0)
    )
    if pool or not event:
        return pool

    pool_fraction = float(event.get("commission_pool") or 0)
    if pool_fraction <= 0:
        return 0.0
    total_sales = max(
        float(event.get("ticket_sales") or 0) - float(event.get("tips") or 0), 0.0
    )
    tax = total_sales * float(event.get("tax_rate_percent") or 0) / 100
    return max(total_sales - tax, 0.0) * pool_fraction


def rest_break_amount(hours: float, state: Optional[str]) -> float:
    if normalize_state(state) in NO_REST_BREAK_STATES or hours <= 0:
        return 0.0
    return 12.0 if hours >= 10 else 9.0


@dataclass
class PayrollMember:
    user_id: uuid.UUID
    division: Optional[str] = None
    actual_hours: float = 0.0
    worked_hours: float = 0.0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    doubletime_hours: float = 0.0
    prior_weekly_hours: float = 0.0
    adjustment: float = 0.0

    @property
    def hours(self) -> float:
        return effective_hours(
            self.actual_hours,
            self.worked_hours,
            self.regular_hours,
            self.overtime_hours,
            self.doubletime_hours,
        )

    @property
    def is_trailers(self) -> bool:
        return normalize_division(self.division) == "trailers"

    @property
    def is_vendor(self) -> bool:
        return normalize_division(self.division) in ("vendor", "both")

    @property
    def commission_eligible(self) -> bool:
        return not self.is_trailers and self.is_vendor and self.hours > 0

    @property
    def weekly_overtime(self) -> bool:
        return self.prior_weekly_hours + self.hours > WEEKLY_OVERTIME_THRESHOLD


@dataclass
class MemberPay:
    user_id: uuid.UUID
    actual_hours: float
    reg_rate: float
    loaded_rate: float
    ot_rate: float
    ext_amt_on_reg_rate: float
    commission_amt: float
    total_final_commission_amt: float
    tips: float
    rest_break: float
    adjustment_amount: float
    weekly_overtime: bool = False

    @property
    def total_pay(self) -> float:
        return self.total_final_commission_amt + self.tips + self.rest_break

    @property
    def final_pay(self) -> float:
        return self.total_pay + self.adjustment_amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": str(self.user_id),
            "actualHours": round(self.actual_hours, 2),
            "regRate": round(self.reg_rate, 2),
            "loadedRate": round(self.loaded_rate, 2),
            "otRate": round(self.ot_rate, 2),
            "extAmtOnRegRate": round(self.ext_amt_on_reg_rate, 2),
            "commissionAmt": round(self.commission_amt, 2),
            "totalFinalCommissionAmt": round(self.total_final_commission_amt, 2),
            "tips": round(self.tips, 2),
            "restBreak": round(self.rest_break, 2),
            "totalPay": round(self.total_pay, 2),
            "adjustmentAmount": round(self.adjustment_amount, 2),
            "finalPay": round(self.final_pay, 2),
        }


@dataclass
class EventPayrollInput:
    state: Optional[str]
    base_rate: float
    commission_pool: float
    total_tips: float
    members: list[PayrollMember] = field(default_factory=list)

    @property
    def is_az_ny(self) -> bool:
        return normalize_state(self.state) in AZ_NY_STATES


def vendor_count(members: Sequence[PayrollMember]) -> int:
    """Members in the vendor divisions, or every member when there are none."""
    vendors = sum(1 for m in members if m.is_vendor)
    return vendors if vendors > 0 else len(members)


def az_ny_commission_per_vendor(
    members: Iterable[PayrollMember], base_rate: float, pool: float
) -> float:
    eligible = [m for m in members if m.commission_eligible]
    if not eligible:
        return 0.0

    per_vendor = 0.0
    for _ in range(COMMISSION_ITERATIONS):
        extended = 0.0
        for member in eligible:
            regular = member.hours * base_rate
            if member.weekly_overtime:
                extended += OVERTIME_MULTIPLIER * max(MINIMUM_EVENT_PAY, regular + per_vendor)
            else:
                extended += regular
        candidate = max(0.0, (pool - extended) / len(eligible))
        converged = abs(candidate - per_vendor) < COMMISSION_TOLERANCE
        per_vendor = candidate
        if converged:
            break
    return per_vendor


def _az_ny_member_pay(member: PayrollMember, base_rate: float, per_vendor: float) -> dict:
    hours = member.hours
    extended_regular = hours * base_rate
    commission = per_vendor if member.commission_eligible else 0.0
    base_total = max(MINIMUM_EVENT_PAY, extended_regular + commission) if hours > 0 else 0.0
    loaded_rate = base_total / hours if hours > 0 else base_rate

    overtime = member.weekly_overtime
    ot_rate = loaded_rate * OVERTIME_MULTIPLIER if overtime else 0.0
    extended = ot_rate * hours if overtime else extended_regular
    if hours <= 0:
        total_final = 0.0
    else:
        total_final = extended if overtime else base_total

    return {
        "reg_rate": 0.0 if overtime else loaded_rate,
        "loaded_rate": loaded_rate,
        "ot_rate": ot_rate,
        "ext_amt_on_reg_rate": extended,
        "commission_amt": commission,
        "total_final_commission_amt": total_final,
        "weekly_overtime": overtime,
    }


def _standard_member_pay(member: PayrollMember, base_rate: float, share: float) -> dict:
    hours = member.hours
    extended = hours * base_rate * NON_AZ_NY_RATE_MULTIPLIER
    commission = max(0.0, share - extended) if hours > 0 and not member.is_trailers else 0.0
    total_final = max(MINIMUM_EVENT_PAY, extended + commission) if hours > 0 else 0.0
    loaded_rate = total_final / hours if hours > 0 else base_rate
    return {
        "reg_rate": loaded_rate,
        "loaded_rate": loaded_rate,
        "ot_rate": 0.0,
        "ext_amt_on_reg_rate": extended,
        "commission_amt": commission,
        "total_final_commission_amt": total_final,
    }


def compute_event_payroll(data: EventPayrollInput) -> list[MemberPay]:
    members = data.members
    tip_hours = sum(m.hours for m in members if not m.is_trailers)

    per_vendor = share = 0.0
    if data.is_az_ny:
        per_vendor = az_ny_commission_per_vendor(members, data.base_rate, data.commission_pool)
    else:
        count = vendor_count(members)
        share = data.commission_pool / count if count > 0 else 0.0

    results = []
    for member in members:
        if data.is_az_ny:
            pay = _az_ny_member_pay(member, data.base_rate, per_vendor)
        else:
            pay = _standard_member_pay(member, data.base_rate, share)

        tips = 0.0
        if not member.is_trailers and tip_hours > 0:
            tips = data.total_tips * member.hours / tip_hours

        results.append(
            MemberPay(
                user_id=member.user_id,
                actual_hours=member.hours,
                tips=tips,
                rest_break=rest_break_amount(member.hours, data.state),
                adjustment_amount=member.adjustment,
                **pay,
            )
        )
    return results
