"""Unit tests for per-event vendor pay calculation."""

import uuid

import pytest
from services.payroll_service.services.calculator import (
    MINIMUM_EVENT_PAY,
    EventPayrollInput,
    PayrollMember,
    commission_pool_dollars,
    compute_event_payroll,
    effective_hours,
    resolve_base_rate,
    rest_break_amount,
)


def _member(hours, division="vendor", prior=0.0, adjustment=0.0):
    return PayrollMember(
        user_id=uuid.uuid4(),
        division=division,
        actual_hours=hours,
        prior_weekly_hours=prior,
        adjustment=adjustment,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_effective_hours_precedence():
    assert effective_hours(5, 3, 1, 1, 1) == 5
    assert effective_hours(0, 3, 1, 1, 1) == 3
    assert effective_hours(0, 0, 1, 2, 3) == 6
    assert effective_hours(None, None, None, None, None) == 0


@pytest.mark.unit
def test_resolve_base_rate():
    assert resolve_base_rate(20, 18) == 20
    assert resolve_base_rate(None, 18) == 18
    assert resolve_base_rate(0, 0) == 17.28


@pytest.mark.unit
def test_rest_break_amount():
    assert rest_break_amount(5, "CA") == 9
    assert rest_break_amount(10, "ca") == 12
    assert rest_break_amount(10, "NV") == 0
    assert rest_break_amount(0, "CA") == 0


@pytest.mark.unit
def test_commission_pool_from_summary():
    assert commission_pool_dollars({"net_sales": 1000, "commission_pool_percent": 0.1}) == 100
    assert commission_pool_dollars({"commission_pool_dollars": 250}) == 250
    assert commission_pool_dollars({"total_commissions": 75}) == 75


@pytest.mark.unit
def test_commission_pool_from_event_sales():
    event = {"commission_pool": 0.04, "ticket_sales": 10000, "tips": 1000, "tax_rate_percent": 10}
    assert commission_pool_dollars(None, event) == pytest.approx(324)


# ---------------------------------------------------------------------------
# Standard states
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_standard_state_tops_up_to_pool_share():
    members = [_member(5), _member(5)]
    pays = compute_event_payroll(
        EventPayrollInput(
            state="CA", base_rate=20, commission_pool=600, total_tips=0, members=members
        )
    )
    for pay in pays:
        assert pay.ext_amt_on_reg_rate == 150
        assert pay.commission_amt == 150
        assert pay.total_final_commission_amt == 300
        assert pay.rest_break == 9
        assert pay.total_pay == 309


@pytest.mark.unit
def test_minimum_event_pay_applies():
    pays = compute_event_payroll(
        EventPayrollInput(
            state="CA", base_rate=20, commission_pool=0, total_tips=0, members=[_member(2)]
        )
    )
    assert pays[0].total_final_commission_amt == MINIMUM_EVENT_PAY


@pytest.mark.unit
def test_trailers_get_no_commission_or_tips():
    vendor, trailer = _member(5), _member(5, division="trailers")
    pays = compute_event_payroll(
        EventPayrollInput(
            state="CA",
            base_rate=20,
            commission_pool=600,
            total_tips=100,
            members=[vendor, trailer],
        )
    )
    by_user = {p.user_id: p for p in pays}
    assert by_user[vendor.user_id].total_final_commission_amt == 600
    assert by_user[vendor.user_id].tips == 100
    assert by_user[trailer.user_id].commission_amt == 0
    assert by_user[trailer.user_id].tips == 0
    assert by_user[trailer.user_id].total_final_commission_amt == MINIMUM_EVENT_PAY


@pytest.mark.unit
def test_adjustment_added_to_final_pay():
    pays = compute_event_payroll(
        EventPayrollInput(
            state="CA",
            base_rate=20,
            commission_pool=0,
            total_tips=0,
            members=[_member(2, adjustment=-25)],
        )
    )
    data = pays[0].to_dict()
    assert data["totalPay"] == 159
    assert data["adjustmentAmount"] == -25
    assert data["finalPay"] == 134


# ---------------------------------------------------------------------------
# Arizona / New York
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_az_splits_pool_evenly_after_base_pay():
    members = [_member(10), _member(10)]
    pays = compute_event_payroll(
        EventPayrollInput(
            state="AZ", base_rate=20, commission_pool=1000, total_tips=100, members=members
        )
    )
    for pay in pays:
        assert pay.commission_amt == pytest.approx(300)
        assert pay.total_final_commission_amt == pytest.approx(500)
        assert pay.loaded_rate == pytest.approx(50)
        assert pay.tips == pytest.approx(50)
        assert pay.rest_break == 0


@pytest.mark.unit
def test_az_weekly_overtime_pays_time_and_a_half_on_loaded_rate():
    member = _member(10, prior=35)
    pay = compute_event_payroll(
        EventPayrollInput(
            state="NY", base_rate=20, commission_pool=300, total_tips=0, members=[member]
        )
    )[0]
    assert pay.weekly_overtime
    assert pay.commission_amt == 0
    assert pay.reg_rate == 0
    assert pay.ot_rate == pytest.approx(30)
    assert pay.total_final_commission_amt == pytest.approx(300)


@pytest.mark.unit
def test_member_without_hours_earns_nothing():
    pay = compute_event_payroll(
        EventPayrollInput(
            state="AZ", base_rate=20, commission_pool=500, total_tips=50, members=[_member(0)]
        )
    )[0]
    assert pay.total_pay == 0


@pytest.mark.unit
def test_az_member_without_division_gets_no_commission():
    vendor, unassigned = _member(8), _member(8, division=None)
    pays = compute_event_payroll(
        EventPayrollInput(
            state="AZ",
            base_rate=20,
            commission_pool=1000,
            total_tips=0,
            members=[vendor, unassigned],
        )
    )
    by_user = {p.user_id: p for p in pays}
    assert by_user[vendor.user_id].commission_amt == pytest.approx(840)
    assert by_user[vendor.user_id].total_final_commission_amt == pytest.approx(1000)
    assert by_user[unassigned.user_id].commission_amt == 0
    assert by_user[unassigned.user_id].total_final_commission_amt == pytest.approx(160)
