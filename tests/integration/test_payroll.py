"""Integration tests for payroll_service: rates, payments, adjustments, sick leave, paystubs."""

import uuid
from datetime import date

import pytest
from services.identity_service.models import UserRole
from services.payroll_service.app.main import app
from services.payroll_service.models import (
    EventPayment,
    EventVendorPayment,
    PaymentAdjustment,
    SickLeave,
    SickLeaveStatus,
)
from sqlalchemy import select
from tests.conftest import make_user, override_auth
from tests.factories import (
    EventFactory,
    SickLeaveFactory,
    StateRateFactory,
    TeamMemberFactory,
)


async def _paid_event(db, owner, vendor, *, hours=5.0, state="CA", base_rate=20.0):
    """An event with one team member and a saved vendor payment row."""
    event = EventFactory.create(created_by=owner.id, state=state, event_date=date(2024, 10, 12))
    db.add_all(
        [
            event,
            StateRateFactory.create(state_code=state, base_rate=base_rate),
            TeamMemberFactory.create(event_id=event.id, vendor_id=vendor.id),
            EventVendorPayment(event_id=event.id, user_id=vendor.id, actual_hours=hours),
        ]
    )
    await db.commit()
    return event


# ---------------------------------------------------------------------------
# Rates
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_rates_is_public(payroll_client, db_session):
    db_session.add(StateRateFactory.create())
    await db_session.commit()
    response = await payroll_client.get("/rates")
    assert response.json()["rates"][0]["state_code"] == "CA"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_exec_updates_rate(payroll_client, db_session):
    executive = await make_user(db_session, UserRole.EXEC)
    with override_auth(app, executive):
        created = await payroll_client.put(
            "/rates/nv", json={"base_rate": 15.5, "state_name": "Nevada"}
        )
        assert created.json()["rate"]["state_code"] == "NV"

        updated = await payroll_client.put("/rates/NV", json={"base_rate": 16})
        assert updated.json()["rate"]["base_rate"] == 16
        assert updated.json()["rate"]["state_name"] == "Nevada"

        invalid = await payroll_client.put("/rates/XX", json={"base_rate": 16})
    assert invalid.json() == {"error": "Invalid state code"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_manager_cannot_update_rate(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    with override_auth(app, manager):
        response = await payroll_client.put("/rates/CA", json={"base_rate": 30})
    assert response.status_code == 403
    assert response.json() == {"error": "Access Denied: Only executives can update rates"}


# ---------------------------------------------------------------------------
# Vendor payments and adjustments
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_payments_for_event(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session, first_name="Jo", last_name="Park")
    event = await _paid_event(db_session, manager, vendor)

    with override_auth(app, manager):
        response = await payroll_client.get("/vendor-payments", params={"event_ids": str(event.id)})
    body = response.json()
    rows = body["paymentsByEvent"][str(event.id)]["vendorPayments"]
    assert rows[0]["actual_hours"] == 5.0
    assert rows[0]["users"]["profiles"]["first_name"] == "Jo"
    assert body["totalVendorPayments"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_payments_rejects_bad_ids(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    with override_auth(app, manager):
        response = await payroll_client.get("/vendor-payments", params={"event_ids": "abc"})
    assert response.json() == {"error": "Invalid event id: abc"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_cannot_read_payments(payroll_client, db_session):
    vendor = await make_user(db_session)
    with override_auth(app, vendor):
        response = await payroll_client.get("/vendor-payments")
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_save_and_read_adjustments(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    event = await _paid_event(db_session, manager, vendor)
    item = {"event_id": str(event.id), "user_id": str(vendor.id), "adjustment_amount": 25}

    with override_auth(app, manager):
        saved = await payroll_client.post("/payment-adjustments", json={"adjustments": [item]})
        assert saved.json()["message"] == "Adjustments saved successfully"

        await payroll_client.post(
            "/payment-adjustments",
            json={"adjustments": [{**item, "adjustment_amount": -10, "adjustment_note": "Late"}]},
        )
        listed = await payroll_client.get(
            "/payment-adjustments", params={"event_ids": str(event.id)}
        )
        missing = await payroll_client.get("/payment-adjustments")
        malformed = await payroll_client.post(
            "/payment-adjustments", json={"adjustments": [{"event_id": "x"}]}
        )

    adjustment = listed.json()["adjustments"][str(event.id)][str(vendor.id)]
    assert adjustment["adjustment_amount"] == -10
    assert adjustment["adjustment_note"] == "Late"
    assert missing.json() == {"error": "event_ids parameter required"}
    assert malformed.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payments_by_venue(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    finance = await make_user(db_session, UserRole.FINANCE)
    vendor = await make_user(db_session)
    event = await _paid_event(db_session, manager, vendor)
    db_session.add(
        PaymentAdjustment(event_id=event.id, user_id=vendor.id, adjustment_amount=10)
    )
    await db_session.commit()

    with override_auth(app, finance):
        response = await payroll_client.get("/payments/by-venue", params={"state": "ca"})
        pdf = await payroll_client.get("/payments/by-venue/pdf")
        bad = await payroll_client.get("/payments/by-venue", params={"start_date": "10/12/2024"})

    venue = response.json()["venues"][0]
    assert venue["venue"] == "Hollywood Bowl"
    payment = venue["events"][0]["payments"][0]
    # 5h x $20 x 1.5 = $150, plus the $9 rest break and the $10 adjustment
    assert payment["totalPay"] == 159.0
    assert payment["finalPay"] == 169.0
    assert venue["totalPayment"] == 169.0
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")
    assert bad.json() == {"error": "Invalid date format. Use YYYY-MM-DD"}


# ---------------------------------------------------------------------------
# Paystubs
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_downloads_own_paystub(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    other = await make_user(db_session)
    event = await _paid_event(db_session, manager, vendor)

    with override_auth(app, vendor):
        own = await payroll_client.get(f"/paystubs/{event.id}/{vendor.id}")
    assert own.status_code == 200
    assert own.content.startswith(b"%PDF")

    with override_auth(app, other):
        foreign = await payroll_client.get(f"/paystubs/{event.id}/{vendor.id}")
        not_paid = await payroll_client.get(f"/paystubs/{event.id}/{other.id}")
    assert foreign.status_code == 403
    assert not_paid.json() == {"error": "No payment found for this employee"}


# ---------------------------------------------------------------------------
# Sick leave
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_sick_leave(payroll_client, db_session):
    vendor = await make_user(db_session)
    with override_auth(app, vendor):
        response = await payroll_client.post(
            "/sick-leaves/request", json={"date": "2024-10-14", "hours": "6"}
        )
        assert response.status_code == 201
        body = response.json()
        assert body["record"]["status"] == "pending"
        assert body["record"]["duration_hours"] == 6
        assert body["emailSent"] is False

        mine = await payroll_client.get("/sick-leaves/me")
    assert len(mine.json()["records"]) == 1
    assert mine.json()["accrual"]["used_hours"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "payload,error",
    [
        ({"date": "14-10-2024", "hours": 4}, "A valid sick leave date is required"),
        ({"date": "2024-10-14", "hours": 0}, "Hours must be a number greater than 0 and at most 24"),
        ({"date": "2024-10-14", "hours": 25}, "Hours must be a number greater than 0 and at most 24"),
        ({"date": "2024-10-14", "hours": "lots"}, "Hours must be a number greater than 0 and at most 24"),
    ],
)
async def test_sick_leave_request_validation(payroll_client, db_session, payload, error):
    vendor = await make_user(db_session)
    with override_auth(app, vendor):
        response = await payroll_client.post("/sick-leaves/request", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": error}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_hr_approves_request(payroll_client, db_session):
    hr = await make_user(db_session, UserRole.HR)
    vendor = await make_user(db_session, first_name="Sam", last_name="Lee")
    leave = SickLeaveFactory.create(user_id=vendor.id, status=SickLeaveStatus.PENDING)
    db_session.add(leave)
    await db_session.commit()

    with override_auth(app, hr):
        pending = await payroll_client.get("/hr/sick-leaves", params={"status": "pending"})
        assert pending.json()["records"][0]["employee_name"] == "Sam Lee"

        approved = await payroll_client.patch(
            "/hr/sick-leaves", json={"id": str(leave.id), "status": "approved"}
        )
        assert approved.json()["record"]["approved_by"] == str(hr.id)

        invalid = await payroll_client.patch(
            "/hr/sick-leaves", json={"id": str(leave.id), "status": "maybe"}
        )
        unknown = await payroll_client.patch(
            "/hr/sick-leaves", json={"id": str(uuid.uuid4()), "status": "denied"}
        )
    assert invalid.json() == {"error": "Invalid status. Allowed: pending, approved, denied"}
    assert unknown.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_hr_ledger_edits(payroll_client, db_session):
    hr = await make_user(db_session, UserRole.HR)
    vendor = await make_user(db_session)

    with override_auth(app, hr):
        override = await payroll_client.post(
            "/hr/sick-leaves",
            json={
                "user_id": str(vendor.id),
                "operation": "set_adjustment",
                "adjustment_field": "year_to_date",
                "target_hours": 16,
            },
        )
        assert override.json()["target_hours"] == 16

        added = await payroll_client.post(
            "/hr/sick-leaves", json={"user_id": str(vendor.id), "hours": 6}
        )
        assert added.json()["record"]["status"] == "approved"

        removed = await payroll_client.post(
            "/hr/sick-leaves",
            json={"user_id": str(vendor.id), "operation": "remove", "duration_hours": 2},
        )
        assert removed.json()["removed_hours"] == 2

        too_many = await payroll_client.post(
            "/hr/sick-leaves",
            json={"user_id": str(vendor.id), "operation": "remove", "duration_hours": 10},
        )
        assert too_many.status_code == 400

        dashboard = await payroll_client.get("/hr/sick-leaves")

    accrual = next(a for a in dashboard.json()["accruals"] if a["user_id"] == str(vendor.id))
    assert accrual["year_to_date_hours"] == 16
    assert accrual["used_hours"] == 4
    assert accrual["balance_hours"] == 12
    assert all("OVERRIDE" not in (r["reason"] or "") for r in dashboard.json()["records"])

    rows = (
        await db_session.execute(select(SickLeave).where(SickLeave.user_id == vendor.id))
    ).scalars().all()
    assert len(rows) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_cannot_use_hr_dashboard(payroll_client, db_session):
    vendor = await make_user(db_session)
    with override_auth(app, vendor):
        response = await payroll_client.get("/hr/sick-leaves")
    assert response.status_code == 403


# ---------------------------------------------------------------------------
# Saved event payroll
# ---------------------------------------------------------------------------

SAVED_ROW_FIELDS = (
    "actual_hours",
    "regular_hours",
    "overtime_hours",
    "doubletime_hours",
    "regular_pay",
    "commissions",
    "tips",
    "total_pay",
)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_saved_payroll_matches_vendor_payments(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    event = await _paid_event(db_session, manager, vendor)

    with override_auth(app, manager):
        saved = await payroll_client.post(f"/payroll/events/{event.id}/save-payment", json={})
        listed = await payroll_client.get(
            "/vendor-payments", params={"event_ids": str(event.id)}
        )
    assert saved.status_code == 200, saved.text
    body = saved.json()
    assert body["message"] == "Payment data saved successfully"
    saved_row = body["vendorPayments"][0]
    assert saved_row["total_pay"] == 159.0
    assert body["eventPayment"]["total_payment"] == 159.0
    assert body["eventPayment"]["base_rate"] == 20.0

    listed_event = listed.json()["paymentsByEvent"][str(event.id)]
    listed_row = listed_event["vendorPayments"][0]
    for name in SAVED_ROW_FIELDS:
        assert listed_row[name] == saved_row[name], name
    assert listed_event["eventPayment"]["total_payment"] == 159.0

    rows = (await db_session.execute(select(EventVendorPayment))).scalars().all()
    summary = (await db_session.execute(select(EventPayment))).scalar_one()
    assert len(rows) == 1
    assert rows[0].event_payment_id == summary.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_save_payment_with_supplied_rows(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    dropped = await make_user(db_session)
    event = await _paid_event(db_session, manager, vendor)
    db_session.add(EventVendorPayment(event_id=event.id, user_id=dropped.id, actual_hours=2))
    await db_session.commit()

    payload = {
        "commissionPoolDollars": 300,
        "totalTips": 40,
        "vendorPayments": [
            {
                "userId": str(vendor.id),
                "actualHours": 6,
                "regularHours": 6,
                "regularPay": 120,
                "commissions": 80,
                "tips": 40,
                "totalPay": 240,
            }
        ],
    }
    with override_auth(app, manager):
        response = await payroll_client.post(
            f"/payroll/events/{event.id}/save-payment", json=payload
        )
    assert response.status_code == 200, response.text
    summary = response.json()["eventPayment"]
    assert summary["commission_pool_dollars"] == 300
    assert summary["total_commissions"] == 80
    assert summary["total_payment"] == 240

    rows = (await db_session.execute(select(EventVendorPayment))).scalars().all()
    assert [(row.user_id, row.total_pay) for row in rows] == [(vendor.id, 240)]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_save_payment_validation_and_access(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    other_manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    event = await _paid_event(db_session, manager, vendor)
    url = f"/payroll/events/{event.id}/save-payment"

    with override_auth(app, manager):
        not_a_list = await payroll_client.post(url, json={"vendorPayments": "all"})
        bad_row = await payroll_client.post(url, json={"vendorPayments": [{"totalPay": 5}]})
    with override_auth(app, other_manager):
        foreign = await payroll_client.post(url, json={})

    assert not_a_list.json() == {"error": "vendorPayments array is required"}
    assert bad_row.json() == {"error": "Each vendor payment needs a valid userId"}
    assert foreign.status_code == 403
    assert foreign.json() == {"error": "Not authorized to save payment data for this event"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_process_payroll_emails_team(payroll_client, db_session, monkeypatch):
    sent = []

    async def _fake_send(**kwargs):
        sent.append(kwargs)
        return True

    monkeypatch.setattr(
        "services.payroll_service.routers.event_payroll.send_payment_details_email", _fake_send
    )
    executive = await make_user(db_session, UserRole.EXEC)
    vendor = await make_user(db_session, first_name="Jo")
    event = await _paid_event(db_session, executive, vendor)

    with override_auth(app, executive):
        response = await payroll_client.post(f"/payroll/events/{event.id}/process-payroll")
    assert response.json() == {
        "success": True,
        "sentCount": 1,
        "failedCount": 0,
        "totalMembers": 1,
    }
    assert sent[0]["to_email"] == vendor.email
    assert sent[0]["first_name"] == "Jo"
    assert sent[0]["payment"]["finalPay"] == 159.0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_paystubs_lists_saved_rows(payroll_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    event = await _paid_event(db_session, manager, vendor)
    db_session.add(
        PaymentAdjustment(event_id=event.id, user_id=vendor.id, adjustment_amount=-4)
    )
    await db_session.commit()

    with override_auth(app, manager):
        await payroll_client.post(f"/payroll/events/{event.id}/save-payment", json={})
    with override_auth(app, vendor):
        response = await payroll_client.get("/my-paystubs")
        outside = await payroll_client.get("/my-paystubs", params={"start_date": "2024-11-01"})
        bad = await payroll_client.get("/my-paystubs", params={"end_date": "11/01/2024"})

    paystub = response.json()["paystubs"][0]
    assert paystub["event_id"] == str(event.id)
    assert paystub["total_pay"] == 159.0
    assert paystub["final_pay"] == 155.0
    assert paystub["base_rate"] == 20.0
    assert outside.json() == {"paystubs": []}
    assert bad.json() == {"error": "Invalid date format. Use YYYY-MM-DD"}
