"""Integration tests for events_service: events, teams, invitations and vendor search."""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from services.events_service.app.main import app
from services.attendance_service.models import TimeEntryAction
from services.events_service.models import (
    EventTeamMember,
    InvitationStatus,
    ManagerTeamMember,
    TeamMemberStatus,
    VendorInvitation,
)
from services.identity_service.models import UserRole
from sqlalchemy import select
from tests.conftest import make_user, override_auth
from tests.factories import (
    EventFactory,
    RegionFactory,
    TeamMemberFactory,
    TimeEntryFactory,
    VendorInvitationFactory,
    VenueFactory,
)

EVENT_PAYLOAD = {
    "event_name": "Fall Festival",
    "venue": "Hollywood Bowl",
    "city": "Los Angeles",
    "state": "ca",
    "event_date": "2024-10-12",
    "start_time": "17:00:00",
    "end_time": "23:30:00",
}


async def _event(db, owner, **overrides):
    event = EventFactory.create(created_by=owner.id, **overrides)
    db.add(event)
    await db.commit()
    return event


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_manager_creates_event(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    with override_auth(app, manager):
        response = await events_client.post("/events", json=EVENT_PAYLOAD)
    assert response.status_code == 201, response.text
    event = response.json()["event"]
    assert event["state"] == "CA"
    assert event["created_by"] == str(manager.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_event_requires_fields(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    with override_auth(app, manager):
        response = await events_client.post("/events", json={**EVENT_PAYLOAD, "venue": " "})
    assert response.status_code == 400
    assert response.json()["error"].startswith("Missing one or more required fields")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_cannot_create_event(events_client, db_session):
    vendor = await make_user(db_session)
    with override_auth(app, vendor):
        response = await events_client.post("/events", json=EVENT_PAYLOAD)
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_supervisor_sees_manager_events(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    supervisor = await make_user(db_session, UserRole.SUPERVISOR)
    other = await make_user(db_session, UserRole.MANAGER)
    db_session.add(ManagerTeamMember(manager_id=manager.id, member_id=supervisor.id))
    await db_session.commit()
    mine = await _event(db_session, manager, event_name="Managed")
    await _event(db_session, other, event_name="Elsewhere")

    with override_auth(app, supervisor):
        response = await events_client.get("/events")
    assert [e["id"] for e in response.json()["events"]] == [str(mine.id)]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_and_delete_event(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    stranger = await make_user(db_session, UserRole.MANAGER)
    event = await _event(db_session, manager)

    with override_auth(app, stranger):
        denied = await events_client.patch(f"/events/{event.id}", json={"artist": "X"})
    assert denied.status_code == 403

    with override_auth(app, manager):
        updated = await events_client.patch(f"/events/{event.id}", json={"artist": "New Act"})
        assert updated.json()["event"]["artist"] == "New Act"
        cleared = await events_client.patch(f"/events/{event.id}", json={"venue": None})
        assert cleared.json() == {"error": "venue cannot be empty"}
        deleted = await events_client.delete(f"/events/{event.id}")
        assert deleted.json() == {"success": True}
        missing = await events_client.get(f"/events/{event.id}")
    assert missing.status_code == 404


# ---------------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_auto_confirm_adds_team_members(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendors = [await make_user(db_session) for _ in range(2)]
    event = await _event(db_session, manager)

    with override_auth(app, manager):
        response = await events_client.post(
            f"/events/{event.id}/team",
            json={"vendorIds": [str(v.id) for v in vendors], "autoConfirm": True},
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["newMembers"] == 2
        assert data["message"] == "2 vendors added to the team and confirmed."

        again = await events_client.post(
            f"/events/{event.id}/team",
            json={"vendorIds": [str(vendors[0].id)], "autoConfirm": True},
        )
        assert again.json()["alreadyOnTeam"] == 1

        team = await events_client.get(f"/events/{event.id}/team")
    assert team.json()["teamSize"] == 2
    assert {m["status"] for m in team.json()["team"]} == {"confirmed"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invitations_are_pending_until_answered(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session, first_name="Ina")
    event = await _event(db_session, manager)

    with override_auth(app, manager):
        response = await events_client.post(
            f"/events/{event.id}/team", json={"vendorIds": [str(vendor.id)]}
        )
    assert response.json()["emailStats"] == {"sent": 0, "failed": 1}

    row = (
        await db_session.execute(
            select(EventTeamMember).where(EventTeamMember.event_id == event.id)
        )
    ).scalar_one()
    assert row.status == TeamMemberStatus.PENDING_CONFIRMATION

    invitation = await events_client.get(f"/team-confirmation/{row.confirmation_token}")
    assert invitation.json()["invitation"]["vendor"]["firstName"] == "Ina"

    bad = await events_client.post(
        f"/team-confirmation/{row.confirmation_token}", json={"action": "maybe"}
    )
    assert bad.status_code == 400

    answer = await events_client.post(
        f"/team-confirmation/{row.confirmation_token}", json={"action": "decline"}
    )
    assert answer.json()["status"] == "declined"

    repeat = await events_client.post(
        f"/team-confirmation/{row.confirmation_token}", json={"action": "confirm"}
    )
    assert repeat.json() == {"error": "This invitation has already been responded to"}

    answered = await events_client.get(f"/team-confirmation/{row.confirmation_token}")
    assert answered.json()["alreadyResponded"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_confirmation_token(events_client):
    response = await events_client.get("/team-confirmation/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Invalid or expired confirmation link"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_team_requires_vendor_ids(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    event = await _event(db_session, manager)
    with override_auth(app, manager):
        response = await events_client.post(f"/events/{event.id}/team", json={})
    assert response.json() == {"error": "Vendor IDs are required"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_remove_team_member(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    event = await _event(db_session, manager)
    db_session.add(TeamMemberFactory.create(event_id=event.id, vendor_id=vendor.id))
    await db_session.commit()

    with override_auth(app, manager):
        response = await events_client.delete(f"/events/{event.id}/team/{vendor.id}")
        assert response.json() == {"success": True}
        missing = await events_client.delete(f"/events/{event.id}/team/{vendor.id}")
    assert missing.status_code == 404


# ---------------------------------------------------------------------------
# Available vendors
# ---------------------------------------------------------------------------


async def _available_vendor(db, manager, day, **profile):
    vendor = await make_user(db, **profile)
    db.add(
        VendorInvitationFactory.create(
            vendor_id=vendor.id,
            invited_by=manager.id,
            availability=[{"date": day.isoformat(), "available": True}],
        )
    )
    await db.commit()
    return vendor


@pytest.mark.asyncio
@pytest.mark.integration
async def test_available_vendors_sorted_by_distance(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    day = date(2024, 10, 12)
    event = await _event(db_session, manager, event_date=day)
    db_session.add(VenueFactory.create())
    await db_session.commit()

    far = await _available_vendor(
        db_session, manager, day, first_name="Far", latitude=34.4208, longitude=-119.6982
    )
    near = await _available_vendor(
        db_session, manager, day, first_name="Near", latitude=34.09, longitude=-118.36
    )
    busy = await make_user(db_session, first_name="Busy")
    db_session.add(
        VendorInvitationFactory.create(
            vendor_id=busy.id,
            invited_by=manager.id,
            availability=[{"date": day.isoformat(), "available": False}],
        )
    )
    await db_session.commit()

    with override_auth(app, manager):
        response = await events_client.get(f"/events/{event.id}/available-vendors")
    assert [v["id"] for v in response.json()["vendors"]] == [str(near.id), str(far.id)]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_available_vendors_geo_region_filter(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    day = date(2024, 10, 12)
    event = await _event(db_session, manager, event_date=day)
    region = RegionFactory.create(radius_miles=20)
    db_session.add_all([VenueFactory.create(), region])
    await db_session.commit()

    inside = await _available_vendor(
        db_session, manager, day, latitude=34.1122, longitude=-118.3391
    )
    await _available_vendor(db_session, manager, day, latitude=32.7157, longitude=-117.1611)

    with override_auth(app, manager):
        response = await events_client.get(
            f"/events/{event.id}/available-vendors",
            params={"region_id": str(region.id), "geo_filter": "true"},
        )
        unknown = await events_client.get(
            f"/events/{event.id}/available-vendors", params={"region_id": str(uuid.uuid4())}
        )
    assert [v["id"] for v in response.json()["vendors"]] == [str(inside.id)]
    assert unknown.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_available_vendors_unknown_venue(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    event = await _event(db_session, manager, venue="Nowhere Hall")
    with override_auth(app, manager):
        response = await events_client.get(f"/events/{event.id}/available-vendors")
    assert response.json() == {"error": "Venue not found", "vendors": []}


# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_regions_with_vendor_count(events_client, db_session):
    admin = await make_user(db_session, UserRole.ADMIN)
    with override_auth(app, admin):
        created = await events_client.post(
            "/regions",
            json={"name": "Inland", "center_lat": 34.1, "center_lng": -117.3, "radius_miles": 30},
        )
        assert created.status_code == 201
        region_id = created.json()["region"]["id"]

        await make_user(db_session, region_id=uuid.UUID(region_id))
        listed = await events_client.get("/regions", params={"with_vendor_count": "true"})
    regions = listed.json()["regions"]
    assert regions[0]["name"] == "Inland"
    assert regions[0]["vendor_count"] == 1


# ---------------------------------------------------------------------------
# Team confirmations and timesheet
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_resend_confirmation_refreshes_missing_tokens(events_client, db_session, monkeypatch):
    sent = []

    async def fake_send(**kwargs):
        sent.append(kwargs)
        return True

    monkeypatch.setattr(
        "services.events_service.services.team.send_team_invitation_email", fake_send
    )
    manager = await make_user(db_session, UserRole.MANAGER)
    pending_vendor = await make_user(db_session, first_name="Pending")
    confirmed_vendor = await make_user(db_session)
    event = await _event(db_session, manager)
    pending_row = TeamMemberFactory.create(
        event_id=event.id,
        vendor_id=pending_vendor.id,
        assigned_by=manager.id,
        status=TeamMemberStatus.PENDING_CONFIRMATION,
        confirmation_token=None,
    )
    db_session.add_all(
        [
            pending_row,
            TeamMemberFactory.create(
                event_id=event.id, vendor_id=confirmed_vendor.id, assigned_by=manager.id
            ),
        ]
    )
    await db_session.commit()

    with override_auth(app, manager):
        response = await events_client.post(f"/events/{event.id}/team/resend-confirmation")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Successfully resent confirmation to 1 invited vendor."
    assert body["stats"] == {"requested": 1, "sent": 1, "failed": 0, "refreshed": 1}
    assert [mail["first_name"] for mail in sent] == ["Pending"]

    await db_session.refresh(pending_row)
    assert pending_row.confirmation_token
    assert sent[0]["confirmation_token"] == pending_row.confirmation_token


@pytest.mark.asyncio
@pytest.mark.integration
async def test_resend_confirmation_nothing_pending(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    event = await _event(db_session, manager)

    with override_auth(app, manager):
        response = await events_client.post(f"/events/{event.id}/team/resend-confirmation")
    assert response.json()["message"] == "No invited vendors are pending confirmation."
    assert response.json()["stats"]["sent"] == 0

    with override_auth(app, vendor):
        forbidden = await events_client.post(f"/events/{event.id}/team/resend-confirmation")
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "Unauthorized"}


def _at(hour, minute=0):
    return datetime(2024, 10, 12, hour, minute, tzinfo=timezone.utc)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_event_timesheet_spans(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    with_meal = await make_user(db_session)
    split_shift = await make_user(db_session)
    event = await _event(db_session, manager, event_date=date(2024, 10, 12))
    for vendor in (with_meal, split_shift):
        db_session.add(
            TeamMemberFactory.create(event_id=event.id, vendor_id=vendor.id, assigned_by=manager.id)
        )

    punches = [
        (with_meal, TimeEntryAction.CLOCK_IN, _at(18)),
        (with_meal, TimeEntryAction.MEAL_START, _at(20)),
        (with_meal, TimeEntryAction.MEAL_END, _at(20, 30)),
        (with_meal, TimeEntryAction.CLOCK_OUT, _at(23)),
        (split_shift, TimeEntryAction.CLOCK_IN, _at(18)),
        (split_shift, TimeEntryAction.CLOCK_OUT, _at(20)),
        (split_shift, TimeEntryAction.CLOCK_IN, _at(20, 45)),
        (split_shift, TimeEntryAction.CLOCK_OUT, _at(22)),
    ]
    for vendor, action, timestamp in punches:
        db_session.add(
            TimeEntryFactory.create(
                user_id=vendor.id, event_id=event.id, action=action, timestamp=timestamp
            )
        )
    await db_session.commit()

    with override_auth(app, manager):
        response = await events_client.get(f"/events/{event.id}/timesheet")

    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == {
        "totalWorkers": 2,
        "totalEntriesFound": 8,
        "dateQueried": "2024-10-12",
    }
    assert body["totals"][str(with_meal.id)] == 5 * 3600 * 1000
    assert body["totals"][str(split_shift.id)] == int(3.25 * 3600 * 1000)

    recorded = body["spans"][str(with_meal.id)]
    assert recorded["firstIn"] == "2024-10-12T18:00:00+00:00"
    assert recorded["lastOut"] == "2024-10-12T23:00:00+00:00"
    assert recorded["firstMealStart"] == "2024-10-12T20:00:00+00:00"
    assert recorded["lastMealEnd"] == "2024-10-12T20:30:00+00:00"
    assert recorded["secondMealStart"] is None

    detected = body["spans"][str(split_shift.id)]
    assert detected["firstMealStart"] == "2024-10-12T20:00:00+00:00"
    assert detected["lastMealEnd"] == "2024-10-12T20:45:00+00:00"
    assert detected["lastOut"] == "2024-10-12T22:00:00+00:00"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_event_timesheet_requires_access(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    event = await _event(db_session, manager)

    with override_auth(app, vendor):
        response = await events_client.get(f"/events/{event.id}/timesheet")
    assert response.status_code == 403

    with override_auth(app, manager):
        empty = await events_client.get(f"/events/{event.id}/timesheet")
    assert empty.json()["totals"] == {}
    assert empty.json()["summary"]["totalWorkers"] == 0


# ---------------------------------------------------------------------------
# Availability invitations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_bulk_invite_then_vendor_answers(events_client, db_session, monkeypatch):
    mails = []

    async def fake_send(**kwargs):
        mails.append(kwargs)
        return True

    monkeypatch.setattr(
        "services.events_service.services.invitations.send_vendor_bulk_invitation_email",
        fake_send,
    )
    manager = await make_user(db_session, UserRole.MANAGER, first_name="Maya", last_name="Lee")
    vendor = await make_user(db_session, first_name="Vic")

    with override_auth(app, manager):
        response = await events_client.post(
            "/invitations/bulk-invite",
            json={"vendorIds": [str(vendor.id)], "durationWeeks": 2},
        )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Sent 1 invitation(s) successfully"
    assert body["stats"] == {"total": 1, "sent": 1, "failed": 0}
    assert mails[0]["manager_name"] == "Maya Lee"
    assert mails[0]["duration_weeks"] == 2
    token = mails[0]["invitation_token"]

    details = await events_client.get(f"/invitations/{token}")
    assert details.status_code == 200
    assert details.json()["invitation"]["status"] == "pending"
    assert details.json()["invitation"]["invitationType"] == "bulk"
    assert details.json()["availability"] is None

    answered = await events_client.post(
        f"/invitations/{token}",
        json={
            "availability": [
                {"date": "2024-10-12", "available": True, "notes": " evenings "},
                {"date": "2024-10-13", "available": "yes"},
            ],
            "notes": "Can drive",
        },
    )
    assert answered.json() == {
        "success": True,
        "status": "accepted",
        "message": "Availability saved successfully",
    }

    invitation = (
        await db_session.execute(select(VendorInvitation).where(VendorInvitation.token == token))
    ).scalar_one()
    await db_session.refresh(invitation)
    assert invitation.status == InvitationStatus.ACCEPTED
    assert invitation.responded_at is not None
    assert invitation.notes == "Can drive"
    assert invitation.availability == [
        {"date": "2024-10-12", "available": True, "notes": "evenings"},
        {"date": "2024-10-13", "available": False, "notes": None},
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invitation_declined_when_no_day_available(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    db_session.add(
        VendorInvitationFactory.create(
            vendor_id=vendor.id, invited_by=manager.id, token="decline-token"
        )
    )
    await db_session.commit()

    response = await events_client.post(
        "/invitations/decline-token",
        json={"availability": [{"date": "2024-10-12", "available": False}]},
    )
    assert response.json()["status"] == "declined"


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    ("availability", "error"),
    [
        ("monday", "Availability data is required"),
        ([{"available": True}], "Availability data is invalid"),
    ],
)
async def test_invitation_rejects_bad_availability(
    events_client, db_session, availability, error
):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    db_session.add(
        VendorInvitationFactory.create(vendor_id=vendor.id, invited_by=manager.id, token="bad-token")
    )
    await db_session.commit()

    response = await events_client.post(
        "/invitations/bad-token", json={"availability": availability}
    )
    assert response.status_code == 400
    assert response.json() == {"error": error}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_expired_and_unknown_invitations(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)
    invitation = VendorInvitationFactory.create(
        vendor_id=vendor.id,
        invited_by=manager.id,
        token="old-token",
        expires_at=datetime.now(timezone.utc) - timedelta(days=1),
    )
    db_session.add(invitation)
    await db_session.commit()

    expired = await events_client.get("/invitations/old-token")
    assert expired.status_code == 410
    assert expired.json() == {"error": "Invitation has expired"}
    await db_session.refresh(invitation)
    assert invitation.status == InvitationStatus.EXPIRED

    missing = await events_client.get("/invitations/no-such-token")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Invitation not found"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_bulk_invite_validation(events_client, db_session):
    manager = await make_user(db_session, UserRole.MANAGER)
    vendor = await make_user(db_session)

    with override_auth(app, manager):
        empty = await events_client.post("/invitations/bulk-invite", json={"vendorIds": []})
        unknown = await events_client.post(
            "/invitations/bulk-invite", json={"vendorIds": [str(uuid.uuid4())]}
        )
    assert empty.status_code == 400
    assert empty.json() == {"error": "Vendor IDs are required"}
    assert unknown.status_code == 404

    with override_auth(app, vendor):
        forbidden = await events_client.post(
            "/invitations/bulk-invite", json={"vendorIds": [str(vendor.id)]}
        )
    assert forbidden.status_code == 403
