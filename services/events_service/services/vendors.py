"""
Available-vendor search for an event.

Candidates are vendors the event owner invited in bulk who marked the event
date as available. They are optionally narrowed to a region, either by the
region assigned to the vendor or geographically by the region's radius, and
sorted nearest-first from the venue.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from fastapi import HTTPException, status
from libs.common.encryption import safe_decrypt
from libs.common.geo import haversine_miles
from services.events_service.models import (
    Event,
    InvitationType,
    Region,
    VendorInvitation,
    VenueReference,
)
from services.identity_service.models import Profile, User
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


@dataclass
class VendorCandidate:
    user: User
    profile: Optional[Profile]

    @property
    def coordinates(self) -> Optional[tuple[float, float]]:
        if self.profile is None:
            return None
        if self.profile.latitude is None or self.profile.longitude is None:
            return None
        return self.profile.latitude, self.profile.longitude

    @property
    def region_ids(self) -> set[uuid.UUID]:
        ids = {self.user.region_id}
        if self.profile is not None:
            ids.add(self.profile.region_id)
        ids.discard(None)
        return ids


def is_available_on(availability: Any, day: str) -> bool:
    if not isinstance(availability, list):
        return False
    return any(
        isinstance(entry, dict) and entry.get("date") == day and entry.get("available") is True
        for entry in availability
    )


def in_region(
    candidate: VendorCandidate, region: Region, geo_filter: bool
) -> bool:
    if not geo_filter:
        return region.id in candidate.region_ids
    coords = candidate.coordinates
    if (
        coords is None
        or region.center_lat is None
        or region.center_lng is None
        or region.radius_miles is None
    ):
        return False
    distance = haversine_miles(coords[0], coords[1], region.center_lat, region.center_lng)
    return distance <= region.radius_miles


def rank_vendors(
    candidates: Iterable[VendorCandidate],
    venue: VenueReference,
) -> list[dict[str, Any]]:
    """Decrypt display fields, measure distance to the venue and sort."""
    vendors = []
    for candidate in candidates:
        profile = candidate.profile
        first_name = safe_decrypt(profile.first_name) if profile else ""
        last_name = safe_decrypt(profile.last_name) if profile else ""

        region = (profile.region_id if profile else None) or candidate.user.region_id

        distance = None
        coords = candidate.coordinates
        if coords and venue.latitude is not None and venue.longitude is not None:
            distance = round(
                haversine_miles(venue.latitude, venue.longitude, coords[0], coords[1]), 1
            )

        vendors.append(
            {
                "id": str(candidate.user.id),
                "email": candidate.user.email,
                "role": candidate.user.role.value,
                "division": candidate.user.division.value if candidate.user.division else None,
                "first_name": first_name,
                "last_name": last_name,
                "phone": safe_decrypt(profile.phone) if profile else "",
                "city": profile.city if profile else None,
                "state": profile.state if profile else None,
                "region_id": str(region) if region else None,
                "distance": distance,
            }
        )

    vendors.sort(
        key=lambda v: (
            v["distance"] is None,
            v["distance"] if v["distance"] is not None else 0,
            f"{v['first_name']} {v['last_name']}".strip().lower(),
        )
    )
    return vendors


async def find_available_vendors(
    db: AsyncSession,
    *,
    event: Event,
    owner_id: uuid.UUID,
    region_id: Optional[uuid.UUID] = None,
    geo_filter: bool = False,
) -> dict[str, Any]:
    venue = (
        await db.execute(
            select(VenueReference)
            .where(func.lower(VenueReference.venue_name) == event.venue.strip().lower())
            .limit(1)
        )
    ).scalar_one_or_none()
    if venue is None:
        return {"error": "Venue not found", "vendors": []}

    day = event.event_date.isoformat()
    invitations = (
        await db.execute(
            select(VendorInvitation).where(
                VendorInvitation.invited_by == owner_id,
                VendorInvitation.invitation_type == InvitationType.BULK,
            )
        )
    ).scalars().all()
    available_ids = {
        inv.vendor_id for inv in invitations if is_available_on(inv.availability, day)
    }
    if not available_ids:
        return {"vendors": []}

    users = (
        await db.execute(
            select(User).where(User.id.in_(available_ids), User.is_active.is_(True))
        )
    ).scalars().all()
    candidates = [VendorCandidate(user=user, profile=user.profile) for user in users]

    if region_id is not None:
        region = (
            await db.execute(select(Region).where(Region.id == region_id))
        ).scalar_one_or_none()
        if region is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Region not found")
        candidates = [c for c in candidates if in_region(c, region, geo_filter)]

    return {"vendors": rank_vendors(candidates, venue)}
