"""Login location verification against configured geofence zones."""

from typing import Any, Optional

from fastapi import HTTPException, Request, status
from libs.common.geo import validate_geofence
from libs.common.logging import get_logger
from services.attendance_service.models import GeofenceZone, LoginLocation
from services.identity_service.models import User
from services.identity_service.services.audit import log_audit_event
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def verify_login_location(
    db: AsyncSession,
    *,
    user: User,
    latitude: float,
    longitude: float,
    accuracy: Optional[float],
    request: Optional[Request] = None,
) -> dict[str, Any]:
    zones = (
        await db.execute(select(GeofenceZone).where(GeofenceZone.is_active.is_(True)))
    ).scalars().all()
    result = validate_geofence(
        latitude, longitude, [zone.as_zone() for zone in zones], user.role.value
    )

    matched_id = result.matched_zone.get("id") if result.matched_zone else None
    db.add(
        LoginLocation(
            user_id=user.id,
            latitude=latitude,
            longitude=longitude,
            accuracy_meters=accuracy,
            within_geofence=result.within,
            matched_zone_id=next(
                (zone.id for zone in zones if str(zone.id) == matched_id), None
            ),
            distance_meters=result.distance_meters,
        )
    )
    log_audit_event(
        db,
        user_id=user.id,
        action="geofence_validation_success" if result.within else "geofence_validation_failed",
        resource_type="geofence",
        success=result.within,
        metadata={
            "matched_zone": result.matched_zone.get("name") if result.matched_zone else None,
            "distance_meters": result.distance_meters,
            "accuracy": accuracy,
        },
        request=request,
    )
    await db.commit()

    if not result.within:
        logger.warning("Login outside geofence for user %s", user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "allowed": False,
                "error": result.message,
                "distanceMeters": result.distance_meters,
            },
        )

    return {
        "allowed": True,
        "message": "Location verified",
        "matchedZone": result.matched_zone.get("name") if result.matched_zone else None,
        "distanceMeters": result.distance_meters,
    }
