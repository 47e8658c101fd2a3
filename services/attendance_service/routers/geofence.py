"""Login-time location verification."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from libs.common.geo import is_valid_coordinates
from libs.db.session import get_async_db
from services.attendance_service.schemas import LocationCheck
from services.attendance_service.services.geofence import verify_login_location
from services.identity_service.services.accounts import get_user_by_email
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/geofence", tags=["geofence"])


@router.post("/validate-location")
async def validate_location(
    payload: LocationCheck,
    request: Request,
    db: AsyncSession = Depends(get_async_db),
):
    if payload.latitude is None or payload.longitude is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Valid latitude and longitude are required",
        )
    if not payload.email or not payload.email.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")
    if not is_valid_coordinates(payload.latitude, payload.longitude):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid coordinates provided"
        )

    user = await get_user_by_email(db, payload.email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return await verify_login_location(
        db,
        user=user,
        latitude=payload.latitude,
        longitude=payload.longitude,
        accuracy=payload.accuracy,
        request=request,
    )
