"""Regions and the venue reference list used for vendor search."""

from fastapi import APIRouter, Depends, Query, status
from libs.db.session import get_async_db
from services.events_service.models import Region, VenueReference
from services.events_service.schemas import RegionCreate, RegionResponse, VenueResponse
from services.identity_service.dependencies import get_current_account, require_roles
from services.identity_service.models import EXEC_ROLES, Profile, User
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["regions"])


@router.get("/regions")
async def list_regions(
    include_inactive: bool = Query(False),
    with_vendor_count: bool = Query(False),
    _: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(Region).order_by(Region.name)
    if not include_inactive:
        query = query.where(Region.is_active.is_(True))
    regions = (await db.execute(query)).scalars().all()

    counts: dict = {}
    if with_vendor_count and regions:
        result = await db.execute(
            select(Profile.region_id, func.count(Profile.id))
            .where(Profile.region_id.in_([r.id for r in regions]))
            .group_by(Profile.region_id)
        )
        counts = dict(result.all())

    payload = []
    for region in regions:
        item = RegionResponse.model_validate(region)
        if with_vendor_count:
            item.vendor_count = counts.get(region.id, 0)
        payload.append(item.model_dump(mode="json", exclude_none=not with_vendor_count))
    return {"regions": payload, "count": len(payload)}


@router.post("/regions", status_code=status.HTTP_201_CREATED)
async def create_region(
    payload: RegionCreate,
    _: User = Depends(require_roles(*EXEC_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    region = Region(**payload.model_dump())
    db.add(region)
    await db.commit()
    return {"region": RegionResponse.model_validate(region).model_dump(mode="json")}


@router.get("/venues", response_model=list[VenueResponse])
async def list_venues(
    _: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(VenueReference).order_by(VenueReference.venue_name))
    return result.scalars().all()
