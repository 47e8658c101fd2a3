"""State base pay rates."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.common.validators import US_STATE_CODES
from libs.db.session import get_async_db
from services.identity_service.dependencies import require_roles
from services.identity_service.models import User
from services.payroll_service.models import StateRate
from services.payroll_service.schemas import StateRateResponse, StateRateUpdate
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/rates", tags=["rates"])

RATE_EDITOR_ROLES = ("exec", "admin", "finance")


@router.get("")
async def list_rates(db: AsyncSession = Depends(get_async_db)):
    result = await db.execute(select(StateRate).order_by(StateRate.state_name))
    return {
        "rates": [
            StateRateResponse.model_validate(r).model_dump(mode="json")
            for r in result.scalars().all()
        ]
    }


@router.put("/{state_code}")
async def upsert_rate(
    state_code: str,
    payload: StateRateUpdate,
    _: User = Depends(
        require_roles(
            *RATE_EDITOR_ROLES, detail="Access Denied: Only executives can update rates"
        )
    ),
    db: AsyncSession = Depends(get_async_db),
):
    code = state_code.strip().upper()
    if code not in US_STATE_CODES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid state code")

    rate = (
        await db.execute(select(StateRate).where(StateRate.state_code == code))
    ).scalar_one_or_none()
    if rate is None:
        if not payload.state_name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="state_name is required for a new state",
            )
        rate = StateRate(state_code=code, state_name=payload.state_name)
        db.add(rate)

    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(rate, field, value)
    await db.commit()
    return {
        "success": True,
        "message": "Rates updated successfully",
        "rate": StateRateResponse.model_validate(rate).model_dump(mode="json"),
    }
