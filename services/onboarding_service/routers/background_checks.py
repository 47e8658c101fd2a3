"""Background check tracking for vendors."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.common.pdf import generate_background_checks_pdf
from libs.db.session import get_async_db
from services.identity_service.dependencies import require_roles
from services.identity_service.models import HR_ROLES, User, UserRole
from services.identity_service.services.accounts import get_user_or_404
from services.identity_service.services.profiles import full_name
from services.onboarding_service.models import (
    BackgroundCheck,
    BackgroundCheckStatus,
    I9Document,
)
from services.onboarding_service.schemas import BackgroundCheckRow, BackgroundCheckUpdate
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/background-checks", tags=["background-checks"])

REVIEWER_ROLES = ("backgroundchecker", *HR_ROLES)


async def _roster(db: AsyncSession) -> list[BackgroundCheckRow]:
    users = (
        await db.execute(
            select(User)
            .where(User.role.in_([UserRole.VENDOR, UserRole.WORKER]))
            .order_by(User.email)
        )
    ).scalars().all()
    checks = {
        c.user_id: c for c in (await db.execute(select(BackgroundCheck))).scalars().all()
    }
    documents = {
        d.user_id: d for d in (await db.execute(select(I9Document))).scalars().all()
    }

    rows = []
    for user in users:
        check = checks.get(user.id)
        docs = documents.get(user.id)
        rows.append(
            BackgroundCheckRow(
                user_id=user.id,
                email=user.email,
                full_name=full_name(user.profile, fallback=user.email),
                state=user.profile.state if user.profile else None,
                status=check.status if check else BackgroundCheckStatus.PENDING,
                notes=check.notes if check else None,
                completed_at=check.completed_at if check else None,
                has_i9_documents=bool(docs and docs.has_any_document()),
            )
        )
    return rows


@router.get("", response_model=list[BackgroundCheckRow])
async def list_background_checks(
    _: User = Depends(require_roles(*REVIEWER_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    return await _roster(db)


@router.post("", response_model=BackgroundCheckRow)
async def update_background_check(
    payload: BackgroundCheckUpdate,
    reviewer: User = Depends(require_roles(*REVIEWER_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    user = await get_user_or_404(db, payload.user_id)
    result = await db.execute(
        select(BackgroundCheck).where(BackgroundCheck.user_id == user.id)
    )
    check = result.scalar_one_or_none()
    if check is None:
        check = BackgroundCheck(user_id=user.id)
        db.add(check)

    check.status = payload.status
    check.notes = payload.notes
    check.checked_by = reviewer.id
    completed = payload.status == BackgroundCheckStatus.COMPLETED
    check.completed_at = utc_now() if completed else None
    user.background_check_completed = completed
    await db.commit()

    logger.info("Background check for %s set to %s", user.id, payload.status.value)
    docs = (
        await db.execute(select(I9Document).where(I9Document.user_id == user.id))
    ).scalar_one_or_none()
    return BackgroundCheckRow(
        user_id=user.id,
        email=user.email,
        full_name=full_name(user.profile, fallback=user.email),
        state=user.profile.state if user.profile else None,
        status=check.status,
        notes=check.notes,
        completed_at=check.completed_at,
        has_i9_documents=bool(docs and docs.has_any_document()),
    )


@router.get("/pdf")
async def export_background_checks_pdf(
    _: User = Depends(require_roles(*REVIEWER_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    rows = await _roster(db)
    pdf = generate_background_checks_pdf([row.model_dump(mode="json") for row in rows])
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="background-checks.pdf"'},
    )
