from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID
import logging

from ..dependencies import get_db_session, get_current_actor, get_review_service
from ..schemas.auth import Actor
from ..schemas.rating import RatingSummary, WorkStatusUpdate, ExpertWorkStatusResponse
from ..services.reviews import ReviewService
from ..services.work_status import set_manual_work_status

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Expert Rating"])


@router.get("/summary/{expert_id}", response_model=RatingSummary)
async def get_expert_rating_summary(
    expert_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    service: ReviewService = Depends(get_review_service),
):
    """Сводка рейтинга эксперта (публично)"""
    summary = await service.get_expert_rating_summary(db, expert_id)
    return RatingSummary.model_validate(summary)


@router.put("/experts/{expert_id}/work-status", response_model=ExpertWorkStatusResponse)
async def update_work_status(
    expert_id: UUID,
    data: WorkStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    """Ручная смена рабочего статуса эксперта"""
    expert = await set_manual_work_status(db, expert_id, actor.subject_id, data.status)
    await db.commit()
    return ExpertWorkStatusResponse.model_validate(expert)
