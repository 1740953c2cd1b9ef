from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID
import logging

from passport_shared.config import config
from ..dependencies import get_db_session, get_current_actor, get_review_service
from ..schemas.auth import Actor
from ..schemas.review import ReviewCreate, ReviewResponse, ExpertResponseCreate, ReviewFlag, ReviewHide, ReviewVote
from ..services.reviews import ReviewService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    data: ReviewCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ReviewService = Depends(get_review_service),
):
    """Создать отзыв о завершённой услуге"""
    review = await service.create_review(db, data, actor.subject_id)
    await db.commit()
    await service.invalidate_expert_reviews(review.expert_id)
    return ReviewResponse.model_validate(review)


@router.get("/expert/{expert_id}", response_model=List[ReviewResponse])
async def get_expert_reviews(
    expert_id: UUID,
    limit: int = Query(config.DEFAULT_LIST_LIMIT, ge=1, le=config.MAX_LIST_LIMIT),
    db: AsyncSession = Depends(get_db_session),
    service: ReviewService = Depends(get_review_service),
):
    """Опубликованные отзывы эксперта (публично)"""
    return await service.get_public_expert_reviews(db, expert_id, limit)


@router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(
    review_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ReviewService = Depends(get_review_service),
):
    review = await service.get_review(db, review_id)
    return ReviewResponse.model_validate(review)


@router.post("/{review_id}/respond", response_model=ReviewResponse)
async def respond_to_review(
    review_id: UUID,
    data: ExpertResponseCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ReviewService = Depends(get_review_service),
):
    """Ответ эксперта на отзыв"""
    review = await service.respond_to_review(db, review_id, actor.acting_id, data.response)
    await db.commit()
    await service.invalidate_expert_reviews(review.expert_id)
    return ReviewResponse.model_validate(review)


@router.post("/{review_id}/flag", response_model=ReviewResponse)
async def flag_review(
    review_id: UUID,
    data: ReviewFlag,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ReviewService = Depends(get_review_service),
):
    """Пожаловаться на отзыв"""
    review = await service.flag_review(db, review_id, data.reason, actor.subject_id)
    await db.commit()
    await service.invalidate_expert_reviews(review.expert_id)
    return ReviewResponse.model_validate(review)


@router.post("/{review_id}/hide", response_model=ReviewResponse)
async def hide_review(
    review_id: UUID,
    data: ReviewHide,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ReviewService = Depends(get_review_service),
):
    """Скрыть отзыв (модерация)"""
    review = await service.hide_review(db, review_id, data.reason, actor.subject_id)
    await db.commit()
    await service.invalidate_expert_reviews(review.expert_id)
    return ReviewResponse.model_validate(review)


@router.post("/{review_id}/vote", response_model=ReviewResponse)
async def vote_review(
    review_id: UUID,
    data: ReviewVote,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ReviewService = Depends(get_review_service),
):
    """Голос «полезно / бесполезно»"""
    review = await service.vote_review(db, review_id, data.is_helpful)
    await db.commit()
    await service.invalidate_expert_reviews(review.expert_id)
    return ReviewResponse.model_validate(review)
