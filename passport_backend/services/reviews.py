# passport_backend/services/reviews.py
from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from passport_shared.config import config
from passport_shared.models import Expert, Review, ReviewStatus, ServiceRecordStatus
from passport_shared.models.base import utcnow
from ..exceptions import (
    NotFoundError, ValidationError, ConflictError, ForbiddenError, InvalidStateError
)
from ..schemas.review import ReviewCreate, ReviewResponse
from ..utils.rating_updater import (
    RATING_CATEGORIES,
    update_expert_rating,
    get_published_reviews,
    rating_distribution,
    category_averages,
)
from .cache import CacheService, expert_reviews_key, expert_reviews_pattern
from .lifecycle import parse_status
from .service_records import ServiceRecordService

logger = logging.getLogger(__name__)


def _check_rating(name: str, value: Optional[int], required: bool = False) -> None:
    if value is None:
        if required:
            raise ValidationError(f"{name} is required")
        return
    if value < 1 or value > 5:
        raise ValidationError(f"{name} must be between 1 and 5")


class ReviewService:
    """Отзывы об экспертах и агрегаты рейтинга"""

    def __init__(
        self,
        cache_service: CacheService,
        records: Optional[ServiceRecordService] = None,
        cache_ttl: Optional[int] = None,
    ):
        self.cache = cache_service
        self.records = records or ServiceRecordService()
        self.cache_ttl = cache_ttl or config.REVIEWS_CACHE_TTL

    async def create_review(
        self,
        db: AsyncSession,
        data: ReviewCreate,
        reviewer_id: UUID,
    ) -> Review:
        """Создать отзыв о завершённой услуге"""
        _check_rating("Overall rating", data.overall_rating, required=True)
        for field in RATING_CATEGORIES.values():
            _check_rating(field.replace("_", " ").capitalize(), getattr(data, field))

        record = await self.records.get_service_record(db, data.service_record_id)

        if record.customer_user_id != reviewer_id:
            raise ForbiddenError("Only the customer can review this service")

        if record.status != ServiceRecordStatus.COMPLETED:
            raise InvalidStateError("Service must be completed before review")

        if record.is_reviewed:
            raise ConflictError("This service has already been reviewed")

        review = Review(
            service_record_id=record.id,
            expert_id=record.expert_id,
            reviewer_id=reviewer_id,
            overall_rating=data.overall_rating,
            quality_rating=data.quality_rating,
            communication_rating=data.communication_rating,
            punctuality_rating=data.punctuality_rating,
            professionalism_rating=data.professionalism_rating,
            value_rating=data.value_rating,
            title=data.title,
            comment=data.comment,
            pros=data.pros or [],
            cons=data.cons or [],
            is_verified=True,
            status=ReviewStatus.PUBLISHED,
        )
        db.add(review)

        record.is_reviewed = True
        await db.flush()

        await update_expert_rating(db, record.expert_id)

        logger.info(
            f"Review created: record={record.id}, expert={record.expert_id}, "
            f"rating={data.overall_rating}"
        )
        return review

    async def get_review(self, db: AsyncSession, review_id: UUID) -> Review:
        review = await db.get(Review, review_id)
        if not review:
            raise NotFoundError("Review not found")
        return review

    async def get_expert_reviews(
        self,
        db: AsyncSession,
        expert_id: UUID,
        status: ReviewStatus = ReviewStatus.PUBLISHED,
        limit: int = 50,
    ) -> List[Review]:
        result = await db.execute(
            select(Review)
            .where(Review.expert_id == expert_id, Review.status == parse_status(ReviewStatus, status).value)
            .order_by(Review.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_public_expert_reviews(
        self,
        db: AsyncSession,
        expert_id: UUID,
        limit: int = 50,
    ) -> List[dict]:
        """Опубликованные отзывы эксперта с кэшированием в Redis"""
        cache_key = expert_reviews_key(expert_id, limit)
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return cached

        reviews = await self.get_expert_reviews(db, expert_id, ReviewStatus.PUBLISHED, limit)
        reviews_data = [self._review_to_dict(r) for r in reviews]
        await self.cache.set(cache_key, reviews_data, ttl=self.cache_ttl)
        return reviews_data

    async def invalidate_expert_reviews(self, expert_id: UUID) -> int:
        return await self.cache.clear_pattern(expert_reviews_pattern(expert_id))

    async def respond_to_review(
        self,
        db: AsyncSession,
        review_id: UUID,
        expert_id: UUID,
        response: str,
    ) -> Review:
        """Ответ эксперта на отзыв (только один раз)"""
        review = await self.get_review(db, review_id)

        if review.expert_id != expert_id:
            raise ForbiddenError("Only the reviewed expert can respond")

        if review.expert_response:
            raise ConflictError("You have already responded to this review")

        review.expert_response = response
        review.expert_responded_at = utcnow()

        await db.flush()
        logger.info(f"Expert {expert_id} responded to review {review_id}")
        return review

    async def flag_review(
        self,
        db: AsyncSession,
        review_id: UUID,
        reason: str,
        user_id: UUID,
    ) -> Review:
        """Отправить отзыв на модерацию и пересчитать рейтинг эксперта"""
        review = await self.get_review(db, review_id)

        review.status = ReviewStatus.FLAGGED
        review.flagged_reason = reason
        review.moderated_by = user_id
        review.moderated_at = utcnow()
        await db.flush()

        # помеченный отзыв выпадает из опубликованных
        await update_expert_rating(db, review.expert_id)

        logger.warning(f"Review {review_id} flagged by {user_id}: {reason}")
        return review

    async def hide_review(
        self,
        db: AsyncSession,
        review_id: UUID,
        reason: str,
        moderator_id: UUID,
    ) -> Review:
        """Скрыть отзыв решением модератора"""
        review = await self.get_review(db, review_id)

        if review.status == ReviewStatus.HIDDEN:
            raise InvalidStateError("Review is already hidden")

        review.status = ReviewStatus.HIDDEN
        review.hidden_reason = reason
        review.moderated_by = moderator_id
        review.moderated_at = utcnow()
        await db.flush()

        await update_expert_rating(db, review.expert_id)

        logger.warning(f"Review {review_id} hidden by {moderator_id}: {reason}")
        return review

    async def vote_review(self, db: AsyncSession, review_id: UUID, is_helpful: bool) -> Review:
        review = await self.get_review(db, review_id)

        if is_helpful:
            review.helpful_count = (review.helpful_count or 0) + 1
        else:
            review.not_helpful_count = (review.not_helpful_count or 0) + 1

        await db.flush()
        return review

    async def get_expert_rating_summary(self, db: AsyncSession, expert_id: UUID) -> Dict:
        """Сводка рейтинга эксперта.

        Средний рейтинг и счётчики берутся из эксперта, распределение и
        средние по категориям считаются заново при каждом вызове.
        """
        expert = await db.get(Expert, expert_id)
        if not expert:
            raise NotFoundError("Expert not found")

        reviews = await get_published_reviews(db, expert_id)

        return {
            "avg_rating": expert.avg_rating or 0,
            "total_reviews": expert.total_reviews or 0,
            "completed_services": expert.completed_services or 0,
            "rating_distribution": rating_distribution(reviews),
            "category_averages": category_averages(reviews),
        }

    def _review_to_dict(self, review: Review) -> dict:
        return ReviewResponse.model_validate(review).model_dump(mode="json")
