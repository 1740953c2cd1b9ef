"""
Утилиты для обновления рейтингов экспертов
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from passport_shared.models import Expert, Review, ReviewStatus

logger = logging.getLogger(__name__)

# Категории оценок: ключ сводки -> поле отзыва
RATING_CATEGORIES = {
    "quality": "quality_rating",
    "communication": "communication_rating",
    "punctuality": "punctuality_rating",
    "professionalism": "professionalism_rating",
    "value": "value_rating",
}


def average_rating(values: Iterable[int]) -> Optional[float]:
    """Среднее с округлением до сотых (половина округляется вверх)"""
    values = list(values)
    if not values:
        return None
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def rating_distribution(reviews: Iterable[Review]) -> Dict[int, int]:
    """Распределение общих оценок; ключи 1..5 есть всегда"""
    distribution = {star: 0 for star in range(1, 6)}
    for review in reviews:
        distribution[review.overall_rating] = distribution.get(review.overall_rating, 0) + 1
    return distribution


def category_averages(reviews: List[Review]) -> Dict[str, float]:
    """Средние по категориям.

    В среднее категории попадают только отзывы, где эта категория
    заполнена; без оценок категория равна 0.
    """
    averages = {}
    for name, field in RATING_CATEGORIES.items():
        values = [getattr(r, field) for r in reviews if getattr(r, field) is not None]
        averages[name] = average_rating(values) or 0
    return averages


async def get_published_reviews(db: AsyncSession, expert_id: UUID) -> List[Review]:
    result = await db.execute(
        select(Review).where(
            Review.expert_id == expert_id,
            Review.status == ReviewStatus.PUBLISHED.value,
        )
    )
    return list(result.scalars().all())


async def update_expert_rating(db: AsyncSession, expert_id: UUID) -> Optional[dict]:
    """Пересчитывает средний рейтинг эксперта по всем опубликованным отзывам.

    Без опубликованных отзывов агрегаты эксперта не трогаются.
    """
    try:
        reviews = await get_published_reviews(db, expert_id)

        if not reviews:
            logger.info(f"Нет опубликованных отзывов эксперта {expert_id}, рейтинг не изменён")
            return None

        avg_rating = average_rating(r.overall_rating for r in reviews)
        total_reviews = len(reviews)

        expert = await db.get(Expert, expert_id)
        if expert is None:
            logger.warning(f"Эксперт {expert_id} не найден, рейтинг не обновлён")
            return None

        expert.avg_rating = avg_rating
        expert.total_reviews = total_reviews
        await db.flush()

        logger.info(f"Обновлен рейтинг эксперта {expert_id}: {avg_rating} (на основе {total_reviews} отзывов)")
        return {
            "expert_id": expert_id,
            "avg_rating": avg_rating,
            "total_reviews": total_reviews,
        }

    except Exception as e:
        logger.error(f"Ошибка обновления рейтинга эксперта {expert_id}: {e}")
        raise


async def update_all_expert_ratings(db: AsyncSession) -> int:
    """Обновляет рейтинги всех экспертов"""
    result = await db.execute(select(Expert.id))
    expert_ids = result.scalars().all()

    updated_count = 0
    for expert_id in expert_ids:
        if await update_expert_rating(db, expert_id) is not None:
            updated_count += 1

    await db.commit()
    logger.info(f"Обновлены рейтинги для {updated_count} экспертов")
    return updated_count
