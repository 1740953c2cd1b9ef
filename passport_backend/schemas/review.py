from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import Field
from .base import BaseSchema, EntitySchema
from passport_shared.models.enums import ReviewStatus


class ReviewCreate(BaseSchema):
    """Схема для создания отзыва.

    Диапазон оценок (1-5) проверяет сервис, чтобы ошибка была одинаковой
    для API и для внутренних вызовов.
    """
    service_record_id: UUID
    overall_rating: int
    quality_rating: Optional[int] = None
    communication_rating: Optional[int] = None
    punctuality_rating: Optional[int] = None
    professionalism_rating: Optional[int] = None
    value_rating: Optional[int] = None
    title: Optional[str] = None
    comment: Optional[str] = None
    pros: Optional[List[str]] = None
    cons: Optional[List[str]] = None


class ExpertResponseCreate(BaseSchema):
    response: str = Field(..., min_length=1)


class ReviewFlag(BaseSchema):
    reason: str = Field(..., min_length=1)


class ReviewHide(BaseSchema):
    reason: str = Field(..., min_length=1)


class ReviewVote(BaseSchema):
    is_helpful: bool


class ReviewResponse(EntitySchema):
    """Схема ответа с отзывом"""
    service_record_id: UUID
    expert_id: UUID
    reviewer_id: UUID
    overall_rating: int
    quality_rating: Optional[int]
    communication_rating: Optional[int]
    punctuality_rating: Optional[int]
    professionalism_rating: Optional[int]
    value_rating: Optional[int]
    title: Optional[str]
    comment: Optional[str]
    pros: List[str] = []
    cons: List[str] = []
    is_verified: bool
    expert_response: Optional[str]
    expert_responded_at: Optional[datetime]
    status: ReviewStatus
    flagged_reason: Optional[str]
    hidden_reason: Optional[str]
    moderated_by: Optional[UUID]
    moderated_at: Optional[datetime]
    helpful_count: int = Field(ge=0)
    not_helpful_count: int = Field(ge=0)
