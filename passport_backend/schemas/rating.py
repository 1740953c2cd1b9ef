from datetime import datetime
from typing import Dict, Optional
from uuid import UUID
from pydantic import Field
from .base import BaseSchema
from passport_shared.models.enums import ExpertWorkStatus


class CategoryAverages(BaseSchema):
    quality: float = 0
    communication: float = 0
    punctuality: float = 0
    professionalism: float = 0
    value: float = 0


class RatingSummary(BaseSchema):
    """Сводка рейтинга эксперта"""
    avg_rating: float = Field(ge=0, le=5)
    total_reviews: int = Field(ge=0)
    completed_services: int = Field(ge=0)
    rating_distribution: Dict[int, int]
    category_averages: CategoryAverages


class WorkStatusUpdate(BaseSchema):
    status: ExpertWorkStatus


class ExpertWorkStatusResponse(BaseSchema):
    id: UUID
    work_status: ExpertWorkStatus
    active_service_count: int
    rushing_started_at: Optional[datetime]
    avg_rating: Optional[float]
    total_reviews: int
    completed_services: int
