# passport_shared/models/review.py
import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, JSON, ForeignKey, Uuid, Index
from .base import Base, TimestampMixin
from .enums import ReviewStatus


class Review(Base, TimestampMixin):
    """Отзыв заказчика о выполненной услуге"""
    __tablename__ = "expert_reviews"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    service_record_id = Column(
        Uuid, ForeignKey("expert_service_records.id"), unique=True, nullable=False
    )
    expert_id = Column(Uuid, ForeignKey("individual_experts.id"), nullable=False, index=True)
    reviewer_id = Column(Uuid, nullable=False)

    # Оценки 1-5
    overall_rating = Column(Integer, nullable=False)
    quality_rating = Column(Integer)
    communication_rating = Column(Integer)
    punctuality_rating = Column(Integer)
    professionalism_rating = Column(Integer)
    value_rating = Column(Integer)

    # Содержимое
    title = Column(Text)
    comment = Column(Text)
    pros = Column(JSON, default=list)
    cons = Column(JSON, default=list)
    is_verified = Column(Boolean, default=True, nullable=False)

    # Ответ эксперта (пишется один раз)
    expert_response = Column(Text)
    expert_responded_at = Column(DateTime(timezone=True))

    # Модерация
    status = Column(String(20), default=ReviewStatus.PUBLISHED, nullable=False)
    flagged_reason = Column(Text)
    hidden_reason = Column(Text)
    moderated_by = Column(Uuid)
    moderated_at = Column(DateTime(timezone=True))

    # Голоса
    helpful_count = Column(Integer, default=0, nullable=False)
    not_helpful_count = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("idx_review_expert_status", "expert_id", "status"),
    )

    def __repr__(self):
        return f"<Review(id={self.id}, rating={self.overall_rating}, status={self.status})>"
