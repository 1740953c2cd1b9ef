# passport_shared/models/service_record.py
import uuid
from sqlalchemy import (
    Column, String, Text, Boolean, DateTime, Numeric, ForeignKey, Uuid,
    UniqueConstraint, Index
)
from .base import Base, TimestampMixin
from .enums import ServiceRecordStatus


class ServiceRecord(Base, TimestampMixin):
    """Запись об оказании услуги экспертом по заявке"""
    __tablename__ = "expert_service_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    record_code = Column(String(32), unique=True, nullable=False)  # ESR-YYMM-NNNNNN

    # Стороны
    service_request_id = Column(Uuid, ForeignKey("service_requests.id"), nullable=False)
    expert_id = Column(Uuid, ForeignKey("individual_experts.id"), nullable=False, index=True)
    customer_user_id = Column(Uuid, nullable=False, index=True)
    customer_org_id = Column(Uuid)

    # Снимок заявки на момент создания
    service_type = Column(String(50), nullable=False)
    service_title = Column(String(255), nullable=False)
    service_description = Column(Text)
    service_location = Column(String(500))
    passport_id = Column(Uuid)
    passport_code = Column(String(50))

    status = Column(String(50), default=ServiceRecordStatus.PENDING, nullable=False)

    # Цена
    agreed_price = Column(Numeric(12, 2), nullable=False)
    final_price = Column(Numeric(12, 2))
    price_currency = Column(String(3), default="USD", nullable=False)

    # Сроки
    estimated_duration = Column(String(100))
    actual_duration = Column(String(100))
    scheduled_start = Column(DateTime(timezone=True))
    scheduled_end = Column(DateTime(timezone=True))
    actual_start = Column(DateTime(timezone=True))
    actual_end = Column(DateTime(timezone=True))

    # Заметки
    expert_notes = Column(Text)
    customer_notes = Column(Text)
    completion_notes = Column(Text)

    # Завершение
    completed_at = Column(DateTime(timezone=True))
    confirmed_by_customer = Column(Boolean, default=False, nullable=False)
    confirmed_at = Column(DateTime(timezone=True))

    # Отмена
    cancelled_at = Column(DateTime(timezone=True))
    cancellation_reason = Column(Text)
    cancelled_by = Column(Uuid)

    # Отзыв
    is_reviewed = Column(Boolean, default=False, nullable=False)
    review_requested_at = Column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("service_request_id", "expert_id", name="uq_service_record_request_expert"),
        Index("idx_service_record_expert_status", "expert_id", "status"),
    )

    def __repr__(self):
        return f"<ServiceRecord(id={self.id}, code={self.record_code}, status={self.status})>"
