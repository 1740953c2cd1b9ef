# passport_shared/models/expert.py
import uuid
from sqlalchemy import Column, String, Integer, Float, DateTime, Uuid
from .base import Base, TimestampMixin
from .enums import ExpertWorkStatus


class Expert(Base, TimestampMixin):
    """Индивидуальный эксперт (срез, нужный для рейтинга и рабочего статуса)"""
    __tablename__ = "individual_experts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, unique=True, nullable=False, index=True)
    personal_name = Column(String(255), nullable=False)

    # Рабочий статус
    work_status = Column(String(20), default=ExpertWorkStatus.IDLE, nullable=False)
    active_service_count = Column(Integer, default=0, nullable=False)
    rushing_started_at = Column(DateTime(timezone=True))

    # Агрегаты рейтинга
    avg_rating = Column(Float)  # null, пока нет ни одного опубликованного отзыва
    total_reviews = Column(Integer, default=0, nullable=False)
    completed_services = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<Expert(id={self.id}, status={self.work_status}, active={self.active_service_count})>"
