# passport_shared/models/service_request.py
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid
from .base import Base, TimestampMixin
from .enums import ServiceRequestStatus


class ServiceRequest(Base, TimestampMixin):
    """Заявка на обслуживание (внешняя сущность, хранится только нужный срез)"""
    __tablename__ = "service_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    request_code = Column(String(50), unique=True, nullable=False)
    organization_id = Column(Uuid)
    created_by_user_id = Column(Uuid)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    service_type = Column(String(50), nullable=False)
    status = Column(String(50), default=ServiceRequestStatus.DRAFT, nullable=False)
    service_location = Column(String(500))

    # Паспорт устройства (опционально)
    passport_id = Column(Uuid)
    passport_code = Column(String(50))

    assigned_expert_id = Column(Uuid, ForeignKey("individual_experts.id"))
    assigned_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))

    def __repr__(self):
        return f"<ServiceRequest(id={self.id}, code={self.request_code}, status={self.status})>"
