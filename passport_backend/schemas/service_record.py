from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import Field
from .base import BaseSchema, EntitySchema
from passport_shared.models.enums import ServiceRecordStatus


class ServiceRecordCreate(BaseSchema):
    """Схема для создания записи об услуге (эксперт назначен на заявку)"""
    service_request_id: UUID
    expert_id: UUID
    agreed_price: Decimal = Field(..., ge=0)
    price_currency: Optional[str] = Field(None, min_length=3, max_length=3)
    estimated_duration: Optional[str] = None
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    expert_notes: Optional[str] = None


class ServiceRecordUpdate(BaseSchema):
    """Частичное обновление записи. Учитываются только переданные поля."""
    status: Optional[ServiceRecordStatus] = None
    final_price: Optional[Decimal] = Field(None, ge=0)
    actual_duration: Optional[str] = None
    actual_start: Optional[datetime] = None
    actual_end: Optional[datetime] = None
    expert_notes: Optional[str] = None
    customer_notes: Optional[str] = None
    completion_notes: Optional[str] = None
    service_location: Optional[str] = None


class ServiceCompleteRequest(BaseSchema):
    final_price: Optional[Decimal] = Field(None, ge=0)
    completion_notes: Optional[str] = None


class ServiceCancelRequest(BaseSchema):
    reason: Optional[str] = None


class ServiceRecordResponse(EntitySchema):
    """Схема ответа с записью об услуге"""
    record_code: str
    service_request_id: UUID
    expert_id: UUID
    customer_user_id: UUID
    customer_org_id: Optional[UUID]
    service_type: str
    service_title: str
    service_description: Optional[str]
    service_location: Optional[str]
    passport_id: Optional[UUID]
    passport_code: Optional[str]
    status: ServiceRecordStatus
    agreed_price: Decimal
    final_price: Optional[Decimal]
    price_currency: str
    estimated_duration: Optional[str]
    actual_duration: Optional[str]
    scheduled_start: Optional[datetime]
    scheduled_end: Optional[datetime]
    actual_start: Optional[datetime]
    actual_end: Optional[datetime]
    expert_notes: Optional[str]
    customer_notes: Optional[str]
    completion_notes: Optional[str]
    completed_at: Optional[datetime]
    confirmed_by_customer: bool
    confirmed_at: Optional[datetime]
    cancelled_at: Optional[datetime]
    cancellation_reason: Optional[str]
    cancelled_by: Optional[UUID]
    is_reviewed: bool
    review_requested_at: Optional[datetime]
