# passport_backend/services/service_records.py
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
import logging

from passport_shared.config import config
from passport_shared.models import (
    Expert, ServiceRequest, ServiceRecord,
    ServiceRecordStatus, ServiceRequestStatus,
)
from passport_shared.models.base import utcnow
from ..exceptions import NotFoundError, ConflictError, ForbiddenError, InvalidStateError
from ..schemas.service_record import ServiceRecordCreate, ServiceRecordUpdate
from .lifecycle import parse_status, validate_transition, writable_fields
from .record_codes import generate_record_code
from . import work_status

logger = logging.getLogger(__name__)

# попытки получить свободный код записи при гонке параллельных созданий
RECORD_CODE_ATTEMPTS = 2


class ServiceRecordService:
    """Жизненный цикл записей об оказании услуг экспертами"""

    def __init__(self, default_currency: Optional[str] = None):
        self.default_currency = default_currency or config.DEFAULT_PRICE_CURRENCY

    async def create_service_record(
        self,
        db: AsyncSession,
        data: ServiceRecordCreate,
        customer_user_id: UUID,
    ) -> ServiceRecord:
        """Создать запись, когда эксперт назначен на заявку"""
        service_request = await db.get(ServiceRequest, data.service_request_id)
        if not service_request:
            raise NotFoundError("Service request not found")

        expert = await db.get(Expert, data.expert_id)
        if not expert:
            raise NotFoundError("Expert not found")

        existing_result = await db.execute(
            select(ServiceRecord.id).where(
                ServiceRecord.service_request_id == data.service_request_id,
                ServiceRecord.expert_id == data.expert_id,
            )
        )
        if existing_result.scalar_one_or_none():
            raise ConflictError("Service record already exists for this request and expert")

        fields = dict(
            service_request_id=data.service_request_id,
            expert_id=data.expert_id,
            customer_user_id=customer_user_id,
            customer_org_id=service_request.organization_id,
            # снимок заявки, дальше не синхронизируется
            service_type=service_request.service_type,
            service_title=service_request.title,
            service_description=service_request.description,
            service_location=service_request.service_location,
            passport_id=service_request.passport_id,
            passport_code=service_request.passport_code,
            agreed_price=data.agreed_price,
            price_currency=data.price_currency or self.default_currency,
            estimated_duration=data.estimated_duration,
            scheduled_start=data.scheduled_start,
            scheduled_end=data.scheduled_end,
            expert_notes=data.expert_notes,
            status=ServiceRecordStatus.PENDING,
        )
        record = await self._insert_with_code(db, fields)

        await work_status.mark_expert_booked(db, data.expert_id)

        await db.execute(
            update(ServiceRequest)
            .where(ServiceRequest.id == data.service_request_id)
            .values(
                status=ServiceRequestStatus.IN_PROGRESS,
                assigned_expert_id=data.expert_id,
                assigned_at=utcnow(),
            )
        )

        logger.info(
            f"Service record created: {record.record_code} "
            f"(request={data.service_request_id}, expert={data.expert_id})"
        )
        return record

    async def _insert_with_code(self, db: AsyncSession, fields: dict) -> ServiceRecord:
        """Вставить запись со следующим кодом месяца.

        Параллельное создание может получить тот же код; тогда код
        пересчитывается один раз, а повторный отказ отдаётся как Conflict.
        """
        for attempt in range(1, RECORD_CODE_ATTEMPTS + 1):
            record = ServiceRecord(record_code=await generate_record_code(db), **fields)
            try:
                async with db.begin_nested():
                    db.add(record)
                    await db.flush()
                return record
            except IntegrityError as e:
                logger.warning(
                    f"Service record insert rejected (code {record.record_code}, "
                    f"attempt {attempt}): {e.orig}"
                )
        raise ConflictError("Could not allocate a unique service record code, retry the request")

    async def get_service_record(self, db: AsyncSession, record_id: UUID) -> ServiceRecord:
        record = await db.get(ServiceRecord, record_id)
        if not record:
            raise NotFoundError("Service record not found")
        return record

    async def get_expert_service_records(
        self,
        db: AsyncSession,
        expert_id: UUID,
        status: Optional[ServiceRecordStatus] = None,
        limit: int = 50,
    ) -> List[ServiceRecord]:
        query = select(ServiceRecord).where(ServiceRecord.expert_id == expert_id)
        if status:
            query = query.where(ServiceRecord.status == parse_status(ServiceRecordStatus, status).value)
        return await self._list(db, query, limit)

    async def get_customer_service_records(
        self,
        db: AsyncSession,
        customer_user_id: UUID,
        status: Optional[ServiceRecordStatus] = None,
        limit: int = 50,
    ) -> List[ServiceRecord]:
        query = select(ServiceRecord).where(ServiceRecord.customer_user_id == customer_user_id)
        if status:
            query = query.where(ServiceRecord.status == parse_status(ServiceRecordStatus, status).value)
        return await self._list(db, query, limit)

    async def _list(self, db: AsyncSession, query, limit: int) -> List[ServiceRecord]:
        query = query.order_by(
            ServiceRecord.created_at.desc(),
            ServiceRecord.record_code.desc(),
        ).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def update_service_record(
        self,
        db: AsyncSession,
        record_id: UUID,
        data: ServiceRecordUpdate,
        user_id: UUID,
        is_expert: bool,
    ) -> ServiceRecord:
        """Обновить запись: переход статуса и разрешённые поля"""
        record = await self.get_service_record(db, record_id)

        if is_expert and record.expert_id != user_id:
            logger.warning(f"Expert {user_id} denied update of service record {record_id}")
            raise ForbiddenError("Only the assigned expert can update this record")

        patch = data.model_dump(exclude_unset=True)
        new_status = patch.pop("status", None)

        if new_status is not None:
            await self._handle_status_transition(db, record, new_status)

        for field, value in writable_fields(patch, is_expert).items():
            setattr(record, field, value)

        await db.flush()
        return record

    async def _handle_status_transition(
        self,
        db: AsyncSession,
        record: ServiceRecord,
        new_status: ServiceRecordStatus,
    ) -> None:
        current_status = record.status
        new_status = validate_transition(current_status, new_status)

        record.status = new_status
        now = utcnow()

        if new_status == ServiceRecordStatus.IN_PROGRESS and not record.actual_start:
            record.actual_start = now
            await work_status.mark_expert_in_service(db, record.expert_id)

        elif new_status == ServiceRecordStatus.COMPLETED:
            record.completed_at = now
            record.actual_end = record.actual_end or now

            expert = await db.get(Expert, record.expert_id)
            if expert is not None:
                expert.completed_services = (expert.completed_services or 0) + 1

            await db.execute(
                update(ServiceRequest)
                .where(ServiceRequest.id == record.service_request_id)
                .values(status=ServiceRequestStatus.COMPLETED, completed_at=now)
            )
            await work_status.restore_expert_status_after_service(db, record.expert_id)

        elif new_status == ServiceRecordStatus.CANCELLED:
            record.cancelled_at = now
            await work_status.restore_expert_status_after_service(db, record.expert_id)

        logger.info(
            f"Service record {record.record_code}: "
            f"{ServiceRecordStatus(current_status).value} -> {new_status.value}"
        )

    async def cancel_service_record(
        self,
        db: AsyncSession,
        record_id: UUID,
        user_id: UUID,
        is_expert: bool,
        reason: Optional[str] = None,
    ) -> ServiceRecord:
        """Отменить услугу с сохранением причины и автора отмены"""
        record = await self.update_service_record(
            db,
            record_id,
            ServiceRecordUpdate(status=ServiceRecordStatus.CANCELLED),
            user_id,
            is_expert,
        )
        if reason:
            record.cancellation_reason = reason
        record.cancelled_by = user_id
        await db.flush()
        return record

    async def confirm_completion(
        self,
        db: AsyncSession,
        record_id: UUID,
        customer_user_id: UUID,
    ) -> ServiceRecord:
        """Заказчик подтверждает завершение услуги"""
        record = await self.get_service_record(db, record_id)

        if record.customer_user_id != customer_user_id:
            raise ForbiddenError("Only the customer can confirm completion")

        if record.status != ServiceRecordStatus.COMPLETED:
            raise InvalidStateError("Service must be completed before confirmation")

        now = utcnow()
        record.confirmed_by_customer = True
        record.confirmed_at = now
        record.review_requested_at = now

        await db.flush()
        logger.info(f"Service record {record.record_code} confirmed by customer {customer_user_id}")
        return record
