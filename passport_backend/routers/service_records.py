from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID
import logging

from passport_shared.config import config
from passport_shared.models import ServiceRecordStatus
from ..dependencies import get_db_session, get_current_actor, get_service_record_service
from ..schemas.auth import Actor
from ..schemas.service_record import (
    ServiceRecordCreate, ServiceRecordUpdate, ServiceRecordResponse,
    ServiceCompleteRequest, ServiceCancelRequest,
)
from ..services.service_records import ServiceRecordService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/service-records", tags=["Service Records"])


@router.post("", response_model=ServiceRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_service_record(
    data: ServiceRecordCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Создать запись об услуге при назначении эксперта"""
    record = await service.create_service_record(db, data, actor.subject_id)
    await db.commit()
    return ServiceRecordResponse.model_validate(record)


@router.get("/customer/my", response_model=List[ServiceRecordResponse])
async def get_my_service_records(
    status_filter: Optional[ServiceRecordStatus] = Query(None, alias="status"),
    limit: int = Query(config.DEFAULT_LIST_LIMIT, ge=1, le=config.MAX_LIST_LIMIT),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Записи текущего пользователя как заказчика"""
    records = await service.get_customer_service_records(db, actor.subject_id, status_filter, limit)
    return [ServiceRecordResponse.model_validate(r) for r in records]


@router.get("/expert/{expert_id}", response_model=List[ServiceRecordResponse])
async def get_expert_service_records(
    expert_id: UUID,
    status_filter: Optional[ServiceRecordStatus] = Query(None, alias="status"),
    limit: int = Query(config.DEFAULT_LIST_LIMIT, ge=1, le=config.MAX_LIST_LIMIT),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Записи эксперта"""
    records = await service.get_expert_service_records(db, expert_id, status_filter, limit)
    return [ServiceRecordResponse.model_validate(r) for r in records]


@router.get("/{record_id}", response_model=ServiceRecordResponse)
async def get_service_record(
    record_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    record = await service.get_service_record(db, record_id)
    return ServiceRecordResponse.model_validate(record)


@router.patch("/{record_id}", response_model=ServiceRecordResponse)
async def update_service_record(
    record_id: UUID,
    data: ServiceRecordUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Обновить запись (статус и поля)"""
    record = await service.update_service_record(db, record_id, data, actor.acting_id, actor.is_expert)
    await db.commit()
    return ServiceRecordResponse.model_validate(record)


@router.post("/{record_id}/start", response_model=ServiceRecordResponse)
async def start_service(
    record_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Эксперт начинает оказание услуги"""
    record = await service.update_service_record(
        db,
        record_id,
        ServiceRecordUpdate(status=ServiceRecordStatus.IN_PROGRESS),
        actor.acting_id,
        True,
    )
    await db.commit()
    return ServiceRecordResponse.model_validate(record)


@router.post("/{record_id}/complete", response_model=ServiceRecordResponse)
async def complete_service(
    record_id: UUID,
    data: ServiceCompleteRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Эксперт завершает услугу"""
    patch = ServiceRecordUpdate(status=ServiceRecordStatus.COMPLETED, **data.model_dump(exclude_unset=True))
    record = await service.update_service_record(db, record_id, patch, actor.acting_id, True)
    await db.commit()
    return ServiceRecordResponse.model_validate(record)


@router.post("/{record_id}/confirm", response_model=ServiceRecordResponse)
async def confirm_completion(
    record_id: UUID,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Заказчик подтверждает завершение"""
    record = await service.confirm_completion(db, record_id, actor.subject_id)
    await db.commit()
    return ServiceRecordResponse.model_validate(record)


@router.post("/{record_id}/cancel", response_model=ServiceRecordResponse)
async def cancel_service(
    record_id: UUID,
    data: ServiceCancelRequest,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Отменить услугу"""
    record = await service.cancel_service_record(
        db, record_id, actor.acting_id, actor.is_expert, data.reason
    )
    await db.commit()
    logger.info(f"Service record {record.record_code} cancelled by {actor.acting_id}")
    return ServiceRecordResponse.model_validate(record)
