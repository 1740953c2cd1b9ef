# passport_backend/services/work_status.py
"""
Производный рабочий статус эксперта.

BOOKED и IN_SERVICE выставляет система по ходу записей об услугах;
RUSHING, IDLE и OFF_DUTY эксперт может выбрать сам.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from passport_shared.models import Expert, ServiceRecord, ExpertWorkStatus
from passport_shared.models.base import utcnow
from passport_shared.models.enums import ACTIVE_RECORD_STATUSES, MANUAL_WORK_STATUSES
from ..exceptions import NotFoundError, ForbiddenError, ValidationError, InvalidStateError
from .lifecycle import parse_status

logger = logging.getLogger(__name__)


async def count_active_records(db: AsyncSession, expert_id: UUID) -> int:
    """Количество записей эксперта в статусах PENDING / IN_PROGRESS"""
    result = await db.execute(
        select(func.count(ServiceRecord.id)).where(
            ServiceRecord.expert_id == expert_id,
            ServiceRecord.status.in_([s.value for s in ACTIVE_RECORD_STATUSES]),
        )
    )
    return result.scalar_one()


async def mark_expert_booked(db: AsyncSession, expert_id: UUID) -> Optional[Expert]:
    """Эксперт назначен на заявку.

    Срабатывает только из IDLE или RUSHING; для BOOKED, IN_SERVICE и
    OFF_DUTY ничего не меняет, в том числе счётчик активных услуг.
    """
    expert = await db.get(Expert, expert_id)
    if expert is None:
        return None

    if expert.work_status in (ExpertWorkStatus.IDLE, ExpertWorkStatus.RUSHING):
        expert.work_status = ExpertWorkStatus.BOOKED
        expert.rushing_started_at = None
        expert.active_service_count = (expert.active_service_count or 0) + 1
        await db.flush()
        logger.info(f"Expert {expert_id} booked (active services: {expert.active_service_count})")
    return expert


async def mark_expert_in_service(db: AsyncSession, expert_id: UUID) -> Optional[Expert]:
    expert = await db.get(Expert, expert_id)
    if expert is None:
        return None

    expert.work_status = ExpertWorkStatus.IN_SERVICE
    await db.flush()
    logger.info(f"Expert {expert_id} is in service")
    return expert


async def restore_expert_status_after_service(db: AsyncSession, expert_id: UUID) -> Optional[Expert]:
    """Вернуть статус эксперта после завершения или отмены услуги.

    Выполняется всегда: ручной OFF_DUTY или RUSHING перезаписывается
    на BOOKED/IDLE по числу оставшихся активных записей.
    """
    expert = await db.get(Expert, expert_id)
    if expert is None:
        return None

    # статус текущей записи должен попасть в пересчёт
    await db.flush()

    expert.active_service_count = max(0, (expert.active_service_count or 0) - 1)
    active_services = await count_active_records(db, expert_id)

    if active_services > 0:
        expert.work_status = ExpertWorkStatus.BOOKED
    else:
        expert.work_status = ExpertWorkStatus.IDLE

    await db.flush()
    logger.info(
        f"Expert {expert_id} status restored to {ExpertWorkStatus(expert.work_status).value} "
        f"({active_services} active records)"
    )
    return expert


async def set_manual_work_status(
    db: AsyncSession,
    expert_id: UUID,
    user_id: UUID,
    new_status: ExpertWorkStatus,
) -> Expert:
    """Ручная смена рабочего статуса самим экспертом"""
    expert = await db.get(Expert, expert_id)
    if expert is None:
        raise NotFoundError("Expert not found")

    if expert.user_id != user_id:
        raise ForbiddenError("Only the expert can change their work status")

    new_status = parse_status(ExpertWorkStatus, new_status)
    if new_status not in MANUAL_WORK_STATUSES:
        raise ValidationError(
            f"Cannot manually set status to {new_status.value}. "
            "This status is set automatically by the system."
        )

    if expert.work_status == ExpertWorkStatus.IN_SERVICE:
        raise InvalidStateError(
            "Cannot change status while currently in service. Complete the current service first."
        )

    if expert.work_status == ExpertWorkStatus.BOOKED and new_status == ExpertWorkStatus.OFF_DUTY:
        raise InvalidStateError(
            "Cannot go off duty while having booked services. Cancel or complete pending services first."
        )

    if new_status == ExpertWorkStatus.RUSHING:
        if expert.work_status != ExpertWorkStatus.RUSHING:
            expert.rushing_started_at = utcnow()
    else:
        expert.rushing_started_at = None

    expert.work_status = new_status
    await db.flush()
    logger.info(f"Expert {expert_id} manually set work status to {new_status.value}")
    return expert
