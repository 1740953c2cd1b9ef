# passport_backend/services/lifecycle.py
"""
Правила жизненного цикла записи об услуге: таблица переходов статусов
и политика, кто какие поля записи может менять.
"""

import logging
from enum import Enum
from typing import Any, Dict, Type, TypeVar

from passport_shared.models.enums import ServiceRecordStatus
from ..exceptions import InvalidTransitionError, ValidationError

StatusT = TypeVar("StatusT", bound=Enum)

logger = logging.getLogger(__name__)


SERVICE_RECORD_TRANSITIONS: Dict[ServiceRecordStatus, frozenset] = {
    ServiceRecordStatus.PENDING: frozenset({
        ServiceRecordStatus.IN_PROGRESS,
        ServiceRecordStatus.CANCELLED,
    }),
    ServiceRecordStatus.IN_PROGRESS: frozenset({
        ServiceRecordStatus.COMPLETED,
        ServiceRecordStatus.CANCELLED,
        ServiceRecordStatus.DISPUTED,
    }),
    ServiceRecordStatus.COMPLETED: frozenset({ServiceRecordStatus.DISPUTED}),
    ServiceRecordStatus.CANCELLED: frozenset(),
    ServiceRecordStatus.DISPUTED: frozenset({
        ServiceRecordStatus.COMPLETED,
        ServiceRecordStatus.CANCELLED,
    }),
}


def parse_status(status_cls: Type[StatusT], value: Any) -> StatusT:
    """Привести строку статуса к enum; неизвестное значение - ValidationError"""
    try:
        return status_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown status {value}") from None


def can_transition(current: str, target: str) -> bool:
    current_status = parse_status(ServiceRecordStatus, current)
    return parse_status(ServiceRecordStatus, target) in SERVICE_RECORD_TRANSITIONS[current_status]


def validate_transition(current: str, target: str) -> ServiceRecordStatus:
    """Проверить переход и вернуть целевой статус"""
    current_status = parse_status(ServiceRecordStatus, current)
    target_status = parse_status(ServiceRecordStatus, target)
    if target_status not in SERVICE_RECORD_TRANSITIONS[current_status]:
        raise InvalidTransitionError(current_status.value, target_status.value)
    return target_status


class FieldWriter(str, Enum):
    """Кто может менять поле записи"""
    ANY = "any"
    EXPERT = "expert"
    CUSTOMER = "customer"


# Поля записи, которые можно менять через UpdateServiceRecord.
# Поле, которого нет в таблице, не меняется никем.
SERVICE_RECORD_FIELD_POLICY: Dict[str, FieldWriter] = {
    "final_price": FieldWriter.ANY,
    "actual_duration": FieldWriter.ANY,
    "actual_start": FieldWriter.ANY,
    "actual_end": FieldWriter.ANY,
    "service_location": FieldWriter.ANY,
    "completion_notes": FieldWriter.ANY,
    "expert_notes": FieldWriter.EXPERT,
    "customer_notes": FieldWriter.CUSTOMER,
}


def writable_fields(patch: Dict[str, Any], is_expert: bool) -> Dict[str, Any]:
    """Отфильтровать патч по политике полей"""
    allowed = {}
    for field, value in patch.items():
        writer = SERVICE_RECORD_FIELD_POLICY.get(field)
        if writer is None:
            continue
        if writer is FieldWriter.EXPERT and not is_expert:
            logger.warning(f"Field {field} ignored: only the expert may update it")
            continue
        if writer is FieldWriter.CUSTOMER and is_expert:
            logger.warning(f"Field {field} ignored: only the customer may update it")
            continue
        allowed[field] = value
    return allowed
