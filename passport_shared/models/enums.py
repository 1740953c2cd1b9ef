# passport_shared/models/enums.py
from enum import Enum


class ServiceRecordStatus(str, Enum):
    """Статусы записи об оказании услуги"""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    DISPUTED = "DISPUTED"


class ReviewStatus(str, Enum):
    """Статусы модерации отзывов"""
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    HIDDEN = "HIDDEN"
    FLAGGED = "FLAGGED"


class ExpertWorkStatus(str, Enum):
    """Рабочий статус эксперта"""
    RUSHING = "RUSHING"        # ищет заказы, приоритетное распределение
    IDLE = "IDLE"
    BOOKED = "BOOKED"          # есть назначенные заказы, сейчас свободен
    IN_SERVICE = "IN_SERVICE"
    OFF_DUTY = "OFF_DUTY"


class ServiceRequestStatus(str, Enum):
    """Статусы заявки на обслуживание"""
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class ServiceType(str, Enum):
    """Типы услуг"""
    INSTALLATION = "INSTALLATION"
    REPAIR = "REPAIR"
    MAINTENANCE = "MAINTENANCE"
    INSPECTION = "INSPECTION"
    UPGRADE = "UPGRADE"
    CONSULTATION = "CONSULTATION"


# Записи, которые держат эксперта занятым
ACTIVE_RECORD_STATUSES = (ServiceRecordStatus.PENDING, ServiceRecordStatus.IN_PROGRESS)

# Статусы, которые эксперт может выставить вручную
MANUAL_WORK_STATUSES = (ExpertWorkStatus.RUSHING, ExpertWorkStatus.IDLE, ExpertWorkStatus.OFF_DUTY)
