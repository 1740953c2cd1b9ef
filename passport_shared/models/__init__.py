# passport_shared/models/__init__.py
from .base import Base
from .expert import Expert
from .service_request import ServiceRequest
from .service_record import ServiceRecord
from .review import Review
from .enums import (
    ServiceRecordStatus,
    ReviewStatus,
    ExpertWorkStatus,
    ServiceRequestStatus,
    ServiceType,
)

__all__ = [
    'Base',
    'Expert',
    'ServiceRequest',
    'ServiceRecord',
    'Review',
    'ServiceRecordStatus',
    'ReviewStatus',
    'ExpertWorkStatus',
    'ServiceRequestStatus',
    'ServiceType',
]
