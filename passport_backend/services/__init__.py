"""
Сервисы с бизнес-логикой
"""

from .cache import CacheService
from .service_records import ServiceRecordService
from .reviews import ReviewService

__all__ = ['CacheService', 'ServiceRecordService', 'ReviewService']
