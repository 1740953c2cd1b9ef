"""
Pydantic схемы для API
"""

from .auth import Actor
from .service_record import (
    ServiceRecordCreate, ServiceRecordUpdate, ServiceRecordResponse,
    ServiceCompleteRequest, ServiceCancelRequest,
)
from .review import ReviewCreate, ReviewResponse, ExpertResponseCreate, ReviewFlag, ReviewHide, ReviewVote
from .rating import RatingSummary, CategoryAverages, WorkStatusUpdate, ExpertWorkStatusResponse

__all__ = [
    'Actor',
    'ServiceRecordCreate', 'ServiceRecordUpdate', 'ServiceRecordResponse',
    'ServiceCompleteRequest', 'ServiceCancelRequest',
    'ReviewCreate', 'ReviewResponse', 'ExpertResponseCreate', 'ReviewFlag', 'ReviewHide', 'ReviewVote',
    'RatingSummary', 'CategoryAverages', 'WorkStatusUpdate', 'ExpertWorkStatusResponse',
]
