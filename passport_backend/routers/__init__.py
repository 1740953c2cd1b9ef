"""
FastAPI роутеры
"""

from .service_records import router as service_records_router
from .reviews import router as reviews_router
from .ratings import router as ratings_router
from .health import router as health_router

__all__ = [
    'service_records_router',
    'reviews_router',
    'ratings_router',
    'health_router',
]
