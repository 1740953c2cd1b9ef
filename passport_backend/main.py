# passport_backend/main.py
"""
Главный файл FastAPI приложения
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from passport_shared.config import config
from .database import AsyncSessionLocal, create_tables, engine
from .dependencies import get_cache
from .exceptions import ExpertRatingError
from .logging_config import setup_logging
from .routers import (
    service_records_router,
    reviews_router,
    ratings_router,
    health_router,
)
from .utils.rating_updater import update_all_expert_ratings

setup_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    logger.info("Запуск приложения...")

    await create_tables()
    logger.info("Таблицы базы данных готовы")

    if config.RECOMPUTE_RATINGS_ON_STARTUP:
        async with AsyncSessionLocal() as session:
            await update_all_expert_ratings(session)

    yield

    logger.info("Остановка приложения...")
    await get_cache().close()
    await engine.dispose()


app = FastAPI(
    title="Expert Service Rating API",
    description="Записи об услугах экспертов, отзывы и рейтинги",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ExpertRatingError)
async def expert_rating_error_handler(request: Request, exc: ExpertRatingError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Подключение роутеров
rating_prefix = f"{config.API_PREFIX}/expert-rating"
app.include_router(service_records_router, prefix=rating_prefix)
app.include_router(reviews_router, prefix=rating_prefix)
app.include_router(ratings_router, prefix=rating_prefix)
app.include_router(health_router)


@app.get("/")
async def root():
    return {
        "message": "Expert Service Rating API is running!",
        "docs": "/docs",
        "version": "1.0.0",
    }
