"""
Общие фикстуры: БД SQLite в памяти, мок кэша и фабрики сущностей.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-expert-rating-api")

import uuid
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from passport_shared.models import (
    Base, Expert, ServiceRequest, ServiceRequestStatus, ServiceType,
)
from passport_backend.schemas.service_record import ServiceRecordCreate
from passport_backend.services.cache import CacheService
from passport_backend.services.reviews import ReviewService
from passport_backend.services.service_records import ServiceRecordService


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_cache(mocker):
    """Мок CacheService: всегда промах, запись проходит"""
    cache = mocker.AsyncMock(spec=CacheService)
    cache.get.return_value = None
    cache.set.return_value = True
    cache.clear_pattern.return_value = 0
    cache.ping.return_value = True
    return cache


@pytest.fixture
def record_service() -> ServiceRecordService:
    return ServiceRecordService()


@pytest.fixture
def review_service(mock_cache, record_service) -> ReviewService:
    return ReviewService(mock_cache, records=record_service)


@pytest.fixture
def customer_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def make_expert(db):
    async def _make(**kwargs) -> Expert:
        kwargs.setdefault("user_id", uuid.uuid4())
        kwargs.setdefault("personal_name", "Ivan Petrov")
        expert = Expert(**kwargs)
        db.add(expert)
        await db.flush()
        return expert
    return _make


@pytest.fixture
def make_service_request(db):
    async def _make(**kwargs) -> ServiceRequest:
        kwargs.setdefault("request_code", f"SR-{uuid.uuid4().hex[:10]}")
        kwargs.setdefault("title", "Compressor overhaul")
        kwargs.setdefault("description", "Annual overhaul of the line compressor")
        kwargs.setdefault("service_type", ServiceType.MAINTENANCE)
        kwargs.setdefault("status", ServiceRequestStatus.OPEN)
        kwargs.setdefault("service_location", "Plant 3, Hall B")
        request = ServiceRequest(**kwargs)
        db.add(request)
        await db.flush()
        return request
    return _make


@pytest.fixture
def create_record(db, record_service, make_expert, make_service_request, customer_id):
    """Создать запись об услуге; эксперт и заявка создаются при необходимости"""
    async def _create(expert=None, request=None, customer=None, agreed_price="150.00"):
        expert = expert or await make_expert()
        request = request or await make_service_request()
        data = ServiceRecordCreate(
            service_request_id=request.id,
            expert_id=expert.id,
            agreed_price=Decimal(agreed_price),
        )
        return await record_service.create_service_record(db, data, customer or customer_id)
    return _create
