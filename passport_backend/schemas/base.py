from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Схемы API читаются прямо из ORM-объектов"""
    model_config = ConfigDict(from_attributes=True)


class EntitySchema(BaseSchema):
    """Сохранённая сущность: идентификатор и временные метки"""
    id: UUID
    created_at: datetime
    updated_at: Optional[datetime] = None
