# passport_backend/services/record_codes.py
from datetime import datetime
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from passport_shared.config import config
from passport_shared.models import ServiceRecord
from passport_shared.models.base import utcnow


def record_code_prefix(now: datetime, prefix: Optional[str] = None) -> str:
    """Префикс кода записи за месяц: ESR-YYMM-"""
    return f"{prefix or config.RECORD_CODE_PREFIX}-{now:%y%m}-"


async def generate_record_code(db: AsyncSession, now: Optional[datetime] = None) -> str:
    """Следующий код записи ESR-YYMM-NNNNNN.

    Последовательность считается внутри месяца из кода и начинается
    заново с 000001 каждый новый месяц.
    """
    now = now or utcnow()
    month_prefix = record_code_prefix(now)

    result = await db.execute(
        select(func.count(ServiceRecord.id)).where(
            ServiceRecord.record_code.like(f"{month_prefix}%")
        )
    )
    count = result.scalar_one()
    return f"{month_prefix}{count + 1:06d}"
