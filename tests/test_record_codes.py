"""
Тесты генерации кодов записей ESR-YYMM-NNNNNN.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from passport_shared.models import ServiceRecord
from passport_backend.services.record_codes import generate_record_code, record_code_prefix

MARCH = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
APRIL = datetime(2026, 4, 1, 0, 0, tzinfo=timezone.utc)


async def add_record(db, code):
    db.add(ServiceRecord(
        record_code=code,
        service_request_id=uuid.uuid4(),
        expert_id=uuid.uuid4(),
        customer_user_id=uuid.uuid4(),
        service_type="MAINTENANCE",
        service_title="Pump inspection",
        agreed_price=Decimal("99.00"),
    ))
    await db.flush()


def test_prefix_format():
    assert record_code_prefix(MARCH) == "ESR-2603-"
    assert record_code_prefix(MARCH, prefix="TST") == "TST-2603-"


@pytest.mark.asyncio
async def test_first_code_of_month(db):
    assert await generate_record_code(db, MARCH) == "ESR-2603-000001"


@pytest.mark.asyncio
async def test_codes_continue_within_month(db):
    await add_record(db, "ESR-2603-000001")
    await add_record(db, "ESR-2603-000002")

    assert await generate_record_code(db, MARCH) == "ESR-2603-000003"


@pytest.mark.asyncio
async def test_sequence_restarts_next_month(db):
    await add_record(db, "ESR-2603-000001")
    await add_record(db, "ESR-2603-000002")

    assert await generate_record_code(db, APRIL) == "ESR-2604-000001"
