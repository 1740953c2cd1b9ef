"""
Тесты жизненного цикла записей об услугах.
"""

import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from passport_shared.models import (
    ExpertWorkStatus,
    ServiceRecordStatus as S,
    ServiceRequestStatus,
)
from passport_backend.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from passport_backend.schemas.service_record import ServiceRecordCreate, ServiceRecordUpdate

VALID = {
    (S.PENDING, S.IN_PROGRESS), (S.PENDING, S.CANCELLED),
    (S.IN_PROGRESS, S.COMPLETED), (S.IN_PROGRESS, S.CANCELLED), (S.IN_PROGRESS, S.DISPUTED),
    (S.COMPLETED, S.DISPUTED),
    (S.DISPUTED, S.COMPLETED), (S.DISPUTED, S.CANCELLED),
}
INVALID = [(a, b) for a in S for b in S if (a, b) not in VALID]


async def move(record_service, db, record, *statuses):
    for status in statuses:
        record = await record_service.update_service_record(
            db, record.id, ServiceRecordUpdate(status=status), record.expert_id, True
        )
    return record


@pytest.mark.asyncio
async def test_create_service_record(db, create_record, make_expert, make_service_request, customer_id):
    expert = await make_expert()
    org_id = uuid.uuid4()
    request = await make_service_request(organization_id=org_id, passport_code="DP-001")

    record = await create_record(expert=expert, request=request)

    assert record.status == S.PENDING
    assert re.fullmatch(r"ESR-\d{4}-000001", record.record_code)
    assert record.customer_user_id == customer_id
    assert record.customer_org_id == org_id
    assert record.service_title == "Compressor overhaul"
    assert record.service_location == "Plant 3, Hall B"
    assert record.passport_code == "DP-001"
    assert record.price_currency == "USD"
    assert record.agreed_price == Decimal("150.00")

    assert expert.work_status == ExpertWorkStatus.BOOKED
    assert expert.active_service_count == 1

    await db.refresh(request)
    assert request.status == ServiceRequestStatus.IN_PROGRESS
    assert request.assigned_expert_id == expert.id


@pytest.mark.asyncio
async def test_create_snapshot_is_not_synced(db, create_record, make_service_request):
    request = await make_service_request()
    record = await create_record(request=request)

    request.title = "Renamed request"
    await db.flush()

    assert record.service_title == "Compressor overhaul"


@pytest.mark.asyncio
async def test_create_unknown_request(db, record_service, make_expert, customer_id):
    expert = await make_expert()
    data = ServiceRecordCreate(service_request_id=uuid.uuid4(), expert_id=expert.id, agreed_price=Decimal("10"))

    with pytest.raises(NotFoundError):
        await record_service.create_service_record(db, data, customer_id)


@pytest.mark.asyncio
async def test_create_unknown_expert(db, record_service, make_service_request, customer_id):
    request = await make_service_request()
    data = ServiceRecordCreate(service_request_id=request.id, expert_id=uuid.uuid4(), agreed_price=Decimal("10"))

    with pytest.raises(NotFoundError):
        await record_service.create_service_record(db, data, customer_id)


@pytest.mark.asyncio
async def test_create_duplicate_conflict(create_record, make_expert, make_service_request):
    expert = await make_expert()
    request = await make_service_request()
    await create_record(expert=expert, request=request)

    with pytest.raises(ConflictError):
        await create_record(expert=expert, request=request)


@pytest.mark.asyncio
async def test_record_codes_are_sequential(create_record):
    first = await create_record()
    second = await create_record()

    assert first.record_code.endswith("-000001")
    assert second.record_code.endswith("-000002")


@pytest.mark.asyncio
async def test_update_by_foreign_expert_forbidden(db, record_service, create_record):
    record = await create_record()

    with pytest.raises(ForbiddenError):
        await record_service.update_service_record(
            db, record.id, ServiceRecordUpdate(status=S.IN_PROGRESS), uuid.uuid4(), True
        )
    assert record.status == S.PENDING


@pytest.mark.asyncio
async def test_update_unknown_record(db, record_service):
    with pytest.raises(NotFoundError):
        await record_service.update_service_record(db, uuid.uuid4(), ServiceRecordUpdate(), uuid.uuid4(), False)


@pytest.mark.asyncio
async def test_start_sets_actual_start_and_in_service(db, record_service, create_record, make_expert):
    expert = await make_expert()
    record = await create_record(expert=expert)

    record = await move(record_service, db, record, S.IN_PROGRESS)

    assert record.status == S.IN_PROGRESS
    assert record.actual_start is not None
    assert expert.work_status == ExpertWorkStatus.IN_SERVICE


@pytest.mark.asyncio
async def test_start_keeps_existing_actual_start(db, record_service, create_record, make_expert):
    expert = await make_expert()
    record = await create_record(expert=expert)
    started = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
    record.actual_start = started

    record = await move(record_service, db, record, S.IN_PROGRESS)

    assert record.actual_start == started
    assert expert.work_status == ExpertWorkStatus.BOOKED


@pytest.mark.asyncio
async def test_complete_side_effects(db, record_service, create_record, make_expert, make_service_request):
    expert = await make_expert()
    request = await make_service_request()
    record = await create_record(expert=expert, request=request)

    record = await move(record_service, db, record, S.IN_PROGRESS, S.COMPLETED)

    assert record.status == S.COMPLETED
    assert record.completed_at is not None
    assert record.actual_end is not None
    assert expert.completed_services == 1
    assert expert.work_status == ExpertWorkStatus.IDLE
    assert expert.active_service_count == 0

    await db.refresh(request)
    assert request.status == ServiceRequestStatus.COMPLETED
    assert request.completed_at is not None


@pytest.mark.asyncio
async def test_complete_keeps_reported_actual_end(db, record_service, create_record):
    record = await create_record()
    finished = datetime(2026, 3, 1, 18, 30, tzinfo=timezone.utc)
    await move(record_service, db, record, S.IN_PROGRESS)
    record.actual_end = finished

    record = await move(record_service, db, record, S.COMPLETED)

    assert record.actual_end == finished


@pytest.mark.asyncio
async def test_complete_with_other_active_record_keeps_booked(db, record_service, create_record, make_expert):
    expert = await make_expert()
    first = await create_record(expert=expert)
    await create_record(expert=expert)

    await move(record_service, db, first, S.IN_PROGRESS, S.COMPLETED)

    assert expert.work_status == ExpertWorkStatus.BOOKED


@pytest.mark.asyncio
async def test_dispute_then_complete_counts_again(db, record_service, create_record, make_expert):
    expert = await make_expert()
    record = await create_record(expert=expert)

    record = await move(record_service, db, record, S.IN_PROGRESS, S.COMPLETED, S.DISPUTED)
    assert record.status == S.DISPUTED
    assert expert.completed_services == 1

    record = await move(record_service, db, record, S.COMPLETED)
    assert expert.completed_services == 2
    assert expert.active_service_count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("current,target", INVALID)
async def test_invalid_transitions_rejected(db, record_service, create_record, current, target):
    record = await create_record()
    record.status = current
    await db.flush()

    with pytest.raises(InvalidStateError):
        await record_service.update_service_record(
            db, record.id, ServiceRecordUpdate(status=target), record.expert_id, True
        )

    await db.refresh(record)
    assert record.status == current


@pytest.mark.asyncio
async def test_field_patch_by_expert(db, record_service, create_record):
    record = await create_record()
    patch = ServiceRecordUpdate(
        final_price=Decimal("180.00"),
        actual_duration="3h",
        expert_notes="replaced valve",
        customer_notes="should be ignored",
    )

    record = await record_service.update_service_record(db, record.id, patch, record.expert_id, True)

    assert record.final_price == Decimal("180.00")
    assert record.actual_duration == "3h"
    assert record.expert_notes == "replaced valve"
    assert record.customer_notes is None


@pytest.mark.asyncio
async def test_field_patch_by_customer(db, record_service, create_record, customer_id):
    record = await create_record()
    patch = ServiceRecordUpdate(
        service_location="Plant 4",
        completion_notes="done",
        expert_notes="should be ignored",
        customer_notes="please call before arrival",
    )

    record = await record_service.update_service_record(db, record.id, patch, customer_id, False)

    assert record.service_location == "Plant 4"
    assert record.completion_notes == "done"
    assert record.expert_notes is None
    assert record.customer_notes == "please call before arrival"


@pytest.mark.asyncio
async def test_cancel_records_reason_and_restores_expert(db, record_service, create_record, make_expert, customer_id):
    expert = await make_expert()
    record = await create_record(expert=expert)

    record = await record_service.cancel_service_record(db, record.id, customer_id, False, "Plant shutdown")

    assert record.status == S.CANCELLED
    assert record.cancelled_at is not None
    assert record.cancellation_reason == "Plant shutdown"
    assert record.cancelled_by == customer_id
    assert expert.work_status == ExpertWorkStatus.IDLE
    assert expert.active_service_count == 0


@pytest.mark.asyncio
async def test_cancel_twice_is_invalid(db, record_service, create_record, customer_id):
    record = await create_record()
    await record_service.cancel_service_record(db, record.id, customer_id, False)

    with pytest.raises(InvalidStateError):
        await record_service.cancel_service_record(db, record.id, customer_id, False)


@pytest.mark.asyncio
async def test_confirm_completion(db, record_service, create_record, customer_id):
    record = await create_record()
    await move(record_service, db, record, S.IN_PROGRESS, S.COMPLETED)

    record = await record_service.confirm_completion(db, record.id, customer_id)

    assert record.confirmed_by_customer is True
    assert record.confirmed_at is not None
    assert record.review_requested_at is not None
    assert record.is_reviewed is False


@pytest.mark.asyncio
async def test_confirm_by_other_user_forbidden(db, record_service, create_record):
    record = await create_record()
    await move(record_service, db, record, S.IN_PROGRESS, S.COMPLETED)

    with pytest.raises(ForbiddenError):
        await record_service.confirm_completion(db, record.id, uuid.uuid4())


@pytest.mark.asyncio
async def test_confirm_before_completion_invalid(db, record_service, create_record, customer_id):
    record = await create_record()

    with pytest.raises(InvalidStateError):
        await record_service.confirm_completion(db, record.id, customer_id)
    assert record.confirmed_by_customer is False


@pytest.mark.asyncio
async def test_list_expert_records_newest_first(db, record_service, create_record, make_expert):
    expert = await make_expert()
    first = await create_record(expert=expert)
    second = await create_record(expert=expert)
    third = await create_record(expert=expert)
    await move(record_service, db, third, S.IN_PROGRESS)

    records = await record_service.get_expert_service_records(db, expert.id)
    assert [r.id for r in records] == [third.id, second.id, first.id]

    limited = await record_service.get_expert_service_records(db, expert.id, limit=2)
    assert [r.id for r in limited] == [third.id, second.id]

    pending = await record_service.get_expert_service_records(db, expert.id, status=S.PENDING)
    assert {r.id for r in pending} == {first.id, second.id}


@pytest.mark.asyncio
async def test_list_customer_records(db, record_service, create_record, customer_id):
    mine = await create_record()
    await create_record(customer=uuid.uuid4())

    records = await record_service.get_customer_service_records(db, customer_id)

    assert [r.id for r in records] == [mine.id]


@pytest.mark.asyncio
async def test_list_with_unknown_status_filter(db, record_service, make_expert):
    expert = await make_expert()

    with pytest.raises(ValidationError):
        await record_service.get_expert_service_records(db, expert.id, status="ARCHIVED")


@pytest.mark.asyncio
async def test_record_code_collision_is_retried(db, record_service, create_record, mocker):
    first = await create_record()
    fresh_code = "ESR-2601-000777"
    mocker.patch(
        "passport_backend.services.service_records.generate_record_code",
        side_effect=[first.record_code, fresh_code],
    )

    second = await create_record()

    assert second.record_code == fresh_code
    assert second.status == S.PENDING


@pytest.mark.asyncio
async def test_record_code_collision_twice_is_conflict(db, record_service, create_record, mocker):
    first = await create_record()
    mocker.patch(
        "passport_backend.services.service_records.generate_record_code",
        side_effect=[first.record_code, first.record_code],
    )

    with pytest.raises(ConflictError, match="unique service record code"):
        await create_record()
