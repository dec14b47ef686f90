import pytest
from unittest.mock import MagicMock, patch

from vehicle_valuation_service.app.models import CaseKey, CaseStatus, StepStatus, ValuationDocumentDB
from vehicle_valuation_service.app.service.exceptions import (
    CaseNotFoundError, ConcurrencyConflictError, SequenceViolationError,
)
from vehicle_valuation_service.app.service.mirroring import BackgroundMirror
from vehicle_valuation_service.app.service.workflow import engine
from vehicle_valuation_service.app.service.workflow.handlers import (
    handle_annotate_step,
    handle_complete_step,
    handle_delete_workflow,
    handle_get_workflow,
    handle_list_open_cases,
    handle_start_step,
)


async def _seed_case(repository, key: CaseKey, with_workflow: bool = True) -> ValuationDocumentDB:
    document = ValuationDocumentDB.new(key)
    if with_workflow:
        engine.initialize_workflow(document)
    return await repository.save(document)


@pytest.mark.asyncio
async def test_start_step_on_missing_case_raises_not_found(repository, case_key):
    with pytest.raises(CaseNotFoundError) as exc_info:
        await handle_start_step(repository, case_key, 1)
    assert exc_info.value.partition_key == case_key.partition_key
    assert repository.documents == {}


@pytest.mark.asyncio
async def test_complete_then_start_persists_transitions(repository, case_key):
    await _seed_case(repository, case_key)

    await handle_complete_step(repository, case_key, 1)
    step = await handle_start_step(repository, case_key, 2)

    assert step.status == StepStatus.IN_PROGRESS
    stored = await repository.load(case_key)
    statuses = [s.status for s in engine.ordered_steps(stored)]
    assert statuses == ["Completed", "InProgress", "Pending", "Pending", "Pending"]
    assert stored.version == 3


@pytest.mark.asyncio
async def test_sequence_violation_does_not_save(repository, case_key):
    await _seed_case(repository, case_key)
    saves_before = repository.save_calls

    with pytest.raises(SequenceViolationError):
        await handle_start_step(repository, case_key, 3)
    assert repository.save_calls == saves_before


@pytest.mark.asyncio
async def test_completing_all_steps_marks_case_completed(repository, case_key):
    await _seed_case(repository, case_key)
    for step_order in range(1, 6):
        if step_order > 1:
            await handle_start_step(repository, case_key, step_order)
        await handle_complete_step(repository, case_key, step_order)

    stored = await repository.load(case_key)
    assert stored.status == CaseStatus.COMPLETED
    assert stored.completed_at is not None
    assert await handle_list_open_cases(repository) == []


@pytest.mark.asyncio
async def test_transitions_are_submitted_to_mirror(repository, case_key):
    await _seed_case(repository, case_key)
    mirror = MagicMock(spec=BackgroundMirror)

    await handle_complete_step(repository, case_key, 1, mirror=mirror)
    await handle_start_step(repository, case_key, 2, mirror=mirror)

    assert mirror.submit_step.call_count == 2
    completed_doc, completed_step = mirror.submit_step.call_args_list[0][0]
    assert completed_step.step_order == 1
    assert completed_step.status == StepStatus.COMPLETED
    assert completed_doc.version == 2
    started_step = mirror.submit_step.call_args_list[1][0][1]
    assert started_step.step_order == 2


@pytest.mark.asyncio
@patch('vehicle_valuation_service.app.service.workflow.handlers.workflow_transitions_counter')
async def test_transition_counter_records_action(mock_counter, repository, case_key):
    await _seed_case(repository, case_key)

    await handle_complete_step(repository, case_key, 1)

    mock_counter.add.assert_called_once_with(1, {"action": "complete"})


@pytest.mark.asyncio
async def test_concurrent_modification_surfaces_conflict(repository, case_key):
    await _seed_case(repository, case_key)
    stale = await repository.load(case_key)
    await handle_complete_step(repository, case_key, 1)

    engine.annotate_step(stale, 1, {"remarks": "late edit"})
    with pytest.raises(ConcurrencyConflictError):
        await repository.save(stale)


@pytest.mark.asyncio
async def test_annotate_step_persists_red_flag_and_remarks(repository, case_key):
    await _seed_case(repository, case_key)

    await handle_annotate_step(repository, case_key, 4, {"red_flag": "Odometer tampered", "remarks": None})

    stored = await repository.load(case_key)
    step = engine.find_step(stored, 4)
    assert step.red_flag == "Odometer tampered"
    assert step.remarks is None


@pytest.mark.asyncio
async def test_get_workflow_returns_ordered_steps(repository, case_key):
    document = ValuationDocumentDB.new(case_key)
    engine.initialize_workflow(document)
    document.workflow = list(reversed(document.workflow))
    await repository.save(document)

    steps = await handle_get_workflow(repository, case_key)

    assert [s.step_order for s in steps] == [1, 2, 3, 4, 5]


@pytest.mark.asyncio
async def test_get_workflow_on_case_without_workflow_is_empty(repository, case_key):
    await _seed_case(repository, case_key, with_workflow=False)
    assert await handle_get_workflow(repository, case_key) == []


@pytest.mark.asyncio
async def test_get_workflow_on_missing_case_raises_not_found(repository, case_key):
    with pytest.raises(CaseNotFoundError):
        await handle_get_workflow(repository, case_key)


@pytest.mark.asyncio
async def test_delete_workflow_keeps_case(repository, case_key):
    await _seed_case(repository, case_key)

    await handle_delete_workflow(repository, case_key)

    stored = await repository.load(case_key)
    assert stored is not None
    assert stored.workflow is None
    assert stored.status == CaseStatus.OPEN


@pytest.mark.asyncio
async def test_delete_workflow_on_missing_case_raises_not_found(repository, case_key):
    with pytest.raises(CaseNotFoundError):
        await handle_delete_workflow(repository, case_key)


@pytest.mark.asyncio
async def test_list_open_cases_excludes_completed_and_deleted(repository):
    open_key = CaseKey(valuation_id="open", vehicle_number="V1", applicant_contact="C1")
    done_key = CaseKey(valuation_id="done", vehicle_number="V2", applicant_contact="C2")
    gone_key = CaseKey(valuation_id="gone", vehicle_number="V3", applicant_contact="C3")
    for key in (open_key, done_key, gone_key):
        await _seed_case(repository, key)

    done = await repository.load(done_key)
    done.status = CaseStatus.COMPLETED.value
    await repository.save(done)
    gone = await repository.load(gone_key)
    gone.status = CaseStatus.DELETED.value
    await repository.save(gone)

    open_cases = await handle_list_open_cases(repository)

    assert [c.id for c in open_cases] == ["open"]
    assert [s.step_order for s in open_cases[0].in_progress_workflow] == [1]


@pytest.mark.asyncio
async def test_list_open_cases_empty_store(repository):
    assert await handle_list_open_cases(repository) == []
