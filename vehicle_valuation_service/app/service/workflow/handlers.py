# Workflow command handlers: load the case, apply the transition, save, mirror
import logging
from typing import List, Optional, Dict

from opentelemetry import trace

from vehicle_valuation_service.app.models import CaseKey, CaseStatus, ValuationDocumentDB, WorkflowStep, OpenValuation
from vehicle_valuation_service.app.observability import workflow_transitions_counter
from vehicle_valuation_service.app.service.exceptions import CaseNotFoundError
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.mirroring import BackgroundMirror
from vehicle_valuation_service.app.service.workflow import engine

logger = logging.getLogger(__name__)


async def _load_strict(repository: AbstractValuationRepository, key: CaseKey) -> ValuationDocumentDB:
    document = await repository.load(key)
    if document is None:
        raise CaseNotFoundError(key.valuation_id, key.partition_key)
    return document


def _annotate_span(action: str, key: CaseKey, step_order: Optional[int] = None):
    current_span = trace.get_current_span()
    current_span.set_attribute("command.name", f"workflow.{action}")
    current_span.set_attribute("valuation.id", key.valuation_id)
    if step_order is not None:
        current_span.set_attribute("workflow.step_order", step_order)


async def handle_start_step(
    repository: AbstractValuationRepository,
    key: CaseKey,
    step_order: int,
    mirror: Optional[BackgroundMirror] = None,
) -> WorkflowStep:
    _annotate_span("start", key, step_order)
    document = await _load_strict(repository, key)

    step = engine.start_step(document, step_order)
    saved = await repository.save(document)

    trace.get_current_span().add_event("workflow.step.started", {"valuation.id": key.valuation_id, "step.order": step_order})
    workflow_transitions_counter.add(1, {"action": "start"})
    logger.info(f"Workflow step {step_order} ({step.assigned_to_role}) started for valuation {key.valuation_id}")

    if mirror is not None:
        mirror.submit_step(saved, step)
    return step


async def handle_complete_step(
    repository: AbstractValuationRepository,
    key: CaseKey,
    step_order: int,
    mirror: Optional[BackgroundMirror] = None,
) -> WorkflowStep:
    _annotate_span("complete", key, step_order)
    document = await _load_strict(repository, key)

    step = engine.complete_step(document, step_order)
    saved = await repository.save(document)

    trace.get_current_span().add_event("workflow.step.completed", {"valuation.id": key.valuation_id, "step.order": step_order})
    workflow_transitions_counter.add(1, {"action": "complete"})
    logger.info(f"Workflow step {step_order} ({step.assigned_to_role}) completed for valuation {key.valuation_id}")
    if saved.status == CaseStatus.COMPLETED:
        logger.info(f"Valuation {key.valuation_id} completed its workflow.")

    if mirror is not None:
        mirror.submit_step(saved, step)
    return step


async def handle_annotate_step(
    repository: AbstractValuationRepository,
    key: CaseKey,
    step_order: int,
    changes: Dict[str, Optional[str]],
) -> WorkflowStep:
    _annotate_span("annotate", key, step_order)
    document = await _load_strict(repository, key)

    step = engine.annotate_step(document, step_order, changes)
    await repository.save(document)

    workflow_transitions_counter.add(1, {"action": "annotate"})
    logger.info(f"Workflow step {step_order} annotated for valuation {key.valuation_id}: {sorted(changes)}")
    return step


async def handle_get_workflow(repository: AbstractValuationRepository, key: CaseKey) -> List[WorkflowStep]:
    document = await _load_strict(repository, key)
    return engine.ordered_steps(document)


async def handle_delete_workflow(repository: AbstractValuationRepository, key: CaseKey):
    _annotate_span("delete", key)
    document = await _load_strict(repository, key)
    document.workflow = None
    await repository.save(document)
    logger.info(f"Workflow cleared for valuation {key.valuation_id}")


async def handle_list_open_cases(repository: AbstractValuationRepository) -> List[OpenValuation]:
    documents = await repository.list_by_status(CaseStatus.OPEN.value)
    return [engine.to_open_valuation(doc) for doc in documents if doc.status == CaseStatus.OPEN]
