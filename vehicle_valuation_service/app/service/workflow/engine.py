"""
Fixed five-step approval workflow of a valuation case.

Every function here mutates the case document in memory only; persisting the
result is the caller's job. Steps move Pending -> InProgress -> Completed and
never back. A step may only be started once its predecessor is Completed.
"""
import datetime
from typing import Optional, List, Dict

from vehicle_valuation_service.app.models import (
    ValuationDocumentDB, WorkflowStep, StepStatus, WorkflowRole, OpenValuation, CaseStatus,
)
from vehicle_valuation_service.app.service.exceptions import (
    SequenceViolationError, StepNotFoundError, InvalidTransitionError,
)

WORKFLOW_TEMPLATE = (
    (1, WorkflowRole.STAKEHOLDER),
    (2, WorkflowRole.BACK_END),
    (3, WorkflowRole.AVO),
    (4, WorkflowRole.QC),
    (5, WorkflowRole.FINAL_REPORT),
)

ANNOTATION_FIELDS = ("red_flag", "remarks")


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def build_workflow(now: Optional[datetime.datetime] = None) -> List[WorkflowStep]:
    now = now or _now()
    steps = []
    for step_order, role in WORKFLOW_TEMPLATE:
        first = step_order == 1
        steps.append(WorkflowStep(
            step_order=step_order,
            template_step_id=step_order,
            assigned_to_role=role,
            status=StepStatus.IN_PROGRESS if first else StepStatus.PENDING,
            started_at=now if first else None,
        ))
    return steps


def initialize_workflow(document: ValuationDocumentDB, now: Optional[datetime.datetime] = None) -> bool:
    """Creates the step list when it is absent or empty. Returns True if it was created."""
    if document.workflow:
        return False
    document.workflow = build_workflow(now)
    return True


def find_step(document: ValuationDocumentDB, step_order: int) -> Optional[WorkflowStep]:
    for step in document.workflow or []:
        if step.step_order == step_order:
            return step
    return None


def ordered_steps(document: ValuationDocumentDB) -> List[WorkflowStep]:
    return sorted(document.workflow or [], key=lambda s: s.step_order)


def in_progress_steps(document: ValuationDocumentDB) -> List[WorkflowStep]:
    return [s for s in ordered_steps(document) if s.status == StepStatus.IN_PROGRESS]


def start_step(document: ValuationDocumentDB, step_order: int, now: Optional[datetime.datetime] = None) -> WorkflowStep:
    if step_order > 1:
        previous = find_step(document, step_order - 1)
        if previous is None or previous.status != StepStatus.COMPLETED:
            raise SequenceViolationError(document.id, step_order)

    step = find_step(document, step_order)
    if step is None:
        raise StepNotFoundError(document.id, step_order)
    if step.status == StepStatus.COMPLETED:
        raise InvalidTransitionError(document.id, step_order, step.status, "start")

    # Restarting an InProgress step keeps its original started_at
    if step.status == StepStatus.PENDING:
        step.status = StepStatus.IN_PROGRESS.value
        step.started_at = now or _now()
    return step


def complete_step(document: ValuationDocumentDB, step_order: int, now: Optional[datetime.datetime] = None) -> WorkflowStep:
    step = find_step(document, step_order)
    if step is None:
        raise StepNotFoundError(document.id, step_order)
    if step.status != StepStatus.IN_PROGRESS:
        raise InvalidTransitionError(document.id, step_order, step.status, "complete")

    now = now or _now()
    step.status = StepStatus.COMPLETED.value
    step.completed_at = now

    last_step_order = max(s.step_order for s in document.workflow)
    if step_order == last_step_order:
        document.status = CaseStatus.COMPLETED.value
        document.completed_at = now
    return step


def annotate_step(document: ValuationDocumentDB, step_order: int, changes: Dict[str, Optional[str]]) -> WorkflowStep:
    step = find_step(document, step_order)
    if step is None:
        raise StepNotFoundError(document.id, step_order)
    for field_name in ANNOTATION_FIELDS:
        if field_name in changes:
            setattr(step, field_name, changes[field_name])
    return step


def to_open_valuation(document: ValuationDocumentDB) -> OpenValuation:
    applicant_name = document.stakeholder.applicant.name if document.stakeholder else ""
    return OpenValuation(
        id=document.id,
        vehicle_number=document.vehicle_number,
        applicant_name=applicant_name,
        applicant_contact=document.applicant_contact,
        created_at=document.created_at,
        in_progress_workflow=in_progress_steps(document),
    )
