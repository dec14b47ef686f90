# Best-effort mirroring of a case's workflow position into the workflow table
import asyncio
import logging
from typing import Dict, Optional, Set

from vehicle_valuation_service.app.models import ValuationDocumentDB, WorkflowStep, WorkflowTableUpdate
from vehicle_valuation_service.app.observability import mirror_failures_counter

logger = logging.getLogger(__name__)


def build_workflow_table_update(document: ValuationDocumentDB, step: WorkflowStep) -> WorkflowTableUpdate:
    stakeholder = document.stakeholder
    return WorkflowTableUpdate(
        vehicle_number=document.vehicle_number,
        applicant_contact=document.applicant_contact,
        applicant_name=stakeholder.applicant.name if stakeholder else "",
        workflow=step.assigned_to_role,
        workflow_step_order=step.step_order,
        status=step.status,
        completed_at=step.completed_at,
        assigned_to=stakeholder.executive_name if stakeholder else None,
        location=stakeholder.vehicle_location.name if stakeholder else None,
        red_flag=step.red_flag,
        remarks=step.remarks,
        assigned_to_phone_number=stakeholder.executive_contact if stakeholder else None,
        assigned_to_email=stakeholder.executive_email if stakeholder else None,
        assigned_to_whatsapp=stakeholder.executive_whatsapp if stakeholder else None,
        stakeholder_name=stakeholder.name if stakeholder else None,
        valuation_type=stakeholder.valuation_type if stakeholder else None,
    )


class BackgroundMirror:
    """
    Schedules workflow table writes as asyncio tasks so that a failing table
    write never fails the request that produced it. Failures are logged and
    counted. Writes for the same valuation run in submission order, each one
    waiting for the previous. `drain()` waits for every outstanding write.
    """

    def __init__(self, store):
        self.store = store
        self._tasks: Set[asyncio.Task] = set()
        self._latest: Dict[str, asyncio.Task] = {}

    def submit(self, valuation_id: str, update: WorkflowTableUpdate) -> Optional[asyncio.Task]:
        previous = self._latest.get(valuation_id)
        try:
            task = asyncio.get_running_loop().create_task(self._write(valuation_id, update, previous))
        except RuntimeError as e:
            logger.error(f"Cannot schedule workflow table write for valuation {valuation_id}: {e}")
            mirror_failures_counter.add(1, {"reason": "not_scheduled"})
            return None
        self._tasks.add(task)
        self._latest[valuation_id] = task
        task.add_done_callback(lambda t: self._forget(valuation_id, t))
        return task

    def submit_step(self, document: ValuationDocumentDB, step: WorkflowStep) -> Optional[asyncio.Task]:
        return self.submit(document.id, build_workflow_table_update(document, step))

    def _forget(self, valuation_id: str, task: asyncio.Task):
        self._tasks.discard(task)
        if self._latest.get(valuation_id) is task:
            del self._latest[valuation_id]

    async def _write(self, valuation_id: str, update: WorkflowTableUpdate, previous: Optional[asyncio.Task] = None):
        if previous is not None:
            # asyncio.wait never raises the awaited task's error or cancellation
            await asyncio.wait({previous})
        try:
            await self.store.upsert(valuation_id, update)
        except Exception as e:
            logger.error(f"Best-effort workflow table write failed for valuation {valuation_id}: {e}", exc_info=True)
            mirror_failures_counter.add(1, {"reason": type(e).__name__})

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self):
        if self._tasks:
            logger.info(f"Waiting for {len(self._tasks)} outstanding workflow table writes.")
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
