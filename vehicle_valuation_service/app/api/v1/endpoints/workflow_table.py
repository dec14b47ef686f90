# API Router for the workflow table (denormalized workflow position per case)
import datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, Body
from pydantic import BaseModel

from vehicle_valuation_service.app.dependencies.case_key import get_case_key
from vehicle_valuation_service.app.models import CaseKey, WorkflowTableRecordDB, WorkflowTableUpdate
from vehicle_valuation_service.infrastructure.database.workflow_table_store import (
    WorkflowTableStore, get_workflow_table_store,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Workflow Table"])


class WorkflowTableUpsertRequest(BaseModel):
    applicant_name: str = ""
    workflow: str
    workflow_step_order: int
    status: str
    completed_at: Optional[datetime.datetime] = None
    assigned_to: Optional[str] = None
    location: Optional[str] = None
    red_flag: Optional[str] = None
    remarks: Optional[str] = None
    assigned_to_phone_number: Optional[str] = None
    assigned_to_email: Optional[str] = None
    assigned_to_whatsapp: Optional[str] = None
    stakeholder_name: Optional[str] = None
    valuation_type: Optional[str] = None


@router.get(
    "/valuations/workflows/open",
    response_model=List[WorkflowTableRecordDB],
    summary="List workflow table records whose status is InProgress."
)
async def list_in_progress_workflows_api(store: WorkflowTableStore = Depends(get_workflow_table_store)):
    try:
        return await store.list_in_progress()
    except Exception as e:
        logger.error(f"Error listing in-progress workflow table records: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to list in-progress workflows.")


@router.get("/valuations/{valuation_id}/workflow/table", response_model=WorkflowTableRecordDB)
async def get_workflow_table_record_api(
    key: CaseKey = Depends(get_case_key),
    store: WorkflowTableStore = Depends(get_workflow_table_store)
):
    try:
        record = await store.get(key.valuation_id, key.vehicle_number, key.applicant_contact)
        if not record:
            raise HTTPException(status_code=404, detail=f"Workflow table record for valuation {key.valuation_id} not found.")
        return record
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error retrieving workflow table record for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve workflow table record.")


@router.put("/valuations/{valuation_id}/workflow/table", status_code=204, response_class=Response)
async def upsert_workflow_table_record_api(
    request_data: WorkflowTableUpsertRequest = Body(...),
    key: CaseKey = Depends(get_case_key),
    store: WorkflowTableStore = Depends(get_workflow_table_store)
):
    try:
        update = WorkflowTableUpdate(
            vehicle_number=key.vehicle_number,
            applicant_contact=key.applicant_contact,
            **request_data.model_dump(),
        )
        await store.upsert(key.valuation_id, update)
        return Response(status_code=204)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error(f"Unexpected error upserting workflow table record for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save workflow table record.")


@router.delete("/valuations/{valuation_id}/workflow/table", status_code=204, response_class=Response)
async def delete_workflow_table_record_api(
    key: CaseKey = Depends(get_case_key),
    store: WorkflowTableStore = Depends(get_workflow_table_store)
):
    try:
        await store.delete(key.valuation_id, key.vehicle_number, key.applicant_contact)
        return Response(status_code=204)
    except Exception as e:
        logger.error(f"Unexpected error deleting workflow table record for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete workflow table record.")
