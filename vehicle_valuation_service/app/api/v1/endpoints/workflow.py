# API Router for the five-step approval workflow of a case
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, Body
from pydantic import BaseModel

from vehicle_valuation_service.app.api.v1.helpers import http_error_for
from vehicle_valuation_service.app.dependencies.case_key import get_case_key
from vehicle_valuation_service.app.dependencies.app_state import get_workflow_mirror
from vehicle_valuation_service.app.models import CaseKey, WorkflowStep
from vehicle_valuation_service.app.service.exceptions import BaseValuationError
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.mirroring import BackgroundMirror
from vehicle_valuation_service.app.service.workflow import handlers as workflow_handlers
from vehicle_valuation_service.infrastructure.database.valuation_store import get_valuation_repository

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Workflow"])


class StepAnnotationRequest(BaseModel):
    red_flag: Optional[str] = None
    remarks: Optional[str] = None


@router.get(
    "/valuations/{valuation_id}/workflow",
    response_model=List[WorkflowStep],
    summary="Get the workflow steps of a case, ordered by step order."
)
async def get_workflow_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        return await workflow_handlers.handle_get_workflow(repository, key)
    except BaseValuationError as e:
        logger.warning(f"Get workflow for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error retrieving workflow for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve workflow.")


@router.post(
    "/valuations/{valuation_id}/workflow/{step_order}/start",
    status_code=204,
    response_class=Response,
    summary="Start a workflow step; its predecessor must be completed."
)
async def start_workflow_step_api(
    step_order: int,
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    mirror: Optional[BackgroundMirror] = Depends(get_workflow_mirror)
):
    try:
        await workflow_handlers.handle_start_step(repository, key, step_order, mirror=mirror)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Start of step {step_order} for valuation {key.valuation_id} rejected: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error starting step {step_order} for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to start workflow step.")


@router.post(
    "/valuations/{valuation_id}/workflow/{step_order}/complete",
    status_code=204,
    response_class=Response,
    summary="Complete an in-progress workflow step."
)
async def complete_workflow_step_api(
    step_order: int,
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    mirror: Optional[BackgroundMirror] = Depends(get_workflow_mirror)
):
    try:
        await workflow_handlers.handle_complete_step(repository, key, step_order, mirror=mirror)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Completion of step {step_order} for valuation {key.valuation_id} rejected: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error completing step {step_order} for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to complete workflow step.")


@router.patch(
    "/valuations/{valuation_id}/workflow/{step_order}/annotation",
    status_code=204,
    response_class=Response,
    summary="Set the red flag and/or remarks of a workflow step."
)
async def annotate_workflow_step_api(
    step_order: int,
    request_data: StepAnnotationRequest = Body(...),
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        changes = request_data.model_dump(exclude_unset=True)
        await workflow_handlers.handle_annotate_step(repository, key, step_order, changes)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Annotation of step {step_order} for valuation {key.valuation_id} rejected: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error annotating step {step_order} for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to annotate workflow step.")


@router.delete(
    "/valuations/{valuation_id}/workflow",
    status_code=204,
    response_class=Response,
    summary="Clear the workflow of a case; the case itself is kept."
)
async def delete_workflow_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        await workflow_handlers.handle_delete_workflow(repository, key)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Delete workflow for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting workflow for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete workflow.")
