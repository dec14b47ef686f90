# API Router for case-level operations: open cases, existence, soft delete, AI estimate
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from vehicle_valuation_service.app.api.v1.helpers import http_error_for
from vehicle_valuation_service.app.dependencies.case_key import get_case_key
from vehicle_valuation_service.app.models import CaseKey, OpenValuation, ValuationDocumentDB, ValuationResponseDB
from vehicle_valuation_service.app.service.cases.handlers import handle_get_case, handle_delete_case
from vehicle_valuation_service.app.service.exceptions import BaseValuationError
from vehicle_valuation_service.app.service.interfaces.valuation_estimator import AbstractValuationEstimator
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.valuation.handlers import handle_estimate_valuation
from vehicle_valuation_service.app.service.workflow.handlers import handle_list_open_cases
from vehicle_valuation_service.infrastructure.ai_valuation_client import get_valuation_estimator
from vehicle_valuation_service.infrastructure.database.valuation_store import get_valuation_repository

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Valuations"])


# Declared before /valuations/{valuation_id} so "open" is never taken for an id
@router.get(
    "/valuations/open",
    response_model=List[OpenValuation],
    summary="List open valuation cases with their in-progress workflow steps."
)
async def list_open_valuations_api(repository: AbstractValuationRepository = Depends(get_valuation_repository)):
    try:
        return await handle_list_open_cases(repository)
    except Exception as e:
        logger.error(f"Error listing open valuations: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to list open valuations.")


@router.get(
    "/valuations/{valuation_id}",
    response_model=ValuationDocumentDB,
    summary="Get a whole valuation case."
)
async def get_valuation_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        return await handle_get_case(repository, key)
    except BaseValuationError as e:
        logger.warning(f"Get valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error retrieving valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve valuation.")


@router.delete(
    "/valuations/{valuation_id}",
    status_code=204,
    response_class=Response,
    summary="Soft-delete a valuation case (status becomes Deleted)."
)
async def delete_valuation_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        await handle_delete_case(repository, key)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Delete valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete valuation.")


@router.post(
    "/valuations/{valuation_id}/valuation",
    response_model=ValuationResponseDB,
    summary="Estimate low / mid / high INR price ranges with the AI valuation assistant and store them."
)
async def estimate_valuation_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    estimator: AbstractValuationEstimator = Depends(get_valuation_estimator)
):
    try:
        return await handle_estimate_valuation(repository, estimator, key)
    except BaseValuationError as e:
        logger.warning(f"Valuation estimate for {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error estimating valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to estimate valuation.")
