# API Router for the valuation response section (stored AI price ranges)
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, Body

from vehicle_valuation_service.app.api.v1.helpers import http_error_for
from vehicle_valuation_service.app.dependencies.case_key import get_case_key
from vehicle_valuation_service.app.models import CaseKey, ValuationResponseDB
from vehicle_valuation_service.app.service.exceptions import BaseValuationError
from vehicle_valuation_service.app.service.interfaces.blob_store import AbstractBlobStore
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.sections.handlers import (
    handle_get_section, handle_upsert_section, handle_delete_section,
)
from vehicle_valuation_service.app.service.sections.strategies import get_section_strategy
from vehicle_valuation_service.infrastructure.database.valuation_store import get_valuation_repository
from vehicle_valuation_service.infrastructure.storage.gridfs_blob_store import get_blob_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Valuation Response"])


@router.get("/valuations/{valuation_id}/valuation-response", response_model=ValuationResponseDB)
async def get_valuation_response_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        return await handle_get_section(repository, get_section_strategy("valuation_response"), key)
    except Exception as e:
        logger.error(f"Error retrieving valuation response for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve valuation response.")


@router.put("/valuations/{valuation_id}/valuation-response", status_code=204, response_class=Response)
async def upsert_valuation_response_api(
    key: CaseKey = Depends(get_case_key),
    request_data: ValuationResponseDB = Body(...),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    blob_store: AbstractBlobStore = Depends(get_blob_store)
):
    try:
        await handle_upsert_section(repository, blob_store, get_section_strategy("valuation_response"), key, request_data)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Valuation response upsert for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error(f"Unexpected error upserting valuation response for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save valuation response.")


@router.delete("/valuations/{valuation_id}/valuation-response", status_code=204, response_class=Response)
async def delete_valuation_response_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        await handle_delete_section(repository, get_section_strategy("valuation_response"), key)
        return Response(status_code=204)
    except BaseValuationError as e:
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting valuation response for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete valuation response.")
