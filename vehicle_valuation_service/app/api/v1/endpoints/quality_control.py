# API Router for the quality-control review section
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, Body

from vehicle_valuation_service.app.api.v1.helpers import http_error_for
from vehicle_valuation_service.app.dependencies.case_key import get_case_key
from vehicle_valuation_service.app.models import CaseKey, QualityControlDB
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
router = APIRouter(tags=["Quality Control"])


@router.get("/valuations/{valuation_id}/quality-control", response_model=QualityControlDB)
async def get_quality_control_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        return await handle_get_section(repository, get_section_strategy("quality_control"), key)
    except Exception as e:
        logger.error(f"Error retrieving quality control for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve quality control.")


@router.put("/valuations/{valuation_id}/quality-control", status_code=204, response_class=Response)
async def upsert_quality_control_api(
    key: CaseKey = Depends(get_case_key),
    request_data: QualityControlDB = Body(...),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    blob_store: AbstractBlobStore = Depends(get_blob_store)
):
    try:
        await handle_upsert_section(repository, blob_store, get_section_strategy("quality_control"), key, request_data)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Quality control upsert for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error(f"Unexpected error upserting quality control for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save quality control.")


@router.delete("/valuations/{valuation_id}/quality-control", status_code=204, response_class=Response)
async def delete_quality_control_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        await handle_delete_section(repository, get_section_strategy("quality_control"), key)
        return Response(status_code=204)
    except BaseValuationError as e:
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting quality control for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete quality control.")
