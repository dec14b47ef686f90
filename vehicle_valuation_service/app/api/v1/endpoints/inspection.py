# API Router for the inspection checklist section
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, Form, File, UploadFile

from vehicle_valuation_service.app.api.v1.helpers import http_error_for, parse_details, read_uploads
from vehicle_valuation_service.app.dependencies.case_key import get_case_key
from vehicle_valuation_service.app.models import CaseKey, InspectionDetailsDB, InspectionDetailsUpdate
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
router = APIRouter(tags=["Inspection"])


@router.get("/valuations/{valuation_id}/inspection", response_model=InspectionDetailsDB)
async def get_inspection_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        return await handle_get_section(repository, get_section_strategy("inspection_details"), key)
    except Exception as e:
        logger.error(f"Error retrieving inspection for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve inspection details.")


@router.put("/valuations/{valuation_id}/inspection", status_code=204, response_class=Response)
async def upsert_inspection_api(
    key: CaseKey = Depends(get_case_key),
    details: str = Form(..., description="JSON string of the inspection checklist."),
    photos: Optional[List[UploadFile]] = File(None),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    blob_store: AbstractBlobStore = Depends(get_blob_store)
):
    try:
        payload = parse_details(InspectionDetailsUpdate, details)
        payload.photos = await read_uploads(photos)

        await handle_upsert_section(repository, blob_store, get_section_strategy("inspection_details"), key, payload)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Inspection upsert for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except ValueError as ve:
        logger.warning(f"Validation error in inspection upsert for valuation {key.valuation_id}: {ve}")
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error(f"Unexpected error upserting inspection for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save inspection details.")


@router.delete("/valuations/{valuation_id}/inspection", status_code=204, response_class=Response)
async def delete_inspection_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        await handle_delete_section(repository, get_section_strategy("inspection_details"), key)
        return Response(status_code=204)
    except BaseValuationError as e:
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting inspection for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete inspection details.")
