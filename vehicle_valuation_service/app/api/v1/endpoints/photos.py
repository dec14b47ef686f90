# API Router for the vehicle photo map (one file per named slot)
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Response, Request
from starlette.datastructures import UploadFile as StarletteUploadFile

from vehicle_valuation_service.app.api.v1.helpers import http_error_for, read_upload
from vehicle_valuation_service.app.dependencies.case_key import get_case_key
from vehicle_valuation_service.app.models import CaseKey, FileUpload
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
router = APIRouter(tags=["Photos"])


@router.get("/valuations/{valuation_id}/photos", response_model=Dict[str, str])
async def get_photos_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        return await handle_get_section(repository, get_section_strategy("photos"), key)
    except Exception as e:
        logger.error(f"Error retrieving photos for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve photos.")


@router.put(
    "/valuations/{valuation_id}/photos",
    response_model=Dict[str, str],
    summary="Upload photos by slot name (multipart, one file part per slot); returns the full photo map."
)
async def upsert_photos_api(
    request: Request,
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    blob_store: AbstractBlobStore = Depends(get_blob_store)
):
    try:
        form = await request.form()
        payload: Dict[str, FileUpload] = {}
        for slot, value in form.multi_items():
            if isinstance(value, StarletteUploadFile):
                file_upload = await read_upload(value)
                if file_upload is not None:
                    payload[slot] = file_upload

        return await handle_upsert_section(repository, blob_store, get_section_strategy("photos"), key, payload)
    except BaseValuationError as e:
        logger.warning(f"Photo upload for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except ValueError as ve:
        logger.warning(f"Invalid photo upload for valuation {key.valuation_id}: {ve}")
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error(f"Unexpected error uploading photos for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save photos.")


@router.delete("/valuations/{valuation_id}/photos", status_code=204, response_class=Response)
async def delete_photos_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        await handle_delete_section(repository, get_section_strategy("photos"), key)
        return Response(status_code=204)
    except BaseValuationError as e:
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting photos for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete photos.")
