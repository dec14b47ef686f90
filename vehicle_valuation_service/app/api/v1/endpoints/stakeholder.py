# API Router for the stakeholder section (intake details and documents)
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, Form, File, UploadFile

from vehicle_valuation_service.app.api.v1.helpers import http_error_for, parse_details, read_upload, read_uploads
from vehicle_valuation_service.app.dependencies.case_key import get_case_key
from vehicle_valuation_service.app.dependencies.app_state import get_workflow_mirror
from vehicle_valuation_service.app.models import CaseKey, StakeholderDB, StakeholderUpdate, StakeholderDocumentsUpload
from vehicle_valuation_service.app.service.exceptions import BaseValuationError
from vehicle_valuation_service.app.service.interfaces.blob_store import AbstractBlobStore
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.mirroring import BackgroundMirror
from vehicle_valuation_service.app.service.sections.handlers import (
    handle_get_section, handle_upsert_section, handle_delete_section,
)
from vehicle_valuation_service.app.service.sections.strategies import get_section_strategy
from vehicle_valuation_service.infrastructure.database.valuation_store import get_valuation_repository
from vehicle_valuation_service.infrastructure.storage.gridfs_blob_store import get_blob_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Stakeholder"])


@router.get(
    "/valuations/{valuation_id}/stakeholder",
    response_model=StakeholderDB,
    summary="Get the stakeholder section, or an empty one when none is stored."
)
async def get_stakeholder_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        return await handle_get_section(repository, get_section_strategy("stakeholder"), key)
    except Exception as e:
        logger.error(f"Error retrieving stakeholder for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve stakeholder.")


@router.put(
    "/valuations/{valuation_id}/stakeholder",
    status_code=204,
    response_class=Response,
    summary="Create or replace the stakeholder section; creates the case and its workflow when new."
)
async def upsert_stakeholder_api(
    key: CaseKey = Depends(get_case_key),
    details: str = Form(..., description="JSON string of the stakeholder details."),
    rc_file: Optional[UploadFile] = File(None),
    insurance_file: Optional[UploadFile] = File(None),
    other_files: Optional[List[UploadFile]] = File(None),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    blob_store: AbstractBlobStore = Depends(get_blob_store),
    mirror: Optional[BackgroundMirror] = Depends(get_workflow_mirror)
):
    try:
        payload = parse_details(StakeholderUpdate, details)
        payload.rc_file = await read_upload(rc_file)
        payload.insurance_file = await read_upload(insurance_file)
        payload.other_files = await read_uploads(other_files)

        await handle_upsert_section(repository, blob_store, get_section_strategy("stakeholder"), key, payload, mirror=mirror)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Stakeholder upsert for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except ValueError as ve:
        logger.warning(f"Validation error in stakeholder upsert for valuation {key.valuation_id}: {ve}")
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error(f"Unexpected error upserting stakeholder for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save stakeholder.")


@router.post(
    "/valuations/{valuation_id}/stakeholder/documents",
    status_code=204,
    response_class=Response,
    summary="Replace the stakeholder document list with newly uploaded RC / insurance / other files."
)
async def upload_stakeholder_documents_api(
    key: CaseKey = Depends(get_case_key),
    rc_file: Optional[UploadFile] = File(None),
    insurance_file: Optional[UploadFile] = File(None),
    other_files: Optional[List[UploadFile]] = File(None),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    blob_store: AbstractBlobStore = Depends(get_blob_store)
):
    try:
        payload = StakeholderDocumentsUpload(
            rc_file=await read_upload(rc_file),
            insurance_file=await read_upload(insurance_file),
            other_files=await read_uploads(other_files),
        )
        await handle_upsert_section(repository, blob_store, get_section_strategy("stakeholder_documents"), key, payload)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Stakeholder document upload for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error(f"Unexpected error uploading stakeholder documents for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to upload stakeholder documents.")


@router.delete(
    "/valuations/{valuation_id}/stakeholder",
    status_code=204,
    response_class=Response,
    summary="Remove the stakeholder section; a missing case is a no-op."
)
async def delete_stakeholder_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        await handle_delete_section(repository, get_section_strategy("stakeholder"), key)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Stakeholder delete for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting stakeholder for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete stakeholder.")
