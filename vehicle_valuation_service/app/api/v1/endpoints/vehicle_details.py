# API Router for the vehicle details (RC) section
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, Form, File, UploadFile

from vehicle_valuation_service.app.api.v1.helpers import http_error_for, parse_details, read_upload
from vehicle_valuation_service.app.dependencies.case_key import get_case_key
from vehicle_valuation_service.app.models import CaseKey, VehicleDetailsDB, VehicleDetailsUpdate
from vehicle_valuation_service.app.service.exceptions import BaseValuationError
from vehicle_valuation_service.app.service.interfaces.blob_store import AbstractBlobStore
from vehicle_valuation_service.app.service.interfaces.rc_lookup_client import AbstractRcLookupClient
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.app.service.sections.handlers import (
    handle_get_section, handle_upsert_section, handle_delete_section,
)
from vehicle_valuation_service.app.service.sections.rc_enrichment import handle_get_vehicle_details_with_rc
from vehicle_valuation_service.app.service.sections.strategies import get_section_strategy
from vehicle_valuation_service.infrastructure.database.valuation_store import get_valuation_repository
from vehicle_valuation_service.infrastructure.rc_lookup_client import get_rc_lookup_client
from vehicle_valuation_service.infrastructure.storage.gridfs_blob_store import get_blob_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Vehicle Details"])


@router.get(
    "/valuations/{valuation_id}/vehicle-details",
    response_model=VehicleDetailsDB,
    summary="Get the stored vehicle details, or empty defaults."
)
async def get_vehicle_details_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        return await handle_get_section(repository, get_section_strategy("vehicle_details"), key)
    except Exception as e:
        logger.error(f"Error retrieving vehicle details for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve vehicle details.")


@router.get(
    "/valuations/{valuation_id}/vehicle-details/with-rc",
    response_model=VehicleDetailsDB,
    summary="Enrich the stored vehicle details with the RC record, store and return them."
)
async def get_vehicle_details_with_rc_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    rc_client: AbstractRcLookupClient = Depends(get_rc_lookup_client)
):
    try:
        return await handle_get_vehicle_details_with_rc(repository, rc_client, key)
    except BaseValuationError as e:
        logger.warning(f"RC enrichment for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error enriching vehicle details for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to enrich vehicle details.")


@router.put(
    "/valuations/{valuation_id}/vehicle-details",
    status_code=204,
    response_class=Response,
    summary="Create or replace the vehicle details, uploading the stencil trace and chassis photo if given."
)
async def upsert_vehicle_details_api(
    key: CaseKey = Depends(get_case_key),
    details: str = Form(..., description="JSON string of the vehicle details."),
    stencil_trace: Optional[UploadFile] = File(None),
    chassis_no_photo: Optional[UploadFile] = File(None),
    repository: AbstractValuationRepository = Depends(get_valuation_repository),
    blob_store: AbstractBlobStore = Depends(get_blob_store)
):
    try:
        payload = parse_details(VehicleDetailsUpdate, details)
        payload.stencil_trace = await read_upload(stencil_trace)
        payload.chassis_no_photo = await read_upload(chassis_no_photo)

        await handle_upsert_section(repository, blob_store, get_section_strategy("vehicle_details"), key, payload)
        return Response(status_code=204)
    except BaseValuationError as e:
        logger.warning(f"Vehicle details upsert for valuation {key.valuation_id} failed: {e}")
        raise http_error_for(e)
    except ValueError as ve:
        logger.warning(f"Validation error in vehicle details upsert for valuation {key.valuation_id}: {ve}")
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error(f"Unexpected error upserting vehicle details for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save vehicle details.")


@router.delete(
    "/valuations/{valuation_id}/vehicle-details",
    status_code=204,
    response_class=Response,
    summary="Remove the vehicle details section; a missing case is a no-op."
)
async def delete_vehicle_details_api(
    key: CaseKey = Depends(get_case_key),
    repository: AbstractValuationRepository = Depends(get_valuation_repository)
):
    try:
        await handle_delete_section(repository, get_section_strategy("vehicle_details"), key)
        return Response(status_code=204)
    except BaseValuationError as e:
        raise http_error_for(e)
    except Exception as e:
        logger.error(f"Unexpected error deleting vehicle details for valuation {key.valuation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete vehicle details.")
