# API Router serving files stored in the blob store
import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from vehicle_valuation_service.app.service.interfaces.blob_store import AbstractBlobStore
from vehicle_valuation_service.infrastructure.storage.gridfs_blob_store import get_blob_store

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Files"])


@router.get("/files/{file_id}", response_class=Response)
async def download_file_api(file_id: str, blob_store: AbstractBlobStore = Depends(get_blob_store)):
    try:
        stored = await blob_store.download(file_id)
    except Exception as e:
        logger.error(f"Error reading file {file_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to read file.")
    if stored is None:
        raise HTTPException(status_code=404, detail=f"File {file_id} not found.")
    return Response(
        content=stored.data,
        media_type=stored.content_type,
        headers={"Content-Disposition": f'inline; filename="{stored.filename}"'},
    )
