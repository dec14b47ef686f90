# Shared helpers for the v1 routers: domain error -> HTTP mapping and multipart parsing
import logging
from typing import Optional, List, Type, TypeVar

from fastapi import HTTPException, UploadFile
from pydantic import BaseModel

from vehicle_valuation_service.app.models import FileUpload
from vehicle_valuation_service.app.service.exceptions import (
    BaseValuationError, NotFoundError, SequenceViolationError, InvalidTransitionError,
    ConcurrencyConflictError, UploadFailureError, UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def http_error_for(exc: BaseValuationError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (SequenceViolationError, InvalidTransitionError)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, ConcurrencyConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, (UploadFailureError, UpstreamUnavailableError)):
        return HTTPException(status_code=502, detail=str(exc))
    logger.error(f"Unmapped domain error: {exc}", exc_info=True)
    return HTTPException(status_code=500, detail="Internal server error.")


def parse_details(model_cls: Type[ModelT], details: str) -> ModelT:
    """Parses the JSON `details` form field of a multipart request. Raises ValueError on bad input."""
    return model_cls.model_validate_json(details)


async def read_upload(upload: Optional[UploadFile]) -> Optional[FileUpload]:
    # Browsers send an empty part (no filename) for an untouched file input
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    return FileUpload(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


async def read_uploads(uploads: Optional[List[UploadFile]]) -> List[FileUpload]:
    files = []
    for upload in uploads or []:
        file_upload = await read_upload(upload)
        if file_upload is not None:
            files.append(file_upload)
    return files
