# Blob storage on MongoDB GridFS
import logging
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from gridfs.errors import NoFile
from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorGridFSBucket

from vehicle_valuation_service.app.config import settings
from vehicle_valuation_service.app.models import FileUpload
from vehicle_valuation_service.app.service.interfaces.blob_store import AbstractBlobStore
from vehicle_valuation_service.infrastructure.database.connection import get_db

logger = logging.getLogger(__name__)


class GridFSBlobStore(AbstractBlobStore):
    def __init__(self, db: AsyncIOMotorDatabase, bucket_name: str, public_base_url: str):
        self.bucket = AsyncIOMotorGridFSBucket(db, bucket_name=bucket_name)
        self.public_base_url = public_base_url.rstrip("/")

    def url_for(self, file_id: str) -> str:
        return f"{self.public_base_url}/api/v1/files/{file_id}"

    async def upload(self, data: bytes, content_type: str, path_hint: str) -> str:
        file_id = await self.bucket.upload_from_stream(
            path_hint,
            data,
            metadata={"contentType": content_type},
        )
        logger.info(f"Stored blob {path_hint} as GridFS file {file_id} ({len(data)} bytes).")
        return self.url_for(str(file_id))

    async def download(self, file_id: str) -> Optional[FileUpload]:
        try:
            grid_out = await self.bucket.open_download_stream(ObjectId(file_id))
        except (InvalidId, NoFile):
            logger.info(f"Blob {file_id} not found in GridFS.")
            return None
        data = await grid_out.read()
        metadata = grid_out.metadata or {}
        # Stored names are path hints; only the last segment is meaningful to a client.
        filename = grid_out.filename.rsplit("/", 1)[-1]
        return FileUpload(
            filename=filename,
            content_type=metadata.get("contentType", "application/octet-stream"),
            data=data,
        )

# DI provider for GridFSBlobStore
def get_blob_store(db: AsyncIOMotorDatabase = Depends(get_db)) -> AbstractBlobStore:
    return GridFSBlobStore(db, bucket_name=settings.BLOB_BUCKET_NAME, public_base_url=settings.PUBLIC_BASE_URL)
