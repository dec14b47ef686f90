# MongoDB persistence for valuation case documents
import logging
import datetime
from typing import List, Optional, Dict, Any

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from vehicle_valuation_service.app.config import settings
from vehicle_valuation_service.app.models import CaseKey, ValuationDocumentDB
from vehicle_valuation_service.app.service.exceptions import ConcurrencyConflictError
from vehicle_valuation_service.app.service.interfaces.valuation_repository import AbstractValuationRepository
from vehicle_valuation_service.infrastructure.database.connection import get_db

logger = logging.getLogger(__name__)


class MongoValuationRepository(AbstractValuationRepository):
    """
    Stores one document per case in a single collection, addressed by
    (id, partition_key). Every save replaces the whole document.

    With optimistic_concurrency on, the replace is conditional on the version
    the document was loaded with, and a first insert relies on the unique
    (id, partition_key) index to detect a concurrent creation.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str, optimistic_concurrency: bool = True):
        self.collection = db[collection_name]
        self.optimistic_concurrency = optimistic_concurrency

    @staticmethod
    def _key_filter(valuation_id: str, partition_key: str) -> Dict[str, Any]:
        return {"id": valuation_id, "partition_key": partition_key}

    async def load(self, key: CaseKey) -> Optional[ValuationDocumentDB]:
        doc = await self.collection.find_one(self._key_filter(key.valuation_id, key.partition_key), {"_id": 0})
        return ValuationDocumentDB(**doc) if doc else None

    async def save(self, document: ValuationDocumentDB) -> ValuationDocumentDB:
        expected_version = document.version
        doc_dict = document.model_dump()
        doc_dict["version"] = expected_version + 1
        doc_dict["updated_at"] = datetime.datetime.now(datetime.UTC)
        saved = ValuationDocumentDB(**doc_dict)
        key_filter = self._key_filter(document.id, document.partition_key)

        if not self.optimistic_concurrency:
            await self.collection.replace_one(key_filter, doc_dict, upsert=True)
            logger.info(f"Valuation {document.id} upserted (last write wins), version {saved.version}.")
            return saved

        if expected_version == 0:
            try:
                await self.collection.insert_one(doc_dict)
            except DuplicateKeyError:
                actual_version = await self._current_version(key_filter)
                logger.warning(f"Valuation {document.id} was created concurrently in partition {document.partition_key}.")
                raise ConcurrencyConflictError(document.id, expected_version, actual_version)
            logger.info(f"Valuation {document.id} created in partition {document.partition_key}.")
            return saved

        result = await self.collection.replace_one({**key_filter, "version": expected_version}, doc_dict)
        if result.matched_count == 0:
            actual_version = await self._current_version(key_filter)
            logger.warning(
                f"Version check failed saving valuation {document.id}: "
                f"expected {expected_version}, found {actual_version}."
            )
            raise ConcurrencyConflictError(document.id, expected_version, actual_version)

        logger.info(f"Valuation {document.id} saved, version {saved.version}.")
        return saved

    async def list_by_status(self, status: str) -> List[ValuationDocumentDB]:
        cursor = self.collection.find({"status": status}, {"_id": 0})
        docs = await cursor.to_list(length=None)
        return [ValuationDocumentDB(**doc) for doc in docs]

    async def _current_version(self, key_filter: Dict[str, Any]) -> Optional[int]:
        current = await self.collection.find_one(key_filter, {"_id": 0, "version": 1})
        return current.get("version") if current else None

# DI provider for MongoValuationRepository
def get_valuation_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> AbstractValuationRepository:
    return MongoValuationRepository(
        db,
        collection_name=settings.VALUATIONS_COLLECTION,
        optimistic_concurrency=settings.OPTIMISTIC_CONCURRENCY,
    )
