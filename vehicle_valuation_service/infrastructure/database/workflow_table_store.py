# Operations for the workflow table (denormalized workflow position per case)
import logging
import datetime
from typing import List, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from vehicle_valuation_service.app.config import settings
from vehicle_valuation_service.app.models import WorkflowTableRecordDB, WorkflowTableUpdate, StepStatus
from vehicle_valuation_service.infrastructure.database.connection import get_db

logger = logging.getLogger(__name__)


def _partition_key(vehicle_number: str, applicant_contact: str) -> str:
    return f"{vehicle_number}|{applicant_contact}"


class WorkflowTableStore:
    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str):
        self.collection = db[collection_name]

    async def upsert(self, valuation_id: str, update: WorkflowTableUpdate) -> WorkflowTableRecordDB:
        """Creates or replaces the record for a case, keeping the created_at of an existing record."""
        partition_key = _partition_key(update.vehicle_number, update.applicant_contact)
        key_filter = {"partition_key": partition_key, "valuation_id": valuation_id}
        now = datetime.datetime.now(datetime.UTC)

        existing = await self.collection.find_one(key_filter, {"_id": 0, "created_at": 1})
        created_at = existing["created_at"] if existing and existing.get("created_at") else now

        record = WorkflowTableRecordDB(
            valuation_id=valuation_id,
            partition_key=partition_key,
            created_at=created_at,
            updated_at=now,
            **update.model_dump(),
        )
        await self.collection.replace_one(key_filter, record.model_dump(), upsert=True)
        logger.info(
            f"Workflow table record upserted for valuation {valuation_id}: "
            f"{record.workflow} (step {record.workflow_step_order}) {record.status}"
        )
        return record

    async def get(self, valuation_id: str, vehicle_number: str, applicant_contact: str) -> Optional[WorkflowTableRecordDB]:
        doc = await self.collection.find_one(
            {"partition_key": _partition_key(vehicle_number, applicant_contact), "valuation_id": valuation_id},
            {"_id": 0},
        )
        return WorkflowTableRecordDB(**doc) if doc else None

    async def delete(self, valuation_id: str, vehicle_number: str, applicant_contact: str) -> bool:
        result = await self.collection.delete_one(
            {"partition_key": _partition_key(vehicle_number, applicant_contact), "valuation_id": valuation_id}
        )
        if result.deleted_count == 0:
            logger.info(f"No workflow table record to delete for valuation {valuation_id}.")
            return False
        logger.info(f"Workflow table record deleted for valuation {valuation_id}.")
        return True

    async def list_in_progress(self) -> List[WorkflowTableRecordDB]:
        cursor = self.collection.find({"status": StepStatus.IN_PROGRESS.value}, {"_id": 0}).sort("created_at", 1)
        docs = await cursor.to_list(length=None)
        return [WorkflowTableRecordDB(**doc) for doc in docs]

# DI provider for WorkflowTableStore
def get_workflow_table_store(db: AsyncIOMotorDatabase = Depends(get_db)) -> WorkflowTableStore:
    return WorkflowTableStore(db, collection_name=settings.WORKFLOW_TABLE_COLLECTION)
